"""
jmcompta.errors
===============

Exception hierarchy shared by the registries, the service layer and the
outer surfaces (CLI, HTTP).  Every error is raised synchronously by the
operation that detected it; there is no retry policy.
"""

from __future__ import annotations


class JmComptaError(Exception):
    """Base class for every domain error raised by :pymod:`jmcompta`."""


class ValidationError(JmComptaError, ValueError):
    """Input rejected before any mutation (empty name, bad month, ...)."""


class UnknownDocumentType(ValidationError):
    """Document-type key not allowed for the client's business type."""

    def __init__(self, type_key: str, business_type) -> None:
        super().__init__(f"document type {type_key!r} is not allowed for {business_type}")
        self.type_key = type_key
        self.business_type = business_type


class YearClosedError(JmComptaError):
    """Document creation attempted against a closed fiscal year."""

    def __init__(self, year: int) -> None:
        super().__init__(f"fiscal year {year} is closed, uploads are not accepted")
        self.year = year


class ConfirmationRequired(JmComptaError):
    """A destructive operation was called without an explicit confirmation."""


class ClientNotFound(JmComptaError, KeyError):
    """No client record is stored under the given name pair."""

    def __init__(self, key) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        first, last = self.key
        return f"no client registered as {first} {last}"


class AdminAuthError(JmComptaError):
    """Wrong shared admin secret."""


class PersistenceError(JmComptaError):
    """The external store failed to load or save state, or a blob could not be read/written."""
