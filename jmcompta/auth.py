"""
jmcompta.auth
=============

Capability values handed to the admin surface by the outer layers.

* :class:`AdminToken` – proof that the caller gave the shared admin secret
* :class:`DeleteConfirmation` – explicit "yes, delete this dossier" signal

The core never prompts; the CLI / HTTP layer asks the user and passes the
resulting value in.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Optional

from .errors import AdminAuthError
from .models import ClientKey, make_key
from .settings import settings


@dataclass(frozen=True)
class AdminToken:
    """Issued by :func:`authenticate_admin`; required by admin operations."""


@dataclass(frozen=True)
class DeleteConfirmation:
    """Confirmation bound to one client key."""
    key: ClientKey

    @classmethod
    def for_client(cls, first_name: str, last_name: str) -> "DeleteConfirmation":
        return cls(make_key(first_name, last_name))

    def covers(self, key: ClientKey) -> bool:
        return self.key == make_key(*key)


def authenticate_admin(password: Optional[str], expected: Optional[str] = None) -> AdminToken:
    """
    Compare *password* with the shared secret and return an :class:`AdminToken`.

    Raises :class:`AdminAuthError` on mismatch (including a missing password).
    """
    expected = settings.admin_password if expected is None else expected
    if password is None or not hmac.compare_digest(password.encode(), expected.encode()):
        raise AdminAuthError("invalid admin password")
    return AdminToken()
