"""
jmcompta.service
================

:class:`DossierService` owns the two registries, the current draft, the
blob store and the persistence adapter.  It is the only place that writes
state through to the adapter: every successful mutation of the client
registry or the year statuses is followed by a full ``save`` before the
call returns.

A failed save never rolls back the in-memory change; the failure is
logged and handed back to the caller as a warning on the
:class:`OperationResult`.  A failed load at start-up leaves the service
with empty registries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePath
from typing import Generic, List, Optional, Set, Tuple, TypeVar

from . import catalog, reports
from .auth import AdminToken, DeleteConfirmation
from .blobs import BlobStore, FileBlobStore, MemoryBlobStore
from .draft import SessionDraft
from .errors import AdminAuthError, ConfirmationRequired, PersistenceError
from .models import BusinessType, ClientKey, ClientRecord, Document, YearStatus, make_key
from .persistence import MemoryPersistence, PersistenceAdapter
from .registry import ClientRegistry, documents_for_period
from .years import YearStatusRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class OperationResult(Generic[T]):
    """Return value of a persisted mutation: the result plus non-fatal warnings."""
    value: T
    warnings: List[str] = field(default_factory=list)

    @property
    def durable(self) -> bool:
        return not self.warnings


def _require_admin(token) -> None:
    if not isinstance(token, AdminToken):
        raise AdminAuthError("admin authentication required")


def _file_name(name: Optional[str], fallback: str) -> str:
    """Last path component of an uploaded file name; *fallback* if nothing usable is left."""
    base = PurePath((name or "").replace("\\", "/")).name
    return fallback if base in ("", ".", "..") else base


def _unique_name(name: str, taken: Set[str]) -> str:
    """``facture.pdf`` → ``facture (2).pdf`` when the name is already taken."""
    candidate, n = name, 1
    path = PurePath(name)
    while candidate in taken:
        n += 1
        candidate = f"{path.stem} ({n}){path.suffix}"
    taken.add(candidate)
    return candidate


class DossierService:
    """
    Client and admin operations over a single-writer session.

    Parameters
    ----------
    persistence : PersistenceAdapter
        Where the registries are loaded from and written back to.
    blobs : BlobStore
        Where document bytes are stored.
    """

    def __init__(self, persistence: PersistenceAdapter, blobs: BlobStore) -> None:
        self._persistence = persistence
        self._blobs = blobs
        self.load_warning: Optional[str] = None

        try:
            clients, statuses = persistence.load()
        except PersistenceError as e:
            logger.warning("Starting with empty registries, load failed: %s", e)
            self.load_warning = str(e)
            clients, statuses = [], []

        self.years = YearStatusRegistry(statuses)
        self.registry = ClientRegistry(self.years, clients)
        self.draft = SessionDraft.new()

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    @classmethod
    def in_memory(cls) -> "DossierService":
        """Service with nothing durable behind it (tests, demos)."""
        return cls(MemoryPersistence(), MemoryBlobStore())

    @classmethod
    def from_settings(cls) -> "DossierService":
        """Service backed by the SQLite database and blob directory from settings."""
        from .db import SqlPersistence
        from .settings import BLOB_DIR

        return cls(SqlPersistence(), FileBlobStore(BLOB_DIR))

    # ------------------------------------------------------------------
    # Write-through
    # ------------------------------------------------------------------
    def _commit(self) -> List[str]:
        try:
            self._persistence.save(self.registry.records(), self.years.statuses())
        except PersistenceError as e:
            logger.warning("Change kept in memory but not saved: %s", e)
            return [str(e)]
        return []

    # ------------------------------------------------------------------
    # Client surface
    # ------------------------------------------------------------------
    def lookup_into_draft(self, first_name: str, last_name: str) -> bool:
        """
        Set the draft's names and, for a returning client, pull the stored
        business type and documents into the draft.  Returns True if a
        dossier was found.
        """
        first_name, last_name = make_key(first_name, last_name)
        self.draft.first_name, self.draft.last_name = first_name, last_name
        if not first_name or not last_name:
            return False
        found = self.registry.lookup(first_name, last_name)
        if found is None:
            return False
        self.draft.resume_from(found)
        logger.info("Resumed dossier of %s %s (%d documents)", first_name, last_name, len(found.documents))
        return True

    def select_period(self, month: int, year: int) -> None:
        self.draft.select_period(month, year)

    def set_business_type(self, business_type: BusinessType) -> None:
        self.draft.set_business_type(business_type)

    def available_types(self):
        """Catalog for the draft's current business type."""
        return catalog.available_types(self.draft.business_type)

    def upload(
        self,
        type_key: str,
        content: bytes,
        filename: str,
        now: Optional[datetime] = None,
    ) -> Document:
        """
        Add a document to the draft for its selected period.

        The upload is validated before the bytes are written to the blob
        store, so a rejected upload leaves nothing behind.  Only the last
        component of *filename* is kept.
        """
        month, year = self.registry.check_upload(self.draft, type_key)
        handle = self._blobs.store(content)
        return self.registry.file_document(
            self.draft, type_key, handle, _file_name(filename, type_key), month, year, now
        )

    def uploaded_for_period(self, type_key: Optional[str] = None) -> List[Document]:
        """Draft documents already filed for the selected period, optionally of one type."""
        docs = documents_for_period(self.draft.documents, self.draft.selected_month, self.draft.selected_year)
        if type_key is not None:
            docs = [d for d in docs if d.type_key == type_key]
        return docs

    def submit(self) -> OperationResult[ClientRecord]:
        """Store the draft, reset it, and write the registries through."""
        rec = self.registry.submit(self.draft)
        self.draft.reset()
        return OperationResult(rec, self._commit())

    # ------------------------------------------------------------------
    # Admin surface
    # ------------------------------------------------------------------
    def clients(self, token: AdminToken) -> List[ClientRecord]:
        _require_admin(token)
        return self.registry.records()

    def client_report(self, token: AdminToken, key: ClientKey) -> reports.ClientReport:
        _require_admin(token)
        return reports.client_report(self.registry.get(key))

    def year_overview(self, token: AdminToken) -> List[reports.YearSummary]:
        _require_admin(token)
        return reports.year_overview(self.years)

    def close_year(self, token: AdminToken, year: int) -> OperationResult[YearStatus]:
        _require_admin(token)
        status = self.years.close(year)
        logger.info("Closed fiscal year %s", year)
        return OperationResult(status, self._commit())

    def reopen_year(self, token: AdminToken, year: int) -> OperationResult[Optional[YearStatus]]:
        _require_admin(token)
        status = self.years.reopen(year)
        if status is None:
            # never closed: nothing changed, nothing to save
            return OperationResult(None)
        logger.info("Reopened fiscal year %s", year)
        return OperationResult(status, self._commit())

    def delete_client(
        self,
        token: AdminToken,
        key: ClientKey,
        confirmation: Optional[DeleteConfirmation] = None,
    ) -> OperationResult[ClientRecord]:
        """Delete a dossier; requires a confirmation bound to the same key."""
        _require_admin(token)
        if confirmation is None or not confirmation.covers(key):
            raise ConfirmationRequired(f"deleting {' '.join(make_key(*key))} must be confirmed")
        rec = self.registry.delete(key)
        return OperationResult(rec, self._commit())

    def export_all(self, token: AdminToken, key: ClientKey) -> List[Tuple[str, bytes]]:
        """
        Every document of a client as ``(filename, bytes)`` in upload order.

        File names are reduced to their last path component and repeated
        names get a ``(2)``, ``(3)``... suffix.
        """
        _require_admin(token)
        rec = self.registry.get(key)
        taken: Set[str] = set()
        files = []
        for doc in rec.documents:
            try:
                content = self._blobs.fetch(doc.blob_handle)
            except KeyError:
                raise PersistenceError(f"content of {doc.display_name} ({doc.blob_handle}) is missing") from None
            files.append((_unique_name(_file_name(doc.display_name, doc.type_key), taken), content))
        return files
