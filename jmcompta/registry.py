"""
jmcompta.registry
=================

An in-memory registry that stores :class:`jmcompta.models.ClientRecord`
objects keyed by their trimmed ``(first_name, last_name)`` pair, plus the
period filtering and grouping helpers used by the upload and admin views.

This module is intentionally simple (only the standard library) so that
it can be unit-tested without a database.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from . import catalog
from .draft import SessionDraft
from .errors import ClientNotFound, UnknownDocumentType, ValidationError, YearClosedError
from .models import ClientKey, ClientRecord, Document, LookupResult, check_month, make_key
from .years import YearStatusRegistry

logger = logging.getLogger(__name__)

DocumentTarget = Union[SessionDraft, ClientRecord]


class ClientRegistry:
    """
    Dictionary-backed registry of client dossiers.

    Iteration yields records in submission order; re-submitting under an
    existing key replaces the record but keeps its position.

    Example
    -------
    >>> reg = ClientRegistry(YearStatusRegistry())
    >>> draft = SessionDraft(first_name=" Jean ", last_name="Dupont")
    >>> reg.submit(draft).key
    ('Jean', 'Dupont')
    >>> reg.lookup("Jean", "Dupont").business_type
    <BusinessType.TAXI: 'taxi'>
    """

    def __init__(self, years: YearStatusRegistry, records: Iterable[ClientRecord] = ()) -> None:
        self._years = years
        self._records: Dict[ClientKey, ClientRecord] = {}
        for rec in records:
            self._records[rec.key] = rec

    # ------------------------------------------------------------------
    # Identity resolution
    # ------------------------------------------------------------------
    def lookup(self, first_name: str, last_name: str) -> Optional[LookupResult]:
        """
        Return the stored business type and documents for a name pair, or
        ``None``.  Matching is exact and case-sensitive after trimming.
        """
        rec = self._records.get(make_key(first_name, last_name))
        if rec is None:
            return None
        return LookupResult(business_type=rec.business_type, documents=tuple(rec.documents))

    def get(self, key: ClientKey) -> ClientRecord:
        """Retrieve by key (raise :class:`ClientNotFound` if not present)."""
        try:
            return self._records[make_key(*key)]
        except KeyError:
            raise ClientNotFound(make_key(*key)) from None

    def records(self) -> List[ClientRecord]:
        return list(self._records.values())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def submit(self, draft: SessionDraft) -> ClientRecord:
        """
        Store the draft as the client's dossier.

        An existing record under the same key is fully replaced (business
        type and documents are the draft's, not a union).  The draft itself
        is left untouched; resetting it is the caller's job.
        """
        first_name, last_name = draft.key()
        if not first_name or not last_name:
            raise ValidationError("first name and last name are required")

        rec = ClientRecord(
            first_name=first_name,
            last_name=last_name,
            business_type=draft.business_type,
            documents=list(draft.documents),
        )
        replaced = rec.key in self._records
        self._records[rec.key] = rec
        logger.info(
            "%s dossier of %s (%s, %d documents)",
            "Replaced" if replaced else "Registered", rec.full_name,
            rec.business_type, len(rec.documents),
        )
        return rec

    def delete(self, key: ClientKey) -> ClientRecord:
        """
        Remove a record and, with it, all of its documents.

        Runs unconditionally: the confirmation gate lives in the caller.
        """
        rec = self._records.pop(make_key(*key), None)
        if rec is None:
            raise ClientNotFound(make_key(*key))
        logger.info("Deleted dossier of %s (%d documents)", rec.full_name, len(rec.documents))
        return rec

    def check_upload(
        self,
        target: DocumentTarget,
        type_key: str,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Tuple[int, int]:
        """
        Validate an upload without creating anything and return the
        resolved ``(month, year)``.  Raises exactly what
        :meth:`add_document` would.
        """
        if month is None:
            month = getattr(target, "selected_month", None)
        if year is None:
            year = getattr(target, "selected_year", None)
        if month is None or year is None:
            raise ValidationError("a period (month, year) is required")

        if self._years.is_closed(year):
            logger.warning("Rejected upload for %02d/%s: year is closed", month, year)
            raise YearClosedError(year)
        if not catalog.is_valid_type(target.business_type, type_key):
            raise UnknownDocumentType(type_key, target.business_type)
        return check_month(month), year

    def add_document(
        self,
        target: DocumentTarget,
        type_key: str,
        blob_handle: str,
        display_name: str,
        month: Optional[int] = None,
        year: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Document:
        """
        Create a document and append it to *target* (a draft or a record).

        For a draft, *month* / *year* default to its selected period.

        Raises
        ------
        YearClosedError
            *year* is closed at call time.
        UnknownDocumentType
            *type_key* is not in the catalog for the target's business type.
        ValidationError
            Missing or out-of-range period.
        """
        month, year = self.check_upload(target, type_key, month, year)
        return self.file_document(target, type_key, blob_handle, display_name, month, year, now)

    @staticmethod
    def file_document(
        target: DocumentTarget,
        type_key: str,
        blob_handle: str,
        display_name: str,
        month: int,
        year: int,
        now: Optional[datetime] = None,
    ) -> Document:
        """Append a document for a period already accepted by :meth:`check_upload`."""
        doc = Document(
            id=uuid.uuid4().hex,
            type_key=type_key,
            display_name=display_name,
            blob_handle=blob_handle,
            uploaded_at=now or datetime.now(),
            month=month,
            year=year,
        )
        target.documents.append(doc)
        return doc

    # ------------------------------------------------------------------
    # Dunder helpers for convenience
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[ClientRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key) -> bool:
        return make_key(*key) in self._records


# ---------------------------------------------------------------------
# Period filtering and grouping
# ---------------------------------------------------------------------
def documents_for_period(documents: Iterable[Document], month: int, year: int) -> List[Document]:
    """Documents filed under exactly (*month*, *year*), in upload order."""
    return [d for d in documents if d.month == month and d.year == year]


def group_by_year_then_month(documents: Iterable[Document]) -> Dict[int, Dict[int, List[Document]]]:
    """
    Group documents as ``{year: {month: [docs]}}``.

    Years and months appear in order of first occurrence; documents keep
    their upload order inside each month.

    Examples
    --------
    >>> grouped = group_by_year_then_month(docs)       # doctest: +SKIP
    >>> {y: {m: len(v) for m, v in ms.items()} for y, ms in grouped.items()}  # doctest: +SKIP
    {2024: {3: 2, 5: 1}, 2025: {1: 1}}
    """
    grouped: Dict[int, Dict[int, List[Document]]] = {}
    for doc in documents:
        grouped.setdefault(doc.year, {}).setdefault(doc.month, []).append(doc)
    return grouped
