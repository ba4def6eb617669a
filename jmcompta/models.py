"""
jmcompta.models
===============

Dataclasses and enums representing a client dossier, its documents and
the status of a fiscal year.  These objects are intentionally lightweight;
they carry **no** external-library dependencies so that importing
`jmcompta` stays fast.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from .errors import ValidationError

#: Identity of a client: the trimmed ``(first_name, last_name)`` pair.
ClientKey = Tuple[str, str]


class BusinessType(str, Enum):
    """Kind of transport activity; selects the type-specific document set."""
    TAXI = "taxi"
    VTC = "vtc"

    def __str__(self) -> str:        # nicer REPL display
        return self.value


def make_key(first_name: str, last_name: str) -> ClientKey:
    """Return the identity key for a name pair (both parts trimmed, case kept)."""
    return (first_name or "").strip(), (last_name or "").strip()


def check_month(month: int) -> int:
    """Raise :class:`ValidationError` unless ``1 <= month <= 12``."""
    if not 1 <= month <= 12:
        raise ValidationError(f"month must be between 1 and 12, got {month}")
    return month


@dataclass(frozen=True)
class Document:
    """
    One uploaded accounting document.

    Parameters
    ----------
    id : str
        Unique identifier generated at creation (uuid4 hex).
    type_key : str
        Catalog key, e.g. ``"facture_achat_vehicule"``.
    display_name : str
        Original file name, used as the export file name.
    blob_handle : str
        Opaque handle returned by the blob store; the bytes never live here.
    uploaded_at : datetime.datetime
        Wall-clock time of the upload.
    month, year : int
        Period the document is filed under, independent of ``uploaded_at``.
    """
    id: str
    type_key: str
    display_name: str
    blob_handle: str
    uploaded_at: datetime
    month: int
    year: int

    def __post_init__(self):
        check_month(self.month)

    @property
    def period(self) -> Tuple[int, int]:
        return self.year, self.month


@dataclass
class ClientRecord:
    """
    Submitted dossier of one client.

    Parameters
    ----------
    first_name, last_name : str
        Identity of the client (see :func:`make_key`).
    business_type : BusinessType
        Taxi or VTC.
    documents : list[Document]
        Documents in upload order.
    """
    first_name: str
    last_name: str
    business_type: BusinessType = BusinessType.TAXI
    documents: List[Document] = field(default_factory=list)

    @property
    def key(self) -> ClientKey:
        return make_key(self.first_name, self.last_name)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass
class YearStatus:
    """Open / closed state of one fiscal year.  A missing entry means open."""
    year: int
    is_closed: bool = False
    closed_date: Optional[datetime] = None


@dataclass(frozen=True)
class LookupResult:
    """What a returning client gets back: enough to resume editing a draft."""
    business_type: BusinessType
    documents: Tuple[Document, ...]
