"""
jmcompta.draft
==============

The in-progress, unsaved dossier a client is editing.

A draft is never persisted on its own: it accumulates uploads for the
selected period and is merged into the :class:`~jmcompta.registry.ClientRegistry`
on submit, after which it is reset to its defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from .models import BusinessType, ClientKey, Document, LookupResult, check_month, make_key
from .settings import settings


def _default_business_type() -> BusinessType:
    return BusinessType(settings.default_business_type)


def _this_month() -> int:
    return date.today().month


def _this_year() -> int:
    return date.today().year


@dataclass
class SessionDraft:
    """
    Dossier under active editing.

    Parameters
    ----------
    first_name, last_name : str
        Names as currently typed (may still be empty).
    business_type : BusinessType
        Defaults to the configured default (taxi).
    documents : list[Document]
        Documents added so far, in upload order.
    selected_month, selected_year : int
        Period new uploads are filed under; defaults to the current month.
    """
    first_name: str = ""
    last_name: str = ""
    business_type: BusinessType = field(default_factory=_default_business_type)
    documents: List[Document] = field(default_factory=list)
    selected_month: int = field(default_factory=_this_month)
    selected_year: int = field(default_factory=_this_year)

    @classmethod
    def new(cls, today: Optional[date] = None) -> "SessionDraft":
        """Fresh draft whose period is the month of *today* (default: now)."""
        today = today or date.today()
        return cls(selected_month=today.month, selected_year=today.year)

    def key(self) -> ClientKey:
        return make_key(self.first_name, self.last_name)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def select_period(self, month: int, year: int) -> None:
        self.selected_month = check_month(month)
        self.selected_year = year

    def set_business_type(self, business_type: BusinessType) -> None:
        """
        Switch business type.  Documents already added are kept even if
        their type is not in the new set: validity is checked at upload
        time only.
        """
        self.business_type = BusinessType(business_type)

    def resume_from(self, found: LookupResult) -> None:
        """Copy a stored dossier back into the draft, leaving the names alone."""
        self.business_type = found.business_type
        self.documents = list(found.documents)

    def reset(self, today: Optional[date] = None) -> None:
        """Restore every field to the defaults of a fresh draft."""
        fresh = SessionDraft.new(today)
        self.first_name = fresh.first_name
        self.last_name = fresh.last_name
        self.business_type = fresh.business_type
        self.documents = fresh.documents
        self.selected_month = fresh.selected_month
        self.selected_year = fresh.selected_year
