"""
jmcompta.years
==============

Open / closed status of each fiscal year.

A year is either *open* or *closed*; both transitions are always legal
and there is no terminal state.  A year without a stored entry is open.
The only thing a closed year prevents is the creation of new documents
filed under it (see :pyfunc:`jmcompta.registry.ClientRegistry.add_document`).
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional

from .models import YearStatus
from .settings import settings


class YearStatusRegistry:
    """
    Dictionary-backed registry of :class:`~jmcompta.models.YearStatus`.

    Example
    -------
    >>> yr = YearStatusRegistry()
    >>> _ = yr.close(2024)
    >>> yr.is_closed(2024), yr.is_closed(2025)
    (True, False)
    >>> _ = yr.reopen(2024)
    >>> yr.is_closed(2024)
    False
    """

    def __init__(self, statuses: Iterable[YearStatus] = ()) -> None:
        self._statuses: Dict[int, YearStatus] = {}
        for status in statuses:
            self._statuses[status.year] = status

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def is_closed(self, year: int) -> bool:
        """True iff a stored entry for *year* is closed; unseen years are open."""
        status = self._statuses.get(year)
        return bool(status and status.is_closed)

    def get(self, year: int) -> Optional[YearStatus]:
        return self._statuses.get(year)

    def statuses(self) -> List[YearStatus]:
        """Stored entries, in the order they were first created."""
        return list(self._statuses.values())

    def selectable_years(self) -> List[int]:
        """Years offered by the period selector and the admin overview."""
        return list(range(settings.first_year, settings.last_year + 1))

    def overview(self) -> List[YearStatus]:
        """
        One status per selectable year, stored entries first-class and
        default (open) entries filled in for years never touched.
        """
        return [self._statuses.get(y) or YearStatus(y) for y in self.selectable_years()]

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def close(self, year: int, now: Optional[datetime] = None) -> YearStatus:
        """
        Close *year*, stamping ``closed_date``.

        Closing an already closed year only refreshes the timestamp.
        """
        now = now or datetime.now()
        status = self._statuses.get(year)
        if status is None:
            status = self._statuses[year] = YearStatus(year)
        status.is_closed = True
        status.closed_date = now
        return status

    def reopen(self, year: int) -> Optional[YearStatus]:
        """
        Reopen *year* and clear its ``closed_date``.

        No entry is created for a year that was never closed, since absence
        already means open; ``None`` is returned in that case.
        """
        status = self._statuses.get(year)
        if status is None:
            return None
        status.is_closed = False
        status.closed_date = None
        return status

    # ------------------------------------------------------------------
    # Dunder helpers for convenience
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[YearStatus]:
        return iter(self._statuses.values())

    def __len__(self) -> int:
        return len(self._statuses)
