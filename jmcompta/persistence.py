"""
jmcompta.persistence
====================

The contract between the core and whatever durably stores its state.

An adapter stores and returns the two top-level collections:

* ``clients``       – client records, in submission order
* ``year_statuses`` – one entry per fiscal year

Every call to ``save`` receives the *complete* state; adapters rewrite
rather than patch.  Failures must surface as
:class:`~jmcompta.errors.PersistenceError`.
"""

from __future__ import annotations

import copy
from typing import List, Protocol, Sequence, Tuple

from .models import ClientRecord, YearStatus

State = Tuple[List[ClientRecord], List[YearStatus]]


class PersistenceAdapter(Protocol):
    """Interface expected by :class:`jmcompta.service.DossierService`."""

    def load(self) -> State: ...

    def save(self, clients: Sequence[ClientRecord], year_statuses: Sequence[YearStatus]) -> None: ...


class MemoryPersistence:
    """
    Keeps a detached copy of the last saved state in memory.

    Drop-in replacement for :class:`jmcompta.db.SqlPersistence` in tests.
    """

    def __init__(self) -> None:
        self._clients: List[ClientRecord] = []
        self._year_statuses: List[YearStatus] = []
        self.saves = 0

    def load(self) -> State:
        return copy.deepcopy(self._clients), copy.deepcopy(self._year_statuses)

    def save(self, clients: Sequence[ClientRecord], year_statuses: Sequence[YearStatus]) -> None:
        self._clients = copy.deepcopy(list(clients))
        self._year_statuses = copy.deepcopy(list(year_statuses))
        self.saves += 1
