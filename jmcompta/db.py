"""
jmcompta.db
===========

SQLite persistence layer for JM Comptabilité.

This module exposes:

* ``get_engine()`` – the default SQLModel engine pointing at *jmcompta.db*
* ``SessionLocal`` – a session factory used via ``with SessionLocal() as s:``
* ``create_all()`` – helper to create tables at first run
* ``SqlPersistence`` – the :class:`~jmcompta.persistence.PersistenceAdapter`
  used by the service in production

Only metadata is stored here; document bytes live in the blob store and
rows carry the blob handle.
"""

from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from sqlalchemy import UniqueConstraint
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Field, Session, SQLModel, create_engine, select

from .errors import PersistenceError
from .models import BusinessType, ClientRecord, Document, YearStatus
from .persistence import State
from .settings import DB_ECHO, DB_URL

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
def make_engine(url: str = DB_URL, echo: bool = DB_ECHO) -> Engine:
    """Create an engine, making sure the directory of a SQLite file exists."""
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, echo=echo)


@lru_cache
def get_engine() -> Engine:
    """Default engine built from :pydata:`jmcompta.settings.DB_URL`."""
    return make_engine()


# ---------------------------------------------------------------------------
# Session factory
# ---------------------------------------------------------------------------
def SessionLocal(engine: Optional[Engine] = None) -> Session:  # noqa: N802
    """Return a new Session bound to *engine* (default: the global one)."""
    return Session(engine or get_engine())


# ---------------------------------------------------------------------------
# ORM models mirroring jmcompta.models
# ---------------------------------------------------------------------------
class ClientRow(SQLModel, table=True):
    """
    SQLite-backed representation of a :class:`jmcompta.models.ClientRecord`.

    *position* preserves submission order; the name pair is unique.
    """

    __tablename__ = "clients"
    __table_args__ = (UniqueConstraint("first_name", "last_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    position: int = Field(index=True)
    first_name: str
    last_name: str
    business_type: str = BusinessType.TAXI.value

    @classmethod
    def from_record(cls, rec: ClientRecord, position: int) -> "ClientRow":
        return cls(
            position=position,
            first_name=rec.first_name,
            last_name=rec.last_name,
            business_type=BusinessType(rec.business_type).value,
        )

    def to_record(self, documents: List[Document]) -> ClientRecord:
        return ClientRecord(
            first_name=self.first_name,
            last_name=self.last_name,
            business_type=BusinessType(self.business_type),
            documents=documents,
        )


class DocumentRow(SQLModel, table=True):
    """Metadata of one :class:`jmcompta.models.Document` owned by a client row."""

    __tablename__ = "documents"

    # a resumed draft may carry the same document into two dossiers
    row_id: Optional[int] = Field(default=None, primary_key=True)
    id: str = Field(index=True)
    client_id: int = Field(foreign_key="clients.id", index=True)
    position: int
    type_key: str
    display_name: str
    blob_handle: str
    uploaded_at: datetime
    month: int
    year: int

    @classmethod
    def from_document(cls, doc: Document, client_id: int, position: int) -> "DocumentRow":
        return cls(
            id=doc.id,
            client_id=client_id,
            position=position,
            type_key=doc.type_key,
            display_name=doc.display_name,
            blob_handle=doc.blob_handle,
            uploaded_at=doc.uploaded_at,
            month=doc.month,
            year=doc.year,
        )

    def to_document(self) -> Document:
        return Document(
            id=self.id,
            type_key=self.type_key,
            display_name=self.display_name,
            blob_handle=self.blob_handle,
            uploaded_at=self.uploaded_at,
            month=self.month,
            year=self.year,
        )


class YearStatusRow(SQLModel, table=True):
    __tablename__ = "year_statuses"

    year: int = Field(primary_key=True)
    is_closed: bool = False
    closed_date: Optional[datetime] = None

    @classmethod
    def from_status(cls, status: YearStatus) -> "YearStatusRow":
        return cls(year=status.year, is_closed=status.is_closed, closed_date=status.closed_date)

    def to_status(self) -> YearStatus:
        return YearStatus(year=self.year, is_closed=self.is_closed, closed_date=self.closed_date)


# ---------------------------------------------------------------------------
# Utility: create tables
# ---------------------------------------------------------------------------
def create_all(engine: Optional[Engine] = None) -> None:
    """Create all tables (safe if they already exist)."""
    SQLModel.metadata.create_all(engine or get_engine())


# ---------------------------------------------------------------------------
# Persistence adapter
# ---------------------------------------------------------------------------
class SqlPersistence:
    """
    Full-state adapter over the three tables.

    ``save`` rewrites every row inside a single transaction, so a failed
    save leaves the previously committed state intact.  Tables are created
    on first use, so an unreadable database surfaces as a
    :class:`PersistenceError` from ``load`` / ``save`` rather than from the
    constructor.
    """

    def __init__(self, engine: Optional[Engine] = None) -> None:
        self._engine = engine or get_engine()
        self._schema_ready = False

    def _ensure_schema(self) -> None:
        if not self._schema_ready:
            create_all(self._engine)
            self._schema_ready = True

    def load(self) -> State:
        try:
            self._ensure_schema()
            with SessionLocal(self._engine) as s:
                docs_by_client: Dict[int, List[Document]] = {}
                doc_rows = s.exec(select(DocumentRow).order_by(DocumentRow.client_id, DocumentRow.position)).all()
                for row in doc_rows:
                    docs_by_client.setdefault(row.client_id, []).append(row.to_document())

                client_rows = s.exec(select(ClientRow).order_by(ClientRow.position)).all()
                clients = [row.to_record(docs_by_client.get(row.id, [])) for row in client_rows]

                year_rows = s.exec(select(YearStatusRow).order_by(YearStatusRow.year)).all()
                statuses = [row.to_status() for row in year_rows]
        except SQLAlchemyError as e:
            raise PersistenceError(f"could not load state: {e}") from e
        except ValueError as e:
            # stored row no longer valid (unknown business type, month out of range)
            raise PersistenceError(f"stored state is corrupt: {e}") from e

        logger.debug("Loaded %d clients and %d year statuses", len(clients), len(statuses))
        return clients, statuses

    def save(self, clients: Sequence[ClientRecord], year_statuses: Sequence[YearStatus]) -> None:
        try:
            self._ensure_schema()
            with SessionLocal(self._engine) as s:
                for model in (DocumentRow, ClientRow, YearStatusRow):
                    for row in s.exec(select(model)).all():
                        s.delete(row)
                s.flush()

                for position, rec in enumerate(clients):
                    client_row = ClientRow.from_record(rec, position)
                    s.add(client_row)
                    s.flush()  # assigns client_row.id
                    for doc_position, doc in enumerate(rec.documents):
                        s.add(DocumentRow.from_document(doc, client_row.id, doc_position))
                for status in year_statuses:
                    s.add(YearStatusRow.from_status(status))
                s.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"could not save state: {e}") from e

        logger.debug("Saved %d clients and %d year statuses", len(clients), len(year_statuses))


# ---------------------------------------------------------------------------
# Lightweight CLI
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    """
    Quick bootstrap helper.

    Examples
    --------
    $ python -m jmcompta.db --create        # first-time table creation
    """
    import argparse

    parser = argparse.ArgumentParser(prog="python -m jmcompta.db", description="JM Comptabilité DB utilities")
    parser.add_argument("--create", action="store_true", help="create tables")
    args = parser.parse_args()

    if args.create:
        create_all()
        print(f"✅ jmcompta.db schema initialised ({DB_URL})")
