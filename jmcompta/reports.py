"""
jmcompta.reports
================

Read-only projections for the admin view: a client's dossier grouped by
year and month with catalog labels, the month-by-month grid of document
counts, and the list of fiscal years with their status.

The projections are pydantic models so the HTTP layer can return them
as-is.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from . import catalog
from .models import ClientRecord, Document
from .registry import group_by_year_then_month
from .years import YearStatusRegistry


class DocumentLine(BaseModel):
    id: str
    type_key: str
    label: str
    display_name: str
    uploaded_at: datetime
    month: int
    year: int

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentLine":
        return cls(
            id=doc.id,
            type_key=doc.type_key,
            label=catalog.label_for(doc.type_key),
            display_name=doc.display_name,
            uploaded_at=doc.uploaded_at,
            month=doc.month,
            year=doc.year,
        )


class MonthReport(BaseModel):
    month: int
    name: str
    documents: List[DocumentLine]


class YearReport(BaseModel):
    """Documents of one fiscal year for one client."""
    year: int
    month_counts: List[int] = Field(description="Document count for January..December")
    months: List[MonthReport] = Field(description="Months holding documents, in upload order")


class ClientReport(BaseModel):
    first_name: str
    last_name: str
    business_type: str
    total_documents: int
    years: List[YearReport]


class YearSummary(BaseModel):
    year: int
    is_closed: bool
    closed_date: Optional[datetime] = None


def client_report(rec: ClientRecord) -> ClientReport:
    """
    Build the admin view of one dossier.

    Years are listed in order of first appearance in the dossier (upload
    order), months likewise inside each year.
    """
    years = []
    for year, months in group_by_year_then_month(rec.documents).items():
        counts = [len(months.get(m, [])) for m in range(1, 13)]
        years.append(
            YearReport(
                year=year,
                month_counts=counts,
                months=[
                    MonthReport(
                        month=m,
                        name=catalog.month_name(m),
                        documents=[DocumentLine.from_document(d) for d in docs],
                    )
                    for m, docs in months.items()
                ],
            )
        )
    return ClientReport(
        first_name=rec.first_name,
        last_name=rec.last_name,
        business_type=str(rec.business_type),
        total_documents=len(rec.documents),
        years=years,
    )


def year_overview(years: YearStatusRegistry) -> List[YearSummary]:
    """Every selectable year with its open / closed status."""
    return [
        YearSummary(year=s.year, is_closed=s.is_closed, closed_date=s.closed_date)
        for s in years.overview()
    ]
