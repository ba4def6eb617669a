"""
api.schemas
===========

Request and response bodies of the HTTP layer.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from jmcompta.draft import SessionDraft
from jmcompta.models import BusinessType, ClientRecord, Document, YearStatus


class DocumentOut(BaseModel):
    id: str
    type_key: str
    display_name: str
    uploaded_at: datetime
    month: int
    year: int

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentOut":
        return cls(
            id=doc.id,
            type_key=doc.type_key,
            display_name=doc.display_name,
            uploaded_at=doc.uploaded_at,
            month=doc.month,
            year=doc.year,
        )


class DraftOut(BaseModel):
    first_name: str
    last_name: str
    business_type: BusinessType
    selected_month: int
    selected_year: int
    documents: List[DocumentOut]

    @classmethod
    def from_draft(cls, draft: SessionDraft) -> "DraftOut":
        return cls(
            first_name=draft.first_name,
            last_name=draft.last_name,
            business_type=draft.business_type,
            selected_month=draft.selected_month,
            selected_year=draft.selected_year,
            documents=[DocumentOut.from_document(d) for d in draft.documents],
        )


class ClientSummary(BaseModel):
    first_name: str
    last_name: str
    business_type: BusinessType
    total_documents: int

    @classmethod
    def from_record(cls, rec: ClientRecord) -> "ClientSummary":
        return cls(
            first_name=rec.first_name,
            last_name=rec.last_name,
            business_type=rec.business_type,
            total_documents=len(rec.documents),
        )


class YearStatusOut(BaseModel):
    year: int
    is_closed: bool
    closed_date: Optional[datetime] = None

    @classmethod
    def from_status(cls, year: int, status: Optional[YearStatus]) -> "YearStatusOut":
        if status is None:
            return cls(year=year, is_closed=False)
        return cls(year=status.year, is_closed=status.is_closed, closed_date=status.closed_date)


class LookupRequest(BaseModel):
    first_name: str
    last_name: str


class LookupResponse(BaseModel):
    found: bool
    draft: DraftOut


class PeriodRequest(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int


class BusinessTypeRequest(BaseModel):
    business_type: BusinessType


class SubmitResponse(BaseModel):
    client: ClientSummary
    warnings: List[str] = []


class YearChangeResponse(BaseModel):
    status: YearStatusOut
    warnings: List[str] = []


class DeleteResponse(BaseModel):
    deleted: ClientSummary
    warnings: List[str] = []
