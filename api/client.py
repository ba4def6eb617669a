"""
api.client
==========

FastAPI router for the client surface: identify, pick a period and a
business type, upload documents into the draft, then submit it.
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from jmcompta.service import DossierService
from .deps import get_service
from .schemas import (
    BusinessTypeRequest,
    ClientSummary,
    DocumentOut,
    DraftOut,
    LookupRequest,
    LookupResponse,
    PeriodRequest,
    SubmitResponse,
)

router = APIRouter(prefix="/client", tags=["client"])

logger = logging.getLogger(__name__)


@router.get("/draft", response_model=DraftOut)
def get_draft(svc: DossierService = Depends(get_service)):
    return DraftOut.from_draft(svc.draft)


@router.post("/lookup", response_model=LookupResponse)
def lookup(body: LookupRequest, svc: DossierService = Depends(get_service)):
    """
    Record the typed names in the draft and, for a returning client,
    restore their business type and documents.
    """
    found = svc.lookup_into_draft(body.first_name, body.last_name)
    return LookupResponse(found=found, draft=DraftOut.from_draft(svc.draft))


@router.put("/period", response_model=DraftOut)
def select_period(body: PeriodRequest, svc: DossierService = Depends(get_service)):
    svc.select_period(body.month, body.year)
    return DraftOut.from_draft(svc.draft)


@router.put("/business-type", response_model=DraftOut)
def set_business_type(body: BusinessTypeRequest, svc: DossierService = Depends(get_service)):
    svc.set_business_type(body.business_type)
    return DraftOut.from_draft(svc.draft)


@router.get("/document-types", response_model=Dict[str, str])
def document_types(svc: DossierService = Depends(get_service)):
    """Allowed document types (key → label) for the draft's business type."""
    return svc.available_types()


@router.get("/documents", response_model=List[DocumentOut])
def uploaded_documents(type_key: Optional[str] = None, svc: DossierService = Depends(get_service)):
    """Documents already in the draft for the selected period."""
    return [DocumentOut.from_document(d) for d in svc.uploaded_for_period(type_key)]


@router.post("/documents", response_model=DocumentOut, status_code=201)
async def upload_document(
    type_key: str = Form(...),
    file: UploadFile = File(...),
    svc: DossierService = Depends(get_service),
):
    """Add a file to the draft for its selected period (409 if the year is closed)."""
    content = await file.read()
    doc = svc.upload(type_key, content, file.filename or type_key)
    logger.info("Uploaded %s as %s (%d bytes)", doc.display_name, type_key, len(content))
    return DocumentOut.from_document(doc)


@router.post("/submit", response_model=SubmitResponse)
def submit(svc: DossierService = Depends(get_service)):
    result = svc.submit()
    return SubmitResponse(client=ClientSummary.from_record(result.value), warnings=result.warnings)
