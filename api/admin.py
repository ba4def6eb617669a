"""
api.admin
=========

FastAPI router for the admin surface.  Every route requires the
``X-Admin-Password`` header (see :func:`api.deps.require_admin`).
"""

import io
import logging
import zipfile
from typing import List
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from jmcompta.auth import AdminToken, DeleteConfirmation
from jmcompta.reports import ClientReport, YearSummary
from jmcompta.service import DossierService
from .deps import get_service, require_admin
from .schemas import ClientSummary, DeleteResponse, YearChangeResponse, YearStatusOut

router = APIRouter(prefix="/admin", tags=["admin"])

logger = logging.getLogger(__name__)


@router.get("/clients", response_model=List[ClientSummary])
def list_clients(
    token: AdminToken = Depends(require_admin),
    svc: DossierService = Depends(get_service),
):
    """Every submitted dossier, in submission order."""
    return [ClientSummary.from_record(rec) for rec in svc.clients(token)]


@router.get("/clients/{first_name}/{last_name}", response_model=ClientReport)
def client_report(
    first_name: str,
    last_name: str,
    token: AdminToken = Depends(require_admin),
    svc: DossierService = Depends(get_service),
):
    return svc.client_report(token, (first_name, last_name))


@router.delete("/clients/{first_name}/{last_name}", response_model=DeleteResponse)
def delete_client(
    first_name: str,
    last_name: str,
    confirm: bool = Query(False, description="Must be true; 428 otherwise"),
    token: AdminToken = Depends(require_admin),
    svc: DossierService = Depends(get_service),
):
    confirmation = DeleteConfirmation.for_client(first_name, last_name) if confirm else None
    result = svc.delete_client(token, (first_name, last_name), confirmation)
    return DeleteResponse(deleted=ClientSummary.from_record(result.value), warnings=result.warnings)


@router.get("/clients/{first_name}/{last_name}/export")
def export_client(
    first_name: str,
    last_name: str,
    token: AdminToken = Depends(require_admin),
    svc: DossierService = Depends(get_service),
):
    """All documents of a client, zipped, in upload order."""
    files = svc.export_all(token, (first_name, last_name))
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for filename, content in files:
            zf.writestr(filename, content)
    logger.info("Exported %d documents of %s %s", len(files), first_name, last_name)
    archive_name = quote(f"{first_name}_{last_name}.zip")
    return Response(
        content=buf.getvalue(),
        media_type="application/zip",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{archive_name}"},
    )


@router.get("/years", response_model=List[YearSummary])
def year_overview(
    token: AdminToken = Depends(require_admin),
    svc: DossierService = Depends(get_service),
):
    return svc.year_overview(token)


@router.post("/years/{year}/close", response_model=YearChangeResponse)
def close_year(
    year: int,
    token: AdminToken = Depends(require_admin),
    svc: DossierService = Depends(get_service),
):
    result = svc.close_year(token, year)
    return YearChangeResponse(status=YearStatusOut.from_status(year, result.value), warnings=result.warnings)


@router.post("/years/{year}/reopen", response_model=YearChangeResponse)
def reopen_year(
    year: int,
    token: AdminToken = Depends(require_admin),
    svc: DossierService = Depends(get_service),
):
    result = svc.reopen_year(token, year)
    return YearChangeResponse(status=YearStatusOut.from_status(year, result.value), warnings=result.warnings)
