"""
api.main
========

HTTP layer over :class:`jmcompta.service.DossierService`.

Run with::

    uvicorn api.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jmcompta.errors import (
    AdminAuthError,
    ClientNotFound,
    ConfirmationRequired,
    JmComptaError,
    PersistenceError,
    ValidationError,
    YearClosedError,
)
from jmcompta.settings import API_DEBUG, LOG_FORMAT, LOG_LEVEL

from .admin import router as admin_router
from .client import router as client_router

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="JM Comptabilité API",
    version="0.1.0",
    description="Document submission for taxi / VTC drivers and fiscal-year administration.",
    debug=API_DEBUG,
)

# --- CORS ----------------------------------------------------------
# dev front-end origins
origins = [
    "http://localhost:5173",    # Vite dev server default port
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Admin-Password", "Accept"],
)

# --- Include Routers ----------------------------------------------------------
app.include_router(client_router)
app.include_router(admin_router)


# --- Domain errors → HTTP status ------------------------------------------------
_STATUS_BY_ERROR = [
    (ClientNotFound, 404),
    (YearClosedError, 409),
    (ConfirmationRequired, 428),
    (AdminAuthError, 401),
    (ValidationError, 400),
    (PersistenceError, 503),
]


@app.exception_handler(JmComptaError)
async def domain_error_handler(request: Request, exc: JmComptaError):
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 500)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc), "error": type(exc).__name__})


# ---------- health-check ----------
@app.get("/")
def root():
    return {"status": "ok", "msg": "JM Comptabilité API is alive"}
