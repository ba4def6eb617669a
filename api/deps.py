"""
api.deps
========

FastAPI dependency providers.

`get_service` returns a process-wide **DossierService** backed by the
SQLite database and the blob directory configured in
:pymod:`jmcompta.settings`.  Tests override it through
``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException

from jmcompta.auth import AdminToken, authenticate_admin
from jmcompta.errors import AdminAuthError
from jmcompta.service import DossierService
from jmcompta.settings import Settings, settings


@lru_cache
def get_service() -> DossierService:
    """Singleton service (one writer, persists across requests)."""
    return DossierService.from_settings()


@lru_cache
def get_settings() -> Settings:
    """Return application settings."""
    return settings


def require_admin(
    x_admin_password: Optional[str] = Header(None, description="Shared admin secret"),
    cfg: Settings = Depends(get_settings),
) -> AdminToken:
    """Turn the ``X-Admin-Password`` header into an admin token, 401 otherwise."""
    try:
        return authenticate_admin(x_admin_password, cfg.admin_password)
    except AdminAuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
