"""
jmcompta.settings
=================

Configuration settings for the JM Comptabilité application.

This module provides centralized configuration options that can be used
across the application.  It includes default values that can be
overridden via environment variables (all prefixed ``JMCOMPTA_``).
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

# ---------------------------------------------------------------------------
# Base directories
# ---------------------------------------------------------------------------
# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent

DATA_DIR = Path(os.environ.get("JMCOMPTA_DATA_DIR", BASE_DIR / "data"))

# Database settings
# ---------------------------------------------------------------------------
DB_FILE = os.environ.get("JMCOMPTA_DB_FILE", DATA_DIR / "jmcompta.db")
DB_URL = os.environ.get("JMCOMPTA_DB_URL", f"sqlite:///{DB_FILE}")
DB_ECHO = os.environ.get("JMCOMPTA_DB_ECHO", "False").lower() == "true"

# Blob storage settings
# ---------------------------------------------------------------------------
BLOB_DIR = Path(os.environ.get("JMCOMPTA_BLOB_DIR", DATA_DIR / "blobs"))

# API settings
# ---------------------------------------------------------------------------
API_HOST = os.environ.get("JMCOMPTA_API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("JMCOMPTA_API_PORT", "8000"))
API_DEBUG = os.environ.get("JMCOMPTA_API_DEBUG", "False").lower() == "true"

# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("JMCOMPTA_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


# ---------------------------------------------------------------------------
# Pydantic settings model for the business rules that can be tuned per
# deployment
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Pydantic model for application settings, loaded from environment variables."""

    # Shared secret guarding the admin surface
    admin_password: str = Field("admin2024", description="Shared admin secret")

    # Years offered by the period selector and the admin year overview
    first_year: int = Field(2020, description="First selectable fiscal year")
    last_year: int = Field(2050, description="Last selectable fiscal year")

    default_business_type: str = Field("taxi", description="Business type of a fresh draft")

    class Config:
        """Configuration for the settings model."""
        env_prefix = "JMCOMPTA_"
        env_file = ".env"  # load from .env file if present
        case_sensitive = False
        extra = "ignore"


# Initialize settings
settings = Settings()
