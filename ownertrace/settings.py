"""
ownertrace.settings
===================

Configuration settings for ownertrace.

Module‑level constants cover the HTTP shell and logging; the Pydantic
``Settings`` model holds the ownership‑API connection details and the
default traversal bounds.  Every value can be overridden via environment
variables (or a ``.env`` file for ``Settings``).
"""

from __future__ import annotations

import os
from typing import Optional

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

# API settings
# ---------------------------------------------------------------------------
API_HOST = os.environ.get("OWNERTRACE_API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("OWNERTRACE_API_PORT", "8000"))
API_DEBUG = os.environ.get("OWNERTRACE_API_DEBUG", "False").lower() == "true"

# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("OWNERTRACE_LOG_LEVEL", "INFO").upper()

# Traversal
# ---------------------------------------------------------------------------
# How many dequeued paths between two cancellation checks.
CANCEL_CHECK_INTERVAL = int(os.environ.get("OWNERTRACE_CANCEL_CHECK_INTERVAL", "256"))


# ---------------------------------------------------------------------------
# Pydantic settings model
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Pydantic model for application settings, loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="OWNERTRACE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Ownership API settings
    ownership_api_url: HttpUrl = Field(
        default="http://127.0.0.1:8080",
        description="Base URL of the ownership tracing API",
    )
    ownership_api_timeout: float = Field(30.0, description="HTTP timeout in seconds")
    user_agent: str = Field("ownertrace/0.1.0", description="User-Agent sent to the ownership API")

    # Traversal bounds
    max_paths: Optional[int] = Field(10_000, ge=1, description="Max partial paths explored per request")
    max_path_length: Optional[int] = Field(50, ge=1, description="Max ownership links per path")
    max_fetch_depth: Optional[int] = Field(None, ge=1, description="max_depth passed to the graph endpoint")


# Initialize settings
settings = Settings()
