"""
api.deps
========

FastAPI dependency providers.

`get_ownership_client` yields a fresh :class:`~ownertrace.client.OwnershipClient`
per request, backed by an ``httpx.AsyncClient`` that is closed when the
request finishes.  Resolution itself needs no dependency: it is a pure
function of the fetched graph.
"""

from functools import lru_cache
from typing import AsyncGenerator

from fastapi import Depends
from httpx import AsyncClient

from ownertrace.client import OwnershipClient
from ownertrace.settings import Settings, settings


@lru_cache
def get_settings() -> Settings:
    """Return application settings."""
    return settings


async def get_ownership_client(settings=Depends(get_settings)) -> AsyncGenerator[OwnershipClient, None]:
    """
    Return an OwnershipClient configured for the ownership tracing API.

    Args:
        settings: Application settings with the API base URL and timeout

    Yields:
        OwnershipClient: Client wrapping a request‑scoped AsyncClient
    """
    async with AsyncClient(
        base_url=str(settings.ownership_api_url).rstrip("/"),
        headers={
            "Accept": "application/json",
            "User-Agent": settings.user_agent,
        },
        timeout=settings.ownership_api_timeout,
    ) as client:
        yield OwnershipClient(client, max_depth=settings.max_fetch_depth)
