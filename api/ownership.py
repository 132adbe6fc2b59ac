"""
api.ownership
=============

Endpoints for resolving ultimate owners.

Resolution runs in the thread pool so a large graph never blocks the
event loop; if the client goes away the request task is cancelled and
the traversal is told to stop through its CancelToken.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from ownertrace.client import OwnershipClient
from ownertrace.errors import FetchFailure
from ownertrace.models import Graph, Resolution
from ownertrace.paths import CancelToken
from ownertrace.resolver import resolve_ultimate_owners
from api.deps import get_ownership_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ownership", tags=["ownership"])


class NodeIn(BaseModel):
    """Node record as accepted by /ownership/resolve."""
    id: str
    name: str = ""
    is_terminal: bool = False
    type: str = "entity"


class EdgeIn(BaseModel):
    """Owner → owned edge; ``value`` is a percentage, ``None`` for unknown."""
    source: Optional[str] = None
    target: Optional[str] = None
    value: Optional[Union[float, str]] = None


class GraphIn(BaseModel):
    nodes: List[NodeIn] = Field(default_factory=list)
    links: List[EdgeIn] = Field(default_factory=list)


class ResolveRequest(BaseModel):
    """Model for a resolution request over a caller‑supplied graph."""
    start_id: str = Field(..., min_length=1)
    graph: GraphIn = Field(default_factory=GraphIn)
    max_paths: Optional[int] = Field(None, ge=1)
    max_path_length: Optional[int] = Field(None, ge=1)


async def _resolve(graph: Graph, start_id: str,
                   max_paths: Optional[int], max_path_length: Optional[int]) -> Resolution:
    token = CancelToken()
    try:
        return await run_in_threadpool(
            resolve_ultimate_owners, graph, start_id, max_paths, max_path_length, token
        )
    except asyncio.CancelledError:
        token.cancel()
        raise
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/resolve")
async def resolve_graph(data: ResolveRequest) -> Dict[str, Any]:
    """
    Resolve ultimate owners of ``start_id`` within the posted graph.

    The response carries the ordered results plus ``truncated``/``limit``
    and any data issues met while indexing the graph.
    """
    graph = Graph.from_dict(data.graph.model_dump())
    resolution = await _resolve(graph, data.start_id, data.max_paths, data.max_path_length)
    return resolution.to_dict()


@router.get("/{entity_id}/ultimate-owners")
async def ultimate_owners(
    entity_id: str,
    max_paths: Optional[int] = Query(None, ge=1, description="Max partial paths explored"),
    max_path_length: Optional[int] = Query(None, ge=1, description="Max ownership links per path"),
    max_depth: Optional[int] = Query(None, ge=1, description="Depth passed to the graph endpoint"),
    oc: OwnershipClient = Depends(get_ownership_client),
) -> Dict[str, Any]:
    """
    Fetch the graph above *entity_id* from the ownership API and resolve it.

    404 if the API does not know the entity, 502 for any other fetch
    failure.  An entity nobody owns resolves to an empty result list.
    """
    try:
        graph = await oc.fetch_ownership_graph_above(entity_id, max_depth=max_depth)
    except FetchFailure as e:
        if e.not_found:
            raise HTTPException(status_code=404, detail=f"Entity {entity_id} not found")
        logger.error(f"Fetch failed for {entity_id}: {e}")
        raise HTTPException(status_code=502, detail=f"Ownership data unavailable: {e}")

    resolution = await _resolve(graph, entity_id, max_paths, max_path_length)
    return resolution.to_dict()
