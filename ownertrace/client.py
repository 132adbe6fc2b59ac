"""
ownertrace.client
=================

Async client for the ownership tracing API.

The API builds node/edge snapshots around a root entity or asset; this
module turns its responses into :class:`~ownertrace.models.Graph`
objects.  Anything that goes wrong on the wire, or a response that does
not look like a graph, raises :class:`~ownertrace.errors.FetchFailure`,
never an empty graph.

Usage:
------
async with OwnershipClient.from_settings() as oc:
    graph = await oc.fetch_ownership_graph_above("E100001000348")

Cancelling the awaiting task aborts the request without side effects.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from httpx import AsyncClient

from .errors import FetchFailure
from .models import Edge, Graph, Node, NodeKind, percentage
from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class OwnershipClient:
    """
    Client for the ownership tracing API.

    Wraps an :class:`httpx.AsyncClient` whose ``base_url`` points at the
    API.  The client is borrowed, not owned, unless created through
    :meth:`from_settings`.
    """

    def __init__(self, client: AsyncClient, max_depth: Optional[int] = None):
        """
        Initialize the ownership client.

        Args:
            client: AsyncClient configured with the API base URL
            max_depth: Default ``max_depth`` for graph requests (None = server default)
        """
        self.client = client
        self.max_depth = max_depth
        self._owns_client = False

    @classmethod
    def from_settings(cls, cfg: Optional[Settings] = None) -> "OwnershipClient":
        """Create a client (and its AsyncClient) from application settings."""
        cfg = cfg or default_settings
        http = AsyncClient(
            base_url=str(cfg.ownership_api_url).rstrip("/"),
            headers={"Accept": "application/json", "User-Agent": cfg.user_agent},
            timeout=cfg.ownership_api_timeout,
        )
        oc = cls(http, max_depth=cfg.max_fetch_depth)
        oc._owns_client = True
        return oc

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "OwnershipClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    async def _get_json(self, endpoint: str, entity_id: str, params: Optional[Dict[str, Any]] = None) -> Any:
        logger.info(f"GET {endpoint} params={params or {}}")
        try:
            response = await self.client.get(endpoint, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Ownership API unreachable for {entity_id}: {e}")
            raise FetchFailure(f"ownership API unreachable: {e}", entity_id=entity_id) from e

        if response.status_code == 404:
            raise FetchFailure(f"{entity_id} not found", status=404, entity_id=entity_id)
        if response.is_error:
            logger.error(f"Ownership API error for {entity_id}: HTTP {response.status_code}")
            raise FetchFailure(
                f"ownership API error: {response.reason_phrase}",
                status=response.status_code,
                entity_id=entity_id,
            )

        try:
            return response.json()
        except ValueError as e:
            raise FetchFailure(
                "ownership API returned invalid JSON",
                status=response.status_code,
                entity_id=entity_id,
            ) from e

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def fetch_ownership_graph_above(self, entity_id: str, max_depth: Optional[int] = None) -> Graph:
        """
        Fetch the snapshot of everything that owns *entity_id*, looking upward.

        Args:
            entity_id: Entity or asset id the graph is rooted at
            max_depth: Optional traversal depth for the server

        Returns:
            Graph with the server's nodes and edges

        Raises:
            FetchFailure: network error, non‑2xx status or malformed payload
        """
        params: Dict[str, Any] = {"root": entity_id, "direction": "up"}
        depth = max_depth if max_depth is not None else self.max_depth
        if depth is not None:
            params["max_depth"] = depth

        payload = await self._get_json("/ownership/graph", entity_id, params=params)
        return parse_graph_response(payload, entity_id)

    async def get_entity_owners(self, entity_id: str) -> List[Dict[str, Any]]:
        """
        Return the direct owners of *entity_id*.

        Each item carries ``owner_entity_id``, ``owner_name`` and
        ``ownership_pct`` as sent by the API.
        """
        payload = await self._get_json(f"/entities/{quote(entity_id, safe='')}/owners", entity_id)
        if not isinstance(payload, list):
            raise FetchFailure("owners response is not a list", entity_id=entity_id)
        return payload


def parse_graph_response(payload: Any, entity_id: str) -> Graph:
    """
    Convert an ``/ownership/graph`` (or ``/entities/{id}/graph/up``) payload.

    Nodes listed in ``terminal_ids`` are flagged terminal in addition to
    any ``is_terminal`` markers on the nodes themselves.
    """
    if not isinstance(payload, dict):
        raise FetchFailure("graph response is not an object", entity_id=entity_id)
    raw_nodes = payload.get("nodes")
    raw_edges = payload.get("edges")
    if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
        raise FetchFailure("graph response is missing nodes/edges", entity_id=entity_id)

    terminal_ids = set(payload.get("terminal_ids") or [])
    nodes = []
    for rec in raw_nodes:
        if not isinstance(rec, dict) or not rec.get("id"):
            logger.warning(f"Skipping node record without id: {rec!r}")
            continue
        node_id = str(rec["id"])
        kind = NodeKind.ASSET if str(rec.get("type", "")).lower() == "asset" else NodeKind.ENTITY
        nodes.append(
            Node(
                id=node_id,
                name=rec.get("Name") or rec.get("name") or "",
                is_terminal=bool(rec.get("is_terminal")) or node_id in terminal_ids,
                kind=kind,
            )
        )

    edges = []
    for rec in raw_edges:
        if not isinstance(rec, dict):
            logger.warning(f"Skipping edge record that is not an object: {rec!r}")
            continue
        source, target = rec.get("source"), rec.get("target")
        try:
            value = percentage(rec.get("ownership_pct"))
        except TypeError as e:
            raise FetchFailure(f"malformed ownership_pct on edge {source} -> {target}",
                               entity_id=entity_id) from e
        # malformed edges are kept so the indexer can report them
        edges.append(
            Edge(
                source=str(source) if source else None,
                target=str(target) if target else None,
                value=value,
            )
        )

    return Graph(nodes=tuple(nodes), edges=tuple(edges))
