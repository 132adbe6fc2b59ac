"""
ownertrace.relationships
========================

Owner → owned stake graph built on NetworkX.

:class:`OwnershipIndex` is the per‑request adjacency view of a
:class:`~ownertrace.models.Graph`.  Resolution walks *upward*, so the
main question it answers is "who owns *n*?" (``owners``), backed by the
MultiDiGraph predecessor map.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional

import networkx as nx

from .models import DataIssue, Edge, Graph, IssueKind, Known, NodeId, Percentage, UNKNOWN

logger = logging.getLogger(__name__)


class OwnershipIndex:
    """
    Thin wrapper around a MultiDiGraph that stores ownership percentages.

    Built fresh for every resolution call and discarded afterwards.

    Example
    -------
    >>> from ownertrace.models import Edge, Graph, Known
    >>> idx = OwnershipIndex.build(Graph(edges=[Edge("HoldCo", "OpCo", Known(75.0))]))
    >>> idx.owners("OpCo")
    ['HoldCo']
    >>> idx.ownership_pct("HoldCo", "OpCo")
    Known(value=75.0)
    """

    def __init__(self) -> None:
        self.g = nx.MultiDiGraph()
        self.issues: List[DataIssue] = []

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def build(cls, graph: Graph) -> "OwnershipIndex":
        """
        Index *graph* in a single pass over its edges.

        Edges may reference ids with no matching Node record; those ids
        are registered anyway.  Edges missing either endpoint are skipped
        and recorded in :attr:`issues`.
        """
        idx = cls()
        for node in graph.nodes:
            idx.g.add_node(node.id)
        for edge in graph.edges:
            idx.add_edge(edge)
        return idx

    def add_edge(self, edge: Edge) -> None:
        """Register one owner → owned edge, keeping any earlier duplicates."""
        if edge.is_malformed:
            logger.warning(f"Skipping malformed edge {edge.source!r} -> {edge.target!r}")
            self.issues.append(
                DataIssue(
                    IssueKind.MALFORMED_EDGE,
                    "edge is missing its source or target",
                    source=edge.source,
                    target=edge.target,
                )
            )
            return

        value = edge.value
        if isinstance(value, Known) and not (math.isfinite(value.value) and 0 <= value.value <= 100):
            logger.warning(f"Stake {value} on {edge.source} -> {edge.target} is outside 0-100, treating as unknown")
            self.issues.append(
                DataIssue(
                    IssueKind.OUT_OF_RANGE,
                    f"stake {value} is outside 0-100 and was treated as unknown",
                    source=edge.source,
                    target=edge.target,
                )
            )
            value = UNKNOWN

        existing = self.ownership_pct(edge.source, edge.target)
        if existing is not None and existing != value:
            logger.warning(
                f"Conflicting duplicate edge {edge.source} -> {edge.target}: "
                f"keeping {existing}, ignoring {value}"
            )
            self.issues.append(
                DataIssue(
                    IssueKind.CONFLICTING_DUPLICATE,
                    f"kept first value {existing}, ignored {value}",
                    source=edge.source,
                    target=edge.target,
                )
            )
        self.g.add_edge(edge.source, edge.target, pct=value)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def __contains__(self, node_id: NodeId) -> bool:
        return node_id in self.g

    def owners(self, owned: NodeId) -> List[NodeId]:
        """Return the direct owners of *owned* in first‑seen order."""
        if owned not in self.g:
            return []
        return list(self.g.predecessors(owned))

    def ownership_pct(self, owner: NodeId, owned: NodeId) -> Optional[Percentage]:
        """
        Return the stake of the *first* edge owner → owned, or None.

        Later duplicates are ignored; conflicting ones are reported in
        :attr:`issues` when the index is built.
        """
        data = self.g.get_edge_data(owner, owned)
        if not data:
            return None
        first_key = next(iter(data))
        return data[first_key]["pct"]

    def node_ids(self) -> List[NodeId]:
        return list(self.g.nodes())
