"""
ownertrace.resolver
===================

Ultimate‑owner resolution: the single entry point the rest of the
application calls.

:func:`resolve_ultimate_owners` is a pure function of ``(graph,
start_id)``.  All derived structures (reverse index, terminal set) are
built per call and dropped afterwards, so concurrent calls share
nothing.  Output order is fully determined by the input.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .effective import effective_ownership
from .models import Graph, Node, NodeId, PathStep, Resolution, UltimateOwnerResult
from .paths import CancelToken, CompletedPath, TraversalLimits, enumerate_paths
from .relationships import OwnershipIndex
from .terminals import classify_terminals

logger = logging.getLogger(__name__)

_Candidate = Tuple[CompletedPath, Optional[float]]


# ---------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------
def _rank_key(effective: Optional[float], path_length: int) -> Tuple[int, float, int]:
    """Smaller is better: known before unknown, larger stake, shorter path."""
    if effective is None:
        return (1, 0.0, path_length)
    return (0, -effective, path_length)


def _label(node_id: NodeId, nodes: Dict[NodeId, Node]) -> str:
    node = nodes.get(node_id)
    return node.label if node is not None else node_id


def aggregate(paths: Sequence[CompletedPath], graph: Graph, index: OwnershipIndex) -> List[UltimateOwnerResult]:
    """
    Keep the best path per terminal and order the results.

    Per terminal the winner is the highest known effective ownership,
    then the shortest path; any remaining tie goes to the path
    enumerated first.  The final list is sorted by effective ownership
    (unknowns last), then path length, then terminal id.
    """
    groups: Dict[NodeId, List[_Candidate]] = {}
    for completed in paths:
        eff = effective_ownership(completed.nodes, index)
        groups.setdefault(completed.terminal_id, []).append((completed, eff))

    nodes = graph.node_map()
    results: List[UltimateOwnerResult] = []
    for terminal_id, candidates in groups.items():
        # min() keeps the first of equal keys, i.e. BFS order
        best, eff = min(candidates, key=lambda c: _rank_key(c[1], c[0].length))
        results.append(
            UltimateOwnerResult(
                terminal_id=terminal_id,
                name=_label(terminal_id, nodes),
                effective_ownership=eff,
                path_length=best.length,
                path=tuple(PathStep(node_id, _label(node_id, nodes)) for node_id in best.nodes),
                dead_end=best.dead_end,
            )
        )

    results.sort(key=lambda r: _rank_key(r.effective_ownership, r.path_length) + (r.terminal_id,))
    return results


# ---------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------
def resolve_ultimate_owners(
    graph: Graph,
    start_id: NodeId,
    max_paths: Optional[int] = None,
    max_path_length: Optional[int] = None,
    cancel: Optional[CancelToken] = None,
) -> Resolution:
    """
    Resolve the ultimate owners of *start_id* within *graph*.

    Parameters
    ----------
    graph : Graph
        Immutable snapshot, usually fetched with
        :meth:`ownertrace.client.OwnershipClient.fetch_ownership_graph_above`.
    start_id : str
        Entity or asset whose owners are wanted.
    max_paths, max_path_length : int | None
        Traversal bounds; ``None`` uses the configured defaults.
    cancel : CancelToken | None
        Checked periodically while paths are enumerated.

    Returns
    -------
    Resolution
        Ordered results (at most one per terminal) plus truncation and
        data‑issue reports.  An empty graph, or a start node nobody owns,
        yields an empty Resolution.

    Raises
    ------
    ValueError
        For an empty *start_id* or non‑positive limits.
    ResolutionCancelled
        When *cancel* fires mid‑traversal.
    """
    if not start_id:
        raise ValueError("start_id must be a non-empty node id")

    limits = TraversalLimits.from_settings(max_paths, max_path_length)
    index = OwnershipIndex.build(graph)
    terminals = classify_terminals(graph, index, start_id)
    enumeration = enumerate_paths(index, terminals, start_id, limits=limits, cancel=cancel)

    resolution = Resolution(
        start_id=start_id,
        results=aggregate(enumeration.paths, graph, index),
        truncated=enumeration.truncated,
        limit=enumeration.limit,
        explored_paths=enumeration.explored,
        issues=index.issues + enumeration.issues,
    )
    logger.debug(
        f"Resolved {start_id}: {len(resolution)} ultimate owners from "
        f"{len(enumeration.paths)} paths ({enumeration.explored} explored, "
        f"truncated={resolution.truncated}, issues={len(resolution.issues)})"
    )
    return resolution
