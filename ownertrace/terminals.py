"""
ownertrace.terminals
====================

Which nodes count as *ultimate owners*.

A node is terminal when

* nobody owns it according to the :class:`~ownertrace.relationships.OwnershipIndex`
  and it is not the node being resolved, or
* the data source flagged it with ``is_terminal``.

Source flags win over structure: a flagged node is terminal even when
the index records owners above it.
"""

from __future__ import annotations

from typing import FrozenSet

from .models import Graph, NodeId
from .relationships import OwnershipIndex


def classify_terminals(graph: Graph, index: OwnershipIndex, start_id: NodeId) -> FrozenSet[NodeId]:
    """
    Return the terminal ids among every node known to *graph* or *index*.

    Examples
    --------
    >>> from ownertrace.models import Edge, Graph, Known
    >>> g = Graph(edges=[Edge("A", "B", Known(100.0))])
    >>> sorted(classify_terminals(g, OwnershipIndex.build(g), "B"))
    ['A']
    """
    flagged = {node.id for node in graph.nodes if node.is_terminal}
    known = set(index.node_ids()) | {node.id for node in graph.nodes}
    structural = {
        node_id
        for node_id in known
        if node_id != start_id and not index.owners(node_id)
    }
    return frozenset(flagged | structural)
