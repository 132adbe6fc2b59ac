"""
tests/test_terminals.py
=======================

Unit tests for ownertrace.terminals
"""

from ownertrace.models import Edge, Graph, Known, Node
from ownertrace.relationships import OwnershipIndex
from ownertrace.terminals import classify_terminals


def _chain():
    # A owns B owns C
    return Graph(
        nodes=[Node("A"), Node("B"), Node("C")],
        edges=[Edge("A", "B", Known(50.0)), Edge("B", "C", Known(50.0))],
    )


def test_structural_roots_are_terminal():
    g = _chain()
    idx = OwnershipIndex.build(g)
    assert classify_terminals(g, idx, "C") == frozenset({"A"})


def test_start_node_is_never_structurally_terminal():
    """A node nobody owns is not its own ultimate owner when queried."""
    g = _chain()
    idx = OwnershipIndex.build(g)
    assert "A" not in classify_terminals(g, idx, "A")


def test_source_flag_overrides_structure():
    g = Graph(
        nodes=[Node("A"), Node("B", is_terminal=True), Node("C")],
        edges=[Edge("A", "B", Known(50.0)), Edge("B", "C", Known(50.0))],
    )
    idx = OwnershipIndex.build(g)
    assert classify_terminals(g, idx, "C") == frozenset({"A", "B"})


def test_edge_only_owner_is_terminal():
    g = Graph(nodes=[Node("C")], edges=[Edge("X", "C", Known(10.0))])
    idx = OwnershipIndex.build(g)
    assert classify_terminals(g, idx, "C") == frozenset({"X"})
