"""
tests/test_resolver.py
======================

Behavioural tests for ownertrace.resolver.resolve_ultimate_owners: the
diamond, cycle, unknown‑stake, determinism, empty‑graph and
terminal‑flag cases, plus truncation and data‑issue reporting.
"""

import pytest

from ownertrace.errors import ResolutionCancelled
from ownertrace.models import UNKNOWN, Edge, Graph, IssueKind, Known, LimitKind, Node
from ownertrace.paths import CancelToken, CompletedPath
from ownertrace.resolver import aggregate, resolve_ultimate_owners
from ownertrace.relationships import OwnershipIndex


def _diamond():
    return Graph(
        nodes=[Node("A", "Alpha Holdings"), Node("B"), Node("C"), Node("D", "Delta Plant")],
        edges=[
            Edge("A", "B", Known(50.0)),
            Edge("A", "C", Known(50.0)),
            Edge("B", "D", Known(60.0)),
            Edge("C", "D", Known(40.0)),
        ],
    )


def test_diamond_ownership():
    res = resolve_ultimate_owners(_diamond(), "D")
    assert len(res) == 1
    top = res[0]
    assert top.terminal_id == "A"
    assert top.name == "Alpha Holdings"
    assert top.effective_ownership == pytest.approx(30.0)
    assert top.path_length == 2
    assert [s.id for s in top.path] == ["D", "B", "A"]
    assert [s.name for s in top.path] == ["Delta Plant", "B", "Alpha Holdings"]
    assert not top.dead_end
    assert not res.truncated


def test_cycle_safety():
    g = Graph(edges=[Edge("A", "B", Known(100.0)), Edge("B", "A", Known(100.0))])
    res = resolve_ultimate_owners(g, "B")
    assert [r.terminal_id for r in res] == ["A"]
    assert res[0].dead_end
    assert res[0].effective_ownership == pytest.approx(100.0)
    assert any(i.kind is IssueKind.DEAD_END for i in res.issues)


def test_unknown_link_nullifies_and_sorts_last():
    g = Graph(edges=[
        Edge("X", "Y", UNKNOWN),
        Edge("Y", "Z", Known(99.0)),
        Edge("W", "Z", Known(0.5)),
    ])
    res = resolve_ultimate_owners(g, "Z")
    assert [r.terminal_id for r in res] == ["W", "X"]
    assert res[0].effective_ownership == pytest.approx(0.5)
    assert res[1].effective_ownership is None


def test_idempotence():
    g = Graph(edges=[
        Edge("P", "M", Known(30.0)),
        Edge("Q", "M", Known(30.0)),
        Edge("R", "M", UNKNOWN),
        Edge("S", "N", UNKNOWN),
        Edge("N", "M", Known(10.0)),
    ])
    first = resolve_ultimate_owners(g, "M")
    second = resolve_ultimate_owners(g, "M")
    assert first == second
    assert first.to_dict() == second.to_dict()
    # equal stakes tie-break on path length, then id
    assert [r.terminal_id for r in first] == ["P", "Q", "R", "S"]


def test_empty_graph():
    res = resolve_ultimate_owners(Graph(nodes=[], edges=[]), "X")
    assert res.results == []
    assert list(res) == []
    assert not res.truncated


def test_start_with_zero_owners():
    res = resolve_ultimate_owners(_diamond(), "A")
    assert list(res) == []


def test_terminal_flag_honored():
    g = Graph(
        nodes=[Node("Top"), Node("Mid", "Mid Trust", is_terminal=True), Node("Low")],
        edges=[Edge("Top", "Mid", Known(100.0)), Edge("Mid", "Low", Known(40.0))],
    )
    res = resolve_ultimate_owners(g, "Low")
    assert [r.terminal_id for r in res] == ["Mid"]
    assert res[0].effective_ownership == pytest.approx(40.0)
    assert res[0].path_length == 1


def test_flagged_start_is_still_expanded():
    g = Graph(
        nodes=[Node("S", is_terminal=True)],
        edges=[Edge("O", "S", Known(70.0))],
    )
    res = resolve_ultimate_owners(g, "S")
    assert [r.terminal_id for r in res] == ["O"]


def test_known_beats_unknown_within_a_terminal():
    g = Graph(edges=[
        Edge("A", "B", UNKNOWN),
        Edge("B", "D", Known(90.0)),
        Edge("A", "C", Known(1.0)),
        Edge("C", "E", Known(1.0)),
        Edge("E", "D", Known(1.0)),
    ])
    res = resolve_ultimate_owners(g, "D")
    assert len(res) == 1
    assert res[0].effective_ownership == pytest.approx(0.0001)
    assert res[0].path_length == 3


def test_null_entries_order_by_path_length():
    g = Graph(edges=[
        Edge("Far", "Mid", UNKNOWN),
        Edge("Mid", "T", Known(50.0)),
        Edge("Near", "T", UNKNOWN),
    ])
    res = resolve_ultimate_owners(g, "T")
    assert [(r.terminal_id, r.path_length) for r in res] == [("Near", 1), ("Far", 2)]


def test_malformed_edges_do_not_abort():
    g = Graph.from_dict({
        "nodes": [{"id": "T"}],
        "links": [
            {"source": "O", "target": "T", "value": 25},
            {"source": None, "target": "T", "value": 10},
            {"target": "T"},
        ],
    })
    res = resolve_ultimate_owners(g, "T")
    assert [r.terminal_id for r in res] == ["O"]
    assert [i.kind for i in res.issues] == [IssueKind.MALFORMED_EDGE, IssueKind.MALFORMED_EDGE]
    assert res.incomplete_data


def test_conflicting_duplicate_reported_first_wins():
    g = Graph(edges=[Edge("O", "T", Known(25.0)), Edge("O", "T", Known(75.0))])
    res = resolve_ultimate_owners(g, "T")
    assert res[0].effective_ownership == pytest.approx(25.0)
    assert res.issues[0].kind is IssueKind.CONFLICTING_DUPLICATE


def test_truncation_is_reported_with_partial_results():
    edges = [Edge(str(i), str(j), Known(50.0)) for i in range(12) for j in range(i)]
    res = resolve_ultimate_owners(Graph(edges=edges), "0", max_paths=50)
    assert res.truncated
    assert res.limit is LimitKind.MAX_PATHS
    assert res.explored_paths == 50
    assert len(res) >= 1


def test_cancellation_propagates():
    token = CancelToken()
    token.cancel()
    with pytest.raises(ResolutionCancelled):
        resolve_ultimate_owners(_diamond(), "D", cancel=token)


def test_invalid_arguments():
    with pytest.raises(ValueError):
        resolve_ultimate_owners(_diamond(), "")
    with pytest.raises(ValueError):
        resolve_ultimate_owners(_diamond(), "D", max_path_length=0)


def test_aggregate_prefers_earlier_path_on_full_tie():
    g = Graph(edges=[
        Edge("A", "B", Known(50.0)),
        Edge("A", "C", Known(50.0)),
        Edge("B", "D", Known(50.0)),
        Edge("C", "D", Known(50.0)),
    ])
    idx = OwnershipIndex.build(g)
    paths = [CompletedPath(("D", "B", "A")), CompletedPath(("D", "C", "A"))]
    results = aggregate(paths, g, idx)
    assert [s.id for s in results[0].path] == ["D", "B", "A"]


@pytest.mark.parametrize("raw", ["nan", "inf", 150])
def test_unusable_stake_ranks_as_unknown(raw):
    g = Graph.from_dict({"links": [
        {"source": "A", "target": "T", "value": raw},
        {"source": "B", "target": "T", "value": 10},
    ]})
    res = resolve_ultimate_owners(g, "T")
    assert [(r.terminal_id, r.effective_ownership) for r in res] == [("B", 10.0), ("A", None)]
