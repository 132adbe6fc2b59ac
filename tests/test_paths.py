"""
tests/test_paths.py
===================

Unit tests for ownertrace.paths.enumerate_paths: per‑path cycle guard,
dead ends, traversal limits and cooperative cancellation.
"""

import pytest

from ownertrace.errors import ResolutionCancelled
from ownertrace.models import Edge, Graph, IssueKind, Known, LimitKind
from ownertrace.paths import CancelToken, TraversalLimits, enumerate_paths
from ownertrace.relationships import OwnershipIndex
from ownertrace.terminals import classify_terminals


def _run(edges, start, limits=None, cancel=None, check_interval=256):
    g = Graph(edges=edges)
    idx = OwnershipIndex.build(g)
    terminals = classify_terminals(g, idx, start)
    return enumerate_paths(idx, terminals, start, limits=limits, cancel=cancel,
                           check_interval=check_interval)


def _diamond():
    return [
        Edge("A", "B", Known(50.0)),
        Edge("A", "C", Known(50.0)),
        Edge("B", "D", Known(60.0)),
        Edge("C", "D", Known(40.0)),
    ]


def _dense(n):
    """Every node i owns every node j < i: exponentially many paths to node 0."""
    return [Edge(str(i), str(j), Known(50.0)) for i in range(n) for j in range(i)]


def test_diamond_keeps_both_branches():
    result = _run(_diamond(), "D")
    assert [p.nodes for p in result.paths] == [("D", "B", "A"), ("D", "C", "A")]
    assert not any(p.dead_end for p in result.paths)
    assert not result.truncated


def test_cycle_terminates_with_dead_end():
    result = _run([Edge("A", "B", Known(100.0)), Edge("B", "A", Known(100.0))], "B")
    assert [p.nodes for p in result.paths] == [("B", "A")]
    assert result.paths[0].dead_end
    assert result.issues[0].kind is IssueKind.DEAD_END


def test_cycle_above_a_real_root_reaches_the_root():
    edges = [
        Edge("Root", "X", Known(100.0)),
        Edge("X", "Y", Known(100.0)),
        Edge("Y", "X", Known(10.0)),
        Edge("Y", "Start", Known(100.0)),
    ]
    result = _run(edges, "Start")
    paths = [p.nodes for p in result.paths]
    assert ("Start", "Y", "X", "Root") in paths


def test_start_without_owners_yields_nothing():
    result = _run([Edge("A", "B", Known(10.0))], "A")
    assert result.paths == []
    assert result.explored == 1


def test_self_loop_on_start_yields_nothing():
    result = _run([Edge("A", "A", Known(10.0))], "A")
    assert result.paths == []


def test_max_paths_truncates_without_raising():
    result = _run(_dense(10), "0", limits=TraversalLimits(max_paths=5))
    assert result.truncated
    assert result.limit is LimitKind.MAX_PATHS
    assert result.explored == 5


def test_max_path_length_stops_branch():
    chain = [Edge(str(i + 1), str(i), Known(100.0)) for i in range(10)]
    result = _run(chain, "0", limits=TraversalLimits(max_path_length=3))
    assert result.truncated
    assert result.limit is LimitKind.MAX_PATH_LENGTH
    assert [p.nodes for p in result.paths] == [("0", "1", "2", "3")]
    assert result.paths[0].dead_end


def test_cycle_closure_at_length_limit_is_not_truncation():
    # B's only owner is A, already on the path
    edges = [Edge("B", "A", Known(100.0)), Edge("A", "B", Known(100.0))]
    result = _run(edges, "A", limits=TraversalLimits(max_path_length=1))
    assert [p.nodes for p in result.paths] == [("A", "B")]
    assert result.paths[0].dead_end
    assert not result.truncated
    assert result.limit is None


def test_limits_reject_non_positive_values():
    with pytest.raises(ValueError):
        TraversalLimits(max_paths=0)
    with pytest.raises(ValueError):
        TraversalLimits(max_path_length=-1)


def test_from_settings_prefers_explicit_values():
    limits = TraversalLimits.from_settings(max_paths=7)
    assert limits.max_paths == 7


def test_pre_cancelled_token_stops_immediately():
    token = CancelToken()
    token.cancel()
    with pytest.raises(ResolutionCancelled):
        _run(_diamond(), "D", cancel=token)


def test_token_cancelled_mid_traversal():
    token = CancelToken()

    class _Tripwire(OwnershipIndex):
        armed = False
        calls = 0

        def owners(self, owned):
            if _Tripwire.armed:
                _Tripwire.calls += 1
                if _Tripwire.calls == 3:
                    token.cancel()
            return super().owners(owned)

    g = Graph(edges=_dense(8))
    idx = _Tripwire.build(g)
    terminals = classify_terminals(g, idx, "0")
    _Tripwire.armed = True
    with pytest.raises(ResolutionCancelled) as exc:
        enumerate_paths(idx, terminals, "0", cancel=token, check_interval=1)
    assert exc.value.explored_paths >= 3
    assert token.cancelled
