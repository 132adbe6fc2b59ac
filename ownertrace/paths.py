"""
ownertrace.paths
================

Breadth‑first enumeration of ownership paths.

Starting from the queried node, every partial path is extended by each
owner of its last node that is not already on that path.  The visited
check is *per path*, not global, so the same owner can be reached again
through a sibling branch; that is what keeps diamond structures intact.

Termination is guaranteed because a path can never repeat a node, but
the number of paths can still grow exponentially on dense graphs.
:class:`TraversalLimits` bounds the work and the enumeration reports
when a bound was hit instead of raising.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, FrozenSet, List, Optional, Set

from .errors import ResolutionCancelled
from .models import DataIssue, IssueKind, LimitKind, NodeId, Path
from .relationships import OwnershipIndex
from .settings import CANCEL_CHECK_INTERVAL, settings

logger = logging.getLogger(__name__)


class CancelToken:
    """
    Cooperative cancellation flag shared between a caller and a traversal.

    Safe to set from another thread; the traversal polls it every
    ``check_interval`` dequeued paths.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, explored_paths: int = 0) -> None:
        if self._event.is_set():
            raise ResolutionCancelled(explored_paths)


@dataclass(frozen=True)
class TraversalLimits:
    """
    Bounds on one enumeration.  ``None`` disables a bound.

    Parameters
    ----------
    max_paths : int | None
        Maximum number of partial paths taken off the queue.
    max_path_length : int | None
        Maximum number of ownership links in a single path.
    """
    max_paths: Optional[int] = None
    max_path_length: Optional[int] = None

    def __post_init__(self):
        for name in ("max_paths", "max_path_length"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value}")

    @classmethod
    def from_settings(cls, max_paths: Optional[int] = None,
                      max_path_length: Optional[int] = None) -> "TraversalLimits":
        """Explicit values win; anything left as None falls back to settings."""
        return cls(
            max_paths=max_paths if max_paths is not None else settings.max_paths,
            max_path_length=max_path_length if max_path_length is not None else settings.max_path_length,
        )


@dataclass(frozen=True)
class CompletedPath:
    nodes: Path
    dead_end: bool = False

    @property
    def terminal_id(self) -> NodeId:
        return self.nodes[-1]

    @property
    def length(self) -> int:
        return len(self.nodes) - 1


@dataclass
class PathEnumeration:
    paths: List[CompletedPath] = field(default_factory=list)
    explored: int = 0
    truncated: bool = False
    limit: Optional[LimitKind] = None
    issues: List[DataIssue] = field(default_factory=list)


def enumerate_paths(
    index: OwnershipIndex,
    terminals: FrozenSet[NodeId],
    start_id: NodeId,
    limits: Optional[TraversalLimits] = None,
    cancel: Optional[CancelToken] = None,
    check_interval: int = CANCEL_CHECK_INTERVAL,
) -> PathEnumeration:
    """
    Enumerate every ownership path from *start_id* up to a terminal.

    A path is completed when its last node is terminal, or when it
    cannot be extended any further (no owners recorded, or every owner
    is already on the path).  The latter are flagged ``dead_end``.

    The start node itself is always expanded, so it is never reported
    as its own ultimate owner.

    Raises
    ------
    ResolutionCancelled
        If *cancel* is set while the queue is still being drained.
    """
    limits = limits or TraversalLimits()
    check_interval = max(1, check_interval)
    result = PathEnumeration()
    dead_ends: Set[NodeId] = set()

    def _emit(path: Path, dead_end: bool, reason: str = "") -> None:
        result.paths.append(CompletedPath(path, dead_end))
        if dead_end and path[-1] not in dead_ends:
            dead_ends.add(path[-1])
            result.issues.append(DataIssue(IssueKind.DEAD_END, reason, source=path[-1]))

    def _truncate(kind: LimitKind) -> None:
        if not result.truncated:
            logger.warning(f"Traversal from {start_id} truncated by {kind} after {result.explored} paths")
        result.truncated = True
        result.limit = result.limit or kind

    queue: Deque[Path] = deque([(start_id,)])
    while queue:
        if cancel is not None and result.explored % check_interval == 0:
            cancel.raise_if_cancelled(result.explored)
        if limits.max_paths is not None and result.explored >= limits.max_paths:
            _truncate(LimitKind.MAX_PATHS)
            break

        path = queue.popleft()
        result.explored += 1
        current = path[-1]

        if current != start_id and current in terminals:
            _emit(path, dead_end=False)
            continue

        owners = index.owners(current)
        if not owners:
            if current != start_id:
                _emit(path, dead_end=True, reason="no owners recorded above this node")
            continue

        # per-path cycle guard
        candidates = [owner for owner in owners if owner not in path]
        if not candidates:
            if current != start_id:
                _emit(path, dead_end=True, reason="every owner is already on the path (cycle)")
            continue

        if limits.max_path_length is not None and len(path) - 1 >= limits.max_path_length:
            _truncate(LimitKind.MAX_PATH_LENGTH)
            _emit(path, dead_end=True, reason="path length limit reached")
            continue

        for owner in candidates:
            queue.append(path + (owner,))

    return result
