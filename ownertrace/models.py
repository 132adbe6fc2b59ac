"""
ownertrace.models
=================

Dataclasses and enums describing one ownership graph snapshot and the
results computed over it.  These objects carry **no** external‑library
dependencies so that importing `ownertrace` stays fast; the NetworkX
view lives in :pymod:`ownertrace.relationships`.

Ownership percentages are modelled as a two‑variant type: a
:class:`Known` value or the :data:`UNKNOWN` singleton.  Call sites test
``isinstance(value, Known)`` and never rely on truthiness, so ``0 %`` is
never confused with "not disclosed".
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

NodeId = str


class NodeKind(Enum):
    """What a node stands for in the source data."""
    ENTITY = auto()
    ASSET = auto()

    def __str__(self) -> str:        # nicer REPL display
        return self.name


# ---------------------------------------------------------------------
# Percentages
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class Known:
    """A disclosed, numeric ownership stake (0–100)."""
    value: float

    def __str__(self) -> str:
        return f"{self.value:g}%"


class _Unknown:
    """A disclosed but unquantified ownership stake."""

    _instance: Optional["_Unknown"] = None

    def __new__(cls) -> "_Unknown":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNKNOWN"

    __str__ = __repr__

    def __reduce__(self):
        return (_Unknown, ())


UNKNOWN = _Unknown()

Percentage = Union[Known, _Unknown]


def percentage(raw: Any) -> Percentage:
    """
    Convert a raw value from source data into a :data:`Percentage`.

    ``None``, empty strings, ``"unknown"`` (with or without a trailing
    ``%``) and non‑finite numbers such as ``nan`` become :data:`UNKNOWN`.
    Other numbers and numeric strings become :class:`Known`; range checks
    happen in :class:`~ownertrace.relationships.OwnershipIndex`.
    Existing ``Known``/``UNKNOWN`` values pass through.

    >>> percentage(50)
    Known(value=50.0)
    >>> percentage("unknown %")
    UNKNOWN
    >>> percentage(0)
    Known(value=0.0)
    >>> percentage("nan")
    UNKNOWN
    """
    if isinstance(raw, (Known, _Unknown)):
        return raw
    if raw is None or isinstance(raw, bool):
        return UNKNOWN
    if isinstance(raw, (int, float)):
        return _finite(float(raw))
    if isinstance(raw, str):
        text = raw.strip().rstrip("%").strip()
        if not text or text.lower() == "unknown":
            return UNKNOWN
        try:
            return _finite(float(text))
        except ValueError:
            return UNKNOWN
    raise TypeError(f"cannot interpret {raw!r} as an ownership percentage")


def _finite(value: float) -> Percentage:
    # nan and inf carry no usable stake
    return Known(value) if math.isfinite(value) else UNKNOWN


# ---------------------------------------------------------------------
# Graph snapshot
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class Node:
    """
    A single entity or asset in the ownership graph.

    Parameters
    ----------
    id : str
        Stable identifier; the only field used for comparison.
    name : str
        Display name.
    is_terminal : bool, default=False
        Hint from the data source that this node is an ultimate owner.
    kind : NodeKind, default=ENTITY
        Entity or asset; informational only.
    """
    id: NodeId
    name: str = ""
    is_terminal: bool = False
    kind: NodeKind = NodeKind.ENTITY

    @property
    def label(self) -> str:
        return self.name or self.id


@dataclass(frozen=True)
class Edge:
    """Directed stake: *source* (owner) holds *value* of *target* (owned)."""
    source: Optional[NodeId]
    target: Optional[NodeId]
    value: Percentage = UNKNOWN

    @property
    def is_malformed(self) -> bool:
        return not self.source or not self.target


@dataclass(frozen=True)
class Graph:
    """
    Immutable node/edge snapshot for one resolution request.

    Duplicate edges between the same ordered pair are kept as given;
    callers build whatever adjacency view they need.
    """
    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()

    def __post_init__(self):
        # accept lists from callers but store tuples
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "edges", tuple(self.edges))

    def node(self, node_id: NodeId) -> Optional[Node]:
        """Return the first node record with *node_id*, or None."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node_map(self) -> Dict[NodeId, Node]:
        """id → Node, first record wins."""
        mapping: Dict[NodeId, Node] = {}
        for node in self.nodes:
            mapping.setdefault(node.id, node)
        return mapping

    # Convenience helpers -------------------------------------------------
    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Graph":
        """
        Build a Graph from a ``{"nodes": [...], "links": [...]}`` mapping.

        ``"edges"`` is accepted in place of ``"links"``.  Node records may
        use ``name`` or ``Name``; edge records may carry ``value``,
        ``pct`` or ``ownership_pct``.  Edge records missing an endpoint
        are kept (with ``None``) so the indexer can report them.
        """
        nodes = [_node_from_record(rec) for rec in payload.get("nodes") or []]
        raw_edges = payload.get("links")
        if raw_edges is None:
            raw_edges = payload.get("edges") or []
        edges = [_edge_from_record(rec) for rec in raw_edges]
        return cls(nodes=tuple(nodes), edges=tuple(edges))

    def to_dict(self) -> Dict[str, Any]:
        """Inverse of :meth:`from_dict` (uses the ``links`` key)."""
        return {
            "nodes": [
                {
                    "id": n.id,
                    "name": n.name,
                    "is_terminal": n.is_terminal,
                    "type": n.kind.name.lower(),
                }
                for n in self.nodes
            ],
            "links": [
                {
                    "source": e.source,
                    "target": e.target,
                    "value": e.value.value if isinstance(e.value, Known) else None,
                }
                for e in self.edges
            ],
        }


def _node_from_record(rec: Dict[str, Any]) -> Node:
    kind_text = str(rec.get("type") or rec.get("kind") or "entity").upper()
    kind = NodeKind[kind_text] if kind_text in NodeKind.__members__ else NodeKind.ENTITY
    return Node(
        id=str(rec["id"]),
        name=rec.get("name") or rec.get("Name") or "",
        is_terminal=bool(rec.get("is_terminal") or rec.get("isTerminal") or False),
        kind=kind,
    )


def _edge_from_record(rec: Dict[str, Any]) -> Edge:
    for key in ("value", "ownership_pct", "pct"):
        if key in rec:
            raw = rec[key]
            break
    else:
        raw = None
    source = rec.get("source")
    target = rec.get("target")
    return Edge(
        source=str(source) if source not in (None, "") else None,
        target=str(target) if target not in (None, "") else None,
        value=percentage(raw),
    )


# ---------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------
Path = Tuple[NodeId, ...]


class IssueKind(Enum):
    """Data‑quality problems recovered from during resolution."""
    MALFORMED_EDGE = auto()
    CONFLICTING_DUPLICATE = auto()
    OUT_OF_RANGE = auto()
    DEAD_END = auto()

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class DataIssue:
    kind: IssueKind
    detail: str
    source: Optional[NodeId] = None
    target: Optional[NodeId] = None


class LimitKind(Enum):
    """Which traversal bound stopped exploration early."""
    MAX_PATHS = auto()
    MAX_PATH_LENGTH = auto()

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class PathStep:
    id: NodeId
    name: str


@dataclass(frozen=True)
class UltimateOwnerResult:
    """
    One ultimate owner of the queried node.

    Parameters
    ----------
    terminal_id : str
        Id of the ultimate owner.
    name : str
        Display name (falls back to the id).
    effective_ownership : float | None
        Product of stakes along *path*, in percent; ``None`` when any
        link is unknown or non‑positive.
    path_length : int
        Number of ownership links in *path*.
    path : tuple[PathStep, ...]
        From the queried node up to the ultimate owner.
    dead_end : bool
        True when the data simply stops here rather than the node being
        a genuine ultimate owner.
    """
    terminal_id: NodeId
    name: str
    effective_ownership: Optional[float]
    path_length: int
    path: Tuple[PathStep, ...] = field(default_factory=tuple)
    dead_end: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "terminal_id": self.terminal_id,
            "name": self.name,
            "effective_ownership": self.effective_ownership,
            "path_length": self.path_length,
            "path": [{"id": s.id, "name": s.name} for s in self.path],
            "dead_end": self.dead_end,
        }


@dataclass
class Resolution:
    """
    Ordered ultimate‑owner results plus how complete they are.

    Iterating, indexing and ``len()`` go straight to :attr:`results`, so
    a Resolution can be used wherever the plain list is expected.
    """
    start_id: NodeId
    results: List[UltimateOwnerResult] = field(default_factory=list)
    truncated: bool = False
    limit: Optional[LimitKind] = None
    explored_paths: int = 0
    issues: List[DataIssue] = field(default_factory=list)

    @property
    def incomplete_data(self) -> bool:
        return bool(self.issues)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_id": self.start_id,
            "results": [r.to_dict() for r in self.results],
            "truncated": self.truncated,
            "limit": self.limit.name if self.limit else None,
            "explored_paths": self.explored_paths,
            "issues": [
                {
                    "kind": i.kind.name,
                    "detail": i.detail,
                    "source": i.source,
                    "target": i.target,
                }
                for i in self.issues
            ],
        }

    # ------------------------------------------------------------------
    # Dunder helpers for convenience
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[UltimateOwnerResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __getitem__(self, idx):
        return self.results[idx]

