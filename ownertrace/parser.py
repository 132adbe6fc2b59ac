"""
ownertrace.parser
=================

Parse GEM "Ownership Path" strings into a :class:`~ownertrace.models.Graph`.

GEM stores ownership as text showing the chain from ultimate parent down
to the asset, with the stake held in each step on the *owned* segment::

    "Vanguard Group [5%] -> BlackRock Inc [10%] -> RWE AG [100%] -> Asset [100%]"

Many owners in such strings have no database id, so node ids are derived
from names with :func:`sanitize_id`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from .models import Edge, Graph, Node, NodeKind, Percentage, UNKNOWN, percentage

logger = logging.getLogger(__name__)

PATH_FIELD = "Ownership Path"
PATH_SEPARATOR = " -> "

_SEGMENT_RE = re.compile(r"^(.+?)\s*\[([^\]]+)\]$")
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True)
class ParsedSegment:
    name: str
    pct: Percentage = UNKNOWN


# ---------------------------------------------------------------------
# Ids
# ---------------------------------------------------------------------
def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def name_hash(name: str) -> str:
    """
    Four‑character base‑36 suffix of a 32‑bit djb2 (xor variant) hash.

    Hashes UTF‑16 code units so ids match the ones the web frontend
    generates for the same names.
    """
    h = 5381
    raw = name.encode("utf-16-le")
    for i in range(0, len(raw), 2):
        unit = raw[i] | (raw[i + 1] << 8)
        h = _to_int32(h * 33) ^ unit
    return _base36(h & 0xFFFFFFFF)[-4:]


def sanitize_id(name: str, max_len: int = 50) -> str:
    """
    Turn an owner name into a stable graph id: ``{cleaned}_{hash}``.

    The hash is taken from the *original* name so ``"ABC Corp"`` and
    ``"ABC Corp."`` stay distinct after cleaning.
    """
    cleaned = _NON_ALNUM_RE.sub("_", name)
    return f"{cleaned[:max_len - 5]}_{name_hash(name)}"


# ---------------------------------------------------------------------
# Segments
# ---------------------------------------------------------------------
def parse_segment(seg: str) -> ParsedSegment:
    """
    Parse ``"Name [75%]"`` into a :class:`ParsedSegment`.

    >>> parse_segment("BlackRock Inc [5.07%]")
    ParsedSegment(name='BlackRock Inc', pct=Known(value=5.07))
    >>> parse_segment("Unknown Holdings [unknown %]")
    ParsedSegment(name='Unknown Holdings', pct=UNKNOWN)
    >>> parse_segment("Some Company")
    ParsedSegment(name='Some Company', pct=UNKNOWN)
    """
    match = _SEGMENT_RE.match(seg.strip())
    if match:
        return ParsedSegment(match.group(1).strip(), percentage(match.group(2)))
    return ParsedSegment(seg.strip())


def _split(record: Mapping[str, Any]) -> List[ParsedSegment]:
    path_str = record.get(PATH_FIELD)
    if not path_str:
        return []
    return [parse_segment(seg) for seg in str(path_str).split(PATH_SEPARATOR)]


# ---------------------------------------------------------------------
# Graphs and chains
# ---------------------------------------------------------------------
def parse_ownership_paths(
    records: Iterable[Mapping[str, Any]],
    target_asset_id: str,
    target_asset_name: str,
) -> Graph:
    """
    Build a deduplicated Graph from records carrying an "Ownership Path".

    Each consecutive pair of segments becomes an owner → owned edge whose
    stake is the one written on the owned segment.  The segment named
    *target_asset_name* gets *target_asset_id* as its id.  Records with
    fewer than two segments are skipped; the first edge seen for a pair
    wins.
    """
    nodes: Dict[str, Node] = {}
    edges: Dict[Tuple[str, str], Edge] = {}
    skipped = 0

    for record in records:
        segments = _split(record)
        if len(segments) < 2:
            skipped += 1
            continue

        for source, target in zip(segments, segments[1:]):
            source_id = sanitize_id(source.name)
            if target.name == target_asset_name:
                target_id = target_asset_id
                target_kind = NodeKind.ASSET
            else:
                target_id = sanitize_id(target.name)
                target_kind = NodeKind.ENTITY

            nodes.setdefault(source_id, Node(source_id, source.name))
            nodes.setdefault(target_id, Node(target_id, target.name, kind=target_kind))
            edges.setdefault((source_id, target_id), Edge(source_id, target_id, target.pct))

    if skipped:
        logger.info(f"Skipped {skipped} ownership records without a usable path")
    return Graph(nodes=tuple(nodes.values()), edges=tuple(edges.values()))

