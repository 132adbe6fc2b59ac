"""
ownertrace.cli
==============

Command‑line front end: ``python -m ownertrace.cli``.

Resolve ultimate owners from a JSON graph file::

    $ python -m ownertrace.cli graph.json --start G100000109409

or from GEM "Ownership Path" records (a JSON list)::

    $ python -m ownertrace.cli owners.json --start G100000109409 --asset-name "Plant X"

or straight from the ownership API::

    $ python -m ownertrace.cli --entity E100001000348
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .client import OwnershipClient
from .errors import FetchFailure
from .models import Graph, Resolution
from .parser import PATH_FIELD, parse_ownership_paths
from .resolver import resolve_ultimate_owners
from .settings import LOG_LEVEL


def load_graph(path: Path, start_id: str, asset_name: Optional[str] = None) -> Graph:
    """
    Read *path* as either a graph mapping or a list of Ownership Path records.

    Raises SystemExit with a readable message on any problem.
    """
    if not path.exists():
        raise SystemExit(f"⛔  File not found: {path!s}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SystemExit(f"⛔ invalid JSON in {path!s}: {e}")

    if isinstance(data, dict):
        return Graph.from_dict(data)
    if isinstance(data, list):
        if not asset_name:
            raise SystemExit(f"⛔ {path!s} holds '{PATH_FIELD}' records; pass --asset-name")
        return parse_ownership_paths(data, start_id, asset_name)
    raise SystemExit(f"⛔ unsupported JSON document in {path!s}")


async def _fetch(entity_id: str, max_depth: Optional[int]) -> Graph:
    async with OwnershipClient.from_settings() as oc:
        return await oc.fetch_ownership_graph_above(entity_id, max_depth=max_depth)


def format_resolution(resolution: Resolution) -> str:
    """Plain‑text table of results plus a footer for truncation and issues."""
    lines = [f"Ultimate owners of {resolution.start_id}"]
    if not resolution.results:
        lines.append("  (none)")
    for r in resolution:
        pct = f"{r.effective_ownership:8.3f}%" if r.effective_ownership is not None else "  unknown"
        marker = " *" if r.dead_end else ""
        chain = " <- ".join(step.name for step in r.path)
        lines.append(f"  {pct}  {r.name} [{r.terminal_id}]{marker}  ({r.path_length} links: {chain})")

    if any(r.dead_end for r in resolution):
        lines.append("  * data stops here; may not be a genuine ultimate owner")
    if resolution.truncated:
        lines.append(f"⚠ results may be truncated ({resolution.limit}, "
                     f"{resolution.explored_paths} paths explored)")
    if resolution.issues:
        lines.append(f"⚠ {len(resolution.issues)} data issue(s):")
        for issue in resolution.issues:
            lines.append(f"    {issue.kind}: {issue.source or '?'} -> {issue.target or '?'} {issue.detail}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m ownertrace.cli",
        description="Resolve ultimate owners and their effective ownership.",
    )
    parser.add_argument("graph", nargs="?", help="JSON graph file or list of Ownership Path records")
    parser.add_argument("--start", help="id of the entity or asset to resolve (file mode)")
    parser.add_argument("--entity", help="fetch the graph above this id from the ownership API")
    parser.add_argument("--asset-name", help="asset name used in Ownership Path records")
    parser.add_argument("--max-paths", type=int, default=None, help="max partial paths explored")
    parser.add_argument("--max-path-length", type=int, default=None, help="max links per path")
    parser.add_argument("--max-depth", type=int, default=None, help="max_depth for the API graph request")
    parser.add_argument("--json", action="store_true", help="print the resolution as JSON")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    if args.entity:
        start_id = args.entity
        try:
            graph = asyncio.run(_fetch(args.entity, args.max_depth))
        except FetchFailure as e:
            print(f"⛔ could not fetch ownership graph: {e}", file=sys.stderr)
            return 2
    elif args.graph and args.start:
        start_id = args.start
        graph = load_graph(Path(args.graph), start_id, args.asset_name)
    else:
        parser.error("pass a graph file with --start, or --entity")

    try:
        resolution = resolve_ultimate_owners(
            graph, start_id, max_paths=args.max_paths, max_path_length=args.max_path_length
        )
    except ValueError as e:
        print(f"⛔ {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(resolution.to_dict(), indent=2))
    else:
        print(format_resolution(resolution))
    return 0


if __name__ == "__main__":
    sys.exit(main())
