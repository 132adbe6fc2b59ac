"""
ownertrace
==========

Ultimate‑owner resolution over percentage‑weighted ownership graphs.

Given a snapshot of who owns what (entities, assets, stakes), ownertrace
walks upward from one node and reports every *ultimate owner* together
with the effective stake it holds through its best ownership path.
Cycles, unknown stakes and diamond structures are handled explicitly.

Import structure
----------------
`import ownertrace` is intentionally cheap: only the stdlib‑based
models are imported by default.  NetworkX is pulled in by
:pymod:`ownertrace.relationships`, httpx by :pymod:`ownertrace.client`.

Sub‑modules
~~~~~~~~~~~
- :pymod:`ownertrace.models`         – ``Graph``/``Node``/``Edge`` dataclasses, ``Known``/``UNKNOWN`` stakes, results
- :pymod:`ownertrace.relationships`  – ``OwnershipIndex`` owner ← owned view (NetworkX)
- :pymod:`ownertrace.terminals`      – ultimate‑owner classification
- :pymod:`ownertrace.paths`          – cycle‑safe breadth‑first path enumeration
- :pymod:`ownertrace.effective`      – effective ownership along one path
- :pymod:`ownertrace.resolver`       – ``resolve_ultimate_owners`` entry point
- :pymod:`ownertrace.parser`         – GEM "Ownership Path" strings → ``Graph``
- :pymod:`ownertrace.client`         – async client for the ownership tracing API
- :pymod:`ownertrace.cli`            – ``python -m ownertrace.cli``

Quick start
-----------
>>> from ownertrace.models import Edge, Graph, Known
>>> from ownertrace.resolver import resolve_ultimate_owners
>>> g = Graph(edges=[Edge("HoldCo", "OpCo", Known(80.0))])
>>> [(r.terminal_id, r.effective_ownership) for r in resolve_ultimate_owners(g, "OpCo")]
[('HoldCo', 80.0)]

"""

__all__ = [
    "models",
    "relationships",
    "terminals",
    "paths",
    "effective",
    "resolver",
    "parser",
    "client",
]

__version__ = "0.1.0"
