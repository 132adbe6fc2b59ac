"""
ownertrace.effective
====================

Effective (look‑through) ownership along a single path.

The stake of every link is multiplied in as a fraction.  Chains are not
partially quantifiable: one unknown, zero or negative link, or a link
with no stored edge, makes the whole chain ``None``.
"""

from __future__ import annotations

from typing import Optional

from .models import Known, Path
from .relationships import OwnershipIndex


def effective_ownership(path: Path, index: OwnershipIndex) -> Optional[float]:
    """
    Return the effective percentage the last node of *path* holds in the first.

    *path* runs from the owned node upward, so link ``i`` is the edge
    ``path[i + 1] -> path[i]``.  Links are walked from the owner end down.

    Examples
    --------
    >>> from ownertrace.models import Edge, Graph, Known, UNKNOWN
    >>> idx = OwnershipIndex.build(Graph(edges=[
    ...     Edge("A", "B", Known(50.0)), Edge("B", "D", Known(60.0))]))
    >>> effective_ownership(("D", "B", "A"), idx)
    30.0
    """
    if len(path) < 2:
        return None

    # running product kept in percent: 100 % × f1 × f2 × ...
    effective = 100.0
    for i in range(len(path) - 1, 0, -1):
        pct = index.ownership_pct(path[i], path[i - 1])
        if not isinstance(pct, Known) or pct.value <= 0:
            return None
        effective = effective * pct.value / 100.0
    return effective
