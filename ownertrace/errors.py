"""
ownertrace.errors
=================

Exceptions raised by ownertrace.

Only conditions the caller must act on are raised.  Traversal limits and
data‑quality problems are *reported* on :class:`ownertrace.models.Resolution`
instead, so a UI can say "results may be truncated" without treating the
computation as crashed.
"""

from __future__ import annotations

from typing import Optional

__all__ = ["OwnertraceError", "FetchFailure", "ResolutionCancelled"]


class OwnertraceError(Exception):
    """Base class for every ownertrace exception."""


class FetchFailure(OwnertraceError):
    """
    The ownership‑data API was unreachable or answered with bad data.

    Distinct from an empty graph: callers must never treat this as
    "no owners".
    """

    def __init__(self, message: str, status: Optional[int] = None, entity_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.entity_id = entity_id

    @property
    def not_found(self) -> bool:
        return self.status == 404

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.message} (HTTP {self.status})"
        return self.message


class ResolutionCancelled(OwnertraceError):
    """Raised from inside path enumeration once its CancelToken is set."""

    def __init__(self, explored_paths: int = 0):
        super().__init__(f"resolution cancelled after {explored_paths} explored paths")
        self.explored_paths = explored_paths
