"""Snapshot-based undo/redo history.

The tracker stores states on either side of the live one::

    u3 - u2 - u1 - [ current ] - r1 - r2 - r3

The live state itself is never held here. Callers take a snapshot and
:meth:`HistoryTracker.add` it *before* mutating; adding clears the redo
side, so history stays linear.
"""

from __future__ import annotations

from typing import Generic, TypeVar

__all__ = ["HistoryTracker"]

T = TypeVar("T")


class HistoryTracker(Generic[T]):
    def __init__(self, limit: int | None = None) -> None:
        if limit is not None and limit < 1:
            raise ValueError("history limit must be >= 1")
        self.limit = limit
        self._undo: list[T] = []
        self._redo: list[T] = []

    def __repr__(self) -> str:
        return f"HistoryTracker(undo={len(self._undo)}, redo={len(self._redo)})"

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def add(self, snapshot: T) -> None:
        self._push_undo(snapshot)
        self._redo.clear()

    def reset(self) -> None:
        self._undo.clear()
        self._redo.clear()

    def undo(self, current: T) -> T | None:
        """Return the previous state, or ``None`` when there is nothing to undo."""

        if not self._undo:
            return None
        previous = self._undo.pop()
        self._redo.append(current)
        return previous

    def redo(self, current: T) -> T | None:
        if not self._redo:
            return None
        following = self._redo.pop()
        self._push_undo(current)
        return following

    def _push_undo(self, snapshot: T) -> None:
        self._undo.append(snapshot)
        if self.limit is not None and len(self._undo) > self.limit:
            del self._undo[: len(self._undo) - self.limit]
