"""Undo/redo history built from whole-scene snapshots."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List

from .events import EventBus, HistoryChanged

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


@dataclass(frozen=True)
class HistorySnapshot:
    """A serialized copy of the scene root and the version it was captured at."""

    payload: str
    version: int


class HistoryEngine:
    """Track past and future snapshots around the current one.

    ``commit`` pushes the current snapshot onto the past stack and clears the
    future stack. ``undo`` and ``redo`` move the current snapshot between the
    two stacks. Every transition publishes :class:`HistoryChanged` on the bus.
    The past stack holds at most ``limit`` entries; the oldest drop first.
    """

    def __init__(
        self,
        bus: EventBus | None = None,
        *,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        if not isinstance(limit, int) or limit < 1:
            raise ValueError("limit must be a positive integer")
        self._bus = bus
        self._limit = limit
        self._past: Deque[HistorySnapshot] = deque(maxlen=limit)
        self._future: List[HistorySnapshot] = []
        self._current: HistorySnapshot | None = None

    @property
    def current(self) -> HistorySnapshot | None:
        return self._current

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def depth(self) -> tuple[int, int]:
        """Return the sizes of the past and future stacks."""

        return len(self._past), len(self._future)

    def commit(self, snapshot: HistorySnapshot) -> None:
        """Make ``snapshot`` current and discard any redoable state."""

        if self._current is not None:
            self._past.append(self._current)
        self._current = snapshot
        self._future.clear()
        self._publish()

    def undo(self) -> HistorySnapshot | None:
        """Step back one snapshot.

        Returns:
            The snapshot that became current, or ``None`` when there is nothing
            to undo (in which case no event is published).
        """

        if not self._past:
            return None
        if self._current is not None:
            self._future.append(self._current)
        self._current = self._past.pop()
        logger.debug("Undo to snapshot at version %d", self._current.version)
        self._publish()
        return self._current

    def redo(self) -> HistorySnapshot | None:
        """Step forward one snapshot, mirroring :meth:`undo`."""

        if not self._future:
            return None
        if self._current is not None:
            self._past.append(self._current)
        self._current = self._future.pop()
        logger.debug("Redo to snapshot at version %d", self._current.version)
        self._publish()
        return self._current

    def reset(self, snapshot: HistorySnapshot | None = None) -> None:
        """Forget all past and future snapshots and start again from ``snapshot``."""

        self._past.clear()
        self._future.clear()
        self._current = snapshot
        self._publish()

    def _publish(self) -> None:
        if self._bus is not None:
            self._bus.publish(
                HistoryChanged(can_undo=self.can_undo, can_redo=self.can_redo)
            )


__all__ = ["DEFAULT_HISTORY_LIMIT", "HistoryEngine", "HistorySnapshot"]
