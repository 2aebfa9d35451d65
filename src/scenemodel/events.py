"""Synchronous publish/subscribe channel for scene events."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Tuple, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeSelected:
    """The selection set was replaced, augmented or cleared."""

    ids: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class NodeHovered:
    """The hover target changed; ``id`` is ``None`` when nothing is hovered."""

    id: str | None = None


@dataclass(frozen=True)
class NodeChanged:
    """A single node was added, removed or edited."""

    id: str


@dataclass(frozen=True)
class SceneChanged:
    """The scene changed as a whole (batch edit, undo/redo, reset or import)."""


@dataclass(frozen=True)
class HistoryChanged:
    can_undo: bool
    can_redo: bool


SceneEvent = Union[NodeSelected, NodeHovered, NodeChanged, SceneChanged, HistoryChanged]
SceneEventListener = Callable[[SceneEvent], None]
Disposer = Callable[[], None]


class EventBus:
    """Deliver events to listeners synchronously, in subscription order."""

    def __init__(self) -> None:
        self._listeners: List[_Subscription] = []

    def subscribe(self, listener: SceneEventListener) -> Disposer:
        """Register ``listener`` and return a callable that unregisters it.

        The disposer is idempotent; calling it more than once has no effect.
        """

        if not callable(listener):
            raise TypeError("listener must be callable")

        token = _Subscription(listener)
        self._listeners.append(token)

        def dispose() -> None:
            try:
                self._listeners.remove(token)
            except ValueError:
                return

        return dispose

    def publish(self, event: SceneEvent) -> None:
        """Deliver ``event`` to every listener registered at call time.

        Exceptions raised by listeners propagate to the publisher.
        """

        logger.debug("Publishing %s to %d listeners", event, len(self._listeners))
        for listener in tuple(self._listeners):
            listener(event)

    def __len__(self) -> int:
        return len(self._listeners)


class _Subscription:
    """Identity wrapper so the same callable can subscribe twice."""

    __slots__ = ("_listener",)

    def __init__(self, listener: SceneEventListener) -> None:
        self._listener = listener

    def __call__(self, event: SceneEvent) -> None:
        self._listener(event)


__all__ = [
    "Disposer",
    "EventBus",
    "HistoryChanged",
    "NodeChanged",
    "NodeHovered",
    "NodeSelected",
    "SceneChanged",
    "SceneEvent",
    "SceneEventListener",
]
