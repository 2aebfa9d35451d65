"""Reference UI binding that mirrors a manager's observable state."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Callable, Tuple, Type

from .events import Disposer, SceneEvent
from .manager import SceneModelManager
from .nodes import RootNode
from .rendering.component_source import DEFAULT_COMPONENT_NAME

logger = logging.getLogger(__name__)

UpdateCallback = Callable[["SceneBinding", SceneEvent], None]


class SceneBinding:
    """Keep a read-only mirror of a :class:`SceneModelManager` up to date.

    The binding subscribes to the manager's events while attached and copies
    the tree, version, selection, hover and undo/redo availability after every
    event. Used as a context manager it attaches on entry and detaches on
    exit, including when the body raises::

        with SceneBinding(manager) as binding:
            manager.add_node("text")
            assert binding.version == 1

    Commands are issued on :attr:`manager`; the mirror is never written to
    directly.
    """

    def __init__(
        self,
        manager: SceneModelManager,
        on_update: UpdateCallback | None = None,
    ) -> None:
        self._manager = manager
        self._on_update = on_update
        self._dispose: Disposer | None = None
        self.last_event: SceneEvent | None = None
        self._sync()

    @property
    def manager(self) -> SceneModelManager:
        return self._manager

    @property
    def is_attached(self) -> bool:
        return self._dispose is not None

    def attach(self) -> "SceneBinding":
        if self._dispose is None:
            self._dispose = self._manager.subscribe(self._handle)
            self._sync()
            logger.debug("Scene binding attached")
        return self

    def detach(self) -> None:
        if self._dispose is None:
            return
        self._dispose()
        self._dispose = None
        logger.debug("Scene binding detached")

    def render_markup(self) -> str:
        return self._manager.render_markup()

    def render_component_source(self, component_name: str = DEFAULT_COMPONENT_NAME) -> str:
        return self._manager.render_component_source(component_name)

    def __enter__(self) -> "SceneBinding":
        return self.attach()

    def __exit__(
        self,
        exc_type: Type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.detach()

    def _handle(self, event: SceneEvent) -> None:
        self._sync()
        self.last_event = event
        if self._on_update is not None:
            self._on_update(self, event)

    def _sync(self) -> None:
        manager = self._manager
        self.root: RootNode = manager.root
        self.version: int = manager.version
        self.selected_ids: Tuple[str, ...] = manager.selected_ids
        self.hovered_id: str | None = manager.hovered_id
        self.can_undo: bool = manager.can_undo
        self.can_redo: bool = manager.can_redo


__all__ = ["SceneBinding", "UpdateCallback"]
