"""Ephemeral selection and hover state kept outside of the undo history."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from .events import EventBus, NodeHovered, NodeSelected


class SelectionTracker:
    """Track which nodes are selected and which one is hovered.

    Changes are published on the bus but never recorded in history. The
    tracker does not know about the tree; callers validate ids beforehand.
    """

    def __init__(self, bus: EventBus | None = None) -> None:
        self._bus = bus
        self._selected: List[str] = []
        self._hovered: str | None = None

    @property
    def selected_ids(self) -> Tuple[str, ...]:
        return tuple(self._selected)

    @property
    def hovered_id(self) -> str | None:
        return self._hovered

    def select_nodes(self, node_ids: Iterable[str]) -> None:
        """Replace the selection with ``node_ids`` (duplicates collapse)."""

        self._selected = list(dict.fromkeys(node_ids))
        self._publish_selection()

    def add_to_selection(self, node_id: str) -> bool:
        """Add ``node_id`` to the selection.

        Returns:
            ``True`` if the id was added, ``False`` if it was already selected.
        """

        if node_id in self._selected:
            return False
        self._selected.append(node_id)
        self._publish_selection()
        return True

    def clear_selection(self) -> None:
        if not self._selected:
            return
        self._selected = []
        self._publish_selection()

    def set_hovered_node(self, node_id: str | None) -> None:
        if node_id == self._hovered:
            return
        self._hovered = node_id
        if self._bus is not None:
            self._bus.publish(NodeHovered(id=node_id))

    def prune(self, node_ids: Iterable[str]) -> None:
        """Drop references to ``node_ids``, publishing only what changed."""

        dropped = set(node_ids)
        remaining = [node_id for node_id in self._selected if node_id not in dropped]
        if len(remaining) != len(self._selected):
            self._selected = remaining
            self._publish_selection()
        if self._hovered is not None and self._hovered in dropped:
            self.set_hovered_node(None)

    def reset(self) -> None:
        """Clear both selection and hover."""

        self.clear_selection()
        self.set_hovered_node(None)

    def _publish_selection(self) -> None:
        if self._bus is not None:
            self._bus.publish(NodeSelected(ids=tuple(self._selected)))


__all__ = ["SelectionTracker"]
