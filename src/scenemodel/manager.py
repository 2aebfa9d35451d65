"""The mutation manager: the single owner of a scene tree and its history."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Tuple

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticSerializationError

from .assets import AssetResolver, NullAssetResolver, build_asset_manifest
from .errors import NodeNotFoundError, NodeValidationError, TransactionError
from .events import Disposer, EventBus, NodeChanged, SceneChanged, SceneEvent, SceneEventListener
from .history import HistoryEngine, HistorySnapshot
from .nodes import (
    ROOT_ID,
    Anchor,
    AnyNode,
    AssetReference,
    ImageNode,
    NodeType,
    ObjectFit,
    PositionedNode,
    RootNode,
    SCENE_NODE_ADAPTER,
    SceneNode,
    SlotNode,
    SlotPlacement,
    TextNode,
    VideoNode,
    collect_asset_ids,
    collect_ids,
    create_node,
    create_root,
    find_duplicate_ids,
    find_node,
    find_parent,
    has_children,
    iter_nodes,
)
from .rendering.component_source import DEFAULT_COMPONENT_NAME
from .rendering.component_source import render_component_source as _render_component_source
from .rendering.markup import render_markup as _render_markup
from .selection import SelectionTracker
from .serializer import dump_root, dump_scene, load_root, load_scene
from .settings import EditorSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacementIntent:
    """Which asset fills which slot, and how it should be fitted."""

    asset_id: str
    slot_id: str
    fit: str | None = None
    position: str | None = None
    opacity: float | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "PlacementIntent":
        """Build an intent from a mapping using camelCase or snake_case keys."""

        asset_id = payload.get("assetId", payload.get("asset_id"))
        slot_id = payload.get("slotId", payload.get("slot_id"))
        if not isinstance(asset_id, str) or not asset_id:
            raise NodeValidationError("Placement intent requires a non-empty 'assetId'")
        if not isinstance(slot_id, str) or not slot_id:
            raise NodeValidationError("Placement intent requires a non-empty 'slotId'")
        return cls(
            asset_id=asset_id,
            slot_id=slot_id,
            fit=payload.get("fit"),
            position=payload.get("position"),
            opacity=payload.get("opacity"),
        )


@dataclass
class _Transaction:
    base: RootNode
    payload: str | None = None
    commands: int = 0


class SceneModelManager:
    """Own a scene tree and apply validated, undoable commands to it.

    Every committed command validates its arguments against a working copy,
    swaps the copy in, bumps :attr:`version`, records one history snapshot and
    publishes one change event. A command that raises leaves the tree, the
    version and the history untouched.

    Selection and hover live beside the tree but outside the history.
    Several commands can be grouped into one edit with :meth:`transaction`.
    """

    def __init__(
        self,
        resolver: AssetResolver | None = None,
        settings: EditorSettings | None = None,
        *,
        width: int | float | None = None,
        height: int | float | None = None,
    ) -> None:
        self._settings = settings or EditorSettings()
        self._resolver = resolver or NullAssetResolver()
        self._bus = EventBus()
        self._history = HistoryEngine(self._bus, limit=self._settings.history_limit)
        self._selection = SelectionTracker(self._bus)
        self._root = self._new_root(width, height)
        self._version = 0
        self._transaction: _Transaction | None = None
        self._history.reset(self._snapshot())

    @property
    def root(self) -> RootNode:
        """A copy of the current tree; edits to it do not affect the scene."""

        return self._root.model_copy(deep=True)

    @property
    def version(self) -> int:
        return self._version

    @property
    def settings(self) -> EditorSettings:
        return self._settings

    @property
    def resolver(self) -> AssetResolver:
        return self._resolver

    @property
    def selected_ids(self) -> Tuple[str, ...]:
        return self._selection.selected_ids

    @property
    def hovered_id(self) -> str | None:
        return self._selection.hovered_id

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def get_node(self, node_id: str) -> AnyNode | None:
        node = find_node(self._root, node_id)
        return node.model_copy(deep=True) if node is not None else None

    def get_nodes_by_type(self, node_type: NodeType | str) -> List[AnyNode]:
        """Return copies of every node of ``node_type`` in pre-order."""

        try:
            kind = NodeType(node_type)
        except ValueError as exc:
            raise NodeValidationError(f"Unknown node type: {node_type!r}") from exc
        return [
            node.model_copy(deep=True)
            for node, _ in iter_nodes(self._root)
            if node.type == kind.value
        ]

    def selected_nodes(self) -> List[AnyNode]:
        nodes = (find_node(self._root, node_id) for node_id in self.selected_ids)
        return [node.model_copy(deep=True) for node in nodes if node is not None]

    def subscribe(self, listener: SceneEventListener) -> Disposer:
        """Register ``listener`` for every event the scene publishes."""

        return self._bus.subscribe(listener)

    def add_child(
        self,
        parent_id: str,
        node: SceneNode | Mapping[str, Any],
        index: int | None = None,
    ) -> str:
        """Insert a copy of ``node`` below ``parent_id`` and return its id.

        Raises:
            NodeNotFoundError: If ``parent_id`` is not in the tree.
            NodeValidationError: If the parent cannot hold children, ``index``
                is out of range or the node's ids collide with existing ones.
        """

        child = _coerce_node(node)
        candidate = self._working_copy()
        parent = _require(candidate, parent_id)
        if not has_children(parent):
            raise NodeValidationError(
                f"Node '{parent_id}' of type '{parent.type}' cannot contain children"
            )

        collisions = set(collect_ids(child)) & set(collect_ids(candidate))
        collisions.update(find_duplicate_ids(child))
        if collisions:
            raise NodeValidationError(
                f"Node ids already in use: {', '.join(sorted(collisions))}"
            )

        _insert(parent.children, child, index)  # type: ignore[union-attr]
        self._commit(candidate, NodeChanged(id=child.id))
        return child.id

    def add_node(
        self,
        node_type: NodeType | str,
        parent_id: str = ROOT_ID,
        overrides: Mapping[str, Any] | None = None,
        *,
        index: int | None = None,
    ) -> str:
        """Create a node with :func:`create_node` and add it in one commit."""

        return self.add_child(parent_id, create_node(node_type, overrides), index)

    def remove_node(self, node_id: str) -> None:
        """Remove ``node_id`` and its subtree; unknown ids are ignored."""

        if node_id == ROOT_ID:
            raise NodeValidationError("The root node cannot be removed")

        candidate = self._working_copy()
        parent = find_parent(candidate, node_id)
        if parent is None:
            logger.debug("Ignoring removal of unknown node '%s'", node_id)
            return

        parent.children = [child for child in parent.children if child.id != node_id]
        self._commit(candidate, NodeChanged(id=node_id))

    def move_node(
        self,
        node_id: str,
        new_parent_id: str,
        index: int | None = None,
    ) -> None:
        """Re-parent ``node_id`` under ``new_parent_id`` at ``index``."""

        if node_id == ROOT_ID:
            raise NodeValidationError("The root node cannot be moved")

        candidate = self._working_copy()
        old_parent = find_parent(candidate, node_id)
        if old_parent is None:
            raise NodeNotFoundError(node_id)
        node = next(child for child in old_parent.children if child.id == node_id)
        new_parent = _require(candidate, new_parent_id)
        if not has_children(new_parent):
            raise NodeValidationError(
                f"Node '{new_parent_id}' of type '{new_parent.type}' cannot contain children"
            )
        if new_parent_id in collect_ids(node):
            raise NodeValidationError(
                f"Cannot move node '{node_id}' into its own subtree"
            )

        old_parent.children = [
            child for child in old_parent.children if child.id != node_id
        ]
        _insert(new_parent.children, node, index)  # type: ignore[union-attr]
        self._commit(candidate, NodeChanged(id=node_id))

    def update_layout(self, node_id: str, partial: Mapping[str, Any]) -> None:
        """Shallow-merge ``partial`` into the node's layout and re-validate."""

        candidate = self._working_copy()
        node = _require_positioned(candidate, node_id)
        node.layout = _merge_model(node.layout, partial, "layout")
        self._commit(candidate, NodeChanged(id=node_id))

    def update_style(self, node_id: str, partial: Mapping[str, Any]) -> None:
        """Shallow-merge ``partial`` into the node's style and re-validate."""

        candidate = self._working_copy()
        node = _require_positioned(candidate, node_id)
        node.style = _merge_model(node.style, partial, "style")
        self._commit(candidate, NodeChanged(id=node_id))

    def bind_asset(
        self,
        node_id: str,
        asset_ref: AssetReference | Mapping[str, Any],
    ) -> None:
        """Bind an asset reference to an image, video or slot node.

        Only the reference is stored. When it names a registry id without a
        URL the resolver is asked for the asset so a missing ``alt`` can be
        filled in; the URL itself is looked up again at render time.
        """

        reference = _coerce_reference(asset_ref)
        candidate = self._working_copy()
        node = _require(candidate, node_id)
        if not isinstance(node, (ImageNode, VideoNode, SlotNode)):
            raise NodeValidationError(
                f"Node '{node_id}' of type '{node.type}' cannot be bound to an asset"
            )

        reference = self._complete_reference(reference)
        if isinstance(node, SlotNode):
            node.current_asset = None if reference.is_empty else reference
        else:
            node.asset_ref = reference
        self._commit(candidate, NodeChanged(id=node_id))

    def apply_placement_intents(
        self,
        intents: Iterable[PlacementIntent | Mapping[str, Any]],
    ) -> None:
        """Fill slots from a batch of placement intents as one undoable edit.

        Every target slot is located before any is changed, so a batch naming
        an unknown slot applies nothing.

        Raises:
            NodeNotFoundError: If an intent names a ``slotId`` with no slot.
            NodeValidationError: If an intent or its opacity is malformed.
        """

        parsed = [_coerce_intent(intent) for intent in intents]
        if not parsed:
            return

        candidate = self._working_copy()
        targets = [(intent, _require_slot(candidate, intent.slot_id)) for intent in parsed]

        for intent, slot in targets:
            slot.current_asset = self._complete_reference(
                AssetReference(asset_id=intent.asset_id)
            )
            slot.placement = SlotPlacement(
                fit=ObjectFit.from_hint(intent.fit),
                position=Anchor.from_hint(intent.position),
            )
            if intent.opacity is not None:
                slot.style = _merge_model(slot.style, {"opacity": intent.opacity}, "style")

        self._commit(candidate, SceneChanged())

    def set_text(self, node_id: str, content: str) -> None:
        if not isinstance(content, str):
            raise NodeValidationError("Text content must be a string")

        candidate = self._working_copy()
        node = _require(candidate, node_id)
        if not isinstance(node, TextNode):
            raise NodeValidationError(
                f"Node '{node_id}' of type '{node.type}' does not hold text"
            )
        node.content = content
        self._commit(candidate, NodeChanged(id=node_id))

    def select_nodes(self, node_ids: Iterable[str]) -> None:
        ids = list(node_ids)
        for node_id in ids:
            _require(self._root, node_id)
        self._selection.select_nodes(ids)

    def add_to_selection(self, node_id: str) -> bool:
        _require(self._root, node_id)
        return self._selection.add_to_selection(node_id)

    def clear_selection(self) -> None:
        self._selection.clear_selection()

    def set_hovered_node(self, node_id: str | None) -> None:
        if node_id is not None:
            _require(self._root, node_id)
        self._selection.set_hovered_node(node_id)

    @contextmanager
    def transaction(self) -> Iterator["SceneModelManager"]:
        """Group the commands issued in the block into a single undoable edit.

        Commands inside the block validate and apply as usual and reads see
        their effect, but they are committed as one edit when the block
        exits::

            with manager.transaction():
                manager.update_layout("title", {"x": 40})
                manager.set_text("title", "Summer sale")

        A block that commits nothing leaves the version untouched. When the
        block raises, every staged change is discarded and the exception
        propagates.

        Raises:
            TransactionError: If a transaction is already open.
        """

        if self._transaction is not None:
            raise TransactionError("A transaction is already open")

        transaction = _Transaction(base=self._root)
        self._transaction = transaction
        try:
            yield self
        except BaseException:
            self._transaction = None
            self._root = transaction.base
            self._prune_selection()
            logger.debug("Rolled back transaction with %d staged commands", transaction.commands)
            raise

        self._transaction = None
        if transaction.payload is None:
            return
        self._prune_selection()
        self._version += 1
        self._history.commit(HistorySnapshot(payload=transaction.payload, version=self._version))
        logger.debug(
            "Committed transaction of %d commands at version %d",
            transaction.commands,
            self._version,
        )
        self._bus.publish(SceneChanged())

    def undo(self) -> bool:
        """Restore the previous snapshot; return ``False`` when there is none."""

        self._ensure_no_transaction("undo")
        snapshot = self._history.undo()
        if snapshot is None:
            return False
        self._restore(snapshot)
        return True

    def redo(self) -> bool:
        """Re-apply the snapshot undone last; return ``False`` when there is none."""

        self._ensure_no_transaction("redo")
        snapshot = self._history.redo()
        if snapshot is None:
            return False
        self._restore(snapshot)
        return True

    def to_json(self, *, indent: int | None = 2) -> str:
        return dump_scene(self._root, self._version, indent=indent)

    def from_json(self, text: str) -> None:
        """Replace the scene with a serialized document.

        The document is fully validated before anything changes. On success
        history and selection are cleared and the stored version is restored.

        Raises:
            SerializationError: If ``text`` is not a valid scene document.
        """

        self._ensure_no_transaction("import")
        root, version = load_scene(text)
        self._root = root
        self._version = version
        self._selection.reset()
        self._history.reset(self._snapshot())
        logger.debug(
            "Imported scene with %d nodes at version %d",
            len(collect_ids(root)) - 1,
            version,
        )
        self._bus.publish(SceneChanged())

    def reset(
        self,
        width: int | float | None = None,
        height: int | float | None = None,
    ) -> None:
        """Start over with an empty canvas at version zero."""

        self._ensure_no_transaction("reset")
        self._root = self._new_root(width, height)
        self._version = 0
        self._selection.reset()
        self._history.reset(self._snapshot())
        logger.debug("Reset scene to %sx%s canvas", self._root.canvas.width, self._root.canvas.height)
        self._bus.publish(SceneChanged())

    def render_markup(self) -> str:
        return _render_markup(self._root, self._resolver)

    def render_component_source(self, component_name: str = DEFAULT_COMPONENT_NAME) -> str:
        return _render_component_source(self._root, component_name)

    def asset_manifest(self) -> Dict[str, Any]:
        """Describe the registry assets the scene references as an asset manifest."""

        return build_asset_manifest(collect_asset_ids(self._root), self._resolver)

    def _new_root(self, width: int | float | None, height: int | float | None) -> RootNode:
        return create_root(
            width if width is not None else self._settings.canvas_width,
            height if height is not None else self._settings.canvas_height,
            self._settings.canvas_background,
        )

    def _working_copy(self) -> RootNode:
        return self._root.model_copy(deep=True)

    def _snapshot(self) -> HistorySnapshot:
        return HistorySnapshot(payload=_serialize(self._root), version=self._version)

    def _commit(self, candidate: RootNode, event: SceneEvent) -> None:
        # Nothing is swapped in until the candidate serializes.
        payload = _serialize(candidate)
        self._root = candidate

        if self._transaction is not None:
            self._transaction.payload = payload
            self._transaction.commands += 1
            logger.debug("Staged %s in open transaction", event)
            return

        self._prune_selection()
        self._version += 1
        self._history.commit(HistorySnapshot(payload=payload, version=self._version))
        logger.debug("Committed %s at version %d", event, self._version)
        self._bus.publish(event)

    def _ensure_no_transaction(self, action: str) -> None:
        if self._transaction is not None:
            raise TransactionError(f"Cannot {action} while a transaction is open")

    def _restore(self, snapshot: HistorySnapshot) -> None:
        self._root = load_root(snapshot.payload)
        self._prune_selection()
        self._version += 1
        logger.debug(
            "Restored snapshot from version %d as version %d",
            snapshot.version,
            self._version,
        )
        self._bus.publish(SceneChanged())

    def _prune_selection(self) -> None:
        present = set(collect_ids(self._root))
        referenced = list(self._selection.selected_ids)
        if self._selection.hovered_id is not None:
            referenced.append(self._selection.hovered_id)
        missing = [node_id for node_id in referenced if node_id not in present]
        if missing:
            self._selection.prune(missing)

    def _complete_reference(self, reference: AssetReference) -> AssetReference:
        if not reference.asset_id or reference.url:
            return reference
        resolved = self._resolver.resolve(reference.asset_id)
        if resolved is None:
            logger.warning(
                "Binding unresolved asset '%s'; it will render as a placeholder",
                reference.asset_id,
            )
            return reference
        if reference.alt is None and resolved.alt is not None:
            return reference.model_copy(update={"alt": resolved.alt})
        return reference


def _serialize(root: RootNode) -> str:
    try:
        return dump_root(root)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise NodeValidationError(f"Scene contains values that cannot be serialized: {exc}") from exc


def _require(root: RootNode, node_id: str) -> AnyNode:
    node = find_node(root, node_id)
    if node is None:
        raise NodeNotFoundError(node_id)
    return node


def _require_positioned(root: RootNode, node_id: str) -> PositionedNode:
    node = _require(root, node_id)
    if isinstance(node, RootNode):
        raise NodeValidationError("The root node has a canvas instead of layout and style")
    return node


def _require_slot(root: RootNode, slot_id: str) -> SlotNode:
    for node, _ in iter_nodes(root):
        if isinstance(node, SlotNode) and node.slot_id == slot_id:
            return node
    raise NodeNotFoundError(slot_id, f"No slot with slotId '{slot_id}' exists")


def _insert(children: List[Any], child: SceneNode, index: int | None) -> None:
    if index is None:
        children.append(child)
        return
    if isinstance(index, bool) or not isinstance(index, int):
        raise NodeValidationError("index must be an integer")
    if not 0 <= index <= len(children):
        raise NodeValidationError(
            f"index {index} is out of range for {len(children)} children"
        )
    children.insert(index, child)


def _coerce_node(node: SceneNode | Mapping[str, Any]) -> SceneNode:
    if isinstance(node, RootNode):
        raise NodeValidationError("A root node cannot be added as a child")
    if isinstance(node, PositionedNode):
        return node.model_copy(deep=True)  # type: ignore[return-value]
    if isinstance(node, Mapping):
        try:
            return SCENE_NODE_ADAPTER.validate_python(dict(node))
        except ValidationError as exc:
            raise NodeValidationError(f"Invalid node: {exc}") from exc
    raise NodeValidationError(f"Expected a scene node, got {type(node).__name__}")


def _coerce_reference(asset_ref: AssetReference | Mapping[str, Any]) -> AssetReference:
    if isinstance(asset_ref, AssetReference):
        return asset_ref.model_copy()
    if isinstance(asset_ref, Mapping):
        try:
            return AssetReference.model_validate(dict(asset_ref))
        except ValidationError as exc:
            raise NodeValidationError(f"Invalid asset reference: {exc}") from exc
    raise NodeValidationError(
        f"Expected an asset reference, got {type(asset_ref).__name__}"
    )


def _coerce_intent(intent: PlacementIntent | Mapping[str, Any]) -> PlacementIntent:
    if isinstance(intent, PlacementIntent):
        return intent
    if isinstance(intent, Mapping):
        return PlacementIntent.from_mapping(intent)
    raise NodeValidationError(f"Expected a placement intent, got {type(intent).__name__}")


def _merge_model(model: BaseModel, partial: Mapping[str, Any], label: str) -> Any:
    """Return a re-validated copy of ``model`` with ``partial`` merged over it.

    Keys may use the Python field name or its camelCase alias.
    """

    if not isinstance(partial, Mapping):
        raise NodeValidationError(f"{label} update must be a mapping")

    fields = type(model).model_fields
    aliases = {to_camel(name): name for name in fields}
    data = model.model_dump()
    for key, value in partial.items():
        name = key if key in fields else aliases.get(key)
        if name is None:
            raise NodeValidationError(f"Unknown {label} field: {key!r}")
        data[name] = value

    try:
        return type(model).model_validate(data)
    except ValidationError as exc:
        raise NodeValidationError(f"Invalid {label}: {exc}") from exc


__all__ = ["PlacementIntent", "SceneModelManager"]
