"""Scene node model: the tagged union of visual nodes and its factory.

Every node is a pydantic model so construction, mutation merges and JSON
import all share the same validation rules. Field names are snake_case in
Python and camelCase on the wire.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Annotated, Any, Iterator, Literal, Mapping, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    JsonValue,
    TypeAdapter,
    ValidationError,
)
from pydantic.alias_generators import to_camel

from .errors import NodeValidationError

Number = Union[int, float]


def _non_negative(value: Number) -> Number:
    if value < 0:
        raise ValueError("must be zero or a positive number")
    return value


def _positive(value: Number) -> Number:
    if value <= 0:
        raise ValueError("must be a positive number")
    return value


def _unit_interval(value: Number) -> Number:
    if not 0 <= value <= 1:
        raise ValueError("must be between 0 and 1")
    return value


NonNegative = Annotated[Number, AfterValidator(_non_negative)]
Positive = Annotated[Number, AfterValidator(_positive)]
UnitInterval = Annotated[Number, AfterValidator(_unit_interval)]

ROOT_ID = "root"


class NodeType(str, Enum):
    """Variant tags of the nodes that can live below the root."""

    CONTAINER = "container"
    FRAME = "frame"
    GROUP = "group"
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    SHAPE = "shape"
    SLOT = "slot"
    COMPONENT = "component"


class ObjectFit(str, Enum):
    """How bound media fills its box."""

    COVER = "cover"
    CONTAIN = "contain"
    FILL = "fill"
    SCALE_DOWN = "scale-down"
    NONE = "none"

    @classmethod
    def from_hint(cls, value: str | None) -> "ObjectFit":
        """Map a free-form fit hint onto the fit family, defaulting to ``NONE``."""

        if value is None:
            return cls.NONE
        normalised = value.strip().lower().replace("_", "-")
        for member in cls:
            if member.value == normalised:
                return member
        return cls.NONE


class Anchor(str, Enum):
    """Where bound media is anchored inside its box."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"

    @classmethod
    def from_hint(cls, value: str | None) -> "Anchor":
        """Map a free-form position hint onto the anchor family, defaulting to ``CENTER``."""

        if value is None:
            return cls.CENTER
        normalised = value.strip().lower()
        for member in cls:
            if member.value == normalised:
                return member
        return cls.CENTER


class SceneModel(BaseModel):
    """Base model configuration shared by every scene structure."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class Layout(SceneModel):
    x: Number = 0
    y: Number = 0
    width: NonNegative = 100
    height: NonNegative = 100
    rotation: Number = 0
    scale_x: Number = 1
    scale_y: Number = 1


class Border(SceneModel):
    width: NonNegative = 0
    color: str | None = None
    style: Literal["solid", "dashed", "dotted", "none"] = "solid"
    radius: NonNegative | None = None


class Style(SceneModel):
    """Visual styling shared by every positioned node. All fields are optional."""

    background_color: str | None = None
    background_image: str | None = None
    background_size: Literal["cover", "contain", "auto"] | None = None
    border: Border | None = None
    opacity: UnitInterval | None = None
    box_shadow: str | None = None
    filter: str | None = None
    backdrop_filter: str | None = None
    overflow: Literal["visible", "hidden", "scroll", "auto"] | None = None
    z_index: int | None = None


class TextStyle(SceneModel):
    font_family: str | None = None
    font_size: Positive | None = None
    font_weight: int | str | None = None
    font_style: Literal["normal", "italic"] | None = None
    line_height: Number | str | None = None
    letter_spacing: Number | None = None
    text_align: Literal["left", "center", "right", "justify"] | None = None
    color: str | None = None


class AssetReference(SceneModel):
    """Pointer to an asset by registry id or literal URL.

    When ``asset_id`` is set it is authoritative and the URL is looked up at
    render time; ``url`` is only a fallback for literal references.
    """

    asset_id: str | None = None
    url: str | None = None
    alt: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.asset_id and not self.url


class SlotPlacement(SceneModel):
    """Presentation hints derived from a placement intent."""

    fit: ObjectFit = ObjectFit.NONE
    position: Anchor = Anchor.CENTER


class Canvas(SceneModel):
    width: NonNegative = 1280
    height: NonNegative = 800
    background_color: str = "#ffffff"


class PositionedNode(SceneModel):
    """Fields shared by every node variant below the root."""

    id: str = Field(min_length=1)
    name: str | None = None
    visible: bool = True
    locked: bool = False
    metadata: dict[str, JsonValue] = Field(default_factory=dict)
    layout: Layout = Field(default_factory=Layout)
    style: Style = Field(default_factory=Style)


class ContainerNode(PositionedNode):
    type: Literal["container"] = "container"
    tag: Literal["div", "section", "article", "header", "footer", "main", "nav"] = "div"
    children: list[SceneNode] = Field(default_factory=list)


class FrameNode(PositionedNode):
    type: Literal["frame"] = "frame"
    clip_content: bool = True
    children: list[SceneNode] = Field(default_factory=list)


class GroupNode(PositionedNode):
    type: Literal["group"] = "group"
    children: list[SceneNode] = Field(default_factory=list)


class TextNode(PositionedNode):
    type: Literal["text"] = "text"
    content: str = "Text"
    text_style: TextStyle = Field(default_factory=TextStyle)


class ImageNode(PositionedNode):
    type: Literal["image"] = "image"
    asset_ref: AssetReference = Field(default_factory=AssetReference)
    object_fit: ObjectFit = ObjectFit.COVER


class VideoNode(PositionedNode):
    type: Literal["video"] = "video"
    asset_ref: AssetReference = Field(default_factory=AssetReference)
    object_fit: ObjectFit = ObjectFit.COVER
    autoplay: bool = True
    loop: bool = True
    muted: bool = True
    controls: bool = False
    poster: str | None = None


class ShapeNode(PositionedNode):
    type: Literal["shape"] = "shape"
    shape_type: Literal["rectangle", "ellipse", "line", "polygon", "path"] = "rectangle"
    fill: str | None = "#cccccc"
    stroke: str | None = None
    stroke_width: NonNegative | None = None


class SlotNode(PositionedNode):
    type: Literal["slot"] = "slot"
    slot_id: str = ""
    slot_type: str = "generic"
    current_asset: AssetReference | None = None
    placement: SlotPlacement | None = None


class ComponentNode(PositionedNode):
    type: Literal["component"] = "component"
    component_id: str = ""
    props: dict[str, JsonValue] = Field(default_factory=dict)


SceneNode = Annotated[
    Union[
        ContainerNode,
        FrameNode,
        GroupNode,
        TextNode,
        ImageNode,
        VideoNode,
        ShapeNode,
        SlotNode,
        ComponentNode,
    ],
    Field(discriminator="type"),
]


class RootNode(SceneModel):
    """Top of the scene; carries the canvas and the ordered top-level nodes."""

    id: Literal["root"] = ROOT_ID
    type: Literal["root"] = "root"
    canvas: Canvas = Field(default_factory=Canvas)
    children: list[SceneNode] = Field(default_factory=list)


for _model in (ContainerNode, FrameNode, GroupNode, RootNode):
    _model.model_rebuild()

ParentNode = Union[RootNode, ContainerNode, FrameNode, GroupNode]
AnyNode = Union[RootNode, ContainerNode, FrameNode, GroupNode, TextNode, ImageNode,
                VideoNode, ShapeNode, SlotNode, ComponentNode]
MediaNode = Union[ImageNode, VideoNode]

SCENE_NODE_ADAPTER: TypeAdapter[Any] = TypeAdapter(SceneNode)

_NODE_CLASSES: dict[NodeType, type[PositionedNode]] = {
    NodeType.CONTAINER: ContainerNode,
    NodeType.FRAME: FrameNode,
    NodeType.GROUP: GroupNode,
    NodeType.TEXT: TextNode,
    NodeType.IMAGE: ImageNode,
    NodeType.VIDEO: VideoNode,
    NodeType.SHAPE: ShapeNode,
    NodeType.SLOT: SlotNode,
    NodeType.COMPONENT: ComponentNode,
}

_DEFAULT_SIZES: dict[NodeType, tuple[int, int]] = {
    NodeType.CONTAINER: (400, 300),
    NodeType.FRAME: (800, 600),
    NodeType.GROUP: (200, 200),
    NodeType.TEXT: (200, 40),
    NodeType.IMAGE: (300, 200),
    NodeType.VIDEO: (480, 270),
    NodeType.SHAPE: (100, 100),
    NodeType.SLOT: (300, 200),
    NodeType.COMPONENT: (300, 200),
}


def new_node_id() -> str:
    """Return a fresh node identifier."""

    return f"node_{uuid.uuid4().hex[:12]}"


def create_node(
    node_type: NodeType | str,
    overrides: Mapping[str, Any] | None = None,
) -> SceneNode:
    """Build a new node of ``node_type`` with defaults applied.

    Args:
        node_type: The variant tag, for example ``"text"`` or ``NodeType.IMAGE``.
        overrides: Field values replacing the defaults. Keys may use either the
            Python or the camelCase spelling. A partial ``layout`` is merged
            over the variant's default layout rather than replacing it.

    Returns:
        The validated node. A fresh id is generated unless one is supplied.

    Raises:
        NodeValidationError: If the variant is unknown or the overrides do not
            validate.
    """

    try:
        kind = NodeType(node_type)
    except ValueError as exc:
        raise NodeValidationError(f"Unknown node type: {node_type!r}") from exc

    payload: dict[str, Any] = dict(overrides or {})
    declared_type = payload.pop("type", kind.value)
    if declared_type != kind.value:
        raise NodeValidationError(
            f"Override type {declared_type!r} conflicts with requested type '{kind.value}'"
        )

    width, height = _DEFAULT_SIZES[kind]
    layout: dict[str, Any] = {"x": 0, "y": 0, "width": width, "height": height}
    layout_override = payload.pop("layout", None)
    if isinstance(layout_override, Layout):
        layout.update(layout_override.model_dump())
    elif isinstance(layout_override, Mapping):
        layout.update(layout_override)
    elif layout_override is not None:
        raise NodeValidationError("layout override must be a mapping")
    payload["layout"] = layout
    payload.setdefault("id", new_node_id())

    try:
        return _NODE_CLASSES[kind].model_validate(payload)  # type: ignore[return-value]
    except ValidationError as exc:
        raise NodeValidationError(f"Invalid {kind.value} node: {exc}") from exc


def create_root(
    width: Number = 1280,
    height: Number = 800,
    background_color: str = "#ffffff",
) -> RootNode:
    """Return an empty root node with the given canvas."""

    try:
        canvas = Canvas(width=width, height=height, background_color=background_color)
    except ValidationError as exc:
        raise NodeValidationError(f"Invalid canvas: {exc}") from exc
    return RootNode(canvas=canvas)


def has_children(node: object) -> bool:
    """Return ``True`` for nodes that can hold an ordered child list."""

    return isinstance(node, (RootNode, ContainerNode, FrameNode, GroupNode))


def iter_nodes(node: AnyNode, depth: int = 0) -> Iterator[tuple[AnyNode, int]]:
    """Yield ``node`` and its descendants depth-first, pre-order, with depth."""

    yield node, depth
    if has_children(node):
        for child in node.children:  # type: ignore[union-attr]
            yield from iter_nodes(child, depth + 1)


def find_node(root: RootNode, node_id: str) -> AnyNode | None:
    for node, _ in iter_nodes(root):
        if node.id == node_id:
            return node
    return None


def find_parent(root: RootNode, node_id: str) -> ParentNode | None:
    """Return the parent holding ``node_id`` or ``None`` when absent or root."""

    for node, _ in iter_nodes(root):
        if has_children(node) and any(
            child.id == node_id for child in node.children  # type: ignore[union-attr]
        ):
            return node  # type: ignore[return-value]
    return None


def collect_ids(node: AnyNode) -> list[str]:
    """Return the ids of ``node`` and its whole subtree in pre-order."""

    return [entry.id for entry, _ in iter_nodes(node)]


def collect_asset_ids(node: AnyNode) -> list[str]:
    """Return the distinct registry asset ids bound in the subtree, first seen first.

    Image and video references and the assets currently filling slots all
    count. References that only carry a literal URL are skipped.
    """

    asset_ids: dict[str, None] = {}
    for entry, _ in iter_nodes(node):
        if isinstance(entry, (ImageNode, VideoNode)):
            reference: AssetReference | None = entry.asset_ref
        elif isinstance(entry, SlotNode):
            reference = entry.current_asset
        else:
            continue
        if reference is not None and reference.asset_id:
            asset_ids.setdefault(reference.asset_id)
    return list(asset_ids)


def collect_component_ids(node: AnyNode) -> list[str]:
    component_ids: dict[str, None] = {}
    for entry, _ in iter_nodes(node):
        if isinstance(entry, ComponentNode) and entry.component_id:
            component_ids.setdefault(entry.component_id)
    return list(component_ids)


def find_duplicate_ids(node: AnyNode) -> list[str]:
    seen: set[str] = set()
    duplicates: list[str] = []
    for node_id in collect_ids(node):
        if node_id in seen and node_id not in duplicates:
            duplicates.append(node_id)
        seen.add(node_id)
    return duplicates


__all__ = [
    "Anchor",
    "AnyNode",
    "AssetReference",
    "Border",
    "Canvas",
    "ComponentNode",
    "ContainerNode",
    "FrameNode",
    "GroupNode",
    "ImageNode",
    "Layout",
    "MediaNode",
    "NodeType",
    "ObjectFit",
    "ParentNode",
    "PositionedNode",
    "ROOT_ID",
    "RootNode",
    "SCENE_NODE_ADAPTER",
    "SceneNode",
    "ShapeNode",
    "SlotNode",
    "SlotPlacement",
    "Style",
    "TextNode",
    "TextStyle",
    "VideoNode",
    "collect_asset_ids",
    "collect_component_ids",
    "collect_ids",
    "create_node",
    "create_root",
    "find_duplicate_ids",
    "find_node",
    "find_parent",
    "has_children",
    "iter_nodes",
    "new_node_id",
]
