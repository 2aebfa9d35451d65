"""Core package for the scene document model."""

from .errors import (
    NodeNotFoundError,
    NodeValidationError,
    SceneModelError,
    SerializationError,
    TransactionError,
)
from .nodes import (
    Anchor,
    AssetReference,
    Canvas,
    ComponentNode,
    ContainerNode,
    FrameNode,
    GroupNode,
    ImageNode,
    Layout,
    NodeType,
    ObjectFit,
    RootNode,
    ShapeNode,
    SlotNode,
    SlotPlacement,
    Style,
    TextNode,
    TextStyle,
    VideoNode,
    create_node,
    create_root,
)
from .assets import (
    AssetResolver,
    ManifestAssetResolver,
    MappingAssetResolver,
    NullAssetResolver,
    ResolvedAsset,
    build_asset_manifest,
    write_asset_manifest,
)
from .events import (
    EventBus,
    HistoryChanged,
    NodeChanged,
    NodeHovered,
    NodeSelected,
    SceneChanged,
)
from .history import HistoryEngine, HistorySnapshot
from .selection import SelectionTracker
from .settings import EditorSettings
from .manager import PlacementIntent, SceneModelManager
from .binding import SceneBinding
from .persistence import FileSceneStore, InMemorySceneStore, SceneStore
from .rendering import render_component_source, render_markup

__all__ = [
    "SceneModelManager",
    "PlacementIntent",
    "SceneBinding",
    "EditorSettings",
    "create_node",
    "create_root",
    "NodeType",
    "RootNode",
    "ContainerNode",
    "FrameNode",
    "GroupNode",
    "TextNode",
    "ImageNode",
    "VideoNode",
    "ShapeNode",
    "SlotNode",
    "ComponentNode",
    "Layout",
    "Style",
    "TextStyle",
    "Canvas",
    "AssetReference",
    "SlotPlacement",
    "ObjectFit",
    "Anchor",
    "AssetResolver",
    "ResolvedAsset",
    "NullAssetResolver",
    "MappingAssetResolver",
    "ManifestAssetResolver",
    "build_asset_manifest",
    "write_asset_manifest",
    "EventBus",
    "NodeSelected",
    "NodeHovered",
    "NodeChanged",
    "SceneChanged",
    "HistoryChanged",
    "HistoryEngine",
    "HistorySnapshot",
    "SelectionTracker",
    "SceneStore",
    "InMemorySceneStore",
    "FileSceneStore",
    "render_markup",
    "render_component_source",
    "SceneModelError",
    "NodeValidationError",
    "NodeNotFoundError",
    "SerializationError",
    "TransactionError",
]
