"""Unit tests for the :mod:`scenemodel.nodes` module."""

import pytest

from scenemodel import (
    Anchor,
    ContainerNode,
    NodeType,
    NodeValidationError,
    ObjectFit,
    RootNode,
    TextNode,
    create_node,
    create_root,
)
from scenemodel.nodes import (
    SCENE_NODE_ADAPTER,
    AssetReference,
    ComponentNode,
    ImageNode,
    SlotNode,
    VideoNode,
    collect_asset_ids,
    collect_component_ids,
    collect_ids,
    find_duplicate_ids,
    find_node,
    find_parent,
    iter_nodes,
)


@pytest.fixture()
def nested_root() -> RootNode:
    return RootNode(
        children=[
            ContainerNode(id="box", children=[TextNode(id="label", content="Hi")]),
            TextNode(id="caption"),
        ]
    )


def test_create_node_applies_variant_defaults() -> None:
    node = create_node("text")

    assert isinstance(node, TextNode)
    assert node.id.startswith("node_")
    assert len(node.id) == len("node_") + 12
    assert node.content == "Text"
    assert (node.layout.x, node.layout.y) == (0, 0)
    assert (node.layout.width, node.layout.height) == (200, 40)
    assert node.style.background_color is None


def test_create_node_generates_unique_ids() -> None:
    ids = {create_node(NodeType.SHAPE).id for _ in range(50)}

    assert len(ids) == 50


def test_create_node_merges_partial_layout_over_defaults() -> None:
    node = create_node("image", {"id": "hero", "layout": {"x": 15}})

    assert node.id == "hero"
    assert node.layout.x == 15
    assert node.layout.width == 300
    assert node.layout.height == 200


def test_create_node_accepts_camel_case_overrides() -> None:
    node = create_node("slot", {"slotId": "hero-image", "slot_type": "product"})

    assert node.slot_id == "hero-image"
    assert node.slot_type == "product"


@pytest.mark.parametrize(
    "node_type, overrides",
    [
        ("root", None),
        ("hologram", None),
        ("text", {"type": "image"}),
        ("text", {"layout": {"width": -1}}),
        ("shape", {"unknownField": 1}),
        ("shape", {"layout": "wide"}),
    ],
)
def test_create_node_rejects_invalid_input(node_type, overrides) -> None:
    with pytest.raises(NodeValidationError):
        create_node(node_type, overrides)


def test_create_root_sets_canvas() -> None:
    root = create_root(800, 600)

    assert root.id == "root"
    assert root.canvas.width == 800
    assert root.canvas.background_color == "#ffffff"
    assert root.children == []

    with pytest.raises(NodeValidationError):
        create_root(-1, 600)


def test_fit_and_anchor_hints_fall_back_for_unknown_values() -> None:
    assert ObjectFit.from_hint("COVER") is ObjectFit.COVER
    assert ObjectFit.from_hint("scale_down") is ObjectFit.SCALE_DOWN
    assert ObjectFit.from_hint("stretch") is ObjectFit.NONE
    assert ObjectFit.from_hint(None) is ObjectFit.NONE
    assert Anchor.from_hint(" Top ") is Anchor.TOP
    assert Anchor.from_hint("middle") is Anchor.CENTER
    assert Anchor.from_hint(None) is Anchor.CENTER


def test_iter_nodes_walks_pre_order_with_depth(nested_root: RootNode) -> None:
    walked = [(node.id, depth) for node, depth in iter_nodes(nested_root)]

    assert walked == [("root", 0), ("box", 1), ("label", 2), ("caption", 1)]
    assert collect_ids(nested_root.children[0]) == ["box", "label"]


def test_find_helpers_locate_nodes_and_parents(nested_root: RootNode) -> None:
    assert find_node(nested_root, "label").content == "Hi"
    assert find_node(nested_root, "missing") is None
    assert find_parent(nested_root, "label").id == "box"
    assert find_parent(nested_root, "box").id == "root"
    assert find_parent(nested_root, "root") is None


def test_find_duplicate_ids_reports_each_repeat_once() -> None:
    root = RootNode(
        children=[TextNode(id="a"), TextNode(id="a"), TextNode(id="a"), TextNode(id="b")]
    )

    assert find_duplicate_ids(root) == ["a"]


def test_collect_asset_and_component_ids_in_first_seen_order() -> None:
    root = RootNode(
        children=[
            ContainerNode(
                id="box",
                children=[
                    VideoNode(id="v1", asset_ref=AssetReference(asset_id="clip")),
                    ComponentNode(id="c1", component_id="card"),
                ],
            ),
            ImageNode(id="i1", asset_ref=AssetReference(asset_id="hero")),
            ImageNode(id="i2", asset_ref=AssetReference(url="https://x/literal.png")),
            SlotNode(id="s1", slot_id="side", current_asset=AssetReference(asset_id="clip")),
            SlotNode(id="s2", slot_id="empty"),
            ComponentNode(id="c2", component_id="card"),
            ComponentNode(id="c3"),
        ]
    )

    assert collect_asset_ids(root) == ["clip", "hero"]
    assert collect_component_ids(root) == ["card"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"componentId": "c", "props": {"k": object()}},
        {"metadata": {"k": object()}},
    ],
)
def test_props_and_metadata_must_be_json_values(overrides) -> None:
    with pytest.raises(NodeValidationError):
        create_node("component", overrides)


def test_discriminated_union_builds_variant_from_wire_form() -> None:
    node = SCENE_NODE_ADAPTER.validate_python(
        {"type": "image", "id": "photo", "assetRef": {"assetId": "a1"}}
    )

    assert isinstance(node, ImageNode)
    assert node.asset_ref.asset_id == "a1"
    assert node.object_fit is ObjectFit.COVER

    payload = node.model_dump(mode="json", by_alias=True)
    assert payload["assetRef"] == {"assetId": "a1", "url": None, "alt": None}
    assert payload["objectFit"] == "cover"
