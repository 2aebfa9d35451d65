"""Unit tests for the :mod:`scenemodel.rendering.markup` module."""

import pytest

from scenemodel import (
    Anchor,
    AssetReference,
    ComponentNode,
    ContainerNode,
    ImageNode,
    Layout,
    ObjectFit,
    RootNode,
    ShapeNode,
    SlotNode,
    SlotPlacement,
    Style,
    TextNode,
    VideoNode,
    create_root,
    render_markup,
)

ROOT_LINE = (
    '<div data-node-id="root" data-node-type="root" style="position: relative; '
    'width: 800px; height: 600px; background-color: #ffffff; overflow: hidden">'
)


@pytest.fixture()
def root() -> RootNode:
    return create_root(800, 600)


def test_renders_canvas_and_text_with_layout(root: RootNode) -> None:
    root.children = [
        TextNode(
            id="t1",
            content="Hello <b>",
            layout=Layout(x=10, y=10, width=780, height=40),
        )
    ]

    markup = render_markup(root)

    assert markup.splitlines() == [
        ROOT_LINE,
        '  <p data-node-id="t1" data-node-type="text" style="position: absolute; '
        'left: 10px; top: 10px; width: 780px; height: 40px">Hello &lt;b&gt;</p>',
        "</div>",
    ]


def test_nests_children_with_two_space_indentation(root: RootNode) -> None:
    root.children = [
        ContainerNode(id="box", tag="section", children=[TextNode(id="inner")])
    ]

    lines = render_markup(root).splitlines()

    assert lines[1].startswith('  <section data-node-id="box" data-node-type="container"')
    assert lines[2].startswith('    <p data-node-id="inner"')
    assert lines[3] == "  </section>"


def test_image_source_is_resolved_through_resolver(root: RootNode, resolver) -> None:
    root.children = [ImageNode(id="photo", asset_ref=AssetReference(asset_id="a1"))]

    markup = render_markup(root, resolver)

    assert 'src="https://x/img.png"' in markup
    assert "object-fit: cover" in markup


def test_literal_url_is_used_when_no_asset_id(root: RootNode) -> None:
    root.children = [
        ImageNode(id="photo", asset_ref=AssetReference(url="https://cdn/a.png?w=1&h=2"))
    ]

    markup = render_markup(root)

    assert 'src="https://cdn/a.png?w=1&amp;h=2"' in markup


def test_unresolvable_media_renders_placeholder(root: RootNode) -> None:
    root.children = [
        ImageNode(id="photo", asset_ref=AssetReference(asset_id="ghost")),
        VideoNode(id="clip"),
    ]

    markup = render_markup(root)

    assert 'data-missing-asset="ghost"' in markup
    assert "<!-- Missing asset: ghost -->" in markup
    assert "<!-- No asset bound -->" in markup
    assert "<img" not in markup
    assert "<video" not in markup


def test_video_renders_boolean_attributes(root: RootNode) -> None:
    root.children = [
        VideoNode(
            id="clip",
            asset_ref=AssetReference(url="https://x/v.mp4"),
            poster="https://x/poster.png",
        )
    ]

    markup = render_markup(root)

    assert (
        'src="https://x/v.mp4" poster="https://x/poster.png" autoplay loop muted style='
        in markup
    )
    assert "controls" not in markup
    assert "</video>" in markup


def test_shapes_render_box_or_placeholder(root: RootNode) -> None:
    root.children = [
        ShapeNode(id="rect", stroke="#000000", stroke_width=2),
        ShapeNode(id="oval", shape_type="ellipse"),
    ]

    markup = render_markup(root)

    assert "background-color: #cccccc; border: 2px solid #000000" in markup
    assert '<div data-node-id="oval" data-node-type="shape"' in markup
    assert "<!-- ellipse shape -->" in markup


def test_unbound_slot_renders_dashed_box(root: RootNode) -> None:
    root.children = [SlotNode(id="slot", slot_id="hero")]

    markup = render_markup(root)

    assert 'data-slot-id="hero"' in markup
    assert "border: 2px dashed #cccccc" in markup
    assert "<!-- Slot: hero -->" in markup


def test_bound_slot_renders_image_with_placement(root: RootNode, resolver) -> None:
    root.children = [
        SlotNode(
            id="slot",
            slot_id="hero",
            current_asset=AssetReference(asset_id="a1", alt="Product shot"),
            placement=SlotPlacement(fit=ObjectFit.COVER, position=Anchor.TOP),
        )
    ]

    markup = render_markup(root, resolver)

    assert '<img data-node-id="slot" data-node-type="slot" data-slot-id="hero"' in markup
    assert 'src="https://x/img.png" alt="Product shot"' in markup
    assert "object-fit: cover; object-position: top" in markup
    assert "dashed" not in markup


def test_component_renders_opaque_placeholder(root: RootNode) -> None:
    root.children = [ComponentNode(id="cmp", component_id="hero-banner")]

    markup = render_markup(root)

    assert 'data-component="hero-banner"' in markup
    assert "<!-- Component: hero-banner -->" in markup


def test_style_order_and_visibility(root: RootNode) -> None:
    root.children = [
        ContainerNode(
            id="box",
            visible=False,
            layout=Layout(x=0, y=0, width=50, height=50, rotation=45),
            style=Style(background_color="#ff0000", opacity=0.5, z_index=3),
        )
    ]

    markup = render_markup(root)

    assert (
        'style="position: absolute; left: 0px; top: 0px; width: 50px; height: 50px; '
        "transform: rotate(45deg); background-color: #ff0000; opacity: 0.5; "
        'z-index: 3; visibility: hidden"'
    ) in markup


@pytest.mark.parametrize(
    "slot_id",
    ["a-->b", "x---><script>alert(1)</script>", "a---->b", "--!><b>x</b>", "trailing-"],
)
def test_comments_cannot_be_closed_early(root: RootNode, slot_id: str) -> None:
    root.children = [SlotNode(id="slot", slot_id=slot_id)]

    markup = render_markup(root)

    assert markup.count("-->") == 1
    assert markup.count("<!--") == 1
    assert "<script>" not in markup
    assert "<b>" not in markup
    comment = markup[markup.index("<!--") + 4 : markup.index("-->")]
    assert "--" not in comment


def test_comments_keep_single_hyphens_readable(root: RootNode) -> None:
    root.children = [ComponentNode(id="c1", component_id="hero-banner<1>")]

    markup = render_markup(root)

    assert "<!-- Component: hero-banner&lt;1&gt; -->" in markup
