"""Style and layout computation shared by every text renderer.

Both the markup and the component-source renderers take their positioning,
sizing and styling from :func:`compute_node_style`, so the two outputs agree
on everything except syntax. Declarations are always produced in the same
order for the same input.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from ..nodes import (
    AnyNode,
    FrameNode,
    ImageNode,
    Layout,
    RootNode,
    ShapeNode,
    SlotNode,
    Style,
    TextNode,
    TextStyle,
    VideoNode,
)

_IDENTIFIER_PATTERN = re.compile(r"[^A-Za-z0-9]")
_WORD_SPLIT_PATTERN = re.compile(r"[-_\s.]+")


@dataclass(frozen=True)
class StyleDeclaration:
    """A single CSS declaration using the kebab-case property name."""

    name: str
    value: str

    @property
    def camel_name(self) -> str:
        head, *rest = self.name.split("-")
        return head + "".join(part[:1].upper() + part[1:] for part in rest)


def format_number(value: float | int) -> str:
    """Render numbers without a trailing ``.0`` so output stays stable."""

    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _px(value: float | int) -> str:
    return f"{format_number(value)}px"


def layout_declarations(layout: Layout) -> List[StyleDeclaration]:
    """Absolute position, size and transform for ``layout``."""

    declarations = [
        StyleDeclaration("position", "absolute"),
        StyleDeclaration("left", _px(layout.x)),
        StyleDeclaration("top", _px(layout.y)),
        StyleDeclaration("width", _px(layout.width)),
        StyleDeclaration("height", _px(layout.height)),
    ]

    transforms: List[str] = []
    if layout.rotation:
        transforms.append(f"rotate({format_number(layout.rotation)}deg)")
    if layout.scale_x != 1 or layout.scale_y != 1:
        transforms.append(
            f"scale({format_number(layout.scale_x)}, {format_number(layout.scale_y)})"
        )
    if transforms:
        declarations.append(StyleDeclaration("transform", " ".join(transforms)))
    return declarations


def style_declarations(style: Style) -> List[StyleDeclaration]:
    declarations: List[StyleDeclaration] = []

    if style.background_color:
        declarations.append(StyleDeclaration("background-color", style.background_color))
    if style.background_image:
        declarations.append(
            StyleDeclaration("background-image", f"url({style.background_image})")
        )
    if style.background_size:
        declarations.append(StyleDeclaration("background-size", style.background_size))

    border = style.border
    if border is not None:
        if border.width:
            declarations.append(StyleDeclaration("border-width", _px(border.width)))
        declarations.append(StyleDeclaration("border-style", border.style))
        if border.color:
            declarations.append(StyleDeclaration("border-color", border.color))
        if border.radius is not None:
            declarations.append(StyleDeclaration("border-radius", _px(border.radius)))

    if style.opacity is not None:
        declarations.append(StyleDeclaration("opacity", format_number(style.opacity)))
    if style.box_shadow:
        declarations.append(StyleDeclaration("box-shadow", style.box_shadow))
    if style.filter:
        declarations.append(StyleDeclaration("filter", style.filter))
    if style.backdrop_filter:
        declarations.append(StyleDeclaration("backdrop-filter", style.backdrop_filter))
    if style.overflow:
        declarations.append(StyleDeclaration("overflow", style.overflow))
    if style.z_index is not None:
        declarations.append(StyleDeclaration("z-index", str(style.z_index)))
    return declarations


def text_declarations(text_style: TextStyle) -> List[StyleDeclaration]:
    declarations: List[StyleDeclaration] = []
    if text_style.color:
        declarations.append(StyleDeclaration("color", text_style.color))
    if text_style.font_family:
        declarations.append(StyleDeclaration("font-family", text_style.font_family))
    if text_style.font_size is not None:
        declarations.append(StyleDeclaration("font-size", _px(text_style.font_size)))
    if text_style.font_weight is not None:
        declarations.append(StyleDeclaration("font-weight", str(text_style.font_weight)))
    if text_style.font_style:
        declarations.append(StyleDeclaration("font-style", text_style.font_style))
    if text_style.line_height is not None:
        value = text_style.line_height
        rendered = value if isinstance(value, str) else format_number(value)
        declarations.append(StyleDeclaration("line-height", rendered))
    if text_style.letter_spacing is not None:
        declarations.append(
            StyleDeclaration("letter-spacing", _px(text_style.letter_spacing))
        )
    if text_style.text_align:
        declarations.append(StyleDeclaration("text-align", text_style.text_align))
    return declarations


def variant_declarations(node: AnyNode) -> List[StyleDeclaration]:
    """Declarations that depend on the node variant rather than shared fields."""

    declarations: List[StyleDeclaration] = []
    if isinstance(node, TextNode):
        declarations.extend(text_declarations(node.text_style))
    elif isinstance(node, (ImageNode, VideoNode)):
        declarations.append(StyleDeclaration("object-fit", node.object_fit.value))
    elif isinstance(node, SlotNode):
        if node.placement is not None:
            declarations.append(StyleDeclaration("object-fit", node.placement.fit.value))
            declarations.append(
                StyleDeclaration("object-position", node.placement.position.value)
            )
    elif isinstance(node, ShapeNode):
        if node.shape_type == "rectangle":
            if node.fill and not node.style.background_color:
                declarations.append(StyleDeclaration("background-color", node.fill))
            if node.stroke and node.style.border is None:
                width = node.stroke_width if node.stroke_width is not None else 1
                declarations.append(
                    StyleDeclaration("border", f"{_px(width)} solid {node.stroke}")
                )
    elif isinstance(node, FrameNode):
        if node.clip_content and not node.style.overflow:
            declarations.append(StyleDeclaration("overflow", "hidden"))
    return declarations


def compute_node_style(
    node: AnyNode,
    extra: Iterable[StyleDeclaration] = (),
) -> Tuple[StyleDeclaration, ...]:
    """Return the full ordered declaration list for ``node``.

    Order: layout, shared style, variant-specific hints, visibility, then any
    ``extra`` declarations supplied by the caller.
    """

    if isinstance(node, RootNode):
        return compute_canvas_style(node) + tuple(extra)

    declarations = layout_declarations(node.layout)
    declarations.extend(style_declarations(node.style))
    declarations.extend(variant_declarations(node))
    if not node.visible:
        declarations.append(StyleDeclaration("visibility", "hidden"))
    declarations.extend(extra)
    return tuple(declarations)


def compute_canvas_style(root: RootNode) -> Tuple[StyleDeclaration, ...]:
    canvas = root.canvas
    return (
        StyleDeclaration("position", "relative"),
        StyleDeclaration("width", _px(canvas.width)),
        StyleDeclaration("height", _px(canvas.height)),
        StyleDeclaration("background-color", canvas.background_color),
        StyleDeclaration("overflow", "hidden"),
    )


def to_inline_css(declarations: Sequence[StyleDeclaration]) -> str:
    """Join declarations into an inline ``style`` attribute value."""

    return "; ".join(f"{entry.name}: {entry.value}" for entry in declarations)


def to_style_object(declarations: Sequence[StyleDeclaration]) -> str:
    """Render declarations as a JSX style object literal body."""

    entries = ", ".join(
        f"{entry.camel_name}: {json.dumps(entry.value, ensure_ascii=False)}"
        for entry in declarations
    )
    return "{ " + entries + " }" if entries else "{}"


def sanitize_identifier(value: str) -> str:
    """Turn an arbitrary id into a safe identifier fragment."""

    cleaned = _IDENTIFIER_PATTERN.sub("_", value)
    if not cleaned or cleaned[0].isdigit():
        cleaned = f"_{cleaned}"
    return cleaned


def to_pascal_case(value: str) -> str:
    parts = [part for part in _WORD_SPLIT_PATTERN.split(value) if part]
    name = "".join(part[:1].upper() + part[1:].lower() for part in parts)
    name = _IDENTIFIER_PATTERN.sub("", name)
    if not name:
        return "Component"
    if name[0].isdigit():
        name = f"Component{name}"
    return name


__all__ = [
    "StyleDeclaration",
    "compute_canvas_style",
    "compute_node_style",
    "format_number",
    "layout_declarations",
    "sanitize_identifier",
    "style_declarations",
    "text_declarations",
    "to_inline_css",
    "to_pascal_case",
    "to_style_object",
    "variant_declarations",
]
