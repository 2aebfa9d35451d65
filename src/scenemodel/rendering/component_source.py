"""Render a scene tree to React component source (TSX).

Unlike the markup preview, this output is compiled later, so asset URLs are
not inlined: registry ids are looked up through ``useAssetRegistry`` when the
component runs and slots read from a ``slots`` prop supplied at that time.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple, assert_never

from ..nodes import (
    AnyNode,
    ComponentNode,
    ContainerNode,
    FrameNode,
    GroupNode,
    ImageNode,
    RootNode,
    ShapeNode,
    SlotNode,
    TextNode,
    VideoNode,
    iter_nodes,
)
from .styles import compute_node_style, sanitize_identifier, to_pascal_case, to_style_object

logger = logging.getLogger(__name__)

ASSET_HOOK_IMPORT = "import { useAssetRegistry } from '@/hooks/useAssetRegistry';"
DEFAULT_COMPONENT_NAME = "GeneratedScene"

_COMPONENT_NAME_PATTERN = re.compile(r"^[A-Z][A-Za-z0-9_]*$")
_JSX_ATTRIBUTE_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")
_PLAIN_ATTRIBUTE_VALUE = re.compile(r'^[^"{}<>&\\\n]*$')
_PLAIN_MODULE_PATH = re.compile(r"[^'\\\r\n\u2028\u2029]*")
_JSX_TEXT_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "{": "&#123;",
    "}": "&#125;",
}
_VIDEO_FLAGS = (("autoplay", "autoPlay"), ("loop", "loop"), ("muted", "muted"), ("controls", "controls"))


@dataclass
class _References:
    """Distinct assets and components referenced by a tree, in first-seen order."""

    assets: Dict[str, str] = field(default_factory=dict)
    components: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def collect(cls, root: RootNode) -> "_References":
        references = cls()
        used_assets: set[str] = set()
        used_components: set[str] = set()
        for node, _ in iter_nodes(root):
            if isinstance(node, (ImageNode, VideoNode)) and node.asset_ref.asset_id:
                asset_id = node.asset_ref.asset_id
                if asset_id not in references.assets:
                    base = f"asset_{sanitize_identifier(asset_id).lstrip('_') or 'ref'}"
                    references.assets[asset_id] = _unique(base, used_assets)
            elif isinstance(node, ComponentNode) and node.component_id:
                component_id = node.component_id
                if component_id not in references.components:
                    references.components[component_id] = _unique(
                        to_pascal_case(component_id), used_components
                    )
        return references


def render_component_source(
    root: RootNode,
    component_name: str = DEFAULT_COMPONENT_NAME,
) -> str:
    """Render ``root`` as the source of a default-exported React component.

    Args:
        root: The scene to render.
        component_name: Name of the exported function component.

    Raises:
        ValueError: If ``component_name`` is not a PascalCase identifier.
    """

    if not _COMPONENT_NAME_PATTERN.match(component_name):
        raise ValueError(
            f"component_name must be a PascalCase identifier, got {component_name!r}"
        )

    references = _References.collect(root)
    lines: List[str] = ["import React from 'react';"]
    if references.assets:
        lines.append(ASSET_HOOK_IMPORT)
    for component_id, local_name in references.components.items():
        exported = to_pascal_case(component_id)
        binding = exported if exported == local_name else f"{exported} as {local_name}"
        lines.append(f"import {{ {binding} }} from {_module_path(component_id)};")

    lines.append("")
    lines.append(f"export default function {component_name}({{ slots = {{}} }}) {{")
    if references.assets:
        lines.append("  const { getAsset } = useAssetRegistry();")
        for asset_id, variable in references.assets.items():
            lines.append(f"  const {variable} = getAsset({json.dumps(asset_id)});")
        lines.append("")
    lines.append("  return (")
    lines.append(f"    <div{_attributes(root)}>")
    for child in root.children:
        lines.extend(_render_node(child, references, 6))
    lines.append("    </div>")
    lines.append("  );")
    lines.append("}")

    logger.debug(
        "Rendered component source with %d assets and %d components",
        len(references.assets),
        len(references.components),
    )
    return "\n".join(lines) + "\n"


def escape_jsx_text(value: str) -> str:
    """Escape characters that JSX treats as markup or expression delimiters."""

    return "".join(_JSX_TEXT_ESCAPES.get(char, char) for char in value)


def _render_node(node: AnyNode, references: _References, indent: int) -> List[str]:
    pad = " " * indent

    match node:
        case ContainerNode() | FrameNode() | GroupNode():
            tag = node.tag if isinstance(node, ContainerNode) else "div"
            if not node.children:
                return [f"{pad}<{tag}{_attributes(node)} />"]
            lines = [f"{pad}<{tag}{_attributes(node)}>"]
            for child in node.children:
                lines.extend(_render_node(child, references, indent + 2))
            lines.append(f"{pad}</{tag}>")
            return lines

        case TextNode():
            return [f"{pad}<p{_attributes(node)}>{escape_jsx_text(node.content)}</p>"]

        case ImageNode():
            source = _media_source(node, references)
            if source is None:
                return [f"{pad}<div{_attributes(node)}>{_comment('No asset bound')}</div>"]
            extra = [("src", source), ("alt", _string(node.asset_ref.alt or ""))]
            return [f"{pad}<img{_attributes(node, extra)} />"]

        case VideoNode():
            source = _media_source(node, references)
            if source is None:
                return [f"{pad}<div{_attributes(node)}>{_comment('No asset bound')}</div>"]
            extra = [("src", source)]
            if node.poster:
                extra.append(("poster", _string(node.poster)))
            for flag, prop in _VIDEO_FLAGS:
                if getattr(node, flag):
                    extra.append((prop, None))
            return [f"{pad}<video{_attributes(node, extra)} />"]

        case ShapeNode():
            if node.shape_type == "rectangle":
                return [f"{pad}<div{_attributes(node)} />"]
            comment = _comment(f"{node.shape_type} shape")
            return [f"{pad}<div{_attributes(node)}>{comment}</div>"]

        case SlotNode():
            key = sanitize_identifier(node.slot_id)
            extra = [
                ("data-slot-id", _string(node.slot_id)),
                ("src", f'{{slots.{key}?.url ?? ""}}'),
                ("alt", f'{{slots.{key}?.alt ?? ""}}'),
            ]
            return [f"{pad}<img{_attributes(node, extra)} />"]

        case ComponentNode():
            local_name = references.components.get(node.component_id)
            if local_name is None:
                return [f"{pad}<div{_attributes(node)}>{_comment('Unnamed component')}</div>"]
            extra = _component_props(node.props)
            return [f"{pad}<{local_name}{_attributes(node, extra)} />"]

        case RootNode():
            raise ValueError("The root node cannot be nested inside the scene")

        case _:
            assert_never(node)


def _media_source(node: ImageNode | VideoNode, references: _References) -> str | None:
    reference = node.asset_ref
    if reference.asset_id:
        return f'{{{references.assets[reference.asset_id]}?.url ?? ""}}'
    if reference.url:
        return _string(reference.url)
    return None


def _component_props(props: Mapping[str, Any]) -> List[Tuple[str, str | None]]:
    extra: List[Tuple[str, str | None]] = []
    spread: Dict[str, Any] = {}
    for key, value in props.items():
        if _JSX_ATTRIBUTE_PATTERN.match(key) and not key.startswith("data-node-"):
            extra.append((key, f"{{{json.dumps(value, ensure_ascii=False)}}}"))
        else:
            spread[key] = value
    if spread:
        extra.append((f"{{...{json.dumps(spread, ensure_ascii=False)}}}", None))
    return extra


def _attributes(
    node: AnyNode,
    extra: List[Tuple[str, str | None]] | None = None,
) -> str:
    """Render JSX attributes; ``extra`` values must already be JSX-encoded."""

    pairs: List[Tuple[str, str | None]] = [
        ("data-node-id", _string(node.id)),
        ("data-node-type", _string(node.type)),
    ]
    pairs.extend(extra or [])
    pairs.append(("style", f"{{{to_style_object(compute_node_style(node))}}}"))

    rendered = [name if value is None else f"{name}={value}" for name, value in pairs]
    return " " + " ".join(rendered)


def _string(value: str) -> str:
    """Encode ``value`` as a JSX attribute value."""

    if _PLAIN_ATTRIBUTE_VALUE.match(value):
        return f'"{value}"'
    return f"{{{json.dumps(value, ensure_ascii=False)}}}"


def _module_path(component_id: str) -> str:
    path = f"@/components/{component_id}"
    if _PLAIN_MODULE_PATH.fullmatch(path):
        return f"'{path}'"
    return json.dumps(path)


def _comment(text: str) -> str:
    return "{/* " + text.replace("*/", "* /") + " */}"


def _unique(base: str, used: set[str]) -> str:
    candidate = base
    counter = 2
    while candidate in used:
        candidate = f"{base}{counter}"
        counter += 1
    used.add(candidate)
    return candidate


__all__ = [
    "ASSET_HOOK_IMPORT",
    "DEFAULT_COMPONENT_NAME",
    "escape_jsx_text",
    "render_component_source",
]
