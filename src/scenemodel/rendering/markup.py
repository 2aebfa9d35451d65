"""Render a scene tree to static HTML markup for previews."""

from __future__ import annotations

import html
import logging
import re
from typing import List, Sequence, Tuple, assert_never

from ..assets import AssetResolver, NullAssetResolver
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
)
from .styles import StyleDeclaration, compute_node_style, to_inline_css

logger = logging.getLogger(__name__)

_DASH_RUN = re.compile(r"-{2,}")
_EMPTY_SLOT_DECLARATIONS = (
    StyleDeclaration("border", "2px dashed #cccccc"),
    StyleDeclaration("box-sizing", "border-box"),
)


def render_markup(root: RootNode, resolver: AssetResolver | None = None) -> str:
    """Render ``root`` to an HTML fragment.

    Every element carries ``data-node-id`` and ``data-node-type`` so a consumer
    can map clicks back to model nodes. Media sources are resolved through
    ``resolver``; anything that cannot be resolved renders as a placeholder
    instead of failing the whole document.
    """

    active_resolver = resolver or NullAssetResolver()
    lines = [f"<div{_attributes(root)}>"]
    for child in root.children:
        lines.extend(_render_node(child, active_resolver, 2))
    lines.append("</div>")
    logger.debug("Rendered markup for %d top-level nodes", len(root.children))
    return "\n".join(lines)


def _render_node(node: AnyNode, resolver: AssetResolver, indent: int) -> List[str]:
    pad = " " * indent

    match node:
        case ContainerNode() | FrameNode() | GroupNode():
            tag = node.tag if isinstance(node, ContainerNode) else "div"
            lines = [f"{pad}<{tag}{_attributes(node)}>"]
            for child in node.children:
                lines.extend(_render_node(child, resolver, indent + 2))
            lines.append(f"{pad}</{tag}>")
            return lines

        case TextNode():
            content = html.escape(node.content)
            return [f"{pad}<p{_attributes(node)}>{content}</p>"]

        case ImageNode():
            url = resolver.resolve_url(node.asset_ref)
            if url is None:
                return [_missing_asset(node, pad)]
            extra = (("src", url), ("alt", node.asset_ref.alt or ""))
            return [f"{pad}<img{_attributes(node, extra)} />"]

        case VideoNode():
            url = resolver.resolve_url(node.asset_ref)
            if url is None:
                return [_missing_asset(node, pad)]
            media: List[Tuple[str, str | None]] = [("src", url)]
            if node.poster:
                media.append(("poster", node.poster))
            for flag in ("autoplay", "loop", "muted", "controls"):
                if getattr(node, flag):
                    media.append((flag, None))
            return [f"{pad}<video{_attributes(node, media)}></video>"]

        case ShapeNode():
            if node.shape_type == "rectangle":
                return [f"{pad}<div{_attributes(node)}></div>"]
            comment = _comment(f"{node.shape_type} shape")
            return [f"{pad}<div{_attributes(node)}>{comment}</div>"]

        case SlotNode():
            url = resolver.resolve_url(node.current_asset)
            slot_attr = ("data-slot-id", node.slot_id)
            if url is not None:
                alt = node.current_asset.alt if node.current_asset else None
                extra = (slot_attr, ("src", url), ("alt", alt or ""))
                return [f"{pad}<img{_attributes(node, extra)} />"]
            attributes = _attributes(node, (slot_attr,), _EMPTY_SLOT_DECLARATIONS)
            comment = _comment(f"Slot: {node.slot_id}")
            return [f"{pad}<div{attributes}>{comment}</div>"]

        case ComponentNode():
            extra = (("data-component", node.component_id),)
            comment = _comment(f"Component: {node.component_id}")
            return [f"{pad}<div{_attributes(node, extra)}>{comment}</div>"]

        case RootNode():
            raise ValueError("The root node cannot be nested inside the scene")

        case _:
            assert_never(node)


def _missing_asset(node: ImageNode | VideoNode, pad: str) -> str:
    reference = node.asset_ref
    if reference.asset_id:
        extra = (("data-missing-asset", reference.asset_id),)
        comment = _comment(f"Missing asset: {reference.asset_id}")
    else:
        extra = ()
        comment = _comment("No asset bound")
    return f"{pad}<div{_attributes(node, extra)}>{comment}</div>"


def _attributes(
    node: AnyNode,
    extra: Sequence[Tuple[str, str | None]] = (),
    extra_style: Sequence[StyleDeclaration] = (),
) -> str:
    pairs: List[Tuple[str, str | None]] = [
        ("data-node-id", node.id),
        ("data-node-type", node.type),
    ]
    pairs.extend(extra)
    pairs.append(("style", to_inline_css(compute_node_style(node, extra_style))))

    rendered: List[str] = []
    for name, value in pairs:
        if value is None:
            rendered.append(name)
        else:
            rendered.append(f'{name}="{html.escape(value, quote=True)}"')
    return " " + " ".join(rendered)


def _comment(text: str) -> str:
    # Without "<", ">" or a dash run nothing in the text can end the comment.
    safe = _DASH_RUN.sub(
        lambda match: "&#45;" * len(match.group()), html.escape(text, quote=False)
    )
    return f"<!-- {safe} -->"


__all__ = ["render_markup"]
