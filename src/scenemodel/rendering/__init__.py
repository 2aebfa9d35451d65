"""Text renderers for scene trees."""

from .component_source import render_component_source
from .markup import render_markup
from .styles import StyleDeclaration, compute_node_style

__all__ = [
    "render_markup",
    "render_component_source",
    "StyleDeclaration",
    "compute_node_style",
]
