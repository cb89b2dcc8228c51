"""Graph model and layout."""

from .builder import MindMapGraph, build_edges, build_graph, filter_notes
from .layout import LayoutStrategy, compute_position, layout_positions

__all__ = [
    "MindMapGraph",
    "build_edges",
    "build_graph",
    "filter_notes",
    "LayoutStrategy",
    "compute_position",
    "layout_positions",
]
