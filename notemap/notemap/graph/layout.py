"""Closed-form node placement for the mind map.

Every strategy is a pure function of ``(index, total, strategy, bounds)``, so the
same inputs always yield the same position. Nothing here is force-directed:
``FORCE`` is a named variant kept for compatibility and falls through to the
centre-point placement like any unrecognized strategy.
"""

from __future__ import annotations

import math
from enum import Enum

from ..models import Bounds, Position

RADIUS_FACTOR = 0.35


class LayoutStrategy(str, Enum):
    RADIAL = "radial"
    TREE = "tree"
    GRID = "grid"
    FORCE = "force"

    @classmethod
    def from_name(cls, name: str) -> "LayoutStrategy":
        try:
            return cls(name.strip().lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown layout '{name}' (expected one of: {choices})") from None


def _radial(index: int, total: int, bounds: Bounds) -> Position:
    angle = 2 * math.pi * index / max(1, total)
    radius = min(bounds.width, bounds.height) * RADIUS_FACTOR
    center = bounds.center
    return Position(center.x + radius * math.cos(angle), center.y + radius * math.sin(angle))


def _grid(index: int, total: int, bounds: Bounds) -> Position:
    total = max(1, total)
    cols = math.ceil(math.sqrt(total))
    rows = math.ceil(total / cols)
    cell_w = bounds.width / cols
    cell_h = bounds.height / rows
    row, col = divmod(index, cols)
    return Position((col + 0.5) * cell_w, (row + 0.5) * cell_h)


def tree_level(index: int) -> int:
    """Level of ``index`` in a complete binary tree (floor(log2(index + 1)))."""
    return (index + 1).bit_length() - 1


def tree_depth(total: int) -> int:
    """Number of levels needed for ``total`` nodes (ceil(log2(total + 1)))."""
    return max(1, total.bit_length())


def _tree(index: int, total: int, bounds: Bounds) -> Position:
    # Slots by creation order only; edges are not consulted.
    level = tree_level(index)
    slot = index - (2**level - 1)
    slot_w = bounds.width / 2**level
    level_h = bounds.height / tree_depth(max(total, index + 1))
    return Position((slot + 0.5) * slot_w, (level + 0.5) * level_h)


def compute_position(index: int, total: int, strategy: LayoutStrategy | None, bounds: Bounds) -> Position:
    """Position of the ``index``-th of ``total`` nodes in unscaled graph space."""
    if strategy is LayoutStrategy.RADIAL:
        return _radial(index, total, bounds)
    if strategy is LayoutStrategy.GRID:
        return _grid(index, total, bounds)
    if strategy is LayoutStrategy.TREE:
        return _tree(index, total, bounds)
    return bounds.center


def layout_positions(total: int, strategy: LayoutStrategy | None, bounds: Bounds) -> list[Position]:
    """Positions for all nodes, in index order."""
    return [compute_position(i, total, strategy, bounds) for i in range(max(0, total))]
