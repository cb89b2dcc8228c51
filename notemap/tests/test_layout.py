import math

import pytest

from notemap.graph.layout import (
    LayoutStrategy,
    compute_position,
    layout_positions,
    tree_depth,
    tree_level,
)
from notemap.models import Bounds, Position

BOUNDS = Bounds(1000, 800)


@pytest.mark.parametrize("strategy", list(LayoutStrategy) + [None])
@pytest.mark.parametrize("total", [1, 2, 3, 7, 9, 16, 33])
def test_every_strategy_places_every_node_at_a_finite_point(strategy, total) -> None:
    positions = layout_positions(total, strategy, BOUNDS)
    assert len(positions) == total
    for p in positions:
        assert math.isfinite(p.x) and math.isfinite(p.y)


def test_layout_is_deterministic() -> None:
    for strategy in LayoutStrategy:
        assert layout_positions(11, strategy, BOUNDS) == layout_positions(11, strategy, BOUNDS)


def test_radial_four_nodes_sit_at_quarter_turns() -> None:
    center = BOUNDS.center
    radius = min(BOUNDS.width, BOUNDS.height) * 0.35
    expected_angles = [0.0, math.pi / 2, math.pi, 3 * math.pi / 2]

    for index, angle in enumerate(expected_angles):
        p = compute_position(index, 4, LayoutStrategy.RADIAL, BOUNDS)
        assert p.x == pytest.approx(center.x + radius * math.cos(angle), abs=1e-9)
        assert p.y == pytest.approx(center.y + radius * math.sin(angle), abs=1e-9)
        assert math.hypot(p.x - center.x, p.y - center.y) == pytest.approx(radius)


def test_radial_single_node_uses_angle_zero() -> None:
    p = compute_position(0, 1, LayoutStrategy.RADIAL, BOUNDS)
    assert p.x == pytest.approx(500 + 800 * 0.35)
    assert p.y == pytest.approx(400)


def test_radial_zero_total_does_not_divide_by_zero() -> None:
    p = compute_position(0, 0, LayoutStrategy.RADIAL, BOUNDS)
    assert math.isfinite(p.x)


def test_grid_nine_nodes_form_three_by_three() -> None:
    positions = layout_positions(9, LayoutStrategy.GRID, BOUNDS)
    xs = sorted({round(p.x, 6) for p in positions})
    ys = sorted({round(p.y, 6) for p in positions})
    assert len(xs) == 3
    assert len(ys) == 3
    # Middle cell is centred on the surface.
    assert positions[4].x == pytest.approx(BOUNDS.center.x)
    assert positions[4].y == pytest.approx(BOUNDS.center.y)
    # Row-major order.
    assert positions[1].y == positions[0].y
    assert positions[3].x == positions[0].x


def test_grid_cells_are_centred() -> None:
    p = compute_position(0, 4, LayoutStrategy.GRID, BOUNDS)
    assert p == Position(250, 200)


def test_tree_levels_and_depth() -> None:
    assert [tree_level(i) for i in range(8)] == [0, 1, 1, 2, 2, 2, 2, 3]
    assert [tree_depth(n) for n in (1, 2, 3, 4, 7, 8)] == [1, 2, 2, 3, 3, 4]


def test_tree_slots_nodes_by_level() -> None:
    root = compute_position(0, 3, LayoutStrategy.TREE, BOUNDS)
    left = compute_position(1, 3, LayoutStrategy.TREE, BOUNDS)
    right = compute_position(2, 3, LayoutStrategy.TREE, BOUNDS)

    assert root == Position(500, 200)
    assert left == Position(250, 600)
    assert right == Position(750, 600)


@pytest.mark.parametrize("strategy", [LayoutStrategy.FORCE, None])
def test_force_and_unknown_fall_back_to_center(strategy) -> None:
    assert layout_positions(5, strategy, BOUNDS) == [BOUNDS.center] * 5


def test_from_name() -> None:
    assert LayoutStrategy.from_name(" Grid ") is LayoutStrategy.GRID
    with pytest.raises(ValueError):
        LayoutStrategy.from_name("spiral")
