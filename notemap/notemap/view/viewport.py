"""Pan and zoom state for the mind-map surface."""

from __future__ import annotations

from dataclasses import dataclass, replace

from ..models import ORIGIN, Position

MIN_SCALE = 0.5
MAX_SCALE = 2.0
ZOOM_STEP = 0.1


def clamp_scale(scale: float) -> float:
    # Rounded so repeated 0.1 steps land exactly on the bounds.
    return round(max(MIN_SCALE, min(MAX_SCALE, scale)), 6)


@dataclass(frozen=True)
class ViewportState:
    scale: float = 1.0
    offset: Position = ORIGIN

    def to_screen(self, point: Position) -> Position:
        """Graph space -> screen space: translate(offset) then scale(scale)."""
        return Position(self.offset.x + point.x * self.scale, self.offset.y + point.y * self.scale)

    def to_world(self, point: Position) -> Position:
        """Screen space -> graph space."""
        return Position((point.x - self.offset.x) / self.scale, (point.y - self.offset.y) / self.scale)

    @property
    def svg_transform(self) -> str:
        return f"translate({self.offset.x:g},{self.offset.y:g}) scale({self.scale:g})"


class ViewportController:
    """Owns the viewport state and turns pointer input into transforms.

    Zoom is a plain scale change around the graph origin, not a focal-point zoom;
    pan and zoom are independent.
    """

    def __init__(self, state: ViewportState | None = None) -> None:
        self.state = state or ViewportState()
        self._pan_anchor: Position | None = None

    @property
    def scale(self) -> float:
        return self.state.scale

    @property
    def offset(self) -> Position:
        return self.state.offset

    @property
    def panning(self) -> bool:
        return self._pan_anchor is not None

    def zoom_in(self) -> float:
        self.state = replace(self.state, scale=clamp_scale(self.state.scale + ZOOM_STEP))
        return self.state.scale

    def zoom_out(self) -> float:
        self.state = replace(self.state, scale=clamp_scale(self.state.scale - ZOOM_STEP))
        return self.state.scale

    def zoom_by(self, steps: int) -> float:
        """Apply ``steps`` zoom-in (positive) or zoom-out (negative) steps."""
        for _ in range(abs(steps)):
            if steps > 0:
                self.zoom_in()
            else:
                self.zoom_out()
        return self.state.scale

    def begin_pan(self, pointer: Position, *, on_background: bool = True) -> bool:
        """Start panning; pointer-downs on nodes are left to the node."""
        if not on_background:
            return False
        self._pan_anchor = pointer - self.state.offset
        return True

    def update_pan(self, pointer: Position) -> None:
        if self._pan_anchor is None:
            return
        self.state = replace(self.state, offset=pointer - self._pan_anchor)

    def end_pan(self) -> None:
        self._pan_anchor = None

    def recenter(self) -> None:
        """Drop the pan offset, keeping the zoom level."""
        self.state = replace(self.state, offset=ORIGIN)

    def reset_view(self) -> None:
        self.state = ViewportState()
