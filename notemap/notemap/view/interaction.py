"""Node-click state machine: selection and connect mode."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..models import Edge


class InteractionMode(str, Enum):
    IDLE = "idle"
    NODE_SELECTED = "node_selected"
    CONNECTING = "connecting"


@dataclass(frozen=True)
class InteractionState:
    selected_node: str | None = None
    connecting: bool = False
    connect_source: str | None = None

    def __post_init__(self) -> None:
        if self.connect_source is not None and not self.connecting:
            raise ValueError("connect_source requires connect mode")
        if self.connecting and self.selected_node is not None:
            raise ValueError("selection and connect mode are exclusive")

    @property
    def mode(self) -> InteractionMode:
        if self.connecting:
            return InteractionMode.CONNECTING
        if self.selected_node is not None:
            return InteractionMode.NODE_SELECTED
        return InteractionMode.IDLE


IDLE = InteractionState()


class InteractionController:
    """Routes node clicks to selection or to link creation.

    In connect mode the first click picks the source and the second, on a
    different node, yields the edge to create; connect mode is then left
    whatever the outcome of the link request. Clicking the source again does
    nothing.
    """

    def __init__(self) -> None:
        self.state = IDLE

    def enter_connect_mode(self) -> None:
        self.state = InteractionState(connecting=True)

    def cancel_connect_mode(self) -> None:
        self.state = IDLE

    def toggle_connect_mode(self) -> bool:
        if self.state.connecting:
            self.cancel_connect_mode()
        else:
            self.enter_connect_mode()
        return self.state.connecting

    def clear_selection(self) -> None:
        if not self.state.connecting:
            self.state = IDLE

    def click(self, node_id: str) -> Edge | None:
        """Handle a click on ``node_id``; returns the edge to create, if any."""
        state = self.state

        if not state.connecting:
            if state.selected_node == node_id:
                self.state = IDLE
            else:
                self.state = InteractionState(selected_node=node_id)
            return None

        if state.connect_source is None:
            self.state = InteractionState(connecting=True, connect_source=node_id)
            return None

        if state.connect_source == node_id:
            return None

        self.state = IDLE
        return Edge(state.connect_source, node_id)
