"""Pan/zoom/selection state machine for the concept map."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..models.concept_map import ConceptNode, InteractionEvent, ViewMode, ViewState

logger = logging.getLogger(__name__)

MIN_ZOOM = 0.4
MAX_ZOOM = 2.0
WHEEL_STEP = 0.1
BUTTON_STEP = 0.15


def clamp_zoom(value: float) -> float:
    return min(MAX_ZOOM, max(MIN_ZOOM, value))


class InteractionController:
    """
    Sole owner of ``ViewState``.

    Every mutation goes through one of the transition methods below; mode
    changes always reset pan, zoom, selection and hover.
    """

    def __init__(self, state: Optional[ViewState] = None) -> None:
        self._state = state or ViewState()

    @property
    def state(self) -> ViewState:
        return self._state.model_copy()

    @property
    def mode(self) -> ViewMode:
        return self._state.mode

    @property
    def expanded_group(self) -> Optional[str]:
        return self._state.expanded_group

    # Mode transitions

    def expand(self, group_key: str) -> bool:
        """Enter expanded mode for ``group_key``; ignored outside overview."""
        if self._state.mode is not ViewMode.OVERVIEW:
            return False
        self._state = ViewState(mode=ViewMode.EXPANDED, expanded_group=group_key)
        logger.debug("Expanded group", extra={"group": group_key})
        return True

    def collapse(self) -> bool:
        """Return to overview ("back"); ignored when already there."""
        if self._state.mode is ViewMode.OVERVIEW:
            return False
        self._state = ViewState()
        return True

    # Pan

    def start_drag(self, x: float, y: float) -> None:
        self._state.dragging = True
        self._state.drag_origin_x = x - self._state.pan_x
        self._state.drag_origin_y = y - self._state.pan_y

    def drag_to(self, x: float, y: float) -> None:
        if not self._state.dragging:
            return
        self._state.pan_x = x - self._state.drag_origin_x
        self._state.pan_y = y - self._state.drag_origin_y

    def end_drag(self) -> None:
        self._state.dragging = False

    # Zoom

    def wheel(self, delta_y: float) -> float:
        """One discrete scroll event: scrolling up zooms in by one step."""
        if delta_y < 0:
            self._state.zoom = clamp_zoom(self._state.zoom + WHEEL_STEP)
        elif delta_y > 0:
            self._state.zoom = clamp_zoom(self._state.zoom - WHEEL_STEP)
        return self._state.zoom

    def zoom_in(self) -> float:
        self._state.zoom = clamp_zoom(self._state.zoom + BUTTON_STEP)
        return self._state.zoom

    def zoom_out(self) -> float:
        self._state.zoom = clamp_zoom(self._state.zoom - BUTTON_STEP)
        return self._state.zoom

    def reset_view(self) -> None:
        self._state.zoom = 1.0
        self._state.pan_x = 0.0
        self._state.pan_y = 0.0

    # Selection

    def select(self, node_key: str) -> Optional[str]:
        """Toggle selection; clicking the selected node again clears it."""
        if self._state.selected == node_key:
            self._state.selected = None
        else:
            self._state.selected = node_key
        return self._state.selected

    def hover(self, node_key: Optional[str]) -> None:
        self._state.hovered = node_key

    def dispatch(self, event: InteractionEvent) -> None:
        """Apply one validated gesture."""
        kind = event.type
        if kind == "expand":
            self.expand(event.group_key)
        elif kind == "collapse":
            self.collapse()
        elif kind == "select":
            self.select(event.node_key)
        elif kind == "hover":
            self.hover(event.node_key)
        elif kind == "drag_start":
            self.start_drag(event.x, event.y)
        elif kind == "drag_move":
            self.drag_to(event.x, event.y)
        elif kind == "drag_end":
            self.end_drag()
        elif kind == "wheel":
            self.wheel(event.delta_y)
        elif kind == "zoom_in":
            self.zoom_in()
        elif kind == "zoom_out":
            self.zoom_out()
        elif kind == "reset_view":
            self.reset_view()

    # Emphasis

    def is_edge_highlighted(self, from_key: str, to_key: str) -> bool:
        """True when either endpoint is the selected or hovered node."""
        focus = {key for key in (self._state.selected, self._state.hovered) if key is not None}
        return from_key in focus or to_key in focus

    def is_edge_dimmed(self, from_key: str, to_key: str) -> bool:
        """True when a selection exists and the edge neither touches it nor is highlighted."""
        selected = self._state.selected
        if selected is None or selected in (from_key, to_key):
            return False
        return not self.is_edge_highlighted(from_key, to_key)

    def is_node_dimmed(self, node: ConceptNode, edges: Iterable[tuple[str, str]]) -> bool:
        """
        True when a selection exists, ``node`` is not it, and no rendered edge
        (given as ``(from_key, to_key)`` pairs) joins the two.
        """
        selected = self._state.selected
        if selected is None or node.key == selected:
            return False
        for from_key, to_key in edges:
            if {from_key, to_key} == {selected, node.key}:
                return False
        return True

    def clear_missing(self, node_keys: set[str]) -> None:
        """Drop selection/hover that no longer refer to a displayed node."""
        if self._state.selected is not None and self._state.selected not in node_keys:
            self._state.selected = None
        if self._state.hovered is not None and self._state.hovered not in node_keys:
            self._state.hovered = None


__all__ = [
    "InteractionController",
    "clamp_zoom",
    "MIN_ZOOM",
    "MAX_ZOOM",
    "WHEEL_STEP",
    "BUTTON_STEP",
]
