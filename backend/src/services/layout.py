"""
Concept map layout engines.

``layout_overview`` places every cluster on a grid and its concepts on rings
inside the cluster circle; ``layout_expanded`` spreads a single cluster across
the whole canvas. Both finish with the shared collision resolver and return
immutable snapshots. ``compute_layout`` is the memoized entry point.
"""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence, Tuple

from ..models.concept_map import ClusterBounds, ConceptNode, Group, LayoutResult, LayoutSettings
from ..models.note import ConceptNote
from .bubble_sizing import bubble_size
from .collision import Body, resolve_collisions
from .grouping import derive_groups

logger = logging.getLogger(__name__)

TOP = -math.pi / 2

MIN_CLUSTER_RADIUS = 80.0
CLUSTER_BASE_RADIUS = 60.0
CLUSTER_RADIUS_PER_SQRT_CONCEPT = 30.0
CELL_INSET = 50.0

SINGLE_RING_MAX_OVERVIEW = 6
SINGLE_RING_OVERVIEW = 0.6
INNER_RING_OVERVIEW = 0.4
OUTER_RING_OVERVIEW = 0.75

SINGLE_RING_MAX_EXPANDED = 8
SINGLE_RING_EXPANDED = 0.3
INNER_RING_EXPANDED = 0.18
OUTER_RING_EXPANDED = 0.35
INNER_SHARE_EXPANDED = 0.4

Point = Tuple[float, float]


def grid_shape(group_count: int) -> Tuple[int, int]:
    """Return ``(columns, rows)`` for ``group_count`` clusters."""
    if group_count <= 0:
        return 0, 0
    if group_count == 1:
        columns = 1
    elif group_count <= 4:
        columns = 2
    else:
        columns = 3
    return columns, math.ceil(group_count / columns)


def cluster_radius(concept_count: int, cell_width: float, cell_height: float) -> float:
    """Cluster circle radius; the 80 floor wins when a cell is too small for it."""
    preferred = CLUSTER_BASE_RADIUS + math.sqrt(concept_count) * CLUSTER_RADIUS_PER_SQRT_CONCEPT
    upper = min(cell_width, cell_height) / 2 - CELL_INSET
    return max(MIN_CLUSTER_RADIUS, min(preferred, upper))


def ring(cx: float, cy: float, count: int, radius: float, start: float = TOP) -> List[Point]:
    """``count`` points evenly spaced on a circle, the first at angle ``start``."""
    if count <= 0:
        return []
    step = 2 * math.pi / count
    return [
        (cx + radius * math.cos(start + k * step), cy + radius * math.sin(start + k * step))
        for k in range(count)
    ]


def overview_positions(cx: float, cy: float, count: int, radius: float) -> List[Point]:
    if count == 1:
        return [(cx, cy)]
    if count <= SINGLE_RING_MAX_OVERVIEW:
        return ring(cx, cy, count, SINGLE_RING_OVERVIEW * radius)
    inner = count // 2
    outer = count - inner
    return ring(cx, cy, inner, INNER_RING_OVERVIEW * radius) + ring(
        cx, cy, outer, OUTER_RING_OVERVIEW * radius, start=TOP + math.pi / outer
    )


def expanded_positions(cx: float, cy: float, count: int, extent: float) -> List[Point]:
    if count == 1:
        return [(cx, cy)]
    if count <= SINGLE_RING_MAX_EXPANDED:
        return ring(cx, cy, count, SINGLE_RING_EXPANDED * extent)
    inner = max(1, int(count * INNER_SHARE_EXPANDED))
    outer = count - inner
    return ring(cx, cy, inner, INNER_RING_EXPANDED * extent) + ring(
        cx, cy, outer, OUTER_RING_EXPANDED * extent
    )


def _clamp_into_clusters(
    bodies: Sequence[Body], owners: Sequence[ClusterBounds], padding: float
) -> None:
    for body, bounds in zip(bodies, owners):
        dx = body.x - bounds.x
        dy = body.y - bounds.y
        distance = math.hypot(dx, dy)
        limit = max(0.0, bounds.radius - body.size / 2 - padding)
        if distance > limit:
            scale = limit / distance
            body.x = bounds.x + dx * scale
            body.y = bounds.y + dy * scale


def layout_overview(groups: Sequence[Group], settings: LayoutSettings) -> LayoutResult:
    """Lay out all clusters at once; nodes never leave their own cluster circle."""
    if not groups:
        return LayoutResult()

    columns, rows = grid_shape(len(groups))
    cell_width = settings.canvas_width / columns
    cell_height = settings.canvas_height / rows

    placed_groups: List[Group] = []
    bodies: List[Body] = []
    owners: List[ClusterBounds] = []
    members: List[Tuple[Group, str]] = []

    for position, group in enumerate(groups):
        column = position % columns
        row = position // columns
        bounds = ClusterBounds(
            x=(column + 0.5) * cell_width,
            y=(row + 0.5) * cell_height,
            radius=cluster_radius(len(group.concepts), cell_width, cell_height),
        )
        placed = group.model_copy(update={"bounds": bounds})
        placed_groups.append(placed)

        points = overview_positions(bounds.x, bounds.y, len(group.concepts), bounds.radius)
        for index, (label, (x, y)) in enumerate(zip(group.concepts, points)):
            bodies.append(Body(x=x, y=y, size=bubble_size(label, index, expanded=False)))
            owners.append(bounds)
            members.append((placed, label))

    resolve_collisions(
        bodies,
        iterations=settings.overview_iterations,
        margin=settings.overview_margin,
        after_iteration=lambda items: _clamp_into_clusters(
            items, owners, settings.containment_padding
        ),
    )

    return LayoutResult(groups=tuple(placed_groups), nodes=_freeze(bodies, members))


def layout_expanded(group: Group, settings: LayoutSettings) -> LayoutResult:
    """Spread one cluster over the full canvas; no containment applies."""
    cx = settings.canvas_width / 2
    cy = settings.canvas_height / 2
    extent = min(settings.canvas_width, settings.canvas_height)

    points = expanded_positions(cx, cy, len(group.concepts), extent)
    bodies = [
        Body(x=x, y=y, size=bubble_size(label, index, expanded=True))
        for index, (label, (x, y)) in enumerate(zip(group.concepts, points))
    ]
    resolve_collisions(
        bodies, iterations=settings.expanded_iterations, margin=settings.expanded_margin
    )

    members = [(group, label) for label in group.concepts]
    return LayoutResult(groups=(group,), nodes=_freeze(bodies, members))


def node_key(note_id: str, label: str) -> str:
    return f"{note_id}::{label}"


def _freeze(bodies: Iterable[Body], members: Sequence[Tuple[Group, str]]) -> Tuple[ConceptNode, ...]:
    return tuple(
        ConceptNode(
            id=index,
            key=node_key(group.note_id, label),
            label=label,
            x=body.x,
            y=body.y,
            size=body.size,
            group_id=group.id,
            note_id=group.note_id,
            color=group.color,
        )
        for index, (body, (group, label)) in enumerate(zip(bodies, members))
    )


@lru_cache(maxsize=64)
def compute_layout(
    notes: Tuple[ConceptNote, ...],
    expanded_group: Optional[str],
    settings: LayoutSettings,
) -> LayoutResult:
    """
    Group, size and place ``notes``.

    With ``expanded_group`` naming a derived group the expanded engine runs for
    that group alone; otherwise (including an unknown key) the overview engine
    lays out every group. Results are cached on the immutable inputs.
    """
    groups = derive_groups(notes, settings.palette)
    if expanded_group is not None:
        for group in groups:
            if group.key == expanded_group:
                result = layout_expanded(group, settings)
                logger.debug(
                    "Expanded layout computed",
                    extra={"group": group.key, "nodes": len(result.nodes)},
                )
                return result
        logger.info("Expanded group not in snapshot; using overview", extra={"group": expanded_group})

    result = layout_overview(groups, settings)
    logger.debug(
        "Overview layout computed",
        extra={"groups": len(result.groups), "nodes": len(result.nodes)},
    )
    return result


__all__ = [
    "compute_layout",
    "layout_overview",
    "layout_expanded",
    "grid_shape",
    "cluster_radius",
    "ring",
    "overview_positions",
    "expanded_positions",
    "node_key",
]
