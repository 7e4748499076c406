"""Pairwise relaxation that pushes overlapping bubbles apart."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, List, Optional

# Below this separation two centers are treated as coincident.
COINCIDENT_EPSILON = 1e-9


@dataclass
class Body:
    """Mutable working copy of a bubble used while a layout is computed."""

    x: float
    y: float
    size: float


def required_distance(a: Body, b: Body, margin: float) -> float:
    return (a.size + b.size) / 2 + margin


def resolve_collisions(
    bodies: List[Body],
    iterations: int,
    margin: float,
    after_iteration: Optional[Callable[[List[Body]], None]] = None,
) -> List[Body]:
    """
    Relax overlaps for a fixed number of passes, mutating ``bodies`` in place.

    Each pass visits every unordered pair once. A pair closer than
    ``(sizeA + sizeB) / 2 + margin`` is pushed apart along its separation
    vector, each body taking half of the overlap. Updates apply immediately, so
    later pairs in the same pass see the new positions.

    The pass count bounds the cost at ``iterations * n^2`` and does not
    guarantee zero residual overlap for crowded inputs.
    """
    count = len(bodies)
    for _ in range(iterations):
        for i in range(count):
            a = bodies[i]
            for j in range(i + 1, count):
                b = bodies[j]
                dx = b.x - a.x
                dy = b.y - a.y
                distance = math.hypot(dx, dy)
                minimum = required_distance(a, b, margin)
                if distance >= minimum:
                    continue
                if distance < COINCIDENT_EPSILON:
                    ux, uy = 1.0, 0.0
                else:
                    ux, uy = dx / distance, dy / distance
                push = (minimum - distance) / 2
                a.x -= ux * push
                a.y -= uy * push
                b.x += ux * push
                b.y += uy * push
        if after_iteration is not None:
            after_iteration(bodies)
    return bodies


def max_overlap(bodies: List[Body], margin: float = 0.0) -> float:
    """Largest remaining intrusion into ``(sizeA + sizeB) / 2 + margin`` (0 if none)."""
    worst = 0.0
    for i in range(len(bodies)):
        for j in range(i + 1, len(bodies)):
            a, b = bodies[i], bodies[j]
            gap = required_distance(a, b, margin) - math.hypot(b.x - a.x, b.y - a.y)
            worst = max(worst, gap)
    return worst


__all__ = ["Body", "resolve_collisions", "required_distance", "max_overlap"]
