"""Fetch relationship edges for each concept cluster."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from pydantic import ValidationError

from ..models.concept_map import Connection, Group, SuggestedConnection

logger = logging.getLogger(__name__)

SuggestFn = Callable[[List[str]], Awaitable[List[Any]]]


def _tag(raw_items: Any, group: Group) -> List[Connection]:
    if not isinstance(raw_items, list):
        logger.warning(
            "Relationship suggestions were not a list",
            extra={"note_id": group.note_id, "type": type(raw_items).__name__},
        )
        return []

    connections: List[Connection] = []
    for item in raw_items:
        try:
            suggestion = (
                item
                if isinstance(item, SuggestedConnection)
                else SuggestedConnection.model_validate(item)
            )
        except ValidationError:
            logger.warning("Dropping malformed suggestion", extra={"note_id": group.note_id})
            continue
        connections.append(
            Connection(
                from_label=suggestion.from_label,
                to_label=suggestion.to_label,
                explanation=suggestion.explanation,
                note_id=group.note_id,
            )
        )
    return connections


async def load_group_connections(group: Group, suggest: SuggestFn) -> List[Connection]:
    """
    Return this group's own slice of edges, tagged with its note id.

    Groups with fewer than two concepts are skipped. A failing collaborator
    contributes no edges.
    """
    if len(group.concepts) < 2:
        return []
    try:
        raw_items = await suggest(list(group.concepts))
    except Exception as exc:
        logger.warning(
            "Relationship suggestion failed for group",
            extra={"note_id": group.note_id, "error": str(exc)},
        )
        return []
    return _tag(raw_items, group)


async def load_connections(groups: Sequence[Group], suggest: SuggestFn) -> List[Connection]:
    """Fold over ``groups`` one at a time, concatenating each group's slice."""
    connections: List[Connection] = []
    for group in groups:
        connections = connections + await load_group_connections(group, suggest)
    return connections


class ConnectionLoader:
    """
    Holds the accumulated edge list for one note snapshot.

    Every sweep takes a generation number; when a newer sweep starts or the
    snapshot is invalidated, results from older sweeps are discarded instead of
    overwriting fresher data.
    """

    def __init__(self, suggest: SuggestFn) -> None:
        self._suggest = suggest
        self._generation = 0
        self._connections: List[Connection] = []

    @property
    def connections(self) -> List[Connection]:
        return list(self._connections)

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> None:
        """Forget edges of the previous snapshot and orphan in-flight sweeps."""
        self._generation += 1
        self._connections = []

    async def sweep(self, groups: Sequence[Group]) -> Optional[List[Connection]]:
        """
        Load edges for ``groups`` and publish them if still current.

        Returns the published list, or ``None`` when the sweep was superseded.
        """
        self._generation += 1
        generation = self._generation
        logger.info(
            "Connection sweep started",
            extra={"generation": generation, "groups": len(groups)},
        )

        result = await load_connections(groups, self._suggest)

        if generation != self._generation:
            logger.debug(
                "Discarding stale connection sweep",
                extra={"generation": generation, "latest": self._generation},
            )
            return None

        self._connections = result
        logger.info(
            "Connection sweep finished",
            extra={"generation": generation, "connections": len(result)},
        )
        return list(result)


__all__ = ["ConnectionLoader", "load_connections", "load_group_connections", "SuggestFn"]
