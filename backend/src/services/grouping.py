"""Partition notes into concept clusters."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from ..models.concept_map import DEFAULT_PALETTE, Group
from ..models.note import ConceptNote


def normalize_concepts(concepts: Iterable[str]) -> Tuple[str, ...]:
    """Strip labels, drop blanks and repeated labels, keep first-seen order."""
    seen: set[str] = set()
    result: List[str] = []
    for raw in concepts:
        if not isinstance(raw, str):
            continue
        label = raw.strip()
        if not label or label in seen:
            continue
        seen.add(label)
        result.append(label)
    return tuple(result)


def derive_groups(
    notes: Iterable[ConceptNote], palette: Sequence[str] = DEFAULT_PALETTE
) -> List[Group]:
    """
    Build one group per note that carries at least one concept.

    Group ids are output positions and colors cycle through ``palette`` in the
    same order, so re-deriving an unchanged snapshot yields identical groups.
    """
    groups: List[Group] = []
    for note in notes:
        concepts = normalize_concepts(note.concepts)
        if not concepts:
            continue
        position = len(groups)
        groups.append(
            Group(
                id=position,
                key=note.id,
                note_id=note.id,
                name=note.title,
                concepts=concepts,
                color=palette[position % len(palette)],
            )
        )
    return groups


__all__ = ["derive_groups", "normalize_concepts"]
