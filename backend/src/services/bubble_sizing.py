"""Bubble size heuristic derived from label length."""

from __future__ import annotations

import re

WORD_SPLIT_PATTERN = re.compile(r"[\s\-]+")

OVERVIEW_BASE = 48
OVERVIEW_PER_CHAR = 3
OVERVIEW_RANGE = (55.0, 90.0)

EXPANDED_BASE = 70
EXPANDED_PER_CHAR = 4
EXPANDED_RANGE = (70.0, 120.0)


def longest_word_length(label: str) -> int:
    words = [word for word in WORD_SPLIT_PATTERN.split(label or "") if word]
    return max((len(word) for word in words), default=0)


def bubble_size(label: str, index: int, expanded: bool = False) -> float:
    """
    Return the bubble diameter for ``label`` at position ``index``.

    Only the character length of the longest word counts, never rendered glyph
    widths. The ``index`` term adds a small deterministic variation so that
    labels of equal length do not produce identical circles.
    """
    length = longest_word_length(label)
    if expanded:
        base = EXPANDED_BASE + EXPANDED_PER_CHAR * length
        lower, upper = EXPANDED_RANGE
    else:
        base = OVERVIEW_BASE + OVERVIEW_PER_CHAR * length
        lower, upper = OVERVIEW_RANGE
    variety = ((index * 7) % 4) * 4
    return float(min(upper, max(lower, base + variety)))


__all__ = ["bubble_size", "longest_word_length"]
