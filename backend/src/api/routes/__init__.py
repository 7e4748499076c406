"""HTTP API route handlers."""

from . import concept_map, notes

__all__ = ["concept_map", "notes"]
