"""Pydantic models for data validation and serialization."""

from .concept_map import (
    ClusterBounds,
    ConceptMapFrame,
    ConceptNode,
    Connection,
    FrameConnection,
    FrameNode,
    Group,
    InteractionEvent,
    LayoutResult,
    LayoutSettings,
    SuggestedConnection,
    ViewMode,
    ViewState,
    ViewTransform,
)
from .note import ConceptExtractionResponse, ConceptNote, NoteSummary

__all__ = [
    "ConceptNote",
    "NoteSummary",
    "ConceptExtractionResponse",
    "LayoutSettings",
    "ClusterBounds",
    "Group",
    "ConceptNode",
    "Connection",
    "SuggestedConnection",
    "LayoutResult",
    "ViewMode",
    "ViewState",
    "InteractionEvent",
    "FrameNode",
    "FrameConnection",
    "ViewTransform",
    "ConceptMapFrame",
]
