"""Note-related Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConceptNote(BaseModel):
    """A note as seen by the concept map: identity, text and concept labels."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "biology/photosynthesis.md",
                "title": "Photosynthesis",
                "content": "Plants convert light into chemical energy...",
                "concepts": ["Photosynthesis", "Chlorophyll", "Sunlight"],
            }
        },
    )

    id: str = Field(..., min_length=1, description="Vault-relative note path")
    title: str = Field(..., description="Display title")
    content: str = Field(default="", description="Markdown body")
    concepts: Tuple[str, ...] = Field(
        default=(), description="Concept labels extracted from the note"
    )

    @field_validator("concepts", mode="before")
    @classmethod
    def _coerce_concepts(cls, value):
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return tuple(value)


class NoteSummary(BaseModel):
    """Lightweight representation used for listings."""

    note_path: str
    title: str
    concepts: list[str] = Field(default_factory=list)
    updated: datetime


class ConceptExtractionResponse(BaseModel):
    """Result of running concept extraction on a note."""

    note_path: str
    concepts: list[str]


__all__ = ["ConceptNote", "NoteSummary", "ConceptExtractionResponse"]
