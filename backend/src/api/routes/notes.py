"""HTTP API routes for the note source behind the concept map."""

from __future__ import annotations

from typing import Annotated
from urllib.parse import unquote

from fastapi import APIRouter, Depends, HTTPException

from ...models.note import ConceptExtractionResponse, NoteSummary
from ...services.relationship_suggester import RelationshipSuggester, get_relationship_suggester
from ...services.vault import VaultService
from ..middleware import AuthContext, get_auth_context

router = APIRouter()


def get_vault_service() -> VaultService:
    return VaultService()


@router.get("/api/notes", response_model=list[NoteSummary])
async def list_notes(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    vault_service: Annotated[VaultService, Depends(get_vault_service)],
) -> list[NoteSummary]:
    """List the user's notes with their concept labels."""
    return [
        NoteSummary(
            note_path=note["path"],
            title=note["title"],
            concepts=note["concepts"],
            updated=note["last_modified"],
        )
        for note in vault_service.list_notes(auth.user_id)
    ]


@router.post("/api/notes/{path:path}/concepts", response_model=ConceptExtractionResponse)
async def extract_note_concepts(
    path: str,
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    vault_service: Annotated[VaultService, Depends(get_vault_service)],
    suggester: Annotated[RelationshipSuggester, Depends(get_relationship_suggester)],
) -> ConceptExtractionResponse:
    """Extract concepts from a note's body and store them in its frontmatter."""
    note_path = unquote(path)
    try:
        note = vault_service.read_note(auth.user_id, note_path)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail=f"Note not found: {note_path}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    concepts = await suggester.extract_concepts(note["body"])
    written = vault_service.set_concepts(auth.user_id, note_path, concepts)
    return ConceptExtractionResponse(note_path=note_path, concepts=written["concepts"])
