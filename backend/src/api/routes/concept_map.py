"""HTTP API routes for the concept map frame and its interactions."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from ...models.concept_map import ConceptMapFrame, InteractionEvent
from ...services.concept_map_service import SessionRegistry, get_session_registry
from ..middleware import AuthContext, get_auth_context

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/concept-map", response_model=ConceptMapFrame)
async def get_concept_map(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> ConceptMapFrame:
    """Current frame, relaid out if the user's notes changed."""
    return registry.sync(auth.user_id).frame()


@router.post("/api/concept-map/refresh", response_model=ConceptMapFrame)
async def refresh_concept_map(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> ConceptMapFrame:
    """Reload notes and fetch relationship edges for every cluster."""
    logger.info("Concept map refresh requested", extra={"user_id": auth.user_id})
    return await registry.refresh(auth.user_id)


@router.post("/api/concept-map/events", response_model=ConceptMapFrame)
async def apply_concept_map_event(
    event: InteractionEvent,
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> ConceptMapFrame:
    """Apply one pan/zoom/select/expand gesture and return the new frame."""
    return registry.sync(auth.user_id).apply(event)
