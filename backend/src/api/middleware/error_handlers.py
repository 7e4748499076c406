"""FastAPI exception handlers producing the shared error envelope."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...services.concept_map_service import ConceptMapError
from ...services.relationship_suggester import RelationshipSuggesterError

logger = logging.getLogger(__name__)

DEFAULT_ERRORS: Dict[int, Tuple[str, str]] = {
    status.HTTP_400_BAD_REQUEST: ("validation_error", "Invalid request payload"),
    status.HTTP_401_UNAUTHORIZED: ("unauthorized", "Authorization required"),
    status.HTTP_404_NOT_FOUND: ("not_found", "Resource not found"),
    status.HTTP_502_BAD_GATEWAY: ("upstream_error", "Language model request failed"),
    status.HTTP_500_INTERNAL_SERVER_ERROR: ("internal_error", "Internal server error"),
}


def _normalize_error(
    status_code: int, detail: Any
) -> Tuple[str, str, Optional[Dict[str, Any]]]:
    default_error, default_message = DEFAULT_ERRORS.get(
        status_code, DEFAULT_ERRORS[status.HTTP_500_INTERNAL_SERVER_ERROR]
    )
    if isinstance(detail, dict):
        extra = detail.get("detail")
        if extra is None:
            extra = {
                k: v for k, v in detail.items() if k not in {"error", "message", "detail"}
            } or None
        return detail.get("error", default_error), detail.get("message", default_message), extra
    if isinstance(detail, str) and detail:
        return default_error, detail, None
    return default_error, default_message, None


def error_response(status_code: int, detail: Any) -> JSONResponse:
    error, message, extra = _normalize_error(status_code, detail)
    return JSONResponse(
        status_code=status_code, content={"error": error, "message": message, "detail": extra}
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return error_response(status.HTTP_400_BAD_REQUEST, {"detail": {"errors": errors}})


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(exc.status_code, exc.detail)


async def concept_map_exception_handler(request: Request, exc: ConceptMapError) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, {"error": "not_found", "message": exc.message})


async def suggester_exception_handler(
    request: Request, exc: RelationshipSuggesterError
) -> JSONResponse:
    logger.warning("Language model request failed: %s", exc.message)
    return error_response(
        status.HTTP_502_BAD_GATEWAY,
        {"message": exc.message, "detail": exc.details or None},
    )


async def internal_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, None)


def register_error_handlers(app: FastAPI) -> None:
    """Attach shared exception handlers to the FastAPI application."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(ConceptMapError, concept_map_exception_handler)
    app.add_exception_handler(RelationshipSuggesterError, suggester_exception_handler)
    app.add_exception_handler(Exception, internal_exception_handler)


__all__ = [
    "register_error_handlers",
    "error_response",
    "validation_exception_handler",
    "http_exception_handler",
    "concept_map_exception_handler",
    "suggester_exception_handler",
    "internal_exception_handler",
]
