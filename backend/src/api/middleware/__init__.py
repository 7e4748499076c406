"""FastAPI dependencies and error handling."""

from .auth_middleware import AuthContext, get_auth_context
from .error_handlers import (
    concept_map_exception_handler,
    error_response,
    http_exception_handler,
    internal_exception_handler,
    register_error_handlers,
    suggester_exception_handler,
    validation_exception_handler,
)

__all__ = [
    "AuthContext",
    "get_auth_context",
    "register_error_handlers",
    "error_response",
    "validation_exception_handler",
    "http_exception_handler",
    "concept_map_exception_handler",
    "suggester_exception_handler",
    "internal_exception_handler",
]
