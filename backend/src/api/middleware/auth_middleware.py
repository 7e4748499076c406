"""User identity dependency helpers."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Annotated, Optional

from fastapi import Header, HTTPException, status

from ...services.config import get_config

USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")


def _unauthorized(message: str, error: str = "unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
    )


@dataclass
class AuthContext:
    """Identity of the caller for vault and session lookups."""

    user_id: str
    local_mode: bool = False


def get_auth_context(
    x_user_id: Annotated[Optional[str], Header(alias="X-User-Id")] = None,
) -> AuthContext:
    """
    Resolve the caller from the ``X-User-Id`` header.

    Without a header, local mode maps the request to the configured default
    user; otherwise the request is rejected.
    """
    if not x_user_id:
        config = get_config()
        if config.enable_local_mode:
            return AuthContext(user_id=config.default_user_id, local_mode=True)
        raise _unauthorized("X-User-Id header required")

    user_id = x_user_id.strip()
    if not USER_ID_PATTERN.match(user_id):
        raise _unauthorized("X-User-Id contains invalid characters", error="invalid_user")
    return AuthContext(user_id=user_id)


__all__ = ["AuthContext", "get_auth_context"]
