"""Request-scoped dependencies: authenticated user and viewer timezone."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import Header, HTTPException, Request, status

if TYPE_CHECKING:
    from nutrisnap.containers import AppContainer

_BEARER_PREFIX = "bearer "
UNAUTHORIZED_MESSAGE = "Please sign in to continue."


async def require_user(
    request: Request, authorization: str | None = Header(default=None)
) -> UUID:
    """Resolve the bearer token to the current user's id."""
    if not authorization or not authorization.lower().startswith(_BEARER_PREFIX):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED_MESSAGE
        )
    token = authorization[len(_BEARER_PREFIX) :].strip()
    container: AppContainer = request.app.state.container
    user_id = container.token_verifier.verify(token) if token else None
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED_MESSAGE
        )
    return user_id


async def viewer_timezone(
    request: Request, x_timezone: str | None = Header(default=None)
) -> str:
    """Return the viewer's IANA timezone from the X-Timezone header."""
    container: AppContainer = request.app.state.container
    timezone = (x_timezone or "").strip() or container.settings.default_timezone
    if not is_valid_timezone(timezone):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please send a valid timezone like America/Los_Angeles.",
        )
    return timezone


def is_valid_timezone(value: str) -> bool:
    """Return True when ``value`` names a known timezone."""
    try:
        ZoneInfo(value)
    except Exception:
        return False
    return True
