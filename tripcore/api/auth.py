"""Minimal auth dependency.

Identity is issued elsewhere; this only extracts the caller from the bearer
header. A missing header is an anonymous caller.
"""

import uuid
from typing import Annotated

from fastapi import Header, HTTPException, status

from tripcore.db.context import RequestContext


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from authorization header.

    Accepts "Bearer <user_id>" where user_id is a UUID. The raw token is kept
    on the context so outbound provider calls can forward it.

    Args:
        authorization: Authorization header (e.g., "Bearer <token>")

    Returns:
        RequestContext, anonymous when no header is sent

    Raises:
        HTTPException: If authorization is invalid
    """
    if not authorization:
        return RequestContext(user_id=None)

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:]  # Strip "Bearer "

    try:
        user_id = uuid.UUID(token)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid bearer token (expected user id)",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    return RequestContext(user_id=user_id, access_token=token)
