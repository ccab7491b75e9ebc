"""Resolve the request's auth context from its session token."""

from __future__ import annotations

from sqlalchemy import select

from ..database.connection import get_async_session
from ..dbmodels import Users
from ..logging import get_logger
from .context import AuthContext, anonymous_context
from .errors import AuthenticationError
from .session import get_session_tokens

logger = get_logger(__name__)


async def get_auth_context_optional(token: str | None) -> AuthContext:
    """
    Build the auth context for a session token.

    Returns an unauthenticated context when the token is missing, invalid,
    or points at a user that no longer exists.
    """
    if not token:
        return anonymous_context()

    try:
        user_id = get_session_tokens().verify_token(token)
    except AuthenticationError as e:
        logger.info("Ignoring invalid session token", error=str(e))
        return anonymous_context(token)

    async with get_async_session() as session:
        result = await session.execute(select(Users).where(Users.id == user_id))
        user = result.scalar_one_or_none()

    if user is None:
        logger.info("Session token refers to unknown user", user_id=str(user_id))
        return anonymous_context(token)

    return AuthContext(
        user_id=user.id,
        email=user.email,
        permissions=list(user.permissions or []),
        token=token,
    )
