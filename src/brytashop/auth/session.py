"""Session tokens: self-issued JWTs carried in an httpOnly cookie."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt
from fastapi import Request, Response
from jwt.exceptions import InvalidTokenError

from ..config import settings
from ..logging import get_logger
from .errors import AuthenticationError

logger = get_logger(__name__)


class SessionTokens:
    """Issue and verify session JWTs for signed-in users."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        issuer: str = "brytashop",
        audience: str = "brytashop-api",
        max_age_seconds: int = 60 * 60 * 24 * 365,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience
        self.max_age_seconds = max_age_seconds

    def issue_token(self, user_id: UUID) -> str:
        """Issue a new session token for a user."""
        now = datetime.now(UTC)

        payload = {
            "sub": str(user_id),
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "nbf": now,
            "exp": now + timedelta(seconds=self.max_age_seconds),
        }

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> UUID:
        """Verify a session token and return the user ID it was issued for."""
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                audience=self.audience,
                options={
                    "verify_exp": True,
                    "verify_nbf": True,
                    "verify_iat": True,
                },
            )
        except InvalidTokenError as e:
            logger.warning("Session token validation failed", error=str(e))
            raise AuthenticationError("Invalid token") from e

        subject = payload.get("sub")
        if not subject:
            raise AuthenticationError("Missing 'sub' claim in token")

        try:
            return UUID(subject)
        except ValueError as e:
            raise AuthenticationError("Malformed 'sub' claim in token") from e


def get_session_tokens() -> SessionTokens:
    """Build the session token helper from settings."""
    if not settings.app_secret:
        raise AuthenticationError(
            "Session secret is not configured. Set BRYTASHOP_APP_SECRET."
        )

    return SessionTokens(
        secret_key=settings.app_secret,
        algorithm=settings.jwt_algorithm,
        max_age_seconds=settings.session_max_age_seconds,
    )


def extract_token(request: Request) -> str | None:
    """Read the session token from the cookie, falling back to a Bearer header."""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token

    authorization = request.headers.get("authorization")
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:] or None

    return None


def set_session_cookie(response: Response, token: str) -> None:
    """Attach the session token to the response as an httpOnly cookie."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )


def clear_session_cookie(response: Response) -> None:
    """Remove the session cookie from the client."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )
