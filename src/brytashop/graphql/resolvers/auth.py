from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import strawberry
from sqlalchemy import select

from ...auth.context import AuthContext, anonymous_context
from ...auth.passwords import hash_password, verify_password
from ...auth.session import clear_session_cookie, get_session_tokens, set_session_cookie
from ...config import settings
from ...database.connection import get_async_session
from ...dbmodels import Users
from ...logging import get_logger
from ...mail import get_mail_transport, make_a_nice_email
from ..access_control import get_auth_context_from_info, set_auth_context
from ..types.common import SuccessMessage
from .user import convert_db_to_graphql_user

if TYPE_CHECKING:
    from ..mutations.root import SignupInput
    from ..types.user import User

logger = get_logger(__name__)

INVALID_RESET_TOKEN_MESSAGE = "This token is either invalid or expired!"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _start_session(info: strawberry.Info, user: Users) -> None:
    """Issue a session token for the user and set it as the response cookie."""
    token = get_session_tokens().issue_token(user.id)

    response = info.context.get("response")
    if response is None:
        logger.error("Response not found in GraphQL context; session cookie not set")
    else:
        set_session_cookie(response, token)

    set_auth_context(
        info,
        AuthContext(
            user_id=user.id,
            email=user.email,
            permissions=list(user.permissions or []),
            token=token,
        ),
    )


async def resolve_current_user(info: strawberry.Info) -> User | None:
    """Resolve the signed-in user, or None for anonymous requests."""
    auth_context = await get_auth_context_from_info(info)
    if not auth_context.is_authenticated:
        return None

    async with get_async_session() as session:
        result = await session.execute(select(Users).where(Users.id == auth_context.user_id))
        user = result.scalar_one_or_none()

        if not user:
            return None

        return convert_db_to_graphql_user(user)


async def signup(info: strawberry.Info, data: SignupInput) -> User:
    """
    Create an account and sign the new user in.

    The email is lower-cased and the password stored as a bcrypt hash. New
    users get the configured default permissions.
    """
    email = normalize_email(data.email)

    async with get_async_session() as session:
        result = await session.execute(select(Users.id).where(Users.email == email))
        if result.scalar_one_or_none() is not None:
            raise RuntimeError(f"A user with email {email} already exists")

        user = Users(
            name=data.name,
            email=email,
            password=hash_password(data.password),
            permissions=list(settings.default_permissions),
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)

    _start_session(info, user)

    logger.info("User signed up", user_id=str(user.id), email=email)

    return convert_db_to_graphql_user(user)


async def signin(info: strawberry.Info, email: str, password: str) -> User:
    """Check the credentials and start a session."""
    email = normalize_email(email)

    async with get_async_session() as session:
        result = await session.execute(select(Users).where(Users.email == email))
        user = result.scalar_one_or_none()

    if not user:
        raise RuntimeError(f"No such user found for email {email}")

    if not verify_password(password, user.password):
        logger.info("Sign in rejected: invalid password", user_id=str(user.id))
        raise RuntimeError("Invalid Password!")

    _start_session(info, user)

    logger.info("User signed in", user_id=str(user.id))

    return convert_db_to_graphql_user(user)


async def signout(info: strawberry.Info) -> SuccessMessage:
    """Clear the session cookie."""
    response = info.context.get("response")
    if response is not None:
        clear_session_cookie(response)

    set_auth_context(info, anonymous_context())

    return SuccessMessage(message="See you soon")


async def request_reset(info: strawberry.Info, email: str) -> SuccessMessage:
    """
    Store a one-hour reset token on the user and email them a reset link.
    """
    email = normalize_email(email)

    async with get_async_session() as session:
        result = await session.execute(select(Users).where(Users.email == email))
        user = result.scalar_one_or_none()

        if not user:
            raise RuntimeError(f"No such user found for email {email}")

        reset_token = secrets.token_hex(20)
        user.reset_token = reset_token
        user.reset_token_expiry = datetime.now(UTC) + timedelta(
            seconds=settings.reset_token_ttl_seconds
        )
        await session.commit()

    reset_link = f"{settings.frontend_url.rstrip('/')}/reset?resetToken={reset_token}"
    await get_mail_transport().send_mail(
        from_addr=settings.mail_from,
        to=user.email,
        subject="Your Password Reset Token",
        html=make_a_nice_email(
            "Your Password Reset Token is here!\n\n"
            f'<a href="{reset_link}">Click Here to Reset</a>'
        ),
    )

    logger.info("Password reset requested", user_id=str(user.id))

    return SuccessMessage(message="Thanks!")


async def reset_password(
    info: strawberry.Info, reset_token: str, password: str, confirm_password: str
) -> User:
    """
    Redeem a reset token: set the new password and sign the user in.

    The token must match and must not have expired.
    """
    if password != confirm_password:
        raise RuntimeError("Passwords don't match!")

    async with get_async_session() as session:
        result = await session.execute(
            select(Users).where(
                Users.reset_token == reset_token,
                Users.reset_token_expiry >= datetime.now(UTC),
            )
        )
        user = result.scalar_one_or_none()

        if not user:
            raise RuntimeError(INVALID_RESET_TOKEN_MESSAGE)

        user.password = hash_password(password)
        user.reset_token = None
        user.reset_token_expiry = None
        await session.commit()
        await session.refresh(user)

    _start_session(info, user)

    logger.info("Password reset completed", user_id=str(user.id))

    return convert_db_to_graphql_user(user)
