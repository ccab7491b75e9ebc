from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import strawberry
from sqlalchemy import select

from ...auth.permissions import PermissionName, has_permission
from ...database.connection import get_async_session
from ...dbmodels import Users
from ...logging import get_logger
from ..access_control import get_auth_context_from_info, require_authenticated

if TYPE_CHECKING:
    from ..types.user import User

logger = get_logger(__name__)

USER_ADMIN_PERMISSIONS = [PermissionName.ADMIN.value, PermissionName.PERMISSIONUPDATE.value]


def convert_db_to_graphql_user(user: Users) -> User:
    """Convert a database User model to GraphQL User type."""
    from ..types.user import User as UserType

    return UserType(
        id=user.id,
        name=user.name,
        email=user.email,
        permissions=[
            PermissionName(permission)
            for permission in (user.permissions or [])
            if permission in PermissionName.__members__
        ],
    )


async def resolve_users(info: strawberry.Info) -> list[User]:
    """
    List every user.

    Requires ADMIN or PERMISSIONUPDATE.
    """
    auth_context = require_authenticated(await get_auth_context_from_info(info))
    has_permission(auth_context, USER_ADMIN_PERMISSIONS)

    async with get_async_session() as session:
        result = await session.execute(select(Users).order_by(Users.name, Users.email))
        users = result.scalars().all()

        return [convert_db_to_graphql_user(user) for user in users]


async def update_permissions(
    info: strawberry.Info, permissions: list[PermissionName], user_id: UUID
) -> User:
    """
    Replace a user's permission set.

    Requires ADMIN or PERMISSIONUPDATE.
    """
    auth_context = require_authenticated(await get_auth_context_from_info(info))
    has_permission(auth_context, USER_ADMIN_PERMISSIONS)

    async with get_async_session() as session:
        result = await session.execute(select(Users).where(Users.id == user_id))
        user = result.scalar_one_or_none()

        if not user:
            raise RuntimeError(f"No user found for ID {user_id}")

        # Deduplicate, keeping the order given
        names = list(dict.fromkeys(PermissionName(p).value for p in permissions))
        user.permissions = names

        await session.commit()
        await session.refresh(user)

        logger.info(
            "User permissions updated",
            user_id=str(user_id),
            updated_by=str(auth_context.user_id),
            permissions=names,
        )

        return convert_db_to_graphql_user(user)
