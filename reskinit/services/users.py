"""User profile reads and owner-only edits of soft fields."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from reskinit.db import operations as ops
from reskinit.models.db import UserDB
from reskinit.models.failure import NotFoundError

logger = logging.getLogger(__name__)

# Fields a user may edit on their own profile. Password is owned by the
# auth service.
EDITABLE_PROFILE_FIELDS = ("display_name", "bio", "avatar_url")


async def get_user(session: AsyncSession, user_id: int) -> UserDB:
    """
    Get a user.

    Raises:
        NotFoundError: If no user has this id
    """
    user = await ops.get_user(session, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


async def update_profile(
    session: AsyncSession,
    user_id: int,
    changes: dict[str, str | None],
) -> UserDB:
    """
    Apply profile edits for the authenticated user.

    Keys outside EDITABLE_PROFILE_FIELDS are ignored. Empty strings clear
    a field.
    """
    user = await get_user(session, user_id)
    applied = []
    for name in EDITABLE_PROFILE_FIELDS:
        if name in changes:
            value = changes[name]
            if value is not None:
                value = value.strip() or None
            setattr(user, name, value)
            applied.append(name)

    await session.flush()
    if applied:
        logger.info("User %d updated profile fields %s", user_id, applied)
    return user
