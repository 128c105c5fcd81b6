"""
User service — admin-side queries & account state changes.

Anything that ends a session goes through `session_service.logout`;
this module never touches the session columns itself.
"""

import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sendroli.models.user import User, UserRole
from sendroli.services import session_service

logger = logging.getLogger(__name__)


async def get_user_by_id(
    user_id: uuid.UUID,
    db: AsyncSession,
) -> User:
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


async def list_users(
    db: AsyncSession,
    role: UserRole | None = None,
    skip: int = 0,
    limit: int = 50,
) -> list[User]:
    stmt = select(User).order_by(User.created_at, User.username)
    if role is not None:
        stmt = stmt.where(User.role == role)

    stmt = stmt.offset(skip).limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def force_logout(
    target_user_id: uuid.UUID,
    db: AsyncSession,
) -> bool:
    """Admin action — end whatever session the user has live."""
    await get_user_by_id(target_user_id, db)
    return await session_service.logout(target_user_id, db)


async def deactivate_user(
    target_user_id: uuid.UUID,
    acting_user: User,
    db: AsyncSession,
) -> User:
    """Admin action — deactivate an account and end its session."""
    if target_user_id == acting_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot deactivate your own account",
        )

    user = await get_user_by_id(target_user_id, db)
    user.is_active = False
    await db.flush()
    await session_service.logout(target_user_id, db)
    await db.refresh(user)
    logger.info("User %s deactivated by %s", user.username, acting_user.username)
    return user


async def activate_user(
    target_user_id: uuid.UUID,
    db: AsyncSession,
) -> User:
    user = await get_user_by_id(target_user_id, db)
    user.is_active = True
    await db.flush()
    return user
