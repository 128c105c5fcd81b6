"""
User controller — admin user management.

Every route uses `Depends(require_role(...))` for enforcement.
Controllers are THIN — they delegate to services and return schemas.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sendroli.core.database import get_db
from sendroli.models.user import User, UserRole
from sendroli.rbac.dependencies import require_role
from sendroli.schemas import MessageResponse, UserOut
from sendroli.services import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=list[UserOut])
async def list_users(
    user: User = Depends(require_role("users.list")),
    db: AsyncSession = Depends(get_db),
    role: UserRole | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    users = await user_service.list_users(db, role=role, skip=skip, limit=limit)
    return [UserOut.model_validate(u) for u in users]


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: uuid.UUID,
    user: User = Depends(require_role("users.view")),
    db: AsyncSession = Depends(get_db),
):
    return UserOut.model_validate(await user_service.get_user_by_id(user_id, db))


@router.post("/{user_id}/force-logout", response_model=MessageResponse)
async def force_logout(
    user_id: uuid.UUID,
    user: User = Depends(require_role("users.force_logout")),
    db: AsyncSession = Depends(get_db),
):
    """End the target user's live session; their current token stops working."""
    ended = await user_service.force_logout(user_id, db)
    return MessageResponse(
        message="Session terminated" if ended else "User had no active session",
    )


@router.post("/{user_id}/deactivate", response_model=UserOut)
async def deactivate_user(
    user_id: uuid.UUID,
    user: User = Depends(require_role("users.deactivate")),
    db: AsyncSession = Depends(get_db),
):
    target = await user_service.deactivate_user(user_id, acting_user=user, db=db)
    return UserOut.model_validate(target)


@router.post("/{user_id}/activate", response_model=UserOut)
async def activate_user(
    user_id: uuid.UUID,
    user: User = Depends(require_role("users.deactivate")),
    db: AsyncSession = Depends(get_db),
):
    target = await user_service.activate_user(user_id, db)
    return UserOut.model_validate(target)
