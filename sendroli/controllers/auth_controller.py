"""
Auth controller — login, logout, session status & registration.

Login is PUBLIC.  Logout only needs a correctly signed token (it stays
idempotent once the session is gone); every other route goes through
the full session check.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from sendroli.core.database import get_db
from sendroli.core.device import describe_device
from sendroli.core.security import TokenClaims, get_token_claims
from sendroli.models.user import User
from sendroli.rbac.dependencies import require_role
from sendroli.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PreviousSessionOut,
    RegisterRequest,
    SessionConflictResponse,
    SessionInfoOut,
    SessionStatusOut,
    UserOut,
)
from sendroli.services import auth_service, session_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    response_model_exclude_none=True,
    responses={status.HTTP_409_CONFLICT: {"model": SessionConflictResponse}},
)
async def login(body: LoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    """Authenticate with username/email/phone + password → receive JWT.

    While another session is live the answer is 409 ACTIVE_SESSION;
    retry with `force: true` to take over.
    """
    result = await session_service.attempt_login(
        body.username,
        body.password,
        force=body.force,
        device=describe_device(request),
        db=db,
    )

    if isinstance(result, session_service.SessionConflict):
        conflict = SessionConflictResponse(
            session_info=SessionInfoOut.from_info(result.existing_session),
        )
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=conflict.model_dump(mode="json", by_alias=True),
        )

    response = LoginResponse(
        token=result.token,
        user=UserOut.model_validate(result.user),
        session_info=SessionInfoOut.from_info(result.session_info),
    )
    if isinstance(result, session_service.ForcedLoginSuccess):
        previous = result.previous_session
        response.message = "Previous session terminated. New session created."
        response.previous_session = PreviousSessionOut(
            device_name=previous.device_name,
            login_time=previous.login_time,
            last_activity=previous.last_activity,
        )
    return response


@router.post("/logout", response_model=MessageResponse)
async def logout(
    claims: TokenClaims = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db),
):
    """End the session this token belongs to (no-op if already ended)."""
    await session_service.logout(claims.user_id, db, session_version=claims.session_version)
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=UserOut)
async def get_me(user: User = Depends(require_role("auth.me"))):
    return UserOut.model_validate(user)


@router.get("/validate-session", response_model=SessionStatusOut)
async def validate_session(user: User = Depends(require_role("auth.validate_session"))):
    """Reaching this handler means the session passed validation."""
    return SessionStatusOut(
        session_valid=True,
        session_version=user.session_version,
        login_time=user.session_login_time,
        last_activity=user.session_last_activity,
    )


@router.post("/register", response_model=UserOut, status_code=201)
async def register(
    body: RegisterRequest,
    user: User = Depends(require_role("auth.register")),
    db: AsyncSession = Depends(get_db),
):
    """Create a new user account (admin only)."""
    new_user = await auth_service.register_user(
        username=body.username,
        password=body.password,
        full_name=body.full_name,
        role=body.role,
        email=body.email,
        phone=body.phone,
        db=db,
    )
    return UserOut.model_validate(new_user)
