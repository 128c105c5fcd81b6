"""
Session service — the session authority.

Handles:
- Login with single-active-session enforcement and "force login"
- Logout (server-side session invalidation)
- Last-activity bookkeeping for conflict reporting

Concurrency rules:
- One live session per user.  A second login while a session is live
  is refused with a SessionConflict unless `force=True`, in which case
  the old session is superseded and its tokens stop working.
- The session columns on `users` are written ONLY from this module, and
  every write is a single conditional UPDATE on the user row, so the
  database row stays the one source of truth across workers.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from sendroli.core.config import settings
from sendroli.core.device import DeviceInfo
from sendroli.core.exceptions import SessionContention
from sendroli.core.security import create_access_token
from sendroli.models.base import utcnow
from sendroli.models.session import SessionInfo
from sendroli.models.user import User
from sendroli.services import auth_service

logger = logging.getLogger(__name__)


# ── Login results ────────────────────────────────────────────────────


@dataclass(frozen=True)
class LoginSuccess:
    token: str
    user: User
    session_info: SessionInfo


@dataclass(frozen=True)
class ForcedLoginSuccess(LoginSuccess):
    previous_session: SessionInfo


@dataclass(frozen=True)
class SessionConflict:
    """Another session is live; nothing was written."""

    existing_session: SessionInfo


LoginResult = LoginSuccess | SessionConflict


# ── Helpers ──────────────────────────────────────────────────────────


async def _reload_user(user_id: uuid.UUID, db: AsyncSession) -> User:
    stmt = (
        select(User)
        .where(User.id == user_id)
        .execution_options(populate_existing=True)
    )
    return (await db.execute(stmt)).scalar_one()


async def _swap_session(
    user_id: uuid.UUID,
    read_version: int,
    new_version: int,
    device: DeviceInfo,
    now: datetime,
    db: AsyncSession,
) -> bool:
    """
    Install a new live session, but only if nobody else has since.

    Compare-and-swap on `session_version`: returns False when the row no
    longer carries `read_version` (a concurrent login got there first).
    """
    stmt = (
        update(User)
        .where(User.id == user_id, User.session_version == read_version)
        .values(
            session_version=new_version,
            session_is_valid=True,
            session_device_name=device.device_type,
            session_ip_address=device.ip_address,
            session_user_agent=device.user_agent,
            session_device_fingerprint=device.fingerprint,
            session_login_time=now,
            session_last_activity=now,
        )
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    return result.rowcount == 1


# ── Login ────────────────────────────────────────────────────────────


async def attempt_login(
    identifier: str,
    password: str,
    *,
    force: bool,
    device: DeviceInfo,
    db: AsyncSession,
) -> LoginResult:
    """
    Verify credentials, then either open a new session or report the
    live one.

    Raises InvalidCredentials / AccountDeactivated from credential
    checks.  A forced login that keeps losing the version race raises
    SessionContention after SESSION_LOGIN_MAX_ATTEMPTS tries.
    """
    user = await auth_service.verify_credentials(identifier, password, db)

    max_attempts = max(1, settings.SESSION_LOGIN_MAX_ATTEMPTS)
    for attempt in range(1, max_attempts + 1):
        had_live_session = user.has_live_session
        previous = user.session_snapshot()

        if had_live_session and not force:
            logger.info("Login refused for %s: active session on %s", user.username, previous.device_name)
            return SessionConflict(existing_session=previous)

        read_version = user.session_version
        new_version = read_version + 1
        if await _swap_session(user.id, read_version, new_version, device, utcnow(), db):
            break

        logger.warning(
            "Session race lost for %s at version %d (attempt %d/%d)",
            user.username, read_version, attempt, max_attempts,
        )
        user = await _reload_user(user.id, db)
    else:
        raise SessionContention()

    await db.refresh(user)
    token = create_access_token(user, new_version)
    session_info = user.session_snapshot()

    if had_live_session:
        logger.info(
            "Forced login for %s: session v%d on %s superseded by v%d",
            user.username, read_version, previous.device_name, new_version,
        )
        return ForcedLoginSuccess(
            token=token,
            user=user,
            session_info=session_info,
            previous_session=previous,
        )

    logger.info("Login for %s: session v%d on %s", user.username, new_version, session_info.device_name)
    return LoginSuccess(token=token, user=user, session_info=session_info)


# ── Logout ───────────────────────────────────────────────────────────


async def logout(
    user_id: uuid.UUID,
    db: AsyncSession,
    session_version: int | None = None,
) -> bool:
    """
    Invalidate the user's live session.  Idempotent.

    `session_version` restricts the logout to that session, so a token
    that was already superseded cannot end its successor.  The version
    itself is never rewound.

    Returns True if a live session was actually ended.
    """
    conditions = [User.id == user_id, User.session_is_valid.is_(True)]
    if session_version is not None:
        conditions.append(User.session_version == session_version)

    stmt = (
        update(User)
        .where(*conditions)
        .values(session_is_valid=False)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    ended = result.rowcount > 0
    if ended:
        logger.info("Session ended for user %s", user_id)
    return ended


async def logout_all(db: AsyncSession) -> int:
    """End every live session.  Returns how many were ended."""
    stmt = (
        update(User)
        .where(User.session_is_valid.is_(True))
        .values(session_is_valid=False)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    logger.warning("Ended %d live session(s)", result.rowcount)
    return result.rowcount


# ── Activity ─────────────────────────────────────────────────────────


async def record_activity(
    user_id: uuid.UUID,
    session_version: int,
    db: AsyncSession,
) -> None:
    """Bump `session_last_activity` for the live session (metadata only)."""
    stmt = (
        update(User)
        .where(
            User.id == user_id,
            User.session_version == session_version,
            User.session_is_valid.is_(True),
        )
        .values(session_last_activity=utcnow())
        .execution_options(synchronize_session=False)
    )
    await db.execute(stmt)
