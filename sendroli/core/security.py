"""
Password hashing, JWT helpers & the per-request token validator.

- Passwords are hashed with bcrypt directly (passlib is unmaintained
  and broken with bcrypt>=4.1).
- JWTs carry the user id (`sub`), the role and the session version
  (`sv`) that was live when the token was issued.
- A token on its own proves nothing: `authorize` re-reads the user row
  on EVERY request and only admits the token if its `sv` is still the
  live session version (stateful JWT).
"""

import functools
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sendroli.core.config import settings
from sendroli.core.database import get_db
from sendroli.core.exceptions import (
    AccountDeactivated,
    InvalidToken,
    MissingToken,
    SessionInvalidated,
    TokenInvalidated,
)
from sendroli.models.user import User

# ── Password hashing ────────────────────────────────────────────────

# bcrypt only looks at the first 72 bytes; bcrypt>=5 raises instead of
# truncating, so truncate here.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(plain), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))


@functools.lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("not-a-real-password")


def burn_password_check(plain: str) -> None:
    """Spend one bcrypt comparison when no user matched, so unknown
    usernames take as long to reject as wrong passwords."""
    verify_password(plain, _dummy_hash())


# ── JWT ──────────────────────────────────────────────────────────────
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def create_access_token(
    user: User,
    session_version: int,
    expires_delta: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode: dict[str, Any] = {
        "sub": str(user.id),
        "role": user.role.value,
        "sv": session_version,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode & validate a JWT.  Raises InvalidToken on any failure."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise InvalidToken()


@dataclass(frozen=True)
class TokenClaims:
    user_id: uuid.UUID
    role: str
    session_version: int


def parse_token(token: str) -> TokenClaims:
    """Verify a token and pull out the claims we rely on."""
    payload = decode_access_token(token)
    try:
        return TokenClaims(
            user_id=uuid.UUID(str(payload["sub"])),
            role=str(payload.get("role", "")),
            session_version=int(payload["sv"]),
        )
    except (KeyError, TypeError, ValueError):
        raise InvalidToken()


async def get_token_claims(token: str | None = Depends(oauth2_scheme)) -> TokenClaims:
    """Signature/expiry check only — no session lookup.  Used by logout,
    which must keep succeeding after the session has already ended."""
    if not token:
        raise MissingToken()
    return parse_token(token)


# ── Per-request session validation ──────────────────────────────────


async def authorize(token: str, db: AsyncSession) -> User:
    """
    Resolve a bearer token to its user, or fail closed.

    Checks, in order:
      1. JWT signature, expiry and claims        → INVALID_TOKEN
      2. User still exists                       → INVALID_TOKEN
      3. Account is active                       → ACCOUNT_DEACTIVATED
      4. Stored session is still valid           → SESSION_INVALIDATED
      5. Token's `sv` is the live session version → TOKEN_INVALIDATED

    The user row is always re-read from the database so a newer login or
    a logout is visible to the very next request.
    """
    claims = parse_token(token)

    stmt = (
        select(User)
        .where(User.id == claims.user_id)
        .execution_options(populate_existing=True)
    )
    user = (await db.execute(stmt)).scalar_one_or_none()

    if user is None:
        raise InvalidToken("Token is invalid. User not found.")
    if not user.is_active:
        raise AccountDeactivated()
    if not user.session_is_valid:
        raise SessionInvalidated()
    if user.session_version != claims.session_version:
        raise TokenInvalidated()

    return user


async def get_current_user(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    FastAPI dependency — authorizes the bearer token and attaches the
    user to `request.state.user`.

    When SESSION_TRACK_ACTIVITY is on, `session_last_activity` is bumped
    (committed with the request transaction).
    """
    if not token:
        raise MissingToken()

    user = await authorize(token, db)

    if settings.SESSION_TRACK_ACTIVITY:
        from sendroli.services import session_service

        await session_service.record_activity(user.id, user.session_version, db)

    request.state.user = user
    return user
