"""
Authentication service.

Handles:
- Resolving a login identifier (username, email or phone) to a user
- Credential verification (bcrypt), without revealing whether the
  account exists
- Registering new users (admin action)
- Seeding the bootstrap admin from settings

Session handling on top of verified credentials lives in
`session_service`.
"""

import logging
import re
import uuid

from fastapi import HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sendroli.core.config import settings
from sendroli.core.exceptions import AccountDeactivated, InvalidCredentials
from sendroli.core.security import burn_password_check, hash_password, verify_password
from sendroli.models.user import User, UserRole

logger = logging.getLogger(__name__)

_PHONE_RE = re.compile(r"^[\d\s\-+()]+$")


# ── Helpers ──────────────────────────────────────────────────────────

def normalize_phone(phone: str) -> str:
    return re.sub(r"\D", "", phone)


def identifier_filter(identifier: str):
    """WHERE clause for a login identifier: phone, email or username."""
    value = identifier.strip()
    if _PHONE_RE.match(value):
        return or_(User.phone == value, User.normalized_phone == normalize_phone(value))
    if "@" in value:
        return User.email == value.lower()
    return User.username == value.lower()


# ── Credentials ──────────────────────────────────────────────────────

async def verify_credentials(identifier: str, password: str, db: AsyncSession) -> User:
    """
    Return the user for a correct identifier + password.

    Unknown users and wrong passwords raise the same InvalidCredentials;
    the inactive-account check only runs once the password matched.
    """
    stmt = select(User).where(identifier_filter(identifier))
    user = (await db.execute(stmt)).scalars().first()

    if user is None:
        burn_password_check(password)
        raise InvalidCredentials()

    if not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", user.username)
        raise InvalidCredentials()

    if not user.is_active:
        raise AccountDeactivated("User account is inactive")

    return user


# ── Registration ─────────────────────────────────────────────────────

async def _ensure_unique(
    username: str,
    email: str | None,
    phone: str | None,
    db: AsyncSession,
) -> None:
    checks = [(User.username == username, "User already exists")]
    if email:
        checks.append((User.email == email, "Email already exists"))
    if phone:
        checks.append((User.phone == phone, "Phone number already registered"))

    for clause, message in checks:
        existing = (await db.execute(select(User.id).where(clause))).first()
        if existing is not None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


async def register_user(
    username: str,
    password: str,
    full_name: str,
    role: UserRole,
    db: AsyncSession,
    email: str | None = None,
    phone: str | None = None,
) -> User:
    """
    Create a user.  New users start with no live session.

    Usernames that look like phone numbers are refused: the login
    identifier would be resolved as a phone and never reach them.
    """
    username = username.strip().lower()
    email = email.strip().lower() if email else None
    phone = phone.strip() if phone else None

    if _PHONE_RE.match(username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username cannot look like a phone number",
        )
    await _ensure_unique(username, email, phone, db)

    user = User(
        id=uuid.uuid4(),
        username=username,
        email=email,
        phone=phone,
        normalized_phone=normalize_phone(phone) if phone else None,
        full_name=full_name.strip(),
        password_hash=hash_password(password),
        role=role,
        is_active=True,
        session_version=0,
        session_is_valid=False,
    )
    db.add(user)
    await db.flush()
    logger.info("Registered user %s (%s)", user.username, user.role.value)
    return user


async def seed_bootstrap_admin(db: AsyncSession) -> User | None:
    """
    Create the admin named by BOOTSTRAP_ADMIN_USERNAME if it does not
    exist yet.  Idempotent; does nothing when the settings are empty.
    """
    username = settings.BOOTSTRAP_ADMIN_USERNAME.strip().lower()
    if not username or not settings.BOOTSTRAP_ADMIN_PASSWORD:
        return None

    existing = (
        await db.execute(select(User).where(User.username == username))
    ).scalar_one_or_none()
    if existing is not None:
        return None

    return await register_user(
        username=username,
        password=settings.BOOTSTRAP_ADMIN_PASSWORD,
        full_name=settings.BOOTSTRAP_ADMIN_FULL_NAME,
        role=UserRole.ADMIN,
        db=db,
    )
