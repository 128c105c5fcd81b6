"""
Pydantic schemas for request / response serialization.

Kept in a single file for now — split per-domain when it grows.
Schemas are decoupled from SQLAlchemy models so the API surface can
evolve independently of the DB layer.

The wire format is camelCase (`sessionInfo`, `deviceName`, ...) to match
the frontend; Python code keeps using the snake_case field names.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from sendroli.models.session import SessionInfo
from sendroli.models.user import UserRole


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Auth ─────────────────────────────────────────────────────────────
class LoginRequest(BaseModel):
    # Username, email or phone number.
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    force: bool = False


class SessionInfoOut(CamelModel):
    device_name: str
    ip_address: str | None = None
    login_time: datetime | None = None
    last_activity: datetime | None = None

    @classmethod
    def from_info(cls, info: SessionInfo) -> "SessionInfoOut":
        return cls(
            device_name=info.device_name,
            ip_address=info.ip_address,
            login_time=info.login_time,
            last_activity=info.last_activity,
        )


class PreviousSessionOut(CamelModel):
    device_name: str
    login_time: datetime | None = None
    last_activity: datetime | None = None


class RegisterRequest(CamelModel):
    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=1)
    role: UserRole = UserRole.RECEPTIONIST
    email: str | None = None
    phone: str | None = None


# ── User ─────────────────────────────────────────────────────────────
class UserOut(CamelModel):
    id: uuid.UUID
    username: str
    full_name: str
    email: str | None = None
    phone: str | None = None
    role: UserRole
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(CamelModel):
    success: bool = True
    token: str
    user: UserOut
    session_info: SessionInfoOut
    message: str | None = None
    previous_session: PreviousSessionOut | None = None


class SessionConflictResponse(CamelModel):
    success: bool = False
    message: str = "Active session detected"
    code: str = "ACTIVE_SESSION"
    session_info: SessionInfoOut


class SessionStatusOut(CamelModel):
    session_valid: bool
    session_version: int
    login_time: datetime | None = None
    last_activity: datetime | None = None


# ── Generic ──────────────────────────────────────────────────────────
class MessageResponse(BaseModel):
    success: bool = True
    message: str
