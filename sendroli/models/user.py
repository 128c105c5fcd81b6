from __future__ import annotations

"""
User model (the authenticated principal).

Design decisions:
- Role is a single ENUM column from a fixed set; route gating maps
  capabilities to allowed roles in `sendroli.rbac.policy`.
- The login session lives on the row itself (see SessionDescriptorMixin)
  so there is exactly one authoritative session per user.
"""

import enum

from sqlalchemy import Boolean, Enum, String, text
from sqlalchemy.orm import Mapped, mapped_column

from sendroli.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from sendroli.models.session import SessionDescriptorMixin


class UserRole(str, enum.Enum):
    RECEPTIONIST = "receptionist"
    DESIGNER = "designer"
    WORKER = "worker"
    FINANCIAL = "financial"
    ADMIN = "admin"
    CLIENT = "client"


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin, SessionDescriptorMixin):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    email: Mapped[str | None] = mapped_column(String(256), unique=True, index=True, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), unique=True, nullable=True)
    normalized_phone: Mapped[str | None] = mapped_column(String(32), index=True, nullable=True)
    full_name: Mapped[str] = mapped_column(String(256), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(512), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        default=UserRole.RECEPTIONIST,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=text("true"), nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User {self.username} role={self.role.value} sv={self.session_version}>"
