"""
Models package — import every model so SQLAlchemy's Base.metadata
knows about all tables (critical for `create_all` / Alembic).
"""

from sendroli.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from sendroli.models.session import SessionDescriptorMixin, SessionInfo
from sendroli.models.user import User, UserRole

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "SessionDescriptorMixin",
    "SessionInfo",
    "User",
    "UserRole",
]
