"""
Session descriptor — the single authoritative login session of a user.

The descriptor is embedded in the `users` row (one per user, never a
separate table) so that checking and replacing it is a single-row
operation:

- `session_version` identifies the live session and is embedded in every
  issued token.  It only ever grows — logout leaves it untouched, so a
  token from an old session can never match again.
- `session_is_valid` is cleared by logout.
- The remaining columns describe the device and are only reported back
  on conflicts.

Only `sendroli.services.session_service` writes these columns.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column


class SessionDescriptorMixin:
    session_version: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False,
    )
    session_is_valid: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False,
    )
    session_device_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    session_ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    session_user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    session_device_fingerprint: Mapped[str | None] = mapped_column(String(32), nullable=True)
    session_login_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    session_last_activity: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    @property
    def has_live_session(self) -> bool:
        return bool(self.session_is_valid)

    def session_snapshot(self) -> "SessionInfo":
        """Copy of the current descriptor metadata (safe to keep after a write)."""
        return SessionInfo(
            device_name=self.session_device_name or "Unknown Device",
            ip_address=self.session_ip_address,
            login_time=self.session_login_time,
            last_activity=self.session_last_activity,
        )


@dataclass(frozen=True)
class SessionInfo:
    """Descriptive session metadata reported to clients.  The raw user
    agent and fingerprint are not part of it."""

    device_name: str
    ip_address: str | None
    login_time: datetime | None
    last_activity: datetime | None
