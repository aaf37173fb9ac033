"""Admin-only tables: activity log, quick notes and site settings."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from portfolio_api.models.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin

SITE_SETTINGS_ID = "global_settings"
DEFAULT_MAINTENANCE_MESSAGE = "Default maintenance message. Please update from admin panel."


class AdminActivityLog(UUIDPrimaryKeyMixin, Base):
    """Append-only trail of admin actions.

    Rows are never updated; the only removal path is clearing the whole
    table through the activity_log danger-zone section.
    """

    __tablename__ = "admin_activity_log"

    action_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text(), nullable=False)
    user_identifier: Mapped[str | None] = mapped_column(String(255))
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    def __repr__(self) -> str:
        return f"<AdminActivityLog(action={self.action_type}, user={self.user_identifier})>"


class QuickNote(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """Private scratch notes. Shared table, rows owned per admin user."""

    __tablename__ = "quick_notes"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text(), nullable=False)


class SiteSettings(Base):
    """Singleton row of site-wide switches."""

    __tablename__ = "site_settings"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    is_maintenance_mode: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    maintenance_message: Mapped[str | None] = mapped_column(Text())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
