"""Visitor analytics tables, written by the public site and aggregated
by the admin dashboard."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from portfolio_api.models.base import Base, UUIDPrimaryKeyMixin


def _recorded_at() -> Mapped[datetime]:
    return mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )


class VisitorLog(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "visitor_logs"

    path: Mapped[str] = mapped_column(Text(), nullable=False)
    session_id: Mapped[str | None] = mapped_column(String(100))
    user_agent: Mapped[str | None] = mapped_column(Text())
    is_admin_visit: Mapped[bool] = mapped_column(default=False)
    viewed_at: Mapped[datetime] = _recorded_at()


class ProjectView(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "project_views"

    project_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id"),
        nullable=True,
    )
    viewed_at: Mapped[datetime] = _recorded_at()


class SkillInteraction(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "skill_interactions"

    skill_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("skills.id"),
        nullable=True,
    )
    interaction_type: Mapped[str] = mapped_column(String(50), nullable=False)
    interacted_at: Mapped[datetime] = _recorded_at()


class SocialMediaClick(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "social_media_clicks"

    platform: Mapped[str] = mapped_column(String(50), nullable=False)
    url: Mapped[str | None] = mapped_column(Text())
    clicked_at: Mapped[datetime] = _recorded_at()
