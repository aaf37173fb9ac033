"""Resume section: overview row, experience, education, key skills and
languages."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from portfolio_api.models.base import Base, UUIDPrimaryKeyMixin

RESUME_META_ID = uuid.UUID("00000000-0000-0000-0000-000000000003")


class ResumeMeta(Base):
    """Singleton row holding the resume overview and PDF link."""

    __tablename__ = "resume_meta"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    description: Mapped[str | None] = mapped_column(Text())
    resume_pdf_url: Mapped[str | None] = mapped_column(Text())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class ResumeExperience(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "resume_experience"

    job_title: Mapped[str] = mapped_column(String(200), nullable=False)
    company_name: Mapped[str] = mapped_column(String(200), nullable=False)
    date_range: Mapped[str | None] = mapped_column(String(100))
    description_points: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    icon_image_url: Mapped[str | None] = mapped_column(Text())
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ResumeEducation(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "resume_education"

    degree_or_certification: Mapped[str] = mapped_column(String(200), nullable=False)
    institution_name: Mapped[str] = mapped_column(String(200), nullable=False)
    date_range: Mapped[str | None] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(Text())
    icon_image_url: Mapped[str | None] = mapped_column(Text())
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ResumeKeySkillCategory(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "resume_key_skill_categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon_image_url: Mapped[str | None] = mapped_column(Text())
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ResumeKeySkill(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "resume_key_skills"

    category_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("resume_key_skill_categories.id", ondelete="CASCADE"),
        nullable=True,
    )
    skill_name: Mapped[str] = mapped_column(String(100), nullable=False)


class ResumeLanguage(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "resume_languages"

    language_name: Mapped[str] = mapped_column(String(100), nullable=False)
    proficiency: Mapped[str | None] = mapped_column(String(50))
    icon_image_url: Mapped[str | None] = mapped_column(Text())
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ResumeDownload(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "resume_downloads"

    downloaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    user_agent: Mapped[str | None] = mapped_column(Text())
    context: Mapped[dict[str, Any] | None] = mapped_column(JSON)
