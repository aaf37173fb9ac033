"""Public portfolio content: hero, about, projects, skills, timeline,
certifications, contact details and legal documents.

The hero, about and contact tables are singletons: each holds exactly one
row at a fixed, well-known id that the admin UI edits in place.
"""

import uuid
from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from portfolio_api.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

HERO_CONTENT_ID = uuid.UUID("00000000-0000-0000-0000-000000000004")
ABOUT_CONTENT_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
CONTACT_PAGE_DETAILS_ID = uuid.UUID("00000000-0000-0000-0000-000000000005")

TERMS_AND_CONDITIONS_ID = "terms-and-conditions"
PRIVACY_POLICY_ID = "privacy-policy"


class _SingletonRow:
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class HeroContent(_SingletonRow, Base):
    __tablename__ = "hero_content"

    main_name: Mapped[str] = mapped_column(String(200), nullable=False)
    subtitles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    social_media_links: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )


class AboutContent(_SingletonRow, Base):
    __tablename__ = "about_content"

    headline_main: Mapped[str] = mapped_column(String(200), nullable=False)
    headline_code_keyword: Mapped[str | None] = mapped_column(String(100))
    headline_connector: Mapped[str | None] = mapped_column(String(100))
    headline_creativity_keyword: Mapped[str | None] = mapped_column(String(100))
    paragraph1: Mapped[str | None] = mapped_column(Text())
    paragraph2: Mapped[str | None] = mapped_column(Text())
    paragraph3: Mapped[str | None] = mapped_column(Text())
    image_url: Mapped[str | None] = mapped_column(Text())
    image_tagline: Mapped[str | None] = mapped_column(String(200))


class ContactPageDetails(_SingletonRow, Base):
    __tablename__ = "contact_page_details"

    address: Mapped[str | None] = mapped_column(Text())
    phone: Mapped[str | None] = mapped_column(String(50))
    phone_href: Mapped[str | None] = mapped_column(String(100))
    email: Mapped[str | None] = mapped_column(String(255))
    email_href: Mapped[str | None] = mapped_column(String(300))


class Project(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "projects"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text())
    image_url: Mapped[str | None] = mapped_column(Text())
    live_demo_url: Mapped[str | None] = mapped_column(Text())
    repo_url: Mapped[str | None] = mapped_column(Text())
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Project(title={self.title!r})>"


class SkillCategory(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "skill_categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon_image_url: Mapped[str | None] = mapped_column(Text())
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Skill(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "skills"

    category_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("skill_categories.id", ondelete="SET NULL"),
        nullable=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon_image_url: Mapped[str | None] = mapped_column(Text())
    description: Mapped[str | None] = mapped_column(Text())


class TimelineEvent(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "timeline_events"

    date_text: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text())
    icon_name: Mapped[str | None] = mapped_column(String(50))
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Certification(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "certifications"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    issuer: Mapped[str] = mapped_column(String(200), nullable=False)
    issue_date: Mapped[date | None] = mapped_column(Date())
    image_url: Mapped[str | None] = mapped_column(Text())
    verify_url: Mapped[str | None] = mapped_column(Text())


class SocialLink(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "social_links"

    label: Mapped[str] = mapped_column(String(100), nullable=False)
    url: Mapped[str] = mapped_column(Text(), nullable=False)
    icon_image_url: Mapped[str | None] = mapped_column(Text())
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ContactSubmission(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "contact_submissions"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str | None] = mapped_column(String(300))
    message: Mapped[str] = mapped_column(Text(), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="new")
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class LegalDocument(Base):
    """Terms and privacy policy, keyed by slug."""

    __tablename__ = "legal_documents"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
