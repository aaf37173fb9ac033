# Database Models
from portfolio_api.models.admin import (
    DEFAULT_MAINTENANCE_MESSAGE,
    SITE_SETTINGS_ID,
    AdminActivityLog,
    QuickNote,
    SiteSettings,
)
from portfolio_api.models.analytics import (
    ProjectView,
    SkillInteraction,
    SocialMediaClick,
    VisitorLog,
)
from portfolio_api.models.base import Base, TimestampMixin
from portfolio_api.models.content import (
    ABOUT_CONTENT_ID,
    CONTACT_PAGE_DETAILS_ID,
    HERO_CONTENT_ID,
    PRIVACY_POLICY_ID,
    TERMS_AND_CONDITIONS_ID,
    AboutContent,
    Certification,
    ContactPageDetails,
    ContactSubmission,
    HeroContent,
    LegalDocument,
    Project,
    Skill,
    SkillCategory,
    SocialLink,
    TimelineEvent,
)
from portfolio_api.models.resume import (
    RESUME_META_ID,
    ResumeDownload,
    ResumeEducation,
    ResumeExperience,
    ResumeKeySkill,
    ResumeKeySkillCategory,
    ResumeLanguage,
    ResumeMeta,
)

__all__ = [
    "ABOUT_CONTENT_ID",
    "CONTACT_PAGE_DETAILS_ID",
    "DEFAULT_MAINTENANCE_MESSAGE",
    "HERO_CONTENT_ID",
    "PRIVACY_POLICY_ID",
    "RESUME_META_ID",
    "SITE_SETTINGS_ID",
    "TERMS_AND_CONDITIONS_ID",
    "AboutContent",
    "AdminActivityLog",
    "Base",
    "Certification",
    "ContactPageDetails",
    "ContactSubmission",
    "HeroContent",
    "LegalDocument",
    "Project",
    "ProjectView",
    "QuickNote",
    "ResumeDownload",
    "ResumeEducation",
    "ResumeExperience",
    "ResumeKeySkill",
    "ResumeKeySkillCategory",
    "ResumeLanguage",
    "ResumeMeta",
    "SiteSettings",
    "Skill",
    "SkillCategory",
    "SkillInteraction",
    "SocialLink",
    "SocialMediaClick",
    "TimelineEvent",
    "TimestampMixin",
    "VisitorLog",
]
