"""Danger-zone section registry.

Maps each user-facing section key ("projects", "visitor_analytics", ...)
to the storage it owns: tables whose rows are all deleted, singleton
configuration rows reset to defaults, buckets emptied, and the few steps
that fit neither (rows owned by the calling admin, one field on the shared
site settings row).

The registry is built once at import and validated: a bad plan is a
programming error and fails at startup, not halfway through a deletion.
"""

import uuid
from collections.abc import Collection, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from portfolio_api.models import (
    ABOUT_CONTENT_ID,
    CONTACT_PAGE_DETAILS_ID,
    DEFAULT_MAINTENANCE_MESSAGE,
    HERO_CONTENT_ID,
    PRIVACY_POLICY_ID,
    RESUME_META_ID,
    SITE_SETTINGS_ID,
    TERMS_AND_CONDITIONS_ID,
    Base,
)
from portfolio_api.schemas.danger_zone import ResetTarget, SectionSummary

# Never part of any section; profile photos survive every reset
PROTECTED_BUCKETS = frozenset({"admin-profile-photos"})


class PlanRegistryError(ValueError):
    """A section plan is internally inconsistent."""


class UnknownSectionError(LookupError):
    """One or more requested section keys do not exist."""

    def __init__(self, keys: list[str]):
        self.keys = keys
        super().__init__(f"Invalid section key provided: {', '.join(keys)}")


def _frozen(values: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(values))


@dataclass(frozen=True)
class ClearTable:
    """Delete every row of ``table``."""

    table: str


@dataclass(frozen=True)
class ResetRow:
    """Update the singleton row ``row_id`` of ``table`` back to ``defaults``.

    ``updated_at`` is stamped when the step runs, not when the plan is built.
    """

    table: str
    row_id: uuid.UUID | str
    defaults: Mapping[str, Any] = field(default_factory=dict)
    stamp_updated_at: bool = True

    @property
    def target(self) -> str:
        return f"{self.table} (ID: {self.row_id})"


@dataclass(frozen=True)
class EmptyBucket:
    bucket: str


@dataclass(frozen=True)
class DeleteOwnedRows:
    """Delete only the rows of a shared table owned by the calling admin."""

    name: str
    table: str
    owner_column: str


@dataclass(frozen=True)
class ResetSharedField:
    """Reset selected fields of one row that other settings also live on."""

    name: str
    table: str
    row_id: str
    values: Mapping[str, Any] = field(default_factory=dict)


SpecialHandling = DeleteOwnedRows | ResetSharedField
PlanStep = ClearTable | ResetRow | EmptyBucket | DeleteOwnedRows | ResetSharedField


@dataclass(frozen=True)
class SectionPlan:
    """Everything one section touches, in execution order."""

    key: str
    label: str
    tables_to_clear: tuple[str, ...] = ()
    tables_to_reset: tuple[ResetRow, ...] = ()
    buckets_to_empty: tuple[str, ...] = ()
    special_handling: SpecialHandling | None = None
    aliases: tuple[str, ...] = ()

    def steps(self) -> list[PlanStep]:
        """Clears, then resets, then buckets, then special handling."""
        steps: list[PlanStep] = [ClearTable(table) for table in self.tables_to_clear]
        steps.extend(self.tables_to_reset)
        steps.extend(EmptyBucket(bucket) for bucket in self.buckets_to_empty)
        if self.special_handling is not None:
            steps.append(self.special_handling)
        return steps

    def tables(self) -> set[str]:
        tables = set(self.tables_to_clear)
        tables.update(reset.table for reset in self.tables_to_reset)
        if self.special_handling is not None:
            tables.add(self.special_handling.table)
        return tables

    def summary(self) -> SectionSummary:
        return SectionSummary(
            key=self.key,
            label=self.label,
            aliases=list(self.aliases),
            tables_to_clear=list(self.tables_to_clear),
            tables_to_reset=[
                ResetTarget(table=reset.table, row_id=str(reset.row_id))
                for reset in self.tables_to_reset
            ],
            buckets_to_empty=list(self.buckets_to_empty),
            special_handling=self.special_handling.name if self.special_handling else None,
        )


class SectionRegistry:
    """Immutable lookup from section key (or alias) to ``SectionPlan``."""

    def __init__(
        self,
        plans: Iterable[SectionPlan],
        known_tables: Collection[str] | None = None,
        protected_buckets: Collection[str] = PROTECTED_BUCKETS,
    ):
        self._plans: dict[str, SectionPlan] = {}
        self._aliases: dict[str, str] = {}
        for plan in plans:
            self._add(plan, known_tables, protected_buckets)

    def _add(
        self,
        plan: SectionPlan,
        known_tables: Collection[str] | None,
        protected_buckets: Collection[str],
    ) -> None:
        for name in (plan.key, *plan.aliases):
            if name in self._plans or name in self._aliases:
                raise PlanRegistryError(f"Duplicate section key or alias: {name}")

        if not plan.steps():
            raise PlanRegistryError(f"Section {plan.key} has no steps")

        overlap = set(plan.tables_to_clear) & {r.table for r in plan.tables_to_reset}
        if overlap:
            raise PlanRegistryError(
                f"Section {plan.key} both clears and resets: {', '.join(sorted(overlap))}"
            )

        if known_tables is not None:
            unknown = plan.tables() - set(known_tables)
            if unknown:
                raise PlanRegistryError(
                    f"Section {plan.key} references unknown tables: "
                    f"{', '.join(sorted(unknown))}"
                )

        protected = set(plan.buckets_to_empty) & set(protected_buckets)
        if protected:
            raise PlanRegistryError(
                f"Section {plan.key} targets protected buckets: "
                f"{', '.join(sorted(protected))}"
            )

        self._plans[plan.key] = plan
        for alias in plan.aliases:
            self._aliases[alias] = plan.key

    def __contains__(self, key: object) -> bool:
        return key in self._plans or key in self._aliases

    def __iter__(self) -> Iterator[SectionPlan]:
        return iter(self._plans.values())

    def __len__(self) -> int:
        return len(self._plans)

    def describe(self) -> list[SectionSummary]:
        """Catalogue of every section, in registration order."""
        return [plan.summary() for plan in self._plans.values()]

    def resolve(self, key: str) -> SectionPlan:
        """Return the plan for ``key``.

        Raises:
            UnknownSectionError: If ``key`` is neither a key nor an alias.
        """
        canonical = self._aliases.get(key, key)
        try:
            return self._plans[canonical]
        except KeyError:
            raise UnknownSectionError([key]) from None

    def resolve_all(self, keys: Iterable[str]) -> list[SectionPlan]:
        """Resolve every key before anything runs.

        Keeps request order and drops repeats (an alias and its canonical
        key count as the same section).

        Raises:
            UnknownSectionError: Listing every unknown key, if any.
        """
        plans: list[SectionPlan] = []
        seen: set[str] = set()
        unknown: list[str] = []
        for key in keys:
            if key not in self:
                unknown.append(key)
                continue
            plan = self.resolve(key)
            if plan.key not in seen:
                seen.add(plan.key)
                plans.append(plan)
        if unknown:
            raise UnknownSectionError(unknown)
        return plans


SECTION_PLANS: tuple[SectionPlan, ...] = (
    SectionPlan(
        key="hero",
        label="Hero Section Content",
        tables_to_reset=(
            ResetRow(
                table="hero_content",
                row_id=HERO_CONTENT_ID,
                defaults=_frozen(
                    {
                        "main_name": "Hero Content Reset by Admin",
                        "subtitles": [],
                        "social_media_links": [],
                    }
                ),
            ),
        ),
    ),
    SectionPlan(
        key="about",
        label="About Section Content",
        tables_to_reset=(
            ResetRow(
                table="about_content",
                row_id=ABOUT_CONTENT_ID,
                defaults=_frozen(
                    {
                        "headline_main": "About Content Reset by Admin",
                        "headline_code_keyword": None,
                        "headline_connector": None,
                        "headline_creativity_keyword": None,
                        "paragraph1": (
                            "Please update the 'About Me' section from the admin dashboard."
                        ),
                        "paragraph2": None,
                        "paragraph3": None,
                        "image_url": None,
                        "image_tagline": None,
                    }
                ),
            ),
        ),
        buckets_to_empty=("about-images",),
    ),
    SectionPlan(
        key="projects",
        aliases=("projects_all",),
        label="All Projects Data",
        tables_to_clear=("project_views", "projects"),
        buckets_to_empty=("project-images",),
    ),
    SectionPlan(
        key="project_views_analytics",
        label="Project Views Data (Analytics)",
        tables_to_clear=("project_views",),
    ),
    SectionPlan(
        key="skills",
        aliases=("skills_all",),
        label="All Skills & Categories Data",
        tables_to_clear=("skill_interactions", "skills", "skill_categories"),
        buckets_to_empty=("category-icons", "skill-icons"),
    ),
    SectionPlan(
        key="skill_interactions_analytics",
        label="Skill Interactions Data (Analytics)",
        tables_to_clear=("skill_interactions",),
    ),
    SectionPlan(
        key="journey",
        aliases=("journey_events",),
        label="Journey/Timeline Events Data",
        tables_to_clear=("timeline_events",),
    ),
    SectionPlan(
        key="certifications",
        aliases=("certifications_all",),
        label="All Certifications Data",
        tables_to_clear=("certifications",),
        buckets_to_empty=("certification-images",),
    ),
    SectionPlan(
        key="resume",
        aliases=("resume_all",),
        label="All Resume Data",
        tables_to_clear=(
            "resume_experience",
            "resume_education",
            "resume_key_skills",
            "resume_key_skill_categories",
            "resume_languages",
            "resume_downloads",
        ),
        tables_to_reset=(
            ResetRow(
                table="resume_meta",
                row_id=RESUME_META_ID,
                defaults=_frozen(
                    {
                        "description": (
                            "Resume overview has been reset. "
                            "Please update from the admin panel."
                        ),
                        "resume_pdf_url": None,
                    }
                ),
            ),
        ),
        buckets_to_empty=(
            "resume-pdfs",
            "resume-experience-icons",
            "resume-education-icons",
            "resume-language-icons",
        ),
    ),
    SectionPlan(
        key="resume_downloads_analytics",
        label="Resume Downloads Data (Analytics)",
        tables_to_clear=("resume_downloads",),
    ),
    SectionPlan(
        key="contact_page_content",
        label="Contact Page Details & Social Links",
        tables_to_clear=("social_links",),
        tables_to_reset=(
            ResetRow(
                table="contact_page_details",
                row_id=CONTACT_PAGE_DETAILS_ID,
                defaults=_frozen(
                    {
                        "address": "Contact Address Reset by Admin",
                        "phone": None,
                        "phone_href": None,
                        "email": "contact-reset@example.com",
                        "email_href": None,
                    }
                ),
            ),
        ),
    ),
    SectionPlan(
        key="contact_submissions",
        aliases=("contact_submissions_all",),
        label="All Contact Form Submissions",
        tables_to_clear=("contact_submissions",),
    ),
    SectionPlan(
        key="legal_docs",
        aliases=("legal_docs_content",),
        label="Legal Documents Content",
        tables_to_reset=(
            ResetRow(
                table="legal_documents",
                row_id=TERMS_AND_CONDITIONS_ID,
                defaults=_frozen(
                    {
                        "title": "Terms & Conditions",
                        "content": "Terms content reset by admin. Please update.",
                    }
                ),
            ),
            ResetRow(
                table="legal_documents",
                row_id=PRIVACY_POLICY_ID,
                defaults=_frozen(
                    {
                        "title": "Privacy Policy",
                        "content": "Privacy content reset by admin. Please update.",
                    }
                ),
            ),
        ),
    ),
    SectionPlan(
        key="visitor_analytics",
        label="Visitor Analytics Data",
        tables_to_clear=("visitor_logs",),
    ),
    SectionPlan(
        key="activity_log",
        aliases=("admin_activity_log",),
        label="Admin Activity Log",
        tables_to_clear=("admin_activity_log",),
    ),
    SectionPlan(
        key="social_media_clicks_all",
        label="All Social Media Clicks",
        tables_to_clear=("social_media_clicks",),
    ),
    SectionPlan(
        key="quick_notes_user",
        label="All My Quick Notes",
        special_handling=DeleteOwnedRows(
            name="delete_user_quick_notes",
            table="quick_notes",
            owner_column="user_id",
        ),
    ),
    SectionPlan(
        key="site_maintenance_message_reset",
        label="Site Maintenance Message",
        special_handling=ResetSharedField(
            name="reset_site_maintenance_message",
            table="site_settings",
            row_id=SITE_SETTINGS_ID,
            values=_frozen({"maintenance_message": DEFAULT_MAINTENANCE_MESSAGE}),
        ),
    ),
)

SECTION_REGISTRY = SectionRegistry(SECTION_PLANS, known_tables=Base.metadata.tables)
