"""Tests for the danger-zone section registry."""

import pytest

from portfolio_api.models import Base
from portfolio_api.services.section_registry import (
    PROTECTED_BUCKETS,
    SECTION_REGISTRY,
    ClearTable,
    DeleteOwnedRows,
    EmptyBucket,
    PlanRegistryError,
    ResetRow,
    ResetSharedField,
    SectionPlan,
    SectionRegistry,
    UnknownSectionError,
)

EXPECTED_KEYS = {
    "hero",
    "about",
    "projects",
    "project_views_analytics",
    "skills",
    "skill_interactions_analytics",
    "journey",
    "certifications",
    "resume",
    "resume_downloads_analytics",
    "contact_page_content",
    "contact_submissions",
    "legal_docs",
    "visitor_analytics",
    "activity_log",
    "social_media_clicks_all",
    "quick_notes_user",
    "site_maintenance_message_reset",
}


class TestSectionCatalogue:
    """The built-in registry covers every section exactly once."""

    def test_every_section_registered(self):
        assert {plan.key for plan in SECTION_REGISTRY} == EXPECTED_KEYS
        assert len(SECTION_REGISTRY) == len(EXPECTED_KEYS)

    def test_every_table_exists_in_models(self):
        for plan in SECTION_REGISTRY:
            assert plan.tables() <= set(Base.metadata.tables), plan.key

    def test_no_plan_touches_protected_buckets(self):
        for plan in SECTION_REGISTRY:
            assert not set(plan.buckets_to_empty) & PROTECTED_BUCKETS

    @pytest.mark.parametrize(
        "alias,canonical",
        [
            ("projects_all", "projects"),
            ("skills_all", "skills"),
            ("journey_events", "journey"),
            ("certifications_all", "certifications"),
            ("resume_all", "resume"),
            ("contact_submissions_all", "contact_submissions"),
            ("legal_docs_content", "legal_docs"),
            ("admin_activity_log", "activity_log"),
        ],
    )
    def test_aliases_resolve_to_canonical_plan(self, alias, canonical):
        assert SECTION_REGISTRY.resolve(alias).key == canonical

    def test_dependent_tables_cleared_before_parents(self):
        """Rows referencing a table are cleared before the table itself."""
        projects = SECTION_REGISTRY.resolve("projects").tables_to_clear
        assert projects.index("project_views") < projects.index("projects")

        skills = SECTION_REGISTRY.resolve("skills").tables_to_clear
        assert skills.index("skill_interactions") < skills.index("skills")
        assert skills.index("skills") < skills.index("skill_categories")

    def test_resume_section_resets_meta_and_clears_tables(self):
        plan = SECTION_REGISTRY.resolve("resume")

        assert "resume_meta" not in plan.tables_to_clear
        assert [reset.table for reset in plan.tables_to_reset] == ["resume_meta"]
        assert "resume_downloads" in plan.tables_to_clear
        assert "resume-pdfs" in plan.buckets_to_empty

    def test_special_sections(self):
        notes = SECTION_REGISTRY.resolve("quick_notes_user").special_handling
        assert isinstance(notes, DeleteOwnedRows)
        assert notes.table == "quick_notes"
        assert notes.owner_column == "user_id"

        maintenance = SECTION_REGISTRY.resolve("site_maintenance_message_reset")
        assert isinstance(maintenance.special_handling, ResetSharedField)
        assert set(maintenance.special_handling.values) == {"maintenance_message"}

    def test_reset_defaults_are_read_only(self):
        reset = SECTION_REGISTRY.resolve("hero").tables_to_reset[0]
        with pytest.raises(TypeError):
            reset.defaults["main_name"] = "changed"


class TestSectionPlanSteps:
    def test_steps_in_execution_order(self):
        plan = SectionPlan(
            key="mixed",
            label="Mixed",
            tables_to_clear=("a", "b"),
            tables_to_reset=(ResetRow(table="c", row_id="1"),),
            buckets_to_empty=("bucket",),
            special_handling=DeleteOwnedRows(name="owned", table="d", owner_column="user_id"),
        )

        steps = plan.steps()

        assert steps[0] == ClearTable("a")
        assert steps[1] == ClearTable("b")
        assert isinstance(steps[2], ResetRow)
        assert steps[3] == EmptyBucket("bucket")
        assert isinstance(steps[4], DeleteOwnedRows)

    def test_reset_target_names_row(self):
        reset = ResetRow(table="legal_documents", row_id="privacy-policy")
        assert reset.target == "legal_documents (ID: privacy-policy)"


class TestResolve:
    def test_resolve_all_keeps_order_and_drops_repeats(self):
        plans = SECTION_REGISTRY.resolve_all(
            ["visitor_analytics", "projects", "projects_all", "visitor_analytics"]
        )

        assert [plan.key for plan in plans] == ["visitor_analytics", "projects"]

    def test_resolve_all_reports_every_unknown_key(self):
        with pytest.raises(UnknownSectionError) as exc_info:
            SECTION_REGISTRY.resolve_all(["projects", "bogus", "also_bogus"])

        assert exc_info.value.keys == ["bogus", "also_bogus"]
        assert "bogus, also_bogus" in str(exc_info.value)

    def test_resolve_unknown_key(self):
        with pytest.raises(UnknownSectionError):
            SECTION_REGISTRY.resolve("everything")

    def test_contains(self):
        assert "projects" in SECTION_REGISTRY
        assert "projects_all" in SECTION_REGISTRY
        assert "nope" not in SECTION_REGISTRY


class TestRegistryValidation:
    """Inconsistent plans are rejected when the registry is built."""

    def test_duplicate_key(self):
        plans = [
            SectionPlan(key="a", label="A", tables_to_clear=("t",)),
            SectionPlan(key="a", label="A again", tables_to_clear=("u",)),
        ]
        with pytest.raises(PlanRegistryError, match="Duplicate"):
            SectionRegistry(plans)

    def test_alias_colliding_with_key(self):
        plans = [
            SectionPlan(key="a", label="A", tables_to_clear=("t",)),
            SectionPlan(key="b", label="B", tables_to_clear=("u",), aliases=("a",)),
        ]
        with pytest.raises(PlanRegistryError, match="Duplicate"):
            SectionRegistry(plans)

    def test_plan_without_steps(self):
        with pytest.raises(PlanRegistryError, match="no steps"):
            SectionRegistry([SectionPlan(key="empty", label="Empty")])

    def test_table_both_cleared_and_reset(self):
        plan = SectionPlan(
            key="a",
            label="A",
            tables_to_clear=("t",),
            tables_to_reset=(ResetRow(table="t", row_id="1"),),
        )
        with pytest.raises(PlanRegistryError, match="both clears and resets"):
            SectionRegistry([plan])

    def test_unknown_table(self):
        plan = SectionPlan(key="a", label="A", tables_to_clear=("missing",))
        with pytest.raises(PlanRegistryError, match="unknown tables"):
            SectionRegistry([plan], known_tables={"present"})

    def test_protected_bucket(self):
        plan = SectionPlan(key="a", label="A", buckets_to_empty=("admin-profile-photos",))
        with pytest.raises(PlanRegistryError, match="protected"):
            SectionRegistry([plan])


class TestDescribe:
    def test_catalogue_entry(self):
        catalogue = {summary.key: summary for summary in SECTION_REGISTRY.describe()}

        assert len(catalogue) == len(SECTION_REGISTRY)
        legal = catalogue["legal_docs"]
        assert legal.aliases == ["legal_docs_content"]
        assert [target.row_id for target in legal.tables_to_reset] == [
            "terms-and-conditions",
            "privacy-policy",
        ]
        assert catalogue["site_maintenance_message_reset"].special_handling == (
            "reset_site_maintenance_message"
        )
        assert catalogue["visitor_analytics"].special_handling is None
