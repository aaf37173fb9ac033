"""Danger-zone data deletion.

Deletes or resets the storage behind the sections an admin selects:
table clears, singleton resets, bucket emptying and the caller-scoped
special steps defined in the section registry.

Unlike a single-transaction purge, every step commits on its own. A
failed step is rolled back, recorded and skipped; the remaining steps and
sections still run, so the admin gets a full per-target report of what
was and was not removed. Only infrastructure failures (database
connection lost, storage unreachable) abort the run.

Exactly one admin activity log entry is written per attempt.
"""

import copy
from datetime import UTC, datetime
from typing import Any, assert_never

from sqlalchemy import Table, delete, update
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.config import settings
from portfolio_api.core.security import IdentityToken
from portfolio_api.logging_config import get_logger
from portfolio_api.models import Base
from portfolio_api.schemas.danger_zone import (
    DeletionError,
    DeletionReport,
    DeletionStepResult,
    SectionResult,
    StepStatus,
    StepType,
)
from portfolio_api.services.audit_service import ActivityAction, log_activity
from portfolio_api.services.bucket_emptying import (
    BucketOutcome,
    ObjectStore,
    empty_bucket,
)
from portfolio_api.services.section_registry import (
    SECTION_REGISTRY,
    ClearTable,
    DeleteOwnedRows,
    EmptyBucket,
    PlanStep,
    ResetRow,
    ResetSharedField,
    SectionPlan,
    SectionRegistry,
)
from portfolio_api.services.time_budget import TimeBudget

logger = get_logger(__name__)

_BUCKET_STATUS = {
    BucketOutcome.complete: StepStatus.success,
    BucketOutcome.partial: StepStatus.partial,
    BucketOutcome.failed: StepStatus.failed,
}

_DETAIL_PREFIX = {
    StepStatus.success: "OK",
    StepStatus.warning: "WARNING",
    StepStatus.partial: "PARTIAL",
    StepStatus.failed: "ERROR",
}


class DeletionAbortedError(Exception):
    """Infrastructure failure that stopped a deletion run part way."""


def _is_connection_failure(exc: SQLAlchemyError) -> bool:
    if isinstance(exc, PoolTimeoutError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def _db_error_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def _step(
    target: str,
    step_type: StepType,
    status: StepStatus,
    message: str,
    **extra: Any,
) -> DeletionStepResult:
    return DeletionStepResult(
        target=target,
        step_type=step_type,
        status=status,
        success=status in (StepStatus.success, StepStatus.warning),
        message=message,
        **extra,
    )


def build_section_result(
    plan: SectionPlan, steps: list[DeletionStepResult]
) -> SectionResult:
    success = all(step.success for step in steps)
    return SectionResult(
        section_key=plan.key,
        label=plan.label,
        success=success,
        message=(
            f"Data for {plan.label} processed."
            if success
            else f"Data for {plan.label} processed with errors."
        ),
        details=[f"{_DETAIL_PREFIX[step.status]}: {step.message}" for step in steps],
        steps=steps,
    )


def build_report(
    requested_keys: list[str], results: list[SectionResult]
) -> DeletionReport:
    """Aggregate section results into the caller-facing report."""
    successes: list[str] = []
    warnings: list[str] = []
    errors: list[DeletionError] = []

    for section in results:
        for step in section.steps:
            note = f"{step.message} (for section {section.section_key})"
            if step.status == StepStatus.success:
                successes.append(note)
            elif step.status == StepStatus.warning:
                warnings.append(note)
            else:
                error_type = str(step.step_type)
                if step.status == StepStatus.partial:
                    error_type = f"{error_type}_partial"
                errors.append(
                    DeletionError(item=step.target, type=error_type, message=step.message)
                )

    success = all(section.success for section in results)
    return DeletionReport(
        success=success,
        message=(
            "All selected data groups have been processed successfully."
            if success
            else "Data deletion/reset process completed. Some operations encountered errors."
        ),
        requested_section_keys=list(requested_keys),
        results=results,
        successes=successes,
        warnings=warnings,
        errors=errors,
    )


def _describe_sections(plans: list[SectionPlan], success: bool) -> str:
    labels = ", ".join(plan.label for plan in plans) or "[None]"
    status = "Complete" if success else "Partial"
    return f"Admin deleted data for sections: {labels}. Status: {status}."


class DeletionOrchestrator:
    """Runs section plans for one danger-zone request.

    Args:
        db: Session used for every table step and the activity log entry.
        storage: Object store client for bucket steps.
        registry: Section plans to resolve keys against.
        budget: Request time budget shared by all bucket steps.
    """

    def __init__(
        self,
        db: AsyncSession,
        storage: ObjectStore,
        registry: SectionRegistry = SECTION_REGISTRY,
        budget: TimeBudget | None = None,
    ):
        self.db = db
        self.storage = storage
        self.registry = registry
        self.budget = budget or TimeBudget(
            settings.deletion_time_budget_ms, settings.deadline_margin_ms
        )

    def validate(self, section_keys: list[str]) -> list[SectionPlan]:
        """Resolve every key up front.

        Raises:
            UnknownSectionError: If any key is unknown; nothing has run yet.
        """
        return self.registry.resolve_all(section_keys)

    async def run(self, section_keys: list[str], actor: IdentityToken) -> DeletionReport:
        """Validate, execute every section in order, audit, and report.

        Raises:
            UnknownSectionError: Before any step runs.
            DeletionAbortedError: On infrastructure failure mid-run, after
                the failure has been written to the activity log.
        """
        plans = self.validate(section_keys)
        logger.warning(
            "Danger-zone deletion started",
            user_id=str(actor.user_id),
            sections=[plan.key for plan in plans],
        )

        results: list[SectionResult] = []
        try:
            for plan in plans:
                results.append(await self.run_section(plan, actor))
        except Exception as exc:
            await self._abort(plans, results, actor, exc)
            raise DeletionAbortedError(str(exc)) from exc

        report = build_report(section_keys, results)
        await log_activity(
            self.db,
            action_type=(
                ActivityAction.DATA_DELETION_SUCCESS
                if report.success
                else ActivityAction.DATA_DELETION_PARTIAL_FAILURE
            ),
            description=_describe_sections(plans, report.success),
            user_identifier=str(actor.user_id),
            details={
                "requested_section_keys": list(section_keys),
                "report": report.model_dump(mode="json", by_alias=True),
            },
        )

        logger.warning(
            "Danger-zone deletion completed",
            user_id=str(actor.user_id),
            success=report.success,
            error_count=len(report.errors),
            warning_count=len(report.warnings),
        )
        return report

    async def _abort(
        self,
        plans: list[SectionPlan],
        completed: list[SectionResult],
        actor: IdentityToken,
        exc: Exception,
    ) -> None:
        logger.exception(
            "Danger-zone deletion aborted",
            user_id=str(actor.user_id),
            completed_sections=[section.section_key for section in completed],
        )
        try:
            await self.db.rollback()
        except Exception:
            logger.exception("Rollback after aborted deletion failed")
        await log_activity(
            self.db,
            action_type=ActivityAction.DATA_DELETION_ERROR,
            description=(
                f"Data deletion aborted for sections: "
                f"{', '.join(plan.label for plan in plans)}. Error: {exc}"
            ),
            user_identifier=str(actor.user_id),
            details={
                "requested_section_keys": [plan.key for plan in plans],
                "completed_results": [
                    section.model_dump(mode="json", by_alias=True) for section in completed
                ],
                "error": str(exc),
            },
        )

    async def run_section(self, plan: SectionPlan, actor: IdentityToken) -> SectionResult:
        """Run one section's steps in order; a failed step never stops the rest."""
        logger.info("Processing section", section=plan.key)
        steps = [await self.run_step(step, actor) for step in plan.steps()]
        section = build_section_result(plan, steps)
        if not section.success:
            logger.warning(
                "Section finished with errors",
                section=plan.key,
                failed_targets=[s.target for s in steps if not s.success],
            )
        return section

    async def run_step(self, step: PlanStep, actor: IdentityToken) -> DeletionStepResult:
        if isinstance(step, ClearTable):
            result = await self._clear_table(step)
        elif isinstance(step, ResetRow):
            result = await self._reset_row(step)
        elif isinstance(step, EmptyBucket):
            result = await self._empty_bucket(step)
        elif isinstance(step, DeleteOwnedRows):
            result = await self._delete_owned_rows(step, actor)
        elif isinstance(step, ResetSharedField):
            result = await self._reset_shared_field(step)
        else:
            assert_never(step)

        logger.info(
            "Deletion step finished",
            step_type=str(result.step_type),
            target=result.target,
            status=str(result.status),
        )
        return result

    async def _write(self, statement: Any) -> int | None:
        """Execute and commit one statement; returns the affected row count.

        Database errors are rolled back and re-raised for the step to
        record (or, for connection failures, to abort the run).
        """
        try:
            result = await self.db.execute(statement)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        rowcount = result.rowcount
        return rowcount if rowcount is not None and rowcount >= 0 else None

    def _table(self, name: str) -> Table:
        return Base.metadata.tables[name]

    async def _clear_table(self, step: ClearTable) -> DeletionStepResult:
        table = self._table(step.table)
        try:
            rows = await self._write(delete(table))
        except SQLAlchemyError as exc:
            if _is_connection_failure(exc):
                raise
            return _step(
                step.table,
                StepType.table_clear,
                StepStatus.failed,
                f"Error clearing table {step.table}: {_db_error_message(exc)}",
            )
        return _step(
            step.table,
            StepType.table_clear,
            StepStatus.success,
            f"Successfully cleared table: {step.table}.",
            rows_affected=rows,
        )

    async def _update_row(
        self,
        table_name: str,
        row_id: Any,
        values: dict[str, Any],
        stamp_updated_at: bool = True,
    ) -> int | None:
        table = self._table(table_name)
        values = copy.deepcopy(values)
        if stamp_updated_at and "updated_at" in table.c:
            values["updated_at"] = datetime.now(UTC)
        statement = update(table).where(table.c.id == row_id).values(**values)
        return await self._write(statement)

    async def _reset_row(self, step: ResetRow) -> DeletionStepResult:
        try:
            rows = await self._update_row(
                step.table, step.row_id, dict(step.defaults), step.stamp_updated_at
            )
        except SQLAlchemyError as exc:
            if _is_connection_failure(exc):
                raise
            return _step(
                step.target,
                StepType.table_reset,
                StepStatus.failed,
                f"Error resetting table {step.target}: {_db_error_message(exc)}",
            )
        if rows == 0:
            return _step(
                step.target,
                StepType.table_reset,
                StepStatus.warning,
                f"No row found to reset in {step.target}; nothing was changed.",
                rows_affected=0,
            )
        return _step(
            step.target,
            StepType.table_reset,
            StepStatus.success,
            f"Successfully reset table: {step.target}.",
            rows_affected=rows,
        )

    async def _empty_bucket(self, step: EmptyBucket) -> DeletionStepResult:
        outcome = await empty_bucket(self.storage, step.bucket, self.budget)
        return _step(
            step.bucket,
            StepType.bucket_empty,
            _BUCKET_STATUS[outcome.outcome],
            outcome.message,
            objects_removed=outcome.objects_removed,
            bytes_removed=outcome.bytes_removed,
            details=outcome.details,
        )

    async def _delete_owned_rows(
        self, step: DeleteOwnedRows, actor: IdentityToken
    ) -> DeletionStepResult:
        table = self._table(step.table)
        statement = delete(table).where(table.c[step.owner_column] == actor.user_id)
        try:
            rows = await self._write(statement)
        except SQLAlchemyError as exc:
            if _is_connection_failure(exc):
                raise
            return _step(
                step.name,
                StepType.special_handling,
                StepStatus.failed,
                f"Error deleting {step.table} for user {actor.user_id}: "
                f"{_db_error_message(exc)}",
            )
        return _step(
            step.name,
            StepType.special_handling,
            StepStatus.success,
            f"Successfully deleted {step.table} for user {actor.user_id}.",
            rows_affected=rows,
        )

    async def _reset_shared_field(self, step: ResetSharedField) -> DeletionStepResult:
        target = f"{step.table} (ID: {step.row_id})"
        fields = ", ".join(step.values)
        try:
            rows = await self._update_row(step.table, step.row_id, dict(step.values))
        except SQLAlchemyError as exc:
            if _is_connection_failure(exc):
                raise
            return _step(
                step.name,
                StepType.special_handling,
                StepStatus.failed,
                f"Error resetting {fields} on {target}: {_db_error_message(exc)}",
            )
        if rows == 0:
            return _step(
                step.name,
                StepType.special_handling,
                StepStatus.warning,
                f"No row found to reset in {target}; {fields} unchanged.",
                rows_affected=0,
            )
        return _step(
            step.name,
            StepType.special_handling,
            StepStatus.success,
            f"Successfully reset {fields} on {target}.",
            rows_affected=rows,
        )


async def record_blocked_attempt(
    db: AsyncSession, section_keys: list[str], actor: IdentityToken
) -> None:
    """Audit a deletion attempt made while the danger zone is switched off."""
    logger.warning(
        "Danger-zone deletion blocked",
        user_id=str(actor.user_id),
        sections=section_keys,
    )
    await log_activity(
        db,
        action_type=ActivityAction.DATA_DELETION_BLOCKED,
        description=(
            "Data deletion attempted while the danger zone is disabled. "
            f"Requested sections: {', '.join(section_keys) or '[None]'}."
        ),
        user_identifier=str(actor.user_id),
        details={"requested_section_keys": list(section_keys)},
    )
