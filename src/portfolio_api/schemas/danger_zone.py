"""Danger-zone request, report and catalogue schemas.

Wire format is camelCase (``sectionKeys``, ``sectionKey``, ``stepType``)
because the admin UI consumes these payloads directly.
"""

from enum import StrEnum, auto

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StepType(StrEnum):
    table_clear = auto()
    table_reset = auto()
    bucket_empty = auto()
    special_handling = auto()


class StepStatus(StrEnum):
    """Outcome of one step.

    ``warning`` means the step ran but may not have done what was intended
    (a reset matched no row). ``partial`` means a bucket was only partly
    emptied before the time budget ran out.
    """

    success = auto()
    warning = auto()
    partial = auto()
    failed = auto()


class DeletionRequest(BaseModel):
    """Body of ``POST /api/admin/danger-zone/delete``.

    Only the wire name ``sectionKeys`` is accepted.
    """

    section_keys: list[str] = Field(
        ...,
        alias="sectionKeys",
        min_length=1,
        description="Section keys (or aliases) to delete, processed in order.",
    )


class DeletionStepResult(CamelModel):
    target: str
    step_type: StepType
    status: StepStatus
    success: bool
    message: str
    details: list[str] = Field(default_factory=list)
    rows_affected: int | None = None
    objects_removed: int | None = None
    bytes_removed: int | None = None


class SectionResult(CamelModel):
    section_key: str
    label: str
    success: bool
    message: str
    details: list[str] = Field(default_factory=list)
    steps: list[DeletionStepResult] = Field(default_factory=list)


class DeletionError(BaseModel):
    item: str
    type: str
    message: str


class DeletionReport(CamelModel):
    success: bool
    message: str
    requested_section_keys: list[str]
    results: list[SectionResult]
    successes: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    errors: list[DeletionError] = Field(default_factory=list)


class ResetTarget(CamelModel):
    table: str
    row_id: str


class SectionSummary(CamelModel):
    """What one section touches, for the admin UI's selection list."""

    key: str
    label: str
    aliases: list[str] = Field(default_factory=list)
    tables_to_clear: list[str] = Field(default_factory=list)
    tables_to_reset: list[ResetTarget] = Field(default_factory=list)
    buckets_to_empty: list[str] = Field(default_factory=list)
    special_handling: str | None = None


class ErrorResponse(BaseModel):
    error: str
