"""Storage metrics schemas."""

from pydantic import Field

from portfolio_api.schemas.danger_zone import CamelModel


class BucketUsage(CamelModel):
    name: str
    bytes_used: int
    object_count: int
    truncated: bool = False


class StorageMetricsResponse(CamelModel):
    """Database and bucket usage against the hosting plan's limits.

    ``bucket_storage_used_bytes`` is -1 when a bucket could not be listed.
    A trailing ``(Partial ...)`` in ``bucket_storage_used`` marks a total
    cut short by the time budget.
    """

    database_size: str | None
    database_size_bytes: int | None
    max_database_size_mb: int
    bucket_storage_used: str
    bucket_storage_used_bytes: int
    bucket_storage_partial: bool
    max_bucket_storage_mb: int
    buckets: list[BucketUsage] = Field(default_factory=list)
