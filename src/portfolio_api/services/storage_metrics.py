"""Storage usage for the admin dashboard.

Bucket usage has no aggregate endpoint, so it is computed by listing
every object. That scan shares the time budget logic used when emptying
buckets: when the budget runs low the total gathered so far is returned
and labelled partial instead of letting the request time out.
"""

from typing import Any, Protocol

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.config import settings
from portfolio_api.logging_config import get_logger
from portfolio_api.schemas.storage_metrics import BucketUsage, StorageMetricsResponse
from portfolio_api.services.bucket_emptying import (
    ObjectStore,
    format_bytes,
    scan_bucket,
)
from portfolio_api.services.storage_client import StorageError
from portfolio_api.services.time_budget import TimeBudget

logger = get_logger(__name__)

_SKIPPED_BUCKETS = {"migrations"}
_INTERNAL_BUCKET_PREFIX = "supabase-"


class BucketLister(ObjectStore, Protocol):
    async def list_buckets(self) -> list[dict[str, Any]]: ...


def _is_internal(bucket: dict[str, Any]) -> bool:
    name = bucket.get("name") or ""
    bucket_id = bucket.get("id") or ""
    return (
        name.startswith(_INTERNAL_BUCKET_PREFIX)
        or bucket_id.startswith(_INTERNAL_BUCKET_PREFIX)
        or name in _SKIPPED_BUCKETS
    )


async def get_database_size(db: AsyncSession) -> int | None:
    """Size of the current database in bytes, or None where unsupported."""
    try:
        result = await db.execute(text("SELECT pg_database_size(current_database())"))
        size = result.scalar_one()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.warning("Database size unavailable", error=str(exc))
        return None
    return int(size) if size is not None else None


async def get_bucket_usage(
    storage: BucketLister,
    budget: TimeBudget,
    max_files_per_bucket: int | None = None,
) -> tuple[int, str, bool, list[BucketUsage]]:
    """Sum object sizes across every non-internal bucket.

    Returns:
        (total bytes or -1 on a list failure, pretty label, partial flag,
        per-bucket usage)
    """
    max_files = max_files_per_bucket or settings.metrics_max_files_per_bucket
    usage: list[BucketUsage] = []
    total = 0

    try:
        buckets = await storage.list_buckets()
    except StorageError as exc:
        logger.error("Error listing buckets", error=exc.message)
        return -1, "Error listing buckets", False, usage

    if not buckets:
        return 0, "0 Bytes (No buckets)", False, usage

    for index, bucket in enumerate(buckets):
        if _is_internal(bucket):
            continue
        name = bucket["name"]

        if budget.exhausted():
            logger.warning(
                "Bucket usage scan out of time",
                processed_buckets=index,
                total_buckets=len(buckets),
            )
            return total, f"~{format_bytes(total)} (Partial - Timeout)", True, usage

        try:
            scan = await scan_bucket(
                storage,
                name,
                budget,
                max_objects=max_files,
                include_placeholders=False,
            )
        except StorageError as exc:
            logger.error("Error listing bucket objects", bucket=name, error=exc.message)
            return -1, f"Error (List Fail {name})", False, usage

        total += scan.total_bytes
        usage.append(
            BucketUsage(
                name=name,
                bytes_used=scan.total_bytes,
                object_count=scan.object_count,
                truncated=scan.truncated,
            )
        )
        if scan.stopped_by_limit:
            logger.warning(
                "Reached scan limit for bucket; reported size may be partial",
                bucket=name,
                max_files=max_files,
            )
        if scan.stopped_by_deadline:
            return total, f"~{format_bytes(total)} (Partial - Timeout in {name})", True, usage

    return total, f"~{format_bytes(total)}", False, usage


async def collect_storage_metrics(
    db: AsyncSession,
    storage: BucketLister,
    budget: TimeBudget | None = None,
) -> StorageMetricsResponse:
    budget = budget or TimeBudget(
        settings.metrics_time_budget_ms, settings.deadline_margin_ms
    )
    db_size = await get_database_size(db)
    total, pretty, partial, usage = await get_bucket_usage(storage, budget)

    return StorageMetricsResponse(
        database_size=format_bytes(db_size) if db_size is not None else None,
        database_size_bytes=db_size,
        max_database_size_mb=settings.plan_db_max_size_mb,
        bucket_storage_used=pretty,
        bucket_storage_used_bytes=total,
        bucket_storage_partial=partial,
        max_bucket_storage_mb=settings.plan_bucket_max_size_mb,
        buckets=usage,
    )
