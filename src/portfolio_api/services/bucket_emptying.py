"""Bucket scanning and emptying.

``scan_bucket`` walks a bucket page by page (descending into folders)
and accumulates object paths and sizes, stopping early when the request
time budget runs low. ``empty_bucket`` removes everything a scan found,
in batches, and reports one of three outcomes:

- complete: every listed object was removed (or the bucket was empty)
- partial: the time budget ran out; counts cover what was removed so far
- failed: listing or removal was rejected by the store

Removal is irreversible and never rolled back: objects removed by earlier
batches stay removed when a later batch fails.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Any, Protocol

from portfolio_api.config import settings
from portfolio_api.logging_config import get_logger
from portfolio_api.services.storage_client import StorageError
from portfolio_api.services.time_budget import TimeBudget

logger = get_logger(__name__)

# Written by the storage UI to keep otherwise empty folders visible
PLACEHOLDER_OBJECT = ".emptyFolderPlaceholder"


class ObjectStore(Protocol):
    async def list_objects(
        self, bucket: str, prefix: str = "", limit: int = 100, offset: int = 0
    ) -> list[dict[str, Any]]: ...

    async def remove_objects(self, bucket: str, paths: list[str]) -> list[dict[str, Any]]: ...


class BucketOutcome(StrEnum):
    complete = auto()
    partial = auto()
    failed = auto()


@dataclass
class BucketScan:
    """Objects found in one bucket and why the scan stopped."""

    bucket: str
    objects: list[tuple[str, int]] = field(default_factory=list)
    pages: int = 0
    stopped_by_deadline: bool = False
    stopped_by_limit: bool = False

    @property
    def object_count(self) -> int:
        return len(self.objects)

    @property
    def total_bytes(self) -> int:
        return sum(size for _, size in self.objects)

    @property
    def truncated(self) -> bool:
        return self.stopped_by_deadline or self.stopped_by_limit


@dataclass
class BucketEmptyResult:
    bucket: str
    outcome: BucketOutcome
    message: str
    objects_removed: int = 0
    bytes_removed: int = 0
    pages_listed: int = 0
    details: list[str] = field(default_factory=list)


def format_bytes(num_bytes: int, decimals: int = 2) -> str:
    """Format a byte count as a short human-readable string (``1.5 MB``)."""
    if num_bytes <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB", "TB"]
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, max(decimals, 0)):g} {units[unit]}"


def _object_size(entry: dict[str, Any]) -> int:
    size = (entry.get("metadata") or {}).get("size")
    return size if isinstance(size, int) else 0


async def scan_bucket(
    storage: ObjectStore,
    bucket: str,
    budget: TimeBudget,
    page_size: int | None = None,
    max_objects: int | None = None,
    include_placeholders: bool = True,
) -> BucketScan:
    """List every object in ``bucket``.

    The budget and the optional object cap are checked before each page
    request. Entries without an id are folders and are queued for their
    own listing.

    Raises:
        StorageError: If the store rejects a list request.
    """
    page_size = page_size or settings.storage_list_page_size
    scan = BucketScan(bucket=bucket)
    prefixes: deque[str] = deque([""])

    while prefixes:
        prefix = prefixes.popleft()
        offset = 0
        while True:
            if budget.exhausted():
                scan.stopped_by_deadline = True
                return scan
            if max_objects is not None and scan.object_count >= max_objects:
                scan.stopped_by_limit = True
                return scan

            entries = await storage.list_objects(
                bucket, prefix=prefix, limit=page_size, offset=offset
            )
            scan.pages += 1

            for entry in entries:
                name = entry.get("name")
                if not name:
                    continue
                path = f"{prefix}{name}"
                if entry.get("id") is None:
                    prefixes.append(f"{path}/")
                    continue
                if name == PLACEHOLDER_OBJECT and not include_placeholders:
                    continue
                scan.objects.append((path, _object_size(entry)))

            if len(entries) < page_size:
                break
            offset += len(entries)

    return scan


async def empty_bucket(
    storage: ObjectStore,
    bucket: str,
    budget: TimeBudget,
    page_size: int | None = None,
    batch_size: int | None = None,
) -> BucketEmptyResult:
    """Remove every object from ``bucket`` within the time budget.

    Store rejections become a ``failed`` result; an unreachable store
    (``StorageUnavailableError``) propagates to the caller.
    """
    batch_size = batch_size or settings.storage_remove_batch_size

    try:
        scan = await scan_bucket(storage, bucket, budget, page_size=page_size)
    except StorageError as exc:
        logger.error("Error listing bucket", bucket=bucket, error=exc.message)
        return BucketEmptyResult(
            bucket=bucket,
            outcome=BucketOutcome.failed,
            message=f"Error listing files in {bucket}: {exc.message}",
        )

    if scan.object_count == 0:
        if scan.stopped_by_deadline:
            return BucketEmptyResult(
                bucket=bucket,
                outcome=BucketOutcome.partial,
                message=(
                    f"Time budget exhausted before {bucket} could be listed; "
                    "no objects removed. Run again to finish."
                ),
                pages_listed=scan.pages,
            )
        return BucketEmptyResult(
            bucket=bucket,
            outcome=BucketOutcome.complete,
            message=f"Bucket {bucket} was already empty or no files found.",
            pages_listed=scan.pages,
        )

    logger.info(
        "Removing bucket objects",
        bucket=bucket,
        object_count=scan.object_count,
        pages=scan.pages,
    )

    removed = 0
    removed_bytes = 0
    details: list[str] = []
    stopped_by_deadline = scan.stopped_by_deadline
    for start in range(0, scan.object_count, batch_size):
        # The first batch always goes out so repeated runs make progress
        if start > 0 and budget.exhausted():
            stopped_by_deadline = True
            break
        batch = scan.objects[start : start + batch_size]
        try:
            await storage.remove_objects(bucket, [path for path, _ in batch])
        except StorageError as exc:
            logger.error(
                "Error removing bucket objects",
                bucket=bucket,
                removed_before_failure=removed,
                error=exc.message,
            )
            return BucketEmptyResult(
                bucket=bucket,
                outcome=BucketOutcome.failed,
                message=(
                    f"Error removing files from {bucket}: {exc.message} "
                    f"({removed} objects removed before the failure)"
                ),
                objects_removed=removed,
                bytes_removed=removed_bytes,
                pages_listed=scan.pages,
                details=details,
            )
        batch_bytes = sum(size for _, size in batch)
        removed += len(batch)
        removed_bytes += batch_bytes
        details.append(
            f"Batch {len(details) + 1}: removed {len(batch)} objects ({format_bytes(batch_bytes)})."
        )

    if stopped_by_deadline or removed < scan.object_count:
        logger.warning(
            "Bucket emptying stopped by time budget",
            bucket=bucket,
            objects_removed=removed,
            bytes_removed=removed_bytes,
        )
        return BucketEmptyResult(
            bucket=bucket,
            outcome=BucketOutcome.partial,
            message=(
                f"Partially emptied bucket {bucket}: removed {removed} objects "
                f"({format_bytes(removed_bytes)}) before the time budget ran out. "
                "Run again to finish."
            ),
            objects_removed=removed,
            bytes_removed=removed_bytes,
            pages_listed=scan.pages,
            details=details,
        )

    return BucketEmptyResult(
        bucket=bucket,
        outcome=BucketOutcome.complete,
        message=(
            f"Successfully emptied bucket {bucket} "
            f"({removed} objects, {format_bytes(removed_bytes)})."
        ),
        objects_removed=removed,
        bytes_removed=removed_bytes,
        pages_listed=scan.pages,
        details=details,
    )
