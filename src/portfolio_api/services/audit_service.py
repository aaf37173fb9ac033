"""Admin activity logging service."""

from enum import StrEnum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.logging_config import get_logger
from portfolio_api.models.admin import AdminActivityLog

logger = get_logger(__name__)


class ActivityAction(StrEnum):
    DATA_DELETION_SUCCESS = "DATA_DELETION_SUCCESS"
    DATA_DELETION_PARTIAL_FAILURE = "DATA_DELETION_PARTIAL_FAILURE"
    DATA_DELETION_BLOCKED = "DATA_DELETION_BLOCKED"
    DATA_DELETION_ERROR = "DATA_DELETION_ERROR"


async def log_activity(
    db: AsyncSession,
    action_type: str,
    description: str,
    user_identifier: str | None = None,
    details: dict[str, Any] | None = None,
) -> bool:
    """Append one entry to the admin activity log and commit it.

    Fire-and-forget: logs errors but never raises so callers are not
    disrupted. Returns whether the entry was written.
    """
    try:
        entry = AdminActivityLog(
            action_type=str(action_type),
            description=description,
            user_identifier=user_identifier,
            details=details,
        )
        db.add(entry)
        await db.commit()
        return True
    except Exception:
        try:
            await db.rollback()
        except Exception:
            logger.exception("Rollback after failed activity log write also failed")
        logger.exception(
            "Failed to write admin activity log",
            action_type=str(action_type),
            user_identifier=user_identifier,
        )
        return False
