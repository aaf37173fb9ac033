"""Admin activity log endpoint."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.core.auth import AdminIdentity
from portfolio_api.database import get_db
from portfolio_api.models.admin import AdminActivityLog
from portfolio_api.schemas.activity_log import ActivityLogEntry, ActivityLogResponse

router = APIRouter(prefix="/api/admin", tags=["activity-log"])


@router.api_route(
    "/activity-log",
    methods=["GET", "POST"],
    response_model=ActivityLogResponse,
)
async def list_activity(
    _admin: AdminIdentity,
    limit: int = Query(default=50, ge=1, le=200),
    action_type: str | None = Query(default=None, max_length=50),
    db: AsyncSession = Depends(get_db),
) -> ActivityLogResponse:
    """Most recent admin activity, newest first."""
    query = select(AdminActivityLog)
    if action_type:
        query = query.where(AdminActivityLog.action_type == action_type)
    query = query.order_by(AdminActivityLog.timestamp.desc()).limit(limit)

    result = await db.execute(query)
    entries = [ActivityLogEntry.model_validate(row) for row in result.scalars().all()]
    return ActivityLogResponse(entries=entries, count=len(entries))
