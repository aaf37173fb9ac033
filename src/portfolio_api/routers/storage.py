"""Storage metrics endpoint."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.core.auth import AdminIdentity
from portfolio_api.database import get_db
from portfolio_api.schemas.storage_metrics import StorageMetricsResponse
from portfolio_api.services.storage_client import (
    StorageClient,
    StorageUnavailableError,
    get_storage_client,
)
from portfolio_api.services.storage_metrics import collect_storage_metrics

router = APIRouter(prefix="/api/admin", tags=["storage"])


@router.api_route(
    "/storage-metrics",
    methods=["GET", "POST"],
    response_model=StorageMetricsResponse,
)
async def get_storage_metrics(
    _admin: AdminIdentity,
    db: AsyncSession = Depends(get_db),
    storage: StorageClient = Depends(get_storage_client),
) -> StorageMetricsResponse:
    """Database size and approximate bucket usage against plan limits."""
    try:
        return await collect_storage_metrics(db, storage)
    except StorageUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        )
