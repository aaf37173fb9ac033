"""Danger-zone endpoints: the section catalogue and bulk deletion."""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.config import settings
from portfolio_api.core.auth import AdminIdentity
from portfolio_api.database import get_db
from portfolio_api.schemas.danger_zone import (
    DeletionReport,
    DeletionRequest,
    ErrorResponse,
    SectionSummary,
)
from portfolio_api.services.data_deletion import (
    DeletionAbortedError,
    DeletionOrchestrator,
    record_blocked_attempt,
)
from portfolio_api.services.section_registry import SECTION_REGISTRY, UnknownSectionError
from portfolio_api.services.storage_client import StorageClient, get_storage_client

router = APIRouter(prefix="/api/admin/danger-zone", tags=["danger-zone"])


@router.api_route(
    "/sections",
    methods=["GET", "POST"],
    response_model=list[SectionSummary],
)
async def list_sections(_admin: AdminIdentity) -> list[SectionSummary]:
    """List every deletable section and the storage it touches."""
    return SECTION_REGISTRY.describe()


@router.post(
    "/delete",
    response_model=DeletionReport,
    responses={
        207: {"model": DeletionReport, "description": "Some steps failed"},
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def delete_sections(
    body: DeletionRequest,
    admin: AdminIdentity,
    db: AsyncSession = Depends(get_db),
    storage: StorageClient = Depends(get_storage_client),
) -> JSONResponse:
    """Permanently delete or reset the data behind the selected sections.

    Every key is validated before anything is deleted. Once execution
    starts, a failing step does not stop the others: the response lists
    each section's per-target outcome with status 200 when everything
    succeeded and 207 when some steps failed.
    """
    if not settings.danger_zone_enabled:
        await record_blocked_attempt(db, body.section_keys, admin)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="The danger zone is disabled on this deployment.",
        )

    orchestrator = DeletionOrchestrator(db, storage)
    try:
        report = await orchestrator.run(body.section_keys, admin)
    except UnknownSectionError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid request body: {exc}",
        )
    except DeletionAbortedError as exc:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK if report.success else status.HTTP_207_MULTI_STATUS,
        content=report.model_dump(mode="json", by_alias=True),
    )
