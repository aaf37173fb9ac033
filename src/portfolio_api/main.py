"""Portfolio admin API FastAPI application."""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio_api.config import settings, validate_settings
from portfolio_api.database import close_database
from portfolio_api.logging_config import get_logger, setup_logging
from portfolio_api.middleware import CorrelationIdMiddleware
from portfolio_api.routers import activity_log, danger_zone, health, storage

setup_logging(
    log_format=settings.log_format,
    log_level=settings.log_level,
    service_name=settings.service_name,
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    validate_settings()
    logger.info(
        "Portfolio admin API started",
        danger_zone_enabled=settings.danger_zone_enabled,
    )

    yield

    logger.info("Shutting down portfolio admin API...")
    await close_database()
    logger.info("Portfolio admin API shutdown complete")


app = FastAPI(
    title="Portfolio Admin API",
    description="Back office for the portfolio site: danger-zone deletion, storage metrics, activity log",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return every rejection as ``{"error": message}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"error": f"Invalid request body: {problems}"},
    )


# Middleware (order matters: first added = last executed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(health.router)
app.include_router(danger_zone.router)
app.include_router(storage.router)
app.include_router(activity_log.router)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint."""
    return {
        "name": "Portfolio Admin API",
        "version": "0.1.0",
        "docs": "/docs",
    }
