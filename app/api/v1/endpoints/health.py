"""Health check endpoints."""

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

from app.config import settings
from app.core.redis_client import check_redis_connection
from app.database import check_database_connection

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    """Health check with dependency status."""

    database: str
    redis: str
    expiry_sweeper: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    """Basic liveness check."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Detailed health check",
)
async def detailed_health_check(request: Request) -> DetailedHealthResponse:
    """
    Health of the database, Redis and the background expiry sweep.

    Redis is optional for serving requests, so only the database decides
    between healthy and degraded.
    """
    db_healthy = await check_database_connection()
    redis_healthy = await check_redis_connection()

    sweeper = getattr(request.app.state, "expiry_sweeper", None)
    if sweeper is None or sweeper.interval_seconds <= 0:
        sweeper_status = "disabled"
    else:
        sweeper_status = "running" if sweeper.running else "stopped"

    return DetailedHealthResponse(
        status="healthy" if db_healthy else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        database="healthy" if db_healthy else "unhealthy",
        redis="healthy" if redis_healthy else "unhealthy",
        expiry_sweeper=sweeper_status,
    )


@router.get(
    "/ping",
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Simple ping",
)
async def ping() -> dict[str, str]:
    """Simple ping."""
    return {"message": "pong"}
