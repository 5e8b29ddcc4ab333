"""Health check endpoints for the hosting platform."""

from typing import Any

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from campus_api.database import check_database_connection

router = APIRouter(tags=["Health"])


def _database_status(ok_status: str, failed_status: str, connected: bool) -> Response:
    if connected:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": ok_status, "database": "connected"},
        )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": failed_status, "database": "disconnected"},
    )


@router.get("/health", response_model=None)
async def health_check() -> Response:
    """
    Health check with database status.

    Returns:
        {"status": "healthy", "database": "connected"} when the store answers
        {"status": "degraded", "database": "disconnected"} (503) otherwise
    """
    return _database_status("healthy", "degraded", await check_database_connection())


@router.get("/health/live")
async def liveness_probe() -> dict[str, Any]:
    """Liveness: the process is up. Does not touch the database."""
    return {"status": "alive"}


@router.get("/health/ready", response_model=None)
async def readiness_probe() -> Response:
    """Readiness: the service-role database connection works."""
    return _database_status("ready", "not_ready", await check_database_connection())
