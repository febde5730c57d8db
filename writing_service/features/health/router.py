"""Health check API endpoint.

``GET /health`` answers 200 when the database is reachable and 503 when it
is not; the body has the same shape either way.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status
from sqlalchemy.exc import SQLAlchemyError

from writing_service.core.settings import get_app_settings
from writing_service.features.health.schemas import HealthResponse
from writing_service.infra.database import check_database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"model": HealthResponse, "description": "Database unavailable"}},
)
async def health_check(response: Response) -> HealthResponse:
    """Report service identity and database reachability."""
    settings = get_app_settings()
    try:
        await check_database()
        database = "ok"
    except (SQLAlchemyError, OSError):
        logger.warning("Health check: database unavailable", exc_info=True)
        database = "unavailable"

    healthy = database == "ok"
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        service=settings.service_name,
        version=settings.version,
        environment=settings.environment,
        database=database,
    )
