# labbook/routes/health.py
"""
Health check endpoints for the application.

These endpoints are used for monitoring application health
and database connectivity.
"""

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import __version__
from ..api.dependencies import get_cache_service_dep, get_db
from ..core.config import settings
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..services.cache_service import CacheService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


class HealthCheckResponse(BaseModel):
    status: str
    version: str
    environment: str
    database: str
    cache: str
    timestamp: datetime


@router.get("/health", response_model=HealthCheckResponse)
def health_check(
    response: Response,
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache_service_dep),
) -> HealthCheckResponse:
    response.headers["Cache-Control"] = "no-store"

    database = "ok"
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check database probe failed: {e}")
        database = "error"
        response.status_code = 503

    return HealthCheckResponse(
        status="ok" if database == "ok" else "degraded",
        version=__version__,
        environment=settings.environment,
        database=database,
        cache=cache.backend,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    """Prometheus scrape endpoint; public, as scrapers expect."""
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
