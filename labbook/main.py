# labbook/main.py
"""
HTTP entry point for the lab booking core.

Identity arrives in the ``X-User-Id`` header; authentication itself is
handled upstream of this service.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .core.config import settings
from .core.constants import BRAND_NAME
from .database import init_db
from .middleware.prometheus_middleware import PrometheusMiddleware
from .routes import bookings, health, instruments, schedule, statistics, users

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(f"Starting {BRAND_NAME} API {__version__} ({settings.environment})")
    if settings.environment in ("development", "test"):
        # Deployed environments are migrated with Alembic
        init_db()
    yield
    logger.info(f"Shutting down {BRAND_NAME} API")


app = FastAPI(
    title=f"{BRAND_NAME} API",
    description="Laboratory instrument booking: scheduling, approvals, delays and usage statistics",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(PrometheusMiddleware)

app.include_router(health.router)
app.include_router(bookings.router)
app.include_router(instruments.router)
app.include_router(schedule.router)
app.include_router(statistics.router)
app.include_router(users.router)
