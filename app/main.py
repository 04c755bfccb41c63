"""Car Insurance API — FastAPI application factory."""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.db.base import async_session_factory, create_schema
from app.db.seed import ensure_seeded
from app.schemas.common import HealthResponse
from app.services.expiration_monitor import ExpirationMonitor

# v1 routers
from app.routers.v1.cars import router as cars_v1_router
from app.routers.v1.policy_expirations import router as policy_expirations_v1_router

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown: schema, demo data, and the expiration monitor."""
    if settings.create_schema_on_startup:
        await create_schema()
    if settings.seed_demo_data:
        async with async_session_factory() as session:
            await ensure_seeded(session)

    monitor = None
    if settings.expiration_monitor_enabled:
        monitor = ExpirationMonitor(
            async_session_factory,
            interval_seconds=settings.expiration_check_interval_seconds,
        )
        monitor.start()
    app.state.expiration_monitor = monitor
    logger.info("%s started (env=%s)", settings.app_name, settings.app_env)
    yield
    if monitor is not None:
        await monitor.stop()
    logger.info("%s shutting down", settings.app_name)


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        lifespan=lifespan,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/api/v1/*) ---
    app.include_router(cars_v1_router, prefix="/api/v1")
    app.include_router(policy_expirations_v1_router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(app=settings.app_name, env=settings.app_env)

    return app


app = create_app()
