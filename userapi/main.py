"""userapi — FastAPI application factory and startup/shutdown lifecycle.

Invariants:
    - Startup order: logging → pool → ping → migrations → health-check task →
      repository → service; any failure aborts startup before the listener serves
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map the error taxonomy → structured JSON responses
    - Shutdown stops the health-check task and disposes of the pool
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from userapi import __version__
from userapi.api.error_handlers import register_error_handlers
from userapi.api.middleware import RequestContextMiddleware, RequestTimeoutMiddleware
from userapi.api.routes import health, users
from userapi.config import Settings, get_settings
from userapi.infrastructure.database import close_db, init_db
from userapi.infrastructure.migrations import run_migrations
from userapi.infrastructure.observability import setup_logging
from userapi.infrastructure.user_repository import SqlUserRepository
from userapi.services.user_service import UserService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    manager = init_db(
        settings.effective_database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_recycle=settings.database_pool_recycle_seconds,
    )
    try:
        await manager.ping()
        logger.info("Successfully connected to database")

        if settings.run_migrations:
            await run_migrations(manager.engine)

        manager.start_health_check(settings.database_health_check_seconds)

        repo = SqlUserRepository(manager, timeout=settings.repository_timeout_seconds)
        app.state.user_service = UserService(repo)
    except Exception:
        logger.critical("Startup failed", exc_info=True)
        await close_db()
        raise

    logger.info("userapi started")
    try:
        yield
    finally:
        logger.info("userapi shutting down")
        await close_db()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application. The lifespan reads `settings` from app.state."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(title="userapi", version=__version__, lifespan=lifespan)
    app.state.settings = settings

    # Middleware — last added runs first
    app.add_middleware(RequestTimeoutMiddleware, timeout=settings.request_timeout_seconds)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(users.router)
    return app
