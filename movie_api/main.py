"""Movie API — FastAPI application factory.

Invariants:
    - No module-level app: create_app() builds one per call from explicit
      settings and an optional database manager (tests inject their own)
    - Routes registered explicitly (no auto-discovery)
    - One permissive CORS layer covers every response, /api included
    - OPTIONS under /api always answers 204, whatever the path
    - An unreachable database is logged at startup and never stops serving

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - The app only disposes a database manager it created itself
    - Error handlers registered from api/error_handlers.py
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from movie_api.api.error_handlers import register_error_handlers
from movie_api.api.routes import health, movies, preflight
from movie_api.config import Settings, get_settings
from movie_api.infrastructure.database import DatabaseSessionManager

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    owns_manager = app.state.db_manager is None
    if owns_manager:
        app.state.db_manager = DatabaseSessionManager.from_url(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
    manager: DatabaseSessionManager = app.state.db_manager

    result = await manager.connect()
    if result.ok:
        logger.info("Database connection established")
        if settings.database_create_schema:
            await manager.create_schema()
    else:
        logger.warning(
            f"Database unavailable at startup, serving anyway: {result.error}",
        )

    logger.info("Movie API started")
    yield
    logger.info("Movie API shutting down")
    if owns_manager:
        await manager.dispose()


def create_app(
    settings: Settings | None = None,
    db_manager: DatabaseSessionManager | None = None,
) -> FastAPI:
    """Build the application with its middleware, routes and error handlers."""
    settings = settings or get_settings()

    app = FastAPI(title="Movie API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.db_manager = db_manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(preflight.router)
    app.include_router(health.router)
    app.include_router(movies.router, prefix=API_PREFIX)

    register_error_handlers(app)
    return app
