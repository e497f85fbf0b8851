"""FastAPI application factory.

Main entry point for the credit portal Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from credit_portal import __version__
from credit_portal.config.app_config import AppConfig, load_app_config
from credit_portal.core.tracker import ProgressTracker
from credit_portal.db.repository import SqliteStore
from credit_portal.web.errors import register_error_handlers
from credit_portal.web.routes import (
    auth_router,
    health_router,
    students_router,
    subjects_router,
)
from credit_portal.web.sessions import SessionManager

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    store: SqliteStore = app.state.store
    logger.info(
        "api_startup",
        db_path=str(store.db_path.absolute()),
        subjects_found=len(store.fetch_subjects()),
        college=app.state.config.portal.college_name,
    )
    yield
    logger.info("api_shutdown", open_sessions=await app.state.sessions.get_session_count())


def create_app(config: AppConfig | None = None, store: SqliteStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Application config (defaults to load_app_config())
        store: Progress store (defaults to SQLite at config.database.path)

    Returns:
        Configured FastAPI app instance
    """
    config = config or load_app_config()
    store = store or SqliteStore.open(config.database.path)

    app = FastAPI(
        title="Credit Portal API",
        description="Semester progress and credit tracking for students and teachers",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.store = store
    app.state.tracker = ProgressTracker(store, credit_target=config.portal.credit_target)
    app.state.sessions = SessionManager(ttl_minutes=config.auth.session_ttl_minutes)

    # CORS middleware for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(subjects_router)
    app.include_router(students_router)

    return app
