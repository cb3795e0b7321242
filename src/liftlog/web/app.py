"""FastAPI application for the liftlog JSON API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Settings, load_settings
from ..db.engine import init_db, seed_exercises
from ..errors import GatewayError, SessionCompletionError, SessionStateError, ValidationError
from .routers import dashboard, exercises, profile, programs, progress, workouts
from .session_tracker import SessionTracker

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler - runs on startup and shutdown."""
    # Startup: schema and exercise library
    await init_db(app.state.db_path)
    await seed_exercises(app.state.db_path)
    yield


def _error(status_code: int, exc: Exception, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc), **extra})


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        return _error(422, exc)

    @app.exception_handler(SessionStateError)
    async def session_state_error(request: Request, exc: SessionStateError):
        return _error(409, exc)

    @app.exception_handler(SessionCompletionError)
    async def session_completion_error(request: Request, exc: SessionCompletionError):
        return _error(503, exc, logs_saved=exc.logs_saved)

    @app.exception_handler(GatewayError)
    async def gateway_error(request: Request, exc: GatewayError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(503, exc)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or load_settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)

    app = FastAPI(
        title="liftlog",
        description="Weekly workout programs, live sessions and strength progress",
        version=__version__,
        lifespan=lifespan,
    )

    # Shared state for routers
    app.state.settings = settings
    app.state.db_path = settings.db_path
    app.state.sessions = SessionTracker(settings.max_finished_sessions, settings.max_open_sessions)

    _register_error_handlers(app)

    # Include routers
    app.include_router(dashboard.router)
    app.include_router(programs.router)
    app.include_router(exercises.router)
    app.include_router(workouts.router)
    app.include_router(progress.router)
    app.include_router(profile.router)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
