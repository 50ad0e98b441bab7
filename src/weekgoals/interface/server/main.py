"""FastAPI application for the weekgoals API.

Routes are organized into modules under weekgoals/interface/server/routes/:
- auth: Accounts and bearer-token sessions
- goals: Goal trees, paste import, markdown export
- misc: Health, week lookup

Domain errors are raised as WeekGoalsError subclasses and converted to
``{"error": message}`` responses in one place.
"""

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from weekgoals.auth.service import AuthService
from weekgoals.foundation.config import WeekGoalsConfig, get_config
from weekgoals.foundation.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    TransientIOError,
    ValidationError,
    WeekGoalsError,
)
from weekgoals.interface.server.routes import auth_router, goals_router, misc_router
from weekgoals.storage import open_server_stores
from weekgoals.storage.protocol import AccountRepository, GoalRepository

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[WeekGoalsError], int], ...] = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (NotFoundError, 404),
    (ConflictError, 409),
    (TransientIOError, 503),
)


def status_for(error: WeekGoalsError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


def create_app(
    config: WeekGoalsConfig | None = None,
    *,
    goals: GoalRepository | None = None,
    accounts: AccountRepository | None = None,
    dev_mode: bool = False,
    static_dir: Path | None = None,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        config: Settings; defaults to the loaded global config.
        goals: Goal repository override (tests).
        accounts: Account repository override (tests).
        dev_mode: If True, enable CORS for the configured dev origins.
        static_dir: Built frontend to serve at ``/``, if any.

    Returns:
        Configured FastAPI application.
    """
    config = config or get_config()

    if goals is None or accounts is None:
        default_goals, default_accounts = open_server_stores(config.storage)
        goals = default_goals if goals is None else goals
        accounts = default_accounts if accounts is None else accounts

    app = FastAPI(
        title="weekgoals",
        description="Weekly goal tracking API",
        version="0.1.0",
    )
    app.state.goals = goals
    app.state.accounts = accounts
    app.state.auth = AuthService(accounts, session_ttl_days=config.auth.session_ttl_days)

    _register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(goals_router)
    app.include_router(misc_router)

    if dev_mode:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.server.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if static_dir and static_dir.exists():
        _mount_static(app, static_dir)

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(WeekGoalsError)
    async def handle_domain_error(request: Request, exc: WeekGoalsError) -> JSONResponse:
        status = status_for(exc)
        if status >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        detail = errors[0].get("msg", "invalid request") if errors else "invalid request"
        return JSONResponse(status_code=400, content={"error": detail})


def _mount_static(app: FastAPI, static_dir: Path) -> None:
    """Mount the built frontend; unknown non-API paths fall back to index.html."""

    @app.get("/")
    async def serve_index() -> FileResponse:
        return FileResponse(static_dir / "index.html")

    app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
