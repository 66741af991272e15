"""
Main entrypoint for the User Service API.

This module assembles the FastAPI application: it sets up logging,
initialises the database, wires the repository, tracer and service
onto ``app.state``, registers the error handlers and includes the API
router.  The ``create_app`` function builds and configures the app,
which is then instantiated at module import time as ``app``, e.g.::

    uvicorn user_service_api.app.main:app --reload

Tests call ``create_app`` with their own ``Settings`` (and optionally a
repository or tracer) instead of using the module-level instance.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.router import router as api_router
from .core.config import Settings, settings as default_settings
from .core.db import Database
from .core.errors import ErrorKind, UserServiceError
from .core.logging_config import setup_logging
from .core.tracing import Tracer, build_tracer
from .repositories.base import UserRepository
from .repositories.sqlite import SQLiteUserRepository
from .services.user_service import UserService

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.DUPLICATE_EMAIL: status.HTTP_400_BAD_REQUEST,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
}

KIND_BY_STATUS = {
    status.HTTP_404_NOT_FOUND: ErrorKind.NOT_FOUND,
    status.HTTP_400_BAD_REQUEST: ErrorKind.VALIDATION,
}


def error_response(
    status_code: int,
    message: str,
    kind: Optional[ErrorKind] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build the ``{error, kind, timestamp}`` body shared by all failures."""
    return JSONResponse(
        status_code=status_code,
        headers=headers,
        content={
            "error": message,
            "kind": kind.value if kind is not None else None,
            "timestamp": int(time.time() * 1000),
        },
    )


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(UserServiceError)
    async def handle_user_service_error(_: Request, exc: UserServiceError) -> JSONResponse:
        return error_response(STATUS_BY_KIND[exc.kind], exc.message, exc.kind)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        message = _format_validation_errors(exc)
        logger.warning("Rejected request: %s", message)
        return error_response(status.HTTP_400_BAD_REQUEST, message, ErrorKind.VALIDATION)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        kind = KIND_BY_STATUS.get(exc.status_code)
        return error_response(exc.status_code, str(exc.detail), kind, getattr(exc, "headers", None))


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[UserRepository] = None,
    tracer: Optional[Tracer] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use; defaults to the module-level settings.
    repository : Optional[UserRepository]
        Storage backend.  When omitted a ``SQLiteUserRepository`` is built
        on ``settings.database_url``; its schema is migrated on startup.
    tracer : Optional[Tracer]
        Span sink; when omitted it is chosen by ``build_tracer``.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings
    # Initialise logging before anything else so that the setup below can
    # safely log messages.
    setup_logging(settings.log_level, settings.log_file)

    database: Optional[Database] = None
    if repository is None:
        database = Database.from_settings(settings)
        repository = SQLiteUserRepository(database)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        # Apply migrations at startup.  This creates the database file if it
        # does not exist and brings the schema up to date.
        if database is not None:
            database.initialize()
            logger.info("Using SQLite database at %s", database.path)
        yield

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.user_service = UserService(repository, tracer or build_tracer(settings))

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.api_prefix)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
