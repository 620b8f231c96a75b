"""
NoteKeep Backend — FastAPI Application Factory
==============================================

What:  Builds the ASGI app: middleware, error mapping, routers, lifecycle.
Who:   uvicorn notekeep.main:app (or create_app() in tests).

Request path:
    RequestID → Logging → GZip → CORS → router
        /api/token          TokenService
        /api/notes[/{id}]   get_current_user → NoteService
        /health             database probe

Every NoteKeepError raised below the router is turned into an ErrorResponse
body here; routes never build error JSON themselves.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from notekeep import __version__
from notekeep.config import settings
from notekeep.database import dispose_engine
from notekeep.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DatabaseError,
    NoteKeepError,
    NotFoundError,
    ValidationError,
)
from notekeep.middleware.logging import RequestLoggingMiddleware
from notekeep.middleware.request_id import RequestIDMiddleware, request_id_var
from notekeep.routes import health, notes, token
from notekeep.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

# Libraries that log every operation at INFO
_NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "passlib")


def setup_logging() -> None:
    """
    Configure the root logger once, at startup.

    Format: 2024-05-01T12:00:00 [INFO] notekeep.services.note_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: configure logging, check the signing key and hash schemes.
    Shutdown: dispose the database engine.
    """
    setup_logging()
    logger.info("NoteKeep Backend %s starting (database: %s)", __version__,
                "sqlite" if settings.is_sqlite else "postgresql")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving /health; token routes fail with ConfigurationError
        logger.error("%s", e)
        logger.error("Token issuance and note routes will return 500 until this is fixed.")

    logger.info("Listening on %s:%d", settings.backend_host, settings.backend_port)
    yield

    await dispose_engine()
    logger.info("NoteKeep Backend stopped.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

# Most specific first; anything else derived from NoteKeepError is a 500
_ERROR_STATUS = (
    (ValidationError, 400, "validation_error", logging.WARNING),
    (AuthenticationError, 401, "unauthorized", logging.DEBUG),
    (NotFoundError, 404, "not_found", logging.DEBUG),
    (ConfigurationError, 500, "server_misconfigured", logging.CRITICAL),
    (DatabaseError, 500, "server_error", logging.ERROR),
)

_MISCONFIGURED_MESSAGE = "The server is misconfigured. Please contact support."
_UNEXPECTED_MESSAGE = "An unexpected error occurred. Please try again or contact support."


def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Serialize an ErrorResponse tagged with the current request ID."""
    body = ErrorResponse(
        error=error,
        message=message,
        details=details,
        request_id=request_id_var.get("") or None,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def classify_error(exc: NoteKeepError) -> Tuple[int, str, int]:
    """(HTTP status, error code, log level) for an application exception."""
    for exc_type, status_code, code, level in _ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status_code, code, level
    return 500, "server_error", logging.ERROR


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the NoteKeepError hierarchy onto ErrorResponse bodies.

        ValidationError       → 400 (details carry the offending field)
        AuthenticationError   → 401 + WWW-Authenticate: Bearer
        NotFoundError         → 404
        ConfigurationError    → 500 server_misconfigured, generic message
        DatabaseError / other → 500 server_error
        Exception             → 500 internal_server_error

    Server-side failures never expose stack traces, SQL, or exc.context to
    the client; those go to the log.
    """

    @app.exception_handler(NoteKeepError)
    async def handle_notekeep_error(request: Request, exc: NoteKeepError):
        status_code, code, level = classify_error(exc)
        logger.log(
            level,
            "[%s] %s %s → %d %s: %s | Context: %s",
            request_id_var.get(""),
            request.method,
            request.url.path,
            status_code,
            code,
            exc.message,
            exc.context,
        )

        if isinstance(exc, ConfigurationError):
            return error_response(status_code, code, _MISCONFIGURED_MESSAGE)
        if isinstance(exc, ValidationError):
            return error_response(status_code, code, exc.message, details=exc.context)
        if isinstance(exc, AuthenticationError):
            return error_response(
                status_code, code, exc.message, headers={"WWW-Authenticate": "Bearer"}
            )
        return error_response(status_code, code, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500, full stack trace in the server log only."""
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), exc, exc_info=True)
        return error_response(500, "internal_server_error", _UNEXPECTED_MESSAGE)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Build the app: middleware, exception handlers, routers."""
    app = FastAPI(
        title="NoteKeep API",
        description=(
            "Personal notes backend. Exchange credentials for a bearer token at "
            "/api/token, then manage your own notes under /api/notes."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Added innermost first; requests pass RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    for module in (token, notes, health):
        app.include_router(module.router)

    return app


# uvicorn notekeep.main:app
app = create_app()
