"""segmentguard — request validation service.

Main FastAPI application with lifespan management, structured logging and the
validation error responder.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from segmentguard import __version__
from segmentguard.api.router import api_router
from segmentguard.config import Settings, get_settings
from segmentguard.validation import error_responder_middleware, verify_pipeline
from segmentguard.validation.cookies import CookieSigner

logger = structlog.get_logger()


def configure_logging(settings: Settings) -> None:
    """Configure structlog for the whole process."""
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if settings.DEBUG else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    settings = app.state.settings

    # ── Startup ──
    logger.info("app_starting", debug=settings.DEBUG)

    # Aborts startup when validated routes could not render their failures
    app.state.validated_routes = verify_pipeline(app)

    logger.info("app_started")

    yield

    # ── Shutdown ──
    logger.info("app_stopped")


async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all error handler for unhandled exceptions."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again.",
        },
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application: routes first, then the error responder."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="segmentguard",
        description=(
            "Validates request body, query, path parameters, headers and "
            "cookies against declarative schemas before handlers run."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.cookie_signer = CookieSigner(settings.COOKIE_SECRET) if settings.COOKIE_SECRET else None

    # ── Routes ──
    app.include_router(api_router, prefix=settings.API_PREFIX)

    # ── Error handling ──
    error_responder_middleware().install(app)
    app.add_exception_handler(Exception, global_exception_handler)

    return app


def run() -> None:
    """Serve the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "segmentguard.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
