"""
FastAPI application entrypoint with middleware, lifecycle, and error handling.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import Environment, Settings, get_settings
from ..logger import ACCESS_LOGGER_NAME, NO_REQUEST_ID, request_id_var, setup_logging
from .dependencies import lifespan_dependencies
from .responses import ApiError, error_response
from .routes import (
    comments_router,
    docs_router,
    health_router,
    posts_router,
    tags_router,
    users_router,
)

LOGGER = logging.getLogger(__name__)
ACCESS_LOGGER = logging.getLogger(ACCESS_LOGGER_NAME)


# -----------------------------------------------------------------------------
# Application Lifespan
# -----------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan context manager.

    Handles startup and shutdown of shared resources.
    """
    settings: Settings = app.state.settings
    setup_logging(settings)

    LOGGER.info(
        "Starting %s v%s in %s environment",
        settings.app.name,
        settings.app.version,
        settings.app.environment.value,
    )

    async with lifespan_dependencies(settings):
        yield

    LOGGER.info("Application shutdown complete.")


# -----------------------------------------------------------------------------
# Application Factory
# -----------------------------------------------------------------------------


def _allowed_origins(environment: Environment) -> list[str]:
    if environment == Environment.LOCAL:
        return ["*"]
    if environment in (Environment.DEVELOPMENT, Environment.STAGING):
        return [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]
    return []


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns a fully configured FastAPI instance with all routes and middleware.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Read-only JSON API for blog posts, tags, users, and comments",
        docs_url="/docs" if settings.app.debug else None,
        redoc_url="/redoc" if settings.app.debug else None,
        openapi_url="/openapi.json" if settings.app.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(settings.app.environment),
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # -------------------------------------------------------------------------
    # Request Logging Middleware
    # -------------------------------------------------------------------------

    @app.middleware("http")
    async def request_logging_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Log request details and add request ID header."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        start_time = time.perf_counter()

        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            response = await call_next(request)
        except Exception:
            LOGGER.exception("Unhandled exception for %s %s", request.method, request.url.path)
            raise
        finally:
            request_id_var.reset(token)

        duration_ms = (time.perf_counter() - start_time) * 1000

        ACCESS_LOGGER.info(
            "%s %s -> %d (%.2fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={"request_id": request_id},
        )

        response.headers["X-Request-ID"] = request_id
        return response

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        """Write the error envelope raised by a handler."""
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        """Unknown routes and disallowed methods use the same envelope."""
        response = error_response(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Flatten validation errors into a single envelope message."""
        message = "; ".join(
            f"{'.'.join(str(loc) for loc in error.get('loc', []))}: "
            f"{error.get('msg', 'Validation error')}"
            for error in exc.errors()
        )
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            message or "Request validation failed",
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        request_id = getattr(request.state, "request_id", None)

        LOGGER.exception(
            "Unhandled exception: %s",
            str(exc),
            extra={"request_id": request_id or NO_REQUEST_ID},
        )

        # Hide internal errors in production
        message = str(exc) if settings.app.debug else "An internal error occurred"
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)

    # -------------------------------------------------------------------------
    # Route Registration
    # -------------------------------------------------------------------------

    app.include_router(health_router)
    app.include_router(docs_router)
    app.include_router(comments_router)
    app.include_router(posts_router)
    app.include_router(tags_router)
    app.include_router(users_router)

    return app


# -----------------------------------------------------------------------------
# Application Instance
# -----------------------------------------------------------------------------

app = create_app()


__all__ = ["app", "create_app"]
