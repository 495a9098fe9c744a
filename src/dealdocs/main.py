"""DealDocs - Main FastAPI Application

Deal document storage and retrieval service.

This module creates and configures the FastAPI application, including:
- Document routers (upload, download, cross-deal listing)
- Middleware (request ID correlation, CORS)
- Exception handlers rendering {"error": ..., "message": ...} bodies
- Health and observability endpoints
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import Settings, get_settings
from .database import init_db
from .documents.router import router as documents_router
from .domain.errors import DocumentAccessError, DownloadAbortedError
from .observability.logging_config import configure_logging
from .observability.middleware import RequestIDMiddleware
from .observability.router import router as observability_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Startup: create registry tables when CREATE_TABLES_ON_STARTUP is set
    - Shutdown: log only; the blob store client holds no open connections
    """
    settings = get_settings()
    logger.info("DealDocs API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    if settings.CREATE_TABLES_ON_STARTUP:
        init_db()
        logger.info("Registry tables created")

    yield

    logger.info("DealDocs API shutting down...")


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def document_access_exception_handler(
    request: Request,
    exc: DocumentAccessError
) -> JSONResponse:
    """Render domain errors as a structured body with their status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error_code, "message": exc.message},
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Returns a structured error response with field-level details.
    """
    logger.warning(f"Validation error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "details": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # Error contexts may hold exception instances
    return [
        {key: value for key, value in error.items() if key in ("type", "loc", "msg")}
        for error in exc.errors()
    ]


async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle uncaught exceptions.

    Full details are logged but not exposed to the client. An aborted
    download has already been logged and its response is on the wire, so
    the body built here is never sent for it.
    """
    if not isinstance(exc, DownloadAbortedError):
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}",
            exc_info=exc
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build a configured application instance.

    Tests create their own instance and override dependencies on it.
    """
    settings = settings or get_settings()
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    is_production = settings.ENVIRONMENT == "production"
    app = FastAPI(
        title="DealDocs API",
        description="Document storage and retrieval for deal participants",
        version=__version__,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Content-Disposition"],
    )
    # Added last so it wraps CORS and sees every request
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DocumentAccessError, document_access_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(observability_router)
    app.include_router(documents_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, Any]:
        """Root endpoint - API information."""
        return {
            "name": "DealDocs API",
            "version": __version__,
            "status": "running",
            "docs": None if is_production else "/docs",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "dealdocs.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
