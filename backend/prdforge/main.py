"""PRD Forge Backend: FastAPI application entry point."""

import uuid
from contextlib import asynccontextmanager

# CRITICAL ORDER: configure_structlog MUST be called before all other app imports
# to avoid the structlog cache pitfall (structlog caches the processor chain on first use).
from prdforge.core.logging import configure_structlog
from prdforge.core.config import get_settings as _get_settings_early

_early_settings = _get_settings_early()
configure_structlog(
    log_level="DEBUG" if _early_settings.debug else "INFO",
    json_logs=not _early_settings.debug,
)

import structlog

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from prdforge.api.routes import api_router
from prdforge.core.config import get_settings
from prdforge.core.exceptions import PrdForgeError
from prdforge.db import close_db, init_db
from prdforge.db.seed import seed_sample_data
from prdforge.middleware.correlation import (
    setup_correlation_middleware,
    get_correlation_id,
)
from prdforge.schemas.generation import first_error_message

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    logger.info("startup_begin", app_name=settings.app_name, debug=settings.debug)

    await init_db(create_tables=settings.db_create_tables)
    logger.info("db_initialized")

    if settings.seed_sample_data:
        inserted = await seed_sample_data()
        logger.info("sample_data_seeded", inserted=inserted)

    yield

    logger.info("shutdown_begin")
    await close_db()
    logger.info("shutdown_complete")


def _error_response(status_code: int, message: str, debug_id: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, "debug_id": debug_id})


async def domain_exception_handler(request: Request, exc: PrdForgeError) -> JSONResponse:
    """Translate domain errors to their HTTP status with debug_id tracking.

    Server errors are logged with the chained cause; the client only sees the message.
    """
    debug_id = str(uuid.uuid4())
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "domain_error",
        status_code=exc.status_code,
        error_type=type(exc).__name__,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        error=exc.message,
        cause=repr(exc.__cause__) if exc.__cause__ else None,
    )
    return _error_response(exc.status_code, exc.message, debug_id)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters are client errors (400)."""
    debug_id = str(uuid.uuid4())
    message = first_error_message(exc) if exc.errors() else "Invalid input"
    logger.warning(
        "request_validation_failed",
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        error=message,
    )
    return _error_response(400, message, debug_id)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Global exception handler for HTTPException with debug_id tracking.

    Logs errors server-side with full context, returns sanitized response to client.
    """
    debug_id = str(uuid.uuid4())
    logger.error(
        "http_exception",
        status_code=exc.status_code,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        detail=exc.detail,
    )
    return _error_response(exc.status_code, str(exc.detail), debug_id)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors with debug_id tracking.

    Logs full exception with traceback, returns generic 500 to client.
    """
    debug_id = str(uuid.uuid4())
    logger.error(
        "unhandled_exception",
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )
    # Return generic 500 (no internal details leaked)
    return _error_response(500, "Internal server error", debug_id)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Turn rough product ideas into structured product-management documents",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url, "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Correlation ID middleware (runs first on incoming requests)
    setup_correlation_middleware(app)

    # Exception handlers
    app.exception_handler(PrdForgeError)(domain_exception_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)

    app.include_router(api_router, prefix="/api")

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "prdforge.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
