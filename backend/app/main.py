"""
Customer Details Backend — FastAPI Application Factory
========================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn app.main:app).

Application Architecture:
    ┌───────────────────────────────────────────────────────┐
    │                      FastAPI App                      │
    │                                                       │
    │  Middleware Chain:                                    │
    │  ┌──────────┐ ┌────────────┐ ┌────────────┐           │
    │  │  Req ID  │→│ Access Log │→│ Rate Limit │           │
    │  └──────────┘ └────────────┘ └────────────┘           │
    │                                                       │
    │  Routes:                                              │
    │  ┌──────────────────────────┐ ┌─────────────┐         │
    │  │ /api/User[/v{version}]/… │ │ GET /health │         │
    │  └──────────────────────────┘ └─────────────┘         │
    │                                                       │
    │  Exception Handlers:                                  │
    │  ┌─────────────────────────────────────────────────┐  │
    │  │ Validation→400 │ Auth→401 │ Role→403 │ 404 │ 500 │  │
    │  └─────────────────────────────────────────────────┘  │
    └───────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Report insecure configuration
    3. Wait for the database (tenacity backoff)
    4. Seed roles, bootstrap admin and optional customer file

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import async_session_factory, dispose_engine, wait_for_database
from app.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CustomerApiError,
    DatabaseError,
    NotFoundError,
    OperationFailedError,
    UnsupportedApiVersionError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import health, users
from app.services.seed_service import seed_service
from app.versioning import path_api_version, query_api_version

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] app.services.login_service: message
    Called once during startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access log replaces uvicorn's; SQL echo only via LOG_LEVEL=DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

async def seed_on_startup() -> None:
    async with async_session_factory() as session:
        try:
            await seed_service.seed_database(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Customer Details Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: local development runs on the defaults
        logger.warning("%s", str(e))

    await wait_for_database()

    try:
        await seed_on_startup()
    except CustomerApiError as e:
        logger.error("Startup seeding failed: %s | Context: %s", e.message, e.context)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Customer Details Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler hierarchy:
        ValidationError             → 400 validation_error
        OperationFailedError        → 400 bad_request ("Error: <cause>")
        UnsupportedApiVersionError  → 400 unsupported_api_version
        AuthenticationError         → 401 unauthorized (+ WWW-Authenticate)
        AuthorizationError          → 403 forbidden
        NotFoundError               → 404 not_found
        DatabaseError               → 400 bad_request ("Error: <generic message>")
        CustomerApiError (base)     → 500 server_error
        Exception (fallback)        → 500 internal_server_error

    Only ValidationError and UnsupportedApiVersionError return their
    context as `details`; other contexts are for the server log.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("Validation error on %s: %s", request.url.path, exc.message)
        return error_response(400, "validation_error", exc.message, details=exc.context)

    @app.exception_handler(OperationFailedError)
    async def handle_operation_failed(request: Request, exc: OperationFailedError):
        logger.warning("Operation failed on %s: %s | Context: %s", request.url.path, exc.message, exc.context)
        return error_response(400, "bad_request", exc.message)

    @app.exception_handler(UnsupportedApiVersionError)
    async def handle_unsupported_version(request: Request, exc: UnsupportedApiVersionError):
        return error_response(400, "unsupported_api_version", exc.message, details=exc.context)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return error_response(
            401,
            "unauthorized",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(AuthorizationError)
    async def handle_authorization_error(request: Request, exc: AuthorizationError):
        return error_response(403, "forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        # exc.message is generic; the SQLAlchemy error only reaches the log
        logger.error("Database error on %s: %s | Context: %s", request.url.path, exc.message, exc.context)
        return error_response(400, "bad_request", f"Error: {exc.message}")

    @app.exception_handler(CustomerApiError)
    async def handle_application_error(request: Request, exc: CustomerApiError):
        logger.error("Unhandled application error: %s | Context: %s", exc.message, exc.context)
        return error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Customer Details API",
        description=(
            "Customer records management: login with role-based bearer tokens, "
            "customer edits, distance to a customer, search and zip code listings."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → RateLimit → GZip → CORS → routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "X-Total-Count",
            "Retry-After",
            "api-supported-versions",
        ],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(
        users.router,
        prefix="/api/User",
        dependencies=[Depends(query_api_version)],
    )
    app.include_router(
        users.router,
        prefix="/api/User/v{version}",
        dependencies=[Depends(path_api_version)],
    )
    app.include_router(health.router)

    return app


app = create_app()
