# ruff: noqa: E402
# E402 disabled: load_dotenv() must run before other imports for Sentry DSN

import os
import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

import sentry_sdk
from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from core.correlation import (
    accept_or_generate,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from core.logging_config import configure_logging
from core.sentry_config import init_sentry
from helpers.rate_limiter import limiter
from helpers.security_headers import SecurityHeadersMiddleware
from models.config import settings
from models.exceptions import (
    AlreadyExistsException,
    AuthenticationException,
    BusinessRuleException,
    ConflictException,
    DomainException,
    NotFoundException,
    PermissionDeniedException,
    RateLimitExceededException,
    ValidationException,
)
from repositories.database import Base, SessionLocal, engine
from routers import (
    admin_router,
    attachments_router,
    public_router,
    settings_router,
    users_router,
    whistleblower_router,
)
from services.admin_user_service import AdminUserService
from services.registry import build_service_registry
from services.setting_service import SettingService

# Initialize Sentry BEFORE app creation
init_sentry()

# Configure logging with Loguru
configure_logging(os.getenv("ENVIRONMENT", "development"))

# Latest migration revision (update when adding new migrations)
EXPECTED_REVISION = "0001_initial"


def check_schema_version() -> None:
    """Verify database schema version matches expected migration."""
    from sqlalchemy import text

    db = SessionLocal()
    try:
        result = db.execute(text("SELECT version_num FROM alembic_version LIMIT 1"))
        row = result.fetchone()
        if row:
            current_revision = row[0]
            if current_revision != EXPECTED_REVISION:
                logger.warning(
                    f"Database schema mismatch! "
                    f"Current: {current_revision}, Expected: {EXPECTED_REVISION}. "
                    f"Run 'alembic upgrade head' to update the database schema."
                )
            else:
                logger.info(f"Database schema version: {current_revision} (up to date)")
        else:
            logger.warning(
                "No alembic_version found. Database may not be initialized with migrations."
            )
    except Exception as e:
        logger.warning(f"Could not verify schema version: {e}")
    finally:
        db.close()


def bootstrap_data() -> None:
    """Create the super admin and default settings when missing."""
    db = SessionLocal()
    try:
        AdminUserService.ensure_super_admin(db, settings.ADMIN_INIT_PASSWORD)
        inserted = SettingService.ensure_defaults(db)
        if inserted:
            logger.info(f"Seeded {inserted} default setting(s)")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Verify database schema version matches expected migration.
    - Optionally create tables when `AUTO_CREATE_DB` is enabled (development).
    - Create the super admin and default settings.

    Tests set up their own database, so none of this runs under ENVIRONMENT=test.
    """
    if settings.ENVIRONMENT != "test":
        check_schema_version()

        if settings.AUTO_CREATE_DB:
            logger.info(
                "AUTO_CREATE_DB enabled; creating database tables via SQLAlchemy create_all()"
            )
            Base.metadata.create_all(bind=engine)
        else:
            logger.info("AUTO_CREATE_DB disabled; skipping automatic create_all()")

        bootstrap_data()

    yield


app = FastAPI(title="OpenWhistle API", lifespan=lifespan)

# Process-wide services, resolved per request through services.registry.get_services
app.state.services = build_service_registry(settings)

# Attach rate limiter to app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Inject correlation ID into request context and Sentry."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request with correlation ID tracking."""
        # Incoming IDs from the frontend are accepted only in a safe format
        correlation_id = accept_or_generate(request.headers.get("X-Correlation-ID"))
        set_correlation_id(correlation_id)

        sentry_sdk.set_tag("correlation_id", correlation_id)

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log requests with performance monitoring.

    Client addresses are deliberately not logged so reporters stay anonymous.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request and log timing information."""
        start_time = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - start_time

        logger.info(
            f"{request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s"
        )

        # Warn on slow requests (configurable threshold)
        if duration > settings.SLOW_REQUEST_THRESHOLD:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} "
                f"took {duration:.2f}s (threshold: {settings.SLOW_REQUEST_THRESHOLD}s)"
            )

        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        return response


# Note: Middleware runs in reverse order - security headers should wrap everything
# Innermost: default API limit for routes without their own @limiter.limit
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# Configure CORS from environment settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type", "X-Correlation-ID"],
    expose_headers=["Content-Disposition", "X-Correlation-ID"],
)


def _error_response(
    exc: DomainException, status_code: int, headers: dict | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": exc.message,
            "correlation_id": exc.correlation_id,
        },
        headers=headers,
    )


def _tag_and_log(request: Request, exc: DomainException, label: str) -> None:
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)

    # Messages may echo client input; pass them as args so braces are not parsed
    logger.bind(
        correlation_id=exc.correlation_id,
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    ).warning("{}: {}", label, exc.message)


# Global unhandled exception handler (returns generic 500 and logs details)
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch all unhandled exceptions with full Sentry capture."""
    correlation_id = get_correlation_id() or generate_correlation_id()

    sentry_sdk.set_tag("correlation_id", correlation_id)
    sentry_sdk.capture_exception(exc)

    logger.bind(
        correlation_id=correlation_id,
        path=str(request.url.path),
        method=request.method,
    ).exception("Unhandled exception: {!r}", exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "correlation_id": correlation_id,
        },
    )


# Centralized exception handlers
@app.exception_handler(NotFoundException)
async def not_found_exception_handler(
    request: Request, exc: NotFoundException
) -> JSONResponse:
    """Handle not found exceptions with Sentry integration."""
    _tag_and_log(request, exc, "Not found")
    return _error_response(exc, status.HTTP_404_NOT_FOUND)


@app.exception_handler(AlreadyExistsException)
async def already_exists_exception_handler(
    request: Request, exc: AlreadyExistsException
) -> JSONResponse:
    """Handle already exists exceptions with Sentry integration."""
    _tag_and_log(request, exc, "Already exists")
    return _error_response(exc, status.HTTP_409_CONFLICT)


@app.exception_handler(ValidationException)
async def validation_exception_handler(
    request: Request, exc: ValidationException
) -> JSONResponse:
    """Handle validation exceptions with Sentry integration."""
    _tag_and_log(request, exc, "Validation error")
    return _error_response(exc, status.HTTP_422_UNPROCESSABLE_CONTENT)


@app.exception_handler(PermissionDeniedException)
async def permission_denied_exception_handler(
    request: Request, exc: PermissionDeniedException
) -> JSONResponse:
    """Handle permission denied exceptions with Sentry integration."""
    _tag_and_log(request, exc, "Permission denied")
    return _error_response(exc, status.HTTP_403_FORBIDDEN)


@app.exception_handler(AuthenticationException)
async def authentication_exception_handler(
    request: Request, exc: AuthenticationException
) -> JSONResponse:
    """Handle authentication exceptions with Sentry integration."""
    _tag_and_log(request, exc, "Authentication failed")
    return _error_response(
        exc, status.HTTP_401_UNAUTHORIZED, headers={"WWW-Authenticate": "Bearer"}
    )


@app.exception_handler(BusinessRuleException)
async def business_rule_exception_handler(
    request: Request, exc: BusinessRuleException
) -> JSONResponse:
    """Handle business rule exceptions with Sentry integration."""
    _tag_and_log(request, exc, "Business rule violation")
    return _error_response(exc, status.HTTP_400_BAD_REQUEST)


@app.exception_handler(ConflictException)
async def conflict_exception_handler(
    request: Request, exc: ConflictException
) -> JSONResponse:
    """Handle conflict exceptions with Sentry integration."""
    _tag_and_log(request, exc, "Conflict")
    return _error_response(exc, status.HTTP_409_CONFLICT)


@app.exception_handler(RateLimitExceededException)
async def rate_limit_exception_handler(
    request: Request, exc: RateLimitExceededException
) -> JSONResponse:
    """Handle login throttling with a Retry-After header."""
    _tag_and_log(request, exc, "Rate limit exceeded")
    headers = {}
    if exc.retry_after:
        headers["Retry-After"] = str(exc.retry_after)
    return _error_response(exc, status.HTTP_429_TOO_MANY_REQUESTS, headers=headers)


@app.exception_handler(DomainException)
async def domain_exception_handler(
    request: Request, exc: DomainException
) -> JSONResponse:
    """Handle generic domain exceptions with Sentry integration."""
    _tag_and_log(request, exc, "Domain exception")
    sentry_sdk.capture_exception(exc)
    return _error_response(exc, status.HTTP_400_BAD_REQUEST)


app.include_router(public_router.router, prefix="/api")
app.include_router(whistleblower_router.router, prefix="/api")
app.include_router(admin_router.router, prefix="/api")
app.include_router(users_router.router, prefix="/api")
app.include_router(settings_router.router, prefix="/api")
app.include_router(attachments_router.router, prefix="/api")


@app.get("/api/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}
