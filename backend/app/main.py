"""
Annuaire Backend — FastAPI Application Factory
================================================

What:  Builds the FastAPI application: middleware, exception handlers, routes.
How:   create_app() returns a configured instance; `app` is the module-level
       instance uvicorn serves (uvicorn app.main:app).

    Middleware:  CORS → GZip → Rate Limit → Request ID → Access Log → route
    Routes:      /api/data, /api/search, /api/review, /api/reviews/{id},
                 /api/confirm-payment, /api/payment-intent, /health
    Errors:      app exceptions → {error, message, details, request_id}

Lifecycle:
    Startup:  configure logging, warn about missing configuration
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import dispose_engine
from app.exceptions import (
    AnnuaireError,
    CircuitBreakerOpenError,
    DatabaseError,
    NotFoundError,
    PaymentProviderError,
    RateLimitExceededError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import directory, health, payments, reviews

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Root logger to stdout, level from LOG_LEVEL.

    Format: 2025-08-05T14:03:11 [INFO] app.services.review_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-call chatter
    for name in ("uvicorn.access", "sqlalchemy.engine", "stripe", "httpcore", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("Annuaire Backend %s starting up", __version__)

    # The directory and reviews work without Stripe, so this only warns
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.warning("%s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Annuaire Backend shutting down")
    await dispose_engine()
    logger.info("Shutdown complete")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            {
                "error": error,
                "message": message,
                "details": details or None,
                "request_id": request_id_var.get("") or None,
            }
        ),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Exception → response mapping:

        RequestValidationError   → 400 validation_error (body not a JSON object)
        ValidationError          → 400 validation_error
        NotFoundError            → 404 not_found
        RateLimitExceededError   → 429 rate_limit_exceeded
        DatabaseError            → 500 database_error (raw error in details)
        PaymentProviderError     → 500 payment_error (Stripe message in details)
        CircuitBreakerOpenError  → 503 service_unavailable
        AnnuaireError            → 500 server_error
        Exception                → 500 internal_server_error
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        logger.warning("[%s] Malformed request: %s", request_id_var.get(""), exc.errors())
        return _error_response(
            400,
            "validation_error",
            "Request body must be a valid JSON object",
            details={"errors": exc.errors()},
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, details=exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message, details=exc.context)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return _error_response(
            429,
            "rate_limit_exceeded",
            exc.message,
            details=exc.context,
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "database_error", exc.message, details=exc.context)

    @app.exception_handler(PaymentProviderError)
    async def handle_payment_error(request: Request, exc: PaymentProviderError):
        logger.error("[%s] Payment provider error: %s", request_id_var.get(""), exc.message)
        headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
        return _error_response(500, "payment_error", exc.message, details=exc.context, headers=headers)

    @app.exception_handler(CircuitBreakerOpenError)
    async def handle_circuit_breaker(request: Request, exc: CircuitBreakerOpenError):
        logger.warning("[%s] Circuit breaker open: %s", request_id_var.get(""), exc.message)
        return _error_response(
            503,
            "service_unavailable",
            exc.message,
            details=exc.context,
            headers={"Retry-After": str(exc.recovery_time)},
        )

    @app.exception_handler(AnnuaireError)
    async def handle_app_error(request: Request, exc: AnnuaireError):
        logger.error("[%s] %s: %s", request_id_var.get(""), type(exc).__name__, exc.message)
        return _error_response(500, "server_error", exc.message, details=exc.context)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred.",
            details={"details": str(exc)},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Annuaire API",
        description=(
            "Directory of professionals: listing and search, reviews, "
            "and Stripe plan payments that activate listings."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    register_exception_handlers(app)

    app.include_router(directory.router)
    app.include_router(reviews.router)
    app.include_router(payments.router)
    app.include_router(health.router)

    return app


app = create_app()
