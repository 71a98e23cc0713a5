"""
Annuaire Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the different failure scenarios.
Why:   Services raise these; global handlers (registered in main.py) turn
       them into structured JSON error responses with the right status code.
How:   Each exception carries a message and an optional context dict.
       The context is returned to the client as `details`.

Exception Hierarchy:
    AnnuaireError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── DatabaseError            → 500 Internal Server Error
    ├── PaymentProviderError     → 500 Internal Server Error
    └── CircuitBreakerOpenError  → 503 Service Unavailable (circuit open)
"""

from typing import Any, Dict, List, Optional


class AnnuaireError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description
        context:  Additional details echoed to the client as `details`
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = dict(context or {})
        super().__init__(self.message)


class ValidationError(AnnuaireError):
    """
    Raised when client input fails validation.

    When:    Malformed JSON, missing required fields, unparseable numbers or
             dates, unconfirmed payments.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Missing required fields: rating, title",
            "details": {"missing": ["rating", "title"], "received": {...}}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class MissingFieldsError(ValidationError):
    """ValidationError listing every required field that was absent or empty."""

    def __init__(
        self,
        missing: List[str],
        received: Optional[Dict[str, Any]] = None,
    ):
        ctx: Dict[str, Any] = {"missing": list(missing)}
        if received is not None:
            ctx["received"] = received
        super().__init__(
            message=f"Missing required fields: {', '.join(missing)}",
            context=ctx,
        )
        self.missing = list(missing)


class NotFoundError(AnnuaireError):
    """
    Raised when a requested record does not exist.

    SQLAlchemy returns None for missing rows; the service layer converts
    that into this exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = dict(context or {})
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(AnnuaireError):
    """
    Raised when a record-store query, insert or update fails.

    HTTP: 500. The raw driver message is carried in context["details"]
    so API consumers see what went wrong.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PaymentProviderError(AnnuaireError):
    """
    Raised when Stripe fails after all retries or rejects the request.

    HTTP: 500. The Stripe error message is carried in context["details"].
    """

    def __init__(
        self,
        message: str = "Payment provider request failed",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class CircuitBreakerOpenError(AnnuaireError):
    """
    Raised when the Stripe circuit breaker is OPEN.

    CLOSED → failures counted → threshold reached → OPEN (reject calls)
    → recovery timeout elapsed → HALF_OPEN (one test call)
    → success → CLOSED / failure → OPEN again.

    HTTP: 503 with Retry-After.
    """

    def __init__(
        self,
        recovery_time: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Payment service is temporarily unavailable due to repeated failures. "
            f"It will be retried in approximately {recovery_time} seconds."
        )
        ctx = dict(context or {})
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, context=ctx)
        self.recovery_time = recovery_time


class RateLimitExceededError(AnnuaireError):
    """Raised when a client exceeds the per-IP request rate limit (429)."""

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = dict(context or {})
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
