"""
Annuaire Backend — Stripe Payment Provider
============================================

What:  PaymentProvider implementation backed by the Stripe Python SDK.
Why:   Paid plans are confirmed by checking the PaymentIntent status on
       Stripe before a listing is activated.
How:   The SDK is synchronous, so calls run in Starlette's threadpool.
       Transient failures are retried with tenacity; a circuit breaker stops
       hammering Stripe when it keeps failing.

Resilience Strategy:
    1. Retry with exponential backoff on transient errors only
       (connection problems, rate limiting, Stripe-side API errors)
    2. Permanent errors (invalid id, authentication) fail immediately
    3. PaymentIntent creation carries one idempotency key across its retries
    4. Circuit breaker: after N consecutive failed calls, reject instantly
       for a recovery period, then let one test call through

Secrets:
    The API key comes from settings (STRIPE_SECRET_KEY). It is never logged.
"""

import logging
import time
import uuid
from typing import Any, Dict, Optional

import stripe
from starlette.concurrency import run_in_threadpool
from tenacity import (
    RetryError,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.config import settings
from app.exceptions import CircuitBreakerOpenError, PaymentProviderError
from app.services.payment_base import PaymentIntentInfo, PaymentProvider

logger = logging.getLogger(__name__)

# Errors worth retrying: the same request may succeed a moment later
TRANSIENT_ERRORS = (
    stripe.APIConnectionError,
    stripe.RateLimitError,
    stripe.APIError,
)


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker Implementation
# ══════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """
    Circuit breaker protecting the Stripe integration.

    State Machine:
        CLOSED (normal operation)
            → On failure: increment failure_count
            → When failure_count >= threshold: transition to OPEN

        OPEN (rejecting all requests)
            → All calls raise CircuitBreakerOpenError immediately
            → After recovery_timeout seconds: transition to HALF_OPEN

        HALF_OPEN (testing recovery)
            → Allow ONE request through
            → On success: transition to CLOSED (reset failure_count)
            → On failure: transition back to OPEN (reset timer)

    Not thread-safe: state is only touched from the event loop.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """
        Returns True if a request may proceed.

        Raises:
            CircuitBreakerOpenError if OPEN and the recovery timeout hasn't elapsed.
        """
        if self.state == self.CLOSED:
            return True

        if self.state == self.OPEN:
            elapsed = time.time() - (self.last_failure_time or 0)
            if elapsed >= self.recovery_timeout:
                logger.info(
                    "Circuit breaker transitioning to HALF_OPEN after %.1fs",
                    elapsed,
                )
                self.state = self.HALF_OPEN
                return True
            remaining = int(self.recovery_timeout - elapsed)
            raise CircuitBreakerOpenError(recovery_time=remaining)

        return True

    def record_success(self) -> None:
        if self.state == self.HALF_OPEN:
            logger.info("Circuit breaker transitioning to CLOSED (Stripe recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == self.HALF_OPEN:
            logger.warning("Circuit breaker returning to OPEN (test request failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Circuit breaker OPENING after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


# ══════════════════════════════════════════════════════════════════════════
# Stripe Service
# ══════════════════════════════════════════════════════════════════════════

def _to_info(intent: Any) -> PaymentIntentInfo:
    metadata = getattr(intent, "metadata", None) or {}
    if hasattr(metadata, "to_dict"):
        metadata = metadata.to_dict()
    return PaymentIntentInfo(
        id=intent.id,
        status=getattr(intent, "status", None) or "",
        amount=getattr(intent, "amount", None) or 0,
        currency=getattr(intent, "currency", None) or "",
        client_secret=getattr(intent, "client_secret", None),
        metadata={str(k): str(v) for k, v in dict(metadata).items()},
    )


class StripeService(PaymentProvider):
    """
    Stripe implementation of PaymentProvider.

    Error Handling Chain:
        SDK call fails with a transient error → tenacity retries
        → retries exhausted → record circuit breaker failure → PaymentProviderError
        SDK call fails with a permanent error → record failure → PaymentProviderError
        Circuit open → CircuitBreakerOpenError without calling Stripe
    """

    def __init__(self):
        if settings.stripe_configured:
            stripe.api_key = settings.stripe_secret_key
        stripe.api_version = settings.stripe_api_version

        self.circuit_breaker = CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )

        logger.info(
            "StripeService initialized (api_version=%s, configured=%s, "
            "circuit_breaker(threshold=%d, recovery=%ds))",
            settings.stripe_api_version,
            settings.stripe_configured,
            settings.cb_failure_threshold,
            settings.cb_recovery_timeout,
        )

    async def _execute(self, operation: str, func, *args, **kwargs) -> Any:
        """
        Runs one SDK call under the circuit breaker with retries.

        Raises:
            CircuitBreakerOpenError: circuit open
            PaymentProviderError: Stripe failed (message carries Stripe's text)
        """
        request_id = str(uuid.uuid4())[:8]
        self.circuit_breaker.can_execute()

        if not settings.stripe_configured:
            raise PaymentProviderError(
                message="Stripe is not configured on this server",
                context={"operation": operation},
            )

        try:
            result = await self._call_with_retry(request_id, operation, func, *args, **kwargs)
            self.circuit_breaker.record_success()
            return result
        except RetryError as e:
            self.circuit_breaker.record_failure()
            last = e.last_attempt.exception() if e.last_attempt else None
            logger.error("[%s] Stripe %s retries exhausted: %s", request_id, operation, last)
            raise PaymentProviderError(
                message=f"Stripe error: {last}",
                retry_after=self.circuit_breaker.recovery_timeout,
                context={"details": str(last), "request_id": request_id},
            )
        except stripe.StripeError as e:
            self.circuit_breaker.record_failure()
            logger.error(
                "[%s] Stripe %s failed: %s (code=%s)",
                request_id,
                operation,
                str(e),
                getattr(e, "code", None),
            )
            raise PaymentProviderError(
                message=f"Stripe error: {e.user_message or str(e)}",
                context={
                    "details": str(e),
                    "code": getattr(e, "code", None),
                    "request_id": request_id,
                },
            )

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential(
            multiplier=1,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    async def _call_with_retry(self, request_id: str, operation: str, func, *args, **kwargs) -> Any:
        start_time = time.time()
        try:
            result = await run_in_threadpool(func, *args, **kwargs)
        except Exception as e:
            logger.warning(
                "[%s] Stripe %s failed after %.0fms: %s",
                request_id,
                operation,
                (time.time() - start_time) * 1000,
                str(e),
            )
            raise
        logger.info(
            "[%s] Stripe %s completed in %.0fms",
            request_id,
            operation,
            (time.time() - start_time) * 1000,
        )
        return result

    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntentInfo:
        intent = await self._execute(
            "retrieve_payment_intent",
            stripe.PaymentIntent.retrieve,
            payment_intent_id,
        )
        return _to_info(intent)

    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
    ) -> PaymentIntentInfo:
        # One key per logical create, reused by every retry
        params: Dict[str, Any] = {
            "amount": amount,
            "currency": currency.lower(),
            "metadata": metadata,
            "automatic_payment_methods": {"enabled": True},
            "idempotency_key": f"pi-create-{uuid.uuid4()}",
        }
        intent = await self._execute(
            "create_payment_intent",
            stripe.PaymentIntent.create,
            **params,
        )
        return _to_info(intent)

    async def health_check(self) -> bool:
        """Retrieves the account balance: cheap, authenticated, no side effects."""
        if not settings.stripe_configured:
            return False
        try:
            await run_in_threadpool(stripe.Balance.retrieve)
            return True
        except stripe.StripeError as e:
            logger.warning("Stripe health check failed: %s", str(e))
            return False


stripe_service = StripeService()
