"""
Annuaire Backend — Health Check Route
=======================================

GET /health reports database connectivity and Stripe status.

    healthy    database reachable, Stripe reachable
    degraded   database reachable, Stripe unavailable / unconfigured / circuit open
    unhealthy  database unreachable
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from app import __version__
from app.config import settings
from app.database import engine
from app.schemas.common import HealthResponse
from app.services.stripe_service import CircuitBreaker, stripe_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


async def _database_status() -> str:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return "connected"
    except Exception as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        return "disconnected"


async def _payments_status() -> str:
    if not settings.stripe_configured:
        return "unconfigured"
    if stripe_service.circuit_breaker.state == CircuitBreaker.OPEN:
        return "circuit_open"
    if not await stripe_service.health_check():
        return "unavailable"
    return "available"


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check() -> HealthResponse:
    database = await _database_status()
    payments = await _payments_status()

    if database != "connected":
        overall = "unhealthy"
    elif payments != "available":
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=database,
        payments=payments,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
