"""
Annuaire Backend — Payment Route Handlers
===========================================

POST /api/payment-intent   open a Stripe PaymentIntent for a signup
POST /api/confirm-payment  verify the payment (or free plan) and
                           activate / create the professional listing

Bodies are free-form JSON objects; the services validate them so that
every missing field is reported in one 400 response.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse
from app.schemas.payment import ConfirmPaymentResponse, PaymentIntentResponse
from app.services.subscription_service import subscription_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Payments"])

_ERRORS = {
    400: {"description": "Invalid request", "model": ErrorResponse},
    500: {"description": "Store or Stripe failure", "model": ErrorResponse},
    503: {"description": "Stripe circuit open", "model": ErrorResponse},
}


@router.post(
    "/confirm-payment",
    response_model=ConfirmPaymentResponse,
    responses={**_ERRORS, 404: {"description": "Unknown professional", "model": ErrorResponse}},
    summary="Confirm a plan payment",
    description=(
        "Free plans use a paymentIntentId starting with `free_plan_` and skip "
        "Stripe. Professional ids starting with `temp_` create the listing "
        "(or reuse one with the same business name)."
    ),
)
async def confirm_payment(
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_session),
) -> ConfirmPaymentResponse:
    return await subscription_service.confirm_payment(db=db, payload=payload)


@router.post(
    "/payment-intent",
    response_model=PaymentIntentResponse,
    responses=_ERRORS,
    summary="Create a Stripe PaymentIntent",
)
async def create_payment_intent(
    payload: Dict[str, Any] = Body(...),
) -> PaymentIntentResponse:
    """`amount` in cents; `currency` defaults to the server's currency."""
    return await subscription_service.create_payment_intent(payload)
