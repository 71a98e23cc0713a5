"""
Annuaire Backend — Subscription Service (Payment Confirmation Orchestrator)
=============================================================================

What:  Activates or creates a professional listing once its plan is paid for,
       and opens Stripe PaymentIntents for the signup form.
Why:   Keeps the whole "payment → listing" workflow out of the route handlers.
How:   Composes the payment provider, image normalisation and the record store.

Confirmation Flow (POST /api/confirm-payment):
    ┌──────────┐    ┌──────────────────┐    ┌──────────────┐    ┌──────────┐
    │ Required │───▶│ Free plan?       │───▶│ Resolve      │───▶│ Upsert   │
    │ fields   │    │  yes: skip Stripe│    │ professional │    │ (flush)  │
    └──────────┘    │  no: intent must │    │ temp_ → title│    └──────────┘
                    │  have succeeded  │    │ else → by id │
                    └──────────────────┘    └──────────────┘

    Every confirmation extends the listing for one year from now.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import (
    DatabaseError,
    MissingFieldsError,
    NotFoundError,
    ValidationError,
)
from app.models.professional import Professional
from app.schemas.payment import (
    ConfirmationData,
    ConfirmPaymentResponse,
    ListingMetadata,
    PaymentIntentResponse,
)
from app.services.coercion import is_blank
from app.services.image_service import image_service
from app.services.payment_base import PaymentProvider
from app.services.stripe_service import stripe_service

logger = logging.getLogger(__name__)

CONFIRMATION_REQUIRED = ("paymentIntentId", "professionalId", "planId")
FREE_PLAN_REQUIRED = ("email", "businessName")


def one_year_from(moment: datetime) -> datetime:
    """Same calendar day next year; 29 February falls back to the 28th."""
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        return moment.replace(year=moment.year + 1, day=28)


def _parse_amount(value: Any) -> Optional[int]:
    """Positive whole number of cents, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, int) and value > 0:
        return value
    return None


class SubscriptionService:
    """
    Responsibilities:
        - confirm_payment(): verify payment, then activate or create the listing
        - create_payment_intent(): open a Stripe PaymentIntent for a signup

    The payment provider is injectable; the module singleton uses Stripe.
    """

    def __init__(self, provider: Optional[PaymentProvider] = None):
        self.provider = provider or stripe_service

    async def confirm_payment(
        self, db: AsyncSession, payload: Dict[str, Any]
    ) -> ConfirmPaymentResponse:
        """
        Confirm a plan purchase and upsert the professional.

        Raises:
            MissingFieldsError: ids or plan missing, or free-plan contact missing (→ 400)
            ValidationError: the PaymentIntent has not succeeded (→ 400)
            NotFoundError: non-temporary professional id not in the store (→ 404)
            PaymentProviderError / CircuitBreakerOpenError: Stripe unavailable
            DatabaseError: lookup or write failed (→ 500)
        """
        missing = [name for name in CONFIRMATION_REQUIRED if is_blank(payload.get(name))]
        if missing:
            raise MissingFieldsError(missing=missing)

        payment_intent_id = str(payload["paymentIntentId"]).strip()
        professional_id = str(payload["professionalId"]).strip()
        plan_id = str(payload["planId"]).strip()
        listing = ListingMetadata.from_payload(payload)

        if payment_intent_id.startswith(settings.free_plan_prefix):
            missing = [name for name in FREE_PLAN_REQUIRED if is_blank(payload.get(name))]
            if missing:
                raise MissingFieldsError(missing=missing)
            amount_paid = 0.0
            logger.info("Free plan confirmation for %s (plan=%s)", professional_id, plan_id)
        else:
            intent = await self.provider.retrieve_payment_intent(payment_intent_id)
            if not intent.succeeded:
                logger.warning(
                    "PaymentIntent %s not succeeded (status=%s)",
                    payment_intent_id,
                    intent.status,
                )
                raise ValidationError(
                    message=f"Payment has not succeeded (status: {intent.status})",
                    field="paymentIntentId",
                    context={"status": intent.status},
                )
            amount_paid = intent.amount / 100
            listing = listing.merged_with(intent.metadata)

        expiry = one_year_from(datetime.now(timezone.utc))

        try:
            if professional_id.startswith(settings.temp_id_prefix):
                professional = await self._find_by_title(db, listing.business_name)
                if professional is None:
                    professional = self._new_professional(listing, payload)
                    db.add(professional)
                    created = True
                else:
                    created = False
            else:
                professional = await db.get(Professional, professional_id)
                if professional is None:
                    raise NotFoundError(resource="Professional", resource_id=professional_id)
                created = False

            professional.plan = plan_id
            professional.is_active = True
            professional.payment_id = payment_intent_id
            professional.amount_paid = amount_paid
            professional.expiry_date = expiry
            await db.flush()
        except NotFoundError:
            raise
        except Exception as e:
            logger.error("Error saving confirmed listing: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Error while activating the listing",
                context={"details": str(e)},
            )

        logger.info(
            "Listing %s %s (plan=%s, amount=%.2f, expires=%s)",
            professional.id,
            "created" if created else "activated",
            plan_id,
            amount_paid,
            expiry.date().isoformat(),
        )
        return ConfirmPaymentResponse(
            message="Listing created and activated" if created else "Listing activated",
            data=ConfirmationData(professional_id=professional.id),
        )

    async def _find_by_title(
        self, db: AsyncSession, title: Optional[str]
    ) -> Optional[Professional]:
        if not title:
            return None
        result = await db.execute(
            select(Professional).where(Professional.title == title).limit(1)
        )
        return result.scalars().first()

    def _new_professional(
        self, listing: ListingMetadata, payload: Dict[str, Any]
    ) -> Professional:
        professional = Professional(
            title=listing.business_name or settings.default_listing_title,
            email=listing.email,
            sub_category=listing.category_id,
            city=listing.city,
            phone=listing.phone,
            subtitle=listing.description,
            address=listing.address,
            website=listing.website,
            facebook=listing.facebook,
            instagram=listing.instagram,
            tiktok=listing.tiktok,
            youtube=listing.youtube,
            whatsapp=listing.whatsapp,
            sponsor=False,
            image=image_service.normalize_image(
                payload.get("profileImageBase64"), label="profile image"
            ),
        )
        gallery = image_service.normalize_gallery(payload.get("galleryImagesBase64"))
        for slot, data_uri in enumerate(gallery, start=1):
            professional.set_gallery_image(slot, data_uri)
        return professional

    async def create_payment_intent(self, payload: Dict[str, Any]) -> PaymentIntentResponse:
        """
        Open a PaymentIntent carrying the signup details as metadata.

        Raises:
            ValidationError: amount missing or not a positive integer, bad currency (→ 400)
            PaymentProviderError / CircuitBreakerOpenError: Stripe unavailable
        """
        amount = _parse_amount(payload.get("amount"))
        if amount is None:
            raise ValidationError(
                message="amount must be a positive integer number of cents",
                field="amount",
                context={"received": payload.get("amount")},
            )

        currency = str(payload.get("currency") or settings.default_currency).strip().lower()
        if len(currency) != 3 or not currency.isalpha():
            raise ValidationError(
                message=f"Invalid currency code: {currency!r}",
                field="currency",
            )

        metadata = ListingMetadata.from_payload(payload).to_stripe_metadata()

        intent = await self.provider.create_payment_intent(
            amount=amount,
            currency=currency,
            metadata=metadata,
        )
        logger.info("PaymentIntent %s created (%d %s)", intent.id, amount, currency)

        return PaymentIntentResponse(
            client_secret=intent.client_secret,
            payment_intent_id=intent.id,
            amount=intent.amount or amount,
            currency=intent.currency or currency,
        )


subscription_service = SubscriptionService()
