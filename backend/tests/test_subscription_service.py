"""
Annuaire Backend — Subscription Service Tests
===============================================

A fake PaymentProvider stands in for Stripe; the record store is the
SQLite test database.
"""

from datetime import datetime, timezone
from typing import Dict, Optional

import pytest
from sqlalchemy import select

from app.exceptions import (
    MissingFieldsError,
    NotFoundError,
    PaymentProviderError,
    ValidationError,
)
from app.models.professional import Professional
from app.services.payment_base import PaymentIntentInfo, PaymentProvider
from app.services.subscription_service import SubscriptionService, one_year_from

IMAGE = "iVBORw0KGgo" + "A" * 120


class FakeProvider(PaymentProvider):
    def __init__(self, intent: Optional[PaymentIntentInfo] = None, error: Exception = None):
        self.intent = intent
        self.error = error
        self.retrieved = []
        self.created = []

    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntentInfo:
        self.retrieved.append(payment_intent_id)
        if self.error:
            raise self.error
        return self.intent

    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
    ) -> PaymentIntentInfo:
        self.created.append(
            {"amount": amount, "currency": currency, "metadata": metadata}
        )
        return PaymentIntentInfo(
            id="pi_new",
            status="requires_payment_method",
            amount=amount,
            currency=currency,
            client_secret="pi_new_secret",
        )

    async def health_check(self) -> bool:
        return True


def succeeded_intent(**overrides) -> PaymentIntentInfo:
    values = {
        "id": "pi_paid",
        "status": "succeeded",
        "amount": 4999,
        "currency": "cad",
        "metadata": {},
    }
    values.update(overrides)
    return PaymentIntentInfo(**values)


def free_payload(**overrides):
    payload = {
        "paymentIntentId": "free_plan_1722850000",
        "professionalId": "temp_abc",
        "planId": "gratuit",
        "email": "contact@studio.ca",
        "businessName": "Studio Lumière",
        "categoryId": "Photographie",
        "ville": "Montréal",
    }
    payload.update(overrides)
    return payload


async def all_professionals(db):
    return list((await db.execute(select(Professional))).scalars().all())


class TestOneYearFrom:

    def test_same_day_next_year(self):
        moment = datetime(2025, 8, 5, 10, 0, tzinfo=timezone.utc)
        assert one_year_from(moment) == datetime(2026, 8, 5, 10, 0, tzinfo=timezone.utc)

    def test_leap_day(self):
        assert one_year_from(datetime(2024, 2, 29)) == datetime(2025, 2, 28)


class TestConfirmPaymentValidation:

    @pytest.mark.asyncio
    async def test_requires_ids_and_plan(self, db_session):
        with pytest.raises(MissingFieldsError) as exc_info:
            await SubscriptionService(FakeProvider()).confirm_payment(
                db_session, {"professionalId": "temp_1"}
            )
        assert exc_info.value.missing == ["paymentIntentId", "planId"]

    @pytest.mark.asyncio
    async def test_free_plan_requires_contact(self, db_session):
        with pytest.raises(MissingFieldsError) as exc_info:
            await SubscriptionService(FakeProvider()).confirm_payment(
                db_session, free_payload(email="", businessName=None)
            )
        assert exc_info.value.missing == ["email", "businessName"]

    @pytest.mark.asyncio
    async def test_unsucceeded_intent_rejected(self, db_session):
        provider = FakeProvider(succeeded_intent(status="requires_payment_method"))

        with pytest.raises(ValidationError) as exc_info:
            await SubscriptionService(provider).confirm_payment(
                db_session,
                free_payload(paymentIntentId="pi_pending"),
            )

        assert exc_info.value.context["status"] == "requires_payment_method"
        assert await all_professionals(db_session) == []

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, db_session):
        provider = FakeProvider(error=PaymentProviderError("Stripe error: boom"))

        with pytest.raises(PaymentProviderError):
            await SubscriptionService(provider).confirm_payment(
                db_session, free_payload(paymentIntentId="pi_x")
            )


class TestConfirmPaymentFreePlan:

    @pytest.mark.asyncio
    async def test_skips_provider_and_creates_listing(self, db_session):
        provider = FakeProvider()
        payload = free_payload(
            profileImageBase64=IMAGE,
            galleryImagesBase64=[IMAGE, "short", IMAGE],
        )

        result = await SubscriptionService(provider).confirm_payment(db_session, payload)
        await db_session.commit()

        assert provider.retrieved == []
        [professional] = await all_professionals(db_session)
        assert result.success is True
        assert result.data.professional_id == professional.id
        assert professional.title == "Studio Lumière"
        assert professional.email == "contact@studio.ca"
        assert professional.sub_category == "Photographie"
        assert professional.city == "Montréal"
        assert professional.plan == "gratuit"
        assert professional.is_active is True
        assert professional.amount_paid == 0.0
        assert professional.payment_id == "free_plan_1722850000"
        assert professional.image == "data:image/png;base64," + IMAGE
        assert professional.gallery_image_1 and professional.gallery_image_2
        assert professional.gallery_image_3 is None
        assert professional.expiry_date.year == datetime.now(timezone.utc).year + 1


class TestConfirmPaymentPaid:

    @pytest.mark.asyncio
    async def test_activates_existing_professional_by_id(self, seed, db_session, make_professional):
        await seed(make_professional(id="pro-42", is_active=False, plan=None))
        provider = FakeProvider(succeeded_intent(amount=12900))

        result = await SubscriptionService(provider).confirm_payment(
            db_session,
            {"paymentIntentId": "pi_paid", "professionalId": "pro-42", "planId": "premium"},
        )
        await db_session.commit()

        assert provider.retrieved == ["pi_paid"]
        assert result.data.professional_id == "pro-42"
        professional = await db_session.get(Professional, "pro-42")
        assert professional.is_active is True
        assert professional.plan == "premium"
        assert professional.amount_paid == pytest.approx(129.0)
        assert professional.payment_id == "pi_paid"

    @pytest.mark.asyncio
    async def test_unknown_professional_is_not_found(self, db_session):
        provider = FakeProvider(succeeded_intent())

        with pytest.raises(NotFoundError):
            await SubscriptionService(provider).confirm_payment(
                db_session,
                {"paymentIntentId": "pi_paid", "professionalId": "missing", "planId": "premium"},
            )

    @pytest.mark.asyncio
    async def test_temp_id_reuses_listing_with_same_title(self, seed, db_session, make_professional):
        await seed(make_professional(id="pro-7", title="Studio Lumière", is_active=False))
        provider = FakeProvider(succeeded_intent())

        result = await SubscriptionService(provider).confirm_payment(
            db_session, free_payload(paymentIntentId="pi_paid", planId="pro")
        )
        await db_session.commit()

        assert result.data.professional_id == "pro-7"
        professionals = await all_professionals(db_session)
        assert len(professionals) == 1
        assert professionals[0].plan == "pro"
        assert professionals[0].amount_paid == pytest.approx(49.99)

    @pytest.mark.asyncio
    async def test_missing_details_are_filled_from_intent_metadata(self, db_session):
        provider = FakeProvider(
            succeeded_intent(
                metadata={
                    "businessName": "Spa Zen",
                    "email": "bonjour@spazen.ca",
                    "ville": "Laval",
                    "hasProfileImage": "false",
                }
            )
        )

        await SubscriptionService(provider).confirm_payment(
            db_session,
            {
                "paymentIntentId": "pi_paid",
                "professionalId": "temp_99",
                "planId": "premium",
                "ville": "Montréal",
            },
        )
        await db_session.commit()

        [professional] = await all_professionals(db_session)
        assert professional.title == "Spa Zen"
        assert professional.email == "bonjour@spazen.ca"
        assert professional.city == "Montréal"

    @pytest.mark.asyncio
    async def test_temp_listing_without_business_name_gets_default_title(self, db_session):
        provider = FakeProvider(succeeded_intent())

        await SubscriptionService(provider).confirm_payment(
            db_session,
            {"paymentIntentId": "pi_x", "professionalId": "temp_1", "planId": "pro"},
        )
        await db_session.commit()

        [professional] = await all_professionals(db_session)
        assert professional.title == "Nouveau Professionnel"
        assert professional.plan == "pro"
        assert professional.is_active is True

    @pytest.mark.asyncio
    async def test_signup_description_is_stored_as_subtitle(self, db_session):
        provider = FakeProvider(succeeded_intent())

        await SubscriptionService(provider).confirm_payment(
            db_session,
            free_payload(description="Photographe de mariage à Montréal"),
        )
        await db_session.commit()

        [professional] = await all_professionals(db_session)
        assert professional.subtitle == "Photographe de mariage à Montréal"
        assert professional.description is None


class TestCreatePaymentIntent:

    @pytest.mark.asyncio
    async def test_creates_intent_with_listing_metadata(self):
        provider = FakeProvider()

        result = await SubscriptionService(provider).create_payment_intent(
            {
                "amount": 4999,
                "businessName": "Studio Lumière",
                "ville": "Montréal",
                "profileImageBase64": IMAGE,
            }
        )

        [call] = provider.created
        assert call["amount"] == 4999
        assert call["currency"] == "cad"
        assert call["metadata"]["businessName"] == "Studio Lumière"
        assert call["metadata"]["hasProfileImage"] == "true"
        assert IMAGE not in call["metadata"].values()
        assert result.client_secret == "pi_new_secret"
        assert result.payment_intent_id == "pi_new"

    @pytest.mark.asyncio
    async def test_string_amount_and_currency(self):
        provider = FakeProvider()

        await SubscriptionService(provider).create_payment_intent({"amount": "2500", "currency": "USD"})

        assert provider.created[0]["amount"] == 2500
        assert provider.created[0]["currency"] == "usd"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [None, 0, -5, 12.5, "douze", True])
    async def test_invalid_amount(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            await SubscriptionService(FakeProvider()).create_payment_intent({"amount": amount})
        assert exc_info.value.field == "amount"

    @pytest.mark.asyncio
    async def test_invalid_currency(self):
        with pytest.raises(ValidationError):
            await SubscriptionService(FakeProvider()).create_payment_intent(
                {"amount": 100, "currency": "euros"}
            )
