"""
Annuaire Backend — Payment Schemas
====================================

What:  Listing metadata carried through payment flows, and the responses of
       the payment endpoints.

ListingMetadata:
    Signup form fields. They arrive in the confirmation body and, for paid
    plans, were also attached to the Stripe PaymentIntent when it was
    created. Body values win; blanks are filled from the intent.
"""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field

# Body key → attribute. Body keys are the client's camelCase / French names.
LISTING_FIELDS: Dict[str, str] = {
    "email": "email",
    "businessName": "business_name",
    "categoryId": "category_id",
    "ville": "city",
    "phone": "phone",
    "description": "description",
    "address": "address",
    "website": "website",
    "facebook": "facebook",
    "instagram": "instagram",
    "tiktok": "tiktok",
    "youtube": "youtube",
    "whatsapp": "whatsapp",
}


class ListingMetadata(BaseModel):
    """Signup details for a professional listing (all optional)."""

    email: Optional[str] = None
    business_name: Optional[str] = None
    category_id: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    tiktok: Optional[str] = None
    youtube: Optional[str] = None
    whatsapp: Optional[str] = None
    has_profile_image: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ListingMetadata":
        """Picks the listing fields out of a request body or intent metadata."""
        values: Dict[str, Any] = {}
        for key, attr in LISTING_FIELDS.items():
            value = payload.get(key)
            if value is None or value == "":
                continue
            values[attr] = str(value).strip()
        values["has_profile_image"] = bool(payload.get("profileImageBase64"))
        return cls(**values)

    def merged_with(self, fallback: Mapping[str, Any]) -> "ListingMetadata":
        """Returns a copy whose blank fields are filled from `fallback`."""
        other = ListingMetadata.from_payload(fallback)
        updates = {
            attr: getattr(other, attr)
            for attr in LISTING_FIELDS.values()
            if not getattr(self, attr) and getattr(other, attr)
        }
        return self.model_copy(update=updates)

    def to_stripe_metadata(self) -> Dict[str, str]:
        """
        Flattens to Stripe metadata (string values only, camelCase keys).

        Stripe caps metadata values at 500 characters; longer values are cut.
        """
        metadata: Dict[str, str] = {}
        for key, attr in LISTING_FIELDS.items():
            value = getattr(self, attr)
            if value:
                metadata[key] = value[:500]
        metadata["hasProfileImage"] = "true" if self.has_profile_image else "false"
        return metadata


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════


class ConfirmationData(BaseModel):
    professional_id: str = Field(alias="professionalId")

    model_config = {"populate_by_name": True}


class ConfirmPaymentResponse(BaseModel):
    """Returned by POST /api/confirm-payment."""

    success: bool = True
    message: str
    data: ConfirmationData


class PaymentIntentResponse(BaseModel):
    """Returned by POST /api/payment-intent."""

    success: bool = True
    client_secret: Optional[str] = Field(default=None, alias="clientSecret")
    payment_intent_id: str = Field(alias="paymentIntentId")
    amount: int = Field(description="Amount in the smallest currency unit (cents)")
    currency: str

    model_config = {"populate_by_name": True}
