"""
Annuaire Backend — Abstract Payment Provider Interface
========================================================

What:  Contract for the payment provider used by the subscription flows.
Why:   The confirmation logic only needs "what is the status and amount of
       this intent" and "create an intent"; keeping that behind an interface
       lets tests substitute a fake and keeps Stripe types out of the
       service layer.
How:   StripeService implements it; provider objects are converted into
       PaymentIntentInfo before leaving the implementation.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from pydantic import BaseModel, Field


class PaymentIntentInfo(BaseModel):
    """Provider-neutral view of a payment intent."""

    id: str
    status: str
    amount: int = Field(description="Smallest currency unit (cents)")
    currency: str = ""
    client_secret: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


class PaymentProvider(ABC):
    """
    Contract:
        - implementations handle their own retries and error translation
        - provider failures surface as PaymentProviderError
        - an open circuit surfaces as CircuitBreakerOpenError
    """

    @abstractmethod
    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntentInfo:
        """
        Fetch an intent by id.

        Raises:
            PaymentProviderError: provider rejected the call or is unreachable
            CircuitBreakerOpenError: too many recent failures
        """
        ...

    @abstractmethod
    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
    ) -> PaymentIntentInfo:
        """Create an intent for `amount` cents with listing metadata attached."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """True if the provider is reachable and the credentials work."""
        ...
