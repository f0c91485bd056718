"""
Payment Gateway

Creates payment intents at the payment processor and hands back the client
secret the frontend needs to confirm the payment. Nothing else about payments
is handled here.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from app.config import settings
from app.core.errors import PaymentGatewayError, PaymentUnavailableError

logger = logging.getLogger("uvicorn.error")


class PaymentGateway(ABC):
    """Payment gateway abstract base class"""

    @abstractmethod
    async def create_payment_intent(self, amount: int, currency: str) -> str:
        """
        Create a payment intent

        Parameters:
        - amount: Amount in the currency's smallest unit (e.g. cents)
        - currency: ISO currency code, e.g. "brl"

        Returns:
        - Client secret of the created intent
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the gateway is configured"""


class StripePaymentGateway(PaymentGateway):
    """Stripe PaymentIntents over the REST API"""

    def __init__(self, secret_key: Optional[str] = None, api_base: Optional[str] = None):
        self.secret_key = secret_key if secret_key is not None else settings.stripe_secret_key
        self.api_base = (api_base or settings.stripe_api_base).rstrip("/")

    def is_available(self) -> bool:
        return bool(self.secret_key)

    async def create_payment_intent(self, amount: int, currency: str) -> str:
        if not self.is_available():
            raise PaymentUnavailableError()

        data = {
            "amount": str(amount),
            "currency": currency.lower(),
            "automatic_payment_methods[enabled]": "true",
        }
        headers = {"Authorization": f"Bearer {self.secret_key}"}

        try:
            async with httpx.AsyncClient(timeout=30) as client:
                resp = await client.post(f"{self.api_base}/payment_intents", headers=headers, data=data)
            resp.raise_for_status()
            result = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("[payments] payment intent creation failed: %s", e)
            raise PaymentGatewayError("Could not create payment intent") from e

        client_secret = result.get("client_secret")
        if not client_secret:
            raise PaymentGatewayError("Payment processor returned no client secret")
        return client_secret
