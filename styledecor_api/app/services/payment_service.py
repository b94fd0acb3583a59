"""
Payment provider client.

Creates payment intents with a Stripe-compatible API over ``httpx``.
The client secret returned by the provider is handed to the browser,
which completes the card flow directly with the provider; the booking
is marked paid later through ``BookingService.confirm_payment``.

Network errors, timeouts and non-2xx replies all surface as
``TransientError``.  Nothing is retried here; the caller may retry the
whole request.
"""

import logging
from typing import Dict, Optional

import httpx

from ..core.config import Settings
from ..core.errors import TransientError


logger = logging.getLogger(__name__)


class PaymentService:
    """Thin wrapper around the provider's payment intent endpoint."""

    def __init__(
        self,
        secret_key: str,
        api_base: str = "https://api.stripe.com",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.secret_key = secret_key
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.BaseTransport] = None) -> "PaymentService":
        return cls(
            settings.stripe_secret_key,
            api_base=settings.stripe_api_base,
            timeout=settings.payment_timeout,
            transport=transport,
        )

    def create_payment_intent(self, amount: int, currency: str, metadata: Optional[Dict[str, str]] = None) -> str:
        """Create a card payment intent and return its client secret.

        ``amount`` is in the currency's minor unit (cents for ``usd``).
        """
        if not self.secret_key:
            logger.error("Payment provider key is not configured")
            raise TransientError()
        form = {
            "amount": str(amount),
            "currency": currency,
            "payment_method_types[]": "card",
        }
        for key, value in (metadata or {}).items():
            form[f"metadata[{key}]"] = str(value)
        try:
            with httpx.Client(
                base_url=self.api_base,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = client.post(
                    "/v1/payment_intents",
                    data=form,
                    headers={"Authorization": f"Bearer {self.secret_key}"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            logger.exception("Payment intent creation failed")
            raise TransientError() from exc
        except ValueError as exc:
            logger.exception("Payment provider returned invalid JSON")
            raise TransientError() from exc
        client_secret = data.get("client_secret")
        if not client_secret:
            logger.error("Payment provider reply has no client_secret: %s", data.get("id"))
            raise TransientError()
        logger.info("Payment intent %s created for %s %s", data.get("id"), amount, currency)
        return client_secret
