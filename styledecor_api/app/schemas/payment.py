"""
Pydantic models for the payment provider integration.

Only the intent creation call is modelled: the client asks for a
client secret for one of its bookings and completes the card flow
with the provider directly, then reports the transaction id back
through the payment confirmation endpoint.
"""

from pydantic import BaseModel, Field


class PaymentIntentCreate(BaseModel):
    booking_id: str = Field(..., min_length=1, examples=["1"])

    model_config = {
        "coerce_numbers_to_str": True,
    }


class PaymentIntentRead(BaseModel):
    client_secret: str
    amount: int = Field(..., description="Amount in the currency's minor unit")
    currency: str = Field(..., examples=["usd"])
