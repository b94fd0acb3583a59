"""
Pydantic models for decoration bookings.

A booking references a catalog service by id and moves through the
fulfilment statuses in ``BookingStatus``.  Payment is tracked on a
separate axis by ``PaymentStatus``.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class BookingStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class BookingDetails(BaseModel):
    client_name: Optional[str] = Field(None, examples=["Jane Doe"])
    event_date: Optional[str] = Field(None, description="Requested date of the decoration", examples=["2026-12-24"])
    location: Optional[str] = Field(None, examples=["12 Elm Street"])
    notes: Optional[str] = None


class BookingCreate(BookingDetails):
    """Schema for creating a booking.

    ``client_email`` may be omitted; it then defaults to the caller.
    When supplied it must match the caller's verified email.
    """

    service_id: str = Field(..., min_length=1, description="Catalog service reference", examples=["1"])
    client_email: Optional[str] = None

    model_config = {
        "coerce_numbers_to_str": True,
    }


class BookingAssign(BaseModel):
    decorator_email: str = Field(..., min_length=3, examples=["decorator@example.com"])


class BookingStatusUpdate(BaseModel):
    # Kept as a plain string so unknown values reach the service and
    # come back as a validation error naming the allowed statuses.
    status: str = Field(..., examples=["in_progress"])


class PaymentConfirm(BaseModel):
    transaction_id: str = Field(..., min_length=1, examples=["pi_3Nabc"])


class BookingRead(BookingDetails):
    id: int
    client_email: str
    service_id: str
    status: BookingStatus
    payment_status: PaymentStatus
    decorator_email: Optional[str] = None
    transaction_id: Optional[str] = None
    booked_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }
