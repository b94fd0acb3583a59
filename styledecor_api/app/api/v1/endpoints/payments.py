"""
Payment endpoints for API v1.

``POST /create-payment-intent`` prices one of the caller's bookings
from the catalog and asks the payment provider for a client secret.
The catalog ``cost`` is in whole currency units and is sent to the
provider in minor units.
"""

from fastapi import APIRouter, Depends, Request

from styledecor_api.app.api.deps import get_booking_service, get_catalog_service, get_payment_service
from styledecor_api.app.core.errors import PaymentConflictError
from styledecor_api.app.core.policy import Identity, Operation, authorize
from styledecor_api.app.core.security import get_current_identity
from styledecor_api.app.schemas.booking import PaymentStatus
from styledecor_api.app.schemas.payment import PaymentIntentCreate, PaymentIntentRead
from styledecor_api.app.services.booking_service import BookingService
from styledecor_api.app.services.catalog_service import CatalogService
from styledecor_api.app.services.payment_service import PaymentService


router = APIRouter()


@router.post("/create-payment-intent", response_model=PaymentIntentRead)
def create_payment_intent(
    body: PaymentIntentCreate,
    request: Request,
    identity: Identity = Depends(get_current_identity),
    bookings: BookingService = Depends(get_booking_service),
    catalog: CatalogService = Depends(get_catalog_service),
    payments: PaymentService = Depends(get_payment_service),
) -> PaymentIntentRead:
    """Create a payment intent for one of the caller's unpaid bookings."""
    booking = bookings.find_booking(body.booking_id)
    authorize(identity, Operation.CREATE_PAYMENT_INTENT, booking.client_email if booking else None)
    if booking.payment_status == PaymentStatus.PAID:
        raise PaymentConflictError("Booking is already paid")
    service = catalog.get_service(booking.service_id)
    amount = service.cost * 100
    currency = request.app.state.settings.payment_currency
    client_secret = payments.create_payment_intent(
        amount,
        currency,
        metadata={"booking_id": str(booking.id), "client_email": booking.client_email},
    )
    return PaymentIntentRead(client_secret=client_secret, amount=amount, currency=currency)
