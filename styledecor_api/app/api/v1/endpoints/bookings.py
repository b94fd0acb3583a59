"""
Booking endpoints for API v1.

Every route resolves the caller first, then asks ``policy.authorize``
whether the caller may act on the targeted booking, and only then
calls ``BookingService``.  For routes that target one booking the
owner is read before the check; a booking that does not exist has no
owner, so non-administrators get 403 for it exactly as for someone
else's booking.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from styledecor_api.app.api.deps import get_booking_service
from styledecor_api.app.core.policy import Identity, Operation, authorize
from styledecor_api.app.core.security import get_current_identity
from styledecor_api.app.schemas.booking import (
    BookingAssign,
    BookingCreate,
    BookingRead,
    BookingStatusUpdate,
    PaymentConfirm,
)
from styledecor_api.app.services.booking_service import BookingService
from styledecor_api.app.services.user_service import normalize_email


router = APIRouter()


def _client_of(service: BookingService, booking_id: str) -> Optional[str]:
    booking = service.find_booking(booking_id)
    return booking.client_email if booking else None


@router.post("/bookings", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    booking: BookingCreate,
    identity: Identity = Depends(get_current_identity),
    service: BookingService = Depends(get_booking_service),
) -> BookingRead:
    """Create a booking for the caller.

    The booking starts ``pending`` and ``unpaid`` with no decorator.
    """
    client_email = normalize_email(booking.client_email or identity.email)
    authorize(identity, Operation.CREATE_BOOKING, client_email)
    details = booking.model_dump(include={"client_name", "event_date", "location", "notes"})
    return service.create(client_email, booking.service_id, details)


@router.get("/bookings", response_model=List[BookingRead])
def list_my_bookings(
    email: Optional[str] = Query(None, description="Client email; defaults to the caller"),
    identity: Identity = Depends(get_current_identity),
    service: BookingService = Depends(get_booking_service),
) -> List[BookingRead]:
    """List the caller's own bookings, newest first."""
    target = normalize_email(email or identity.email)
    authorize(identity, Operation.READ_OWN_BOOKINGS, target)
    return service.list_for_client(target)


@router.get("/bookings/all", response_model=List[BookingRead])
def list_all_bookings(
    identity: Identity = Depends(get_current_identity),
    service: BookingService = Depends(get_booking_service),
) -> List[BookingRead]:
    """List every booking.  Administrators only."""
    authorize(identity, Operation.READ_ALL_BOOKINGS)
    return service.list_all()


@router.get("/bookings/decorator/{email}", response_model=List[BookingRead])
def list_assigned_bookings(
    email: str = Path(..., description="Decorator email"),
    identity: Identity = Depends(get_current_identity),
    service: BookingService = Depends(get_booking_service),
) -> List[BookingRead]:
    """List bookings assigned to the calling decorator."""
    target = normalize_email(email)
    authorize(identity, Operation.READ_ASSIGNED_BOOKINGS, target)
    return service.list_for_decorator(target)


@router.get("/bookings/{booking_id}", response_model=BookingRead)
def get_booking(
    booking_id: str = Path(..., description="ID of the booking"),
    identity: Identity = Depends(get_current_identity),
    service: BookingService = Depends(get_booking_service),
) -> BookingRead:
    """Retrieve one booking.

    Visible to its client, its assigned decorator and administrators.
    """
    booking = service.find_booking(booking_id)
    owner = booking.client_email if booking else None
    if booking and booking.decorator_email == identity.email:
        owner = identity.email
    authorize(identity, Operation.READ_BOOKING, owner)
    return service.get_booking(booking_id)


@router.patch("/bookings/assign/{booking_id}", response_model=BookingRead)
def assign_decorator(
    body: BookingAssign,
    booking_id: str = Path(..., description="ID of the booking"),
    identity: Identity = Depends(get_current_identity),
    service: BookingService = Depends(get_booking_service),
) -> BookingRead:
    """Assign a decorator.  Administrators only."""
    authorize(identity, Operation.ASSIGN_DECORATOR)
    return service.assign(booking_id, body.decorator_email)


@router.patch("/bookings/status/{booking_id}", response_model=BookingRead)
def update_booking_status(
    body: BookingStatusUpdate,
    booking_id: str = Path(..., description="ID of the booking"),
    identity: Identity = Depends(get_current_identity),
    service: BookingService = Depends(get_booking_service),
) -> BookingRead:
    """Advance the fulfilment status.

    Allowed for the decorator assigned to the booking and for
    administrators.
    """
    booking = service.find_booking(booking_id)
    authorize(identity, Operation.UPDATE_STATUS, booking.decorator_email if booking else None)
    return service.update_status(booking_id, body.status)


@router.patch("/bookings/payment-success/{booking_id}", response_model=BookingRead)
def confirm_booking_payment(
    body: PaymentConfirm,
    booking_id: str = Path(..., description="ID of the booking"),
    identity: Identity = Depends(get_current_identity),
    service: BookingService = Depends(get_booking_service),
) -> BookingRead:
    """Record a successful payment for the booking's client."""
    authorize(identity, Operation.CONFIRM_PAYMENT, _client_of(service, booking_id))
    return service.confirm_payment(booking_id, body.transaction_id)


@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_booking(
    booking_id: str = Path(..., description="ID of the booking"),
    identity: Identity = Depends(get_current_identity),
    service: BookingService = Depends(get_booking_service),
) -> None:
    """Cancel (delete) a booking.

    Allowed for the booking's client and administrators.  Completed
    bookings cannot be cancelled.
    """
    authorize(identity, Operation.CANCEL_BOOKING, _client_of(service, booking_id))
    service.cancel(booking_id)
