"""
Administrative listings for API v1.
"""

from typing import List

from fastapi import APIRouter, Depends

from styledecor_api.app.api.deps import get_booking_service, get_user_service
from styledecor_api.app.core.policy import Identity, Operation, authorize
from styledecor_api.app.core.security import get_current_identity
from styledecor_api.app.schemas.booking import BookingRead
from styledecor_api.app.schemas.user import UserRead
from styledecor_api.app.services.booking_service import BookingService
from styledecor_api.app.services.user_service import UserService


router = APIRouter()


@router.get("/users", response_model=List[UserRead])
def list_users(
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> List[UserRead]:
    """List every registered user with their role."""
    authorize(identity, Operation.LIST_USERS)
    return service.list_all()


@router.get("/bookings", response_model=List[BookingRead])
def list_bookings(
    identity: Identity = Depends(get_current_identity),
    service: BookingService = Depends(get_booking_service),
) -> List[BookingRead]:
    authorize(identity, Operation.READ_ALL_BOOKINGS)
    return service.list_all()
