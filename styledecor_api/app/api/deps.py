"""
Shared FastAPI dependencies.

Services are cheap objects wrapping the process-wide ``Database``;
they are built per request from the resources the application created
at startup, so nothing below the endpoints reaches for global state.
"""

from fastapi import Depends, Request

from ..core.db import Database, get_db
from ..services.booking_service import BookingService
from ..services.catalog_service import CatalogService
from ..services.payment_service import PaymentService
from ..services.user_service import UserService


def get_user_service(request: Request, db: Database = Depends(get_db)) -> UserService:
    return UserService(db, request.app.state.settings.bootstrap_admin_email)


def get_booking_service(db: Database = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_catalog_service(db: Database = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_payment_service(request: Request) -> PaymentService:
    return request.app.state.payments
