"""
Top-level router for version 1 of the API.

This router aggregates the domain routers.  Paths follow the public
contract the frontend already uses, so the booking, payment and token
routers define their full paths themselves and are included without a
prefix.
"""

from fastapi import APIRouter

from .endpoints import admin, auth, bookings, catalog, health, payments, users


router = APIRouter()

router.include_router(health.router, tags=["health"])
router.include_router(auth.router, tags=["auth"])
router.include_router(catalog.router, prefix="/services", tags=["services"])
router.include_router(bookings.router, tags=["bookings"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
router.include_router(payments.router, tags=["payments"])
