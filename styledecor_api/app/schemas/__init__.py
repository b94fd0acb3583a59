"""
Pydantic schema definitions for API payloads.

Each domain (users, bookings, catalog services, payments, credentials)
defines its own request and response models.  Schemas are separate
from the SQLite rows so the API representation can evolve
independently of the storage layout.
"""
