"""
Application package initializer.

The code is organised by layer: ``core`` holds configuration, logging,
persistence, credentials, the error taxonomy and the authorization
policy; ``services`` holds the business logic for users, bookings, the
catalog and payments; ``api/v1/endpoints`` exposes them over HTTP.
"""

from .main import app  # noqa: F401
