"""
Domain error taxonomy.

Services and the security layer raise these exceptions; they never
let raw driver or HTTP-client errors escape.  ``register_error_handlers``
maps each kind onto an HTTP response so endpoints do not have to
translate errors one by one.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class StyleDecorError(Exception):
    """Base class for all errors raised by the application core."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail


class ConfigurationError(StyleDecorError):
    """Required configuration is missing.  Fatal at startup."""


class AuthError(StyleDecorError):
    status_code = status.HTTP_401_UNAUTHORIZED


class MissingCredentialError(AuthError):
    def __init__(self, detail: str = "Not authenticated") -> None:
        super().__init__(detail)


class InvalidCredentialError(AuthError):
    def __init__(self, detail: str = "Invalid or expired token") -> None:
        super().__init__(detail)


class ForbiddenError(AuthError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(detail)


class ValidationError(StyleDecorError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(StyleDecorError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidTransitionError(StyleDecorError):
    """A booking cannot move from its current status to the requested one."""

    status_code = status.HTTP_409_CONFLICT


class PaymentConflictError(StyleDecorError):
    """The booking was already paid under a different transaction."""

    status_code = status.HTTP_409_CONFLICT


class TransientError(StyleDecorError):
    """Persistence or payment provider failed or timed out."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, detail: str = "Service temporarily unavailable") -> None:
        super().__init__(detail)


logger = logging.getLogger(__name__)


async def _handle_domain_error(request: Request, exc: StyleDecorError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthError) and exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    if isinstance(exc, TransientError):
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the exception handler for every ``StyleDecorError``."""
    app.add_exception_handler(StyleDecorError, _handle_domain_error)
