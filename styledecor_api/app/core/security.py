"""
Session credentials: issuing, verifying and resolving the caller.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC-SHA256 signatures and base64url encoding.  Tokens embed the
caller's email as ``sub`` and an expiration timestamp (``exp``).  The
``TokenService`` owns the signing secret for the lifetime of the
process; it is built once at startup and refuses to exist without a
secret.

The FastAPI dependencies at the bottom turn the ``Authorization``
header into an ``Identity`` (email + role) that endpoints hand to
``policy.authorize``.
"""

import base64
import hashlib
import hmac
import json
import logging
import time
from typing import Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .db import Database, get_db
from .errors import ConfigurationError, InvalidCredentialError, MissingCredentialError
from .policy import Identity


logger = logging.getLogger(__name__)


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


class TokenService:
    """Mint and validate signed, time-limited session credentials."""

    def __init__(self, secret_key: str, expire_minutes: int = 60, algorithm: str = "HS256") -> None:
        if not secret_key:
            raise ConfigurationError("ACCESS_TOKEN_SECRET is not configured")
        if algorithm != "HS256":
            raise ConfigurationError(f"Unsupported token algorithm: {algorithm}")
        self.algorithm = algorithm
        self._secret = secret_key
        self.expire_seconds = expire_minutes * 60

    def issue(self, email: str, now: Optional[float] = None) -> str:
        """Create a signed JWT for ``email``.

        The payload carries ``sub`` (the email) and ``exp`` (issue time
        plus the configured lifetime, one hour by default).  Clients
        present the token as ``Authorization: Bearer <token>``.
        """
        issued_at = int(now if now is not None else time.time())
        claims = {"sub": email, "iat": issued_at, "exp": issued_at + self.expire_seconds}
        header = {"alg": self.algorithm, "typ": "JWT"}
        header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
        payload_b64 = _b64_url_encode(json.dumps(claims, separators=(",", ":")).encode("utf-8"))
        signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
        signature_b64 = _b64_url_encode(_sign(signing_input, self._secret))
        return f"{header_b64}.{payload_b64}.{signature_b64}"

    def decode(self, token: str, now: Optional[float] = None) -> Dict[str, object]:
        """Verify signature and expiry; return the claims.

        Raises ``InvalidCredentialError`` for a malformed token, a bad
        signature, a missing ``sub`` or an expired ``exp``.
        """
        parts = token.split(".")
        if len(parts) != 3:
            raise InvalidCredentialError()
        header_b64, payload_b64, signature_b64 = parts
        signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
        expected_sig = _sign(signing_input, self._secret)
        try:
            actual_sig = _b64_url_decode(signature_b64)
        except ValueError:
            raise InvalidCredentialError()
        # Constant-time comparison; the payload is only parsed once signed.
        if not hmac.compare_digest(expected_sig, actual_sig):
            raise InvalidCredentialError()
        try:
            payload = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
        except (ValueError, UnicodeDecodeError, RecursionError):
            raise InvalidCredentialError()
        if not isinstance(payload, dict) or not payload.get("sub"):
            raise InvalidCredentialError()
        current = int(now if now is not None else time.time())
        try:
            expires = int(payload["exp"])
        except (KeyError, TypeError, ValueError):
            raise InvalidCredentialError()
        if expires < current:
            raise InvalidCredentialError()
        return payload

    def verify(self, token: Optional[str]) -> str:
        """Return the email bound to ``token``.

        ``MissingCredentialError`` when no token was presented,
        ``InvalidCredentialError`` when it does not validate.
        """
        if not token:
            raise MissingCredentialError()
        return str(self.decode(token)["sub"]).lower()


bearer_scheme = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    """FastAPI dependency returning the token service built at startup."""
    tokens = getattr(request.app.state, "tokens", None)
    if tokens is None:
        raise ConfigurationError("Token service not initialised")
    return tokens


def get_verified_email(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """Dependency that verifies the bearer credential and returns its email.

    A header that is present but not of the form ``Bearer <token>`` is
    treated as an invalid credential rather than a missing one.
    """
    if credentials is None:
        if request.headers.get("Authorization"):
            raise InvalidCredentialError()
        raise MissingCredentialError()
    return tokens.verify(credentials.credentials)


def get_current_identity(
    email: str = Depends(get_verified_email),
    db: Database = Depends(get_db),
) -> Identity:
    """Dependency resolving the verified caller to an ``Identity``.

    The role comes from the directory; an email with no record yet is
    treated as a plain ``user``.
    """
    from ..services.user_service import UserService

    role = UserService(db).get_role(email)
    return Identity(email=email, role=role)
