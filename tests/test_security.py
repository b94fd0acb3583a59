import base64
import hashlib
import hmac
import json
import time

import pytest

from styledecor_api.app.core.errors import (
    ConfigurationError,
    InvalidCredentialError,
    MissingCredentialError,
)
from styledecor_api.app.core.security import TokenService


def test_missing_secret_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        TokenService("")


def test_issue_and_verify():
    tokens = TokenService("secret")
    token = tokens.issue("jane@example.com")
    assert tokens.verify(token) == "jane@example.com"


def test_token_expires_after_one_hour():
    tokens = TokenService("secret")
    issued = time.time() - 3601
    token = tokens.issue("jane@example.com", now=issued)
    with pytest.raises(InvalidCredentialError):
        tokens.verify(token)
    claims = tokens.decode(tokens.issue("jane@example.com", now=1000), now=1000)
    assert claims["exp"] - claims["iat"] == 3600


def test_missing_token():
    with pytest.raises(MissingCredentialError):
        TokenService("secret").verify(None)


@pytest.mark.parametrize("token", ["garbage", "a.b", "a.b.c", "....."])
def test_malformed_tokens_are_invalid(token):
    with pytest.raises(InvalidCredentialError):
        TokenService("secret").verify(token)


def test_token_signed_with_another_secret_is_invalid():
    token = TokenService("other").issue("jane@example.com")
    with pytest.raises(InvalidCredentialError):
        TokenService("secret").verify(token)


def test_tampered_payload_is_invalid():
    tokens = TokenService("secret")
    header, _, signature = tokens.issue("jane@example.com").split(".")
    forged_payload = tokens.issue("admin@styledecor.com").split(".")[1]
    with pytest.raises(InvalidCredentialError):
        tokens.verify(f"{header}.{forged_payload}.{signature}")


def _segment(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _signed(payload: bytes, secret: str = "secret") -> str:
    signing_input = f"{_segment(b'{}')}.{_segment(payload)}"
    signature = hmac.new(secret.encode(), signing_input.encode(), hashlib.sha256).digest()
    return f"{signing_input}.{_segment(signature)}"


def test_deeply_nested_payload_with_bad_signature_is_invalid():
    token = f"{_segment(b'{}')}.{_segment(b'[' * 100000)}.{_segment(b'x')}"
    with pytest.raises(InvalidCredentialError):
        TokenService("secret").verify(token)


def test_deeply_nested_signed_payload_is_invalid():
    with pytest.raises(InvalidCredentialError):
        TokenService("secret").verify(_signed(b"[" * 100000))


@pytest.mark.parametrize("payload", [b"[1, 2]", b"not json", b"\xff\xfe", b'{"sub": "a@x.com"}'])
def test_signed_payload_without_valid_claims_is_invalid(payload):
    with pytest.raises(InvalidCredentialError):
        TokenService("secret").verify(_signed(payload))


def test_only_hs256_is_supported():
    with pytest.raises(ConfigurationError):
        TokenService("secret", algorithm="HS512")
    header = TokenService("secret").issue("jane@example.com").split(".")[0]
    assert json.loads(base64.urlsafe_b64decode(header + "=" * (-len(header) % 4))) == {"alg": "HS256", "typ": "JWT"}
