import json
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi.testclient import TestClient

from styledecor_api.app.core.config import Settings
from styledecor_api.app.core.db import Database
from styledecor_api.app.main import create_app
from styledecor_api.app.services.payment_service import PaymentService


ADMIN_EMAIL = "admin@styledecor.com"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        secret_key="test-secret",
        database_url=str(tmp_path / "styledecor-test.db"),
        bootstrap_admin_email=ADMIN_EMAIL,
        stripe_secret_key="sk_test_123",
        stripe_api_base="https://payments.test",
    )


@pytest.fixture
def db(settings) -> Database:
    database = Database.from_settings(settings)
    database.init()
    return database


@pytest.fixture
def provider_calls():
    """Requests received by the fake payment provider."""
    return []


@pytest.fixture
def payment_transport(provider_calls):
    def handler(request: httpx.Request) -> httpx.Response:
        form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        provider_calls.append({"url": str(request.url), "headers": dict(request.headers), "form": form})
        body = {"id": "pi_test_1", "client_secret": "pi_test_1_secret_abc", "amount": int(form["amount"])}
        return httpx.Response(200, content=json.dumps(body), headers={"Content-Type": "application/json"})

    return httpx.MockTransport(handler)


@pytest.fixture
def app(settings, payment_transport):
    application = create_app(settings)
    application.state.payments = PaymentService.from_settings(settings, transport=payment_transport)
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth(client):
    """Return a function building an Authorization header for an email."""

    def _headers(email: str) -> dict:
        response = client.post("/jwt", json={"email": email})
        assert response.status_code == 200
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _headers


@pytest.fixture
def admin_headers(client, auth):
    client.post("/users", json={"email": ADMIN_EMAIL})
    return auth(ADMIN_EMAIL)
