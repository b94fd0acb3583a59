import base64

import pytest
from fastapi.testclient import TestClient

from styledecor_api.app.core.errors import ConfigurationError
from styledecor_api.app.main import create_app

from .conftest import ADMIN_EMAIL


def _book(client, headers, service_id="1", **extra):
    response = client.post("/bookings", json={"service_id": service_id, **extra}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "Running" in response.text


def test_startup_fails_without_signing_secret(settings):
    settings.secret_key = ""
    with pytest.raises(ConfigurationError):
        with TestClient(create_app(settings)):
            pass


def test_startup_fails_with_unsupported_algorithm(settings):
    settings.algorithm = "HS512"
    with pytest.raises(ConfigurationError):
        with TestClient(create_app(settings)):
            pass


class TestCredentials:
    def test_missing_credential(self, client):
        response = client.get("/bookings")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_credential(self, client):
        response = client.get("/bookings", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_deeply_nested_token_is_invalid(self, client):
        segment = base64.urlsafe_b64encode(b"[" * 5000).rstrip(b"=").decode()
        response = client.get("/bookings", headers={"Authorization": f"Bearer e30.{segment}.eA"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"

    def test_wrong_scheme_is_invalid(self, client):
        response = client.get("/bookings", headers={"Authorization": "Basic abc"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"

    def test_jwt_endpoint(self, client):
        response = client.post("/jwt", json={"email": "Jane@Example.com"})
        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["expires_in"] == 3600


class TestUsers:
    def test_register_twice(self, client):
        first = client.post("/users", json={"email": "jane@example.com", "name": "Jane"})
        second = client.post("/users", json={"email": "jane@example.com", "name": "Other"})
        assert first.status_code == 201
        assert first.json()["created"] is True
        assert second.status_code == 200
        assert second.json()["created"] is False
        assert second.json()["user"]["name"] == "Jane"

    def test_bootstrap_admin(self, client):
        response = client.post("/users", json={"email": ADMIN_EMAIL})
        assert response.json()["user"]["role"] == "admin"

    def test_role_lookup_is_self_only(self, client, auth):
        client.post("/users", json={"email": "jane@example.com"})
        headers = auth("jane@example.com")
        assert client.get("/users/role/jane@example.com", headers=headers).json()["role"] == "user"
        assert client.get("/users/role/bob@example.com", headers=headers).status_code == 403

    def test_unregistered_role_is_user(self, client, auth):
        response = client.get("/users/role/new@example.com", headers=auth("new@example.com"))
        assert response.status_code == 200
        assert response.json()["role"] == "user"

    def test_profile_read_and_update(self, client, auth):
        client.post("/users", json={"email": "jane@example.com", "name": "Jane"})
        headers = auth("jane@example.com")
        response = client.put("/users/jane@example.com", json={"phone": "555"}, headers=headers)
        assert response.status_code == 200
        profile = client.get("/users/jane@example.com", headers=headers).json()
        assert profile["name"] == "Jane"
        assert profile["phone"] == "555"

    def test_user_cannot_promote_self(self, client, auth):
        client.post("/users", json={"email": "jane@example.com"})
        headers = auth("jane@example.com")
        response = client.put("/users/jane@example.com", json={"role": "admin"}, headers=headers)
        assert response.status_code == 403

    def test_admin_provisions_decorator(self, client, auth, admin_headers):
        response = client.put("/users/dora@example.com", json={"role": "decorator"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["role"] == "decorator"
        role = client.get("/users/role/dora@example.com", headers=auth("dora@example.com"))
        assert role.json()["role"] == "decorator"

    def test_admin_user_listing(self, client, auth, admin_headers):
        client.post("/users", json={"email": "jane@example.com"})
        response = client.get("/admin/users", headers=admin_headers)
        assert response.status_code == 200
        assert {u["email"] for u in response.json()} == {ADMIN_EMAIL, "jane@example.com"}
        assert client.get("/admin/users", headers=auth("jane@example.com")).status_code == 403


class TestCatalog:
    def test_public_read_admin_write(self, client, auth, admin_headers):
        payload = {"name": "Birthday balloons", "cost": 120, "category": "birthday"}
        assert client.post("/services", json=payload, headers=auth("jane@example.com")).status_code == 403
        created = client.post("/services", json=payload, headers=admin_headers)
        assert created.status_code == 201
        service_id = created.json()["id"]

        listing = client.get("/services")
        assert [s["name"] for s in listing.json()] == ["Birthday balloons"]
        assert client.get(f"/services/{service_id}").json()["cost"] == 120
        assert client.get("/services", params={"category": "wedding"}).json() == []

        updated = client.put(f"/services/{service_id}", json={"cost": 150}, headers=admin_headers)
        assert updated.json()["cost"] == 150
        assert updated.json()["name"] == "Birthday balloons"

        assert client.delete(f"/services/{service_id}", headers=admin_headers).status_code == 204
        assert client.get(f"/services/{service_id}").status_code == 404

    def test_missing_fields(self, client, admin_headers):
        response = client.post("/services", json={"name": "No price"}, headers=admin_headers)
        assert response.status_code == 400
        assert "cost" in response.json()["detail"]

    def test_malformed_id_is_not_found(self, client):
        assert client.get("/services/not-an-id").status_code == 404


class TestBookings:
    def test_create_initial_state(self, client, auth):
        booking = _book(client, auth("a@x.com"), service_id="svc1")
        assert booking["client_email"] == "a@x.com"
        assert booking["status"] == "pending"
        assert booking["payment_status"] == "unpaid"
        assert booking["decorator_email"] is None

    def test_cannot_book_for_someone_else(self, client, auth):
        response = client.post(
            "/bookings", json={"service_id": "1", "client_email": "b@x.com"}, headers=auth("a@x.com")
        )
        assert response.status_code == 403

    def test_client_email_is_normalised_before_the_ownership_check(self, client, auth):
        booking = _book(client, auth("a@x.com"), client_email="  A@X.com ")
        assert booking["client_email"] == "a@x.com"

    def test_clients_see_only_their_bookings(self, client, auth):
        a, b = auth("a@x.com"), auth("b@x.com")
        _book(client, a)
        _book(client, b)
        mine = client.get("/bookings", params={"email": "a@x.com"}, headers=a)
        assert [x["client_email"] for x in mine.json()] == ["a@x.com"]
        spoofed = client.get("/bookings", params={"email": "b@x.com"}, headers=a)
        assert spoofed.status_code == 403

    def test_admin_listings(self, client, auth, admin_headers):
        _book(client, auth("a@x.com"))
        for path in ("/bookings/all", "/admin/bookings"):
            assert len(client.get(path, headers=admin_headers).json()) == 1
            assert client.get(path, headers=auth("a@x.com")).status_code == 403

    def test_assignment_and_decorator_view(self, client, auth, admin_headers):
        booking = _book(client, auth("a@x.com"))
        path = f"/bookings/assign/{booking['id']}"
        assert client.patch(path, json={"decorator_email": "d@x.com"}, headers=auth("a@x.com")).status_code == 403
        assigned = client.patch(path, json={"decorator_email": "d@x.com"}, headers=admin_headers)
        assert assigned.status_code == 200
        assert assigned.json()["status"] == "assigned"
        assert assigned.json()["decorator_email"] == "d@x.com"

        mine = client.get("/bookings/decorator/d@x.com", headers=auth("d@x.com"))
        assert [x["id"] for x in mine.json()] == [booking["id"]]
        assert client.get("/bookings/decorator/d@x.com", headers=auth("other@x.com")).status_code == 403
        assert client.get("/bookings/decorator/other@x.com", headers=auth("other@x.com")).json() == []

    def test_status_updates(self, client, auth, admin_headers):
        booking = _book(client, auth("a@x.com"))
        client.put("/users/d@x.com", json={"role": "decorator"}, headers=admin_headers)
        client.put("/users/e@x.com", json={"role": "decorator"}, headers=admin_headers)
        client.patch(f"/bookings/assign/{booking['id']}", json={"decorator_email": "d@x.com"}, headers=admin_headers)
        path = f"/bookings/status/{booking['id']}"

        assert client.patch(path, json={"status": "in_progress"}, headers=auth("e@x.com")).status_code == 403
        assert client.patch(path, json={"status": "in_progress"}, headers=auth("a@x.com")).status_code == 403
        assert client.patch(path, json={"status": "completed"}, headers=auth("d@x.com")).status_code == 409
        assert client.patch(path, json={"status": "whatever"}, headers=auth("d@x.com")).status_code == 400

        response = client.patch(path, json={"status": "in_progress"}, headers=auth("d@x.com"))
        assert response.status_code == 200
        assert response.json()["status"] == "in_progress"
        response = client.patch(path, json={"status": "completed"}, headers=admin_headers)
        assert response.json()["status"] == "completed"

    def test_payment_confirmation(self, client, auth):
        a = auth("a@x.com")
        booking = _book(client, a)
        path = f"/bookings/payment-success/{booking['id']}"
        assert client.patch(path, json={"transaction_id": "txn_1"}, headers=auth("b@x.com")).status_code == 403
        paid = client.patch(path, json={"transaction_id": "txn_1"}, headers=a)
        assert paid.status_code == 200
        assert paid.json()["payment_status"] == "paid"
        assert client.patch(path, json={"transaction_id": "txn_1"}, headers=a).status_code == 200
        assert client.patch(path, json={"transaction_id": "txn_2"}, headers=a).status_code == 409
        current = client.get(f"/bookings/{booking['id']}", headers=a).json()
        assert current["transaction_id"] == "txn_1"

    def test_payment_confirmation_requires_credential(self, client, auth):
        booking = _book(client, auth("a@x.com"))
        response = client.patch(f"/bookings/payment-success/{booking['id']}", json={"transaction_id": "t"})
        assert response.status_code == 401

    def test_cancel(self, client, auth, admin_headers):
        a = auth("a@x.com")
        booking = _book(client, a)
        assert client.delete(f"/bookings/{booking['id']}", headers=auth("b@x.com")).status_code == 403
        assert client.delete(f"/bookings/{booking['id']}", headers=a).status_code == 204
        assert client.get("/bookings/all", headers=admin_headers).json() == []
        assert client.delete(f"/bookings/{booking['id']}", headers=admin_headers).status_code == 404

    def test_missing_booking_does_not_leak_to_non_admins(self, client, auth, admin_headers):
        assert client.delete("/bookings/999", headers=auth("a@x.com")).status_code == 403
        assert client.delete("/bookings/999", headers=admin_headers).status_code == 404
        assert client.delete("/bookings/not-an-id", headers=admin_headers).status_code == 404

    def test_booking_detail_visible_to_assigned_decorator(self, client, auth, admin_headers):
        booking = _book(client, auth("a@x.com"))
        path = f"/bookings/{booking['id']}"
        assert client.get(path, headers=auth("d@x.com")).status_code == 403
        client.patch(f"/bookings/assign/{booking['id']}", json={"decorator_email": "d@x.com"}, headers=admin_headers)
        assert client.get(path, headers=auth("d@x.com")).status_code == 200
        assert client.get(path, headers=admin_headers).status_code == 200

    def test_missing_service_id_is_rejected(self, client, auth):
        response = client.post("/bookings", json={}, headers=auth("a@x.com"))
        assert response.status_code == 422
