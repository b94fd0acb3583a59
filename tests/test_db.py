import sqlite3

import pytest

from styledecor_api.app.core.db import Database
from styledecor_api.app.core.errors import TransientError
from styledecor_api.app.services.booking_service import BookingService


@pytest.fixture
def write_lock(db):
    """Hold the database write lock from a separate connection."""
    conn = sqlite3.connect(db.path, isolation_level=None)
    conn.execute("BEGIN IMMEDIATE")
    yield conn
    conn.execute("ROLLBACK")
    conn.close()


def test_init_creates_schema(db):
    with db.cursor() as cursor:
        cursor.execute("SELECT MAX(version) AS version FROM migrations")
        assert cursor.fetchone()["version"] == 2
    assert db.is_open


def test_unopenable_database_is_transient(tmp_path):
    database = Database(str(tmp_path / "missing" / "styledecor.db"))
    with pytest.raises(TransientError):
        database.init()


def test_locked_database_is_transient(db, write_lock):
    db.timeout = 0
    with pytest.raises(TransientError):
        BookingService(db).create("a@x.com", "svc1", {})


def test_failed_write_is_rolled_back(db):
    with pytest.raises(TransientError):
        with db.cursor() as cursor:
            cursor.execute(
                "INSERT INTO services (name, cost, created_at) VALUES ('Stage', 100, CURRENT_TIMESTAMP)"
            )
            cursor.execute("INSERT INTO no_such_table VALUES (1)")
    with db.cursor() as cursor:
        cursor.execute("SELECT COUNT(*) AS n FROM services")
        assert cursor.fetchone()["n"] == 0


def test_locked_database_is_an_opaque_503(client, app, auth):
    headers = auth("a@x.com")
    app.state.db.timeout = 0
    conn = sqlite3.connect(app.state.db.path, isolation_level=None)
    conn.execute("BEGIN IMMEDIATE")
    try:
        response = client.post("/bookings", json={"service_id": "1"}, headers=headers)
    finally:
        conn.execute("ROLLBACK")
        conn.close()
    assert response.status_code == 503
    assert response.json() == {"detail": "Service temporarily unavailable"}
    assert "locked" not in response.text


def test_closed_database_is_transient(client, app, auth):
    headers = auth("a@x.com")
    app.state.db.close()
    response = client.get("/bookings", headers=headers)
    assert response.status_code == 503
