"""
SQLite database integration and simple migration system.

A single ``Database`` object is created when the application starts
(see ``main.lifespan``), stored on ``app.state`` and handed to the
services through FastAPI dependencies.  It knows where the database
file lives and opens a short-lived connection per operation; SQLite
itself serialises writers, so every single-statement UPDATE issued by
the services is atomic with respect to concurrent requests.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from fastapi import Request

from .config import Settings
from .errors import TransientError


logger = logging.getLogger(__name__)


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL UNIQUE,
            role TEXT NOT NULL DEFAULT 'user',
            name TEXT,
            phone TEXT,
            address TEXT,
            photo_url TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS services (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            cost INTEGER NOT NULL,
            description TEXT,
            category TEXT,
            image_url TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS bookings (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            client_email TEXT NOT NULL,
            service_id TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending',
            payment_status TEXT NOT NULL DEFAULT 'unpaid',
            decorator_email TEXT,
            transaction_id TEXT,
            client_name TEXT,
            event_date TEXT,
            location TEXT,
            notes TEXT,
            booked_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP
        );
        """,
    ),
    # Migration 2: indices for the per-owner booking projections
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_bookings_client_email ON bookings(client_email);
        CREATE INDEX IF NOT EXISTS idx_bookings_decorator_email ON bookings(decorator_email);
        """,
    ),
]


def resolve_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    Absolute paths (and ``:memory:``) are returned unchanged; relative
    paths are resolved against the project root.
    """
    if database_url == ":memory:" or os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / database_url).resolve())


class Database:
    """Process-wide handle on the SQLite database file."""

    def __init__(self, path: str, timeout: float = 5.0) -> None:
        self.path = path
        self.timeout = timeout
        self._open = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(resolve_database_path(settings.database_url), timeout=settings.db_timeout)

    def connect(self) -> sqlite3.Connection:
        """Open a new connection with dict-like rows.

        No type detection is enabled; timestamps come back as the ISO
        strings they were stored as and pydantic parses them.
        """
        conn = sqlite3.connect(self.path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor inside a transaction.

        Commits on success, rolls back on error and always closes the
        connection.  Driver errors (including lock timeouts) are
        re-raised as ``TransientError`` so no ``sqlite3`` exception
        crosses a service boundary.
        """
        try:
            conn = self.connect()
        except sqlite3.Error as exc:
            logger.exception("Could not open database %s", self.path)
            raise TransientError() from exc
        try:
            yield conn.cursor()
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            logger.exception("Database operation failed")
            raise TransientError() from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init(self) -> None:
        """Create the database file if needed and apply pending migrations."""
        with self.cursor() as cursor:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            cursor.execute("SELECT MAX(version) as version FROM migrations")
            row = cursor.fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, sql in MIGRATIONS:
                if version > current_version:
                    cursor.executescript(sql)
                    cursor.execute(
                        "INSERT INTO migrations (version) VALUES (?)", (version,)
                    )
                    current_version = version
                    logger.info("Applied migration %s", version)
        self._open = True
        logger.info("Database ready at %s", self.path)

    def close(self) -> None:
        # Connections are per operation; closing only marks the handle
        # as retired so late callers fail loudly instead of reopening.
        self._open = False
        logger.info("Database handle released")

    @property
    def is_open(self) -> bool:
        return self._open


def get_db(request: Request) -> Database:
    """FastAPI dependency returning the database created at startup."""
    db = getattr(request.app.state, "db", None)
    if db is None or not db.is_open:
        raise TransientError()
    return db
