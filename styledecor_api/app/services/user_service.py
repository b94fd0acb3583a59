"""
Business logic for users (the identity and role directory).

One record per email.  Registration is idempotent and safe under
concurrent first registrations: the UNIQUE constraint on ``email``
lets exactly one ``INSERT OR IGNORE`` win and every caller then reads
back the single stored record.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from ..core.db import Database
from ..core.errors import NotFoundError, ValidationError
from ..core.policy import Role
from ..schemas.user import UserRead


PROFILE_FIELDS = ("name", "phone", "address", "photo_url")
USER_COLUMNS = "email, role, name, phone, address, photo_url, created_at, updated_at"


def normalize_email(email: str) -> str:
    value = (email or "").strip().lower()
    if "@" not in value:
        raise ValidationError("A valid email is required")
    return value


def _row_to_user(row) -> UserRead:
    return UserRead(
        email=row["email"],
        role=row["role"],
        name=row["name"],
        phone=row["phone"],
        address=row["address"],
        photo_url=row["photo_url"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class UserService:
    """Directory of users and their roles."""

    def __init__(self, db: Database, bootstrap_admin_email: str = "") -> None:
        self.db = db
        self.bootstrap_admin_email = (bootstrap_admin_email or "").strip().lower()

    def _initial_role(self, email: str) -> Role:
        if self.bootstrap_admin_email and email == self.bootstrap_admin_email:
            return Role.ADMIN
        return Role.USER

    def register(self, email: str, profile: Optional[dict] = None) -> Tuple[bool, UserRead]:
        """Register ``email`` if it is new.

        Returns ``(created, record)``.  A repeat registration is not an
        error: it returns the stored record untouched with
        ``created=False``.
        """
        logger = logging.getLogger(__name__)
        email = normalize_email(email)
        profile = profile or {}
        now = datetime.now(timezone.utc).isoformat()
        role = self._initial_role(email)
        with self.db.cursor() as cursor:
            cursor.execute(
                "INSERT OR IGNORE INTO users (email, role, name, phone, address, photo_url, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    email,
                    role.value,
                    profile.get("name"),
                    profile.get("phone"),
                    profile.get("address"),
                    profile.get("photo_url"),
                    now,
                    now,
                ),
            )
            created = cursor.rowcount == 1
            row = cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE email = ?", (email,)
            ).fetchone()
        if created:
            logger.info("Registered user %s with role %s", email, role.value)
        else:
            logger.debug("User %s already registered", email)
        return created, _row_to_user(row)

    def get_role(self, email: str) -> Role:
        """Return the stored role for ``email``, or ``user`` if unknown."""
        with self.db.cursor() as cursor:
            row = cursor.execute(
                "SELECT role FROM users WHERE email = ?", ((email or "").lower(),)
            ).fetchone()
        if not row:
            return Role.USER
        try:
            return Role(row["role"])
        except ValueError:
            logging.getLogger(__name__).warning("Unknown role %r stored for %s", row["role"], email)
            return Role.USER

    def get_user(self, email: str) -> UserRead:
        """Retrieve a user by email.  Raises ``NotFoundError`` if absent."""
        with self.db.cursor() as cursor:
            row = cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE email = ?", ((email or "").lower(),)
            ).fetchone()
        if not row:
            raise NotFoundError(f"User {email} not found")
        return _row_to_user(row)

    def update_profile(self, email: str, fields: dict) -> UserRead:
        """Create-or-merge the profile of ``email``.

        Only keys present with a non-null value are written, so a field
        can never be cleared by leaving it out.  ``role`` is written when
        supplied; whether the caller may change it is decided by the
        endpoint.  A missing record is created first, which lets an
        administrator pre-provision a decorator before their first login.
        """
        logger = logging.getLogger(__name__)
        email = normalize_email(email)
        updates = {
            key: value
            for key, value in fields.items()
            if key in PROFILE_FIELDS + ("role",) and value is not None
        }
        if "role" in updates:
            updates["role"] = Role(updates["role"]).value
        now = datetime.now(timezone.utc).isoformat()
        with self.db.cursor() as cursor:
            cursor.execute(
                "INSERT OR IGNORE INTO users (email, role, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (email, self._initial_role(email).value, now, now),
            )
            if updates:
                assignments = ", ".join(f"{key} = ?" for key in updates)
                cursor.execute(
                    f"UPDATE users SET {assignments}, updated_at = ? WHERE email = ?",
                    (*updates.values(), now, email),
                )
            row = cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE email = ?", (email,)
            ).fetchone()
        logger.info("Updated user %s (%s)", email, ", ".join(sorted(updates)) or "no changes")
        return _row_to_user(row)

    def list_all(self) -> List[UserRead]:
        """Return all users, oldest first."""
        with self.db.cursor() as cursor:
            rows = cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users ORDER BY id ASC"
            ).fetchall()
        return [_row_to_user(row) for row in rows]
