"""
Business logic for bookings: the fulfilment and payment lifecycle.

Statuses move along a fixed table::

    pending     -> assigned     (assign)
    assigned    -> assigned     (re-assign to another decorator)
    assigned    -> in_progress  (update_status)
    in_progress -> completed    (update_status)

Any booking that is not ``completed`` may be cancelled, which removes
it.  Payment is a separate axis that only ever moves from ``unpaid``
to ``paid``.

Every mutation is a single UPDATE (or DELETE) whose WHERE clause
carries the precondition, so two requests racing on the same booking
can never interleave a read and a write.  When the statement matches
no row the booking is re-read to report why.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, FrozenSet, List, Optional, Union

from ..core.db import Database
from ..core.errors import (
    InvalidTransitionError,
    NotFoundError,
    PaymentConflictError,
    ValidationError,
)
from ..schemas.booking import BookingRead, BookingStatus, PaymentStatus


logger = logging.getLogger(__name__)


# Moves allowed through ``update_status``.  Assignment has its own
# operation because it must write the decorator at the same time.
STATUS_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(),
    BookingStatus.ASSIGNED: frozenset({BookingStatus.IN_PROGRESS}),
    BookingStatus.IN_PROGRESS: frozenset({BookingStatus.COMPLETED}),
    BookingStatus.COMPLETED: frozenset(),
}

ASSIGNABLE = (BookingStatus.PENDING.value, BookingStatus.ASSIGNED.value)

BOOKING_COLUMNS = (
    "id, client_email, service_id, status, payment_status, decorator_email, transaction_id, "
    "client_name, event_date, location, notes, booked_at, updated_at"
)

BookingId = Union[int, str]


def parse_id(booking_id: BookingId) -> Optional[int]:
    """Return the integer id, or ``None`` if it cannot be one."""
    if isinstance(booking_id, bool):
        return None
    if isinstance(booking_id, int):
        return booking_id if booking_id > 0 else None
    text = str(booking_id).strip()
    if not text.isdigit():
        return None
    value = int(text)
    return value if value > 0 else None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_booking(row) -> BookingRead:
    return BookingRead(
        id=row["id"],
        client_email=row["client_email"],
        service_id=row["service_id"],
        status=row["status"],
        payment_status=row["payment_status"],
        decorator_email=row["decorator_email"],
        transaction_id=row["transaction_id"],
        client_name=row["client_name"],
        event_date=row["event_date"],
        location=row["location"],
        notes=row["notes"],
        booked_at=row["booked_at"],
        updated_at=row["updated_at"],
    )


class BookingService:
    """Service owning booking status, payment status and assignment."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def create(self, client_email: str, service_id: str, details: Optional[dict] = None) -> BookingRead:
        """Create a booking in its initial state.

        The service reference is stored as given; whether it exists in
        the catalog is not checked here.
        """
        details = details or {}
        client_email = (client_email or "").strip().lower()
        service_id = str(service_id or "").strip()
        if not client_email:
            raise ValidationError("client_email is required")
        if not service_id:
            raise ValidationError("service_id is required")
        with self.db.cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO bookings (client_email, service_id, status, payment_status,
                                      client_name, event_date, location, notes, booked_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    client_email,
                    service_id,
                    BookingStatus.PENDING.value,
                    PaymentStatus.UNPAID.value,
                    details.get("client_name"),
                    details.get("event_date"),
                    details.get("location"),
                    details.get("notes"),
                    _now(),
                ),
            )
            booking_id = cursor.lastrowid
            row = cursor.execute(
                f"SELECT {BOOKING_COLUMNS} FROM bookings WHERE id = ?", (booking_id,)
            ).fetchone()
        logger.info("Booking %s created by %s for service %s", booking_id, client_email, service_id)
        return _row_to_booking(row)

    def find_booking(self, booking_id: BookingId) -> Optional[BookingRead]:
        """Return the booking, or ``None`` for unknown or malformed ids."""
        key = parse_id(booking_id)
        if key is None:
            return None
        with self.db.cursor() as cursor:
            row = cursor.execute(
                f"SELECT {BOOKING_COLUMNS} FROM bookings WHERE id = ?", (key,)
            ).fetchone()
        return _row_to_booking(row) if row else None

    def get_booking(self, booking_id: BookingId) -> BookingRead:
        booking = self.find_booking(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def assign(self, booking_id: BookingId, decorator_email: str) -> BookingRead:
        """Assign a decorator and move the booking to ``assigned``.

        Both columns are written by one statement, so no reader can see
        a decorator on a pending booking or an assigned booking without
        a decorator.  Concurrent assignments resolve to the last write.
        """
        decorator_email = (decorator_email or "").strip().lower()
        if not decorator_email:
            raise ValidationError("decorator_email is required")
        key = parse_id(booking_id)
        if key is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        with self.db.cursor() as cursor:
            cursor.execute(
                """
                UPDATE bookings
                   SET decorator_email = ?, status = ?, updated_at = ?
                 WHERE id = ? AND status IN (?, ?)
                """,
                (decorator_email, BookingStatus.ASSIGNED.value, _now(), key, *ASSIGNABLE),
            )
            changed = cursor.rowcount
            row = cursor.execute(
                f"SELECT {BOOKING_COLUMNS} FROM bookings WHERE id = ?", (key,)
            ).fetchone()
        if row is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        if not changed:
            raise InvalidTransitionError(
                f"Booking {key} is {row['status']} and can no longer be assigned"
            )
        logger.info("Booking %s assigned to %s", key, decorator_email)
        return _row_to_booking(row)

    def update_status(self, booking_id: BookingId, new_status: str) -> BookingRead:
        """Advance the fulfilment status along ``STATUS_TRANSITIONS``.

        Raises ``ValidationError`` for a value that is not a status at
        all and ``InvalidTransitionError`` for a move the table does not
        allow, including a move that lost a race with another update.
        """
        try:
            target = BookingStatus(new_status)
        except ValueError:
            allowed = ", ".join(s.value for s in BookingStatus)
            raise ValidationError(f"Unknown status {new_status!r}; expected one of: {allowed}")
        current = self.get_booking(booking_id)
        if target not in STATUS_TRANSITIONS[current.status]:
            raise InvalidTransitionError(
                f"Booking {current.id} cannot move from {current.status.value} to {target.value}"
            )
        with self.db.cursor() as cursor:
            cursor.execute(
                "UPDATE bookings SET status = ?, updated_at = ? WHERE id = ? AND status = ?",
                (target.value, _now(), current.id, current.status.value),
            )
            changed = cursor.rowcount
            row = cursor.execute(
                f"SELECT {BOOKING_COLUMNS} FROM bookings WHERE id = ?", (current.id,)
            ).fetchone()
        if row is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        if not changed:
            raise InvalidTransitionError(
                f"Booking {current.id} changed to {row['status']} concurrently"
            )
        logger.info("Booking %s status %s -> %s", current.id, current.status.value, target.value)
        return _row_to_booking(row)

    def confirm_payment(self, booking_id: BookingId, transaction_id: str) -> BookingRead:
        """Mark the booking paid and record the provider transaction id.

        Repeating the call with the same transaction id returns the
        booking unchanged.  A different transaction id on a booking that
        is already paid raises ``PaymentConflictError``; the first
        recorded id is never overwritten.
        """
        transaction_id = (transaction_id or "").strip()
        if not transaction_id:
            raise ValidationError("transaction_id is required")
        key = parse_id(booking_id)
        if key is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        with self.db.cursor() as cursor:
            cursor.execute(
                """
                UPDATE bookings
                   SET payment_status = ?, transaction_id = ?, updated_at = ?
                 WHERE id = ? AND payment_status = ?
                """,
                (PaymentStatus.PAID.value, transaction_id, _now(), key, PaymentStatus.UNPAID.value),
            )
            changed = cursor.rowcount
            row = cursor.execute(
                f"SELECT {BOOKING_COLUMNS} FROM bookings WHERE id = ?", (key,)
            ).fetchone()
        if row is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        if not changed and row["transaction_id"] != transaction_id:
            raise PaymentConflictError(f"Booking {key} was already paid by another transaction")
        if changed:
            logger.info("Booking %s paid, transaction %s", key, transaction_id)
        return _row_to_booking(row)

    def cancel(self, booking_id: BookingId) -> None:
        """Delete a booking that has not been completed."""
        key = parse_id(booking_id)
        if key is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        with self.db.cursor() as cursor:
            cursor.execute(
                "DELETE FROM bookings WHERE id = ? AND status != ?",
                (key, BookingStatus.COMPLETED.value),
            )
            if cursor.rowcount:
                logger.info("Booking %s cancelled", key)
                return
            row = cursor.execute("SELECT status FROM bookings WHERE id = ?", (key,)).fetchone()
        if row is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        raise InvalidTransitionError(f"Booking {key} is completed and cannot be cancelled")

    def _list(self, where: str = "", params: tuple = ()) -> List[BookingRead]:
        query = f"SELECT {BOOKING_COLUMNS} FROM bookings"
        if where:
            query += f" WHERE {where}"
        query += " ORDER BY booked_at DESC, id DESC"
        with self.db.cursor() as cursor:
            rows = cursor.execute(query, params).fetchall()
        return [_row_to_booking(row) for row in rows]

    def list_for_client(self, email: str) -> List[BookingRead]:
        return self._list("client_email = ?", ((email or "").lower(),))

    def list_for_decorator(self, email: str) -> List[BookingRead]:
        return self._list("decorator_email = ?", ((email or "").lower(),))

    def list_all(self) -> List[BookingRead]:
        return self._list()
