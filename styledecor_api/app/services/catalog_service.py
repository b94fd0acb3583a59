"""
Business logic for the service catalog.

Plain CRUD over the ``services`` table.  Bookings refer to services by
id only, so deleting a service leaves existing bookings untouched.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from ..core.db import Database
from ..core.errors import NotFoundError, ValidationError
from ..schemas.service import ServiceCreate, ServiceRead, ServiceUpdate
from .booking_service import parse_id


logger = logging.getLogger(__name__)

SERVICE_COLUMNS = "id, name, cost, description, category, image_url, created_at"


def _row_to_service(row) -> ServiceRead:
    return ServiceRead(
        id=row["id"],
        name=row["name"],
        cost=row["cost"],
        description=row["description"],
        category=row["category"],
        image_url=row["image_url"],
        created_at=row["created_at"],
    )


def _check_cost(cost: int) -> None:
    if cost <= 0:
        raise ValidationError("cost must be a positive amount")


class CatalogService:
    """Service for catalog listings."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def list_services(self, category: Optional[str] = None, search: Optional[str] = None) -> List[ServiceRead]:
        """List services, newest first, optionally filtered."""
        query = f"SELECT {SERVICE_COLUMNS} FROM services"
        where: list[str] = []
        params: list = []
        if category:
            where.append("category = ?")
            params.append(category)
        if search:
            where.append("name LIKE ?")
            params.append(f"%{search}%")
        if where:
            query += " WHERE " + " AND ".join(where)
        query += " ORDER BY created_at DESC, id DESC"
        with self.db.cursor() as cursor:
            rows = cursor.execute(query, tuple(params)).fetchall()
        return [_row_to_service(row) for row in rows]

    def get_service(self, service_id) -> ServiceRead:
        key = parse_id(service_id)
        row = None
        if key is not None:
            with self.db.cursor() as cursor:
                row = cursor.execute(
                    f"SELECT {SERVICE_COLUMNS} FROM services WHERE id = ?", (key,)
                ).fetchone()
        if not row:
            raise NotFoundError("Service not found")
        return _row_to_service(row)

    def create_service(self, data: ServiceCreate) -> ServiceRead:
        if not data.name or data.cost is None:
            raise ValidationError("name and cost are required")
        _check_cost(data.cost)
        with self.db.cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO services (name, cost, description, category, image_url, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    data.name,
                    data.cost,
                    data.description,
                    data.category,
                    data.image_url,
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            service_id = cursor.lastrowid
            row = cursor.execute(
                f"SELECT {SERVICE_COLUMNS} FROM services WHERE id = ?", (service_id,)
            ).fetchone()
        logger.info("Service %s (%s) created", service_id, data.name)
        return _row_to_service(row)

    def update_service(self, service_id, data: ServiceUpdate) -> ServiceRead:
        """Update the supplied fields of a service."""
        updates = data.model_dump(exclude_none=True)
        if "cost" in updates:
            _check_cost(updates["cost"])
        if "name" in updates and not updates["name"]:
            raise ValidationError("name must not be empty")
        key = parse_id(service_id)
        if key is None:
            raise NotFoundError("Service not found")
        with self.db.cursor() as cursor:
            if updates:
                assignments = ", ".join(f"{field} = ?" for field in updates)
                cursor.execute(
                    f"UPDATE services SET {assignments} WHERE id = ?",
                    (*updates.values(), key),
                )
            row = cursor.execute(
                f"SELECT {SERVICE_COLUMNS} FROM services WHERE id = ?", (key,)
            ).fetchone()
        if not row:
            raise NotFoundError("Service not found")
        logger.info("Service %s updated", key)
        return _row_to_service(row)

    def delete_service(self, service_id) -> None:
        key = parse_id(service_id)
        if key is None:
            raise NotFoundError("Service not found")
        with self.db.cursor() as cursor:
            cursor.execute("DELETE FROM services WHERE id = ?", (key,))
            deleted = cursor.rowcount
        if not deleted:
            raise NotFoundError("Service not found")
        logger.info("Service %s deleted", key)
