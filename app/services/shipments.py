"""
Shipment use cases: create, list, look up, edit, delete, assign, flag.

Role checks happen before these methods are called (see ``app.core.policy``);
the service receives the caller's id explicitly where it needs it.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from app.core.enums import ShipmentStatus
from app.core.exceptions import NotFound
from app.models.shipment import Shipment
from app.repositories.shipments import ShipmentRepository
from app.schemas.common import PaginationInput
from app.schemas.shipment import (PaginatedShipments, ShipmentCreate,
                                  ShipmentFilter, ShipmentRead,
                                  UpdateShipmentInput)
from app.services.query_builder import build_shipment_query, pagination_meta

logger = logging.getLogger(__name__)

TRACKING_PREFIX = "TMS"
FLAG_MARKER = "[FLAGGED FOR REVIEW - {timestamp}]"

_DATE_FIELDS = ("pickup_date", "estimated_delivery", "delivery_date")
# Columns an update may explicitly clear with null
_NULLABLE_FIELDS = frozenset(
    {
        "shipper_email",
        "consignee_email",
        "dimensions",
        "actual_rate",
        "delivery_date",
        "driver_id",
        "notes",
    }
)


def generate_tracking_number() -> str:
    return f"{TRACKING_PREFIX}{uuid.uuid4().hex.upper()}"


def parse_date(value: str) -> datetime:
    """Convert an ISO date / date-time string into an aware UTC datetime."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ShipmentService:
    def __init__(self, shipments: ShipmentRepository, default_currency: str = "USD") -> None:
        self._shipments = shipments
        self._default_currency = default_currency

    async def create(self, data: ShipmentCreate, caller_id: str) -> Shipment:
        fields = data.model_dump()
        fields["pickup_date"] = parse_date(data.pickup_date)
        fields["estimated_delivery"] = parse_date(data.estimated_delivery)
        fields["currency"] = (data.currency or self._default_currency).upper()
        fields.update(
            tracking_number=generate_tracking_number(),
            status=ShipmentStatus.PENDING,
            created_by_id=caller_id,
            driver_id=None,
        )
        shipment = await self._shipments.create(fields)
        logger.info(
            "Created shipment %s (%s) for user %s",
            shipment.id,
            shipment.tracking_number,
            caller_id,
        )
        return shipment

    async def find_all(
        self,
        filter: ShipmentFilter | None = None,
        pagination: PaginationInput | None = None,
    ) -> PaginatedShipments:
        query = build_shipment_query(filter, pagination)
        total = await self._shipments.count(query.conditions)
        rows = await self._shipments.find_many(
            query.conditions,
            sort=query.sort,
            offset=query.skip,
            limit=query.take,
        )
        return PaginatedShipments(
            data=[ShipmentRead.model_validate(row) for row in rows],
            meta=pagination_meta(total, query.page, query.take),
        )

    async def find_one(self, shipment_id: str) -> Shipment:
        return await self._shipments.find_by_id(shipment_id)

    async def find_by_tracking_number(self, tracking_number: str) -> Shipment:
        shipment = await self._shipments.find_by_tracking_number(tracking_number)
        if shipment is None:
            raise NotFound(tracking_number, "Shipment")
        return shipment

    async def update(self, data: UpdateShipmentInput) -> Shipment:
        # Existence check first so a missing id is a clean NotFound
        await self.find_one(data.id)

        changes = {
            name: value
            for name, value in data.model_dump(exclude_unset=True, exclude={"id"}).items()
            if value is not None or name in _NULLABLE_FIELDS
        }
        for name in _DATE_FIELDS:
            if changes.get(name) is not None:
                changes[name] = parse_date(changes[name])

        shipment = await self._shipments.update(data.id, changes)
        logger.info("Updated shipment %s: %s", data.id, sorted(changes))
        return shipment

    async def remove(self, shipment_id: str) -> Shipment:
        # The repository looks the row up first and raises NotFound
        shipment = await self._shipments.delete(shipment_id)
        logger.info("Deleted shipment %s (%s)", shipment_id, shipment.tracking_number)
        return shipment

    async def assign_driver(self, shipment_id: str, driver_id: str) -> Shipment:
        """Set the driver and force ``ASSIGNED`` whatever the current status."""
        shipment = await self._shipments.update(
            shipment_id,
            {"driver_id": driver_id, "status": ShipmentStatus.ASSIGNED},
        )
        logger.info("Assigned driver %s to shipment %s", driver_id, shipment_id)
        return shipment

    async def flag_shipment(self, shipment_id: str) -> Shipment:
        shipment = await self.find_one(shipment_id)
        marker = FLAG_MARKER.format(timestamp=datetime.now(timezone.utc).isoformat())
        notes = f"{shipment.notes}\n{marker}" if shipment.notes else marker
        flagged = await self._shipments.update(shipment_id, {"notes": notes})
        logger.info("Flagged shipment %s for review", shipment_id)
        return flagged
