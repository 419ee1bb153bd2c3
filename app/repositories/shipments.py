"""Shipment persistence; records always come back with ``created_by`` and ``driver`` loaded."""

from __future__ import annotations

from app.models.shipment import Shipment
from app.repositories.base import SQLAlchemyRepository


class ShipmentRepository(SQLAlchemyRepository[Shipment]):
    model = Shipment
    entity_name = "Shipment"

    async def find_by_tracking_number(self, tracking_number: str) -> Shipment | None:
        return await self.find_unique(tracking_number=tracking_number)
