"""
Shipment endpoints.

- Tracking by tracking number is public.
- Listing and reading require any authenticated user.
- Create: ADMIN / DISPATCHER / CUSTOMER.  Edit, assign, flag: ADMIN /
  DISPATCHER.  Delete: ADMIN.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.v1.deps import (get_pagination, get_shipment_filter,
                             get_shipment_service, require)
from app.core.security import CallerIdentity
from app.models.shipment import Shipment
from app.schemas.common import PaginationInput
from app.schemas.shipment import (AssignDriverInput, PaginatedShipments,
                                  ShipmentCreate, ShipmentFilter, ShipmentRead,
                                  ShipmentUpdate, UpdateShipmentInput)
from app.services.shipments import ShipmentService

router = APIRouter(prefix="/shipments", tags=["shipments"])


@router.get("", response_model=PaginatedShipments)
async def list_shipments(
    filter: ShipmentFilter = Depends(get_shipment_filter),
    pagination: PaginationInput = Depends(get_pagination),
    shipments: ShipmentService = Depends(get_shipment_service),
    _caller: CallerIdentity = Depends(require("shipments.list")),
) -> PaginatedShipments:
    return await shipments.find_all(filter, pagination)


@router.get("/track/{tracking_number}", response_model=ShipmentRead)
async def track_shipment(
    tracking_number: str,
    shipments: ShipmentService = Depends(get_shipment_service),
    _caller: CallerIdentity | None = Depends(require("shipments.track")),
) -> Shipment:
    """Public lookup by tracking number — no login required."""
    return await shipments.find_by_tracking_number(tracking_number)


@router.get("/{shipment_id}", response_model=ShipmentRead)
async def get_shipment(
    shipment_id: str,
    shipments: ShipmentService = Depends(get_shipment_service),
    _caller: CallerIdentity = Depends(require("shipments.get")),
) -> Shipment:
    return await shipments.find_one(shipment_id)


@router.post("", response_model=ShipmentRead, status_code=201)
async def create_shipment(
    body: ShipmentCreate,
    shipments: ShipmentService = Depends(get_shipment_service),
    caller: CallerIdentity = Depends(require("shipments.create")),
) -> Shipment:
    return await shipments.create(body, caller.subject_id)


@router.put("/{shipment_id}", response_model=ShipmentRead)
async def update_shipment(
    shipment_id: str,
    body: ShipmentUpdate,
    shipments: ShipmentService = Depends(get_shipment_service),
    _caller: CallerIdentity = Depends(require("shipments.update")),
) -> Shipment:
    """Apply only the supplied fields; omitted fields stay unchanged."""
    data = UpdateShipmentInput(id=shipment_id, **body.model_dump(exclude_unset=True))
    return await shipments.update(data)


@router.delete("/{shipment_id}", response_model=ShipmentRead)
async def remove_shipment(
    shipment_id: str,
    shipments: ShipmentService = Depends(get_shipment_service),
    _admin: CallerIdentity = Depends(require("shipments.remove")),
) -> Shipment:
    """Delete a shipment and return its final state."""
    return await shipments.remove(shipment_id)


@router.post("/{shipment_id}/assign-driver", response_model=ShipmentRead)
async def assign_driver(
    shipment_id: str,
    body: AssignDriverInput,
    shipments: ShipmentService = Depends(get_shipment_service),
    _caller: CallerIdentity = Depends(require("shipments.assign_driver")),
) -> Shipment:
    return await shipments.assign_driver(shipment_id, body.driver_id)


@router.post("/{shipment_id}/flag", response_model=ShipmentRead)
async def flag_shipment(
    shipment_id: str,
    shipments: ShipmentService = Depends(get_shipment_service),
    _caller: CallerIdentity = Depends(require("shipments.flag")),
) -> Shipment:
    """Append a timestamped review marker to the shipment notes."""
    return await shipments.flag_shipment(shipment_id)
