"""Pydantic schemas for Shipment create / update / read / filter."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.core.enums import ShipmentStatus, VehicleType
from app.schemas.common import PaginationMeta
from app.schemas.user import UserRead, _check_email

_DATE_FIELDS = ("pickup_date", "estimated_delivery", "delivery_date")


def _check_date_string(v: str | None) -> str | None:
    if v is None:
        return v
    try:
        datetime.fromisoformat(v.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValueError("Must be an ISO-8601 date or date-time string") from exc
    return v.strip()


def _check_optional_email(v: str | None) -> str | None:
    return _check_email(v) if v else None


class ShipmentCreate(BaseModel):
    # Shipper
    shipper_name: str = Field(min_length=1)
    shipper_phone: str = Field(min_length=1)
    shipper_email: str | None = None
    shipper_address: str = Field(min_length=1)
    shipper_city: str = Field(min_length=1)
    shipper_state: str = Field(min_length=1)
    shipper_zip: str = Field(min_length=1)

    # Consignee
    consignee_name: str = Field(min_length=1)
    consignee_phone: str = Field(min_length=1)
    consignee_email: str | None = None
    consignee_address: str = Field(min_length=1)
    consignee_city: str = Field(min_length=1)
    consignee_state: str = Field(min_length=1)
    consignee_zip: str = Field(min_length=1)

    # Cargo
    cargo_description: str = Field(min_length=1)
    weight: float = Field(ge=0)
    dimensions: str | None = None
    vehicle_type: VehicleType

    # Financial
    estimated_rate: float = Field(ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)

    # Dates (ISO strings, converted by the service)
    pickup_date: str
    estimated_delivery: str

    notes: str | None = None

    check_dates = field_validator("pickup_date", "estimated_delivery")(_check_date_string)
    check_emails = field_validator("shipper_email", "consignee_email")(_check_optional_email)


class ShipmentUpdate(BaseModel):
    """Partial update body; only supplied fields are applied."""

    status: ShipmentStatus | None = None

    shipper_name: str | None = Field(default=None, min_length=1)
    shipper_phone: str | None = Field(default=None, min_length=1)
    shipper_email: str | None = None
    shipper_address: str | None = Field(default=None, min_length=1)
    shipper_city: str | None = Field(default=None, min_length=1)
    shipper_state: str | None = Field(default=None, min_length=1)
    shipper_zip: str | None = Field(default=None, min_length=1)

    consignee_name: str | None = Field(default=None, min_length=1)
    consignee_phone: str | None = Field(default=None, min_length=1)
    consignee_email: str | None = None
    consignee_address: str | None = Field(default=None, min_length=1)
    consignee_city: str | None = Field(default=None, min_length=1)
    consignee_state: str | None = Field(default=None, min_length=1)
    consignee_zip: str | None = Field(default=None, min_length=1)

    cargo_description: str | None = Field(default=None, min_length=1)
    weight: float | None = Field(default=None, ge=0)
    dimensions: str | None = None
    vehicle_type: VehicleType | None = None

    estimated_rate: float | None = Field(default=None, ge=0)
    actual_rate: float | None = Field(default=None, ge=0)

    pickup_date: str | None = None
    estimated_delivery: str | None = None
    delivery_date: str | None = None

    driver_id: str | None = None
    notes: str | None = None

    check_dates = field_validator(*_DATE_FIELDS)(_check_date_string)
    check_emails = field_validator("shipper_email", "consignee_email")(_check_optional_email)


class UpdateShipmentInput(ShipmentUpdate):
    id: str


class AssignDriverInput(BaseModel):
    driver_id: str = Field(min_length=1)


class ShipmentFilter(BaseModel):
    status: ShipmentStatus | None = None
    tracking_number: str | None = None
    created_by_id: str | None = None
    driver_id: str | None = None
    shipper_city: str | None = None
    consignee_city: str | None = None
    search: str | None = None  # tracking number, shipper, consignee, cargo


class ShipmentRead(BaseModel):
    id: str
    tracking_number: str
    status: ShipmentStatus

    shipper_name: str
    shipper_phone: str
    shipper_email: str | None = None
    shipper_address: str
    shipper_city: str
    shipper_state: str
    shipper_zip: str

    consignee_name: str
    consignee_phone: str
    consignee_email: str | None = None
    consignee_address: str
    consignee_city: str
    consignee_state: str
    consignee_zip: str

    cargo_description: str
    weight: float
    dimensions: str | None = None
    vehicle_type: VehicleType

    estimated_rate: float
    actual_rate: float | None = None
    currency: str

    pickup_date: datetime
    estimated_delivery: datetime
    delivery_date: datetime | None = None

    created_by_id: str
    created_by: UserRead | None = None
    driver_id: str | None = None
    driver: UserRead | None = None

    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class PaginatedShipments(BaseModel):
    data: list[ShipmentRead]
    meta: PaginationMeta
