"""
Shipment model — the transport order moving between shipper and consignee.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (Column, DateTime, Enum, Float, ForeignKey, Index, Integer,
                        String, Text)
from sqlalchemy.orm import relationship

from app.core.enums import ShipmentStatus, VehicleType
from app.db.base import Base
from app.models.user import _utcnow


class Shipment(Base):
    __tablename__ = "shipments"
    __table_args__ = (
        Index("ix_shipments_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    # Insertion order; breaks ties when listings sort on a non-unique column
    seq: int = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore[assignment]
    id: str = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))  # type: ignore[assignment]
    tracking_number: str = Column(String(40), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    status: ShipmentStatus = Column(  # type: ignore[assignment]
        Enum(ShipmentStatus, native_enum=False, length=20),
        nullable=False,
        default=ShipmentStatus.PENDING,
    )

    # Shipper
    shipper_name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    shipper_phone: str = Column(String(30), nullable=False)  # type: ignore[assignment]
    shipper_email: str | None = Column(String(320), nullable=True)  # type: ignore[assignment]
    shipper_address: str = Column(String(300), nullable=False)  # type: ignore[assignment]
    shipper_city: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    shipper_state: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    shipper_zip: str = Column(String(20), nullable=False)  # type: ignore[assignment]

    # Consignee
    consignee_name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    consignee_phone: str = Column(String(30), nullable=False)  # type: ignore[assignment]
    consignee_email: str | None = Column(String(320), nullable=True)  # type: ignore[assignment]
    consignee_address: str = Column(String(300), nullable=False)  # type: ignore[assignment]
    consignee_city: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    consignee_state: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    consignee_zip: str = Column(String(20), nullable=False)  # type: ignore[assignment]

    # Cargo
    cargo_description: str = Column(String(500), nullable=False)  # type: ignore[assignment]
    weight: float = Column(Float, nullable=False)  # type: ignore[assignment]
    dimensions: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    vehicle_type: VehicleType = Column(  # type: ignore[assignment]
        Enum(VehicleType, native_enum=False, length=20),
        nullable=False,
    )

    # Financial
    estimated_rate: float = Column(Float, nullable=False)  # type: ignore[assignment]
    actual_rate: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    currency: str = Column(String(3), nullable=False, default="USD")  # type: ignore[assignment]

    # Dates
    pickup_date: datetime = Column(DateTime(timezone=True), nullable=False)  # type: ignore[assignment]
    estimated_delivery: datetime = Column(DateTime(timezone=True), nullable=False)  # type: ignore[assignment]
    delivery_date: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]

    # Relations (lookup only, no cascade)
    created_by_id: str = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)  # type: ignore[assignment]
    driver_id: str | None = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)  # type: ignore[assignment]

    notes: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), nullable=False, default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    created_by = relationship("User", foreign_keys=[created_by_id], lazy="selectin")
    driver = relationship("User", foreign_keys=[driver_id], lazy="selectin")
