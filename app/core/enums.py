"""
Enumerations shared by models, schemas and the access policy.
"""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Role that governs which operations a caller may invoke."""

    ADMIN = "ADMIN"  # full system access
    DISPATCHER = "DISPATCHER"  # creates and assigns shipments
    DRIVER = "DRIVER"  # views assigned shipments
    CUSTOMER = "CUSTOMER"  # creates and views own shipments


class ShipmentStatus(str, Enum):
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    PICKED_UP = "PICKED_UP"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class VehicleType(str, Enum):
    TRUCK = "TRUCK"
    VAN = "VAN"
    TRAILER = "TRAILER"
    FLATBED = "FLATBED"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
