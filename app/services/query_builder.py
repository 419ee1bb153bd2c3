"""
Filter + pagination → normalised query descriptor.

The builder is pure: it turns a sparse filter object and a pagination
request into plain ``Predicate`` / ``AnyOf`` data plus skip/take/sort.
Repositories compile the descriptor into SQL; nothing here touches the
database.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Union

from app.core.enums import SortOrder
from app.core.exceptions import InvalidQuery
from app.schemas.common import PaginationInput, PaginationMeta
from app.schemas.shipment import ShipmentFilter
from app.schemas.user import UserFilter

EQ = "eq"
ICONTAINS = "icontains"


@dataclass(frozen=True)
class Predicate:
    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class AnyOf:
    """Disjunction of predicates; matches when any member matches."""

    predicates: tuple[Predicate, ...]


Condition = Union[Predicate, AnyOf]


@dataclass(frozen=True)
class Sort:
    field: str
    order: SortOrder


@dataclass(frozen=True)
class QueryDescriptor:
    conditions: tuple[Condition, ...]
    page: int
    skip: int
    take: int
    sort: Sort


# ── Per-entity field sets ───────────────────────────────────────────
SHIPMENT_SEARCH_FIELDS = ("tracking_number", "shipper_name", "consignee_name", "cargo_description")
USER_SEARCH_FIELDS = ("email", "first_name", "last_name")

SHIPMENT_SORT_FIELDS = frozenset(
    {
        "created_at",
        "updated_at",
        "tracking_number",
        "status",
        "pickup_date",
        "estimated_delivery",
        "delivery_date",
        "shipper_name",
        "shipper_city",
        "consignee_name",
        "consignee_city",
        "weight",
        "estimated_rate",
        "vehicle_type",
    }
)
USER_SORT_FIELDS = frozenset(
    {"created_at", "updated_at", "email", "first_name", "last_name", "role", "is_active"}
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _to_snake(name: str) -> str:
    """``createdAt`` → ``created_at``; snake_case passes through."""
    return _CAMEL_BOUNDARY.sub("_", name.strip()).lower()


def _contains(field: str, value: str | None) -> Predicate | None:
    if value is None or not value.strip():
        return None
    return Predicate(field, ICONTAINS, value.strip())


def _search_group(fields: tuple[str, ...], term: str | None) -> AnyOf | None:
    if term is None or not term.strip():
        return None
    return AnyOf(tuple(Predicate(f, ICONTAINS, term.strip()) for f in fields))


def _paginate(
    conditions: list[Condition | None],
    pagination: PaginationInput | None,
    sortable: frozenset[str],
) -> QueryDescriptor:
    pagination = pagination or PaginationInput()
    sort_field = _to_snake(pagination.sort_by)
    if sort_field not in sortable:
        raise InvalidQuery(f"Cannot sort by '{pagination.sort_by}'")
    return QueryDescriptor(
        conditions=tuple(c for c in conditions if c is not None),
        page=pagination.page,
        skip=(pagination.page - 1) * pagination.limit,
        take=pagination.limit,
        sort=Sort(sort_field, pagination.sort_order),
    )


# ── Builders ────────────────────────────────────────────────────────
def build_shipment_query(
    filter: ShipmentFilter | None = None,
    pagination: PaginationInput | None = None,
) -> QueryDescriptor:
    """Field filters and the free-text ``search`` group are ANDed together."""
    f = filter or ShipmentFilter()
    conditions: list[Condition | None] = [
        Predicate("status", EQ, f.status) if f.status is not None else None,
        _contains("tracking_number", f.tracking_number),
        Predicate("created_by_id", EQ, f.created_by_id) if f.created_by_id else None,
        Predicate("driver_id", EQ, f.driver_id) if f.driver_id else None,
        _contains("shipper_city", f.shipper_city),
        _contains("consignee_city", f.consignee_city),
        _search_group(SHIPMENT_SEARCH_FIELDS, f.search),
    ]
    return _paginate(conditions, pagination, SHIPMENT_SORT_FIELDS)


def build_user_query(
    filter: UserFilter | None = None,
    pagination: PaginationInput | None = None,
) -> QueryDescriptor:
    f = filter or UserFilter()
    conditions: list[Condition | None] = [
        Predicate("role", EQ, f.role) if f.role is not None else None,
        Predicate("is_active", EQ, f.is_active) if f.is_active is not None else None,
        _search_group(USER_SEARCH_FIELDS, f.search),
    ]
    return _paginate(conditions, pagination, USER_SORT_FIELDS)


def pagination_meta(total: int, page: int, limit: int) -> PaginationMeta:
    total_pages = math.ceil(total / limit)
    return PaginationMeta(
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
    )
