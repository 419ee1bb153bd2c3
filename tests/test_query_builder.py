"""
Filter / pagination builder tests (pure, no database).
"""

import pytest
from pydantic import ValidationError

from app.core.enums import ShipmentStatus, SortOrder, UserRole
from app.core.exceptions import InvalidQuery
from app.schemas.common import MAX_LIMIT, MAX_PAGE, PaginationInput
from app.schemas.shipment import ShipmentFilter
from app.schemas.user import UserFilter
from app.services.query_builder import (EQ, ICONTAINS, SHIPMENT_SEARCH_FIELDS,
                                        AnyOf, Predicate, Sort,
                                        build_shipment_query, build_user_query,
                                        pagination_meta)


def test_defaults():
    query = build_shipment_query()

    assert query.conditions == ()
    assert query.page == 1
    assert query.skip == 0
    assert query.take == 10
    assert query.sort == Sort("created_at", SortOrder.DESC)


def test_skip_is_derived_from_page_and_limit():
    query = build_user_query(pagination=PaginationInput(page=3, limit=20))
    assert query.skip == 40
    assert query.take == 20


def test_field_filters_and_search_are_combined():
    query = build_shipment_query(
        ShipmentFilter(status=ShipmentStatus.PENDING, shipper_city=" Chicago ", search="chairs")
    )

    assert Predicate("status", EQ, ShipmentStatus.PENDING) in query.conditions
    assert Predicate("shipper_city", ICONTAINS, "Chicago") in query.conditions
    search = [c for c in query.conditions if isinstance(c, AnyOf)]
    assert len(search) == 1
    assert {p.field for p in search[0].predicates} == set(SHIPMENT_SEARCH_FIELDS)
    assert all(p.value == "chairs" for p in search[0].predicates)


def test_id_filters_are_exact_matches():
    query = build_shipment_query(ShipmentFilter(created_by_id="u-1", driver_id="d-1"))
    assert query.conditions == (
        Predicate("created_by_id", EQ, "u-1"),
        Predicate("driver_id", EQ, "d-1"),
    )


def test_blank_values_are_ignored():
    query = build_shipment_query(ShipmentFilter(search="   ", tracking_number=""))
    assert query.conditions == ()


def test_user_filter_keeps_false_activation():
    query = build_user_query(UserFilter(role=UserRole.DRIVER, is_active=False))
    assert query.conditions == (
        Predicate("role", EQ, UserRole.DRIVER),
        Predicate("is_active", EQ, False),
    )


def test_camel_case_sort_field_is_normalised():
    query = build_shipment_query(
        pagination=PaginationInput(sort_by="estimatedDelivery", sort_order=SortOrder.ASC)
    )
    assert query.sort == Sort("estimated_delivery", SortOrder.ASC)


def test_unknown_sort_field_is_rejected():
    with pytest.raises(InvalidQuery):
        build_user_query(pagination=PaginationInput(sort_by="hashed_password"))


class TestPaginationMeta:
    def test_middle_page(self):
        meta = pagination_meta(total=25, page=2, limit=10)
        assert meta.total_pages == 3
        assert meta.has_next_page is True
        assert meta.has_previous_page is True

    def test_last_page(self):
        meta = pagination_meta(total=25, page=3, limit=10)
        assert meta.has_next_page is False

    def test_empty_result(self):
        meta = pagination_meta(total=0, page=1, limit=10)
        assert meta.total_pages == 0
        assert meta.has_next_page is False
        assert meta.has_previous_page is False


def test_page_is_bounded():
    assert build_shipment_query(pagination=PaginationInput(page=MAX_PAGE, limit=MAX_LIMIT)).skip == (
        (MAX_PAGE - 1) * MAX_LIMIT
    )
    with pytest.raises(ValidationError):
        PaginationInput(page=MAX_PAGE + 1)
    with pytest.raises(ValidationError):
        PaginationInput(limit=MAX_LIMIT + 1)
