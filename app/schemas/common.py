"""Pydantic schemas shared by paginated listings."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.core.enums import SortOrder

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# Keeps the row offset within a 32-bit integer on every backend
MAX_PAGE = 1_000_000
DEFAULT_SORT_BY = "created_at"


class PaginationInput(BaseModel):
    page: int = Field(default=DEFAULT_PAGE, ge=1, le=MAX_PAGE)
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    sort_by: str = DEFAULT_SORT_BY
    sort_order: SortOrder = SortOrder.DESC


class PaginationMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class HealthResponse(BaseModel):
    status: str
    version: str
