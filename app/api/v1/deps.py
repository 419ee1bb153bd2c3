"""
FastAPI dependencies — database session, service wiring, caller resolution
and access-policy guards.

This module is the composition root: the token service and the per-request
services are built here from ``settings`` and handed to endpoints, which
never read configuration themselves.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Query
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.enums import ShipmentStatus, SortOrder, UserRole
from app.core.exceptions import InvalidToken
from app.core.policy import authorize, policy_for
from app.core.security import CallerIdentity, TokenService
from app.db.session import async_session_factory
from app.repositories.shipments import ShipmentRepository
from app.repositories.users import UserRepository
from app.schemas.common import DEFAULT_LIMIT, DEFAULT_SORT_BY, MAX_LIMIT, MAX_PAGE, PaginationInput
from app.schemas.shipment import ShipmentFilter
from app.schemas.user import UserFilter
from app.services.auth import AuthService
from app.services.shipments import ShipmentService
from app.services.users import UserService

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login",
    auto_error=False,
)

_token_service = TokenService(
    secret_key=settings.SECRET_KEY,
    algorithm=settings.ALGORITHM,
    expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Services ────────────────────────────────────────────────────────
def get_token_service() -> TokenService:
    return _token_service


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(UserRepository(db), tokens)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(UserRepository(db))


def get_shipment_service(db: AsyncSession = Depends(get_db)) -> ShipmentService:
    return ShipmentService(ShipmentRepository(db), default_currency=settings.DEFAULT_CURRENCY)


# ── Caller resolution ───────────────────────────────────────────────
@dataclass(frozen=True)
class RequestContext:
    caller: CallerIdentity | None = None
    token_error: InvalidToken | None = None


async def get_request_context(
    token: Optional[str] = Depends(oauth2_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> RequestContext:
    """Verify the bearer token once per request; failure is not an error yet."""
    if not token:
        return RequestContext()
    try:
        return RequestContext(caller=tokens.verify(token))
    except InvalidToken as exc:
        logger.info("Rejected bearer token: %s", exc.detail)
        return RequestContext(token_error=exc)


def require(operation: str) -> Callable[..., Awaitable[CallerIdentity | None]]:
    """Guard an endpoint with the access policy declared for *operation*."""
    policy = policy_for(operation)

    async def _guard(ctx: RequestContext = Depends(get_request_context)) -> CallerIdentity | None:
        return authorize(policy, ctx.caller, ctx.token_error)

    _guard.__name__ = f"require_{operation.replace('.', '_')}"
    return _guard


# ── Query parameters ────────────────────────────────────────────────
def get_pagination(
    page: int = Query(default=1, ge=1, le=MAX_PAGE),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    sort_by: str = Query(default=DEFAULT_SORT_BY),
    sort_order: SortOrder = Query(default=SortOrder.DESC),
) -> PaginationInput:
    return PaginationInput(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)


def get_shipment_filter(
    status: ShipmentStatus | None = None,
    tracking_number: str | None = None,
    created_by_id: str | None = None,
    driver_id: str | None = None,
    shipper_city: str | None = None,
    consignee_city: str | None = None,
    search: str | None = None,
) -> ShipmentFilter:
    return ShipmentFilter(
        status=status,
        tracking_number=tracking_number,
        created_by_id=created_by_id,
        driver_id=driver_id,
        shipper_city=shipper_city,
        consignee_city=consignee_city,
        search=search,
    )


def get_user_filter(
    role: UserRole | None = None,
    is_active: bool | None = None,
    search: str | None = None,
) -> UserFilter:
    return UserFilter(role=role, is_active=is_active, search=search)
