"""
Shared test fixtures for the Transport Management test suite.

Each test gets a fresh in-memory aiosqlite database; the app's ``get_db``
dependency is overridden to hand out sessions bound to it.
"""

import os
import sys
from typing import AsyncGenerator, Awaitable, Callable

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
# Use async sqlite driver
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
# CORS fix (JSON format)
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.api.v1.deps import get_db, get_token_service
from app.api.v1.endpoints.auth import limiter
from app.core.enums import UserRole
from app.core.security import get_password_hash
from app.db.base import Base
from app.db.session import build_engine, build_session_factory
from app.main import app
from app.models.user import User

# Login is rate-limited per client IP; every test client shares one address
limiter.enabled = False

TEST_PASSWORD = "secret123"


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create all tables in a private in-memory database and drop it after."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(test_engine)


@pytest.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


# ── Data helpers ────────────────────────────────────────────────────
@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Insert a user straight into the database."""
    counter = {"n": 0}

    async def _make(
        role: UserRole = UserRole.CUSTOMER,
        email: str | None = None,
        first_name: str = "Test",
        last_name: str = "User",
        is_active: bool = True,
        password: str = TEST_PASSWORD,
    ) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"{role.value.lower()}{counter['n']}@example.com",
            hashed_password=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Build a bearer header for a user, signed by the app's token service."""

    def _headers(user: User) -> dict[str, str]:
        token = get_token_service().issue(user.id, user.email, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


def _shipment_payload(**overrides) -> dict:
    payload = {
        "shipper_name": "Acme Logistics",
        "shipper_phone": "+1-555-0100",
        "shipper_email": "ship@acme.com",
        "shipper_address": "1 Dock Road",
        "shipper_city": "Chicago",
        "shipper_state": "IL",
        "shipper_zip": "60601",
        "consignee_name": "Globex Retail",
        "consignee_phone": "+1-555-0199",
        "consignee_address": "99 Market St",
        "consignee_city": "Denver",
        "consignee_state": "CO",
        "consignee_zip": "80202",
        "cargo_description": "Pallets of office chairs",
        "weight": 1200.5,
        "vehicle_type": "TRUCK",
        "estimated_rate": 850.0,
        "pickup_date": "2026-11-02T08:00:00Z",
        "estimated_delivery": "2026-11-05",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def shipment_payload() -> Callable[..., dict]:
    """Valid create-shipment body; keyword overrides replace fields."""
    return _shipment_payload
