"""
Transport Management System — ASGI entry point.

``create_app()`` wires middleware, error handlers, the login rate limiter
and the v1 router; the lifespan prepares the schema and the first admin.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.api.v1.api import api_router
from app.api.v1.endpoints.auth import limiter
from app.core.config import settings
from app.core.enums import UserRole
from app.core.exceptions import register_exception_handlers
from app.core.security import get_password_hash
from app.db.base import Base
from app.db.session import async_session_factory, engine
from app.repositories.users import UserRepository

# Register tables on Base.metadata
from app.models.shipment import Shipment  # noqa: F401
from app.models.user import User  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Startup tasks ───────────────────────────────────────────────────
async def create_tables(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")


async def seed_admin(session_factory: async_sessionmaker[AsyncSession]) -> bool:
    """Create the configured administrator unless that email already exists."""
    async with session_factory() as session:
        users = UserRepository(session)
        if await users.find_by_email(settings.FIRST_ADMIN_EMAIL) is not None:
            return False
        await users.create(
            {
                "email": settings.FIRST_ADMIN_EMAIL,
                "hashed_password": get_password_hash(settings.FIRST_ADMIN_PASSWORD),
                "first_name": "System",
                "last_name": "Administrator",
                "role": UserRole.ADMIN,
            }
        )
    logger.info("Default admin created: %s (password: <redacted>)", settings.FIRST_ADMIN_EMAIL)
    return True


@asynccontextmanager
async def lifespan(_app: FastAPI):
    await create_tables(engine)
    await seed_admin(async_session_factory)
    logger.info("%s v%s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Shipments, drivers and customers behind role-based access",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Domain errors → JSON envelopes; nothing leaks a stack trace
    register_exception_handlers(application)

    # slowapi looks the limiter up on app.state
    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]

    application.include_router(api_router, prefix=settings.API_V1_PREFIX)
    return application


app = create_app()
