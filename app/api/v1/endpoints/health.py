"""Liveness probe."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.v1.deps import require
from app.core.config import settings
from app.core.security import CallerIdentity
from app.schemas.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(
    _caller: CallerIdentity | None = Depends(require("health")),
) -> HealthResponse:
    return HealthResponse(status="OK", version=settings.VERSION)
