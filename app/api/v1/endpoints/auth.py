"""
Auth endpoints — registration, login & current user.
"""

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.api.v1.deps import get_auth_service, require
from app.core.config import settings
from app.core.security import CallerIdentity
from app.models.user import User
from app.schemas.token import AuthResponse
from app.schemas.user import LoginInput, RegisterInput, UserRead
from app.services.auth import AuthService

# Rate limiter — keyed by client IP
limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterInput,
    auth: AuthService = Depends(get_auth_service),
    _caller: CallerIdentity | None = Depends(require("auth.register")),
) -> AuthResponse:
    """Create an account (CUSTOMER unless another non-admin role is requested)."""
    token, user = await auth.register(body)
    return AuthResponse(access_token=token, user=UserRead.model_validate(user))


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginInput,
    auth: AuthService = Depends(get_auth_service),
    _caller: CallerIdentity | None = Depends(require("auth.login")),
) -> AuthResponse:
    """Exchange email + password for a bearer token."""
    token, user = await auth.login(body)
    return AuthResponse(access_token=token, user=UserRead.model_validate(user))


@router.get("/me", response_model=UserRead)
async def read_current_user(
    auth: AuthService = Depends(get_auth_service),
    caller: CallerIdentity = Depends(require("auth.me")),
) -> User:
    """Return profile of the currently authenticated user."""
    return await auth.me(caller)
