"""
User listing, lookup & account management endpoints.

- Listings and the driver roster are for ADMIN / DISPATCHER.
- Any authenticated user may read a profile and edit their own.
- Creating and deleting accounts is ADMIN-only.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.v1.deps import get_pagination, get_user_filter, get_user_service, require
from app.core.security import CallerIdentity
from app.models.user import User
from app.schemas.common import PaginationInput
from app.schemas.user import PaginatedUsers, UserCreate, UserFilter, UserRead, UserUpdate
from app.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=PaginatedUsers)
async def list_users(
    filter: UserFilter = Depends(get_user_filter),
    pagination: PaginationInput = Depends(get_pagination),
    users: UserService = Depends(get_user_service),
    _caller: CallerIdentity = Depends(require("users.list")),
) -> PaginatedUsers:
    return await users.find_all_paginated(filter, pagination)


@router.get("/drivers", response_model=list[UserRead])
async def list_drivers(
    users: UserService = Depends(get_user_service),
    _caller: CallerIdentity = Depends(require("users.drivers")),
) -> list[User]:
    """Active drivers, alphabetical by first name (assignment dropdown)."""
    return await users.find_all_drivers()


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: str,
    users: UserService = Depends(get_user_service),
    _caller: CallerIdentity = Depends(require("users.get")),
) -> User:
    return await users.find_one(user_id)


@router.post("", response_model=UserRead, status_code=201)
async def create_user(
    body: UserCreate,
    users: UserService = Depends(get_user_service),
    _admin: CallerIdentity = Depends(require("users.create")),
) -> User:
    """Create a new user account with any role (admin only)."""
    return await users.create_user(body)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    body: UserUpdate,
    users: UserService = Depends(get_user_service),
    caller: CallerIdentity = Depends(require("users.update")),
) -> User:
    return await users.update_user(user_id, body, caller)


@router.delete("/{user_id}", response_model=UserRead)
async def delete_user(
    user_id: str,
    users: UserService = Depends(get_user_service),
    _admin: CallerIdentity = Depends(require("users.delete")),
) -> User:
    return await users.delete_user(user_id)
