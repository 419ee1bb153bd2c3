"""
User use cases: lookups, listings, driver roster and account management.
"""

from __future__ import annotations

import logging

from app.core.enums import SortOrder, UserRole
from app.core.exceptions import Conflict, Forbidden
from app.core.security import CallerIdentity, get_password_hash
from app.models.user import User
from app.repositories.users import UserRepository
from app.schemas.common import PaginationInput
from app.schemas.user import PaginatedUsers, UserCreate, UserFilter, UserRead, UserUpdate
from app.services.query_builder import (EQ, Predicate, Sort, build_user_query,
                                        pagination_meta)

logger = logging.getLogger(__name__)

# Fields a non-admin may not change, even on their own record
_ADMIN_ONLY_FIELDS = frozenset({"role", "is_active"})


class UserService:
    def __init__(self, users: UserRepository) -> None:
        self._users = users

    # ── Reads ───────────────────────────────────────────────────────
    async def find_all_paginated(
        self,
        filter: UserFilter | None = None,
        pagination: PaginationInput | None = None,
    ) -> PaginatedUsers:
        query = build_user_query(filter, pagination)
        total = await self._users.count(query.conditions)
        rows = await self._users.find_many(
            query.conditions,
            sort=query.sort,
            offset=query.skip,
            limit=query.take,
        )
        return PaginatedUsers(
            data=[UserRead.model_validate(row) for row in rows],
            meta=pagination_meta(total, query.page, query.take),
        )

    async def find_all(self, role: UserRole | None = None) -> list[User]:
        conditions = [Predicate("role", EQ, role)] if role is not None else []
        return await self._users.find_many(conditions, sort=Sort("created_at", SortOrder.DESC))

    async def find_one(self, user_id: str) -> User:
        return await self._users.find_by_id(user_id)

    async def find_by_email(self, email: str) -> User | None:
        return await self._users.find_by_email(email)

    async def find_all_drivers(self) -> list[User]:
        return await self._users.find_many(
            [
                Predicate("role", EQ, UserRole.DRIVER),
                Predicate("is_active", EQ, True),
            ],
            sort=Sort("first_name", SortOrder.ASC),
        )

    # ── Account management ──────────────────────────────────────────
    async def create_user(self, data: UserCreate) -> User:
        if await self._users.find_by_email(data.email) is not None:
            raise Conflict("User with this email already exists")

        user = await self._users.create(
            {
                "email": data.email,
                "hashed_password": get_password_hash(data.password),
                "first_name": data.first_name,
                "last_name": data.last_name,
                "role": data.role,
                "phone": data.phone,
                "is_active": data.is_active,
            }
        )
        logger.info("Created user %s (%s, role %s)", user.id, user.email, user.role.value)
        return user

    async def update_user(self, user_id: str, data: UserUpdate, caller: CallerIdentity) -> User:
        """Partial update.

        Admins may edit anyone.  Everyone else may edit only their own
        profile, and never their role or activation flag.
        """
        changes = data.model_dump(exclude_unset=True)
        if caller.role != UserRole.ADMIN:
            if caller.subject_id != user_id:
                raise Forbidden("You may only edit your own profile")
            if _ADMIN_ONLY_FIELDS & changes.keys():
                raise Forbidden("Only administrators may change role or activation")

        user = await self.find_one(user_id)

        new_email = changes.get("email")
        if new_email is not None and new_email != user.email:
            if await self._users.find_by_email(new_email) is not None:
                raise Conflict("User with this email already exists")

        password = changes.pop("password", None)
        if password is not None:
            changes["hashed_password"] = get_password_hash(password)
        changes = {k: v for k, v in changes.items() if v is not None or k == "phone"}

        updated = await self._users.update(user_id, changes)
        logger.info("Updated user %s by %s: %s", user_id, caller.subject_id, sorted(changes))
        return updated

    async def delete_user(self, user_id: str) -> User:
        user = await self._users.delete(user_id)
        logger.info("Deleted user %s (%s)", user_id, user.email)
        return user
