"""
Registration, login and current-user resolution.
"""

from __future__ import annotations

import logging

from app.core.enums import UserRole
from app.core.exceptions import (AccountInactive, Conflict, Forbidden,
                                 InvalidCredentials)
from app.core.security import (CallerIdentity, TokenService, get_password_hash,
                               verify_password)
from app.models.user import User
from app.repositories.users import UserRepository
from app.schemas.user import LoginInput, RegisterInput

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, users: UserRepository, tokens: TokenService) -> None:
        self._users = users
        self._tokens = tokens

    def _issue(self, user: User) -> str:
        return self._tokens.issue(user.id, user.email, user.role)

    async def register(self, data: RegisterInput) -> tuple[str, User]:
        if data.role == UserRole.ADMIN:
            raise Forbidden("Administrator accounts cannot be self-registered")
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
            }
        )
        logger.info("Registered user %s (%s)", user.id, user.role.value)
        return self._issue(user), user

    async def login(self, data: LoginInput) -> tuple[str, User]:
        user = await self._users.find_by_email(data.email)
        # Same error for unknown email and wrong password
        if user is None or not verify_password(data.password, user.hashed_password):
            logger.warning("Failed login attempt for %s", data.email)
            raise InvalidCredentials()
        if not user.is_active:
            logger.warning("Login attempt on inactive account %s", user.id)
            raise AccountInactive()
        return self._issue(user), user

    async def me(self, caller: CallerIdentity) -> User:
        return await self._users.find_by_id(caller.subject_id)
