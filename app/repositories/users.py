"""User persistence."""

from __future__ import annotations

from app.models.user import User
from app.repositories.base import SQLAlchemyRepository


class UserRepository(SQLAlchemyRepository[User]):
    model = User
    entity_name = "User"

    async def find_by_email(self, email: str) -> User | None:
        return await self.find_unique(email=email)
