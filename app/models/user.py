"""
User model — authentication & role-based access control.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String

from app.core.enums import UserRole
from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    # Insertion order; breaks ties when listings sort on a non-unique column
    seq: int = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore[assignment]
    id: str = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))  # type: ignore[assignment]
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_password: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    first_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    last_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    role: UserRole = Column(  # type: ignore[assignment]
        Enum(UserRole, native_enum=False, length=20),
        nullable=False,
        default=UserRole.CUSTOMER,
        index=True,
    )
    phone: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, nullable=False, default=True, server_default="true")  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), nullable=False, default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )