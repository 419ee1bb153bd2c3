"""Pydantic schemas for User registration, CRUD and listings."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, computed_field, field_validator

from app.core.enums import UserRole
from app.schemas.common import PaginationMeta


def _check_email(v: str) -> str:
    v = v.strip()
    local, _, domain = v.partition("@")
    if not local or "." not in domain:
        raise ValueError("Invalid email address")
    return v


class RegisterInput(BaseModel):
    email: str
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=2, max_length=100)
    last_name: str = Field(min_length=2, max_length=100)
    role: UserRole = UserRole.CUSTOMER
    phone: str | None = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v)


class LoginInput(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()


class UserCreate(RegisterInput):
    """Admin-issued account creation; any role, optionally inactive."""

    is_active: bool = True


class UserUpdate(BaseModel):
    email: str | None = None
    password: str | None = Field(default=None, min_length=6)
    first_name: str | None = Field(default=None, min_length=2, max_length=100)
    last_name: str | None = Field(default=None, min_length=2, max_length=100)
    role: UserRole | None = None
    phone: str | None = None
    is_active: bool | None = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: str | None) -> str | None:
        return _check_email(v) if v is not None else v


class UserRead(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    phone: str | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class UserFilter(BaseModel):
    role: UserRole | None = None
    is_active: bool | None = None
    search: str | None = None  # email, first_name, last_name


class PaginatedUsers(BaseModel):
    data: list[UserRead]
    meta: PaginationMeta
