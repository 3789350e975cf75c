"""Pydantic schemas for User CRUD."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from punchclock.models.user import ROLES


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=2, max_length=200)
    role: str = "MEMBER"
    manager_id: str | None = None

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str) -> str:
        if v not in ROLES:
            raise ValueError(f"Role must be one of: {', '.join(ROLES)}")
        return v

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v


class UserRead(BaseModel):
    id: str
    email: str
    full_name: str | None
    role: str
    manager_id: str | None
    is_active: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}


class UserPage(BaseModel):
    page: int
    limit: int
    total: int
    items: list[UserRead]
