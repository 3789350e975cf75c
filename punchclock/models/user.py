"""
User model — authentication, roles and manager relationship (directory).
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String

from punchclock.db.base import Base

ROLES = ("ADMIN", "MANAGER", "TEAM_LEAD", "MEMBER")


class User(Base):
    __tablename__ = "users"

    id: str = Column(  # type: ignore[assignment]
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_password: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    full_name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    role: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="MEMBER",
        server_default="MEMBER",
    )  # ADMIN | MANAGER | TEAM_LEAD | MEMBER
    manager_id: str | None = Column(  # type: ignore[assignment]
        String(36), ForeignKey("users.id"), nullable=True, index=True
    )
    is_active: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
