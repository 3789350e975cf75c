"""
FastAPI dependencies — auth guards, role checks and database session.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import AsyncGenerator, Callable
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from punchclock.core.exceptions import AuthorizationDenied, ValidationError
from punchclock.core.security import decode_access_token
from punchclock.core.timeutils import validate_date_key
from punchclock.db.session import async_session_factory
from punchclock.models.user import User
from punchclock.services.directory import get_user

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

_PUNCH_ID_RE = re.compile(r"^[0-9a-f]{32}$")


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Decode the bearer JWT and load the caller from the directory."""
    credentials_exc = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Missing or invalid Authorization header",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exc

    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exc

    user_id: str | None = payload.get("sub")
    if user_id is None:
        raise credentials_exc

    user = await get_user(db, user_id)
    if user is None:
        raise credentials_exc
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Reject inactive accounts."""
    if not current_user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user account")
    return current_user


def require_roles(*roles: str) -> Callable[..., object]:
    """Only allow the given roles to proceed (checked before any mutation)."""

    async def _guard(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role not in roles:
            raise AuthorizationDenied("Forbidden: insufficient role")
        return current_user

    return _guard


require_manager = require_roles("ADMIN", "MANAGER")


# ── Path parameter validation ───────────────────────────────────────
def valid_user_id(user_id: str) -> str:
    try:
        uuid.UUID(user_id)
    except ValueError as exc:
        raise ValidationError(f"Invalid user id '{user_id}'") from exc
    return user_id


def valid_date(date: str) -> str:
    return validate_date_key(date)


def valid_punch_id(punch_id: str) -> str:
    if not _PUNCH_ID_RE.match(punch_id):
        raise ValidationError(f"Invalid punch id '{punch_id}'")
    return punch_id
