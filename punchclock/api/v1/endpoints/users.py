"""
Directory endpoints — own profile, scoped user listing and lookup by id.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from punchclock.api.v1.deps import get_current_active_user, get_db, valid_user_id
from punchclock.models.user import User
from punchclock.schemas.user import UserPage, UserRead
from punchclock.services.directory import get_visible_user, list_visible_users

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserRead)
async def read_current_user(
    current_user: User = Depends(get_current_active_user),
) -> User:
    """Return profile of the currently authenticated user."""
    return current_user


@router.get("", response_model=UserPage)
async def list_users(
    page: int = 1,
    limit: int = 10,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> dict:
    """List users visible to the caller (same scoping as attendance)."""
    page = max(page, 1)
    limit = min(max(limit, 1), 50)
    total, users = await list_visible_users(
        db, current_user, skip=(page - 1) * limit, limit=limit
    )
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "items": [UserRead.model_validate(u) for u in users],
    }


@router.get("/{user_id}", response_model=UserRead)
async def read_user(
    user_id: str = Depends(valid_user_id),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> User:
    """Get one user; TEAM_LEAD may only see self and direct reportees."""
    return await get_visible_user(db, current_user, user_id)
