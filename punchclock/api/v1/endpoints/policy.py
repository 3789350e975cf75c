"""
Attendance policy endpoints.

Singleton pattern: GET returns the active policy (seeding defaults on first
access), PATCH applies a partial update (ADMIN / MANAGER only).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from punchclock.api.v1.deps import get_current_active_user, get_db, require_manager
from punchclock.models.user import User
from punchclock.schemas.policy import PolicyEnvelope, PolicyPatch, PolicyRead
from punchclock.services.policy import get_active_policy, update_policy

router = APIRouter(prefix="/attendance", tags=["policy"])


@router.get("/policy", response_model=PolicyEnvelope)
async def read_policy(
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> dict:
    """Get the current attendance rules."""
    policy = await get_active_policy(db)
    return {"ok": True, "data": PolicyRead.model_validate(policy)}


@router.patch("/policy", response_model=PolicyEnvelope)
async def patch_policy(
    body: PolicyPatch,
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> dict:
    """Update attendance rules; only the supplied fields change."""
    patch = body.model_dump(exclude_unset=True, exclude_none=True)
    policy = await update_policy(db, patch, manager.id)
    return {"ok": True, "data": PolicyRead.model_validate(policy)}
