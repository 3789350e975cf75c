"""
Attendance endpoints — punch, role-scoped listing, punch corrections.

- POST /attendance/punch is open to any authenticated user (own record).
- GET /attendance is scoped by the caller's role.
- Punch corrections and manual re-evaluation require ADMIN or MANAGER.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from punchclock.api.v1.deps import (get_current_active_user, get_db,
                                    require_manager, valid_date,
                                    valid_punch_id, valid_user_id)
from punchclock.core.timeutils import validate_date_key
from punchclock.models.user import User
from punchclock.schemas.attendance import (DayRecordPage, EvaluationResponse,
                                           PunchEditRequest, PunchRequest,
                                           PunchResponse)
from punchclock.services import punches
from punchclock.services.evaluation import evaluate
from punchclock.services.day_records import find_one
from punchclock.services.reporting import (DEFAULT_PAGE_SIZE, build_day_view,
                                           list_records)

router = APIRouter(prefix="/attendance", tags=["attendance"])
logger = logging.getLogger(__name__)


# ── Punch ───────────────────────────────────────────────────────────
@router.post("/punch", response_model=PunchResponse, status_code=201)
async def punch(
    body: PunchRequest | None = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> dict:
    """Record a punch for the caller at the current time.

    Unlimited punches per day; status is re-evaluated immediately.
    """
    date_key = body.date if body else None
    day = await punches.record_punch(db, current_user.id, date_key)
    return {"message": "Punch recorded", **build_day_view(day)}


# ── Listing ─────────────────────────────────────────────────────────
@router.get("", response_model=DayRecordPage)
async def list_attendance(
    date: str | None = None,
    date_from: str | None = Query(default=None, alias="from"),
    date_to: str | None = Query(default=None, alias="to"),
    user_id: str | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> dict:
    """List day records visible to the caller, newest date first."""
    for value in (date, date_from, date_to):
        if value is not None:
            validate_date_key(value)
    if user_id is not None:
        valid_user_id(user_id)

    result = await list_records(
        db,
        current_user,
        employee_id=user_id,
        date=date,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    return {
        "page": result.page,
        "limit": result.limit,
        "total": result.total,
        "items": result.items,
    }


# ── Corrections (ADMIN / MANAGER) ───────────────────────────────────
@router.patch("/{user_id}/{date}/punches/{punch_id}", response_model=PunchResponse)
async def edit_punch(
    body: PunchEditRequest,
    user_id: str = Depends(valid_user_id),
    date: str = Depends(valid_date),
    punch_id: str = Depends(valid_punch_id),
    db: AsyncSession = Depends(get_db),
    _manager: User = Depends(require_manager),
) -> dict:
    """Move a punch to a new instant and re-evaluate the day."""
    day = await punches.edit_punch(db, user_id, date, punch_id, body.at)
    return {"message": "Punch updated", **build_day_view(day)}


@router.delete("/{user_id}/{date}/punches/{punch_id}", response_model=PunchResponse)
async def delete_punch(
    user_id: str = Depends(valid_user_id),
    date: str = Depends(valid_date),
    punch_id: str = Depends(valid_punch_id),
    db: AsyncSession = Depends(get_db),
    _manager: User = Depends(require_manager),
) -> dict:
    """Remove a punch and re-evaluate the day."""
    day = await punches.delete_punch(db, user_id, date, punch_id)
    return {"message": "Punch deleted", **build_day_view(day)}


@router.post("/{user_id}/{date}/evaluate", response_model=EvaluationResponse)
async def reevaluate(
    user_id: str = Depends(valid_user_id),
    date: str = Depends(valid_date),
    db: AsyncSession = Depends(get_db),
    _manager: User = Depends(require_manager),
) -> dict:
    """Re-run evaluation under the current policy (e.g. after a policy change)."""
    result = await evaluate(db, user_id, date)
    day = await find_one(db, user_id, date)
    return {
        "message": "Attendance re-evaluated",
        "status": result.status,
        "escalated": result.escalated,
        "record": build_day_view(day),
    }
