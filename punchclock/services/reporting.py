"""Read-side listing and formatting of day records.

No business computation happens here: records are filtered by the
viewer's visibility scope, paged, and rendered with local-time ISO
timestamps.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from punchclock.core.exceptions import AuthorizationDenied, ValidationError
from punchclock.core.timeutils import ensure_utc, local_iso
from punchclock.models.attendance import AttendanceDay
from punchclock.models.user import User
from punchclock.services import day_records
from punchclock.services.directory import visible_employee_ids

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


@dataclass
class RecordPage:
    page: int
    limit: int
    total: int
    items: list[dict[str, Any]]


def build_day_view(day: AttendanceDay) -> dict[str, Any]:
    """Render a day record the way every attendance endpoint returns it."""
    punches = sorted(day.punches, key=lambda p: ensure_utc(p.at))
    punch_count = len(punches)
    in_punch_at = punches[0].at if punch_count >= 1 else None
    out_punch_at = punches[-1].at if punch_count >= 2 else None

    computed = None
    if day.evaluated_at is not None:
        computed = {
            "worked_minutes": day.worked_minutes,
            "late": day.late,
            "early_leave": day.early_leave,
            "in_at": local_iso(day.in_at),
            "out_at": local_iso(day.out_at),
            "evaluated_at": local_iso(day.evaluated_at),
        }

    return {
        "id": day.id,
        "user_id": day.employee_id,
        "date": day.date_key,
        "punch_count": punch_count,
        "in_punch_at": local_iso(in_punch_at),
        "out_punch_at": local_iso(out_punch_at),
        "punches": [{"id": p.id, "at": local_iso(p.at)} for p in punches],
        "status": day.status or "PENDING",
        "computed": computed,
    }


async def list_records(
    db: AsyncSession,
    viewer: User,
    *,
    employee_id: str | None = None,
    date: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> RecordPage:
    """List day records visible to *viewer*, newest date first."""
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    if date is None and date_from and date_to and date_from > date_to:
        raise ValidationError("'from' must not be after 'to'")

    allowed = await visible_employee_ids(db, viewer)
    if employee_id is not None:
        if allowed is not None and employee_id not in allowed:
            raise AuthorizationDenied("Forbidden: cannot view this user's attendance")
        scope = [employee_id]
    else:
        scope = allowed

    flt = day_records.RecordFilter(
        employee_ids=scope,
        date_key=date,
        date_from=date_from,
        date_to=date_to,
    )
    total = await day_records.count_matching(db, flt)
    days = await day_records.find_many(db, flt, skip=(page - 1) * limit, limit=limit)

    return RecordPage(
        page=page,
        limit=limit,
        total=total,
        items=[build_day_view(d) for d in days],
    )
