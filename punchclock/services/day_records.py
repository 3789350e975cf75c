"""Day record store — the only code that touches ``attendance_days`` rows.

Each helper takes the request's ``AsyncSession``. Mutating helpers commit
their own transaction; connectivity failures surface as
``StoreUnavailable``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import NamedTuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from punchclock.core.timeutils import utcnow
from punchclock.db.session import store_errors
from punchclock.models.attendance import AttendanceDay, Punch

logger = logging.getLogger(__name__)


class MonthFlags(NamedTuple):
    date_key: str
    late: bool
    early_leave: bool


class RecordFilter(NamedTuple):
    employee_ids: Sequence[str] | None = None  # None means every employee
    date_key: str | None = None
    date_from: str | None = None
    date_to: str | None = None


def _apply_filter(query: Select, flt: RecordFilter) -> Select:
    if flt.employee_ids is not None:
        query = query.where(AttendanceDay.employee_id.in_(list(flt.employee_ids)))
    if flt.date_key is not None:
        query = query.where(AttendanceDay.date_key == flt.date_key)
    else:
        # Fixed-width YYYY-MM-DD keys compare correctly as strings
        if flt.date_from is not None:
            query = query.where(AttendanceDay.date_key >= flt.date_from)
        if flt.date_to is not None:
            query = query.where(AttendanceDay.date_key <= flt.date_to)
    return query


# ── Reads ───────────────────────────────────────────────────────────
async def find_one(
    db: AsyncSession,
    employee_id: str,
    date_key: str,
    *,
    for_update: bool = False,
) -> AttendanceDay | None:
    query = select(AttendanceDay).where(
        AttendanceDay.employee_id == employee_id,
        AttendanceDay.date_key == date_key,
    )
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    with store_errors():
        result = await db.execute(query)
        return result.scalar_one_or_none()


async def find_many(
    db: AsyncSession,
    flt: RecordFilter,
    *,
    skip: int,
    limit: int,
) -> list[AttendanceDay]:
    query = (
        _apply_filter(select(AttendanceDay), flt)
        .order_by(AttendanceDay.date_key.desc(), AttendanceDay.updated_at.desc())
        .offset(skip)
        .limit(limit)
    )
    with store_errors():
        result = await db.execute(query)
        return list(result.scalars().all())


async def count_matching(db: AsyncSession, flt: RecordFilter) -> int:
    query = _apply_filter(select(func.count(AttendanceDay.id)), flt)
    with store_errors():
        result = await db.execute(query)
        return result.scalar() or 0


async def find_by_month_prefix(
    db: AsyncSession, employee_id: str, yyyymm: str
) -> list[MonthFlags]:
    """Late / early-leave flags for every record of *employee_id* in *yyyymm*."""
    query = select(
        AttendanceDay.date_key, AttendanceDay.late, AttendanceDay.early_leave
    ).where(
        AttendanceDay.employee_id == employee_id,
        AttendanceDay.date_key >= f"{yyyymm}-01",
        AttendanceDay.date_key <= f"{yyyymm}-31",
    )
    with store_errors():
        result = await db.execute(query)
        return [
            MonthFlags(row.date_key, bool(row.late), bool(row.early_leave))
            for row in result.all()
        ]


# ── Writes ──────────────────────────────────────────────────────────
async def upsert_append_punch(
    db: AsyncSession, employee_id: str, date_key: str, at: datetime
) -> AttendanceDay:
    """Create the day record if needed and append a punch at *at*."""
    with store_errors():
        day = await find_one(db, employee_id, date_key)
        if day is None:
            day = AttendanceDay(
                employee_id=employee_id,
                date_key=date_key,
                status="PENDING",
                punches=[],
            )
            db.add(day)
            try:
                await db.flush()
            except IntegrityError:
                # Another request created the same (employee, date) first
                await db.rollback()
                day = await find_one(db, employee_id, date_key)
                if day is None:
                    raise
                logger.info("Race condition handled for %s on %s", employee_id, date_key)

        day.punches.append(Punch(at=at))
        day.updated_at = utcnow()
        await db.commit()
    return day


def _find_punch(day: AttendanceDay, punch_id: str) -> Punch | None:
    return next((p for p in day.punches if p.id == punch_id), None)


async def update_punch(
    db: AsyncSession,
    employee_id: str,
    date_key: str,
    punch_id: str,
    new_at: datetime,
) -> AttendanceDay | None:
    """Move one punch to *new_at*; ``None`` if the record or punch is absent."""
    with store_errors():
        day = await find_one(db, employee_id, date_key)
        if day is None:
            return None
        punch = _find_punch(day, punch_id)
        if punch is None:
            return None
        punch.at = new_at
        day.updated_at = utcnow()
        await db.commit()
    return day


async def remove_punch(
    db: AsyncSession, employee_id: str, date_key: str, punch_id: str
) -> AttendanceDay | None:
    """Delete one punch; ``None`` if the record or punch is absent."""
    with store_errors():
        day = await find_one(db, employee_id, date_key)
        if day is None:
            return None
        punch = _find_punch(day, punch_id)
        if punch is None:
            return None
        day.punches.remove(punch)
        day.updated_at = utcnow()
        await db.commit()
    return day


async def set_evaluation(db: AsyncSession, day: AttendanceDay, status: str, computed) -> None:
    """Overwrite status and the whole computed snapshot; nothing else."""
    day.status = status
    day.worked_minutes = computed.worked_minutes
    day.late = computed.late
    day.early_leave = computed.early_leave
    day.in_at = computed.in_at
    day.out_at = computed.out_at
    day.evaluated_at = computed.evaluated_at
    with store_errors():
        await db.commit()
