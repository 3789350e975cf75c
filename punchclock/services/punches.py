"""Punch ingestion — append / edit / delete a punch, then re-evaluate.

Each operation is two steps: the punch mutation commits first, then the
evaluator re-reads the row under ``FOR UPDATE`` and writes the result.
A concurrent punch can land between the two; the later evaluation then
sees it, and the last evaluation to commit wins.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from punchclock.core.exceptions import RecordNotFound
from punchclock.core.timeutils import (ensure_utc, local_date_key, utcnow,
                                       validate_date_key)
from punchclock.models.attendance import AttendanceDay
from punchclock.services import day_records
from punchclock.services.evaluation import evaluate

logger = logging.getLogger(__name__)


async def record_punch(
    db: AsyncSession,
    employee_id: str,
    date_key: str | None = None,
    at: datetime | None = None,
) -> AttendanceDay:
    """Append a punch for *employee_id* and return the re-evaluated record.

    *date_key* defaults to the local calendar date of *at* (itself now);
    an explicit key (backfill) must be a real ``YYYY-MM-DD`` date.
    """
    at = ensure_utc(at) if at is not None else utcnow()
    date_key = validate_date_key(date_key) if date_key is not None else local_date_key(at)

    day = await day_records.upsert_append_punch(db, employee_id, date_key, at)
    logger.info("Punch recorded for %s on %s (%d punches)", employee_id, date_key, len(day.punches))

    await evaluate(db, employee_id, date_key)
    return day


async def edit_punch(
    db: AsyncSession,
    employee_id: str,
    date_key: str,
    punch_id: str,
    new_at: datetime,
) -> AttendanceDay:
    day = await day_records.update_punch(db, employee_id, date_key, punch_id, ensure_utc(new_at))
    if day is None:
        raise RecordNotFound("Punch not found for this user/date")
    logger.info("Punch %s for %s on %s moved to %s", punch_id, employee_id, date_key, new_at)

    await evaluate(db, employee_id, date_key)
    return day


async def delete_punch(
    db: AsyncSession, employee_id: str, date_key: str, punch_id: str
) -> AttendanceDay:
    day = await day_records.remove_punch(db, employee_id, date_key, punch_id)
    if day is None:
        raise RecordNotFound("Punch not found for this user/date")
    logger.info("Punch %s for %s on %s deleted", punch_id, employee_id, date_key)

    await evaluate(db, employee_id, date_key)
    return day
