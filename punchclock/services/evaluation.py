"""Attendance evaluation engine.

Turns a day's punches plus the active policy and the month's history into
a status and a computed snapshot.

Business rules:
  - Punches pair up in time order (1st in / 2nd out, 3rd in / 4th out, ...)
  - Arrival after ``start_time + late_exempt_minutes`` is late
  - Departure before ``end_time - early_exit_threshold_minutes`` is early
  - Missing or short work marks the day INCOMPLETE or HALF_DAY
  - Too many late / early days in one month escalate the day to HALF_DAY

``compute_worked_minutes`` and ``evaluate_day`` are pure; ``evaluate``
wires them to the stores.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from punchclock.core.exceptions import RecordNotFound
from punchclock.core.timeutils import (ensure_utc, hhmm_to_minutes,
                                       local_minute_of_day, month_prefix,
                                       utcnow)
from punchclock.services import day_records
from punchclock.services.policy import get_active_policy

logger = logging.getLogger(__name__)


class PolicyRules(Protocol):
    start_time: str
    end_time: str
    late_exempt_minutes: int
    early_exit_threshold_minutes: int
    allowed_late_count_per_month: int
    allowed_early_count_per_month: int
    half_day_min_work_minutes: int
    full_day_min_work_minutes: int


@dataclass(frozen=True)
class MonthlyCounts:
    """Late / early-leave days already on record for the month."""

    late: int = 0
    early: int = 0


@dataclass(frozen=True)
class Computed:
    worked_minutes: int
    late: bool
    early_leave: bool
    in_at: datetime | None
    out_at: datetime | None
    evaluated_at: datetime


@dataclass(frozen=True)
class EvaluationResult:
    status: str
    computed: Computed
    escalated: bool = False


def compute_worked_minutes(sorted_punches: Sequence[datetime]) -> int:
    """Sum whole minutes over consecutive in/out pairs.

    Pairs with a non-positive duration contribute nothing, as does a
    trailing unpaired punch.
    """
    total = 0
    for i in range(0, len(sorted_punches) - 1, 2):
        seconds = (sorted_punches[i + 1] - sorted_punches[i]).total_seconds()
        if seconds > 0:
            total += int(seconds // 60)
    return total


def _base_status(punch_count: int, worked_minutes: int, policy: PolicyRules) -> str:
    if punch_count == 0 or punch_count % 2 == 1:
        return "INCOMPLETE"
    if worked_minutes < policy.half_day_min_work_minutes:
        return "INCOMPLETE"
    if worked_minutes < policy.full_day_min_work_minutes:
        return "HALF_DAY"
    return "PRESENT"


def evaluate_day(
    punches: Sequence[datetime],
    policy: PolicyRules,
    month: MonthlyCounts,
    *,
    now: datetime | None = None,
) -> EvaluationResult:
    """Classify one day.

    *month* must hold the counts of the employee's **other** days in the
    same month; this day's own flags are added here.
    """
    ordered = sorted(ensure_utc(p) for p in punches)
    punch_count = len(ordered)

    in_at = ordered[0] if punch_count >= 1 else None
    out_at = ordered[-1] if punch_count >= 2 else None

    worked_minutes = 0
    late = False
    early_leave = False
    if punch_count > 0:
        worked_minutes = compute_worked_minutes(ordered)

        late_after = hhmm_to_minutes(policy.start_time) + policy.late_exempt_minutes
        early_before = hhmm_to_minutes(policy.end_time) - policy.early_exit_threshold_minutes

        late = local_minute_of_day(in_at) > late_after
        early_leave = out_at is not None and local_minute_of_day(out_at) < early_before

    status = _base_status(punch_count, worked_minutes, policy)
    if early_leave and status != "INCOMPLETE":
        status = "EARLY_LEAVE"

    # Monthly escalation overrides EARLY_LEAVE as well; computed.early_leave keeps the signal
    projected_late = month.late + (1 if late else 0)
    projected_early = month.early + (1 if early_leave else 0)
    escalated = False
    if status != "INCOMPLETE" and (
        projected_late > policy.allowed_late_count_per_month
        or projected_early > policy.allowed_early_count_per_month
    ):
        status = "HALF_DAY"
        escalated = True

    return EvaluationResult(
        status=status,
        computed=Computed(
            worked_minutes=worked_minutes,
            late=late,
            early_leave=early_leave,
            in_at=in_at,
            out_at=out_at,
            evaluated_at=now or utcnow(),
        ),
        escalated=escalated,
    )


async def monthly_counts(
    db: AsyncSession, employee_id: str, date_key: str
) -> MonthlyCounts:
    """Count late / early days in *date_key*'s month, excluding *date_key* itself."""
    late = 0
    early = 0
    for flags in await day_records.find_by_month_prefix(db, employee_id, month_prefix(date_key)):
        if flags.date_key == date_key:
            continue
        if flags.late:
            late += 1
        if flags.early_leave:
            early += 1
    return MonthlyCounts(late=late, early=early)


async def evaluate(db: AsyncSession, employee_id: str, date_key: str) -> EvaluationResult:
    """Re-evaluate one day record and persist the result.

    Raises :class:`RecordNotFound` if the record does not exist.
    """
    policy = await get_active_policy(db)

    day = await day_records.find_one(db, employee_id, date_key, for_update=True)
    if day is None:
        raise RecordNotFound(f"No attendance for user {employee_id} on {date_key}")

    month = await monthly_counts(db, employee_id, date_key)
    result = evaluate_day([p.at for p in day.punches], policy, month)

    await day_records.set_evaluation(db, day, result.status, result.computed)
    logger.info(
        "Evaluated %s on %s: %s (%d min, late=%s, early=%s%s)",
        employee_id,
        date_key,
        result.status,
        result.computed.worked_minutes,
        result.computed.late,
        result.computed.early_leave,
        ", escalated" if result.escalated else "",
    )
    return result
