"""Policy store — singleton attendance policy.

GET creates the row with defaults on first access. Updates patch it in
place; there is no history, so evaluations of past dates always use the
policy active at evaluation time.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from punchclock.core.exceptions import ValidationError
from punchclock.db.session import store_errors
from punchclock.models.attendance_policy import (DEFAULT_POLICY, POLICY_KEY,
                                                 AttendancePolicy)

logger = logging.getLogger(__name__)

POLICY_FIELDS = frozenset(
    {
        "start_time",
        "end_time",
        "late_exempt_minutes",
        "early_exit_threshold_minutes",
        "allowed_late_count_per_month",
        "allowed_early_count_per_month",
        "half_day_min_work_minutes",
        "full_day_min_work_minutes",
        "is_active",
    }
)


async def _find_policy(db: AsyncSession) -> AttendancePolicy | None:
    result = await db.execute(
        select(AttendancePolicy).where(AttendancePolicy.key == POLICY_KEY)
    )
    return result.scalar_one_or_none()


async def get_active_policy(db: AsyncSession) -> AttendancePolicy:
    """Fetch the singleton policy, creating it with defaults if absent."""
    with store_errors():
        policy = await _find_policy(db)
        if policy is not None:
            return policy

        try:
            policy = AttendancePolicy(**DEFAULT_POLICY)
            db.add(policy)
            await db.commit()
            logger.info("Created default attendance policy")
        except IntegrityError:
            # Concurrent first access: the other writer's row wins
            await db.rollback()
            policy = await _find_policy(db)
            if policy is None:
                raise
        return policy


async def update_policy(
    db: AsyncSession, patch: dict[str, Any], updated_by: str | None
) -> AttendancePolicy:
    """Apply a partial update to the singleton policy.

    Raises :class:`ValidationError` for an empty patch, unknown fields, or
    when the merged policy would have ``full_day < half_day``.
    """
    if not patch:
        raise ValidationError("No fields provided for update")
    unknown = set(patch) - POLICY_FIELDS
    if unknown:
        raise ValidationError(f"Unknown policy fields: {', '.join(sorted(unknown))}")

    policy = await get_active_policy(db)

    half = patch.get("half_day_min_work_minutes", policy.half_day_min_work_minutes)
    full = patch.get("full_day_min_work_minutes", policy.full_day_min_work_minutes)
    if full < half:
        raise ValidationError("full_day_min_work_minutes must be >= half_day_min_work_minutes")

    for field, value in patch.items():
        setattr(policy, field, value)
    policy.updated_by = updated_by

    with store_errors():
        await db.commit()
        await db.refresh(policy)
    logger.info("Attendance policy updated by %s: %s", updated_by, patch)
    return policy
