"""
Attendance policy model — singleton row holding the organisation's rules.

Only one row (key ``DEFAULT``) should ever exist. Managers update it in
place through the policy API and every evaluation reads whatever is active
at that moment; no previous versions are kept.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from punchclock.db.base import Base

POLICY_KEY = "DEFAULT"

DEFAULT_POLICY = {
    "key": POLICY_KEY,
    "start_time": "09:30",
    "end_time": "18:30",
    "late_exempt_minutes": 10,
    "early_exit_threshold_minutes": 10,
    "allowed_late_count_per_month": 3,
    "allowed_early_count_per_month": 3,
    "half_day_min_work_minutes": 240,
    "full_day_min_work_minutes": 480,
    "is_active": True,
    "updated_by": None,
}


class AttendancePolicy(Base):
    __tablename__ = "attendance_policies"

    id: int = Column(Integer, primary_key=True)  # type: ignore[assignment]
    key: str = Column(String(20), unique=True, nullable=False, default=POLICY_KEY)  # type: ignore[assignment]
    start_time: str = Column(String(5), nullable=False)  # type: ignore[assignment]  # HH:MM
    end_time: str = Column(String(5), nullable=False)  # type: ignore[assignment]  # HH:MM
    late_exempt_minutes: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    early_exit_threshold_minutes: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    allowed_late_count_per_month: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    allowed_early_count_per_month: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    half_day_min_work_minutes: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    full_day_min_work_minutes: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]
    updated_by: str | None = Column(String(36), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
