"""
Day record & punch models — core business domain.

One ``AttendanceDay`` per (employee, local calendar date). Punches are
child rows with no ordering column; order is always derived from ``at``.
The ``status`` and computed columns are written only by the evaluator.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Index, Integer,
                        String, UniqueConstraint)
from sqlalchemy.orm import relationship

from punchclock.db.base import Base

STATUSES = ("PENDING", "PRESENT", "HALF_DAY", "INCOMPLETE", "EARLY_LEAVE")


class AttendanceDay(Base):
    __tablename__ = "attendance_days"
    __table_args__ = (
        UniqueConstraint("employee_id", "date_key", name="uq_attendance_employee_date"),
        Index("ix_attendance_date_updated", "date_key", "updated_at"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: str = Column(String(36), nullable=False, index=True)  # type: ignore[assignment]
    date_key: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM-DD
    status: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default="PENDING", index=True
    )

    # Evaluation snapshot; evaluated_at is NULL until the first evaluation
    worked_minutes: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    late: bool | None = Column(Boolean, nullable=True)  # type: ignore[assignment]
    early_leave: bool | None = Column(Boolean, nullable=True)  # type: ignore[assignment]
    in_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    out_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    evaluated_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]

    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    punches = relationship(
        "Punch",
        back_populates="day",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class Punch(Base):
    __tablename__ = "attendance_punches"

    id: str = Column(  # type: ignore[assignment]
        String(32), primary_key=True, default=lambda: uuid.uuid4().hex
    )
    day_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("attendance_days.id", ondelete="CASCADE"), nullable=False, index=True
    )
    at: datetime = Column(DateTime(timezone=True), nullable=False)  # type: ignore[assignment]

    day = relationship("AttendanceDay", back_populates="punches")
