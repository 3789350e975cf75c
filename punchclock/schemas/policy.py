"""Pydantic schemas for the attendance policy."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

_HHMM = r"^([01]\d|2[0-3]):([0-5]\d)$"


class PolicyRead(BaseModel):
    start_time: str
    end_time: str
    late_exempt_minutes: int
    early_exit_threshold_minutes: int
    allowed_late_count_per_month: int
    allowed_early_count_per_month: int
    half_day_min_work_minutes: int
    full_day_min_work_minutes: int
    is_active: bool
    updated_by: str | None
    created_at: datetime | None
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class PolicyPatch(BaseModel):
    start_time: str | None = Field(default=None, pattern=_HHMM)
    end_time: str | None = Field(default=None, pattern=_HHMM)
    late_exempt_minutes: int | None = Field(default=None, ge=0, le=240)
    early_exit_threshold_minutes: int | None = Field(default=None, ge=0, le=240)
    allowed_late_count_per_month: int | None = Field(default=None, ge=0, le=60)
    allowed_early_count_per_month: int | None = Field(default=None, ge=0, le=60)
    half_day_min_work_minutes: int | None = Field(default=None, ge=0, le=900)
    full_day_min_work_minutes: int | None = Field(default=None, ge=0, le=900)
    is_active: bool | None = None

    model_config = {"extra": "forbid"}


class PolicyEnvelope(BaseModel):
    ok: bool
    data: PolicyRead
