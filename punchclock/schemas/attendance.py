"""Pydantic schemas for punches and day records."""

from __future__ import annotations

from pydantic import AwareDatetime, BaseModel


# ── Punch ───────────────────────────────────────────────────────────
class PunchRequest(BaseModel):
    # Optional YYYY-MM-DD override for backfill; checked by the punch service
    date: str | None = None


class PunchEditRequest(BaseModel):
    # Must carry an offset ("Z" or "+05:30")
    at: AwareDatetime


# ── Day record ─────────────────────────────────────────────────────
class PunchRead(BaseModel):
    id: str
    at: str


class ComputedRead(BaseModel):
    worked_minutes: int
    late: bool
    early_leave: bool
    in_at: str | None
    out_at: str | None
    evaluated_at: str


class DayRecordRead(BaseModel):
    id: int
    user_id: str
    date: str
    punch_count: int
    in_punch_at: str | None
    out_punch_at: str | None
    punches: list[PunchRead]
    status: str
    computed: ComputedRead | None


class PunchResponse(DayRecordRead):
    message: str


class DayRecordPage(BaseModel):
    page: int
    limit: int
    total: int
    items: list[DayRecordRead]


class EvaluationResponse(BaseModel):
    message: str
    status: str
    escalated: bool
    record: DayRecordRead


# ── Health ─────────────────────────────────────────────────────────
class HealthResponse(BaseModel):
    status: str
    readiness: str
    dependencies: dict[str, str]
    timestamp: str
