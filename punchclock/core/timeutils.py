"""
Fixed-offset local time helpers.

All instants are stored in UTC; date keys, minute-of-day checks and
rendered timestamps use the configured local offset (+05:30 by default).
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone

from punchclock.core.config import settings
from punchclock.core.exceptions import ValidationError

DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def ensure_utc(dt: datetime) -> datetime:
    """Normalise a potentially-naive timestamp to UTC-aware."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_local(dt: datetime) -> datetime:
    return ensure_utc(dt).astimezone(settings.local_tz)


def local_date_key(dt: datetime) -> str:
    """Calendar date of *dt* in the local timezone, as ``YYYY-MM-DD``."""
    return to_local(dt).strftime("%Y-%m-%d")


def local_minute_of_day(dt: datetime) -> int:
    local = to_local(dt)
    return local.hour * 60 + local.minute


def local_iso(dt: datetime | None) -> str | None:
    """Render an instant as ISO 8601 in local time with explicit offset."""
    if dt is None:
        return None
    return to_local(dt).isoformat(timespec="milliseconds")


def hhmm_to_minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def month_prefix(date_key: str) -> str:
    return date_key[:7]


def validate_date_key(value: str) -> str:
    """Return *value* if it is a real calendar date in ``YYYY-MM-DD`` form."""
    if not DATE_KEY_RE.match(value):
        raise ValidationError(f"Invalid date key '{value}' (expected YYYY-MM-DD)")
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid calendar date '{value}'") from exc
    return value
