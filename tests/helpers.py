"""Small helpers shared by the test modules."""

from datetime import datetime, timedelta, timezone

from punchclock.core.security import create_access_token

IST = timezone(timedelta(hours=5, minutes=30))


def ist(date_key: str, hhmm: str) -> datetime:
    """UTC instant for a local (+05:30) wall-clock time on *date_key*."""
    local = datetime.fromisoformat(f"{date_key}T{hhmm}:00").replace(tzinfo=IST)
    return local.astimezone(timezone.utc)


def auth_headers(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
