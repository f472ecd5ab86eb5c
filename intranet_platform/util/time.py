from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utc_iso(dt: datetime) -> str:
    """UTC datetime as ISO-8601 string with Z (seconds precision)."""
    return dt.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def utcnow_iso() -> str:
    """Current UTC time as ISO-8601 string with Z."""
    return utc_iso(datetime.now(timezone.utc))


def utcnow_plus_minutes(minutes: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(minutes=max(1, int(minutes)))
