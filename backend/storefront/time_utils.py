# Overview: UTC clock and the date boundaries used by list filters and dashboards.

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

DATE_ONLY_LENGTH = len("YYYY-MM-DD")


def utcnow() -> datetime:
    """Naive UTC 'now'; every stored timestamp uses this convention."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_month(dt: datetime) -> datetime:
    return start_of_day(dt).replace(day=1)


def is_date_only(value: Optional[str]) -> bool:
    return bool(value) and len(value.strip()) == DATE_ONLY_LENGTH


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    ISO-8601 string -> naive UTC datetime; None or blank -> None.

    Values without an offset are taken as UTC already. A trailing "Z" or an
    explicit offset is converted. Raises ValueError on anything else.
    """
    if value is None or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def end_of_range(value: Optional[str]) -> Optional[datetime]:
    """
    Exclusive upper bound for an endDate filter: a bare date covers that
    whole day, a full timestamp includes the instant itself.
    """
    parsed = parse_iso_datetime(value)
    if parsed is None:
        return None
    if is_date_only(value):
        return parsed + timedelta(days=1)
    return parsed + timedelta(microseconds=1)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """JSON timestamp, second precision, e.g. 2025-01-31T09:15:00Z."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.replace(microsecond=0).isoformat() + "Z"
