from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError("Date must use the YYYY-MM-DD format")


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp (date only means midnight).

    Timezone offsets are dropped: all timestamps are stored as naive local time.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    try:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except (TypeError, ValueError):
        raise ValidationError("Date/time must use the ISO-8601 format")
    return parsed.replace(tzinfo=None)


def parse_optional_datetime(value) -> Optional[datetime]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_iso_datetime(value)


def parse_hhmm(value) -> time:
    if isinstance(value, time):
        return value
    v = (value or "").strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError("Time must use the HH:MM format")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def isoformat_or_none(value) -> Optional[str]:
    return value.isoformat() if value is not None else None
