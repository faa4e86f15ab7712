"""Local calendar date helpers."""
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from reading_quest.utils.exceptions import ValidationError


def local_today(timezone_name: str) -> date:
    """Today's calendar date in ``timezone_name``."""
    try:
        return datetime.now(ZoneInfo(timezone_name)).date()
    except ZoneInfoNotFoundError as err:
        raise ValidationError(f"Unknown timezone '{timezone_name}'") from err


def parse_local_date(raw_value: Optional[str], timezone_name: str, field_name: str = "local_date") -> date:
    """Parse a client-supplied ``YYYY-MM-DD`` date, defaulting to today in ``timezone_name``.

    The client's local date is authoritative for progress records; the
    server-side timezone is only a fallback.
    """
    if not raw_value:
        return local_today(timezone_name)
    try:
        return date.fromisoformat(raw_value)
    except ValueError as err:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD") from err
