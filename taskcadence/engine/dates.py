"""Date/time normalization for taskcadence.

Every value that enters the recurrence engine passes through here. Only UTC
components are ever read or written, so results do not depend on the host
timezone. Functions are total: invalid input yields None (or a neutral value),
never an exception.
"""

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# Calendar-only strings are built from their components, never parsed generally.
DATE_ONLY_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)

# Stand-in for "no end bound" when intersecting recurrence windows.
MAX_DATE = date.max

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def is_valid_date(value: Any) -> bool:
    """True iff value is a date or datetime instance."""
    return isinstance(value, date)


def _as_utc(dt: datetime) -> Optional[datetime]:
    # Naive datetimes are taken to already be in UTC.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError:
        # Offset pushes the instant past datetime.min / datetime.max
        logger.debug(f"Instant out of range in UTC: {dt!r}")
        return None


def _parse_date_only(value: str) -> Optional[datetime]:
    year, month, day = (int(part) for part in value.split("-"))
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        logger.error(f"Invalid calendar date components: {value!r}")
        return None


def _parse_timestamp_string(value: str) -> Optional[datetime]:
    text = value.strip()
    try:
        return _as_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass
    try:
        return _as_utc(date_parser.isoparse(text))
    except (ValueError, OverflowError):
        logger.debug(f"Unparsable date string: {value!r}")
        return None


def _parse_epoch_millis(value: float) -> Optional[datetime]:
    try:
        return _EPOCH + timedelta(milliseconds=value)
    except (OverflowError, ValueError):
        logger.debug(f"Epoch value out of range: {value!r}")
        return None


def parse_to_utc_date(value: Any) -> Optional[datetime]:
    """Parse heterogeneous input into an aware UTC datetime.

    Accepts:
    - `YYYY-MM-DD` strings (UTC midnight, built from the components)
    - ISO-8601 timestamp strings (a trailing `Z` is accepted; naive means UTC)
    - epoch numbers in milliseconds
    - date and datetime objects (a copy is returned)

    Returns None for anything that cannot be interpreted.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return _as_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, str):
        if not value.strip():
            return None
        if DATE_ONLY_RE.fullmatch(value):
            return _parse_date_only(value)
        return _parse_timestamp_string(value)

    if isinstance(value, (int, float)):
        if value != value:  # NaN
            return None
        return _parse_epoch_millis(value)

    return None


def to_calendar_date(value: Any) -> Optional[date]:
    """Normalize input to its UTC calendar date."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    parsed = parse_to_utc_date(value)
    return parsed.date() if parsed is not None else None


def format_date_string(value: Any) -> Optional[str]:
    """Render `YYYY-MM-DD` from UTC components."""
    day = to_calendar_date(value) if is_valid_date(value) else None
    if day is None:
        logger.error(f"Invalid date in format_date_string: {value!r}")
        return None
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def combine_date_time(day: Any, time_value: Any) -> Optional[datetime]:
    """Instant with `day`'s calendar date and `time_value`'s UTC time of day."""
    calendar_day = to_calendar_date(day)
    instant = parse_to_utc_date(time_value)
    if calendar_day is None or instant is None:
        logger.error(f"Invalid date in combine_date_time: day={day!r} time={time_value!r}")
        return None
    # Millisecond precision, matching format_instant
    clock = instant.timetz().replace(microsecond=instant.microsecond // 1000 * 1000)
    return datetime.combine(calendar_day, clock)


def format_instant(value: Any) -> Optional[str]:
    """ISO-8601 UTC string with millisecond precision (`2023-07-20T09:00:00.000Z`)."""
    instant = parse_to_utc_date(value) if is_valid_date(value) else None
    if instant is None:
        return None
    return instant.strftime("%Y-%m-%dT%H:%M:%S.") + f"{instant.microsecond // 1000:03d}Z"


def get_time_string(value: Any) -> str:
    """`HH:MM:SS` in UTC, or an empty string when invalid."""
    instant = parse_to_utc_date(value) if is_valid_date(value) else None
    if instant is None:
        return ""
    return instant.strftime("%H:%M:%S")


def days_between(first: Any, second: Any) -> int:
    """Whole days between two instants, rounded, ignoring order."""
    a = parse_to_utc_date(first) if is_valid_date(first) else None
    b = parse_to_utc_date(second) if is_valid_date(second) else None
    if a is None or b is None:
        return 0
    return round(abs((b - a).total_seconds()) / 86400)


def get_last_day_of_month(value: Any) -> int:
    """Number of days in the UTC month containing value (0 when invalid)."""
    day = to_calendar_date(value) if is_valid_date(value) else None
    if day is None:
        return 0
    if day.month == 12:
        return 31
    return (date(day.year, day.month + 1, 1) - timedelta(days=1)).day


def is_last_day_of_month(day: date) -> bool:
    return day.day == get_last_day_of_month(day)
