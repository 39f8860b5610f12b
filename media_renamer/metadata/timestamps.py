"""
Date and offset parsing shared by the EXIF and track readers, plus the
rendering of a creation timestamp into a file name stem.
"""
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..exceptions import InvalidTimeOffsetError

# "2022:03:04 10:00:00", "2022-03-04T10:00:00.123Z", "2022-03-04 10:00:00+02:00"
_DATETIME_RE = re.compile(
    r'^(\d{4})[:-](\d{2})[:-](\d{2})[ T](\d{2}):(\d{2}):(\d{2})'
    r'(?:\.\d+)?'
    r'\s*(Z|[+-]\d{2}:?\d{2})?$'
)

_OFFSET_RE = re.compile(r'^([+-])(\d{2}):?(\d{2})$')


def _offset_from_match(sign: str, hours: str, minutes: str) -> Optional[timezone]:
    h, m = int(hours), int(minutes)
    if h > 23 or m > 59:
        return None
    delta = timedelta(hours=h, minutes=m)
    return timezone(-delta if sign == '-' else delta)


def parse_offset(value: Optional[str]) -> Optional[timezone]:
    """Parses '+02:00', '-0530' or 'Z'. Returns None when not an offset."""
    if not value:
        return None
    value = value.strip()
    if value == 'Z':
        return timezone.utc
    match = _OFFSET_RE.match(value)
    if not match:
        return None
    return _offset_from_match(*match.groups())


def parse_time_offset(value: str) -> timezone:
    """
    Parses the user supplied override offset.

    Raises:
        InvalidTimeOffsetError: if the value is not a signed HH:MM offset.
    """
    match = _OFFSET_RE.match(value.strip()) if value else None
    offset = _offset_from_match(*match.groups()) if match else None
    if offset is None:
        raise InvalidTimeOffsetError(
            f"Time offset '{value}' is invalid: expected a signed offset like '+01:00' or '-02:30'"
        )
    return offset


def parse_metadata_datetime(value, default_offset: Optional[timezone] = None) -> Optional[datetime]:
    """
    Parses a date as written by cameras and muxers.

    An offset written inside the value wins, then `default_offset`, then UTC.
    Returns None for anything that is not a real date, including the
    '0000:00:00 00:00:00' placeholder some cameras write.
    """
    if value is None:
        return None
    text = str(value).replace('UTC', '').strip()
    match = _DATETIME_RE.match(text)
    if not match:
        return None

    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    suffix = match.group(7)

    tz = parse_offset(suffix) if suffix else None
    if tz is None:
        tz = default_offset or timezone.utc

    try:
        return datetime(year, month, day, hour, minute, second, tzinfo=tz)
    except ValueError:
        return None


def render_timestamp(timestamp: datetime, template: str, offset: Optional[timezone] = None) -> str:
    """Shifts the timestamp into `offset` (same instant) and formats it."""
    if offset is not None:
        timestamp = timestamp.astimezone(offset)
    return timestamp.strftime(template)
