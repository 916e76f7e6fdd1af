"""PDF date strings (``D:YYYYMMDDHHmmSSOHH'mm'``)."""

from __future__ import annotations

import calendar
import re
from datetime import datetime, timedelta, timezone

__all__ = ["parse_date", "format_date"]

_DATE_RE = re.compile(
    r"""
    ^(?P<year>\d{4})
    (?:(?P<month>\d{2})
      (?:(?P<day>\d{2})
        (?:(?P<hour>\d{2})
          (?:(?P<minute>\d{2})
            (?:(?P<second>\d{2})
              (?P<tz>.*)
            )?
          )?
        )?
      )?
    )?$
    """,
    re.VERBOSE,
)

_TZ_RE = re.compile(r"^(?P<sign>[+\-Z])(?:(?P<hours>\d{1,2})(?:'(?P<minutes>\d{2})?'?)?)?$")

_OUT_OF_SPEC_FORMATS = (
    "%a %b %d %H:%M:%S %Y",
    "%A, %B %d, %Y %I:%M:%S %p",
    "%m/%d/%Y %H:%M:%S",
    "%a, %b %d, %Y",
)


def _prevalidate(text: str, relaxed: bool) -> str | None:
    text = text.lstrip("\ufeff").rstrip("\x00")
    if relaxed:
        if text.startswith("D:"):
            text = text[2:]
        text = text.strip().replace(".", "").replace("\\", "")
        return text if len(text) >= 4 else None
    if len(text) < 6 or not text.startswith("D:"):
        return None
    return text[2:]


def _parse_timezone(value: str, relaxed: bool) -> timezone | None:
    if not value:
        return timezone.utc
    value = value.replace(" ", "0")
    if relaxed and value in ("Z'", "Z'0"):
        return timezone.utc
    match = _TZ_RE.match(value)
    if match is None:
        return timezone.utc if relaxed and value[0] not in "+-Z" else None
    sign = match.group("sign")
    hours = int(match.group("hours") or 0) % 24
    minutes = int(match.group("minutes") or 0)
    if minutes > 59:
        return None
    if sign == "Z":
        return timezone.utc if hours == 0 and minutes == 0 else None
    offset = timedelta(hours=hours, minutes=minutes)
    return timezone(-offset if sign == "-" else offset)


def parse_date(text: str, relaxed: bool = False) -> datetime | None:
    """Parse a PDF date string, returning ``None`` when it is malformed.

    Relaxed parsing tolerates a missing ``D:`` prefix, a few popular out of spec
    layouts and an unterminated timezone.
    """

    value = _prevalidate(text, relaxed)
    if value is None:
        return None
    match = _DATE_RE.match(value)
    if match is None:
        if relaxed:
            for layout in _OUT_OF_SPEC_FORMATS:
                try:
                    return datetime.strptime(value, layout).replace(tzinfo=timezone.utc)
                except ValueError:
                    continue
        return None

    parts = match.groupdict()
    year = int(parts["year"])
    month = int(parts["month"] or 1)
    day = int(parts["day"] or 1)
    hour = int(parts["hour"] or 0)
    minute = int(parts["minute"] or 0)
    second = int(parts["second"] or 0)
    if not 1 <= month <= 12 or not 1 <= day <= calendar.monthrange(year, month)[1]:
        return None
    if hour > 23 or minute > 59 or second > 59:
        return None
    tz = _parse_timezone(parts["tz"] or "", relaxed)
    if tz is None:
        return None
    return datetime(year, month, day, hour, minute, second, tzinfo=tz)


def format_date(value: datetime) -> str:
    """Render ``value`` as a PDF date string."""

    offset = value.utcoffset() or timedelta(0)
    minutes = int(offset.total_seconds()) // 60
    sign = "+"
    if minutes < 0:
        sign = "-"
        minutes = -minutes
    return (
        f"D:{value.year:04d}{value.month:02d}{value.day:02d}"
        f"{value.hour:02d}{value.minute:02d}{value.second:02d}"
        f"{sign}{minutes // 60:02d}'{minutes % 60:02d}'"
    )
