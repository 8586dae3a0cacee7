"""Wall-clock and calendar helpers shared by the schedule logic.

Times are "HH:MM" strings as stored in class_schedules.start_time/end_time.
Calendar dates are keyed by ISO "yyyy-MM-dd" strings everywhere.
"""

import re
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from src.timetable.errors import TimeFormatError

WEEKDAYS: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

MINUTES_PER_DAY = 24 * 60

# "9:05", "09:05", "09:05:00" (Postgres time columns come back with seconds)
_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_DAY_RE = re.compile(r"^(\d{1,2})/(\d{1,2})$")


def parse_hhmm(text: str) -> int:
    """Parse an "HH:MM" wall-clock string into minutes since midnight.

    "24:00" is accepted as the end of the day (1440).

    Raises:
        TimeFormatError: If the string is not a valid wall-clock time.
    """
    if not isinstance(text, str):
        raise TimeFormatError(f"Expected an 'HH:MM' string, got {type(text).__name__}")

    match = _HHMM_RE.match(text.strip())
    if match is None:
        raise TimeFormatError(f"Invalid time {text!r}, expected 'HH:MM'")

    hours, minutes = int(match.group(1)), int(match.group(2))
    seconds = int(match.group(3) or 0)
    if minutes > 59 or seconds > 59:
        raise TimeFormatError(f"Invalid time {text!r}, minutes out of range")
    if hours > 24 or (hours == 24 and (minutes or seconds)):
        raise TimeFormatError(f"Invalid time {text!r}, hours out of range")
    return hours * 60 + minutes


def normalize_hhmm(text: str) -> str:
    """Return the zero-padded "HH:MM" form of a valid time string."""
    total = parse_hhmm(text)
    return f"{total // 60:02d}:{total % 60:02d}"


def format_12h(text: str) -> str:
    """Format "HH:MM" for display, e.g. "13:05" -> "1:05 PM"."""
    total = parse_hhmm(text) % MINUTES_PER_DAY
    hours, minutes = divmod(total, 60)
    suffix = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{minutes:02d} {suffix}"


def hour_to_hhmm(hour: int) -> str:
    """9 -> "09:00"; used to prefill new slots from a clicked grid cell."""
    return f"{hour:02d}:00"


def minutes_of(moment: datetime | time) -> int:
    """Minute of day of a datetime or time, ignoring seconds and date."""
    return moment.hour * 60 + moment.minute


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def date_key(day: date) -> str:
    """Canonical calendar-date key used for date tags and cancellations."""
    return day.isoformat()


def migrate_date_key(raw: str, year: int, days: Iterable[date] = ()) -> str:
    """Canonicalise a stored date key.

    ISO keys pass through unchanged. Legacy "M/d" keys, written by older
    console versions, carry no year. They take the year of the matching
    date in `days` (the dates on screen, which may straddle New Year) and
    fall back to `year`.

    Raises:
        TimeFormatError: If the key is neither ISO nor "M/d", or names an
            impossible date.
    """
    text = str(raw).strip()
    if _ISO_DATE_RE.match(text):
        try:
            return date.fromisoformat(text).isoformat()
        except ValueError as e:
            raise TimeFormatError(f"Invalid date key {raw!r}") from e

    match = _MONTH_DAY_RE.match(text)
    if match is None:
        raise TimeFormatError(f"Invalid date key {raw!r}, expected 'yyyy-MM-dd'")
    month, day_of_month = int(match.group(1)), int(match.group(2))
    year = next((d.year for d in days if (d.month, d.day) == (month, day_of_month)), year)
    try:
        return date(year, month, day_of_month).isoformat()
    except ValueError as e:
        raise TimeFormatError(f"Invalid date key {raw!r}") from e


def is_legacy_date_key(raw: str) -> bool:
    return bool(_MONTH_DAY_RE.match(str(raw).strip()))


def week_start(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


def week_days(day: date) -> list[date]:
    """The seven dates, Monday to Sunday, of the week containing `day`."""
    monday = week_start(day)
    return [monday + timedelta(days=offset) for offset in range(7)]
