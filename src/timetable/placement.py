"""Schedule placement on the weekly grid.

The grid has one column per calendar date and one row per hour. A schedule
entry is drawn once, in the cell of its starting hour, with a height
proportional to its duration; it is not repeated into later hour cells.
"""

from collections.abc import Iterable
from datetime import date, datetime, time

from src.timetable.models import ScheduleEntry
from src.timetable.timeutil import MINUTES_PER_DAY, date_key, minutes_of, weekday_name

DISPLAY_HOURS = range(7, 25)  # 7 AM to midnight


def day_matches(entry: ScheduleEntry, day: date) -> bool:
    """True if the entry's recurrence pattern lands on `day`."""
    if entry.repeats:
        return entry.day == weekday_name(day)
    return entry.date_tag == date_key(day)


def is_canceled_on(entry: ScheduleEntry, day: date) -> bool:
    return date_key(day) in entry.canceled_dates


def occurs_on(entry: ScheduleEntry, day: date) -> bool:
    """Day-match and not canceled for that date."""
    return day_matches(entry, day) and not is_canceled_on(entry, day)


def occupants(entries: Iterable[ScheduleEntry], day: date, hour: int) -> list[ScheduleEntry]:
    """Entries drawn in the (day, hour) cell, in input order.

    Pure function of its arguments: same inputs, same output.
    """
    return [
        entry
        for entry in entries
        if occurs_on(entry, day) and entry.start_hour == hour
    ]


def entries_for_day(entries: Iterable[ScheduleEntry], day: date) -> list[ScheduleEntry]:
    """All entries occurring on `day`, ordered by start time."""
    matching = [entry for entry in entries if occurs_on(entry, day)]
    return sorted(matching, key=lambda e: e.start_minutes)


def span_minutes(entry: ScheduleEntry) -> int:
    """Duration used for drawing; an end at or before the start runs past midnight."""
    start, end = entry.start_minutes, entry.end_minutes
    if end > start:
        return end - start
    return end + MINUTES_PER_DAY - start


def span_hours(entry: ScheduleEntry) -> float:
    return span_minutes(entry) / 60


def card_height(entry: ScheduleEntry, hour_px: int = 80) -> float:
    """Card height in pixels, never shorter than one hour row minus borders."""
    return max(span_hours(entry) * hour_px - 2, hour_px - 2)


def time_line_offset(
    now: datetime | time,
    first_hour: int = DISPLAY_HOURS.start,
    last_hour: int = DISPLAY_HOURS.stop - 1,
) -> float | None:
    """Hours from the top of the grid to the current-time line.

    Returns None when `now` is outside the displayed hours.
    """
    if now.hour < first_hour or now.hour >= last_hour:
        return None
    return (minutes_of(now) - first_hour * 60) / 60
