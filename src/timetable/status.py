"""Upcoming / Active / Past classification of today's classes.

Classification compares minutes of the day only; callers pass entries that
already occur today. The end minute still counts as Active, so a 09:00-10:00
class reads Active with 100% progress at exactly 10:00.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum

from src.timetable.models import ScheduleEntry
from src.timetable.placement import is_canceled_on
from src.timetable.timeutil import minutes_of


class ClassStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    PAST = "past"


@dataclass(frozen=True)
class StatusReading:
    status: ClassStatus
    progress: int | None = None  # percent complete, only while active


def classify(entry: ScheduleEntry, now: datetime | time) -> StatusReading:
    now_min = minutes_of(now)
    start, end = entry.start_minutes, entry.end_minutes

    if now_min < start:
        return StatusReading(ClassStatus.UPCOMING)
    if now_min > end:
        return StatusReading(ClassStatus.PAST)

    duration = end - start
    if duration <= 0:
        return StatusReading(ClassStatus.ACTIVE, 100)
    progress = round(100 * (now_min - start) / duration)
    return StatusReading(ClassStatus.ACTIVE, min(100, max(0, progress)))


def group_by_status(
    entries: Iterable[ScheduleEntry], now: datetime | time
) -> dict[ClassStatus, list[ScheduleEntry]]:
    groups: dict[ClassStatus, list[ScheduleEntry]] = {status: [] for status in ClassStatus}
    for entry in entries:
        groups[classify(entry, now).status].append(entry)
    return groups


def board(entries: Iterable[ScheduleEntry], now: datetime, today: date) -> list[ScheduleEntry]:
    """Today's not-yet-finished classes in kiosk order.

    Canceled classes sink to the end, active classes come first, the rest
    follow by start time. Cancellation only affects ordering, never status.
    """
    remaining = [e for e in entries if classify(e, now).status is not ClassStatus.PAST]

    def sort_key(entry: ScheduleEntry) -> tuple[bool, bool, int]:
        active = classify(entry, now).status is ClassStatus.ACTIVE
        return (is_canceled_on(entry, today), not active, entry.start_minutes)

    return sorted(remaining, key=sort_key)


def active_entries(
    entries: Iterable[ScheduleEntry], now: datetime, today: date
) -> list[ScheduleEntry]:
    """Classes in progress right now and not canceled today, by start time."""
    active = [
        e
        for e in entries
        if classify(e, now).status is ClassStatus.ACTIVE and not is_canceled_on(e, today)
    ]
    return sorted(active, key=lambda e: e.start_minutes)


def past_entries(entries: Iterable[ScheduleEntry], now: datetime) -> list[ScheduleEntry]:
    """Today's finished classes, most recently started first."""
    past = [e for e in entries if classify(e, now).status is ClassStatus.PAST]
    return sorted(past, key=lambda e: e.start_minutes, reverse=True)
