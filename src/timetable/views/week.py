"""WeekView - a teacher's weekly schedule grid.

Loads every schedule of the selected teacher, and of any other teacher row
sharing the same name (one person teaching several subjects is stored as
several teacher rows), then lays the entries out on a Monday-start week.

Grid layout:
    columns -> the seven dates of the displayed week
    rows    -> DISPLAY_HOURS (7 AM to midnight)
    cell    -> entries starting in that hour, drawn once with a height
               proportional to their duration
"""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from src.timetable.backend import SupabaseClient
from src.timetable.errors import BackendError, DataError
from src.timetable.logging import get_logger
from src.timetable.models import ScheduleDraft, ScheduleEntry, Teacher
from src.timetable.placement import (
    DISPLAY_HOURS,
    card_height,
    occupants,
    time_line_offset,
)
from src.timetable.timeutil import (
    date_key,
    hour_to_hhmm,
    week_days,
    week_start,
    weekday_name,
)

log = get_logger(__name__)

LOAD_ERROR = "Failed to load data. Please try again."


@dataclass(frozen=True)
class GridCell:
    day: date
    hour: int
    entries: tuple[ScheduleEntry, ...]

    @property
    def empty(self) -> bool:
        return not self.entries


class WeekView:
    """Weekly grid for one teacher, navigable week by week."""

    def __init__(
        self,
        client: SupabaseClient,
        *,
        anchor: date | None = None,
        hours: range = DISPLAY_HOURS,
        hour_px: int = 80,
    ) -> None:
        self.client = client
        self.anchor = anchor or date.today()
        self.hours = hours
        self.hour_px = hour_px
        self.teachers: list[Teacher] = []
        self.selected: Teacher | None = None
        self.entries: list[ScheduleEntry] = []
        self.error: str | None = None

    @property
    def days(self) -> list[date]:
        return week_days(self.anchor)

    @property
    def week_start(self) -> date:
        return week_start(self.anchor)

    def next_week(self) -> None:
        self.anchor += timedelta(weeks=1)

    def previous_week(self) -> None:
        self.anchor -= timedelta(weeks=1)

    def today(self) -> None:
        self.anchor = date.today()

    def contains_today(self, today: date | None = None) -> bool:
        return (today or date.today()) in self.days

    def select_teacher(self, teacher_id: int | str | None) -> Teacher | None:
        """Select a teacher by id; falls back to the first teacher."""
        chosen = next((t for t in self.teachers if str(t.id) == str(teacher_id)), None)
        if chosen is None and self.teachers:
            chosen = self.teachers[0]
        self.selected = chosen
        return chosen

    def same_name_ids(self) -> list[int | str]:
        if self.selected is None:
            return []
        return [t.id for t in self.teachers if t.name == self.selected.name]

    def teacher_groups(self) -> dict[str, list[Teacher]]:
        """Teachers grouped by name, in first-seen order, for the selector."""
        groups: dict[str, list[Teacher]] = {}
        for teacher in self.teachers:
            groups.setdefault(teacher.name, []).append(teacher)
        return groups

    def load(self, teacher_id: int | str | None = None) -> bool:
        """Fetch teachers and the selected teacher's schedules.

        On failure the previous data is kept and `error` holds a message for
        the user; nothing is retried.

        Returns:
            True on success.
        """
        try:
            self.teachers = self.client.list_teachers()
            if teacher_id is not None or self.selected is None:
                self.select_teacher(teacher_id)
            if self.selected is None:
                self.entries = []
            else:
                self.entries = self.client.list_schedules(
                    teacher_ids=self.same_name_ids(),
                    year=self.anchor.year,
                    days=self.days,
                )
        except (BackendError, DataError) as e:
            log.error("week_view_load_failed", error=str(e), type=type(e).__name__)
            self.error = LOAD_ERROR
            return False

        self.error = None
        log.info(
            "week_view_loaded",
            teacher=self.selected.name if self.selected else None,
            week=date_key(self.week_start),
            entries=len(self.entries),
        )
        return True

    def cell(self, day: date, hour: int) -> GridCell:
        return GridCell(day, hour, tuple(occupants(self.entries, day, hour)))

    def cells(self) -> Iterator[GridCell]:
        """Every grid cell, hour-major then day, as the grid is drawn."""
        for hour in self.hours:
            for day in self.days:
                yield self.cell(day, hour)

    def card_height(self, entry: ScheduleEntry) -> float:
        return card_height(entry, self.hour_px)

    def time_line_px(self, now: datetime) -> float | None:
        """Pixel offset of the current-time line, or None if off-grid or another week."""
        if not self.contains_today(now.date()):
            return None
        offset = time_line_offset(now, self.hours.start, self.hours.stop - 1)
        return None if offset is None else offset * self.hour_px

    def prefill(self, day: date, hour: int) -> ScheduleDraft:
        """Defaults for the add-slot form opened from an empty cell.

        Raises:
            ValueError: If no teacher is selected.
        """
        if self.selected is None:
            raise ValueError("Please select a teacher first")
        start_hour = hour % 24  # the midnight row starts a slot at 00:00
        return ScheduleDraft(
            teacher_id=self.selected.id,
            day=weekday_name(day),
            date_tag=date_key(day),
            start_time=hour_to_hhmm(start_hour),
            end_time=hour_to_hhmm(start_hour + 1),
            subject=self.selected.subject,
        )
