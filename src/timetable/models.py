"""Pydantic models for console data.

All records coming from the hosted backend are validated here, at the
boundary. Rows of the wrong shape raise RecordShapeError instead of leaking
missing fields into the schedule logic.
"""

import re
from collections.abc import Iterable
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from src.timetable.errors import RecordShapeError
from src.timetable.logging import get_logger
from src.timetable.timeutil import (
    WEEKDAYS,
    is_legacy_date_key,
    migrate_date_key,
    normalize_hhmm,
    parse_hhmm,
)

log = get_logger(__name__)

# Control tags embedded in free-text descriptions, e.g. "[Mock] Paper 2 practice"
_MODE_TAG_RE = re.compile(r"\[(class|mock|seminar)\]", re.IGNORECASE)


class ClassMode(str, Enum):
    """Kind of session a schedule slot represents."""

    CLASS = "Class"
    MOCK = "Mock"
    SEMINAR = "Seminar"


def _context_year(info: ValidationInfo) -> int:
    context = info.context or {}
    return int(context.get("year") or date.today().year)


def _context_days(info: ValidationInfo) -> tuple[date, ...]:
    return tuple((info.context or {}).get("days") or ())


class Teacher(BaseModel):
    """A row of the teachers table."""

    model_config = ConfigDict(frozen=True)

    id: int | str
    name: str
    subject: str = ""
    user_id: str | None = None

    @field_validator("subject", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ScheduleEntry(BaseModel):
    """One class_schedules row, either weekly-recurring or a single dated slot.

    `day` matters only when `repeats` is true; `date_tag` only when it is false.
    `canceled_dates` holds ISO date keys of occurrences that were called off.
    """

    model_config = ConfigDict(frozen=True)

    id: int | str
    teacher_id: int | str | None = None
    teacher_name: str | None = None
    subject: str = ""
    grade: str = ""
    curriculum: str = ""
    room: str | None = None
    description: str = ""
    mode: ClassMode = ClassMode.CLASS
    day: str = ""
    date_tag: str | None = None
    start_time: str
    end_time: str
    repeats: bool = False
    canceled_dates: frozenset[str] = Field(default_factory=frozenset)

    @model_validator(mode="before")
    @classmethod
    def _flatten_row(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        row = dict(data)

        # Embedded resource from select=*,teachers(id,name,subject)
        teacher = row.pop("teachers", None)
        if isinstance(teacher, dict) and not row.get("teacher_name"):
            row["teacher_name"] = teacher.get("name")

        if not row.get("mode"):
            match = _MODE_TAG_RE.search(row.get("description") or "")
            if match:
                row["mode"] = match.group(1).title()
        return row

    @field_validator("subject", "grade", "curriculum", "description", "day", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("room", mode="before")
    @classmethod
    def _blank_room(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("mode", mode="before")
    @classmethod
    def _mode_title(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().title()
        return value

    @field_validator("repeats", mode="before")
    @classmethod
    def _none_is_one_off(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("day")
    @classmethod
    def _check_day(cls, value: str) -> str:
        if value and value not in WEEKDAYS:
            raise ValueError(f"unknown weekday {value!r}")
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        return normalize_hhmm(value)

    @field_validator("date_tag", mode="before")
    @classmethod
    def _canonical_date_tag(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return migrate_date_key(value, _context_year(info), _context_days(info))

    @field_validator("canceled_dates", mode="before")
    @classmethod
    def _canonical_cancellations(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, str) or not hasattr(value, "__iter__"):
            raise ValueError("canceled_dates must be a list of date strings")
        year = _context_year(info)
        days = _context_days(info)
        keys = set()
        for raw in value:
            key = migrate_date_key(raw, year, days)
            if is_legacy_date_key(raw):
                log.warning("legacy_cancellation_key_migrated", raw=raw, key=key)
            keys.add(key)
        return frozenset(keys)

    @model_validator(mode="after")
    def _check_recurrence(self) -> "ScheduleEntry":
        if self.repeats and not self.day:
            raise ValueError("repeating schedule needs a weekday")
        if not self.repeats and self.date_tag is None:
            raise ValueError("one-off schedule needs a date_tag")
        return self

    @property
    def start_minutes(self) -> int:
        return parse_hhmm(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_hhmm(self.end_time)

    @property
    def start_hour(self) -> int:
        return self.start_minutes // 60

    @property
    def display_description(self) -> str:
        """Description with control tags removed."""
        return " ".join(_MODE_TAG_RE.sub("", self.description).split())

    @classmethod
    def from_row(
        cls, row: Any, *, year: int | None = None, days: Iterable[date] | None = None
    ) -> "ScheduleEntry":
        return parse_record(cls, row, year=year, days=days)


class ScheduleDraft(BaseModel):
    """Values for a new class_schedules row, as prefilled from a grid cell."""

    teacher_id: int | str
    day: str
    date_tag: str
    start_time: str
    end_time: str
    repeats: bool = False
    subject: str = ""
    grade: str = "Grade 9"
    curriculum: str = ""
    description: str = ""
    room: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        return normalize_hhmm(value)

    @model_validator(mode="after")
    def _check_order(self) -> "ScheduleDraft":
        if not self.grade:
            raise ValueError("grade is required")
        if parse_hhmm(self.end_time) <= parse_hhmm(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class PresentationSettings(BaseModel):
    """The single presentation_settings row driving the kiosk."""

    id: str | None = None
    show_classes: bool = True
    show_news: bool = True
    fullscreen: bool = False
    display_duration: int = 5
    class_duration: int = 10
    active_category_id: str | None = None

    @field_validator("show_classes", "show_news", "fullscreen", mode="before")
    @classmethod
    def _none_default_true(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return info.field_name != "fullscreen"
        return value

    @field_validator("display_duration", mode="before")
    @classmethod
    def _clamp_display(cls, value: Any) -> Any:
        return min(30, max(1, int(value or 5)))

    @field_validator("class_duration", mode="before")
    @classmethod
    def _clamp_class(cls, value: Any) -> Any:
        return min(30, max(3, int(value or 10)))


class PresentationImage(BaseModel):
    id: str
    category_id: str
    image_url: str
    file_type: str = "image"


class NewsItem(BaseModel):
    id: int | str
    title: str
    content: str = ""
    created_at: datetime | None = None


class Order(BaseModel):
    id: int | str
    created_at: datetime
    status: str = "pending"
    payment_status: str = "pending"
    customer_name: str = ""
    total_amount: float = 0

    @field_validator("created_at")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


def parse_record(
    model: type[BaseModel],
    row: Any,
    *,
    year: int | None = None,
    days: Iterable[date] | None = None,
) -> Any:
    """Validate one backend row into `model`.

    Raises:
        RecordShapeError: If the row is not a mapping or fails validation.
    """
    if not isinstance(row, dict):
        raise RecordShapeError(
            f"{model.__name__} row must be an object, got {type(row).__name__}",
            record=model.__name__,
            row=row,
        )
    context: dict[str, Any] = {}
    if year is not None:
        context["year"] = year
    if days is not None:
        context["days"] = tuple(days)
    try:
        return model.model_validate(row, context=context or None)
    except ValidationError as e:
        raise RecordShapeError(
            f"Malformed {model.__name__} row: {e.error_count()} error(s): {e}",
            record=model.__name__,
            row=row,
        ) from e


def parse_records(
    model: type[BaseModel],
    rows: Any,
    *,
    year: int | None = None,
    days: Iterable[date] | None = None,
) -> list[Any]:
    """Validate a list of backend rows; a null payload counts as empty."""
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise RecordShapeError(
            f"Expected a list of {model.__name__} rows, got {type(rows).__name__}",
            record=model.__name__,
            row=rows,
        )
    days = tuple(days) if days is not None else None
    return [parse_record(model, row, year=year, days=days) for row in rows]
