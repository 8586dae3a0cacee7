from datetime import date, datetime, time

import pytest

from src.timetable.errors import TimeFormatError
from src.timetable.timeutil import (
    date_key,
    format_12h,
    hour_to_hhmm,
    migrate_date_key,
    minutes_of,
    normalize_hhmm,
    parse_hhmm,
    week_days,
    week_start,
    weekday_name,
)


@pytest.mark.parametrize(
    ("text", "minutes"),
    [("00:00", 0), ("09:00", 540), ("9:05", 545), ("13:30:00", 810), ("24:00", 1440)],
)
def test_parse_hhmm(text: str, minutes: int) -> None:
    assert parse_hhmm(text) == minutes


@pytest.mark.parametrize("text", ["9", "0900", "", "ab:cd", "12:60", "25:00", "24:30", "9:5"])
def test_parse_hhmm_rejects_malformed(text: str) -> None:
    with pytest.raises(TimeFormatError):
        parse_hhmm(text)


def test_parse_hhmm_rejects_non_string() -> None:
    with pytest.raises(TimeFormatError):
        parse_hhmm(None)  # type: ignore[arg-type]


def test_time_format_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        parse_hhmm("noon")


def test_format_12h() -> None:
    assert format_12h("13:05") == "1:05 PM"
    assert format_12h("00:30") == "12:30 AM"
    assert format_12h("12:00") == "12:00 PM"
    assert format_12h("9:15") == "9:15 AM"


def test_normalize_and_hour_helpers() -> None:
    assert normalize_hhmm("9:05:00") == "09:05"
    assert hour_to_hhmm(9) == "09:00"
    assert minutes_of(datetime(2026, 3, 2, 10, 1, 59)) == 601
    assert minutes_of(time(8, 59)) == 539


def test_weekday_and_date_key() -> None:
    assert weekday_name(date(2026, 3, 2)) == "Monday"
    assert weekday_name(date(2026, 3, 8)) == "Sunday"
    assert date_key(date(2026, 3, 2)) == "2026-03-02"


def test_migrate_date_key() -> None:
    assert migrate_date_key("2026-03-02", 2020) == "2026-03-02"
    assert migrate_date_key("3/2", 2026) == "2026-03-02"
    assert migrate_date_key("12/31", 2025) == "2025-12-31"
    with pytest.raises(TimeFormatError):
        migrate_date_key("2/30", 2026)
    with pytest.raises(TimeFormatError):
        migrate_date_key("March 2", 2026)
    with pytest.raises(TimeFormatError):
        migrate_date_key("2026-13-01", 2026)


def test_week_is_monday_based() -> None:
    sunday = date(2026, 3, 8)
    assert week_start(sunday) == date(2026, 3, 2)
    days = week_days(date(2026, 3, 4))
    assert len(days) == 7
    assert days[0] == date(2026, 3, 2)
    assert days[-1] == date(2026, 3, 8)


def test_legacy_key_takes_year_of_matching_displayed_day() -> None:
    new_year_week = week_days(date(2026, 12, 28))
    assert migrate_date_key("1/2", 2026, new_year_week) == "2027-01-02"
    assert migrate_date_key("12/29", 2026, new_year_week) == "2026-12-29"
    assert migrate_date_key("3/4", 2026, new_year_week) == "2026-03-04"
