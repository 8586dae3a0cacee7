"""Tests for mapping backend rows into typed records."""

import pytest

from factories import make_entry, make_row
from src.timetable.errors import RecordShapeError
from src.timetable.models import (
    ClassMode,
    PresentationSettings,
    ScheduleDraft,
    ScheduleEntry,
    Teacher,
    parse_record,
    parse_records,
)


class TestScheduleEntryMapping:
    def test_embedded_teacher_is_flattened(self):
        entry = make_entry()
        assert entry.teacher_name == "Amal Rahman"
        assert entry.teacher_id == 7
        assert entry.start_minutes == 540
        assert entry.end_minutes == 600
        assert entry.start_hour == 9

    def test_postgres_time_with_seconds_is_normalized(self):
        entry = make_entry(start_time="09:30:00", end_time="11:00:00")
        assert entry.start_time == "09:30"
        assert entry.end_time == "11:00"

    def test_missing_start_time_fails_fast(self):
        row = make_row()
        del row["start_time"]
        with pytest.raises(RecordShapeError) as excinfo:
            ScheduleEntry.from_row(row)
        assert excinfo.value.record == "ScheduleEntry"

    def test_malformed_time_fails_fast(self):
        with pytest.raises(RecordShapeError):
            ScheduleEntry.from_row(make_row(start_time="9am"))

    def test_unknown_weekday_rejected(self):
        with pytest.raises(RecordShapeError):
            ScheduleEntry.from_row(make_row(day="Funday"))

    def test_repeating_entry_needs_weekday(self):
        with pytest.raises(RecordShapeError):
            ScheduleEntry.from_row(make_row(day=None))

    def test_one_off_entry_needs_date_tag(self):
        with pytest.raises(RecordShapeError):
            ScheduleEntry.from_row(make_row(repeats=False, date_tag=None))

    def test_non_mapping_row_rejected(self):
        with pytest.raises(RecordShapeError):
            ScheduleEntry.from_row(["not", "a", "row"])

    def test_nulls_become_defaults(self):
        entry = make_entry(subject=None, grade=None, curriculum=None, description=None,
                           canceled_dates=None, room="  ", teachers=None)
        assert entry.subject == ""
        assert entry.grade == ""
        assert entry.room is None
        assert entry.teacher_name is None
        assert entry.canceled_dates == frozenset()

    def test_entries_are_immutable(self):
        entry = make_entry()
        with pytest.raises(Exception):
            entry.subject = "Chemistry"  # type: ignore[misc]


class TestDateKeys:
    def test_iso_cancellations_kept(self):
        entry = make_entry(canceled_dates=["2026-03-02", "2026-03-09"])
        assert entry.canceled_dates == frozenset({"2026-03-02", "2026-03-09"})

    def test_legacy_month_day_cancellations_migrated(self):
        entry = ScheduleEntry.from_row(make_row(canceled_dates=["3/2", "2026-03-09"]), year=2026)
        assert entry.canceled_dates == frozenset({"2026-03-02", "2026-03-09"})

    def test_legacy_date_tag_migrated(self):
        entry = ScheduleEntry.from_row(make_row(repeats=False, date_tag="3/3"), year=2026)
        assert entry.date_tag == "2026-03-03"

    def test_garbage_cancellation_rejected(self):
        with pytest.raises(RecordShapeError):
            ScheduleEntry.from_row(make_row(canceled_dates=["yesterday"]))

    def test_cancellations_must_be_a_list(self):
        with pytest.raises(RecordShapeError):
            ScheduleEntry.from_row(make_row(canceled_dates="2026-03-02"))


class TestClassMode:
    def test_default_mode_is_class(self):
        assert make_entry().mode is ClassMode.CLASS

    def test_mode_column_wins(self):
        assert make_entry(mode="seminar", description="[Mock]").mode is ClassMode.SEMINAR

    def test_mode_from_description_tag(self):
        entry = make_entry(description="[mock] Paper 2 practice")
        assert entry.mode is ClassMode.MOCK
        assert entry.display_description == "Paper 2 practice"

    def test_unknown_mode_rejected(self):
        with pytest.raises(RecordShapeError):
            ScheduleEntry.from_row(make_row(mode="Workshop"))


def test_parse_records_handles_null_and_rejects_non_list():
    assert parse_records(Teacher, None) == []
    with pytest.raises(RecordShapeError):
        parse_records(Teacher, {"id": 1, "name": "x"})


def test_teacher_mapping():
    teacher = parse_record(Teacher, {"id": 3, "name": "Noor", "subject": None, "user_id": "u-1"})
    assert teacher.subject == ""
    assert teacher.user_id == "u-1"


def test_presentation_settings_clamped_and_defaulted():
    settings = parse_record(
        PresentationSettings,
        {"display_duration": 0, "class_duration": 99, "show_news": None, "fullscreen": None},
    )
    assert settings.display_duration == 5
    assert settings.class_duration == 30
    assert settings.show_news is True
    assert settings.fullscreen is False

    assert PresentationSettings(display_duration=45, class_duration=1).display_duration == 30
    assert PresentationSettings(class_duration=1).class_duration == 3


def test_schedule_draft_validates_times():
    draft = ScheduleDraft(teacher_id=7, day="Monday", date_tag="2026-03-02",
                          start_time="9:00", end_time="10:00")
    assert draft.to_row()["start_time"] == "09:00"
    with pytest.raises(ValueError):
        ScheduleDraft(teacher_id=7, day="Monday", date_tag="2026-03-02",
                      start_time="10:00", end_time="09:00")
