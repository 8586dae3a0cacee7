"""Row and response builders shared by the tests."""

import json
from datetime import date
from typing import Any
from unittest.mock import MagicMock

from src.timetable.models import ScheduleEntry

MONDAY = date(2026, 3, 2)
TUESDAY = date(2026, 3, 3)


def make_row(**overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": 1,
        "teacher_id": 7,
        "day": "Monday",
        "start_time": "09:00",
        "end_time": "10:00",
        "repeats": True,
        "date_tag": None,
        "subject": "Physics",
        "grade": "Grade 9",
        "curriculum": "Edexcel",
        "room": None,
        "description": "",
        "canceled_dates": [],
        "teachers": {"id": 7, "name": "Amal Rahman", "subject": "Physics"},
    }
    row.update(overrides)
    return row


def make_entry(**overrides: Any) -> ScheduleEntry:
    return ScheduleEntry.from_row(make_row(**overrides), year=2026)


def fake_response(status: int = 200, payload: Any = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    body = b"" if payload is None else json.dumps(payload).encode()
    response.content = body
    response.text = body.decode()
    response.json.return_value = payload
    return response
