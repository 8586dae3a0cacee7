"""Timetable logic for the tutoring centre console.

Schedule placement on the weekly grid, class status classification, kiosk
carousels, the console session and a thin Supabase client.
"""

from src.timetable.models import ClassMode, ScheduleEntry, Teacher
from src.timetable.placement import DISPLAY_HOURS, occupants
from src.timetable.rotation import Rotation
from src.timetable.status import ClassStatus, StatusReading, classify

__all__ = [
    "ClassMode",
    "ClassStatus",
    "DISPLAY_HOURS",
    "Rotation",
    "ScheduleEntry",
    "StatusReading",
    "Teacher",
    "classify",
    "occupants",
]
