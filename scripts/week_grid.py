"""Print a teacher's weekly schedule grid, or cancel a class for one date.

Standalone CLI script over the timetable library. Reads Supabase settings
from the environment / .env, loads the teacher's schedules (including other
teacher rows with the same name) and prints the Monday-start week.

Run with: python scripts/week_grid.py --teacher-id 3
Next week: python scripts/week_grid.py --teacher-id 3 --week-offset 1
JSON:     python scripts/week_grid.py --teacher-id 3 --json
Cancel:   python scripts/week_grid.py --cancel 42 --date 2026-03-02

Exit codes:
  0 = success
  1 = error (message on stderr)
"""

import argparse
import json
import os
import sys
from datetime import date, datetime, timedelta

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.timetable.backend import SupabaseClient  # noqa: E402
from src.timetable.config import get_config  # noqa: E402
from src.timetable.logging import setup_logging_from_config  # noqa: E402
from src.timetable.placement import span_hours  # noqa: E402
from src.timetable.timeutil import format_12h, weekday_name  # noqa: E402
from src.timetable.views.week import WeekView  # noqa: E402


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _parse_args() -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Print a teacher's weekly schedule grid.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--teacher-id",
        type=str,
        default=None,
        help="Teacher row id (default: first teacher by name).",
    )
    parser.add_argument(
        "--week-offset",
        type=int,
        default=0,
        help="Weeks from the current week, negative for past weeks.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output the week's placed entries as JSON instead of a table.",
    )
    parser.add_argument(
        "--cancel",
        type=str,
        default=None,
        metavar="SCHEDULE_ID",
        help="Cancel this schedule for --date instead of printing the grid.",
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Date (YYYY-MM-DD) for --cancel (default: today).",
    )
    return parser.parse_args()


def _format_week(view: WeekView) -> str:
    """Render the placed entries of the displayed week, one block per day."""
    lines: list[str] = []
    teacher = view.selected.name if view.selected else "-"
    lines.append(f"Week of {view.week_start.isoformat()}  ({teacher})")
    lines.append("=" * 60)
    for day in view.days:
        placed = [entry for cell in view.cells() if cell.day == day for entry in cell.entries]
        lines.append(f"{weekday_name(day):<10} {day.isoformat()}")
        if not placed:
            lines.append("    (no classes)")
        for entry in placed:
            room = f" - Room {entry.room}" if entry.room else ""
            lines.append(
                f"    {format_12h(entry.start_time):>8} - {format_12h(entry.end_time):<8} "
                f"{entry.subject} {entry.grade}{room} [{entry.mode.value}]"
            )
    return "\n".join(lines)


def _week_json(view: WeekView) -> list[dict]:
    result = []
    for cell in view.cells():
        for entry in cell.entries:
            result.append(
                {
                    "date": cell.day.isoformat(),
                    "hour": cell.hour,
                    "span_hours": span_hours(entry),
                    **entry.model_dump(mode="json", exclude={"canceled_dates"}),
                }
            )
    return result


def main(args: argparse.Namespace) -> None:
    config = get_config()
    setup_logging_from_config(config)
    client = SupabaseClient.from_config(config)

    if args.cancel is not None:
        target = args.date or date.today()
        entries = client.list_schedules(year=target.year)
        entry = next((e for e in entries if str(e.id) == args.cancel), None)
        if entry is None:
            raise ValueError(f"Schedule {args.cancel} not found")
        client.cancel_schedule_on(entry, target)
        _log(f"  Canceled schedule {entry.id} on {target.isoformat()}")
        return

    view = WeekView(
        client,
        anchor=date.today() + timedelta(weeks=args.week_offset),
        hours=range(config.grid_first_hour, config.grid_last_hour + 1),
        hour_px=config.hour_height_px,
    )
    if not view.load(args.teacher_id):
        raise RuntimeError(view.error)
    _log(f"  Loaded {len(view.entries)} schedules")

    if args.json:
        print(json.dumps(_week_json(view), indent=2))
    else:
        print(_format_week(view))
        offset = view.time_line_px(datetime.now())
        if offset is not None:
            _log(f"  Current-time line at {offset:.0f}px")


if __name__ == "__main__":
    args = _parse_args()
    try:
        main(args)
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
