"""Run the kiosk presentation board in a terminal.

Refetches today's classes, settings, images and news every minute, ticks the
clock every second, and redraws the board on stdout at a fixed interval.
All timers are owned by one TimerScope and cancelled on exit.

Run with: python scripts/presentation_board.py
Once:     python scripts/presentation_board.py --once
Timed:    python scripts/presentation_board.py --run-for 300 --redraw 5

Exit codes:
  0 = success (Ctrl-C also exits cleanly)
  1 = error (message on stderr)
"""

import argparse
import asyncio
import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.timetable.backend import SupabaseClient  # noqa: E402
from src.timetable.config import get_config  # noqa: E402
from src.timetable.logging import setup_logging_from_config  # noqa: E402
from src.timetable.status import ClassStatus  # noqa: E402
from src.timetable.timers import TimerScope  # noqa: E402
from src.timetable.timeutil import format_12h  # noqa: E402
from src.timetable.views.presentation import (  # noqa: E402
    PresentationSnapshot,
    PresentationView,
)

_LABELS = {
    ClassStatus.ACTIVE: "In Progress",
    ClassStatus.UPCOMING: "Up Next",
    ClassStatus.PAST: "",
}


def _parse_args() -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Run the kiosk presentation board in a terminal.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Fetch once, print the board and exit.",
    )
    parser.add_argument(
        "--redraw",
        type=float,
        default=5.0,
        help="Seconds between redraws of the board (default: 5).",
    )
    parser.add_argument(
        "--run-for",
        type=float,
        default=None,
        help="Stop after this many seconds (default: run until Ctrl-C).",
    )
    return parser.parse_args()


def _render(snapshot: PresentationSnapshot) -> str:
    now = snapshot.now
    lines = [
        now.strftime("%A"),
        f"{now.strftime('%I:%M %p')}    {now.strftime('%B')} {now.day}, {now.year}",
        "-" * 60,
    ]
    if snapshot.error:
        lines.append(snapshot.error)
    elif not snapshot.cards and not snapshot.past:
        lines.append("No classes scheduled for today.")

    for card in snapshot.cards:
        entry = card.entry
        if card.canceled:
            label = "Canceled"
        elif card.reading.status is ClassStatus.ACTIVE:
            label = f"{_LABELS[ClassStatus.ACTIVE]} {card.reading.progress}%"
        else:
            label = _LABELS[card.reading.status]
        teacher = entry.teacher_name or "Unknown Teacher"
        lines.append(
            f"[{label:<16}] {format_12h(entry.start_time)} - {format_12h(entry.end_time)}  "
            f"{teacher} ({entry.subject}) {entry.grade} - {entry.curriculum}"
        )

    if snapshot.past:
        lines.append("Past Classes")
    for card in snapshot.past:
        entry = card.entry
        status = "Canceled" if card.canceled else "Done"
        lines.append(
            f"[{status:<16}] {format_12h(entry.start_time)} - {format_12h(entry.end_time)}  "
            f"{entry.teacher_name or 'Unknown Teacher'} ({entry.subject}) {entry.grade}"
        )

    if snapshot.active_class is not None:
        lines.append(f"Now teaching: {snapshot.active_class.teacher_name} - {snapshot.active_class.subject}")
    if snapshot.image is not None:
        lines.append(f"Image: {snapshot.image.image_url}")
    for item in snapshot.news[:3]:
        lines.append(f"News: {item.title}")
    return "\n".join(lines)


async def main(args: argparse.Namespace) -> None:
    config = get_config()
    setup_logging_from_config(config)
    client = SupabaseClient.from_config(config)
    view = PresentationView(
        client,
        refresh_interval=config.refresh_interval_seconds,
        clock_interval=config.clock_interval_seconds,
    )

    if args.once:
        await view.refresh_async()
        view.tick_clock()
        print(_render(view.snapshot()))
        return

    async with TimerScope("presentation") as scope:
        view.start(scope)
        scope.every(args.redraw, lambda: print(_render(view.snapshot()) + "\n"), name="redraw")
        if args.run_for is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(args.run_for)


if __name__ == "__main__":
    args = _parse_args()
    try:
        asyncio.run(main(args))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
