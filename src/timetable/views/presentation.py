"""PresentationView - the kiosk screen in the centre's lobby.

Shows a live clock, today's classes (in progress, up next, canceled, and
the finished ones latest first), a carousel of the classes in progress, a
carousel of images from the active presentation category, and the latest
news.

Timers (independent, owned by one TimerScope):
    refresh  every refresh_interval seconds -> refetch from the backend
    clock    every clock_interval seconds   -> advance clock and carousels
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime

from src.timetable.backend import SupabaseClient
from src.timetable.errors import BackendError, DataError
from src.timetable.logging import get_logger
from src.timetable.models import NewsItem, PresentationImage, PresentationSettings, ScheduleEntry
from src.timetable.placement import day_matches, is_canceled_on
from src.timetable.rotation import Rotation
from src.timetable.status import (
    StatusReading,
    active_entries,
    board,
    classify,
    past_entries,
)
from src.timetable.timers import TimerScope
from src.timetable.timeutil import weekday_name

log = get_logger(__name__)

LOAD_ERROR = "Failed to load data"


@dataclass(frozen=True)
class BoardCard:
    entry: ScheduleEntry
    reading: StatusReading
    canceled: bool


@dataclass(frozen=True)
class _Fetched:
    today: date
    settings: PresentationSettings
    rows: list[ScheduleEntry]
    images: list[PresentationImage]
    news: list[NewsItem]


@dataclass(frozen=True)
class PresentationSnapshot:
    now: datetime
    cards: list[BoardCard] = field(default_factory=list)
    past: list[BoardCard] = field(default_factory=list)
    active_class: ScheduleEntry | None = None
    image: PresentationImage | None = None
    news: list[NewsItem] = field(default_factory=list)
    error: str | None = None


class PresentationView:
    """State and timers of the kiosk presentation screen."""

    def __init__(
        self,
        client: SupabaseClient,
        *,
        refresh_interval: float = 60.0,
        clock_interval: float = 1.0,
        clock: Callable[[], datetime] = datetime.now,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.refresh_interval = refresh_interval
        self.clock_interval = clock_interval
        self._clock = clock
        self._monotonic = monotonic

        self.now = clock()
        self.settings = PresentationSettings()
        self.entries: list[ScheduleEntry] = []
        self.images: list[PresentationImage] = []
        self.news: list[NewsItem] = []
        self.error: str | None = None
        self.loaded = False

        started = monotonic()
        self.image_rotation: Rotation[PresentationImage] = Rotation(
            [], self.settings.display_duration, started
        )
        self.class_rotation: Rotation[ScheduleEntry] = Rotation(
            [], self.settings.class_duration, started
        )

    def _fetch(self, today: date) -> _Fetched:
        """Blocking backend reads for one refresh; touches no view state."""
        settings = self.client.get_presentation_settings()
        rows = self.client.list_schedules(day=weekday_name(today), year=today.year)
        images: list[PresentationImage] = []
        if settings.active_category_id:
            images = self.client.list_presentation_images(settings.active_category_id)
        news = self.client.list_news() if settings.show_news else []
        return _Fetched(today, settings, rows, images, news)

    def _apply(self, fetched: _Fetched) -> None:
        self.settings = fetched.settings
        self.entries = [entry for entry in fetched.rows if day_matches(entry, fetched.today)]
        self.images = fetched.images
        self.news = fetched.news
        self.error = None
        self.loaded = True
        log.info(
            "presentation_refreshed",
            classes=len(self.entries),
            images=len(self.images),
            news=len(self.news),
        )
        self._sync_rotations()

    def _fail(self, error: Exception) -> bool:
        log.error("presentation_refresh_failed", error=str(error), type=type(error).__name__)
        self.error = LOAD_ERROR
        return False

    def refresh(self) -> bool:
        """Refetch settings, today's classes, images and news.

        A failure keeps whatever was shown before and sets `error`.

        Returns:
            True on success.
        """
        try:
            fetched = self._fetch(self._clock().date())
        except (BackendError, DataError) as e:
            return self._fail(e)
        self._apply(fetched)
        return True

    async def refresh_async(self) -> bool:
        """Fetch in a worker thread, then apply the result on the event loop.

        View state and the carousels are only ever mutated on the loop, so a
        clock tick never interleaves with a rotation reset.
        """
        try:
            fetched = await asyncio.to_thread(self._fetch, self._clock().date())
        except (BackendError, DataError) as e:
            return self._fail(e)
        self._apply(fetched)
        return True

    def tick_clock(self) -> None:
        self.now = self._clock()
        self._sync_rotations()

    def _sync_rotations(self) -> None:
        mono = self._monotonic()
        self.image_rotation.update(self.images, self.settings.display_duration, mono)
        self.image_rotation.tick(mono)

        active = active_entries(self.entries, self.now, self.now.date())
        self.class_rotation.update(active, self.settings.class_duration, mono)
        self.class_rotation.tick(mono)

    def start(self, scope: TimerScope) -> None:
        """Arm the refresh and clock timers inside `scope`."""
        scope.every(self.refresh_interval, self.refresh_async, name="refresh", run_immediately=True)
        scope.every(self.clock_interval, self.tick_clock, name="clock")
        log.info(
            "presentation_started",
            refresh_interval=self.refresh_interval,
            clock_interval=self.clock_interval,
        )

    def _card(self, entry: ScheduleEntry, today: date) -> BoardCard:
        return BoardCard(entry, classify(entry, self.now), is_canceled_on(entry, today))

    def snapshot(self) -> PresentationSnapshot:
        today = self.now.date()
        cards: list[BoardCard] = []
        past: list[BoardCard] = []
        if self.settings.show_classes:
            cards = [self._card(entry, today) for entry in board(self.entries, self.now, today)]
            past = [self._card(entry, today) for entry in past_entries(self.entries, self.now)]
        return PresentationSnapshot(
            now=self.now,
            cards=cards,
            past=past,
            active_class=self.class_rotation.current if self.settings.show_classes else None,
            image=self.image_rotation.current,
            news=list(self.news),
            error=self.error,
        )
