"""State behind the prayer-times widget, kept free of tkinter so it can be tested."""

import datetime
import enum
import logging
from typing import Callable, List, Optional, Tuple

from azan_times import sync_cache
from azan_times.prayer_api import (
    MAIN_PRAYERS,
    DateInfo,
    FetchResult,
    Ok,
    PrayerTimings,
    adjust_time,
    fetch_prayer_times,
    parse_delay,
)

LOGGER = logging.getLogger(__name__)


class ViewState(enum.Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


def run_inline(fetch: Callable[[], FetchResult], done: Callable[[FetchResult], None]) -> None:
    """Default fetch runner: fetch and deliver on the calling thread."""
    done(fetch())


class PrayerTimesModel:
    """
    Timings, date info, delays, sync watermark and error for one mounted widget.

    fetcher is called with no arguments and must return a FetchResult.
    runner(fetch, done) decides where the fetch happens; it must eventually
    call done(result) on the thread that owns the model. With cache=True the
    watermark and the data it stamps are read from and written to
    sync_cache, so a restart within STALE_AFTER skips the fetch.
    """

    def __init__(
        self,
        fetcher: Callable[[], FetchResult] = fetch_prayer_times,
        runner=run_inline,
        cache: bool = False,
    ):
        self._fetcher = fetcher
        self._runner = runner
        self.cache = cache
        self.timings: Optional[PrayerTimings] = None
        self.date: Optional[DateInfo] = None
        self.error: Optional[str] = None
        self.last_sync: Optional[datetime.datetime] = None
        self.delays = {name: 0 for name in MAIN_PRAYERS}
        self.alive = False
        self.in_flight = False

    @property
    def state(self) -> ViewState:
        if self.error is not None:
            return ViewState.ERROR
        if self.timings is None or self.date is None:
            return ViewState.LOADING
        return ViewState.READY

    # ──────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ──────────────────────────────────────────────────────────────────────
    def mount(self, now: datetime.datetime = None) -> bool:
        """Restore any cached record, then fetch if stale. True if a fetch started."""
        self.alive = True
        if self.cache:
            record = sync_cache.load_sync()
            if record is not None:
                self.timings = record.timings
                self.date = record.date
                self.last_sync = record.last_sync
        return self.sync_if_stale(now)

    def unmount(self) -> None:
        self.alive = False

    # ──────────────────────────────────────────────────────────────────────
    # Sync
    # ──────────────────────────────────────────────────────────────────────
    def needs_sync(self, now: datetime.datetime = None) -> bool:
        return self.alive and sync_cache.is_stale(self.last_sync, now)

    def sync_if_stale(self, now: datetime.datetime = None) -> bool:
        if self.in_flight:
            return False
        if not self.needs_sync(now):
            LOGGER.debug("Prayer times synced at %s; skipping fetch", self.last_sync)
            return False
        self.in_flight = True
        self._runner(self._fetcher, self._on_fetched)
        return True

    def _on_fetched(self, result: FetchResult) -> None:
        self.in_flight = False
        self.apply_result(result)

    def apply_result(self, result: FetchResult, now: datetime.datetime = None) -> None:
        """Store a fetch result. Results arriving after unmount are dropped."""
        if not self.alive:
            LOGGER.debug("Discarding prayer times result for unmounted widget")
            return
        if not isinstance(result, Ok):
            self.error = result.message
            return
        self.timings = result.timings
        self.date = result.date
        self.last_sync = now or sync_cache.utcnow()
        if self.cache:
            try:
                sync_cache.save_sync(self.last_sync, self.timings, self.date)
            except OSError as exc:
                LOGGER.warning("Could not save sync cache: %s", exc)

    # ──────────────────────────────────────────────────────────────────────
    # Delays
    # ──────────────────────────────────────────────────────────────────────
    def set_delay(self, prayer: str, raw_value) -> int:
        if prayer not in self.delays:
            raise KeyError(prayer)
        self.delays[prayer] = parse_delay(raw_value)
        return self.delays[prayer]

    def rows(self) -> List[Tuple[str, str, str, int]]:
        """(prayer, base time, adjusted time, delay) for each main prayer once ready."""
        if self.state is not ViewState.READY:
            return []
        rows = []
        for name in MAIN_PRAYERS:
            base = self.timings.get(name)
            delay = self.delays[name]
            rows.append((name, base, adjust_time(base, delay), delay))
        return rows
