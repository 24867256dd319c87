"""
Periodic re-evaluation of the current/next prayer.

The tracker owns the only mutable state in the application: the location
in use and the schedules for today and tomorrow. It recomputes them when
the location changes or the local date rolls over, and otherwise only
re-runs the (cheap) state evaluation on every tick.
"""

import datetime
import logging
import threading

import pytz

from salat.errors import PrayerTimeError
from salat.location import Location, LocationProvider
from salat.prayer_times import PrayerSchedule, compute_schedule
from salat.status import PrayerStatus, evaluate

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 60  # seconds


def _system_clock(tz) -> datetime.datetime:
    return datetime.datetime.now(tz)


class PrayerTracker:
    """
    Keeps a PrayerStatus up to date for one observer.

    location_provider -- LocationProvider asked once at start and on
                         refresh_location()
    on_update         -- called as on_update(schedule, status) after each tick
    notifier          -- optional NotificationScheduler, re-armed whenever
                         the schedule is recomputed
    clock             -- callable(tz) -> aware datetime, for tests
    """

    def __init__(
        self,
        location_provider: LocationProvider,
        params=None,
        on_update=None,
        notifier=None,
        interval: float = DEFAULT_INTERVAL,
        clock=_system_clock,
    ):
        self.location_provider = location_provider
        self.params = params
        self.on_update = on_update
        self.notifier = notifier
        self.interval = interval
        self.clock = clock

        self.location: Location | None = None
        self.tz = pytz.utc
        self.schedule: PrayerSchedule | None = None
        self.next_day: PrayerSchedule | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    # ──────────────────────────────────────────────────────────────────────
    # Location
    # ──────────────────────────────────────────────────────────────────────
    def refresh_location(self) -> Location:
        """Ask the provider again; the schedule is recomputed on the next tick."""
        self.set_location(self.location_provider.get_location())
        return self.location

    def set_location(self, location: Location) -> None:
        self.location = location
        try:
            self.tz = pytz.timezone(location.timezone)
        except pytz.UnknownTimeZoneError:
            logger.warning("Unknown timezone %r; using UTC", location.timezone)
            self.tz = pytz.utc
        self.schedule = None
        self.next_day = None

    # ──────────────────────────────────────────────────────────────────────
    # Evaluation
    # ──────────────────────────────────────────────────────────────────────
    def tick(self) -> PrayerStatus:
        """Recompute schedules if needed, evaluate, and notify on_update."""
        if self.location is None:
            self.refresh_location()

        now = self.clock(self.tz)
        today = now.astimezone(self.tz).date()
        if self.schedule is None or self.schedule.date != today:
            self._recompute(today, now)

        status = evaluate(self.schedule, now, self.next_day)
        if self.on_update:
            self.on_update(self.schedule, status)
        return status

    def _recompute(self, today: datetime.date, now: datetime.datetime) -> None:
        coordinate = self.location.coordinate
        # Both days or neither: a stale next_day would point at a past Fajr.
        self.schedule = self.next_day = None
        schedule = compute_schedule(coordinate, today, self.params, self.tz)
        next_day = compute_schedule(
            coordinate, today + datetime.timedelta(days=1), self.params, self.tz
        )
        self.schedule, self.next_day = schedule, next_day
        logger.info("Computed prayer schedule for %s in %s", today, self.location.city)
        if self.notifier is not None:
            self.notifier.schedule_day(self.schedule, now)

    # ──────────────────────────────────────────────────────────────────────
    # Loop and cancellation
    # ──────────────────────────────────────────────────────────────────────
    def run(self) -> None:
        """Tick every ``interval`` seconds until stop() is called."""
        while not self._stop.is_set():
            try:
                self.tick()
            except PrayerTimeError:
                logger.exception("Cannot compute prayer times for %s", self.location)
            self._stop.wait(self.interval)

    def start(self) -> threading.Thread:
        """Run the loop on a daemon thread."""
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="prayer-tracker", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        """Cancel the loop and any pending notifications."""
        self._stop.set()
        if self.notifier is not None:
            self.notifier.cancel()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self._thread = None

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()
