"""Desktop reminders for upcoming prayers (plyer notifications on timer threads)."""

import datetime
import logging
import threading

from plyer import notification as plyer_notification

from salat.display import PRAYER_DISPLAY
from salat.prayer import Prayer
from salat.prayer_times import PrayerSchedule, seconds_until

logger = logging.getLogger(__name__)

APP_NAME = "Salat"
APP_ICON = ""  # Path to icon file; empty = default

DEFAULT_REMINDER_MINUTES = (15, 5)


def send_notification(title: str, message: str, timeout: int = 10) -> None:
    """Send a desktop notification via plyer (cross-platform)."""
    kwargs = dict(
        app_name=APP_NAME,
        title=title,
        message=message,
        timeout=timeout,
    )
    if APP_ICON:
        kwargs["app_icon"] = APP_ICON
    try:
        plyer_notification.notify(**kwargs)
    except Exception as exc:
        # plyer raises backend-specific errors (NotImplementedError, dbus, ...)
        logger.warning("Desktop notification failed: %s", exc)


def notify_reminder(prayer: Prayer, minutes: int, callback=None) -> None:
    """
    Send a desktop notification N minutes before prayer time.
    Optionally calls callback(title, message), e.g. to echo it in a terminal.
    """
    name = PRAYER_DISPLAY[prayer]
    title = f"🕌 {name} — {minutes} minutes"
    message = f"{name} prayer will begin in {minutes} minutes."
    send_notification(title, message, timeout=15)
    if callback:
        callback(title, message)


def notify_prayer_time(prayer: Prayer, callback=None) -> None:
    """Send a desktop notification when prayer time arrives."""
    name = PRAYER_DISPLAY[prayer]
    title = f"🕌 {name} — Time to Pray!"
    message = f"It is now time for {name} prayer."
    send_notification(title, message, timeout=30)
    if callback:
        callback(title, message)


class NotificationScheduler:
    """
    Arms reminder and prayer-time notifications for a day's schedule.

    Timers are daemon threads; cancel() must be called when the consumer
    shuts down or the schedule is replaced.
    """

    def __init__(self, reminder_minutes=DEFAULT_REMINDER_MINUTES, callback=None):
        self.reminder_minutes = tuple(sorted({int(m) for m in reminder_minutes if m > 0}, reverse=True))
        self.callback = callback
        self._timers: list = []
        self._lock = threading.Lock()

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._timers)

    def schedule_prayer(self, prayer: Prayer, seconds_until_prayer: int) -> list:
        """
        Schedule reminders before ``prayer`` and an alert exactly at its time.

        Reminders whose moment has already passed are skipped. Returns the
        Timer objects that were started.
        """
        timers = []

        for remind_minutes in self.reminder_minutes:
            delay = seconds_until_prayer - remind_minutes * 60
            if delay > 0:
                t = threading.Timer(
                    delay,
                    notify_reminder,
                    args=(prayer, remind_minutes, self.callback),
                )
                t.daemon = True
                t.start()
                timers.append(t)

        if seconds_until_prayer > 0:
            t = threading.Timer(
                seconds_until_prayer,
                notify_prayer_time,
                args=(prayer, self.callback),
            )
            t.daemon = True
            t.start()
            timers.append(t)

        with self._lock:
            self._timers.extend(timers)
        return timers

    def schedule_day(self, schedule: PrayerSchedule, now: datetime.datetime) -> int:
        """Replace all pending timers with those for the prayers still ahead in ``schedule``."""
        self.cancel()
        count = 0
        for prayer, starts in schedule.items():
            if not prayer.is_prayer:
                continue
            secs = seconds_until(starts, now)
            if secs > 0:
                count += len(self.schedule_prayer(prayer, secs))
        logger.debug("Armed %d notification timers for %s", count, schedule.date)
        return count

    def cancel(self) -> None:
        with self._lock:
            timers, self._timers = self._timers, []
        for t in timers:
            t.cancel()
