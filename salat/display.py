"""Text formatting for schedules, countdowns and Hijri dates."""

import datetime

from salat.hijri import HijriDate
from salat.prayer import Prayer
from salat.prayer_times import PrayerSchedule
from salat.status import PrayerStatus

PRAYER_DISPLAY = {
    Prayer.FAJR: "Fajr",
    Prayer.SUNRISE: "Sunrise / Shuruq",
    Prayer.DHUHR: "Dhuhr",
    Prayer.ASR: "Asr",
    Prayer.MAGHRIB: "Maghrib",
    Prayer.ISHA: "Isha",
}

CURRENT_MARK = "●"
NEXT_MARK = "▶"


def format_time(dt: datetime.datetime) -> str:
    """'HH:MM' in the datetime's own timezone."""
    return dt.strftime("%H:%M")


def format_countdown(seconds: int | None) -> str:
    """Format seconds into HH:MM:SS countdown string."""
    if seconds is None:
        return "--:--:--"
    if seconds < 0:
        return "00:00:00"
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h:02d}:{m:02d}:{s:02d}"


def format_hijri(hijri: HijriDate) -> str:
    return f"{hijri.day} {hijri.month_name} {hijri.year} H"


def render_schedule(schedule: PrayerSchedule, status: PrayerStatus | None = None) -> list[str]:
    """One line per schedule entry, marking the current and next prayer."""
    lines = []
    for prayer, starts in schedule.items():
        mark = " "
        if status is not None:
            if status.is_current(prayer):
                mark = CURRENT_MARK
            elif status.is_next(prayer) and not status.next_is_tomorrow:
                mark = NEXT_MARK
        lines.append(f" {mark} {PRAYER_DISPLAY[prayer]:<18}{format_time(starts):>6}")
    return lines


def render_status(status: PrayerStatus, now: datetime.datetime) -> str:
    """E.g. 'Now: Dhuhr | Next: Asr in 02:41:07'."""
    current = PRAYER_DISPLAY[status.current] if status.current else "—"
    following = PRAYER_DISPLAY[status.next]
    if status.next_is_tomorrow:
        following += " (tomorrow)"
    remaining = format_countdown(status.seconds_remaining(now))
    return f"Now: {current} | Next: {following} in {remaining}"
