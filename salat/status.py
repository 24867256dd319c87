"""Which prayer is current and which comes next at a given instant."""

import datetime
from dataclasses import dataclass

from salat.prayer import Prayer
from salat.prayer_times import PrayerSchedule, seconds_until


@dataclass(frozen=True)
class PrayerStatus:
    """
    current   -- prayer whose time has begun, None before Fajr and between
                 Sunrise and Dhuhr (Sunrise is never current)
    next      -- first schedule entry strictly after the reference instant
    next_time -- when ``next`` begins; None only when it is tomorrow's Fajr
                 and tomorrow's schedule was not supplied
    """

    current: Prayer | None
    next: Prayer
    next_time: datetime.datetime | None
    next_is_tomorrow: bool = False

    def is_current(self, prayer: Prayer) -> bool:
        return self.current is prayer

    def is_next(self, prayer: Prayer) -> bool:
        return self.next is prayer

    def seconds_remaining(self, now: datetime.datetime) -> int | None:
        if self.next_time is None:
            return None
        return seconds_until(self.next_time, now)


def evaluate(
    schedule: PrayerSchedule,
    reference: datetime.datetime,
    next_day: PrayerSchedule | None = None,
) -> PrayerStatus:
    """
    Classify ``reference`` against ``schedule``.

    A prayer counts as begun at its exact instant. After Isha the next
    prayer is tomorrow's Fajr; pass ``next_day`` (the schedule for the
    following date) to get its instant.
    """
    entries = schedule.items()

    current = None
    for index, (prayer, starts) in enumerate(entries):
        following = entries[index + 1][1] if index + 1 < len(entries) else None
        if starts <= reference and (following is None or reference < following):
            if prayer.is_prayer:
                current = prayer
            break

    for prayer, starts in entries:
        if starts > reference:
            return PrayerStatus(current=current, next=prayer, next_time=starts)

    next_time = next_day.fajr if next_day is not None else None
    return PrayerStatus(
        current=current,
        next=Prayer.FAJR,
        next_time=next_time,
        next_is_tomorrow=True,
    )
