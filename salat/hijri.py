"""
Gregorian to Hijri conversion with the Kuwaiti arithmetic algorithm.

The Hijri calendar is lunar and its months begin on moon sighting, which
no formula predicts. The arithmetic calendar used here is a 30-year cycle
of 10631 days with fixed month lengths, so results may differ from the
officially announced date by a day. Use it for display, not for deciding
the start of Ramadan or the Eids.
"""

import datetime
import math
from dataclasses import dataclass

HIJRI_MONTH_NAMES = (
    "Muharram",
    "Safar",
    "Rabi al-Awwal",
    "Rabi al-Thani",
    "Jumada al-Ula",
    "Jumada al-Akhirah",
    "Rajab",
    "Sha'ban",
    "Ramadan",
    "Shawwal",
    "Dhu al-Qi'dah",
    "Dhu al-Hijjah",
)

# First (proleptic Gregorian) date the arithmetic maps to 1 Muharram 1 AH.
HIJRI_EPOCH = datetime.date(622, 7, 18)

_ORDINAL_TO_JDN = 1721425       # date.toordinal() + this = Julian day number
_ASTRONOMICAL_EPOCH = 1948084
_CYCLE_DAYS = 10631
_MEAN_YEAR = _CYCLE_DAYS / 30.0
_SHIFT = 8.01 / 60.0


@dataclass(frozen=True)
class HijriDate:
    day: int
    month: int
    year: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"Hijri month must be within 1-12, got {self.month}")
        if not 1 <= self.day <= 30:
            raise ValueError(f"Hijri day must be within 1-30, got {self.day}")
        if self.year < 1:
            raise ValueError(f"Hijri year must be >= 1, got {self.year}")

    @property
    def month_name(self) -> str:
        return HIJRI_MONTH_NAMES[self.month - 1]

    def __str__(self) -> str:
        return f"{self.day} {self.month_name} {self.year} AH"


def to_hijri(date: datetime.date, adjustment: int = 0) -> HijriDate:
    """
    Convert a Gregorian date to an approximate Hijri date (±1 day).

    ``adjustment`` shifts the result by whole days, for users who align the
    display with a local moon-sighting announcement. Raises ValueError for
    dates before HIJRI_EPOCH.
    """
    if isinstance(date, datetime.datetime):
        date = date.date()
    shifted = date + datetime.timedelta(days=adjustment)
    if shifted < HIJRI_EPOCH:
        raise ValueError(f"{shifted} is before the Hijri epoch ({HIJRI_EPOCH})")

    z = shifted.toordinal() + _ORDINAL_TO_JDN - _ASTRONOMICAL_EPOCH
    cycle = z // _CYCLE_DAYS
    z -= _CYCLE_DAYS * cycle

    year_in_cycle = math.floor((z - _SHIFT) / _MEAN_YEAR)
    year = 30 * cycle + year_in_cycle
    z -= math.floor(year_in_cycle * _MEAN_YEAR + _SHIFT)

    month = min(math.floor((z + 28.5001) / 29.5), 12)
    day = z - math.floor(29.5001 * month - 29)
    return HijriDate(day=day, month=month, year=year)
