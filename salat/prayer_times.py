"""Compute the daily prayer schedule from solar positions."""

import calendar
import datetime
import logging
import math
from dataclasses import dataclass, replace

import pytz

from salat.errors import CalculationError, UnsolvableAngleError
from salat.methods import (
    CalculationMethod,
    CalculationParameters,
    PolarCircleResolution,
    Rounding,
    Shafaq,
)
from salat.prayer import PRAYER_ORDER, Prayer
from salat.solar import GeoCoordinate, SolarDay

logger = logging.getLogger(__name__)

DEFAULT_METHOD = CalculationMethod.MOONSIGHTING_COMMITTEE

# Above this latitude the Moonsighting Committee uses 1/7 of the night.
MOONSIGHTING_HIGH_LATITUDE = 55.0

# Below this latitude an out-of-order day comes from the parameters, not
# from the polar sun, and is reported instead of resolved.
POLAR_LATITUDE = 60.0
LATITUDE_VARIATION_STEP = 0.5

# Nearest-day search covers half a year either way.
MAX_DAY_SEARCH = 183


@dataclass(frozen=True)
class PrayerSchedule:
    """Six timezone-aware instants for one calendar date, strictly increasing."""

    date: datetime.date
    fajr: datetime.datetime
    sunrise: datetime.datetime
    dhuhr: datetime.datetime
    asr: datetime.datetime
    maghrib: datetime.datetime
    isha: datetime.datetime

    def __post_init__(self):
        entries = self.items()
        for (earlier, t1), (later, t2) in zip(entries, entries[1:]):
            if not t1 < t2:
                raise CalculationError(
                    f"{later.value} ({t2.isoformat()}) is not after "
                    f"{earlier.value} ({t1.isoformat()}) on {self.date}"
                )

    def items(self) -> list[tuple[Prayer, datetime.datetime]]:
        return [
            (Prayer.FAJR, self.fajr),
            (Prayer.SUNRISE, self.sunrise),
            (Prayer.DHUHR, self.dhuhr),
            (Prayer.ASR, self.asr),
            (Prayer.MAGHRIB, self.maghrib),
            (Prayer.ISHA, self.isha),
        ]

    def time_for(self, prayer: Prayer) -> datetime.datetime:
        return dict(self.items())[prayer]


@dataclass(frozen=True)
class SunnahTimes:
    middle_of_the_night: datetime.datetime
    last_third_of_the_night: datetime.datetime


def compute_schedule(
    coordinate: GeoCoordinate,
    date: datetime.date,
    params: CalculationParameters | None = None,
    tz=None,
) -> PrayerSchedule:
    """
    Compute Fajr, Sunrise, Dhuhr, Asr, Maghrib and Isha for ``date``.

    ``tz`` is a pytz timezone or zone name; instants are returned in UTC
    when it is None. With a zone, the six instants fall on ``date`` in that
    zone's local calendar. Only the calendar part of ``date`` is used, so
    the result does not depend on when the function is called.

    When the day cannot be built as is (no sunrise or sunset, Asr never
    reached, or times that collapse onto each other near the poles) the
    polar resolution searches for the nearest latitude or date whose whole
    schedule is usable. Raises UnsolvableAngleError when that search finds
    nothing, and CalculationError when the resolution is UNRESOLVED and
    the times are out of order.
    """
    if params is None:
        params = CalculationParameters.for_method(DEFAULT_METHOD)
    if isinstance(date, datetime.datetime):
        date = date.date()
    if isinstance(tz, str):
        tz = pytz.timezone(tz)

    solar_date = _solar_date(date, tz)
    try:
        return _build_schedule(
            coordinate, date, solar_date, params, tz, *_solar_pair(coordinate, solar_date)
        )
    except CalculationError as exc:
        resolution = params.polar_resolution
        if resolution is PolarCircleResolution.UNRESOLVED:
            raise
        if not isinstance(exc, UnsolvableAngleError) and abs(coordinate.latitude) < POLAR_LATITUDE:
            raise
        return _resolve_polar(coordinate, date, solar_date, params, tz, exc)


def sunnah_times(schedule: PrayerSchedule, next_day: PrayerSchedule) -> SunnahTimes:
    """Middle and last third of the night, measured from Maghrib to the next Fajr."""
    maghrib = schedule.maghrib.astimezone(pytz.utc)
    night = next_day.fajr - schedule.maghrib
    zone = getattr(schedule.maghrib.tzinfo, "zone", None)
    tz = pytz.timezone(zone) if zone else schedule.maghrib.tzinfo
    return SunnahTimes(
        middle_of_the_night=_round(maghrib + night / 2, Rounding.NEAREST).astimezone(tz),
        last_third_of_the_night=_round(maghrib + night * 2 / 3, Rounding.NEAREST).astimezone(tz),
    )


def seconds_until(target_dt: datetime.datetime, now: datetime.datetime = None) -> int:
    """Return seconds from now until target_dt (can be negative if past)."""
    if now is None:
        now = datetime.datetime.now(target_dt.tzinfo)
    delta = target_dt - now
    return int(delta.total_seconds())


def _solar_date(date: datetime.date, tz) -> datetime.date:
    """UTC date of local noon, so zones far from their longitude keep their own day."""
    if tz is None:
        return date
    noon = tz.localize(datetime.datetime(date.year, date.month, date.day, 12))
    return noon.astimezone(pytz.utc).date()


def _solar_pair(coordinate: GeoCoordinate, date: datetime.date) -> tuple[SolarDay, SolarDay]:
    return (
        SolarDay.for_date(coordinate, date),
        SolarDay.for_date(coordinate, date + datetime.timedelta(days=1)),
    )


def _build_schedule(
    coordinate: GeoCoordinate,
    date: datetime.date,
    solar_date: datetime.date,
    params: CalculationParameters,
    tz,
    solar: SolarDay,
    tomorrow: SolarDay,
) -> PrayerSchedule:
    """
    Schedule for ``date`` from the events of ``solar``.

    Event hours are counted from 00:00 UTC of ``solar_date`` whichever day
    ``solar`` was computed for, so a borrowed day keeps its clock times.
    """
    sunrise = solar.sunrise()
    sunset = solar.sunset()
    next_sunrise = tomorrow.sunrise()
    if sunrise is None or sunset is None or next_sunrise is None:
        raise UnsolvableAngleError(
            f"The sun does not rise or set at latitude {solar.coordinate.latitude:g} on {solar.date}"
        )
    dhuhr = solar.transit
    asr = solar.asr(params.madhab.shadow_factor)
    if asr is None:
        raise UnsolvableAngleError(
            f"Asr altitude not reached at latitude {solar.coordinate.latitude:g} on {solar.date}"
        )
    night = 24.0 + next_sunrise - sunset

    fajr = _fajr(solar, params, coordinate.latitude, solar_date, sunrise, night)
    isha = _isha(solar, params, coordinate.latitude, solar_date, sunset, night)

    maghrib = sunset
    if params.maghrib_angle:
        angle_based = solar.time_for_altitude(-params.maghrib_angle, after_transit=True)
        if angle_based is not None and angle_based < isha:
            maghrib = angle_based

    hours = {
        Prayer.FAJR: fajr,
        Prayer.SUNRISE: sunrise,
        Prayer.DHUHR: dhuhr,
        Prayer.ASR: asr,
        Prayer.MAGHRIB: maghrib,
        Prayer.ISHA: isha,
    }
    midnight = datetime.datetime(solar_date.year, solar_date.month, solar_date.day, tzinfo=pytz.utc)
    times = {}
    for prayer in PRAYER_ORDER:
        instant = midnight + datetime.timedelta(
            hours=hours[prayer], minutes=params.adjustment_for(prayer)
        )
        instant = _round(instant, params.rounding)
        times[prayer.name.lower()] = instant.astimezone(tz) if tz is not None else instant

    return PrayerSchedule(date=date, **times)


# ──────────────────────────────────────────────────────────────────────────────
# Polar circle resolution
# ──────────────────────────────────────────────────────────────────────────────
def _resolve_polar(coordinate, date, solar_date, params, tz, failure) -> PrayerSchedule:
    resolution = params.polar_resolution
    for solar, tomorrow in _candidates(coordinate, solar_date, resolution):
        try:
            schedule = _build_schedule(coordinate, date, solar_date, params, tz, solar, tomorrow)
        except CalculationError as exc:
            logger.debug("Skipping latitude %g on %s: %s", solar.coordinate.latitude, solar.date, exc)
            continue
        logger.info(
            "No usable day at %s on %s (%s); using %s resolution (latitude %g, date %s)",
            coordinate, date, failure, resolution.value, solar.coordinate.latitude, solar.date,
        )
        return schedule
    raise UnsolvableAngleError(
        f"No usable prayer schedule near latitude {coordinate.latitude:g} on {date} "
        f"(polar resolution: {resolution.value})"
    ) from failure


def _candidates(coordinate: GeoCoordinate, date: datetime.date, resolution: PolarCircleResolution):
    """Solar day pairs to try, nearest first."""
    if resolution is PolarCircleResolution.AQRAB_BALAD:
        latitude = coordinate.latitude
        while abs(latitude) > LATITUDE_VARIATION_STEP:
            latitude -= math.copysign(LATITUDE_VARIATION_STEP, latitude)
            yield _solar_pair(replace(coordinate, latitude=latitude), date)
    elif resolution is PolarCircleResolution.AQRAB_YAUM:
        for offset in range(1, MAX_DAY_SEARCH + 1):
            for direction in (1, -1):
                yield _solar_pair(coordinate, date + datetime.timedelta(days=direction * offset))


# ──────────────────────────────────────────────────────────────────────────────
# Twilight prayers
# ──────────────────────────────────────────────────────────────────────────────
def _fajr(solar, params, latitude, date, sunrise, night) -> float:
    fajr = solar.time_for_altitude(-params.fajr_angle, after_transit=False)
    moonsighting = params.method is CalculationMethod.MOONSIGHTING_COMMITTEE
    if moonsighting and abs(latitude) >= MOONSIGHTING_HIGH_LATITUDE:
        fajr = sunrise - night / 7

    if moonsighting:
        safe = sunrise - season_adjusted_morning_twilight(latitude, date) / 60.0
    else:
        safe = sunrise - params.night_portions()[0] * night

    if fajr is None or safe > fajr:
        return safe
    return fajr


def _isha(solar, params, latitude, date, sunset, night) -> float:
    if params.isha_interval > 0:
        return sunset + params.isha_interval / 60.0

    isha = solar.time_for_altitude(-params.isha_angle, after_transit=True)
    moonsighting = params.method is CalculationMethod.MOONSIGHTING_COMMITTEE
    if moonsighting and abs(latitude) >= MOONSIGHTING_HIGH_LATITUDE:
        isha = sunset + night / 7

    if moonsighting:
        safe = sunset + season_adjusted_evening_twilight(latitude, date, params.shafaq) / 60.0
    else:
        safe = sunset + params.night_portions()[1] * night

    if isha is None or safe < isha:
        return safe
    return isha


def days_since_solstice(date: datetime.date, latitude: float) -> int:
    """Days since the winter solstice of the observer's hemisphere."""
    day_of_year = date.timetuple().tm_yday
    days_in_year = 366 if calendar.isleap(date.year) else 365
    if latitude >= 0:
        days = day_of_year + 10
        if days >= days_in_year:
            days -= days_in_year
    else:
        days = day_of_year - (173 if calendar.isleap(date.year) else 172)
        if days < 0:
            days += days_in_year
    return days


def _seasonal(a: float, b: float, c: float, d: float, days: int) -> float:
    if days < 91:
        return a + (b - a) / 91.0 * days
    if days < 137:
        return b + (c - b) / 46.0 * (days - 91)
    if days < 183:
        return c + (d - c) / 46.0 * (days - 137)
    if days < 229:
        return d + (c - d) / 46.0 * (days - 183)
    if days < 275:
        return c + (b - c) / 46.0 * (days - 229)
    return b + (a - b) / 91.0 * (days - 275)


def season_adjusted_morning_twilight(latitude: float, date: datetime.date) -> float:
    """Minutes before sunrise that Fajr begins (Moonsighting Committee tables)."""
    lat = abs(latitude)
    return _seasonal(
        75 + 28.65 / 55.0 * lat,
        75 + 19.44 / 55.0 * lat,
        75 + 32.74 / 55.0 * lat,
        75 + 48.10 / 55.0 * lat,
        days_since_solstice(date, latitude),
    )


def season_adjusted_evening_twilight(latitude: float, date: datetime.date, shafaq: Shafaq) -> float:
    """Minutes after sunset that Isha begins (Moonsighting Committee tables)."""
    lat = abs(latitude)
    if shafaq is Shafaq.AHMER:
        coefficients = (62 + 17.40 / 55.0 * lat, 62 - 7.16 / 55.0 * lat,
                        62 + 5.12 / 55.0 * lat, 62 + 19.44 / 55.0 * lat)
    elif shafaq is Shafaq.ABYAD:
        coefficients = (75 + 25.60 / 55.0 * lat, 75 + 7.16 / 55.0 * lat,
                        75 + 36.84 / 55.0 * lat, 75 + 81.84 / 55.0 * lat)
    else:
        coefficients = (75 + 25.60 / 55.0 * lat, 75 + 2.05 / 55.0 * lat,
                        75 - 9.21 / 55.0 * lat, 75 + 6.14 / 55.0 * lat)
    return _seasonal(*coefficients, days_since_solstice(date, latitude))


def _round(instant: datetime.datetime, rounding: Rounding) -> datetime.datetime:
    if rounding is Rounding.NONE:
        return instant
    truncated = instant.replace(second=0, microsecond=0)
    remainder = instant - truncated
    if rounding is Rounding.UP:
        return truncated + datetime.timedelta(minutes=1) if remainder else truncated
    if remainder >= datetime.timedelta(seconds=30):
        return truncated + datetime.timedelta(minutes=1)
    return truncated
