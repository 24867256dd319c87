"""Sun position and hour angles for one calendar day at one place.

Solar coordinates follow the U.S. Naval Observatory approximation
(accurate to about one arcminute between 1950 and 2050), evaluated at a
Julian day. Nothing here is cached: every ``SolarDay`` is built from its
inputs alone.
"""

import datetime
import math
from dataclasses import dataclass

from salat.errors import InvalidCoordinateError

J2000 = 2451545.0

# Apparent solar radius plus standard refraction, in degrees below the horizon.
RISE_SET_DEPRESSION = 0.833


def _sin(d: float) -> float:
    return math.sin(math.radians(d))


def _cos(d: float) -> float:
    return math.cos(math.radians(d))


def _tan(d: float) -> float:
    return math.tan(math.radians(d))


def fix_angle(degrees: float) -> float:
    """Normalize an angle to [0, 360)."""
    return degrees % 360.0


def fix_hour(hours: float) -> float:
    """Normalize an hour value to [0, 24)."""
    return hours % 24.0


@dataclass(frozen=True)
class GeoCoordinate:
    """Observer position in decimal degrees; elevation in metres."""

    latitude: float
    longitude: float
    elevation: float = 0.0

    def __post_init__(self):
        for name, limit in (("latitude", 90.0), ("longitude", 180.0)):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidCoordinateError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value) or abs(value) > limit:
                raise InvalidCoordinateError(
                    f"{name} must be within [-{limit:g}, {limit:g}], got {value!r}"
                )
            object.__setattr__(self, name, float(value))

        elevation = self.elevation
        if isinstance(elevation, bool) or not isinstance(elevation, (int, float)):
            raise InvalidCoordinateError(f"elevation must be a number, got {elevation!r}")
        if not math.isfinite(elevation) or elevation < 0:
            raise InvalidCoordinateError(f"elevation must be >= 0 metres, got {elevation!r}")
        object.__setattr__(self, "elevation", float(elevation))


def julian_day(year: int, month: int, day: int, hours: float = 0.0) -> float:
    """Julian day at the given UTC time (Meeus, Gregorian calendar)."""
    if month <= 2:
        year -= 1
        month += 12
    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    jd = math.floor(365.25 * (year + 4716)) + math.floor(30.6001 * (month + 1)) + day + b - 1524.5
    return jd + hours / 24.0


def sun_position(jd: float) -> tuple[float, float]:
    """
    Approximate solar coordinates at a Julian day.

    Returns (declination in degrees, equation of time in hours). The
    equation of time is wrapped to (-12, 12] so it never jumps by a day
    when the mean longitude and right ascension straddle 0h.
    """
    d = jd - J2000
    g = fix_angle(357.529 + 0.98560028 * d)
    q = fix_angle(280.459 + 0.98564736 * d)
    ecliptic_longitude = fix_angle(q + 1.915 * _sin(g) + 0.020 * _sin(2 * g))
    obliquity = 23.439 - 0.00000036 * d

    ra = math.degrees(math.atan2(
        _cos(obliquity) * _sin(ecliptic_longitude),
        _cos(ecliptic_longitude),
    )) / 15.0
    eqt = q / 15.0 - fix_hour(ra)
    eqt = -((12.0 - eqt) % 24.0 - 12.0)
    declination = math.degrees(math.asin(_sin(obliquity) * _sin(ecliptic_longitude)))
    return declination, eqt


def rise_set_altitude(elevation: float = 0.0) -> float:
    """Solar altitude at sunrise/sunset, lowered for an elevated observer."""
    return -(RISE_SET_DEPRESSION + 0.0347 * math.sqrt(elevation))


def asr_altitude(shadow_factor: int, latitude: float, declination: float) -> float:
    """Altitude at which an object's shadow is ``shadow_factor`` times its length plus the noon shadow."""
    return math.degrees(math.atan(1.0 / (shadow_factor + _tan(abs(latitude - declination)))))


@dataclass(frozen=True)
class SolarDay:
    """
    Solar quantities for one date at one coordinate.

    ``transit`` and every event time are hours after 00:00 UTC of ``date``;
    they may fall outside [0, 24) for longitudes far from Greenwich.
    """

    date: datetime.date
    coordinate: GeoCoordinate
    julian_day: float
    declination: float
    equation_of_time: float
    transit: float

    @classmethod
    def for_date(cls, coordinate: GeoCoordinate, date: datetime.date) -> "SolarDay":
        jd = julian_day(date.year, date.month, date.day)
        mean_noon = 12.0 - coordinate.longitude / 15.0
        _, eqt = sun_position(jd + mean_noon / 24.0)
        transit = mean_noon - eqt
        declination, eqt = sun_position(jd + transit / 24.0)
        transit = mean_noon - eqt
        return cls(
            date=date,
            coordinate=coordinate,
            julian_day=jd,
            declination=declination,
            equation_of_time=eqt,
            transit=transit,
        )

    def hour_angle(self, altitude: float, declination: float | None = None) -> float | None:
        """
        Hour angle (degrees) at which the sun stands at ``altitude``.

        None when the sun never reaches that altitude on this day.
        """
        if declination is None:
            declination = self.declination
        latitude = self.coordinate.latitude
        denominator = _cos(latitude) * _cos(declination)
        if abs(denominator) < 1e-12:
            return None
        cos_h = (_sin(altitude) - _sin(latitude) * _sin(declination)) / denominator
        if cos_h < -1.0 or cos_h > 1.0:
            return None
        return math.degrees(math.acos(cos_h))

    def time_for_altitude(self, altitude: float, after_transit: bool) -> float | None:
        """UTC hours at which the sun crosses ``altitude`` before or after transit."""
        angle = self.hour_angle(altitude)
        if angle is None:
            return None
        sign = 1.0 if after_transit else -1.0
        estimate = self.transit + sign * angle / 15.0
        declination, _ = sun_position(self.julian_day + estimate / 24.0)
        angle = self.hour_angle(altitude, declination)
        if angle is None:
            return None
        return self.transit + sign * angle / 15.0

    def sunrise(self) -> float | None:
        return self.time_for_altitude(rise_set_altitude(self.coordinate.elevation), after_transit=False)

    def sunset(self) -> float | None:
        return self.time_for_altitude(rise_set_altitude(self.coordinate.elevation), after_transit=True)

    def asr(self, shadow_factor: int) -> float | None:
        altitude = asr_altitude(shadow_factor, self.coordinate.latitude, self.declination)
        return self.time_for_altitude(altitude, after_transit=True)

    def has_sunrise_and_sunset(self) -> bool:
        return self.sunrise() is not None and self.sunset() is not None
