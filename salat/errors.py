"""Errors raised by the prayer-time engine."""


class PrayerTimeError(Exception):
    """Base class for every error raised by salat."""


class InvalidCoordinateError(PrayerTimeError, ValueError):
    """Latitude, longitude or elevation outside the accepted range."""


class CalculationError(PrayerTimeError):
    """The schedule for a date/coordinate pair could not be produced."""


class UnsolvableAngleError(CalculationError):
    """The sun never reaches the required altitude and no fallback applies."""
