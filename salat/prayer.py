"""The six daily schedule entries, in the order they occur."""

from enum import Enum


class Prayer(Enum):
    FAJR = "Fajr"
    SUNRISE = "Sunrise"
    DHUHR = "Dhuhr"
    ASR = "Asr"
    MAGHRIB = "Maghrib"
    ISHA = "Isha"

    @property
    def is_prayer(self) -> bool:
        """Sunrise marks the end of Fajr; it is not itself a prayer."""
        return self is not Prayer.SUNRISE

    @classmethod
    def from_name(cls, name: str) -> "Prayer":
        """Look up a prayer by value or member name, ignoring case."""
        wanted = str(name).strip().lower()
        for prayer in cls:
            if wanted in (prayer.value.lower(), prayer.name.lower()):
                return prayer
        raise ValueError(f"Unknown prayer: {name!r}")


PRAYER_ORDER = tuple(Prayer)
