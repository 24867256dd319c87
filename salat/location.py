"""Observer location: IP geolocation, reverse geocoding and a saved manual location."""

import json
import logging
import os
from dataclasses import dataclass

import requests

from salat.solar import GeoCoordinate

logger = logging.getLogger(__name__)

IPAPI_URL = "http://ip-api.com/json/"
NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"
USER_AGENT = "salat/0.1 (prayer times desktop client)"

CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".salat")
CONFIG_FILE = os.path.join(CONFIG_DIR, "location.json")

REQUIRED_KEYS = ("city", "region", "country", "lat", "lon", "timezone")


@dataclass(frozen=True)
class Location:
    city: str
    region: str
    country: str
    coordinate: GeoCoordinate
    timezone: str

    def to_dict(self) -> dict:
        return {
            "city": self.city,
            "region": self.region,
            "country": self.country,
            "lat": self.coordinate.latitude,
            "lon": self.coordinate.longitude,
            "elevation": self.coordinate.elevation,
            "timezone": self.timezone,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Location":
        """Build a Location from its to_dict() form; raises KeyError/ValueError on bad data."""
        missing = [k for k in REQUIRED_KEYS if k not in data]
        if missing:
            raise KeyError(f"location is missing {', '.join(missing)}")
        coordinate = GeoCoordinate(
            float(data["lat"]),
            float(data["lon"]),
            float(data.get("elevation", 0.0)),
        )
        return cls(
            city=str(data["city"]),
            region=str(data["region"]),
            country=str(data["country"]),
            coordinate=coordinate,
            timezone=str(data["timezone"]),
        )


DEFAULT_LOCATION = Location(
    city="Mecca",
    region="Makkah",
    country="SA",
    coordinate=GeoCoordinate(21.4225, 39.8262),
    timezone="Asia/Riyadh",
)


class LocationProvider:
    """Capability that yields the observer's location; injected into the tracker."""

    def get_location(self) -> Location:
        raise NotImplementedError


class FixedLocationProvider(LocationProvider):
    """Always returns the same location, e.g. one entered on the command line."""

    def __init__(self, location: Location):
        self.location = location

    def get_location(self) -> Location:
        return self.location


class IpLocationProvider(LocationProvider):
    """
    Detect the current location via IP geolocation.

    Falls back to DEFAULT_LOCATION when the service is unreachable or
    answers with an error.
    """

    def __init__(self, timeout: int = 5):
        self.timeout = timeout

    def get_location(self) -> Location:
        try:
            resp = requests.get(
                IPAPI_URL,
                params={"fields": "city,regionName,country,lat,lon,timezone,status,message"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("IP geolocation failed (%s); using %s", exc, DEFAULT_LOCATION.city)
            return DEFAULT_LOCATION

        if data.get("status") != "success":
            logger.warning(
                "IP geolocation refused: %s; using %s",
                data.get("message", "unknown error"), DEFAULT_LOCATION.city,
            )
            return DEFAULT_LOCATION

        try:
            return Location(
                city=data.get("city", DEFAULT_LOCATION.city),
                region=data.get("regionName", DEFAULT_LOCATION.region),
                country=data.get("country", DEFAULT_LOCATION.country),
                coordinate=GeoCoordinate(float(data["lat"]), float(data["lon"])),
                timezone=data.get("timezone", DEFAULT_LOCATION.timezone),
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("IP geolocation returned unusable coordinates (%s)", exc)
            return DEFAULT_LOCATION


class SavedLocationProvider(LocationProvider):
    """Use the manually saved location if there is one, else ask ``fallback``."""

    def __init__(self, fallback: LocationProvider | None = None):
        self.fallback = fallback if fallback is not None else IpLocationProvider()

    def get_location(self) -> Location:
        saved = load_manual_location()
        if saved is not None:
            return saved
        return self.fallback.get_location()


def resolve_location() -> Location:
    """Saved manual location first, then IP geolocation."""
    return SavedLocationProvider().get_location()


def reverse_geocode(coordinate: GeoCoordinate, timeout: int = 10) -> dict:
    """
    Look up city and country names for a coordinate (OpenStreetMap Nominatim).

    Returns {"city", "region", "country"}; names default to "Unknown" when
    the lookup fails or the address has no such field.
    """
    names = {"city": "Unknown", "region": "", "country": "Unknown"}
    try:
        resp = requests.get(
            NOMINATIM_URL,
            params={
                "format": "json",
                "lat": coordinate.latitude,
                "lon": coordinate.longitude,
                "zoom": 10,
            },
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
        )
        resp.raise_for_status()
        address = resp.json().get("address", {})
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Reverse geocoding failed for %s: %s", coordinate, exc)
        return names

    names["city"] = (
        address.get("city") or address.get("town") or address.get("village") or "Unknown"
    )
    names["region"] = address.get("state", "")
    names["country"] = address.get("country", "Unknown")
    return names


def locate_coordinate(coordinate: GeoCoordinate, timezone: str, timeout: int = 10) -> Location:
    """Name a user-entered coordinate through reverse geocoding."""
    names = reverse_geocode(coordinate, timeout=timeout)
    return Location(coordinate=coordinate, timezone=timezone, **names)


def save_manual_location(location: Location) -> None:
    """Save a manually-set location to the config file."""
    os.makedirs(CONFIG_DIR, exist_ok=True)
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(location.to_dict(), f, indent=2)


def load_manual_location() -> Location | None:
    """Load a previously saved manual location, or return None."""
    if not os.path.isfile(CONFIG_FILE):
        return None
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
        return Location.from_dict(data)
    except (OSError, KeyError, TypeError, ValueError) as exc:
        logger.warning("Ignoring unreadable saved location %s: %s", CONFIG_FILE, exc)
        return None


def clear_manual_location() -> None:
    """Remove the saved manual location config."""
    if os.path.isfile(CONFIG_FILE):
        os.remove(CONFIG_FILE)
