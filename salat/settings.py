"""User preferences stored as JSON next to the saved location."""

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields

from salat.methods import (
    CalculationMethod,
    CalculationParameters,
    HighLatitudeRule,
    Madhab,
    PolarCircleResolution,
    parse_enum,
)
from salat.notifier import DEFAULT_REMINDER_MINUTES
from salat.prayer import Prayer

logger = logging.getLogger(__name__)

CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".salat")
SETTINGS_FILE = os.path.join(CONFIG_DIR, "settings.json")


@dataclass
class Settings:
    method: str = CalculationMethod.MOONSIGHTING_COMMITTEE.value
    madhab: str = "Shafi"
    high_latitude_rule: str = HighLatitudeRule.MIDDLE_OF_THE_NIGHT.value
    polar_resolution: str = PolarCircleResolution.AQRAB_BALAD.value
    notifications_enabled: bool = False
    reminder_minutes: list = field(default_factory=lambda: list(DEFAULT_REMINDER_MINUTES))
    hijri_adjustment: int = 0
    # Minutes added per prayer, keyed by prayer name ("fajr", "isha", ...).
    adjustments: dict = field(default_factory=dict)
    # Custom twilight angles override the method's own when set.
    fajr_angle: float | None = None
    isha_angle: float | None = None

    def calculation_parameters(self) -> CalculationParameters:
        """Build solver parameters; raises ValueError for unknown names or bad angles."""
        overrides = dict(
            madhab=parse_enum(Madhab, self.madhab),
            high_latitude_rule=parse_enum(HighLatitudeRule, self.high_latitude_rule),
            polar_resolution=parse_enum(PolarCircleResolution, self.polar_resolution),
            adjustments={
                Prayer.from_name(name): int(minutes)
                for name, minutes in self.adjustments.items()
            },
        )
        if self.fajr_angle is not None:
            overrides["fajr_angle"] = float(self.fajr_angle)
        if self.isha_angle is not None:
            overrides["isha_angle"] = float(self.isha_angle)
            overrides["isha_interval"] = 0
        return CalculationParameters.for_method(self.method, **overrides)

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown settings: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known})


def load_settings() -> Settings:
    """Load settings, or defaults when the file is missing or unreadable."""
    if not os.path.isfile(SETTINGS_FILE):
        return Settings()
    try:
        with open(SETTINGS_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("settings file must hold a JSON object")
        return Settings.from_dict(data)
    except (OSError, ValueError) as exc:
        logger.warning("Using default settings; cannot read %s: %s", SETTINGS_FILE, exc)
        return Settings()


def save_settings(settings: Settings) -> None:
    os.makedirs(CONFIG_DIR, exist_ok=True)
    with open(SETTINGS_FILE, "w", encoding="utf-8") as f:
        json.dump(asdict(settings), f, indent=2)
