"""Calculation method presets and the parameters that drive the solver."""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum

from salat.prayer import Prayer
from salat.solar import RISE_SET_DEPRESSION


class CalculationMethod(Enum):
    MUSLIM_WORLD_LEAGUE = "MuslimWorldLeague"
    EGYPTIAN = "Egyptian"
    KARACHI = "Karachi"
    UMM_AL_QURA = "UmmAlQura"
    DUBAI = "Dubai"
    MOONSIGHTING_COMMITTEE = "MoonsightingCommittee"
    NORTH_AMERICA = "NorthAmerica"
    KUWAIT = "Kuwait"
    QATAR = "Qatar"
    SINGAPORE = "Singapore"
    TEHRAN = "Tehran"
    TURKEY = "Turkey"
    OTHER = "Other"


class Madhab(Enum):
    """Juristic school for Asr; the value is the shadow-length factor."""

    SHAFI = 1
    HANAFI = 2

    @property
    def shadow_factor(self) -> int:
        return self.value


class HighLatitudeRule(Enum):
    """How Fajr/Isha are bounded when twilight lasts (almost) all night."""

    MIDDLE_OF_THE_NIGHT = "MiddleOfTheNight"
    SEVENTH_OF_THE_NIGHT = "SeventhOfTheNight"
    TWILIGHT_ANGLE = "TwilightAngle"


class PolarCircleResolution(Enum):
    """What to do when the sun does not rise or set at all on the date."""

    AQRAB_BALAD = "AqrabBalad"      # nearest latitude where it does
    AQRAB_YAUM = "AqrabYaum"        # nearest date where it does
    UNRESOLVED = "Unresolved"       # raise UnsolvableAngleError


class Shafaq(Enum):
    """Twilight definition used by the Moonsighting Committee for Isha."""

    GENERAL = "General"
    AHMER = "Ahmer"
    ABYAD = "Abyad"


class Rounding(Enum):
    NEAREST = "Nearest"
    UP = "Up"
    NONE = "None"


# Aliases accepted in settings files and on the command line.
METHOD_ALIASES = {
    "mwl": CalculationMethod.MUSLIM_WORLD_LEAGUE,
    "isna": CalculationMethod.NORTH_AMERICA,
    "egypt": CalculationMethod.EGYPTIAN,
    "makkah": CalculationMethod.UMM_AL_QURA,
    "mecca": CalculationMethod.UMM_AL_QURA,
    "moonsighting": CalculationMethod.MOONSIGHTING_COMMITTEE,
    "diyanet": CalculationMethod.TURKEY,
}

METHOD_NAMES = {
    CalculationMethod.MUSLIM_WORLD_LEAGUE: "Muslim World League",
    CalculationMethod.EGYPTIAN: "Egyptian General Authority of Survey",
    CalculationMethod.KARACHI: "University of Islamic Sciences, Karachi",
    CalculationMethod.UMM_AL_QURA: "Umm al-Qura University, Makkah",
    CalculationMethod.DUBAI: "Dubai (UAE)",
    CalculationMethod.MOONSIGHTING_COMMITTEE: "Moonsighting Committee Worldwide",
    CalculationMethod.NORTH_AMERICA: "Islamic Society of North America (ISNA)",
    CalculationMethod.KUWAIT: "Kuwait",
    CalculationMethod.QATAR: "Qatar",
    CalculationMethod.SINGAPORE: "Majlis Ugama Islam Singapura",
    CalculationMethod.TEHRAN: "Institute of Geophysics, University of Tehran",
    CalculationMethod.TURKEY: "Diyanet İşleri Başkanlığı, Turkey",
    CalculationMethod.OTHER: "Custom angles",
}

_PRESETS = {
    CalculationMethod.MUSLIM_WORLD_LEAGUE: dict(
        fajr_angle=18.0, isha_angle=17.0,
        method_adjustments={Prayer.DHUHR: 1},
    ),
    CalculationMethod.EGYPTIAN: dict(
        fajr_angle=19.5, isha_angle=17.5,
        method_adjustments={Prayer.DHUHR: 1},
    ),
    CalculationMethod.KARACHI: dict(
        fajr_angle=18.0, isha_angle=18.0,
        method_adjustments={Prayer.DHUHR: 1},
    ),
    CalculationMethod.UMM_AL_QURA: dict(
        fajr_angle=18.5, isha_angle=0.0, isha_interval=90,
    ),
    CalculationMethod.DUBAI: dict(
        fajr_angle=18.2, isha_angle=18.2,
        method_adjustments={Prayer.SUNRISE: -3, Prayer.DHUHR: 3, Prayer.ASR: 3, Prayer.MAGHRIB: 3},
    ),
    CalculationMethod.MOONSIGHTING_COMMITTEE: dict(
        fajr_angle=18.0, isha_angle=18.0,
        method_adjustments={Prayer.DHUHR: 5, Prayer.MAGHRIB: 3},
    ),
    CalculationMethod.NORTH_AMERICA: dict(
        fajr_angle=15.0, isha_angle=15.0,
        method_adjustments={Prayer.DHUHR: 1},
    ),
    CalculationMethod.KUWAIT: dict(fajr_angle=18.0, isha_angle=17.5),
    CalculationMethod.QATAR: dict(fajr_angle=18.0, isha_angle=0.0, isha_interval=90),
    CalculationMethod.SINGAPORE: dict(
        fajr_angle=20.0, isha_angle=18.0,
        method_adjustments={Prayer.DHUHR: 1},
        rounding=Rounding.UP,
    ),
    CalculationMethod.TEHRAN: dict(fajr_angle=17.7, isha_angle=14.0, maghrib_angle=4.5),
    CalculationMethod.TURKEY: dict(
        fajr_angle=18.0, isha_angle=17.0,
        method_adjustments={Prayer.SUNRISE: -7, Prayer.DHUHR: 5, Prayer.ASR: 4, Prayer.MAGHRIB: 7},
    ),
    # No preset angles: the caller supplies fajr_angle and isha_angle.
    CalculationMethod.OTHER: dict(),
}


def parse_enum(enum_cls, value):
    """
    Resolve ``value`` to a member of ``enum_cls``.

    Accepts a member, its value, or its name in any case (dashes, spaces and
    underscores ignored). Calculation methods also accept METHOD_ALIASES.
    Raises ValueError for anything else.
    """
    if isinstance(value, enum_cls):
        return value
    wanted = str(value).strip().lower().replace("-", "").replace("_", "").replace(" ", "")
    if enum_cls is CalculationMethod and wanted in METHOD_ALIASES:
        return METHOD_ALIASES[wanted]
    for member in enum_cls:
        names = (str(member.value), member.name)
        if wanted in (n.lower().replace("_", "") for n in names):
            return member
    raise ValueError(f"Unknown {enum_cls.__name__}: {value!r}")


@dataclass(frozen=True)
class CalculationParameters:
    """
    Everything the solver needs to turn solar events into prayer times.

    Angles are degrees of solar depression. ``isha_interval`` > 0 puts Isha
    that many minutes after sunset instead of using ``isha_angle``.
    ``method_adjustments`` belong to the preset; ``adjustments`` are the
    user's own tuning. Both are minutes keyed by Prayer and are added.
    """

    method: CalculationMethod
    fajr_angle: float
    isha_angle: float
    isha_interval: int = 0
    maghrib_angle: float | None = None
    madhab: Madhab = Madhab.SHAFI
    high_latitude_rule: HighLatitudeRule = HighLatitudeRule.MIDDLE_OF_THE_NIGHT
    polar_resolution: PolarCircleResolution = PolarCircleResolution.AQRAB_BALAD
    shafaq: Shafaq = Shafaq.GENERAL
    rounding: Rounding = Rounding.NEAREST
    method_adjustments: dict = field(default_factory=dict)
    adjustments: dict = field(default_factory=dict)

    def __post_init__(self):
        # Twilight angles must lie below the sunrise/sunset horizon.
        checked = ("fajr_angle",) if self.isha_interval > 0 else ("fajr_angle", "isha_angle")
        for name in checked:
            angle = getattr(self, name)
            if not RISE_SET_DEPRESSION < angle < 90.0:
                raise ValueError(
                    f"{name} must be within ({RISE_SET_DEPRESSION}, 90) degrees, got {angle!r}"
                )
        if self.maghrib_angle is not None and not 0.0 < self.maghrib_angle < 90.0:
            raise ValueError(f"maghrib_angle must be within (0, 90), got {self.maghrib_angle!r}")
        if self.isha_interval < 0:
            raise ValueError(f"isha_interval must be >= 0 minutes, got {self.isha_interval!r}")
        for mapping in (self.method_adjustments, self.adjustments):
            for key in mapping:
                if not isinstance(key, Prayer):
                    raise ValueError(f"adjustment keys must be Prayer members, got {key!r}")

    @classmethod
    def for_method(cls, method, **overrides) -> "CalculationParameters":
        """Preset parameters for ``method`` (member, value or alias)."""
        method = parse_enum(CalculationMethod, method)
        missing = [
            k for k in ("fajr_angle", "isha_angle")
            if k not in _PRESETS[method] and k not in overrides
        ]
        if missing:
            raise ValueError(f"The {method.value} method needs {' and '.join(missing)}")
        preset = dict(_PRESETS[method])
        preset["method_adjustments"] = dict(preset.get("method_adjustments", {}))
        preset.update(overrides)
        return cls(method=method, **preset)

    def with_overrides(self, **changes) -> "CalculationParameters":
        return dataclasses.replace(self, **changes)

    @property
    def name(self) -> str:
        return METHOD_NAMES[self.method]

    def adjustment_for(self, prayer: Prayer) -> int:
        """Total minute offset applied to ``prayer``."""
        return self.method_adjustments.get(prayer, 0) + self.adjustments.get(prayer, 0)

    def night_portions(self) -> tuple[float, float]:
        """Fractions of the night that bound Fajr and Isha under the high-latitude rule."""
        rule = self.high_latitude_rule
        if rule is HighLatitudeRule.SEVENTH_OF_THE_NIGHT:
            return 1 / 7, 1 / 7
        if rule is HighLatitudeRule.TWILIGHT_ANGLE:
            return self.fajr_angle / 60.0, self.isha_angle / 60.0
        return 1 / 2, 1 / 2
