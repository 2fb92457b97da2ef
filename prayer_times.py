"""
Prayer times calculation using astronomical formulas (USNO approximate solar coordinates).
Fajr/Isha: depression angle of the selected method, Asr: shadow ratio (Shafi = 1, Hanafi = 2).
Times the sun never reaches at the given latitude/date are reported as UNAVAILABLE.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date as Date, datetime
from enum import Enum, IntEnum
from typing import NamedTuple, TypedDict

from conventions import (
    OffsetSource,
    device_utc_offset,
    resolve_method,
    resolve_utc_offset,
)

log = logging.getLogger(__name__)

# Sunrise/sunset: upper limb on the horizon with standard refraction
SUNRISE_SUNSET_ANGLE = 0.833
# Dhuhr: a little past true noon
DHUHR_MARGIN = 0.0333
UNAVAILABLE = "--:--"

PRAYER_NAMES = ("Fajr", "Sunrise", "Dhuhr", "Asr", "Maghrib", "Isha")


class PrayerTimeSet(TypedDict):
    Fajr: str
    Sunrise: str
    Dhuhr: str
    Asr: str
    Maghrib: str
    Isha: str


class PrayerHours(TypedDict):
    Fajr: float | None
    Sunrise: float | None
    Dhuhr: float | None
    Asr: float | None
    Maghrib: float | None
    Isha: float | None


class Direction(Enum):
    BEFORE_NOON = "ccw"
    AFTER_NOON = "cw"


class AsrJuristic(IntEnum):
    STANDARD = 1  # Shafi, Maliki, Hanbali
    HANAFI = 2


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        return (
            math.isfinite(self.latitude)
            and math.isfinite(self.longitude)
            and -90.0 <= self.latitude <= 90.0
            and -180.0 <= self.longitude <= 180.0
        )


class SolarState(NamedTuple):
    declination_deg: float
    equation_of_time_hours: float


def _deg2rad(d: float) -> float:
    return d * math.pi / 180.0


def _rad2deg(r: float) -> float:
    return r * 180.0 / math.pi


def _normalize_angle_360(degrees: float) -> float:
    """Normalize angle to [0, 360)."""
    return degrees % 360.0


def _normalize_hour_24(hours: float) -> float:
    """Normalize hour to [0, 24)."""
    return hours % 24.0


def julian_day(year: int, month: int, day: int, hour_utc: float = 0.0) -> float:
    """Julian Day of a Gregorian date at the given UTC hour (default midnight, so x.5)."""
    if month <= 2:
        year -= 1
        month += 12
    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    jd = math.floor(365.25 * (year + 4716)) + math.floor(30.6001 * (month + 1)) + day + b - 1524.5
    return jd + hour_utc / 24.0


def sun_position(jd: float) -> SolarState:
    """Solar declination (degrees) and equation of time (hours) for a Julian Day."""
    d = jd - 2451545.0
    g = _normalize_angle_360(357.529 + 0.98560028 * d)
    q = _normalize_angle_360(280.459 + 0.98564736 * d)
    L = _normalize_angle_360(q + 1.915 * math.sin(_deg2rad(g)) + 0.020 * math.sin(_deg2rad(2 * g)))
    e = 23.439 - 0.00000036 * d

    # Right ascension (same quadrant as L)
    sin_L = math.sin(_deg2rad(L))
    ra = _rad2deg(math.atan2(math.cos(_deg2rad(e)) * sin_L, math.cos(_deg2rad(L))))
    decl = _rad2deg(math.asin(math.sin(_deg2rad(e)) * sin_L))

    # q and RA can sit on opposite sides of the 0/360 seam; keep EqT within half a day
    eqt = ((q - ra) / 15.0 + 12.0) % 24.0 - 12.0
    return SolarState(decl, eqt)


def solar_noon(eqt_hours: float, lng_deg: float, utc_offset_hours: float) -> float:
    """Local time of solar transit in decimal hours (not normalized)."""
    return 12.0 - eqt_hours - lng_deg / 15.0 + utc_offset_hours


def angle_time(
    decl_deg: float,
    lat_deg: float,
    angle_below_deg: float,
    noon: float,
    direction: Direction,
) -> float | None:
    """
    Local time at which the sun is angle_below_deg below the horizon.
    angle_below_deg: positive = below horizon (e.g. 18 for Fajr, 0.833 for sunrise),
    negative = above it (Asr).
    Returns None if the sun never reaches that angle (polar day/night).
    """
    lat_r = _deg2rad(lat_deg)
    decl_r = _deg2rad(decl_deg)
    cos_h = (-math.sin(_deg2rad(angle_below_deg)) - math.sin(lat_r) * math.sin(decl_r)) / (
        math.cos(lat_r) * math.cos(decl_r)
    )
    if not -1.0 <= cos_h <= 1.0:
        return None
    h = _rad2deg(math.acos(cos_h)) / 15.0
    return noon - h if direction is Direction.BEFORE_NOON else noon + h


def asr_time(decl_deg: float, lat_deg: float, factor: float, noon: float) -> float | None:
    """Asr: shadow length = factor × object height + noon shadow."""
    phi_minus_d = abs(lat_deg - decl_deg)
    # Sun stays below the horizon all day (polar night)
    if phi_minus_d >= 90:
        return None
    angle = -_rad2deg(math.atan(1.0 / (factor + math.tan(_deg2rad(phi_minus_d)))))
    return angle_time(decl_deg, lat_deg, angle, noon, Direction.AFTER_NOON)


def format_time(hours: float | None, unavailable: str = UNAVAILABLE) -> str:
    """Convert decimal hours to 'HH:MM' 24h format; None/NaN give the unavailable marker."""
    if hours is None or not math.isfinite(hours):
        return unavailable
    h = _normalize_hour_24(hours)
    hour = int(math.floor(h))
    minute = int(round((h - hour) * 60))
    if minute >= 60:
        minute = 0
        hour += 1
    return f"{hour % 24:02d}:{minute:02d}"


def parse_time(text: str) -> float | None:
    """'HH:MM' to decimal hours, UNAVAILABLE to None."""
    if text == UNAVAILABLE:
        return None
    hh, sep, mm = text.partition(":")
    if not sep or len(mm) != 2:
        raise ValueError(f"time must be HH:MM, got {text!r}")
    hour, minute = int(hh), int(mm)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"time out of range: {text!r}")
    return hour + minute / 60.0


def parse_date(text: str) -> Date:
    """'YYYY-MM-DD' to a date."""
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"date must be YYYY-MM-DD, got {text!r}") from None


def to_display(times: PrayerTimeSet) -> PrayerTimeSet:
    """Render unavailable times as '00:00', for displays that expect a time in every slot."""
    return PrayerTimeSet(
        **{name: ("00:00" if value == UNAVAILABLE else value) for name, value in times.items()}
    )


def calculate_hours(
    day: Date,
    latitude: float,
    longitude: float,
    method_id: int,
    country: str | None,
    *,
    asr_factor: float = AsrJuristic.STANDARD,
    offset_source: OffsetSource = device_utc_offset,
) -> PrayerHours:
    """Prayer times for one day as decimal local hours (None where the sun never gets there)."""
    if not (math.isfinite(asr_factor) and asr_factor > 0):
        raise ValueError(f"asr_factor must be a positive number, got {asr_factor!r}")
    coords = Coordinates(latitude, longitude)
    if not coords.is_valid():
        log.warning("Rejecting coordinates lat=%r lng=%r", latitude, longitude)
        return PrayerHours(**{name: None for name in PRAYER_NAMES})

    method = resolve_method(method_id)
    tz = resolve_utc_offset(country, offset_source())
    jd = julian_day(day.year, day.month, day.day)
    decl, eqt = sun_position(jd)
    noon = solar_noon(eqt, coords.longitude, tz)
    log.debug(
        "date=%s lat=%s lng=%s method=%s tz=%s decl=%.4f eqt=%.4f",
        day, latitude, longitude, method.name, tz, decl, eqt,
    )

    lat = coords.latitude
    fajr = angle_time(decl, lat, method.fajr_angle, noon, Direction.BEFORE_NOON)
    sunrise = angle_time(decl, lat, SUNRISE_SUNSET_ANGLE, noon, Direction.BEFORE_NOON)
    dhuhr = noon + DHUHR_MARGIN
    asr = asr_time(decl, lat, asr_factor, noon)
    maghrib = angle_time(decl, lat, SUNRISE_SUNSET_ANGLE, noon, Direction.AFTER_NOON)
    if method.isha_offset_minutes is not None:
        isha = maghrib + method.isha_offset_minutes / 60.0 if maghrib is not None else None
    else:
        isha = angle_time(decl, lat, method.isha_angle, noon, Direction.AFTER_NOON)

    return PrayerHours(Fajr=fajr, Sunrise=sunrise, Dhuhr=dhuhr, Asr=asr, Maghrib=maghrib, Isha=isha)


def calculate(
    day: Date,
    latitude: float,
    longitude: float,
    method_id: int,
    country: str | None,
    *,
    asr_factor: float = AsrJuristic.STANDARD,
    offset_source: OffsetSource = device_utc_offset,
) -> PrayerTimeSet:
    """
    Get prayer times for one day.
    method_id: calculation method (see conventions.METHODS); unknown ids use the Egyptian method.
    country: English country name; decides the UTC offset (see conventions.COUNTRY_TZ).
    offset_source: returns the device UTC offset in hours, used when the country has no fixed offset.
    Returns Fajr, Sunrise, Dhuhr, Asr, Maghrib, Isha as 'HH:MM' strings or UNAVAILABLE.
    """
    hours = calculate_hours(
        day, latitude, longitude, method_id, country,
        asr_factor=asr_factor, offset_source=offset_source,
    )
    return PrayerTimeSet(**{name: format_time(value) for name, value in hours.items()})
