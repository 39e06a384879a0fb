"""Nearest sunrise and sunset search for a location and UTC time."""

from .astro import SkyCoordinates, julian_date, local_sidereal_time, sun_position
from .events import SR_WINDOW, SunEvent, SunTimes, calculate, find_crossings

__all__ = [
    "SR_WINDOW",
    "SkyCoordinates",
    "SunEvent",
    "SunTimes",
    "calculate",
    "find_crossings",
    "julian_date",
    "local_sidereal_time",
    "sun_position",
]
