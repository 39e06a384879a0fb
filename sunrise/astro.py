"""Low-precision solar ephemeris and horizon geometry."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import erfa
import numpy as np

__all__ = [
    "HORIZON_ALTITUDE",
    "K1",
    "SkyCoordinates",
    "altitude",
    "azimuth",
    "crossing_fraction",
    "interpolate",
    "julian_date",
    "local_sidereal_time",
    "sun_coordinates",
    "sun_position",
]

UNIX_EPOCH_JD = 2440587.5  # Julian date of 1970-01-01 00:00 UTC.

# Sun's upper limb on the horizon: semidiameter plus mean refraction.
HORIZON_ALTITUDE = -0.833

# Hour angle advance per solar hour, in radians.
K1 = 15.0 * (math.pi / 180.0) * 1.0027379


@dataclass(frozen=True)
class SkyCoordinates:
    """Equatorial coordinates of the sun."""

    right_ascension: float  # hours, [0, 24)
    declination: float  # degrees


def julian_date(unix_time: int) -> float:
    """Return fractional days elapsed since J2000.0 (2000-01-01 12:00 UTC)."""

    return unix_time / erfa.DAYSEC + (UNIX_EPOCH_JD - erfa.DJ00)


def sun_coordinates(day_offsets: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Vectorised solar right ascension and declination, both in radians.

    Fundamental arguments after Van Flandern & Pulkkinen (1979). The right
    ascension is not reduced and may fall slightly outside ``[0, 2*pi)``.

    Parameters
    ----------
    day_offsets:
        Days since J2000.0.

    Returns
    -------
    tuple[numpy.ndarray, numpy.ndarray]
        Right ascension and declination arrays.
    """

    d = np.asarray(day_offsets, dtype=float)
    centuries = d / erfa.DJC + 1.0  # since 1900.0
    mean_longitude = 0.779072 + 0.00273790931 * d
    mean_anomaly = 0.993126 + 0.0027377785 * d
    lon = 2.0 * np.pi * (mean_longitude - np.floor(mean_longitude))
    g = 2.0 * np.pi * (mean_anomaly - np.floor(mean_anomaly))

    v = (
        0.39785 * np.sin(lon)
        - 0.01000 * np.sin(lon - g)
        + 0.00333 * np.sin(lon + g)
        - 0.00021 * centuries * np.sin(lon)
    )
    u = 1.0 - 0.03349 * np.cos(g) - 0.00014 * np.cos(2.0 * lon) + 0.00008 * np.cos(lon)
    w = (
        -0.00010
        - 0.04129 * np.sin(2.0 * lon)
        + 0.03211 * np.sin(g)
        + 0.00104 * np.sin(2.0 * lon - g)
        - 0.00035 * np.sin(2.0 * lon + g)
        - 0.00008 * centuries * np.sin(g)
    )

    right_ascension = lon + np.arcsin(np.clip(w / np.sqrt(u - v * v), -1.0, 1.0))
    declination = np.arcsin(np.clip(v / np.sqrt(u), -1.0, 1.0))
    return right_ascension, declination


def sun_position(day_offset: float) -> SkyCoordinates:
    """Return the sun's equatorial coordinates *day_offset* days after J2000.0."""

    ra, dec = sun_coordinates(np.array([day_offset]))
    ra_hours = math.degrees(float(ra[0])) / 15.0 % 24.0
    return SkyCoordinates(right_ascension=ra_hours, declination=math.degrees(float(dec[0])))


def local_sidereal_time(day_offset: float, longitude: float) -> float:
    """Local sidereal time in degrees within ``[0, 360)``.

    *day_offset* is counted in days from J2000.0 and *longitude* is in degrees,
    east positive. cf. USNO Astronomical Almanac.
    """

    centuries = day_offset / erfa.DJC
    gmst_hours = (
        6.697374558
        + 0.06570982441908 * day_offset
        + math.remainder(day_offset, 1.0) * 24.0
        + 12.0
        + 0.000026 * centuries * centuries
    )
    turns = (15.0 * gmst_hours + longitude) / 360.0
    turns -= math.floor(turns)
    return turns * 360.0


def altitude(hour_angle, declination, latitude: float):
    """Geometric altitude in degrees.

    *hour_angle* and *declination* are radians (scalars or arrays),
    *latitude* is degrees.
    """

    phi = math.radians(latitude)
    sin_alt = math.sin(phi) * np.sin(declination) + math.cos(phi) * np.cos(
        declination
    ) * np.cos(hour_angle)
    return np.degrees(np.arcsin(np.clip(sin_alt, -1.0, 1.0)))


def azimuth(hour_angle: float, declination: float, latitude: float) -> float:
    """Azimuth in degrees east of north, within ``[0, 360)``."""

    phi = math.radians(latitude)
    north = math.cos(phi) * math.sin(declination) - math.sin(phi) * math.cos(
        declination
    ) * math.cos(hour_angle)
    east = -math.cos(declination) * math.sin(hour_angle)
    az = math.degrees(math.atan2(east, north))
    if az < 0:
        az += 360.0
    return az % 360.0


def interpolate(f0: float, f1: float, f2: float, p: float) -> float:
    """3-point interpolation through values at ``p = 0``, ``0.5`` and ``1``."""

    a = f1 - f0
    b = f2 - f1 - a
    return f0 + p * (2.0 * a + b * (2.0 * p - 1.0))


def crossing_fraction(f0: float, f1: float, f2: float) -> float:
    """Return the root in ``[0, 1]`` of the parabola used by :func:`interpolate`.

    ``f0`` and ``f2`` must differ in sign (or one of them be zero). The result
    is ``1.0`` only when ``f2`` is exactly zero, i.e. a set landing on the
    closing hour boundary; any other crossing gives ``0 <= p < 1``.
    """

    a = f1 - f0
    b = f2 - f1 - a
    quad = 2.0 * b
    lin = 2.0 * a - b

    if quad == 0.0:
        return min(max(-f0 / lin, 0.0), 1.0)

    disc = math.sqrt(max(lin * lin - 4.0 * quad * f0, 0.0))
    q = -0.5 * (lin + math.copysign(disc, lin))
    roots = [q / quad]
    if q != 0.0:
        roots.append(f0 / q)

    for root in roots:
        if 0.0 <= root <= 1.0:
            return root
    # Rounding pushed the root just outside the hour.
    nearest = min(roots, key=lambda r: abs(r - 0.5))
    return min(max(nearest, 0.0), 1.0)
