"""Sunrise and sunset search over an hourly window around a query time."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, replace
from functools import reduce
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .astro import (
    HORIZON_ALTITUDE,
    K1,
    altitude,
    azimuth,
    crossing_fraction,
    interpolate,
    julian_date,
    local_sidereal_time,
    sun_coordinates,
)

__all__ = [
    "SR_WINDOW",
    "NearestEvents",
    "SunEvent",
    "SunTimes",
    "calculate",
    "find_crossings",
    "select_nearest",
    "validate_window",
]

LOGGER = logging.getLogger(__name__)

# Default search window in hours. Events further than SR_WINDOW / 2 hours from
# the query time are not found; wider windows help at high latitudes.
SR_WINDOW = 48

RISE = "rise"
SET = "set"


@dataclass(frozen=True)
class SunEvent:
    """A single horizon crossing located inside the search window."""

    kind: str
    time: int
    azimuth: float
    hour: int
    fraction: float


@dataclass(frozen=True)
class NearestEvents:
    """Closest rise and set on each side of the query time."""

    rise_before: Optional[SunEvent] = None
    rise_after: Optional[SunEvent] = None
    set_before: Optional[SunEvent] = None
    set_after: Optional[SunEvent] = None


@dataclass(frozen=True)
class SunTimes:
    """Result of :func:`calculate`.

    All times are UTC seconds since the Unix epoch, azimuths are degrees
    east of north.
    """

    query_time: int
    rise: Optional[SunEvent]
    set: Optional[SunEvent]
    is_visible: bool
    window: int = SR_WINDOW

    @property
    def has_rise(self) -> bool:
        return self.rise is not None

    @property
    def has_set(self) -> bool:
        return self.set is not None

    @property
    def rise_time(self) -> Optional[int]:
        return self.rise.time if self.rise is not None else None

    @property
    def set_time(self) -> Optional[int]:
        return self.set.time if self.set is not None else None

    @property
    def rise_azimuth(self) -> Optional[float]:
        return self.rise.azimuth if self.rise is not None else None

    @property
    def set_azimuth(self) -> Optional[float]:
        return self.set.azimuth if self.set is not None else None

    def _found(self) -> List[SunEvent]:
        return sorted(
            (event for event in (self.rise, self.set) if event is not None),
            key=lambda event: event.time,
        )

    def preceding(self) -> List[SunEvent]:
        """Reported events strictly before the query time, oldest first."""
        return [event for event in self._found() if event.time < self.query_time]

    def succeeding(self) -> List[SunEvent]:
        """Reported events at or after the query time, oldest first."""
        return [event for event in self._found() if event.time >= self.query_time]


def validate_window(window: int) -> int:
    """Return *window* as an ``int`` if it is a positive even number of hours."""

    if isinstance(window, bool) or not isinstance(window, (int, np.integer)):
        raise ValueError(f"Search window must be an integer number of hours: {window!r}")
    if window <= 0 or window % 2:
        raise ValueError(f"Search window must be a positive even number of hours: {window}")
    return int(window)


def _scan(
    latitude: float, longitude: float, query_time: int, window: int
) -> Tuple[List[SunEvent], bool]:
    """Sample the window hourly and refine every horizon crossing.

    Sample ``k`` sits ``k - window / 2`` hours from *query_time*, so the centre
    sample is the query time itself. An altitude exactly on the horizon counts
    as below it.
    """

    half = window // 2
    hours = np.arange(window + 1, dtype=float)
    start = julian_date(query_time) - half / 24.0

    ra, dec = sun_coordinates(start + hours / 24.0)
    ra = np.unwrap(ra)
    hour_angle = math.radians(local_sidereal_time(start, longitude)) + hours * K1 - ra
    height = altitude(hour_angle, dec, latitude) - HORIZON_ALTITUDE

    # Half-hour samples from the mean hour angle and declination.
    mid_angle = (hour_angle[:-1] + hour_angle[1:]) / 2.0
    mid_dec = (dec[:-1] + dec[1:]) / 2.0
    mid_height = altitude(mid_angle, mid_dec, latitude) - HORIZON_ALTITUDE

    above = height > 0.0
    events: List[SunEvent] = []
    for k in np.flatnonzero(above[:-1] != above[1:]):
        k = int(k)
        p = crossing_fraction(
            float(height[k]), float(mid_height[k]), float(height[k + 1])
        )
        event_angle = interpolate(
            float(hour_angle[k]), float(mid_angle[k]), float(hour_angle[k + 1]), p
        )
        event_dec = interpolate(float(dec[k]), float(mid_dec[k]), float(dec[k + 1]), p)
        events.append(
            SunEvent(
                kind=RISE if above[k + 1] else SET,
                time=query_time + int(round((k + p - half) * 3600.0)),
                azimuth=azimuth(event_angle, event_dec, latitude),
                hour=k,
                fraction=p,
            )
        )

    return events, bool(above[half])


def find_crossings(
    latitude: float, longitude: float, query_time: int, window: int = SR_WINDOW
) -> List[SunEvent]:
    """Return every rise and set inside the window, in chronological order."""

    return _scan(latitude, longitude, query_time, validate_window(window))[0]


def _keep_closer(
    current: Optional[SunEvent], candidate: SunEvent, query_time: int
) -> SunEvent:
    if current is None or abs(candidate.time - query_time) < abs(current.time - query_time):
        return candidate
    return current


def select_nearest(events: Iterable[SunEvent], query_time: int) -> NearestEvents:
    """Reduce candidate events to the closest rise and set on each side.

    Events at exactly *query_time* are counted as succeeding it.
    """

    def fold(slots: NearestEvents, event: SunEvent) -> NearestEvents:
        side = "before" if event.time < query_time else "after"
        slot = f"{event.kind}_{side}"
        return replace(slots, **{slot: _keep_closer(getattr(slots, slot), event, query_time)})

    return reduce(fold, events, NearestEvents())


def _reported_pair(
    slots: NearestEvents,
) -> Tuple[Optional[SunEvent], Optional[SunEvent]]:
    """Choose the rise and set to report from the four nearest slots.

    With events on both sides the nearest preceding and succeeding events are
    reported; crossings alternate, so these are one rise and one set. With
    events on one side only, the nearest of each kind on that side is used.
    """

    before = [e for e in (slots.rise_before, slots.set_before) if e is not None]
    after = [e for e in (slots.rise_after, slots.set_after) if e is not None]

    if before and after:
        chosen = [
            max(before, key=lambda event: event.time),
            min(after, key=lambda event: event.time),
        ]
    else:
        chosen = before or after

    rise = next((event for event in chosen if event.kind == RISE), None)
    sunset = next((event for event in chosen if event.kind == SET), None)
    return rise, sunset


def calculate(
    latitude: float, longitude: float, query_time: int, window: int = SR_WINDOW
) -> SunTimes:
    """Find the sun rise and set nearest to *query_time*.

    Parameters
    ----------
    latitude, longitude:
        Observer position in degrees (east-positive longitude). Values are not
        range checked.
    query_time:
        UTC seconds since the Unix epoch.
    window:
        Width of the search window in hours; must be positive and even.

    Returns
    -------
    SunTimes
        The reported rise and set events and whether the sun is above the
        horizon at *query_time*. In polar regions zero, one or two events may
        be found, possibly both on the same side of *query_time*.
    """

    window = validate_window(window)
    query_time = int(query_time)
    events, visible = _scan(latitude, longitude, query_time, window)
    rise, sunset = _reported_pair(select_nearest(events, query_time))

    result = SunTimes(
        query_time=query_time, rise=rise, set=sunset, is_visible=visible, window=window
    )
    if LOGGER.isEnabledFor(logging.DEBUG):
        LOGGER.debug(
            json.dumps(
                {
                    "event": "sun_events",
                    "lat": latitude,
                    "lon": longitude,
                    "query_time": query_time,
                    "window": window,
                    "candidates": len(events),
                    "rise_time": result.rise_time,
                    "set_time": result.set_time,
                    "visible": visible,
                }
            )
        )
    return result
