"""Plain-text rendering of a :class:`~sunrise.events.SunTimes` result."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import List

from .events import RISE, SunEvent, SunTimes

__all__ = ["format_report", "format_utc"]


def format_utc(unix_time: int) -> str:
    """ISO-8601 UTC timestamp with a ``Z`` suffix."""

    return datetime.fromtimestamp(unix_time, UTC).isoformat().replace("+00:00", "Z")


def _event_line(event: SunEvent) -> str:
    label = "Sun rise at" if event.kind == RISE else "Sun set at "
    return f"\t{label} {format_utc(event.time)}, Azimuth {event.azimuth:.2f}"


def format_report(result: SunTimes, latitude: float, longitude: float) -> str:
    """Describe the events on either side of the query time."""

    half = result.window // 2
    lines: List[str] = [
        f"Sun rise/set nearest {format_utc(result.query_time)} "
        f"for latitude {latitude:.2f} longitude {longitude:.2f}:",
        "Preceding event:",
    ]

    preceding = result.preceding()
    if not preceding:
        lines.append(f"\tNo sun rise or set during preceding {half} hours")
    lines.extend(_event_line(event) for event in preceding)

    lines.append("Succeeding event:")
    succeeding = result.succeeding()
    if not succeeding:
        lines.append(f"\tNo sun rise or set during succeeding {half} hours")
    lines.extend(_event_line(event) for event in succeeding)

    lines.append("Sun visible." if result.is_visible else "Sun not visible.")
    return "\n".join(lines) + "\n"
