"""Pydantic models for API requests and responses."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

MAX_WINDOW_HOURS = 24 * 14

# Range of datetime in UTC, narrowed so every event in the widest window is
# still representable.
MIN_QUERY_TIME = -62135596800 + MAX_WINDOW_HOURS * 1800
MAX_QUERY_TIME = 253402300799 - MAX_WINDOW_HOURS * 1800


class SunQueryParams(BaseModel):
    """Validated query parameters for the ``/sun`` endpoints."""

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")
    t: Optional[int] = Field(
        None,
        ge=MIN_QUERY_TIME,
        le=MAX_QUERY_TIME,
        description="Query time in UTC seconds since the Unix epoch (default: now)",
    )
    window: Optional[int] = Field(
        None, gt=0, le=MAX_WINDOW_HOURS, description="Search window in hours (even)"
    )

    @field_validator("window")
    def validate_window(cls, value: Optional[int]) -> Optional[int]:
        if value is None:
            return value
        if value % 2:
            raise ValueError("window must be an even number of hours")
        return value


class SunEventModel(BaseModel):
    """A sun rise or set event."""

    kind: Literal["rise", "set"]
    time: int = Field(..., description="Event time in UTC seconds since the Unix epoch")
    time_utc: str = Field(..., description="Event time in UTC (ISO-8601)")
    azimuth: float = Field(..., description="Degrees east of north")


class SunResponse(BaseModel):
    """Successful sun rise/set response payload."""

    ok: bool = True
    latitude: float = Field(..., description="Latitude in degrees")
    longitude: float = Field(..., description="Longitude in degrees")
    query_time: int = Field(..., description="Query time in UTC seconds")
    query_time_utc: str = Field(..., description="Query time in UTC (ISO-8601)")
    window: int = Field(..., description="Search window in hours")
    has_rise: bool
    has_set: bool
    is_visible: bool = Field(..., description="Sun above the horizon at the query time")
    rise_time: Optional[int] = None
    set_time: Optional[int] = None
    rise_time_utc: Optional[str] = None
    set_time_utc: Optional[str] = None
    rise_azimuth: Optional[float] = None
    set_azimuth: Optional[float] = None
    preceding: List[SunEventModel] = Field(default_factory=list)
    succeeding: List[SunEventModel] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    window: int


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
