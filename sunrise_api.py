"""FastAPI application exposing sun rise and set computations."""

from __future__ import annotations

import json
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Annotated, List

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from models import (
    ErrorResponse,
    HealthResponse,
    SunEventModel,
    SunQueryParams,
    SunResponse,
)
from sunrise.events import SR_WINDOW, SunEvent, SunTimes, calculate, validate_window
from sunrise.report import format_report, format_utc

logging.basicConfig(level=logging.INFO, format="%(message)s")
LOGGER = logging.getLogger("sunrise-api")

APP_DESCRIPTION = (
    "Nearest sun rise and set times, azimuths and visibility for any location"
)

DEFAULT_WINDOW: int = SR_WINDOW


def resolve_default_window() -> int:
    """Return the search window configured through ``SR_WINDOW``."""

    override = os.environ.get("SR_WINDOW")
    if not override:
        return SR_WINDOW
    try:
        window = int(override)
    except ValueError as exc:
        raise ValueError(f"SR_WINDOW must be an integer: {override!r}") from exc
    return validate_window(window)


@asynccontextmanager
async def lifespan(app: FastAPI):
    global DEFAULT_WINDOW
    try:
        DEFAULT_WINDOW = resolve_default_window()
    except ValueError as exc:
        LOGGER.error(json.dumps({"event": "config_invalid", "error": str(exc)}))
        raise
    LOGGER.info(json.dumps({"event": "startup", "window": DEFAULT_WINDOW}))
    yield


app = FastAPI(
    title="Sunrise Window API",
    description=APP_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


def _compute(params: SunQueryParams) -> SunTimes:
    query_time = params.t if params.t is not None else int(time.time())
    window = params.window if params.window is not None else DEFAULT_WINDOW
    start_time = time.perf_counter()
    try:
        result = calculate(params.lat, params.lon, query_time, window=window)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    duration_ms = (time.perf_counter() - start_time) * 1000.0
    LOGGER.info(
        json.dumps(
            {
                "event": "sun",
                "lat": params.lat,
                "lon": params.lon,
                "t": query_time,
                "window": window,
                "has_rise": result.has_rise,
                "has_set": result.has_set,
                "visible": result.is_visible,
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return result


def _event_models(events: List[SunEvent]) -> List[SunEventModel]:
    return [
        SunEventModel(
            kind=event.kind,
            time=event.time,
            time_utc=format_utc(event.time),
            azimuth=event.azimuth,
        )
        for event in events
    ]


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True, window=DEFAULT_WINDOW)


@app.get(
    "/sun",
    response_model=SunResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def sun_endpoint(params: Annotated[SunQueryParams, Query()]) -> SunResponse:
    result = _compute(params)
    return SunResponse(
        latitude=params.lat,
        longitude=params.lon,
        query_time=result.query_time,
        query_time_utc=format_utc(result.query_time),
        window=result.window,
        has_rise=result.has_rise,
        has_set=result.has_set,
        is_visible=result.is_visible,
        rise_time=result.rise_time,
        set_time=result.set_time,
        rise_time_utc=format_utc(result.rise_time) if result.has_rise else None,
        set_time_utc=format_utc(result.set_time) if result.has_set else None,
        rise_azimuth=result.rise_azimuth,
        set_azimuth=result.set_azimuth,
        preceding=_event_models(result.preceding()),
        succeeding=_event_models(result.succeeding()),
    )


@app.get(
    "/sun/report",
    response_class=PlainTextResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def sun_report_endpoint(params: Annotated[SunQueryParams, Query()]) -> str:
    result = _compute(params)
    return format_report(result, params.lat, params.lon)
