from __future__ import annotations

from datetime import UTC, datetime
from typing import Iterable

import pytest
from fastapi.testclient import TestClient

import sunrise_api
from models import MAX_QUERY_TIME, MIN_QUERY_TIME
from sunrise_api import app

QUERY_TIME = int(datetime(2025, 3, 20, 12, tzinfo=UTC).timestamp())


@pytest.fixture()
def api_client(monkeypatch: pytest.MonkeyPatch) -> Iterable[TestClient]:
    monkeypatch.delenv("SR_WINDOW", raising=False)
    with TestClient(app) as client:
        yield client


def test_health_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "window": 48}


def test_sun_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/sun", params={"lat": 0, "lon": 0, "t": QUERY_TIME})
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["query_time"] == QUERY_TIME
    assert payload["query_time_utc"] == "2025-03-20T12:00:00Z"
    assert payload["window"] == 48
    assert payload["has_rise"] is True
    assert payload["has_set"] is True
    assert payload["is_visible"] is True
    assert payload["rise_time"] < QUERY_TIME < payload["set_time"]
    assert payload["rise_time_utc"].startswith("2025-03-20T06:")
    assert payload["rise_azimuth"] == pytest.approx(90.0, abs=0.5)
    assert [event["kind"] for event in payload["preceding"]] == ["rise"]
    assert [event["kind"] for event in payload["succeeding"]] == ["set"]
    assert payload["preceding"][0]["azimuth"] == payload["rise_azimuth"]
    assert payload["succeeding"][0]["azimuth"] == payload["set_azimuth"]


def test_sun_endpoint_polar_night(api_client: TestClient) -> None:
    winter = int(datetime(2025, 12, 21, tzinfo=UTC).timestamp())
    response = api_client.get("/sun", params={"lat": 89, "lon": 0, "t": winter})
    assert response.status_code == 200
    payload = response.json()
    assert payload["has_rise"] is False
    assert payload["has_set"] is False
    assert payload["is_visible"] is False
    assert payload["rise_time"] is None
    assert payload["rise_azimuth"] is None
    assert payload["preceding"] == []
    assert payload["succeeding"] == []


def test_sun_endpoint_window_override(api_client: TestClient) -> None:
    response = api_client.get(
        "/sun", params={"lat": 45, "lon": 7, "t": QUERY_TIME, "window": 96}
    )
    assert response.status_code == 200
    assert response.json()["window"] == 96


def test_sun_endpoint_defaults_to_now(api_client: TestClient) -> None:
    response = api_client.get("/sun", params={"lat": 10, "lon": 20})
    assert response.status_code == 200
    assert response.json()["query_time"] > QUERY_TIME


@pytest.mark.parametrize(
    "params",
    [
        {"lat": 95, "lon": 0},
        {"lat": 0, "lon": 181},
        {"lat": 0, "lon": 0, "window": 47},
        {"lat": 0, "lon": 0, "window": 0},
        {"lon": 0},
        {"lat": 0, "lon": 0, "t": 253402300800},
        {"lat": 0, "lon": 0, "t": -62135596801},
        {"lat": 0, "lon": 0, "t": 10**13},
        {"lat": 0, "lon": 0, "t": MAX_QUERY_TIME + 1},
        {"lat": 0, "lon": 0, "t": MIN_QUERY_TIME - 1},
    ],
)
def test_validation_error(api_client: TestClient, params: dict) -> None:
    response = api_client.get("/sun", params=params)
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["ok"] is False


def test_report_endpoint(api_client: TestClient) -> None:
    response = api_client.get(
        "/sun/report", params={"lat": 0, "lon": 0, "t": QUERY_TIME}
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text.startswith("Sun rise/set nearest 2025-03-20T12:00:00Z")
    assert response.text.endswith("Sun visible.\n")


def test_window_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SR_WINDOW", "72")
    with TestClient(app) as client:
        assert client.get("/health").json()["window"] == 72
        payload = client.get("/sun", params={"lat": 0, "lon": 0, "t": QUERY_TIME}).json()
        assert payload["window"] == 72


@pytest.mark.parametrize("value", ["abc", "25", "-4"])
def test_invalid_window_environment(value: str, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SR_WINDOW", value)
    with pytest.raises(ValueError):
        sunrise_api.resolve_default_window()


@pytest.mark.parametrize("query_time", [MIN_QUERY_TIME, MAX_QUERY_TIME])
@pytest.mark.parametrize("path", ["/sun", "/sun/report"])
def test_extreme_query_times_are_served(
    api_client: TestClient, path: str, query_time: int
) -> None:
    response = api_client.get(path, params={"lat": 0, "lon": 0, "t": query_time})
    assert response.status_code == 200
