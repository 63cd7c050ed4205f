"""Tests for the GET /events endpoint."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

import main
from conftest import make_event
from errors import UpstreamFetchError
from models import SearchResponse

client = TestClient(main.app, raise_server_exceptions=False)


@pytest.fixture(autouse=True)
def api_key(monkeypatch):
    monkeypatch.setattr(main, "TICKETMASTER_API_KEY", "test-key")


def test_health_endpoint():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_events_success():
    search = AsyncMock(return_value=SearchResponse(events=[make_event("a"), make_event("b")]))
    with patch("main.search_events", search):
        response = client.get("/events", params={"location": "42.36,-71.06", "radius": "20"})

    assert response.status_code == 200
    data = response.json()
    assert [e["id"] for e in data["events"]] == ["a", "b"]
    first = data["events"][0]
    assert first["location"] == {"latitude": 42.36, "longitude": -71.06}
    assert set(first["venue"]) == {"name", "addressLine", "city", "stateCode", "postalCode"}

    criteria, key = search.call_args[0]
    assert key == "test-key"
    assert criteria.radiusMiles == 20
    assert search.call_args.kwargs["timeout_s"] == main.UPSTREAM_TIMEOUT_S


def test_events_criteria_from_query_string():
    search = AsyncMock(return_value=SearchResponse(events=[]))
    with patch("main.search_events", search):
        response = client.get("/events", params={
            "location": "42.36,-71.06",
            "radius": "banana",
            "startDateTime": "2025-04-12T18:00:00",
            "eventType": "Music",
            "timeOfDay": "evening",
        })

    assert response.status_code == 200
    criteria = search.call_args[0][0]
    assert criteria.radiusMiles == 10
    assert criteria.dateRange.startDate.isoformat() == "2025-04-12"
    assert criteria.dateRange.endDate.isoformat() == "2025-04-12"
    assert criteria.dateRange.startTime.isoformat() == "18:00:00"
    assert criteria.dateRange.endTime.isoformat() == "23:59:59"
    assert criteria.category == "Music"
    assert criteria.timeOfDay == "evening"


def test_events_empty_is_success():
    with patch("main.search_events", AsyncMock(return_value=SearchResponse(events=[]))):
        response = client.get("/events", params={"location": "42.36,-71.06"})
    assert response.status_code == 200
    assert response.json() == {"events": []}


def test_events_missing_location_is_400_without_upstream_call():
    search = AsyncMock()
    with patch("main.search_events", search):
        response = client.get("/events", params={"radius": "10"})
    assert response.status_code == 400
    assert response.json() == {"error": "Location is required"}
    search.assert_not_called()


def test_events_bad_time_of_day_is_400():
    search = AsyncMock()
    with patch("main.search_events", search):
        response = client.get("/events", params={"location": "42,-71", "timeOfDay": "brunch"})
    assert response.status_code == 400
    assert "timeOfDay" in response.json()["error"]
    search.assert_not_called()


def test_events_upstream_failure_is_502():
    with patch("main.search_events", AsyncMock(side_effect=UpstreamFetchError("ticketmaster responded 500", status_code=500))):
        response = client.get("/events", params={"location": "42,-71"})
    assert response.status_code == 502
    body = response.json()
    assert "events" not in body
    assert body["error"].startswith("Unable to fetch events")


def test_events_upstream_timeout_is_504():
    with patch("main.search_events", AsyncMock(side_effect=UpstreamFetchError("slow", timed_out=True))):
        response = client.get("/events", params={"location": "42,-71"})
    assert response.status_code == 504


def test_events_without_api_key(monkeypatch):
    monkeypatch.setattr(main, "TICKETMASTER_API_KEY", "")
    response = client.get("/events", params={"location": "42,-71"})
    assert response.status_code == 500
    assert response.json() == {"error": "Upstream API key not configured"}


def test_unexpected_error_is_generic_500():
    with patch("main.search_events", AsyncMock(side_effect=RuntimeError("secret detail"))):
        response = client.get("/events", params={"location": "42,-71"})
    assert response.status_code == 500
    assert response.json() == {"error": "Server error"}
