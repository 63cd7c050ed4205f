# viewer/api_client.py
# Client side of GET /events: SearchCriteria -> query string, JSON -> NormalizedEvent list.

import httpx
from typing import Dict, List, Optional
from errors import SearchRequestError
from models import NormalizedEvent, SearchCriteria, SearchResponse, format_radius

HEADERS = {
    "User-Agent": "NearbyEvents/0.1",
    "Accept": "application/json",
}


def encode_criteria(criteria: SearchCriteria) -> Dict[str, str]:
    """Query params for GET /events. Date bounds go out as wall-clock ISO without a zone."""
    center = criteria.center
    params = {
        "location": f"{center.latitude},{center.longitude}",
        "radius": format_radius(criteria.radiusMiles),
    }
    rng = criteria.dateRange
    if rng is not None:
        params["startDateTime"] = f"{rng.startDate.isoformat()}T{rng.startTime.strftime('%H:%M:%S')}"
        params["endDateTime"] = f"{rng.endDate.isoformat()}T{rng.endTime.strftime('%H:%M:%S')}"
    if criteria.category:
        params["eventType"] = criteria.category
    if criteria.timeOfDay:
        params["timeOfDay"] = criteria.timeOfDay
    return params


def _error_text(r: httpx.Response) -> str:
    try:
        js = r.json()
    except ValueError:
        return r.text[:200] or f"HTTP {r.status_code}"
    if isinstance(js, dict) and js.get("error"):
        return str(js["error"])
    return f"HTTP {r.status_code}"


class EventsClient:
    """Small async client for the events endpoint."""

    def __init__(self, base_url: str, timeout: float = 20.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def fetch_events(self, criteria: SearchCriteria) -> List[NormalizedEvent]:
        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout,
                                         headers=HEADERS, transport=self.transport) as client:
                r = await client.get("/events", params=encode_criteria(criteria))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise SearchRequestError(f"events request failed: {e}") from e

        if r.status_code >= 400:
            raise SearchRequestError(_error_text(r), status_code=r.status_code)
        try:
            return SearchResponse.model_validate(r.json()).events
        except ValueError as e:
            # pydantic's ValidationError is a ValueError too
            raise SearchRequestError("events response was not understood", status_code=r.status_code) from e
