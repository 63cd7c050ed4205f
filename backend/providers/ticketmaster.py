# providers/ticketmaster.py
# Ticketmaster Discovery v2: criteria -> query params, one read-only call, records -> NormalizedEvent.

import logging
import math
import httpx
from typing import List, Optional
from errors import UpstreamFetchError
from models import GeoPoint, NormalizedEvent, SearchCriteria, UpstreamQueryParams, Venue, format_radius
from utils import build_window

log = logging.getLogger("nearby-events.ticketmaster")

EVENTS_URL = "https://app.ticketmaster.com/discovery/v2/events.json"

HEADERS = {
    "User-Agent": "NearbyEvents/0.1",
    "Accept": "application/json",
}

# placeholders so rendering code never has to branch on a missing field
NO_NAME = "Untitled event"
NO_DESCRIPTION = "No description available"
NO_VENUE = "Venue TBA"
NO_ADDRESS = "Address unavailable"
NO_CITY = "Unknown city"
NO_CODE = "N/A"


def build_query(criteria: SearchCriteria) -> UpstreamQueryParams:
    """Pure mapping, no I/O. timeOfDay has no upstream axis and is left out."""
    center = criteria.center
    fields = {
        "latlong": f"{center.latitude},{center.longitude}",
        "radius": format_radius(criteria.radiusMiles),
        "unit": "miles",
    }
    if criteria.dateRange is not None:
        fields["startDateTime"], fields["endDateTime"] = build_window(criteria.dateRange)
    if criteria.category:
        fields["classificationName"] = criteria.category
    return UpstreamQueryParams(**fields)


def _obj(value) -> dict:
    return value if isinstance(value, dict) else {}


def _text(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _first(*values):
    # 0 and 0.0 are real coordinates; only None and blank strings count as missing
    for value in values:
        if value is not None and value != "":
            return value
    return None


def _coords(venue: dict) -> Optional[GeoPoint]:
    loc = _obj(venue.get("location"))
    try:
        vlat = float(_first(loc.get("latitude"), venue.get("latitude")))
        vlon = float(_first(loc.get("longitude"), venue.get("longitude")))
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(vlat) and math.isfinite(vlon)):
        return None
    if not (-90 <= vlat <= 90 and -180 <= vlon <= 180):
        return None
    return GeoPoint(latitude=vlat, longitude=vlon)


def _category(ev: dict) -> Optional[str]:
    classes = ev.get("classifications")
    if not isinstance(classes, list) or not classes:
        return None
    first = _obj(classes[0])
    for key in ("segment", "genre"):
        name = _text(_obj(first.get(key)).get("name"))
        if name and name.lower() != "undefined":
            return name
    return None


def normalize_event(ev) -> Optional[NormalizedEvent]:
    """One upstream record -> NormalizedEvent, or None when the venue has no usable coordinates."""
    ev = _obj(ev)
    venues = _obj(ev.get("_embedded")).get("venues")
    venue = _obj(venues[0]) if isinstance(venues, list) and venues else {}
    where = _coords(venue)
    if where is None:
        return None

    name = _text(ev.get("name")) or NO_NAME
    start = _obj(_obj(ev.get("dates")).get("start"))

    return NormalizedEvent(
        id=_text(ev.get("id")) or f"{name}|{where.latitude:.4f}|{where.longitude:.4f}",
        name=name,
        description=_text(ev.get("info")) or _text(ev.get("pleaseNote")) or NO_DESCRIPTION,
        startDate=_text(start.get("localDate")),
        startTime=_text(start.get("localTime")),
        location=where,
        venue=Venue(
            name=_text(venue.get("name")) or NO_VENUE,
            addressLine=_text(_obj(venue.get("address")).get("line1")) or NO_ADDRESS,
            city=_text(_obj(venue.get("city")).get("name")) or NO_CITY,
            stateCode=_text(_obj(venue.get("state")).get("stateCode")) or NO_CODE,
            postalCode=_text(venue.get("postalCode")) or NO_CODE,
        ),
        detailUrl=_text(ev.get("url")),
        category=_category(ev),
    )


def extract_events(js) -> list:
    """Pull the raw record list out of the response body. Raises on an ill-shaped body."""
    if not isinstance(js, dict):
        raise UpstreamFetchError("ticketmaster returned a non-object body")
    embedded = js.get("_embedded")
    if embedded is None:
        # no matches: ticketmaster simply leaves _embedded out
        return []
    events = _obj(embedded).get("events")
    if not isinstance(events, list):
        raise UpstreamFetchError("ticketmaster body has no events list")
    return events


async def fetch_ticketmaster(
    query: UpstreamQueryParams,
    api_key: str,
    timeout: float = 20.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[NormalizedEvent]:
    """
    Single request, no retry. Every failure mode surfaces as one UpstreamFetchError;
    either the whole list comes back or nothing does.
    """
    params = query.to_params(api_key)
    try:
        async with httpx.AsyncClient(timeout=timeout, headers=HEADERS, transport=transport) as client:
            r = await client.get(EVENTS_URL, params=params)
    except httpx.TimeoutException as e:
        raise UpstreamFetchError(f"ticketmaster timed out: {e}", timed_out=True) from e
    except httpx.HTTPError as e:
        raise UpstreamFetchError(f"ticketmaster unreachable: {e}") from e

    if r.status_code < 200 or r.status_code >= 300:
        log.warning("status: %s body: %s", r.status_code, r.text[:400])
        raise UpstreamFetchError(f"ticketmaster responded {r.status_code}", status_code=r.status_code)

    try:
        js = r.json()
    except ValueError as e:
        raise UpstreamFetchError("ticketmaster body is not valid JSON", status_code=r.status_code) from e
    raw = extract_events(js)

    out: List[NormalizedEvent] = []
    for ev in raw:
        item = normalize_event(ev)
        if item is None:
            continue
        out.append(item)
    dropped = len(raw) - len(out)
    if dropped:
        log.info("dropped %d of %d records without venue coordinates", dropped, len(raw))
    return out
