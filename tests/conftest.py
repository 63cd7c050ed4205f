"""Shared fixtures: ticketmaster payloads and fake view collaborators."""

import os
import sys

import pytest

# Add backend/ to path (modules are imported flat, as the app runs them)
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "backend")))

from models import GeoPoint, NormalizedEvent, Venue


def tm_record(event_id="ev-1", name="Jazz Night", local_time="19:30:00", lat="42.3601", lon="-71.0589", **extra):
    """A ticketmaster discovery record shaped like the real thing."""
    venue = {
        "name": "Symphony Hall",
        "postalCode": "02115",
        "city": {"name": "Boston"},
        "state": {"name": "Massachusetts", "stateCode": "MA"},
        "address": {"line1": "301 Massachusetts Ave"},
    }
    if lat is not None or lon is not None:
        venue["location"] = {"latitude": lat, "longitude": lon}
    record = {
        "id": event_id,
        "name": name,
        "url": f"https://www.ticketmaster.com/event/{event_id}",
        "info": "An evening of standards.",
        "dates": {"start": {"localDate": "2025-04-12", "localTime": local_time}},
        "classifications": [{"segment": {"name": "Music"}, "genre": {"name": "Jazz"}}],
        "_embedded": {"venues": [venue]},
    }
    record.update(extra)
    return record


def tm_body(*records):
    return {"_embedded": {"events": list(records)}, "page": {"size": 50, "totalElements": len(records)}}


def make_event(event_id="ev-1", start_time="19:30:00", lat=42.36, lon=-71.06, name=None):
    return NormalizedEvent(
        id=event_id,
        name=name or f"Event {event_id}",
        description="desc",
        startDate="2025-04-12",
        startTime=start_time,
        location=GeoPoint(latitude=lat, longitude=lon),
        venue=Venue(name="Hall", addressLine="1 Main St", city="Boston", stateCode="MA", postalCode="02115"),
    )


class FakeRenderer:
    """Records marker lifecycle calls the way a map widget would see them."""

    def __init__(self):
        self.live = {}
        self.next_handle = 0
        self.fits = []

    def add_marker(self, marker):
        self.next_handle += 1
        self.live[self.next_handle] = marker
        return self.next_handle

    def remove_marker(self, handle):
        del self.live[handle]

    def fit_bounds(self, markers):
        self.fits.append(list(markers))

    @property
    def titles(self):
        return sorted(m.title for m in self.live.values())


class FakeCards:
    def __init__(self):
        self.cards = []
        self.empty_message = None
        self.error_message = None

    def clear(self):
        self.cards = []
        self.empty_message = None

    def add_card(self, card):
        self.cards.append(card)

    def show_empty(self, message):
        self.empty_message = message

    def show_error(self, message):
        self.error_message = message


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def cards():
    return FakeCards()
