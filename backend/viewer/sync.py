# viewer/sync.py
# Keeps map markers and the event card list in step with the latest search.
# Responses from superseded searches are dropped on arrival (no cancellation).

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Tuple
from errors import SearchRequestError
from models import NormalizedEvent, SearchCriteria

log = logging.getLogger("nearby-events.viewer")

NO_RESULTS_MESSAGE = "No events found in the selected area."
FETCH_ERROR_MESSAGE = "Unable to fetch events. Please try again."
NO_DATETIME = "Date/Time not available"


@dataclass(frozen=True)
class MarkerDescriptor:
    lat: float
    lng: float
    title: str


@dataclass(frozen=True)
class EventCard:
    event_id: str
    title: str
    when: str
    description: str
    venue: str
    postal_code: str
    detail_url: Optional[str] = None


class MapRenderer(Protocol):
    def add_marker(self, marker: MarkerDescriptor) -> Any: ...
    def remove_marker(self, handle: Any) -> None: ...
    def fit_bounds(self, markers: List[MarkerDescriptor]) -> None: ...


class CardList(Protocol):
    def clear(self) -> None: ...
    def add_card(self, card: EventCard) -> None: ...
    def show_empty(self, message: str) -> None: ...
    def show_error(self, message: str) -> None: ...


class SearchState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SETTLED = "settled"
    FAILED = "failed"


def format_date_time(date_str: Optional[str], time_str: Optional[str]) -> str:
    """'2025-04-12', '18:30:00' -> 'April 12, 2025 6:30 PM'. Date only -> 'April 12, 2025'."""
    if not date_str:
        return NO_DATETIME
    try:
        day = datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError:
        return NO_DATETIME
    text = f"{day.strftime('%B')} {day.day}, {day.year}"
    if not time_str:
        return text
    clock = None
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            clock = datetime.strptime(time_str, fmt)
            break
        except ValueError:
            continue
    if clock is None:
        return text
    hour12 = clock.hour % 12 or 12
    return f"{text} {hour12}:{clock.minute:02d} {'AM' if clock.hour < 12 else 'PM'}"


def marker_for(ev: NormalizedEvent) -> MarkerDescriptor:
    return MarkerDescriptor(lat=ev.location.latitude, lng=ev.location.longitude, title=ev.name)


def card_for(ev: NormalizedEvent) -> EventCard:
    v = ev.venue
    return EventCard(
        event_id=ev.id,
        title=ev.name,
        when=format_date_time(ev.startDate, ev.startTime),
        description=ev.description,
        venue=f"{v.name}, {v.addressLine}, {v.city}, {v.stateCode}",
        postal_code=v.postalCode,
        detail_url=ev.detailUrl,
    )


class ViewSynchronizer:
    """
    Owns the MarkerSet and the search sequence token.

    Each search gets a token from begin_search(). Only a response carrying the
    latest token may touch the view; older ones are discarded silently. A
    current response replaces markers and cards in one synchronous pass, so
    there is never a mixed old + new render.

    Must be driven from a single event loop.
    """

    def __init__(
        self,
        renderer: MapRenderer,
        cards: CardList,
        fetch: Optional[Callable[[SearchCriteria], Awaitable[List[NormalizedEvent]]]] = None,
        clear_on_failure: bool = False,
    ):
        self.renderer = renderer
        self.cards = cards
        self.fetch = fetch
        self.clear_on_failure = clear_on_failure
        self.state = SearchState.IDLE
        self.last_error: Optional[Exception] = None
        self._latest = 0
        self._markers: List[Tuple[str, Any]] = []

    @property
    def latest_token(self) -> int:
        return self._latest

    @property
    def marker_ids(self) -> List[str]:
        return [event_id for event_id, _ in self._markers]

    def begin_search(self) -> int:
        """Pending: the previous markers and cards stay up until the response lands."""
        self._latest += 1
        self.state = SearchState.PENDING
        return self._latest

    def is_stale(self, token: int) -> bool:
        return token != self._latest

    def _clear(self) -> None:
        for _, handle in self._markers:
            self.renderer.remove_marker(handle)
        self._markers = []
        self.cards.clear()

    def apply_results(self, token: int, events: List[NormalizedEvent]) -> bool:
        if self.is_stale(token):
            log.debug("discarding stale results for search %d (latest %d)", token, self._latest)
            return False

        self._clear()
        placed: List[MarkerDescriptor] = []
        for ev in events:
            marker = marker_for(ev)
            self._markers.append((ev.id, self.renderer.add_marker(marker)))
            self.cards.add_card(card_for(ev))
            placed.append(marker)

        if placed:
            self.renderer.fit_bounds(placed)
        else:
            self.cards.show_empty(NO_RESULTS_MESSAGE)
        self.state = SearchState.SETTLED
        self.last_error = None
        return True

    def apply_failure(self, token: int, error: Exception) -> bool:
        if self.is_stale(token):
            log.debug("discarding stale failure for search %d (latest %d)", token, self._latest)
            return False

        log.warning("search %d failed: %s", token, error)
        if self.clear_on_failure:
            self._clear()
        self.cards.show_error(FETCH_ERROR_MESSAGE)
        self.state = SearchState.FAILED
        self.last_error = error
        return True

    async def search(self, criteria: SearchCriteria) -> bool:
        """
        Issue one search. Returns False when a newer search superseded this one.
        Any fetch failure leaves the view Failed; errors other than
        SearchRequestError are re-raised after that.
        """
        if self.fetch is None:
            raise RuntimeError("ViewSynchronizer has no fetch function")
        token = self.begin_search()
        try:
            events = await self.fetch(criteria)
        except SearchRequestError as e:
            return self.apply_failure(token, e)
        except Exception as e:
            self.apply_failure(token, e)
            raise
        return self.apply_results(token, events)
