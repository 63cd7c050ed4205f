# search.py
# Orchestrates one search: translate -> fetch (hard timeout) -> time-of-day filter.
# Stateless per call: no cache, no retry.

import asyncio
import logging
from typing import Optional
import httpx
from errors import UpstreamFetchError
from models import SearchCriteria, SearchResponse
from providers.ticketmaster import build_query, fetch_ticketmaster
from utils import filter_time_of_day

log = logging.getLogger("nearby-events.search")


# timeout wrapper for the upstream call
# returns (items, error) and never raises for upstream failures
async def run_with_timeout(coro, seconds: float, label: str):
    try:
        items = await asyncio.wait_for(coro, timeout=seconds)
        return items, None
    except asyncio.TimeoutError:
        msg = f"{label} timed out after {seconds}s"
        log.warning(msg)
        return [], UpstreamFetchError(msg, timed_out=True)
    except UpstreamFetchError as e:
        log.warning("%s error: %s", label, e)
        return [], e


async def search_events(
    criteria: SearchCriteria,
    api_key: str,
    timeout_s: float = 12,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SearchResponse:
    """
    Run a search end to end.
    Raises the single UpstreamFetchError when the provider fails; an empty
    result is a normal response.
    """
    query = build_query(criteria)
    events, err = await run_with_timeout(
        fetch_ticketmaster(query, api_key, timeout=timeout_s, transport=transport),
        timeout_s, "ticketmaster")
    if err is not None:
        raise err

    fetched = len(events)
    events = filter_time_of_day(events, criteria.timeOfDay)
    log.info("ticketmaster=%d kept=%d timeOfDay=%s", fetched, len(events), criteria.timeOfDay or "-")
    return SearchResponse(events=events)
