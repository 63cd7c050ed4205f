# utils.py
# Helpers: upstream time window formatting, time-of-day bucketing

from __future__ import annotations
from typing import List, Optional
from datetime import date, datetime, time, timezone
from models import DateRange, NormalizedEvent

# bucket -> (first hour, hour after last). late-night wraps past midnight
TIME_OF_DAY_WINDOWS = {
    "morning": (6, 12),
    "afternoon": (12, 18),
    "evening": (18, 22),
    "late-night": (22, 6),
}


def iso_no_ms(dt: datetime) -> str:
    """
    Ticketmaster requires ISO8601 *without* fractional seconds and in UTC.
    Example: 2025-10-25T04:00:00Z
    """
    # Naive values are taken as already being UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def compose_wall_clock(day: date, at: time) -> datetime:
    """Combine a local date and time without resolving any timezone."""
    return datetime.combine(day, at.replace(microsecond=0))


def build_window(date_range: DateRange) -> tuple[str, str]:
    """
    Upstream start/end bounds for a date range.

    The venue's timezone is unknown here, so local wall-clock values are sent
    with a UTC marker as-is. Events near midnight can land on the wrong side.
    """
    start = compose_wall_clock(date_range.startDate, date_range.startTime)
    end = compose_wall_clock(date_range.endDate, date_range.endTime)
    return iso_no_ms(start), iso_no_ms(end)


def event_hour(start_time: Optional[str]) -> Optional[int]:
    """Hour from an upstream local time like '19:30:00'. None when absent or garbled."""
    if not start_time:
        return None
    head = start_time.strip().split(":", 1)[0]
    try:
        hour = int(head)
    except ValueError:
        return None
    if hour < 0 or hour > 23:
        return None
    return hour


def in_bucket(hour: int, bucket: str) -> bool:
    first, stop = TIME_OF_DAY_WINDOWS[bucket]
    if first < stop:
        return first <= hour < stop
    return hour >= first or hour < stop


def filter_time_of_day(events: List[NormalizedEvent], bucket: Optional[str]) -> List[NormalizedEvent]:
    """
    Keep events whose local start hour falls in the bucket.
    Events without a usable time are always kept. Applying twice is a no-op.
    """
    if not bucket:
        return list(events)
    out: List[NormalizedEvent] = []
    for ev in events:
        hour = event_hour(ev.startTime)
        if hour is None or in_bucket(hour, bucket):
            out.append(ev)
    return out
