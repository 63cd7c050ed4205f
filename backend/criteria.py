# criteria.py
# Raw form/query strings -> validated SearchCriteria.
# Lenient on free-text dates, strict on what actually gets forwarded upstream.

from __future__ import annotations
import math
from datetime import date, datetime, time
from typing import Optional
from pydantic import ValidationError
from errors import InvalidCriteria, LocationUnavailable
from models import MAX_RADIUS_MILES, TIME_OF_DAY_VALUES, DateRange, GeoPoint, SearchCriteria

DEFAULT_RADIUS_MILES = 10.0

DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")
TIME_FORMATS = ("%H:%M:%S", "%H:%M", "%I:%M %p", "%I:%M%p")

START_OF_DAY = time(0, 0, 0)
END_OF_DAY = time(23, 59, 59)


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def parse_location(raw: Optional[str]) -> GeoPoint:
    """'lat,lng' -> GeoPoint. Missing input is LocationUnavailable, bad input InvalidCriteria."""
    if _blank(raw):
        raise LocationUnavailable("Location is required")
    parts = [p.strip() for p in str(raw).split(",")]
    if len(parts) != 2:
        raise InvalidCriteria(f"Location must be 'lat,lng', got {raw!r}")
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError:
        raise InvalidCriteria(f"Location must be numeric, got {raw!r}")
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidCriteria("Location must be finite")
    try:
        return GeoPoint(latitude=lat, longitude=lng)
    except ValidationError:
        raise InvalidCriteria(f"Location out of range: {lat},{lng}")


def parse_radius(raw: Optional[str]) -> float:
    """Never fails. Garbage -> default, anything else clamped into [0, MAX_RADIUS_MILES]."""
    try:
        radius = float(raw) if not _blank(raw) else DEFAULT_RADIUS_MILES
    except (TypeError, ValueError):
        radius = DEFAULT_RADIUS_MILES
    if math.isnan(radius):
        radius = DEFAULT_RADIUS_MILES
    return max(0.0, min(radius, MAX_RADIUS_MILES))


def parse_date(raw: Optional[str]) -> Optional[date]:
    if _blank(raw):
        return None
    text = str(raw).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_time(raw: Optional[str]) -> Optional[time]:
    if _blank(raw):
        return None
    text = str(raw).strip().upper()
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def split_datetime(raw: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """
    '2025-04-12T18:30:00' -> ('2025-04-12', '18:30:00').
    Zone suffixes are dropped; the value is read as venue wall-clock time.
    """
    if _blank(raw):
        return None, None
    text = str(raw).strip()
    if "T" not in text:
        return text, None
    day, clock = text.split("T", 1)
    if clock.endswith("Z"):
        clock = clock[:-1]
    for sign in ("+", "-"):
        if sign in clock:
            clock = clock.split(sign, 1)[0]
    clock = clock.split(".", 1)[0]
    return day, (clock or None)


def build_date_range(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
) -> Optional[DateRange]:
    """
    Complete a partially filled date range.
    One date only -> single-day search. No usable date -> no date filter at all.
    """
    first = parse_date(start_date)
    last = parse_date(end_date)
    if first is None and last is None:
        return None
    first = first or last
    last = last or first

    try:
        return DateRange(
            startDate=first,
            endDate=last,
            startTime=parse_time(start_time) or START_OF_DAY,
            endTime=parse_time(end_time) or END_OF_DAY,
        )
    except ValidationError:
        raise InvalidCriteria("End of date range is before its start")


def parse_time_of_day(raw: Optional[str]) -> Optional[str]:
    if _blank(raw):
        return None
    value = str(raw).strip().lower().replace("_", "-")
    if value not in TIME_OF_DAY_VALUES:
        raise InvalidCriteria(
            f"timeOfDay must be one of {', '.join(TIME_OF_DAY_VALUES)}; got {raw!r}"
        )
    return value


def build_criteria(
    location: Optional[str],
    radius: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    category: Optional[str] = None,
    time_of_day: Optional[str] = None,
) -> SearchCriteria:
    return SearchCriteria(
        center=parse_location(location),
        radiusMiles=parse_radius(radius),
        dateRange=build_date_range(start_date, end_date, start_time, end_time),
        timeOfDay=parse_time_of_day(time_of_day),
        category=None if _blank(category) else str(category).strip(),
    )
