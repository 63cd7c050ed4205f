# models.py
# typed search criteria, upstream query params and the normalized event shape

from datetime import date, datetime, time
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Dict, List, Literal, Optional

TimeOfDay = Literal["morning", "afternoon", "evening", "late-night"]
TIME_OF_DAY_VALUES = ("morning", "afternoon", "evening", "late-night")

MAX_RADIUS_MILES = 300.0  # ticketmaster caps radius around here


def format_radius(miles: float) -> str:
    """Plain decimal, at most two places: 25.0 -> "25", 0.00001 -> "0"."""
    return f"{miles:.2f}".rstrip("0").rstrip(".")


class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)


class DateRange(BaseModel):
    # fully populated once built; the criteria builder fills missing parts
    model_config = ConfigDict(frozen=True)

    startDate: date
    endDate: date
    startTime: time = time(0, 0, 0)
    endTime: time = time(23, 59, 59)

    @model_validator(mode="after")
    def _end_not_before_start(self):
        if datetime.combine(self.endDate, self.endTime) < datetime.combine(self.startDate, self.startTime):
            raise ValueError("End of date range is before its start")
        return self


class SearchCriteria(BaseModel):
    model_config = ConfigDict(frozen=True)

    center: GeoPoint
    radiusMiles: float = Field(..., ge=0, le=MAX_RADIUS_MILES, allow_inf_nan=False)
    dateRange: Optional[DateRange] = None
    timeOfDay: Optional[TimeOfDay] = None
    category: Optional[str] = None


class UpstreamQueryParams(BaseModel):
    """Ticketmaster Discovery query, minus the api key."""
    model_config = ConfigDict(frozen=True)

    latlong: str
    radius: str
    unit: Literal["miles", "km"] = "miles"
    startDateTime: Optional[str] = None
    endDateTime: Optional[str] = None
    classificationName: Optional[str] = None
    sort: str = "date,asc"
    size: str = "50"

    def to_params(self, api_key: str) -> Dict[str, str]:
        params = {"apikey": api_key}
        params.update(self.model_dump(exclude_none=True))
        return params


class Venue(BaseModel):
    name: str
    addressLine: str
    city: str
    stateCode: str
    postalCode: str


class NormalizedEvent(BaseModel):
    id: str
    name: str
    description: str
    startDate: Optional[str] = None
    startTime: Optional[str] = None
    location: GeoPoint
    venue: Venue
    detailUrl: Optional[str] = None
    category: Optional[str] = None


class SearchResponse(BaseModel):
    events: List[NormalizedEvent] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
