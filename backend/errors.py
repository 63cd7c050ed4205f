# errors.py
# domain exceptions shared by the criteria builder, the ticketmaster provider and the viewer

from typing import Optional


class InvalidCriteria(Exception):
    """Search input that cannot be turned into a forwardable query."""


class LocationUnavailable(InvalidCriteria):
    """No location was supplied. We never fall back to a default center."""


class UpstreamFetchError(Exception):
    """Ticketmaster could not be reached, refused the call, or sent garbage back."""

    def __init__(self, message: str, status_code: Optional[int] = None, timed_out: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.timed_out = timed_out


class SearchRequestError(Exception):
    """Client side: GET /events failed (transport error or an error response)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
