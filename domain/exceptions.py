"""Exceptions raised by the availability services."""

from typing import List, Optional


class AvailabilityError(Exception):
    """Base exception for availability computation."""
    pass


class InvalidRequestError(AvailabilityError):
    """Request parameters failed validation; nothing was computed."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or [message]


class PastDateError(InvalidRequestError):
    """Requested date lies before today on the restaurant clock."""
    pass


class ReservationLookupError(AvailabilityError):
    """Existing reservations could not be read, so availability is unknown."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail
