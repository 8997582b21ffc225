"""
HolidayEase Backend - Error Taxonomy
Exceptions raised between the gateway, the session layer and the orchestrators.

Orchestrators catch HolidayBookingError and turn it into a failed
ServiceResult, so none of these cross the service boundary outward.
"""

from typing import Any, Dict, List, Optional


class HolidayBookingError(Exception):
    """Base class for every failure raised by the booking layer."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class TransportError(HolidayBookingError):
    """Network or HTTP-level failure talking to the booking API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class AuthenticationError(HolidayBookingError):
    """Login rejected or the token could not be refreshed."""


class EnvelopeError(HolidayBookingError):
    """The call went through but the response header reported success=false."""

    def __init__(self, message: str, messages: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.messages = messages or []


class LocationResolutionError(HolidayBookingError):
    """A departure or arrival id could not be mapped to a remote location."""

    DEPARTURE = "departure"
    ARRIVAL = "arrival"

    def __init__(self, kind: str, location_id: str):
        label = "Departure" if kind == self.DEPARTURE else "Arrival"
        super().__init__(f"{label} location not found for: {location_id}")
        self.kind = kind
        self.location_id = location_id


class OfferNotFoundError(HolidayBookingError):
    """Offer detail lookup returned nothing usable."""

    def __init__(self, offer_id: str, message: Optional[str] = None):
        super().__init__(message or f"Offer details not found for: {offer_id}")
        self.offer_id = offer_id


def first_message(messages: Optional[List[Dict[str, Any]]], fallback: str) -> str:
    """Return the text of the first envelope message, or the fallback."""
    if messages:
        text = (messages[0] or {}).get("message")
        if text:
            return text
    return fallback
