"""
HolidayEase Backend - Location Cache
Short-lived in-memory cache of departure points and arrival regions.
"""

from datetime import datetime, timedelta
from typing import Callable, List, Optional
import logging

from app.config import settings
from app.models import Location, LocationCacheSnapshot
from app.services.session_manager import utc_now

logger = logging.getLogger(__name__)


def match_departure(departures: List[Location], location_id: str) -> Optional[Location]:
    """Match on id first, then on the departure's code."""
    for location in departures:
        if location.id == location_id:
            return location
    for location in departures:
        if location.code is not None and location.code == location_id:
            return location
    return None


def match_arrival(arrivals: List[Location], location_id: str) -> Optional[Location]:
    return next((location for location in arrivals if location.id == location_id), None)


class LocationCache:
    """
    Time-boxed snapshot of both location lists.

    Both lists are stored together and replaced together; a stale snapshot
    reads as absent (None), which is different from an empty cached list.
    Lookups never reach the network.
    """

    def __init__(
        self,
        ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.ttl = ttl or timedelta(minutes=settings.location_cache_ttl_minutes)
        self._clock = clock
        self._snapshot: Optional[LocationCacheSnapshot] = None

    def is_valid(self) -> bool:
        return self._fresh_snapshot() is not None

    def _fresh_snapshot(self) -> Optional[LocationCacheSnapshot]:
        snapshot = self._snapshot
        if snapshot is None or self._clock() - snapshot.fetched_at >= self.ttl:
            return None
        return snapshot

    def get_cached_departures(self) -> Optional[List[Location]]:
        snapshot = self._fresh_snapshot()
        return list(snapshot.departures) if snapshot else None

    def get_cached_arrivals(self) -> Optional[List[Location]]:
        snapshot = self._fresh_snapshot()
        return list(snapshot.arrivals) if snapshot else None

    def set_cached_locations(self, departures: List[Location], arrivals: List[Location]) -> None:
        self._snapshot = LocationCacheSnapshot(
            departures=list(departures),
            arrivals=list(arrivals),
            fetched_at=self._clock(),
        )
        logger.info(f"Location cache updated: {len(departures)} departures, {len(arrivals)} arrivals")

    def clear_cache(self) -> None:
        self._snapshot = None
        logger.info("Location cache cleared")

    def find_departure_by_id(self, location_id: str) -> Optional[Location]:
        departures = self.get_cached_departures()
        if departures is None:
            return None
        return match_departure(departures, location_id)

    def find_arrival_by_id(self, location_id: str) -> Optional[Location]:
        arrivals = self.get_cached_arrivals()
        if arrivals is None:
            return None
        return match_arrival(arrivals, location_id)
