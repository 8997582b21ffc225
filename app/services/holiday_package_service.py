"""
HolidayEase Backend - Holiday Package Search
Resolves departure/arrival ids, then runs the price search.

Flow:
1. Obtain a valid token
2. Resolve DeparturePoint and Region from the LocationCache
3. On a cache miss, getdepartures -> match id or code, then
   getarrivals for that departure -> match id
4. pricesearch with the resolved locations and room criteria
5. Return the hotels list as-is
"""

from typing import Any, Dict, Optional, Tuple
import logging

from app.config import Settings, settings as default_settings
from app.errors import EnvelopeError, HolidayBookingError, LocationResolutionError
from app.models import Location, SearchRequest, ServiceResult
from app.services.location_cache import LocationCache, match_arrival, match_departure
from app.services.location_service import (
    HOLIDAY_PACKAGE_PRODUCT,
    PRICE_SEARCH_ENDPOINT,
    LocationService,
)
from app.services.session_manager import SessionManager
from app.services.tourvisio_client import TourVisioClient

logger = logging.getLogger(__name__)

CULTURES = {"EN": "en-US"}


class HolidayPackageService:
    """Search orchestrator for holiday packages."""

    def __init__(
        self,
        session_manager: SessionManager,
        client: TourVisioClient,
        cache: LocationCache,
        locations: LocationService,
        config: Optional[Settings] = None,
    ):
        self.session_manager = session_manager
        self.client = client
        self.cache = cache
        self.locations = locations
        self.config = config or default_settings

    async def search_holiday_packages(self, request: SearchRequest) -> ServiceResult:
        """
        Search priced holiday packages.

        Returns:
            ServiceResult with the remote hotels list (unsorted, unfiltered) on
            success, or success=False with the reason. Never raises for
            booking-layer failures.
        """
        logger.info(
            f"Searching holiday packages: {request.departure_point} -> {request.region}, "
            f"{request.check_in.isoformat()} x{request.duration} nights, {len(request.rooms)} room(s)"
        )

        try:
            await self.session_manager.get_valid_token()
            departure, arrival = await self.resolve_locations(request.departure_point, request.region)
            body = await self.client.post(
                PRICE_SEARCH_ENDPOINT,
                self.build_price_search_payload(request, departure, arrival),
                fallback_message="No packages found",
            )
        except EnvelopeError as e:
            logger.warning(f"Holiday package search rejected: {e}")
            return ServiceResult.fail(str(e))
        except HolidayBookingError as e:
            logger.error(f"Holiday package search error: {e}")
            return ServiceResult.fail(str(e) or "Search failed")

        return ServiceResult.ok(body.get("hotels") or [])

    async def resolve_locations(self, departure_id: str, region_id: str) -> Tuple[Location, Location]:
        """
        Map request ids to remote locations, cache first.

        Raises:
            LocationResolutionError: departure or arrival could not be matched
        """
        departure = self.cache.find_departure_by_id(departure_id)
        arrival = self.cache.find_arrival_by_id(region_id)

        if departure and arrival:
            logger.info("Using cached location data for search")
            return departure, arrival

        logger.info("Location data not in cache, fetching...")
        departures = await self.locations.fetch_departures()
        departure = match_departure(departures, departure_id)
        if departure is None:
            raise LocationResolutionError(LocationResolutionError.DEPARTURE, departure_id)

        arrivals = await self.locations.fetch_arrivals(departure)
        arrival = match_arrival(arrivals, region_id)
        if arrival is None:
            raise LocationResolutionError(LocationResolutionError.ARRIVAL, region_id)

        return departure, arrival

    def build_price_search_payload(
        self,
        request: SearchRequest,
        departure: Location,
        arrival: Location,
    ) -> Dict[str, Any]:
        return {
            "ProductType": HOLIDAY_PACKAGE_PRODUCT,
            "DepartureLocations": [departure.to_reference()],
            "ArrivalLocations": [arrival.to_reference()],
            "IncludeSubLocations": True,
            "CheckIn": request.check_in.isoformat(),
            "Night": request.duration,
            "RoomCriteria": [room.to_payload() for room in request.rooms],
            "CheckAllotment": False,
            "CheckStopSale": False,
            "Nationality": request.nationality,
            "currency": request.currency,
            "culture": CULTURES.get(request.language.upper(), self.config.default_culture),
        }
