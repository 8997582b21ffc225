"""
HolidayEase Backend - Location Service
Departure/arrival lookups and the search-form helper lists.

Populates the LocationCache; the orchestrators only read from it.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging

from pydantic import ValidationError

from app.config import Settings, settings as default_settings
from app.errors import HolidayBookingError, TransportError
from app.models import Location, LocationKind, LocationType, ServiceResult
from app.services.location_cache import LocationCache
from app.services.tourvisio_client import TourVisioClient

logger = logging.getLogger(__name__)

HOLIDAY_PACKAGE_PRODUCT = 1

DEPARTURES_ENDPOINT = "/productservice/getdepartures"
ARRIVALS_ENDPOINT = "/productservice/getarrivals"
CHECKIN_DATES_ENDPOINT = "/productservice/getcheckindates"
NIGHTS_ENDPOINT = "/productservice/getnights"
PRICE_SEARCH_ENDPOINT = "/productservice/pricesearch"


def _region_references(region_list: List[Any]) -> List[Dict[str, Any]]:
    return [{"Id": str(region_id), "Type": LocationType.CITY.value} for region_id in region_list]


def _departure_reference(departure_point: str) -> List[Dict[str, Any]]:
    return [{"Id": str(departure_point), "Type": LocationType.CITY.value}]


def parse_locations(raw_locations: Any, kind: LocationKind) -> List[Location]:
    """Build Location records, skipping entries without a usable id or type."""
    if not isinstance(raw_locations, list):
        return []

    locations = []
    for raw in raw_locations:
        try:
            locations.append(Location.from_remote(raw, kind))
        except (AttributeError, KeyError, TypeError, ValidationError) as e:
            logger.warning(f"Skipping malformed {kind.value} location {raw!r}: {e}")
    return locations


class LocationService:
    """Fetches location lists from the booking API and keeps them cached."""

    def __init__(self, client: TourVisioClient, cache: LocationCache, config: Optional[Settings] = None):
        self.client = client
        self.cache = cache
        self.config = config or default_settings
        self.culture = self.config.default_culture

    async def fetch_departures(self) -> List[Location]:
        """One getdepartures call, every location returned."""
        body = await self.client.post(
            DEPARTURES_ENDPOINT,
            {"ProductType": HOLIDAY_PACKAGE_PRODUCT, "culture": self.culture},
            fallback_message="Failed to get departures",
        )
        return parse_locations(body.get("locations"), LocationKind.DEPARTURE)

    async def fetch_arrivals(self, departure: Location) -> List[Location]:
        """Arrival regions reachable from the given departure."""
        body = await self.client.post(
            ARRIVALS_ENDPOINT,
            {
                "ProductType": HOLIDAY_PACKAGE_PRODUCT,
                "DepartureLocations": [departure.to_reference()],
                "culture": self.culture,
            },
            fallback_message="Failed to get arrivals",
        )
        return parse_locations(body.get("locations"), LocationKind.REGION)

    async def fetch_locations_with_cache(self) -> Tuple[List[Location], List[Location]]:
        """
        Return (departures, arrivals), from the cache when it is fresh.

        On a miss, departures are fetched once, arrivals are fetched for the
        first city-type departure, and both lists replace the cache together.
        """
        cached_departures = self.cache.get_cached_departures()
        cached_arrivals = self.cache.get_cached_arrivals()

        if cached_departures is not None and cached_arrivals is not None:
            logger.info("Using cached location data")
            return cached_departures, cached_arrivals

        logger.info("Fetching fresh location data...")
        all_departures = await self.fetch_departures()

        departures = [loc for loc in all_departures if loc.type == LocationType.CITY.value]
        if not departures:
            raise TransportError("No departure cities found")

        all_arrivals = await self.fetch_arrivals(departures[0])
        arrivals = [
            loc for loc in all_arrivals
            if loc.type in (LocationType.COUNTRY.value, LocationType.CITY.value)
        ]

        self.cache.set_cached_locations(departures, arrivals)
        return departures, arrivals

    async def get_departure_list(self) -> ServiceResult:
        try:
            departures, _ = await self.fetch_locations_with_cache()
        except HolidayBookingError as e:
            logger.error(f"Error getting departure list: {e}")
            return ServiceResult.fail(str(e) or "Failed to fetch departure airports")

        return ServiceResult.ok([{"Code": loc.id, "Name": loc.name} for loc in departures])

    async def get_region_list(self) -> ServiceResult:
        try:
            _, arrivals = await self.fetch_locations_with_cache()
        except HolidayBookingError as e:
            logger.error(f"Error getting region list: {e}")
            return ServiceResult.fail(str(e) or "Failed to fetch regions")

        return ServiceResult.ok([
            {"Code": int(loc.id) if loc.id.isdigit() else loc.id, "Name": loc.name}
            for loc in arrivals
        ])

    async def get_checkin_dates(self, departure_point: str, region_list: List[Any]) -> ServiceResult:
        """
        Valid stay-start dates for a departure and set of regions.

        Returns:
            ServiceResult whose data is a list of "YYYY-MM-DD" strings.
        """
        payload = {
            "ProductType": HOLIDAY_PACKAGE_PRODUCT,
            "DepartureLocations": _departure_reference(departure_point),
            "ArrivalLocations": _region_references(region_list),
            "IncludeSubLocations": True,
            "culture": self.culture,
        }
        fallback = "No available check-in dates for the selected departure and destination."

        try:
            body = await self.client.post(CHECKIN_DATES_ENDPOINT, payload, fallback_message=fallback)
        except HolidayBookingError as e:
            logger.error(f"Error fetching check-in dates: {e}")
            return ServiceResult.fail(str(e))

        dates = body.get("dates")
        if not dates:
            return ServiceResult.fail(fallback)
        return ServiceResult.ok([str(d).split("T")[0] for d in dates])

    async def get_nights(self, departure_point: str, region_list: List[Any], check_in: str) -> ServiceResult:
        """Available stay lengths for the given check-in date."""
        payload = {
            "ProductType": HOLIDAY_PACKAGE_PRODUCT,
            "DepartureLocations": _departure_reference(departure_point),
            "ArrivalLocations": _region_references(region_list),
            "IncludeSubLocations": True,
            "CheckIn": check_in,
            "culture": self.culture,
        }
        fallback = "No available durations for your selected options."

        try:
            body = await self.client.post(NIGHTS_ENDPOINT, payload, fallback_message=fallback)
        except HolidayBookingError as e:
            logger.error(f"Error fetching nights: {e}")
            return ServiceResult.fail(str(e))

        nights = body.get("nights")
        if not nights:
            return ServiceResult.fail(fallback)
        return ServiceResult.ok(nights)

    async def get_price_range(
        self,
        departure_point: str,
        region_list: List[Any],
        check_in: str,
        duration: int,
    ) -> ServiceResult:
        """Cheapest and dearest offer for a default two-adult room."""
        payload = {
            "ProductType": HOLIDAY_PACKAGE_PRODUCT,
            "DepartureLocations": _departure_reference(departure_point),
            "ArrivalLocations": _region_references(region_list),
            "IncludeSubLocations": True,
            "CheckIn": check_in,
            "Night": duration,
            "Products": [],
            "RoomCriteria": [{"Adult": 2, "ChildAges": []}],
            "CheckAllotment": False,
            "CheckStopSale": False,
            "Nationality": self.config.default_nationality,
            "currency": self.config.default_currency,
            "culture": self.culture,
        }
        fallback = "No packages available in the selected range."

        try:
            body = await self.client.post(PRICE_SEARCH_ENDPOINT, payload, fallback_message=fallback)
        except HolidayBookingError as e:
            logger.error(f"Error fetching price range: {e}")
            return ServiceResult.fail(str(e))

        hotels = [h for h in body.get("hotels") or [] if isinstance(h, dict)]
        amounts = [
            offer["price"]["amount"]
            for hotel in hotels
            for offer in hotel.get("offers") or []
            if isinstance(offer, dict) and isinstance(offer.get("price"), dict) and offer["price"].get("amount")
        ]
        if not amounts:
            return ServiceResult.fail(fallback)

        currency = _first_offer_currency(hotels) or self.config.default_currency
        return ServiceResult.ok({
            "PriceMin": min(amounts),
            "PriceMax": max(amounts),
            "Currency": currency,
        })


def _first_offer_currency(hotels: List[Dict[str, Any]]) -> Optional[str]:
    offers = hotels[0].get("offers") if hotels else None
    if not offers or not isinstance(offers[0], dict):
        return None
    return (offers[0].get("price") or {}).get("currency")
