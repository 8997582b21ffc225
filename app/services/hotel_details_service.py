"""
HolidayEase Backend - Hotel Details Service
Offer detail lookup and hotel-scoped room offers.

Flow:
1. getofferdetails for the selected offer id
2. Take the hotel id from the detail's hotel list
3. Derive stay length, region and occupancy from the detail
4. pricesearch filtered to that hotel (Products: [hotelId])
5. Return the offers that belong to the hotel
"""

import math
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from pydantic import ValidationError

from app.config import Settings, settings as default_settings
from app.errors import HolidayBookingError, OfferNotFoundError
from app.models import LocationType, RoomCriteria, RoomSearchCriteria, ServiceResult
from app.services.location_service import HOLIDAY_PACKAGE_PRODUCT, PRICE_SEARCH_ENDPOINT
from app.services.session_manager import SessionManager
from app.services.tourvisio_client import TourVisioClient

logger = logging.getLogger(__name__)

OFFER_DETAILS_ENDPOINT = "/productservice/getofferdetails"
ADDITIONAL_PARAMETERS_ENDPOINT = "/lookupservice/getAdditionalPriceSearchParameters"

SECONDS_PER_DAY = 24 * 60 * 60


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def stay_nights(check_in: str, check_out: str) -> int:
    """Whole days between check-in and check-out, rounded up."""
    delta = _parse_timestamp(check_out) - _parse_timestamp(check_in)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def _first_hotel(detail: Dict[str, Any]) -> Dict[str, Any]:
    hotels = detail.get("hotels")
    if isinstance(hotels, list) and hotels and isinstance(hotels[0], dict):
        return hotels[0]
    return {}


def _nested_id(record: Dict[str, Any], key: str) -> Optional[Any]:
    nested = record.get(key)
    return nested.get("id") if isinstance(nested, dict) else None


def _offer_list(hotel: Dict[str, Any]) -> List[Any]:
    offers = hotel.get("offers")
    return offers if isinstance(offers, list) else []


class HotelDetailsService:
    """Detail orchestrator for a selected offer."""

    def __init__(
        self,
        session_manager: SessionManager,
        client: TourVisioClient,
        config: Optional[Settings] = None,
    ):
        self.session_manager = session_manager
        self.client = client
        self.config = config or default_settings

    @property
    def lenient(self) -> bool:
        return self.config.detail_lenient_fallbacks

    async def get_hotel_details(self, offer_id: str) -> ServiceResult:
        """Offer detail record for the offer id, as returned by the API."""
        logger.info(f"Getting offer details for: {offer_id}")
        try:
            detail = await self.fetch_offer_detail(offer_id)
        except HolidayBookingError as e:
            logger.error(f"Offer details error: {e}")
            return ServiceResult.fail(str(e) or "Failed to get offer details")
        return ServiceResult.ok(detail)

    async def fetch_offer_detail(self, offer_id: str) -> Dict[str, Any]:
        """
        Raises:
            OfferNotFoundError: the response has no offer detail record
        """
        await self.session_manager.get_valid_token()
        body = await self.client.post(
            OFFER_DETAILS_ENDPOINT,
            {
                "offerIds": [offer_id],
                "getProductInfo": True,
                "currency": self.config.default_currency,
                "culture": self.config.default_culture,
            },
            fallback_message="Failed to get offer details",
        )
        details = body.get("offerDetails") or []
        if not isinstance(details, list) or not details or not isinstance(details[0], dict):
            raise OfferNotFoundError(offer_id)
        return details[0]

    def extract_hotel_id(self, detail: Dict[str, Any]) -> str:
        """
        Hotel id of the first embedded hotel.

        Falls back to the configured default id when the detail carries none,
        unless lenient fallbacks are switched off.
        """
        hotel_id = _first_hotel(detail).get("id")
        if hotel_id:
            return str(hotel_id)

        offer_id = detail.get("offerId") or detail.get("id") or "unknown"
        if not self.lenient:
            raise OfferNotFoundError(str(offer_id), f"No hotel found for offer: {offer_id}")

        logger.warning(
            f"No hotel id in offer {offer_id}, using fallback hotel {self.config.fallback_hotel_id}"
        )
        return self.config.fallback_hotel_id

    def build_room_search_criteria(
        self,
        detail: Dict[str, Any],
        rooms: Optional[List[RoomCriteria]] = None,
    ) -> RoomSearchCriteria:
        hotel = _first_hotel(detail)

        check_in = detail.get("checkIn")
        check_out = detail.get("checkOut")
        if not isinstance(check_in, str):
            check_in = None
        duration = None
        if check_in and check_out:
            try:
                nights = stay_nights(check_in, check_out)
            except (AttributeError, TypeError, ValueError):
                logger.warning(f"Unreadable stay dates {check_in!r} / {check_out!r}")
                nights = 0
            duration = nights if nights > 0 else None

        region_id = (
            _nested_id(hotel, "town")
            or _nested_id(hotel, "city")
            or self.config.default_region_id
        )

        return RoomSearchCriteria(
            check_in=check_in.split("T")[0] if check_in else None,
            duration=duration,
            region_list=[region_id],
            rooms=rooms or [RoomCriteria(adult=2, child_ages=[])],
            nationality=self.config.default_nationality,
        )

    async def get_hotel_room_offers(self, hotel_id: str, criteria: RoomSearchCriteria) -> ServiceResult:
        """
        Bookable room offers for a single hotel.

        Returns:
            ServiceResult whose data is the hotel's offer list.
        """
        logger.info(f"Getting room offers for hotel: {hotel_id}")
        payload = self.build_room_price_search_payload(hotel_id, criteria)

        try:
            await self.session_manager.get_valid_token()
            body = await self.client.post(
                PRICE_SEARCH_ENDPOINT, payload, fallback_message="Failed to get room offers"
            )
        except HolidayBookingError as e:
            logger.error(f"Room offers error: {e}")
            return ServiceResult.fail(str(e) or "Failed to get room offers")

        hotels = [h for h in body.get("hotels") or [] if isinstance(h, dict)]
        logger.info(f"Hotels found in search: {len(hotels)}")

        # an exact match wins even when it has no offers
        target = next((h for h in hotels if str(h.get("id")) == hotel_id), None)
        if target is not None:
            return ServiceResult.ok(_offer_list(target))

        if not self.lenient:
            return ServiceResult.fail(f"No offers found for hotel: {hotel_id}")

        all_offers = [offer for h in hotels for offer in _offer_list(h)]
        if all_offers:
            logger.warning(
                f"Hotel {hotel_id} not in results, using offers from {len(hotels)} returned hotel(s)"
            )
            return ServiceResult.ok(all_offers)

        logger.info(f"No offers found for hotel ID: {hotel_id}")
        return ServiceResult.fail("No offers found for this hotel")

    def build_room_price_search_payload(self, hotel_id: str, criteria: RoomSearchCriteria) -> Dict[str, Any]:
        config = self.config
        region_id = criteria.region_list[0] if criteria.region_list else config.default_region_id
        rooms = criteria.rooms or [RoomCriteria(adult=2, child_ages=[])]
        check_in = criteria.check_in.split("T")[0] if criteria.check_in else config.default_check_in

        return {
            "ProductType": HOLIDAY_PACKAGE_PRODUCT,
            "DepartureLocations": [{
                "Id": criteria.departure_point or config.default_departure_id,
                "Type": LocationType.CITY.value,
            }],
            "ArrivalLocations": [{"Id": region_id, "Type": LocationType.CITY.value}],
            "IncludeSubLocations": True,
            "CheckIn": check_in,
            "Night": criteria.duration or config.default_night,
            "Products": [hotel_id],
            "RoomCriteria": [room.to_payload() for room in rooms],
            "CheckAllotment": False,
            "CheckStopSale": False,
            "Nationality": criteria.nationality or config.default_nationality,
            "currency": config.default_currency,
            "culture": config.default_culture,
        }

    async def get_room_offers_for_offer(
        self,
        offer_id: str,
        rooms: Optional[List[RoomCriteria]] = None,
    ) -> ServiceResult:
        """
        Detail page flow: offer detail, then the rooms of its hotel.

        A failed room search still returns the detail, with no room offers.
        """
        try:
            detail = await self.fetch_offer_detail(offer_id)
            hotel_id = self.extract_hotel_id(detail)
            criteria = self.build_room_search_criteria(detail, rooms)
        except HolidayBookingError as e:
            logger.error(f"Offer details error: {e}")
            return ServiceResult.fail(str(e) or "Failed to get offer details")
        except ValidationError as e:
            logger.error(f"Unusable offer detail for {offer_id}: {e}")
            return ServiceResult.fail(f"Offer details not usable for: {offer_id}")

        room_offers = await self.get_hotel_room_offers(hotel_id, criteria)
        if not room_offers.success:
            logger.info(f"No room offers found: {room_offers.message}")

        return ServiceResult.ok({
            "offer": detail,
            "hotelId": hotel_id,
            "criteria": criteria.model_dump(by_alias=True),
            "roomOffers": room_offers.data if room_offers.success else [],
        })

    async def get_additional_parameters(
        self,
        departure: int,
        arrival: int,
        check_in: str,
        night: int,
    ) -> ServiceResult:
        """Hotels, boards and star ratings available for a search."""
        payload = {
            "currency": self.config.default_currency,
            "culture": self.config.default_culture,
            "includeSubLocations": True,
            "departure": departure,
            "arrival": arrival,
            "checkin": check_in,
            "night": night,
            "productType": HOLIDAY_PACKAGE_PRODUCT,
            "getHotels": True,
            "getBoards": True,
            "getStars": True,
            "getHolidayPackages": False,
            "packageCategory": None,
        }

        try:
            await self.session_manager.get_valid_token()
            body = await self.client.post(
                ADDITIONAL_PARAMETERS_ENDPOINT,
                payload,
                fallback_message="Failed to get additional parameters",
            )
        except HolidayBookingError as e:
            logger.error(f"Additional parameters error: {e}")
            return ServiceResult.fail(str(e) or "Failed to get additional parameters")

        return ServiceResult.ok(body)
