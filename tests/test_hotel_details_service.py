"""
HolidayEase Backend - Hotel Details Tests
Offer detail lookup, hotel id extraction and hotel-scoped room offers
"""

import httpx
import pytest

from app.errors import OfferNotFoundError
from app.models import RoomCriteria, RoomSearchCriteria
from app.services.hotel_details_service import stay_nights
from tests.conftest import OFFER_DETAIL, envelope

OFFER_DETAILS_PATH = "/api/productservice/getofferdetails"
PRICE_SEARCH_PATH = "/api/productservice/pricesearch"


def price_search_returning(hotels):
    return lambda payload: httpx.Response(200, json=envelope({"hotels": hotels}))


class TestStayNights:

    def test_whole_days(self):
        assert stay_nights("2025-09-12T00:00:00", "2025-09-19T00:00:00") == 7

    def test_partial_day_rounds_up(self):
        assert stay_nights("2025-09-12T14:00:00Z", "2025-09-19T10:00:00Z") == 7
        assert stay_nights("2025-09-12T10:00:00Z", "2025-09-19T14:00:00Z") == 8


class TestGetHotelDetails:

    @pytest.mark.anyio
    async def test_returns_first_offer_detail(self, services, remote):
        result = await services.hotel_details.get_hotel_details("offer-1")

        assert result.success is True
        assert result.data["hotels"][0]["id"] == "33"
        _, payload, _ = remote.calls_to("/getofferdetails")[0]
        assert payload == {
            "offerIds": ["offer-1"],
            "getProductInfo": True,
            "currency": "EUR",
            "culture": "en-US",
        }

    @pytest.mark.anyio
    async def test_missing_detail_is_offer_not_found(self, services, remote):
        remote.handlers[OFFER_DETAILS_PATH] = lambda p: httpx.Response(200, json=envelope({"offerDetails": []}))

        result = await services.hotel_details.get_hotel_details("gone")

        assert result.success is False
        assert result.message == "Offer details not found for: gone"

    @pytest.mark.anyio
    async def test_unsuccessful_envelope(self, services, remote):
        remote.handlers[OFFER_DETAILS_PATH] = lambda p: httpx.Response(
            200, json=envelope(success=False, message="Offer expired")
        )

        result = await services.hotel_details.get_hotel_details("offer-1")

        assert result.success is False
        assert result.message == "Offer expired"


class TestRoomSearchCriteria:

    def test_derived_from_detail(self, services):
        criteria = services.hotel_details.build_room_search_criteria(OFFER_DETAIL)

        assert criteria.check_in == "2025-09-12"
        assert criteria.duration == 7
        assert criteria.region_list == ["41"]
        assert criteria.nationality == "XK"
        assert [room.to_payload() for room in criteria.rooms] == [{"Adult": 2, "ChildAges": []}]

    def test_region_falls_back_to_city_then_default(self, services):
        city_only = {**OFFER_DETAIL, "hotels": [{"id": "33", "city": {"id": 12}}]}
        nothing = {**OFFER_DETAIL, "hotels": [{"id": "33"}]}

        assert services.hotel_details.build_room_search_criteria(city_only).region_list == ["12"]
        assert services.hotel_details.build_room_search_criteria(nothing).region_list == ["4"]

    def test_caller_rooms_are_kept(self, services):
        rooms = [RoomCriteria(adult=1, child_ages=[6])]

        criteria = services.hotel_details.build_room_search_criteria(OFFER_DETAIL, rooms)

        assert criteria.rooms == rooms

    def test_unreadable_dates_leave_duration_unset(self, services):
        detail = {**OFFER_DETAIL, "checkOut": "soon"}

        assert services.hotel_details.build_room_search_criteria(detail).duration is None


class TestExtractHotelId:

    def test_first_hotel(self, services):
        assert services.hotel_details.extract_hotel_id(OFFER_DETAIL) == "33"

    def test_falls_back_to_default_id(self, services):
        assert services.hotel_details.extract_hotel_id({"offerId": "x", "hotels": []}) == "33"

    def test_strict_mode_rejects_missing_hotel(self, services, config):
        config.detail_lenient_fallbacks = False

        with pytest.raises(OfferNotFoundError, match="No hotel found for offer: x"):
            services.hotel_details.extract_hotel_id({"offerId": "x"})


class TestGetHotelRoomOffers:

    @pytest.mark.anyio
    async def test_offers_of_requested_hotel(self, services, remote):
        remote.handlers[PRICE_SEARCH_PATH] = price_search_returning([
            {"id": "12", "offers": [{"offerId": "other"}]},
            {"id": "33", "offers": [{"offerId": "mine"}]},
        ])
        criteria = RoomSearchCriteria(check_in="2025-09-12T00:00:00", duration=5, region_list=["41"])

        result = await services.hotel_details.get_hotel_room_offers("33", criteria)

        assert result.success is True
        assert result.data == [{"offerId": "mine"}]
        _, payload, _ = remote.calls_to("/pricesearch")[0]
        assert payload["Products"] == ["33"]
        assert payload["CheckIn"] == "2025-09-12"
        assert payload["Night"] == 5
        assert payload["DepartureLocations"] == [{"Id": "2", "Type": 2}]
        assert payload["ArrivalLocations"] == [{"Id": "41", "Type": 2}]
        assert payload["RoomCriteria"] == [{"Adult": 2, "ChildAges": []}]
        assert payload["currency"] == "EUR"

    @pytest.mark.anyio
    async def test_defaults_when_criteria_empty(self, services, remote):
        await services.hotel_details.get_hotel_room_offers("33", RoomSearchCriteria())

        _, payload, _ = remote.calls_to("/pricesearch")[0]
        assert payload["CheckIn"] == "2025-09-12"
        assert payload["Night"] == 7
        assert payload["ArrivalLocations"] == [{"Id": "4", "Type": 2}]
        assert payload["Nationality"] == "XK"

    @pytest.mark.anyio
    async def test_no_exact_match_uses_all_offers(self, services, remote):
        remote.handlers[PRICE_SEARCH_PATH] = price_search_returning([
            {"id": "12", "offers": [{"offerId": "a"}]},
            {"id": "13", "offers": [{"offerId": "b"}, {"offerId": "c"}]},
        ])

        result = await services.hotel_details.get_hotel_room_offers("33", RoomSearchCriteria())

        assert result.success is True
        assert [offer["offerId"] for offer in result.data] == ["a", "b", "c"]

    @pytest.mark.anyio
    async def test_exact_match_without_offers_is_not_replaced(self, services, remote):
        remote.handlers[PRICE_SEARCH_PATH] = price_search_returning([
            {"id": "33", "offers": []},
            {"id": "12", "offers": [{"offerId": "other-hotel"}]},
        ])

        result = await services.hotel_details.get_hotel_room_offers("33", RoomSearchCriteria())

        assert result.success is True
        assert result.data == []

    @pytest.mark.anyio
    async def test_non_dict_hotel_entries_are_ignored(self, services, remote):
        remote.handlers[PRICE_SEARCH_PATH] = price_search_returning([
            "garbage",
            {"id": "33", "offers": [{"offerId": "mine"}]},
        ])

        result = await services.hotel_details.get_hotel_room_offers("33", RoomSearchCriteria())

        assert result.data == [{"offerId": "mine"}]

    @pytest.mark.anyio
    async def test_no_offers_at_all(self, services, remote):
        remote.handlers[PRICE_SEARCH_PATH] = price_search_returning([{"id": "12", "offers": []}])

        result = await services.hotel_details.get_hotel_room_offers("33", RoomSearchCriteria())

        assert result.success is False
        assert result.message == "No offers found for this hotel"

    @pytest.mark.anyio
    async def test_strict_mode_reports_missing_hotel(self, services, remote, config):
        config.detail_lenient_fallbacks = False
        remote.handlers[PRICE_SEARCH_PATH] = price_search_returning([{"id": "12", "offers": [{"offerId": "a"}]}])

        result = await services.hotel_details.get_hotel_room_offers("33", RoomSearchCriteria())

        assert result.success is False
        assert result.message == "No offers found for hotel: 33"

    @pytest.mark.anyio
    async def test_remote_failure(self, services, remote):
        remote.handlers[PRICE_SEARCH_PATH] = lambda p: httpx.Response(
            200, json=envelope(success=False)
        )

        result = await services.hotel_details.get_hotel_room_offers("33", RoomSearchCriteria())

        assert result.success is False
        assert result.message == "Failed to get room offers"


class TestGetRoomOffersForOffer:

    @pytest.mark.anyio
    async def test_detail_then_hotel_rooms(self, services, remote):
        result = await services.hotel_details.get_room_offers_for_offer("offer-1")

        assert result.success is True
        assert result.data["hotelId"] == "33"
        assert result.data["roomOffers"][0]["price"]["amount"] == 450
        assert result.data["criteria"]["duration"] == 7
        _, payload, _ = remote.calls_to("/pricesearch")[0]
        assert payload["Products"] == ["33"]
        assert payload["ArrivalLocations"] == [{"Id": "41", "Type": 2}]

    @pytest.mark.anyio
    async def test_missing_hotel_id_uses_fallback_and_still_searches(self, services, remote):
        detail = {**OFFER_DETAIL, "hotels": []}
        remote.handlers[OFFER_DETAILS_PATH] = lambda p: httpx.Response(200, json=envelope({"offerDetails": [detail]}))

        result = await services.hotel_details.get_room_offers_for_offer("offer-1")

        assert result.success is True
        assert result.data["hotelId"] == "33"
        _, payload, _ = remote.calls_to("/pricesearch")[0]
        assert payload["Products"] == ["33"]

    @pytest.mark.anyio
    async def test_failed_room_search_keeps_detail(self, services, remote):
        remote.handlers[PRICE_SEARCH_PATH] = lambda p: httpx.Response(500)

        result = await services.hotel_details.get_room_offers_for_offer("offer-1")

        assert result.success is True
        assert result.data["offer"]["offerId"] == "offer-1"
        assert result.data["roomOffers"] == []

    @pytest.mark.anyio
    async def test_missing_offer(self, services, remote):
        remote.handlers[OFFER_DETAILS_PATH] = lambda p: httpx.Response(200, json=envelope({}))

        result = await services.hotel_details.get_room_offers_for_offer("gone")

        assert result.success is False
        assert remote.calls_to("/pricesearch") == []

    @pytest.mark.anyio
    async def test_malformed_hotel_entry_uses_fallback(self, services, remote):
        detail = {**OFFER_DETAIL, "hotels": ["not-a-hotel"], "checkIn": 20250912}
        remote.handlers[OFFER_DETAILS_PATH] = lambda p: httpx.Response(200, json=envelope({"offerDetails": [detail]}))

        result = await services.hotel_details.get_room_offers_for_offer("offer-1")

        assert result.success is True
        assert result.data["hotelId"] == "33"
        assert result.data["criteria"]["checkIn"] is None
        assert result.data["criteria"]["regionList"] == ["4"]

    @pytest.mark.anyio
    async def test_offer_details_not_a_list(self, services, remote):
        remote.handlers[OFFER_DETAILS_PATH] = lambda p: httpx.Response(
            200, json=envelope({"offerDetails": {"offerId": "offer-1"}})
        )

        result = await services.hotel_details.get_room_offers_for_offer("offer-1")

        assert result.success is False
        assert result.message == "Offer details not found for: offer-1"
