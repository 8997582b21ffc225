"""
HolidayEase Backend - Hotel Detail Routes
Offer details and bookable room offers
"""

from fastapi import APIRouter, Body, Depends, Query
from typing import List, Optional

from app.models import RoomCriteria, RoomSearchCriteria, ServiceResult
from app.services import Services, get_services

router = APIRouter(prefix="/v1/hotels", tags=["Hotels"])


@router.get(
    "/additional-parameters",
    response_model=ServiceResult,
    response_model_exclude_none=True,
    summary="Hotels, boards and stars for a search",
)
async def get_additional_parameters(
    departure: int = Query(..., description="Departure location id"),
    arrival: int = Query(..., description="Arrival region id"),
    check_in: str = Query(..., alias="checkIn", description="Check-in date (YYYY-MM-DD)"),
    night: int = Query(7, ge=1, description="Nights"),
    services: Services = Depends(get_services),
):
    return await services.hotel_details.get_additional_parameters(departure, arrival, check_in, night)


@router.get(
    "/offers/{offer_id}",
    response_model=ServiceResult,
    response_model_exclude_none=True,
    summary="Offer details",
)
async def get_offer_details(offer_id: str, services: Services = Depends(get_services)):
    return await services.hotel_details.get_hotel_details(offer_id)


@router.post(
    "/offers/{offer_id}/room-offers",
    response_model=ServiceResult,
    response_model_exclude_none=True,
    summary="Offer details with the hotel's room offers",
)
async def get_offer_room_offers(
    offer_id: str,
    rooms: Optional[List[RoomCriteria]] = Body(None, embed=True),
    services: Services = Depends(get_services),
):
    """
    Detail page flow: fetch the offer, find its hotel, then search that
    hotel's rooms for the given occupancy (two adults when omitted).
    """
    return await services.hotel_details.get_room_offers_for_offer(offer_id, rooms)


@router.post(
    "/{hotel_id}/room-offers",
    response_model=ServiceResult,
    response_model_exclude_none=True,
    summary="Room offers for a hotel",
)
async def get_hotel_room_offers(
    hotel_id: str,
    criteria: RoomSearchCriteria,
    services: Services = Depends(get_services),
):
    return await services.hotel_details.get_hotel_room_offers(hotel_id, criteria)
