"""
HolidayEase Backend - Location Routes
Lookup lists for the search form
"""

from fastapi import APIRouter, Depends, Query
from typing import List

from app.models import ServiceResult
from app.services import Services, get_services

router = APIRouter(prefix="/v1/locations", tags=["Locations"])


@router.get(
    "/departures",
    response_model=ServiceResult,
    response_model_exclude_none=True,
    summary="Departure points",
)
async def get_departures(services: Services = Depends(get_services)):
    return await services.locations.get_departure_list()


@router.get(
    "/regions",
    response_model=ServiceResult,
    response_model_exclude_none=True,
    summary="Arrival regions",
)
async def get_regions(services: Services = Depends(get_services)):
    return await services.locations.get_region_list()


@router.get(
    "/checkin-dates",
    response_model=ServiceResult,
    response_model_exclude_none=True,
    summary="Available check-in dates",
)
async def get_checkin_dates(
    departure: str = Query(..., description="Departure location id"),
    regions: List[str] = Query(..., alias="region", description="Arrival region id, repeatable"),
    services: Services = Depends(get_services),
):
    return await services.locations.get_checkin_dates(departure, regions)


@router.get(
    "/nights",
    response_model=ServiceResult,
    response_model_exclude_none=True,
    summary="Available stay lengths",
)
async def get_nights(
    departure: str = Query(..., description="Departure location id"),
    regions: List[str] = Query(..., alias="region", description="Arrival region id, repeatable"),
    check_in: str = Query(..., alias="checkIn", description="Check-in date (YYYY-MM-DD)"),
    services: Services = Depends(get_services),
):
    return await services.locations.get_nights(departure, regions, check_in)


@router.get(
    "/price-range",
    response_model=ServiceResult,
    response_model_exclude_none=True,
    summary="Price range for a search",
)
async def get_price_range(
    departure: str = Query(..., description="Departure location id"),
    regions: List[str] = Query(..., alias="region", description="Arrival region id, repeatable"),
    check_in: str = Query(..., alias="checkIn", description="Check-in date (YYYY-MM-DD)"),
    duration: int = Query(7, ge=1, description="Nights"),
    services: Services = Depends(get_services),
):
    return await services.locations.get_price_range(departure, regions, check_in, duration)


@router.delete("/cache", summary="Drop cached departures and regions")
async def clear_location_cache(services: Services = Depends(get_services)):
    services.location_cache.clear_cache()
    return {"success": True}
