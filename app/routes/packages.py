"""
HolidayEase Backend - Holiday Package Routes
Package search for the storefront
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from app.models import HotelListResponse, SearchRequest, ServiceResult
from app.services import Services, get_services

router = APIRouter(prefix="/v1/packages", tags=["Holiday Packages"])

# Path the storefront's own server exposes
legacy_router = APIRouter(prefix="/api", tags=["Holiday Packages"])


@router.post(
    "/search",
    response_model=ServiceResult,
    response_model_exclude_none=True,
    summary="Search holiday packages",
    description="Resolve departure and region, then return priced hotel offers as the booking API sent them."
)
async def search_packages(
    request: SearchRequest,
    services: Services = Depends(get_services),
):
    """
    Search Holiday Packages

    - **DeparturePoint**: departure location id or code
    - **Region** / **RegionList**: arrival region id (first entry of RegionList)
    - **CheckIn**: stay start date, YYYY-MM-DD
    - **Duration**: nights
    - **Rooms**: [{Adult, Child, ChildAges}]

    Failures come back as success=false with a message, never as an HTTP error.
    """
    return await services.holiday_packages.search_holiday_packages(request)


@legacy_router.post(
    "/hotels",
    response_model=HotelListResponse,
    summary="Search holiday packages (storefront format)",
)
async def search_hotels(
    request: SearchRequest,
    limit: Optional[int] = Query(None, ge=1, description="Maximum number of hotels to return"),
    services: Services = Depends(get_services),
):
    result = await services.holiday_packages.search_holiday_packages(request)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.message or "Internal server error")

    hotels = result.data or []
    if limit:
        hotels = hotels[:limit]
    return HotelListResponse(success=True, hotels=hotels)
