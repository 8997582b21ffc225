# Services Package
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import TYPE_CHECKING, Callable, Optional

import httpx

if TYPE_CHECKING:
    from app.config import Settings
    from app.services.hotel_details_service import HotelDetailsService
    from app.services.holiday_package_service import HolidayPackageService
    from app.services.location_cache import LocationCache
    from app.services.location_service import LocationService
    from app.services.session_manager import SessionManager
    from app.services.tourvisio_client import TourVisioClient


@dataclass
class Services:
    """One process-wide set of collaborators sharing a session and a cache."""
    session_manager: "SessionManager"
    location_cache: "LocationCache"
    client: "TourVisioClient"
    locations: "LocationService"
    holiday_packages: "HolidayPackageService"
    hotel_details: "HotelDetailsService"

    async def close(self) -> None:
        await self.client.close()


def build_services(
    config: Optional["Settings"] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Services:
    """Construct and wire every service explicitly."""
    # Lazy imports to avoid circular dependencies
    from datetime import timedelta

    from app.config import settings
    from app.services.credential_store import CredentialStore
    from app.services.hotel_details_service import HotelDetailsService
    from app.services.holiday_package_service import HolidayPackageService
    from app.services.location_cache import LocationCache
    from app.services.location_service import LocationService
    from app.services.session_manager import SessionManager, utc_now
    from app.services.tourvisio_client import TourVisioClient

    config = config or settings
    clock = clock or utc_now
    http_client = http_client or httpx.AsyncClient(timeout=config.tourvisio_timeout_seconds)

    session_manager = SessionManager(
        http_client,
        credentials=CredentialStore(config=config),
        base_url=config.tourvisio_base_url,
        clock=clock,
    )
    cache = LocationCache(ttl=timedelta(minutes=config.location_cache_ttl_minutes), clock=clock)
    client = TourVisioClient(session_manager, base_url=config.tourvisio_base_url)
    locations = LocationService(client, cache, config=config)

    return Services(
        session_manager=session_manager,
        location_cache=cache,
        client=client,
        locations=locations,
        holiday_packages=HolidayPackageService(session_manager, client, cache, locations, config=config),
        hotel_details=HotelDetailsService(session_manager, client, config=config),
    )


@lru_cache()
def get_services() -> Services:
    """Process-wide services instance."""
    return build_services()
