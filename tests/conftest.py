"""
HolidayEase Backend Tests
Shared fixtures: a fake TourVisio API and a controllable clock
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from app.config import Settings
from app.services import build_services

BASE_URL = "https://tourvisio.test/api"


def envelope(body=None, success: bool = True, message: Optional[str] = None) -> dict:
    messages = [{"id": 1, "code": "Error", "messageType": 1, "message": message}] if message else []
    return {
        "header": {"requestId": "req-1", "success": success, "messages": messages},
        "body": body if body is not None else {},
    }


DEPARTURES = [
    {"id": "2", "name": "Prishtina", "type": 2, "code": "PRN", "countryId": "XK"},
    {"id": "7", "name": "Tirana", "type": 2, "code": "TIA", "countryId": "AL"},
    {"id": "XK", "name": "Kosovo", "type": 1},
]

ARRIVALS = [
    {"id": "4", "name": "Antalya", "type": 2, "countryId": "TR", "latitude": "36.88", "longitude": "30.70"},
    {"id": "TR", "name": "Turkey", "type": 1},
    {"id": "99", "name": "Lara Airport", "type": 5},
]

HOTELS = [
    {
        "id": "33",
        "name": "Lara Beach Hotel",
        "offers": [
            {
                "offerId": "offer-1",
                "price": {"amount": 450, "currency": "EUR"},
                "rooms": [{"roomName": "Standard Room", "boardName": "All Inclusive"}],
            }
        ],
    }
]

OFFER_DETAIL = {
    "offerId": "offer-1",
    "checkIn": "2025-09-12T00:00:00",
    "checkOut": "2025-09-19T00:00:00",
    "hotels": [
        {"id": "33", "name": "Lara Beach Hotel", "town": {"id": "41", "name": "Lara"}, "city": {"id": "4"}},
    ],
}


class FakeClock:
    """Manually advanced UTC clock"""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2025, 9, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeTourVisio:
    """
    In-memory stand-in for the booking API, served through httpx.MockTransport.

    Every request is recorded as (path, payload, authorization). Handlers can
    be replaced per path to script failures.
    """

    def __init__(self, clock: FakeClock, token_lifetime: timedelta = timedelta(hours=1)):
        self.clock = clock
        self.token_lifetime = token_lifetime
        self.calls: List[tuple] = []
        self.logins = 0
        self.handlers: Dict[str, Callable[[dict], httpx.Response]] = {
            "/api/authenticationservice/login": self._login,
            "/api/productservice/getdepartures": lambda p: httpx.Response(200, json=envelope({"locations": DEPARTURES})),
            "/api/productservice/getarrivals": lambda p: httpx.Response(200, json=envelope({"locations": ARRIVALS})),
            "/api/productservice/pricesearch": lambda p: httpx.Response(200, json=envelope({"hotels": HOTELS})),
            "/api/productservice/getofferdetails": lambda p: httpx.Response(200, json=envelope({"offerDetails": [OFFER_DETAIL]})),
        }

    def _login(self, payload: dict) -> httpx.Response:
        self.logins += 1
        expires = self.clock() + self.token_lifetime
        return httpx.Response(200, json=envelope({
            "token": f"token-{self.logins}",
            "expiresOn": expires.isoformat(),
            "userInfo": {"code": payload.get("User"), "name": "Test Agent"},
        }))

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content) if request.content else {}
        path = request.url.path
        self.calls.append((path, payload, request.headers.get("Authorization")))
        handle = self.handlers.get(path)
        if handle is None:
            return httpx.Response(404, json={"error": "not found"})
        return handle(payload)

    def calls_to(self, endpoint: str) -> List[tuple]:
        return [call for call in self.calls if call[0].endswith(endpoint)]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def remote(clock):
    return FakeTourVisio(clock)


@pytest.fixture
def config():
    return Settings(
        tourvisio_base_url=BASE_URL,
        tourvisio_agency="B2B",
        tourvisio_user="GPT",
        tourvisio_password="secret",
        detail_lenient_fallbacks=True,
    )


@pytest.fixture
def services(config, remote, clock):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(remote.handler))
    return build_services(config=config, http_client=http_client, clock=clock)
