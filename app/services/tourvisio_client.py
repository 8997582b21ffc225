"""
HolidayEase Backend - TourVisio HTTP Gateway
Thin transport wrapper around the booking API.

Every call carries the bearer token from the SessionManager. Responses are
unwrapped from the {header, body} envelope. A 401 on the first attempt
triggers one re-authentication and one retry; nothing else is retried.
"""

import httpx
from typing import Any, Dict, Optional
import logging

from app.config import settings
from app.errors import EnvelopeError, TransportError, first_message
from app.services.session_manager import SessionManager

logger = logging.getLogger(__name__)

MAX_AUTH_RETRIES = 1


def unwrap_envelope(data: Any, fallback_message: str = "API request failed") -> Dict[str, Any]:
    """Return the envelope body, or raise EnvelopeError when header.success is false."""
    if not isinstance(data, dict):
        raise TransportError("API response is not a JSON object")

    header = data.get("header") or {}
    if not header.get("success"):
        messages = header.get("messages") or []
        raise EnvelopeError(first_message(messages, fallback_message), messages)

    body = data.get("body") or {}
    if not isinstance(body, dict):
        raise TransportError("API response body is not a JSON object")
    return body


class TourVisioClient:
    """HTTP gateway for the TourVisio product services."""

    def __init__(
        self,
        session_manager: SessionManager,
        client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
    ):
        self.session_manager = session_manager
        self.client = client or session_manager.client
        self.base_url = (base_url or settings.tourvisio_base_url).rstrip("/")

    async def post(
        self,
        endpoint: str,
        payload: Dict[str, Any],
        fallback_message: str = "API request failed",
    ) -> Dict[str, Any]:
        """
        POST a JSON payload and return the unwrapped envelope body.

        Args:
            endpoint: Path relative to the API base, e.g. "/productservice/pricesearch"
            payload: JSON request body
            fallback_message: EnvelopeError text when the remote gives no message

        Raises:
            TransportError: network failure, non-2xx status, or a non-JSON body
            AuthenticationError: the token could not be obtained or renewed
            EnvelopeError: header.success was false
        """
        token = await self.session_manager.get_valid_token()
        retries = 0

        while True:
            try:
                data = await self._send(endpoint, payload, token)
                break
            except TransportError as e:
                if not e.is_unauthorized or retries >= MAX_AUTH_RETRIES:
                    raise
                retries += 1
                logger.warning(f"{endpoint} rejected the token, retrying after re-authentication...")
                token = await self.session_manager.reauthenticate(stale_token=token)

        return unwrap_envelope(data, fallback_message)

    async def _send(self, endpoint: str, payload: Dict[str, Any], token: str) -> Any:
        url = f"{self.base_url}{endpoint}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        try:
            response = await self.client.post(url, json=payload, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"TourVisio request error for {endpoint}: {e}")
            raise TransportError(f"Failed to connect to TourVisio API: {e}")

        if not response.is_success:
            logger.error(f"TourVisio request failed for {endpoint} [{response.status_code}]: {response.text[:500]}")
            raise TransportError(
                f"API request failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            raise TransportError(f"API response for {endpoint} is not valid JSON")

    async def close(self) -> None:
        await self.client.aclose()
