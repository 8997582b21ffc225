"""
HolidayEase Backend - Session Manager
Owns the TourVisio bearer token and renews it transparently.

Flow:
1. Sign in with the current agency credential (default on startup)
2. Keep the returned token until its expiresOn timestamp
3. Re-authenticate on demand once the token has expired or been rejected
"""

import asyncio
import httpx
from datetime import datetime, timezone
from typing import Callable, Optional
import logging

from pydantic import ValidationError

from app.config import settings
from app.errors import AuthenticationError, first_message
from app.models import Credential, Session
from app.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

LOGIN_ENDPOINT = "/authenticationservice/login"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    """
    Process-wide holder of the one authoritative Session.

    The Session is replaced by a single assignment, never mutated, so readers
    always see a complete token/expiry pair. Authentication itself runs under
    an asyncio.Lock so callers racing on an expired token share one login.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        credentials: Optional[CredentialStore] = None,
        base_url: Optional[str] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.client = client
        self.credentials = credentials or CredentialStore()
        self.base_url = (base_url or settings.tourvisio_base_url).rstrip("/")
        self._clock = clock
        self._session: Optional[Session] = None
        self._lock = asyncio.Lock()

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def token_expiry(self) -> Optional[datetime]:
        return self._session.expires_on if self._session else None

    @property
    def is_authenticated(self) -> bool:
        session = self._session
        return session is not None and session.is_valid(self._clock())

    async def get_valid_token(self) -> str:
        """Return a token that has not expired, signing in again if needed."""
        session = self._session
        if session and session.is_valid(self._clock()):
            return session.token

        async with self._lock:
            # Another caller may have renewed it while we waited
            session = self._session
            if session and session.is_valid(self._clock()):
                return session.token

            logger.info("Token expired or missing, re-authenticating...")
            session = await self._authenticate(self.credentials.current)
            self._session = session
            return session.token

    async def login(self, credential: Optional[Credential] = None) -> Session:
        """
        Sign in explicitly, replacing any held Session.

        Args:
            credential: Agency credential to use; the configured default when omitted.

        Returns:
            The new Session. The credential becomes the current one only on success.
        """
        credential = credential or self.credentials.default
        async with self._lock:
            session = await self._authenticate(credential)
            self._session = session
            self.credentials.override(credential)
        return session

    async def reauthenticate(self, stale_token: Optional[str] = None) -> str:
        """Force a fresh login with the current credential.

        When stale_token is given and the held token already differs from it,
        another caller has renewed the session and that token is reused.
        """
        async with self._lock:
            session = self._session
            if (
                stale_token is not None
                and session is not None
                and session.token != stale_token
                and session.is_valid(self._clock())
            ):
                return session.token

            session = await self._authenticate(self.credentials.current)
            self._session = session
            return session.token

    def logout(self) -> None:
        self._session = None
        self.credentials.reset()
        logger.info("Logged out, reverted to default credential")

    async def _authenticate(self, credential: Credential) -> Session:
        """POST the credential to the login endpoint and build a Session."""
        url = f"{self.base_url}{LOGIN_ENDPOINT}"
        logger.info(f"Authenticating with TourVisio API as {credential.agency}/{credential.user}")

        try:
            response = await self.client.post(
                url,
                json=credential.to_payload(),
                headers={"Content-Type": "application/json"},
            )
        except httpx.RequestError as e:
            logger.error(f"TourVisio auth request error: {e}")
            raise AuthenticationError(f"Failed to connect to TourVisio API: {e}")

        if not response.is_success:
            logger.error(f"TourVisio auth failed [{response.status_code}]: {response.text[:500]}")
            raise AuthenticationError(
                f"Authentication failed: {response.status_code} {response.reason_phrase}"
            )

        try:
            data = response.json()
        except ValueError:
            raise AuthenticationError("Authentication failed: response is not valid JSON")

        header = data.get("header") or {}
        if not header.get("success"):
            message = first_message(header.get("messages"), "Authentication failed")
            logger.error(f"TourVisio auth rejected: {message}")
            raise AuthenticationError(message)

        try:
            session = Session.model_validate(data.get("body") or {})
        except ValidationError:
            raise AuthenticationError("Authentication failed: response carried no usable token")

        if not session.is_valid(self._clock()):
            raise AuthenticationError("Authentication failed: issued token is already expired")

        logger.info(f"Authentication successful. Token expires at: {session.expires_on.isoformat()}")
        return session
