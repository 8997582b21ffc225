"""
HolidayEase Backend - Credential Store
Holds the agency credential used for automatic sign-in.
"""

from typing import Optional

from app.config import Settings, settings as default_settings
from app.models import Credential


class CredentialStore:
    """
    Default credential from configuration plus the one currently in use.

    The current credential changes only through an explicit login and
    reverts to the default on logout.
    """

    def __init__(self, default: Optional[Credential] = None, config: Optional[Settings] = None):
        config = config or default_settings
        self._default = default or Credential(
            agency=config.tourvisio_agency,
            user=config.tourvisio_user,
            password=config.tourvisio_password,
        )
        self._current = self._default

    @property
    def default(self) -> Credential:
        return self._default

    @property
    def current(self) -> Credential:
        return self._current

    def override(self, credential: Credential) -> None:
        self._current = credential

    def reset(self) -> None:
        self._current = self._default
