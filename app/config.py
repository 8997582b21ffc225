"""
HolidayEase Backend Configuration
Environment variables and application settings
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = True

    # TourVisio booking API
    tourvisio_base_url: str = "https://service.maxtravel.al/api"
    tourvisio_timeout_seconds: float = 30.0

    # Default credential used for automatic sign-in.
    # Override through TOURVISIO_AGENCY / TOURVISIO_USER / TOURVISIO_PASSWORD.
    tourvisio_agency: str = "B2B"
    tourvisio_user: str = "GPT"
    tourvisio_password: str = ""

    # Location cache
    location_cache_ttl_minutes: int = 30

    # Search defaults
    default_currency: str = "EUR"
    default_culture: str = "en-US"
    default_nationality: str = "XK"
    default_departure_id: str = "2"      # Prishtina
    default_region_id: str = "4"         # Antalya
    default_check_in: str = "2025-09-12"
    default_night: int = 7

    # Hotel detail fallbacks
    fallback_hotel_id: str = "33"
    detail_lenient_fallbacks: bool = True

    # CORS
    cors_origins: str = "*"

    @property
    def cors_origins_list(self) -> list[str]:
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
