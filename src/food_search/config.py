"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from food_search.services.relevance import DESCRIPTOR_WORDS

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    fdc_api_key: str | None = None
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    fdc_proxy_function: str = "fooddata_proxy"
    admin_token: str | None = None
    request_timeout_seconds: float = 15.0
    min_request_interval_seconds: float = 0.5
    cache_ttl_seconds: int = 30 * 60
    default_page_size: int = 12
    dedup_descriptor_words: list[str] = sorted(DESCRIPTOR_WORDS)
    proxy_bucket_capacity: int = 60
    proxy_refill_per_second: float = 0.5
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def uses_proxy(self) -> bool:
        """Return True when searches must go through the Supabase proxy."""
        return not self.fdc_api_key


def parse_restrictions(raw: str | None) -> list[str]:
    """Parse a comma-separated list of dietary restrictions."""
    if raw is None:
        return []
    return [chunk.strip().lower() for chunk in raw.split(",") if chunk.strip()]
