"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from food_search.adapters.fdc_client import (
    FdcClient,
    HttpxFdcClient,
    SupabaseProxyFdcClient,
)
from food_search.config import Settings
from food_search.services.cache import TtlCache
from food_search.services.food_data import FoodDataService
from food_search.services.proxy import FoodDataRelay
from food_search.services.rate_limit import RateLimiter, TokenBucketLimiter


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    food_data_service: FoodDataService
    relay: FoodDataRelay
    close_resources: Callable[[], Awaitable[None]]


def build_fdc_client(settings: Settings) -> FdcClient:
    """Pick the direct client when a key is configured, else the proxy."""
    if not settings.uses_proxy:
        return HttpxFdcClient.create(
            api_key=settings.fdc_api_key or "",
            base_url=settings.fdc_base_url,
            timeout_seconds=settings.request_timeout_seconds,
        )
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise RuntimeError(
            "Either FDC_API_KEY or SUPABASE_URL and SUPABASE_ANON_KEY must be set"
        )
    return SupabaseProxyFdcClient.create(
        supabase_url=settings.supabase_url,
        supabase_key=settings.supabase_anon_key,
        function_name=settings.fdc_proxy_function,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    fdc_client = build_fdc_client(resolved_settings)
    food_data_service = FoodDataService(
        client=fdc_client,
        cache=TtlCache(ttl_seconds=resolved_settings.cache_ttl_seconds),
        rate_limiter=RateLimiter(
            min_interval_seconds=resolved_settings.min_request_interval_seconds
        ),
        descriptor_words=frozenset(resolved_settings.dedup_descriptor_words),
    )
    relay = FoodDataRelay(
        upstream=fdc_client if isinstance(fdc_client, HttpxFdcClient) else None,
        limiter=TokenBucketLimiter(
            capacity=resolved_settings.proxy_bucket_capacity,
            refill_per_second=resolved_settings.proxy_refill_per_second,
        ),
    )

    async def close_resources() -> None:
        await food_data_service.close()

    return AppContainer(
        settings=resolved_settings,
        food_data_service=food_data_service,
        relay=relay,
        close_resources=close_resources,
    )
