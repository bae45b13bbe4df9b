"""Food search service over USDA FoodData Central."""

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from food_search.adapters.fdc_client import (
    FdcClient,
    FdcTimeoutError,
    FdcUpstreamError,
)
from food_search.domain.foods import (
    FoodCandidate,
    FoodDetails,
    FoodSearchResult,
    SearchStatus,
)
from food_search.services.cache import Cache, TtlCache
from food_search.services.rate_limit import RateLimiter
from food_search.services.relevance import (
    DESCRIPTOR_WORDS,
    remove_duplicates,
    score_and_sort_foods,
    validate_and_filter_foods,
)
from food_search.services.restrictions import filter_foods_by_restrictions
from food_search.services.transform import (
    transform_food_detail,
    transform_food_results,
)

DEFAULT_PAGE_SIZE = 12
MIN_QUERY_LENGTH = 2
# Extra records requested so filtering still leaves a full page.
PAGE_BUFFER = 8
SUGGESTED_QUERIES = (
    "chicken breast",
    "brown rice",
    "salmon",
    "banana",
    "oatmeal",
    "greek yogurt",
)
SUGGESTED_CACHE_KEY = "suggested_foods"

_logger = logging.getLogger(__name__)


@dataclass
class FoodDataService:
    """Searches FDC foods with caching, throttling and relevance ranking."""

    client: FdcClient
    cache: Cache = field(default_factory=TtlCache)
    rate_limiter: RateLimiter = field(default_factory=RateLimiter)
    page_buffer: int = PAGE_BUFFER
    descriptor_words: frozenset[str] = DESCRIPTOR_WORDS
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    async def search_foods(
        self,
        query: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_number: int = 1,
    ) -> FoodSearchResult:
        """Search foods and return one ranked page.

        Failures never raise: the result carries a non-OK status instead.
        """
        if not query or len(query.strip()) < MIN_QUERY_LENGTH:
            return FoodSearchResult(
                foods=[], total_hits=0, current_page=1, status=SearchStatus.REJECTED
            )

        cache_key = f"search_{query}_{page_size}_{page_number}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodSearchResult):
            _logger.info("Returning cached results for: %s", query)
            return cached

        try:
            await self.rate_limiter.wait()
            _logger.info("Searching FoodData Central: %s", query)
            payload = await self.client.search_foods(
                query, page_size=page_size + self.page_buffer, page_number=page_number
            )
            foods = rank_foods(
                payload.get("foods") or [], query, self.descriptor_words
            )
            total_hits = payload.get("totalHits") or len(foods)
            result = FoodSearchResult(
                foods=foods[:page_size],
                total_hits=total_hits,
                current_page=page_number,
                total_pages=math.ceil(total_hits / page_size),
            )
        except FdcTimeoutError:
            _logger.error("FDC search timed out: %s", query)
            return FoodSearchResult(
                foods=[],
                total_hits=0,
                current_page=1,
                error="Request timeout",
                status=SearchStatus.TIMEOUT,
            )
        except FdcUpstreamError as exc:
            _logger.warning("FDC unavailable for %s: %s", query, exc)
            return FoodSearchResult(
                foods=[],
                total_hits=0,
                current_page=1,
                status=SearchStatus.UPSTREAM_UNAVAILABLE,
            )
        except Exception as exc:
            _logger.exception("FoodData search failed: %s", query)
            return FoodSearchResult(
                foods=[],
                total_hits=0,
                current_page=1,
                error=str(exc),
                status=SearchStatus.ERROR,
            )

        self.cache.set(cache_key, result)
        _logger.info("Found %s results for: %s", len(result.foods), query)
        return result

    async def search_foods_with_restrictions(
        self,
        query: str,
        restrictions: list[str] | None,
        *,
        filter_enabled: bool = False,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_number: int = 1,
    ) -> tuple[FoodSearchResult, list[list[str]]]:
        """Search foods and annotate each with violated dietary restrictions."""
        result = await self.search_foods(query, page_size, page_number)
        annotated = filter_foods_by_restrictions(
            result.foods, restrictions, filter_enabled
        )
        filtered = FoodSearchResult(
            foods=[food for food, _ in annotated],
            total_hits=result.total_hits,
            current_page=result.current_page,
            total_pages=result.total_pages,
            error=result.error,
            status=result.status,
        )
        return filtered, [violations for _, violations in annotated]

    async def get_food_details(self, fdc_id: str) -> FoodDetails:
        """Fetch full details for one food; failures propagate."""
        cache_key = f"food_{fdc_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodDetails):
            _logger.info("Returning cached food details for: %s", fdc_id)
            return cached

        try:
            await self.rate_limiter.wait()
            _logger.info("Fetching food details: %s", fdc_id)
            payload = await self.client.get_food(fdc_id)
        except Exception:
            _logger.exception("FoodData details failed: %s", fdc_id)
            raise
        details = transform_food_detail(payload)
        self.cache.set(cache_key, details)
        return details

    async def batch_search(
        self,
        queries: list[str] | tuple[str, ...],
        page_size: int = 5,
        delay_seconds: float = 0.6,
    ) -> list[FoodCandidate]:
        """Run several searches one after another and merge their foods."""
        foods: list[FoodCandidate] = []
        for index, query in enumerate(queries):
            result = await self.search_foods(query, page_size)
            foods.extend(result.foods)
            if index < len(queries) - 1:
                await self.sleep(delay_seconds)
        return foods

    async def get_suggested_foods(self) -> list[FoodCandidate]:
        """Return a cached mix of popular staple foods."""
        cached = self.cache.get(SUGGESTED_CACHE_KEY)
        if isinstance(cached, list):
            _logger.info("Returning cached suggested foods")
            return list(cached)
        foods = await self.batch_search(SUGGESTED_QUERIES)
        self.cache.set(SUGGESTED_CACHE_KEY, list(foods))
        return foods

    def clear_cache(self) -> None:
        """Drop all cached searches and details."""
        self.cache.clear()
        _logger.info("Food data cache cleared")

    def cache_stats(self) -> dict[str, object]:
        """Return cache size and keys."""
        return self.cache.stats()

    async def close(self) -> None:
        """Release the underlying client."""
        await self.client.close()


def rank_foods(
    raw_foods: list[dict[str, object]],
    query: str,
    descriptor_words: frozenset[str] = DESCRIPTOR_WORDS,
) -> list[FoodCandidate]:
    """Run raw FDC hits through transform, validation, dedup and scoring."""
    foods = transform_food_results(raw_foods)
    foods = validate_and_filter_foods(foods)
    foods = remove_duplicates(foods, descriptor_words)
    return score_and_sort_foods(foods, query)
