"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from food_search.adapters.fdc_client import FdcClient
from food_search.config import Settings
from food_search.containers import AppContainer
from food_search.services.cache import TtlCache
from food_search.services.food_data import FoodDataService
from food_search.services.proxy import FoodDataRelay
from food_search.services.rate_limit import RateLimiter


def fdc_food(  # noqa: PLR0913
    fdc_id: int,
    description: str,
    *,
    calories: float = 200,
    protein: float = 10,
    carbs: float = 20,
    fats: float = 5,
    fiber: float = 0,
    brand_owner: str | None = None,
    data_type: str = "Survey (FNDDS)",
    serving_size: float | None = None,
) -> dict[str, Any]:
    """Build a raw FDC search hit."""
    food: dict[str, Any] = {
        "fdcId": fdc_id,
        "description": description,
        "dataType": data_type,
        "foodNutrients": [
            {"nutrientId": 1008, "value": calories},
            {"nutrientId": 1003, "value": protein},
            {"nutrientId": 1005, "value": carbs},
            {"nutrientId": 1004, "value": fats},
            {"nutrientId": 1079, "value": fiber},
        ],
    }
    if brand_owner is not None:
        food["brandOwner"] = brand_owner
    if serving_size is not None:
        food["servingSize"] = serving_size
    return food


@dataclass
class FakeClock:
    """Manually advanced clock shared by the limiter and its sleep."""

    now: float = 1000.0
    sleeps: list[float] = field(default_factory=list)

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@dataclass
class FakeWallClock:
    """Datetime clock for cache expiry tests."""

    now: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with in-memory responses."""

    search_payload: dict[str, Any] = field(
        default_factory=lambda: {
            "totalHits": 3,
            "foods": [
                fdc_food(1, "Chicken breast, roasted", calories=165, protein=31),
                fdc_food(2, "Chicken breast, grilled", calories=170, protein=30),
                fdc_food(
                    3,
                    "Chicken Breast Strips",
                    brand_owner="Tyson Foods, Inc.",
                    data_type="Branded",
                ),
            ],
        }
    )
    food_payload: dict[str, Any] = field(
        default_factory=lambda: {
            "fdcId": 171077,
            "description": "Chicken, broilers or fryers, breast, meat only, raw",
            "dataType": "Foundation",
            "servingSize": 100,
            "householdServingFullText": "1 breast",
            "publishedDate": "2019-04-01",
            "foodNutrients": [
                {"nutrient": {"id": 1008}, "amount": 120},
                {"nutrient": {"id": 1003}, "amount": 22.5},
                {"nutrient": {"id": 1004}, "amount": 2.62},
                {"nutrient": {"id": 1005}, "amount": 0},
                {"nutrient": {"id": 1253}, "amount": 73},
                {"nutrient": {"id": 1092}, "amount": 334},
            ],
        }
    )
    search_error: Exception | None = None
    food_error: Exception | None = None
    search_calls: list[tuple[str, int, int]] = field(default_factory=list)
    food_calls: list[str] = field(default_factory=list)
    closed: bool = False

    async def search_foods(
        self, query: str, page_size: int, page_number: int = 1
    ) -> dict[str, Any]:
        self.search_calls.append((query, page_size, page_number))
        if self.search_error is not None:
            raise self.search_error
        return self.search_payload

    async def get_food(self, fdc_id: str) -> dict[str, Any]:
        self.food_calls.append(fdc_id)
        if self.food_error is not None:
            raise self.food_error
        return self.food_payload

    async def close(self) -> None:
        self.closed = True


def make_service(
    client: FdcClient, clock: FakeClock | None = None
) -> FoodDataService:
    """Build a service whose throttling never actually sleeps."""
    resolved_clock = clock or FakeClock()
    return FoodDataService(
        client=client,
        cache=TtlCache(),
        rate_limiter=RateLimiter(clock=resolved_clock, sleep=resolved_clock.sleep),
        sleep=resolved_clock.sleep,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        fdc_api_key="fdc-key",
        admin_token="admin-token",
    )


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def food_data_service(fdc_client: FakeFdcClient, clock: FakeClock) -> FoodDataService:
    return make_service(fdc_client, clock)


@pytest.fixture
def container(
    settings: Settings, food_data_service: FoodDataService
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        food_data_service=food_data_service,
        relay=FoodDataRelay(upstream=None),
        close_resources=close_resources,
    )
