"""Domain models for FoodData Central search results."""

from dataclasses import dataclass
from enum import StrEnum

UNKNOWN_FOOD_NAME = "Unknown Food"


@dataclass(frozen=True)
class FoodCandidate:
    """Normalized food record produced from a single FDC search hit."""

    id: str | None
    fdc_id: str | None
    name: str
    brand: str | None
    description: str | None
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sodium: float = 0.0
    serving_size: float = 100
    serving_unit: str = "g"
    category: str = "other"
    data_type: str | None = None
    source: str = "api"
    relevance_score: int | None = None
    group_score: int | None = None

    def to_dict(self) -> dict[str, object]:
        """Render the candidate with the client-facing key names."""
        payload: dict[str, object] = {
            "id": self.id,
            "fdcId": self.fdc_id,
            "name": self.name,
            "brand": self.brand,
            "description": self.description,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
            "fiber": self.fiber,
            "sugar": self.sugar,
            "sodium": self.sodium,
            "servingSize": self.serving_size,
            "servingUnit": self.serving_unit,
            "category": self.category,
            "dataType": self.data_type,
            "source": self.source,
        }
        if self.relevance_score is not None:
            payload["_relevanceScore"] = self.relevance_score
        if self.group_score is not None:
            payload["_groupScore"] = self.group_score
        return payload


@dataclass(frozen=True)
class FoodDetails:
    """Full food record with the extended nutrient set."""

    food: FoodCandidate
    cholesterol: float = 0.0
    saturated_fat: float = 0.0
    trans_fat: float = 0.0
    vitamin_d: float = 0.0
    calcium: float = 0.0
    iron: float = 0.0
    potassium: float = 0.0
    household_serving: str | None = None
    published_date: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Render details as a flat payload."""
        return {
            **self.food.to_dict(),
            "cholesterol": self.cholesterol,
            "saturatedFat": self.saturated_fat,
            "transFat": self.trans_fat,
            "vitaminD": self.vitamin_d,
            "calcium": self.calcium,
            "iron": self.iron,
            "potassium": self.potassium,
            "householdServing": self.household_serving,
            "publishedDate": self.published_date,
        }


class SearchStatus(StrEnum):
    """Outcome of a search call."""

    OK = "ok"
    REJECTED = "rejected"
    TIMEOUT = "timeout"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    ERROR = "error"


@dataclass(frozen=True)
class FoodSearchResult:
    """One page of ranked search results.

    An empty ``foods`` list is only a genuine "no matches" answer when
    ``status`` is ``OK``; the other statuses describe why nothing came back.
    """

    foods: list[FoodCandidate]
    total_hits: int
    current_page: int
    total_pages: int | None = None
    error: str | None = None
    status: SearchStatus = SearchStatus.OK

    def to_dict(self) -> dict[str, object]:
        """Render the result in the wire shape used by API consumers."""
        payload: dict[str, object] = {
            "foods": [food.to_dict() for food in self.foods],
            "totalHits": self.total_hits,
            "currentPage": self.current_page,
            "status": self.status.value,
        }
        if self.total_pages is not None:
            payload["totalPages"] = self.total_pages
        if self.error is not None:
            payload["error"] = self.error
        return payload
