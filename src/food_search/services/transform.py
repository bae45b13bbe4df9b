"""Mapping of raw FDC records into domain models."""

import math
import re
from typing import Any

from food_search.domain.foods import UNKNOWN_FOOD_NAME, FoodCandidate, FoodDetails

NUTRIENT_FIELDS: dict[int, str] = {
    1008: "calories",
    1003: "protein",
    1005: "carbs",
    1004: "fats",
    1079: "fiber",
    2000: "sugar",
    1093: "sodium",
    1253: "cholesterol",
    1258: "saturated_fat",
    1257: "trans_fat",
    1114: "vitamin_d",
    1087: "calcium",
    1089: "iron",
    1092: "potassium",
}

# Checked in order; the first match wins.
_CATEGORY_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    (
        "protein",
        re.compile(r"chicken|turkey|beef|pork|lamb|fish|salmon|tuna|shrimp|protein"),
    ),
    ("grain", re.compile(r"rice|pasta|bread|oat|quinoa|cereal|grain")),
    (
        "vegetable",
        re.compile(r"broccoli|spinach|lettuce|carrot|tomato|pepper|vegetable"),
    ),
    ("fruit", re.compile(r"apple|banana|orange|berry|strawberry|grape|fruit")),
    ("dairy", re.compile(r"milk|yogurt|cheese|dairy")),
    ("nuts", re.compile(r"almond|peanut|cashew|walnut|nut|seed")),
    ("healthy_fat", re.compile(r"avocado|olive oil|coconut oil|butter")),
    ("supplement", re.compile(r"protein powder|supplement|shake")),
]


def round_tenth(value: float) -> float:
    """Round to one decimal place with exact halves rounded up."""
    return math.floor(value * 10 + 0.5) / 10

def extract_nutrients(food_nutrients: list[dict[str, Any]]) -> dict[str, float]:
    """Extract the tracked nutrients, rounded to one decimal place."""
    values = {name: 0.0 for name in NUTRIENT_FIELDS.values()}
    for nutrient in food_nutrients:
        nutrient_info = nutrient.get("nutrient") or {}
        nutrient_id = nutrient.get("nutrientId") or nutrient_info.get("id")
        field_name = NUTRIENT_FIELDS.get(nutrient_id)
        if field_name is None:
            continue
        amount = nutrient.get("value") or nutrient.get("amount") or 0
        values[field_name] = round_tenth(float(amount))
    return values


def categorize_food(food: dict[str, Any]) -> str:
    """Assign a single category label from description and ingredients."""
    description = (food.get("description") or "").lower()
    ingredients = (food.get("ingredients") or "").lower()
    combined = f"{description} {ingredients}"
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.search(combined):
            return category
    return "other"


def transform_food(food: dict[str, Any]) -> FoodCandidate:
    """Map a single search hit to a candidate."""
    nutrients = extract_nutrients(food.get("foodNutrients") or [])
    fdc_id = _stringify_id(food.get("fdcId"))
    return FoodCandidate(
        id=fdc_id,
        fdc_id=fdc_id,
        name=food.get("description")
        or food.get("lowercaseDescription")
        or UNKNOWN_FOOD_NAME,
        brand=food.get("brandOwner") or food.get("brandName") or None,
        description=food.get("additionalDescriptions")
        or food.get("ingredients")
        or None,
        calories=nutrients["calories"],
        protein=nutrients["protein"],
        carbs=nutrients["carbs"],
        fats=nutrients["fats"],
        fiber=nutrients["fiber"],
        sugar=nutrients["sugar"],
        sodium=nutrients["sodium"],
        serving_size=food.get("servingSize") or 100,
        serving_unit=food.get("servingSizeUnit") or "g",
        category=categorize_food(food),
        data_type=food.get("dataType"),
    )


def transform_food_results(foods: list[dict[str, Any]]) -> list[FoodCandidate]:
    """Map raw search hits to candidates."""
    return [transform_food(food) for food in foods]


def transform_food_detail(food: dict[str, Any]) -> FoodDetails:
    """Map a full FDC food record to details."""
    nutrients = extract_nutrients(food.get("foodNutrients") or [])
    fdc_id = _stringify_id(food.get("fdcId"))
    candidate = FoodCandidate(
        id=fdc_id,
        fdc_id=fdc_id,
        name=food.get("description") or UNKNOWN_FOOD_NAME,
        brand=food.get("brandOwner") or food.get("brandName") or None,
        description=food.get("ingredients")
        or food.get("additionalDescriptions")
        or None,
        calories=nutrients["calories"],
        protein=nutrients["protein"],
        carbs=nutrients["carbs"],
        fats=nutrients["fats"],
        fiber=nutrients["fiber"],
        sugar=nutrients["sugar"],
        sodium=nutrients["sodium"],
        serving_size=food.get("servingSize") or 100,
        serving_unit=food.get("servingSizeUnit") or "g",
        category=categorize_food(food),
        data_type=food.get("dataType"),
    )
    return FoodDetails(
        food=candidate,
        cholesterol=nutrients["cholesterol"],
        saturated_fat=nutrients["saturated_fat"],
        trans_fat=nutrients["trans_fat"],
        vitamin_d=nutrients["vitamin_d"],
        calcium=nutrients["calcium"],
        iron=nutrients["iron"],
        potassium=nutrients["potassium"],
        household_serving=food.get("householdServingFullText"),
        published_date=food.get("publishedDate"),
    )


def _stringify_id(value: object) -> str | None:
    if value is None:
        return None
    return str(value)
