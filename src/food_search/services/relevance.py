"""Filtering, deduplication and relevance ranking for FDC search results."""

import re
from dataclasses import replace

from food_search.domain.foods import UNKNOWN_FOOD_NAME, FoodCandidate

MAX_CALORIES = 900
GROUP_KEY_WORDS = 4
BRAND_PREFIX_LENGTH = 10
MIN_SIGNIFICANT_WORD_LENGTH = 3
LONG_NAME_LENGTH = 100
SHORT_NAME_LENGTH = 50
REFERENCE_SERVING_SIZE = 100
MIN_PHRASE_WORDS = 2

# Connectives and preparation descriptors that FDC appends to otherwise
# identical entries ("Banana, raw").
DESCRIPTOR_WORDS = frozenset(
    {"and", "the", "with", "for", "from", "raw", "fresh", "plain"}
)

BRANDED = "Branded"
SURVEY = "Survey (FNDDS)"
FOUNDATION = "Foundation"

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def is_valid_food(food: FoodCandidate) -> bool:
    """Return True when a candidate carries a name, calories and all macros."""
    if not food.name or food.name == UNKNOWN_FOOD_NAME:
        return False
    if not food.calories or food.calories <= 0 or food.calories > MAX_CALORIES:
        return False
    return all(value and value > 0 for value in (food.protein, food.carbs, food.fats))


def validate_and_filter_foods(foods: list[FoodCandidate]) -> list[FoodCandidate]:
    """Drop candidates with incomplete nutrition data."""
    return [food for food in foods if is_valid_food(food)]


def normalize_name(name: str) -> str:
    """Lowercase a name and strip punctuation."""
    cleaned = _PUNCTUATION.sub(" ", name.lower())
    return _WHITESPACE.sub(" ", cleaned).strip()


def significant_words(
    name: str, descriptor_words: frozenset[str] = DESCRIPTOR_WORDS
) -> list[str]:
    """Return the words of a name that identify the food."""
    return [
        word
        for word in normalize_name(name).split(" ")
        if len(word) >= MIN_SIGNIFICANT_WORD_LENGTH and word not in descriptor_words
    ]


def group_key(
    food: FoodCandidate, descriptor_words: frozenset[str] = DESCRIPTOR_WORDS
) -> str:
    """Build the similarity-group key for a candidate."""
    words = sorted(significant_words(food.name, descriptor_words))[:GROUP_KEY_WORDS]
    brand = (food.brand or "").lower()[:BRAND_PREFIX_LENGTH]
    return f"{' '.join(words)}|{brand}"


def group_score(food: FoodCandidate) -> int:
    """Score how good a representative a candidate is within its group."""
    score = 0
    if food.brand:
        score += 30
    if food.data_type == SURVEY:
        score += 25
    elif food.data_type == FOUNDATION:
        score += 20
    score += sum(5 for value in (food.protein, food.carbs, food.fats) if value > 0)
    if food.fiber > 0:
        score += 3
    if len(food.name) < SHORT_NAME_LENGTH:
        score += 10
    elif len(food.name) > LONG_NAME_LENGTH:
        score -= 5
    if food.serving_size == REFERENCE_SERVING_SIZE:
        score += 8
    return score


def remove_duplicates(
    foods: list[FoodCandidate],
    descriptor_words: frozenset[str] = DESCRIPTOR_WORDS,
) -> list[FoodCandidate]:
    """Keep the best candidate of each similarity group.

    Groups come out in the order their first member appeared. On equal
    group scores the earlier candidate wins. ``descriptor_words`` are left
    out of the group key, so "Greek yogurt" and "Greek yogurt, plain" share
    a group with the defaults; pass an empty set to compare every word.
    """
    groups: dict[str, list[FoodCandidate]] = {}
    for food in foods:
        groups.setdefault(group_key(food, descriptor_words), []).append(food)

    unique: list[FoodCandidate] = []
    for members in groups.values():
        if len(members) == 1:
            unique.append(members[0])
            continue
        scored = [replace(food, group_score=group_score(food)) for food in members]
        unique.append(max(scored, key=lambda food: food.group_score or 0))
    return unique


def _contains_in_order(name: str, words: list[str]) -> bool:
    position = 0
    for word in words:
        index = name.find(word, position)
        if index == -1:
            return False
        position = index + len(word)
    return True


def score_food(food: FoodCandidate, query: str) -> int:  # noqa: PLR0912
    """Compute the relevance score of a candidate for a query."""
    lower_query = query.strip().lower()
    query_words = lower_query.split()
    lower_name = food.name.lower()
    lower_brand = (food.brand or "").lower()
    score = 0

    if lower_name == lower_query or lower_query in f"{lower_name} {lower_brand}":
        score += 1000

    if lower_name == lower_query:
        score += 500
    elif lower_name.startswith(lower_query):
        score += 300
    elif lower_query in lower_name:
        score += 200

    if len(query_words) >= MIN_PHRASE_WORDS and _contains_in_order(
        lower_name, query_words
    ):
        score += 150

    if lower_brand:
        if lower_brand == lower_query:
            score += 400
        elif lower_query in lower_brand:
            score += 100

    matched = 0
    for word in query_words:
        if word in lower_name:
            matched += 1
            score += 30
            if lower_name.startswith(word):
                score += 20
        if lower_brand and word in lower_brand:
            score += 15

    name_words = lower_name.split()
    if query_words and name_words:
        density = (matched / len(query_words)) / len(name_words)
        score += round(50 * density)

    if len(food.name) > LONG_NAME_LENGTH:
        score -= 20

    if food.brand:
        score += 10
        if food.data_type == BRANDED:
            score += 15
    if food.data_type in {SURVEY, FOUNDATION}:
        score += 5

    return score


def score_and_sort_foods(foods: list[FoodCandidate], query: str) -> list[FoodCandidate]:
    """Annotate candidates with relevance scores and sort best first."""
    scored = [replace(food, relevance_score=score_food(food, query)) for food in foods]
    return sorted(scored, key=lambda food: food.relevance_score or 0, reverse=True)
