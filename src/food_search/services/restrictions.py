"""Dietary restriction detection for food candidates."""

from dataclasses import dataclass

from food_search.domain.foods import FoodCandidate

ALLERGEN_KEYWORDS: dict[str, dict[str, tuple[str, ...]]] = {
    "gluten-free": {
        "keywords": (
            "wheat", "barley", "rye", "gluten", "malt", "triticale",
            "flour", "bread", "pasta", "couscous", "seitan", "semolina",
            "spelt", "farro", "bulgur", "wheat germ", "wheat bran",
        ),
        "categories": ("bread", "pasta", "cereal", "baked goods"),
    },
    "dairy-free": {
        "keywords": (
            "milk", "cheese", "butter", "cream", "whey", "casein",
            "lactose", "yogurt", "yoghurt", "ghee", "buttermilk",
            "curd", "dairy", "milk powder", "condensed milk", "evaporated milk",
            "half and half", "sour cream", "creme", "fromage", "queso",
        ),
        "categories": ("dairy", "cheese", "milk", "yogurt", "ice cream"),
    },
    "nut-free": {
        "keywords": (
            "nut", "almond", "cashew", "walnut", "peanut", "pecan",
            "pistachio", "hazelnut", "macadamia", "brazil nut", "pine nut",
            "chestnut", "groundnut", "nut butter", "nutella", "marzipan",
            "praline", "gianduja", "amaretto",
        ),
        "categories": ("nuts", "nut butter", "trail mix"),
    },
    "soy-free": {
        "keywords": (
            "soy", "tofu", "tempeh", "edamame", "miso", "soya",
            "soybean", "soy sauce", "tamari", "shoyu", "natto",
            "textured vegetable protein", "tvp", "soy protein", "soy lecithin",
            "soy flour", "soy milk",
        ),
        "categories": ("soy", "tofu", "soy products"),
    },
}  # fmt: skip

MAX_INLINE_LABELS = 2

RESTRICTION_LABELS = {
    "gluten-free": "Gluten",
    "dairy-free": "Dairy",
    "nut-free": "Nuts",
    "soy-free": "Soy",
}


@dataclass(frozen=True)
class AllergenDetection:
    """Restrictions a food violates."""

    violations: list[str]

    @property
    def has_violations(self) -> bool:
        return bool(self.violations)


def _search_text(food: FoodCandidate) -> str:
    parts = [food.name, food.description or "", food.category, food.brand or ""]
    return " ".join(parts).lower()


def detect_allergens(
    food: FoodCandidate, restrictions: list[str] | None
) -> AllergenDetection:
    """Check a food against a user's dietary restrictions.

    Unknown restriction names are ignored.
    """
    if not restrictions:
        return AllergenDetection(violations=[])
    text = _search_text(food)
    violations = []
    for restriction in restrictions:
        allergen = ALLERGEN_KEYWORDS.get(restriction)
        if allergen is None:
            continue
        terms = (*allergen["keywords"], *allergen["categories"])
        if any(term in text for term in terms):
            violations.append(restriction)
    return AllergenDetection(violations=violations)


def filter_foods_by_restrictions(
    foods: list[FoodCandidate],
    restrictions: list[str] | None,
    filter_enabled: bool = False,
) -> list[tuple[FoodCandidate, list[str]]]:
    """Annotate foods with violations, dropping violators when filtering."""
    annotated = [
        (food, detect_allergens(food, restrictions).violations) for food in foods
    ]
    if not filter_enabled:
        return annotated
    return [(food, violations) for food, violations in annotated if not violations]


def restriction_label(restriction: str) -> str:
    """Return the display label for a restriction."""
    return RESTRICTION_LABELS.get(restriction, restriction)


def restriction_warning(violations: list[str]) -> str:
    """Build a short "Contains ..." warning for a list of violations."""
    labels = [restriction_label(violation) for violation in violations]
    if not labels:
        return ""
    if len(labels) <= MAX_INLINE_LABELS:
        return f"Contains {' and '.join(labels)}"
    return f"Contains {', '.join(labels[:-1])}, and {labels[-1]}"
