"""Tests for validation, deduplication and relevance scoring."""

from food_search.domain.foods import FoodCandidate
from food_search.services.relevance import (
    group_key,
    group_score,
    is_valid_food,
    remove_duplicates,
    score_and_sort_foods,
    score_food,
    significant_words,
    validate_and_filter_foods,
)


def _food(  # noqa: PLR0913
    name: str,
    *,
    food_id: str | None = None,
    brand: str | None = None,
    calories: float = 200,
    protein: float = 10,
    carbs: float = 20,
    fats: float = 5,
    fiber: float = 0,
    data_type: str | None = None,
    serving_size: float = 100,
) -> FoodCandidate:
    return FoodCandidate(
        id=food_id or name,
        fdc_id=food_id or name,
        name=name,
        brand=brand,
        description=None,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fats=fats,
        fiber=fiber,
        data_type=data_type,
        serving_size=serving_size,
    )


def test_validator_keeps_only_complete_foods() -> None:
    foods = [
        _food("Oatmeal"),
        _food(""),
        _food("Unknown Food"),
        _food("Diet soda", calories=0),
        _food("Olive oil", calories=884, protein=0, carbs=0, fats=100),
        _food("Lard heavy", calories=902),
        _food("Egg white", fats=0),
        _food("Tuna", carbs=0),
        _food("Negative", calories=-5),
        _food("Exactly 900", calories=900),
    ]

    kept = validate_and_filter_foods(foods)

    assert [food.name for food in kept] == ["Oatmeal", "Exactly 900"]
    assert all(food in foods for food in kept)
    for food in kept:
        assert 0 < food.calories <= 900
        assert food.protein > 0
        assert food.carbs > 0
        assert food.fats > 0
        assert food.name not in {"", "Unknown Food"}


def test_is_valid_food_rejects_missing_macro() -> None:
    assert is_valid_food(_food("Rice"))
    assert not is_valid_food(_food("Rice", protein=0))


def test_significant_words_drop_short_and_descriptor_words() -> None:
    assert significant_words("Banana, raw") == ["banana"]
    assert significant_words("Oil, olive (extra-virgin)") == [
        "oil",
        "olive",
        "extra",
        "virgin",
    ]
    assert significant_words("Egg & ham on rye") == ["egg", "ham", "rye"]


def test_group_key_uses_four_sorted_words_and_brand_prefix() -> None:
    food = _food("Zesty Lemon Pepper Chicken Wings", brand="Trader Joe's Company")

    assert group_key(food) == "chicken lemon pepper wings|trader joe"


def test_banana_variants_collapse_to_one_result() -> None:
    foods = [_food("Banana, raw", food_id="1"), _food("Banana raw fresh", food_id="2")]

    unique = remove_duplicates(foods)

    assert len(unique) == 1


def test_descriptor_words_merge_plain_variants_by_default() -> None:
    foods = [
        _food("Greek yogurt", food_id="1"),
        _food("Greek yogurt, plain", food_id="2"),
    ]

    assert len(remove_duplicates(foods)) == 1
    assert len(remove_duplicates(foods, descriptor_words=frozenset())) == 2


def test_dedup_keeps_highest_group_score() -> None:
    branded = _food("Greek Yogurt Plain", food_id="b", brand="Chobani", fiber=0)
    survey = _food(
        "Greek yogurt, plain",
        food_id="s",
        brand="Chobani",
        data_type="Survey (FNDDS)",
        fiber=1,
    )

    unique = remove_duplicates([branded, survey])

    assert [food.id for food in unique] == ["s"]
    assert unique[0].group_score == group_score(survey)


def test_dedup_passes_singletons_through_unchanged() -> None:
    foods = [_food("Apple", food_id="a"), _food("Salmon fillet", food_id="s")]

    unique = remove_duplicates(foods)

    assert unique == foods
    assert all(food.group_score is None for food in unique)


def test_dedup_is_idempotent() -> None:
    foods = [
        _food("Banana, raw", food_id="1"),
        _food("Banana raw fresh", food_id="2", data_type="Foundation"),
        _food("Brown rice, cooked", food_id="3"),
        _food("Rice, brown, cooked", food_id="4", brand=None, fiber=2),
        _food("Chicken breast", food_id="5", brand="Tyson"),
        _food("Chicken breast", food_id="6"),
    ]

    once = remove_duplicates(foods)
    twice = remove_duplicates(once)

    assert [food.id for food in twice] == [food.id for food in once]
    assert len(once) == 4


def test_group_score_rules() -> None:
    food = _food(
        "Chicken breast",
        brand="Tyson",
        data_type="Foundation",
        fiber=1,
        serving_size=100,
    )
    long_name = _food("x" * 101, protein=0, carbs=0, fats=0, serving_size=85)

    assert group_score(food) == 30 + 20 + 15 + 3 + 10 + 8
    assert group_score(long_name) == -5


def test_big_mac_exact_match_ranks_first() -> None:
    meal = _food(
        "Big Mac Meal with Fries",
        brand="McDonald's",
        calories=1090,
        protein=28,
        carbs=120,
        fats=45,
    )
    burger = _food(
        "Big Mac", brand="McDonald's", calories=540, protein=25, carbs=45, fats=28
    )

    ranked = score_and_sort_foods([meal, burger], "big mac")

    assert ranked[0].name == "Big Mac"
    assert ranked[0].relevance_score > ranked[1].relevance_score


def test_exact_beats_substring_beats_word_matches() -> None:
    words_only = _food("Peanut spread with butter flavor")
    substring = _food("Creamy peanut butter")
    exact = _food("Peanut butter")

    ranked = score_and_sort_foods([words_only, substring, exact], "peanut butter")

    assert [food.name for food in ranked] == [
        "Peanut butter",
        "Creamy peanut butter",
        "Peanut spread with butter flavor",
    ]


def test_score_food_components() -> None:
    food = _food("Banana", data_type="Foundation")

    # phrase 1000, exact 500, word 30 + leading 20, density 50, foundation 5
    assert score_food(food, "banana") == 1605


def test_brand_match_and_branded_bonus() -> None:
    food = _food("Cola", brand="Pepsi", data_type="Branded")

    # phrase via brand 1000, brand exact 400, word in brand 15, brand 10 + 15
    assert score_food(food, "pepsi") == 1440


def test_in_order_words_bonus_requires_order() -> None:
    in_order = _food("Chicken soup with noodles")
    reversed_order = _food("Noodles with chicken soup")

    assert score_food(in_order, "chicken noodles") - score_food(
        reversed_order, "chicken noodles"
    ) == 150


def test_long_names_are_penalized() -> None:
    short = _food("Oat bar")
    long = _food("Oat bar " + "x" * 100)

    assert score_food(short, "granola") == 0
    assert score_food(long, "granola") == -20


def test_sort_is_stable_for_ties() -> None:
    foods = [_food("Kale", food_id="1"), _food("Kale", food_id="2")]

    ranked = score_and_sort_foods(foods, "spinach")

    assert [food.id for food in ranked] == ["1", "2"]
