"""Yahtzee categories and the score of a roll in each of them."""

import random
from collections import Counter
from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Any, Callable, Optional

NUM_DICE = 5
DIE_FACES = 6

UPPER_BONUS_THRESHOLD = 63
UPPER_BONUS = 35

FULL_HOUSE_SCORE = 25
SMALL_STRAIGHT_SCORE = 30
LARGE_STRAIGHT_SCORE = 40
YAHTZEE_SCORE = 50


class YahtzeeCategory(StrEnum):
    """Values are the keys of a scorecard as it is persisted / sent to clients."""

    ONES = "ones"
    TWOS = "twos"
    THREES = "threes"
    FOURS = "fours"
    FIVES = "fives"
    SIXES = "sixes"
    THREE_OF_KIND = "threeOfKind"
    FOUR_OF_KIND = "fourOfKind"
    FULL_HOUSE = "fullHouse"
    SMALL_STRAIGHT = "smallStraight"
    LARGE_STRAIGHT = "largeStraight"
    YAHTZEE = "yahtzee"
    CHANCE = "chance"


# Upper section, indexed by face - 1
UPPER_CATEGORIES: tuple[YahtzeeCategory, ...] = (
    YahtzeeCategory.ONES,
    YahtzeeCategory.TWOS,
    YahtzeeCategory.THREES,
    YahtzeeCategory.FOURS,
    YahtzeeCategory.FIVES,
    YahtzeeCategory.SIXES,
)

LOWER_CATEGORIES: tuple[YahtzeeCategory, ...] = (
    YahtzeeCategory.THREE_OF_KIND,
    YahtzeeCategory.FOUR_OF_KIND,
    YahtzeeCategory.FULL_HOUSE,
    YahtzeeCategory.SMALL_STRAIGHT,
    YahtzeeCategory.LARGE_STRAIGHT,
    YahtzeeCategory.YAHTZEE,
    YahtzeeCategory.CHANCE,
)

SMALL_STRAIGHTS: tuple[frozenset[int], ...] = (
    frozenset({1, 2, 3, 4}),
    frozenset({2, 3, 4, 5}),
    frozenset({3, 4, 5, 6}),
)
LARGE_STRAIGHTS: tuple[list[int], ...] = ([1, 2, 3, 4, 5], [2, 3, 4, 5, 6])

# Category -> score. A category that is absent has not been filled yet.
Scorecard = dict[YahtzeeCategory, int]


def parse_category(value: Any) -> Optional[YahtzeeCategory]:
    try:
        return YahtzeeCategory(value)
    except ValueError:
        return None


def upper_category(face: int) -> YahtzeeCategory:
    return UPPER_CATEGORIES[face - 1]


def roll_dice(count: int = NUM_DICE, rng: Optional[random.Random] = None) -> list[int]:
    rng = rng or random.Random()
    return [rng.randint(1, DIE_FACES) for _ in range(count)]


# --- SCORING RULES ---
ScoreRuleFn = Callable[[list[int]], int]


def _max_of_a_kind(dice: list[int]) -> int:
    return max(Counter(dice).values(), default=0)


def score_three_of_kind(dice: list[int]) -> int:
    return sum(dice) if _max_of_a_kind(dice) >= 3 else 0


def score_four_of_kind(dice: list[int]) -> int:
    return sum(dice) if _max_of_a_kind(dice) >= 4 else 0


def score_full_house(dice: list[int]) -> int:
    """Exactly a triple and a pair. Five of a kind is not a full house."""
    counts = sorted(Counter(dice).values())
    return FULL_HOUSE_SCORE if counts == [2, 3] else 0


def score_small_straight(dice: list[int]) -> int:
    faces = set(dice)
    return SMALL_STRAIGHT_SCORE if any(run <= faces for run in SMALL_STRAIGHTS) else 0


def score_large_straight(dice: list[int]) -> int:
    return LARGE_STRAIGHT_SCORE if sorted(dice) in LARGE_STRAIGHTS else 0


def score_yahtzee(dice: list[int]) -> int:
    return YAHTZEE_SCORE if len(dice) == NUM_DICE and _max_of_a_kind(dice) == NUM_DICE else 0


def score_chance(dice: list[int]) -> int:
    return sum(dice)


def _upper_rule(face: int) -> ScoreRuleFn:
    def score_face(dice: list[int]) -> int:
        return dice.count(face) * face

    return score_face


# -- STRATEGY PATTERN: SCORING RULES ---
SCORING_RULES: dict[YahtzeeCategory, ScoreRuleFn] = {
    **{category: _upper_rule(face) for face, category in enumerate(UPPER_CATEGORIES, start=1)},
    YahtzeeCategory.THREE_OF_KIND: score_three_of_kind,
    YahtzeeCategory.FOUR_OF_KIND: score_four_of_kind,
    YahtzeeCategory.FULL_HOUSE: score_full_house,
    YahtzeeCategory.SMALL_STRAIGHT: score_small_straight,
    YahtzeeCategory.LARGE_STRAIGHT: score_large_straight,
    YahtzeeCategory.YAHTZEE: score_yahtzee,
    YahtzeeCategory.CHANCE: score_chance,
}


def calculate_score(dice: Iterable[int], category: YahtzeeCategory | str) -> int:
    """Score of the dice if written down in the given category. Unknown categories score 0."""
    parsed = parse_category(category)
    if parsed is None:
        return 0
    return SCORING_RULES[parsed](list(dice))


def upper_section_sum(scorecard: Mapping[YahtzeeCategory, int]) -> int:
    return sum(scorecard.get(category, 0) for category in UPPER_CATEGORIES)


def calculate_total_score(scorecard: Mapping[YahtzeeCategory, int]) -> int:
    """upper section + bonus (35 once the upper section reaches 63) + lower section"""
    upper = upper_section_sum(scorecard)
    bonus = UPPER_BONUS if upper >= UPPER_BONUS_THRESHOLD else 0
    lower = sum(scorecard.get(category, 0) for category in LOWER_CATEGORIES)
    return upper + bonus + lower


def is_scorecard_complete(scorecard: Mapping[YahtzeeCategory, int]) -> bool:
    return all(category in scorecard for category in YahtzeeCategory)


def available_categories(scorecard: Mapping[YahtzeeCategory, int]) -> list[YahtzeeCategory]:
    """Open categories, in scorecard order"""
    return [category for category in YahtzeeCategory if category not in scorecard]


def scorecard_from_dict(raw: Any) -> Scorecard:
    """Keep only known categories with integer scores."""
    if not isinstance(raw, Mapping):
        return {}
    scorecard: Scorecard = {}
    for key, value in raw.items():
        category = parse_category(key)
        if category is not None and isinstance(value, int) and not isinstance(value, bool):
            scorecard[category] = value
    return scorecard


def scorecard_to_dict(scorecard: Mapping[YahtzeeCategory, int]) -> dict[str, int]:
    return {str(category): score for category, score in scorecard.items()}
