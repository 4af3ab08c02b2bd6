"""Unit tests for src/yahtzee/scoring.py"""

import random

import pytest

from src.yahtzee.scoring import (
    UPPER_CATEGORIES,
    YahtzeeCategory,
    available_categories,
    calculate_score,
    calculate_total_score,
    is_scorecard_complete,
    roll_dice,
    scorecard_from_dict,
    scorecard_to_dict,
    upper_section_sum,
)

C = YahtzeeCategory


@pytest.mark.parametrize(
    "dice, category, expected",
    [
        # five of a kind
        ([1, 1, 1, 1, 1], C.YAHTZEE, 50),
        ([1, 1, 1, 1, 1], C.CHANCE, 5),
        ([1, 1, 1, 1, 1], C.ONES, 5),
        ([1, 1, 1, 1, 1], C.THREE_OF_KIND, 5),
        ([1, 1, 1, 1, 1], C.FOUR_OF_KIND, 5),
        ([1, 1, 1, 1, 1], C.FULL_HOUSE, 0),
        # large straight
        ([2, 3, 4, 5, 6], C.LARGE_STRAIGHT, 40),
        ([2, 3, 4, 5, 6], C.SMALL_STRAIGHT, 30),
        ([2, 3, 4, 5, 6], C.CHANCE, 20),
        ([6, 2, 4, 3, 5], C.LARGE_STRAIGHT, 40),  # order does not matter
        ([1, 2, 3, 4, 5], C.LARGE_STRAIGHT, 40),
        ([1, 2, 3, 4, 6], C.LARGE_STRAIGHT, 0),
        # full house
        ([1, 1, 2, 2, 2], C.FULL_HOUSE, 25),
        ([1, 1, 2, 2, 2], C.CHANCE, 8),
        ([1, 1, 2, 2, 2], C.THREE_OF_KIND, 8),
        ([1, 1, 2, 2, 2], C.FOUR_OF_KIND, 0),
        ([1, 1, 2, 2, 3], C.FULL_HOUSE, 0),
        # small straight, with a duplicate or a gap
        ([1, 2, 3, 4, 4], C.SMALL_STRAIGHT, 30),
        ([3, 4, 5, 6, 1], C.SMALL_STRAIGHT, 30),
        ([1, 2, 3, 5, 6], C.SMALL_STRAIGHT, 0),
        # upper section
        ([6, 6, 2, 6, 1], C.SIXES, 18),
        ([6, 6, 2, 6, 1], C.TWOS, 2),
        ([6, 6, 2, 6, 1], C.FIVES, 0),
        ([4, 4, 4, 4, 2], C.FOUR_OF_KIND, 18),
        ([4, 4, 4, 4, 2], C.YAHTZEE, 0),
    ],
)
def test_calculate_score(dice: list[int], category: YahtzeeCategory, expected: int) -> None:
    assert calculate_score(dice, category) == expected


def test_category_given_as_string() -> None:
    assert calculate_score([1, 1, 2, 2, 2], "fullHouse") == 25


def test_unknown_category_scores_zero() -> None:
    assert calculate_score([6, 6, 6, 6, 6], "bogus") == 0


def test_upper_bonus_at_63() -> None:
    """35 bonus points once the upper section reaches 63, not a point earlier"""
    scorecard = {
        C.ONES: 3,
        C.TWOS: 6,
        C.THREES: 9,
        C.FOURS: 12,
        C.FIVES: 15,
        C.SIXES: 18,
    }
    assert upper_section_sum(scorecard) == 63
    assert calculate_total_score(scorecard) == 63 + 35

    scorecard[C.ONES] = 2
    assert upper_section_sum(scorecard) == 62
    assert calculate_total_score(scorecard) == 62


def test_total_includes_lower_section() -> None:
    scorecard = {C.SIXES: 24, C.YAHTZEE: 50, C.CHANCE: 22}
    assert calculate_total_score(scorecard) == 96
    assert calculate_total_score({}) == 0


def test_scorecard_completion() -> None:
    scorecard = {category: 0 for category in YahtzeeCategory}
    assert is_scorecard_complete(scorecard)
    assert available_categories(scorecard) == []

    del scorecard[C.CHANCE]
    assert not is_scorecard_complete(scorecard)
    assert available_categories(scorecard) == [C.CHANCE]


def test_available_categories_keep_scorecard_order() -> None:
    open_categories = available_categories({C.ONES: 3})
    assert len(open_categories) == 12
    assert open_categories[:5] == list(UPPER_CATEGORIES[1:])


def test_roll_dice() -> None:
    dice = roll_dice(5, random.Random(42))
    assert len(dice) == 5
    assert all(1 <= die <= 6 for die in dice)
    assert dice == roll_dice(5, random.Random(42))


def test_scorecard_serialization() -> None:
    """Keys are the camelCase category names. Unknown keys and non-integers are dropped when reading."""
    scorecard = {C.FULL_HOUSE: 25, C.ONES: 0}
    assert scorecard_to_dict(scorecard) == {"fullHouse": 25, "ones": 0}
    assert scorecard_from_dict({"fullHouse": 25, "ones": 0, "bonus": 35, "chance": "12", "yahtzee": True}) == scorecard
    assert scorecard_from_dict(None) == {}
