"""
Yahtzee bot: pure decision functions over the dice and the bot's scorecard.

Nothing here touches a game engine. The executor (src.bots.executor) reads the live game, asks these functions what
to do and submits the corresponding moves.

The strategy is a greedy heuristic: it never looks further ahead than the current turn.
"""

import random
from collections import defaultdict
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Optional

from src.core.exceptions import BotDecisionError
from src.yahtzee.game import ROLLS_PER_TURN
from src.yahtzee.scoring import (
    DIE_FACES,
    NUM_DICE,
    UPPER_BONUS_THRESHOLD,
    UPPER_CATEGORIES,
    YahtzeeCategory,
    available_categories,
    calculate_score,
    upper_category,
    upper_section_sum,
)

# --- CATEGORY PRIORITIES ---
YAHTZEE_PRIORITY = 1000
LARGE_STRAIGHT_PRIORITY = 500
SMALL_STRAIGHT_PRIORITY = 400
FULL_HOUSE_PRIORITY = 350
FOUR_OF_KIND_PRIORITY = 300
THREE_OF_KIND_PRIORITY = 200
CHANCE_PRIORITY = 150

# Upper section bonus still within reach
BONUS_CHASE_WINDOW = 20
BONUS_CHASE_PRIORITY = 100
HIGH_UPPER_PRIORITY = 50

# Forced to write a zero: sacrifice the cheap upper boxes first
ZERO_SCORE_PRIORITY = -100
ZERO_LOW_UPPER_PRIORITY = -50
LOW_CHANCE_PRIORITY = -80

Scorecard = Mapping[YahtzeeCategory, int]


@dataclass(frozen=True)
class BotTurnResult:
    category: YahtzeeCategory
    final_dice: list[int]


# -- DICE HELPERS ---
def group_dice(dice: Sequence[int]) -> dict[int, list[int]]:
    """face --> indices of the dice showing that face (faces in order of first appearance)"""
    groups: dict[int, list[int]] = defaultdict(list)
    for index, value in enumerate(dice):
        groups[value].append(index)
    return dict(groups)


def find_run(dice: Sequence[int], length: int) -> Optional[list[int]]:
    """Lowest run of `length` consecutive faces among the dice, e.g. [2, 3, 4, 5]"""
    faces = sorted(set(dice))
    for start in range(len(faces) - length + 1):
        candidate = faces[start : start + length]
        if candidate[-1] - candidate[0] == length - 1:
            return candidate
    return None


def run_indices(dice: Sequence[int], run: Sequence[int]) -> list[int]:
    """One die per face of the run: duplicates are re-rolled"""
    indices: list[int] = []
    seen: set[int] = set()
    for index, value in enumerate(dice):
        if value in run and value not in seen:
            seen.add(value)
            indices.append(index)
    return indices


def _group_of_size(groups: Mapping[int, list[int]], size: int) -> Optional[tuple[int, list[int]]]:
    return next(((face, indices) for face, indices in groups.items() if len(indices) == size), None)


def _indices_at_least(dice: Sequence[int], minimum: int) -> list[int]:
    return [index for index, value in enumerate(dice) if value >= minimum]


# --- HOLD DECISION ---
def decide_dice_to_hold(
    dice: Sequence[int], rolls_left: int, scorecard: Scorecard
) -> list[int]:
    """
    Indices of the dice to keep for the next roll (sorted).

    Nothing to decide once the turn has no rolls left.
    """
    if rolls_left <= 0:
        return []
    open_categories = available_categories(scorecard)
    if rolls_left == ROLLS_PER_TURN:
        indices = _first_roll_strategy(dice, open_categories)
    else:
        indices = _refine_roll_strategy(dice, open_categories)
    return sorted(indices)


def _first_roll_strategy(dice: Sequence[int], open_categories: list[YahtzeeCategory]) -> list[int]:
    """
    Before the first roll of the turn (the dice on the table come from the previous turn):
    1. five of a kind: hold all
    2. four of a kind: hold the four
    3. three of a kind, if its upper box or three/four of a kind is still open
    4. four faces in a row
    5. every pair
    6. the 5s and 6s, when there are at least two of them
    7. nothing
    """
    groups = group_dice(dice)

    for size in (5, 4):
        if (group := _group_of_size(groups, size)) is not None:
            return group[1]

    if (triple := _group_of_size(groups, 3)) is not None:
        face, indices = triple
        if (
            upper_category(face) in open_categories
            or YahtzeeCategory.THREE_OF_KIND in open_categories
            or YahtzeeCategory.FOUR_OF_KIND in open_categories
        ):
            return indices

    if (run := find_run(dice, 4)) is not None:
        return run_indices(dice, run)

    pairs = [index for indices in groups.values() if len(indices) == 2 for index in indices]
    if pairs:
        return pairs

    high = _indices_at_least(dice, 5)
    if len(high) >= 2:
        return high

    return []


def _refine_roll_strategy(dice: Sequence[int], open_categories: list[YahtzeeCategory]) -> list[int]:
    """
    Second / third roll, more aggressive:
    1. five of a kind, then four of a kind
    2. a full house (three + two) while the full house box is open: hold all five
    3. three of a kind
    4. a large straight, then a small straight, while the matching box is open
    5. every group of two or more
    6. everything showing 4 or more
    """
    groups = group_dice(dice)

    for size in (5, 4):
        if (group := _group_of_size(groups, size)) is not None:
            return group[1]

    triple = _group_of_size(groups, 3)
    pair = _group_of_size(groups, 2)
    if triple is not None and pair is not None and YahtzeeCategory.FULL_HOUSE in open_categories:
        return triple[1] + pair[1]

    if triple is not None:
        return triple[1]

    straights = ((5, YahtzeeCategory.LARGE_STRAIGHT), (4, YahtzeeCategory.SMALL_STRAIGHT))
    for length, category in straights:
        run = find_run(dice, length)
        if run is not None and category in open_categories:
            return run_indices(dice, run)

    groups_of_two = [index for indices in groups.values() if len(indices) >= 2 for index in indices]
    if groups_of_two:
        return groups_of_two

    return _indices_at_least(dice, 4)


# --- CATEGORY SELECTION ---
def category_priority(category: YahtzeeCategory, score: int, scorecard: Scorecard) -> int:
    """
    How much the bot likes writing `score` into `category`. Higher is better.

    Made combinations get fixed, high priorities. Everything else starts from the score itself.
    """
    if category == YahtzeeCategory.YAHTZEE and score == 50:
        return YAHTZEE_PRIORITY
    if category == YahtzeeCategory.LARGE_STRAIGHT and score == 40:
        return LARGE_STRAIGHT_PRIORITY
    if category == YahtzeeCategory.SMALL_STRAIGHT and score == 30:
        return SMALL_STRAIGHT_PRIORITY
    if category == YahtzeeCategory.FULL_HOUSE and score == 25:
        return FULL_HOUSE_PRIORITY
    if category == YahtzeeCategory.FOUR_OF_KIND and score >= 20:
        return FOUR_OF_KIND_PRIORITY + score
    if category == YahtzeeCategory.THREE_OF_KIND and score >= 18:
        return THREE_OF_KIND_PRIORITY + score

    priority = score

    if category in UPPER_CATEGORIES:
        remaining = UPPER_BONUS_THRESHOLD - upper_section_sum(scorecard)
        if 0 < remaining <= BONUS_CHASE_WINDOW:
            priority += BONUS_CHASE_PRIORITY
        if category in (YahtzeeCategory.FIVES, YahtzeeCategory.SIXES):
            priority += HIGH_UPPER_PRIORITY

    if score == 0:
        if category in (YahtzeeCategory.ONES, YahtzeeCategory.TWOS):
            priority = ZERO_LOW_UPPER_PRIORITY
        else:
            priority = ZERO_SCORE_PRIORITY

    if category == YahtzeeCategory.CHANCE:
        if score >= 20:
            priority = CHANCE_PRIORITY
        elif score < 15:
            priority = LOW_CHANCE_PRIORITY

    return priority


def select_category(dice: Sequence[int], scorecard: Scorecard) -> YahtzeeCategory:
    """
    Best open category for the dice: highest priority, then highest score, then scorecard order.

    Raises BotDecisionError when the scorecard is already full.
    """
    open_categories = available_categories(scorecard)
    if not open_categories:
        raise BotDecisionError("No category left to score")

    candidates: list[tuple[YahtzeeCategory, int, int]] = []
    for category in open_categories:
        score = calculate_score(dice, category)
        candidates.append((category, score, category_priority(category, score, scorecard)))

    # stable sort: equal candidates keep the scorecard order
    candidates.sort(key=lambda candidate: (candidate[2], candidate[1]), reverse=True)
    return candidates[0][0]


# --- STOP ROLLING ---
def should_stop_rolling(dice: Sequence[int]) -> bool:
    """The hand is good enough to score right away"""
    counts = sorted((len(indices) for indices in group_dice(dice).values()), reverse=True)
    if not counts:
        return False
    if counts[0] == 5:
        return True
    if find_run(dice, 5) is not None:
        return True
    if counts == [3, 2]:
        return True
    return counts[0] == 4 and sum(dice) >= 24


# --- OFFLINE TURN ---
def simulate_turn(
    initial_dice: Sequence[int],
    scorecard: Scorecard,
    rng: Optional[random.Random] = None,
    on_roll: Optional[Callable[[list[int], list[bool]], None]] = None,
) -> BotTurnResult:
    """
    Play a whole turn without any game engine, starting from an already rolled hand.

    `on_roll` is called with the dice and the holds after every roll.
    """
    rng = rng or random.Random()
    dice = list(initial_dice)
    held = [False] * NUM_DICE

    for roll in range(ROLLS_PER_TURN):
        rolls_left = ROLLS_PER_TURN - roll
        if roll > 0:
            keep = set(decide_dice_to_hold(dice, rolls_left, scorecard))
            held = [index in keep for index in range(NUM_DICE)]
            dice = [
                value if held[index] else rng.randint(1, DIE_FACES)
                for index, value in enumerate(dice)
            ]

        if on_roll is not None:
            on_roll(list(dice), list(held))

        if rolls_left == 1 or should_stop_rolling(dice):
            break

    return BotTurnResult(category=select_category(dice, scorecard), final_dice=dice)
