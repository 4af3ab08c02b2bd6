"""
YahtzeeGame plugs dice rolling and scorecards into the generic turn engine.

A turn is made of up to three `roll` moves, any number of `hold` moves in between, and exactly one `score` move.
Only the `score` move hands the turn to the next player.
"""

import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Self

from src.core.shared_types import GameStatus, GameType, MoveType
from src.engine.base import GameEngine
from src.engine.primitives import GameConfig, Move, Player
from src.yahtzee.scoring import (
    DIE_FACES,
    NUM_DICE,
    Scorecard,
    YahtzeeCategory,
    calculate_score,
    calculate_total_score,
    is_scorecard_complete,
    parse_category,
    roll_dice,
    scorecard_from_dict,
    scorecard_to_dict,
)

logger = logging.getLogger(__name__)

ROLLS_PER_TURN = 3

# Dice of a brand new game, before anybody rolled
INITIAL_DICE: tuple[int, ...] = (1, 2, 3, 4, 5)


def _no_holds() -> list[bool]:
    return [False] * NUM_DICE


@dataclass
class YahtzeeGameData:
    round: int = 1
    dice: list[int] = field(default_factory=lambda: list(INITIAL_DICE))
    held: list[bool] = field(default_factory=_no_holds)
    rolls_left: int = ROLLS_PER_TURN
    scores: list[Scorecard] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "round": self.round,
            "dice": list(self.dice),
            "held": list(self.held),
            "rolls_left": self.rolls_left,
            "scores": [scorecard_to_dict(scorecard) for scorecard in self.scores],
        }

    @classmethod
    def from_dict(cls, raw: Any, rng: Optional[random.Random] = None) -> Self:
        """
        Broken fields are replaced:
        - dice that are not 5 faces in 1..6 are rolled again
        - holds that are not 5 booleans are cleared
        - rolls left outside 0..3 are reset to a full turn
        """
        if not isinstance(raw, Mapping):
            return cls()

        dice = raw.get("dice")
        if not _are_valid_dice(dice):
            logger.warning("Saved dice %r are unreadable, rolling new ones", dice)
            dice = roll_dice(NUM_DICE, rng)

        held = raw.get("held")
        if not (
            isinstance(held, list)
            and len(held) == NUM_DICE
            and all(isinstance(flag, bool) for flag in held)
        ):
            held = _no_holds()

        rolls_left = raw.get("rolls_left")
        if not _is_int(rolls_left) or not 0 <= rolls_left <= ROLLS_PER_TURN:
            rolls_left = ROLLS_PER_TURN

        round_number = raw.get("round")
        if not _is_int(round_number) or round_number < 1:
            round_number = 1

        scores = raw.get("scores")
        return cls(
            round=round_number,
            dice=list(dice),
            held=list(held),
            rolls_left=rolls_left,
            scores=(
                [scorecard_from_dict(item) for item in scores] if isinstance(scores, list) else []
            ),
        )


class YahtzeeGame(GameEngine):
    game_type = GameType.YAHTZEE
    default_config = GameConfig(max_players=4, min_players=1)

    def __init__(
        self,
        game_id: str,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        # The random source must exist before the base class builds the initial data
        self._rng = rng or random.Random()
        super().__init__(game_id, config)

    # --- GAME SPECIFIC DATA ---
    @property
    def data(self) -> YahtzeeGameData:
        return self.state.data

    def initial_data(self) -> YahtzeeGameData:
        return YahtzeeGameData()

    def data_from_dict(self, raw: Any) -> YahtzeeGameData:
        return YahtzeeGameData.from_dict(raw, self._rng)

    # --- ACCESSORS (copies: the caller cannot mutate the live state) ---
    @property
    def dice(self) -> list[int]:
        return list(self.data.dice)

    @property
    def held(self) -> list[bool]:
        return list(self.data.held)

    @property
    def rolls_left(self) -> int:
        return self.data.rolls_left

    @property
    def round(self) -> int:
        return self.data.round

    def scorecard(self, player_id: str) -> Optional[Scorecard]:
        """None for a player that is not part of the game. An empty dict for a player without a scorecard yet."""
        index = self.player_index(player_id)
        if index == -1:
            return None
        if index >= len(self.data.scores):
            return {}
        return dict(self.data.scores[index])

    # --- LIFECYCLE ---
    def start(self) -> bool:
        """Everybody starts with an empty scorecard."""
        if not super().start():
            return False
        self.data.scores = [{} for _ in self.state.players]
        return True

    def on_player_removed(self, index: int) -> None:
        if index < len(self.data.scores):
            self.data.scores.pop(index)

    def should_advance_turn(self, move: Move) -> bool:
        return move.type == MoveType.SCORE

    # --- MOVE VALIDATION ---
    def is_legal(self, move: Move) -> bool:
        """
        Every move must be made by the current player of a running game.

        - roll: some rolls left
        - hold: a valid die index, after the first roll of the turn
        - score: a category this player did not fill yet, after the first roll of the turn
        """
        if self.state.status != GameStatus.PLAYING:
            return False
        index = self.player_index(move.player_id)
        if index == -1 or index != self.state.current_player_index:
            return False
        data = move.data if isinstance(move.data, Mapping) else {}

        if move.type == MoveType.ROLL:
            return self.data.rolls_left > 0

        if move.type == MoveType.HOLD:
            dice_index = _dice_index(data)
            return (
                dice_index is not None
                and 0 <= dice_index < NUM_DICE
                and self.data.rolls_left < ROLLS_PER_TURN
            )

        if move.type == MoveType.SCORE:
            category = parse_category(data.get("category"))
            if category is None or self.data.rolls_left == ROLLS_PER_TURN:
                return False
            scores = self.data.scores
            return index >= len(scores) or category not in scores[index]

        return False

    # --- MOVE APPLICATION ---
    def apply(self, move: Move) -> None:
        if move.type == MoveType.ROLL:
            self._roll()
        elif move.type == MoveType.HOLD:
            dice_index = _dice_index(move.data)
            assert dice_index is not None
            self.data.held[dice_index] = not self.data.held[dice_index]
        elif move.type == MoveType.SCORE:
            category = parse_category(move.data.get("category"))
            assert category is not None
            self._score(self.player_index(move.player_id), category)

    def winner(self) -> Optional[Player]:
        """
        Only once every player completed the whole scorecard.
        Highest total wins; on a tie, the first player (in turn order) with that total.
        """
        players = self.state.players
        if not players or len(self.data.scores) < len(players):
            return None
        if not all(is_scorecard_complete(self.data.scores[i]) for i in range(len(players))):
            return None

        winner: Optional[Player] = None
        best = -1
        for player in players:
            total = player.score or 0
            if total > best:
                best = total
                winner = player
        return winner

    def rules(self) -> list[str]:
        return [
            f"Roll {NUM_DICE} dice up to {ROLLS_PER_TURN} times per turn",
            "Hold dice you want to keep between rolls",
            f"Score in one of the {len(YahtzeeCategory)} categories after each turn",
            "Upper section: score the sum of the dice showing that number",
            "Lower section: special combinations with fixed scores",
            "Bonus of 35 points if the upper section reaches 63",
            "The game ends when all categories are filled",
            "Highest total score wins",
        ]

    # -- PRIVATE HELPERS ---
    def _scorecard_at(self, index: int) -> Scorecard:
        """Players that joined after the start get their scorecard lazily."""
        while len(self.data.scores) <= index:
            self.data.scores.append({})
        return self.data.scores[index]

    def _roll(self) -> None:
        self.data.dice = [
            die if held else self._rng.randint(1, DIE_FACES)
            for die, held in zip(self.data.dice, self.data.held)
        ]
        self.data.rolls_left -= 1

    def _score(self, index: int, category: YahtzeeCategory) -> None:
        """
        1. write the score down
        2. update the running total of the player
        3. reset the dice for the next turn
        """
        scorecard = self._scorecard_at(index)
        scorecard[category] = calculate_score(self.data.dice, category)
        self.state.players[index].score = calculate_total_score(scorecard)
        logger.debug(
            "Player %s scored %d in %s",
            self.state.players[index].id,
            scorecard[category],
            category,
        )

        self.data.dice = roll_dice(NUM_DICE, self._rng)
        self.data.held = _no_holds()
        self.data.rolls_left = ROLLS_PER_TURN
        self.data.round += 1


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _are_valid_dice(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) == NUM_DICE
        and all(_is_int(die) and 1 <= die <= DIE_FACES for die in value)
    )


def _dice_index(data: Mapping[str, Any]) -> Optional[int]:
    """Clients send either `dice_index` or `diceIndex`"""
    value = data.get("dice_index", data.get("diceIndex"))
    return value if _is_int(value) else None
