"""Unit tests for src/yahtzee/game.py"""

import pytest

from src.core.shared_types import GameStatus, MoveType
from src.engine.primitives import Move, Player
from src.yahtzee.game import INITIAL_DICE, ROLLS_PER_TURN, YahtzeeGame
from src.yahtzee.scoring import YahtzeeCategory

ALICE = "alice"
BOB = "bob"


def new_game(rng=None, player_ids: tuple[str, ...] = (ALICE, BOB), start: bool = True) -> YahtzeeGame:
    game = YahtzeeGame("yahtzee-1", rng=rng)
    for player_id in player_ids:
        game.add_player(Player(id=player_id, name=player_id.title()))
    if start:
        assert game.start()
    return game


def roll(game: YahtzeeGame, player_id: str = ALICE) -> bool:
    return game.submit_move(Move(player_id=player_id, type=MoveType.ROLL))


def hold(game: YahtzeeGame, index: int, player_id: str = ALICE) -> bool:
    return game.submit_move(Move(player_id=player_id, type=MoveType.HOLD, data={"dice_index": index}))


def score(game: YahtzeeGame, category: str, player_id: str = ALICE) -> bool:
    return game.submit_move(Move(player_id=player_id, type=MoveType.SCORE, data={"category": category}))


def test_new_game() -> None:
    game = new_game(start=False)
    assert game.state.status == GameStatus.WAITING
    assert game.config.max_players == 4
    assert game.config.min_players == 1
    assert game.dice == list(INITIAL_DICE)
    assert game.held == [False] * 5
    assert game.rolls_left == ROLLS_PER_TURN
    assert game.round == 1


def test_start_gives_everybody_an_empty_scorecard() -> None:
    game = new_game()
    assert game.scorecard(ALICE) == {}
    assert game.scorecard(BOB) == {}
    assert game.scorecard("carol") is None
    assert len(game.data.scores) == 2


def test_single_player_can_start() -> None:
    game = new_game(player_ids=(ALICE,))
    assert game.state.status == GameStatus.PLAYING


def test_moves_rejected_before_start() -> None:
    game = new_game(start=False)
    assert not roll(game)
    assert not score(game, "chance")


def test_roll_keeps_the_turn(scripted_rng) -> None:
    game = new_game(scripted_rng([6, 5, 4, 3, 2]))
    assert roll(game)
    assert game.dice == [6, 5, 4, 3, 2]
    assert game.rolls_left == 2
    assert game.current_player.id == ALICE


def test_roll_rejected_for_other_player() -> None:
    game = new_game()
    assert not roll(game, BOB)
    assert not roll(game, "carol")
    assert game.rolls_left == ROLLS_PER_TURN


def test_at_most_three_rolls() -> None:
    game = new_game()
    for _ in range(ROLLS_PER_TURN):
        assert roll(game)
    assert game.rolls_left == 0
    assert not roll(game)


def test_hold_before_first_roll_rejected() -> None:
    game = new_game()
    assert not hold(game, 0)
    assert game.held == [False] * 5


def test_hold_toggles_and_held_dice_survive_a_roll(scripted_rng) -> None:
    game = new_game(scripted_rng([6, 6, 1, 2, 3, 6, 4, 5]))
    assert roll(game)
    assert game.dice == [6, 6, 1, 2, 3]

    assert hold(game, 0)
    assert hold(game, 1)
    assert hold(game, 2)
    assert hold(game, 2)  # un-hold
    assert game.held == [True, True, False, False, False]
    assert game.dice == [6, 6, 1, 2, 3]  # holding never changes the dice
    assert game.current_player.id == ALICE

    assert roll(game)
    assert game.dice == [6, 6, 6, 4, 5]


def test_hold_accepts_camel_case_index() -> None:
    game = new_game()
    assert roll(game)
    assert game.submit_move(Move(player_id=ALICE, type=MoveType.HOLD, data={"diceIndex": 4}))
    assert game.held == [False, False, False, False, True]


@pytest.mark.parametrize("data", [{"dice_index": 5}, {"dice_index": -1}, {"dice_index": "1"}, {}])
def test_hold_invalid_index_rejected(data: dict) -> None:
    game = new_game()
    assert roll(game)
    assert not game.submit_move(Move(player_id=ALICE, type=MoveType.HOLD, data=data))


def test_score_advances_turn_and_resets_dice(scripted_rng) -> None:
    game = new_game(scripted_rng([2, 2, 2, 3, 3, 4, 4, 4, 4, 4]))
    assert roll(game)
    assert hold(game, 0)
    assert score(game, "fullHouse")

    assert game.scorecard(ALICE) == {YahtzeeCategory.FULL_HOUSE: 25}
    assert game.players[0].score == 25
    assert game.current_player.id == BOB
    assert game.dice == [4, 4, 4, 4, 4]
    assert game.held == [False] * 5
    assert game.rolls_left == ROLLS_PER_TURN
    assert game.round == 2


def test_score_needs_a_roll(scripted_rng) -> None:
    """The dice left on the table by the previous turn cannot be scored"""
    game = new_game(scripted_rng([1, 2, 3, 4, 5]))
    assert not score(game, "largeStraight")
    assert roll(game)
    assert score(game, "largeStraight")
    assert game.players[0].score == 40


def test_filled_category_rejected(scripted_rng) -> None:
    game = new_game(scripted_rng([1, 2, 3, 4, 5]), player_ids=(ALICE,))
    assert roll(game)
    assert score(game, "chance")
    assert roll(game)
    assert not score(game, "chance")
    assert game.scorecard(ALICE) == {YahtzeeCategory.CHANCE: 15}


def test_unknown_category_rejected() -> None:
    game = new_game()
    assert roll(game)
    assert not score(game, "bonus")
    assert not game.submit_move(Move(player_id=ALICE, type=MoveType.SCORE))
    assert game.current_player.id == ALICE


@pytest.mark.parametrize("move_type", [MoveType.HOLD, MoveType.SCORE])
def test_payload_that_is_not_a_dict_rejected(move_type: MoveType) -> None:
    game = new_game()
    assert roll(game)
    before = game.snapshot()
    assert not game.submit_move(Move(player_id=ALICE, type=move_type, data=None))  # type: ignore[arg-type]
    assert game.snapshot() == before


def test_unknown_move_type_rejected() -> None:
    game = new_game()
    assert not game.submit_move(Move(player_id=ALICE, type=MoveType.MOVE, data={"from": "e2", "to": "e4"}))


def test_player_total_includes_upper_bonus(scripted_rng) -> None:
    game = new_game(scripted_rng([1, 1, 1, 2, 3]), player_ids=(ALICE,))
    game.data.scores[0] = {
        YahtzeeCategory.TWOS: 8,
        YahtzeeCategory.THREES: 12,
        YahtzeeCategory.FOURS: 16,
        YahtzeeCategory.FIVES: 10,
        YahtzeeCategory.SIXES: 18,
    }
    assert roll(game)
    assert score(game, "ones")
    assert game.players[0].score == 67 + 35


def _nearly_complete() -> dict[YahtzeeCategory, int]:
    return {category: 0 for category in YahtzeeCategory if category != YahtzeeCategory.CHANCE}


# Dice drawn after a score, for the next player's table
FRESH_DICE = [1, 1, 1, 1, 1]


def test_game_finishes_when_every_scorecard_is_complete(scripted_rng) -> None:
    game = new_game(scripted_rng([1, 2, 3, 4, 5, *FRESH_DICE, 6, 6, 6, 6, 6]))
    game.data.scores = [_nearly_complete(), _nearly_complete()]

    assert roll(game, ALICE)
    assert score(game, "chance", ALICE)  # 1+2+3+4+5
    assert game.state.status == GameStatus.PLAYING
    assert game.current_player.id == BOB

    assert roll(game, BOB)
    assert score(game, "chance", BOB)  # 6*5
    assert game.state.status == GameStatus.FINISHED
    assert game.state.winner == BOB
    assert game.current_player.id == BOB
    assert not roll(game, BOB)


def test_tie_goes_to_first_player(scripted_rng) -> None:
    game = new_game(scripted_rng([3, 3, 3, 3, 3, *FRESH_DICE, 3, 3, 3, 3, 3]))
    game.data.scores = [_nearly_complete(), _nearly_complete()]

    assert roll(game, ALICE)
    assert score(game, "chance", ALICE)
    assert roll(game, BOB)
    assert score(game, "chance", BOB)
    assert game.players[0].score == game.players[1].score == 15
    assert game.state.winner == ALICE


def test_removing_a_player_removes_their_scorecard() -> None:
    game = new_game()
    assert roll(game, ALICE)
    assert score(game, "chance", ALICE)
    assert game.remove_player(ALICE)
    assert game.data.scores == [{}]
    assert game.scorecard(BOB) == {}
    assert game.current_player.id == BOB


def test_late_joiner_gets_a_scorecard_when_scoring() -> None:
    game = new_game(player_ids=(ALICE,))
    game.add_player(Player(id=BOB, name="Bob"))
    assert game.scorecard(BOB) == {}
    assert roll(game, ALICE)
    assert score(game, "chance", ALICE)
    assert roll(game, BOB)
    assert score(game, "ones", BOB)
    assert len(game.data.scores) == 2


def test_snapshot_restore_round_trip(scripted_rng) -> None:
    game = new_game(scripted_rng([5, 5, 5, 2, 1]))
    assert roll(game)
    assert hold(game, 1)
    saved = game.snapshot()
    assert saved["data"]["held"] == [False, True, False, False, False]

    restored = YahtzeeGame("other")
    restored.restore(saved)
    assert restored.state.id == "yahtzee-1"
    assert restored.dice == [5, 5, 5, 2, 1]
    assert restored.held == [False, True, False, False, False]
    assert restored.rolls_left == 2
    assert restored.state.status == GameStatus.PLAYING
    assert restored.snapshot()["data"] == saved["data"]


def test_restore_replaces_corrupted_fields(scripted_rng) -> None:
    game = new_game(scripted_rng([4, 4, 4, 4, 4]), start=False)
    game.restore(
        {
            "id": "broken",
            "players": [{"id": ALICE, "name": "Alice"}],
            "status": "playing",
            "data": {
                "dice": [7, 1, 1],
                "held": "nope",
                "rolls_left": 9,
                "round": 0,
                "scores": [{"chance": 20, "bogus": 3}],
            },
        }
    )
    assert game.dice == [4, 4, 4, 4, 4]
    assert game.held == [False] * 5
    assert game.rolls_left == ROLLS_PER_TURN
    assert game.round == 1
    assert game.scorecard(ALICE) == {YahtzeeCategory.CHANCE: 20}


def test_rules() -> None:
    rules = new_game().rules()
    assert any("63" in rule for rule in rules)
    assert len(rules) == 8
