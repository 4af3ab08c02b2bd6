"""Unit tests for src/engine/registry.py"""

import random

import pytest

from src.chess.game import ChessGame
from src.core.exceptions import UnsupportedGameError
from src.core.shared_types import CastlingMode, GameType, MoveType
from src.engine.primitives import GameConfig, Move, Player
from src.engine.registry import create_engine, restore_engine
from src.yahtzee.game import YahtzeeGame


@pytest.mark.parametrize(
    "game_type, engine_type, max_players",
    [
        (GameType.CHESS, ChessGame, 2),
        ("chess", ChessGame, 2),
        (GameType.YAHTZEE, YahtzeeGame, 4),
    ],
)
def test_create_engine(game_type: str, engine_type: type, max_players: int) -> None:
    engine = create_engine(game_type, "g-1")
    assert isinstance(engine, engine_type)
    assert engine.state.id == "g-1"
    assert engine.config.max_players == max_players


def test_create_engine_passes_options() -> None:
    """Two Yahtzee games sharing a seed roll the same dice"""
    dice = []
    for _ in range(2):
        engine = create_engine(GameType.YAHTZEE, "g-1", rng=random.Random(3))
        assert isinstance(engine, YahtzeeGame)
        engine.add_player(Player(id="p", name="P"))
        engine.start()
        assert engine.submit_move(Move(player_id="p", type=MoveType.ROLL))
        dice.append(engine.dice)
    assert dice[0] == dice[1]


@pytest.mark.parametrize("game_type", ["checkers", None, ""])
def test_unknown_game_type(game_type: object) -> None:
    with pytest.raises(UnsupportedGameError):
        create_engine(game_type, "g-1")  # type: ignore[arg-type]


def test_restore_engine_uses_the_stored_tag() -> None:
    chess = ChessGame("g-1")
    chess.add_player(Player(id="w", name="W"))
    chess.add_player(Player(id="b", name="B"))
    chess.start()
    chess.submit_move(Move(player_id="w", type=MoveType.MOVE, data={"from": "e2", "to": "e4"}))

    restored = restore_engine(chess.snapshot())
    assert isinstance(restored, ChessGame)
    assert restored.snapshot() == chess.snapshot()


def test_explicit_tag_wins() -> None:
    saved = ChessGame("g-1").snapshot()
    saved["game_type"] = "garbage"
    assert isinstance(restore_engine(saved, GameType.CHESS), ChessGame)
    with pytest.raises(UnsupportedGameError):
        restore_engine(saved)


def test_restore_engine_keeps_the_game_config() -> None:
    strict = GameConfig(max_players=2, min_players=2, rules={"castling": "strict"})
    saved = ChessGame("g-1", strict).snapshot()

    restored = restore_engine(saved)
    assert isinstance(restored, ChessGame)
    assert restored.castling_mode == CastlingMode.STRICT
    assert restored.config == strict

    # an explicit config wins over the stored one
    permissive = restore_engine(saved, config=ChessGame.default_config)
    assert isinstance(permissive, ChessGame)
    assert permissive.castling_mode == CastlingMode.PERMISSIVE
