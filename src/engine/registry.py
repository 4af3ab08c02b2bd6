"""
Closed set of playable games, looked up by their game type tag.

Persisted snapshots are always rebuilt through the tag they carry, never by guessing from the data.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from src.chess.game import ChessGame
from src.core.exceptions import UnsupportedGameError
from src.core.shared_types import GameType
from src.engine.base import GameEngine
from src.engine.primitives import GameConfig
from src.yahtzee.game import YahtzeeGame

logger = logging.getLogger(__name__)

ENGINE_TYPES: dict[GameType, type[GameEngine]] = {
    GameType.CHESS: ChessGame,
    GameType.YAHTZEE: YahtzeeGame,
}


def engine_class(game_type: Any) -> type[GameEngine]:
    try:
        return ENGINE_TYPES[GameType(game_type)]
    except (ValueError, KeyError):
        raise UnsupportedGameError(f"No engine for game type {game_type!r}") from None


def create_engine(
    game_type: GameType | str,
    game_id: str,
    config: Optional[GameConfig] = None,
    **options: Any,
) -> GameEngine:
    """
    Brand new game, waiting for players.

    `options` are passed on to the engine (e.g. `rng` for Yahtzee).
    """
    return engine_class(game_type)(game_id, config, **options)


def restore_engine(
    saved: Mapping[str, Any],
    game_type: Optional[GameType | str] = None,
    config: Optional[GameConfig] = None,
    **options: Any,
) -> GameEngine:
    """
    Rebuild a live engine from a snapshot produced by GameEngine.snapshot()

    The tag stored next to the snapshot (`game_type`) wins over the one inside it, and so does an explicit `config`.
    """
    tag = game_type if game_type is not None else saved.get("game_type")
    if config is None:
        config = GameConfig.from_dict(saved.get("config"), engine_class(tag).default_config)
    engine = create_engine(tag, str(saved.get("id") or ""), config, **options)
    engine.restore(saved)
    logger.debug("Restored %s game %s", engine.game_type, engine.state.id)
    return engine
