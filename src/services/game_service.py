"""Orchestration of communication from API router to the game engines and persistence layers (and the reverse direction)."""

import asyncio
import logging
import random
from typing import Any, Optional
from uuid import UUID, uuid4

from src.api.models import (
    AddBotRequest,
    CreateGameRequest,
    GameRequest,
    GameResponse,
    JoinGameRequest,
    MoveRequest,
    PlayerResponse,
)
from src.bots.executor import BotTiming, Sleep, execute_bot_turn
from src.core import config
from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    NotYourTurnError,
    RepositoryError,
)
from src.core.models import GameModel
from src.core.shared_types import CastlingMode, GameStatus, GameType
from src.db.repository import GameRepository
from src.engine.base import GameEngine
from src.engine.primitives import GameConfig, Move, Player
from src.engine.registry import create_engine, engine_class, restore_engine
from src.yahtzee.game import YahtzeeGame

logger = logging.getLogger(__name__)


class GameService:
    """
    Orchestration of layers for every game type.

    Each call follows the same steps: fetch the stored model --> restore a live engine --> act on it --> persist the
    new snapshot --> answer with a GameResponse.
    """

    def __init__(
        self,
        repository: GameRepository,
        rng: Optional[random.Random] = None,
        bot_timing: Optional[BotTiming] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.repo = repository
        self.rng = rng
        self.bot_timing = bot_timing
        self.sleep = sleep

    # -- API routes logic ---
    def create_game(self, request: CreateGameRequest) -> GameResponse:
        """A player requested to create a new game. The creator is its first player."""
        game_id = uuid4()
        engine = create_engine(
            request.game_type,
            str(game_id),
            self._new_config(request),
            **self._engine_options(request.game_type),
        )
        engine.add_player(Player(id=request.player_id, name=request.player_name))

        stored_model = self.repo.create_game(game_id, self._to_model(engine, bots=[]))
        logger.info("Created %s game %s for %s", request.game_type, game_id, request.player_id)
        return self._create_game_response(game_id, engine, stored_model.bots)

    def join_game(self, request: JoinGameRequest) -> GameResponse:
        """Another player requested to join a game that did not start yet. Joining twice is a no-op."""
        stored_model = self._fetch_game(request.game_id)
        engine = self._restore(request.game_id, stored_model)

        if engine.player_index(request.player_id) == -1:
            if engine.state.status != GameStatus.WAITING:
                raise GameStateError(f"Game {request.game_id} already started.")
            if not engine.add_player(Player(id=request.player_id, name=request.player_name)):
                raise GameStateError(f"Game {request.game_id} is full.")
            self._persist(request.game_id, engine, stored_model.bots)

        return self._create_game_response(request.game_id, engine, stored_model.bots)

    def add_bot(self, request: AddBotRequest) -> GameResponse:
        """Fill a seat of a waiting Yahtzee game with a bot."""
        stored_model = self._fetch_game(request.game_id)
        engine = self._restore(request.game_id, stored_model)

        if not isinstance(engine, YahtzeeGame):
            raise GameStateError(f"Bots cannot play {engine.game_type}.")
        if engine.state.status != GameStatus.WAITING:
            raise GameStateError(f"Game {request.game_id} already started.")

        bot_id = f"bot-{uuid4().hex[:8]}"
        if not engine.add_player(Player(id=bot_id, name=request.bot_name)):
            raise GameStateError(f"Game {request.game_id} is full.")

        bots = [*stored_model.bots, bot_id]
        self._persist(request.game_id, engine, bots)
        logger.info("Added bot %s to game %s", bot_id, request.game_id)
        return self._create_game_response(request.game_id, engine, bots)

    def start_game(self, request: GameRequest) -> GameResponse:
        stored_model = self._fetch_game(request.game_id)
        engine = self._restore(request.game_id, stored_model)

        if not engine.start():
            raise GameStateError(
                f"Game {request.game_id} cannot start ({engine.state.status}, {len(engine.players)} players)."
            )
        self._persist(request.game_id, engine, stored_model.bots)
        logger.info("Started game %s", request.game_id)
        return self._create_game_response(request.game_id, engine, stored_model.bots)

    def get_game_state(self, request: GameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        stored_model = self._fetch_game(request.game_id)
        engine = self._restore(request.game_id, stored_model)
        return self._create_game_response(request.game_id, engine, stored_model.bots)

    def make_move(self, request: MoveRequest) -> GameResponse:
        """
        Make a move attempt.

        Raises
        ---
        GameStateError: the game is not running (waiting or finished)
        NotYourTurnError: the player is part of the game, but it is not their turn
        IllegalMoveError: anything else the engine refused
        """
        stored_model = self._fetch_game(request.game_id)
        engine = self._restore(request.game_id, stored_model)

        if engine.state.status != GameStatus.PLAYING:
            raise GameStateError(f"Game {request.game_id} is {engine.state.status}.")
        index = engine.player_index(request.player_id)
        if index == -1:
            raise IllegalMoveError(f"{request.player_id} does not play in game {request.game_id}.")
        if index != engine.state.current_player_index:
            raise NotYourTurnError(f"It is not the turn of {request.player_id}.")

        move = Move(player_id=request.player_id, type=request.type, data=dict(request.data))
        if not engine.submit_move(move):
            raise IllegalMoveError(f"Move {request.type} {request.data} is not allowed.")

        self._persist(request.game_id, engine, stored_model.bots)
        return self._create_game_response(request.game_id, engine, stored_model.bots)

    async def play_bot_turn(self, request: GameRequest) -> GameResponse:
        """Let the bot whose turn it is play a full turn. Every bot move is persisted as soon as it is made."""
        stored_model = self._fetch_game(request.game_id)
        engine = self._restore(request.game_id, stored_model)

        current = engine.current_player
        if not isinstance(engine, YahtzeeGame) or engine.state.status != GameStatus.PLAYING:
            raise GameStateError(f"No bot can play in game {request.game_id} right now.")
        if current is None or current.id not in stored_model.bots:
            raise GameStateError(f"It is not the turn of a bot in game {request.game_id}.")

        async def on_move(move: Move) -> None:
            if not engine.submit_move(move):
                raise IllegalMoveError(f"Bot move {move.type} {move.data} was refused.")
            self._persist(request.game_id, engine, stored_model.bots)

        await execute_bot_turn(engine, current.id, on_move, self.bot_timing, self.sleep)
        return self._create_game_response(request.game_id, engine, stored_model.bots)

    def play_again(self, request: GameRequest) -> GameResponse:
        """Same players (scores reset), same settings, brand new game that starts right away."""
        stored_model = self._fetch_game(request.game_id)
        finished = self._restore(request.game_id, stored_model)
        if not finished.is_finished:
            raise GameStateError(f"Game {request.game_id} is not finished yet.")

        engine = create_engine(
            finished.game_type,
            str(request.game_id),
            finished.config,
            **self._engine_options(finished.game_type),
        )
        for player in finished.players:
            engine.add_player(Player(id=player.id, name=player.name))
        engine.start()

        self._persist(request.game_id, engine, stored_model.bots)
        logger.info("Game %s restarted", request.game_id)
        return self._create_game_response(request.game_id, engine, stored_model.bots)

    def delete_game(self, request: GameRequest) -> None:
        """Handle a request to delete a Game record."""
        if self.repo.delete_game(request.game_id) is None:
            raise RepositoryError(f"Game with game_id={request.game_id} not found.")

    # -- Internal helpers --
    def _new_config(self, request: CreateGameRequest) -> GameConfig:
        default = engine_class(request.game_type).default_config
        if request.game_type != GameType.CHESS:
            return default
        castling = request.castling or _configured_castling_mode()
        return GameConfig(
            max_players=default.max_players,
            min_players=default.min_players,
            time_limit=default.time_limit,
            rules={**default.rules, "castling": str(castling)},
        )

    def _engine_options(self, game_type: GameType | str) -> dict[str, Any]:
        if game_type == GameType.YAHTZEE and self.rng is not None:
            return {"rng": self.rng}
        return {}

    def _restore(self, game_id: UUID, model: GameModel) -> GameEngine:
        """The game id of the record wins over whatever id the snapshot carries."""
        default = engine_class(model.game_type).default_config
        state = {**model.state, "id": str(game_id)}
        return restore_engine(
            state,
            model.game_type,
            GameConfig.from_dict(model.config, default),
            **self._engine_options(model.game_type),
        )

    def _to_model(self, engine: GameEngine, bots: list[str]) -> GameModel:
        return GameModel(
            game_type=str(engine.game_type),
            state=engine.snapshot(),
            config=engine.config.to_dict(),
            status=str(engine.state.status),
            winner=engine.state.winner,
            bots=list(bots),
        )

    def _persist(self, game_id: UUID, engine: GameEngine, bots: list[str]) -> None:
        if self.repo.update_game(game_id, self._to_model(engine, bots)) is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        if engine.is_finished:
            logger.info("Game %s finished, winner: %s", game_id, engine.state.winner)

    def _create_game_response(
        self, game_id: UUID, engine: GameEngine, bots: list[str]
    ) -> GameResponse:
        """Convert the live engine to a GameResponse (for game with given ID.)"""
        current = engine.current_player
        return GameResponse(
            game_id=game_id,
            game_type=engine.game_type,
            status=engine.state.status,
            winner=engine.state.winner,
            current_player_id=current.id if current else None,
            players=[
                PlayerResponse(
                    id=player.id, name=player.name, score=player.score, is_bot=player.id in bots
                )
                for player in engine.players
            ],
            rules=engine.rules(),
            state=engine.snapshot(),
        )

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model


def _configured_castling_mode() -> CastlingMode:
    try:
        return CastlingMode(config.CASTLING_MODE)
    except ValueError:
        logger.warning("Unknown CASTLING_MODE %r, using permissive castling", config.CASTLING_MODE)
        return CastlingMode.PERMISSIVE
