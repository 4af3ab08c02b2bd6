"""
The generic turn-based engine.

It owns the players, whose turn it is and the lifecycle status of the game. Everything that is specific to a game
(what a legal move is, what a move does, who won) is delegated to the concrete game subclass.

Rejections are never exceptions: every public operation answers with a boolean so a single bad request
cannot abort a live multiplayer session.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import replace
from typing import Any, ClassVar, Optional

from src.core.shared_types import GameStatus, GameType
from src.engine.primitives import (
    GameConfig,
    GameState,
    Move,
    Player,
    parse_timestamp,
    utc_now,
)

logger = logging.getLogger(__name__)


class GameEngine(ABC):
    game_type: ClassVar[GameType]
    default_config: ClassVar[GameConfig]

    def __init__(self, game_id: str, config: Optional[GameConfig] = None) -> None:
        self._config = config if config is not None else self.default_config
        self.state = GameState(
            id=game_id,
            game_type=self.game_type,
            players=[],
            current_player_index=0,
            status=GameStatus.WAITING,
            data=self.initial_data(),
        )

    # --- TO BE IMPLEMENTED BY EVERY GAME ---
    @abstractmethod
    def initial_data(self) -> Any:
        """Game-specific data of a brand new game."""

    @abstractmethod
    def is_legal(self, move: Move) -> bool:
        """Must not raise, and must not leave any trace on the state."""

    @abstractmethod
    def apply(self, move: Move) -> None:
        """Only ever called with a move for which is_legal() returned True."""

    @abstractmethod
    def winner(self) -> Optional[Player]: ...

    @abstractmethod
    def data_from_dict(self, raw: Any) -> Any:
        """Rebuild the game-specific data from its persisted form. Missing or broken fields get sane defaults."""

    @abstractmethod
    def rules(self) -> list[str]:
        """Human readable summary of the rules."""

    # --- OPTIONAL POLICIES ---
    def should_advance_turn(self, move: Move) -> bool:
        """By default every accepted move hands the turn to the next player (chess)."""
        return True

    def is_drawn(self) -> bool:
        """Game over without a winner."""
        return False

    def on_player_removed(self, index: int) -> None:
        """Hook to keep index-aligned game data in step with the players list."""

    # --- PLAYERS ---
    @property
    def config(self) -> GameConfig:
        return replace(self._config, rules=dict(self._config.rules))

    @property
    def players(self) -> list[Player]:
        return list(self.state.players)

    @property
    def current_player(self) -> Optional[Player]:
        if not self.state.players:
            return None
        return self.state.players[self.state.current_player_index]

    @property
    def is_finished(self) -> bool:
        return self.state.status == GameStatus.FINISHED

    def player_index(self, player_id: str) -> int:
        """-1 if the player is not part of this game"""
        return next(
            (i for i, player in enumerate(self.state.players) if player.id == player_id),
            -1,
        )

    def add_player(self, player: Player) -> bool:
        if len(self.state.players) >= self._config.max_players:
            logger.debug("Game %s is full, cannot add %s", self.state.id, player.id)
            return False
        self.state.players.append(player)
        self._touch()
        return True

    def remove_player(self, player_id: str) -> bool:
        index = self.player_index(player_id)
        if index == -1:
            return False

        self.state.players.pop(index)
        self.on_player_removed(index)
        # NOTE: simply restart the rotation instead of looking for the 'next' valid player
        if self.state.current_player_index >= len(self.state.players):
            self.state.current_player_index = 0
        self._touch()
        return True

    # --- LIFECYCLE ---
    def start(self) -> bool:
        if self.state.status != GameStatus.WAITING:
            return False
        if len(self.state.players) < self._config.min_players:
            logger.debug(
                "Game %s needs %d players to start, has %d",
                self.state.id,
                self._config.min_players,
                len(self.state.players),
            )
            return False
        self.state.status = GameStatus.PLAYING
        self._touch()
        return True

    def submit_move(self, move: Move) -> bool:
        """
        Attempt a move
        ----

        1. reject (False) if the game is over or the move is not legal
        2. let the game apply the move
        3. check for a winner / a draw --> finish the game (turn stays where it is)
        4. otherwise hand over the turn if the game says so
        """
        if self.is_finished:
            return False

        if not self.is_legal(move):
            logger.debug(
                "Rejected %r move by %s in game %s", move.type, move.player_id, self.state.id
            )
            return False

        self.apply(move)
        self._touch()

        winner = self.winner()
        if winner is not None:
            self.state.status = GameStatus.FINISHED
            self.state.winner = winner.id
            logger.info("Game %s won by %s", self.state.id, winner.id)
        elif self.is_drawn():
            self.state.status = GameStatus.FINISHED
            logger.info("Game %s ended without a winner", self.state.id)
        elif self.should_advance_turn(move):
            self._next_player()
        return True

    # --- (DE)SERIALIZATION ---
    def snapshot(self) -> dict[str, Any]:
        """The state plus the configuration the game was created with."""
        return {**self.state.to_dict(), "config": self._config.to_dict()}

    def restore(self, saved: Any) -> None:
        """Replace the state wholesale with a (possibly corrupted) persisted snapshot."""
        if not isinstance(saved, Mapping):
            logger.warning("Ignoring saved state of type %s", type(saved).__name__)
            return

        raw_players = saved.get("players")
        if not isinstance(raw_players, list):
            logger.warning("Saved state of game %s has no players list", saved.get("id"))
            raw_players = []
        players = [
            player
            for player in (
                Player.from_dict(raw) for raw in raw_players if isinstance(raw, Mapping)
            )
            if player is not None
        ]

        try:
            status = GameStatus(saved.get("status"))
        except ValueError:
            status = GameStatus.WAITING

        index = saved.get("current_player_index")
        if not isinstance(index, int) or not 0 <= index < len(players):
            index = 0

        winner = saved.get("winner")
        self.state = GameState(
            id=str(saved.get("id") or self.state.id),
            game_type=self.game_type,
            players=players,
            current_player_index=index,
            status=status,
            data=self.data_from_dict(saved.get("data")),
            winner=winner if isinstance(winner, str) else None,
            created_at=parse_timestamp(saved.get("created_at")),
            updated_at=parse_timestamp(saved.get("updated_at")),
        )

    # -- PRIVATE HELPERS ---
    def _next_player(self) -> None:
        if not self.state.players:
            return
        self.state.current_player_index = (self.state.current_player_index + 1) % len(
            self.state.players
        )

    def _touch(self) -> None:
        self.state.updated_at = utc_now()
