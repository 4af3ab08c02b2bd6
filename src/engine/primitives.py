"""
Shared vocabulary of every game: players, moves, the game state and its configuration.

All of these convert to / from plain JSON-safe dictionaries, which is the form collaborators persist and broadcast.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Protocol, Self

from src.core.shared_types import GameStatus, GameType


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Tolerant parsing of persisted timestamps: anything unreadable becomes 'now'."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    return utc_now()


class GameData(Protocol):
    """The game-specific part of the state. Only the concrete game knows what is inside."""

    def to_dict(self) -> dict[str, Any]: ...


@dataclass
class Player:
    id: str
    name: str
    score: Optional[int] = None
    is_active: Optional[bool] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Optional[Self]:
        """A player without an id cannot be identified, so it is dropped (None)."""
        player_id = raw.get("id")
        if player_id is None:
            return None
        score = raw.get("score")
        is_active = raw.get("is_active")
        return cls(
            id=str(player_id),
            name=str(raw.get("name") or ""),
            score=score if isinstance(score, int) else None,
            is_active=is_active if isinstance(is_active, bool) else None,
        )


@dataclass
class Move:
    """A single player-submitted action. `data` is interpreted by the concrete game only."""

    player_id: str
    type: str
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class GameConfig:
    max_players: int
    min_players: int
    time_limit: Optional[int] = None  # minutes
    rules: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_players": self.max_players,
            "min_players": self.min_players,
            "time_limit": self.time_limit,
            "rules": dict(self.rules),
        }

    @classmethod
    def from_dict(cls, raw: Any, default: Self) -> Self:
        """Fields that are missing or of the wrong type fall back to `default`."""
        if not isinstance(raw, Mapping):
            return default
        max_players = raw.get("max_players")
        min_players = raw.get("min_players")
        time_limit = raw.get("time_limit")
        rules = raw.get("rules")
        return cls(
            max_players=max_players if isinstance(max_players, int) else default.max_players,
            min_players=min_players if isinstance(min_players, int) else default.min_players,
            time_limit=time_limit if isinstance(time_limit, int) else default.time_limit,
            rules=dict(rules) if isinstance(rules, Mapping) else dict(default.rules),
        )


@dataclass
class GameState:
    id: str
    game_type: GameType
    players: list[Player]
    current_player_index: int
    status: GameStatus
    data: Any
    winner: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        """Deep copy into plain data: nothing in the result is shared with the live state."""
        return {
            "id": self.id,
            "game_type": str(self.game_type),
            "players": [player.to_dict() for player in self.players],
            "current_player_index": self.current_player_index,
            "status": str(self.status),
            "winner": self.winner,
            "data": self.data.to_dict(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
