"""Requests and Response models"""

from typing import Any, Optional, Self
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from src.chess.square import Position
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import CastlingMode, GameStatus, GameType, MoveType
from src.yahtzee.scoring import parse_category

PlayerId = str


def _require_text(value: str, field_name: str) -> str:
    if not value.strip():
        raise InvalidRequestError(f"{field_name} cannot be empty.")
    return value


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    game_type: GameType
    player_id: PlayerId
    player_name: str
    castling: Optional[CastlingMode] = None

    @field_validator("player_id", "player_name")
    @classmethod
    def validate_not_empty(cls, value: str) -> str:
        return _require_text(value, "Player id / name")


class JoinGameRequest(BaseModel):
    game_id: UUID
    player_id: PlayerId
    player_name: str

    @field_validator("player_id", "player_name")
    @classmethod
    def validate_not_empty(cls, value: str) -> str:
        return _require_text(value, "Player id / name")


class AddBotRequest(BaseModel):
    game_id: UUID
    bot_name: str = "Bot"


class MoveRequest(BaseModel):
    """
    A move of any game. `data` depends on the move type:
    - move:  {"from": "e2", "to": "e4", "promotion": "queen"}  (chess)
    - roll:  {}
    - hold:  {"dice_index": 0..4}
    - score: {"category": "fullHouse"}
    """

    game_id: UUID
    player_id: PlayerId
    type: MoveType
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("player_id")
    @classmethod
    def validate_player_id(cls, value: str) -> str:
        return _require_text(value, "player_id")

    @model_validator(mode="after")
    def validate_data(self) -> Self:
        if self.type == MoveType.MOVE:
            for key in ("from", "to"):
                if Position.parse(self.data.get(key)) is None:
                    raise InvalidRequestError(
                        f"Cannot interpret {key}: {self.data.get(key)!r} as a valid square."
                    )
        elif self.type == MoveType.HOLD:
            dice_index = self.data.get("dice_index", self.data.get("diceIndex"))
            if not isinstance(dice_index, int) or isinstance(dice_index, bool):
                raise InvalidRequestError(f"Cannot interpret {dice_index!r} as a dice index.")
        elif self.type == MoveType.SCORE:
            if parse_category(self.data.get("category")) is None:
                raise InvalidRequestError(
                    f"Unknown category: {self.data.get('category')!r}."
                )
        return self


class GameRequest(BaseModel):
    """Any request that only targets a game: start, get state, bot turn, play again, delete."""

    game_id: UUID


# --- RESPONSE MODELS ---
class PlayerResponse(BaseModel):
    id: PlayerId
    name: str
    score: Optional[int] = None
    is_bot: bool = False


class GameResponse(BaseModel):
    game_id: UUID
    game_type: GameType
    status: GameStatus
    winner: Optional[PlayerId] = None
    current_player_id: Optional[PlayerId] = None
    players: list[PlayerResponse]
    rules: list[str]
    state: dict[str, Any]
