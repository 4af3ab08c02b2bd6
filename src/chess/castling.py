"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Self

from src.core.shared_types import Color


@dataclass(frozen=True)
class CastlingColumns:
    """
    Columns the king / rook start from and end up in by castling (the row is the back rank of the color).
    NOTE: If castling rights have not been revoked, we already know the king / rook are still at their starting squares.
    """

    king_from: int
    king_to: int
    rook_from: int
    rook_to: int


# The moves (in classical chess) made when castling. Key: castling king side?
CASTLING_RULES: dict[bool, CastlingColumns] = {
    True: CastlingColumns(king_from=4, king_to=6, rook_from=7, rook_to=5),
    False: CastlingColumns(king_from=4, king_to=2, rook_from=0, rook_to=3),
}


def back_rank(color: Color) -> int:
    return 7 if color == Color.WHITE else 0


@dataclass
class CastlingRights:
    """Rights only ever get revoked during the game."""

    white_king_side: bool = True
    white_queen_side: bool = True
    black_king_side: bool = True
    black_queen_side: bool = True

    def allows(self, color: Color, king_side: bool) -> bool:
        return getattr(self, _flag_name(color, king_side))

    def revoke(self, color: Color, king_side: bool) -> None:
        setattr(self, _flag_name(color, king_side), False)

    def revoke_all(self, color: Color) -> None:
        self.revoke(color, king_side=True)
        self.revoke(color, king_side=False)

    def to_dict(self) -> dict[str, bool]:
        return {
            "white_king_side": self.white_king_side,
            "white_queen_side": self.white_queen_side,
            "black_king_side": self.black_king_side,
            "black_queen_side": self.black_queen_side,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> Self:
        """Missing flags default to available: the pieces' own has_moved flags still guard castling."""
        if not isinstance(raw, Mapping):
            return cls()
        return cls(**{name: bool(raw.get(name, True)) for name in cls().to_dict()})


def _flag_name(color: Color, king_side: bool) -> str:
    return f"{color}_{'king' if king_side else 'queen'}_side"
