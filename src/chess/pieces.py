"""Defines the chess pieces"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Self

from src.core.shared_types import Color, PieceType

# Letters used in move notation. Pawns have none.
PIECE_LETTERS: dict[PieceType, str] = {
    PieceType.PAWN: "",
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}

PROMOTION_OPTIONS: tuple[PieceType, ...] = (
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
)

# Back rank from the a-file to the h-file
BACK_RANK_ORDER: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


def opposite(color: Color) -> Color:
    return Color.BLACK if color == Color.WHITE else Color.WHITE


@dataclass
class ChessPiece:
    type: PieceType
    color: Color
    has_moved: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"type": str(self.type), "color": str(self.color), "has_moved": self.has_moved}

    @classmethod
    def from_dict(cls, raw: Any) -> Optional[Self]:
        """An unreadable square is treated as empty."""
        if not isinstance(raw, Mapping):
            return None
        try:
            piece_type = PieceType(raw.get("type"))
            color = Color(raw.get("color"))
        except ValueError:
            return None
        return cls(piece_type, color, bool(raw.get("has_moved", False)))

    def promote_to(self, new_type: PieceType) -> None:
        self.type = new_type
