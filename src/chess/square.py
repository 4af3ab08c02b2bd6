"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

# Chess board is always 8x8
BOARD_SIZE = 8
RANK_DIGITS = "12345678"


@dataclass(frozen=True)
class Position:
    """
    Row 0 is the 8th rank (black's back rank), row 7 the 1st rank.
    Column 0 is the a-file, column 7 the h-file.
    """

    row: int
    col: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Position:
        """Algebraic notation: 'a8' -> (0, 0), 'h1' -> (7, 7)"""
        col = ord(sq[0].lower()) - ord("a")
        row = BOARD_SIZE - int(sq[1:])
        return cls(row, col)

    def to_algebraic(self) -> str:
        return f"{chr(self.col + ord('a'))}{BOARD_SIZE - self.row}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_SIZE) and (0 <= self.col < BOARD_SIZE)

    def offset(self, d_row: int, d_col: int) -> Position:
        return Position(self.row + d_row, self.col + d_col)

    def to_dict(self) -> dict[str, int]:
        return {"row": self.row, "col": self.col}

    @classmethod
    def parse(cls, value: Any) -> Optional[Position]:
        """
        Read a square from a move payload or a persisted blob.
        Accepts {"row": r, "col": c}, a (row, col) pair or an algebraic string like "e2".
        Returns None for anything that is not a square on the board.
        """
        position: Optional[Position] = None
        if isinstance(value, Mapping):
            row, col = value.get("row"), value.get("col")
            if _is_int(row) and _is_int(col):
                position = cls(row, col)
        elif isinstance(value, (list, tuple)) and len(value) == 2:
            row, col = value
            if _is_int(row) and _is_int(col):
                position = cls(row, col)
        elif isinstance(value, str) and len(value) == 2 and value[1] in RANK_DIGITS:
            position = cls.from_algebraic(value)

        if position is None or not position.is_within_bounds():
            return None
        return position


def _is_int(value: Any) -> bool:
    # bool is a subclass of int, but True is not a row number
    return isinstance(value, int) and not isinstance(value, bool)
