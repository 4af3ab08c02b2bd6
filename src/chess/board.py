"""The Game board: an 8x8 grid of pieces, plus the en passant target and the castling rights."""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Optional, Self

from src.chess.castling import CastlingRights
from src.chess.pieces import BACK_RANK_ORDER, ChessPiece
from src.chess.square import BOARD_SIZE, Position
from src.core.shared_types import Color, PieceType

Grid = list[list[Optional[ChessPiece]]]


def empty_grid() -> Grid:
    return [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]


@dataclass
class ChessBoard:
    pieces: Grid = field(default_factory=empty_grid)
    en_passant_target: Optional[Position] = None
    castling_rights: CastlingRights = field(default_factory=CastlingRights)

    @classmethod
    def initial(cls) -> Self:
        """
        Standard starting position.
        Every square gets its own piece instance (no two squares share the same object).
        """
        board = cls()
        for col, piece_type in enumerate(BACK_RANK_ORDER):
            board.pieces[0][col] = ChessPiece(piece_type, Color.BLACK)
            board.pieces[1][col] = ChessPiece(PieceType.PAWN, Color.BLACK)
            board.pieces[6][col] = ChessPiece(PieceType.PAWN, Color.WHITE)
            board.pieces[7][col] = ChessPiece(piece_type, Color.WHITE)
        return board

    # --- (DE)SERIALIZATION ---
    def to_dict(self) -> dict[str, Any]:
        return {
            "pieces": [
                [piece.to_dict() if piece else None for piece in row] for row in self.pieces
            ],
            "en_passant_target": (
                self.en_passant_target.to_dict() if self.en_passant_target else None
            ),
            "castling_rights": self.castling_rights.to_dict(),
        }

    @classmethod
    def from_dict(cls, raw: Any) -> Self:
        """A board without a readable grid is reset to the starting position."""
        if not isinstance(raw, Mapping) or not _is_grid(raw.get("pieces")):
            return cls.initial()
        pieces = [[ChessPiece.from_dict(square) for square in row] for row in raw["pieces"]]
        return cls(
            pieces=pieces,
            en_passant_target=Position.parse(raw.get("en_passant_target")),
            castling_rights=CastlingRights.from_dict(raw.get("castling_rights")),
        )

    # --- QUERIES ---
    def piece(self, position: Position) -> Optional[ChessPiece]:
        return self.pieces[position.row][position.col]

    def is_empty(self, position: Position) -> bool:
        return self.piece(position) is None

    def locate_color(self, color: Color) -> list[Position]:
        return [
            Position(row, col)
            for row in range(BOARD_SIZE)
            for col in range(BOARD_SIZE)
            if (piece := self.pieces[row][col]) is not None and piece.color == color
        ]

    def find_king(self, color: Color) -> Optional[Position]:
        return next(
            (
                position
                for position in self.locate_color(color)
                if self.piece(position).type == PieceType.KING  # type: ignore[union-attr]
            ),
            None,
        )

    # --- UPDATES ---
    def place_piece(self, piece: ChessPiece, position: Position) -> None:
        self.pieces[position.row][position.col] = piece

    def remove_piece(self, position: Position) -> Optional[ChessPiece]:
        piece = self.piece(position)
        self.pieces[position.row][position.col] = None
        return piece

    def move_piece(self, from_position: Position, to_position: Position) -> None:
        """Update the position on the board (whatever stood on the target square is gone)"""
        piece = self.remove_piece(from_position)
        self.pieces[to_position.row][to_position.col] = piece

    @contextmanager
    def simulate_move(
        self,
        from_position: Position,
        to_position: Position,
        captured_position: Optional[Position] = None,
    ) -> Iterator[None]:
        """
        Play a move in place for the duration of the with-block, then put every touched square back.

        `captured_position` is the square of a piece taken 'from the side' (en passant).
        """
        touched = [from_position, to_position]
        if captured_position is not None:
            touched.append(captured_position)
        saved = [(position, self.piece(position)) for position in touched]
        try:
            if captured_position is not None:
                self.remove_piece(captured_position)
            self.move_piece(from_position, to_position)
            yield
        finally:
            for position, piece in saved:
                self.pieces[position.row][position.col] = piece


def _is_grid(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) == BOARD_SIZE
        and all(isinstance(row, list) and len(row) == BOARD_SIZE for row in value)
    )
