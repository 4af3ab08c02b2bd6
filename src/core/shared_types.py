"""
Type definitions used across layers
"""

from enum import StrEnum


class GameType(StrEnum):
    CHESS = "chess"
    YAHTZEE = "yahtzee"


class GameStatus(StrEnum):
    """Lifecycle of any game. Only ever moves forward: waiting -> playing -> finished."""

    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class ChessStatus(StrEnum):
    PLAYING = "playing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"


class CastlingMode(StrEnum):
    """
    PERMISSIVE: only checks rights, unmoved pieces and an empty path (historic behaviour of the platform).
    STRICT: additionally forbids castling out of, through or into check.
    """

    PERMISSIVE = "permissive"
    STRICT = "strict"


class MoveType(StrEnum):
    MOVE = "move"
    ROLL = "roll"
    HOLD = "hold"
    SCORE = "score"
