"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the movement rule for each piece type.

These rules only look at the geometry of a single move on the board. Whether the move leaves your own king in check
(and the castling-through-check question) is decided later by ChessGame.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional, Self

from src.chess.board import ChessBoard
from src.chess.castling import CASTLING_RULES
from src.chess.pieces import PIECE_LETTERS, ChessPiece, opposite
from src.chess.square import BOARD_SIZE, Position
from src.core.shared_types import Color, PieceType

Vector = tuple[int, int]

KNIGHT_DELTAS: tuple[Vector, ...] = (
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
)


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def pawn_direction(color: Color) -> int:
    """White moves UP the board (towards row 0), black moves DOWN"""
    return -1 if color == Color.WHITE else 1


def pawn_start_row(color: Color) -> int:
    return 6 if color == Color.WHITE else 1


def promotion_row(color: Color) -> int:
    return 0 if color == Color.WHITE else BOARD_SIZE - 1


def is_path_clear(from_position: Position, to_position: Position, board: ChessBoard) -> bool:
    """
    Walk from one square to the other along a straight line or diagonal.
    Every square strictly in between must be empty.
    """
    step_row = _sign(to_position.row - from_position.row)
    step_col = _sign(to_position.col - from_position.col)
    current = from_position.offset(step_row, step_col)
    while current != to_position:
        if not board.is_empty(current):
            return False
        current = current.offset(step_row, step_col)
    return True


def is_free_or_enemy(piece: ChessPiece, to_position: Position, board: ChessBoard) -> bool:
    target = board.piece(to_position)
    return target is None or target.color != piece.color


# --- MOVEMENT RULES ---
def is_valid_pawn_move(
    piece: ChessPiece, from_position: Position, to_position: Position, board: ChessBoard
) -> bool:
    """
    A pawn:
    - moves by a single square forward (onto an empty square)
    - can move by two from its starting row, if both squares are empty
    - takes diagonally, or en passant on the board's en passant target
    """
    direction = pawn_direction(piece.color)
    d_row = to_position.row - from_position.row
    d_col = to_position.col - from_position.col

    if d_col == 0:
        if d_row == direction and board.is_empty(to_position):
            return True
        in_between = from_position.offset(direction, 0)
        return (
            d_row == 2 * direction
            and from_position.row == pawn_start_row(piece.color)
            and board.is_empty(in_between)
            and board.is_empty(to_position)
        )

    if abs(d_col) == 1 and d_row == direction:
        target = board.piece(to_position)
        if target is not None and target.color != piece.color:
            return True
        return board.en_passant_target == to_position

    return False


def is_valid_rook_move(
    piece: ChessPiece, from_position: Position, to_position: Position, board: ChessBoard
) -> bool:
    """Rooks move either horizontally or vertically"""
    d_row = to_position.row - from_position.row
    d_col = to_position.col - from_position.col
    if d_row != 0 and d_col != 0:
        return False
    return is_path_clear(from_position, to_position, board) and is_free_or_enemy(
        piece, to_position, board
    )


def is_valid_bishop_move(
    piece: ChessPiece, from_position: Position, to_position: Position, board: ChessBoard
) -> bool:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    d_row = to_position.row - from_position.row
    d_col = to_position.col - from_position.col
    if abs(d_row) != abs(d_col):
        return False
    return is_path_clear(from_position, to_position, board) and is_free_or_enemy(
        piece, to_position, board
    )


def is_valid_queen_move(
    piece: ChessPiece, from_position: Position, to_position: Position, board: ChessBoard
) -> bool:
    """The Queen combines the rook moves and the bishop moves"""
    return is_valid_rook_move(piece, from_position, to_position, board) or is_valid_bishop_move(
        piece, from_position, to_position, board
    )


def is_valid_knight_move(
    piece: ChessPiece, from_position: Position, to_position: Position, board: ChessBoard
) -> bool:
    """Knights jump: no path to check"""
    delta = (to_position.row - from_position.row, to_position.col - from_position.col)
    return delta in KNIGHT_DELTAS and is_free_or_enemy(piece, to_position, board)


def is_valid_king_move(
    piece: ChessPiece, from_position: Position, to_position: Position, board: ChessBoard
) -> bool:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move of two squares along the back rank.
    """
    d_row = to_position.row - from_position.row
    d_col = to_position.col - from_position.col
    if abs(d_row) <= 1 and abs(d_col) <= 1:
        return is_free_or_enemy(piece, to_position, board)
    if d_row == 0 and abs(d_col) == 2:
        return is_valid_castling_move(piece, from_position, to_position, board)
    return False


def is_valid_castling_move(
    king: ChessPiece, from_position: Position, to_position: Position, board: ChessBoard
) -> bool:
    """
    You are allowed to castle if
    ---

    * Neither the king nor the rook of choice has moved.
    * Castling rights in that direction are not yet revoked.
    * All squares between the king and the rook are empty.

    NOTE: attacked squares are NOT considered here (see CastlingMode.STRICT in the game).
    """
    if king.has_moved:
        return False

    king_side = to_position.col > from_position.col
    rook_position = Position(from_position.row, CASTLING_RULES[king_side].rook_from)
    rook = board.piece(rook_position)
    if rook is None or rook.type != PieceType.ROOK or rook.color != king.color or rook.has_moved:
        return False

    if not board.castling_rights.allows(king.color, king_side):
        return False

    return is_path_clear(from_position, rook_position, board)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
MoveRuleFn = Callable[[ChessPiece, Position, Position, ChessBoard], bool]
MOVEMENT_RULES: dict[PieceType, MoveRuleFn] = {
    PieceType.PAWN: is_valid_pawn_move,
    PieceType.KNIGHT: is_valid_knight_move,
    PieceType.BISHOP: is_valid_bishop_move,
    PieceType.ROOK: is_valid_rook_move,
    PieceType.QUEEN: is_valid_queen_move,
    PieceType.KING: is_valid_king_move,
}


def is_valid_piece_move(
    piece: ChessPiece, from_position: Position, to_position: Position, board: ChessBoard
) -> bool:
    if from_position == to_position:
        return False
    return MOVEMENT_RULES[piece.type](piece, from_position, to_position, board)


# --- CAPTURING RULES / ATTACKING RULES ---
def can_pawn_attack(
    piece: ChessPiece, from_position: Position, target: Position, board: ChessBoard
) -> bool:
    """Pawns attack diagonally forward, whatever stands on the square"""
    d_row = target.row - from_position.row
    d_col = target.col - from_position.col
    return abs(d_col) == 1 and d_row == pawn_direction(piece.color)


def can_king_attack(
    piece: ChessPiece, from_position: Position, target: Position, board: ChessBoard
) -> bool:
    d_row = target.row - from_position.row
    d_col = target.col - from_position.col
    return max(abs(d_row), abs(d_col)) == 1


# --- STRATEGY PATTERN: ATTACKING RULES ---
# Sliders and knights attack exactly where they can move to. NOTE: a square held by the same color counts as not attacked.
ATTACK_RULES: dict[PieceType, MoveRuleFn] = {
    PieceType.PAWN: can_pawn_attack,
    PieceType.KNIGHT: is_valid_knight_move,
    PieceType.BISHOP: is_valid_bishop_move,
    PieceType.ROOK: is_valid_rook_move,
    PieceType.QUEEN: is_valid_queen_move,
    PieceType.KING: can_king_attack,
}


def is_square_attacked(target: Position, by_color: Color, board: ChessBoard) -> bool:
    """Is any piece of `by_color` able to take on the target square?"""
    for position in board.locate_color(by_color):
        if position == target:
            continue
        piece = board.piece(position)
        assert piece is not None
        if ATTACK_RULES[piece.type](piece, position, target, board):
            return True
    return False


def is_in_check(color: Color, board: ChessBoard) -> bool:
    """Without a king on the board, you cannot be in check"""
    king_position = board.find_king(color)
    if king_position is None:
        return False
    return is_square_attacked(king_position, opposite(color), board)


# -- NOTATION / MOVE RECORD ---
def generate_notation(piece: ChessPiece, to_position: Position, is_capture: bool) -> str:
    """<piece letter><x if capture><destination>, e.g. 'Nf3', 'Bxe5', 'e4'"""
    capture = "x" if is_capture else ""
    return f"{PIECE_LETTERS[piece.type]}{capture}{to_position.to_algebraic()}"


@dataclass(frozen=True)
class ChessMove:
    """An accepted move, as stored in the game's history. Pieces are copies: later board changes do not affect it."""

    from_position: Position
    to_position: Position
    piece: ChessPiece
    notation: str
    captured_piece: Optional[ChessPiece] = None
    is_en_passant: bool = False
    is_castling: bool = False
    promotion: Optional[PieceType] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.from_position.to_dict(),
            "to": self.to_position.to_dict(),
            "piece": self.piece.to_dict(),
            "captured_piece": self.captured_piece.to_dict() if self.captured_piece else None,
            "is_en_passant": self.is_en_passant,
            "is_castling": self.is_castling,
            "promotion": str(self.promotion) if self.promotion else None,
            "notation": self.notation,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> Optional[Self]:
        if not isinstance(raw, Mapping):
            return None
        from_position = Position.parse(raw.get("from"))
        to_position = Position.parse(raw.get("to"))
        piece = ChessPiece.from_dict(raw.get("piece"))
        if from_position is None or to_position is None or piece is None:
            return None
        try:
            promotion: Optional[PieceType] = PieceType(raw.get("promotion"))
        except ValueError:
            promotion = None
        return cls(
            from_position=from_position,
            to_position=to_position,
            piece=piece,
            notation=str(raw.get("notation") or ""),
            captured_piece=ChessPiece.from_dict(raw.get("captured_piece")),
            is_en_passant=bool(raw.get("is_en_passant", False)),
            is_castling=bool(raw.get("is_castling", False)),
            promotion=promotion,
        )
