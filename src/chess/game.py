"""
ChessGame plugs the chess rules into the generic turn engine.

It is responsible for everything that happens to the board in a single turn:
legality of the requested move, updating the board (castling, en passant, promotion),
the move history and counters, and detecting check / checkmate / stalemate / the fifty-move draw.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Self

from src.chess.board import ChessBoard
from src.chess.castling import CASTLING_RULES, back_rank
from src.chess.moves import (
    ChessMove,
    generate_notation,
    is_in_check,
    is_square_attacked,
    is_valid_piece_move,
    pawn_direction,
    promotion_row,
)
from src.chess.pieces import PROMOTION_OPTIONS, ChessPiece, opposite
from src.chess.square import BOARD_SIZE, Position
from src.core.shared_types import (
    CastlingMode,
    ChessStatus,
    Color,
    GameType,
    MoveType,
    PieceType,
)
from src.engine.base import GameEngine
from src.engine.primitives import GameConfig, Move, Player

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = (ChessStatus.CHECKMATE, ChessStatus.STALEMATE, ChessStatus.DRAW)

# 50 moves by each side without a capture or a pawn move
FIFTY_MOVE_RULE_HALF_MOVES = 100

# Turn order of the players list
PLAYER_COLORS: tuple[Color, ...] = (Color.WHITE, Color.BLACK)


@dataclass
class ChessGameData:
    board: ChessBoard = field(default_factory=ChessBoard.initial)
    current_player: Color = Color.WHITE
    move_history: list[ChessMove] = field(default_factory=list)
    half_move_clock: int = 0
    full_move_number: int = 1
    game_status: ChessStatus = ChessStatus.PLAYING
    winner: Optional[Color] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "board": self.board.to_dict(),
            "current_player": str(self.current_player),
            "move_history": [move.to_dict() for move in self.move_history],
            "half_move_clock": self.half_move_clock,
            "full_move_number": self.full_move_number,
            "game_status": str(self.game_status),
            "winner": str(self.winner) if self.winner else None,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> Self:
        if not isinstance(raw, Mapping):
            return cls()
        history = raw.get("move_history")
        return cls(
            board=ChessBoard.from_dict(raw.get("board")),
            current_player=_parse_enum(Color, raw.get("current_player"), Color.WHITE),
            move_history=[
                move
                for move in (ChessMove.from_dict(item) for item in history)
                if move is not None
            ]
            if isinstance(history, list)
            else [],
            half_move_clock=_parse_counter(raw.get("half_move_clock"), 0),
            full_move_number=_parse_counter(raw.get("full_move_number"), 1),
            game_status=_parse_enum(ChessStatus, raw.get("game_status"), ChessStatus.PLAYING),
            winner=_parse_enum(Color, raw.get("winner"), None),
        )


@dataclass(frozen=True)
class _RequestedMove:
    """Move payload, once parsed."""

    from_position: Position
    to_position: Position
    promotion: Optional[PieceType] = None


class ChessGame(GameEngine):
    game_type = GameType.CHESS
    default_config = GameConfig(max_players=2, min_players=2)

    def __init__(self, game_id: str, config: Optional[GameConfig] = None) -> None:
        super().__init__(game_id, config)
        self.castling_mode = _parse_enum(
            CastlingMode, self._config.rules.get("castling"), CastlingMode.PERMISSIVE
        )

    # --- ENGINE API ---
    def initial_data(self) -> ChessGameData:
        return ChessGameData()

    def data_from_dict(self, raw: Any) -> ChessGameData:
        return ChessGameData.from_dict(raw)

    @property
    def data(self) -> ChessGameData:
        return self.state.data

    def is_legal(self, move: Move) -> bool:
        """
        1. game must still be going
        2. payload must be a piece move naming two squares on the board
        3. the piece moved must belong to the side to move
        4. the piece must be able to make this move
        5. the move must not leave your own king in check
        """
        if move.type != MoveType.MOVE or self.data.game_status in TERMINAL_STATUSES:
            return False

        requested = self._parse_move(move)
        if requested is None:
            return False

        board = self.data.board
        piece = board.piece(requested.from_position)
        if piece is None or piece.color != self.data.current_player:
            return False

        if not self._is_valid_move(piece, requested.from_position, requested.to_position):
            return False

        return not self._is_putting_yourself_in_check(
            piece, requested.from_position, requested.to_position
        )

    def apply(self, move: Move) -> None:
        """
        Make the move
        -----

        1. snapshot the move for the history (before the board changes)
        2. update the en passant target
        3. remove the pawn taken en passant / move the rook when castling
        4. promote
        5. move the piece and update castling rights
        6. update history, side to move and counters
        7. update game status (check, checkmate, ...)
        """
        requested = self._parse_move(move)
        assert requested is not None
        from_position, to_position = requested.from_position, requested.to_position
        data = self.data
        board = data.board
        piece = board.piece(from_position)
        assert piece is not None

        captured_piece = board.piece(to_position)
        is_en_passant = self._is_en_passant(piece, from_position, to_position)
        if is_en_passant:
            captured_piece = board.remove_piece(self._en_passant_capture_square(piece, to_position))
        is_castling = self._is_castling(piece, from_position, to_position)

        # Store move info before update
        moving_piece = replace(piece)
        notation = generate_notation(moving_piece, to_position, captured_piece is not None)

        # en passant target is only valid for the very next move
        if piece.type == PieceType.PAWN and abs(to_position.row - from_position.row) == 2:
            board.en_passant_target = Position(
                (from_position.row + to_position.row) // 2, to_position.col
            )
        else:
            board.en_passant_target = None

        if is_castling:
            self._move_castling_rook(piece, from_position, to_position)

        promotion: Optional[PieceType] = None
        if piece.type == PieceType.PAWN and to_position.row == promotion_row(piece.color):
            promotion = requested.promotion or PieceType.QUEEN
            piece.promote_to(promotion)

        board.move_piece(from_position, to_position)
        piece.has_moved = True
        self._revoke_castling_rights_if_needed(
            moving_piece, from_position, to_position, captured_piece
        )

        data.move_history.append(
            ChessMove(
                from_position=from_position,
                to_position=to_position,
                piece=moving_piece,
                notation=notation,
                captured_piece=replace(captured_piece) if captured_piece else None,
                is_en_passant=is_en_passant,
                is_castling=is_castling,
                promotion=promotion,
            )
        )
        data.current_player = opposite(data.current_player)
        if captured_piece is not None or moving_piece.type == PieceType.PAWN:
            data.half_move_clock = 0
        else:
            data.half_move_clock += 1
        if data.current_player == Color.WHITE:
            data.full_move_number += 1

        self._update_game_status()

    def winner(self) -> Optional[Player]:
        """
        For now only works for checkmate.
        players[0] plays the white pieces, players[1] the black pieces.
        """
        if self.data.game_status != ChessStatus.CHECKMATE or self.data.winner is None:
            return None
        index = PLAYER_COLORS.index(self.data.winner)
        if index >= len(self.state.players):
            return None
        return self.state.players[index]

    def is_drawn(self) -> bool:
        return self.data.game_status in (ChessStatus.STALEMATE, ChessStatus.DRAW)

    def rules(self) -> list[str]:
        rules = [
            "White moves first, then players alternate turns",
            "Each piece moves according to its specific rules",
            "The game ends when a king is checkmated",
            "A king is in check when attacked by an enemy piece",
            "Checkmate occurs when the king is in check and cannot escape",
            "Stalemate occurs when a player has no legal moves but is not in check",
            "Castling allows the king to move two squares with the rook",
            "En passant allows capturing a pawn that just moved two squares",
            "Pawns promote to any piece when reaching the last rank",
            "50 moves without a capture or pawn move is a draw",
        ]
        if self.castling_mode == CastlingMode.STRICT:
            rules.append("You cannot castle out of, through or into check")
        return rules

    # --- QUERIES FOR THE UI ---
    @property
    def board(self) -> ChessBoard:
        return self.data.board

    @property
    def current_color(self) -> Color:
        return self.data.current_player

    @property
    def game_status(self) -> ChessStatus:
        return self.data.game_status

    @property
    def move_history(self) -> list[ChessMove]:
        return list(self.data.move_history)

    @property
    def full_move_number(self) -> int:
        return self.data.full_move_number

    def is_in_check(self, color: Color) -> bool:
        return is_in_check(color, self.data.board)

    def possible_moves(self, position: Position) -> list[Position]:
        """Legal destinations of the piece on the given square (empty if it is not that side's turn)."""
        board = self.data.board
        piece = board.piece(position)
        if piece is None or piece.color != self.data.current_player:
            return []
        return [
            destination
            for destination in _all_squares()
            if self._is_valid_move(piece, position, destination)
            and not self._is_putting_yourself_in_check(piece, position, destination)
        ]

    # -- LEGAL MOVES HELPERS ---
    def _parse_move(self, move: Move) -> Optional[_RequestedMove]:
        data = move.data if isinstance(move.data, Mapping) else {}
        from_position = Position.parse(data.get("from"))
        to_position = Position.parse(data.get("to"))
        if from_position is None or to_position is None:
            return None

        raw_promotion = data.get("promotion")
        if raw_promotion is None:
            return _RequestedMove(from_position, to_position)
        try:
            promotion = PieceType(raw_promotion)
        except ValueError:
            return None
        if promotion not in PROMOTION_OPTIONS:
            return None
        return _RequestedMove(from_position, to_position, promotion)

    def _is_valid_move(
        self, piece: ChessPiece, from_position: Position, to_position: Position
    ) -> bool:
        board = self.data.board
        if not is_valid_piece_move(piece, from_position, to_position, board):
            return False
        if (
            self.castling_mode == CastlingMode.STRICT
            and self._is_castling(piece, from_position, to_position)
        ):
            return self._is_castling_path_safe(piece, from_position, to_position)
        return True

    def _is_putting_yourself_in_check(
        self, piece: ChessPiece, from_position: Position, to_position: Position
    ) -> bool:
        """Play the move in place, look at your own king, and revert."""
        board = self.data.board
        captured_position = (
            self._en_passant_capture_square(piece, to_position)
            if self._is_en_passant(piece, from_position, to_position)
            else None
        )
        with board.simulate_move(from_position, to_position, captured_position):
            return is_in_check(piece.color, board)

    def _has_legal_moves(self, color: Color) -> bool:
        """Brute force: every own piece, every square on the board."""
        board = self.data.board
        for from_position in board.locate_color(color):
            piece = board.piece(from_position)
            assert piece is not None
            for to_position in _all_squares():
                if self._is_valid_move(
                    piece, from_position, to_position
                ) and not self._is_putting_yourself_in_check(piece, from_position, to_position):
                    return True
        return False

    def _update_game_status(self) -> None:
        """
        Performs checks to see if game has ended and changes status accordingly.

        NOTE the side to move has already been flipped: we look at the opponent of the player who just moved.
        """
        data = self.data
        color = data.current_player
        in_check = self.is_in_check(color)
        has_moves = self._has_legal_moves(color)

        if in_check and has_moves:
            data.game_status = ChessStatus.CHECK
        elif in_check:
            data.game_status = ChessStatus.CHECKMATE
            data.winner = opposite(color)
        elif has_moves:
            data.game_status = ChessStatus.PLAYING
        else:
            data.game_status = ChessStatus.STALEMATE

        if data.half_move_clock >= FIFTY_MOVE_RULE_HALF_MOVES:
            data.game_status = ChessStatus.DRAW

        if data.game_status != ChessStatus.PLAYING:
            logger.debug("Game %s: %s for %s", self.state.id, data.game_status, color)

    # -- CASTLING RULE HELPERS ---
    def _is_castling(
        self, piece: ChessPiece, from_position: Position, to_position: Position
    ) -> bool:
        return (
            piece.type == PieceType.KING
            and from_position.row == to_position.row
            and abs(to_position.col - from_position.col) == 2
        )

    def _is_castling_path_safe(
        self, king: ChessPiece, from_position: Position, to_position: Position
    ) -> bool:
        """Strict castling: the king's start square, the square it crosses and where it lands must not be attacked."""
        step = 1 if to_position.col > from_position.col else -1
        king_path = [
            Position(from_position.row, col)
            for col in range(from_position.col, to_position.col + step, step)
        ]
        opponent = opposite(king.color)
        return not any(
            is_square_attacked(square, opponent, self.data.board) for square in king_path
        )

    def _move_castling_rook(
        self, king: ChessPiece, from_position: Position, to_position: Position
    ) -> None:
        columns = CASTLING_RULES[to_position.col > from_position.col]
        board = self.data.board
        rook_from = Position(from_position.row, columns.rook_from)
        rook_to = Position(from_position.row, columns.rook_to)
        rook = board.piece(rook_from)
        assert rook is not None
        board.move_piece(rook_from, rook_to)
        rook.has_moved = True
        board.castling_rights.revoke_all(king.color)

    def _revoke_castling_rights_if_needed(
        self,
        piece: ChessPiece,
        from_position: Position,
        to_position: Position,
        captured_piece: Optional[ChessPiece],
    ) -> None:
        """
        Checks which rights should get revoked
        ----

        1. If you are moving your king --> revoke both
        2. If you are moving a rook from its starting corner --> revoke the right on that side
        3. If you are taking your opponent's rook in its corner --> revoke that right of your opponent
        """
        rights = self.data.board.castling_rights
        if piece.type == PieceType.KING:
            rights.revoke_all(piece.color)

        if piece.type == PieceType.ROOK:
            for king_side, columns in CASTLING_RULES.items():
                if from_position == Position(back_rank(piece.color), columns.rook_from):
                    rights.revoke(piece.color, king_side)

        if captured_piece is not None and captured_piece.type == PieceType.ROOK:
            for king_side, columns in CASTLING_RULES.items():
                if to_position == Position(back_rank(captured_piece.color), columns.rook_from):
                    rights.revoke(captured_piece.color, king_side)

    # --- EN PASSANT RULE HELPERS ----
    def _is_en_passant(
        self, piece: ChessPiece, from_position: Position, to_position: Position
    ) -> bool:
        """A pawn moving diagonally onto an empty square can only be taking en passant."""
        return (
            piece.type == PieceType.PAWN
            and from_position.col != to_position.col
            and self.data.board.is_empty(to_position)
        )

    def _en_passant_capture_square(self, pawn: ChessPiece, to_position: Position) -> Position:
        """The pawn taken stands right 'behind' the en passant target, seen from the capturing pawn."""
        return to_position.offset(-pawn_direction(pawn.color), 0)


def _all_squares() -> list[Position]:
    return [Position(row, col) for row in range(BOARD_SIZE) for col in range(BOARD_SIZE)]


def _parse_enum(enum_type: Any, value: Any, default: Any) -> Any:
    try:
        return enum_type(value)
    except ValueError:
        return default


def _parse_counter(value: Any, default: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return default
