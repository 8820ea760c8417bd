"""
Geometry/Base movement and capturing/attacking rules

Key idea: every piece kind carries a table of direction vectors (see pieces.py) and either slides along them
(bishop, rook, queen) or takes a single step (pawn, knight, king). Destinations and attacks are both found by
walking those vectors over the board.

Legality (not leaving your own king in check, castling, en passant) is checked later by Game
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Self

from src.chess.pieces import (
    FEN_TO_PIECE,
    PIECE_TO_FEN,
    Color,
    Piece,
    PieceType,
    Vector,
)
from src.chess.square import Square


class Board(Protocol):
    """Just the parts the movement rules need"""

    def piece(self, square: Square) -> Optional[Piece]: ...
    def occupied_squares(self) -> list[tuple[Square, Piece]]: ...


@dataclass
class Move:
    """basic definition of a move to be made"""

    from_square: Square
    to_square: Square
    promote_to: Optional[PieceType] = None

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        One of the standard chess notations for moves

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        * "e1g1": the king castles on the king side
        """
        from_sq = Square.from_algebraic(uci[:2])
        to_sq = Square.from_algebraic(uci[2:4])
        move = cls(from_sq, to_sq)
        if len(uci) == 5:
            move.promote_to = FEN_TO_PIECE[uci[4]]
        return move

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"


@dataclass(frozen=True)
class LastMove:
    """The move that was committed most recently. Only needed to decide on en passant."""

    piece_type: PieceType
    color: Color
    from_square: Square
    to_square: Square
    promoted_to: Optional[PieceType] = None

    def is_double_pawn_push(self) -> bool:
        return (
            self.piece_type == PieceType.PAWN
            and abs(self.to_square.rank - self.from_square.rank) == 2
        )


@dataclass(frozen=True)
class CheckState:
    in_check: bool = False
    king_square: Optional[Square] = None


# --- MOVEMENT RULES ---
def _is_selectable(target_square: Square, player_color: Color, board: Board) -> bool:
    """You cannot land on your own pieces, and a king is never taken off the board."""
    piece = board.piece(target_square)
    if piece is None:
        return True
    return piece.color != player_color and piece.type != PieceType.KING


def raycasting_destinations(
    square: Square, board: Board, directions: tuple[Vector, ...]
) -> list[Square]:
    """
    Raycasting algorithm
    -----

    The main trick we use to check the 'line of sight of a piece'.
    We move along the directions until we hit another piece or the edge of the board.
    An opponent's piece ends the ray but can still be captured, one of your own pieces simply ends the ray.
    """
    player_color = board.piece(square).color

    destinations: list[Square] = []
    for d_rank, d_file in directions:
        target_square = square.offset(d_rank, d_file)
        while target_square.is_within_bounds():
            if board.piece(target_square) is not None:
                if _is_selectable(target_square, player_color, board):
                    destinations.append(target_square)
                break

            destinations.append(target_square)
            target_square = target_square.offset(d_rank, d_file)
    return destinations


def single_step_destinations(
    square: Square, board: Board, deltas: tuple[Vector, ...]
) -> list[Square]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    player_color = board.piece(square).color

    destinations: list[Square] = []
    for d_rank, d_file in deltas:
        target_square = square.offset(d_rank, d_file)
        if not target_square.is_within_bounds():
            continue

        if _is_selectable(target_square, player_color, board):
            destinations.append(target_square)
    return destinations


def pawn_destinations(square: Square, board: Board) -> list[Square]:
    """
    A pawn:
    - moves by a single square forward, if that square is empty (friend or foe blocks it)
    - can move by two in its first move, if both squares in front of it are empty
    - takes diagonally, but never moves diagonally onto an empty square

    NOTE: En passant will be taken care of in the Game class
    """
    pawn = board.piece(square)
    destinations: list[Square] = []
    for d_rank, d_file in pawn.directions:
        target_square = square.offset(d_rank, d_file)
        if not target_square.is_within_bounds():
            continue

        target_piece = board.piece(target_square)
        if d_file == 0:
            if target_piece is not None:
                continue
            if abs(d_rank) == 2:
                passed_square = square.offset(d_rank // 2, 0)
                if pawn.has_moved or board.piece(passed_square) is not None:
                    continue
            destinations.append(target_square)
        elif target_piece is not None and _is_selectable(target_square, pawn.color, board):
            destinations.append(target_square)
    return destinations


def candidate_destinations(square: Square, board: Board) -> list[Square]:
    """Geometric reach of the piece on the given square, before testing for check"""
    piece = board.piece(square)
    match piece.type:
        case PieceType.PAWN:
            return pawn_destinations(square, board)
        case PieceType.KNIGHT | PieceType.KING:
            return single_step_destinations(square, board, piece.directions)
        case PieceType.BISHOP | PieceType.ROOK | PieceType.QUEEN:
            return raycasting_destinations(square, board, piece.directions)


# --- ATTACKING RULES ---
def _is_king_of(piece: Optional[Piece], color: Color) -> bool:
    return piece is not None and piece.type == PieceType.KING and piece.color == color


def raycasting_attack(
    square: Square, board: Board, directions: tuple[Vector, ...], king_color: Color
) -> Optional[Square]:
    """
    Raycasting algorithm for attacks.
    ---

    Where `raycasting_destinations()` determines
    _"Where can the piece standing on the specified square go?"_

    This function determines:
    _"Is the king of the specified color in the line-of-sight of the piece standing on the specified square?"_

    ---
    Returns the square of the king that is attacked (or None). Any other piece blocks the ray.
    """
    for d_rank, d_file in directions:
        target_square = square.offset(d_rank, d_file)
        while target_square.is_within_bounds():
            piece_found = board.piece(target_square)
            if _is_king_of(piece_found, king_color):
                return target_square
            if piece_found is not None:
                break
            target_square = target_square.offset(d_rank, d_file)
    return None


def single_step_attack(
    square: Square, board: Board, deltas: tuple[Vector, ...], king_color: Color
) -> Optional[Square]:
    """
    Raycasting is for sliding pieces. This is the equivalent for pawns, kings, and knights,
    which only reach the square directly at the end of each vector.
    """
    for d_rank, d_file in deltas:
        target_square = square.offset(d_rank, d_file)
        if not target_square.is_within_bounds():
            continue

        if _is_king_of(board.piece(target_square), king_color):
            return target_square
    return None


def find_attacked_king(board: Board, color: Color) -> Optional[Square]:
    """
    Scan every opponent piece and check if any of them reaches the king of the given color.

    NOTE: a pawn only attacks diagonally (its push never gives check).
    """
    for square, piece in board.occupied_squares():
        if piece.color == color:
            continue

        if piece.slides:
            king_square = raycasting_attack(square, board, piece.attack_directions, color)
        else:
            king_square = single_step_attack(square, board, piece.attack_directions, color)

        if king_square is not None:
            return king_square
    return None
