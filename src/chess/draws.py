"""
Draw rules that only depend on the material on the board or on the move counters.

(Stalemate and threefold repetition need the legal move set / the history, so are decided by the Game.)
"""

from src.chess.board import Board
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import Square

# The fifty-move rule counts FULL moves (one move by each side), so the half-move clock must reach twice this number.
FIFTY_MOVE_RULE_LIMIT = 50
FIFTY_MOVE_HALF_MOVE_LIMIT = 2 * FIFTY_MOVE_RULE_LIMIT

PlacedPiece = tuple[Square, Piece]


def is_fifty_move_draw(half_move_clock: int) -> bool:
    return half_move_clock >= FIFTY_MOVE_HALF_MOVE_LIMIT


def is_insufficient_material(board: Board) -> bool:
    """
    Theoretically drawn positions, where no sequence of moves can lead to checkmate:

    * both sides only have their king left
    * king against king + a single knight or bishop
    * king + bishop against king + bishop, with both bishops on the same square color
    * king + two knights against a lone king
    * king + any number of bishops, all on the same square color, against a lone king
    """
    white_pieces = board.player_pieces(Color.WHITE)
    black_pieces = board.player_pieces(Color.BLACK)
    num_white, num_black = len(white_pieces), len(black_pieces)

    if num_white == 1 and num_black == 1:
        return True

    if num_white == 1 and num_black == 2:
        return _has_minor_piece(black_pieces)
    if num_white == 2 and num_black == 1:
        return _has_minor_piece(white_pieces)

    if num_white == 2 and num_black == 2:
        white_bishops = _bishops(white_pieces)
        black_bishops = _bishops(black_pieces)
        if white_bishops and black_bishops:
            return white_bishops[0].is_dark() == black_bishops[0].is_dark()
        return False

    if num_black == 1 and _has_only_two_knights_and_king(white_pieces):
        return True
    if num_white == 1 and _has_only_two_knights_and_king(black_pieces):
        return True

    if num_black == 1 and _has_only_same_colored_bishops_and_king(white_pieces):
        return True
    if num_white == 1 and _has_only_same_colored_bishops_and_king(black_pieces):
        return True

    return False


def _bishops(pieces: list[PlacedPiece]) -> list[Square]:
    return [square for square, piece in pieces if piece.type == PieceType.BISHOP]


def _has_minor_piece(pieces: list[PlacedPiece]) -> bool:
    return any(piece.type in (PieceType.KNIGHT, PieceType.BISHOP) for _, piece in pieces)


def _has_only_two_knights_and_king(pieces: list[PlacedPiece]) -> bool:
    knights = [piece for _, piece in pieces if piece.type == PieceType.KNIGHT]
    return len(pieces) == 3 and len(knights) == 2


def _has_only_same_colored_bishops_and_king(pieces: list[PlacedPiece]) -> bool:
    bishops = _bishops(pieces)
    if len(pieces) < 3 or len(bishops) != len(pieces) - 1:
        return False
    return len({square.is_dark() for square in bishops}) == 1
