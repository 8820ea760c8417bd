"""
FEN (Forsyth-Edwards Notation): parsing/validating FEN strings, and encoding the engine state as one.

The Game only relies on the first four fields (placement, side to move, castling rights, en passant target)
being a stable encoding of the position, see position.py.
"""

from dataclasses import dataclass
from string import ascii_lowercase
from typing import Optional, Self

from src.chess.board import Board
from src.chess.castling import CASTLING_ORDER, CASTLING_RULES, CastlingDirection
from src.chess.moves import LastMove
from src.chess.pieces import FEN_TO_PIECE, Color, PieceType, forward
from src.chess.square import BOARD_DIMENSIONS, Square
from src.core.exceptions import InvalidFENError

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
VALID_CASTLING_ENCODINGS = [
    "-",
    "K",
    "Q",
    "k",
    "q",
    "KQ",
    "Kk",
    "Kq",
    "Qk",
    "Qq",
    "kq",
    "KQk",
    "KQq",
    "Kkq",
    "Qkq",
    "KQkq",
]


def castling_from_fen(castle_fen: str) -> dict[CastlingDirection, bool]:
    """parse the part of the FEN string that encodes castling rights"""
    return {
        direction: (direction.value in castle_fen) for direction in CastlingDirection
    }


def castling_to_fen(castling_rights: dict[CastlingDirection, bool]) -> str:
    """create the part of the FEN string that encodes castling rights"""
    castling_chars = "".join(
        [direction.value for direction in CASTLING_ORDER if castling_rights[direction]]
    )
    return castling_chars or "-"


def is_valid_fen(fen: str) -> bool:
    """
    Check if given string follows proper FEN notation.
    """

    # there should be 6 parts to the string
    parts = fen.split(" ")
    if len(parts) != 6:
        return False

    position = parts[0]
    if not is_valid_position(position):
        return False

    color = parts[1]
    if not is_valid_color_code(color):
        return False

    castling = parts[2]
    if not is_valid_castling_rights(castling):
        return False

    en_passant = parts[3]
    if not is_valid_en_passant(en_passant):
        return False

    half_move_counter = parts[4]
    full_move_counter = parts[5]
    if not (
        is_valid_move_counter(half_move_counter)
        and is_valid_move_counter(full_move_counter)
    ):
        return False
    return True


def is_valid_position(position: str) -> bool:
    """Only check the part of the FEN encoding for the board position."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_ranks:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            # make sure every character is valid
            if character.isdigit():
                file_count += int(character)
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                # immediately invalidate if the character is anything else
                return False

        # make sure you are creating a correctly sized board
        if file_count != num_files:
            return False
    return True


def is_valid_color_code(color: str) -> bool:
    return color in {"w", "b"}


def is_valid_castling_rights(castling: str) -> bool:
    """A valid castling encoding has either KQkq, KQk, etc. or a '-' if all rights have been revoked."""
    return castling in VALID_CASTLING_ENCODINGS


def is_valid_en_passant(en_passant: str) -> bool:
    """Valid en passant square encoding should be a square that exists on the board or a '-'"""
    return (en_passant == "-") or is_valid_square(en_passant)


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    num_files, num_ranks = BOARD_DIMENSIONS

    if len(square) < 2:
        return False

    file_char, rank_char = square[0], square[1:]
    allowed_file_names = ascii_lowercase[:num_files]
    if file_char not in allowed_file_names:
        return False

    if not rank_char.isdigit():
        return False

    if not (1 <= int(rank_char) <= num_ranks):
        return False

    return True


def is_valid_move_counter(counter: str) -> bool:
    return counter.isdigit()


@dataclass
class FENState:
    """
    Data that can be constructed from a FEN string.
    ----

    FEN, or Forsyth-Edwards Notation, is a standard notation for describing a particular board position of a chess game.
    The purpose of FEN is to provide all the necessary information to restart a game from a particular position.

    <board position string><active color><castling rights><en passant square><# half move clock><number turns played>

    * The string to describe the board position is described in the Board class
    * The active color is either "w" or "b"
    * Castling rights are denoted as "k" for king-side or "q" for queen-side. Capital letters for the white pieces, small letters for the black pieces.
        In the starting position: KQkq (all rights available), and as rights get revoked a "-" is used instead of the designated letter.
    * The en passant square indicates the square a pawn can take on. If not available a "-" is used.
    * The half move clock counts the number of half-moves made since the last pawn move or capture.
    * The number of turns starts at 1 and increments after every move black makes.

    ex) The standard starting position has a FEN
    rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1
    i.e. it is white to move, all castling options available, no en passant square, no half moves and we are in the first turn.
    """

    position: str
    color_to_move: Color
    castling_rights: dict[CastlingDirection, bool]
    en_passant_square: Optional[Square]
    half_move_clock: int
    num_turns: int

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        """Parse the FEN into data"""

        # raise an exception if invalid FEN:
        if not is_valid_fen(fen):
            raise InvalidFENError(f"Cannot interpret supplied string as FEN: {fen}")

        # extract the different components. FEN is space separated
        (
            position,
            active_color,
            castling_str,
            en_passant_algebraic,
            half_move_clock,
            num_turns,
        ) = fen.split(" ")

        color_to_move = Color.WHITE if active_color == "w" else Color.BLACK
        castling_rights = castling_from_fen(castling_str)

        en_passant_square = (
            Square.from_algebraic(en_passant_algebraic)
            if en_passant_algebraic != "-"
            else None
        )

        return cls(
            position,
            color_to_move,
            castling_rights,
            en_passant_square,
            int(half_move_clock),
            int(num_turns),
        )

    def to_fen(self) -> str:
        """reverse operation: write a FEN from the given data"""
        active_color = "w" if self.color_to_move == Color.WHITE else "b"
        castling_str = castling_to_fen(self.castling_rights)

        en_passant_algebraic = (
            self.en_passant_square.to_algebraic()
            if self.en_passant_square is not None
            else "-"
        )

        return f"{self.position} {active_color} {castling_str} {en_passant_algebraic} {self.half_move_clock} {self.num_turns}"

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_FEN)


# --- ENCODING THE ENGINE STATE ---
def castling_rights_from_board(board: Board) -> dict[CastlingDirection, bool]:
    """A right still exists as long as both the king and the rook of that side stand unmoved on their starting squares."""
    rights: dict[CastlingDirection, bool] = {}
    for direction, rule in CASTLING_RULES.items():
        king = board.piece(rule.king_from)
        rook = board.piece(rule.rook_from)
        rights[direction] = (
            king is not None
            and king.type == PieceType.KING
            and king.color == direction.color
            and not king.has_moved
            and rook is not None
            and rook.type == PieceType.ROOK
            and rook.color == direction.color
            and not rook.has_moved
        )
    return rights


def en_passant_target(last_move: Optional[LastMove]) -> Optional[Square]:
    """The square a pawn skipped with its double step (if the last move was one)"""
    if last_move is None or not last_move.is_double_pawn_push():
        return None
    return last_move.from_square.offset(forward(last_move.color), 0)


def encode_fen(
    board: Board,
    color_to_move: Color,
    last_move: Optional[LastMove],
    half_move_clock: int,
    full_move_counter: int,
) -> str:
    state = FENState(
        position=board.to_fen(),
        color_to_move=color_to_move,
        castling_rights=castling_rights_from_board(board),
        en_passant_square=en_passant_target(last_move),
        half_move_clock=half_move_clock,
        num_turns=full_move_counter,
    )
    return state.to_fen()


def apply_castling_rights(board: Board, castling_rights: dict[CastlingDirection, bool]) -> None:
    """
    FEN does not know which pieces moved. Translate revoked castling rights into moved kings / rooks:

    * no rights left for a color --> its king has moved
    * a single right revoked --> the rook on that corner has moved
    """
    for color in Color:
        directions = [d for d in CastlingDirection if d.color == color]
        if not any(castling_rights[direction] for direction in directions):
            for king_square in board.locate_pieces(PieceType.KING, color):
                board.piece(king_square).has_moved = True

        for direction in directions:
            if castling_rights[direction]:
                continue
            rook = board.piece(CASTLING_RULES[direction].rook_from)
            if rook is not None and rook.type == PieceType.ROOK and rook.color == color:
                rook.has_moved = True


def last_move_from_en_passant(
    board: Board, en_passant_square: Optional[Square], color_to_move: Color
) -> Optional[LastMove]:
    """Reconstruct the double pawn push that produced the en passant square in a FEN string."""
    if en_passant_square is None:
        return None

    mover = color_to_move.opponent
    step = forward(mover)
    from_square = en_passant_square.offset(-step, 0)
    to_square = en_passant_square.offset(step, 0)
    if not to_square.is_within_bounds():
        return None

    pawn = board.piece(to_square)
    if pawn is None or pawn.type != PieceType.PAWN or pawn.color != mover:
        return None
    return LastMove(PieceType.PAWN, mover, from_square, to_square)
