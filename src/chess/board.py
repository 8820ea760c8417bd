"""The Game board: the 8x8 grid of pieces, and the only place where pieces physically change squares."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional, Self

from src.chess.pieces import (
    Color,
    Piece,
    PieceType,
    home_rank,
    pawn_start_rank,
)
from src.chess.square import BOARD_DIMENSIONS, Square

Grid = list[list[Optional[Piece]]]

KING_HOME_FILE = 4
ROOK_HOME_FILES = (0, 7)


def empty_grid() -> Grid:
    num_files, num_ranks = BOARD_DIMENSIONS
    return [[None] * num_files for _ in range(num_ranks)]


@dataclass
class Board:
    grid: Grid

    @classmethod
    def empty(cls) -> Self:
        return cls(empty_grid())

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces.

        NOTE: FEN does not record which pieces moved. Pieces away from their starting squares are marked as moved,
        all other pieces are assumed to be unmoved (castling rights get applied on top of this by the Game).
        """
        board = cls.empty()
        fen_by_ranks = fen_str.split("/")
        for rank_idx, fen_one_rank in enumerate(fen_by_ranks):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = BOARD_DIMENSIONS[1] - 1 - rank_idx
            file = 0
            for character in fen_one_rank:
                if character.isalpha():
                    # simple case: a letter directly denotes the piece that should be created
                    square = Square(rank, file)
                    piece = Piece.from_fen(character)
                    piece.has_moved = not _on_starting_square(piece, square)
                    board.place_piece(piece, square)
                    file += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    file += int(character)
        return board

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1] - 1, -1, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(BOARD_DIMENSIONS[0]):
            piece = self.piece(Square(rank, file))

            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # --- READING THE BOARD ---
    def piece(self, square: Square) -> Optional[Piece]:
        return self.grid[square.rank][square.file]

    def is_occupied(self, square: Square) -> bool:
        return self.piece(square) is not None

    def is_any_occupied(self, squares: list[Square]) -> bool:
        return any(self.is_occupied(square) for square in squares)

    def occupied_squares(self) -> list[tuple[Square, Piece]]:
        """All pieces on the board with their location. Rank by rank, starting at a1."""
        num_files, num_ranks = BOARD_DIMENSIONS
        return [
            (Square(rank, file), piece)
            for rank in range(num_ranks)
            for file in range(num_files)
            if (piece := self.grid[rank][file]) is not None
        ]

    def locate_pieces(self, piece_type: PieceType, color: Color) -> list[Square]:
        return [
            square
            for square, piece in self.occupied_squares()
            if piece.type == piece_type and piece.color == color
        ]

    def player_pieces(self, color: Color) -> list[tuple[Square, Piece]]:
        """find all pieces of a given color (king included)"""
        return [(square, piece) for square, piece in self.occupied_squares() if piece.color == color]

    # --- CHANGING THE BOARD ---
    def place_piece(self, piece: Piece, square: Square) -> None:
        self.grid[square.rank][square.file] = piece

    def remove_piece(self, square: Square) -> Optional[Piece]:
        piece = self.piece(square)
        self.grid[square.rank][square.file] = None
        return piece

    def move_piece(self, from_square: Square, to_square: Square) -> Optional[Piece]:
        """Update the position on the board. Returns whatever stood on the target square."""
        piece_that_moved = self.remove_piece(from_square)
        captured = self.piece(to_square)
        self.grid[to_square.rank][to_square.file] = piece_that_moved
        return captured

    # --- SCOPED (ALWAYS RESTORED) CHANGES ---
    @contextmanager
    def hypothetical_move(self, from_square: Square, to_square: Square) -> Iterator[None]:
        """
        Pretend the piece on from_square stands on to_square for the duration of the with-block.
        Both squares get their original occupants back on every exit path.
        """
        moving_piece = self.piece(from_square)
        target_piece = self.piece(to_square)
        self.grid[from_square.rank][from_square.file] = None
        self.grid[to_square.rank][to_square.file] = moving_piece
        try:
            yield
        finally:
            self.grid[from_square.rank][from_square.file] = moving_piece
            self.grid[to_square.rank][to_square.file] = target_piece

    @contextmanager
    def lifted(self, square: Square) -> Iterator[Optional[Piece]]:
        """Take the piece off the board for the duration of the with-block, then put it back."""
        piece = self.piece(square)
        self.grid[square.rank][square.file] = None
        try:
            yield piece
        finally:
            self.grid[square.rank][square.file] = piece


def _on_starting_square(piece: Piece, square: Square) -> bool:
    """Could this piece still be standing where it started the game?"""
    match piece.type:
        case PieceType.PAWN:
            return square.rank == pawn_start_rank(piece.color)
        case PieceType.KING:
            return square == Square(home_rank(piece.color), KING_HOME_FILE)
        case PieceType.ROOK:
            return square.rank == home_rank(piece.color) and square.file in ROOK_HOME_FILES
        case _:
            return True
