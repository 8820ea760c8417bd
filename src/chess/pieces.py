"""
Piece catalog: the kinds of chess pieces and the geometry they move along.

Vectors are (d_rank, d_file). White moves UP the board (increasing rank), Black moves DOWN.
"""

from dataclasses import dataclass, field
from typing import Self

from src.core.shared_types import Color, PieceType

Vector = tuple[int, int]

FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}


PIECE_POINTS: dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
}

PROMOTION_OPTIONS: tuple[PieceType, ...] = (
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
)

STRAIGHTS: tuple[Vector, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
DIAGONALS: tuple[Vector, ...] = ((1, 1), (1, -1), (-1, 1), (-1, -1))
KNIGHT_JUMPS: tuple[Vector, ...] = (
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
)

# Pawn geometry is written for White. Black uses the same vectors with the rank component flipped.
PAWN_PUSHES: tuple[Vector, ...] = ((1, 0), (2, 0))
PAWN_TAKES: tuple[Vector, ...] = ((1, 1), (1, -1))


@dataclass(frozen=True)
class Geometry:
    """How a kind of piece travels: along which vectors, and whether it keeps going (slides) or takes a single step."""

    directions: tuple[Vector, ...]
    slides: bool


GEOMETRY: dict[PieceType, Geometry] = {
    PieceType.PAWN: Geometry(PAWN_PUSHES + PAWN_TAKES, slides=False),
    PieceType.KNIGHT: Geometry(KNIGHT_JUMPS, slides=False),
    PieceType.BISHOP: Geometry(DIAGONALS, slides=True),
    PieceType.ROOK: Geometry(STRAIGHTS, slides=True),
    PieceType.QUEEN: Geometry(STRAIGHTS + DIAGONALS, slides=True),
    PieceType.KING: Geometry(STRAIGHTS + DIAGONALS, slides=False),
}


def forward(color: Color) -> int:
    """Rank direction a pawn of the given color advances in"""
    return 1 if color == Color.WHITE else -1


def home_rank(color: Color) -> int:
    """Rank the king and rooks start on"""
    return 0 if color == Color.WHITE else 7


def pawn_start_rank(color: Color) -> int:
    return 1 if color == Color.WHITE else 6


def promotion_rank(color: Color) -> int:
    return 7 if color == Color.WHITE else 0


@dataclass
class Piece:
    type: PieceType
    color: Color
    has_moved: bool = False
    points: int = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # NOTE: The King's worth is undefined (does not count towards total points)
        self.points = PIECE_POINTS.get(self.type, 0)

    @classmethod
    def from_fen(cls, character: str) -> Self:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = FEN_TO_PIECE[character.lower()]
        return cls(piece_type, color)

    def to_fen(self) -> str:
        return (
            PIECE_TO_FEN[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_FEN[self.type].lower()
        )

    @property
    def slides(self) -> bool:
        return GEOMETRY[self.type].slides

    @property
    def directions(self) -> tuple[Vector, ...]:
        """Direction vectors as seen from this piece's side of the board"""
        directions = GEOMETRY[self.type].directions
        match self.type:
            case PieceType.PAWN:
                step = forward(self.color)
                return tuple((d_rank * step, d_file) for d_rank, d_file in directions)
            case _:
                return directions

    @property
    def attack_directions(self) -> tuple[Vector, ...]:
        """A pawn only threatens diagonally. Every other piece attacks along its movement vectors."""
        match self.type:
            case PieceType.PAWN:
                return tuple(
                    (d_rank, d_file) for d_rank, d_file in self.directions if d_file != 0
                )
            case _:
                return self.directions
