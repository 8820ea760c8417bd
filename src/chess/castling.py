"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass
from enum import Enum
from typing import Self

from src.chess.square import Square
from src.core.shared_types import Color


class CastlingDirection(Enum):
    """The four castling directions. Values represent their encodings in FEN string."""

    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"

    @classmethod
    def of(cls, color: Color, king_side: bool) -> Self:
        if color == Color.WHITE:
            return cls.WHITE_KING_SIDE if king_side else cls.WHITE_QUEEN_SIDE
        return cls.BLACK_KING_SIDE if king_side else cls.BLACK_QUEEN_SIDE

    @property
    def color(self) -> Color:
        return Color.WHITE if self.value.isupper() else Color.BLACK


# Order in which the rights get written in a FEN string
CASTLING_ORDER: tuple[CastlingDirection, ...] = (
    CastlingDirection.WHITE_KING_SIDE,
    CastlingDirection.WHITE_QUEEN_SIDE,
    CastlingDirection.BLACK_KING_SIDE,
    CastlingDirection.BLACK_QUEEN_SIDE,
)


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.

    * king_transit: the square the king crosses (also where the rook ends up)
    * rook_transit: squares between king and rook the king never touches, but which must be empty for the rook to pass (queen side only)
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square
    king_transit: Square
    rook_transit: tuple[Square, ...] = ()

    @classmethod
    def from_algebraic(
        cls,
        k_from: str,
        k_to: str,
        r_from: str,
        r_to: str,
        k_transit: str,
        r_transit: tuple[str, ...] = (),
    ) -> Self:
        """Convenience method: to make mapping shown below (from CastlingDirection) more readable"""
        return cls(
            king_from=Square.from_algebraic(k_from),
            king_to=Square.from_algebraic(k_to),
            rook_from=Square.from_algebraic(r_from),
            rook_to=Square.from_algebraic(r_to),
            king_transit=Square.from_algebraic(k_transit),
            rook_transit=tuple(Square.from_algebraic(sq) for sq in r_transit),
        )

    def must_be_empty(self) -> list[Square]:
        """Every square between the king and the rook"""
        return [self.king_transit, self.king_to, *self.rook_transit]


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[CastlingDirection, CastlingSquares] = {
    CastlingDirection.WHITE_KING_SIDE: CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1", "f1"
    ),
    CastlingDirection.WHITE_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1", "d1", ("b1",)
    ),
    CastlingDirection.BLACK_KING_SIDE: CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8", "f8"
    ),
    CastlingDirection.BLACK_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8", "d8", ("b8",)
    ),
}


def castling_rule_for_king_move(from_square: Square, to_square: Square) -> CastlingSquares | None:
    """A king travelling two files from its home square is castling. Find the matching rule."""
    for rule in CASTLING_RULES.values():
        if rule.king_from == from_square and rule.king_to == to_square:
            return rule
    return None
