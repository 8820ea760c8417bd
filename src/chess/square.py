"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

# Chess board is always 8x8. (files, ranks)
BOARD_DIMENSIONS = (8, 8)


@dataclass(frozen=True)
class Square:
    """0-indexed coordinates: a1 is (0, 0), e2 is (1, 4), h8 is (7, 7)"""

    rank: int
    file: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7)"""
        file = ord(sq[0]) - ord("a")
        rank = int(sq[1:]) - 1
        return cls(rank, file)

    def to_algebraic(self) -> str:
        return f"{chr(self.file + ord('a'))}{self.rank + 1}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.file < BOARD_DIMENSIONS[0]) and (
            0 <= self.rank < BOARD_DIMENSIONS[1]
        )

    def offset(self, d_rank: int, d_file: int) -> Square:
        return Square(self.rank + d_rank, self.file + d_file)

    def is_dark(self) -> bool:
        # a1 is a dark square
        return (self.rank + self.file) % 2 == 0

    def __str__(self) -> str:
        return self.to_algebraic()
