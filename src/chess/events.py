"""
Typed result of a committed move.

The engine does not play sounds or animate anything. It reports what kind of move happened,
and whoever listens decides what to do with it.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from src.chess.moves import Move
from src.chess.outcome import GameOutcome
from src.chess.pieces import Color, PieceType


class MoveType(Enum):
    BASIC_MOVE = auto()
    CAPTURE = auto()
    CASTLING = auto()
    PROMOTION = auto()
    CHECK = auto()
    CHECKMATE = auto()


# When a listener can only react to one event per move, the most important one wins.
PRIORITY: tuple[MoveType, ...] = (
    MoveType.CHECKMATE,
    MoveType.CHECK,
    MoveType.PROMOTION,
    MoveType.CASTLING,
    MoveType.CAPTURE,
    MoveType.BASIC_MOVE,
)


@dataclass(frozen=True)
class MoveResult:
    move: Move
    piece_type: PieceType
    color: Color
    captured: Optional[PieceType]
    events: tuple[MoveType, ...]
    outcome: Optional[GameOutcome] = None

    @property
    def kind(self) -> MoveType:
        return next(move_type for move_type in PRIORITY if move_type in self.events)
