"""
Publishing state to observers (a view layer, a sound player, ...).

Observers never get a handle into the live board. They receive immutable snapshots,
through a feed that holds a single subscriber and remembers only the latest value.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from src.chess.board import Board
from src.chess.moves import CheckState
from src.chess.outcome import GameOutcome
from src.chess.pieces import Color, Piece
from src.chess.square import Square

T = TypeVar("T")

SnapshotGrid = tuple[tuple[Optional[str], ...], ...]


@dataclass(frozen=True)
class BoardSnapshot:
    """Read-only copy of the board. Pieces are stored by their FEN character, indexed [rank][file]."""

    grid: SnapshotGrid
    fen: str
    active_color: Color
    check: CheckState
    outcome: Optional[GameOutcome]

    @classmethod
    def capture(
        cls,
        board: Board,
        fen: str,
        active_color: Color,
        check: CheckState,
        outcome: Optional[GameOutcome],
    ) -> "BoardSnapshot":
        grid = tuple(
            tuple(piece.to_fen() if piece is not None else None for piece in row)
            for row in board.grid
        )
        return cls(grid, fen, active_color, check, outcome)

    def piece(self, square: Square) -> Optional[Piece]:
        """A fresh Piece for display purposes. Changing it has no effect on anything."""
        character = self.grid[square.rank][square.file]
        return Piece.from_fen(character) if character else None


class LatestValueFeed(Generic[T]):
    """
    Single-slot, latest-value publisher.

    * subscribing replaces the previous subscriber
    * a new subscriber immediately receives the most recent value (if any), never older ones
    """

    def __init__(self) -> None:
        self._latest: Optional[T] = None
        self._subscriber: Optional[Callable[[T], None]] = None

    @property
    def latest(self) -> Optional[T]:
        return self._latest

    def subscribe(self, callback: Callable[[T], None]) -> None:
        self._subscriber = callback
        if self._latest is not None:
            callback(self._latest)

    def unsubscribe(self) -> None:
        self._subscriber = None

    def publish(self, value: T) -> None:
        self._latest = value
        if self._subscriber is not None:
            self._subscriber(value)
