"""
Bookkeeping of the positions reached during a game, for the threefold repetition rule.
"""

from dataclasses import dataclass, field

REPETITION_LIMIT = 3

# placement, side to move, castling rights, en passant target
POSITION_KEY_FIELDS = 4


def position_key(fen: str) -> str:
    """
    Two positions are the same when the FEN strings match, ignoring the move counters.
    (The counters change every move, so would otherwise never let a position repeat.)
    """
    return " ".join(fen.split(" ")[:POSITION_KEY_FIELDS])


@dataclass
class RepetitionLedger:
    """Counts how often every position occurred. Counts stop at REPETITION_LIMIT, nothing beyond that matters."""

    occurrences: dict[str, int] = field(default_factory=dict)

    def record(self, fen: str) -> int:
        """Register the position. Returns how often it has been seen now."""
        key = position_key(fen)
        count = min(self.occurrences.get(key, 0) + 1, REPETITION_LIMIT)
        self.occurrences[key] = count
        return count

    def count(self, fen: str) -> int:
        return self.occurrences.get(position_key(fen), 0)

    def is_repeated(self) -> bool:
        """Has any position been seen REPETITION_LIMIT times?"""
        return any(count >= REPETITION_LIMIT for count in self.occurrences.values())

    def clear(self) -> None:
        self.occurrences.clear()
