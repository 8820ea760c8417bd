"""How a game ended. A game that is still going has no outcome (None)."""

from dataclasses import dataclass
from typing import Optional, Self

from src.core.shared_types import Color, Status

DRAW_MESSAGES: dict[Status, str] = {
    Status.STALEMATE: "Stalemate",
    Status.DRAW_INSUFFICIENT_MATERIAL: "Draw due to lack of material",
    Status.DRAW_REPETITION: "Draw due to threefold repetition rule",
    Status.DRAW_FIFTY_MOVE_RULE: "Draw due to fifty move rule",
}


@dataclass(frozen=True)
class GameOutcome:
    status: Status
    winner: Optional[Color] = None

    @classmethod
    def checkmate(cls, winner: Color) -> Self:
        return cls(Status.CHECKMATE, winner)

    @classmethod
    def resignation(cls, loser: Color) -> Self:
        return cls(Status.RESIGNATION, loser.opponent)

    @classmethod
    def draw(cls, status: Status) -> Self:
        if status not in DRAW_MESSAGES:
            raise ValueError(f"{status} is not a drawn result")
        return cls(status)

    @property
    def loser(self) -> Optional[Color]:
        return self.winner.opponent if self.winner else None

    @property
    def is_draw(self) -> bool:
        return self.winner is None

    @property
    def message(self) -> str:
        match self.status:
            case Status.CHECKMATE:
                return f"{self.winner} won by checkmate"
            case Status.RESIGNATION:
                return f"{self.loser.value.capitalize()} gave up"
            case _:
                return DRAW_MESSAGES[self.status]
