"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, PieceType, Status

PieceColor = str
SquareName = str

PROMOTION_CHOICES = {
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
}


def _is_algebraic_notation(value: str) -> bool:
    if len(value) != 2:
        return False

    file_character, rank_character = value[0], value[1]
    return file_character in "abcdefgh" and rank_character in "12345678"


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    starting_fen: Optional[str] = None

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value

        parts = value.strip().split(" ")
        if len(parts) != 6:
            raise InvalidRequestError(
                "FEN string must contain 6 space-separated parts."
            )
        return value.strip()


class GetGameRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID


class MoveRequest(BaseModel):
    game_id: UUID
    from_square: SquareName
    to_square: SquareName
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        if not _is_algebraic_notation(value):
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a valid square name."
            )
        return value

    @field_validator("promote_to")
    @classmethod
    def validate_promotion(cls, value: Optional[PieceType]) -> Optional[PieceType]:
        if value is not None and value not in PROMOTION_CHOICES:
            raise InvalidRequestError(f"A pawn cannot promote to a {value}.")
        return value


class ResignRequest(BaseModel):
    game_id: UUID
    color: Color


class RestartRequest(BaseModel):
    game_id: UUID


class HistoryRequest(BaseModel):
    game_id: UUID
    index: int = -1


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    fen_state: str
    starting_state: str
    active_color: Color
    in_check: bool
    status: Status
    winner: Optional[PieceColor]
    message: Optional[str]
    move_history: list[str]


class LegalMovesResponse(BaseModel):
    game_id: UUID
    color: Color
    legal_moves: dict[SquareName, list[SquareName]]


class HistoryResponse(BaseModel):
    game_id: UUID
    index: int
    fen_state: str
    # board seen from White's side: rank 8 first, a-file first. None for an empty square.
    rows: list[list[Optional[str]]]
