"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
from uuid import UUID

from src.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    HistoryRequest,
    HistoryResponse,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    ResignRequest,
    RestartRequest,
)
from src.chess.game import Game
from src.chess.square import Square
from src.core.exceptions import RepositoryError
from src.core.models import GameModel
from src.db.repository import GameRepository

logger = logging.getLogger(__name__)


class ChessService:
    """Orchestration of layers for chess game."""

    def __init__(self, repository: GameRepository) -> None:
        self.repo = repository

    # -- API routes logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Start a new game, from the standard position unless a FEN string is supplied."""

        new_game = (
            Game.from_fen(request.starting_fen)
            if request.starting_fen
            else Game.new_game()
        )

        # Store the GameModel in the repository
        _, game_id = self.repo.create_game(new_game.to_model())
        logger.info("Created game %s", game_id)

        return self._create_game_response(game_id, new_game)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when the position changed for instance.
        """
        game = self._load_game(request.game_id)
        return self._create_game_response(request.game_id, game)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """retrieve set of legal moves for the player to move, grouped by the square the piece stands on."""
        game = self._load_game(request.game_id)
        legal_moves = {
            from_square.to_algebraic(): [square.to_algebraic() for square in destinations]
            for from_square, destinations in game.legal_moves().items()
        }
        return LegalMovesResponse(
            game_id=request.game_id,
            color=game.active_color,
            legal_moves=legal_moves,
        )

    def make_move(self, request: MoveRequest) -> GameResponse:
        """
        Make a move attempt.

        An illegal destination raises (IllegalMoveError). A request that does not apply to the game
        (game over, no piece of the player to move on from_square) leaves the game untouched.
        """
        game = self._load_game(request.game_id)

        result = game.apply_move(
            Square.from_algebraic(request.from_square),
            Square.from_algebraic(request.to_square),
            request.promote_to,
        )
        if result is None:
            logger.info(
                "Move %s%s does not apply to game %s",
                request.from_square,
                request.to_square,
                request.game_id,
            )
            return self._create_game_response(request.game_id, game)

        self._store(request.game_id, game)
        return self._create_game_response(request.game_id, game)

    def resign(self, request: ResignRequest) -> GameResponse:
        game = self._load_game(request.game_id)
        game.resign(request.color)
        self._store(request.game_id, game)
        return self._create_game_response(request.game_id, game)

    def restart(self, request: RestartRequest) -> GameResponse:
        game = self._load_game(request.game_id)
        game.restart()
        self._store(request.game_id, game)
        return self._create_game_response(request.game_id, game)

    def history(self, request: HistoryRequest) -> HistoryResponse:
        """Look up an earlier position (read only, the stored game does not change)."""
        game = self._load_game(request.game_id)
        index = game.history_index(request.index)
        snapshot = game.history_snapshot(index)
        return HistoryResponse(
            game_id=request.game_id,
            index=index,
            fen_state=snapshot.fen,
            rows=[list(row) for row in reversed(snapshot.grid)],
        )

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        self.repo.delete_game(request.game_id)
        logger.info("Deleted game %s", request.game_id)

    # -- Internal helpers --
    def _create_game_response(self, game_id: UUID, game: Game) -> GameResponse:
        """Convert the Game state to a GameResponse (for game with given ID.)"""
        model = game.to_model()
        return GameResponse(
            game_id=game_id,
            fen_state=model.current_fen,
            starting_state=model.history_fen[0],
            active_color=game.active_color,
            in_check=game.check_state.in_check,
            status=game.status,
            winner=model.winner,
            message=game.outcome.message if game.outcome else None,
            move_history=model.moves_uci,
        )

    def _load_game(self, game_id: UUID) -> Game:
        return Game.from_model(self._fetch_game(game_id))

    def _store(self, game_id: UUID, game: Game) -> None:
        self.repo.update_game(game_id, game.to_model())

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model
