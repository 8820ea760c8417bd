"""
The Game class will be the entrypoint into the domain layer for the service layer.
It owns the authoritative board, and is responsible for orchestrating all the rules required to play a turn:
which moves are legal, what happens when one gets made and whether that ended the game.

The board only changes in two places:
* `apply_move()`, for moves that passed every check
* the safety probe, which tries a move and always puts the pieces back (see `Board.hypothetical_move()`)
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Self

from src.chess.board import Board
from src.chess.castling import CASTLING_RULES, CastlingDirection, castling_rule_for_king_move
from src.chess.draws import is_fifty_move_draw, is_insufficient_material
from src.chess.events import MoveResult, MoveType
from src.chess.feed import BoardSnapshot, LatestValueFeed
from src.chess.fen import (
    STARTING_FEN,
    FENState,
    apply_castling_rights,
    encode_fen,
    last_move_from_en_passant,
)
from src.chess.moves import (
    CheckState,
    LastMove,
    Move,
    candidate_destinations,
    find_attacked_king,
)
from src.chess.outcome import GameOutcome
from src.chess.pieces import (
    PROMOTION_OPTIONS,
    Color,
    Piece,
    PieceType,
    forward,
    promotion_rank,
)
from src.chess.position import RepetitionLedger
from src.chess.square import Square
from src.core.exceptions import GameStateError, IllegalMoveError
from src.core.models import GameModel
from src.core.shared_types import Status

logger = logging.getLogger(__name__)

# origin square --> legal destinations of the piece standing there
SafeMoveIndex = dict[Square, list[Square]]


@dataclass
class CaptureTally:
    """Pieces taken off the board so far, and the material balance (positive: White is ahead)."""

    white_captured: list[PieceType] = field(default_factory=list)
    black_captured: list[PieceType] = field(default_factory=list)
    balance: int = 0

    def record(self, capturing_color: Color, captured: Piece) -> None:
        if capturing_color == Color.WHITE:
            self.black_captured.append(captured.type)
            self.balance += captured.points
        else:
            self.white_captured.append(captured.type)
            self.balance -= captured.points


@dataclass(eq=False)
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    active_color: Color = Color.WHITE
    last_move: Optional[LastMove] = None
    half_move_clock: int = 0
    full_move_counter: int = 1
    snapshot_feed: LatestValueFeed[BoardSnapshot] = field(default_factory=LatestValueFeed)
    event_feed: LatestValueFeed[MoveResult] = field(default_factory=LatestValueFeed)

    # derived from the fields above, kept up to date by every committed move
    check_state: CheckState = field(init=False, default_factory=CheckState)
    safe_moves: SafeMoveIndex = field(init=False, default_factory=dict)
    outcome: Optional[GameOutcome] = field(init=False, default=None)
    captures: CaptureTally = field(init=False, default_factory=CaptureTally)
    ledger: RepetitionLedger = field(init=False, default_factory=RepetitionLedger)
    moves: list[Move] = field(init=False, default_factory=list)
    fen: str = field(init=False, default="")
    fen_history: list[str] = field(init=False, default_factory=list)
    history: list[BoardSnapshot] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        self._start_position()

    # -- CREATION LOGIC --
    @classmethod
    def new_game(cls) -> Self:
        return cls.from_fen(STARTING_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        """Set up the game in the position described by the FEN string."""
        state = FENState.from_fen(fen)
        board = Board.from_fen(state.position)
        apply_castling_rights(board, state.castling_rights)
        last_move = last_move_from_en_passant(
            board, state.en_passant_square, state.color_to_move
        )
        return cls(
            board=board,
            active_color=state.color_to_move,
            last_move=last_move,
            half_move_clock=state.half_move_clock,
            full_move_counter=state.num_turns,
        )

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """
        Define how to construct a Game from the information the Service layer actually has.

        The moves get replayed from the first recorded position, which restores everything a FEN string does not hold
        (captured pieces, repetitions, which pieces moved).
        """
        try:
            status = Status(model.status)
        except ValueError as e:
            raise GameStateError(
                f"Invalid status code: {model.status!r}. \nPick one from {','.join(status.value for status in Status)}"
            ) from e

        starting_fen = model.history_fen[0] if model.history_fen else model.current_fen
        game = cls.from_fen(starting_fen)
        for move_uci in model.moves_uci:
            move = Move.from_uci(move_uci)
            try:
                result = game.apply_move(move.from_square, move.to_square, move.promote_to)
            except IllegalMoveError as e:
                raise GameStateError(f"Recorded move {move_uci} is not legal") from e
            if result is None:
                raise GameStateError(f"Recorded move {move_uci} cannot be replayed")

        if status == Status.RESIGNATION:
            if model.winner is None:
                raise GameStateError("A resigned game must have a winner")
            game.resign(Color(model.winner).opponent)

        if game.fen != model.current_fen or game.status != status:
            raise GameStateError(
                f"Replaying the moves does not lead to the stored state: {model.current_fen} ({model.status})"
            )
        return game

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            current_fen=self.fen,
            history_fen=list(self.fen_history),
            moves_uci=[move.to_uci() for move in self.moves],
            status=self.status.value,
            winner=self.winner.value if self.winner else None,
        )

    # -- STATE --
    @property
    def status(self) -> Status:
        return self.outcome.status if self.outcome else Status.IN_PROGRESS

    @property
    def is_game_over(self) -> bool:
        return self.outcome is not None

    @property
    def winner(self) -> Optional[Color]:
        return self.outcome.winner if self.outcome else None

    @property
    def score(self) -> int:
        return self.captures.balance

    def legal_moves(self) -> SafeMoveIndex:
        """Copy of the legal moves of the player to move (nothing, once the game is over)."""
        if self.is_game_over:
            return {}
        return {square: list(destinations) for square, destinations in self.safe_moves.items()}

    def history_index(self, index: int) -> int:
        """Position in the history the index refers to (0: starting position, -1: latest)."""
        if index == -1:
            index = len(self.history) - 1
        if not 0 <= index < len(self.history):
            raise GameStateError(
                f"No position with index {index}. Game has {len(self.history)} recorded positions."
            )
        return index

    def history_snapshot(self, index: int) -> BoardSnapshot:
        """
        Look up the board as it was after the index-th move (0: starting position, -1: latest).
        Only meant for display: the game itself is not affected.
        """
        return self.history[self.history_index(index)]

    # -- LIFECYCLE --
    def restart(self) -> None:
        """Back to the standard starting position. Subscribers of the feeds stay subscribed."""
        logger.info("Restarting game")
        state = FENState.starting_position()
        self.board = Board.from_fen(state.position)
        self.active_color = state.color_to_move
        self.last_move = None
        self.half_move_clock = state.half_move_clock
        self.full_move_counter = state.num_turns
        self.captures = CaptureTally()
        self.ledger.clear()
        self.moves = []
        self._start_position()

    def resign(self, color: Color) -> None:
        """The player with the given color gives up. The board stays as it is."""
        if self.is_game_over:
            logger.debug("Ignoring resignation of %s: game already over", color)
            return
        self.outcome = GameOutcome.resignation(color)
        logger.info("Game over: %s", self.outcome.message)

    # -- MAKING A MOVE --
    def apply_move(
        self,
        from_square: Square,
        to_square: Square,
        promotion: Optional[PieceType] = None,
    ) -> Optional[MoveResult]:
        """
        Attempt to make a move
        -----

        Nothing happens (None is returned) when the request cannot apply to the current state:
        game over, square off the board, no piece of the player to move on from_square.

        An IllegalMoveError is raised when the piece may be selected, but the destination is not one of its legal moves.

        After the pieces moved:
        1. the turn passes to the opponent, whose check state and legal moves get recalculated
        2. counters, FEN and repetition ledger get updated
        3. game end conditions get evaluated
        4. the new snapshot and the move result get published
        """
        if self.is_game_over:
            logger.debug("Ignoring move %s%s: game is over", from_square, to_square)
            return None

        if not (from_square.is_within_bounds() and to_square.is_within_bounds()):
            logger.debug("Ignoring move: squares %r, %r off the board", from_square, to_square)
            return None

        piece = self.board.piece(from_square)
        if piece is None or piece.color != self.active_color:
            logger.debug("Ignoring move %s%s: no piece to move", from_square, to_square)
            return None

        if to_square not in self.safe_moves.get(from_square, []):
            raise IllegalMoveError(f"Move not allowed: {from_square}{to_square}")

        mover_color = self.active_color
        events: list[MoveType] = []

        if piece.type == PieceType.KING and not piece.has_moved:
            if self._move_castling_rook(from_square, to_square):
                events.append(MoveType.CASTLING)

        captured = self.board.piece(to_square)
        if self._is_en_passant_capture(piece, from_square, to_square):
            assert self.last_move is not None
            captured = self.board.remove_piece(self.last_move.to_square)

        if captured is not None:
            self.captures.record(mover_color, captured)
            events.append(MoveType.CAPTURE)

        if piece.type == PieceType.PAWN or captured is not None:
            self.half_move_clock = 0
        else:
            self.half_move_clock += 1

        piece.has_moved = True
        self.board.move_piece(from_square, to_square)

        promoted_to = self._promote_if_needed(piece, to_square, promotion)
        if promoted_to is not None:
            events.append(MoveType.PROMOTION)

        self.last_move = LastMove(piece.type, mover_color, from_square, to_square, promoted_to)
        move = Move(from_square, to_square, promoted_to)
        self.moves.append(move)

        # the turn passes to the opponent
        self.active_color = mover_color.opponent
        if self._is_attacked(self.active_color, record_result=True):
            events.append(MoveType.CHECK)
        self.safe_moves = self.compute_legal_moves()
        if self.active_color == Color.WHITE:
            self.full_move_counter += 1

        self.fen = self._encode()
        self.fen_history.append(self.fen)
        self.ledger.record(self.fen)

        self.outcome = self._evaluate_outcome()
        if self.outcome is not None:
            logger.info("Game over: %s", self.outcome.message)
            if self.outcome.status == Status.CHECKMATE:
                events.append(MoveType.CHECKMATE)

        if not {MoveType.CAPTURE, MoveType.CASTLING, MoveType.PROMOTION} & set(events):
            events.insert(0, MoveType.BASIC_MOVE)

        snapshot = self._snapshot()
        self.history.append(snapshot)
        self.snapshot_feed.publish(snapshot)

        result = MoveResult(
            move=move,
            piece_type=piece.type,
            color=mover_color,
            captured=captured.type if captured else None,
            events=tuple(events),
            outcome=self.outcome,
        )
        logger.debug("Committed %s (%s)", move.to_uci(), ", ".join(e.name for e in events))
        self.event_feed.publish(result)
        return result

    # -- LEGAL MOVES --
    def compute_legal_moves(self) -> SafeMoveIndex:
        """
        Legal moves for the player with the 'active_color' pieces
        ----

        **Combines the following**

        1. generate candidate destinations, using the basic movement rules for all pieces
        2. remove illegal options --> a move that would put you in check or you are in check and the move does not get you out of it.
        3. add castling moves (the king moves two squares)
        4. add en passant moves
        """
        safe_moves: SafeMoveIndex = {}
        for square, piece in self.board.occupied_squares():
            if piece.color != self.active_color:
                continue

            destinations = [
                to_square
                for to_square in candidate_destinations(square, self.board)
                if self.is_safe_after_move(square, to_square)
            ]

            match piece.type:
                case PieceType.KING:
                    for king_side in (True, False):
                        if self.can_castle(piece, king_side):
                            rule = CASTLING_RULES[CastlingDirection.of(piece.color, king_side)]
                            destinations.append(rule.king_to)
                case PieceType.PAWN:
                    if self.can_en_passant(piece, square):
                        destinations.append(self._en_passant_destination(piece, square))
                case _:
                    pass

            if destinations:
                safe_moves[square] = destinations
        return safe_moves

    def is_safe_after_move(self, from_square: Square, to_square: Square) -> bool:
        """
        Would the mover's own king be safe after this move?

        Tries the move on the board itself and asks the attack oracle. The board is always restored afterwards.
        """
        piece = self.board.piece(from_square)
        if piece is None:
            return False

        target = self.board.piece(to_square)
        if target is not None and target.color == piece.color:
            return False

        with self.board.hypothetical_move(from_square, to_square):
            return not self._is_attacked(piece.color, record_result=False)

    def can_castle(self, king: Piece, king_side: bool) -> bool:
        """
        You are allowed to castle if
        ---

        * Neither the king nor the rook of that side have moved.
        * You are not currently in check (you cannot castle out of check).
        * All squares in between the king and the rook are empty.
        * The king does not pass through, or land on, an attacked square.
        """
        if king.has_moved:
            return False

        if self.check_state.in_check:
            return False

        rule = CASTLING_RULES[CastlingDirection.of(king.color, king_side)]
        if self.board.piece(rule.king_from) is not king:
            return False

        rook = self.board.piece(rule.rook_from)
        if rook is None or rook.type != PieceType.ROOK or rook.color != king.color or rook.has_moved:
            return False

        if self.board.is_any_occupied(rule.must_be_empty()):
            return False

        return self.is_safe_after_move(
            rule.king_from, rule.king_transit
        ) and self.is_safe_after_move(rule.king_from, rule.king_to)

    def can_en_passant(self, pawn: Piece, square: Square) -> bool:
        """
        The pawn on the given square may take en passant if the opponent's last move was a double pawn push,
        ending right next to it. Checked with the opponent's pawn off the board (it gets taken), and put back afterwards.
        """
        last_move = self.last_move
        if last_move is None or not last_move.is_double_pawn_push():
            return False

        if pawn.type != PieceType.PAWN or pawn.color != self.active_color:
            return False

        if square.rank != last_move.to_square.rank or abs(square.file - last_move.to_square.file) != 1:
            return False

        destination = self._en_passant_destination(pawn, square)
        with self.board.lifted(last_move.to_square):
            return self.is_safe_after_move(square, destination)

    # -- PRIVATE HELPERS ---
    def _start_position(self) -> None:
        """(Re)build everything that derives from the board and the player to move."""
        self._is_attacked(self.active_color, record_result=True)
        self.safe_moves = self.compute_legal_moves()
        self.fen = self._encode()
        self.fen_history = [self.fen]
        self.ledger.record(self.fen)
        self.outcome = self._evaluate_outcome()

        snapshot = self._snapshot()
        self.history = [snapshot]
        self.snapshot_feed.publish(snapshot)

    def _is_attacked(self, color: Color, record_result: bool) -> bool:
        """
        Attack/check oracle. Is the king of the given color attacked?

        With record_result the answer is stored as the current check state.
        Must be False for anything hypothetical (the position being looked at is not the real one).
        """
        king_square = find_attacked_king(self.board, color)
        if record_result:
            self.check_state = CheckState(king_square is not None, king_square)
        return king_square is not None

    def _encode(self) -> str:
        return encode_fen(
            self.board,
            self.active_color,
            self.last_move,
            self.half_move_clock,
            self.full_move_counter,
        )

    def _snapshot(self) -> BoardSnapshot:
        return BoardSnapshot.capture(
            self.board, self.fen, self.active_color, self.check_state, self.outcome
        )

    def _evaluate_outcome(self) -> Optional[GameOutcome]:
        """
        Checks to see if game has ended. First condition that holds decides:

        1. insufficient material
        2. no legal moves: checkmate if in check, stalemate otherwise
        3. threefold repetition
        4. fifty-move rule
        """
        if is_insufficient_material(self.board):
            return GameOutcome.draw(Status.DRAW_INSUFFICIENT_MATERIAL)

        if not self.safe_moves:
            if self.check_state.in_check:
                return GameOutcome.checkmate(self.active_color.opponent)
            return GameOutcome.draw(Status.STALEMATE)

        if self.ledger.is_repeated():
            return GameOutcome.draw(Status.DRAW_REPETITION)

        if is_fifty_move_draw(self.half_move_clock):
            return GameOutcome.draw(Status.DRAW_FIFTY_MOVE_RULE)

        return None

    # --- CASTLING RULE HELPERS ---
    def _move_castling_rook(self, from_square: Square, to_square: Square) -> bool:
        """If the king move is a castling move, the rook jumps over the king. (legality has been checked already)"""
        rule = castling_rule_for_king_move(from_square, to_square)
        if rule is None:
            return False
        rook = self.board.piece(rule.rook_from)
        self.board.move_piece(rule.rook_from, rule.rook_to)
        rook.has_moved = True
        return True

    # --- EN PASSANT RULE HELPERS ----
    def _en_passant_destination(self, pawn: Piece, square: Square) -> Square:
        """Diagonally forward, onto the file of the pawn that just made a double step"""
        assert self.last_move is not None
        return Square(square.rank + forward(pawn.color), self.last_move.to_square.file)

    def _is_en_passant_capture(self, piece: Piece, from_square: Square, to_square: Square) -> bool:
        """A pawn moving diagonally onto an empty square, behind the pawn that just made a double step"""
        last_move = self.last_move
        return (
            piece.type == PieceType.PAWN
            and last_move is not None
            and last_move.is_double_pawn_push()
            and from_square.rank == last_move.to_square.rank
            and to_square.file == last_move.to_square.file
            and from_square.file != to_square.file
            and self.board.piece(to_square) is None
        )

    # -- PROMOTION RULE HELPERS ---
    def _promote_if_needed(
        self, piece: Piece, square: Square, choice: Optional[PieceType]
    ) -> Optional[PieceType]:
        """A pawn reaching the last rank gets replaced by a new piece of the chosen type (a queen by default)."""
        if piece.type != PieceType.PAWN or square.rank != promotion_rank(piece.color):
            if choice is not None:
                logger.debug("Ignoring promotion choice %s: not a promotion move", choice)
            return None

        promote_to = choice
        if promote_to not in PROMOTION_OPTIONS:
            if choice is not None:
                logger.warning("Cannot promote to %s, promoting to a queen instead", choice)
            promote_to = PieceType.QUEEN

        self.board.place_piece(Piece(promote_to, piece.color, has_moved=True), square)
        return promote_to
