"""Unit tests for /src/chess/moves.py"""

import pytest

from src.chess.board import Board
from src.chess.moves import (
    Color,
    LastMove,
    Move,
    PieceType,
    Square,
    candidate_destinations,
    find_attacked_king,
    pawn_destinations,
    raycasting_attack,
    raycasting_destinations,
    single_step_attack,
    single_step_destinations,
)
from src.chess.pieces import DIAGONALS, KNIGHT_JUMPS, STRAIGHTS

EMPTY_FEN = "/".join(["8"] * 8)


def squares(*names: str) -> set[Square]:
    return {Square.from_algebraic(name) for name in names}


def destinations_of(fen: str, square_name: str) -> set[Square]:
    board = Board.from_fen(fen)
    return set(candidate_destinations(Square.from_algebraic(square_name), board))


# -- MOVE CREATION, ENCODING/DECODING UCI NOTATION ---
@pytest.mark.parametrize(
    "uci_move, from_uci, to_uci",
    [
        ("e2e4", "e2", "e4"),
        ("a1a5", "a1", "a5"),
        ("g3a7", "g3", "a7"),
    ],
)
def test_move_uci_notation(uci_move: str, from_uci: str, to_uci: str) -> None:
    """UCI notation for the move should be <from_square><to_square>"""
    move = Move.from_uci(uci_move)
    assert move.from_square == Square.from_algebraic(from_uci)
    assert move.to_square == Square.from_algebraic(to_uci)
    assert move.promote_to is None
    assert move.to_uci() == uci_move


@pytest.mark.parametrize(
    "uci_move, piece_type",
    [("e7e8q", PieceType.QUEEN), ("b2a1n", PieceType.KNIGHT), ("h7h8r", PieceType.ROOK)],
)
def test_move_incl_promotion(uci_move: str, piece_type: PieceType) -> None:
    move = Move.from_uci(uci_move)
    assert move.promote_to == piece_type
    assert move.to_uci() == uci_move


def test_double_pawn_push() -> None:
    e2, e3, e4 = Square.from_algebraic("e2"), Square.from_algebraic("e3"), Square.from_algebraic("e4")
    assert LastMove(PieceType.PAWN, Color.WHITE, e2, e4).is_double_pawn_push()
    assert not LastMove(PieceType.PAWN, Color.WHITE, e2, e3).is_double_pawn_push()
    assert not LastMove(PieceType.ROOK, Color.WHITE, e2, e4).is_double_pawn_push()


# -- MOVEMENT RULES --
def test_raycasting_empty_board() -> None:
    """Rook in the corner sees its entire rank and file"""
    board = Board.from_fen("7R/8/8/8/8/8/8/8")
    destinations = raycasting_destinations(Square.from_algebraic("h8"), board, STRAIGHTS)
    assert len(destinations) == 14


def test_raycasting_blockers() -> None:
    """The enemy piece can be taken, the friendly piece ends the ray before its square"""
    board = Board.from_fen("8/8/8/8/3p4/8/8/B7")
    destinations = raycasting_destinations(Square.from_algebraic("a1"), board, DIAGONALS)
    assert set(destinations) == squares("b2", "c3", "d4")

    board = Board.from_fen("8/8/8/8/3P4/8/8/B7")
    destinations = raycasting_destinations(Square.from_algebraic("a1"), board, DIAGONALS)
    assert set(destinations) == squares("b2", "c3")


def test_single_step_in_corner() -> None:
    board = Board.from_fen("8/8/8/8/8/8/8/N7")
    destinations = single_step_destinations(Square.from_algebraic("a1"), board, KNIGHT_JUMPS)
    assert set(destinations) == squares("b3", "c2")


def test_single_step_blockers() -> None:
    board = Board.from_fen("8/8/8/8/8/1p6/2P5/N7")
    destinations = single_step_destinations(Square.from_algebraic("a1"), board, KNIGHT_JUMPS)
    assert set(destinations) == squares("b3")


@pytest.mark.parametrize(
    "fen, square_name, expected",
    [
        ("8/8/8/8/3Q4/8/8/8", "d4", 27),
        ("8/8/8/8/3R4/8/8/8", "d4", 14),
        ("8/8/8/8/3B4/8/8/8", "d4", 13),
        ("8/8/8/8/3N4/8/8/8", "d4", 8),
        ("8/8/8/8/3K4/8/8/8", "d4", 8),
    ],
)
def test_number_of_destinations_in_center(fen: str, square_name: str, expected: int) -> None:
    assert len(destinations_of(fen, square_name)) == expected


def test_king_is_never_a_destination() -> None:
    """Rook and queen line up with the enemy king: they stop before it."""
    assert Square.from_algebraic("e8") not in destinations_of("4k3/8/8/8/8/8/8/4R3", "e1")
    assert Square.from_algebraic("e8") not in destinations_of("4k3/8/8/8/Q7/8/8/4K3", "a4")
    assert Square.from_algebraic("e2") not in destinations_of("8/8/8/8/5n2/8/4K3/8", "f4")
    # pawn diagonal
    assert destinations_of("8/8/8/8/8/3k4/4P3/8", "e2") == squares("e3", "e4")


def test_white_pawn_push() -> None:
    assert destinations_of("8/8/8/8/8/8/4P3/8", "e2") == squares("e3", "e4")
    # moved pawn: a single step only
    assert destinations_of("8/8/8/8/8/4P3/8/8", "e3") == squares("e4")


def test_black_pawn_push() -> None:
    assert destinations_of("8/4p3/8/8/8/8/8/8", "e7") == squares("e6", "e5")


@pytest.mark.parametrize(
    "fen",
    [
        "8/8/8/8/8/4n3/4P3/8",  # blocked directly
        "8/8/8/8/4N3/8/4P3/8",  # double step blocked (friendly)
    ],
)
def test_blocked_pawn(fen: str) -> None:
    board = Board.from_fen(fen)
    destinations = set(pawn_destinations(Square.from_algebraic("e2"), board))
    assert Square.from_algebraic("e4") not in destinations


def test_pawn_takes_diagonally() -> None:
    assert destinations_of("8/8/8/8/8/3p1P2/4P3/8", "e2") == squares("e3", "e4", "d3")
    assert destinations_of("8/4p3/3P1p2/8/8/8/8/8", "e7") == squares("e6", "e5", "d6")


# -- ATTACKING RULES --
def test_raycasting_attack() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/4R3")
    rook = Square.from_algebraic("e1")
    assert raycasting_attack(rook, board, STRAIGHTS, Color.BLACK) == Square.from_algebraic("e8")
    # own king is not attacked
    assert raycasting_attack(rook, board, STRAIGHTS, Color.WHITE) is None
    # wrong directions
    assert raycasting_attack(rook, board, DIAGONALS, Color.BLACK) is None


def test_raycasting_attack_blocked() -> None:
    board = Board.from_fen("4k3/8/8/4p3/8/8/8/4R3")
    assert raycasting_attack(Square.from_algebraic("e1"), board, STRAIGHTS, Color.BLACK) is None


def test_single_step_attack() -> None:
    board = Board.from_fen("8/8/8/8/8/3k4/8/2N5")
    knight = Square.from_algebraic("c1")
    assert single_step_attack(knight, board, KNIGHT_JUMPS, Color.BLACK) == Square.from_algebraic("d3")


@pytest.mark.parametrize(
    "fen, color, in_check",
    [
        ("4k3/8/8/8/8/8/8/4K3", Color.WHITE, False),
        ("4k3/8/8/8/8/8/3p4/4K3", Color.WHITE, True),  # black pawn takes towards rank 1
        ("4k3/8/8/8/8/8/4p3/4K3", Color.WHITE, False),  # pawn in front does not attack
        ("4k3/3P4/8/8/8/8/8/4K3", Color.BLACK, True),
        ("4k3/8/8/8/8/8/8/4K2q", Color.WHITE, True),
        ("4k3/8/8/8/8/8/8/4KN1q", Color.WHITE, False),  # blocked
        ("4k3/8/8/8/8/5n2/8/4K3", Color.WHITE, True),
        ("4k3/8/8/8/8/8/8/b3K3", Color.WHITE, False),  # bishop is not on a diagonal with the king
        ("4k3/8/8/b7/8/8/8/4K3", Color.WHITE, True),
    ],
)
def test_king_in_check(fen: str, color: Color, in_check: bool) -> None:
    board = Board.from_fen(fen)
    assert (find_attacked_king(board, color) is not None) == in_check


def test_find_attacked_king_returns_king_square() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/R3K3")
    assert find_attacked_king(board, Color.BLACK) is None
    board = Board.from_fen("R3k3/8/8/8/8/8/8/4K3")
    assert find_attacked_king(board, Color.BLACK) == Square.from_algebraic("e8")
