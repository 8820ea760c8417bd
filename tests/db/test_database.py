"""Unit tests for src/db/database.py"""

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from src.db.database import build_session_factory, get_db
from src.db.sql_repository import SQLGameRepository
from src.core.models import GameModel


def test_build_session_factory_creates_tables() -> None:
    session_factory = build_session_factory("sqlite:///:memory:", echo=False)
    session = session_factory()
    try:
        assert "games" in inspect(session.get_bind()).get_table_names()
    finally:
        session.close()


def test_get_db_yields_a_session_and_closes_it() -> None:
    session_factory = build_session_factory("sqlite:///:memory:", echo=False)
    generator = get_db(session_factory)
    session = next(generator)
    assert isinstance(session, Session)

    # session is usable for the repository
    repo = SQLGameRepository(session)
    model = GameModel(
        current_fen="8/8/8/8/8/8/8/K6k w - - 0 1",
        history_fen=["8/8/8/8/8/8/8/K6k w - - 0 1"],
        moves_uci=[],
        status="draw by insufficient material",
    )
    _, game_id = repo.create_game(model)
    assert repo.get_game(game_id) == model

    # exhausting the generator closes the session
    assert next(generator, None) is None
