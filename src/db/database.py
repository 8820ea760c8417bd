"""Generate database session"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import DATABASE_ECHO, DATABASE_URL
from src.db.schema import Base


def build_session_factory(
    database_url: str = DATABASE_URL, echo: bool = DATABASE_ECHO
) -> sessionmaker[Session]:
    """Connect to the database and ensure all tables are created"""
    engine = create_engine(database_url, echo=echo)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine)


def get_db(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
