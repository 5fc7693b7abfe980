"""Database configuration and session management."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from mealplanner.config import get_settings


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


def create_db_engine(database_url: str | None = None) -> Engine:
    """Create a sync engine for the plan store."""
    settings = get_settings()
    url = database_url or settings.database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=False, connect_args=connect_args)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create plan tables if they do not exist."""
    # Register models on Base.metadata
    from mealplanner import models  # noqa: F401

    Base.metadata.create_all(engine)


# Default engine for the application; tests build their own
engine = create_db_engine()
SessionLocal = create_session_factory(engine)
