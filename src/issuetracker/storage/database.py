"""Database engine, sessions and first-run schema creation"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..domain.errors import BackendError
from ..models import Base
from .config import MEMORY_LOCATION

logger = logging.getLogger(__name__)


def get_database_url(location: str) -> str:
    """SQLAlchemy URL for a SQLite file path or ``:memory:``"""
    if location == MEMORY_LOCATION:
        return "sqlite://"
    return f"sqlite:///{Path(location).expanduser()}"


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys = ON")
    finally:
        cursor.close()


class Database:
    """Owns one engine and its session factory.

    The in-memory variant keeps a single shared connection so every session
    sees the same schema and rows for the life of the process.
    """

    def __init__(self, location: str, echo: bool = False):
        self.location = location
        self.is_memory = location == MEMORY_LOCATION
        if not self.is_memory:
            Path(location).expanduser().parent.mkdir(parents=True, exist_ok=True)

        engine_kwargs = {
            "echo": echo,
            "connect_args": {"check_same_thread": False},  # SQLite specific
        }
        if self.is_memory:
            engine_kwargs["poolclass"] = StaticPool

        try:
            self.engine = create_engine(get_database_url(location), **engine_kwargs)
        except SQLAlchemyError as e:
            logger.error("Failed to open database at %s: %s", location, e)
            raise BackendError(f"Failed to open database at {location}: {e}") from e

        event.listen(self.engine, "connect", _enable_foreign_keys)
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )

    def create_schema(self) -> None:
        """Create tables and indexes if missing"""
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            logger.error("Failed to initialize database schema: %s", e)
            raise BackendError(f"Failed to initialize database schema: {e}") from e

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Session with automatic commit, rollback and cleanup.

        SQLAlchemy failures leave as ``BackendError``; tracker errors raised
        inside the block roll back and propagate unchanged.
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Database operation failed on %s: %s", self.location, e)
            raise BackendError(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()
