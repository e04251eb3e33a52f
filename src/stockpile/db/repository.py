"""SQLite engines and sessions for the document database."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from stockpile.config import get_settings
from stockpile.db.models import Base

logger = logging.getLogger(__name__)

# One engine and session factory per resolved database file.
_engines: dict[Path, Engine] = {}
_session_factories: dict[Path, sessionmaker[Session]] = {}


def _resolve(database_path: Path | None) -> Path:
    return Path(database_path or get_settings().database_path).expanduser().resolve()


def get_engine(database_path: Path | None = None) -> Engine:
    """Return the engine for ``database_path`` (default: the configured database).

    The documents table is created on first use of each file.
    """

    db_path = _resolve(database_path)
    engine = _engines.get(db_path)
    if engine is not None:
        return engine

    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    try:
        Base.metadata.create_all(engine)
    except OperationalError as exc:
        if "already exists" not in str(exc).lower():
            raise
        logger.debug("Document schema already initialized: %s", exc)
    _engines[db_path] = engine
    _session_factories[db_path] = sessionmaker(
        bind=engine, autoflush=False, expire_on_commit=False
    )
    logger.debug("Opened document database at %s", db_path)
    return engine


def get_session(database_path: Path | None = None) -> Session:
    db_path = _resolve(database_path)
    if db_path not in _session_factories:
        get_engine(db_path)
    return _session_factories[db_path]()


@contextmanager
def session_scope(database_path: Path | None = None) -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on error."""

    session = get_session(database_path)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def reset_repository_state() -> None:
    """Dispose every cached engine (tests switch database files between runs)."""

    for engine in _engines.values():
        engine.dispose()
    _engines.clear()
    _session_factories.clear()


__all__ = ["get_engine", "get_session", "session_scope", "reset_repository_state"]
