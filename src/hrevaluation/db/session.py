"""SQLAlchemy engine and session bootstrap."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from ..errors import PersistenceFailure


class Base(DeclarativeBase):
    pass


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine; SQLite URLs get foreign keys switched on."""
    engine = create_engine(url, echo=echo, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        from sqlalchemy import event

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):  # pragma: no cover - driver hook
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, class_=Session, autoflush=False, expire_on_commit=False)


@contextmanager
def session_scope(
    factory: sessionmaker[Session],
    *,
    abort: threading.Event | None = None,
) -> Iterator[Session]:
    """Transactional scope: commit on success, roll back on any exception.

    When ``abort`` is set by the time the block finishes, the transaction is
    rolled back instead of committed and ``PersistenceFailure`` is raised.

    Example:
        with session_scope(factory) as s:
            s.add(obj)
    """
    session = factory()
    try:
        yield session
        if abort is not None and abort.is_set():
            raise PersistenceFailure("transaction aborted before commit")
        session.commit()
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()


def create_schema(engine: Engine) -> None:
    """Create tables if needed. Models are imported lazily to avoid cycles."""
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


__all__ = [
    "Base",
    "build_engine",
    "build_session_factory",
    "create_schema",
    "session_scope",
]
