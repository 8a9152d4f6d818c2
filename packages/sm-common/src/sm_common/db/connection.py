"""
Database connection management for speech-metric.

Provides SQLAlchemy engine and session factory creation, the
transactional ``session_scope`` used by every recognition operation,
schema creation, and a health check utility.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sm_common.config import get_settings
from sm_common.db.orm_models import Base
from sm_common.errors import PersistenceError

logger = structlog.get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(dsn: str | None = None, *, echo: bool | None = None) -> Engine:
    """Create a SQLAlchemy engine.

    In-memory SQLite URLs share a single connection so every session sees
    the same database.  SQLite connections enforce foreign keys.

    Args:
        dsn: Database connection string.  Falls back to ``Settings.db_uri``.
        echo: Echo SQL.  Falls back to ``Settings.db_echo``.

    Returns:
        A configured ``Engine`` instance.
    """
    settings = get_settings()
    url = dsn or settings.db_uri
    kwargs: dict[str, Any] = {"echo": settings.db_echo if echo is None else echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory bound to *engine*.

    Args:
        engine: The engine to bind sessions to.

    Returns:
        A ``sessionmaker`` that produces ``Session`` instances.
    """
    return sessionmaker(engine, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    """Create every speech-metric table that does not exist yet."""
    Base.metadata.create_all(engine)
    logger.info("db_schema_created", url=engine.url.render_as_string(hide_password=True))


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Yield a session wrapped in a single transaction.

    Commits when the block exits normally.  Any exception rolls the
    transaction back; ``SQLAlchemyError`` is re-raised as
    :class:`PersistenceError`, everything else propagates unchanged.
    The session is always closed.

    Yields:
        A ``Session`` instance.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("db_transaction_failed")
        raise PersistenceError(str(exc)) from exc
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()


def check_database_health(engine: Engine) -> bool:
    """Execute a lightweight query to verify database connectivity.

    Returns:
        ``True`` if the database responds, ``False`` otherwise.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        logger.warning("db_health_check_failed", exc_info=True)
        return False
