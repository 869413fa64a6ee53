"""SQLAlchemy engine wrapper with transaction and query helpers."""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional

from sqlalchemy import create_engine, event, func, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from src.services.schema import metadata
from src.utils.errors import DatabaseError, DuplicateEntryError, InputValidationError
from src.utils.settings import get_settings

logger = logging.getLogger(__name__)

# Global engine instance (singleton pattern)
_engine: Optional[Engine] = None

_DUPLICATE_MARKERS = ("duplicate entry", "duplicate key", "unique constraint")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: Optional[str] = None) -> Engine:
    """Create an engine for the given URL (defaults to configured database)."""
    settings = get_settings()
    url = url or settings.sqlalchemy_url()

    if url.startswith("sqlite"):
        engine_kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/") == "sqlite:":
            # One shared connection so every checkout sees the same in-memory database
            engine_kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **engine_kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=3600,
    )


def get_engine() -> Engine:
    """Get or create the engine singleton."""
    global _engine

    if _engine is None:
        _engine = build_engine()
        logger.info("Database engine initialized", extra={"dialect": _engine.dialect.name})

    return _engine


def set_engine(engine: Optional[Engine]) -> None:
    """Replace the engine singleton (tests, local server)."""
    global _engine
    _engine = engine


def close_engine() -> None:
    """Dispose pooled connections and drop the singleton."""
    global _engine
    if _engine is not None:
        _engine.dispose()
        _engine = None
        logger.info("Database engine closed")


def init_db(engine: Optional[Engine] = None) -> None:
    """Create any missing tables."""
    engine = engine or get_engine()
    metadata.create_all(engine)
    logger.info("Database tables verified/created")


def translate_error(error: SQLAlchemyError, action: str) -> Exception:
    """Map a store failure to the domain error the HTTP layer understands."""
    if isinstance(error, IntegrityError):
        detail = str(error.orig).lower()
        if any(marker in detail for marker in _DUPLICATE_MARKERS):
            if "email" in detail:
                return DuplicateEntryError("Email is already registered")
            return DuplicateEntryError(f"Failed to {action}: duplicate entry")
        return InputValidationError(f"Failed to {action}: referenced record does not exist")
    return DatabaseError(f"Failed to {action}: {error}")


@contextmanager
def transaction(engine: Optional[Engine] = None) -> Iterator[Connection]:
    """
    Borrow one pooled connection and run a transaction on it.

    Commits when the block exits normally; rolls back and re-raises otherwise.
    The connection goes back to the pool on every exit path.
    """
    engine = engine or get_engine()
    with engine.connect() as conn:
        trans = conn.begin()
        try:
            yield conn
        except Exception as e:
            trans.rollback()
            logger.warning(
                "Transaction rolled back",
                extra={"error": str(e), "type": type(e).__name__}
            )
            raise
        else:
            trans.commit()


def fetch_all(statement: Any, engine: Optional[Engine] = None) -> list[dict]:
    """Run a SELECT and return every row as a dict."""
    engine = engine or get_engine()
    with engine.connect() as conn:
        return [dict(row._mapping) for row in conn.execute(statement)]


def store_now(engine: Optional[Engine] = None) -> datetime:
    """Current time on the database clock, the same clock CURRENT_TIMESTAMP defaults use."""
    engine = engine or get_engine()
    with engine.connect() as conn:
        value = conn.execute(select(func.now())).scalar_one()
    return datetime.fromisoformat(value) if isinstance(value, str) else value


def fetch_one(statement: Any, engine: Optional[Engine] = None) -> Optional[dict]:
    """Run a SELECT and return the first row as a dict, or None."""
    engine = engine or get_engine()
    with engine.connect() as conn:
        row = conn.execute(statement).first()
        return dict(row._mapping) if row is not None else None


def execute(statement: Any, engine: Optional[Engine] = None) -> int:
    """Run a single write statement in its own transaction; return affected rows."""
    with transaction(engine) as conn:
        return conn.execute(statement).rowcount
