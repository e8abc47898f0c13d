"""
Database connection management for Sportfolio.

Keeps one module-level engine and session factory, configured from the
`database` config section or a plain URL.
"""

import logging
from typing import Optional, Dict, Any, Union
from contextlib import contextmanager
from sqlalchemy import create_engine, Engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base
from ..exceptions import DatabaseNotConfiguredError

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def _create_engine(url: str, echo: bool = False) -> Engine:
    if url.startswith('sqlite'):
        # One shared connection so in-memory databases survive across sessions
        return create_engine(
            url, echo=echo,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=echo, pool_pre_ping=True, pool_size=5, max_overflow=10)


def configure_database(config: Union[Dict[str, Any], str]) -> None:
    """
    Configure the database connection.

    Args:
        config: Sportfolio configuration dictionary, or a database URL

    Raises:
        DatabaseNotConfiguredError: If no usable URL is available
    """
    global _engine, _session_factory

    if isinstance(config, str):
        db_config = {'url': config}
    else:
        db_config = config.get('database', {})

    url = db_config.get('url')
    if not url or url.startswith('${'):
        raise DatabaseNotConfiguredError(
            "No database URL configured. Set SPORTFOLIO_DATABASE_URL or database.url."
        )

    if _engine is not None:
        _engine.dispose()

    _engine = _create_engine(url, echo=bool(db_config.get('echo', False)))
    _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)
    logger.info(f"Database configured ({_engine.dialect.name})")

    if db_config.get('auto_init', False):
        init_database()


def reset_database() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def get_engine() -> Optional[Engine]:
    """Get the SQLAlchemy engine instance."""
    return _engine


def get_session_factory() -> Optional[sessionmaker]:
    """Get the session factory."""
    return _session_factory


@contextmanager
def get_session():
    """
    Context manager for database sessions.

    Commits on success, rolls back and re-raises on error.

    Usage:
        with get_session() as session:
            session.add(photo)
    """
    if not _session_factory:
        raise DatabaseNotConfiguredError("Database not configured. Call configure_database() first.")

    session = _session_factory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database session error: {e}")
        raise
    finally:
        session.close()


def init_database() -> None:
    """Create all tables."""
    if not _engine:
        raise DatabaseNotConfiguredError("Database engine not available")

    Base.metadata.create_all(_engine)
    logger.info("Database schema initialized successfully")


def drop_database() -> None:
    """
    Drop all database tables. USE WITH CAUTION!
    """
    if not _engine:
        raise DatabaseNotConfiguredError("Database engine not available")

    Base.metadata.drop_all(_engine)
    logger.warning("Database schema dropped successfully")


def is_database_available() -> bool:
    """
    Check if database is configured and reachable.

    Returns:
        bool: True if a trivial query succeeds
    """
    if not _engine:
        return False

    try:
        with _engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.debug(f"Database not reachable: {e}")
        return False


@event.listens_for(Engine, "connect")
def set_database_optimizations(dbapi_connection, connection_record):
    """Set per-connection timeouts on PostgreSQL."""
    if not hasattr(dbapi_connection, 'server_version'):
        return

    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("SET statement_timeout = '30s'")
        cursor.execute("SET idle_in_transaction_session_timeout = '60s'")
    except Exception as e:
        logger.debug(f"Could not set PostgreSQL session settings: {e}")
    finally:
        cursor.close()


@event.listens_for(Engine, "commit")
def do_commit(conn):
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Database transaction committed")


@event.listens_for(Engine, "rollback")
def do_rollback(conn):
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Database transaction rolled back")
