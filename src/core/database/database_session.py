"""
Standardized database session management for the playlist campaign engine.

This module provides a consistent, thread-safe approach to database session
management across the engine.
"""

import logging
import time
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DisconnectionError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.core.config import get_config

logger = logging.getLogger(__name__)

# Module-level globals for lazy initialization
_engine: Engine | None = None
_session_factory = None
_scoped_session = None

# Circuit breaker state
_last_health_check: float = 0.0
_is_healthy = True
_FAIL_FAST_SECONDS = 10


def _create_engine(connection_string: str) -> Engine:
    db_config = get_config().database

    if connection_string.startswith("sqlite"):
        # Single shared connection so in-memory databases survive across sessions
        return create_engine(
            connection_string,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )

    engine = create_engine(
        connection_string,
        pool_size=10,  # Base connections in pool
        max_overflow=20,  # Additional connections beyond pool_size
        pool_timeout=db_config.pool_timeout,
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_pre_ping=True,  # Test connections before use
        echo=False,
        connect_args={"connect_timeout": db_config.connect_timeout},
    )

    query_timeout = db_config.query_timeout

    @event.listens_for(engine, "connect")
    def set_statement_timeout(dbapi_conn, connection_record):
        """Set statement_timeout on new connections."""
        cursor = dbapi_conn.cursor()
        cursor.execute(f"SET statement_timeout = '{query_timeout * 1000}'")
        cursor.close()

    return engine


def get_engine() -> Engine:
    """Get or create the database engine (lazy initialization)."""
    global _engine, _session_factory, _scoped_session

    if _engine is None:
        connection_string = get_config().database.url
        if not connection_string:
            raise RuntimeError("DATABASE_URL is not configured")

        _engine = _create_engine(connection_string)
        logger.info(f"Database engine created for dialect {_engine.dialect.name}")

        _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)
        _scoped_session = scoped_session(_session_factory)

    return _engine


def reset_engine():
    """Reset engine for testing - closes existing connections and clears global state."""
    global _engine, _session_factory, _scoped_session

    if _scoped_session is not None:
        _scoped_session.remove()
        _scoped_session = None

    if _engine is not None:
        _engine.dispose()
        _engine = None

    _session_factory = None


def reset_health_state():
    """Reset circuit breaker health state for testing."""
    global _is_healthy, _last_health_check
    _is_healthy = True
    _last_health_check = 0


def get_scoped_session():
    """Get the scoped session factory (lazy initialization)."""
    get_engine()
    return _scoped_session


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions with automatic cleanup.

    Usage:
        with get_db_session() as session:
            stmt = select(Model).filter_by(...)
            result = session.scalars(stmt).first()
            session.add(new_object)
            session.commit()  # Explicit commit needed

    The session will automatically rollback on exception and always be properly
    closed. After a connection failure, new sessions fail fast for a short window
    instead of piling up on a dead database.
    """
    global _is_healthy, _last_health_check

    if not _is_healthy:
        time_since_check = time.time() - _last_health_check
        if time_since_check < _FAIL_FAST_SECONDS:
            raise RuntimeError("Database is unhealthy - failing fast to prevent cascading failures")

    scoped = get_scoped_session()
    session = scoped()
    try:
        yield session
    except (OperationalError, DisconnectionError) as e:
        logger.error(f"Database connection error: {e}")
        session.rollback()
        scoped.remove()
        _is_healthy = False
        _last_health_check = time.time()
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error: {e}")
        session.rollback()
        raise
    else:
        _is_healthy = True
    finally:
        session.close()
        scoped.remove()
