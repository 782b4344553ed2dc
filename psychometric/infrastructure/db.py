"""
Database connection and session management with centralized configuration.

This module provides database connectivity using the centralized configuration
system, with proper error handling and logging integration.
"""

from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .config import DatabaseConfig, get_settings
from .exceptions import ConfigurationError, ConnectionError
from .logging import get_logger
from .models import Base

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_database_engine(config: DatabaseConfig | None = None) -> Engine:
    """
    Create SQLAlchemy engine with proper configuration.

    Args:
        config: Database configuration (uses default if None)

    Returns:
        Configured SQLAlchemy engine

    Raises:
        ConfigurationError: If the URL or dialect is not usable
        ConnectionError: If the engine cannot be created

    Example:
        >>> engine = create_database_engine(DatabaseConfig(sqlite_path=":memory:"))
    """
    if config is None:
        config = get_settings().database

    connection_url = config.get_connection_url()
    engine_options = config.get_engine_options()
    if config.is_memory:
        # Every connection must see the same in-memory database
        engine_options["poolclass"] = StaticPool

    logger.info("Creating database engine for %s backend", config.backend)
    logger.debug("Connection URL: %s@***", connection_url.split("@")[0])  # Hide credentials

    try:
        engine = create_engine(connection_url, **engine_options)
    except ArgumentError as e:
        raise ConfigurationError(f"Invalid database URL: {e}", config_key="DB_URL") from e
    except SQLAlchemyError as e:
        logger.error("Failed to create database engine: %s", e)
        raise ConnectionError(str(e)) from e

    if config.is_sqlite:
        _enable_sqlite_foreign_keys(engine)
    logger.info("Database engine created successfully")
    return engine


def create_session_factory(engine: Engine | None = None) -> sessionmaker:
    """
    Create SQLAlchemy session factory.

    Example:
        >>> SessionLocal = create_session_factory()
        >>> with SessionLocal() as session:
        ...     pass
    """
    if engine is None:
        engine = create_database_engine()

    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def make_engine_and_session(
    config: DatabaseConfig | None = None,
) -> tuple[Engine, sessionmaker]:
    """
    Create engine and session factory in one call.

    Example:
        >>> engine, SessionLocal = make_engine_and_session()
    """
    engine = create_database_engine(config)
    return engine, create_session_factory(engine)


def initialise_database(engine: Engine) -> None:
    """
    Create all tables that do not exist yet.

    Used for development databases and tests; deployed databases are
    migrated with Alembic instead.
    """
    Base.metadata.create_all(engine)
    logger.info("Database schema initialised")


def get_database_url() -> str:
    """
    Get database connection URL from configuration.

    Example:
        >>> get_database_url()
        'sqlite:///./psychometric.db'
    """
    return get_settings().database.get_connection_url()


def is_database_configured() -> bool:
    """Check if database configuration produces a usable connection URL."""
    try:
        get_settings().database.get_connection_url()
        return True
    except ValueError as e:
        logger.warning("Database configuration invalid: %s", e)
        return False
