from __future__ import annotations

import pytest
from sqlalchemy import inspect, text

from psychometric.infrastructure import db
from psychometric.infrastructure.config import DatabaseConfig, override_settings, reset_settings
from psychometric.infrastructure.exceptions import ConfigurationError
from psychometric.infrastructure.models import AssessmentSessionORM


def memory_config() -> DatabaseConfig:
    return DatabaseConfig(backend="sqlite", sqlite_path=":memory:")


def test_memory_engine_shares_one_database() -> None:
    engine, SessionLocal = db.make_engine_and_session(memory_config())
    db.initialise_database(engine)

    with SessionLocal() as first, SessionLocal() as second:
        first.add(AssessmentSessionORM(owner_id="u"))
        first.commit()
        count = second.execute(text("SELECT COUNT(*) FROM assessment_sessions")).scalar()

    assert count == 1
    engine.dispose()


def test_initialise_creates_schema() -> None:
    engine = db.create_database_engine(memory_config())
    db.initialise_database(engine)

    tables = set(inspect(engine).get_table_names())

    assert {"assessment_sessions", "section_results"} <= tables
    engine.dispose()


def test_sqlite_enforces_foreign_keys() -> None:
    engine = db.create_database_engine(memory_config())

    with engine.connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
    engine.dispose()


def test_database_url_comes_from_settings(monkeypatch) -> None:
    monkeypatch.setenv("DB_URL", "")
    monkeypatch.delenv("DB_URL")
    monkeypatch.setenv("DB_SQLITE_PATH", "")
    override_settings(db_sqlite_path="./data/engine.db")
    try:
        assert db.get_database_url() == "sqlite:///./data/engine.db"
        assert db.is_database_configured() is True
    finally:
        reset_settings()


def test_unknown_dialect_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        db.create_database_engine(DatabaseConfig(url="nosuchdialect://somewhere/db"))

    assert excinfo.value.config_key == "DB_URL"
