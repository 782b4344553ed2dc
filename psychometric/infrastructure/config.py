"""
Settings for the psychometric assessment engine.

Each section is a pydantic-settings model read from its own environment
prefix (`APP_`, `DB_`, `LOG_`, `ASSESSMENT_`). `get_settings()` caches the
container; tests change the environment and call `reset_settings()`.
"""

from __future__ import annotations

import json
import os
from functools import cached_property, lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """
    Where sessions and section results are stored.

    SQLite by default, MySQL through pymysql, or any SQLAlchemy URL via `DB_URL`.

    Example:
        >>> DatabaseConfig(backend="sqlite", sqlite_path="./test.db").get_connection_url()
        'sqlite:///./test.db'
    """

    backend: Literal["sqlite", "mysql"] = Field("sqlite", description="Database backend type")
    url: str | None = Field(None, description="Full SQLAlchemy URL; wins over the backend fields")

    # SQLite settings
    sqlite_path: str | None = Field("./psychometric.db", description="SQLite database file path")
    sqlite_busy_timeout: float = Field(
        5.0, ge=0, description="Seconds a writer waits on a locked SQLite file"
    )

    # MySQL settings
    mysql_host: str | None = Field("localhost", description="MySQL host")
    mysql_port: int | None = Field(3306, ge=1, le=65535, description="MySQL port")
    mysql_user: str | None = Field("root", description="MySQL username")
    mysql_password: str | None = Field("", description="MySQL password")
    mysql_database: str | None = Field("psychometric", description="MySQL database name")
    mysql_charset: str = Field("utf8mb4", description="MySQL character set")

    # Connection settings
    pool_pre_ping: bool = Field(True, description="Enable connection pool pre-ping")
    pool_recycle: int = Field(3600, ge=60, description="Connection pool recycle time (seconds)")
    echo: bool = Field(False, description="Enable SQL query logging")

    model_config = SettingsConfigDict(env_prefix="DB_", case_sensitive=False)

    @field_validator("sqlite_path")
    @classmethod
    def validate_sqlite_path(cls, v):
        """Ensure a file-backed SQLite path carries a .db extension."""
        if v and v != ":memory:":
            path = Path(v)
            if not path.suffix:
                v = str(path.with_suffix(".db"))
        return v

    @model_validator(mode="after")
    def validate_mysql_config(self):
        """Validate MySQL configuration completeness."""
        if self.backend == "mysql":
            missing = [
                name
                for name in ("mysql_host", "mysql_user", "mysql_database")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"MySQL backend requires: {', '.join(missing)}")
        return self

    @property
    def is_sqlite(self) -> bool:
        if self.url:
            return self.url.startswith("sqlite")
        return self.backend == "sqlite"

    @property
    def is_memory(self) -> bool:
        if self.url:
            return self.url in ("sqlite://", "sqlite:///:memory:")
        return self.is_sqlite and self.sqlite_path == ":memory:"

    def get_connection_url(self) -> str:
        """
        Generate database connection URL.

        Raises:
            ValueError: If backend is unsupported
        """
        if self.url:
            return self.url
        if self.backend == "sqlite":
            return f"sqlite:///{self.sqlite_path}"
        elif self.backend == "mysql":
            password_part = f":{self.mysql_password}" if self.mysql_password else ""
            return (
                f"mysql+pymysql://{self.mysql_user}{password_part}@{self.mysql_host}:"
                f"{self.mysql_port}/{self.mysql_database}?charset={self.mysql_charset}"
            )
        raise ValueError(f"Unsupported database backend: {self.backend}")

    def get_engine_options(self) -> dict[str, Any]:
        """Get SQLAlchemy engine options."""
        options: dict[str, Any] = {
            "echo": self.echo,
            "pool_pre_ping": self.pool_pre_ping,
        }
        if self.is_sqlite:
            # Section submissions may arrive on any request thread
            connect_args: dict[str, Any] = {"check_same_thread": False}
            if not self.is_memory:
                connect_args["timeout"] = self.sqlite_busy_timeout
            options["connect_args"] = connect_args
        else:
            options["pool_recycle"] = self.pool_recycle
        return options


class LoggingConfig(BaseSettings):
    """
    Logging configuration settings.

    Example:
        >>> LoggingConfig(level="DEBUG", file_path=None).structured
        True
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Minimum logging level"
    )
    file_path: str | None = Field("./logs/psychometric.log", description="Log file path")
    max_bytes: int = Field(10 * 1024 * 1024, ge=1024, description="Max log file size in bytes")
    backup_count: int = Field(5, ge=1, description="Number of backup log files")
    structured: bool = Field(True, description="Use structured JSON logging")
    console_enabled: bool = Field(True, description="Enable console output")

    model_config = SettingsConfigDict(env_prefix="LOG_", case_sensitive=False)

    def as_setup_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``setup_logging``."""
        return {
            "level": self.level,
            "log_file": self.file_path,
            "structured": self.structured,
            "enable_console": self.console_enabled,
            "max_bytes": self.max_bytes,
            "backup_count": self.backup_count,
        }


class AssessmentConfig(BaseSettings):
    """
    Scoring and history tunables for the assessment engine.

    Example:
        >>> AssessmentConfig().skill_development_threshold
        3.5
    """

    history_limit: int = Field(10, ge=1, le=100, description="Default history page size")
    career_recommendation_limit: int = Field(
        10, ge=1, description="Cap on composite career recommendations"
    )
    career_lookup_limit: int = Field(15, ge=1, description="Cap on Holland Code career lookup")
    field_recommendation_limit: int = Field(
        8, ge=1, description="Cap on interest-section field recommendations"
    )
    skill_development_threshold: float = Field(
        3.5, ge=1, le=5, description="STEPS averages below this need development"
    )
    max_time_spent_minutes: float = Field(
        600, gt=0, description="Upper bound accepted for a section's time spent"
    )

    model_config = SettingsConfigDict(env_prefix="ASSESSMENT_", case_sensitive=False)


class ApplicationConfig(BaseSettings):
    """
    Main application configuration.

    Example:
        >>> get_settings().app.environment in {"development", "testing", "production"}
        True
    """

    environment: Literal["development", "testing", "production"] = Field(
        "development", description="Application environment"
    )
    debug: bool = Field(False, description="Enable debug mode")
    version: str = Field("0.1.0", description="Application version")
    title: str = Field("Psychometric Assessment Engine", description="API title")
    cors_origins: list[str] = Field(["*"], description="Allowed CORS origins")

    model_config = SettingsConfigDict(env_prefix="APP_", case_sensitive=False)

    @model_validator(mode="after")
    def debug_implies_development(self):
        """Ensure debug mode is only enabled outside production."""
        if self.debug and self.environment == "production":
            raise ValueError("Debug mode cannot be enabled in production")
        return self


# Default log level per environment when LOG_LEVEL is not set
_DEFAULT_LOG_LEVELS = {"development": "DEBUG", "testing": "WARNING", "production": "WARNING"}

# JSON section name -> environment variable prefix
_FILE_SECTION_PREFIXES = {"app": "APP", "database": "DB", "logging": "LOG", "assessment": "ASSESSMENT"}


class Settings:
    """
    All configuration sections, each read from the environment on first use.

    Example:
        >>> settings = get_settings()
        >>> settings.assessment.history_limit
        10
    """

    @cached_property
    def app(self) -> ApplicationConfig:
        return ApplicationConfig()

    @cached_property
    def database(self) -> DatabaseConfig:
        return DatabaseConfig()

    @cached_property
    def logging(self) -> LoggingConfig:
        if os.getenv("LOG_LEVEL"):
            return LoggingConfig()
        level = "DEBUG" if self.app.debug else _DEFAULT_LOG_LEVELS[self.app.environment]
        return LoggingConfig(level=level)

    @cached_property
    def assessment(self) -> AssessmentConfig:
        return AssessmentConfig()

    def is_development(self) -> bool:
        return self.app.environment == "development"

    def is_testing(self) -> bool:
        return self.app.environment == "testing"

    def summary(self) -> dict[str, Any]:
        """Non-secret view of the active configuration, for startup logs."""
        return {
            "environment": self.app.environment,
            "version": self.app.version,
            "database": "memory" if self.database.is_memory else self.database.backend,
            "log_level": self.logging.level,
            "assessment": self.assessment.model_dump(),
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def _export_to_environment(values: dict[str, Any]) -> None:
    for name, value in values.items():
        os.environ[name.upper()] = str(value)


def load_settings_from_file(file_path: str) -> Settings:
    """
    Load settings from a JSON file whose top-level objects are config sections.

    ``{"assessment": {"history_limit": 5}}`` sets ``ASSESSMENT_HISTORY_LIMIT``;
    the values are exported to the environment so later reloads keep them.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not JSON
    """
    path = Path(file_path)
    if path.suffix.lower() != ".json":
        raise ValueError(f"Unsupported configuration file format: {path.suffix}")
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    data = json.loads(path.read_text(encoding="utf-8"))
    for section, values in data.items():
        if not isinstance(values, dict):
            continue
        prefix = _FILE_SECTION_PREFIXES.get(section, section.upper())
        _export_to_environment({f"{prefix}_{key}": value for key, value in values.items()})

    return reload_settings()


def override_settings(**kwargs: Any) -> Settings:
    """
    Set configuration through environment variable names, then reload.

    Example:
        >>> override_settings(app_environment="testing", db_sqlite_path=":memory:").is_testing()
        True
    """
    _export_to_environment(kwargs)
    return reload_settings()


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()


def reset_settings() -> None:
    """Drop the cached settings; the next ``get_settings()`` rereads the environment."""
    get_settings.cache_clear()
