"""
Structured logging for the psychometric assessment engine.

Every record emitted under the ``psychometric`` logger can carry the
assessment context it was produced in (owner, assessment, section,
operation). The context lives in a ``ContextVar`` so concurrent submissions
handled on different request threads never see each other's identifiers.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
import time
from collections.abc import Callable
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from types import MappingProxyType, TracebackType
from typing import Any, ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")

ROOT_LOGGER = "psychometric"
CONTEXT_FIELDS = ("owner_id", "assessment_id", "section", "request_id", "operation")

_EMPTY: MappingProxyType[str, Any] = MappingProxyType({})
_log_context: ContextVar[MappingProxyType[str, Any]] = ContextVar(
    "psychometric_log_context", default=_EMPTY
)

# level, log file, structured, console
ENVIRONMENT_PROFILES: dict[str, tuple[str, str | None, bool, bool]] = {
    "production": ("INFO", "./logs/production.log", True, False),
    "test": ("WARNING", None, False, False),
    "development": ("DEBUG", "./logs/development.log", False, True),
}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with the assessment context inlined."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        entry.update(
            {name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)}
        )

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(entry, ensure_ascii=False, default=str)


class ContextFilter(logging.Filter):
    """Copy the current assessment context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def current_context() -> dict[str, Any]:
    return dict(_log_context.get())


def set_context(**kwargs: Any) -> None:
    """
    Add fields to the logging context of the current thread or task.

    Example:
        >>> set_context(owner_id="user-1", assessment_id=12)
    """
    _log_context.set(MappingProxyType({**_log_context.get(), **kwargs}))


def clear_context() -> None:
    _log_context.set(_EMPTY)


class LogContext:
    """Scoped logging context; fields set inside the block are dropped on exit."""

    def __init__(self, **kwargs: Any):
        self.context = kwargs
        self._token: Token[MappingProxyType[str, Any]] | None = None

    def __enter__(self) -> LogContext:
        self._token = _log_context.set(MappingProxyType({**_log_context.get(), **self.context}))
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    structured: bool = True,
    enable_console: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """
    Configure the ``psychometric`` logger tree through ``dictConfig``.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional rotating log file; always written as JSON
        structured: JSON console output instead of plain text
        enable_console: Write to stdout
        max_bytes: Rotation size of the log file
        backup_count: Number of rotated files to keep

    Example:
        >>> setup_logging(level="DEBUG", log_file="./logs/engine.log")
    """
    handlers: dict[str, dict[str, Any]] = {}

    if enable_console:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "structured" if structured else "standard",
            "filters": ["context"],
            "stream": "ext://sys.stdout",
        }

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "structured",
            "filters": ["context"],
            "filename": log_file,
            "maxBytes": max_bytes,
            "backupCount": backup_count,
            "encoding": "utf-8",
        }

    if not handlers:
        # Keep records from reaching the last-resort stderr handler
        handlers["null"] = {"class": "logging.NullHandler"}

    names = list(handlers)

    def quiet(logger_level: str) -> dict[str, Any]:
        return {"level": logger_level, "handlers": names, "propagate": False}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {"()": StructuredFormatter},
                "standard": {
                    "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "filters": {"context": {"()": ContextFilter}},
            "handlers": handlers,
            "loggers": {
                ROOT_LOGGER: quiet(level),
                "sqlalchemy.engine": quiet("WARNING"),
                "uvicorn.access": quiet("WARNING"),
            },
            "root": {"level": level, "handlers": names},
        }
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger namespaced under the package root logger.

    Example:
        >>> get_logger("engine").name
        'psychometric.engine'
    """
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def log_operation(
    operation: str, logger: logging.Logger | None = None
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Log start, completion time and failure of an application operation.

    Example:
        >>> @log_operation("submit_section")
        ... def submit(engine, owner_id, section, responses):
        ...     pass
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            op_logger = logger or get_logger(func.__module__)
            with LogContext(operation=operation):
                op_logger.info("Starting %s", operation)
                start = time.perf_counter()
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    op_logger.error(
                        "Failed %s after %.3fs: %s",
                        operation,
                        time.perf_counter() - start,
                        e,
                        exc_info=True,
                    )
                    raise
                op_logger.info(
                    "Completed %s successfully in %.3fs", operation, time.perf_counter() - start
                )
                return result

        return wrapper

    return decorator


def log_database_operation(operation: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Debug-level timing for repository calls.

    Example:
        >>> @log_database_operation("session.create")
        ... def create(self, **fields):
        ...     pass
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            db_logger = get_logger("database")
            with LogContext(operation=f"db_{operation}"):
                start = time.perf_counter()
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    db_logger.error(
                        "Database operation %s failed after %.3fs: %s",
                        operation,
                        time.perf_counter() - start,
                        e,
                        exc_info=True,
                    )
                    raise
                db_logger.debug(
                    "Database operation %s completed in %.3fs",
                    operation,
                    time.perf_counter() - start,
                )
                return result

        return wrapper

    return decorator


def configure_for_environment(environment: str | None = None) -> str:
    """
    Apply the logging profile of an environment (``ENVIRONMENT`` by default).

    Unknown names fall back to the development profile. Returns the profile used.
    """
    env = (environment or os.getenv("ENVIRONMENT", "development")).lower()
    if env not in ENVIRONMENT_PROFILES:
        env = "development"
    level, log_file, structured, console = ENVIRONMENT_PROFILES[env]
    setup_logging(level=level, log_file=log_file, structured=structured, enable_console=console)
    get_logger(__name__).info("Logging configured for %s environment", env)
    return env


# Initialize logging when module is imported
if not logging.getLogger().handlers:
    configure_for_environment()
