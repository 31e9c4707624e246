"""Logging configuration for the marketplace.

Records go through the standard library (console, a rotating main file and a
rotating error file); structlog renders them, as JSON in production and
staging and with the colored console renderer elsewhere. Request handlers bind
``request_id`` and ``path`` with :func:`add_context` so every line of a request
carries them.

Environment:
    ENV / ENVIRONMENT / PROTEAN_ENV   deployment environment, default development
    LOG_LEVEL                         overrides the environment's level
    LOG_DIR                           directory for log files, default ``logs``
    LOG_FORMAT                        ``json`` or ``console``, overrides the environment's renderer
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

LEVELS_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

JSON_ENVS = ("production", "staging")

# Chatty libraries kept at WARNING whatever the application level
QUIET_LOGGERS = ("protean", "asyncio", "uvicorn.access")

MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5


def current_env() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", LEVELS_BY_ENV.get(current_env(), "INFO")).upper()


def use_json_output() -> bool:
    fmt = (os.getenv("LOG_FORMAT") or "").lower()
    if fmt in ("json", "console"):
        return fmt == "json"
    return current_env() in JSON_ENVS


def _rotating_file(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def build_handlers(log_dir: str, log_file_prefix: str, level: str) -> list[logging.Handler]:
    """Console, ``<prefix>.log`` and ``<prefix>_error.log`` handlers."""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    return [
        console,
        _rotating_file(log_path / f"{log_file_prefix}.log", level),
        _rotating_file(log_path / f"{log_file_prefix}_error.log", logging.ERROR),
    ]


def setup_stdlib_logging(log_dir: str | None = None, log_file_prefix: str = "marketplace") -> None:
    level = get_log_level()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = build_handlers(log_dir or os.getenv("LOG_DIR", "logs"), log_file_prefix, level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_structlog() -> None:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if use_json_output():
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str | None = None, log_file_prefix: str = "marketplace") -> None:
    """Configure stdlib handlers and structlog for the application process."""
    setup_stdlib_logging(log_dir=log_dir, log_file_prefix=log_file_prefix)
    setup_structlog()


def add_context(**kwargs: Any) -> None:
    """Bind values that every following log line of this context carries."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
