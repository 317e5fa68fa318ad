"""Structured logging setup shared by every bounded context.

stdlib logging carries the handlers (console plus rotating files) and
structlog renders on top of it: JSON in production/staging, a coloured
console everywhere else. Request-scoped fields bound with ``bind_request``
are merged into every line logged while the request is handled.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

_ROTATE_BYTES = 10 * 1024 * 1024
_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


def _environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", _LEVELS.get(_environment(), "INFO"))


def _rotating_file(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(filename=path, maxBytes=_ROTATE_BYTES, backupCount=5, encoding="utf-8")
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_dir: str, log_file_prefix: str) -> None:
    """Console plus ``<prefix>.log`` and ``<prefix>_error.log`` under ``log_dir``."""
    log_level = get_log_level()
    directory = Path(log_dir)
    directory.mkdir(exist_ok=True)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [
        console_handler,
        _rotating_file(directory / f"{log_file_prefix}.log", log_level),
        _rotating_file(directory / f"{log_file_prefix}_error.log", logging.ERROR),
    ]

    for noisy in ("asyncio", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def setup_structlog() -> None:
    """Configure structlog for structured logging."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
    ]

    if _environment() in ["production", "staging"]:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.RichTracebackFormatter(
                    show_locals=True,
                    max_frames=2,
                ),
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str = "logs", log_file_prefix: str = "shopfloor") -> None:
    setup_stdlib_logging(log_dir=log_dir, log_file_prefix=log_file_prefix)
    setup_structlog()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request(**fields) -> None:
    """Start a fresh log context for one request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**fields)
