"""Logging configuration for the Identity domain."""

import logging

from shared.logging import configure_logging as _configure_logging
from shared.logging import get_logger

__all__ = ["configure_logging", "get_logger"]


def configure_logging() -> None:
    _configure_logging(log_dir="logs", log_file_prefix="identity")

    logging.getLogger("protean").setLevel(logging.WARNING)
