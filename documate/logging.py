"""Logging utilities for documate commands and the service."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

_LOGGER_NAME = "documate"
_CONSOLE_FORMAT = "[documate] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
# Client libraries that log every request at DEBUG/INFO.
_CHATTY_LIBRARIES = ("urllib3", "pymongo", "minio")


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the documate hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure the documate logger with console output and an optional file sink.

    ``stream`` defaults to stderr. Storage and HTTP client libraries are held at
    WARNING unless ``verbose`` is set, so a run's console shows pipeline
    progress rather than connection chatter.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    library_level = logging.DEBUG if verbose else logging.WARNING
    for library in _CHATTY_LIBRARIES:
        logging.getLogger(library).setLevel(library_level)

    return logger


__all__ = ["configure_logging", "get_logger"]
