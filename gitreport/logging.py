"""Logging setup shared by the report CLI and the HTTP service."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "gitreport"
_CONSOLE_FORMAT = "[gitreport] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger nested under ``gitreport`` (``gitreport.<name>``)."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *,
    verbose: bool = False,
    level: str | None = None,
    log_file: Path | None = None,
) -> logging.Logger:
    """Attach console (and optional file) handlers to the ``gitreport`` logger.

    ``verbose`` forces DEBUG. Otherwise ``level`` (for example ``"warning"``
    from ``.gitreport.yml``) is honoured, defaulting to INFO.
    """
    resolved = _resolve_level(verbose, level)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(resolved)
    logger.propagate = False

    # Service reloads and repeated CLI calls would otherwise stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(resolved)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(resolved)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    return logger


def _resolve_level(verbose: bool, level: str | None) -> int:
    if verbose:
        return logging.DEBUG
    if level:
        candidate = logging.getLevelName(level.strip().upper())
        if isinstance(candidate, int):
            return candidate
    return logging.INFO


__all__ = ["configure_logging", "get_logger"]
