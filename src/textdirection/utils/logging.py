"""Logging setup for applications embedding the text direction engine."""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

__all__ = ["get_log_path", "get_logger", "setup_logging"]

_PACKAGE_LOGGER = "textdirection"
_DEFAULT_LOG_DIR = Path.home() / ".textdirection" / "logs"
_LEVEL_ENV = "TEXTDIRECTION_LOG_LEVEL"
_DIR_ENV = "TEXTDIRECTION_LOG_DIR"
_NOISY_LOGGERS: tuple[str, ...] = ("markdown_it", "jsonschema")
_LOG_PATH: Path | None = None


def setup_logging(
    level: int | str | None = None,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    to_file: bool = True,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> Path | None:
    """Attach handlers to the ``textdirection`` logger.

    The level comes from ``level``, then ``TEXTDIRECTION_LOG_LEVEL``, then
    ``INFO``. Calling it again replaces the handlers it installed before.
    Returns the log file path when file logging is enabled.
    """

    global _LOG_PATH
    resolved_level = _resolve_level(level)
    logger = logging.getLogger(_PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, "_textdirection", False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handlers: list[logging.Handler] = []
    log_path: Path | None = None
    if to_file:
        target_dir = Path(log_dir or os.environ.get(_DIR_ENV) or _DEFAULT_LOG_DIR).expanduser()
        target_dir.mkdir(parents=True, exist_ok=True)
        log_path = target_dir / "textdirection.log"
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
        )
    if console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setLevel(resolved_level)
        handler.setFormatter(formatter)
        handler._textdirection = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.setLevel(resolved_level)

    quiet_level = max(logging.WARNING, resolved_level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    _LOG_PATH = log_path
    return log_path


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the package logger."""

    if name == _PACKAGE_LOGGER or name.startswith(f"{_PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_PACKAGE_LOGGER}.{name}")


def get_log_path() -> Path | None:
    return _LOG_PATH


def _resolve_level(level: int | str | None) -> int:
    raw = level if level is not None else os.environ.get(_LEVEL_ENV, "INFO")
    if isinstance(raw, int):
        return raw
    resolved = logging.getLevelName(raw.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO
