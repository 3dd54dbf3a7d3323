"""Logging helpers for draftling.

The library only ever configures the ``draftling`` logger; the host
application's root logger and warning routing are left alone.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

__all__ = ["LIBRARY_LOGGER", "setup_logging", "get_logger", "get_log_path"]

LIBRARY_LOGGER = "draftling"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DEFAULT_LOG_DIR = Path.home() / ".draftling" / "logs"
_installed: list[logging.Handler] = []
_log_path: Path | None = None


def setup_logging(
    level: int | str = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    propagate: bool = False,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
    force: bool = False,
) -> Path:
    """Attach a rotating log file (and optionally stderr) to the ``draftling`` logger.

    Repeated calls return the existing log path unless ``force`` is set, in
    which case the previously installed handlers are replaced. With
    ``propagate`` left off, records stop at the library logger so hosts that
    log from the root do not see them twice.
    """

    global _log_path
    if _installed and not force and _log_path is not None:
        return _log_path

    numeric_level = _coerce_level(level)
    target_dir = _resolve_log_dir(log_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    log_path = target_dir / "draftling.log"

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers: list[logging.Handler] = [
        logging.handlers.RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    logger = logging.getLogger(LIBRARY_LOGGER)
    _remove_installed(logger)
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        _installed.append(handler)
    logger.setLevel(numeric_level)
    logger.propagate = propagate

    _log_path = log_path
    return log_path


def get_logger(name: str) -> logging.Logger:
    """Return a module-specific logger."""

    return logging.getLogger(name)


def get_log_path() -> Path | None:
    """Return the currently configured log file if available."""

    return _log_path


def _remove_installed(logger: logging.Logger) -> None:
    while _installed:
        handler = _installed.pop()
        logger.removeHandler(handler)
        handler.close()


def _coerce_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def _resolve_log_dir(log_dir: Path | str | None) -> Path:
    return Path(log_dir or os.environ.get("DRAFTLING_LOG_DIR") or _DEFAULT_LOG_DIR).expanduser()
