"""Logging setup for report runs."""

import logging
import logging.handlers
import sys
from contextlib import contextmanager
from pathlib import Path
from time import perf_counter
from typing import Optional

from .config import LogConfig


ROOT_LOGGER_NAME = "flight_eda"

_RESET = "\033[0m"
_LINE_STYLES = {
    logging.DEBUG: "\033[2m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}


class LevelColorFormatter(logging.Formatter):
    """Dims DEBUG lines and colors WARNING and above. INFO stays plain."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        style = _LINE_STYLES.get(record.levelno)
        return f"{style}{line}{_RESET}" if style else line


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def _build_handlers(config: LogConfig) -> list[logging.Handler]:
    handlers = []

    if config.console_enabled:
        colored = config.console_colors and sys.stderr.isatty()
        formatter_cls = LevelColorFormatter if colored else logging.Formatter
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(formatter_cls(config.format, config.date_format))
        handlers.append(console)

    if config.file_enabled:
        if not config.file_path:
            raise ValueError("file_enabled requires file_path")
        path = Path(config.file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=config.file_max_bytes,
            backupCount=config.file_backup_count,
            encoding="utf-8",
        )
        rotating.setFormatter(logging.Formatter(config.format, config.date_format))
        handlers.append(rotating)

    return handlers


def setup_logging(config: Optional[LogConfig] = None) -> logging.Logger:
    """
    Point the ``flight_eda`` logger at the handlers ``config`` describes.

    Handlers from an earlier call are closed and replaced, so repeated CLI
    invocations in one process do not duplicate output.
    """
    config = config or LogConfig()
    level = _level(config.level)
    handlers = _build_handlers(config)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    logger.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)

    return logger


@contextmanager
def timed(logger: logging.Logger, operation: str, level: int = logging.INFO):
    """Log how long the block took, or that it failed and after how long."""
    start = perf_counter()
    try:
        yield
    except Exception as e:
        logger.error(f"{operation} failed after {perf_counter() - start:.3f}s: {e}")
        raise
    logger.log(level, f"{operation} finished in {perf_counter() - start:.3f}s")
