from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Optional, Union

LevelLike = Optional[Union[int, str]]

# timestamp | level | logger | message
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# HTTP client loggers that are chatty at DEBUG (retry/connection pool noise)
NOISY_LOGGERS: tuple[str, ...] = ("urllib3", "requests")


def resolve_level(level: LevelLike = None) -> int:
    """
    Level from an int or a name ('info', ' DEBUG ', 'warn').
    None reads LOG_LEVEL; anything unrecognised is INFO.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL") or logging.INFO
    if isinstance(level, int):
        return level
    name = str(level).strip().upper()
    if name == "WARN":
        name = "WARNING"
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def default_log_path_for_input(input_path: Union[str, Path]) -> Path:
    """Log file next to the export (e.g. /data/mars.xlsx -> /data/mars.log)."""
    return Path(input_path).with_suffix(".log")


def _is_console(h: logging.Handler) -> bool:
    return (
        type(h) is logging.StreamHandler
        and getattr(h, "stream", None) in (sys.stderr, sys.stdout)
    )


def _writes_to(h: logging.Handler, path: Path) -> bool:
    return isinstance(h, RotatingFileHandler) and h.baseFilename == os.path.abspath(path)


def _rotating_file(path: Path, formatter: logging.Formatter, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    fh = RotatingFileHandler(
        filename=str(path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
        delay=True,
    )
    fh.setFormatter(formatter)
    return fh


def get_logger(
    name: Optional[str] = None,
    *,
    level: LevelLike = None,
    log_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    propagate: bool = False,
    max_bytes: int = 5_000_000,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure and return a run logger; repeated calls are safe.

    A console handler (stderr) and a rotating file handler are each added at
    most once per target. Every call re-applies `level` to the logger and
    to all of its handlers, so a later call can raise or lower verbosity.
    """
    logger = logging.getLogger(name)
    resolved = resolve_level(level)
    logger.setLevel(resolved)
    logger.propagate = propagate
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    if console and not any(_is_console(h) for h in logger.handlers):
        sh = logging.StreamHandler(stream=sys.stderr)
        sh.setFormatter(formatter)
        logger.addHandler(sh)

    if log_file is not None:
        path = Path(log_file)
        if not any(_writes_to(h, path) for h in logger.handlers):
            logger.addHandler(_rotating_file(path, formatter, max_bytes, backup_count))

    for h in logger.handlers:
        h.setLevel(resolved)
    return logger


def quiet_loggers(names: Iterable[str] = NOISY_LOGGERS, level: int = logging.WARNING) -> None:
    """Raise the threshold of third-party loggers so DEBUG runs stay readable."""
    for n in names:
        logging.getLogger(n).setLevel(level)


__all__ = ["LOG_FORMAT", "resolve_level", "get_logger", "default_log_path_for_input", "quiet_loggers"]
