"""
Logging setup shared by the CLI and the menu launcher.

Everything logs under the "shopcrm" logger tree (modules use
logging.getLogger(__name__), which nests below it). Output goes to a
rotating file only; the terminal is reserved for the CLI itself.

  File     : $LOG_DIR/shopcrm.log (LOG_DIR defaults to ./logs next to the package)
  Rotation : 5 MB, 3 backups
  Level    : LOG_LEVEL (DEBUG / INFO / WARNING / ERROR / CRITICAL), INFO otherwise

Traced functions are wrapped with @log_call:

    2026-10-18 14:32:01 | DEBUG    | CALL pipeline_board | args=(<Session>, client_id=None, days='7')
    2026-10-18 14:32:01 | INFO     | OK   pipeline_board | 3ms
    2026-10-18 14:32:01 | ERROR    | FAIL save_quote | ValueError: Preencha o cliente... | 1ms
"""

import functools
import logging
import logging.handlers
import os
import time
from pathlib import Path

LOGGER_NAME = "shopcrm"

_LOG_DIR = Path(os.getenv("LOG_DIR", str(Path(__file__).parent.parent / "logs")))
_LOG_FILE = _LOG_DIR / "shopcrm.log"
_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MAX_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 3

# Records and sessions have long reprs; keep each traced argument on one short line
_ARG_REPR_LIMIT = 60


def _level_from_env() -> int:
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging() -> logging.Logger:
    """
    Attach the rotating file handler to the shopcrm logger.
    Calling it again is harmless: an already configured logger is returned as is.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    _LOG_DIR.mkdir(parents=True, exist_ok=True)
    logger.setLevel(_level_from_env())

    handler = logging.handlers.RotatingFileHandler(
        _LOG_FILE,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)

    logger.debug(f"Logging to {_LOG_FILE} at {logging.getLevelName(logger.level)}")
    return logger


def _short_repr(value) -> str:
    if type(value).__repr__ is object.__repr__:
        return f"<{type(value).__name__}>"
    text = repr(value)
    if len(text) > _ARG_REPR_LIMIT:
        return text[:_ARG_REPR_LIMIT - 3] + "..."
    return text


def describe_args(args, kwargs) -> str:
    """Compact one-line rendering of a call's arguments."""
    parts = [_short_repr(a) for a in args] + [f"{k}={_short_repr(v)}" for k, v in kwargs.items()]
    return ", ".join(parts)


def log_call(func):
    """
    Trace a function: CALL at DEBUG, OK with elapsed ms at INFO,
    FAIL with the exception at ERROR. Exceptions are re-raised untouched.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(LOGGER_NAME)
        name = func.__name__
        start = time.perf_counter()
        logger.debug(f"CALL {name} | args=({describe_args(args, kwargs)})")

        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            ms = int((time.perf_counter() - start) * 1000)
            logger.error(f"FAIL {name} | {type(exc).__name__}: {exc} | {ms}ms")
            raise

        ms = int((time.perf_counter() - start) * 1000)
        logger.info(f"OK   {name} | {ms}ms")
        return result

    return wrapper
