# pktsplit/utils.py
"""
Package logging layer.

Library modules log through child loggers of "pktsplit" and stay silent until
the application calls setup(); records then go through a queue to a listener
thread that owns the console and rotating-file handlers.
"""
from __future__ import annotations

import atexit
import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Optional, Union

__all__ = ["setup", "reset", "get_logger", "log", "ensure_dir"]

# ---- internal globals ----
_log_name = "pktsplit"
log = logging.getLogger(_log_name)
log.addHandler(logging.NullHandler())
log.setLevel(logging.INFO)

_q: Optional[queue.SimpleQueue] = None
_listener: Optional[QueueListener] = None
_configured = False


def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def setup(
    log_dir: Optional[Union[str, os.PathLike]] = None,
    level: Union[int, str] = "INFO",
    console: bool = True,
    filename: str = "pktsplit.log",
    rotate_when: str = "midnight",
    rotate_backup: int = 7,
    encoding: str = "utf-8",
) -> logging.Logger:
    """
    Configure async logging. Call once at program start (e.g., in main).
    - log_dir=None logs to the console only; with a directory, also write a
      file rotated per rotate_when, keeping rotate_backup old files.
    - level accepts "DEBUG"/"INFO"/"WARNING"/"ERROR" or a logging int.
    """
    global _q, _listener, _configured

    if _configured:
        return log  # idempotent

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    log.setLevel(level)
    log.propagate = False

    fmt = "[%(asctime)s] %(levelname).1s %(process)d %(threadName)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    # sink side
    handlers = []
    if console:
        h = logging.StreamHandler(sys.stderr)
        h.setFormatter(formatter)
        h.setLevel(level)
        handlers.append(h)

    if log_dir is not None:
        log_path = Path(log_dir)
        ensure_dir(log_path)
        file_handler = TimedRotatingFileHandler(
            filename=str(log_path / filename),
            when=rotate_when,
            backupCount=rotate_backup,
            encoding=encoding,
            utc=False,
            delay=True,
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        handlers.append(file_handler)

    # source side: the queue handler is cheap, I/O happens on the listener thread
    _q = queue.SimpleQueue()
    qh = QueueHandler(_q)
    qh.setLevel(level)

    _clear_handlers(log)
    log.addHandler(qh)

    _listener = QueueListener(_q, *handlers, respect_handler_level=True)
    _listener.start()
    atexit.register(_shutdown_listener)

    _configured = True
    return log


def _clear_handlers(logger: logging.Logger) -> None:
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()


def _shutdown_listener() -> None:
    global _listener
    if _listener:
        _listener.stop()
        _listener = None


def reset() -> None:
    """Stop the listener, close its handlers and go back to the unconfigured state."""
    global _q, _configured
    sinks = list(_listener.handlers) if _listener else []
    _shutdown_listener()
    for h in sinks:
        h.close()
    _clear_handlers(log)
    log.addHandler(logging.NullHandler())
    log.setLevel(logging.INFO)
    log.propagate = True
    _q = None
    _configured = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a child logger: get_logger("stream") -> pktsplit.stream
    """
    if not name:
        return log
    return logging.getLogger(f"{_log_name}.{name}")
