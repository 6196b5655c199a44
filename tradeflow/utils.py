"""Local time, unique id generation and logging setup."""

from __future__ import annotations

import logging
import logging.handlers
import os
import queue
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path

LOG_FILE_NAME = "trading_engine.log"
LOG_LEVEL_ENV = "TRADEFLOW_LOG"

_U64_MASK = 0xFFFF_FFFF_FFFF_FFFF
_COUNTER_MASK = 0xFFFF
_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "off": logging.CRITICAL + 1,
}
_LEVEL_COLOURS = {
    logging.DEBUG: "\x1b[34m",
    logging.INFO: "\x1b[32m",
    logging.WARNING: "\x1b[33m",
    logging.ERROR: "\x1b[31m",
    logging.CRITICAL: "\x1b[31m",
}


@lru_cache(maxsize=None)
def _local_offset() -> timezone:
    try:
        offset = datetime.now().astimezone().utcoffset()
    except (OverflowError, OSError, ValueError) as exc:
        logging.getLogger(__name__).error("failed to get local offset: %s", exc)
        return timezone.utc
    return timezone.utc if offset is None else timezone(offset)


def now_local() -> datetime:
    """Current time as an aware datetime in the local UTC offset."""
    return datetime.now(timezone.utc).astimezone(_local_offset())


@dataclass
class IDGenerator:
    """Generates 64-bit ids: 48 bits of millisecond timestamp, 16 bits of counter."""

    timestamp_ms: int = 0
    counter: int = 0

    def generate(self, timestamp_ms: int) -> int:
        """Return a unique id; older timestamps reuse the latest one seen."""
        if timestamp_ms > self.timestamp_ms:
            self.timestamp_ms = timestamp_ms
            self.counter = 0
        ident = ((self.timestamp_ms << 16) | (self.counter & _COUNTER_MASK)) & _U64_MASK
        self.counter += 1
        return ident


class _Formatter(logging.Formatter):
    def __init__(self, colour: bool) -> None:
        super().__init__(
            "%(asctime)s %(levelname)5s %(threadName)s %(filename)s:%(lineno)d: %(message)s"
        )
        self._colour = colour

    def formatTime(self, record, datefmt=None):  # noqa: N802
        return datetime.fromtimestamp(record.created, tz=_local_offset()).isoformat()

    def format(self, record):
        if self._colour:
            record = logging.makeLogRecord(record.__dict__)
            colour = _LEVEL_COLOURS.get(record.levelno, "")
            record.levelname = f"{colour}{record.levelname}\x1b[0m"
        return super().format(record)


def _parse_filter(spec: str) -> tuple[int, dict[str, int]]:
    root_level = logging.INFO
    per_logger: dict[str, int] = {}
    for directive in (part.strip() for part in spec.split(",")):
        if not directive:
            continue
        target, sep, level_name = directive.rpartition("=")
        level = _LEVELS.get(level_name.strip().lower())
        if level is None:
            continue
        if sep and target.strip():
            per_logger[target.strip()] = level
        else:
            root_level = level
    return root_level, per_logger


class _LogGuard:
    """Keeps the background log writer alive; closing it flushes and detaches."""

    def __init__(self, queue_handler, listener, target) -> None:
        self._queue_handler = queue_handler
        self._listener = listener
        self._target = target
        self._closed = False

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        logging.getLogger().removeHandler(self._queue_handler)
        self._listener.stop()
        self._target.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


_active_guards: list[_LogGuard] = []


def init_log(log_dir=None) -> _LogGuard:
    """Set up non-blocking logging to a daily file in log_dir, or to stderr.

    The level comes from the TRADEFLOW_LOG environment variable, e.g.
    ``debug`` or ``tradeflow.market=info``; the default is INFO.
    """
    if log_dir is not None:
        path = Path(log_dir)
        if not path.is_dir():
            raise NotADirectoryError("log path is not a directory")
        target: logging.Handler = logging.handlers.TimedRotatingFileHandler(
            path / LOG_FILE_NAME, when="midnight", encoding="utf-8"
        )
        target.setFormatter(_Formatter(colour=False))
    else:
        target = logging.StreamHandler(sys.stderr)
        target.setFormatter(_Formatter(colour=True))

    while _active_guards:
        _active_guards.pop().close()

    root_level, per_logger = _parse_filter(os.environ.get(LOG_LEVEL_ENV, ""))
    log_queue: queue.SimpleQueue = queue.SimpleQueue()
    queue_handler = logging.handlers.QueueHandler(log_queue)
    listener = logging.handlers.QueueListener(log_queue, target)
    root = logging.getLogger()
    root.setLevel(root_level)
    root.addHandler(queue_handler)
    for name, level in per_logger.items():
        logging.getLogger(name).setLevel(level)
    listener.start()
    guard = _LogGuard(queue_handler, listener, target)
    _active_guards.append(guard)
    return guard