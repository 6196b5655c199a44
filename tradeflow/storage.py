"""Durable, key-ordered storage of recorded market update requests."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Iterator
from pathlib import Path

DB_FILE_NAME = "market_update.db"
KEY_WIDTH = 8

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS market_update ("
    "key BLOB PRIMARY KEY, value BLOB NOT NULL)"
)


def _encode_key(key: int) -> bytes:
    try:
        return int(key).to_bytes(KEY_WIDTH, "big")
    except OverflowError as exc:
        raise ValueError(f"key {key} does not fit in an unsigned 64-bit integer") from exc


def _decode_key(raw: bytes) -> int:
    return int.from_bytes(raw, "big") if len(raw) == KEY_WIDTH else 0


def _encode_value(value) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    return value.to_bytes()


class UpdateStore:
    """Records keyed by 64-bit ids, stored big-endian so key order is numeric order.

    ``path`` is a directory; it is created if missing.
    """

    def __init__(self, path) -> None:
        self.path = Path(path)
        self.path.mkdir(parents=True, exist_ok=True)
        self._conn: sqlite3.Connection | None = sqlite3.connect(
            self.path / DB_FILE_NAME, check_same_thread=False
        )
        with self._conn:
            self._conn.execute(_SCHEMA)

    def __repr__(self) -> str:
        state = "closed" if self._conn is None else "open"
        return f"UpdateStore({str(self.path)!r}, {state})"

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise ValueError("store is closed")
        return self._conn

    def put_batch(self, items: Iterable[tuple[int, object]]) -> int:
        """Write (id, request-or-bytes) pairs atomically; existing ids are replaced.

        Returns the number of records written.
        """
        rows = [(_encode_key(key), _encode_value(value)) for key, value in items]
        conn = self._connection()
        with conn:
            conn.executemany(
                "INSERT OR REPLACE INTO market_update (key, value) VALUES (?, ?)", rows
            )
        return len(rows)

    def iter_records(self) -> Iterator[tuple[int, bytes]]:
        """Yield (id, raw value) pairs in ascending id order."""
        cursor = self._connection().execute(
            "SELECT key, value FROM market_update ORDER BY key"
        )
        for key, value in cursor:
            yield _decode_key(bytes(key)), bytes(value)

    def close(self) -> None:
        """Close the store; closing twice is harmless."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> UpdateStore:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()