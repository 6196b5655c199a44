"""Market update messages and their fixed 80-byte wire layout."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

from tradeflow.types import (
    DECIMAL_WIDTH,
    SYMBOL_WIDTH,
    Direction,
    decode_decimal,
    decode_symbol,
    encode_decimal,
    encode_symbol,
)

_HEADER = struct.Struct(f"<{SYMBOL_WIDTH}sQ")
_UPDATE_PADDING = 3
_REQUEST_PADDING = 4
REQUEST_SIZE = (
    _HEADER.size + 2 * DECIMAL_WIDTH + 1 + _UPDATE_PADDING + _REQUEST_PADDING
)
_U64_LIMIT = 1 << 64


@dataclass(frozen=True)
class MarketUpdate:
    """A change at one price level: positive size adds, negative size cancels."""

    price: Decimal
    size: Decimal
    direction: Direction

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", Direction(self.direction))


@dataclass(frozen=True)
class MarketUpdateRequest:
    """A market update addressed to one symbol, stamped in milliseconds."""

    SIZE: ClassVar[int] = REQUEST_SIZE

    symbol: str
    timestamp_ms: int
    update: MarketUpdate

    def __post_init__(self) -> None:
        encode_symbol(self.symbol)
        if not 0 <= self.timestamp_ms < _U64_LIMIT:
            raise ValueError(f"timestamp {self.timestamp_ms} out of range")

    def to_bytes(self) -> bytes:
        """Serialise to the fixed little-endian wire layout."""
        return b"".join(
            (
                _HEADER.pack(encode_symbol(self.symbol), self.timestamp_ms),
                encode_decimal(self.update.price),
                encode_decimal(self.update.size),
                bytes([self.update.direction]),
                bytes(_UPDATE_PADDING + _REQUEST_PADDING),
            )
        )

    @classmethod
    def from_bytes(cls, data) -> MarketUpdateRequest:
        """Parse the wire layout; raises ValueError on malformed input."""
        raw = bytes(data)
        if len(raw) != REQUEST_SIZE:
            raise ValueError(f"request needs {REQUEST_SIZE} bytes, got {len(raw)}")
        symbol_raw, timestamp_ms = _HEADER.unpack_from(raw)
        offset = _HEADER.size
        price = decode_decimal(raw[offset : offset + DECIMAL_WIDTH])
        offset += DECIMAL_WIDTH
        size = decode_decimal(raw[offset : offset + DECIMAL_WIDTH])
        offset += DECIMAL_WIDTH
        direction_byte = raw[offset]
        try:
            direction = Direction(direction_byte)
        except ValueError:
            raise ValueError(f"invalid direction byte {direction_byte}") from None
        return cls(
            symbol=decode_symbol(symbol_raw),
            timestamp_ms=timestamp_ms,
            update=MarketUpdate(price, size, direction),
        )