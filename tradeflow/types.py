"""Core value types shared across the package and their fixed-width binary encodings."""

from __future__ import annotations

import enum
import struct
from decimal import Decimal

SYMBOL_WIDTH = 32
DECIMAL_WIDTH = 16
MAX_SCALE = 28

_SCALE_SHIFT = 16
_SCALE_MASK = 0x00FF_0000
_SIGN_MASK = 0x8000_0000
_MANTISSA_LIMIT = 1 << 96
_U32 = 0xFFFF_FFFF
# flags, hi, lo, mid
_DECIMAL_STRUCT = struct.Struct("<4I")


class Direction(enum.IntEnum):
    """Side of the book an update refers to; the value is its wire byte."""

    BID = 0
    ASK = 1


def encode_decimal(value) -> bytes:
    """Encode a decimal as 16 bytes: flags, high, low and middle 32-bit words."""
    value = value if isinstance(value, Decimal) else Decimal(value)
    if not value.is_finite():
        raise ValueError(f"cannot encode non-finite decimal {value}")
    sign, digits, exponent = value.as_tuple()
    mantissa = int("".join(map(str, digits))) if digits else 0
    if exponent > 0:
        mantissa *= 10**exponent
        scale = 0
    else:
        scale = -exponent
    if scale > MAX_SCALE:
        raise ValueError(f"decimal scale {scale} exceeds {MAX_SCALE}")
    if mantissa >= _MANTISSA_LIMIT:
        raise ValueError(f"decimal {value} does not fit in 96 bits")
    flags = (scale << _SCALE_SHIFT) | (_SIGN_MASK if sign else 0)
    return _DECIMAL_STRUCT.pack(
        flags, mantissa >> 64, mantissa & _U32, (mantissa >> 32) & _U32
    )


def decode_decimal(data) -> Decimal:
    """Decode the 16-byte form produced by :func:`encode_decimal`."""
    raw = bytes(data)
    if len(raw) != DECIMAL_WIDTH:
        raise ValueError(f"decimal needs {DECIMAL_WIDTH} bytes, got {len(raw)}")
    flags, hi, lo, mid = _DECIMAL_STRUCT.unpack(raw)
    scale = (flags & _SCALE_MASK) >> _SCALE_SHIFT
    if scale > MAX_SCALE:
        raise ValueError(f"decimal scale {scale} exceeds {MAX_SCALE}")
    mantissa = (hi << 64) | (mid << 32) | lo
    sign = 1 if flags & _SIGN_MASK else 0
    return Decimal((sign, tuple(int(c) for c in str(mantissa)), -scale))


def encode_symbol(symbol: str) -> bytes:
    """Encode an ASCII symbol of at most 32 characters, NUL-padded to 32 bytes."""
    try:
        raw = symbol.encode("ascii")
    except UnicodeEncodeError as exc:
        raise ValueError(f"symbol {symbol!r} is not ASCII") from exc
    if len(raw) > SYMBOL_WIDTH:
        raise ValueError(f"symbol {symbol!r} is longer than {SYMBOL_WIDTH} bytes")
    if b"\x00" in raw:
        raise ValueError(f"symbol {symbol!r} contains a NUL byte")
    return raw.ljust(SYMBOL_WIDTH, b"\x00")


def decode_symbol(data) -> str:
    """Decode a 32-byte NUL-padded ASCII symbol."""
    raw = bytes(data)
    if len(raw) != SYMBOL_WIDTH:
        raise ValueError(f"symbol needs {SYMBOL_WIDTH} bytes, got {len(raw)}")
    text, _, tail = raw.partition(b"\x00")
    if any(tail):
        raise ValueError("symbol has data after its terminating NUL")
    try:
        return text.decode("ascii")
    except UnicodeDecodeError as exc:
        raise ValueError("symbol is not ASCII") from exc