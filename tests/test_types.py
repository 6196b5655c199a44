from decimal import Decimal

import pytest

from tradeflow.types import (
    DECIMAL_WIDTH,
    SYMBOL_WIDTH,
    Direction,
    decode_decimal,
    decode_symbol,
    encode_decimal,
    encode_symbol,
)


def test_encode_one_wire_bytes():
    assert encode_decimal(Decimal("1")) == bytes(8) + b"\x01\x00\x00\x00" + bytes(4)


def test_encode_negative_scaled_wire_bytes():
    expected = b"\x00\x00\x01\x80" + bytes(4) + b"\x0f\x00\x00\x00" + bytes(4)
    assert encode_decimal(Decimal("-1.5")) == expected


@pytest.mark.parametrize(
    "text",
    ["0", "12000", "0.00001", "-3", "3000.1", "170.01", "79228162514264337593543950335"],
)
def test_decimal_round_trip(text):
    value = Decimal(text)
    encoded = encode_decimal(value)
    assert len(encoded) == DECIMAL_WIDTH
    assert decode_decimal(encoded) == value


def test_positive_exponent_is_expanded():
    assert decode_decimal(encode_decimal(Decimal("1E+2"))) == Decimal("100")


def test_decimal_keeps_scale():
    decoded = decode_decimal(encode_decimal(Decimal("2.50")))
    assert decoded.as_tuple() == Decimal("2.50").as_tuple()


def test_decimal_too_large():
    with pytest.raises(ValueError):
        encode_decimal(Decimal(2**96))


def test_decimal_scale_too_large():
    with pytest.raises(ValueError):
        encode_decimal(Decimal("1E-29"))


def test_decimal_not_finite():
    with pytest.raises(ValueError):
        encode_decimal(Decimal("NaN"))


def test_decode_decimal_wrong_length():
    with pytest.raises(ValueError):
        decode_decimal(bytes(DECIMAL_WIDTH - 1))


def test_decode_decimal_bad_scale():
    raw = bytearray(encode_decimal(Decimal("1")))
    raw[2] = 29
    with pytest.raises(ValueError):
        decode_decimal(raw)


def test_symbol_round_trip():
    encoded = encode_symbol("BTCUSDT")
    assert len(encoded) == SYMBOL_WIDTH
    assert encoded.rstrip(b"\x00") == b"BTCUSDT"
    assert decode_symbol(encoded) == "BTCUSDT"


def test_symbol_full_width():
    symbol = "A" * SYMBOL_WIDTH
    assert decode_symbol(encode_symbol(symbol)) == symbol


def test_symbol_too_long():
    with pytest.raises(ValueError):
        encode_symbol("A" * (SYMBOL_WIDTH + 1))


def test_symbol_not_ascii():
    with pytest.raises(ValueError):
        encode_symbol("BTC€")


def test_symbol_with_nul():
    with pytest.raises(ValueError):
        encode_symbol("BT\x00C")


def test_decode_symbol_data_after_nul():
    raw = bytearray(encode_symbol("BTC"))
    raw[10] = ord("X")
    with pytest.raises(ValueError):
        decode_symbol(raw)


def test_decode_symbol_wrong_length():
    with pytest.raises(ValueError):
        decode_symbol(b"BTC")


def test_direction_from_wire_value():
    assert Direction(Direction.ASK.value) is Direction.ASK
    with pytest.raises(ValueError):
        Direction(7)