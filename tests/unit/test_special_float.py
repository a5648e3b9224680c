from __future__ import annotations

import math

import pytest

from tdameritrade.errors import DecodeError
from tdameritrade.special_float import SpecialFloat, format_float, parse_float_text


@pytest.mark.parametrize(
    "value",
    [
        0.0,
        0.25,
        -1.5,
        0.1 + 0.2,
        123456.789,
        1e21,
        1e-7,
        5e-324,
        1.7976931348623157e308,
    ],
)
def test_finite_values_round_trip_exactly(value: float) -> None:
    encoded = SpecialFloat(value).encode()
    assert not encoded.startswith(b'"')
    assert SpecialFloat.decode(encoded) == value


def test_encode_uses_positional_shortest_form() -> None:
    assert format_float(0.25) == "0.25"
    assert format_float(1.0) == "1"
    assert format_float(1e21) == "1000000000000000000000"
    assert format_float(1e-7) == "0.0000001"


def test_negative_zero_keeps_sign() -> None:
    decoded = SpecialFloat.decode(SpecialFloat(-0.0).encode())
    assert decoded == 0.0
    assert math.copysign(1.0, decoded) == -1.0


@pytest.mark.parametrize(
    "value, expected",
    [
        (math.nan, b'"NaN"'),
        (math.inf, b'"+Inf"'),
        (-math.inf, b'"-Inf"'),
    ],
)
def test_special_values_encode_quoted(value: float, expected: bytes) -> None:
    assert SpecialFloat(value).encode() == expected


def test_special_values_round_trip_class() -> None:
    assert math.isnan(SpecialFloat.decode(SpecialFloat(math.nan).encode()))
    assert SpecialFloat.decode(SpecialFloat(math.inf).encode()) == math.inf
    assert SpecialFloat.decode(SpecialFloat(-math.inf).encode()) == -math.inf


def test_decode_bare_number() -> None:
    assert SpecialFloat.decode(b"0.25") == 0.25
    assert SpecialFloat.decode("7") == 7.0


def test_decode_string_wrapped_number() -> None:
    assert SpecialFloat.decode(b'"0.25"') == 0.25
    assert SpecialFloat.decode('"-1e-3"') == -0.001


@pytest.mark.parametrize(
    "raw, check",
    [
        (b'"NaN"', math.isnan),
        (b'"nan"', math.isnan),
        (b'"Infinity"', lambda v: v == math.inf),
        (b'"-Infinity"', lambda v: v == -math.inf),
        (b'"inf"', lambda v: v == math.inf),
    ],
)
def test_decode_special_strings(raw: bytes, check) -> None:
    value = SpecialFloat.decode(raw)
    assert isinstance(value, SpecialFloat)
    assert check(value)
    assert value.is_special()


@pytest.mark.parametrize(
    "raw",
    [
        b'"not-a-number-at-all"',
        b"NaN",
        b"Infinity",
        b"true",
        b"null",
        b"[1]",
        b'"1_000"',
        b'" 1.5"',
        b'""',
        b"1e400",
        b'"1e400"',
        b"",
        b"{",
    ],
)
def test_decode_rejects_invalid_values(raw: bytes) -> None:
    with pytest.raises(DecodeError):
        SpecialFloat.decode(raw)


def test_decode_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        SpecialFloat.decode(b'"abc"')


def test_from_json_reports_path() -> None:
    with pytest.raises(DecodeError, match=r"^\$\.delta: "):
        SpecialFloat.from_json("abc", path="$.delta")


def test_parse_float_text_accepts_signed_infinity() -> None:
    assert parse_float_text("+Inf") == math.inf
    assert parse_float_text("-INFINITY") == -math.inf


@pytest.mark.parametrize(
    "raw, expected",
    [
        (b'"0x1p-2"', 0.25),
        (b'"-0X1.8P1"', -3.0),
        (b'"0x.8p1"', 1.0),
    ],
)
def test_decode_hex_float_strings(raw: bytes, expected: float) -> None:
    assert SpecialFloat.decode(raw) == expected


@pytest.mark.parametrize("text", ["0x1p99999", "0x1", "0xp1"])
def test_parse_float_text_rejects_bad_hex(text: str) -> None:
    with pytest.raises(DecodeError):
        parse_float_text(text)


def test_decode_deeply_nested_value_raises_decode_error() -> None:
    with pytest.raises(DecodeError):
        SpecialFloat.decode("[" * 100_000 + "]" * 100_000)
