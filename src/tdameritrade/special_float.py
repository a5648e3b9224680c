"""Float value type tolerant of the broker's mixed JSON encodings.

TD Ameritrade reports most greeks as bare JSON numbers, but undefined greeks
come back as strings (`"NaN"`, `"Infinity"`, `"-Infinity"`) and some feeds
quote ordinary numbers too (`"0.25"`). `SpecialFloat` accepts all of those.

Wire rules
----------
Decode:
    1. A JSON number is taken as-is.
    2. Otherwise a JSON string is parsed as a float literal (decimal,
       hexadecimal like `0x1p-2`, `NaN`, `Inf`, `Infinity`, optionally
       signed, case-insensitive).
    3. Anything else is a `DecodeError`.
    Bare `NaN` / `Infinity` tokens are not JSON and are rejected. Numbers
    that overflow a double are range errors on both paths.

Encode:
    Shortest round-trip positional decimal for finite values (`0.25`,
    `1`, `-0`), emitted as a bare JSON number. Non-finite values are
    quoted (`"NaN"`, `"+Inf"`, `"-Inf"`) since JSON has no literal for them.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

import numpy as np

from .errors import DecodeError

_FLOAT_TEXT = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)
_HEX_FLOAT_TEXT = re.compile(
    r"[+-]?0x(?:[0-9a-f]+\.?[0-9a-f]*|\.[0-9a-f]+)p[+-]?\d+",
    re.IGNORECASE,
)


def reject_json_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON literal {name!r}")


def parse_float_text(text: str, *, path: str | None = None) -> float:
    """Parse the contents of a quoted JSON float."""
    if _HEX_FLOAT_TEXT.fullmatch(text):
        try:
            return float.fromhex(text)
        except OverflowError as e:
            raise DecodeError(f"float literal {text!r} out of range", path) from e

    if not _FLOAT_TEXT.fullmatch(text):
        raise DecodeError(f"invalid float literal {text!r}", path)

    value = float(text)
    if math.isinf(value) and not text.lstrip("+-").lower().startswith("inf"):
        raise DecodeError(f"float literal {text!r} out of range", path)
    return value


def format_float(value: float) -> str:
    """Render `value` as JSON text, quoting non-finite values."""
    if math.isnan(value):
        return '"NaN"'
    if math.isinf(value):
        return '"+Inf"' if value > 0 else '"-Inf"'
    return np.format_float_positional(value, unique=True, trim="-")


class SpecialFloat(float):
    """A float whose JSON form may be a number or a numeric string."""

    __slots__ = ()

    @classmethod
    def decode(cls, raw: bytes | str) -> SpecialFloat:
        """Decode one raw JSON value (number or string)."""
        try:
            # parse_int=float keeps the sign of "-0"
            value = json.loads(
                raw, parse_int=float, parse_constant=reject_json_constant
            )
        except (ValueError, RecursionError) as e:
            raise DecodeError(f"invalid JSON float value {raw!r}") from e
        return cls.from_json(value)

    @classmethod
    def from_json(cls, value: Any, *, path: str | None = None) -> SpecialFloat:
        """Convert an already-parsed JSON value."""
        # bool is an int subclass; JSON true/false is never a number
        if isinstance(value, bool):
            raise DecodeError("expected number or numeric string, got bool", path)

        if isinstance(value, (int, float)):
            try:
                f = float(value)
            except OverflowError as e:
                raise DecodeError(f"number {value} out of range", path) from e
            if math.isinf(f):
                raise DecodeError(f"number {value} out of range", path)
            return cls(f)

        if isinstance(value, str):
            return cls(parse_float_text(value, path=path))

        raise DecodeError(
            f"expected number or numeric string, got {type(value).__name__}",
            path,
        )

    def to_json(self) -> str:
        return format_float(float(self))

    def encode(self) -> bytes:
        return self.to_json().encode("ascii")

    def is_special(self) -> bool:
        """True for NaN and the infinities."""
        return not math.isfinite(self)
