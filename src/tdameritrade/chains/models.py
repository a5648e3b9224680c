"""Typed option-chain response model.

Every field carries its camelCase wire key in `metadata["json"]` together
with the decoder for its JSON value. Decoding follows the upstream schema:

- absent or `null` keys keep the field's zero value
- unknown keys are ignored
- a value of the wrong JSON type raises `DecodeError` naming the JSON path

Greek fields use `SpecialFloat` so `"NaN"` / `"Infinity"` strings decode.
Maps are read-only (`MappingProxyType`) and contract lists are tuples.
"""

from __future__ import annotations

import json
import math
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from functools import partial
from types import MappingProxyType
from typing import Any, TypeAlias

from ..errors import DecodeError
from ..special_float import SpecialFloat, reject_json_constant

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_ZERO: dict[type, Any] = {
    str: "",
    int: 0,
    float: 0.0,
    bool: False,
    SpecialFloat: SpecialFloat(0.0),
}


def _type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _decode_scalar(kind: type, value: Any, path: str) -> Any:
    if kind is SpecialFloat:
        return SpecialFloat.from_json(value, path=path)

    if kind is bool:
        if isinstance(value, bool):
            return value
    elif kind is str:
        if isinstance(value, str):
            return value
    elif kind is int:
        if isinstance(value, int) and not isinstance(value, bool):
            if not _INT64_MIN <= value <= _INT64_MAX:
                raise DecodeError(f"integer {value} out of range", path)
            return value
    elif kind is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                f = float(value)
            except OverflowError as e:
                raise DecodeError(f"number {value} out of range", path) from e
            if math.isinf(f):
                raise DecodeError(f"number {value} out of range", path)
            return f

    raise DecodeError(
        f"cannot decode {_type_name(value)} into {kind.__name__}", path
    )


def _field(key: str, kind: type) -> Any:
    return field(
        default=_ZERO[kind],
        metadata={
            "json": key,
            "kind": kind,
            "decode": partial(_decode_scalar, kind),
        },
    )


def _decode_struct(cls: type, value: Any, path: str) -> Any:
    if value is None:
        return cls()
    if not isinstance(value, Mapping):
        raise DecodeError(
            f"cannot decode {_type_name(value)} into {cls.__name__}", path
        )

    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        key = f.metadata["json"]
        raw = value.get(key)
        if raw is None:
            continue
        decode: Callable[[Any, str], Any] = f.metadata["decode"]
        kwargs[f.name] = decode(raw, f"{path}.{key}")
    return cls(**kwargs)


@dataclass(frozen=True, slots=True)
class Underlying:
    """Quote snapshot of the chain's underlying instrument."""

    symbol: str = _field("symbol", str)
    description: str = _field("description", str)
    change: float = _field("change", float)
    percent_change: float = _field("percentChange", float)
    close: float = _field("close", float)
    quote_time: int = _field("quoteTime", int)
    trade_time: int = _field("tradeTime", int)
    bid: float = _field("bid", float)
    ask: float = _field("ask", float)
    last: float = _field("last", float)
    mark: float = _field("mark", float)
    mark_change: float = _field("markChange", float)
    mark_percent_change: float = _field("markPercentChange", float)
    bid_size: int = _field("bidSize", int)
    ask_size: int = _field("askSize", int)
    high_price: float = _field("highPrice", float)
    low_price: float = _field("lowPrice", float)
    open_price: float = _field("openPrice", float)
    total_volume: int = _field("totalVolume", int)
    exchange_name: str = _field("exchangeName", str)
    fifty_two_week_high: float = _field("fiftyTwoWeekHigh", float)
    fifty_two_week_low: float = _field("fiftyTwoWeekLow", float)
    delayed: bool = _field("delayed", bool)


@dataclass(frozen=True, slots=True)
class ExpDateOption:
    """One option contract's quote and greeks at an expiration/strike."""

    put_call: str = _field("putCall", str)
    symbol: str = _field("symbol", str)
    description: str = _field("description", str)
    exchange_name: str = _field("exchangeName", str)
    bid: float = _field("bid", float)
    ask: float = _field("ask", float)
    last: float = _field("last", float)
    mark: float = _field("mark", float)
    bid_size: int = _field("bidSize", int)
    ask_size: int = _field("askSize", int)
    bid_ask_size: str = _field("bidAskSize", str)
    last_size: float = _field("lastSize", float)
    high_price: float = _field("highPrice", float)
    low_price: float = _field("lowPrice", float)
    open_price: float = _field("openPrice", float)
    close_price: float = _field("closePrice", float)
    total_volume: int = _field("totalVolume", int)
    trade_date: str = _field("tradeDate", str)
    trade_time_in_long: int = _field("tradeTimeInLong", int)
    quote_time_in_long: int = _field("quoteTimeInLong", int)
    net_change: float = _field("netChange", float)
    volatility: SpecialFloat = _field("volatility", SpecialFloat)
    delta: SpecialFloat = _field("delta", SpecialFloat)
    gamma: SpecialFloat = _field("gamma", SpecialFloat)
    theta: SpecialFloat = _field("theta", SpecialFloat)
    vega: SpecialFloat = _field("vega", SpecialFloat)
    rho: SpecialFloat = _field("rho", SpecialFloat)
    open_interest: int = _field("openInterest", int)
    time_value: float = _field("timeValue", float)
    theoretical_option_value: SpecialFloat = _field(
        "theoreticalOptionValue", SpecialFloat
    )
    theoretical_volatility: SpecialFloat = _field(
        "theoreticalVolatility", SpecialFloat
    )
    option_deliverables_list: str = _field("optionDeliverablesList", str)
    strike_price: float = _field("strikePrice", float)
    expiration_date: int = _field("expirationDate", int)
    days_to_expiration: int = _field("daysToExpiration", int)
    expiration_type: str = _field("expirationType", str)
    last_trading_day: int = _field("lastTradingDay", int)
    multiplier: float = _field("multiplier", float)
    settlement_type: str = _field("settlementType", str)
    deliverable_note: str = _field("deliverableNote", str)
    is_index_option: bool = _field("isIndexOption", bool)
    percent_change: float = _field("percentChange", float)
    mark_change: float = _field("markChange", float)
    mark_percent_change: float = _field("markPercentChange", float)
    in_the_money: bool = _field("inTheMoney", bool)
    mini: bool = _field("mini", bool)
    non_standard: bool = _field("nonStandard", bool)


# expiration key -> strike key -> contracts at that strike
ExpDateMap: TypeAlias = Mapping[str, Mapping[str, tuple[ExpDateOption, ...]]]


def _empty_map() -> ExpDateMap:
    return MappingProxyType({})


def _decode_exp_date_map(value: Any, path: str) -> ExpDateMap:
    if not isinstance(value, Mapping):
        raise DecodeError(f"cannot decode {_type_name(value)} into ExpDateMap", path)

    out: dict[str, Mapping[str, tuple[ExpDateOption, ...]]] = {}
    for exp_key, strikes in value.items():
        exp_path = f"{path}[{exp_key!r}]"
        if strikes is None:
            out[exp_key] = _empty_map()
            continue
        if not isinstance(strikes, Mapping):
            raise DecodeError(
                f"cannot decode {_type_name(strikes)} into strike map", exp_path
            )

        inner: dict[str, tuple[ExpDateOption, ...]] = {}
        for strike_key, options in strikes.items():
            strike_path = f"{exp_path}[{strike_key!r}]"
            if options is None:
                inner[strike_key] = ()
                continue
            if not isinstance(options, list):
                raise DecodeError(
                    f"cannot decode {_type_name(options)} into contract list",
                    strike_path,
                )
            inner[strike_key] = tuple(
                _decode_struct(ExpDateOption, opt, f"{strike_path}[{i}]")
                for i, opt in enumerate(options)
            )
        out[exp_key] = MappingProxyType(inner)

    return MappingProxyType(out)


def _map_field(key: str) -> Any:
    return field(
        default_factory=_empty_map,
        metadata={"json": key, "decode": _decode_exp_date_map},
    )


@dataclass(frozen=True, slots=True)
class Chains:
    """Top-level option-chain response.

    `call_exp_date_map` and `put_exp_date_map` are keyed independently and
    need not share expirations.
    """

    symbol: str = _field("symbol", str)
    status: str = _field("status", str)
    underlying: Underlying = field(
        default_factory=Underlying,
        metadata={
            "json": "underlying",
            "decode": partial(_decode_struct, Underlying),
        },
    )
    strategy: str = _field("strategy", str)
    interval: float = _field("interval", float)
    is_delayed: bool = _field("isDelayed", bool)
    is_index: bool = _field("isIndex", bool)
    interest_rate: float = _field("interestRate", float)
    underlying_price: float = _field("underlyingPrice", float)
    volatility: float = _field("volatility", float)
    days_to_expiration: float = _field("daysToExpiration", float)
    number_of_contracts: int = _field("numberOfContracts", int)
    call_exp_date_map: ExpDateMap = _map_field("callExpDateMap")
    put_exp_date_map: ExpDateMap = _map_field("putExpDateMap")

    @classmethod
    def from_payload(cls, payload: Any) -> Chains:
        """Decode an already-parsed JSON object."""
        return _decode_struct(cls, payload, "$")

    @classmethod
    def from_json(cls, body: bytes | str) -> Chains:
        """Decode a raw JSON response body."""
        try:
            payload = json.loads(body, parse_constant=reject_json_constant)
        except RecursionError as e:
            raise DecodeError("JSON body nested too deeply") from e
        except ValueError as e:
            raise DecodeError(f"malformed JSON body: {e}") from e

        if payload is None:
            return cls()
        if not isinstance(payload, Mapping):
            raise DecodeError(
                f"expected JSON object, got {_type_name(payload)}", "$"
            )
        return cls.from_payload(payload)

    def to_json(self) -> str:
        """Serialize back to the wire schema (camelCase, greeks quoted if special).

        Raises `ValueError` if an ordinary float field holds NaN/Infinity.
        """
        return _encode(self)

    def iter_options(self) -> Iterator[tuple[str, str, str, ExpDateOption]]:
        """Yield `(side, expiration_key, strike_key, contract)` for every contract."""
        for side, exp_map in (
            ("CALL", self.call_exp_date_map),
            ("PUT", self.put_exp_date_map),
        ):
            for exp_key, strikes in exp_map.items():
                for strike_key, options in strikes.items():
                    for opt in options:
                        yield side, exp_key, strike_key, opt


def _encode(value: Any) -> str:
    if isinstance(value, SpecialFloat):
        return value.to_json()
    if is_dataclass(value):
        parts = [
            f"{json.dumps(f.metadata['json'])}:{_encode(getattr(value, f.name))}"
            for f in fields(value)
        ]
        return "{" + ",".join(parts) + "}"
    if isinstance(value, Mapping):
        parts = [f"{json.dumps(str(k))}:{_encode(v)}" for k, v in value.items()]
        return "{" + ",".join(parts) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_encode(v) for v in value) + "]"
    return json.dumps(value, allow_nan=False)
