"""Flatten decoded chains into a Polars contracts table."""

from __future__ import annotations

from dataclasses import fields

import polars as pl

from ..special_float import SpecialFloat
from .models import Chains, ExpDateOption

_KEY_SCHEMA: dict[str, pl.DataType] = {
    "side": pl.Utf8,
    "expiration_key": pl.Utf8,
    "strike_key": pl.Utf8,
}

_DTYPES: dict[type, pl.DataType] = {
    str: pl.Utf8,
    int: pl.Int64,
    float: pl.Float64,
    bool: pl.Boolean,
    SpecialFloat: pl.Float64,
}


def contracts_schema() -> dict[str, pl.DataType]:
    """Column -> dtype for `chains_to_frame` output."""
    schema = dict(_KEY_SCHEMA)
    for f in fields(ExpDateOption):
        kind = f.metadata["kind"]
        schema[f.name] = _DTYPES[kind]
    return schema


def chains_to_frame(chains: Chains) -> pl.DataFrame:
    """One row per contract; greeks stay Float64 with NaN preserved."""
    schema = contracts_schema()
    names = [f.name for f in fields(ExpDateOption)]

    rows: list[dict[str, object]] = []
    for side, exp_key, strike_key, opt in chains.iter_options():
        row: dict[str, object] = {
            "side": side,
            "expiration_key": exp_key,
            "strike_key": strike_key,
        }
        for name in names:
            value = getattr(opt, name)
            row[name] = float(value) if isinstance(value, SpecialFloat) else value
        rows.append(row)

    if not rows:
        return pl.DataFrame(schema=schema)

    return pl.from_dicts(rows, schema=schema)
