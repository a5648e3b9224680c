from __future__ import annotations

import math

import polars as pl

from tdameritrade.chains import Chains, chains_to_frame, contracts_schema


def test_chains_to_frame_one_row_per_contract(chains_payload) -> None:
    chains_payload["putExpDateMap"] = {
        "2024-01-19:30": {"145.0": [{"putCall": "PUT", "delta": -0.31}]}
    }
    df = chains_to_frame(Chains.from_payload(chains_payload))

    assert df.height == 2
    assert df["side"].to_list() == ["CALL", "PUT"]
    assert df["expiration_key"].to_list() == ["2024-01-19:30", "2024-01-19:30"]
    assert df["strike_key"].to_list() == ["150.0", "145.0"]
    assert df["open_interest"].to_list() == [20344, 0]


def test_chains_to_frame_keeps_nan_greeks(chains_payload) -> None:
    df = chains_to_frame(Chains.from_payload(chains_payload))

    assert df.schema["delta"] == pl.Float64
    assert math.isnan(df["delta"][0])
    assert df["gamma"][0] == 0.015
    assert df["rho"][0] == math.inf


def test_chains_to_frame_empty_has_full_schema() -> None:
    df = chains_to_frame(Chains())

    assert df.height == 0
    assert df.columns == list(contracts_schema())
    assert df.schema["in_the_money"] == pl.Boolean
    assert df.schema["expiration_date"] == pl.Int64
