from __future__ import annotations

import requests

from tdameritrade.api._client_helpers import (
    encode_query,
    error_message,
    params_summary,
    retry_after_seconds,
)


def test_encode_query_sorts_keys_and_drops_none() -> None:
    assert encode_query({"symbol": "SPY", "contractType": "CALL", "toDate": None}) == (
        "contractType=CALL&symbol=SPY"
    )


def test_encode_query_empty() -> None:
    assert encode_query(None) == ""
    assert encode_query({}) == ""


def test_params_summary_redacts_secrets_and_hides_other_values() -> None:
    url = "https://x/v1/marketdata/chains?symbol=AAPL&strikeCount=5&apikey=s3cret"
    assert params_summary(url) == "strikeCount,symbol=AAPL"


def _response(body: bytes, headers: dict[str, str] | None = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = 500
    resp._content = body
    resp.encoding = "utf-8"
    resp.reason = "Internal Server Error"
    resp.headers.update(headers or {})
    return resp


def test_retry_after_seconds_parses_numeric_header() -> None:
    assert retry_after_seconds(_response(b"", {"Retry-After": "2.5"}), 9.0) == 2.5
    assert retry_after_seconds(_response(b"", {"Retry-After": "soon"}), 9.0) == 9.0
    assert retry_after_seconds(_response(b""), 9.0) == 9.0


def test_error_message_prefers_json_error_field() -> None:
    assert error_message(_response(b'{"error": "Bad symbol"}')) == "Bad symbol"
    assert error_message(_response(b"plain failure")) == "plain failure"
    assert error_message(_response(b"")) == "Internal Server Error"


def test_retry_after_seconds_clamps_negative_header() -> None:
    assert retry_after_seconds(_response(b"", {"Retry-After": "-3"}), 9.0) == 0.0
