from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit

import requests

logger = logging.getLogger(__name__)

# Query keys whose values are safe and useful in logs
_LOGGED_VALUES = {"symbol", "strategy", "contractType", "fromDate", "toDate"}
_SECRET_KEYS = {"apikey"}


def jitter_sleep(base_s: float) -> float:
    """Apply random jitter to backoff sleeps."""
    return base_s * (0.7 + 0.6 * random.random())


def _wire_value(v: Any) -> str:
    if isinstance(v, bool):
        return "true" if v else "false"
    return str(v)


def encode_query(values: Mapping[str, Any] | None) -> str:
    """URL-encode query values as `key=value&...`, sorted by key.

    Sequence values repeat the key once per element; `None` values are
    dropped. Nothing else is validated or defaulted.
    """
    if not values:
        return ""

    pairs: list[tuple[str, str]] = []
    for k in sorted(values):
        v = values[k]
        if v is None:
            continue
        if isinstance(v, Sequence) and not isinstance(v, (str, bytes, bytearray)):
            pairs.extend((str(k), _wire_value(x)) for x in v if x is not None)
        else:
            pairs.append((str(k), _wire_value(v)))

    return urlencode(pairs)


def params_summary(url: str) -> str:
    """Create a safe, compact query summary for logs (never includes secrets)."""
    parts: list[str] = []
    for k, v in sorted(parse_qsl(urlsplit(url).query, keep_blank_values=True)):
        if k in _SECRET_KEYS:
            continue
        if k in _LOGGED_VALUES:
            parts.append(f"{k}={v}")
        else:
            parts.append(k)
    return ",".join(parts)


def retry_after_seconds(resp: requests.Response, default_s: float) -> float:
    """Honour a numeric `Retry-After` header, else fall back to `default_s`."""
    ra = resp.headers.get("Retry-After")
    if ra is None:
        return default_s
    try:
        return max(0.0, float(ra))
    except ValueError:
        return default_s


def error_message(resp: requests.Response) -> str:
    """Best-effort error text from a failed response body."""
    try:
        payload = resp.json()
    except ValueError:
        payload = None

    if isinstance(payload, Mapping):
        for key in ("error", "message", "errors"):
            if payload.get(key):
                return str(payload[key])

    text = (resp.text or "").strip()
    return text[:200] if text else (resp.reason or "")
