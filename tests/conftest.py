from __future__ import annotations

import copy
import logging
from typing import Any

import pytest

from tdameritrade.utils.logging_config import QUIET_LOGGERS

_CALL_OPTION: dict[str, Any] = {
    "putCall": "CALL",
    "symbol": "AAPL_011924C150",
    "description": "AAPL Jan 19 2024 150 Call",
    "exchangeName": "OPR",
    "bid": 4.1,
    "ask": 4.25,
    "last": 4.2,
    "mark": 4.18,
    "bidSize": 12,
    "askSize": 30,
    "bidAskSize": "12X30",
    "lastSize": 1.0,
    "highPrice": 4.5,
    "lowPrice": 3.9,
    "openPrice": 0.0,
    "closePrice": 4.05,
    "totalVolume": 1520,
    "tradeDate": None,
    "tradeTimeInLong": 1705003199000,
    "quoteTimeInLong": 1705003199999,
    "netChange": 0.15,
    "volatility": 25.3,
    "delta": "NaN",
    "gamma": 0.015,
    "theta": "-0.05",
    "vega": 0.12,
    "rho": "Infinity",
    "openInterest": 20344,
    "timeValue": 1.2,
    "theoreticalOptionValue": "4.175",
    "theoreticalVolatility": 29.0,
    "optionDeliverablesList": None,
    "strikePrice": 150.0,
    "expirationDate": 1705698000000,
    "daysToExpiration": 30,
    "expirationType": "S",
    "lastTradingDay": 1705712400000,
    "multiplier": 100.0,
    "settlementType": " ",
    "deliverableNote": "",
    "isIndexOption": None,
    "percentChange": 3.7,
    "markChange": 0.13,
    "markPercentChange": 3.21,
    "inTheMoney": True,
    "mini": False,
    "nonStandard": False,
    "pennyPilot": True,
}

_PAYLOAD: dict[str, Any] = {
    "symbol": "AAPL",
    "status": "SUCCESS",
    "underlying": {
        "symbol": "AAPL",
        "description": "Apple Inc - Common Stock",
        "change": 1.2,
        "percentChange": 0.8,
        "close": 151.2,
        "quoteTime": 1705003199,
        "tradeTime": 1705003198,
        "bid": 152.3,
        "ask": 152.4,
        "last": 152.4,
        "mark": 152.35,
        "bidSize": 3,
        "askSize": 4,
        "totalVolume": 51234567,
        "exchangeName": "NASDAQ",
        "fiftyTwoWeekHigh": 199.62,
        "fiftyTwoWeekLow": 124.17,
        "delayed": True,
    },
    "strategy": "SINGLE",
    "interval": 0.0,
    "isDelayed": True,
    "isIndex": False,
    "interestRate": 5.1,
    "underlyingPrice": 152.35,
    "volatility": 29.0,
    "daysToExpiration": 0.0,
    "numberOfContracts": 1,
    "callExpDateMap": {"2024-01-19:30": {"150.0": [_CALL_OPTION]}},
    "putExpDateMap": {},
}


@pytest.fixture
def chains_payload() -> dict[str, Any]:
    """One call at one expiration/strike, with `delta: "NaN"` and `gamma: 0.015`."""
    return copy.deepcopy(_PAYLOAD)


@pytest.fixture
def restore_root_logging():
    """Undo `setup_logging` side effects (root handlers and logger levels)."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    for name in list(logging.root.manager.loggerDict):
        if name.startswith("tdameritrade") or name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.NOTSET)
