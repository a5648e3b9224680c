"""Typed client for the TD Ameritrade option-chains endpoint."""

from __future__ import annotations

from .api import Client, Response
from .chains import Chains, ChainsService, ExpDateOption, Underlying
from .context import Context
from .errors import (
    ContextCancelled,
    DeadlineExceeded,
    DecodeError,
    RequestConstructionError,
    TDAmeritradeError,
    TransportError,
)
from .special_float import SpecialFloat

__all__ = [
    "Chains",
    "ChainsService",
    "Client",
    "Context",
    "ContextCancelled",
    "DeadlineExceeded",
    "DecodeError",
    "ExpDateOption",
    "RequestConstructionError",
    "Response",
    "SpecialFloat",
    "TDAmeritradeError",
    "TransportError",
    "Underlying",
]
