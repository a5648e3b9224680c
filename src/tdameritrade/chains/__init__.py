"""Public API for the option-chains endpoint."""

from __future__ import annotations

from .frames import chains_to_frame, contracts_schema
from .models import Chains, ExpDateMap, ExpDateOption, Underlying
from .service import ChainsService

__all__ = [
    "Chains",
    "ChainsService",
    "ExpDateMap",
    "ExpDateOption",
    "Underlying",
    "chains_to_frame",
    "contracts_schema",
]
