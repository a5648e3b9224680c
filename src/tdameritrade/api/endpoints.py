from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EndpointSpec:
    path: str
    method: str = "GET"
    # Broker-documented query keys; informational only, never enforced
    documented: tuple[str, ...] = ()


ENDPOINTS: dict[str, EndpointSpec] = {
    "chains": EndpointSpec(
        path="marketdata/chains",  # Option chain snapshot
        documented=(
            "symbol",
            "contractType",
            "strikeCount",
            "includeQuotes",
            "strategy",
            "interval",
            "strike",
            "range",
            "fromDate",
            "toDate",
            "volatility",
            "underlyingPrice",
            "interestRate",
            "daysToExpiration",
            "expMonth",
            "optionType",
        ),
    ),
}


def get_endpoint_spec(endpoint: str) -> EndpointSpec:
    """Return the path and documented params for a supported endpoint name."""
    try:
        return ENDPOINTS[endpoint]
    except KeyError as e:
        supported = ", ".join(sorted(ENDPOINTS.keys()))
        raise KeyError(
            f"Unknown TD Ameritrade endpoint '{endpoint}'. Supported: {supported}"
        ) from e
