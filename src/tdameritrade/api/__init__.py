"""HTTP transport shared by the TD Ameritrade endpoint services."""

from __future__ import annotations

from ._abortable import new_session
from .client import DEFAULT_BASE_URL, Client, Response
from .endpoints import ENDPOINTS, EndpointSpec, get_endpoint_spec

__all__ = [
    "DEFAULT_BASE_URL",
    "ENDPOINTS",
    "Client",
    "EndpointSpec",
    "Response",
    "get_endpoint_spec",
    "new_session",
]
