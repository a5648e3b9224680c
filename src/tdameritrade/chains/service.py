from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..api._client_helpers import encode_query
from ..api.client import Client, Response
from ..api.endpoints import get_endpoint_spec
from ..context import Context
from .models import Chains

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChainsService:
    """Option-chain endpoint of the TD Ameritrade API.

    Callers provide fully-formed query values (`symbol`, `strategy`,
    `strikeCount`, ...); they are URL-encoded and passed through without
    validation or defaults. See
    https://developer.tdameritrade.com/option-chains/apis/get/marketdata/chains
    for the broker-defined names.
    """

    client: Client

    def get_chains(
        self,
        ctx: Context | None,
        query_values: Mapping[str, Any] | None,
    ) -> tuple[Chains, Response]:
        """Fetch and decode one option-chain snapshot.

        Parameters
        ----------
        ctx:
            Cancellation/deadline handle, or `None` to wait for the transport
            timeout.
        query_values:
            Query parameters. Sequence values repeat the key.

        Returns
        -------
        (Chains, Response)
            The decoded chain and the response metadata.

        Raises
        ------
        RequestConstructionError
            If the client's base URL is malformed (no I/O attempted).
        TransportError
            Network or HTTP-status failure; `.response` holds any metadata.
        DecodeError
            Body is not valid JSON or violates the chains schema.
        ContextCancelled
            If `ctx` is cancelled or its deadline passes first.
        """
        endpoint = get_endpoint_spec("chains")
        query = encode_query(query_values)
        path = f"{endpoint.path}?{query}" if query else endpoint.path

        request = self.client.new_request(endpoint.method, path)
        resp, body = self.client.do(ctx, request)

        chains = Chains.from_json(body)
        logger.debug(
            "Decoded chains symbol=%s status=%s calls=%d puts=%d",
            chains.symbol,
            chains.status,
            len(chains.call_exp_date_map),
            len(chains.put_exp_date_map),
        )
        return chains, resp
