#!/usr/bin/env python
"""Fetch one TD Ameritrade option-chain snapshot.

Typical usage
-------------
    python -m tdameritrade.apps.chains --symbol AAPL --strike-count 10
    python -m tdameritrade.apps.chains --config config/chains.yml --out aapl.parquet
    tda-chains --symbol SPY --param range=NTM --param includeQuotes=TRUE

The access token is read from `client.access_token` in the config or from
the `TDA_ACCESS_TOKEN` environment variable.

Config precedence: CLI > YAML > defaults.
"""

from __future__ import annotations

import argparse
import logging
from typing import Any

from tdameritrade.api import DEFAULT_BASE_URL, Client, get_endpoint_spec
from tdameritrade.apps._cli import (
    add_dry_run_arg,
    add_print_config_arg,
    collect_logging_overrides,
    log_dry_run,
    parse_key_values,
    print_config,
)
from tdameritrade.chains import ChainsService, chains_to_frame
from tdameritrade.cli import (
    ACCESS_TOKEN_ENV,
    API_KEY_ENV,
    DEFAULT_LOGGING,
    add_config_arg,
    add_logging_args,
    build_config,
    resolve_path,
    resolve_secret,
    setup_logging_from_config,
)
from tdameritrade.context import Context
from tdameritrade.errors import TDAmeritradeError

DEFAULT_CONFIG: dict[str, Any] = {
    "logging": DEFAULT_LOGGING,
    "dry_run": False,
    "client": {
        "base_url": DEFAULT_BASE_URL,
        "access_token": None,
        "api_key": None,
        "timeout_s": 30.0,
        "max_retries": 0,
        "backoff_s": 0.75,
    },
    # Passed through verbatim as query values; None entries are dropped.
    "query": {
        "symbol": None,
        "strategy": "SINGLE",
        "contractType": None,
        "strikeCount": None,
        "fromDate": None,
        "toDate": None,
    },
    # Overall deadline for the call (seconds); None waits for the transport.
    "deadline_s": None,
    "out": None,
}


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    """Parse CLI arguments for the option-chain app."""
    parser = argparse.ArgumentParser(
        description="Fetch a TD Ameritrade option-chain snapshot."
    )
    add_config_arg(parser)
    add_logging_args(parser)
    add_print_config_arg(parser)
    add_dry_run_arg(parser)

    parser.add_argument("--symbol", type=str, default=None, help="Underlying symbol.")
    parser.add_argument(
        "--strategy",
        type=str,
        default=None,
        help="Chain strategy (e.g., SINGLE, ANALYTICAL, VERTICAL).",
    )
    parser.add_argument(
        "--contract-type",
        type=str,
        default=None,
        choices=["CALL", "PUT", "ALL"],
        help="Contract type filter.",
    )
    parser.add_argument(
        "--strike-count",
        type=int,
        default=None,
        help="Number of strikes above/below the at-the-money price.",
    )
    parser.add_argument(
        "--from-date",
        type=str,
        default=None,
        help="Only expirations on/after this date (yyyy-MM-dd).",
    )
    parser.add_argument(
        "--to-date",
        type=str,
        default=None,
        help="Only expirations on/before this date (yyyy-MM-dd).",
    )
    parser.add_argument(
        "--param",
        action="append",
        default=None,
        metavar="KEY=VALUE",
        help="Extra query parameter (repeatable).",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="API base URL (must end with '/').",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Overall deadline in seconds for the request.",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=None,
        help="Retries on 429/5xx/transport errors (default 0).",
    )
    parser.add_argument(
        "--out",
        type=str,
        default=None,
        help="Write flattened contracts to this parquet file instead of printing JSON.",
    )

    return parser.parse_args(argv)


def _build_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Build config overrides from parsed CLI arguments."""
    overrides: dict[str, Any] = {}

    query: dict[str, Any] = {}
    if args.symbol:
        query["symbol"] = args.symbol.upper()
    if args.strategy:
        query["strategy"] = args.strategy.upper()
    if args.contract_type:
        query["contractType"] = args.contract_type
    if args.strike_count is not None:
        query["strikeCount"] = args.strike_count
    if args.from_date:
        query["fromDate"] = args.from_date
    if args.to_date:
        query["toDate"] = args.to_date
    query.update(parse_key_values(args.param))
    if query:
        overrides["query"] = query

    client: dict[str, Any] = {}
    if args.base_url:
        client["base_url"] = args.base_url
    if args.max_retries is not None:
        client["max_retries"] = args.max_retries
    if client:
        overrides["client"] = client

    if args.timeout is not None:
        overrides["deadline_s"] = args.timeout
    if args.out:
        overrides["out"] = args.out
    if args.dry_run:
        overrides["dry_run"] = True

    logging_overrides = collect_logging_overrides(args)
    if logging_overrides:
        overrides["logging"] = logging_overrides

    return overrides


def _build_client(client_cfg: dict[str, Any]) -> Client:
    return Client(
        access_token=resolve_secret(client_cfg.get("access_token"), ACCESS_TOKEN_ENV),
        api_key=resolve_secret(client_cfg.get("api_key"), API_KEY_ENV),
        base_url=client_cfg["base_url"],
        timeout_s=float(client_cfg["timeout_s"]),
        max_retries=int(client_cfg["max_retries"]),
        backoff_s=float(client_cfg["backoff_s"]),
    )


def main(argv: list[str] | None = None) -> None:
    """Run the option-chain fetch entrypoint."""
    args = _parse_args(argv)
    overrides = _build_overrides(args)
    config = build_config(DEFAULT_CONFIG, args.config, overrides)
    if args.print_config:
        print_config(config)
        return

    setup_logging_from_config(config.get("logging"))
    logger = logging.getLogger(__name__)

    query = {k: v for k, v in (config.get("query") or {}).items() if v is not None}
    if not query.get("symbol"):
        raise ValueError("A symbol is required (--symbol or query.symbol).")

    documented = set(get_endpoint_spec("chains").documented)
    unknown = sorted(k for k in query if k not in documented)
    if unknown:
        logger.warning("Query keys not documented for chains: %s", unknown)

    out = resolve_path(config.get("out"))
    deadline_s = config.get("deadline_s")
    client = _build_client(config["client"])

    logger.info("Base URL:     %s", client.base_url)
    logger.info("Query:        %s", query)
    logger.info("Deadline (s): %s", deadline_s)
    logger.info("Output:       %s", out or "stdout (JSON)")
    if not client.access_token and not client.api_key:
        logger.warning(
            "No access token or API key configured (set %s or %s).",
            ACCESS_TOKEN_ENV,
            API_KEY_ENV,
        )

    if config.get("dry_run", False):
        log_dry_run(
            logger,
            {
                "action": "tda_chains",
                "base_url": client.base_url,
                "query": query,
                "deadline_s": deadline_s,
                "out": out,
            },
        )
        return

    service = ChainsService(client)
    root = Context()
    ctx = root.with_timeout(float(deadline_s)) if deadline_s is not None else root

    try:
        with ctx:
            chains, resp = service.get_chains(ctx, query)
    except TDAmeritradeError as e:
        logger.error("Chains request failed: %s", e)
        raise SystemExit(1) from e

    n_contracts = sum(1 for _ in chains.iter_options())
    logger.info(
        "Chains symbol=%s status=%s http=%s expirations(calls/puts)=%d/%d contracts=%d",
        chains.symbol,
        chains.status,
        resp.status_code,
        len(chains.call_exp_date_map),
        len(chains.put_exp_date_map),
        n_contracts,
    )

    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        chains_to_frame(chains).write_parquet(out)
        logger.info("Wrote %d contracts to %s", n_contracts, out)
    else:
        print(chains.to_json())


if __name__ == "__main__":
    main()
