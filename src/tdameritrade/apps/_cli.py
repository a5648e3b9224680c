"""Shared CLI helper utilities for app entrypoints."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

_SECRET_KEYS = {"access_token", "api_key", "apikey"}


def add_print_config_arg(parser) -> None:
    """Add a `--print-config` flag to a parser."""
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Print merged config (JSON, secrets masked) and exit.",
    )


def add_dry_run_arg(parser) -> None:
    """Add a `--dry-run` flag to a parser."""
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate config and log the request plan without sending it.",
    )


def parse_key_values(items: Iterable[str] | None) -> dict[str, str]:
    """Parse repeated `KEY=VALUE` arguments into a mapping."""
    out: dict[str, str] = {}
    for item in items or ():
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got {item!r}")
        out[key] = value
    return out


def collect_logging_overrides(args) -> dict[str, Any]:
    """Collect logging override values from parsed CLI args."""
    overrides: dict[str, Any] = {}
    if getattr(args, "log_level", None):
        overrides["level"] = args.log_level
    if getattr(args, "log_file", None):
        overrides["file"] = args.log_file
    if getattr(args, "log_format", None):
        overrides["format"] = args.log_format
    if getattr(args, "log_color", None) is not None:
        overrides["color"] = args.log_color
    return overrides


def _normalize(obj: Any) -> Any:
    """Convert paths/mappings/sequences to JSON-serializable structures."""
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, Mapping):
        return {
            str(k): ("***" if k in _SECRET_KEYS and v else _normalize(v))
            for k, v in obj.items()
        }
    if isinstance(obj, (list, tuple, set)):
        return [_normalize(v) for v in obj]
    return obj


def print_config(config: Mapping[str, Any]) -> None:
    """Pretty-print merged config as deterministic JSON."""
    print(json.dumps(_normalize(config), indent=2, sort_keys=True))


def log_dry_run(logger, plan: Mapping[str, Any]) -> None:
    """Log the dry-run plan as formatted JSON."""
    logger.info("DRY RUN: no request was sent.")
    logger.info(
        "DRY RUN plan:\n%s", json.dumps(_normalize(plan), indent=2, sort_keys=True)
    )
