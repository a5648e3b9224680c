from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

ACCESS_TOKEN_ENV = "TDA_ACCESS_TOKEN"
API_KEY_ENV = "TDA_API_KEY"


def add_config_arg(parser, *, default: str | None = None) -> None:
    parser.add_argument(
        "--config",
        type=str,
        default=default,
        help="Path to a YAML config file.",
    )


def load_yaml_config(path: str | Path | None) -> dict[str, Any]:
    if path is None:
        return {}

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {p}")

    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a YAML mapping at the top level.")

    return data


def deep_merge(
    base: Mapping[str, Any],
    updates: Mapping[str, Any],
) -> dict[str, Any]:
    """Recursively merge `updates` over `base`; non-mapping values replace."""
    merged: dict[str, Any] = {
        k: deep_merge(v, {}) if isinstance(v, Mapping) else v
        for k, v in base.items()
    }

    for key, value in updates.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value

    return merged


def build_config(
    defaults: Mapping[str, Any],
    yaml_path: str | Path | None,
    overrides: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Layer config as defaults < YAML file < CLI overrides."""
    config = deep_merge(defaults, load_yaml_config(yaml_path))
    if overrides:
        config = deep_merge(config, overrides)
    return config


def resolve_path(value: str | Path | None) -> Path | None:
    if value is None:
        return None
    if isinstance(value, Path):
        return value
    return Path(os.path.expandvars(os.path.expanduser(str(value))))


def resolve_secret(value: str | None, env_var: str) -> str | None:
    """Return the configured secret, falling back to `env_var`.

    Values of the form `${NAME}` are expanded from the environment so YAML
    files never need to hold the secret itself.
    """
    if value:
        expanded = os.path.expandvars(str(value)).strip()
        if expanded and not expanded.startswith("$"):
            return expanded
    env_value = os.environ.get(env_var, "").strip()
    return env_value or None
