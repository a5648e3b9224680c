from .config import (
    ACCESS_TOKEN_ENV,
    API_KEY_ENV,
    add_config_arg,
    build_config,
    load_yaml_config,
    resolve_path,
    resolve_secret,
)
from .logging import (
    DEFAULT_LOGGING,
    add_logging_args,
    setup_logging_from_config,
)

__all__ = [
    "ACCESS_TOKEN_ENV",
    "API_KEY_ENV",
    "DEFAULT_LOGGING",
    "add_config_arg",
    "add_logging_args",
    "build_config",
    "load_yaml_config",
    "resolve_path",
    "resolve_secret",
    "setup_logging_from_config",
]
