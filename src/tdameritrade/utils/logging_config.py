"""Logging configuration for the command-line entrypoints.

Library modules never configure handlers; they only do
`logger = logging.getLogger(__name__)`. Entrypoints call `setup_logging(...)`
once.

The console handler injects `record.shortname` (last dotted component of the
logger name), so console formats may use `%(shortname)s`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

# HTTP stack loggers that are noisy at DEBUG
QUIET_LOGGERS: tuple[str, ...] = ("urllib3", "requests", "charset_normalizer")


class _AddShortNameFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.shortname = record.name.rsplit(".", 1)[-1]
        return True


class _ColorFormatter(logging.Formatter):
    """Colors only the levelname; used for the console handler only."""

    _RESET = "\033[0m"
    _LEVEL_COLOR: dict[int, str] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self._LEVEL_COLOR.get(record.levelno)
        if not color:
            return super().format(record)

        original = record.levelname
        record.levelname = f"{color}{original}{self._RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def coerce_level(level: int | str) -> int:
    """Coerce a logging level given as int, digit string or level name."""
    if isinstance(level, int):
        return level

    s = str(level).strip().upper()
    if not s:
        raise ValueError("Empty logging level")
    if s.isdigit():
        return int(s)
    if s == "WARN":
        s = "WARNING"

    value = logging.getLevelName(s)
    if not isinstance(value, int):
        raise ValueError(f"Unknown logging level: {level!r}")
    return value


def setup_logging(
    level: int | str = "INFO",
    *,
    fmt_console: str = "%(asctime)s %(levelname)s %(name)s - %(message)s",
    fmt_file: str = "%(asctime)s %(levelname)s %(name)s - %(message)s",
    datefmt: str = "%Y-%m-%d %H:%M:%S",
    log_file: str | Path | None = None,
    module_levels: Mapping[str, int | str] | None = None,
    colored: bool = False,
    quiet_loggers: Iterable[str] = QUIET_LOGGERS,
) -> None:
    """Configure root logging; safe to call again (uses `force=True`).

    `quiet_loggers` are capped at WARNING unless `module_levels` says
    otherwise.
    """
    handlers: list[logging.Handler] = []

    console = logging.StreamHandler()
    console.addFilter(_AddShortNameFilter())
    formatter_cls = _ColorFormatter if colored else logging.Formatter
    console.setFormatter(formatter_cls(fmt=fmt_console, datefmt=datefmt))
    handlers.append(console)

    if log_file is not None:
        p = Path(log_file)
        p.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(p, encoding="utf-8")
        fh.setFormatter(logging.Formatter(fmt=fmt_file, datefmt=datefmt))
        handlers.append(fh)

    logging.basicConfig(level=coerce_level(level), handlers=handlers, force=True)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    for name, lvl in (module_levels or {}).items():
        logging.getLogger(name).setLevel(coerce_level(lvl))
