"""Logging setup for entrypoints.

Library modules only do `logger = logging.getLogger(__name__)`; the benchmark
driver (or a notebook) calls `setup_logging(...)` once.

The console handler injects `record.shortname` (last component of the logger
name), so console formats may use `%(shortname)s`, e.g. `lattice_engine`
instead of `binomial_lattice.engines.lattice_engine`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

_FULL_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

_LEVELS: dict[str, int] = {
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}


class _AddShortNameFilter(logging.Filter):
    """Set `record.shortname` without touching `record.name`."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.shortname = record.name.rsplit(".", 1)[-1]
        return True


class _ColorFormatter(logging.Formatter):
    """Console formatter that colors the level name only."""

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
    """Accept `logging.INFO`, `"info"`, `"20"` and return the int level."""
    if isinstance(level, int):
        return level

    label = str(level).strip().upper()
    if not label:
        raise ValueError("Empty logging level")
    if label.isdigit():
        return int(label)
    try:
        return _LEVELS[label]
    except KeyError as e:
        raise ValueError(f"Unknown logging level: {level!r}") from e


def setup_logging(
    level: int | str = "INFO",
    *,
    fmt_console: str = _FULL_FORMAT,
    log_file: str | Path | None = None,
    module_levels: Mapping[str, int | str] | None = None,
    colored: bool = False,
) -> None:
    """Configure root logging for a script run.

    Parameters
    - level: Root level (int or name).
    - fmt_console: Console format; the file handler always logs full names.
    - log_file: Optional path; parent directories are created.
    - module_levels: Per-logger overrides, e.g.
      `{"binomial_lattice.engines": "DEBUG"}` to trace step plans.
    - colored: ANSI-color the console level names.

    Uses `force=True` so repeated calls replace earlier handlers.
    """
    handlers: list[logging.Handler] = []

    console = logging.StreamHandler()
    console.addFilter(_AddShortNameFilter())
    formatter_cls = _ColorFormatter if colored else logging.Formatter
    console.setFormatter(formatter_cls(fmt=fmt_console, datefmt=_DATEFMT))
    handlers.append(console)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(fmt=_FULL_FORMAT, datefmt=_DATEFMT)
        )
        handlers.append(file_handler)

    logging.basicConfig(level=coerce_level(level), handlers=handlers, force=True)

    for name, lvl in (module_levels or {}).items():
        logging.getLogger(name).setLevel(coerce_level(lvl))
