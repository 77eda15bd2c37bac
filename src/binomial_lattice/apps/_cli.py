"""Shared CLI helper utilities for app entrypoints."""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any


def ensure_list(value: Any) -> list[Any] | None:
    """Normalize a scalar/iterable value into a list or `None`."""
    if value is None:
        return None
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def add_print_config_arg(parser) -> None:
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Print merged config (JSON) and exit.",
    )


def add_dry_run_arg(parser) -> None:
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate config and log the pricing plan without running it.",
    )


def _normalize(obj: Any) -> Any:
    """Convert paths/enums/mappings/sequences to JSON-serializable values."""
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, Mapping):
        return {str(k): _normalize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [_normalize(v) for v in obj]
    return obj


def to_json(obj: Any) -> str:
    return json.dumps(_normalize(obj), indent=2, sort_keys=True)


def print_config(config: Mapping[str, Any]) -> None:
    print(to_json(config))


def log_dry_run(logger, plan: Mapping[str, Any]) -> None:
    logger.info("DRY RUN: no options were priced.")
    logger.info("DRY RUN plan:\n%s", to_json(plan))
