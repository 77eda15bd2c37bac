#!/usr/bin/env python
"""Price one European option with every tree flavor and compare to Black-Scholes.

Typical usage:
    python -m binomial_lattice.apps.benchmark --config config/benchmark.yml
    python -m binomial_lattice.apps.benchmark --flavors crr leisen_reimer --steps 201
    lattice-benchmark --option-type call --spot 100 --strike 100 --convergence 51 201 801

Config precedence: CLI > YAML > defaults.
"""

from __future__ import annotations

import argparse
import logging
from typing import Any

from binomial_lattice.apps._cli import (
    add_dry_run_arg,
    add_print_config_arg,
    ensure_list,
    log_dry_run,
    print_config,
)
from binomial_lattice.benchmark import (
    convergence_table,
    format_benchmark_report,
    run_benchmark,
)
from binomial_lattice.cli import (
    DEFAULT_LOGGING,
    add_config_arg,
    add_logging_args,
    build_config,
    collect_logging_overrides,
    resolve_path,
    setup_logging_from_config,
)
from binomial_lattice.errors import LatticeError
from binomial_lattice.models.black_scholes import bs_greeks
from binomial_lattice.models.parameterization import TreeFlavor, normalize_flavor
from binomial_lattice.types import ModelInputs

# Put struck at 300 on a spot of 334, one year to maturity.
DEFAULT_CONFIG: dict[str, Any] = {
    "logging": DEFAULT_LOGGING,
    "dry_run": False,
    "option": {
        "type": "put",
        "spot": 334.0,
        "strike": 300.0,
        "rate": 0.001,
        "dividend_yield": 0.0,
        "volatility": 0.20,
        "time_to_maturity": 1.0,
    },
    "flavors": [flavor.value for flavor in TreeFlavor],
    "steps": 801,
    "max_workers": 1,
    "convergence_steps": None,
    "output": None,
}

_OPTION_ARGS: dict[str, str] = {
    "option_type": "type",
    "spot": "spot",
    "strike": "strike",
    "rate": "rate",
    "dividend_yield": "dividend_yield",
    "volatility": "volatility",
    "maturity": "time_to_maturity",
}


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Benchmark binomial tree flavors against Black-Scholes."
    )
    add_config_arg(parser)
    add_logging_args(parser)
    add_print_config_arg(parser)
    add_dry_run_arg(parser)

    parser.add_argument(
        "--option-type",
        choices=["call", "put", "C", "P"],
        default=None,
        help="Option side.",
    )
    parser.add_argument("--spot", type=float, default=None, help="Spot price.")
    parser.add_argument("--strike", type=float, default=None, help="Strike price.")
    parser.add_argument(
        "--rate",
        type=float,
        default=None,
        help="Continuously-compounded risk-free rate (decimal).",
    )
    parser.add_argument(
        "--dividend-yield",
        type=float,
        default=None,
        help="Continuously-compounded dividend yield (decimal).",
    )
    parser.add_argument(
        "--volatility",
        type=float,
        default=None,
        help="Annualized volatility (decimal).",
    )
    parser.add_argument(
        "--maturity",
        type=float,
        default=None,
        help="Time to maturity in years.",
    )
    parser.add_argument(
        "--flavors",
        nargs="+",
        default=None,
        help="Tree flavors to run (space-separated names or aliases).",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=None,
        help="Requested number of lattice steps.",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Price flavors in parallel threads when > 1.",
    )
    parser.add_argument(
        "--convergence",
        nargs="+",
        type=int,
        default=None,
        help="Also report errors for each flavor over these step counts.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Optional CSV path for the benchmark table.",
    )

    return parser.parse_args(argv)


def _build_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}

    option: dict[str, Any] = {}
    for arg_name, key in _OPTION_ARGS.items():
        value = getattr(args, arg_name)
        if value is not None:
            option[key] = value
    if option:
        overrides["option"] = option

    if args.flavors is not None:
        overrides["flavors"] = args.flavors
    if args.steps is not None:
        overrides["steps"] = args.steps
    if args.max_workers is not None:
        overrides["max_workers"] = args.max_workers
    if args.convergence is not None:
        overrides["convergence_steps"] = args.convergence
    if args.output is not None:
        overrides["output"] = args.output
    if args.dry_run:
        overrides["dry_run"] = True

    logging_overrides = collect_logging_overrides(args)
    if logging_overrides:
        overrides["logging"] = logging_overrides

    return overrides


def inputs_from_config(option_cfg: dict[str, Any]) -> ModelInputs:
    """Build `ModelInputs` from the `option` config section."""
    return ModelInputs(
        spot=option_cfg["spot"],
        strike=option_cfg["strike"],
        rate=option_cfg.get("rate", 0.0),
        dividend_yield=option_cfg.get("dividend_yield", 0.0),
        volatility=option_cfg["volatility"],
        time_to_maturity=option_cfg["time_to_maturity"],
        option_type=option_cfg.get("type", "call"),
    )


def _run(config: dict[str, Any], logger: logging.Logger) -> None:
    inputs = inputs_from_config(config["option"])
    flavors = [normalize_flavor(f) for f in ensure_list(config.get("flavors")) or []]
    if not flavors:
        flavors = list(TreeFlavor)
    steps = config["steps"]
    max_workers = config["max_workers"]
    convergence_steps = ensure_list(config.get("convergence_steps"))
    output = resolve_path(config.get("output"))

    logger.info("Option type:      %s", inputs.option_type.value)
    logger.info("Maturity (years): %s", inputs.time_to_maturity)
    logger.info("Underlying price: %s", inputs.spot)
    logger.info("Strike:           %s", inputs.strike)
    logger.info("Risk-free rate:   %s", inputs.rate)
    logger.info("Dividend yield:   %s", inputs.dividend_yield)
    logger.info("Volatility:       %s", inputs.volatility)
    logger.info("Flavors:          %s", [f.value for f in flavors])
    logger.info("Steps:            %s", steps)
    logger.info("Max workers:      %s", max_workers)

    if config.get("dry_run", False):
        log_dry_run(
            logger,
            {
                "action": "lattice_benchmark",
                "option": config["option"],
                "flavors": flavors,
                "steps": steps,
                "max_workers": max_workers,
                "convergence_steps": convergence_steps,
                "output": output,
            },
        )
        return

    table = run_benchmark(inputs, flavors, steps=steps, max_workers=max_workers)
    print(format_benchmark_report(inputs, table, bs_greeks(inputs)))

    if convergence_steps:
        for flavor in flavors:
            errors = convergence_table(inputs, flavor, convergence_steps)
            print(f"Convergence ({flavor.value})")
            print(errors.to_string(na_rep="n/a"))
            print()

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        table.to_csv(output, index=False)
        logger.info("Wrote benchmark table to %s", output)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    overrides = _build_overrides(args)
    config = build_config(DEFAULT_CONFIG, args.config, overrides)

    if args.print_config:
        print_config(config)
        return

    setup_logging_from_config(config.get("logging"))
    logger = logging.getLogger(__name__)

    try:
        _run(config, logger)
    except LatticeError as e:
        logger.error("Pricing failed: %s", e)
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
