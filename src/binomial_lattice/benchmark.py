"""Timing and accuracy comparison of tree flavors against Black-Scholes."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import pandas as pd

from binomial_lattice.engines.lattice_engine import price_and_greeks
from binomial_lattice.models.black_scholes import bs_greeks
from binomial_lattice.models.parameterization import TreeFlavor, normalize_flavor
from binomial_lattice.types import ModelInputs, PricingResult

logger = logging.getLogger(__name__)

BENCHMARK_COLUMNS: tuple[str, ...] = (
    "flavor",
    "steps",
    "price",
    "delta",
    "gamma",
    "price_error",
    "delta_error",
    "gamma_error",
    "elapsed_ms",
)


@dataclass(frozen=True, slots=True)
class FlavorRun:
    """One timed lattice request."""

    flavor: TreeFlavor
    steps: int
    result: PricingResult
    elapsed_s: float


def timed_price(
    inputs: ModelInputs, flavor: TreeFlavor | str, steps: int
) -> FlavorRun:
    """Run one lattice request and measure its wall-clock time."""
    flavor = normalize_flavor(flavor)
    t0 = time.perf_counter()
    result = price_and_greeks(inputs, flavor, steps)
    elapsed_s = time.perf_counter() - t0
    logger.debug(
        "Priced flavor=%s steps=%d in %.2f ms", flavor.value, steps, elapsed_s * 1e3
    )
    return FlavorRun(flavor=flavor, steps=steps, result=result, elapsed_s=elapsed_s)


def _error(value: float | None, reference: float | None) -> float | None:
    if value is None or reference is None:
        return None
    return value - reference


def _row(run: FlavorRun, oracle: PricingResult) -> dict[str, object]:
    return {
        "flavor": run.flavor.value,
        "steps": run.steps,
        "price": run.result.price,
        "delta": run.result.delta,
        "gamma": run.result.gamma,
        "price_error": _error(run.result.price, oracle.price),
        "delta_error": _error(run.result.delta, oracle.delta),
        "gamma_error": _error(run.result.gamma, oracle.gamma),
        "elapsed_ms": run.elapsed_s * 1e3,
    }


def run_benchmark(
    inputs: ModelInputs,
    flavors: Iterable[TreeFlavor | str] | None = None,
    steps: int = 801,
    max_workers: int = 1,
) -> pd.DataFrame:
    """Price one option with several flavors and compare with Black-Scholes.

    Requests share no state, so `max_workers > 1` fans them out over a thread
    pool; `max_workers <= 1` runs them sequentially in flavor order.

    Returns:
        One row per flavor with price/delta/gamma, signed errors against the
        analytic values and elapsed milliseconds.
    """
    selected = [normalize_flavor(f) for f in (flavors or list(TreeFlavor))]
    oracle = bs_greeks(inputs)
    logger.info("Benchmarking %d flavor(s) at steps=%d", len(selected), steps)

    if max_workers <= 1:
        runs = [timed_price(inputs, flavor, steps) for flavor in selected]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(timed_price, inputs, flavor, steps)
                for flavor in selected
            ]
            runs = [fut.result() for fut in futures]

    rows = [_row(run, oracle) for run in runs]
    return pd.DataFrame(rows, columns=list(BENCHMARK_COLUMNS))


def convergence_table(
    inputs: ModelInputs,
    flavor: TreeFlavor | str,
    steps_grid: Sequence[int],
) -> pd.DataFrame:
    """Absolute errors against Black-Scholes across a grid of step counts."""
    oracle = bs_greeks(inputs)
    rows = []
    for steps in steps_grid:
        run = timed_price(inputs, flavor, steps)
        rows.append(
            {
                "steps": steps,
                "price": run.result.price,
                "abs_price_error": abs(run.result.price - oracle.price),
                "abs_delta_error": (
                    None
                    if run.result.delta is None or oracle.delta is None
                    else abs(run.result.delta - oracle.delta)
                ),
                "elapsed_ms": run.elapsed_s * 1e3,
            }
        )
    return pd.DataFrame(rows).set_index("steps")


def _fmt_num(value: float | None, digits: int = 6) -> str:
    return f"{value:.{digits}f}" if value is not None else "n/a"


def format_benchmark_report(
    inputs: ModelInputs,
    table: pd.DataFrame,
    oracle: PricingResult | None = None,
) -> str:
    """Format option terms, the analytic reference and the flavor table."""
    if oracle is None:
        oracle = bs_greeks(inputs)
    lines = [
        "=" * 40,
        "Option",
        "=" * 40,
        f"Option type            : {inputs.option_type.value}",
        f"Maturity (years)       : {inputs.time_to_maturity:.6f}",
        f"Underlying price       : {inputs.spot:g}",
        f"Strike                 : {inputs.strike:g}",
        f"Risk-free rate         : {inputs.rate:.4%}",
        f"Dividend yield         : {inputs.dividend_yield:.4%}",
        f"Volatility             : {inputs.volatility:.4%}",
        "",
        "=" * 40,
        "Black-Scholes",
        "=" * 40,
        f"Price                  : {_fmt_num(oracle.price)}",
        f"Delta                  : {_fmt_num(oracle.delta)}",
        f"Gamma                  : {_fmt_num(oracle.gamma)}",
        "",
    ]
    if not table.empty:
        lines.extend(
            [
                "=" * 40,
                "Binomial lattice",
                "=" * 40,
                table.to_string(index=False, na_rep="n/a"),
                "",
            ]
        )
    return "\n".join(lines)
