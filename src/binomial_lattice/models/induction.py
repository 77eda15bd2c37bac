"""European backward induction over a binomial lattice."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from binomial_lattice.errors import InvalidInputError
from binomial_lattice.types import OptionType, OptionTypeInput, normalize_option_type

Payoff = Callable[[np.ndarray], np.ndarray]


def vanilla_payoff(
    spot: np.ndarray | float, strike: float, option_type: OptionTypeInput
) -> np.ndarray:
    """Exercise value of a vanilla call/put at the given underlying prices."""
    prices = np.asarray(spot, dtype=float)
    if normalize_option_type(option_type) == OptionType.CALL:
        return np.maximum(prices - strike, 0.0)
    return np.maximum(strike - prices, 0.0)


@dataclass(frozen=True, slots=True)
class InductionResult:
    """Root value plus the value layers kept for Greek extraction."""

    value: float
    layer1: np.ndarray
    layer2: np.ndarray


def backward_induction(
    terminal_prices: np.ndarray,
    payoff: Payoff,
    p_up: float,
    discount: float,
) -> InductionResult:
    """Roll discounted expectations from maturity back to the root.

    Each step computes `discount * (p * V[i + 1] + (1 - p) * V[i])`. Only the
    current layer is kept, except for depths 1 and 2 which are retained.
    No early-exercise test is applied (European exercise).

    Raises:
        InvalidInputError: If the terminal layer has fewer than 3 nodes, or
            `p_up` is outside `[0, 1]`.
    """
    values = payoff(np.asarray(terminal_prices, dtype=float))
    n_steps = values.size - 1
    if n_steps < 2:
        raise InvalidInputError("terminal layer must hold at least 3 nodes")
    if not 0.0 <= p_up <= 1.0:
        raise InvalidInputError(f"p_up must lie in [0, 1], got {p_up!r}")

    p_down = 1.0 - p_up
    layer1 = layer2 = values
    for step in range(n_steps - 1, -1, -1):
        values = discount * (p_up * values[1:] + p_down * values[:-1])
        if step == 2:
            layer2 = values
        elif step == 1:
            layer1 = values

    return InductionResult(value=float(values[0]), layer1=layer1, layer2=layer2)
