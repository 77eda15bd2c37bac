"""Delta and Gamma read off existing lattice node values."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from binomial_lattice.errors import DegenerateGeometryError, InvalidInputError

# Relative spacing below which two nodes are treated as coincident.
_MIN_RELATIVE_SPREAD = 1e-12


@dataclass(frozen=True, slots=True)
class LatticeGreeks:
    delta: float
    gamma: float


def _spread(upper: float, lower: float, where: str) -> float:
    spread = float(upper) - float(lower)
    scale = max(abs(float(upper)), abs(float(lower)))
    if not math.isfinite(spread) or spread <= _MIN_RELATIVE_SPREAD * scale:
        raise DegenerateGeometryError(
            f"node spacing collapsed at {where} (upper={upper!r}, lower={lower!r})"
        )
    return spread


def extract_greeks(
    layer1_values: Sequence[float],
    layer1_prices: Sequence[float],
    layer2_values: Sequence[float],
    layer2_prices: Sequence[float],
) -> LatticeGreeks:
    """Compute Delta from depth 1 and Gamma from depth 2 of the lattice.

    Inputs are ordered from the lowest node to the highest, as produced by
    `Lattice.layer` and `backward_induction`.

    The results are raw finite differences and are not clipped: where the
    node values are linear in spot (deep in or out of the money, low
    volatility), Delta can overshoot +/-1 and Gamma can dip below zero by
    rounding noise of order 1e-13.

    Raises:
        DegenerateGeometryError: If node prices coincide at either depth.
    """
    if len(layer1_values) != 2 or len(layer1_prices) != 2:
        raise InvalidInputError("depth 1 must hold exactly 2 nodes")
    if len(layer2_values) != 3 or len(layer2_prices) != 3:
        raise InvalidInputError("depth 2 must hold exactly 3 nodes")

    v_d, v_u = layer1_values
    s_d, s_u = layer1_prices
    delta = (v_u - v_d) / _spread(s_u, s_d, "depth 1")

    v_dd, v_ud, v_uu = layer2_values
    s_dd, s_ud, s_uu = layer2_prices
    delta_up = (v_uu - v_ud) / _spread(s_uu, s_ud, "depth 2 (upper)")
    delta_down = (v_ud - v_dd) / _spread(s_ud, s_dd, "depth 2 (lower)")
    gamma = (delta_up - delta_down) / (0.5 * _spread(s_uu, s_dd, "depth 2"))

    if not (math.isfinite(delta) and math.isfinite(gamma)):
        raise DegenerateGeometryError("non-finite Greeks from lattice nodes")
    return LatticeGreeks(delta=float(delta), gamma=float(gamma))
