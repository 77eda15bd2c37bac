"""Recombining binomial lattice of underlying prices."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np

from binomial_lattice.errors import InvalidInputError
from binomial_lattice.types import TreeParameters

# Layers appended beyond the requested horizon so that depth 1 and depth 2
# always hold interior nodes for Greek extraction.
GREEK_LAYERS = 2


@dataclass(frozen=True, slots=True)
class Lattice:
    """Underlying prices of a recombining tree, one layer per time step.

    Layer `k` holds `k + 1` prices in increasing order,
    `spot * up**i * down**(k - i)` for `i = 0..k`; layer 0 is `[spot]`.
    Layers are computed on demand, so only the layers a caller asks for are
    ever held in memory.
    """

    spot: float
    up: float
    down: float
    n_steps: int

    def __len__(self) -> int:
        return self.n_steps + 1

    def __iter__(self) -> Iterator[np.ndarray]:
        for k in range(len(self)):
            yield self.layer(k)

    def layer(self, k: int) -> np.ndarray:
        """Return the prices at depth `k` (ascending)."""
        if not 0 <= k <= self.n_steps:
            raise IndexError(f"layer {k} outside lattice depth 0..{self.n_steps}")
        i = np.arange(k + 1)
        return self.spot * (self.up**i) * (self.down ** (k - i))

    @property
    def terminal(self) -> np.ndarray:
        """Prices at maturity."""
        return self.layer(self.n_steps)


def build_lattice(
    spot: float, params: TreeParameters, effective_steps: int
) -> Lattice:
    """Build the lattice for `effective_steps` plus the reserved Greek layers.

    Args:
        spot: Underlying price at the root.
        params: Up/down factors of the flavor.
        effective_steps: Flavor-adjusted step count of the request.

    Returns:
        Lattice with layers `0..effective_steps + 2`.

    Raises:
        InvalidInputError: If `spot <= 0` or `effective_steps < 1`.
    """
    if spot <= 0:
        raise InvalidInputError("spot must be > 0")
    if effective_steps < 1:
        raise InvalidInputError("effective_steps must be >= 1")
    return Lattice(
        spot=float(spot),
        up=float(params.up),
        down=float(params.down),
        n_steps=int(effective_steps) + GREEK_LAYERS,
    )
