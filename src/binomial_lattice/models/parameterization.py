"""Tree flavors: rules mapping model inputs to up/down factors and probability.

Every flavor discretizes the same lognormal process. They differ in how the
step sizes and the transition probability are matched to the continuous
model, which drives convergence speed and smoothness in the step count:

- CRR, Trigeorgis: equal jumps in log price.
- Jarrow-Rudd, Additive EQP: equal probabilities, drift carried by the jumps.
- Tian: matches the first three moments of the one-step price ratio.
- Leisen-Reimer, Joshi4: strike-centered, odd step counts only, with smooth
  (near-monotone) convergence.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from enum import StrEnum

from binomial_lattice.errors import (
    ArbitrageViolationError,
    DegenerateGeometryError,
    InvalidInputError,
)
from binomial_lattice.types import ModelInputs, TreeParameters


class TreeFlavor(StrEnum):
    """Closed set of supported lattice parameterizations."""

    CRR = "crr"
    JARROW_RUDD = "jarrow_rudd"
    TRIGEORGIS = "trigeorgis"
    TIAN = "tian"
    ADDITIVE_EQP = "additive_eqp"
    LEISEN_REIMER = "leisen_reimer"
    JOSHI4 = "joshi4"


_FLAVOR_ALIASES: dict[str, TreeFlavor] = {
    "cox_ross_rubinstein": TreeFlavor.CRR,
    "coxrossrubinstein": TreeFlavor.CRR,
    "jr": TreeFlavor.JARROW_RUDD,
    "jarrowrudd": TreeFlavor.JARROW_RUDD,
    "eqp": TreeFlavor.ADDITIVE_EQP,
    "additiveeqp": TreeFlavor.ADDITIVE_EQP,
    "lr": TreeFlavor.LEISEN_REIMER,
    "leisenreimer": TreeFlavor.LEISEN_REIMER,
    "joshi": TreeFlavor.JOSHI4,
}


def normalize_flavor(flavor: TreeFlavor | str) -> TreeFlavor:
    """Resolve a flavor enum, canonical name, or alias (case-insensitive)."""
    if isinstance(flavor, TreeFlavor):
        return flavor
    key = str(flavor).strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return TreeFlavor(key)
    except ValueError:
        pass
    try:
        return _FLAVOR_ALIASES[key]
    except KeyError as e:
        known = ", ".join(f.value for f in TreeFlavor)
        raise InvalidInputError(
            f"Unknown tree flavor {flavor!r}; expected one of: {known}"
        ) from e


def _risk_neutral_probability(
    growth: float, up: float, down: float, flavor: TreeFlavor
) -> float:
    """Up probability matching the one-step growth factor."""
    if not up > down:
        raise DegenerateGeometryError(
            f"{flavor.value} node spacing collapsed (up={up!r}, down={down!r}); "
            "volatility too small for this step size"
        )
    return (growth - down) / (up - down)


class TreeParameterization(ABC):
    """Strategy computing `(up, down, p_up)` for one flavor."""

    flavor: TreeFlavor

    def adjust_steps(self, requested_steps: int) -> int:
        """Return the step count this flavor needs for a request."""
        return requested_steps

    @abstractmethod
    def tree_parameters(
        self, inputs: ModelInputs, dt: float, n_steps: int
    ) -> TreeParameters:
        """Return tree parameters for a lattice of `n_steps` steps of size `dt`."""


class _OddStepParameterization(TreeParameterization):
    """Strike-centered flavors that need an odd number of lattice steps."""

    def adjust_steps(self, requested_steps: int) -> int:
        return requested_steps if requested_steps % 2 else requested_steps + 1

    @staticmethod
    @abstractmethod
    def inversion(z: float, n_steps: int) -> float:
        """Binomial approximation of the normal CDF at `z` for `n_steps`."""

    def tree_parameters(
        self, inputs: ModelInputs, dt: float, n_steps: int
    ) -> TreeParameters:
        if n_steps % 2 == 0:
            raise InvalidInputError(
                f"{self.flavor.value} requires an odd step count, got {n_steps}"
            )
        if inputs.volatility <= 0:
            raise InvalidInputError(f"{self.flavor.value} requires volatility > 0")

        std = inputs.volatility * math.sqrt(dt * n_steps)
        if not std > 0.0:
            raise DegenerateGeometryError(
                f"{self.flavor.value} terminal spread vanished (std={std!r})"
            )
        d2 = (
            math.log(inputs.spot / inputs.strike) + inputs.log_drift * dt * n_steps
        ) / std
        growth = math.exp(inputs.carry * dt)

        p_up = self.inversion(d2, n_steps)
        p_dash = self.inversion(d2 + std, n_steps)
        if not 0.0 < p_up < 1.0:
            raise ArbitrageViolationError(
                f"{self.flavor.value} up probability outside (0, 1): p_up={p_up!r} "
                f"(standardized moneyness d2={d2:.6g})"
            )
        up = growth * p_dash / p_up
        down = (growth - p_up * up) / (1.0 - p_up)
        return TreeParameters(up=up, down=down, p_up=p_up)


class CoxRossRubinstein(TreeParameterization):
    flavor = TreeFlavor.CRR

    def tree_parameters(
        self, inputs: ModelInputs, dt: float, n_steps: int
    ) -> TreeParameters:
        up = math.exp(inputs.volatility * math.sqrt(dt))
        down = 1.0 / up
        p_up = _risk_neutral_probability(
            math.exp(inputs.carry * dt), up, down, self.flavor
        )
        return TreeParameters(up=up, down=down, p_up=p_up)


class JarrowRudd(TreeParameterization):
    flavor = TreeFlavor.JARROW_RUDD

    def tree_parameters(
        self, inputs: ModelInputs, dt: float, n_steps: int
    ) -> TreeParameters:
        drift = inputs.log_drift * dt
        jump = inputs.volatility * math.sqrt(dt)
        return TreeParameters(
            up=math.exp(drift + jump),
            down=math.exp(drift - jump),
            p_up=0.5,
        )


class Trigeorgis(TreeParameterization):
    flavor = TreeFlavor.TRIGEORGIS

    def tree_parameters(
        self, inputs: ModelInputs, dt: float, n_steps: int
    ) -> TreeParameters:
        drift = inputs.log_drift * dt
        dx = math.sqrt(inputs.volatility**2 * dt + drift**2)
        if dx <= 0.0:
            raise DegenerateGeometryError(
                f"{self.flavor.value} node spacing collapsed (dx={dx!r})"
            )
        return TreeParameters(
            up=math.exp(dx),
            down=math.exp(-dx),
            p_up=0.5 + 0.5 * drift / dx,
        )


class Tian(TreeParameterization):
    """Third-moment matching of the one-step price ratio."""

    flavor = TreeFlavor.TIAN

    def tree_parameters(
        self, inputs: ModelInputs, dt: float, n_steps: int
    ) -> TreeParameters:
        q = math.exp(inputs.volatility**2 * dt)
        growth = math.exp(inputs.carry * dt)
        root = math.sqrt(q * q + 2.0 * q - 3.0)
        up = 0.5 * growth * q * (q + 1.0 + root)
        down = 0.5 * growth * q * (q + 1.0 - root)
        p_up = _risk_neutral_probability(growth, up, down, self.flavor)
        return TreeParameters(up=up, down=down, p_up=p_up)


class AdditiveEQP(TreeParameterization):
    """Equal-probability tree with a centered additive log-price step."""

    flavor = TreeFlavor.ADDITIVE_EQP

    def tree_parameters(
        self, inputs: ModelInputs, dt: float, n_steps: int
    ) -> TreeParameters:
        drift = inputs.log_drift * dt
        radicand = 4.0 * inputs.volatility**2 * dt - 3.0 * drift**2
        if radicand < 0:
            raise InvalidInputError(
                "additive_eqp step is undefined: volatility too small for the "
                "drift at this step size (increase steps)"
            )
        half_step = -0.5 * drift + 0.5 * math.sqrt(radicand)
        return TreeParameters(
            up=math.exp(drift + half_step),
            down=math.exp(drift - half_step),
            p_up=0.5,
        )


def peizer_pratt_inversion(z: float, n_steps: int) -> float:
    """Peizer-Pratt method 2 inversion of the normal CDF (odd `n_steps`)."""
    if n_steps % 2 == 0:
        raise InvalidInputError("Peizer-Pratt inversion requires an odd step count")
    ratio = z / (n_steps + 1.0 / 3.0 + 0.1 / (n_steps + 1.0))
    tail = math.exp(-ratio * ratio * (n_steps + 1.0 / 6.0))
    return 0.5 + math.copysign(1.0, z) * math.sqrt(0.25 * (1.0 - tail))


def joshi4_inversion(z: float, n_steps: int) -> float:
    """Joshi's fourth-order expansion of the up probability (odd `n_steps`)."""
    if n_steps % 2 == 0 or n_steps < 3:
        raise InvalidInputError("Joshi4 inversion requires an odd step count >= 3")
    k = (n_steps - 1.0) / 2.0
    root_k = math.sqrt(k)

    a = z / math.sqrt(8.0)
    a2 = a * a
    a3 = a * a2
    a5 = a3 * a2
    a7 = a5 * a2
    beta = -0.375 * a - a3
    gamma = (5.0 / 6.0) * a5 + (13.0 / 12.0) * a3 + (25.0 / 128.0) * a
    delta = -0.1025 * a - 0.9285 * a3 - 1.43 * a5 - 0.5 * a7

    return (
        0.5
        + a / root_k
        + beta / (k * root_k)
        + gamma / (k * k * root_k)
        + delta / (k * k * k * root_k)
    )


class LeisenReimer(_OddStepParameterization):
    flavor = TreeFlavor.LEISEN_REIMER
    inversion = staticmethod(peizer_pratt_inversion)


class Joshi4(_OddStepParameterization):
    flavor = TreeFlavor.JOSHI4
    inversion = staticmethod(joshi4_inversion)


_REGISTRY: dict[TreeFlavor, TreeParameterization] = {
    impl.flavor: impl
    for impl in (
        CoxRossRubinstein(),
        JarrowRudd(),
        Trigeorgis(),
        Tian(),
        AdditiveEQP(),
        LeisenReimer(),
        Joshi4(),
    )
}


def get_parameterization(flavor: TreeFlavor | str) -> TreeParameterization:
    """Return the (stateless) parameterization strategy for a flavor."""
    return _REGISTRY[normalize_flavor(flavor)]
