"""Shared lattice-pricing dataclasses and aliases."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import Literal, TypeAlias

from binomial_lattice.errors import ArbitrageViolationError, InvalidInputError


class OptionType(StrEnum):
    """Canonical option side labels used across pricing code."""

    CALL = "call"
    PUT = "put"


# Tolerant input type accepted at system boundaries (configs/tests).
OptionTypeInput: TypeAlias = OptionType | Literal["call", "put", "C", "P"]


def normalize_option_type(option_type: OptionTypeInput) -> OptionType:
    """Normalize option type labels to `OptionType`."""
    if isinstance(option_type, OptionType):
        return option_type
    label = str(option_type).strip()
    if label in ("call", "C"):
        return OptionType.CALL
    if label in ("put", "P"):
        return OptionType.PUT
    raise InvalidInputError("option_type must be one of {'call', 'put', 'C', 'P'}")


@dataclass(frozen=True)
class OptionSpec:
    """Contract terms of one European vanilla option."""

    strike: float
    time_to_expiry: float
    option_type: OptionTypeInput


@dataclass(frozen=True)
class MarketState:
    """Resolved market inputs for the option's life."""

    spot: float
    volatility: float
    rate: float = 0.0
    dividend_yield: float = 0.0


def _require_finite(name: str, value: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    return number


@dataclass(frozen=True)
class ModelInputs:
    """Scalar inputs of one pricing request.

    Rates and yields are continuously compounded, volatility is annualized and
    `time_to_maturity` is expressed in years.
    """

    spot: float
    strike: float
    rate: float
    dividend_yield: float
    volatility: float
    time_to_maturity: float
    option_type: OptionTypeInput = OptionType.CALL

    def __post_init__(self) -> None:
        for name in (
            "spot",
            "strike",
            "rate",
            "dividend_yield",
            "volatility",
            "time_to_maturity",
        ):
            object.__setattr__(self, name, _require_finite(name, getattr(self, name)))

        if self.spot <= 0:
            raise InvalidInputError("spot must be > 0")
        if self.strike <= 0:
            raise InvalidInputError("strike must be > 0")
        if self.time_to_maturity <= 0:
            raise InvalidInputError("time_to_maturity must be > 0")
        if self.volatility < 0:
            raise InvalidInputError("volatility must be >= 0")

        object.__setattr__(
            self, "option_type", normalize_option_type(self.option_type)
        )

    @classmethod
    def from_market(cls, spec: OptionSpec, state: MarketState) -> ModelInputs:
        """Build model inputs from boundary contract and market objects."""
        return cls(
            spot=state.spot,
            strike=spec.strike,
            rate=state.rate,
            dividend_yield=state.dividend_yield,
            volatility=state.volatility,
            time_to_maturity=spec.time_to_expiry,
            option_type=spec.option_type,
        )

    @property
    def carry(self) -> float:
        """Risk-neutral growth rate of the underlying, `r - q`."""
        return self.rate - self.dividend_yield

    @property
    def log_drift(self) -> float:
        """Drift of the log price, `r - q - sigma^2 / 2`."""
        return self.carry - 0.5 * self.volatility**2


@dataclass(frozen=True, slots=True)
class StepPlan:
    """Step counts and time step of one lattice request.

    `total_steps` adds the two layers reserved for Greek extraction; the
    lattice spans the option's life with `total_steps` steps of size `dt`.
    """

    requested_steps: int
    effective_steps: int
    total_steps: int
    dt: float


@dataclass(frozen=True, slots=True)
class TreeParameters:
    """Multiplicative up/down factors and risk-neutral up probability."""

    up: float
    down: float
    p_up: float

    def check_no_arbitrage(self, growth: float) -> None:
        """Raise if `down < growth < up` or `0 <= p_up <= 1` does not hold."""
        values = (self.up, self.down, self.p_up)
        if not all(math.isfinite(v) for v in values):
            raise ArbitrageViolationError(f"non-finite tree parameters: {self}")
        if not 0.0 < self.down < growth < self.up:
            raise ArbitrageViolationError(
                f"tree factors do not bracket growth={growth!r}: "
                f"up={self.up!r}, down={self.down!r}"
            )
        if not 0.0 <= self.p_up <= 1.0:
            raise ArbitrageViolationError(
                f"up probability outside [0, 1]: p_up={self.p_up!r}"
            )


@dataclass(frozen=True, slots=True)
class PricingResult:
    """Option value with Delta and Gamma.

    `delta` and `gamma` are `None` when the lattice geometry is degenerate
    (e.g. zero volatility) and the sensitivities are undefined.
    """

    price: float
    delta: float | None
    gamma: float | None

    @property
    def greeks_available(self) -> bool:
        return self.delta is not None and self.gamma is not None
