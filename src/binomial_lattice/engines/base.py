"""Interface for option-pricing engines."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from binomial_lattice.types import MarketState, OptionSpec, PricingResult


@runtime_checkable
class PriceModel(Protocol):
    """Minimum pricing capability shared by the lattice and analytic engines."""

    def price(self, spec: OptionSpec, state: MarketState) -> float:
        """Return option value for one contract."""


@runtime_checkable
class GreeksModel(Protocol):
    """Engines that also report Delta and Gamma."""

    def price_and_greeks(self, spec: OptionSpec, state: MarketState) -> PricingResult:
        """Return option value, Delta and Gamma for one contract."""
