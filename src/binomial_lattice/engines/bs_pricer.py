"""Black-Scholes reference engine."""

from __future__ import annotations

from binomial_lattice.models.black_scholes import bs_greeks
from binomial_lattice.types import MarketState, ModelInputs, OptionSpec, PricingResult


class BlackScholesPricer:
    """Exact European pricer backed by the closed-form formulas."""

    def price(self, spec: OptionSpec, state: MarketState) -> float:
        return self.price_and_greeks(spec, state).price

    def price_and_greeks(self, spec: OptionSpec, state: MarketState) -> PricingResult:
        return bs_greeks(ModelInputs.from_market(spec, state))
