"""Pricing engines: the lattice facade and the analytic reference."""

from .base import GreeksModel, PriceModel
from .bs_pricer import BlackScholesPricer
from .lattice_engine import LatticePricer, plan_steps, price_and_greeks

__all__ = [
    "PriceModel",
    "GreeksModel",
    "BlackScholesPricer",
    "LatticePricer",
    "plan_steps",
    "price_and_greeks",
]
