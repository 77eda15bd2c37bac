"""Binomial lattice pricing of European options with node-based Greeks."""

from .engines import (
    BlackScholesPricer,
    GreeksModel,
    LatticePricer,
    PriceModel,
    plan_steps,
    price_and_greeks,
)
from .errors import (
    ArbitrageViolationError,
    DegenerateGeometryError,
    InvalidInputError,
    LatticeError,
)
from .models import TreeFlavor, bs_greeks, bs_price, get_parameterization
from .types import (
    MarketState,
    ModelInputs,
    OptionSpec,
    OptionType,
    OptionTypeInput,
    PricingResult,
    StepPlan,
    TreeParameters,
)

__all__ = [
    "OptionType",
    "OptionTypeInput",
    "OptionSpec",
    "MarketState",
    "ModelInputs",
    "StepPlan",
    "TreeParameters",
    "PricingResult",
    "TreeFlavor",
    "LatticeError",
    "InvalidInputError",
    "DegenerateGeometryError",
    "ArbitrageViolationError",
    "PriceModel",
    "GreeksModel",
    "LatticePricer",
    "BlackScholesPricer",
    "price_and_greeks",
    "plan_steps",
    "get_parameterization",
    "bs_greeks",
    "bs_price",
]
