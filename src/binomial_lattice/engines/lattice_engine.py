"""Lattice engine facade: flavor dispatch, step planning, pricing and Greeks."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import partial
from numbers import Integral

from binomial_lattice.errors import DegenerateGeometryError, InvalidInputError
from binomial_lattice.models.greeks import extract_greeks
from binomial_lattice.models.induction import backward_induction, vanilla_payoff
from binomial_lattice.models.lattice import GREEK_LAYERS, build_lattice
from binomial_lattice.models.parameterization import (
    TreeFlavor,
    TreeParameterization,
    get_parameterization,
    normalize_flavor,
)
from binomial_lattice.types import (
    MarketState,
    ModelInputs,
    OptionSpec,
    PricingResult,
    StepPlan,
)

logger = logging.getLogger(__name__)


def _validate_steps(requested_steps: int) -> int:
    if isinstance(requested_steps, bool) or not isinstance(
        requested_steps, Integral
    ):
        raise InvalidInputError(
            f"requested_steps must be an integer, got {requested_steps!r}"
        )
    if requested_steps < 1:
        raise InvalidInputError("requested_steps must be >= 1")
    return int(requested_steps)


def plan_steps(
    parameterization: TreeParameterization,
    time_to_maturity: float,
    requested_steps: int,
) -> StepPlan:
    """Apply the flavor's step rule and size the time step.

    The lattice spans the option's life with `effective_steps + 2` steps.
    """
    requested_steps = _validate_steps(requested_steps)
    effective_steps = parameterization.adjust_steps(requested_steps)
    total_steps = effective_steps + GREEK_LAYERS
    return StepPlan(
        requested_steps=requested_steps,
        effective_steps=effective_steps,
        total_steps=total_steps,
        dt=time_to_maturity / total_steps,
    )


def _zero_volatility_result(inputs: ModelInputs) -> PricingResult:
    # Every path collapses onto the forward; node spacing is zero.
    forward = inputs.spot * math.exp(inputs.carry * inputs.time_to_maturity)
    payoff = float(vanilla_payoff(forward, inputs.strike, inputs.option_type))
    price = math.exp(-inputs.rate * inputs.time_to_maturity) * payoff
    return PricingResult(price=price, delta=None, gamma=None)


def price_and_greeks(
    inputs: ModelInputs,
    flavor: TreeFlavor | str,
    requested_steps: int,
) -> PricingResult:
    """Price a European option on a binomial lattice and read off Delta/Gamma.

    Args:
        inputs: Validated model inputs of the request.
        flavor: Tree flavor (enum, name or alias).
        requested_steps: Minimum number of lattice steps; odd-parity flavors
            may round it up.

    Returns:
        `PricingResult`; `delta`/`gamma` are `None` when the lattice geometry
        is degenerate (zero volatility or coincident nodes).

    Raises:
        InvalidInputError: On any precondition failure, before lattice work.
        ArbitrageViolationError: If the flavor's parameters fail the
            no-arbitrage bracket or its up probability leaves (0, 1).
        DegenerateGeometryError: If the flavor's up and down factors
            coincide (volatility too small for the step size).
    """
    parameterization = get_parameterization(flavor)
    plan = plan_steps(parameterization, inputs.time_to_maturity, requested_steps)

    if inputs.volatility == 0.0:
        logger.warning(
            "Zero volatility: lattice is degenerate, Greeks unavailable "
            "(flavor=%s)",
            parameterization.flavor.value,
        )
        return _zero_volatility_result(inputs)

    params = parameterization.tree_parameters(inputs, plan.dt, plan.total_steps)
    params.check_no_arbitrage(growth=math.exp(inputs.carry * plan.dt))
    logger.debug(
        "flavor=%s requested=%d effective=%d total=%d dt=%.6g "
        "u=%.10g d=%.10g p=%.10g",
        parameterization.flavor.value,
        plan.requested_steps,
        plan.effective_steps,
        plan.total_steps,
        plan.dt,
        params.up,
        params.down,
        params.p_up,
    )

    lattice = build_lattice(inputs.spot, params, plan.effective_steps)
    payoff = partial(
        vanilla_payoff, strike=inputs.strike, option_type=inputs.option_type
    )
    induction = backward_induction(
        lattice.terminal,
        payoff,
        p_up=params.p_up,
        discount=math.exp(-inputs.rate * plan.dt),
    )

    try:
        greeks = extract_greeks(
            induction.layer1,
            lattice.layer(1),
            induction.layer2,
            lattice.layer(2),
        )
    except DegenerateGeometryError as e:
        logger.warning(
            "Greeks unavailable for flavor=%s: %s",
            parameterization.flavor.value,
            e,
        )
        return PricingResult(price=induction.value, delta=None, gamma=None)

    return PricingResult(
        price=induction.value, delta=greeks.delta, gamma=greeks.gamma
    )


@dataclass(frozen=True)
class LatticePricer:
    """Binomial lattice pricer for European vanilla options.

    Greeks come from the lattice nodes of the same pricing pass, so
    `price_and_greeks` costs one lattice evaluation.
    """

    flavor: TreeFlavor | str = TreeFlavor.CRR
    steps: int = 801

    def __post_init__(self) -> None:
        object.__setattr__(self, "flavor", normalize_flavor(self.flavor))
        _validate_steps(self.steps)

    def price(self, spec: OptionSpec, state: MarketState) -> float:
        return self.price_and_greeks(spec, state).price

    def price_and_greeks(self, spec: OptionSpec, state: MarketState) -> PricingResult:
        inputs = ModelInputs.from_market(spec, state)
        return price_and_greeks(inputs, self.flavor, self.steps)
