import itertools
import math

import pytest

from binomial_lattice import (
    ArbitrageViolationError,
    DegenerateGeometryError,
    InvalidInputError,
    LatticeError,
    ModelInputs,
    OptionType,
    TreeFlavor,
)
from binomial_lattice.engines import plan_steps
from binomial_lattice.models import (
    get_parameterization,
    joshi4_inversion,
    normalize_flavor,
    peizer_pratt_inversion,
)

ALL_FLAVORS = list(TreeFlavor)
ODD_FLAVORS = [TreeFlavor.LEISEN_REIMER, TreeFlavor.JOSHI4]

# spot=100 against a moderate grid of strikes, carries, vols, maturities, steps.
GRID = list(
    itertools.product(
        (90.0, 100.0, 110.0),  # strike
        (0.0, 0.05),  # rate
        (0.0, 0.03),  # dividend yield
        (0.15, 0.40),  # volatility
        (0.25, 1.0),  # maturity
        (25, 200),  # requested steps
    )
)

# Deep moneyness (spot/strike 2 and 0.5), near-zero volatility, tiny lattices.
STRESS_GRID = list(
    itertools.product(
        (50.0, 100.0, 200.0),  # strike
        (0.0, 0.05),  # rate
        (1e-6, 0.01, 0.20),  # volatility
        (1, 3, 25),  # requested steps
    )
)


def _inputs(**overrides) -> ModelInputs:
    base = {
        "spot": 100.0,
        "strike": 100.0,
        "rate": 0.05,
        "dividend_yield": 0.02,
        "volatility": 0.25,
        "time_to_maturity": 1.0,
        "option_type": OptionType.CALL,
    }
    base.update(overrides)
    return ModelInputs(**base)


def _params(flavor: TreeFlavor, inputs: ModelInputs, steps: int):
    impl = get_parameterization(flavor)
    plan = plan_steps(impl, inputs.time_to_maturity, steps)
    return plan, impl.tree_parameters(inputs, plan.dt, plan.total_steps)


@pytest.mark.parametrize("flavor", ALL_FLAVORS)
def test_tree_parameters_satisfy_no_arbitrage_over_grid(flavor: TreeFlavor):
    for strike, rate, q, vol, maturity, steps in GRID:
        inputs = _inputs(
            strike=strike,
            rate=rate,
            dividend_yield=q,
            volatility=vol,
            time_to_maturity=maturity,
        )
        plan, params = _params(flavor, inputs, steps)
        growth = math.exp(inputs.carry * plan.dt)

        params.check_no_arbitrage(growth)
        assert 0.0 < params.down < growth < params.up
        assert 0.0 <= params.p_up <= 1.0
        assert params.down < 1.0 < params.up


@pytest.mark.parametrize(
    "flavor",
    [
        TreeFlavor.CRR,
        TreeFlavor.TIAN,
        TreeFlavor.LEISEN_REIMER,
        TreeFlavor.JOSHI4,
    ],
)
def test_exact_first_moment_flavors_match_growth(flavor: TreeFlavor):
    inputs = _inputs()
    plan, params = _params(flavor, inputs, 101)
    growth = math.exp(inputs.carry * plan.dt)

    mean = params.p_up * params.up + (1.0 - params.p_up) * params.down
    assert mean == pytest.approx(growth, rel=1e-12)


def test_crr_is_symmetric_in_log_price():
    inputs = _inputs()
    plan, params = _params(TreeFlavor.CRR, inputs, 100)

    assert params.up * params.down == pytest.approx(1.0)
    assert params.up == pytest.approx(math.exp(0.25 * math.sqrt(plan.dt)))


@pytest.mark.parametrize("flavor", [TreeFlavor.JARROW_RUDD, TreeFlavor.ADDITIVE_EQP])
def test_equal_probability_flavors(flavor: TreeFlavor):
    _, params = _params(flavor, _inputs(), 100)
    assert params.p_up == 0.5


def test_jarrow_rudd_embeds_drift_in_factors():
    inputs = _inputs()
    plan, params = _params(TreeFlavor.JARROW_RUDD, inputs, 100)

    assert math.sqrt(params.up * params.down) == pytest.approx(
        math.exp(inputs.log_drift * plan.dt)
    )


def test_trigeorgis_matches_log_price_mean_and_variance():
    inputs = _inputs()
    plan, params = _params(TreeFlavor.TRIGEORGIS, inputs, 100)
    dx = math.log(params.up)

    assert params.up * params.down == pytest.approx(1.0)
    mean = (2.0 * params.p_up - 1.0) * dx
    second = dx * dx
    assert mean == pytest.approx(inputs.log_drift * plan.dt)
    assert second == pytest.approx(
        inputs.volatility**2 * plan.dt + (inputs.log_drift * plan.dt) ** 2
    )


def test_tian_matches_second_moment():
    inputs = _inputs()
    plan, params = _params(TreeFlavor.TIAN, inputs, 100)
    growth = math.exp(inputs.carry * plan.dt)
    q = math.exp(inputs.volatility**2 * plan.dt)

    second = params.p_up * params.up**2 + (1.0 - params.p_up) * params.down**2
    assert second == pytest.approx(growth**2 * q, rel=1e-12)


def test_additive_eqp_rejects_too_small_volatility_for_drift():
    inputs = _inputs(volatility=1e-4, rate=0.5, dividend_yield=0.0)
    impl = get_parameterization(TreeFlavor.ADDITIVE_EQP)

    with pytest.raises(InvalidInputError, match="additive_eqp"):
        impl.tree_parameters(inputs, dt=1.0, n_steps=3)


@pytest.mark.parametrize("flavor", ODD_FLAVORS)
@pytest.mark.parametrize(("requested", "expected"), [(1, 1), (800, 801), (801, 801)])
def test_odd_flavors_round_steps_up_to_odd(
    flavor: TreeFlavor, requested: int, expected: int
):
    assert get_parameterization(flavor).adjust_steps(requested) == expected


@pytest.mark.parametrize(
    "flavor", [f for f in ALL_FLAVORS if f not in ODD_FLAVORS]
)
def test_other_flavors_keep_requested_steps(flavor: TreeFlavor):
    assert get_parameterization(flavor).adjust_steps(800) == 800


@pytest.mark.parametrize("flavor", ODD_FLAVORS)
def test_odd_flavors_reject_even_lattice(flavor: TreeFlavor):
    with pytest.raises(InvalidInputError, match="odd"):
        get_parameterization(flavor).tree_parameters(_inputs(), dt=0.01, n_steps=100)


@pytest.mark.parametrize("inversion", [peizer_pratt_inversion, joshi4_inversion])
def test_inversions_are_centered_and_symmetric(inversion):
    assert inversion(0.0, 101) == pytest.approx(0.5)
    for z in (0.1, 0.8, 2.5):
        assert inversion(z, 101) + inversion(-z, 101) == pytest.approx(1.0)
        assert inversion(z, 101) > 0.5


def test_peizer_pratt_is_increasing_in_z():
    values = [peizer_pratt_inversion(z, 51) for z in (-2.0, -0.5, 0.0, 0.5, 2.0)]
    assert values == sorted(values)


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("crr", TreeFlavor.CRR),
        ("Cox-Ross-Rubinstein", TreeFlavor.CRR),
        ("jr", TreeFlavor.JARROW_RUDD),
        ("EQP", TreeFlavor.ADDITIVE_EQP),
        ("lr", TreeFlavor.LEISEN_REIMER),
        ("leisen_reimer", TreeFlavor.LEISEN_REIMER),
        ("joshi", TreeFlavor.JOSHI4),
        (TreeFlavor.TIAN, TreeFlavor.TIAN),
    ],
)
def test_normalize_flavor_accepts_names_and_aliases(label, expected):
    assert normalize_flavor(label) is expected
    assert get_parameterization(label).flavor is expected


def test_unknown_flavor_raises():
    with pytest.raises(InvalidInputError, match="Unknown tree flavor"):
        normalize_flavor("trinomial")


@pytest.mark.parametrize("flavor", ALL_FLAVORS)
def test_extreme_inputs_give_valid_parameters_or_lattice_error(flavor: TreeFlavor):
    for strike, rate, vol, steps in STRESS_GRID:
        inputs = _inputs(strike=strike, rate=rate, dividend_yield=0.0, volatility=vol)
        try:
            plan, params = _params(flavor, inputs, steps)
            growth = math.exp(inputs.carry * plan.dt)
            params.check_no_arbitrage(growth)
        except LatticeError:
            continue
        assert 0.0 < params.down < growth < params.up
        assert 0.0 <= params.p_up <= 1.0


def test_leisen_reimer_saturated_probability_raises_arbitrage_violation():
    inputs = _inputs(
        spot=50.0, strike=100.0, rate=0.0, dividend_yield=0.0, volatility=0.01
    )

    with pytest.raises(ArbitrageViolationError, match="up probability outside"):
        _params(TreeFlavor.LEISEN_REIMER, inputs, 101)


def test_tian_collapsed_spacing_raises_degenerate_geometry():
    inputs = _inputs(volatility=1e-9)

    with pytest.raises(DegenerateGeometryError, match="tian"):
        _params(TreeFlavor.TIAN, inputs, 101)


def test_crr_collapsed_spacing_raises_degenerate_geometry():
    inputs = _inputs(volatility=1e-20)

    with pytest.raises(DegenerateGeometryError, match="crr"):
        _params(TreeFlavor.CRR, inputs, 101)
