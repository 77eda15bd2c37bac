"""Lattice components and the analytic reference model."""

from .black_scholes import bs_d1_d2, bs_delta, bs_gamma, bs_greeks, bs_price
from .greeks import LatticeGreeks, extract_greeks
from .induction import InductionResult, backward_induction, vanilla_payoff
from .lattice import GREEK_LAYERS, Lattice, build_lattice
from .parameterization import (
    TreeFlavor,
    TreeParameterization,
    get_parameterization,
    joshi4_inversion,
    normalize_flavor,
    peizer_pratt_inversion,
)

__all__ = [
    "GREEK_LAYERS",
    "InductionResult",
    "Lattice",
    "LatticeGreeks",
    "TreeFlavor",
    "TreeParameterization",
    "backward_induction",
    "bs_d1_d2",
    "bs_delta",
    "bs_gamma",
    "bs_greeks",
    "bs_price",
    "build_lattice",
    "extract_greeks",
    "get_parameterization",
    "joshi4_inversion",
    "normalize_flavor",
    "peizer_pratt_inversion",
    "vanilla_payoff",
]
