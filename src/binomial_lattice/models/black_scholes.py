"""Closed-form Black-Scholes-Merton reference for European options.

Used as the convergence oracle for the lattice engine; it is not part of the
lattice computation itself.
"""

from __future__ import annotations

import numpy as np
from scipy.stats import norm

from binomial_lattice.types import (
    ModelInputs,
    OptionType,
    OptionTypeInput,
    PricingResult,
    normalize_option_type,
)


def bs_d1_d2(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
) -> tuple[float, float]:
    """Compute d1 and d2 with a continuous dividend yield."""
    if T <= 0 or sigma <= 0:
        raise ValueError("T and sigma must be positive")
    vol_sqrt_t = sigma * np.sqrt(T)
    d1 = (np.log(S / K) + (r - q + 0.5 * sigma**2) * T) / vol_sqrt_t
    return float(d1), float(d1 - vol_sqrt_t)


def bs_price(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
    option_type: OptionTypeInput = OptionType.CALL,
) -> float:
    """Black-Scholes-Merton price."""
    opt_type = normalize_option_type(option_type)
    forward_df = S * np.exp(-q * T)
    strike_df = K * np.exp(-r * T)
    if sigma <= 0:
        # Deterministic forward: discounted intrinsic value.
        if opt_type == OptionType.CALL:
            return float(max(forward_df - strike_df, 0.0))
        return float(max(strike_df - forward_df, 0.0))

    d1, d2 = bs_d1_d2(S, K, T, sigma, r, q)
    if opt_type == OptionType.CALL:
        return float(forward_df * norm.cdf(d1) - strike_df * norm.cdf(d2))
    return float(strike_df * norm.cdf(-d2) - forward_df * norm.cdf(-d1))


def bs_delta(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
    option_type: OptionTypeInput = OptionType.CALL,
) -> float:
    """Black-Scholes-Merton spot delta."""
    opt_type = normalize_option_type(option_type)
    d1, _ = bs_d1_d2(S, K, T, sigma, r, q)
    carry_df = np.exp(-q * T)
    if opt_type == OptionType.CALL:
        return float(carry_df * norm.cdf(d1))
    return float(-carry_df * norm.cdf(-d1))


def bs_gamma(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
) -> float:
    """Black-Scholes-Merton gamma (same for calls and puts)."""
    d1, _ = bs_d1_d2(S, K, T, sigma, r, q)
    return float(np.exp(-q * T) * norm.pdf(d1) / (S * sigma * np.sqrt(T)))


def bs_greeks(inputs: ModelInputs) -> PricingResult:
    """Return the analytic price, delta and gamma for one request.

    Delta and gamma are reported as unavailable when volatility is zero.
    """
    args = (
        inputs.spot,
        inputs.strike,
        inputs.time_to_maturity,
        inputs.volatility,
        inputs.rate,
        inputs.dividend_yield,
    )
    price = bs_price(*args, option_type=inputs.option_type)
    if inputs.volatility <= 0:
        return PricingResult(price=price, delta=None, gamma=None)
    return PricingResult(
        price=price,
        delta=bs_delta(*args, option_type=inputs.option_type),
        gamma=bs_gamma(*args),
    )
