import numpy as np
import pytest

from binomial_lattice import DegenerateGeometryError, InvalidInputError
from binomial_lattice.models import extract_greeks

S1 = np.array([90.0, 110.0])
S2 = np.array([81.0, 99.0, 121.0])


def test_linear_values_have_constant_delta_and_zero_gamma():
    out = extract_greeks(3.0 + 0.4 * S1, S1, 3.0 + 0.4 * S2, S2)

    assert out.delta == pytest.approx(0.4)
    assert out.gamma == pytest.approx(0.0, abs=1e-12)


def test_quadratic_values_recover_second_derivative():
    out = extract_greeks(S1**2, S1, S2**2, S2)

    assert out.delta == pytest.approx(S1[0] + S1[1])
    assert out.gamma == pytest.approx(2.0)


def test_gamma_uses_half_outer_spacing():
    v2 = np.array([0.0, 0.0, 22.0])
    out = extract_greeks(np.array([0.0, 1.0]), S1, v2, S2)

    delta_up = 22.0 / (121.0 - 99.0)
    assert out.gamma == pytest.approx(delta_up / (0.5 * (121.0 - 81.0)))


def test_coincident_depth_one_nodes_raise_domain_error():
    flat = np.array([100.0, 100.0])
    with pytest.raises(DegenerateGeometryError, match="depth 1"):
        extract_greeks(np.array([1.0, 1.0]), flat, S2 * 0.0, S2)


def test_collapsed_depth_two_spacing_raises():
    collapsed = np.array([99.0, 99.0, 121.0])
    with pytest.raises(DegenerateGeometryError):
        extract_greeks(S1, S1, collapsed, collapsed)


def test_degenerate_geometry_is_arithmetic_error():
    flat = np.array([100.0, 100.0, 100.0])
    with pytest.raises(ArithmeticError):
        extract_greeks(np.zeros(2), flat[:2], np.zeros(3), flat)


def test_wrong_layer_sizes_raise():
    with pytest.raises(InvalidInputError, match="depth 1"):
        extract_greeks(S2, S2, S2, S2)
    with pytest.raises(InvalidInputError, match="depth 2"):
        extract_greeks(S1, S1, S1, S1)
