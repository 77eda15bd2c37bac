"""Exceptions raised by the lattice pricing core."""

from __future__ import annotations


class LatticeError(Exception):
    """Base class for lattice pricing failures."""


class InvalidInputError(LatticeError, ValueError):
    """Raised when a pricing request fails its preconditions.

    Detected before any lattice work, so nothing partial is returned.
    """


class DegenerateGeometryError(LatticeError, ArithmeticError):
    """Raised when node spacing collapses and Delta/Gamma are undefined."""


class ArbitrageViolationError(LatticeError, ArithmeticError):
    """Raised when tree parameters fail to bracket the riskless growth factor.

    This signals a defect in a parameterization, not a bad request.
    """
