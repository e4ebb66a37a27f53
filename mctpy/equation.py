"""Linear memory equations.

A memory equation bundles the coefficients of

.. math::

    \\alpha \\ddot F + \\beta \\dot F + \\gamma F + \\delta
        + \\int_0^t d\\tau\\, K(t - \\tau) \\dot F(\\tau) = 0

with the initial conditions and a memory kernel. The time integration itself
is left to an external solver; this module only normalizes the inputs into
types that can be combined with each other.

Coefficient normalization works on a small closed set of shapes:

- multiplicative coefficients (``alpha``, ``beta``, ``gamma``) paired with a
  vector field become diagonal operators: a scalar ``c`` becomes ``c I``, a
  vector becomes ``diag(c)``, and sparse or dense ``N x N`` operators are kept
- the additive coefficient ``delta`` is broadcast to the shape of the field
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np
import numpy.typing as npt
from scipy import sparse

from mctpy.errors import ConfigurationError
from mctpy.kernels.base import MemoryKernel, diagonal_operator


def _is_scalar(value) -> bool:
    return not sparse.issparse(value) and np.ndim(value) == 0


def clean_multiplicative_coefficient(coefficient, F0):
    """Convert a multiplicative coefficient into a type compatible with ``F0``.

    Parameters
    ----------
    coefficient:
        Scalar, 1-D vector, sparse operator or dense square matrix.
    F0:
        Initial field; a scalar or a 1-D vector.

    Returns
    -------
    scalar, scipy.sparse.dia_array, sparse operator or numpy.ndarray
        ``coefficient`` unchanged if ``F0`` is a scalar, otherwise an operator
        acting on vectors of the same length as ``F0``.

    Raises
    ------
    ConfigurationError
        If the shapes cannot be made compatible.
    """

    if _is_scalar(F0):
        if _is_scalar(coefficient):
            return coefficient
        raise ConfigurationError(
            f"A scalar field needs scalar coefficients, got shape {np.shape(coefficient)}"
        )

    F0 = np.asarray(F0)
    if F0.ndim != 1:
        raise ConfigurationError(
            f"The field must be a scalar or a vector, got shape {F0.shape}"
        )
    n = F0.shape[0]

    if sparse.issparse(coefficient):
        if coefficient.shape != (n, n):
            raise ConfigurationError(
                f"Coefficient operator has shape {coefficient.shape}, expected ({n}, {n})"
            )
        return coefficient

    if _is_scalar(coefficient):
        return diagonal_operator(np.full(n, coefficient))

    coefficient = np.asarray(coefficient)
    match coefficient.ndim:
        case 1 if coefficient.shape == (n,):
            return diagonal_operator(coefficient)
        case 2 if coefficient.shape == (n, n):
            return coefficient
        case _:
            raise ConfigurationError(
                f"Coefficient of shape {coefficient.shape} is incompatible with a "
                f"field of length {n}"
            )


def clean_additive_coefficient(coefficient, F0):
    """Convert the additive coefficient so that it can be added to ``F0``.

    A scalar paired with a vector field is broadcast to a vector of the same
    length; a vector must already match the field.

    Raises
    ------
    ConfigurationError
        If the shapes cannot be made compatible.
    """

    if _is_scalar(F0):
        if _is_scalar(coefficient):
            return coefficient
        raise ConfigurationError(
            f"A scalar field needs a scalar additive term, got shape {np.shape(coefficient)}"
        )

    F0 = np.asarray(F0)
    if sparse.issparse(coefficient):
        raise ConfigurationError("The additive coefficient cannot be an operator")
    if _is_scalar(coefficient):
        return np.full(F0.shape, coefficient, dtype=np.result_type(F0, coefficient))

    coefficient = np.asarray(coefficient)
    if coefficient.shape != F0.shape:
        raise ConfigurationError(
            f"Additive coefficient has shape {coefficient.shape}, expected {F0.shape}"
        )
    return coefficient


@dataclass
class MemoryEquationCoefficients:
    """Mutable container of the equation coefficients."""

    alpha: Any
    beta: Any
    gamma: Any
    delta: Any

    @classmethod
    def from_field(cls, alpha, beta, gamma, delta, F0) -> "MemoryEquationCoefficients":
        """Normalize all four coefficients against the initial field ``F0``."""
        return cls(
            alpha=clean_multiplicative_coefficient(alpha, F0),
            beta=clean_multiplicative_coefficient(beta, F0),
            gamma=clean_multiplicative_coefficient(gamma, F0),
            delta=clean_additive_coefficient(delta, F0),
        )


def _no_update(coeffs: MemoryEquationCoefficients, t: float) -> None:
    return None


class MemoryEquation:
    """Linear memory equation with its initial conditions and kernel.

    Parameters
    ----------
    alpha:
        Coefficient of the second derivative term.
    beta:
        Coefficient of the first derivative term.
    gamma:
        Coefficient of the linear term.
    delta:
        Constant term; must be addable to ``F0`` after broadcasting.
    F0:
        Initial value of ``F(t)``.
    dF0:
        Initial value of the time derivative of ``F(t)``; same shape as ``F0``.
    kernel:
        Memory kernel; ``kernel.evaluate(F0, 0.0)`` gives the initial kernel.
    update_coefficients:
        Optional ``f(coeffs, t)`` that mutates the coefficients for time ``t``.
        It is run once at ``t = 0`` during construction and afterwards through
        :meth:`refresh_coefficients`.

    Raises
    ------
    ConfigurationError
        If ``F0`` and ``dF0`` differ in shape or a coefficient cannot be made
        compatible with ``F0``.
    """

    def __init__(
        self,
        alpha,
        beta,
        gamma,
        delta,
        F0: npt.ArrayLike,
        dF0: npt.ArrayLike,
        kernel: MemoryKernel,
        update_coefficients: Callable[[MemoryEquationCoefficients, float], None]
        | None = None,
    ):
        self.log = logging.getLogger(self.__class__.__module__)

        F0 = np.asarray(F0)
        dF0 = np.asarray(dF0)
        if F0.shape != dF0.shape:
            raise ConfigurationError(
                f"F0 has shape {F0.shape} but its derivative has shape {dF0.shape}"
            )

        K0 = kernel.evaluate(F0[()], 0.0)
        k0_dtype = K0.dtype if hasattr(K0, "dtype") else np.asarray(K0).dtype
        dtype = np.result_type(k0_dtype, F0.dtype)

        self.F0 = F0.astype(dtype)[()]
        self.dF0 = dF0.astype(dtype)[()]
        self.K0 = K0
        self.kernel = kernel
        self.coeffs = MemoryEquationCoefficients.from_field(
            alpha, beta, gamma, delta, self.F0
        )
        self.update_coefficients = (
            _no_update if update_coefficients is None else update_coefficients
        )
        self.update_coefficients(self.coeffs, 0.0)

        self.log.debug(
            f"Memory equation with {type(kernel).__name__}, field shape {F0.shape}, "
            f"dtype {dtype}"
        )

    def refresh_coefficients(self, t: float) -> MemoryEquationCoefficients:
        """Update the coefficients for time ``t`` and return them."""
        self.update_coefficients(self.coeffs, t)
        return self.coeffs

    def __str__(self) -> str:
        return "\n".join(
            [
                "Linear MCT equation object:",
                "   α F̈ + β Ḟ + γF + δ + ∫K(τ)Ḟ(t-τ) = 0",
                f"in which α is a {type(self.coeffs.alpha).__name__},",
                f"         β is a {type(self.coeffs.beta).__name__},",
                f"         γ is a {type(self.coeffs.gamma).__name__},",
                f"         δ is a {type(self.coeffs.delta).__name__},",
                f"  and K(t) is a {type(self.kernel).__name__}.",
            ]
        )
