"""Wavenumber grids and the per-shell coupling coefficients.

All mode-coupling kernels in mctpy integrate over a uniform, cell-centred
wavenumber grid

.. math::

    k_i = \\left(i + \\tfrac{1}{2}\\right) \\Delta k, \\qquad i = 0 \\ldots N_k - 1,

and the direct correlation function enters only through

.. math::

    c(q) = \\frac{S(q) - 1}{\\rho S(q)}.
"""

from __future__ import annotations

import logging

import numpy as np
import numpy.typing as npt

from mctpy.errors import ConfigurationError

log = logging.getLogger(__name__)

SUPPORTED_DIMS = (3,)


def check_dims(dims: int) -> None:
    """Reject any spatial dimensionality other than three."""
    if dims not in SUPPORTED_DIMS:
        raise ConfigurationError(
            f"Mode-coupling kernels are only implemented for dims=3, got dims={dims!r}"
        )


def promote_dtype(*values) -> np.dtype:
    """Return the common floating dtype of arrays and scalars.

    Python scalars do not force a widening of float32 arrays; integer-only
    inputs are promoted to float64.
    """
    return np.result_type(*values, 1.0)


class WavenumberGrid:
    """Immutable uniform grid of cell-centred wavenumber shells.

    Parameters
    ----------
    k:
        Shell centres. Must contain at least two entries, be uniformly spaced
        with spacing ``dk = k[1] - k[0]`` and start at ``dk / 2``.
    dtype:
        Optional floating dtype to convert the grid to.

    Raises
    ------
    ConfigurationError
        If the grid is too short, not uniform or not cell-centred.
    """

    def __init__(self, k: npt.ArrayLike, dtype: npt.DTypeLike | None = None):
        k = np.asarray(k)
        if dtype is None:
            dtype = promote_dtype(k)
        k = np.array(k, dtype=dtype)

        if k.ndim != 1:
            raise ConfigurationError(
                f"The wavenumber grid must be one-dimensional, got shape {k.shape}"
            )
        if k.size < 2:
            raise ConfigurationError(
                "The wavenumber grid needs at least two shells to define its spacing"
            )

        dk = k[1] - k[0]
        rtol = np.sqrt(np.finfo(k.dtype).eps)
        if not dk > 0:
            raise ConfigurationError(
                f"The wavenumber grid must be strictly increasing, got dk={dk}"
            )
        if not np.isclose(k[0], dk / 2, rtol=rtol, atol=0):
            raise ConfigurationError(
                f"The first shell must sit at dk/2 = {dk / 2}, got {k[0]}"
            )
        if not np.allclose(np.diff(k), dk, rtol=rtol, atol=0):
            raise ConfigurationError("The wavenumber grid is not uniformly spaced")

        k.setflags(write=False)
        self._k = k
        self._dk = dk

    @classmethod
    def from_spacing(
        cls, number: int, dk: float, dtype: npt.DTypeLike = np.float64
    ) -> "WavenumberGrid":
        """Build the grid ``(i + 1/2) dk`` for ``i = 0 .. number - 1``."""
        return cls((np.arange(number, dtype=dtype) + 0.5) * dk, dtype=dtype)

    @property
    def k(self) -> np.ndarray:
        return self._k

    @property
    def dk(self):
        return self._dk

    @property
    def size(self) -> int:
        return self._k.size

    @property
    def dtype(self) -> np.dtype:
        return self._k.dtype

    def __len__(self) -> int:
        return self._k.size

    def __getitem__(self, idx):
        return self._k[idx]

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self._k
        return self._k.astype(dtype)

    def __repr__(self) -> str:
        return f"WavenumberGrid(size={self.size}, dk={self.dk}, dtype={self.dtype})"


def as_grid(k_array, dtype: npt.DTypeLike | None = None) -> WavenumberGrid:
    """Accept either a :class:`WavenumberGrid` or a plain sequence of shells."""
    if isinstance(k_array, WavenumberGrid):
        if dtype is None or np.dtype(dtype) == k_array.dtype:
            return k_array
        return WavenumberGrid(k_array.k, dtype=dtype)
    return WavenumberGrid(k_array, dtype=dtype)


def coupling_coefficients(
    s_k: npt.ArrayLike, density: float, grid: WavenumberGrid | None = None
) -> np.ndarray:
    """Compute ``c(q) = (S(q) - 1) / (rho S(q))`` for every shell.

    Parameters
    ----------
    s_k:
        Static structure factor sampled on the grid.
    density:
        Number density ``rho``.
    grid:
        If given, ``s_k`` must have the same number of entries.

    Returns
    -------
    numpy.ndarray
        Read-only array of coupling coefficients.
    """
    s_k = np.asarray(s_k)
    if s_k.ndim != 1:
        raise ConfigurationError(
            f"The structure factor must be one-dimensional, got shape {s_k.shape}"
        )
    if grid is not None and s_k.size != grid.size:
        raise ConfigurationError(
            f"Structure factor has {s_k.size} entries but the grid has {grid.size} shells"
        )
    c_k = (s_k - 1) / (density * s_k)
    c_k.setflags(write=False)
    return c_k
