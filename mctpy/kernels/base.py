"""Memory kernel base classes.

A memory kernel is queried by an external time-stepping solver with the
current field state and time, and returns either a diagonal linear operator
(one value per wavenumber shell) or a scalar. Kernels are evaluated
synchronously; each instance owns private scratch storage and must not be
evaluated concurrently.
"""

from __future__ import annotations

import logging

import numpy as np
import numpy.typing as npt
from scipy import sparse

from mctpy.errors import ConfigurationError
from mctpy.grid import (
    WavenumberGrid,
    as_grid,
    check_dims,
    coupling_coefficients,
    promote_dtype,
)
from mctpy.kernels.factory import get_kernel_ops
from mctpy.kernels.ops import ScratchBuffers
from mctpy.vertex import VertexMatrices


class MemoryKernel:
    """Base class for memory kernels.

    Subclasses implement :meth:`new_output` and :meth:`evaluate_into`;
    :meth:`evaluate` allocates a fresh output and fills it.
    """

    grid: WavenumberGrid

    def _setup_grid(self, density, thermal_energy, mass, k_array, s_k) -> None:
        """Promote the physical inputs to a common dtype and derive ``c(q)``."""
        s_k = np.asarray(s_k)
        k_values = k_array.k if isinstance(k_array, WavenumberGrid) else k_array
        dtype = promote_dtype(np.asarray(k_values), s_k, density, thermal_energy, mass)
        self.dtype = dtype
        self.density = dtype.type(density)
        self.thermal_energy = dtype.type(thermal_energy)
        self.mass = dtype.type(mass)
        self.grid = as_grid(k_array, dtype=dtype)
        self.nk = self.grid.size
        self.c_k = coupling_coefficients(s_k.astype(dtype), self.density, self.grid)

    @property
    def k_array(self) -> np.ndarray:
        return self.grid.k

    def new_output(self, state=None):  # pragma: no cover
        raise NotImplementedError

    def evaluate_into(self, out, state, t: float):  # pragma: no cover
        """Evaluate the kernel at ``(state, t)`` and store the result in ``out``."""
        raise NotImplementedError

    def evaluate(self, state, t: float):
        """Evaluate the kernel at ``(state, t)`` into a newly allocated output."""
        out = self.new_output(state)
        self.evaluate_into(out, state, t)
        return out

    def __call__(self, state, t: float):
        return self.evaluate(state, t)


def diagonal_operator(values: npt.ArrayLike) -> sparse.dia_array:
    """Wrap ``values`` as the main diagonal of a square sparse operator."""
    values = np.asarray(values)
    n = values.shape[0]
    return sparse.dia_array((values.reshape(1, n), [0]), shape=(n, n))


def diagonal_view(out, n: int) -> np.ndarray:
    """Writable 1-D view on the diagonal stored in ``out``.

    ``out`` is either a main-diagonal ``dia_array``/``dia_matrix`` of shape
    ``(n, n)`` or a 1-D numpy array of length ``n``.
    """
    if sparse.issparse(out):
        if (
            out.format != "dia"
            or out.shape != (n, n)
            or list(out.offsets) != [0]
            or out.data.shape[1] < n
        ):
            raise ConfigurationError(
                "Kernel output must be a main-diagonal dia_array of shape "
                f"({n}, {n}), got {out.format} with shape {out.shape}"
            )
        return out.data[0, :n]
    if isinstance(out, np.ndarray) and out.shape == (n,):
        return out
    raise ConfigurationError(
        f"Kernel output must be a diagonal operator or a length-{n} array, "
        f"got {type(out).__name__}"
    )


class ModeCouplingKernelBase(MemoryKernel):
    """Shared setup of the kernels that go through the Bengtzelius recurrence.

    Parameters
    ----------
    density:
        Number density ``rho``.
    thermal_energy:
        Thermal energy ``kBT``.
    mass:
        Particle mass ``m``.
    k_array:
        Uniform cell-centred wavenumber grid (a :class:`WavenumberGrid` or a
        sequence).
    s_k:
        Structure factor on the grid.
    dims:
        Spatial dimension, only ``3`` is supported.
    backend:
        Name of the evaluation backend, see
        :func:`mctpy.kernels.factory.get_kernel_ops`.
    """

    vertices: VertexMatrices

    def __init__(
        self,
        density: float,
        thermal_energy: float,
        mass: float,
        k_array,
        s_k: npt.ArrayLike,
        dims: int = 3,
        backend: str | None = None,
    ):
        check_dims(dims)
        self.log = logging.getLogger(self.__class__.__module__)

        self._setup_grid(density, thermal_energy, mass, k_array, s_k)
        self.vertices = self._build_vertices()
        self.buffers = ScratchBuffers.allocate(self.nk, self.dtype)
        self.ops = get_kernel_ops(backend)

        self.log.info(
            f"{self.__class__.__name__}: {self.nk} shells, dk={self.grid.dk}, "
            f"dtype={self.dtype}, backend={self.ops.name}"
        )

    def _build_vertices(self) -> VertexMatrices:  # pragma: no cover
        raise NotImplementedError

    def _check_field(self, field, name: str) -> np.ndarray:
        field = np.asarray(field)
        if field.shape != (self.nk,):
            raise ValueError(f"{name} must have shape ({self.nk},), got {field.shape}")
        return field

    def new_output(self, state=None) -> sparse.dia_array:
        return diagonal_operator(np.zeros(self.nk, dtype=self.dtype))

    def _reduce_into(self, out) -> None:
        diag = diagonal_view(out, self.nk)
        self.ops.reduce(self.buffers)
        self.ops.combine(diag, self.grid.k, self.buffers)
