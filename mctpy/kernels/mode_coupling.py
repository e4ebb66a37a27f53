"""Coherent and tagged mode-coupling kernels in three dimensions.

Both kernels evaluate a wavevector convolution of two correlators,

.. math::

    K(k, t) \\propto \\int d\\mathbf{q}\\, V^2(\\mathbf{k}, \\mathbf{q})\\,
        F(q, t)\\, X(|\\mathbf{k} - \\mathbf{q}|, t),

with ``X = F`` for the coherent kernel and ``X = Fs`` for the tagged one. On
the uniform grid the integral becomes three channel sums ``T1, T2, T3`` over
the shell pairs allowed by the triangle inequality, which the Bengtzelius
recurrence produces in ``O(Nk^2)`` operations. The kernel value per shell is

.. math::

    K(k) = k\\, T_1(k) + \\frac{T_2(k)}{k^3} + \\frac{T_3(k)}{k}.
"""

from __future__ import annotations

import numpy.typing as npt

from mctpy.kernels.base import ModeCouplingKernelBase
from mctpy.trajectory import as_trajectory
from mctpy.vertex import (
    VertexMatrices,
    build_tagged_vertex_matrices,
    build_vertex_matrices,
)


class ModeCouplingKernel(ModeCouplingKernelBase):
    """Memory kernel of the coherent intermediate scattering function.

    Implements

    .. math::

        K(k, t) = \\frac{\\rho k_B T}{16 \\pi^3 m} \\int d\\mathbf{q}\\,
            V^2(\\mathbf{k}, \\mathbf{q})\\, F(q, t)\\, F(|\\mathbf{k} - \\mathbf{q}|, t).

    The kernel can be evaluated out-of-place with ``kernel.evaluate(F, t)``
    (returns a ``scipy.sparse.dia_array``) or in place with
    ``kernel.evaluate_into(out, F, t)``.

    Parameters
    ----------
    density, thermal_energy, mass, k_array, s_k, dims, backend:
        See :class:`mctpy.kernels.base.ModeCouplingKernelBase`.
    """

    def _build_vertices(self) -> VertexMatrices:
        return build_vertex_matrices(
            self.density, self.thermal_energy, self.mass, self.grid, self.c_k
        )

    def evaluate_into(self, out, F: npt.ArrayLike, t: float = 0.0) -> None:
        """Evaluate the kernel for the coherent field ``F`` into ``out``.

        ``t`` is accepted for interface uniformity and does not enter the
        result.
        """
        F = self._check_field(F, "F")
        self.ops.fill(self.buffers, self.vertices, F, F)
        self._reduce_into(out)


class TaggedModeCouplingKernel(ModeCouplingKernelBase):
    """Memory kernel of the self (tagged-particle) intermediate scattering function.

    Implements

    .. math::

        K(k, t) = \\frac{\\rho k_B T}{8 \\pi^3 m} \\int d\\mathbf{q}\\,
            V^2(\\mathbf{k}, \\mathbf{q})\\, F(q, t)\\, F_s(|\\mathbf{k} - \\mathbf{q}|, t),

    with ``V(k, q) = c(q) (k . q) / k``. The coherent correlator ``F(q, t)``
    is read from ``trajectory`` at exactly the evaluation time, so the kernel
    can only be evaluated at times sampled by the coherent solution.

    Parameters
    ----------
    density, thermal_energy, mass, k_array, s_k:
        See :class:`mctpy.kernels.base.ModeCouplingKernelBase`.
    trajectory:
        A :class:`mctpy.trajectory.Trajectory` or any solution object exposing
        ``t`` and ``F``; kept by reference.
    dims, backend:
        See :class:`mctpy.kernels.base.ModeCouplingKernelBase`.
    """

    def __init__(
        self,
        density: float,
        thermal_energy: float,
        mass: float,
        k_array,
        s_k: npt.ArrayLike,
        trajectory,
        dims: int = 3,
        backend: str | None = None,
    ):
        self.trajectory = as_trajectory(trajectory)
        super().__init__(
            density, thermal_energy, mass, k_array, s_k, dims=dims, backend=backend
        )

    def _build_vertices(self) -> VertexMatrices:
        return build_tagged_vertex_matrices(
            self.density, self.thermal_energy, self.mass, self.grid, self.c_k
        )

    def evaluate_into(self, out, Fs: npt.ArrayLike, t: float) -> None:
        """Evaluate the kernel for the tagged field ``Fs`` at time ``t``.

        Raises
        ------
        TrajectoryLookupError
            If the coherent trajectory has no snapshot at ``t``.
        """
        Fs = self._check_field(Fs, "Fs")
        F = self._check_field(self.trajectory.snapshot(t), "F(t)")
        self.ops.fill(self.buffers, self.vertices, F, Fs)
        self._reduce_into(out)
