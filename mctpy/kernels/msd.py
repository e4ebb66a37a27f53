"""Memory kernel of the mean squared displacement.

The MSD kernel needs no recurrence: it is a single sum over shells of the
product of the coherent and the tagged correlator at the evaluation time,

.. math::

    K(t) = \\frac{\\rho k_B T}{6 \\pi^2 m} \\int_0^\\infty dq\\,
        q^4 c(q)^2 F(q, t) F_s(q, t).
"""

from __future__ import annotations

import logging

import numpy as np
import numpy.typing as npt

from mctpy.errors import ConfigurationError
from mctpy.grid import check_dims
from mctpy.kernels.base import MemoryKernel
from mctpy.kernels.factory import get_kernel_ops
from mctpy.trajectory import as_trajectory


class MSDModeCouplingKernel(MemoryKernel):
    """Scalar memory kernel of the mean squared displacement.

    Parameters
    ----------
    density:
        Number density ``rho``.
    thermal_energy:
        Thermal energy ``kBT``.
    mass:
        Particle mass ``m``.
    k_array:
        Uniform cell-centred wavenumber grid.
    s_k:
        Structure factor on the grid.
    trajectory:
        Solution of the coherent equation (``t`` and ``F``), kept by reference.
    tagged_trajectory:
        Solution of the tagged equation, sampled at the same times.
    dims:
        Spatial dimension, only ``3`` is supported.
    backend:
        Evaluation backend name.

    Notes
    -----
    Both correlators are looked up with the time index of ``trajectory``, so
    the two solutions must share their sample times; construction fails
    otherwise.
    """

    def __init__(
        self,
        density: float,
        thermal_energy: float,
        mass: float,
        k_array,
        s_k: npt.ArrayLike,
        trajectory,
        tagged_trajectory,
        dims: int = 3,
        backend: str | None = None,
    ):
        check_dims(dims)
        self.log = logging.getLogger(self.__class__.__module__)

        self.trajectory = as_trajectory(trajectory)
        self.tagged_trajectory = as_trajectory(tagged_trajectory)
        times = [float(t) for t in self.trajectory.times]
        tagged_times = [float(t) for t in self.tagged_trajectory.times]
        if times != tagged_times:
            raise ConfigurationError(
                "Coherent and tagged trajectories must be sampled at the same times"
            )

        self._setup_grid(density, thermal_energy, mass, k_array, s_k)
        self.prefactor = (
            self.grid.dk
            * self.density
            * self.thermal_energy
            / (6 * np.pi**2 * self.mass)
        )

        self._acc = np.empty(1, dtype=self.dtype)
        self.ops = get_kernel_ops(backend)
        self.log.info(
            f"{self.__class__.__name__}: {self.nk} shells, {len(self.trajectory)} samples"
        )

    def _snapshot(self, trajectory, it: int) -> np.ndarray:
        field = np.asarray(trajectory.snapshot_at(it))
        if field.shape != (self.nk,):
            raise ValueError(
                f"Trajectory snapshot must have shape ({self.nk},), got {field.shape}"
            )
        return field

    def new_output(self, state=None) -> np.ndarray:
        if state is None:
            return np.zeros((), dtype=self.dtype)
        return np.zeros((), dtype=np.result_type(self.dtype, np.asarray(state)))

    def evaluate_into(self, out: np.ndarray, msd, t: float) -> None:
        """Store ``K(t)`` in the 0-d (or single element) array ``out``.

        ``msd`` does not enter the result; it only fixes the output type in
        :meth:`evaluate`.

        Raises
        ------
        TrajectoryLookupError
            If ``t`` is not a sample time of the coherent trajectory.
        """
        if not isinstance(out, np.ndarray) or out.size != 1:
            raise ConfigurationError(
                "MSD kernel output must be a numpy array holding a single value"
            )
        it = self.trajectory.index(t)
        F = self._snapshot(self.trajectory, it)
        Fs = self._snapshot(self.tagged_trajectory, it)
        self.ops.msd_sum(self._acc, self.grid.k, self.c_k, F, Fs)
        out[...] = self.prefactor * self._acc[0]

    def evaluate(self, msd, t: float):
        """Return ``K(t)`` as a numpy scalar of the promoted type of ``msd``."""
        out = self.new_output(msd)
        self.evaluate_into(out, msd, t)
        return out[()]
