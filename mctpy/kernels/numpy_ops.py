"""Numpy implementation of :class:`mctpy.kernels.ops.KernelOps`.

Useful where JIT compilation is undesirable (short scripts, debugging) and as
an independent cross-check of the Numba routines.
"""

from __future__ import annotations

import numpy as np

from mctpy.functions import vectorized
from mctpy.kernels.ops import KernelOps, ScratchBuffers
from mctpy.vertex import VertexMatrices


class NumpyKernelOps(KernelOps):
    """Kernel steps backed by :mod:`mctpy.functions.vectorized`."""

    name = "numpy"

    def fill(
        self,
        buffers: ScratchBuffers,
        vertices: VertexMatrices,
        f_q: np.ndarray,
        f_p: np.ndarray,
    ) -> None:
        vectorized.fill_interaction_arrays(
            buffers.a1,
            buffers.a2,
            buffers.a3,
            vertices.v1,
            vertices.v2,
            vertices.v3,
            np.asarray(f_q),
            np.asarray(f_p),
        )

    def reduce(self, buffers: ScratchBuffers) -> None:
        vectorized.bengtzelius3(
            buffers.t1, buffers.t2, buffers.t3, buffers.a1, buffers.a2, buffers.a3
        )

    def combine(self, out: np.ndarray, k: np.ndarray, buffers: ScratchBuffers) -> None:
        vectorized.combine_shells(out, k, buffers.t1, buffers.t2, buffers.t3)

    def msd_sum(self, out, k, c_k, f, fs) -> None:
        vectorized.msd_integrand_sum(out, k, c_k, np.asarray(f), np.asarray(fs))
