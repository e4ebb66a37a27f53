"""Numba implementation of :class:`mctpy.kernels.ops.KernelOps`.

The JIT compiled routines live in :mod:`mctpy.functions.cpu_numba`. They are
sensitive to memory layout, so field vectors are made contiguous before they
are handed over; the scratch buffers and vertex matrices are contiguous by
construction.
"""

from __future__ import annotations

import numpy as np

from mctpy.functions.cpu_numba import (
    bengtzelius3,
    combine_shells,
    fill_interaction_arrays,
    msd_integrand_sum,
)
from mctpy.kernels.ops import KernelOps, ScratchBuffers
from mctpy.vertex import VertexMatrices


class NumbaKernelOps(KernelOps):
    """Kernel steps backed by Numba ``nopython`` functions."""

    name = "numba"

    def fill(
        self,
        buffers: ScratchBuffers,
        vertices: VertexMatrices,
        f_q: np.ndarray,
        f_p: np.ndarray,
    ) -> None:
        fill_interaction_arrays(
            buffers.a1,
            buffers.a2,
            buffers.a3,
            vertices.v1,
            vertices.v2,
            vertices.v3,
            np.ascontiguousarray(f_q),
            np.ascontiguousarray(f_p),
        )

    def reduce(self, buffers: ScratchBuffers) -> None:
        bengtzelius3(
            buffers.t1, buffers.t2, buffers.t3, buffers.a1, buffers.a2, buffers.a3
        )

    def combine(self, out: np.ndarray, k: np.ndarray, buffers: ScratchBuffers) -> None:
        combine_shells(out, k, buffers.t1, buffers.t2, buffers.t3)

    def msd_sum(self, out, k, c_k, f, fs) -> None:
        msd_integrand_sum(
            out, k, c_k, np.ascontiguousarray(f), np.ascontiguousarray(fs)
        )
