"""Protocols and scratch storage for kernel evaluation.

Every evaluation of a coherent or tagged kernel runs the same three steps:

- fill the interaction arrays ``A_i = V_i * outer(f_q, f_p)``
- reduce them to per-shell sums ``T_i`` with the Bengtzelius recurrence
- combine the sums into the diagonal of the kernel

A :class:`KernelOps` object performs these steps. Implementations are
stateless; all mutable storage lives in a :class:`ScratchBuffers` arena owned
by a single kernel instance, which is why one kernel must not be evaluated
from two threads at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import numpy as np
import numpy.typing as npt

from mctpy.vertex import VertexMatrices


@dataclass
class ScratchBuffers:
    """Reusable per-kernel work arrays."""

    a1: np.ndarray
    a2: np.ndarray
    a3: np.ndarray
    t1: np.ndarray
    t2: np.ndarray
    t3: np.ndarray

    @classmethod
    def allocate(cls, nk: int, dtype: npt.DTypeLike) -> "ScratchBuffers":
        """Allocate uninitialized ``(nk, nk)`` and ``(nk,)`` arrays of ``dtype``."""
        return cls(
            a1=np.empty((nk, nk), dtype=dtype),
            a2=np.empty((nk, nk), dtype=dtype),
            a3=np.empty((nk, nk), dtype=dtype),
            t1=np.empty(nk, dtype=dtype),
            t2=np.empty(nk, dtype=dtype),
            t3=np.empty(nk, dtype=dtype),
        )


class KernelOps(Protocol):
    """Protocol for the numerical steps of a kernel evaluation."""

    name: str

    def fill(
        self,
        buffers: ScratchBuffers,
        vertices: VertexMatrices,
        f_q: np.ndarray,
        f_p: np.ndarray,
    ) -> None:
        """Overwrite ``buffers.a*`` with ``V_i[q, p] f_q[q] f_p[p]``."""

    def reduce(self, buffers: ScratchBuffers) -> None:
        """Run the three-channel Bengtzelius recurrence ``a* -> t*``."""

    def combine(self, out: np.ndarray, k: np.ndarray, buffers: ScratchBuffers) -> None:
        """Write ``k t1 + t2 / k^3 + t3 / k`` into ``out``."""

    def msd_sum(
        self, out: np.ndarray, k: np.ndarray, c_k: np.ndarray, f: np.ndarray, fs: np.ndarray
    ) -> None:
        """Write ``sum_q q^4 c(q)^2 F(q) Fs(q)`` into ``out[0]``."""
