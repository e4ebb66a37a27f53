"""Mode-coupling memory kernels.

The public API consists of three kernel variants sharing the evaluation
contract of :class:`mctpy.kernels.base.MemoryKernel`:

- :class:`ModeCouplingKernel` for the coherent correlator ``F(k, t)``
- :class:`TaggedModeCouplingKernel` for the self correlator ``Fs(k, t)``
- :class:`MSDModeCouplingKernel` for the mean squared displacement

Notes
-----
The coherent and tagged kernels use the Bengtzelius recurrence to evaluate
the wavevector convolution in ``O(Nk^2)`` operations per call; the numerical
steps are delegated to a backend returned by
:func:`mctpy.kernels.factory.get_kernel_ops`.
"""

from __future__ import annotations

from mctpy.kernels.base import MemoryKernel, diagonal_operator
from mctpy.kernels.factory import get_kernel_ops
from mctpy.kernels.mode_coupling import ModeCouplingKernel, TaggedModeCouplingKernel
from mctpy.kernels.msd import MSDModeCouplingKernel

__all__ = [
    "MemoryKernel",
    "ModeCouplingKernel",
    "MSDModeCouplingKernel",
    "TaggedModeCouplingKernel",
    "diagonal_operator",
    "get_kernel_ops",
]
