"""Numpy implementations of the kernel building blocks.

These mirror :mod:`mctpy.functions.cpu_numba` function by function. The
interaction fill uses broadcasting into preallocated buffers, and the
Bengtzelius recurrence keeps its sequential loop over shells while summing
each band through :func:`numpy.diagonal` views.
"""

import numpy as np


def fill_interaction_arrays(a1, a2, a3, v1, v2, v3, f_q, f_p):
    """Numpy counterpart of :func:`mctpy.functions.cpu_numba.fill_interaction_arrays`."""
    f4 = np.multiply.outer(f_q, f_p)
    np.multiply(v1, f4, out=a1)
    np.multiply(v2, f4, out=a2)
    np.multiply(v3, f4, out=a3)


def _band_sums(a: np.ndarray):
    """Per-shell increments of the recurrence.

    Returns the sum of the two off-diagonals at distance ``ik`` and the sum of
    the anti-diagonal ``iq + ip = ik - 1`` for every ``ik >= 1``.
    """
    nk = a.shape[0]
    flipped = np.fliplr(a)
    added = np.empty(nk, dtype=a.dtype)
    removed = np.empty(nk, dtype=a.dtype)
    added[0] = np.trace(a)
    removed[0] = 0
    for ik in range(1, nk):
        added[ik] = a.diagonal(ik).sum() + a.diagonal(-ik).sum()
        # fliplr maps the anti-diagonal iq + ip = s onto offset nk - 1 - s
        removed[ik] = flipped.diagonal(nk - ik).sum()
    return added, removed


def bengtzelius1(t: np.ndarray, a: np.ndarray):
    """Numpy counterpart of :func:`mctpy.functions.cpu_numba.bengtzelius1`."""
    added, removed = _band_sums(a)
    t[0] = added[0]
    for ik in range(1, a.shape[0]):
        t[ik] = t[ik - 1] + added[ik] - removed[ik]


def bengtzelius3(t1, t2, t3, a1, a2, a3):
    """Numpy counterpart of :func:`mctpy.functions.cpu_numba.bengtzelius3`."""
    for t, a in ((t1, a1), (t2, a2), (t3, a3)):
        bengtzelius1(t, a)


def combine_shells(out, k, t1, t2, t3):
    np.copyto(out, k * t1 + t2 / k**3 + t3 / k)


def msd_integrand_sum(out, k, c_k, f, fs):
    out[0] = np.sum(k**4 * c_k**2 * f * fs)
