from numba import jit, prange

import numpy as np


@jit(nopython=True, parallel=True, nogil=True, cache=True)
def fill_interaction_arrays(
    a1: np.ndarray,
    a2: np.ndarray,
    a3: np.ndarray,
    v1: np.ndarray,
    v2: np.ndarray,
    v3: np.ndarray,
    f_q: np.ndarray,
    f_p: np.ndarray,
):
    """Fill the three interaction arrays ``A_i[q, p] = V_i[q, p] f_q[q] f_p[p]``.

    Parameters
    ----------
    a1, a2, a3 : np.ndarray
        Output ``(Nk, Nk)`` scratch arrays, overwritten in place.
    v1, v2, v3 : np.ndarray
        Vertex matrices of the same shape.
    f_q : np.ndarray
        Field values multiplying each row. For the coherent kernel this is
        ``F``; for the tagged kernel it is the coherent snapshot ``F(t)``.
    f_p : np.ndarray
        Field values multiplying each column (``F`` or the tagged field ``Fs``).

    """
    nk = f_q.shape[0]
    for iq in prange(nk):
        fq = f_q[iq]
        for ip in range(nk):
            f4 = fq * f_p[ip]
            a1[iq, ip] = v1[iq, ip] * f4
            a2[iq, ip] = v2[iq, ip] * f4
            a3[iq, ip] = v3[iq, ip] * f4


@jit(nopython=True, nogil=True, cache=True)
def bengtzelius1(t: np.ndarray, a: np.ndarray):
    """Reduce one interaction array to per-shell sums with the Bengtzelius recurrence.

    ``t[ik]`` collects every ``a[iq, ip]`` with ``|iq - ip| <= ik <= iq + ip``.
    Each shell reuses the previous one: the pairs at distance ``ik`` from the
    diagonal are added and the anti-diagonal ``iq + ip = ik - 1`` that dropped
    out of range is removed, giving ``O(Nk^2)`` work instead of ``O(Nk^3)``.

    Parameters
    ----------
    t : np.ndarray
        Output array of length ``Nk``.
    a : np.ndarray
        Square ``(Nk, Nk)`` interaction array.

    """
    nk = a.shape[0]
    t[0] = 0
    for iq in range(nk):
        t[0] += a[iq, iq]

    for ik in range(1, nk):
        qmax = nk - ik
        tik = t[ik - 1]
        for iq in range(qmax):
            ip = iq + ik
            tik += a[iq, ip] + a[ip, iq]
        for iq in range(ik):
            ip = ik - 1 - iq
            tik -= a[iq, ip]
        t[ik] = tik


@jit(nopython=True, nogil=True, cache=True)
def bengtzelius3(
    t1: np.ndarray,
    t2: np.ndarray,
    t3: np.ndarray,
    a1: np.ndarray,
    a2: np.ndarray,
    a3: np.ndarray,
):
    """Three-channel version of :func:`bengtzelius1` sharing the index arithmetic."""
    nk = a1.shape[0]
    t1[0] = 0
    t2[0] = 0
    t3[0] = 0
    for iq in range(nk):
        t1[0] += a1[iq, iq]
        t2[0] += a2[iq, iq]
        t3[0] += a3[iq, iq]

    for ik in range(1, nk):
        qmax = nk - ik
        tik1 = t1[ik - 1]
        tik2 = t2[ik - 1]
        tik3 = t3[ik - 1]
        for iq in range(qmax):
            ip = iq + ik
            tik1 += a1[iq, ip] + a1[ip, iq]
            tik2 += a2[iq, ip] + a2[ip, iq]
            tik3 += a3[iq, ip] + a3[ip, iq]
        for iq in range(ik):
            ip = ik - 1 - iq
            tik1 -= a1[iq, ip]
            tik2 -= a2[iq, ip]
            tik3 -= a3[iq, ip]
        t1[ik] = tik1
        t2[ik] = tik2
        t3[ik] = tik3


@jit(nopython=True, nogil=True, cache=True)
def combine_shells(
    out: np.ndarray, k: np.ndarray, t1: np.ndarray, t2: np.ndarray, t3: np.ndarray
):
    """``out[ik] = k t1[ik] + t2[ik] / k^3 + t3[ik] / k`` for every shell."""
    for ik in range(k.shape[0]):
        kk = k[ik]
        out[ik] = kk * t1[ik] + t2[ik] / kk**3 + t3[ik] / kk


@jit(nopython=True, nogil=True, cache=True)
def msd_integrand_sum(
    out: np.ndarray, k: np.ndarray, c_k: np.ndarray, f: np.ndarray, fs: np.ndarray
):
    """Store ``sum_q q^4 c(q)^2 F(q) Fs(q)`` in ``out[0]``."""
    out[0] = 0
    for iq in range(k.shape[0]):
        out[0] += k[iq] ** 4 * c_k[iq] ** 2 * f[iq] * fs[iq]
