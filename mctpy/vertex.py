"""Mode-coupling vertex matrices.

The memory kernels reduce the three-dimensional wavevector integral

.. math::

    \\int d\\mathbf{q}\\, V^2(\\mathbf{k}, \\mathbf{q})\\, F(q)\\, F(|\\mathbf{k} - \\mathbf{q}|)

to a double sum over shell pairs ``(q, p)`` with ``|k - q| <= p <= k + q``.
After the angular integration the integrand splits into three channels whose
weights only depend on the grid and on ``c(q)``; these weights are the vertex
matrices ``V1``, ``V2`` and ``V3``. They are built once per kernel and never
change afterwards.

Rows are indexed by ``q`` and columns by ``p``.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

import numpy as np

from mctpy.grid import WavenumberGrid

log = logging.getLogger(__name__)


class VertexMatrices(NamedTuple):
    """Three ``Nk x Nk`` channel weights (read-only)."""

    v1: np.ndarray
    v2: np.ndarray
    v3: np.ndarray


def _pair_grid(grid: WavenumberGrid, c_k: np.ndarray):
    q = grid.k[:, np.newaxis]
    p = grid.k[np.newaxis, :]
    cq = c_k[:, np.newaxis]
    cp = c_k[np.newaxis, :]
    return q, p, cq, cp


def _freeze(*matrices: np.ndarray) -> VertexMatrices:
    out = []
    for v in matrices:
        v = np.ascontiguousarray(v)
        v.setflags(write=False)
        out.append(v)
    return VertexMatrices(*out)


def build_vertex_matrices(
    density: float,
    thermal_energy: float,
    mass: float,
    grid: WavenumberGrid,
    c_k: np.ndarray,
) -> VertexMatrices:
    """Vertices of the coherent kernel ``F(q) F(|k - q|)``.

    Parameters
    ----------
    density:
        Number density ``rho``.
    thermal_energy:
        ``kBT``.
    mass:
        Particle mass ``m``.
    grid:
        Uniform wavenumber grid.
    c_k:
        Coupling coefficients ``c(q)`` aligned with ``grid``.

    Returns
    -------
    VertexMatrices
        With prefactor ``pref = p q dk^2 D0 rho / (8 pi^2)`` and ``D0 = kBT / m``:

        - ``V1 = pref (c_p + c_q)^2 / 4``
        - ``V2 = pref (q^2 - p^2)^2 (c_q - c_p)^2 / 4``
        - ``V3 = pref (q^2 - p^2) (c_q^2 - c_p^2) / 2``
    """
    q, p, cq, cp = _pair_grid(grid, c_k)
    d0 = thermal_energy / mass
    pref = p * q * d0 * density / (8 * np.pi**2) * grid.dk * grid.dk
    q2_p2 = q**2 - p**2

    v1 = pref * (cp + cq) ** 2 / 4
    v2 = pref * q2_p2**2 * (cq - cp) ** 2 / 4
    v3 = pref * q2_p2 * (cq**2 - cp**2) / 2
    log.debug(f"Built coherent vertex matrices for {grid.size} shells")
    return _freeze(v1, v2, v3)


def build_tagged_vertex_matrices(
    density: float,
    thermal_energy: float,
    mass: float,
    grid: WavenumberGrid,
    c_k: np.ndarray,
) -> VertexMatrices:
    """Vertices of the tagged kernel ``F(q) Fs(|k - q|)``.

    Only the coherent shell ``q`` carries a direct-correlation factor, so the
    channels differ from :func:`build_vertex_matrices` and the prefactor is
    ``pref = p q dk^2 D0 rho / (4 pi^2)``:

    - ``V1 = pref c_q^2 / 4``
    - ``V2 = pref (q^2 - p^2)^2 c_q^2 / 4``
    - ``V3 = pref (q^2 - p^2) c_q^2 / 2``
    """
    q, p, cq, _ = _pair_grid(grid, c_k)
    d0 = thermal_energy / mass
    pref = p * q * d0 * density / (4 * np.pi**2) * grid.dk**2
    q2_p2 = q**2 - p**2
    cq2 = cq**2

    v1 = pref * cq2 / 4
    v2 = pref * q2_p2**2 * cq2 / 4
    v3 = pref * q2_p2 * cq2 / 2
    log.debug(f"Built tagged vertex matrices for {grid.size} shells")
    return _freeze(v1, v2, v3)
