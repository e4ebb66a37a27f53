import numpy as np
import pytest
from scipy import sparse

from mctpy.errors import ConfigurationError
from mctpy.grid import WavenumberGrid
from mctpy.kernels import ModeCouplingKernel, diagonal_operator

BACKENDS = ["numba", "numpy"]


def _triangle_masks(nk: int) -> np.ndarray:
    iq, ip = np.meshgrid(np.arange(nk), np.arange(nk), indexing="ij")
    ik = np.arange(nk)[:, np.newaxis, np.newaxis]
    return (np.abs(iq - ip) <= ik) & (ik <= iq + ip)


def _direct_kernel(vertices, k, f_q, f_p) -> np.ndarray:
    masks = _triangle_masks(k.size)
    outer = np.outer(f_q, f_p)
    t1, t2, t3 = (np.sum(masks * (v * outer), axis=(1, 2)) for v in vertices)
    return k * t1 + t2 / k**3 + t3 / k


def _smooth_structure_factor(k: np.ndarray) -> np.ndarray:
    return 1.0 + 0.8 * np.sin(k) * np.exp(-0.1 * k)


@pytest.mark.parametrize("backend", BACKENDS)
def test_end_to_end_constant_structure_factor(backend):
    grid = WavenumberGrid.from_spacing(100, 0.4)
    kernel = ModeCouplingKernel(1.0, 1.0, 1.0, grid, np.full(100, 2.0), backend=backend)

    np.testing.assert_allclose(kernel.c_k, 0.5)
    assert grid[0] == pytest.approx(0.2)

    out = kernel.evaluate(np.ones(100), 0.0)

    assert sparse.issparse(out)
    assert out.shape == (100, 100)
    diag = out.diagonal()
    assert diag.shape == (100,)
    assert np.all(diag > 0)


@pytest.mark.parametrize("backend", BACKENDS)
def test_kernel_matches_direct_sum(backend):
    grid = WavenumberGrid.from_spacing(12, 0.5)
    s_k = _smooth_structure_factor(grid.k)
    rng = np.random.default_rng(5)
    F = rng.uniform(0.1, 1.0, size=12)

    kernel = ModeCouplingKernel(0.8, 1.2, 1.5, grid, s_k, backend=backend)
    out = kernel.evaluate(F, 0.0)

    ref = _direct_kernel(kernel.vertices, grid.k, F, F)
    np.testing.assert_allclose(out.diagonal(), ref, rtol=1e-10)


def test_uniform_field_is_order_independent():
    nk = 30
    grid = WavenumberGrid.from_spacing(nk, 0.3)
    s_k = _smooth_structure_factor(grid.k)
    kernel = ModeCouplingKernel(1.0, 1.0, 1.0, grid, s_k, backend="numba")
    out = kernel.evaluate(np.ones(nk), 0.0).diagonal()

    rng = np.random.default_rng(9)
    masks = _triangle_masks(nk)
    shuffled = np.empty(nk)
    for ik in range(nk):
        t = []
        for v in kernel.vertices:
            terms = v[masks[ik]]
            t.append(np.sum(rng.permutation(terms)))
        k = grid.k[ik]
        shuffled[ik] = k * t[0] + t[1] / k**3 + t[2] / k

    np.testing.assert_allclose(out, shuffled, rtol=1e-10)

    numpy_kernel = ModeCouplingKernel(1.0, 1.0, 1.0, grid, s_k, backend="numpy")
    np.testing.assert_allclose(
        numpy_kernel.evaluate(np.ones(nk), 0.0).diagonal(), out, rtol=1e-12
    )


def test_evaluate_into_dia_array_and_plain_array():
    grid = WavenumberGrid.from_spacing(20, 0.4)
    kernel = ModeCouplingKernel(1.0, 1.0, 1.0, grid, _smooth_structure_factor(grid.k))
    F = np.linspace(1.0, 0.1, 20)
    expected = kernel.evaluate(F, 0.0).diagonal()

    out = diagonal_operator(np.zeros(20))
    kernel.evaluate_into(out, F, 0.0)
    np.testing.assert_allclose(out.diagonal(), expected)
    np.testing.assert_allclose(out @ np.ones(20), expected)

    diag = np.zeros(20)
    kernel.evaluate_into(diag, F, 0.0)
    np.testing.assert_allclose(diag, expected)


def test_outputs_do_not_alias_scratch_buffers():
    grid = WavenumberGrid.from_spacing(20, 0.4)
    kernel = ModeCouplingKernel(1.0, 1.0, 1.0, grid, _smooth_structure_factor(grid.k))

    first = kernel.evaluate(np.ones(20), 0.0)
    snapshot = first.diagonal().copy()
    second = kernel.evaluate(np.full(20, 0.5), 1.0)

    np.testing.assert_array_equal(first.diagonal(), snapshot)
    # the kernel is quadratic in F
    np.testing.assert_allclose(second.diagonal(), 0.25 * snapshot, rtol=1e-12)


def test_call_alias():
    grid = WavenumberGrid.from_spacing(10, 0.4)
    kernel = ModeCouplingKernel(1.0, 1.0, 1.0, grid, _smooth_structure_factor(grid.k))
    F = np.ones(10)

    np.testing.assert_array_equal(
        kernel(F, 0.0).diagonal(), kernel.evaluate(F, 0.0).diagonal()
    )


def test_float32_inputs_stay_float32():
    k = ((np.arange(16) + 0.5) * 0.4).astype(np.float32)
    s_k = _smooth_structure_factor(k).astype(np.float32)
    kernel = ModeCouplingKernel(1.0, 1.0, 1.0, k, s_k)

    out = kernel.evaluate(np.ones(16, dtype=np.float32), 0.0)

    assert kernel.dtype == np.float32
    assert out.dtype == np.float32


def test_rejects_other_dimensions():
    grid = WavenumberGrid.from_spacing(10, 0.4)
    with pytest.raises(ConfigurationError):
        ModeCouplingKernel(1.0, 1.0, 1.0, grid, np.full(10, 2.0), dims=2)


def test_rejects_bad_grid():
    with pytest.raises(ConfigurationError):
        ModeCouplingKernel(1.0, 1.0, 1.0, [0.1, 0.4, 0.7], np.full(3, 2.0))


def test_rejects_unknown_backend():
    grid = WavenumberGrid.from_spacing(10, 0.4)
    with pytest.raises(ConfigurationError):
        ModeCouplingKernel(1.0, 1.0, 1.0, grid, np.full(10, 2.0), backend="cuda")


def test_rejects_wrong_field_length_and_output():
    grid = WavenumberGrid.from_spacing(10, 0.4)
    kernel = ModeCouplingKernel(1.0, 1.0, 1.0, grid, np.full(10, 2.0))

    with pytest.raises(ValueError):
        kernel.evaluate(np.ones(9), 0.0)
    with pytest.raises(ConfigurationError):
        kernel.evaluate_into(np.zeros(9), np.ones(10), 0.0)
    with pytest.raises(ConfigurationError):
        kernel.evaluate_into(sparse.csr_array(np.eye(10)), np.ones(10), 0.0)
