import os

import pytest

from mctpy.functions.env import (
    BACKEND_ENV_VAR,
    kernel_backend_from_env,
    normalize_kernel_backend,
)
from mctpy.kernels.factory import get_kernel_ops


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("numba", "numba"),
        ("JIT", "numba"),
        (" numpy ", "numpy"),
        ("vectorized", "numpy"),
        ("garbage", None),
        ("", None),
    ],
)
def test_normalize_kernel_backend(raw: str, expected):
    assert normalize_kernel_backend(raw) == expected


def test_kernel_backend_from_env(monkeypatch):
    monkeypatch.delenv(BACKEND_ENV_VAR, raising=False)
    assert kernel_backend_from_env() == "numba"
    assert kernel_backend_from_env(default="numpy") == "numpy"

    monkeypatch.setenv(BACKEND_ENV_VAR, "numpy")
    assert kernel_backend_from_env() == "numpy"

    monkeypatch.setenv(BACKEND_ENV_VAR, "unexpected")
    assert kernel_backend_from_env() == "numba"


def test_get_kernel_ops_uses_environment(monkeypatch):
    monkeypatch.setenv(BACKEND_ENV_VAR, "numpy")
    assert get_kernel_ops().name == "numpy"

    monkeypatch.delenv(BACKEND_ENV_VAR)
    assert "MCTPY_KERNEL_BACKEND" not in os.environ
    assert get_kernel_ops().name == "numba"


def test_get_kernel_ops_is_shared():
    assert get_kernel_ops("numpy") is get_kernel_ops("vectorized")
