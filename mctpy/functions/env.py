"""Environment-variable helpers for kernel backends.

The backend used by kernels that are built without an explicit ``backend``
argument can be chosen with ``MCTPY_KERNEL_BACKEND``.

Notes
-----
These are intentionally forgiving: unknown or empty values fall back to the
default backend rather than raising, to keep batch runs robust. Explicit
``backend=`` arguments are validated strictly by
:func:`mctpy.kernels.factory.get_kernel_ops`.
"""

from __future__ import annotations

import os

BACKEND_ENV_VAR = "MCTPY_KERNEL_BACKEND"
DEFAULT_BACKEND = "numba"

_BACKEND_ALIASES = {
    "numba": "numba",
    "jit": "numba",
    "cpu_numba": "numba",
    "numpy": "numpy",
    "np": "numpy",
    "vectorized": "numpy",
}


def normalize_kernel_backend(value: str) -> str | None:
    """Normalize a backend selector.

    Parameters
    ----------
    value:
        A raw backend name.

    Returns
    -------
    str or None
        One of ``{'numba', 'numpy'}``, or ``None`` if the name is unknown.
    """

    return _BACKEND_ALIASES.get(value.strip().lower())


def kernel_backend_from_env(*, default: str = DEFAULT_BACKEND) -> str:
    """Read the kernel backend from ``MCTPY_KERNEL_BACKEND``.

    Parameters
    ----------
    default:
        Backend used when the variable is unset or holds an unknown value.

    Returns
    -------
    str
        One of ``{'numba', 'numpy'}``.
    """

    raw = os.environ.get(BACKEND_ENV_VAR, "")
    if not raw.strip():
        return default
    return normalize_kernel_backend(raw) or default
