"""Factory for kernel evaluation backends.

Kernels delegate the interaction fill, the recurrence and the final
combination to a :class:`mctpy.kernels.ops.KernelOps` object. This module
provides a single entry point :func:`get_kernel_ops` that selects the Numba or
the numpy implementation by name.
"""

from __future__ import annotations

import logging

from mctpy.errors import ConfigurationError
from mctpy.functions.env import kernel_backend_from_env, normalize_kernel_backend
from mctpy.kernels.ops import KernelOps

log = logging.getLogger(__name__)

_OPS_CACHE: dict[str, KernelOps] = {}


def get_kernel_ops(backend: str | None = None) -> KernelOps:
    """Return the kernel ops for ``backend``.

    Parameters
    ----------
    backend:
        ``"numba"`` or ``"numpy"`` (aliases such as ``"jit"`` or
        ``"vectorized"`` are accepted). If ``None``, the backend is read from
        the ``MCTPY_KERNEL_BACKEND`` environment variable, defaulting to
        ``"numba"``.

    Returns
    -------
    KernelOps
        A shared, stateless ops instance.

    Raises
    ------
    ConfigurationError
        If ``backend`` names an unknown implementation.
    """

    if backend is None:
        name = kernel_backend_from_env()
    else:
        name = normalize_kernel_backend(str(backend))
        if name is None:
            raise ConfigurationError(
                f"Unsupported kernel backend: {backend!r}. "
                "Expected one of {'numba', 'numpy'}."
            )

    cached = _OPS_CACHE.get(name)
    if cached is not None:
        return cached

    if name == "numba":
        from mctpy.kernels.numba_ops import NumbaKernelOps

        ops: KernelOps = NumbaKernelOps()
    else:
        from mctpy.kernels.numpy_ops import NumpyKernelOps

        ops = NumpyKernelOps()

    log.debug(f"Using {name} kernel backend")
    _OPS_CACHE[name] = ops
    return ops
