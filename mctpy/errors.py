"""Exception types raised by mctpy.

Configuration problems are detected while a grid, kernel or equation is being
constructed; lookup problems are detected when a kernel that reads from a
stored trajectory is evaluated at a time that was never sampled.
"""


class MCTError(Exception):
    """Base class for all mctpy errors."""


class ConfigurationError(MCTError, ValueError):
    """Raised when inputs cannot be used to build a grid, kernel or equation."""


class TrajectoryLookupError(MCTError, KeyError):
    """Raised when a trajectory has no snapshot recorded at the requested time."""

    def __init__(self, t: float):
        super().__init__(t)
        self.t = t

    def __str__(self) -> str:
        return (
            f"No field snapshot recorded at t={self.t!r}. "
            "Kernels backed by a trajectory can only be evaluated at its sample times."
        )
