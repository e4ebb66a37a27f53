"""Read-only views on solver-owned solutions.

The tagged and MSD kernels need the coherent (and tagged) correlator at the
very time they are evaluated at. The solver that produced those correlators
owns the storage; a :class:`Trajectory` only keeps references to its time and
field sequences together with an index from sample time to position.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from mctpy.errors import ConfigurationError, TrajectoryLookupError


class Trajectory:
    """Exact-time lookup into a sequence of field snapshots.

    Parameters
    ----------
    t:
        Sample times, one per snapshot. Not copied.
    F:
        Field snapshots aligned with ``t``. Not copied.

    Raises
    ------
    ConfigurationError
        If ``t`` and ``F`` have different lengths.
    """

    def __init__(self, t: Sequence[float], F: Sequence[Any]):
        if len(t) != len(F):
            raise ConfigurationError(
                f"Trajectory has {len(t)} sample times but {len(F)} snapshots"
            )
        self._t = t
        self._F = F
        self._index = {float(ti): i for i, ti in enumerate(t)}

    @classmethod
    def from_solution(cls, sol) -> "Trajectory":
        """Wrap any solution object exposing ``t`` and ``F`` sequences."""
        try:
            t, F = sol.t, sol.F
        except AttributeError as err:
            raise ConfigurationError(
                f"{type(sol).__name__} does not expose sample times 't' and snapshots 'F'"
            ) from err
        return cls(t, F)

    @property
    def times(self) -> Sequence[float]:
        return self._t

    def index(self, t: float) -> int:
        """Position of the snapshot recorded at exactly ``t``."""
        try:
            return self._index[float(t)]
        except KeyError:
            raise TrajectoryLookupError(t) from None

    def snapshot(self, t: float):
        """Field snapshot recorded at exactly ``t``.

        Raises
        ------
        TrajectoryLookupError
            If ``t`` is not one of the sample times.
        """
        return self._F[self.index(t)]

    def snapshot_at(self, index: int):
        """Field snapshot stored at position ``index``."""
        return self._F[index]

    def __contains__(self, t) -> bool:
        return float(t) in self._index

    def __len__(self) -> int:
        return len(self._t)


def as_trajectory(obj) -> Trajectory:
    if isinstance(obj, Trajectory):
        return obj
    return Trajectory.from_solution(obj)
