from .config import Config
from .equation import MemoryEquation, MemoryEquationCoefficients
from .errors import ConfigurationError, MCTError, TrajectoryLookupError
from .grid import WavenumberGrid, coupling_coefficients
from .kernels import (
    MemoryKernel,
    ModeCouplingKernel,
    MSDModeCouplingKernel,
    TaggedModeCouplingKernel,
)
from .trajectory import Trajectory

__version__ = "0.1.0"
