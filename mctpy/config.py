"""Configuration files for building kernels.

A configuration is a JSON or YAML document such as::

    parameters:
      density: 0.95
      thermal_energy: 1.0
      mass: 1.0
    grid:
      number: 100
      step: 0.4
    structure_factor:
      file: sk.csv
      column: S
    kernel:
      type: mode_coupling
      dims: 3
      backend: numba

The grid is given either as explicit ``data`` or as ``number`` shells of
width ``step``. The structure factor is given as ``data``, as a ``constant``
or as a column of a delimited ``file`` (relative paths are resolved against
the configuration file).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Literal

import numpy as np
import pandas as pd
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from typing_extensions import Self

from mctpy.errors import ConfigurationError
from mctpy.grid import WavenumberGrid
from mctpy.kernels import (
    MemoryKernel,
    ModeCouplingKernel,
    MSDModeCouplingKernel,
    TaggedModeCouplingKernel,
)


class PhysicalParameters(BaseModel):
    density: float = Field(gt=0)
    thermal_energy: float = Field(default=1.0, gt=0)
    mass: float = Field(default=1.0, gt=0)


class GridSettings(BaseModel):
    data: list[float] | None = Field(default=None)
    number: int | None = Field(default=None, ge=2)
    step: float | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def one_representation(self) -> Self:
        explicit = self.data is not None
        spaced = self.number is not None and self.step is not None
        if explicit == spaced:
            raise ValueError(
                "Provide the grid either as 'data' or as 'number' and 'step'"
            )
        return self


class StructureFactorSettings(BaseModel):
    data: list[float] | None = Field(default=None)
    constant: float | None = Field(default=None)
    file: str | None = Field(default=None)
    column: str | int = Field(default=0)
    delimiter: str = Field(default=",")

    @model_validator(mode="after")
    def one_source(self) -> Self:
        sources = (self.data, self.constant, self.file)
        if sum(source is not None for source in sources) != 1:
            raise ValueError(
                "Provide the structure factor as exactly one of 'data', 'constant' or 'file'"
            )
        return self


class KernelSettings(BaseModel):
    type: Literal["mode_coupling", "tagged", "msd"] = Field(default="mode_coupling")
    dims: int = Field(default=3)
    backend: str | None = Field(default=None)


class Settings(BaseModel):
    parameters: PhysicalParameters
    grid: GridSettings
    structure_factor: StructureFactorSettings
    kernel: KernelSettings = Field(default_factory=KernelSettings)

    model_config = ConfigDict(extra="forbid")


class Config:
    """Kernel configuration read from a JSON or YAML file.

    Parameters
    ----------
    path_config:
        Path to a ``.json``, ``.yaml`` or ``.yml`` file.

    Raises
    ------
    ConfigurationError
        If the file type is unsupported, the file is empty or it does not
        describe a valid kernel setup.
    """

    def __init__(self, path_config: str | Path):
        self.path_config = Path(path_config)
        self.log = logging.getLogger(self.__class__.__module__)

        match self.path_config.suffix:
            case ".json":
                load = json.load
            case ".yaml" | ".yml":
                load = yaml.safe_load
            case _:
                raise ConfigurationError(
                    "The provided config file needs to be a json or yaml file!"
                )
        try:
            with open(self.path_config) as data:
                raw = load(data)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as err:
            raise ConfigurationError(
                f"Could not read config file {self.path_config}: {err}"
            ) from err
        if raw is None:
            raise ConfigurationError(f"Could not read config file {self.path_config}.")

        self.settings = Config.validate(raw)
        self.grid = self.__read_grid()
        self.structure_factor = self.__read_structure_factor()
        self.log.info(
            f"Loaded {self.settings.kernel.type} kernel configuration with "
            f"{self.grid.size} shells from {self.path_config}"
        )

    @staticmethod
    def validate(raw: dict) -> Settings:
        """Validate a raw configuration mapping."""
        try:
            return Settings.model_validate(raw)
        except ValidationError as err:
            raise ConfigurationError(f"Invalid configuration:\n{err}") from err

    @property
    def parameters(self) -> PhysicalParameters:
        return self.settings.parameters

    def __read_grid(self) -> WavenumberGrid:
        grid = self.settings.grid
        if grid.data is not None:
            return WavenumberGrid(np.array(grid.data, dtype=float))
        return WavenumberGrid.from_spacing(grid.number, grid.step)

    def __read_structure_factor(self) -> np.ndarray:
        sk = self.settings.structure_factor
        if sk.data is not None:
            values = np.array(sk.data, dtype=float)
        elif sk.constant is not None:
            values = np.full(self.grid.size, sk.constant, dtype=float)
        else:
            path = Path(sk.file)
            if not path.is_absolute():
                path = self.path_config.parent / path
            delim = r"\s+" if sk.delimiter == "whitespace" else sk.delimiter
            header = None if isinstance(sk.column, int) else "infer"
            try:
                table = pd.read_csv(path, header=header, sep=delim)
            except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as err:
                raise ConfigurationError(
                    f"Could not read structure factor file {path}: {err}"
                ) from err
            if sk.column not in table.columns:
                raise ConfigurationError(
                    f"Column {sk.column!r} not found in structure factor file {path}"
                )
            try:
                values = table[sk.column].to_numpy(dtype=float)
            except ValueError as err:
                raise ConfigurationError(
                    f"Column {sk.column!r} of {path} is not numeric"
                ) from err

        if values.size != self.grid.size:
            raise ConfigurationError(
                f"Structure factor has {values.size} entries but the grid has "
                f"{self.grid.size} shells"
            )
        return values

    def build_kernel(self, trajectory=None, tagged_trajectory=None) -> MemoryKernel:
        """Build the configured kernel.

        Parameters
        ----------
        trajectory:
            Coherent solution; required for ``tagged`` and ``msd`` kernels.
        tagged_trajectory:
            Tagged solution; required for ``msd`` kernels.
        """
        kernel = self.settings.kernel
        p = self.parameters
        args = (p.density, p.thermal_energy, p.mass, self.grid, self.structure_factor)

        match kernel.type:
            case "mode_coupling":
                return ModeCouplingKernel(
                    *args, dims=kernel.dims, backend=kernel.backend
                )
            case "tagged":
                if trajectory is None:
                    raise ConfigurationError(
                        "A tagged kernel needs the coherent trajectory"
                    )
                return TaggedModeCouplingKernel(
                    *args, trajectory, dims=kernel.dims, backend=kernel.backend
                )
            case "msd":
                if trajectory is None or tagged_trajectory is None:
                    raise ConfigurationError(
                        "An MSD kernel needs the coherent and the tagged trajectory"
                    )
                return MSDModeCouplingKernel(
                    *args,
                    trajectory,
                    tagged_trajectory,
                    dims=kernel.dims,
                    backend=kernel.backend,
                )
