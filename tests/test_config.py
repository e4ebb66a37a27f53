import json
from pathlib import Path
from types import SimpleNamespace

import numpy as np
import pytest
import yaml

from mctpy.config import Config
from mctpy.errors import ConfigurationError
from mctpy.kernels import (
    ModeCouplingKernel,
    MSDModeCouplingKernel,
    TaggedModeCouplingKernel,
)


def _base_config(**overrides) -> dict:
    config = {
        "parameters": {"density": 1.0, "thermal_energy": 1.0, "mass": 1.0},
        "grid": {"number": 10, "step": 0.4},
        "structure_factor": {"constant": 2.0},
        "kernel": {"type": "mode_coupling", "backend": "numpy"},
    }
    config.update(overrides)
    return config


def _write(path: Path, config: dict) -> Path:
    if path.suffix == ".json":
        path.write_text(json.dumps(config))
    else:
        path.write_text(yaml.safe_dump(config))
    return path


@pytest.mark.parametrize("name", ["config.json", "config.yaml", "config.yml"])
def test_config_builds_mode_coupling_kernel(tmp_path: Path, name: str) -> None:
    config = Config(_write(tmp_path / name, _base_config()))

    assert config.grid.size == 10
    assert config.grid.dk == pytest.approx(0.4)
    np.testing.assert_array_equal(config.structure_factor, np.full(10, 2.0))

    kernel = config.build_kernel()
    assert isinstance(kernel, ModeCouplingKernel)
    assert kernel.ops.name == "numpy"
    assert np.all(kernel.evaluate(np.ones(10), 0.0).diagonal() > 0)


def test_config_reads_structure_factor_file(tmp_path: Path) -> None:
    k = (np.arange(8) + 0.5) * 0.25
    s = 1.0 + 0.5 * np.cos(k)
    (tmp_path / "sk.csv").write_text(
        "k,S\n" + "".join(f"{ki},{si}\n" for ki, si in zip(k, s))
    )
    raw = _base_config(
        grid={"data": k.tolist()},
        structure_factor={"file": "sk.csv", "column": "S"},
    )

    config = Config(_write(tmp_path / "config.yaml", raw))

    np.testing.assert_allclose(config.grid.k, k)
    np.testing.assert_allclose(config.structure_factor, s)


def test_config_reads_headerless_structure_factor_file(tmp_path: Path) -> None:
    (tmp_path / "sk.txt").write_text("".join(f"0.{i} 2.0\n" for i in range(10)))
    raw = _base_config(
        structure_factor={"file": "sk.txt", "column": 1, "delimiter": "whitespace"}
    )

    config = Config(_write(tmp_path / "config.json", raw))

    np.testing.assert_array_equal(config.structure_factor, np.full(10, 2.0))


def test_config_builds_trajectory_kernels(tmp_path: Path) -> None:
    sol = SimpleNamespace(t=[0.0], F=[np.ones(10)])
    tagged = _base_config(kernel={"type": "tagged", "backend": "numpy"})
    msd = _base_config(kernel={"type": "msd"})

    tagged_config = Config(_write(tmp_path / "tagged.json", tagged))
    msd_config = Config(_write(tmp_path / "msd.json", msd))

    assert isinstance(tagged_config.build_kernel(sol), TaggedModeCouplingKernel)
    assert isinstance(msd_config.build_kernel(sol, sol), MSDModeCouplingKernel)
    with pytest.raises(ConfigurationError):
        tagged_config.build_kernel()
    with pytest.raises(ConfigurationError):
        msd_config.build_kernel(sol)


@pytest.mark.parametrize(
    "overrides",
    [
        {"grid": {"number": 10}},
        {"grid": {"data": [0.2, 0.6], "number": 2, "step": 0.4}},
        {"structure_factor": {"constant": 2.0, "data": [2.0] * 10}},
        {"structure_factor": {"data": [2.0] * 9}},
        {"parameters": {"density": -1.0}},
        {"kernel": {"type": "unknown"}},
        {"unexpected": True},
    ],
)
def test_invalid_configs(tmp_path: Path, overrides: dict) -> None:
    with pytest.raises(ConfigurationError):
        Config(_write(tmp_path / "config.json", _base_config(**overrides)))


def test_config_rejects_other_dimensions(tmp_path: Path) -> None:
    raw = _base_config(kernel={"type": "mode_coupling", "dims": 2})
    config = Config(_write(tmp_path / "config.json", raw))

    with pytest.raises(ConfigurationError):
        config.build_kernel()


@pytest.mark.parametrize(
    "name,content",
    [
        ("missing.yaml", None),
        ("broken.json", "{not json"),
        ("broken.yaml", "parameters: [unclosed"),
    ],
)
def test_config_rejects_unreadable_files(
    tmp_path: Path, name: str, content: str | None
) -> None:
    path = tmp_path / name
    if content is not None:
        path.write_text(content)

    with pytest.raises(ConfigurationError):
        Config(path)


@pytest.mark.parametrize(
    "file_content",
    [None, "k,S\n0.2,abc\n0.6,def\n"],
)
def test_config_rejects_unreadable_structure_factor(
    tmp_path: Path, file_content: str | None
) -> None:
    if file_content is not None:
        (tmp_path / "sk.csv").write_text(file_content)
    raw = _base_config(
        grid={"data": [0.2, 0.6]},
        structure_factor={"file": "sk.csv", "column": "S"},
    )

    with pytest.raises(ConfigurationError):
        Config(_write(tmp_path / "config.json", raw))


def test_config_rejects_unknown_file_type(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("")

    with pytest.raises(ConfigurationError):
        Config(path)
