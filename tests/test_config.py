"""Tests for configuration loading, logging setup and the CLI."""

import json
import logging

import pandas as pd
import pytest
from click.testing import CliRunner

from cell_simulator.chemistry import Chemistry, kokam_nmc
from cell_simulator.cli import main
from cell_simulator.core.degradation import CrackModel, SEIModel
from cell_simulator.utils.config_loader import (
    DegradationConfigModel,
    SimulationConfigModel,
    load_config,
    save_config,
)
from cell_simulator.utils.logging_setup import configure_logging, verbosity_to_level

EXAMPLE_YAML = """
simulation:
  name: "aging"
  verbose: 2

cell:
  chemistry: "KokamNMC"
  nodes: 5

degradation:
  sei: 1
  crack: [2, 4]
  sei_porosity: true

run:
  current: 1.5
  dt: 2.0
  steps: 10
  record_every: 5
"""


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers bound to streams that CliRunner closes."""
    yield
    logger = logging.getLogger("cell_simulator")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(EXAMPLE_YAML)
    return path


class TestConfigLoader:
    """Test suite for YAML configuration."""

    def test_load_config(self, config_file):
        cfg = load_config(config_file)
        assert cfg.name == "aging"
        assert cfg.verbose == 2
        assert cfg.cell.nodes == 5
        assert cfg.degradation.sei == [1]
        assert cfg.run.current == 1.5
        assert cfg.run.steps == 10

    def test_to_selector(self, config_file):
        selector = load_config(config_file).degradation.to_selector()
        assert selector.sei == (SEIModel.KINETIC,)
        assert selector.crack == (CrackModel.DAI, CrackModel.BARAI)
        assert selector.sei_porosity
        assert selector.needs_dai_stress

    def test_defaults(self):
        cfg = SimulationConfigModel()
        assert cfg.cell.chemistry == "KokamNMC"
        assert not cfg.degradation.to_selector().is_active

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    @pytest.mark.parametrize(
        "kwargs",
        [{"sei": [4]}, {"crack": [9]}, {"lam": []}, {"plating": 3}],
    )
    def test_invalid_degradation(self, kwargs):
        with pytest.raises(ValueError):
            DegradationConfigModel(**kwargs)

    def test_invalid_verbosity(self):
        with pytest.raises(ValueError):
            SimulationConfigModel(verbose=9)

    def test_save_and_reload(self, config_file, tmp_path):
        cfg = load_config(config_file)
        out = tmp_path / "saved" / "config.yaml"
        save_config(cfg, out)
        assert load_config(out) == cfg


class TestLogging:
    """Test suite for verbosity handling."""

    def test_levels(self):
        assert verbosity_to_level(0) == logging.CRITICAL
        assert verbosity_to_level(1) == logging.ERROR
        assert verbosity_to_level(3) == logging.INFO
        assert verbosity_to_level(7) == logging.DEBUG

    @pytest.mark.parametrize("verbose", [-1, 8])
    def test_out_of_range(self, verbose):
        with pytest.raises(ValueError):
            verbosity_to_level(verbose)

    def test_configure_logging_single_handler(self):
        configure_logging(4)
        logger = configure_logging(4)
        assert logger.name == "cell_simulator"
        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO


class TestCli:
    """Test suite for the command-line interface."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_list_cells(self, runner):
        result = runner.invoke(main, ["list-cells"])
        assert result.exit_code == 0
        assert "KokamNMC" in result.output

    def test_info(self, runner):
        result = runner.invoke(main, ["info", "--verbose", "0"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["cell"]["name"] == "KokamNMC"
        assert data["state"]["time"] == 0.0
        assert data["stress"]["needs_dai"] is False

    def test_info_node_mismatch(self, runner, tmp_path):
        """A saved discretisation with the wrong node count exits with an error."""
        path = tmp_path / "diffusion.npz"
        result = runner.invoke(main, ["discretise", "--nodes", "3", "-o", str(path)])
        assert result.exit_code == 0

        result = runner.invoke(main, ["info", "--diffusion", str(path), "--verbose", "0"])
        assert result.exit_code == 1
        assert "DiscretizationMismatchError" in result.output

    def test_run_with_config(self, runner, config_file, tmp_path):
        output = tmp_path / "out" / "run.csv"
        result = runner.invoke(main, ["run", "--config", str(config_file), "-o", str(output), "-v", "0"])
        assert result.exit_code == 0, result.output
        assert "completed" in result.output

        data = pd.read_csv(output)
        assert list(data["time"]) == [0.0, 10.0, 20.0]
        assert data["sei_thickness"].is_monotonic_increasing
        assert data["crack_surface"].iloc[-1] > data["crack_surface"].iloc[0]

    def test_run_options_override_config(self, runner, config_file, tmp_path):
        output = tmp_path / "run.csv"
        result = runner.invoke(
            main,
            ["run", "-c", str(config_file), "--steps", "4", "--record-every", "2", "--sei", "3", "-o", str(output)],
        )
        assert result.exit_code == 0, result.output
        data = pd.read_csv(output)
        assert len(data) == 3
        assert data["time"].iloc[-1] == pytest.approx(8.0)

    def test_run_invalid_model(self, runner):
        result = runner.invoke(main, ["run", "--steps", "2", "--crack", "9"])
        assert result.exit_code != 0

    def test_init_config(self, runner, tmp_path):
        output = tmp_path / "example.yaml"
        result = runner.invoke(main, ["init-config", "-o", str(output)])
        assert result.exit_code == 0
        cfg = load_config(output)
        assert cfg.degradation.crack == [2]
        assert cfg.run.steps == 3600

    @pytest.mark.parametrize(
        "args",
        [
            ["--record-every", "0"],
            ["--dt", "-1"],
            ["--nodes", "0"],
            ["--steps", "0"],
        ],
    )
    def test_run_rejects_out_of_range_overrides(self, runner, args):
        """Overrides are checked against the config limits before running."""
        result = runner.invoke(main, ["run", "--steps", "3", *args])
        assert result.exit_code == 2
        assert isinstance(result.exception, SystemExit)
        assert "Invalid configuration" in result.output

    def test_info_rejects_bad_nodes(self, runner):
        result = runner.invoke(main, ["info", "--nodes", "0"])
        assert result.exit_code == 2
        assert isinstance(result.exception, SystemExit)

    def test_unknown_chemistry(self, runner):
        result = runner.invoke(main, ["run", "--steps", "1", "--chemistry", "LeadAcid"])
        assert result.exit_code == 2
        assert "Unknown cell" in result.output

    def test_ambient_temperature_from_config(self, runner, tmp_path):
        """At rest the cell stays at the configured ambient temperature."""
        config = tmp_path / "warm.yaml"
        config.write_text(
            "cell:\n  ambient_temperature: 308.15\nrun:\n  current: 0.0\n  dt: 10.0\n  steps: 20\n  record_every: 10\n"
        )
        output = tmp_path / "warm.csv"
        result = runner.invoke(main, ["run", "-c", str(config), "-o", str(output), "-v", "0"])
        assert result.exit_code == 0, result.output
        data = pd.read_csv(output)
        assert data["temperature"].tolist() == pytest.approx([308.15, 308.15, 308.15])

    def test_run_exports_stress(self, runner, tmp_path):
        """Dai stress columns appear when a Dai model is selected."""
        output = tmp_path / "stress.csv"
        result = runner.invoke(
            main,
            ["run", "--current", "2", "--steps", "4", "--record-every", "2", "--crack", "2", "-o", str(output), "-v", "0"],
        )
        assert result.exit_code == 0, result.output
        data = pd.read_csv(output)
        for column in ("stress_hydrostatic_neg", "stress_tangential_pos", "stress_tangential_neg"):
            assert column in data.columns
        assert "stress_laresgoiti" not in data.columns
        assert data["stress_tangential_neg"].iloc[1:].notna().all()
        assert (data["stress_tangential_neg"].iloc[1:] < 0).all()

    def test_list_cells_includes_registered(self, runner, monkeypatch):
        monkeypatch.setattr(Chemistry, "_registry", dict(Chemistry._registry))
        monkeypatch.setattr(Chemistry, "_names", dict(Chemistry._names))
        Chemistry.register("bench_cell", kokam_nmc)
        result = runner.invoke(main, ["list-cells"])
        assert result.exit_code == 0, result.output
        assert "bench_cell" in result.output
