"""Command-line interface for the cell simulator."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
import pandas as pd
from pydantic import ValidationError

from cell_simulator.chemistry import Chemistry
from cell_simulator.core.cell_model import CellModel
from cell_simulator.core.diffusion import DiffusionModel
from cell_simulator.core.stress import StressResult
from cell_simulator.utils.config_loader import SimulationConfigModel, load_config
from cell_simulator.utils.logging_setup import configure_logging
from cell_simulator.utils.validators import CellError


def _build_cell(cfg: SimulationConfigModel, diffusion_path: Path | None = None) -> CellModel:
    """Create a cell from a configuration, exiting on fatal cell errors."""
    try:
        params = Chemistry.from_name(cfg.cell.chemistry)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--chemistry")
    if cfg.cell.nodes is not None:
        params.geometry.n_nodes = cfg.cell.nodes
    # The cell starts in equilibrium with its surroundings
    params.initial_temperature = cfg.cell.ambient_temperature

    geo = params.geometry
    if diffusion_path is not None:
        diffusion = DiffusionModel.load(diffusion_path)
    else:
        diffusion = DiffusionModel.spherical(geo.n_nodes, geo.radius_pos, geo.radius_neg)

    try:
        cell = CellModel(
            params,
            diffusion,
            selector=cfg.degradation.to_selector(),
            verbose=cfg.verbose,
        )
    except CellError as e:
        click.echo(f"Error: {type(e).__name__}: {e}", err=True)
        sys.exit(1)

    cell.thermal.set_ambient_temperature(cfg.cell.ambient_temperature)
    return cell


def _config_from_options(config: Path | None, **overrides) -> SimulationConfigModel:
    """Load the YAML config if given, then apply command-line overrides."""
    try:
        return _apply_overrides(config, overrides)
    except ValidationError as e:
        raise click.UsageError(f"Invalid configuration: {e}")


def _apply_overrides(config: Path | None, overrides: dict) -> SimulationConfigModel:
    """Overrides go through the models, so their field limits apply."""
    cfg = load_config(config) if config else SimulationConfigModel()
    for section, key, value in (
        ("cell", "chemistry", overrides.get("chemistry")),
        ("cell", "nodes", overrides.get("nodes")),
        ("run", "current", overrides.get("current")),
        ("run", "dt", overrides.get("dt")),
        ("run", "steps", overrides.get("steps")),
        ("run", "record_every", overrides.get("record_every")),
    ):
        if value is not None:
            setattr(getattr(cfg, section), key, value)

    selector_options = {
        key: overrides.get(key) for key in ("sei", "crack", "lam") if overrides.get(key)
    }
    if overrides.get("plating") is not None:
        selector_options["plating"] = overrides["plating"]
    if selector_options:
        merged = cfg.degradation.model_dump()
        merged.update({k: list(v) if isinstance(v, tuple) else v for k, v in selector_options.items()})
        cfg.degradation = type(cfg.degradation)(**merged)

    if overrides.get("verbose") is not None:
        cfg.verbose = overrides["verbose"]
    return cfg


@click.group()
@click.version_option(version="1.0.0", prog_name="cell-simulator")
def main():
    """
    Lithium-ion Cell Simulator

    Electrochemical, thermal and degradation model of a single cell.
    """
    pass


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to YAML configuration file",
)
@click.option("--chemistry", type=str, default=None, help="Registered cell name")
@click.option("--nodes", type=int, default=None, help="Radial nodes per particle")
@click.option(
    "--diffusion",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Precomputed discretisation (.npz)",
)
@click.option("--verbose", "-v", type=click.IntRange(0, 7), default=None, help="Verbosity (0-7)")
def info(config, chemistry, nodes, diffusion, verbose):
    """Build a cell and print its initial state as JSON."""
    cfg = _config_from_options(config, chemistry=chemistry, nodes=nodes, verbose=verbose)
    configure_logging(cfg.verbose)

    cell = _build_cell(cfg, diffusion)
    output = {
        "cell": cell.params.to_dict(),
        "degradation": cell.selector.to_dict(),
        "stress": {
            "needs_dai": cell.stress.needs_dai,
            "needs_laresgoiti": cell.stress.needs_laresgoiti,
        },
        "ocv": cell.ocv(),
        "state": cell.get_state_dict(),
    }
    click.echo(json.dumps(output, indent=2))


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to YAML configuration file",
)
@click.option("--chemistry", type=str, default=None, help="Registered cell name")
@click.option("--nodes", type=int, default=None, help="Radial nodes per particle")
@click.option("--current", type=float, default=None, help="Cell current in A (positive charges)")
@click.option("--dt", type=float, default=None, help="Time step in seconds")
@click.option("--steps", type=int, default=None, help="Number of time steps")
@click.option("--record-every", type=int, default=None, help="Record every N steps")
@click.option("--sei", type=int, multiple=True, help="SEI model id (repeatable)")
@click.option("--crack", type=int, multiple=True, help="Crack model id (repeatable)")
@click.option("--lam", type=int, multiple=True, help="LAM model id (repeatable)")
@click.option("--plating", type=int, default=None, help="Plating model id")
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="CSV output path",
)
@click.option("--verbose", "-v", type=click.IntRange(0, 7), default=None, help="Verbosity (0-7)")
def run(config, chemistry, nodes, current, dt, steps, record_every, sei, crack, lam, plating, output, verbose):
    """
    Run the cell at constant current.

    The run stops early when the voltage leaves the cell's limits.

    Examples:

    \b
    # One hour of 1 A charging with kinetic SEI growth and Dai cracking
    cell-simulator run --current 1 --steps 3600 --sei 1 --crack 2

    \b
    # Using configuration file
    cell-simulator run --config config/aging.yaml -o output/aging.csv
    """
    cfg = _config_from_options(
        config,
        chemistry=chemistry,
        nodes=nodes,
        current=current,
        dt=dt,
        steps=steps,
        record_every=record_every,
        sei=sei,
        crack=crack,
        lam=lam,
        plating=plating,
        verbose=verbose,
    )
    configure_logging(cfg.verbose)

    cell = _build_cell(cfg)
    r = cfg.run

    click.echo(f"Cell: {cell.params.name}")
    click.echo(f"Degradation: {cell.selector.to_dict()}")
    click.echo(f"Current: {r.current} A, dt: {r.dt} s, steps: {r.steps}")

    records = [_record(cell, cell.voltage(r.current))]
    stop_reason = "completed"
    for i in range(1, r.steps + 1):
        try:
            result = cell.step(r.current, r.dt)
        except CellError as e:
            click.echo(f"Error: {type(e).__name__}: {e}", err=True)
            stop_reason = type(e).__name__
            break
        at_limit = not cell.params.voltage_min <= result.voltage <= cell.params.voltage_max
        if at_limit or i % r.record_every == 0 or i == r.steps:
            records.append(_record(cell, result.voltage, result.stress))
        if at_limit:
            stop_reason = "voltage limit"
            break

    data = pd.DataFrame(records)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        data.to_csv(output, index=False)
        click.echo(f"Output written to: {output}")

    final = data.iloc[-1]
    click.echo(f"\nStopped: {stop_reason} at t={final['time']:.0f} s")
    click.echo(f"  Voltage: {final['voltage']:.4f} V")
    click.echo(f"  Temperature: {final['temperature']:.2f} K")
    click.echo(f"  SEI thickness: {final['sei_thickness']:.4e} m")
    click.echo(f"  Crack surface: {final['crack_surface']:.4e} m²")
    click.echo(f"  Lost capacity: {final['capacity_lost_ah'] * 1000:.4f} mAh")

    if stop_reason not in ("completed", "voltage limit"):
        sys.exit(1)


def _record(cell: CellModel, voltage: float, stress: StressResult | None = None) -> dict:
    """One output row; stress columns only for the theories that were computed."""
    state = cell.get_state_dict()
    row = {
        "time": state["time"],
        "voltage": voltage,
        "temperature": state["temperature"],
        "frac_pos": state["frac_pos"],
        "frac_neg": state["frac_neg"],
        "sei_thickness": state["sei_thickness"],
        "crack_surface": state["crack_surface"],
        "lost_lithium": state["lost_lithium"],
        "capacity_lost_ah": state["capacity_lost_ah"],
        "vol_frac_pos": state["vol_frac_pos"],
        "vol_frac_neg": state["vol_frac_neg"],
        "diff_neg": state["diff_neg"],
        "resistance": state["resistance"],
        "plated_thickness": state["plated_thickness"],
    }
    if stress is not None and stress.dai is not None:
        row.update(
            {
                "stress_hydrostatic_pos": stress.dai.hydrostatic_pos,
                "stress_hydrostatic_neg": stress.dai.hydrostatic_neg,
                "stress_tangential_pos": stress.dai.surface_tangential_pos,
                "stress_tangential_neg": stress.dai.surface_tangential_neg,
            }
        )
    if stress is not None and stress.laresgoiti is not None:
        row["stress_laresgoiti"] = stress.laresgoiti
    return row


@main.command()
def list_cells():
    """List available cell parameter sets."""
    click.echo("\nAvailable Cells:")
    click.echo("-" * 40)

    for name in Chemistry.list_available():
        params = Chemistry.from_name(name)
        click.echo(f"\n  {name}")
        click.echo(f"    Voltage: {params.voltage_min}-{params.voltage_max}V")
        click.echo(f"    Capacity: {params.nominal_capacity} Ah")
        click.echo(f"    Radial nodes: {params.geometry.n_nodes}")


@main.command()
@click.option("--chemistry", type=str, default="KokamNMC", help="Registered cell name")
@click.option("--nodes", type=int, default=None, help="Radial nodes per particle")
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default="./diffusion.npz",
    help="Output path for the discretisation",
)
def discretise(chemistry: str, nodes: int | None, output: Path):
    """Precompute the solid diffusion discretisation for a cell."""
    params = Chemistry.from_name(chemistry)
    geo = params.geometry
    model = DiffusionModel.spherical(nodes or geo.n_nodes, geo.radius_pos, geo.radius_neg)
    model.save(output)
    click.echo(f"Discretisation with {model.n_nodes} nodes written to: {output}")


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default="./config/example_config.yaml",
    help="Output path for example config",
)
def init_config(output: Path):
    """Generate example configuration file."""
    example_config = """# Cell Simulator Configuration
# ============================

simulation:
  name: "Kokam NMC aging run"
  verbose: 1              # 0 (silent) to 7 (every cell function)

cell:
  chemistry: "KokamNMC"
  nodes: 5                # Radial nodes per particle
  ambient_temperature: 298.15

degradation:
  sei: [1]                # 0 none, 1 kinetic, 2 kinetic+diffusion, 3 diffusion
  crack: [2]              # 0 none, 1 Laresgoiti, 2 Dai, 3 gradient, 4 Barai, 5 Ekstrom
  lam: [0]                # 0 none, 1 Dai, 2 Delacourt, 3 Kindermann, 4 Narayanrao
  plating: 0              # 0 none, 1 Yang
  sei_porosity: false
  crack_diffusion: false

run:
  current: 1.0            # A, positive charges the cell
  dt: 1.0                 # s
  steps: 3600
  record_every: 60
"""
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w") as f:
        f.write(example_config)

    click.echo(f"Example configuration written to: {output}")
    click.echo("\nEdit this file and run:")
    click.echo(f"  cell-simulator run --config {output}")


if __name__ == "__main__":
    main()
