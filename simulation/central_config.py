# simulation/central_config.py
"""
==================
Unified configuration loader for the scripted drive demo.

This module reads a scenario file (by default `scenario.toml`, shipped in
this package), builds the car's fuzzy system it points at, and expands the scripted phases into one
Measurements record per tick. The runner itself never touches a file.

Responsibilities
----------------
• Load runner parameters from the [simulation] table:
      CAR_FUZZY_CONFIG_PATH, INITIAL_STATE, TICK_HZ,
      LATENCY_BUDGET_MS, SPEED_FALLBACK, STEERING_FALLBACK

• Build the vehicle controller:
      FuzzySystem -> CarFuzzy -> VehicleController

• Expand [[phases]] into ticks. A phase repeats its measurements for
  `ticks` ticks; fields it does not set carry over from the previous
  phase, and the first phase starts from [defaults].

Returned Values
---------------
load_simulation_config() returns a 3-tuple:

    controller  : VehicleController
    sim_cfg     : SimConfig
    ticks       : List[Measurements]

Typical Usage
-------------
    from simulation.central_config import load_simulation_config
    from simulation.scenario_runner import ScenarioRunner

    controller, sim_cfg, ticks = load_simulation_config()

    runner = ScenarioRunner(controller, sim_cfg)
    runner.reset(controller.state)
    runner.run(ticks)

A scenario path given by the caller is taken relative to the current
directory. CAR_FUZZY_CONFIG_PATH inside a scenario file is taken relative to
that file; when it is absent the car rule base packaged with `vehicle` is used.
"""
import dataclasses
import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from mamdani.errors import ConfigError
from simulation.scenario_runner import SimConfig
from vehicle.car_fuzzy import CarFuzzy, Measurements
from vehicle.lane_change import LaneChangeState, VehicleController

config_log = logging.getLogger("config")

SCENARIO_RESOURCE = resources.files("simulation").joinpath("scenario.toml")

_MEASUREMENT_FIELDS = {f.name for f in dataclasses.fields(Measurements)}


# ------------------------------------------------------------
# Load TOML
# ------------------------------------------------------------
def _load_toml(path: Path) -> dict:
    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_path(path, base: Path) -> Path:
    """Returns `path` as is when absolute, otherwise relative to `base`."""
    p = Path(path)
    return p if p.is_absolute() else base / p


# ------------------------------------------------------------
# Phase expansion
# ------------------------------------------------------------
def _measurement_values(table: dict, where: str) -> Dict[str, float]:
    values = {}
    for key, value in table.items():
        if key in ("name", "ticks"):
            continue
        if key not in _MEASUREMENT_FIELDS:
            raise ConfigError(f"{where}: unknown measurement '{key}'")
        values[key] = float(value)
    return values


def expand_phases(defaults: dict, phases: List[dict]) -> List[Measurements]:
    """
    Expands scripted phases into per-tick measurements.

    Args:
        defaults (dict): Starting values for the first phase.
        phases (List[dict]): Phase tables with `ticks` and any measurement fields.

    Returns:
        List[Measurements]: One record per tick, in order.

    Raises:
        ConfigError: On an unknown field or a negative tick count.
    """
    current = dataclasses.asdict(Measurements())
    current.update(_measurement_values(defaults, "defaults"))

    ticks: List[Measurements] = []
    for i, phase in enumerate(phases):
        name = phase.get("name", f"phase {i}")
        count = int(phase.get("ticks", 1))
        if count < 0:
            raise ConfigError(f"Phase '{name}': ticks must be >= 0, got {count}")
        current.update(_measurement_values(phase, f"Phase '{name}'"))
        config_log.debug("Phase '%s': %d ticks %s", name, count, current)
        ticks.extend(Measurements(**current) for _ in range(count))
    return ticks


# ------------------------------------------------------------
# Main loader
# ------------------------------------------------------------
def load_simulation_config(
    scenario_path: Optional[str] = None,
) -> Tuple[VehicleController, SimConfig, List[Measurements]]:
    """
    Builds and returns the full demo configuration:

        controller  : VehicleController
        sim_cfg     : SimConfig
        ticks       : List[Measurements]

    With no `scenario_path` the packaged scenario is loaded.
    """
    if scenario_path is None:
        with resources.as_file(SCENARIO_RESOURCE) as packaged:
            return _build_from_file(Path(packaged))
    return _build_from_file(Path(scenario_path))


def _build_from_file(path: Path) -> Tuple[VehicleController, SimConfig, List[Measurements]]:
    cfg = _load_toml(path)
    config_log.info("Loaded scenario from %s", path)

    # ------------------------------------------------------------
    # Runner parameters
    # ------------------------------------------------------------
    sim = cfg.get("simulation", {})
    sim_cfg = SimConfig(
        tick_hz=float(sim.get("TICK_HZ", 0.0)),
        latency_budget_ms=float(sim.get("LATENCY_BUDGET_MS", 10.0)),
    )

    # ------------------------------------------------------------
    # Controller
    # ------------------------------------------------------------
    state_name = str(sim.get("INITIAL_STATE", "normal")).lower()
    try:
        initial_state = LaneChangeState(state_name)
    except ValueError:
        raise ConfigError(f"Unknown INITIAL_STATE: {state_name}") from None

    car_path = sim.get("CAR_FUZZY_CONFIG_PATH")
    if car_path is None:
        config_log.info("Loading packaged car fuzzy config")
        car = CarFuzzy.from_config()
    else:
        car_path = resolve_path(car_path, path.parent)
        config_log.info("Loading car fuzzy config from %s", car_path)
        car = CarFuzzy.from_config(str(car_path))

    controller = VehicleController(
        car,
        initial_state=initial_state,
        speed_fallback=float(sim.get("SPEED_FALLBACK", 0.0)),
        steering_fallback=float(sim.get("STEERING_FALLBACK", 0.5)),
    )

    # ------------------------------------------------------------
    # Scripted ticks
    # ------------------------------------------------------------
    ticks = expand_phases(cfg.get("defaults", {}), cfg.get("phases", []))
    config_log.info("Scenario expands to %d ticks", len(ticks))

    return controller, sim_cfg, ticks
