# test/test_central_config.py
import shutil
import tomllib
from importlib import resources
from pathlib import Path

import pytest

from mamdani.errors import ConfigError
from simulation.central_config import expand_phases, load_simulation_config, resolve_path
from simulation.scenario_runner import SimConfig
from vehicle.car_fuzzy import Measurements
from vehicle.lane_change import LaneChangeState, VehicleController

PROJECT_DIR = Path(__file__).resolve().parents[1]
SCENARIO_PATH = PROJECT_DIR / "simulation" / "scenario.toml"
CAR_FUZZY_PATH = PROJECT_DIR / "vehicle" / "car_fuzzy.toml"


def test_central_config_loads():
    controller, sim_cfg, ticks = load_simulation_config()

    assert isinstance(controller, VehicleController)
    assert isinstance(sim_cfg, SimConfig)
    assert sim_cfg.latency_budget_ms > 0
    assert controller.state is LaneChangeState.NORMAL
    assert len(ticks) == 33
    assert all(isinstance(m, Measurements) for m in ticks)


def test_explicit_path_matches_default():
    _, _, default_ticks = load_simulation_config()
    _, _, ticks = load_simulation_config(str(SCENARIO_PATH))
    assert ticks == default_ticks


def test_phases_carry_fields_over():
    ticks = expand_phases(
        {"deviation": 0.4},
        [
            {"name": "a", "ticks": 2, "distance": 10.0},
            {"name": "b", "ticks": 1, "deviation": 0.6},
            {"name": "c", "ticks": 0, "distance": 1.0},
            {"name": "d"},
        ],
    )
    assert len(ticks) == 4
    assert ticks[0] == ticks[1] == Measurements(deviation=0.4, distance=10.0)
    assert ticks[2] == Measurements(deviation=0.6, distance=10.0)
    # a zero-tick phase still updates the carried values
    assert ticks[3] == Measurements(deviation=0.6, distance=1.0)


@pytest.mark.parametrize(
    "defaults, phases",
    [
        ({"speed": 1.0}, []),
        ({}, [{"name": "x", "ticks": 1, "velocity": 2.0}]),
        ({}, [{"name": "x", "ticks": -1}]),
    ],
)
def test_bad_phases_rejected(defaults, phases):
    with pytest.raises(ConfigError):
        expand_phases(defaults, phases)


def test_resolve_path_against_base(tmp_path):
    assert resolve_path("car.toml", tmp_path) == tmp_path / "car.toml"
    assert resolve_path(SCENARIO_PATH, tmp_path) == SCENARIO_PATH


def test_toml_files_ship_as_package_data():
    assert resources.files("simulation").joinpath("scenario.toml").is_file()
    assert resources.files("vehicle").joinpath("car_fuzzy.toml").is_file()

    with open(PROJECT_DIR / "pyproject.toml", "rb") as f:
        package_data = tomllib.load(f)["tool"]["setuptools"]["package-data"]
    assert "*.toml" in package_data["simulation"]
    assert "*.toml" in package_data["vehicle"]


def test_default_scenario_loads_from_any_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    controller, _, ticks = load_simulation_config()
    assert controller.state is LaneChangeState.NORMAL
    assert len(ticks) == 33


def test_relative_scenario_path_uses_current_directory(tmp_path, monkeypatch):
    (tmp_path / "my_drive.toml").write_text(
        "[[phases]]\nname = \"only\"\nticks = 2\ndistance = 3.0\n", encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)
    _, _, ticks = load_simulation_config("my_drive.toml")
    assert ticks == [Measurements(distance=3.0)] * 2


def test_car_config_path_is_relative_to_scenario(tmp_path, monkeypatch):
    sub = tmp_path / "drives"
    sub.mkdir()
    shutil.copy(CAR_FUZZY_PATH, sub / "car.toml")
    (sub / "drive.toml").write_text(
        "[simulation]\nCAR_FUZZY_CONFIG_PATH = \"car.toml\"\n", encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)
    controller, _, ticks = load_simulation_config("drives/drive.toml")
    assert isinstance(controller, VehicleController)
    assert ticks == []


def test_missing_car_config_path_raises(tmp_path):
    path = tmp_path / "drive.toml"
    path.write_text("[simulation]\nCAR_FUZZY_CONFIG_PATH = \"nowhere.toml\"\n", encoding="utf-8")
    with pytest.raises(FileNotFoundError):
        load_simulation_config(str(path))


def test_scenario_from_tmp_file(tmp_path):
    path = tmp_path / "scenario.toml"
    path.write_text(
        """
[simulation]
INITIAL_STATE = "stay_left"
LATENCY_BUDGET_MS = 50.0
SPEED_FALLBACK = 0.2

[[phases]]
name = "only"
ticks = 4
side_deviation = -5.0
""",
        encoding="utf-8",
    )
    controller, sim_cfg, ticks = load_simulation_config(str(path))
    assert controller.state is LaneChangeState.STAY_LEFT
    assert controller.speed_fallback == 0.2
    assert sim_cfg.latency_budget_ms == 50.0
    assert sim_cfg.tick_hz == 0.0
    assert ticks == [Measurements(side_deviation=-5.0)] * 4


def test_unknown_initial_state_rejected(tmp_path):
    path = tmp_path / "scenario.toml"
    path.write_text('[simulation]\nINITIAL_STATE = "reverse"\n', encoding="utf-8")
    with pytest.raises(ConfigError):
        load_simulation_config(str(path))
