"""
Fuzzy rule base for one simulated car.

CarFuzzy wraps a FuzzySystem built from `car_fuzzy.toml` and checks that it
declares every variable the vehicle controller reads or writes. The rule base
ships next to this module as package data; the membership shapes and rules
themselves are configuration data.
"""

import dataclasses
import logging
from dataclasses import dataclass
from importlib import resources
from typing import Dict, Optional

from mamdani.config_loader import FuzzySystem, load_fuzzy_system
from mamdani.errors import ConfigError

vehicle_log = logging.getLogger("vehicle")

STEERING = "steering"
SPEED = "speed"
SIGNAL_OUTPUTS = ("go_left_lane", "stay_left_lane", "back_to_right_lane", "go_normal")

CAR_FUZZY_RESOURCE = resources.files("vehicle").joinpath("car_fuzzy.toml")


def load_car_system(path: Optional[str] = None) -> FuzzySystem:
    """Loads the car rule base from `path`, or the packaged one when `path` is None."""
    if path is not None:
        return load_fuzzy_system(str(path))
    with resources.as_file(CAR_FUZZY_RESOURCE) as packaged:
        return load_fuzzy_system(str(packaged))


@dataclass
class Measurements:
    """
    Sensor-like inputs for one car and one tick.

    Attributes:
        deviation (float): Lateral position in the right lane, 0 = left edge, 1 = right edge.
        distance (float): Distance to the next traffic light stop line.
        light_status (float): Position in the traffic light cycle, in seconds.
        car_distance (float): Distance to the car ahead in the same lane.
        car_velocity (float): Velocity of the car ahead.
        car_opposite_distance (float): Distance to the nearest oncoming car.
        left_deviation (float): Lateral position in the left lane.
        side_deviation (float): Longitudinal offset of the overtaken car.
    """

    deviation: float = 0.5
    distance: float = 50.0
    light_status: float = 0.0
    car_distance: float = 200.0
    car_velocity: float = 30.0
    car_opposite_distance: float = 400.0
    left_deviation: float = 0.5
    side_deviation: float = 100.0

    def as_inputs(self) -> Dict[str, float]:
        return dataclasses.asdict(self)


class CarFuzzy:
    """
    The car's fuzzy system plus the names the controller relies on.

    Attributes:
        system (FuzzySystem): The configured engine and its name lookups.
    """

    def __init__(self, system: FuzzySystem):
        missing_inputs = [
            f.name for f in dataclasses.fields(Measurements) if f.name not in system.inputs
        ]
        missing_outputs = [
            name for name in (STEERING, SPEED, *SIGNAL_OUTPUTS) if name not in system.outputs
        ]
        if missing_inputs or missing_outputs:
            raise ConfigError(
                f"Car fuzzy system is missing inputs {missing_inputs} and outputs {missing_outputs}"
            )
        self.system = system
        vehicle_log.info(
            "Car fuzzy system ready with rule sets %s.", list(system.rule_sets)
        )

    @classmethod
    def from_config(cls, path: Optional[str] = None) -> "CarFuzzy":
        return cls(load_car_system(path))

    def apply(self, measurements: Measurements) -> None:
        """Writes one tick's measurements into the engine inputs."""
        self.system.set_inputs(measurements.as_inputs())

    def evaluate(self, rule_set: str) -> None:
        self.system.evaluate(rule_set)

    def steering(self) -> float:
        return self.system.get_output(STEERING)

    def speed(self) -> float:
        return self.system.get_output(SPEED)

    def signal(self, name: str) -> float:
        return self.system.get_output(name)
