"""
Lane-change state machine driving the car's fuzzy system.

The engine itself holds no state machine. Each state selects its own rule
set; the rule sets share most steering and speed rules and differ in the one
boolean-coded signal that moves the car to the next state. A signal counts as
set once its crisp value exceeds 0.5.

Outputs that the active rule set does not touch keep their previous value in
the engine, so only the outputs the current state's rule set drives are read.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from mamdani.errors import ConfigError
from vehicle.car_fuzzy import CarFuzzy, Measurements

vehicle_log = logging.getLogger("vehicle")

SIGNAL_THRESHOLD = 0.5


class LaneChangeState(Enum):
    NORMAL = "normal"
    GO_LEFT = "go_left"
    STAY_LEFT = "stay_left"
    BACK_RIGHT = "back_right"


# state -> (signal output, state entered when the signal is set)
TRANSITIONS: Dict[LaneChangeState, Tuple[str, LaneChangeState]] = {
    LaneChangeState.NORMAL: ("go_left_lane", LaneChangeState.GO_LEFT),
    LaneChangeState.GO_LEFT: ("stay_left_lane", LaneChangeState.STAY_LEFT),
    LaneChangeState.STAY_LEFT: ("back_to_right_lane", LaneChangeState.BACK_RIGHT),
    LaneChangeState.BACK_RIGHT: ("go_normal", LaneChangeState.NORMAL),
}


def finite_or(value: float, fallback: float) -> float:
    """Returns `value` unless it is NaN or infinite, in which case `fallback`."""
    return value if math.isfinite(value) else fallback


@dataclass
class VehicleCommand:
    """
    Result of one controller tick.

    Attributes:
        steering (float): Steering bias in [0, 1], 0.5 is straight ahead.
        speed (float): Fraction of top speed in [0, 1].
        state (LaneChangeState): State whose rule set produced this command.
        next_state (LaneChangeState): State for the next tick.
        signal (float): Crisp value of the state's transition signal.
    """

    steering: float
    speed: float
    state: LaneChangeState
    next_state: LaneChangeState
    signal: float


class VehicleController:
    """
    Runs the car's fuzzy system once per tick through the lane-change states.

    Attributes:
        car (CarFuzzy): The car's fuzzy system.
        state (LaneChangeState): Current state.
        speed_fallback (float): Speed used when the speed output is not finite.
        steering_fallback (float): Steering used when the steering output is not finite.
    """

    def __init__(
        self,
        car: CarFuzzy,
        initial_state: LaneChangeState = LaneChangeState.NORMAL,
        speed_fallback: float = 0.0,
        steering_fallback: float = 0.5,
    ):
        missing = [s.value for s in LaneChangeState if s.value not in car.system.rule_sets]
        if missing:
            raise ConfigError(f"Car fuzzy system has no rule sets for states {missing}")
        self.car = car
        self.state = initial_state
        self.speed_fallback = speed_fallback
        self.steering_fallback = steering_fallback
        vehicle_log.info("Vehicle controller starting in state %s.", self.state.name)

    def step(self, measurements: Measurements) -> VehicleCommand:
        """
        Executes one tick: write inputs, evaluate the state's rule set, read outputs.

        Args:
            measurements (Measurements): This tick's sensor values.

        Returns:
            VehicleCommand: Steering and speed to apply, and the state transition.
        """
        state = self.state
        self.car.apply(measurements)
        self.car.evaluate(state.value)

        raw_speed = self.car.speed()
        raw_steering = self.car.steering()
        speed = finite_or(raw_speed, self.speed_fallback)
        steering = finite_or(raw_steering, self.steering_fallback)
        if speed != raw_speed or steering != raw_steering:
            vehicle_log.warning(
                "Non-finite output in state %s (speed=%s, steering=%s); using fallbacks.",
                state.name,
                raw_speed,
                raw_steering,
            )

        signal_name, target = TRANSITIONS[state]
        signal = self.car.signal(signal_name)
        next_state = target if finite_or(signal, 0.0) > SIGNAL_THRESHOLD else state
        if next_state is not state:
            vehicle_log.info(
                "Lane change %s -> %s (%s=%.3f)", state.name, next_state.name, signal_name, signal
            )

        vehicle_log.debug(
            "state=%s steering=%.3f speed=%.3f %s=%.3f",
            state.name,
            steering,
            speed,
            signal_name,
            signal,
        )
        self.state = next_state
        return VehicleCommand(steering, speed, state, next_state, signal)
