# test/test_lane_change.py
import math

import pytest

from mamdani.config_loader import build_fuzzy_system
from mamdani.errors import ConfigError
from vehicle.car_fuzzy import CarFuzzy, Measurements
from vehicle.lane_change import (
    LaneChangeState,
    TRANSITIONS,
    VehicleController,
    finite_or,
)


@pytest.fixture
def controller(car_system):
    return VehicleController(CarFuzzy(car_system))


def test_finite_or():
    assert finite_or(0.3, 1.0) == 0.3
    assert finite_or(float("nan"), 1.0) == 1.0
    assert finite_or(float("inf"), 0.5) == 0.5
    assert finite_or(float("-inf"), 0.5) == 0.5


def test_transitions_form_a_cycle():
    state = LaneChangeState.NORMAL
    seen = []
    for _ in LaneChangeState:
        seen.append(state)
        state = TRANSITIONS[state][1]
    assert state is LaneChangeState.NORMAL
    assert set(seen) == set(LaneChangeState)


def test_cruise_stays_normal(controller):
    cmd = controller.step(Measurements())
    assert cmd.state is LaneChangeState.NORMAL
    assert cmd.next_state is LaneChangeState.NORMAL
    assert controller.state is LaneChangeState.NORMAL
    assert cmd.steering == pytest.approx(0.5)
    assert cmd.signal < 0.5


def test_full_overtake_cycle(controller):
    blocked = Measurements(car_distance=8.0, car_velocity=1.5)
    cmd = controller.step(blocked)
    assert cmd.state is LaneChangeState.NORMAL
    assert cmd.next_state is LaneChangeState.GO_LEFT

    # Still drifting into the left lane.
    cmd = controller.step(Measurements(left_deviation=0.8))
    assert cmd.state is LaneChangeState.GO_LEFT
    assert cmd.next_state is LaneChangeState.GO_LEFT
    assert cmd.steering < 0.5

    cmd = controller.step(Measurements(left_deviation=0.5, side_deviation=5.0))
    assert cmd.next_state is LaneChangeState.STAY_LEFT

    cmd = controller.step(Measurements(left_deviation=0.5, side_deviation=5.0))
    assert cmd.state is LaneChangeState.STAY_LEFT
    assert cmd.next_state is LaneChangeState.STAY_LEFT

    cmd = controller.step(Measurements(side_deviation=-5.0, deviation=0.1))
    assert cmd.next_state is LaneChangeState.BACK_RIGHT

    cmd = controller.step(Measurements(side_deviation=-5.0, deviation=0.1))
    assert cmd.state is LaneChangeState.BACK_RIGHT
    assert cmd.next_state is LaneChangeState.BACK_RIGHT
    assert cmd.steering > 0.5

    cmd = controller.step(Measurements(deviation=0.5))
    assert cmd.next_state is LaneChangeState.NORMAL
    assert controller.state is LaneChangeState.NORMAL


def test_oncoming_traffic_aborts_overtake(controller):
    controller.state = LaneChangeState.STAY_LEFT
    cmd = controller.step(Measurements(left_deviation=0.5, car_opposite_distance=20.0))
    assert cmd.next_state is LaneChangeState.BACK_RIGHT


def test_non_finite_outputs_use_fallbacks(car_system, monkeypatch):
    car = CarFuzzy(car_system)
    controller = VehicleController(car, speed_fallback=0.1, steering_fallback=0.4)
    monkeypatch.setattr(car, "speed", lambda: float("nan"))
    monkeypatch.setattr(car, "steering", lambda: float("inf"))
    cmd = controller.step(Measurements())
    assert cmd.speed == 0.1
    assert cmd.steering == 0.4


def test_non_finite_signal_keeps_state(car_system, monkeypatch):
    car = CarFuzzy(car_system)
    controller = VehicleController(car)
    monkeypatch.setattr(car, "signal", lambda name: float("nan"))
    cmd = controller.step(Measurements(car_distance=8.0, car_velocity=1.5))
    assert math.isnan(cmd.signal)
    assert cmd.next_state is LaneChangeState.NORMAL


def test_rule_sets_required_for_every_state():
    cfg = {
        "inputs": {name: {"range": [0, 1]} for name in Measurements().as_inputs()},
        "outputs": {
            name: {"range": [0, 1]}
            for name in (
                "steering", "speed", "go_left_lane", "stay_left_lane",
                "back_to_right_lane", "go_normal",
            )
        },
        "rule_sets": {"normal": []},
    }
    with pytest.raises(ConfigError):
        VehicleController(CarFuzzy(build_fuzzy_system(cfg)))
