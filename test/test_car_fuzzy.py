# test/test_car_fuzzy.py
import pytest

from mamdani.config_loader import build_fuzzy_system
from mamdani.errors import ConfigError
from vehicle.car_fuzzy import CarFuzzy, Measurements, load_car_system


@pytest.fixture
def car(car_system):
    return CarFuzzy(car_system)


def _run(car, rule_set, **values):
    car.apply(Measurements(**values))
    car.evaluate(rule_set)


def test_cruise_goes_straight_at_medium_speed(car):
    _run(car, "normal", deviation=0.5, distance=50.0, light_status=0.5)
    assert car.steering() == pytest.approx(0.5)
    # centroid of right shoulder (0.7, 0.9) over [0, 1]
    assert car.speed() == pytest.approx(0.8916667, abs=1e-6)
    assert car.signal("go_left_lane") < 0.5


@pytest.mark.parametrize("deviation, turns_right", [(0.3, True), (0.7, False)])
def test_steers_back_to_lane_centre(car, deviation, turns_right):
    _run(car, "simple", deviation=deviation)
    assert (car.steering() > 0.5) is turns_right


def test_red_light_at_medium_distance_slows(car):
    _run(car, "normal", distance=15.0, light_status=4.5)
    # centroid of triangle (0.3, 0.6, 0.8)
    assert car.speed() == pytest.approx((0.3 + 0.6 + 0.8) / 3.0)


def test_red_light_near_stops(car):
    _run(car, "normal", distance=1.0, light_status=4.5)
    assert car.speed() == pytest.approx(0.05 / 3.0)


def test_slow_car_ahead_requests_left_lane(car):
    _run(car, "normal", car_distance=8.0, car_velocity=1.5)
    assert car.signal("go_left_lane") == pytest.approx(0.5 + 0.5 * 2.0 / 3.0)


def test_oncoming_car_blocks_overtake(car):
    _run(car, "normal", car_distance=8.0, car_velocity=1.5, car_opposite_distance=20.0)
    assert car.signal("go_left_lane") < 0.5


def test_signals_not_in_rule_set_carry_over(car):
    _run(car, "normal", car_distance=8.0, car_velocity=1.5)
    go_left = car.signal("go_left_lane")
    _run(car, "go_left", left_deviation=0.5)
    assert car.signal("go_left_lane") == go_left
    assert car.signal("stay_left_lane") > 0.5


def test_missing_variables_rejected():
    system = build_fuzzy_system(
        {
            "inputs": {"deviation": {"range": [0, 1]}},
            "outputs": {"steering": {"range": [0, 1]}},
        }
    )
    with pytest.raises(ConfigError):
        CarFuzzy(system)


def test_measurements_as_inputs():
    values = Measurements(deviation=0.2).as_inputs()
    assert values["deviation"] == 0.2
    assert set(values) == {
        "deviation", "distance", "light_status", "car_distance",
        "car_velocity", "car_opposite_distance", "left_deviation", "side_deviation",
    }


def test_packaged_rule_base_matches_file(car_system, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    packaged = load_car_system()
    assert set(packaged.inputs) == set(car_system.inputs)
    assert set(packaged.rule_sets) == set(car_system.rule_sets)
    assert isinstance(CarFuzzy.from_config(), CarFuzzy)
