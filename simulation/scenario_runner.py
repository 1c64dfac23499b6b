# scenario_runner.py
"""
scenario_runner.py
==================

Tick loop that drives a VehicleController with scripted measurements.

Vehicle kinematics and road geometry live outside this project, so the
runner does not integrate any motion: it replays one Measurements record per
tick, runs the controller and records what came out.

Logging:
    The runner records tick index, lane-change state, steering, speed and
    the state's transition signal for every tick, plus the measurements
    that produced them.

Typical usage::

    controller, sim_cfg, ticks = load_simulation_config()

    runner = ScenarioRunner(controller, sim_cfg)
    runner.reset()
    runner.run(ticks)

    # logs available in runner.log_speed, runner.log_state, etc.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from utils.logger import set_loop_index
from utils.profiler import CodeProfiler
from vehicle.car_fuzzy import Measurements
from vehicle.lane_change import LaneChangeState, VehicleCommand, VehicleController

simulation_log = logging.getLogger("simulation")


# ------------------------------------------------------------
# Dataclasses
# ------------------------------------------------------------

@dataclass
class SimConfig:
    tick_hz: float = 0.0
    latency_budget_ms: float = 10.0


# ------------------------------------------------------------
# Runner
# ------------------------------------------------------------

@dataclass
class ScenarioRunner:
    controller: VehicleController
    cfg: SimConfig = field(default_factory=SimConfig)

    tick: int = 0

    log_tick: List[int] = field(default_factory=list)
    log_state: List[LaneChangeState] = field(default_factory=list)
    log_steering: List[float] = field(default_factory=list)
    log_speed: List[float] = field(default_factory=list)
    log_signal: List[float] = field(default_factory=list)
    log_measurements: List[Measurements] = field(default_factory=list)

    # ------------------------------------------------------------
    def reset(self, state: LaneChangeState = LaneChangeState.NORMAL):
        self.tick = 0
        self.controller.state = state

        self.log_tick.clear()
        self.log_state.clear()
        self.log_steering.clear()
        self.log_speed.clear()
        self.log_signal.clear()
        self.log_measurements.clear()

    # ------------------------------------------------------------
    def step(self, measurements: Measurements) -> VehicleCommand:
        set_loop_index(self.tick)
        with CodeProfiler("Controller tick", budget_ms=self.cfg.latency_budget_ms):
            cmd = self.controller.step(measurements)

        self.log_tick.append(self.tick)
        self.log_state.append(cmd.state)
        self.log_steering.append(cmd.steering)
        self.log_speed.append(cmd.speed)
        self.log_signal.append(cmd.signal)
        self.log_measurements.append(measurements)

        simulation_log.info(
            "tick=%d state=%s steering=%.3f speed=%.3f",
            self.tick,
            cmd.state.name,
            cmd.steering,
            cmd.speed,
        )
        self.tick += 1
        return cmd

    # ------------------------------------------------------------
    def run(
        self,
        ticks: Iterable[Measurements],
        stop_event: Optional[threading.Event] = None,
    ) -> int:
        """
        Replays every tick, pacing to `cfg.tick_hz` when it is positive.

        Args:
            ticks (Iterable[Measurements]): One record per tick.
            stop_event (Optional[threading.Event]): Stops the run early when set.

        Returns:
            int: Number of ticks executed.
        """
        period = 1.0 / self.cfg.tick_hz if self.cfg.tick_hz > 0 else 0.0
        executed = 0
        for measurements in ticks:
            if stop_event is not None and stop_event.is_set():
                simulation_log.info("Stop requested after %d ticks.", executed)
                break
            start = time.perf_counter()
            self.step(measurements)
            executed += 1

            # Sleep only the remainder of the tick period
            sleep_time = period - (time.perf_counter() - start)
            if sleep_time > 0:
                time.sleep(sleep_time)
        return executed
