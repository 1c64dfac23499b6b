# plot_scenario_results.py
"""
plot_scenario_results.py
========================

Plotting utilities for the logs a ScenarioRunner collects.

`plot_scenario_results()` takes a finished runner and draws:

    • Steering bias vs tick
    • Speed vs tick
    • Transition signal vs tick
    • Lane-change state as a step trace on a right-hand axis

Typical usage::

    runner.run(ticks)
    plot_scenario_results(runner, save_path="plots/scenario.png", show=True)

This module contains no fuzzy logic or configuration code.
"""
from __future__ import annotations

import os
from typing import Dict, Optional

import matplotlib.pyplot as plt
import numpy as np

from simulation.scenario_runner import ScenarioRunner
from vehicle.lane_change import LaneChangeState

STATE_LEVELS = {state: i for i, state in enumerate(LaneChangeState)}


# ============================================================
# SUMMARY
# ============================================================

def summarize_run(runner: ScenarioRunner) -> Dict[str, float]:
    """Tick counts per state plus mean speed and steering."""
    summary: Dict[str, float] = {state.value: 0 for state in LaneChangeState}
    for state in runner.log_state:
        summary[state.value] += 1

    speed = np.array(runner.log_speed, dtype=float)
    steering = np.array(runner.log_steering, dtype=float)
    summary["mean_speed"] = float(np.mean(speed)) if speed.size else 0.0
    summary["mean_steering"] = float(np.mean(steering)) if steering.size else 0.0
    return summary


# ============================================================
# MAIN PLOTTING FUNCTION
# ============================================================

def plot_scenario_results(
    runner: ScenarioRunner,
    title: str = "Lane-Change Scenario",
    save_path: Optional[str] = None,
    show: bool = True,
):
    """
    Draws the runner's logs on one figure.

    Args:
        runner (ScenarioRunner): A runner that has executed at least one tick.
        title (str): Figure title.
        save_path (Optional[str]): PNG path to save to, directories are created.
        show (bool): Whether to open an interactive window.

    Returns:
        matplotlib.figure.Figure: The figure.
    """
    t = np.array(runner.log_tick)
    steering = np.array(runner.log_steering)
    speed = np.array(runner.log_speed)
    signal = np.array(runner.log_signal)
    state = np.array([STATE_LEVELS[s] for s in runner.log_state])

    fig, ax = plt.subplots(figsize=(11, 6))

    # Left axis signals
    ax.plot(t, steering, label="steering")
    ax.plot(t, speed, label="speed")
    ax.plot(t, signal, "k:", alpha=0.6, label="transition signal")
    ax.axhline(0.5, color="gray", linestyle="--", linewidth=0.8)

    ax.set_xlabel("Tick")
    ax.set_ylabel("Steering / Speed / Signal")
    ax.set_ylim(-0.05, 1.05)
    ax.set_title(title)

    # Right axis for the lane-change state
    ax_state = ax.twinx()
    ax_state.step(t, state, where="post", color="purple", alpha=0.5, label="state")
    ax_state.set_yticks(list(STATE_LEVELS.values()))
    ax_state.set_yticklabels([s.name for s in STATE_LEVELS])
    ax_state.tick_params(axis="y", labelcolor="purple")

    # Build combined legend
    lines = ax.get_lines() + ax_state.get_lines()
    labels = [ln.get_label() for ln in lines if not ln.get_label().startswith("_")]
    lines = [ln for ln in lines if not ln.get_label().startswith("_")]
    ax.legend(lines, labels, loc="upper right")

    fig.tight_layout()

    if save_path:
        directory = os.path.dirname(save_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(save_path)

    if show:
        plt.show()

    return fig
