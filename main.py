"""
Main entry point for the lane-change demo.

This script loads the scripted drive (the packaged scenario.toml unless
--scenario is given), builds the car's fuzzy system and vehicle
controller, and replays every tick through the controller, optionally
plotting the result.
"""

import argparse
import logging
import os
import signal
import threading

from utils.logger import setup_logging
from simulation.central_config import load_simulation_config
from simulation.scenario_runner import ScenarioRunner

# -----------------------------------------------------------------------------
# Cross-platform shutdown handling:
# - SIGINT works on Windows and Linux (Ctrl-C).
# - SIGTERM is installed only on non-Windows.
# - SIGBREAK is tried on Windows consoles but safely ignored elsewhere.
# -----------------------------------------------------------------------------
shutdown = threading.Event()


def _on_signal(_sig, _frm):
    shutdown.set()


def _install_signal_handlers():
    signal.signal(signal.SIGINT, _on_signal)  # Ctrl-C everywhere
    try:
        signal.signal(signal.SIGBREAK, _on_signal)  # Windows console Break
    except (AttributeError, OSError):
        pass
    if os.name != "nt":
        signal.signal(signal.SIGTERM, _on_signal)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run the scripted lane-change demo.")
    parser.add_argument(
        "--scenario", default=None, help="Scenario TOML file (default: packaged scripted drive)."
    )
    parser.add_argument("--plot", action="store_true", help="Show the result plot.")
    parser.add_argument("--save-plot", default=None, help="Save the result plot as PNG.")
    parser.add_argument("--log-dir", default="logs", help="Directory for log files.")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    setup_logging(log_dir=args.log_dir)
    main_log = logging.getLogger("main")
    main_log.info("Application starting...")
    _install_signal_handlers()

    controller, sim_cfg, ticks = load_simulation_config(args.scenario)
    runner = ScenarioRunner(controller, sim_cfg)
    runner.reset(controller.state)

    main_log.info("Running %d ticks...", len(ticks))
    try:
        executed = runner.run(ticks, stop_event=shutdown)
    except KeyboardInterrupt:
        main_log.info("Keyboard interrupt received. Shutting down.")
        executed = runner.tick

    main_log.info(
        "Ran %d ticks, final state %s, speed %.3f, steering %.3f.",
        executed,
        controller.state.name,
        runner.log_speed[-1] if runner.log_speed else 0.0,
        runner.log_steering[-1] if runner.log_steering else 0.0,
    )

    if executed and (args.plot or args.save_plot):
        from simulation.plot_scenario_results import plot_scenario_results

        plot_scenario_results(runner, save_path=args.save_plot, show=args.plot)

    main_log.info("Application finished.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
