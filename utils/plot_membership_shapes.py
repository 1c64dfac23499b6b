import os

import matplotlib.pyplot as plt
import numpy as np

from mamdani.config_loader import FuzzySystem
from mamdani.membership import MembershipShape
from vehicle.car_fuzzy import load_car_system


def knee_points(fn, lo: float, hi: float):
    """
    Returns the (x, degree) pairs where a shape changes slope inside [lo, hi].

    Plain callables carry no breakpoints, so they yield an empty list.
    """
    if not isinstance(fn, MembershipShape):
        return []
    return [(x, fn(x)) for x in fn.breakpoints() if lo <= x <= hi]


def plot_variable_sets(
    system: FuzzySystem,
    variable: str,
    samples: int = 201,
    show_envelope: bool = False,
    save=False,
    output_dir="plots",
    show=True,
):
    """
    Plot every membership shape configured for one input or output variable,
    with a marker at each knee of the shape.

    Args:
        system (FuzzySystem): The configured fuzzy system.
        variable (str): Input or output variable name.
        samples (int): Number of x positions across the variable's range.
        show_envelope (bool): For outputs, also draw the aggregated envelope
            left by the most recent evaluation.
        save (bool): Whether to save the plot as a PNG
        output_dir (str): Directory to save the plot

    Returns:
        matplotlib.figure.Figure: The figure.
    """
    engine = system.engine
    if variable in system.inputs:
        lo, hi = engine.input_range(system.inputs[variable])
        sets = system.input_sets[variable]
        function = engine.input_set_function
    elif variable in system.outputs:
        lo, hi = engine.output_range(system.outputs[variable])
        sets = system.output_sets[variable]
        function = engine.output_set_function
    else:
        raise KeyError(f"No variable named '{variable}'")

    xs = np.linspace(lo, hi, samples)

    fig, ax = plt.subplots(figsize=(8, 4))
    for label, set_id in sets.items():
        fn = function(set_id)
        y = np.array([fn(x) for x in xs.tolist()])
        (line,) = ax.plot(xs, y, label=label)
        ax.fill_between(xs, y, alpha=0.1)
        knees = knee_points(fn, lo, hi)
        if knees:
            kx, ky = zip(*knees)
            ax.scatter(kx, ky, color=line.get_color(), s=16, zorder=3)

    if show_envelope and variable in system.outputs:
        output_id = system.outputs[variable]
        env = np.array([engine.envelope(output_id, x) for x in xs.tolist()])
        ax.plot(xs, env, "k--", linewidth=2.0, label="envelope")
        ax.axvline(engine.get_output(output_id), color="red", label="crisp value")

    ax.set_title(f"Membership Functions – {variable}")
    ax.set_xlabel(variable)
    ax.set_ylabel("Membership Degree")
    ax.set_ylim(-0.05, 1.05)
    ax.grid(True)
    ax.legend()
    fig.tight_layout()

    if save:
        os.makedirs(output_dir, exist_ok=True)
        filename = os.path.join(output_dir, f"{variable}_membership_functions.png")
        fig.savefig(filename)
        print(f"Saved plot to: {filename}")

    if show:
        plt.show()
    return fig


def main():
    import argparse

    parser = argparse.ArgumentParser(
        description="Plot fuzzy membership function shapes."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Fuzzy system TOML file (default: packaged car rule base).",
    )
    parser.add_argument(
        "variables",
        nargs="*",
        help="Variables to plot (default: all inputs and outputs).",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Save plots as PNG files in the 'plots/' directory.",
    )
    args = parser.parse_args()
    if args.config is not None and not os.path.exists(args.config):
        print(f"Error: Config file not found at: {args.config}")
        return

    system = load_car_system(args.config)
    variables = args.variables or [*system.inputs, *system.outputs]
    for variable in variables:
        plot_variable_sets(system, variable, save=args.save)


if __name__ == "__main__":
    main()
