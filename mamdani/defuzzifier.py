"""
Computes crisp output values from the aggregated fuzzy output envelope.

This module implements centroid (center of area) defuzzification for a
Mamdani-type system. The envelope of an output is the max over its touched
output sets of min(firing strength, membership). It is sampled on a uniform
grid over the output's [min, max] and integrated exactly for the linear
interpolant between samples:

    centroid = (∫ x·y(x) dx) / (∫ y(x) dx)

A zero-area envelope gives a zero denominator. The result is then NaN or
±inf and is returned as is; callers check finiteness and substitute their own
fallback.
"""

import logging
import math
from typing import List

import numpy as np

from mamdani.model import Output, OutputSet

defuzzifier_log = logging.getLogger("defuzzifier")

INTEGRAL_STEPS = 40


def linear_moment(x1, x2, y1, y2):
    """
    Integral of x·y(x) over [x1, x2] where y is the line through (x1, y1), (x2, y2).

    Works element-wise on numpy arrays as well as on scalars.
    """
    dy = y2 - y1
    result = (y1 * (x2 * x2 - x1 * x1) - x1 * (x2 + x1) * dy) / 2.0
    result += (x2 * x2 + x2 * x1 + x1 * x1) * dy / 3.0
    return result


def trapezoid_area(x1, x2, y1, y2):
    """Integral of the same linear interpolant, i.e. the trapezoid rule."""
    return (x2 - x1) * (y1 + y2) / 2.0


def sample_grid(lo: float, hi: float, steps: int) -> np.ndarray:
    """Returns `steps + 1` uniform sample positions from `lo` to `hi` inclusive."""
    return np.arange(steps + 1, dtype=np.float64) * (hi - lo) / steps + lo


class Defuzzifier:
    """
    Performs Mamdani centroid defuzzification.

    Attributes:
        steps (int): Number of uniform integration steps per output interval.
    """

    def __init__(self, steps: int = INTEGRAL_STEPS):
        if steps < 1:
            raise ValueError(f"Integration needs at least one step, got {steps}")
        self.steps = int(steps)
        defuzzifier_log.info("Defuzzifier initialized with %d integration steps.", self.steps)

    def envelope(self, output: Output, output_sets: List[OutputSet], x: float) -> float:
        """
        Evaluates the clipped and aggregated output membership at `x`.

        Args:
            output (Output): The output variable.
            output_sets (List[OutputSet]): The engine's output set storage.
            x (float): Position within the output's interval.

        Returns:
            float: max over touched sets of min(firing strength, f(x)), or 0.0
            when nothing was touched.
        """
        result = 0.0
        for index in output.touched:
            output_set = output_sets[index]
            result = max(result, min(output_set.firing_strength, float(output_set.fn(x))))
        return result

    def defuzzify(self, output: Output, output_sets: List[OutputSet]) -> float:
        """
        Calculates the centroid of an output's envelope.

        Args:
            output (Output): The output variable, with its touched sets recorded.
            output_sets (List[OutputSet]): The engine's output set storage.

        Returns:
            float: The crisp value. NaN or ±inf when the envelope has zero
            area on the sampled grid.
        """
        xs = sample_grid(output.min, output.max, self.steps)
        ys = np.array([self.envelope(output, output_sets, x) for x in xs.tolist()])

        x1, x2 = xs[:-1], xs[1:]
        y1, y2 = ys[:-1], ys[1:]
        nominator = np.sum(linear_moment(x1, x2, y1, y2))
        denominator = np.sum(trapezoid_area(x1, x2, y1, y2))

        with np.errstate(divide="ignore", invalid="ignore"):
            value = float(np.float64(nominator) / np.float64(denominator))

        if not math.isfinite(value):
            defuzzifier_log.warning(
                "Envelope over [%.3f, %.3f] has zero area; defuzzified value is %s.",
                output.min,
                output.max,
                value,
            )
        else:
            defuzzifier_log.debug(
                "Defuzzified output: %.4f (from %d touched sets)", value, len(output.touched)
            )
        return value
