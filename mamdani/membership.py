"""
Piecewise-linear membership function shapes.

Every shape is a small frozen dataclass that is callable with one crisp
value and returns a degree in [0, 1]. Shapes saturate at the edges of their
support, so out-of-range inputs never need clamping by the caller.

The engine accepts any `Callable[[float], float]`; these shapes are the
palette used by the configuration loader and the plotting utilities.
"""

from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

import numpy as np

from mamdani.errors import ConfigError


class MembershipShape:
    """Base class for the configured shapes."""

    def __call__(self, x: float) -> float:
        raise NotImplementedError

    def breakpoints(self) -> List[float]:
        """Returns the x positions where the slope changes."""
        raise NotImplementedError


@dataclass(frozen=True)
class LeftShoulder(MembershipShape):
    """
    1.0 up to `a`, falling linearly to 0.0 at `b`, 0.0 beyond.

    Args:
        a (float): Last x with full membership.
        b (float): First x with zero membership.
    """

    a: float
    b: float

    def __post_init__(self):
        if not self.a <= self.b:
            raise ValueError(f"Invalid left shoulder params [{self.a}, {self.b}]")

    def __call__(self, x: float) -> float:
        if x < self.a:
            return 1.0
        elif x < self.b:
            return (self.b - x) / (self.b - self.a)
        return 0.0

    def breakpoints(self) -> List[float]:
        return [self.a, self.b]


@dataclass(frozen=True)
class RightShoulder(MembershipShape):
    """0.0 up to `a`, rising linearly to 1.0 at `b`, 1.0 beyond."""

    a: float
    b: float

    def __post_init__(self):
        if not self.a <= self.b:
            raise ValueError(f"Invalid right shoulder params [{self.a}, {self.b}]")

    def __call__(self, x: float) -> float:
        if x < self.a:
            return 0.0
        elif x < self.b:
            return (x - self.a) / (self.b - self.a)
        return 1.0

    def breakpoints(self) -> List[float]:
        return [self.a, self.b]


@dataclass(frozen=True)
class Triangle(MembershipShape):
    """
    Triangular membership function.

    Args:
        a (float): Left foot (zero membership).
        b (float): Peak (membership 1.0).
        c (float): Right foot (zero membership).
    """

    a: float
    b: float
    c: float

    def __post_init__(self):
        if not self.a <= self.b <= self.c:
            raise ValueError(f"Invalid triangle params [{self.a}, {self.b}, {self.c}]")

    def __call__(self, x: float) -> float:
        a, b, c = self.a, self.b, self.c
        if x <= a or x >= c:
            # A degenerate side still reaches the peak exactly.
            return 1.0 if x == b else 0.0
        # left half rt triangle
        elif x <= b:
            return (x - a) / (b - a)
        # right half rt triangle
        return (c - x) / (c - b)

    def breakpoints(self) -> List[float]:
        return [self.a, self.b, self.c]


@dataclass(frozen=True)
class Trapezoid(MembershipShape):
    """
    Trapezoidal membership function.

    Args:
        a (float): Left foot.
        b (float): Start of the plateau (membership 1.0).
        c (float): End of the plateau.
        d (float): Right foot.
    """

    a: float
    b: float
    c: float
    d: float

    def __post_init__(self):
        if not (self.a <= self.b <= self.c <= self.d):
            raise ValueError(
                f"Invalid trapezoid params [{self.a}, {self.b}, {self.c}, {self.d}]"
            )

    def __call__(self, x: float) -> float:
        a, b, c, d = self.a, self.b, self.c, self.d
        if b <= x <= c:
            return 1.0
        elif x <= a or x >= d:
            return 0.0
        elif x < b:
            return (x - a) / (b - a)
        return (d - x) / (d - c)

    def breakpoints(self) -> List[float]:
        return [self.a, self.b, self.c, self.d]


@dataclass(frozen=True)
class PiecewiseLinear(MembershipShape):
    """
    Linear interpolation through arbitrary (x, y) points.

    Values left of the first point and right of the last point are held
    constant. Used for shapes with several humps, such as a traffic-light
    phase that recurs within one countdown cycle.
    """

    points: Tuple[Tuple[float, float], ...]

    def __post_init__(self):
        if len(self.points) < 2:
            raise ValueError("Piecewise-linear shape needs at least two points")
        xs = [p[0] for p in self.points]
        if any(x2 < x1 for x1, x2 in zip(xs, xs[1:])):
            raise ValueError(f"Piecewise-linear x positions must be sorted: {xs}")

    def __call__(self, x: float) -> float:
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        return float(np.interp(x, xs, ys))

    def breakpoints(self) -> List[float]:
        return [p[0] for p in self.points]


_SHAPES = {
    "left_shoulder": LeftShoulder,
    "right_shoulder": RightShoulder,
    "triangle": Triangle,
    "trapezoid": Trapezoid,
}


def shape_from_config(params: Any) -> MembershipShape:
    """
    Builds a membership shape from its configuration form.

    Accepted forms:
        - A bare list of 3 numbers: triangle [a, b, c].
        - A bare list of 4 numbers: trapezoid [a, b, c, d].
        - A table {shape = "<name>", params = [...]} for one of
          left_shoulder, right_shoulder, triangle, trapezoid.
        - A table {shape = "piecewise", points = [[x, y], ...]}.

    Args:
        params (Any): The decoded TOML value for one fuzzy set.

    Returns:
        MembershipShape: The callable shape.

    Raises:
        ConfigError: If the form or its parameters are invalid.
    """
    try:
        if isinstance(params, (list, tuple)):
            values = [float(v) for v in params]
            if len(values) == 3:
                return Triangle(*values)
            elif len(values) == 4:
                return Trapezoid(*values)
            raise ConfigError(f"Invalid membership function shape: {params}")

        if not isinstance(params, dict) or "shape" not in params:
            raise ConfigError(f"Membership function needs a 'shape' key: {params}")

        name = str(params["shape"]).lower()
        if name == "piecewise":
            points: Sequence = params.get("points", [])
            return PiecewiseLinear(tuple((float(x), float(y)) for x, y in points))
        if name not in _SHAPES:
            raise ConfigError(f"Unknown membership function shape '{name}'")
        return _SHAPES[name](*[float(v) for v in params.get("params", [])])
    except ConfigError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid membership function {params}: {e}") from e
