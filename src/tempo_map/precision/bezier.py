"""
Least-squares quadratic Bezier fitting.

The end control points are pinned to the first and last data points;
the middle control point is solved in closed form, independently for
the tick and the time dimension.

Reference: Nouri & Suleiman, "Least Squares Data Fitting with
Quadratic Bezier Curves".
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from tempo_map.types import DataPoint, InsufficientPointsForFitError

Point = tuple[float, float]


@dataclass(frozen=True)
class LinearBezier:
    """Straight-line Bezier between two control points."""
    p0: Point
    p1: Point

    def x(self, t):
        return (1 - t) * self.p0[0] + t * self.p1[0]

    def y(self, t):
        return (1 - t) * self.p0[1] + t * self.p1[1]


@dataclass(frozen=True)
class QuadraticBezier:
    """
    P(t) = (1-t)^2 P0 + 2t(1-t) P1 + t^2 P2 for t in [0, 1].

    x and y accept scalars or numpy arrays of t.
    """
    p0: Point
    p1: Point
    p2: Point

    def x(self, t):
        return (1 - t) ** 2 * self.p0[0] + 2 * t * (1 - t) * self.p1[0] + t ** 2 * self.p2[0]

    def y(self, t):
        return (1 - t) ** 2 * self.p0[1] + 2 * t * (1 - t) * self.p1[1] + t ** 2 * self.p2[1]

    @property
    def derivative(self) -> LinearBezier:
        """P'(t), a linear Bezier over 2(P1 - P0) and 2(P2 - P1)."""
        return LinearBezier(
            p0=(2 * (self.p1[0] - self.p0[0]), 2 * (self.p1[1] - self.p0[1])),
            p1=(2 * (self.p2[0] - self.p1[0]), 2 * (self.p2[1] - self.p1[1])),
        )

    @property
    def control_points(self) -> tuple[Point, Point, Point]:
        return (self.p0, self.p1, self.p2)


def fit_quadratic_bezier(points: Sequence[DataPoint]) -> QuadraticBezier:
    """
    Fit a quadratic Bezier curve to an ordered run of points.

    Parameter values are t_i = i / n for i = 0..n-1. The middle control
    point minimizes the squared distance between the data and the curve
    at those parameter values.

    Args:
        points: At least four points, as (tick, ms).

    Returns:
        QuadraticBezier through the first and last point.

    Raises:
        InsufficientPointsForFitError: fewer than four points.
    """
    if len(points) < 4:
        raise InsufficientPointsForFitError(
            f"At least 4 data points are required for a curve fit, got {len(points)}"
        )

    data = np.array([[p.tick, p.time] for p in points], dtype=float)
    n = len(data)
    t = (np.arange(n) / n)[:, np.newaxis]

    first, last = data[0], data[-1]
    residual = data - (1 - t) ** 2 * first - t ** 2 * last
    middle = residual.sum(axis=0) / np.sum(2 * t * (1 - t))

    return QuadraticBezier(
        p0=(float(first[0]), float(first[1])),
        p1=(float(middle[0]), float(middle[1])),
        p2=(float(last[0]), float(last[1])),
    )
