"""
Segmentation of a point sequence by local tempo trend.

Each consecutive pair of points gives a local tempo estimate
(milliseconds per beat). Runs where the estimates keep rising, or keep
falling, become one segment. Equal estimates extend the current run.
"""

import logging
from collections.abc import Sequence

import numpy as np

from tempo_map.precision.tempo import TICKS_PER_BEAT
from tempo_map.types import (
    DataPoint,
    Direction,
    InsufficientDataError,
    PointBuffer,
    Segment,
)

logger = logging.getLogger(__name__)


def local_tempos(ticks: np.ndarray, times: np.ndarray) -> np.ndarray:
    """Milliseconds per beat across each consecutive pair."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.diff(times) / (np.diff(ticks) / TICKS_PER_BEAT)


def segment_curve(points: Sequence[DataPoint]) -> list[Segment]:
    """
    Split normalized points into maximal runs of rising or falling tempo.

    A direction change at estimate i closes the current segment at point
    i - 1 and opens the next one there, so neighbouring segments share
    exactly one point. The last segment ends at the last input point.

    Args:
        points: Normalized points, ordered by tick.

    Returns:
        Segments in input order, covering every point.

    Raises:
        InsufficientDataError: fewer than three points.
    """
    if len(points) < 3:
        raise InsufficientDataError(
            f"At least three points are required to form a curve, got {len(points)}"
        )

    ticks = np.array([p.tick for p in points], dtype=np.int64)
    times = np.array([p.time for p in points], dtype=float)
    buffer = PointBuffer(ticks=ticks, times=times, tempos=local_tempos(ticks, times))
    tempos = buffer.tempos

    direction = Direction.RISING if tempos[1] > tempos[0] else Direction.FALLING
    start = 0
    segments = []

    for i in range(1, len(tempos)):
        if tempos[i] > tempos[i - 1]:
            trend = Direction.RISING
        elif tempos[i] < tempos[i - 1]:
            trend = Direction.FALLING
        else:
            continue

        if trend != direction:
            segments.append(Segment(direction=direction, start=start, end=i - 1, buffer=buffer))
            start = i - 1
            direction = trend

    segments.append(Segment(direction=direction, start=start, end=len(buffer) - 1, buffer=buffer))

    logger.debug("split %d points into %d segments", len(buffer), len(segments))
    return segments
