"""
Point normalization.

Rebases raw (tick, seconds) pairs so the first point sits at tick 0,
time 0, with times in milliseconds.
"""

from collections.abc import Iterable

from tempo_map.types import DataPoint


def normalize_points(points: Iterable[tuple[int, float]]) -> list[DataPoint]:
    """
    Shift ticks and times to start at zero and convert seconds to milliseconds.

    Order is preserved and nothing is validated.

    Args:
        points: Ordered (tick, seconds) pairs.

    Returns:
        List of DataPoint, empty if the input is empty.
    """
    pairs = list(points)
    if not pairs:
        return []

    first_tick, first_time = pairs[0]
    return [
        DataPoint(tick=int(tick - first_tick), time=(time - first_time) * 1000.0)
        for tick, time in pairs
    ]
