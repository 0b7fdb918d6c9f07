"""
Main tempo map pipeline.

Normalizes raw (tick, seconds) pairs, splits them into tempo-trend
segments and fits one tempo model per segment.
"""

import logging
from collections.abc import Iterable

import numpy as np

from tempo_map.types import AnnealingSchedule, TempoSegment

logger = logging.getLogger(__name__)


def create_tempo_map(
    points: Iterable[tuple[int, float]],
    *,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
    schedule: AnnealingSchedule | None = None,
) -> list[TempoSegment]:
    """
    Reconstruct a piecewise tempo map from observed onsets.

    This is the primary entry point for the package. The whole map is
    recomputed on every call. Segments are fitted one after another
    from the same random source; an error in any segment propagates and
    no partial map is returned.

    Args:
        points: Ordered (tick, seconds) pairs from score-to-recording alignment.
        rng: Random source for annealing. Takes precedence over seed.
        seed: Seed for a fresh generator when rng is not given.
        schedule: Annealing parameters (defaults to AnnealingSchedule()).

    Returns:
        TempoSegments in tick order; empty if points is empty.

    Raises:
        InsufficientDataError: one or two points.
    """
    from tempo_map.precision.normalize import normalize_points
    from tempo_map.precision.segments import segment_curve
    from tempo_map.precision.model import approximate_segment

    normalized = normalize_points(points)
    if not normalized:
        return []

    if rng is None:
        rng = np.random.default_rng(seed)
    if schedule is None:
        schedule = AnnealingSchedule()

    segments = segment_curve(normalized)

    tempo_map = []
    for segment in segments:
        model, diagnostics = approximate_segment(segment.local_points(), rng, schedule=schedule)
        logger.debug(
            "%s segment %d-%d: %s", segment.direction.value, model.date, model.end_date, model,
        )
        tempo_map.append(TempoSegment(model=model, segment=segment, diagnostics=diagnostics))

    return tempo_map
