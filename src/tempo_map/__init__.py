"""
tempo-map: Reconstruct piecewise tempo maps from performance timings.

Usage:
    from tempo_map import create_tempo_map
    tempo_map = create_tempo_map([(0, 1.82), (720, 3.48), (1440, 4.67), (2160, 6.46)], seed=1)
    print(tempo_map[0].bpm)

For the evaluation math only:
    from tempo_map.precision.tempo import elapsed_milliseconds
    ms = elapsed_milliseconds(720, TempoModel(date=0, end_date=720, bpm=60, beat_length=0.25))
"""

__version__ = "0.1.0"

from tempo_map.types import (
    AnnealingResult,
    AnnealingSchedule,
    DataPoint,
    DegenerateSegmentError,
    Direction,
    FitDiagnostics,
    InsufficientDataError,
    InsufficientPointsForFitError,
    InvalidMeanTempoAtError,
    Segment,
    TempoMapError,
    TempoModel,
    TempoPoint,
    TempoSegment,
)
from tempo_map.analyze import create_tempo_map

__all__ = [
    "create_tempo_map",
    "AnnealingResult",
    "AnnealingSchedule",
    "DataPoint",
    "DegenerateSegmentError",
    "Direction",
    "FitDiagnostics",
    "InsufficientDataError",
    "InsufficientPointsForFitError",
    "InvalidMeanTempoAtError",
    "Segment",
    "TempoMapError",
    "TempoModel",
    "TempoPoint",
    "TempoSegment",
]
