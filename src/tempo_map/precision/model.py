"""
Initial tempo models for segments, and the per-segment approximation.

Two points give a constant tempo, three points a transition between the
first and last pair's tempo. Four or more points also get a transition,
which is then refined by simulated annealing.
"""

import logging
from collections.abc import Sequence

import numpy as np

from tempo_map.precision.anneal import anneal
from tempo_map.precision.bezier import QuadraticBezier, fit_quadratic_bezier
from tempo_map.precision.tempo import MS_PER_MINUTE, TICKS_PER_BEAT, end_error
from tempo_map.types import (
    AnnealingSchedule,
    DataPoint,
    DegenerateSegmentError,
    FitDiagnostics,
    InsufficientDataError,
    TempoModel,
)

logger = logging.getLogger(__name__)

DEFAULT_MEAN_TEMPO_AT = 0.5
DEFAULT_BEAT_LENGTH = 0.25


def _bpm_between(a: DataPoint, b: DataPoint) -> float:
    if b.time == a.time:
        raise DegenerateSegmentError(
            f"Onsets at ticks {a.tick} and {b.tick} share the time {a.time} ms"
        )
    return MS_PER_MINUTE / (b.time - a.time)


def _divide(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator != 0 else float("nan")


def _checked(model: TempoModel) -> TempoModel:
    """Reject models with a non-positive tempo or beat length."""
    tempos = [model.bpm] if model.transition_to is None else [model.bpm, model.transition_to]
    if not all(bpm > 0 for bpm in tempos):
        raise DegenerateSegmentError(
            f"Segment at tick {model.date} gives non-positive tempo {tempos}; onset times must increase"
        )
    if not model.beat_length > 0:
        raise DegenerateSegmentError(
            f"Segment at tick {model.date} gives beat length {model.beat_length}; ticks must increase"
        )
    return model


def initial_model(points: Sequence[DataPoint]) -> TempoModel:
    """
    Build the starting tempo model for a segment.

    Args:
        points: Segment points, times in ms from the segment start.

    Returns:
        Constant model for two points, transition model otherwise.

    Raises:
        InsufficientDataError: fewer than two points.
        DegenerateSegmentError: repeated onset times or ticks, or times
            running backwards, so that no positive tempo fits.
    """
    if len(points) < 2:
        raise InsufficientDataError(
            f"At least 2 data points are required in order to approximate, got {len(points)}"
        )

    first, second, last = points[0], points[1], points[-1]
    if not last.tick > first.tick:
        raise DegenerateSegmentError(
            f"Segment ticks must increase, got {first.tick} to {last.tick}"
        )

    return _checked(_build(points))


def _build(points: Sequence[DataPoint]) -> TempoModel:
    first, second, last = points[0], points[1], points[-1]

    if len(points) == 2:
        return TempoModel(
            date=first.tick,
            end_date=last.tick,
            bpm=_bpm_between(first, last),
            beat_length=(last.tick - first.tick) / TICKS_PER_BEAT / 4,
        )

    if len(points) == 3:
        return TempoModel(
            date=first.tick,
            end_date=last.tick,
            bpm=_bpm_between(first, second),
            beat_length=(second.tick - first.tick) / TICKS_PER_BEAT / 4,
            transition_to=_bpm_between(points[-2], last),
            mean_tempo_at=DEFAULT_MEAN_TEMPO_AT,
        )

    return TempoModel(
        date=first.tick,
        end_date=last.tick,
        bpm=_bpm_between(first, second),
        beat_length=DEFAULT_BEAT_LENGTH,
        transition_to=_bpm_between(points[-2], last),
        mean_tempo_at=DEFAULT_MEAN_TEMPO_AT,
    )


def bezier_estimates(curve: QuadraticBezier, length: float) -> tuple[float, float, float]:
    """
    Tempo estimates read off a fitted (tick, ms) curve.

    Start and end bpm come from the chords P0-P1 and P1-P2, the curve's
    slopes at its ends. The mean_tempo_at estimate is the closed-form
    guess for where the midpoint tempo is reached; it can fall outside
    (0, 1) and is not validated.

    Returns:
        (start_bpm, end_bpm, mean_tempo_at_estimate); NaN where a chord
        or the curve's second difference is zero in time.
    """
    (x0, y0), (x1, y1), (x2, y2) = curve.control_points
    scale = MS_PER_MINUTE / TICKS_PER_BEAT

    start_bpm = _divide(x1 - x0, y1 - y0) * scale
    end_bpm = _divide(x2 - x1, y2 - y1) * scale

    mean_tempo = (end_bpm - start_bpm) / 2 + start_bpm
    mean_tempo_at = _divide(
        125 * length + 3 * mean_tempo * (y0 - y1),
        3 * mean_tempo * (y0 - 2 * y1 + y2),
    )
    return start_bpm, end_bpm, mean_tempo_at


def approximate_segment(
    points: Sequence[DataPoint],
    rng: np.random.Generator | None = None,
    *,
    schedule: AnnealingSchedule = AnnealingSchedule(),
) -> tuple[TempoModel, FitDiagnostics | None]:
    """
    Fit a tempo model to one segment.

    Segments of two or three points return their initial model as is.
    Longer segments are annealed starting from the initial model; the
    Bezier estimates are computed alongside but do not seed the search.

    Args:
        points: Segment points, times in ms from the segment start.
        rng: Random source for annealing. A fresh unseeded generator if None.
        schedule: Annealing parameters.

    Returns:
        (model, diagnostics); diagnostics is None for two or three points.
    """
    model = initial_model(points)
    if len(points) < 4:
        return model, None

    curve = fit_quadratic_bezier(points)
    start_bpm, end_bpm, mean_tempo_at = bezier_estimates(curve, points[-1].tick - points[0].tick)
    initial_end_error = end_error(model, points)
    logger.debug(
        "segment at tick %d: bezier start %.2f bpm, end %.2f bpm, end error %.2f ms",
        points[0].tick, start_bpm, end_bpm, initial_end_error,
    )

    if rng is None:
        rng = np.random.default_rng()
    result = anneal(points, model, rng, schedule)

    diagnostics = FitDiagnostics(
        control_points=curve.control_points,
        start_bpm=start_bpm,
        end_bpm=end_bpm,
        mean_tempo_at_estimate=mean_tempo_at,
        initial_model=model,
        initial_end_error=initial_end_error,
        annealing=result,
    )
    return result.model, diagnostics
