"""
Data types for tempo map reconstruction.

This module defines all shared types. It has no dependencies beyond
the standard library and numpy.
"""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np


# === Errors ===

class TempoMapError(ValueError):
    """Base class for all tempo map errors."""


class InsufficientDataError(TempoMapError):
    """Too few points to segment or approximate."""


class InsufficientPointsForFitError(TempoMapError):
    """Too few points to fit a quadratic Bezier curve."""


class DegenerateSegmentError(TempoMapError):
    """Segment points that cannot define a tempo, such as two onsets at the same time."""


class InvalidMeanTempoAtError(TempoMapError):
    """mean_tempo_at outside the open interval (0, 1), or missing for a transition."""


# === Input ===

@dataclass(frozen=True)
class DataPoint:
    """A notated position paired with its observed performance time."""
    tick: int
    time: float  # milliseconds once normalized


@dataclass(frozen=True)
class TempoPoint:
    """Local tempo estimate of one consecutive point pair."""
    tick: int     # tick of the pair's first point
    value: float  # milliseconds per beat across the pair


class Direction(Enum):
    """Trend of the local tempo estimates within a segment."""
    RISING = "rising"
    FALLING = "falling"


# === Segmentation ===

@dataclass(frozen=True, eq=False)
class PointBuffer:
    """
    The full normalized point list, stored once.

    Segments are index ranges into this buffer instead of copies of it.
    Arrays are marked read-only on construction.
    """
    ticks: np.ndarray   # (N,) integer ticks
    times: np.ndarray   # (N,) milliseconds
    tempos: np.ndarray  # (N-1,) local tempo estimate per consecutive pair

    def __post_init__(self):
        for array in (self.ticks, self.times, self.tempos):
            array.setflags(write=False)

    def __len__(self) -> int:
        return len(self.ticks)


@dataclass(frozen=True)
class Segment:
    """
    A maximal run of points whose local tempo estimates share one trend.

    Covers the inclusive point range [start, end]. Consecutive segments
    share exactly one point: next.start == previous.end.
    """
    direction: Direction
    start: int
    end: int
    buffer: PointBuffer = field(repr=False, compare=False)

    @property
    def points(self) -> list[DataPoint]:
        return [
            DataPoint(tick=int(self.buffer.ticks[i]), time=float(self.buffer.times[i]))
            for i in range(self.start, self.end + 1)
        ]

    @property
    def tempo_points(self) -> list[TempoPoint]:
        return [
            TempoPoint(tick=int(self.buffer.ticks[i]), value=float(self.buffer.tempos[i]))
            for i in range(self.start, self.end)
        ]

    def local_points(self) -> list[DataPoint]:
        """Points with times measured from the segment's first point."""
        offset = float(self.buffer.times[self.start])
        return [DataPoint(tick=p.tick, time=p.time - offset) for p in self.points]

    def __len__(self) -> int:
        return self.end - self.start + 1


# === Tempo models ===

@dataclass(frozen=True)
class TempoModel:
    """
    Parametric tempo over the tick range [date, end_date].

    Constant when transition_to is None. Otherwise the tempo moves from
    bpm to transition_to along a power curve that crosses the midpoint
    of the two tempos at progress mean_tempo_at.
    """
    date: float
    end_date: float
    bpm: float
    beat_length: float  # fraction of a quarter note
    transition_to: float | None = None
    mean_tempo_at: float | None = None

    def __post_init__(self):
        if not self.date < self.end_date:
            raise ValueError(
                f"date must precede end_date, got {self.date} >= {self.end_date}"
            )
        if self.mean_tempo_at is not None and not 0.0 < self.mean_tempo_at < 1.0:
            raise InvalidMeanTempoAtError(
                f"mean_tempo_at must lie strictly between 0 and 1, got {self.mean_tempo_at}"
            )
        if self.transition_to is not None and self.mean_tempo_at is None:
            raise InvalidMeanTempoAtError("mean_tempo_at is required for a tempo transition")

    @property
    def is_transition(self) -> bool:
        return self.transition_to is not None


@dataclass(frozen=True)
class AnnealingSchedule:
    """Simulated annealing parameters."""
    initial_temperature: float = 500.0
    cooling_rate: float = 0.995
    max_iterations: int = 1000
    variation: float = 0.2        # max bpm change per step
    min_temperature: float = 0.001
    target_error: float = 10.0    # mean squared ms; stop once below


@dataclass(frozen=True)
class AnnealingResult:
    """Outcome of one annealing run."""
    model: TempoModel
    error: float          # mean squared error of model
    initial_error: float  # mean squared error of the starting model
    iterations: int
    accepted: int         # neighbour moves accepted by the Metropolis test


@dataclass(frozen=True)
class FitDiagnostics:
    """
    Bezier-derived estimates computed for segments of four or more points.

    None of these values seed the optimizer. They are kept so callers
    can compare them with the annealed result.
    """
    control_points: tuple[tuple[float, float], ...]  # P0, P1, P2 as (tick, ms)
    start_bpm: float
    end_bpm: float
    mean_tempo_at_estimate: float
    initial_model: TempoModel
    initial_end_error: float  # |elapsed at end_date - last observed time|, in ms
    annealing: AnnealingResult


# === The output ===

@dataclass(frozen=True)
class TempoSegment:
    """
    A fitted tempo model paired with the segment it was fitted to.

    This is the unit consumed by visualization and encoding layers.
    """
    model: TempoModel
    segment: Segment
    diagnostics: FitDiagnostics | None = None

    @property
    def date(self) -> float:
        return self.model.date

    @property
    def end_date(self) -> float:
        return self.model.end_date

    @property
    def bpm(self) -> float:
        return self.model.bpm

    @property
    def beat_length(self) -> float:
        return self.model.beat_length

    @property
    def transition_to(self) -> float | None:
        return self.model.transition_to

    @property
    def mean_tempo_at(self) -> float | None:
        return self.model.mean_tempo_at

    @property
    def points(self) -> list[DataPoint]:
        return self.segment.points

    @property
    def tempo_points(self) -> list[TempoPoint]:
        return self.segment.tempo_points
