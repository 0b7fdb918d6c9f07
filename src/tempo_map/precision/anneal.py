"""
Simulated annealing refinement of transitioning tempo models.

Randomness comes only from the Generator passed in, so a seeded
generator reproduces a run exactly. Every candidate is a new frozen
TempoModel; nothing is refined in place.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import replace

import numpy as np

from tempo_map.precision.tempo import elapsed_milliseconds
from tempo_map.types import AnnealingResult, AnnealingSchedule, DataPoint, TempoModel

logger = logging.getLogger(__name__)


def mean_squared_error(model: TempoModel, points: Sequence[DataPoint]) -> float:
    """
    Mean squared difference between modelled and observed milliseconds.

    Residuals that evaluate to NaN are skipped, but still count in the
    denominator. Degenerate curves therefore look better than they are.
    """
    total = 0.0
    for point in points:
        residual = elapsed_milliseconds(point.tick, model) - point.time
        if math.isnan(residual):
            continue
        total += residual * residual
    return total / len(points)


def _neighbor(model: TempoModel, rng: np.random.Generator, variation: float) -> TempoModel:
    """Move bpm and transition_to by the same random step in opposite directions."""
    step = rng.uniform(0.0, variation)
    if model.bpm < model.transition_to:
        step = -step
    return replace(model, bpm=model.bpm + step, transition_to=model.transition_to - step)


def anneal(
    points: Sequence[DataPoint],
    initial: TempoModel,
    rng: np.random.Generator,
    schedule: AnnealingSchedule = AnnealingSchedule(),
) -> AnnealingResult:
    """
    Search for a transition model that better reproduces observed times.

    Each iteration perturbs the current model, accepts the neighbour by
    the Metropolis criterion and remembers the best model seen. The best
    model is replaced only on strict improvement, so the result is never
    worse than the starting model.

    Args:
        points: Segment points, times in ms from the segment start.
        initial: Starting model; must be a transition.
        rng: Source of all random draws.
        schedule: Temperature, cooling and stopping parameters.

    Returns:
        AnnealingResult holding the best model and its error.
    """
    if initial.transition_to is None:
        raise ValueError("annealing requires a model with a tempo transition")

    current = initial
    best = initial
    initial_error = mean_squared_error(initial, points)
    best_error = initial_error
    temperature = schedule.initial_temperature
    iterations = 0
    accepted = 0

    logger.debug("annealing from error %.3f: %s", initial_error, initial)

    while iterations < schedule.max_iterations and temperature > schedule.min_temperature:
        neighbor = _neighbor(current, rng, schedule.variation)
        # Recomputed each time rather than carried over from the last acceptance
        current_error = mean_squared_error(current, points)
        neighbor_error = mean_squared_error(neighbor, points)

        with np.errstate(over="ignore", invalid="ignore"):
            acceptance = np.exp((current_error - neighbor_error) / temperature)
        if acceptance > rng.uniform(0.0, 1.0):
            current = neighbor
            accepted += 1

        if neighbor_error < best_error:
            best = neighbor
            best_error = neighbor_error
            logger.debug("new best error %.3f at iteration %d", best_error, iterations)

        iterations += 1
        if best_error < schedule.target_error:
            break

        temperature *= schedule.cooling_rate

    return AnnealingResult(
        model=best,
        error=best_error,
        initial_error=initial_error,
        iterations=iterations,
        accepted=accepted,
    )
