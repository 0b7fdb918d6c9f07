"""Tests for tempo evaluation. No fitting or randomness involved."""

import math

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tempo_map.precision.tempo import (
    elapsed_milliseconds,
    end_error,
    instantaneous_tempo,
    sample_tempo_curve,
)
from tempo_map.types import DataPoint, InvalidMeanTempoAtError, TempoModel

settings.register_profile("ci", deadline=None)
settings.load_profile("ci")


def _constant(bpm=60.0, beat_length=0.25, date=0, end_date=2880):
    return TempoModel(date=date, end_date=end_date, bpm=bpm, beat_length=beat_length)


def _transition(bpm=60.0, transition_to=120.0, mean_tempo_at=0.5, date=0, end_date=2880):
    return TempoModel(
        date=date,
        end_date=end_date,
        bpm=bpm,
        beat_length=0.25,
        transition_to=transition_to,
        mean_tempo_at=mean_tempo_at,
    )


# --- instantaneous_tempo ---

def test_constant_tempo_everywhere():
    model = _constant(bpm=72.0)
    assert instantaneous_tempo(0, model) == 72.0
    assert instantaneous_tempo(1000, model) == 72.0


def test_missing_bpm_falls_back_to_100():
    model = TempoModel(date=0, end_date=720, bpm=0.0, beat_length=0.25)
    assert instantaneous_tempo(360, model) == 100.0


def test_transition_starts_at_bpm():
    assert instantaneous_tempo(0, _transition()) == 60.0


def test_transition_end_is_exact():
    """At end_date the target tempo is returned as is, not via the power curve."""
    model = _transition(bpm=61.3, transition_to=90.123, mean_tempo_at=0.37)
    assert instantaneous_tempo(model.end_date, model) == 90.123


def test_mean_tempo_at_is_where_midpoint_is_reached():
    model = _transition(bpm=60.0, transition_to=120.0, mean_tempo_at=0.3)
    date = 0.3 * model.end_date
    assert instantaneous_tempo(date, model) == pytest.approx(90.0)


def test_linear_transition_at_half():
    """mean_tempo_at=0.5 gives exponent 1, a straight line."""
    model = _transition(bpm=60.0, transition_to=120.0, mean_tempo_at=0.5)
    assert instantaneous_tempo(720, model) == pytest.approx(75.0)


def test_tempo_before_start_is_nan():
    model = _transition(mean_tempo_at=0.3, date=720, end_date=2880)
    assert math.isnan(instantaneous_tempo(360, model))


# --- elapsed_milliseconds ---

def test_constant_one_beat_at_60bpm():
    """15000 * 720 / (60 * 0.25 * 720) = 1000 ms, exactly."""
    assert elapsed_milliseconds(720, _constant()) == 1000.0


def test_constant_offset_date():
    model = _constant(bpm=120.0, date=1440, end_date=4320)
    assert elapsed_milliseconds(2880, model) == pytest.approx(1000.0)


def test_elapsed_zero_at_start():
    assert elapsed_milliseconds(0, _transition()) == 0.0
    assert elapsed_milliseconds(0, _constant()) == 0.0


def test_flat_transition_matches_constant():
    model = _transition(bpm=60.0, transition_to=60.0)
    assert elapsed_milliseconds(720, model) == pytest.approx(1000.0)


def test_linear_transition_matches_closed_form():
    """Integral of 1 / (a + b t) is ln((a + b D) / a) / b."""
    model = _transition(bpm=60.0, transition_to=120.0, mean_tempo_at=0.5)
    a, b = 60.0, 60.0 / 2880
    expected = 15000.0 / (0.25 * 720) * math.log((a + b * 2880) / a) / b
    assert elapsed_milliseconds(2880, model) == pytest.approx(expected, rel=1e-5)


def test_accelerando_is_shorter_than_constant():
    faster = elapsed_milliseconds(2880, _transition(bpm=60.0, transition_to=120.0))
    steady = elapsed_milliseconds(2880, _constant(bpm=60.0))
    assert faster < steady


def test_elapsed_before_start_is_nan():
    model = _transition(mean_tempo_at=0.3, date=720, end_date=2880)
    assert math.isnan(elapsed_milliseconds(360, model))


def test_missing_bpm_closed_form_falls_back_to_100():
    model = TempoModel(date=0, end_date=720, bpm=0.0, beat_length=0.25)
    assert elapsed_milliseconds(720, model) == 600.0


def _assert_non_decreasing_between_resolution_steps(model):
    """Compare consecutive dates that share one Simpson subinterval count."""
    span = int(model.end_date - model.date)
    dates = range(0, span + 1, 7)
    for earlier, later in zip(dates, dates[1:]):
        if max(1, earlier // 180) != max(1, later // 180):
            continue
        assert elapsed_milliseconds(later, model) >= elapsed_milliseconds(earlier, model)


@given(
    bpm=st.floats(40.0, 240.0),
    transition_to=st.floats(40.0, 240.0),
    mean_tempo_at=st.floats(0.0, 0.5, exclude_min=True),
    span=st.integers(720, 5760),
)
def test_elapsed_is_non_decreasing_for_convex_curves(bpm, transition_to, mean_tempo_at, span):
    model = _transition(
        bpm=bpm, transition_to=transition_to, mean_tempo_at=mean_tempo_at, end_date=span,
    )
    _assert_non_decreasing_between_resolution_steps(model)


@given(
    bpm=st.floats(40.0, 240.0),
    ratio=st.floats(0.2, 1.0),
    mean_tempo_at=st.floats(0.0, 1.0, exclude_min=True, exclude_max=True),
    span=st.integers(720, 5760),
)
def test_elapsed_is_non_decreasing_when_slowing(bpm, ratio, mean_tempo_at, span):
    model = _transition(
        bpm=bpm, transition_to=bpm * ratio, mean_tempo_at=mean_tempo_at, end_date=span,
    )
    _assert_non_decreasing_between_resolution_steps(model)


def test_elapsed_drops_where_subinterval_count_doubles():
    """At 360 ticks Simpson goes from 2 to 4 subintervals and the sharp rise near 0 is resolved."""
    model = _transition(bpm=60.0, transition_to=180.0, mean_tempo_at=0.05)
    before = elapsed_milliseconds(359, model)
    after = elapsed_milliseconds(360, model)
    assert before == pytest.approx(282.25, abs=0.05)
    assert after == pytest.approx(266.03, abs=0.05)
    assert before > after


# --- model validation ---

@pytest.mark.parametrize("mean_tempo_at", [0.0, 1.0, -0.2, 1.5])
def test_mean_tempo_at_outside_open_interval(mean_tempo_at):
    with pytest.raises(InvalidMeanTempoAtError):
        _transition(mean_tempo_at=mean_tempo_at)


def test_transition_requires_mean_tempo_at():
    with pytest.raises(InvalidMeanTempoAtError):
        TempoModel(date=0, end_date=720, bpm=60.0, beat_length=0.25, transition_to=80.0)


def test_end_date_must_follow_date():
    with pytest.raises(ValueError):
        _constant(date=720, end_date=720)


# --- sample_tempo_curve / end_error ---

def test_sample_constant_curve():
    samples = sample_tempo_curve(_constant(bpm=60.0, end_date=20), step=5)
    assert samples.shape == (4, 2)
    assert list(samples[:, 0]) == [0.0, 5.0, 10.0, 15.0]
    # 60 bpm at beat_length 0.25 is 60 quarter notes per minute
    assert np.allclose(samples[:, 1], 60.0)


def test_sample_transition_rises():
    samples = sample_tempo_curve(_transition(bpm=60.0, transition_to=120.0))
    assert np.all(np.diff(samples[:, 1]) > 0)


def test_end_error():
    points = [DataPoint(tick=0, time=0.0), DataPoint(tick=720, time=1020.0)]
    assert end_error(_constant(end_date=720), points) == pytest.approx(20.0)
