from tempo_map.precision.normalize import normalize_points
from tempo_map.precision.tempo import elapsed_milliseconds, instantaneous_tempo, sample_tempo_curve
from tempo_map.precision.bezier import fit_quadratic_bezier
from tempo_map.precision.segments import segment_curve
from tempo_map.precision.model import approximate_segment, initial_model
from tempo_map.precision.anneal import anneal, mean_squared_error

__all__ = [
    "normalize_points",
    "elapsed_milliseconds",
    "instantaneous_tempo",
    "sample_tempo_curve",
    "fit_quadratic_bezier",
    "segment_curve",
    "approximate_segment",
    "initial_model",
    "anneal",
    "mean_squared_error",
]
