"""CLI entry point: python -m tempo_map <points_file> [--verbose] [--diagnostics]"""

import logging
import os
import sys

from dotenv import load_dotenv


def read_points(lines) -> list[tuple[int, float]]:
    """Parse 'tick, seconds' lines, skipping any line that is not two numbers."""
    points = []
    for line in lines:
        values = line.split(",")
        if len(values) != 2:
            continue
        try:
            points.append((int(float(values[0])), float(values[1])))
        except ValueError:
            continue
    return points


def main():
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    if not args:
        print("Usage: python -m tempo_map <points_file|-> [--verbose] [--diagnostics]")
        sys.exit(1)

    verbose = "--verbose" in sys.argv
    show_diagnostics = "--diagnostics" in sys.argv

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    load_dotenv()
    seed = os.environ.get("TEMPO_MAP_SEED")
    max_iterations = os.environ.get("TEMPO_MAP_MAX_ITERATIONS")

    from tempo_map.analyze import create_tempo_map
    from tempo_map.types import AnnealingSchedule

    if args[0] == "-":
        points = read_points(sys.stdin)
    else:
        with open(args[0], encoding="utf-8") as fh:
            points = read_points(fh)

    schedule = AnnealingSchedule()
    if max_iterations:
        schedule = AnnealingSchedule(max_iterations=int(max_iterations))

    tempo_map = create_tempo_map(
        points,
        seed=int(seed) if seed else None,
        schedule=schedule,
    )

    print(f"{len(tempo_map)} segments detected from {len(points)} points")

    for i, entry in enumerate(tempo_map):
        print(f"\n--- Segment {i + 1} ({entry.segment.direction.value}, {len(entry.points)} points) ---")
        print(f"Ticks: {entry.date:.0f}-{entry.end_date:.0f}")
        if entry.transition_to is None:
            print(f"Tempo: {entry.bpm:.2f} BPM (constant)")
        else:
            print(f"Tempo: {entry.bpm:.2f} -> {entry.transition_to:.2f} BPM "
                  f"(mean tempo at {entry.mean_tempo_at:.2f})")
        print(f"Beat length: {entry.beat_length:.4f}")

        if show_diagnostics and entry.diagnostics:
            d = entry.diagnostics
            print(f"  Bezier start/end: {d.start_bpm:.2f} / {d.end_bpm:.2f} BPM "
                  f"(mean tempo at ~{d.mean_tempo_at_estimate:.2f})")
            print(f"  Initial end error: {d.initial_end_error:.1f} ms")
            print(f"  Annealing: error {d.annealing.initial_error:.1f} -> {d.annealing.error:.1f} "
                  f"after {d.annealing.iterations} iterations ({d.annealing.accepted} accepted)")


if __name__ == "__main__":
    main()
