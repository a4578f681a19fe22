"""
History aggregation - WorkoutStats from a collection of records.
"""
from typing import Optional, Sequence

from caltrack.core.rounding import round_half_up
from caltrack.models.stats import WorkoutStats
from caltrack.models.workout import WorkoutRecord


def most_frequent_type(records: Sequence[WorkoutRecord]) -> str:
    """
    Most common workout label.

    Among equally frequent labels the one seen first in ``records`` wins:
    counts are kept in insertion order and the max scan keeps the earliest
    candidate on ties.
    """
    counts: dict[str, int] = {}
    for record in records:
        counts[record.workout_type] = counts.get(record.workout_type, 0) + 1

    best_label = ""
    best_count = 0
    for label, count in counts.items():
        if count > best_count:
            best_label, best_count = label, count
    return best_label


def compute_stats(records: Sequence[WorkoutRecord]) -> Optional[WorkoutStats]:
    """
    Aggregate metrics over ``records``.

    Returns:
        WorkoutStats, or None for an empty collection
    """
    count = len(records)
    if count == 0:
        return None

    total_calories = sum(r.calories for r in records)
    total_duration = sum(r.duration_minutes for r in records)

    return WorkoutStats(
        total_workouts=count,
        total_calories=total_calories,
        total_duration=total_duration,
        avg_calories_per_workout=round_half_up(total_calories / count),
        avg_duration=round_half_up(total_duration / count),
        most_frequent_workout=most_frequent_type(records),
    )
