"""
Fallback Calculator - Deterministic calorie formula.

calories = base rate per minute x duration x intensity multiplier,
rounded to the nearest integer.
"""
from typing import Any

from caltrack.core.rounding import round_half_up

# kcal per minute, keyed by lower-cased workout type
BASE_CALORIES_PER_MINUTE: dict[str, float] = {
    "walking": 4,
    "running": 10,
    "cycling": 8,
    "swimming": 7,
    "weightlifting": 5,
    "yoga": 3,
}
DEFAULT_CALORIES_PER_MINUTE = 6

INTENSITY_MULTIPLIERS: dict[str, float] = {
    "low": 0.8,
    "medium": 1.0,
    "high": 1.2,
}
DEFAULT_INTENSITY_MULTIPLIER = 1.0


def base_rate(workout_type: str) -> float:
    """Per-minute base rate, 6 for unrecognized types."""
    return BASE_CALORIES_PER_MINUTE.get(workout_type.strip().lower(), DEFAULT_CALORIES_PER_MINUTE)


def intensity_multiplier(intensity: Any) -> float:
    """Multiplier for an intensity, 1.0 for anything unrecognized."""
    key = getattr(intensity, "value", intensity)
    if not isinstance(key, str):
        return DEFAULT_INTENSITY_MULTIPLIER
    return INTENSITY_MULTIPLIERS.get(key.strip().lower(), DEFAULT_INTENSITY_MULTIPLIER)


def fallback_calories(workout_type: str, duration_minutes: float, intensity: Any) -> int:
    """
    Estimate calories without the remote estimator.

    Args:
        workout_type: Free-form label, matched case-insensitively
        duration_minutes: Workout length in minutes
        intensity: low, medium or high

    Returns:
        Non-negative integer calorie count
    """
    calories = base_rate(workout_type) * duration_minutes * intensity_multiplier(intensity)
    return max(0, round_half_up(calories))
