"""
Prompt Generators - Functions to construct prompts from workout data.
"""
from caltrack.prompts.templates import CALORIE_ESTIMATE_PROMPT


def _format_duration(duration_minutes: float) -> str:
    # 30.0 reads as "30", 12.5 stays "12.5"
    if float(duration_minutes).is_integer():
        return str(int(duration_minutes))
    return str(duration_minutes)


def build_calorie_prompt(workout_type: str, duration_minutes: float, intensity: str) -> str:
    """
    Generate the estimator prompt for one workout.
    """
    return CALORIE_ESTIMATE_PROMPT.format(
        workout_type=workout_type,
        duration=_format_duration(duration_minutes),
        intensity=intensity,
    )
