"""
Prompt templates for the calorie estimator.
"""

CALORIE_ESTIMATE_PROMPT = (
    "Calculate the approximate calories burned for a {workout_type} workout "
    "lasting {duration} minutes with {intensity} intensity. Consider factors "
    "like intensity and provide a reasonable estimate. Return only the number "
    "of calories as a single integer."
)
