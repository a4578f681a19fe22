from caltrack.prompts.templates import CALORIE_ESTIMATE_PROMPT
from caltrack.prompts.generators import build_calorie_prompt

__all__ = [
    "CALORIE_ESTIMATE_PROMPT",
    "build_calorie_prompt",
]
