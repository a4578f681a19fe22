"""
Estimation Service - Calorie estimates for a single workout.

The remote estimator is asked first. When its reply cannot be parsed or
the call itself fails, the deterministic formula answers instead.
"""
import math
import re
from dataclasses import dataclass
from typing import Any

from caltrack.core.config import Settings, settings as default_settings
from caltrack.core.exceptions import (
    EstimationParseFailure,
    RemoteCallFailure,
    ValidationError,
)
from caltrack.core.logging import get_logger
from caltrack.models.workout import Intensity
from caltrack.prompts import build_calorie_prompt
from caltrack.services.adapter import AIProviderAdapter, ChatMessage, get_ai_adapter
from caltrack.services.estimation.calculator import fallback_calories
from caltrack.services.estimation.parser import parse_calories

logger = get_logger(__name__)

SOURCE_ESTIMATOR = "estimator"
SOURCE_FALLBACK = "fallback"

# Line breaks and other control characters would split a CSV export row
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


@dataclass(frozen=True)
class EstimationResult:
    """Calorie estimate and where it came from."""
    calories: int
    source: str


@dataclass(frozen=True)
class EstimationRequest:
    """Validated estimation input."""
    workout_type: str
    duration_minutes: float
    intensity: Intensity


def validate_request(workout_type: Any, duration_minutes: Any, intensity: Any) -> EstimationRequest:
    """
    Check estimation input.

    Raises:
        ValidationError: empty workout type or one containing control
            characters, non-positive or non-numeric duration, or an
            intensity other than low/medium/high.
    """
    if not isinstance(workout_type, str) or not workout_type.strip():
        raise ValidationError("Missing required fields", details="workoutType must be a non-empty string")
    if _CONTROL_CHARS.search(workout_type.strip()):
        raise ValidationError(
            "Invalid workout type",
            details="workoutType must not contain line breaks or control characters",
        )

    if (
        isinstance(duration_minutes, bool)
        or not isinstance(duration_minutes, (int, float))
        or not math.isfinite(duration_minutes)
        or duration_minutes <= 0
    ):
        raise ValidationError("Invalid duration", details="duration must be a positive number of minutes")

    try:
        level = Intensity.parse(intensity)
    except ValueError as e:
        raise ValidationError("Invalid intensity", details=str(e)) from e

    return EstimationRequest(
        workout_type=workout_type.strip(),
        duration_minutes=duration_minutes,
        intensity=level,
    )


class EstimationService:
    """
    Estimates calories burned for a workout.

    Usage:
        service = EstimationService.from_settings()
        calories = await service.estimate("running", 30, "high")

    Instances hold no per-request state; concurrent estimate() calls are
    independent.
    """

    def __init__(self, adapter: AIProviderAdapter, temperature: float = 0.2):
        self.adapter = adapter
        self.temperature = temperature

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "EstimationService":
        """
        Build the service from configuration.

        Raises:
            EstimatorUnavailable: the estimator cannot be configured.
        """
        config = config or default_settings
        adapter = get_ai_adapter(config)
        return cls(adapter, temperature=config.AI_TEMPERATURE)

    async def estimate(self, workout_type: Any, duration_minutes: Any, intensity: Any) -> int:
        """
        Estimate calories for a workout.

        Returns:
            Non-negative integer calorie count
        """
        result = await self.estimate_detailed(workout_type, duration_minutes, intensity)
        return result.calories

    async def estimate_detailed(
        self,
        workout_type: Any,
        duration_minutes: Any,
        intensity: Any,
    ) -> EstimationResult:
        """Estimate calories and report whether the estimator or the formula answered."""
        request = validate_request(workout_type, duration_minutes, intensity)

        try:
            calories = await self._ask_estimator(request)
        except (RemoteCallFailure, EstimationParseFailure) as e:
            calories = fallback_calories(
                request.workout_type,
                request.duration_minutes,
                request.intensity,
            )
            logger.warning(
                "Estimator unusable, using fallback calculation",
                reason=type(e).__name__,
                error=str(e),
                workout_type=request.workout_type,
                calories=calories,
            )
            return EstimationResult(calories=calories, source=SOURCE_FALLBACK)

        logger.info(
            "Calories estimated",
            workout_type=request.workout_type,
            duration_minutes=request.duration_minutes,
            intensity=request.intensity.value,
            calories=calories,
        )
        return EstimationResult(calories=calories, source=SOURCE_ESTIMATOR)

    async def _ask_estimator(self, request: EstimationRequest) -> int:
        prompt = build_calorie_prompt(
            request.workout_type,
            request.duration_minutes,
            request.intensity.value,
        )
        response = await self.adapter.chat_completion(
            messages=[ChatMessage(role="user", content=prompt)],
            temperature=self.temperature,
        )
        return parse_calories(response.content)
