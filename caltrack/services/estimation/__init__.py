"""
Estimation module - Calorie estimates from a remote estimator with a
deterministic fallback formula.
"""
from caltrack.services.estimation.calculator import (
    BASE_CALORIES_PER_MINUTE,
    DEFAULT_CALORIES_PER_MINUTE,
    INTENSITY_MULTIPLIERS,
    fallback_calories,
)
from caltrack.services.estimation.parser import parse_calories
from caltrack.services.estimation.service import (
    EstimationRequest,
    EstimationResult,
    EstimationService,
    SOURCE_ESTIMATOR,
    SOURCE_FALLBACK,
    validate_request,
)

__all__ = [
    "BASE_CALORIES_PER_MINUTE",
    "DEFAULT_CALORIES_PER_MINUTE",
    "INTENSITY_MULTIPLIERS",
    "fallback_calories",
    "parse_calories",
    "EstimationRequest",
    "EstimationResult",
    "EstimationService",
    "SOURCE_ESTIMATOR",
    "SOURCE_FALLBACK",
    "validate_request",
]
