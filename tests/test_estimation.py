from __future__ import annotations

import asyncio

import pytest

from caltrack.core.exceptions import (
    EstimationParseFailure,
    EstimatorUnavailable,
    RemoteCallFailure,
    ValidationError,
)
from caltrack.services.adapter import GeminiAdapter
from caltrack.services.estimation import (
    SOURCE_ESTIMATOR,
    SOURCE_FALLBACK,
    EstimationService,
    fallback_calories,
    parse_calories,
)


def _estimate(service: EstimationService, *args):
    return asyncio.run(service.estimate(*args))


# ---------------------------------------------------------------------------
# Fallback formula
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("workout_type", "duration", "intensity", "expected"),
    [
        ("running", 30, "high", 360),
        ("Unicycling", 10, "medium", 60),
        ("WALKING", 60, "low", 192),
        ("  yoga ", 45, "medium", 135),
        ("cycling", 40, "high", 384),
        ("swimming", 45, "low", 252),
        ("weightlifting", 25, "medium", 125),
    ],
)
def test_fallback_formula(workout_type: str, duration: int, intensity: str, expected: int) -> None:
    assert fallback_calories(workout_type, duration, intensity) == expected


def test_fallback_unknown_intensity_uses_neutral_multiplier() -> None:
    assert fallback_calories("running", 10, "extreme") == 100
    assert fallback_calories("running", 10, None) == 100


def test_fallback_rounds_half_up() -> None:
    # 3 * 0.5 * 1.0 = 1.5 -> 2
    assert fallback_calories("yoga", 0.5, "medium") == 2


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(("text", "expected"), [("250", 250), ("  412\n", 412), ("+90", 90), ("0", 0)])
def test_parse_calories_accepts_single_integer(text: str, expected: int) -> None:
    assert parse_calories(text) == expected


@pytest.mark.parametrize(
    "text",
    ["", "   ", "about 300", "300 calories", "300\n350", "12.5", "-40", "three hundred", None],
)
def test_parse_calories_rejects_everything_else(text) -> None:
    with pytest.raises(EstimationParseFailure):
        parse_calories(text)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


def test_estimator_answer_is_used(scripted_adapter) -> None:
    adapter = scripted_adapter(" 275 \n")
    service = EstimationService(adapter)

    result = asyncio.run(service.estimate_detailed("running", 30, "high"))

    assert result.calories == 275
    assert result.source == SOURCE_ESTIMATOR
    assert len(adapter.calls) == 1
    prompt = adapter.calls[0]["messages"][0].content
    assert "running workout lasting 30 minutes with high intensity" in prompt
    assert "single integer" in prompt


def test_unparseable_answer_falls_back_to_formula(scripted_adapter) -> None:
    service = EstimationService(scripted_adapter("I'd guess around 350 kcal"))

    result = asyncio.run(service.estimate_detailed("running", 30, "high"))

    assert result.calories == 360
    assert result.source == SOURCE_FALLBACK


def test_unrecognized_type_falls_back_to_default_rate(scripted_adapter) -> None:
    service = EstimationService(scripted_adapter(""))
    assert _estimate(service, "Unicycling", 10, "medium") == 60


def test_remote_failure_falls_back_without_retry(scripted_adapter) -> None:
    adapter = scripted_adapter(RemoteCallFailure("Estimator request timed out"), "999")
    service = EstimationService(adapter)

    assert _estimate(service, "cycling", 40, "low") == 256
    assert len(adapter.calls) == 1


def test_intensity_is_case_insensitive(scripted_adapter) -> None:
    service = EstimationService(scripted_adapter("not a number"))
    assert _estimate(service, "Running", 30, "HIGH") == 360


@pytest.mark.parametrize(
    ("workout_type", "duration", "intensity"),
    [
        ("", 30, "medium"),
        ("   ", 30, "medium"),
        (None, 30, "medium"),
        ("Trail\nRun", 30, "medium"),
        ("Trail\r\nRun", 30, "medium"),
        ("Trail\tRun", 30, "medium"),
        ("running", 0, "medium"),
        ("running", -5, "medium"),
        ("running", None, "medium"),
        ("running", "30", "medium"),
        ("running", True, "medium"),
        ("running", float("nan"), "medium"),
        ("running", 30, "extreme"),
        ("running", 30, None),
    ],
)
def test_invalid_input_is_rejected_before_remote_call(scripted_adapter, workout_type, duration, intensity) -> None:
    adapter = scripted_adapter("300")
    service = EstimationService(adapter)

    with pytest.raises(ValidationError):
        _estimate(service, workout_type, duration, intensity)
    assert adapter.calls == []


def test_surrounding_whitespace_is_trimmed_from_workout_type(scripted_adapter) -> None:
    adapter = scripted_adapter("250")
    service = EstimationService(adapter)

    assert _estimate(service, " Trail Run\n", 30, "medium") == 250
    assert "a Trail Run workout" in adapter.calls[0]["messages"][0].content


@pytest.mark.parametrize("reply", ["120", "junk", "", "-5", RemoteCallFailure("boom")])
@pytest.mark.parametrize("intensity", ["low", "medium", "high"])
@pytest.mark.parametrize("workout_type", ["running", "Rowing"])
def test_result_is_always_a_non_negative_int(scripted_adapter, reply, intensity, workout_type) -> None:
    service = EstimationService(scripted_adapter(reply))
    calories = _estimate(service, workout_type, 17, intensity)
    assert isinstance(calories, int)
    assert calories >= 0


def test_from_settings_builds_configured_adapter(test_settings) -> None:
    service = EstimationService.from_settings(test_settings)

    assert isinstance(service.adapter, GeminiAdapter)
    assert service.adapter.model == "gemini-2.0-flash"
    assert service.adapter.timeout == test_settings.AI_TIMEOUT


def test_from_settings_without_credentials_fails_fast(unconfigured_settings) -> None:
    with pytest.raises(EstimatorUnavailable, match="API key is not set"):
        EstimationService.from_settings(unconfigured_settings)


def test_from_settings_rejects_unknown_provider(test_settings) -> None:
    config = test_settings.model_copy(update={"AI_PROVIDER": "mystery"})
    with pytest.raises(EstimatorUnavailable, match="Unsupported estimator provider"):
        EstimationService.from_settings(config)
