from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable, List

import pytest
from fastapi.testclient import TestClient

from caltrack.core.config import Settings
from caltrack.main import create_app
from caltrack.models.workout import Intensity, WorkoutRecord
from caltrack.services.adapter import AIResponse
from caltrack.services.estimation import EstimationService
from caltrack.services.history import ExportService, HistoryStore, InMemoryStorage


class ScriptedAdapter:
    """Stands in for a provider adapter; replies are strings or exceptions to raise."""

    provider_name = "scripted"
    model = "scripted-model"

    def __init__(self, *replies: Any) -> None:
        self.replies = list(replies)
        self.calls: List[dict[str, Any]] = []

    async def chat_completion(self, messages, temperature: float = 0.2) -> AIResponse:
        self.calls.append({"messages": messages, "temperature": temperature})
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, BaseException):
            raise reply
        return AIResponse(content=reply)


@pytest.fixture()
def scripted_adapter() -> Callable[..., ScriptedAdapter]:
    return ScriptedAdapter


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        AI_PROVIDER="gemini",
        AI_API_KEY="",
        GEMINI_API_KEY="test-key",
        GOOGLE_API_KEY=None,
        STORAGE_BACKEND="memory",
        EXPORT_DATE_FORMAT="%Y-%m-%d",
        LOG_FORMAT="console",
    )


@pytest.fixture()
def unconfigured_settings(test_settings: Settings) -> Settings:
    return test_settings.model_copy(update={"GEMINI_API_KEY": None, "AI_API_KEY": ""})


def make_record(
    record_id: str,
    workout_type: str = "Running",
    duration: int = 30,
    calories: int = 300,
    intensity: Intensity = Intensity.MEDIUM,
    day: int = 15,
) -> WorkoutRecord:
    return WorkoutRecord(
        id=record_id,
        workout_type=workout_type,
        duration_minutes=duration,
        calories=calories,
        intensity=intensity,
        recorded_at=datetime(2026, 1, day, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture()
def sample_records() -> List[WorkoutRecord]:
    return [
        make_record("1", "Running", 30, 360, Intensity.HIGH, day=10),
        make_record("2", "Yoga", 45, 135, Intensity.MEDIUM, day=11),
        make_record("3", "Running", 20, 160, Intensity.LOW, day=12),
    ]


@pytest.fixture()
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture()
def store(storage: InMemoryStorage) -> HistoryStore:
    history = HistoryStore(storage, export_service=ExportService("%Y-%m-%d"))
    history.load()
    return history


@pytest.fixture()
def seeded_storage(sample_records: List[WorkoutRecord]) -> InMemoryStorage:
    return InMemoryStorage({"workouts": json.dumps([r.to_dict() for r in sample_records])})


@pytest.fixture()
def make_client(test_settings: Settings):
    """Build a TestClient around an app with injected collaborators."""
    clients: List[TestClient] = []

    def _make(
        adapter: ScriptedAdapter | None = None,
        storage: InMemoryStorage | None = None,
        config: Settings | None = None,
        with_estimator: bool = True,
    ) -> TestClient:
        service = EstimationService(adapter or ScriptedAdapter()) if with_estimator else None
        app = create_app(
            config=config or test_settings,
            storage=storage if storage is not None else InMemoryStorage(),
            estimation_service=service,
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture()
def record_factory() -> Callable[..., WorkoutRecord]:
    return make_record
