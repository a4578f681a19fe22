from __future__ import annotations

import asyncio
import json
import locale

from caltrack.services.history import InMemoryStorage


def test_health(make_client) -> None:
    client = make_client()
    assert client.get("/health").json() == {"status": "healthy", "service": "caltrack"}


def test_calculate_calories_uses_estimator(make_client, scripted_adapter) -> None:
    client = make_client(adapter=scripted_adapter("321"))

    response = client.post(
        "/api/calculate-calories",
        json={"workoutType": "running", "duration": 30, "intensity": "high"},
    )

    assert response.status_code == 200
    assert response.json() == {"calories": 321, "source": "estimator"}


def test_calculate_calories_falls_back(make_client, scripted_adapter) -> None:
    client = make_client(adapter=scripted_adapter("lots"))

    response = client.post(
        "/api/calculate-calories",
        json={"workoutType": "running", "duration": 30, "intensity": "high"},
    )

    assert response.json() == {"calories": 360, "source": "fallback"}


def test_calculate_calories_missing_fields_is_400(make_client, scripted_adapter) -> None:
    adapter = scripted_adapter("100")
    client = make_client(adapter=adapter)

    response = client.post("/api/calculate-calories", json={"duration": 30, "intensity": "high"})

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields"
    assert adapter.calls == []


def test_calculate_calories_bad_body_is_400(make_client) -> None:
    client = make_client()

    response = client.post("/api/calculate-calories", json={"workoutType": "yoga", "duration": "long"})

    assert response.status_code == 400
    assert "error" in response.json()
    assert "details" in response.json()


def test_calculate_calories_invalid_intensity_is_400(make_client) -> None:
    client = make_client()

    response = client.post(
        "/api/calculate-calories",
        json={"workoutType": "yoga", "duration": 20, "intensity": "extreme"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid intensity"


def test_estimator_unavailable_is_500(make_client, unconfigured_settings) -> None:
    client = make_client(config=unconfigured_settings, with_estimator=False)

    response = client.post(
        "/api/calculate-calories",
        json={"workoutType": "running", "duration": 30, "intensity": "high"},
    )

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to calculate calories"
    assert "API key" in body["details"]

    # History stays usable without an estimator
    assert client.get("/api/workouts").json() == []


def test_workout_lifecycle(make_client, scripted_adapter) -> None:
    storage = InMemoryStorage()
    client = make_client(adapter=scripted_adapter("300", "nope"), storage=storage)

    first = client.post("/api/workouts", json={"workoutType": "Running", "duration": 30, "intensity": "high"})
    second = client.post("/api/workouts", json={"workoutType": "Yoga", "duration": 45})

    assert first.status_code == 201
    assert first.json()["calories"] == 300
    assert second.json()["calories"] == 135
    assert second.json()["intensity"] == "medium"

    listed = client.get("/api/workouts").json()
    assert [w["type"] for w in listed] == ["Running", "Yoga"]
    assert len(json.loads(storage.read("workouts"))) == 2

    stats = client.get("/api/workouts/stats").json()
    assert stats == {
        "totalWorkouts": 2,
        "totalCalories": 435,
        "totalDuration": 75,
        "avgCaloriesPerWorkout": 218,
        "avgDuration": 38,
        "mostFrequentWorkout": "Running",
    }

    deleted = client.delete(f"/api/workouts/{first.json()['id']}")
    assert deleted.json() == {"deleted": 1}
    assert [w["type"] for w in client.get("/api/workouts").json()] == ["Yoga"]


def test_delete_unknown_workout_is_not_an_error(make_client) -> None:
    client = make_client()
    response = client.delete("/api/workouts/12345")
    assert response.status_code == 200
    assert response.json() == {"deleted": 0}


def test_create_workout_rejects_fractional_minutes(make_client, scripted_adapter) -> None:
    adapter = scripted_adapter("100")
    client = make_client(adapter=adapter)

    response = client.post("/api/workouts", json={"workoutType": "Yoga", "duration": 12.5})

    assert response.status_code == 400
    assert adapter.calls == []
    assert client.get("/api/workouts").json() == []


def test_stats_empty_is_null(make_client) -> None:
    client = make_client()
    response = client.get("/api/workouts/stats")
    assert response.status_code == 200
    assert response.json() is None


def test_exports(make_client, seeded_storage, sample_records) -> None:
    client = make_client(storage=seeded_storage)

    as_json = client.get("/api/workouts/export/json")
    assert as_json.headers["content-type"].startswith("application/json")
    assert "attachment; filename=\"workout-data-" in as_json.headers["content-disposition"]
    assert [item["id"] for item in as_json.json()] == [r.id for r in sample_records]

    as_csv = client.get("/api/workouts/export/csv")
    assert as_csv.headers["content-type"].startswith("text/csv")
    assert as_csv.headers["content-disposition"].endswith('.csv"')
    lines = as_csv.text.split("\n")
    assert len(lines) == 1 + len(sample_records)
    assert lines[1] == "2026-01-10,Running,30,360,high"


def test_malformed_storage_starts_empty(make_client) -> None:
    client = make_client(storage=InMemoryStorage({"workouts": "definitely not json"}))
    assert client.get("/api/workouts").json() == []


def test_presets(make_client) -> None:
    presets = make_client().get("/api/presets").json()
    assert presets[0] == {"name": "Running", "defaultDuration": 30}
    assert len(presets) == 5


def test_create_workout_rejects_line_breaks_in_type(make_client, scripted_adapter) -> None:
    adapter = scripted_adapter("100")
    client = make_client(adapter=adapter)

    response = client.post(
        "/api/workouts",
        json={"workoutType": "Trail\nRun", "duration": 30, "intensity": "high"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid workout type"
    assert adapter.calls == []
    assert client.get("/api/workouts/export/csv").text.split("\n") == [
        "Date,Workout Type,Duration (min),Calories,Intensity",
    ]


def test_estimator_unavailable_raises_a_fresh_error_per_request(make_client, unconfigured_settings) -> None:
    client = make_client(config=unconfigured_settings, with_estimator=False)
    startup_error = client.app.state.estimator_error

    for _ in range(3):
        response = client.post(
            "/api/calculate-calories",
            json={"workoutType": "running", "duration": 30, "intensity": "high"},
        )
        assert response.status_code == 500
        assert response.json()["details"] == str(startup_error)

    assert startup_error.__traceback__ is None


def test_startup_applies_the_environment_date_locale(make_client, monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(locale, "setlocale", lambda category, name=None: calls.append((category, name)))

    make_client()

    assert (locale.LC_TIME, "") in calls


def test_startup_survives_an_unknown_locale(make_client, monkeypatch) -> None:
    def unsupported(category, name=None):
        raise locale.Error("unsupported locale setting")

    monkeypatch.setattr(locale, "setlocale", unsupported)

    assert make_client().get("/health").status_code == 200


class LoopCheckingStorage(InMemoryStorage):
    """Records, per write, whether it ran on an event loop thread."""

    def __init__(self) -> None:
        super().__init__()
        self.writes_on_loop: list[bool] = []

    def write(self, key: str, value: str) -> None:
        try:
            asyncio.get_running_loop()
            on_loop = True
        except RuntimeError:
            on_loop = False
        self.writes_on_loop.append(on_loop)
        super().write(key, value)


def test_history_writes_run_outside_the_event_loop(make_client, scripted_adapter) -> None:
    storage = LoopCheckingStorage()
    client = make_client(adapter=scripted_adapter("300"), storage=storage)

    created = client.post("/api/workouts", json={"workoutType": "Running", "duration": 30})
    client.delete(f"/api/workouts/{created.json()['id']}")

    assert storage.writes_on_loop == [False, False]
