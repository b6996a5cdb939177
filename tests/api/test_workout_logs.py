"""
API tests for /api/workout-logs.

Covers coach authentication and ownership, submission validation,
commission resolution, and the admin list and bulk delete.
"""

import pytest
from fastapi.testclient import TestClient

from coachbuilder.api.dependencies import get_access_code_repository
from coachbuilder.config.settings import get_settings
from coachbuilder.infrastructure.snowflake.base import RepositoryError
from coachbuilder.infrastructure.snowflake.repositories import AccessCodeRepository, CoachNotFoundError
from coachbuilder.main import create_app

COACH_CODE = "COACH-123"


@pytest.fixture
def make_client(settings_env, mock_db):
    """Build an app after extra env vars are set (settings are read at creation)."""
    clients = []

    def _make(**env):
        for name, value in env.items():
            settings_env.setenv(name, value)
        get_settings.cache_clear()
        test_client = TestClient(create_app())
        clients.append(test_client)
        return test_client

    yield _make

    for test_client in clients:
        test_client.close()
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# POST /api/workout-logs
# ---------------------------------------------------------------------------

class TestCreateWorkoutLog:
    """Tests for recording a plan."""

    def test_creates_row_with_coach_commission(self, client, coach_headers, workout_body):
        response = client.post("/api/workout-logs", json=workout_body, headers=coach_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["id"]
        assert data["coach_code"] == COACH_CODE
        assert data["client_name"] == "Jane Doe"
        assert data["commission_amount"] == 2.5
        assert data["exercises_json"] == workout_body["exercises_json"]
        assert data["course_name"] == "Strength Block"
        assert data["coach_name"] == "Nasr Akram"
        assert data["created_at"]

    def test_default_commission_when_rate_unset(self, client, mock_db, workout_body):
        mock_db._add_access_code("COACH-9", coach_name="New Coach")
        workout_body["coach_code"] = "COACH-9"

        response = client.post("/api/workout-logs", json=workout_body, headers={"x-access-code": "COACH-9"})

        assert response.status_code == 200
        assert response.json()["commission_amount"] == 2.0

    def test_body_commission_ignored_by_default(self, client, coach_headers, workout_body):
        workout_body["commission_amount"] = 100

        response = client.post("/api/workout-logs", json=workout_body, headers=coach_headers)

        assert response.json()["commission_amount"] == 2.5

    def test_body_commission_honoured_when_enabled(self, make_client, coach_headers, workout_body):
        client = make_client(COMMISSION_OVERRIDE_ENABLED="true")
        workout_body["commission_amount"] = 0

        response = client.post("/api/workout-logs", json=workout_body, headers=coach_headers)

        assert response.status_code == 200
        assert response.json()["commission_amount"] == 0

    def test_versioned_day_plan(self, client, coach_headers, workout_body):
        workout_body["exercises_json"] = {"version": 2, "days": {"Day 1": [{"id": "squat"}]}}

        response = client.post("/api/workout-logs", json=workout_body, headers=coach_headers)

        assert response.status_code == 200
        assert response.json()["exercises_json"]["days"]["Day 1"] == [{"id": "squat"}]

    def test_missing_access_code(self, client, workout_body):
        response = client.post("/api/workout-logs", json=workout_body)

        assert response.status_code == 401
        assert response.json()["detail"] == "Missing access code"

    def test_invalid_access_code(self, client, workout_body):
        response = client.post("/api/workout-logs", json=workout_body, headers={"x-access-code": "NOPE"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid coach code"

    def test_admin_code_cannot_submit(self, client, admin_headers, workout_body):
        response = client.post("/api/workout-logs", json=workout_body, headers=admin_headers)
        assert response.status_code == 401

    def test_other_coach_code_forbidden(self, client, coach_headers, workout_body):
        workout_body["coach_code"] = "COACH-999"

        response = client.post("/api/workout-logs", json=workout_body, headers=coach_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "coach_code must match your access code"

    def test_first_invalid_field_reported(self, client, coach_headers, workout_body):
        workout_body["client_age"] = 0
        workout_body["exercises_json"] = []

        response = client.post("/api/workout-logs", json=workout_body, headers=coach_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "client_age must be a positive number"

    def test_non_object_body(self, client, coach_headers):
        response = client.post("/api/workout-logs", json=["not", "an", "object"], headers=coach_headers)
        assert response.status_code == 400

    def test_malformed_json_body(self, client, coach_headers):
        response = client.post(
            "/api/workout-logs",
            content=b'{"coach_code": ',
            headers={**coach_headers, "content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Request body must be a JSON object"

    def test_malformed_body_without_code_is_unauthorized(self, client):
        response = client.post(
            "/api/workout-logs",
            content=b"{bad",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Missing access code"

    def test_nothing_stored_on_validation_failure(self, client, mock_db, coach_headers, workout_body):
        workout_body["client_name"] = ""
        client.post("/api/workout-logs", json=workout_body, headers=coach_headers)
        assert mock_db._storage["workout_logs"] == {}

    def test_coach_removed_after_authentication(self, client, mock_db, coach_headers, workout_body):
        class VanishingCoachRepository(AccessCodeRepository):
            def get_commission_rate(self, code):
                raise CoachNotFoundError(code)

        client.app.dependency_overrides[get_access_code_repository] = (
            lambda: VanishingCoachRepository(mock_db)
        )

        response = client.post("/api/workout-logs", json=workout_body, headers=coach_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid coach code"

    def test_directory_failure_is_500(self, client, mock_db, coach_headers, workout_body):
        class BrokenRepository(AccessCodeRepository):
            def lookup(self, code, role=None):
                raise RepositoryError("warehouse suspended")

        client.app.dependency_overrides[get_access_code_repository] = (
            lambda: BrokenRepository(mock_db)
        )

        response = client.post("/api/workout-logs", json=workout_body, headers=coach_headers)

        assert response.status_code == 500
        assert response.json()["detail"] == "warehouse suspended"

    def test_oversized_body_rejected(self, make_client, coach_headers, workout_body):
        client = make_client(MAX_REQUEST_BYTES="1024")
        workout_body["client_name"] = "x" * 2048

        response = client.post("/api/workout-logs", json=workout_body, headers=coach_headers)

        assert response.status_code == 413


# ---------------------------------------------------------------------------
# GET / DELETE /api/workout-logs
# ---------------------------------------------------------------------------

class TestAdminEndpoints:
    """Tests for the admin list and bulk delete."""

    def _post(self, client, coach_headers, workout_body, name):
        body = dict(workout_body, client_name=name)
        assert client.post("/api/workout-logs", json=body, headers=coach_headers).status_code == 200

    def test_list_requires_admin(self, client, coach_headers):
        assert client.get("/api/workout-logs").status_code == 401

        response = client.get("/api/workout-logs", headers=coach_headers)
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid admin code"

    def test_list_empty(self, client, admin_headers):
        response = client.get("/api/workout-logs", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == []

    def test_list_newest_first(self, client, admin_headers, coach_headers, workout_body):
        for name in ("First", "Second", "Third"):
            self._post(client, coach_headers, workout_body, name)

        rows = client.get("/api/workout-logs", headers=admin_headers).json()

        assert [row["client_name"] for row in rows] == ["Third", "Second", "First"]
        assert all(row["commission_amount"] == 2.5 for row in rows)

    def test_exercise_list_kept_in_order(self, client, admin_headers, coach_headers, workout_body):
        exercises = [
            {"id": "plank", "name": "Plank", "muscleGroup": "Core", "sets": 3, "reps": 1},
            {"id": "squat", "name": "Barbell Squat", "muscleGroup": "Legs", "sets": 5, "reps": 5},
            {"id": "bench-press", "name": "Bench Press", "muscleGroup": "Chest", "sets": 4, "reps": 8},
            {"id": "deadlift", "name": "Deadlift", "muscleGroup": "Back", "sets": 1, "reps": 3},
        ]
        workout_body["exercises_json"] = exercises
        self._post(client, coach_headers, workout_body, "Ordered")

        [row] = client.get("/api/workout-logs", headers=admin_headers).json()

        assert row["exercises_json"] == exercises

    def test_list_includes_coach_names(self, client, mock_db, admin_headers, coach_headers, workout_body):
        self._post(client, coach_headers, workout_body, "Named")
        mock_db._storage["workout_logs"]["orphan"] = {
            **next(iter(mock_db._storage["workout_logs"].values())),
            "id": "orphan",
            "coach_code": "COACH-GONE",
        }

        rows = client.get("/api/workout-logs", headers=admin_headers).json()

        names = {row["coach_code"]: row["coach_name"] for row in rows}
        assert names == {COACH_CODE: "Nasr Akram", "COACH-GONE": None}

    def test_delete_requires_admin(self, client, coach_headers):
        assert client.delete("/api/workout-logs", headers=coach_headers).status_code == 401

    def test_delete_all_is_idempotent(self, client, admin_headers, coach_headers, workout_body):
        self._post(client, coach_headers, workout_body, "First")
        self._post(client, coach_headers, workout_body, "Second")

        first = client.delete("/api/workout-logs", headers=admin_headers)
        second = client.delete("/api/workout-logs", headers=admin_headers)

        assert first.json() == {"deleted": True, "count": 2}
        assert second.json() == {"deleted": True, "count": 0}
        assert client.get("/api/workout-logs", headers=admin_headers).json() == []
