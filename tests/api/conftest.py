"""
Shared fixtures for the API tests.

Every test gets a fresh app in mock mode with an empty in-memory store
holding one coach.
"""

import pytest
from fastapi.testclient import TestClient

from coachbuilder.api.dependencies import get_mock_connection, reset_mock_connection
from coachbuilder.config.settings import get_settings
from coachbuilder.main import create_app

ADMIN_CODE = "ADMIN-TEST"
COACH_CODE = "COACH-123"


@pytest.fixture
def settings_env(monkeypatch):
    """Mock-mode configuration; tests may set more env vars before `client`."""
    monkeypatch.setenv("SNOWFLAKE_MOCK_MODE", "true")
    monkeypatch.setenv("ADMIN_ACCESS_CODE", ADMIN_CODE)
    monkeypatch.setenv("DEFAULT_COMMISSION_PER_WORKOUT", "2.0")
    monkeypatch.delenv("COMMISSION_OVERRIDE_ENABLED", raising=False)
    monkeypatch.delenv("MAX_REQUEST_BYTES", raising=False)
    return monkeypatch


@pytest.fixture
def mock_db(settings_env):
    reset_mock_connection()
    conn = get_mock_connection()
    conn._add_access_code(COACH_CODE, coach_name="Nasr Akram", commission_per_workout=2.5)
    yield conn
    reset_mock_connection()


@pytest.fixture
def client(settings_env, mock_db):
    get_settings.cache_clear()
    with TestClient(create_app()) as test_client:
        yield test_client
    get_settings.cache_clear()


@pytest.fixture
def coach_headers():
    return {"x-access-code": COACH_CODE}


@pytest.fixture
def admin_headers():
    return {"x-access-code": ADMIN_CODE}


@pytest.fixture
def workout_body():
    return {
        "coach_code": COACH_CODE,
        "client_name": "Jane Doe",
        "client_gender": "Female",
        "client_age": 28,
        "client_height_cm": 165,
        "client_weight_kg": 60,
        "course_name": "Strength Block",
        "exercises_json": [
            {"id": "squat", "name": "Barbell Squat", "muscleGroup": "Legs", "sets": 3, "reps": 10},
        ],
    }
