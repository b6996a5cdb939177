"""
Unit tests for the domain models.

These tests verify the core business logic without touching
external services (no API calls, no database, no file system).

Testing philosophy:
- Test behavior, not implementation
- Each test should have a clear "given/when/then" structure
- Use descriptive names that explain what we're testing
- Prefer real objects over mocks where practical
"""

from datetime import datetime, timezone
from uuid import UUID

import pytest

from coachbuilder.core.accounts import AccessCode, AccessContext, Role
from coachbuilder.core.plans.models import (
    MEAL_PLAN_PREFIX,
    NewWorkoutLog,
    WorkoutLog,
    count_exercises,
    is_meal_plan,
)


# ---------------------------------------------------------------------------
# Access Tests
# ---------------------------------------------------------------------------

class TestAccessCode:
    """Tests for directory entries."""

    def test_defaults_to_coach_role(self):
        entry = AccessCode(code="COACH-1")
        assert entry.role is Role.COACH
        assert entry.commission_per_workout is None

    def test_rejects_blank_code(self):
        """A blank code would authenticate any request without a header."""
        with pytest.raises(ValueError, match="cannot be empty"):
            AccessCode(code="   ")


class TestAccessContext:
    """Tests for the per-request identity."""

    def test_coach_context_carries_name(self):
        ctx = AccessContext.for_coach(AccessCode(code="COACH-1", coach_name="Nasr"))
        assert ctx.role is Role.COACH
        assert ctx.code == "COACH-1"
        assert ctx.coach_name == "Nasr"
        assert not ctx.is_admin

    def test_admin_context(self):
        ctx = AccessContext.for_admin("ADMIN-99")
        assert ctx.is_admin
        assert ctx.coach_name == ""


# ---------------------------------------------------------------------------
# Plan Type Tests
# ---------------------------------------------------------------------------

class TestIsMealPlan:
    """Meal plans share the log table and are recognised by either marker."""

    def test_course_prefix_marks_meal_plan(self):
        assert is_meal_plan(f"{MEAL_PLAN_PREFIX} Cut", [{"id": "squat"}])

    def test_sentinel_entry_marks_meal_plan(self):
        assert is_meal_plan("Cut", [{"id": "meal-plan"}])

    def test_workout_is_not_meal_plan(self):
        assert not is_meal_plan("Strength", [{"id": "squat"}])

    def test_missing_course_and_empty_payload(self):
        assert not is_meal_plan(None, [])
        assert not is_meal_plan(None, None)

    def test_day_plan_envelope_is_workout(self):
        payload = {"version": 2, "days": {"Day 1": [{"id": "meal-plan"}]}}
        assert not is_meal_plan("Block", payload)


class TestCountExercises:

    def test_flat_list(self):
        assert count_exercises([{"id": "a"}, {"id": "b"}]) == 2

    def test_day_plan(self):
        payload = {"version": 2, "days": {"Day 1": [{"id": "a"}], "Day 2": [{"id": "b"}, {"id": "c"}]}}
        assert count_exercises(payload) == 3

    def test_unknown_shape(self):
        assert count_exercises("nope") == 0


# ---------------------------------------------------------------------------
# Log Tests
# ---------------------------------------------------------------------------

class TestWorkoutLog:
    """Tests for stored log rows."""

    def test_new_log_counts_exercises(self):
        log = NewWorkoutLog(
            coach_code="COACH-1",
            client_name="Jane",
            client_gender="Female",
            client_age=28,
            client_height_cm=165,
            client_weight_kg=60,
            exercises_json=[{"id": "squat"}, {"id": "plank"}],
        )
        assert log.exercise_count == 2

    def test_to_dict_uses_api_field_names(self):
        created = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        log = WorkoutLog(
            coach_code="COACH-1",
            client_name="Jane",
            client_gender="Female",
            client_age=28,
            client_height_cm=165,
            client_weight_kg=60,
            exercises_json=[{"id": "squat", "sets": 3, "reps": 10}],
            commission_amount=2.0,
            course_name="Block",
            created_at=created,
        )

        data = log.to_dict()

        assert UUID(data["id"]) == log.id
        assert data["created_at"] == "2026-01-02T03:04:05+00:00"
        assert data["exercises_json"] == [{"id": "squat", "sets": 3, "reps": 10}]
        assert data["commission_amount"] == 2.0
        assert not log.is_meal_plan
