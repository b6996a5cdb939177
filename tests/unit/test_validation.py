"""
Unit tests for workout log submission validation.

Checks run in form order and only the first failure is reported, so most
tests start from a valid body and break one field.
"""

import math

import pytest

from coachbuilder.core.plans import (
    OwnershipError,
    WorkoutLogValidationError,
    parse_workout_log,
    resolve_commission,
)


def valid_body(**overrides):
    body = {
        "coach_code": "COACH-1",
        "client_name": "Jane Doe",
        "client_gender": "Female",
        "client_age": 28,
        "client_height_cm": 165,
        "client_weight_kg": 60,
        "course_name": "Strength Block",
        "exercises_json": [{"id": "squat", "name": "Squat", "sets": 3, "reps": 10}],
    }
    body.update(overrides)
    return body


class TestParseWorkoutLog:
    """Tests for parse_workout_log."""

    def test_valid_body_parses(self):
        log = parse_workout_log(valid_body(client_name="  Jane Doe "), "COACH-1")

        assert log.coach_code == "COACH-1"
        assert log.client_name == "Jane Doe"
        assert log.course_name == "Strength Block"
        assert log.exercise_count == 1
        assert log.commission_override is None

    def test_non_object_body_rejected(self):
        with pytest.raises(WorkoutLogValidationError, match="JSON object"):
            parse_workout_log([1, 2], "COACH-1")

    def test_first_missing_field_is_reported(self):
        """client_age comes before client_weight_kg in form order."""
        body = valid_body(client_age=None, client_weight_kg=None)

        with pytest.raises(WorkoutLogValidationError) as exc_info:
            parse_workout_log(body, "COACH-1")

        assert exc_info.value.field == "client_age"
        assert exc_info.value.message == "client_age must be a positive number"

    def test_missing_coach_code(self):
        with pytest.raises(WorkoutLogValidationError, match="coach_code is required"):
            parse_workout_log(valid_body(coach_code=""), "COACH-1")

    def test_blank_name_reported_before_gender(self):
        body = valid_body(client_name="   ", client_gender="")
        with pytest.raises(WorkoutLogValidationError, match="client_name is required"):
            parse_workout_log(body, "COACH-1")

    @pytest.mark.parametrize("value", [0, 0.5, -3, "30", True, math.inf, math.nan])
    def test_invalid_numbers_rejected(self, value):
        with pytest.raises(WorkoutLogValidationError, match="client_height_cm must be a positive number"):
            parse_workout_log(valid_body(client_height_cm=value), "COACH-1")

    def test_course_name_optional(self):
        body = valid_body()
        del body["course_name"]
        assert parse_workout_log(body, "COACH-1").course_name is None

    def test_course_name_must_be_string(self):
        with pytest.raises(WorkoutLogValidationError, match="course_name must be a string"):
            parse_workout_log(valid_body(course_name=12), "COACH-1")

    @pytest.mark.parametrize("payload", [None, [], "squat", [1, 2], {"squat": 1}])
    def test_invalid_exercise_payload(self, payload):
        with pytest.raises(WorkoutLogValidationError, match="non-empty list or a versioned day plan"):
            parse_workout_log(valid_body(exercises_json=payload), "COACH-1")

    def test_versioned_day_plan_accepted(self):
        payload = {"version": 2, "days": {"Day 1": [{"id": "squat"}], "Day 2": [{"id": "plank"}]}}
        log = parse_workout_log(valid_body(exercises_json=payload), "COACH-1")
        assert log.exercise_count == 2

    def test_empty_day_plan_rejected(self):
        payload = {"version": 2, "days": {"Day 1": []}}
        with pytest.raises(WorkoutLogValidationError):
            parse_workout_log(valid_body(exercises_json=payload), "COACH-1")


class TestOwnership:
    """A body naming another coach is refused before field validation."""

    def test_mismatched_coach_code(self):
        with pytest.raises(OwnershipError, match="coach_code must match your access code"):
            parse_workout_log(valid_body(coach_code="COACH-2"), "COACH-1")

    def test_mismatch_wins_over_invalid_fields(self):
        body = valid_body(coach_code="COACH-2", client_name="", exercises_json=None)
        with pytest.raises(OwnershipError):
            parse_workout_log(body, "COACH-1")


class TestCommissionOverride:

    def test_override_ignored_when_disabled(self):
        log = parse_workout_log(valid_body(commission_amount=5), "COACH-1")
        assert log.commission_override is None

    def test_override_honoured_when_enabled(self):
        log = parse_workout_log(valid_body(commission_amount=5), "COACH-1", allow_commission_override=True)
        assert log.commission_override == 5.0

    def test_zero_override_is_kept(self):
        """Zero is a real value, not 'unset'."""
        log = parse_workout_log(valid_body(commission_amount=0), "COACH-1", allow_commission_override=True)
        assert log.commission_override == 0.0

    def test_negative_override_rejected(self):
        with pytest.raises(WorkoutLogValidationError, match="non-negative"):
            parse_workout_log(valid_body(commission_amount=-1), "COACH-1", allow_commission_override=True)


class TestResolveCommission:

    def test_override_wins(self):
        assert resolve_commission(3.0, 2.0, override=0.0) == 0.0

    def test_configured_rate(self):
        assert resolve_commission(3.5, 2.0) == 3.5

    def test_default_when_unset(self):
        assert resolve_commission(None, 2.0) == 2.0
        assert resolve_commission(0, 2.0) == 2.0
