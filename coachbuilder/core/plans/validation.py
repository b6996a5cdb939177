"""
Validation of workout log submissions.

Checks run in a fixed order and stop at the first failure, so the caller
always hears about the earliest problem in the form. Ownership is checked
before anything else: a body that names another coach is refused whatever
the rest of it looks like.
"""

import math
from typing import Any, Optional

from .models import DAY_PLAN_VERSION, ExercisePayload, NewWorkoutLog


class WorkoutLogValidationError(ValueError):
    """Raised for the first missing or malformed field of a submission."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class OwnershipError(PermissionError):
    """Raised when a coach submits a log under someone else's code."""
    pass


def _required_string(body: dict, field: str) -> str:
    value = body.get(field)
    if not isinstance(value, str) or not value.strip():
        raise WorkoutLogValidationError(field, f"{field} is required")
    return value.strip()


def _positive_number(body: dict, field: str) -> float:
    value = body.get(field)
    # bool is an int subclass; a checkbox value is not an age
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not math.isfinite(value)
        or value < 1
    ):
        raise WorkoutLogValidationError(field, f"{field} must be a positive number")
    return value


def _optional_string(body: dict, field: str) -> Optional[str]:
    value = body.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise WorkoutLogValidationError(field, f"{field} must be a string")
    return value.strip() or None


def validate_exercise_payload(value: Any) -> ExercisePayload:
    """
    Accept a flat ordered list of exercise records, or a versioned day plan.

    A bare mapping without a version is rejected rather than guessed at.
    """
    message = "exercises_json must be a non-empty list or a versioned day plan"

    if isinstance(value, list):
        if not value or not all(isinstance(entry, dict) for entry in value):
            raise WorkoutLogValidationError("exercises_json", message)
        return value

    if isinstance(value, dict) and value.get("version") == DAY_PLAN_VERSION:
        days = value.get("days")
        if not isinstance(days, dict) or not days:
            raise WorkoutLogValidationError("exercises_json", message)
        total = 0
        for entries in days.values():
            if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
                raise WorkoutLogValidationError("exercises_json", message)
            total += len(entries)
        if total == 0:
            raise WorkoutLogValidationError("exercises_json", message)
        return value

    raise WorkoutLogValidationError("exercises_json", message)


def parse_workout_log(
    body: Any,
    authenticated_code: str,
    allow_commission_override: bool = False,
) -> NewWorkoutLog:
    """
    Turn a raw request body into a NewWorkoutLog.

    Args:
        body: Decoded JSON body
        authenticated_code: Access code the request was authenticated with
        allow_commission_override: Whether commission_amount in the body is honoured

    Raises:
        OwnershipError: coach_code names a different coach
        WorkoutLogValidationError: first field that fails, in form order
    """
    if not isinstance(body, dict):
        raise WorkoutLogValidationError("body", "Request body must be a JSON object")

    claimed = body.get("coach_code")
    if isinstance(claimed, str) and claimed.strip() and claimed.strip() != authenticated_code:
        raise OwnershipError("coach_code must match your access code")

    coach_code = _required_string(body, "coach_code")
    client_name = _required_string(body, "client_name")
    client_gender = _required_string(body, "client_gender")
    client_age = _positive_number(body, "client_age")
    client_height_cm = _positive_number(body, "client_height_cm")
    client_weight_kg = _positive_number(body, "client_weight_kg")
    course_name = _optional_string(body, "course_name")
    exercises_json = validate_exercise_payload(body.get("exercises_json"))

    commission_override = None
    raw_commission = body.get("commission_amount")
    if allow_commission_override and raw_commission is not None:
        if (
            isinstance(raw_commission, bool)
            or not isinstance(raw_commission, (int, float))
            or not math.isfinite(raw_commission)
            or raw_commission < 0
        ):
            raise WorkoutLogValidationError(
                "commission_amount", "commission_amount must be a non-negative number"
            )
        commission_override = float(raw_commission)

    return NewWorkoutLog(
        coach_code=coach_code,
        client_name=client_name,
        client_gender=client_gender,
        client_age=client_age,
        client_height_cm=client_height_cm,
        client_weight_kg=client_weight_kg,
        exercises_json=exercises_json,
        course_name=course_name,
        commission_override=commission_override,
    )


def resolve_commission(
    configured_rate: Optional[float],
    default_rate: float,
    override: Optional[float] = None,
) -> float:
    """
    Commission fixed onto a row at insert time.

    An explicit override wins, then the coach's configured rate, then the
    application default for coaches without a rate.
    """
    if override is not None:
        return override
    if configured_rate:
        return float(configured_rate)
    return float(default_rate)
