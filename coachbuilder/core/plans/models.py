"""
Domain models for workout and meal plan logs.

One WorkoutLog row is written per generated plan. Meal plans share the
same table and are told apart by a course-name prefix and a sentinel entry
in the exercise payload, so both markers live here next to the model.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Union
from uuid import UUID, uuid4


MEAL_PLAN_PREFIX = "[MEAL PLAN]"
MEAL_PLAN_SENTINEL_ID = "meal-plan"

DEFAULT_SETS = 3
DEFAULT_REPS = 10

# Flat ordered list of exercise records, or a versioned per-day envelope:
# {"version": 2, "days": {"Day 1": [...], "Day 2": [...]}}
ExercisePayload = Union[list[dict[str, Any]], dict[str, Any]]
DAY_PLAN_VERSION = 2


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class NewWorkoutLog:
    """
    A validated submission, before the store has seen it.

    commission_amount is resolved by the API from the coach's rate and is
    never recomputed once the row exists.
    """
    coach_code: str
    client_name: str
    client_gender: str
    client_age: float
    client_height_cm: float
    client_weight_kg: float
    exercises_json: ExercisePayload
    course_name: Optional[str] = None
    commission_override: Optional[float] = None

    @property
    def exercise_count(self) -> int:
        return count_exercises(self.exercises_json)


@dataclass
class WorkoutLog:
    """A stored plan record."""
    coach_code: Optional[str]
    client_name: str
    client_gender: str
    client_age: Optional[float]
    client_height_cm: Optional[float]
    client_weight_kg: Optional[float]
    exercises_json: Any
    commission_amount: float = 0.0
    course_name: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def is_meal_plan(self) -> bool:
        return is_meal_plan(self.course_name, self.exercises_json)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the column names the API exposes."""
        return {
            "id": str(self.id),
            "coach_code": self.coach_code,
            "client_name": self.client_name,
            "client_gender": self.client_gender,
            "client_age": self.client_age,
            "client_height_cm": self.client_height_cm,
            "client_weight_kg": self.client_weight_kg,
            "exercises_json": self.exercises_json,
            "commission_amount": self.commission_amount,
            "course_name": self.course_name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


def is_meal_plan(course_name: Optional[str], exercises_json: Any) -> bool:
    """
    Recover the plan type of a stored row.

    Either marker is enough: the course-name prefix written by the meal
    planner, or the sentinel as the first entry of a flat payload.
    """
    if course_name and course_name.startswith(MEAL_PLAN_PREFIX):
        return True
    if isinstance(exercises_json, list) and exercises_json:
        first = exercises_json[0]
        return isinstance(first, dict) and first.get("id") == MEAL_PLAN_SENTINEL_ID
    return False


def count_exercises(exercises_json: Any) -> int:
    """Number of exercise entries in either payload shape."""
    if isinstance(exercises_json, list):
        return len(exercises_json)
    if isinstance(exercises_json, dict):
        days = exercises_json.get("days")
        if isinstance(days, dict):
            return sum(len(entries) for entries in days.values() if isinstance(entries, list))
    return 0
