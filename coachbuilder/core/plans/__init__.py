"""
Workout and meal plans.

Contains the log models, submission validation, the builder state
machines and the documents they render.
"""

from .assessment import ClientAssessment
from .builder import (
    BuilderBusyError,
    BuilderState,
    ClientDetails,
    MealPlanBuilder,
    PlanValidationError,
    SubmissionResult,
    WorkoutBuilder,
)
from .documents import DocumentSection, PlanDocument
from .models import (
    MEAL_PLAN_PREFIX,
    MEAL_PLAN_SENTINEL_ID,
    NewWorkoutLog,
    WorkoutLog,
    count_exercises,
    is_meal_plan,
)
from .validation import (
    OwnershipError,
    WorkoutLogValidationError,
    parse_workout_log,
    resolve_commission,
)

__all__ = [
    "BuilderBusyError",
    "BuilderState",
    "ClientAssessment",
    "ClientDetails",
    "DocumentSection",
    "MEAL_PLAN_PREFIX",
    "MEAL_PLAN_SENTINEL_ID",
    "MealPlanBuilder",
    "NewWorkoutLog",
    "OwnershipError",
    "PlanDocument",
    "PlanValidationError",
    "SubmissionResult",
    "WorkoutBuilder",
    "WorkoutLog",
    "WorkoutLogValidationError",
    "count_exercises",
    "is_meal_plan",
    "parse_workout_log",
    "resolve_commission",
]
