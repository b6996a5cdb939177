"""Static exercise catalog plus helpers for coach-defined exercises."""

from .exercises import (
    BUILTIN_EXERCISES,
    CUSTOM_IMAGE_URL,
    MUSCLE_GROUPS,
    SUPPLEMENTAL_EXERCISES,
    WORKOUT_DAYS,
    Exercise,
    all_exercises,
    filter_by_group,
    find_exercise,
)

__all__ = [
    "BUILTIN_EXERCISES",
    "CUSTOM_IMAGE_URL",
    "MUSCLE_GROUPS",
    "SUPPLEMENTAL_EXERCISES",
    "WORKOUT_DAYS",
    "Exercise",
    "all_exercises",
    "filter_by_group",
    "find_exercise",
]
