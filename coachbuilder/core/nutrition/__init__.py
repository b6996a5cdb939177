"""Calorie and protein targets for meal plans."""

from .calculator import (
    ACTIVITY_MULTIPLIERS,
    GOALS,
    CalorieTargets,
    calculate_bmr,
    calculate_targets,
)

__all__ = [
    "ACTIVITY_MULTIPLIERS",
    "GOALS",
    "CalorieTargets",
    "calculate_bmr",
    "calculate_targets",
]
