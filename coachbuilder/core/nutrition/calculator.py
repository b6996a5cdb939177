"""
Calorie target calculator.

Mifflin-St Jeor BMR, scaled by an activity factor to TDEE, then shifted by
a goal-dependent deficit or surplus. Pure functions: nothing here is stored,
the meal planner decides whether to accept the result.
"""

import math
from dataclasses import dataclass


ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,     # little to no exercise
    "light": 1.375,       # 1-3 days/week
    "moderate": 1.55,     # 3-5 days/week
    "active": 1.725,      # 6-7 days/week
    "veryActive": 1.9,    # physical job or twice-daily training
}


@dataclass(frozen=True)
class GoalAdjustment:
    calorie_delta: int
    protein_per_kg: float


GOALS: dict[str, GoalAdjustment] = {
    "lose": GoalAdjustment(calorie_delta=-500, protein_per_kg=2.2),
    "gain": GoalAdjustment(calorie_delta=300, protein_per_kg=2.0),
    "maintain": GoalAdjustment(calorie_delta=0, protein_per_kg=1.8),
}

# Constant term of the BMR equation. "Other" sits between the two.
GENDER_OFFSETS: dict[str, int] = {
    "male": 5,
    "female": -161,
    "other": -78,
}


@dataclass(frozen=True)
class CalorieTargets:
    """Result of a calculation, ready to be shown to the coach."""
    bmr: float
    tdee: float
    calories: int
    protein_g: int
    activity_level: str
    goal: str

    @property
    def label(self) -> str:
        """The text the meal planner writes into its calorie target field."""
        return f"{self.calories} kcal | {self.protein_g}g Protein"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_bmr(age: float, height_cm: float, weight_kg: float, gender: str) -> float:
    """Basal metabolic rate in kcal/day."""
    offset = GENDER_OFFSETS.get(gender.strip().lower(), GENDER_OFFSETS["other"])
    return 10 * weight_kg + 6.25 * height_cm - 5 * age + offset


def calculate_targets(
    age: float,
    height_cm: float,
    weight_kg: float,
    gender: str,
    activity_level: str = "sedentary",
    goal: str = "maintain",
) -> CalorieTargets:
    """
    Daily calorie and protein targets.

    Raises:
        ValueError: unknown activity level or goal, or non-positive inputs
    """
    if activity_level not in ACTIVITY_MULTIPLIERS:
        raise ValueError(f"Unknown activity level: {activity_level}")
    if goal not in GOALS:
        raise ValueError(f"Unknown goal: {goal}")
    if min(age, height_cm, weight_kg) <= 0:
        raise ValueError("Age, height and weight must be positive")

    bmr = calculate_bmr(age, height_cm, weight_kg, gender)
    tdee = bmr * ACTIVITY_MULTIPLIERS[activity_level]
    adjustment = GOALS[goal]

    return CalorieTargets(
        bmr=bmr,
        tdee=tdee,
        calories=_round_half_up(tdee + adjustment.calorie_delta),
        protein_g=_round_half_up(weight_kg * adjustment.protein_per_kg),
        activity_level=activity_level,
        goal=goal,
    )
