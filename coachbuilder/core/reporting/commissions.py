"""
Commission report for the admin view.

A deterministic fold over the fetched log rows: partition by coach code,
split each partition into workouts and meal plans, and sum the commission
stored on each row. Rates are never looked up again here; what was fixed
at insert time is what gets paid.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from ..plans.models import is_meal_plan

UNKNOWN_COACH = "unknown"


@dataclass
class CoachSummary:
    coach_code: str
    display_name: str
    workouts: list[Mapping[str, Any]] = field(default_factory=list)
    meal_plans: list[Mapping[str, Any]] = field(default_factory=list)

    @property
    def plan_count(self) -> int:
        return len(self.workouts) + len(self.meal_plans)

    @property
    def commission(self) -> float:
        return math.fsum(_commission(row) for row in (*self.workouts, *self.meal_plans))


@dataclass
class CommissionReport:
    coaches: list[CoachSummary] = field(default_factory=list)

    @property
    def total_plans(self) -> int:
        return sum(coach.plan_count for coach in self.coaches)

    @property
    def total_commission(self) -> float:
        return math.fsum(
            _commission(row)
            for coach in self.coaches
            for row in (*coach.workouts, *coach.meal_plans)
        )

    def coach(self, coach_code: str) -> Optional[CoachSummary]:
        for summary in self.coaches:
            if summary.coach_code == coach_code:
                return summary
        return None


def _commission(row: Mapping[str, Any]) -> float:
    value = row.get("commission_amount")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def summarize_logs(
    rows: Iterable[Mapping[str, Any]],
    coach_names: Optional[Mapping[str, str]] = None,
) -> CommissionReport:
    """
    Group rows by coach and total their commissions.

    Coaches appear in the order their first row was seen, which for the
    newest-first admin listing means the most recently active coach leads.

    Args:
        rows: Log rows as returned by the listing endpoint
        coach_names: Optional code -> display name mapping; takes precedence
            over the coach_name the listing attaches to each row
    """
    coach_names = coach_names or {}
    summaries: dict[str, CoachSummary] = {}

    for row in rows:
        code = row.get("coach_code") or UNKNOWN_COACH
        summary = summaries.get(code)
        if summary is None:
            display_name = coach_names.get(code) or row.get("coach_name") or code
            summary = CoachSummary(coach_code=code, display_name=display_name)
            summaries[code] = summary

        if is_meal_plan(row.get("course_name"), row.get("exercises_json")):
            summary.meal_plans.append(row)
        else:
            summary.workouts.append(row)

    return CommissionReport(coaches=list(summaries.values()))
