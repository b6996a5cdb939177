"""
Admin view over the workout log table.

Fetches every row with the admin code and folds it into a commission
report. Commissions are whatever was stored on each row at insert time.
Coach names come from the listing itself; an explicit mapping overrides
them.
"""

import logging
from datetime import datetime
from typing import Any, Mapping, Optional

from ..core.plans import MEAL_PLAN_PREFIX, count_exercises
from ..core.reporting import CommissionReport, summarize_logs
from .api import ApiClient

logger = logging.getLogger(__name__)

MISSING = "-"


def _created(row: Mapping[str, Any]) -> str:
    value = row.get("created_at")
    if not value:
        return MISSING
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return str(value)


def _number(value: Any, unit: str) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return ""
    return f"{value:g}{unit}"


def _body_stats(row: Mapping[str, Any]) -> str:
    """Age / height / weight, skipping whatever is missing."""
    parts = [
        _number(row.get("client_age"), "y"),
        _number(row.get("client_height_cm"), "cm"),
        _number(row.get("client_weight_kg"), "kg"),
    ]
    return " / ".join(part for part in parts if part) or MISSING


def _meal_plan_name(course_name: Optional[str]) -> str:
    name = (course_name or "").strip()
    if name.startswith(MEAL_PLAN_PREFIX):
        name = name[len(MEAL_PLAN_PREFIX):].strip()
    return name or MISSING


def _commission(row: Mapping[str, Any]) -> str:
    value = row.get("commission_amount")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return MISSING
    return f"${value:.2f}"


def format_workout_row(row: Mapping[str, Any]) -> str:
    return " | ".join([
        _created(row),
        row.get("course_name") or MISSING,
        row.get("client_name") or MISSING,
        row.get("client_gender") or MISSING,
        _body_stats(row),
        f"{count_exercises(row.get('exercises_json'))} exercise(s)",
        _commission(row),
    ])


def format_meal_plan_row(row: Mapping[str, Any]) -> str:
    details = ", ".join(
        part for part in (row.get("client_gender") or "", _number(row.get("client_age"), "y")) if part
    )
    return " | ".join([
        _created(row),
        _meal_plan_name(row.get("course_name")),
        row.get("client_name") or MISSING,
        details or MISSING,
        _commission(row),
    ])


class AdminDashboard:
    """
    Usage:
        dashboard = AdminDashboard(api, session["code"])
        report = dashboard.refresh()
        print(report.total_commission)
    """

    def __init__(
        self,
        api: ApiClient,
        admin_code: str,
        coach_names: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._api = api
        self._admin_code = admin_code
        self._coach_names = dict(coach_names or {})
        self.rows: list[dict[str, Any]] = []
        self.report = CommissionReport()

    def refresh(self) -> CommissionReport:
        """Reload all rows and recompute the report. ApiError propagates."""
        data = self._api.list_workout_logs(self._admin_code)

        self.rows = list(data) if isinstance(data, list) else []
        self.report = summarize_logs(self.rows, self._coach_names)

        logger.debug(
            "Dashboard refreshed",
            extra={"rows": len(self.rows), "coaches": len(self.report.coaches)}
        )
        return self.report

    def reset_all(self) -> int:
        """Delete every row on the server. Returns the number deleted."""
        result = self._api.delete_all_workout_logs(self._admin_code) or {}
        self.rows = []
        self.report = CommissionReport()
        count = int(result.get("count", 0))

        logger.info("Reset all workout logs", extra={"count": count})
        return count

    def format_report(self) -> str:
        """
        Plain-text rendering of the current report.

        One header line per coach, then each of their rows under Workouts
        and Meal plans, newest first as listed.
        """
        lines = []
        for coach in self.report.coaches:
            lines.append(
                f"{coach.display_name}: {len(coach.workouts)} workout(s), "
                f"{len(coach.meal_plans)} meal plan(s), commission ${coach.commission:.2f}"
            )
            if coach.workouts:
                lines.append("  Workouts:")
                lines.extend(f"    {format_workout_row(row)}" for row in coach.workouts)
            if coach.meal_plans:
                lines.append("  Meal plans:")
                lines.extend(f"    {format_meal_plan_row(row)}" for row in coach.meal_plans)
        if not lines:
            lines.append("No workout logs yet.")
        lines.append(
            f"Total: {self.report.total_plans} plan(s), "
            f"${self.report.total_commission:.2f} commission owed"
        )
        return "\n".join(lines)
