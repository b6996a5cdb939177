"""Unit tests for the admin commission report."""

import pytest

from coachbuilder.core.reporting import UNKNOWN_COACH, summarize_logs


def row(coach_code, commission=2, course_name="Block", exercises=None):
    return {
        "coach_code": coach_code,
        "commission_amount": commission,
        "course_name": course_name,
        "exercises_json": exercises if exercises is not None else [{"id": "squat"}],
    }


class TestSummarizeLogs:

    def test_empty_input(self):
        report = summarize_logs([])
        assert report.coaches == []
        assert report.total_plans == 0
        assert report.total_commission == 0

    def test_groups_and_sums_per_coach(self):
        rows = [row("A", 2), row("A", 3), row("B", 2)]

        report = summarize_logs(rows)

        assert [coach.coach_code for coach in report.coaches] == ["A", "B"]
        assert report.coach("A").commission == 5
        assert report.coach("A").plan_count == 2
        assert report.total_commission == 7
        assert report.total_plans == 3

    def test_splits_workouts_and_meal_plans(self):
        rows = [
            row("A"),
            row("A", course_name="[MEAL PLAN] Cut"),
            row("A", course_name="Cut", exercises=[{"id": "meal-plan"}]),
        ]

        coach = summarize_logs(rows).coach("A")

        assert len(coach.workouts) == 1
        assert len(coach.meal_plans) == 2

    def test_missing_coach_is_unknown(self):
        report = summarize_logs([row(None), row("")])
        assert [coach.coach_code for coach in report.coaches] == [UNKNOWN_COACH]
        assert report.coach(UNKNOWN_COACH).plan_count == 2

    def test_stored_amount_is_summed_as_is(self):
        """Rates may have changed since; the stored value is what gets paid."""
        report = summarize_logs([row("A", 0.1), row("A", 0.2), row("A", None), row("A", "5")])
        assert report.coach("A").commission == pytest.approx(0.3)

    def test_display_names(self):
        report = summarize_logs([row("COACH-123"), row("B")], {"COACH-123": "Nasr Akram"})
        assert report.coach("COACH-123").display_name == "Nasr Akram"
        assert report.coach("B").display_name == "B"

    def test_row_coach_name_used_unless_mapped(self):
        rows = [dict(row("A"), coach_name="Lina"), dict(row("B"), coach_name="Sam")]

        report = summarize_logs(rows, {"B": "Samir"})

        assert report.coach("A").display_name == "Lina"
        assert report.coach("B").display_name == "Samir"
