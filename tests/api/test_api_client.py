"""
Tests for the HTTP client, run against the app through TestClient.

TestClient is an httpx.Client, so ApiClient drives the real routes.
"""

import httpx
import pytest

from coachbuilder.client import AdminDashboard, ApiClient, ApiError

ADMIN_CODE = "ADMIN-TEST"
COACH_CODE = "COACH-123"


@pytest.fixture
def api(client):
    return ApiClient(http=client)


class TestApiClient:

    def test_login(self, api):
        assert api.login(COACH_CODE)["coach_name"] == "Nasr Akram"

    def test_error_carries_server_message(self, api):
        with pytest.raises(ApiError) as exc_info:
            api.login("NOPE")

        assert exc_info.value.message == "Invalid access code"
        assert exc_info.value.status_code == 401
        assert exc_info.value.is_auth_error

    def test_create_and_list(self, api, workout_body):
        created = api.create_workout_log(COACH_CODE, workout_body)
        rows = api.list_workout_logs(ADMIN_CODE)

        assert [row["id"] for row in rows] == [created["id"]]

    def test_validation_error_is_not_auth_error(self, api, workout_body):
        workout_body["client_gender"] = ""

        with pytest.raises(ApiError) as exc_info:
            api.create_workout_log(COACH_CODE, workout_body)

        assert exc_info.value.status_code == 400
        assert not exc_info.value.is_auth_error

    def test_message_falls_back_to_status(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(502, text="Bad Gateway"))
        api = ApiClient(http=httpx.Client(transport=transport, base_url="http://api.test"))

        with pytest.raises(ApiError, match=r"Request failed \(502\)"):
            api.login(COACH_CODE)

    def test_error_field_used_when_no_detail(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"error": "Db Error: boom"}))
        api = ApiClient(http=httpx.Client(transport=transport, base_url="http://api.test"))

        with pytest.raises(ApiError, match="Db Error: boom"):
            api.list_workout_logs(ADMIN_CODE)

    def test_connection_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = ApiClient(http=httpx.Client(transport=httpx.MockTransport(refuse), base_url="http://api.test"))

        with pytest.raises(ApiError) as exc_info:
            api.login(COACH_CODE)

        assert exc_info.value.status_code is None
        assert exc_info.value.message.startswith("Request failed:")


class TestAdminDashboard:

    def test_report(self, api, workout_body, mock_db):
        mock_db._add_access_code("COACH-7", coach_name="Lina", commission_per_workout=3)
        api.create_workout_log(COACH_CODE, workout_body)
        api.create_workout_log(COACH_CODE, dict(workout_body, course_name="[MEAL PLAN] Cut"))
        api.create_workout_log("COACH-7", dict(workout_body, coach_code="COACH-7"))

        dashboard = AdminDashboard(api, ADMIN_CODE, {COACH_CODE: "Nasr Akram"})
        report = dashboard.refresh()

        assert report.total_plans == 3
        assert report.total_commission == pytest.approx(8.0)
        assert report.coach(COACH_CODE).display_name == "Nasr Akram"
        text = dashboard.format_report()
        assert "Nasr Akram: 1 workout(s), 1 meal plan(s), commission $5.00" in text
        assert text.endswith("Total: 3 plan(s), $8.00 commission owed")

    def test_names_come_from_listing(self, api, workout_body, mock_db):
        mock_db._add_access_code("COACH-7", coach_name="Lina")
        api.create_workout_log(COACH_CODE, workout_body)
        api.create_workout_log("COACH-7", dict(workout_body, coach_code="COACH-7"))

        report = AdminDashboard(api, ADMIN_CODE, {"COACH-7": "Lina B."}).refresh()

        assert report.coach(COACH_CODE).display_name == "Nasr Akram"
        assert report.coach("COACH-7").display_name == "Lina B."

    def test_report_lists_each_row(self, api, workout_body):
        workout_body["exercises_json"].append({"id": "plank", "name": "Plank"})
        api.create_workout_log(COACH_CODE, workout_body)
        api.create_workout_log(COACH_CODE, dict(workout_body, course_name="[MEAL PLAN] Cut", client_name="Sam Lee"))
        dashboard = AdminDashboard(api, ADMIN_CODE)
        dashboard.refresh()

        lines = dashboard.format_report().splitlines()

        assert lines[0] == "Nasr Akram: 1 workout(s), 1 meal plan(s), commission $5.00"
        assert lines[1] == "  Workouts:"
        assert lines[2].endswith(
            " | Strength Block | Jane Doe | Female | 28y / 165cm / 60kg | 2 exercise(s) | $2.50"
        )
        assert lines[3] == "  Meal plans:"
        assert lines[4].endswith(" | Cut | Sam Lee | Female, 28y | $2.50")
        assert "[MEAL PLAN]" not in lines[4]

    def test_reset_all(self, api, workout_body):
        api.create_workout_log(COACH_CODE, workout_body)
        dashboard = AdminDashboard(api, ADMIN_CODE)

        assert dashboard.reset_all() == 1
        assert dashboard.refresh().total_plans == 0
        assert dashboard.format_report().startswith("No workout logs yet.")
