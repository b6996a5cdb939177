"""
Command line client for coaches and the admin.

Each page of the builder has a command here. Plans are described in a
small JSON file, built and validated locally, exported to PDF and then
recorded through the API.

Usage:
    coachbuilder login COACH-123
    coachbuilder catalog --group Chest
    coachbuilder workout plan.json
    coachbuilder calories --age 30 --gender male --height 180 --weight 80
    coachbuilder admin summary

Plan file for `workout`:
    {
      "client": {"name": "Jane Doe", "gender": "Female", "age": 28,
                 "height": 165, "weight": 60},
      "course_name": "Strength Block",
      "workout_day": "Leg Day",
      "exercises": ["squat", {"id": "deadlift", "sets": 5, "reps": 5}]
    }

Plan file for `meal-plan`:
    {
      "client": {...},
      "course_name": "Cut",
      "meals": {"breakfast": "Oats", "lunch": "Chicken & rice"},
      "activity_level": "moderate",
      "goal": "lose",
      "calculate_calories": true
    }

Either file may set "use_last_assessment": true to fill blank client
fields from the most recent `assessment`.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from ..config.settings import Settings, get_settings
from ..core.catalog import MUSCLE_GROUPS, WORKOUT_DAYS, all_exercises, filter_by_group, find_exercise
from ..core.nutrition import ACTIVITY_MULTIPLIERS, GOALS, calculate_targets
from ..core.plans import ClientAssessment, MealPlanBuilder, PlanValidationError, WorkoutBuilder
from ..infrastructure.pdf import PdfExporter, PdfExportError
from .api import ApiClient, ApiError
from .dashboard import AdminDashboard
from .storage import AssessmentStore, CustomExerciseStore, LocalStore, SessionStore

logger = logging.getLogger(__name__)


class CliError(Exception):
    """A user-facing failure; the message is printed and the exit code is 1."""
    pass


class CliContext:
    """Everything a command needs, built once from settings and flags."""

    def __init__(
        self,
        settings: Settings,
        api: Optional[ApiClient] = None,
        state_path: Optional[Path] = None,
        output_dir: Optional[Path] = None,
    ) -> None:
        self.settings = settings
        self.store = LocalStore(state_path or settings.client_state_path)
        self.sessions = SessionStore(self.store)
        self.assessments = AssessmentStore(self.store)
        self.output_dir = Path(output_dir or settings.pdf_output_dir)
        self._api = api

    @property
    def api(self) -> ApiClient:
        if self._api is None:
            self._api = ApiClient(self.settings.api_base_url)
        return self._api

    def exporter(self) -> PdfExporter:
        return PdfExporter(self.output_dir)

    def require_session(self, role: str) -> dict[str, str]:
        session = self.sessions.get()
        if session is None or session["role"] != role:
            article = "an" if role == "admin" else "a"
            raise CliError(f"Please log in with {article} {role} code first")
        return session

    def custom_exercises(self, coach_code: str) -> CustomExerciseStore:
        return CustomExerciseStore(self.store, coach_code)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _read_plan_file(path: str) -> dict[str, Any]:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise CliError(f"Cannot find {path}")
    except ValueError as e:
        raise CliError(f"{path} is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise CliError(f"{path} must contain a JSON object")
    return data


def _apply_client(ctx: CliContext, builder, data: dict[str, Any]) -> None:
    client = data.get("client") or {}
    if not isinstance(client, dict):
        raise CliError("client must be an object")
    builder.set_client(**{
        name: client[name]
        for name in ("name", "gender", "age", "height", "weight")
        if client.get(name) is not None
    })
    builder.set_course_name(str(data.get("course_name") or ""))

    if data.get("use_last_assessment"):
        assessment = ctx.assessments.get()
        if assessment is None:
            raise CliError("No saved assessment to prefill from")
        builder.prefill_client(assessment.client_details())


def _submit(ctx: CliContext, builder) -> int:
    try:
        result = builder.submit(ctx.exporter(), ctx.api)
    except PlanValidationError as e:
        raise CliError(str(e))
    except PdfExportError as e:
        raise CliError(f"PDF export failed: {e}")

    print(result.message)
    print(f"PDF: {result.pdf_path}")
    print(f"Log id: {result.log.get('id')} (commission ${float(result.log.get('commission_amount') or 0):.2f})")
    return 0


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_login(ctx: CliContext, args: argparse.Namespace) -> int:
    session = ctx.api.login(args.code)
    ctx.sessions.set(session)
    if session.get("role") == "admin":
        print("Logged in as admin")
    else:
        print(f"Logged in as coach {session.get('coach_name') or session.get('code')}")
    return 0


def cmd_logout(ctx: CliContext, args: argparse.Namespace) -> int:
    ctx.sessions.clear()
    print("Logged out")
    return 0


def cmd_whoami(ctx: CliContext, args: argparse.Namespace) -> int:
    session = ctx.sessions.get()
    if session is None:
        print("Not logged in")
        return 1
    label = session["coach_name"] or session["code"]
    print(f"{session['role']}: {label} ({session['code']})")
    return 0


def cmd_catalog(ctx: CliContext, args: argparse.Namespace) -> int:
    session = ctx.sessions.get()
    custom = []
    if session and session["role"] == "coach":
        custom = ctx.custom_exercises(session["code"]).list_exercises()

    for exercise in filter_by_group(all_exercises(custom), args.group):
        marker = " [custom]" if exercise.isCustom else ""
        print(f"{exercise.id:<24} {exercise.name:<32} {exercise.muscleGroup}{marker}")
    return 0


def cmd_custom_exercise(ctx: CliContext, args: argparse.Namespace) -> int:
    session = ctx.require_session("coach")
    store = ctx.custom_exercises(session["code"])

    if args.action == "add":
        try:
            exercise = store.add(args.name, args.group)
        except ValueError as e:
            raise CliError(str(e))
        print(f"Added {exercise.name} as {exercise.id}")
    elif args.action == "remove":
        if not store.remove(args.id):
            raise CliError(f"No custom exercise {args.id}")
        print(f"Removed {args.id}")
    else:
        exercises = store.list_exercises()
        if not exercises:
            print("No custom exercises")
        for exercise in exercises:
            print(f"{exercise.id:<24} {exercise.name:<32} {exercise.muscleGroup}")
    return 0


def cmd_workout(ctx: CliContext, args: argparse.Namespace) -> int:
    session = ctx.require_session("coach")
    data = _read_plan_file(args.file)
    custom = ctx.custom_exercises(session["code"]).list_exercises()

    builder = WorkoutBuilder(session["code"], session["coach_name"])
    _apply_client(ctx, builder, data)

    day = data.get("workout_day")
    if day and day not in WORKOUT_DAYS:
        raise CliError(f"Unknown workout day: {day}. Choose from {', '.join(WORKOUT_DAYS)}")
    builder.set_workout_day(day)

    for item in data.get("exercises") or []:
        entry = {"id": item} if isinstance(item, str) else item
        if not isinstance(entry, dict) or "id" not in entry:
            raise CliError(f"Invalid exercise entry: {item!r}")
        exercise = find_exercise(str(entry["id"]), custom)
        if exercise is None:
            raise CliError(f"Unknown exercise: {entry['id']}")
        if not builder.is_selected(exercise.id):
            builder.toggle(exercise)
        try:
            for field_name in ("sets", "reps"):
                if field_name in entry:
                    builder.update_detail(exercise.id, field_name, entry[field_name])
        except ValueError as e:
            raise CliError(f"{exercise.id}: {e}")

    return _submit(ctx, builder)


def cmd_meal_plan(ctx: CliContext, args: argparse.Namespace) -> int:
    session = ctx.require_session("coach")
    data = _read_plan_file(args.file)

    builder = MealPlanBuilder(session["code"], session["coach_name"])
    _apply_client(ctx, builder, data)

    meals = data.get("meals") or {}
    if not isinstance(meals, dict):
        raise CliError("meals must be an object")
    try:
        for section, text in meals.items():
            builder.set_meal(section, str(text or ""))
        builder.set_preferences(
            activity_level=data.get("activity_level"),
            goal=data.get("goal"),
            dietary_restrictions=data.get("dietary_restrictions"),
        )
        if data.get("calculate_calories"):
            builder.calculate_calories()
            print(builder.status)
            builder.accept_calorie_target()
        elif data.get("calorie_target"):
            builder.set_calorie_target(str(data["calorie_target"]))
    except ValueError as e:
        raise CliError(str(e))

    return _submit(ctx, builder)


def cmd_calories(ctx: CliContext, args: argparse.Namespace) -> int:
    try:
        targets = calculate_targets(
            age=args.age,
            height_cm=args.height,
            weight_kg=args.weight,
            gender=args.gender,
            activity_level=args.activity,
            goal=args.goal,
        )
    except ValueError as e:
        raise CliError(str(e))

    print(f"BMR: {targets.bmr:g} kcal")
    print(f"TDEE: {targets.tdee:g} kcal")
    print(f"Target: {targets.label}")
    return 0


def cmd_assessment(ctx: CliContext, args: argparse.Namespace) -> int:
    assessment = ClientAssessment.from_dict(_read_plan_file(args.file))
    try:
        assessment.validate()
    except PlanValidationError as e:
        raise CliError(str(e))

    session = ctx.sessions.get()
    coach_label = (session["coach_name"] or session["code"]) if session else ""

    # Saved first so the builders can prefill even if the export fails
    ctx.assessments.set(assessment)
    try:
        path = ctx.exporter().export(assessment.render_document(coach_label), assessment.pdf_filename)
    except PdfExportError as e:
        raise CliError(f"PDF export failed: {e}")

    print("Assessment saved")
    print(f"PDF: {path}")
    return 0


def cmd_admin(ctx: CliContext, args: argparse.Namespace) -> int:
    session = ctx.require_session("admin")
    dashboard = AdminDashboard(ctx.api, session["code"])

    if args.action == "reset":
        if not args.yes:
            raise CliError("This permanently deletes all workout logs. Re-run with --yes to confirm.")
        count = dashboard.reset_all()
        print(f"Deleted {count} workout log(s)")
        return 0

    dashboard.refresh()
    print(dashboard.format_report())
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="coachbuilder", description="Coach Builder command line client")
    parser.add_argument("--api-url", help="API base URL (default: API_BASE_URL setting)")
    parser.add_argument("--state-file", type=Path, help="Local state file (default: CLIENT_STATE_PATH setting)")
    parser.add_argument("--output-dir", type=Path, help="Where PDFs are written (default: PDF_OUTPUT_DIR setting)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Log in with an access code")
    login.add_argument("code")
    login.set_defaults(handler=cmd_login)

    commands.add_parser("logout", help="Forget the stored session").set_defaults(handler=cmd_logout)
    commands.add_parser("whoami", help="Show the stored session").set_defaults(handler=cmd_whoami)

    catalog = commands.add_parser("catalog", help="List exercises")
    catalog.add_argument("--group", default="All", choices=MUSCLE_GROUPS)
    catalog.set_defaults(handler=cmd_catalog)

    custom = commands.add_parser("custom-exercise", help="Manage your custom exercises")
    custom_actions = custom.add_subparsers(dest="action", required=True)
    custom_add = custom_actions.add_parser("add")
    custom_add.add_argument("name")
    custom_add.add_argument("--group", default="Chest", choices=MUSCLE_GROUPS[1:])
    custom_remove = custom_actions.add_parser("remove")
    custom_remove.add_argument("id")
    custom_actions.add_parser("list")
    custom.set_defaults(handler=cmd_custom_exercise)

    workout = commands.add_parser("workout", help="Build, export and log a workout plan")
    workout.add_argument("file")
    workout.set_defaults(handler=cmd_workout)

    meal_plan = commands.add_parser("meal-plan", help="Build, export and log a meal plan")
    meal_plan.add_argument("file")
    meal_plan.set_defaults(handler=cmd_meal_plan)

    calories = commands.add_parser("calories", help="Calorie and protein targets")
    calories.add_argument("--age", type=float, required=True)
    calories.add_argument("--gender", required=True)
    calories.add_argument("--height", type=float, required=True, help="cm")
    calories.add_argument("--weight", type=float, required=True, help="kg")
    calories.add_argument("--activity", default="sedentary", choices=list(ACTIVITY_MULTIPLIERS))
    calories.add_argument("--goal", default="maintain", choices=list(GOALS))
    calories.set_defaults(handler=cmd_calories)

    assessment = commands.add_parser("assessment", help="Export a client assessment")
    assessment.add_argument("file")
    assessment.set_defaults(handler=cmd_assessment)

    admin = commands.add_parser("admin", help="Admin dashboard")
    admin_actions = admin.add_subparsers(dest="action", required=True)
    admin_actions.add_parser("summary")
    admin_reset = admin_actions.add_parser("reset")
    admin_reset.add_argument("--yes", action="store_true")
    admin.set_defaults(handler=cmd_admin)

    return parser


def main(argv: Optional[list[str]] = None, api: Optional[ApiClient] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    settings = get_settings()
    if args.api_url:
        settings = settings.model_copy(update={"api_base_url": args.api_url})

    ctx = CliContext(settings, api=api, state_path=args.state_file, output_dir=args.output_dir)

    try:
        return args.handler(ctx, args)
    except ApiError as e:
        if e.is_auth_error:
            # Same as the web client bouncing back to the login page
            ctx.sessions.clear()
            print(f"Error: {e.message}. Please log in again.", file=sys.stderr)
        else:
            print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except CliError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
