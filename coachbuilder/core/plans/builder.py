"""
Workout and meal plan builders.

A builder holds the state of one editing session and walks it through
Idle -> Editing -> Validating -> Submitting -> Success | Failed. A failed
attempt drops back to Editing with every field intact, so the coach can
fix the problem and resubmit without retyping anything.

Validation is sequential and stops at the first problem:
name -> gender -> age -> height -> weight -> course name / meal content ->
exercise or meal-section non-emptiness.

Submitting exports the PDF first and then records the plan through the
API, mirroring what the coach sees: the download happens even if the
network call fails afterwards.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol

from ..catalog import Exercise
from ..nutrition import CalorieTargets, calculate_targets
from .documents import DocumentSection, PlanDocument, client_detail_parts, pdf_filename
from .models import DEFAULT_REPS, DEFAULT_SETS, MEAL_PLAN_PREFIX, MEAL_PLAN_SENTINEL_ID

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols (collaborators)
# ---------------------------------------------------------------------------

class PlanExporter(Protocol):
    """Turns a document into a file on disk."""

    def export(self, document: PlanDocument, filename: str) -> Path:
        ...


class WorkoutLogSink(Protocol):
    """Whatever records a finished plan (the API client in practice)."""

    def create_workout_log(self, access_code: str, payload: dict[str, Any]) -> dict[str, Any]:
        ...


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

class BuilderState(Enum):
    IDLE = "idle"
    EDITING = "editing"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


class PlanValidationError(ValueError):
    """The first failing form check, as shown to the coach."""
    pass


class BuilderBusyError(RuntimeError):
    """A submission is already in flight for this builder."""
    pass


@dataclass
class SubmissionResult:
    pdf_path: Path
    log: dict[str, Any]
    message: str


def _parse_positive(value: Any) -> Optional[float]:
    """Form text to a positive number, or None when it isn't one."""
    if isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(number) or number < 1:
        return None
    return int(number) if number.is_integer() else number


@dataclass
class ClientDetails:
    """
    The client fields shared by every builder, kept as entered.

    Numbers stay as text until validation, like the form inputs they come
    from, so a half-typed value never gets lost.
    """
    name: str = ""
    gender: str = ""
    age: str = ""
    height: str = ""
    weight: str = ""

    def validation_error(self) -> Optional[str]:
        if not self.name.strip():
            return "Client name is required"
        if not self.gender.strip():
            return "Client gender is required"
        if _parse_positive(self.age) is None:
            return "Valid client age is required"
        if _parse_positive(self.height) is None:
            return "Valid client height is required"
        if _parse_positive(self.weight) is None:
            return "Valid client weight is required"
        return None

    def payload_fields(self) -> dict[str, Any]:
        return {
            "client_name": self.name.strip(),
            "client_gender": self.gender.strip(),
            "client_age": _parse_positive(self.age),
            "client_height_cm": _parse_positive(self.height),
            "client_weight_kg": _parse_positive(self.weight),
        }

    def header_parts(self) -> list[str]:
        return client_detail_parts(
            self.gender.strip(), str(self.age).strip(),
            str(self.height).strip(), str(self.weight).strip(),
        )


# ---------------------------------------------------------------------------
# Shared builder behaviour
# ---------------------------------------------------------------------------

class _PlanBuilder(ABC):
    """State machine and submit flow common to workout and meal builders."""

    document_kind = "plan"
    success_message = "Saved"

    def __init__(self, coach_code: str, coach_name: str = "") -> None:
        self.coach_code = coach_code
        self.coach_name = coach_name
        self.client = ClientDetails()
        self.course_name = ""
        self.state = BuilderState.IDLE
        self.status = ""

    # -- editing -----------------------------------------------------------

    def _touch(self) -> None:
        if self.state is BuilderState.SUBMITTING:
            raise BuilderBusyError("Cannot edit while a submission is in flight")
        self.state = BuilderState.EDITING

    def set_client(self, **fields: Any) -> None:
        """Update any of name, gender, age, height, weight."""
        self._touch()
        for name, value in fields.items():
            if not hasattr(self.client, name):
                raise AttributeError(f"Unknown client field: {name}")
            setattr(self.client, name, "" if value is None else str(value))

    def set_course_name(self, course_name: str) -> None:
        self._touch()
        self.course_name = course_name

    def prefill_client(self, details: ClientDetails) -> None:
        """Copy fields from an assessment without overwriting what's typed."""
        self._touch()
        for name in ("name", "gender", "age", "height", "weight"):
            if not getattr(self.client, name) and getattr(details, name):
                setattr(self.client, name, getattr(details, name))

    @property
    def coach_label(self) -> str:
        return self.coach_name or self.coach_code

    # -- validation --------------------------------------------------------

    @abstractmethod
    def _content_error(self) -> Optional[str]:
        """Problem with the plan body, checked after the client fields."""

    def validate(self) -> Optional[str]:
        """First failing check, or None when the plan can be submitted."""
        error = self.client.validation_error()
        if error:
            return error
        if not self.course_name.strip():
            return "Course name is required"
        return self._content_error()

    # -- output ------------------------------------------------------------

    @abstractmethod
    def build_payload(self) -> dict[str, Any]:
        """Body for POST /api/workout-logs."""

    @abstractmethod
    def render_document(self) -> PlanDocument:
        ...

    @property
    @abstractmethod
    def pdf_filename(self) -> str:
        ...

    @abstractmethod
    def _reset_content(self) -> None:
        ...

    def reset(self) -> None:
        """Clear the form for the next client."""
        self.client = ClientDetails()
        self.course_name = ""
        self._reset_content()

    # -- submission --------------------------------------------------------

    def submit(self, exporter: PlanExporter, sink: WorkoutLogSink) -> SubmissionResult:
        """
        Validate, export the PDF, then record the plan.

        Raises:
            BuilderBusyError: a submission is already running
            PlanValidationError: a form check failed (nothing exported)
            Exception: whatever the exporter or sink raised; state is kept
        """
        if self.state is BuilderState.SUBMITTING:
            raise BuilderBusyError("A submission is already in progress")

        self.status = ""
        self.state = BuilderState.VALIDATING
        error = self.validate()
        if error:
            self.status = error
            self.state = BuilderState.EDITING
            raise PlanValidationError(error)

        self.state = BuilderState.SUBMITTING
        try:
            pdf_path = exporter.export(self.render_document(), self.pdf_filename)
            log = sink.create_workout_log(self.coach_code, self.build_payload())
        except Exception as e:
            self.state = BuilderState.FAILED
            self.status = str(e) or f"Failed to generate/save {self.document_kind}"
            logger.warning(
                "Plan submission failed",
                extra={"kind": self.document_kind, "coach_code": self.coach_code, "error": str(e)}
            )
            # back to editing with the form untouched
            self.state = BuilderState.EDITING
            raise

        logger.info(
            "Plan submitted",
            extra={"kind": self.document_kind, "coach_code": self.coach_code, "log_id": log.get("id")}
        )
        self.reset()
        self.state = BuilderState.SUCCESS
        self.status = self.success_message
        return SubmissionResult(pdf_path=pdf_path, log=log, message=self.success_message)


# ---------------------------------------------------------------------------
# Workout builder
# ---------------------------------------------------------------------------

class WorkoutBuilder(_PlanBuilder):
    """Ordered exercise selection with per-exercise sets and reps."""

    document_kind = "workout"
    success_message = "Success! PDF downloaded and Log saved."

    def __init__(self, coach_code: str, coach_name: str = "") -> None:
        super().__init__(coach_code, coach_name)
        self.workout_day: Optional[str] = None
        self.selected: list[dict[str, Any]] = []

    def _reset_content(self) -> None:
        self.workout_day = None
        self.selected = []

    def set_workout_day(self, day: Optional[str]) -> None:
        self._touch()
        self.workout_day = day or None

    @property
    def full_course_name(self) -> str:
        course = self.course_name.strip()
        if self.workout_day:
            return f"{course} - {self.workout_day}"
        return course

    # -- selection ---------------------------------------------------------

    def _index_of(self, exercise_id: str) -> int:
        for index, entry in enumerate(self.selected):
            if entry["id"] == exercise_id:
                return index
        return -1

    def is_selected(self, exercise_id: str) -> bool:
        return self._index_of(exercise_id) >= 0

    def toggle(self, exercise: Exercise) -> bool:
        """
        Add or remove an exercise. Returns True if it is now selected.

        Defaults are applied only when an exercise is first added.
        """
        self._touch()
        index = self._index_of(exercise.id)
        if index >= 0:
            del self.selected[index]
            return False
        self.selected.append({**exercise.to_dict(), "sets": DEFAULT_SETS, "reps": DEFAULT_REPS})
        return True

    def select_all(self, exercises: Iterable[Exercise]) -> None:
        self._touch()
        self.selected = [
            {**exercise.to_dict(), "sets": DEFAULT_SETS, "reps": DEFAULT_REPS}
            for exercise in exercises
        ]

    def clear(self) -> None:
        self._touch()
        self.selected = []

    def remove(self, exercise_id: str) -> None:
        """Drop an exercise if selected (used when a custom exercise is deleted)."""
        self._touch()
        self.selected = [entry for entry in self.selected if entry["id"] != exercise_id]

    def update_detail(self, exercise_id: str, field_name: str, value: Any) -> None:
        if field_name not in ("sets", "reps"):
            raise ValueError(f"Unknown exercise detail: {field_name}")
        number = _parse_positive(value)
        if number is None or not float(number).is_integer():
            raise ValueError(f"{field_name} must be a positive whole number")
        index = self._index_of(exercise_id)
        if index < 0:
            raise KeyError(f"Exercise {exercise_id} is not selected")
        self._touch()
        self.selected[index][field_name] = int(number)

    def move(self, exercise_id: str, offset: int) -> None:
        """Shift an exercise up (negative) or down the list, clamped at the ends."""
        index = self._index_of(exercise_id)
        if index < 0:
            raise KeyError(f"Exercise {exercise_id} is not selected")
        self._touch()
        target = max(0, min(len(self.selected) - 1, index + offset))
        entry = self.selected.pop(index)
        self.selected.insert(target, entry)

    # -- output ------------------------------------------------------------

    def _content_error(self) -> Optional[str]:
        if not self.selected:
            return "Select at least one exercise"
        return None

    def build_payload(self) -> dict[str, Any]:
        return {
            "coach_code": self.coach_code,
            **self.client.payload_fields(),
            "course_name": self.full_course_name,
            "exercises_json": [dict(entry) for entry in self.selected],
        }

    def render_document(self) -> PlanDocument:
        sections = [
            DocumentSection(
                heading=f"{position}. {entry['name']}",
                subheading=entry.get("muscleGroup") or None,
                lines=[f"Sets: {entry.get('sets', DEFAULT_SETS)}    Reps: {entry.get('reps', DEFAULT_REPS)}"],
            )
            for position, entry in enumerate(self.selected, start=1)
        ]
        return PlanDocument(
            title="Workout Plan",
            subtitle=f"Client: {self.client.name.strip() or '-'}",
            details=self.client.header_parts(),
            byline=f"Coach: {self.coach_label}" + (f" | {self.full_course_name}" if self.full_course_name else ""),
            sections=sections,
            empty_message="No exercises selected yet.",
        )

    @property
    def pdf_filename(self) -> str:
        return pdf_filename(self.client.name, suffix="workout")


# ---------------------------------------------------------------------------
# Meal plan builder
# ---------------------------------------------------------------------------

MEAL_SECTIONS = ("breakfast", "lunch", "dinner", "snacks")


@dataclass
class MealSections:
    breakfast: str = ""
    lunch: str = ""
    dinner: str = ""
    snacks: str = ""
    notes: str = ""

    @property
    def has_meal(self) -> bool:
        return any(getattr(self, name).strip() for name in MEAL_SECTIONS)


class MealPlanBuilder(_PlanBuilder):
    """Free-text meal sections plus an optional calorie target."""

    document_kind = "meal plan"
    success_message = "Meal plan PDF generated and logged successfully!"

    def __init__(self, coach_code: str, coach_name: str = "") -> None:
        super().__init__(coach_code, coach_name)
        self.meals = MealSections()
        self.calorie_target = ""
        self.dietary_restrictions = ""
        self.activity_level = "sedentary"
        self.goal = "maintain"
        self.last_calculation: Optional[CalorieTargets] = None

    def _reset_content(self) -> None:
        self.meals = MealSections()
        self.calorie_target = ""
        self.dietary_restrictions = ""
        self.last_calculation = None

    def set_meal(self, section: str, text: str) -> None:
        if section not in (*MEAL_SECTIONS, "notes"):
            raise ValueError(f"Unknown meal section: {section}")
        self._touch()
        setattr(self.meals, section, text)

    def set_preferences(
        self,
        activity_level: Optional[str] = None,
        goal: Optional[str] = None,
        dietary_restrictions: Optional[str] = None,
    ) -> None:
        self._touch()
        if activity_level is not None:
            self.activity_level = activity_level
        if goal is not None:
            self.goal = goal
        if dietary_restrictions is not None:
            self.dietary_restrictions = dietary_restrictions

    def set_calorie_target(self, text: str) -> None:
        self._touch()
        self.calorie_target = text

    def calculate_calories(self) -> CalorieTargets:
        """
        Run the calculator on the current client fields.

        The result is kept as last_calculation; nothing changes in the plan
        until accept_calorie_target() is called.
        """
        age = _parse_positive(self.client.age)
        height = _parse_positive(self.client.height)
        weight = _parse_positive(self.client.weight)
        if None in (age, height, weight) or not self.client.gender.strip():
            message = "Please fill in age, gender, height, and weight to calculate calories"
            self.status = message
            raise PlanValidationError(message)

        targets = calculate_targets(
            age=age,
            height_cm=height,
            weight_kg=weight,
            gender=self.client.gender,
            activity_level=self.activity_level,
            goal=self.goal,
        )
        self.last_calculation = targets
        self.status = (
            f"Calculated: {targets.calories} kcal & {targets.protein_g}g Protein "
            f"based on {targets.activity_level} activity"
        )
        return targets

    def accept_calorie_target(self) -> str:
        if self.last_calculation is None:
            raise PlanValidationError("Calculate calories before accepting a target")
        self.set_calorie_target(self.last_calculation.label)
        return self.calorie_target

    # -- output ------------------------------------------------------------

    def _content_error(self) -> Optional[str]:
        if not self.meals.has_meal:
            return "Please add at least one meal"
        return None

    def build_payload(self) -> dict[str, Any]:
        return {
            "coach_code": self.coach_code,
            **self.client.payload_fields(),
            "course_name": f"{MEAL_PLAN_PREFIX} {self.course_name.strip()}",
            "exercises_json": [{
                "id": MEAL_PLAN_SENTINEL_ID,
                "name": "Custom Meal Plan",
                "muscleGroup": "Nutrition",
                "imageUrl": "",
                "sets": 1,
                "reps": 1,
                "isCustom": True,
            }],
        }

    def render_document(self) -> PlanDocument:
        sections = []
        if self.calorie_target.strip() or self.dietary_restrictions.strip():
            lines = []
            if self.calorie_target.strip():
                lines.append(f"Daily target: {self.calorie_target.strip()}")
            if self.dietary_restrictions.strip():
                lines.append(f"Dietary restrictions: {self.dietary_restrictions.strip()}")
            sections.append(DocumentSection(heading="Nutrition Targets", lines=lines))
        for name in (*MEAL_SECTIONS, "notes"):
            text = getattr(self.meals, name).strip()
            if text:
                sections.append(DocumentSection(heading=name.capitalize(), lines=text.splitlines()))

        return PlanDocument(
            title="Meal Plan",
            subtitle=f"Client: {self.client.name.strip() or '-'}",
            details=self.client.header_parts(),
            byline=f"Coach: {self.coach_label}" + (f" | {self.course_name.strip()}" if self.course_name.strip() else ""),
            sections=sections,
            empty_message="No meals added yet.",
        )

    @property
    def pdf_filename(self) -> str:
        return pdf_filename(self.client.name, suffix="meal-plan", fallback="meal-plan")
