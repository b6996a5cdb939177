"""
Client-local persistence.

Everything the client remembers between runs lives in one small JSON
document keyed like browser local storage: the logged-in session, each
coach's custom exercises, and the last client assessment. Nothing here is
ever synchronized to the server.

Reads are forgiving: a missing file, a corrupt file or a malformed value
all read as "nothing stored".
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Optional

from ..core.accounts import Role
from ..core.catalog import CUSTOM_IMAGE_URL, Exercise
from ..core.plans import ClientAssessment

logger = logging.getLogger(__name__)

SESSION_KEY = "coach_app_session"
CUSTOM_EXERCISES_KEY = "custom_exercises_{code}"
LAST_ASSESSMENT_KEY = "last_assessment_data"


class LocalStore:
    """A JSON object on disk, read and rewritten whole on every access."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(
                "Ignoring unreadable local state",
                extra={"path": str(self._path), "error": str(e)}
            )
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp_path.replace(self._path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class SessionStore:
    """
    The authenticated identity, kept until logout.

    A session is {role, code, coach_name}. Anything that doesn't look like
    one reads as logged out.
    """

    def __init__(self, store: LocalStore) -> None:
        self._store = store

    def get(self) -> Optional[dict[str, str]]:
        session = self._store.get(SESSION_KEY)
        if not isinstance(session, dict):
            return None
        if session.get("role") not in (Role.COACH.value, Role.ADMIN.value):
            return None
        if not isinstance(session.get("code"), str) or not session["code"]:
            return None
        return {
            "role": session["role"],
            "code": session["code"],
            "coach_name": str(session.get("coach_name") or ""),
        }

    def set(self, session: dict[str, Any]) -> None:
        self._store.set(SESSION_KEY, {
            "role": session.get("role"),
            "code": session.get("code"),
            "coach_name": session.get("coach_name") or "",
        })

    def clear(self) -> None:
        self._store.remove(SESSION_KEY)


class CustomExerciseStore:
    """Exercises a coach added by hand, scoped to that coach's code."""

    def __init__(
        self,
        store: LocalStore,
        coach_code: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._key = CUSTOM_EXERCISES_KEY.format(code=coach_code)
        self._clock = clock

    def list_exercises(self) -> list[Exercise]:
        raw = self._store.get(self._key, [])
        if not isinstance(raw, list):
            return []

        exercises = []
        for entry in raw:
            try:
                exercises.append(Exercise.from_dict(entry))
            except (KeyError, TypeError, AttributeError):
                logger.warning("Skipping malformed custom exercise", extra={"entry": entry})
        return exercises

    def add(self, name: str, muscle_group: str = "Chest") -> Exercise:
        name = name.strip()
        if not name:
            raise ValueError("Exercise name is required")

        existing = self.list_exercises()
        taken = {exercise.id for exercise in existing}

        millis = int(self._clock() * 1000)
        while f"custom-{millis}" in taken:
            millis += 1

        exercise = Exercise(
            id=f"custom-{millis}",
            name=name,
            muscleGroup=muscle_group,
            imageUrl=CUSTOM_IMAGE_URL,
            isCustom=True,
        )
        self._write([*existing, exercise])
        return exercise

    def remove(self, exercise_id: str) -> bool:
        existing = self.list_exercises()
        remaining = [exercise for exercise in existing if exercise.id != exercise_id]
        if len(remaining) == len(existing):
            return False
        self._write(remaining)
        return True

    def _write(self, exercises: list[Exercise]) -> None:
        self._store.set(self._key, [exercise.to_dict() for exercise in exercises])


class AssessmentStore:
    """The most recent client assessment, used to prefill the builders."""

    def __init__(self, store: LocalStore) -> None:
        self._store = store

    def get(self) -> Optional[ClientAssessment]:
        raw = self._store.get(LAST_ASSESSMENT_KEY)
        if not isinstance(raw, dict):
            return None
        return ClientAssessment.from_dict(raw)

    def set(self, assessment: ClientAssessment) -> None:
        self._store.set(LAST_ASSESSMENT_KEY, assessment.to_dict())
