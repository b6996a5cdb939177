"""
Snowflake repository for workout and meal plan logs.

Rows are appended by coaches and only ever removed by the admin bulk
delete. Bulk delete is two explicit steps (read ids, delete that id list)
instead of an unfiltered DELETE, so a row inserted between the two steps
survives the reset.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

from ....core.plans.models import NewWorkoutLog, WorkoutLog
from ..base import RepositoryError, SnowflakeConnection

logger = logging.getLogger(__name__)

WORKOUT_LOG_COLUMNS = (
    "id",
    "coach_code",
    "client_name",
    "client_gender",
    "client_age",
    "client_height_cm",
    "client_weight_kg",
    "exercises_json",
    "commission_amount",
    "course_name",
    "created_at",
)


class WorkoutLogNotFoundError(LookupError):
    """Raised when a log id has no row."""
    pass


class WorkoutLogRepository:
    """
    Repository for the workout_logs table.

    - create: Insert one row and read it back
    - get: Load a row by id
    - list_all: Every row, newest first
    - list_ids / delete_by_ids: The two halves of the admin reset
    """

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def create(self, log: NewWorkoutLog, commission_amount: float) -> WorkoutLog:
        """
        Insert a validated log with its commission fixed.

        The id and timestamp are assigned here, then the stored row is read
        back so the caller sees exactly what was persisted.
        """
        log_id = uuid4()
        created_at = datetime.now(timezone.utc)
        cursor = self._conn.cursor()

        try:
            # PARSE_JSON is not allowed inside VALUES, hence INSERT ... SELECT
            cursor.execute(f"""
                INSERT INTO workout_logs ({", ".join(WORKOUT_LOG_COLUMNS)})
                SELECT %s, %s, %s, %s, %s, %s, %s, PARSE_JSON(%s), %s, %s, %s
            """, (
                str(log_id),
                log.coach_code,
                log.client_name,
                log.client_gender,
                log.client_age,
                log.client_height_cm,
                log.client_weight_kg,
                json.dumps(log.exercises_json),
                commission_amount,
                log.course_name,
                created_at,
            ))

            self._conn.commit()

        except Exception as e:
            logger.error(
                "Failed to insert workout log",
                extra={"coach_code": log.coach_code, "error": str(e)}
            )
            raise RepositoryError(str(e)) from e

        finally:
            cursor.close()

        return self.get(log_id)

    def get(self, log_id: UUID) -> WorkoutLog:
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {", ".join(WORKOUT_LOG_COLUMNS)}
                FROM workout_logs
                WHERE id = %s
            """, (str(log_id),))

            row = cursor.fetchone()

        except Exception as e:
            logger.error(
                "Failed to load workout log",
                extra={"log_id": str(log_id), "error": str(e)}
            )
            raise RepositoryError(str(e)) from e

        finally:
            cursor.close()

        if not row:
            raise WorkoutLogNotFoundError(f"Workout log {log_id} not found")
        return self._build_log(row)

    def list_all(self) -> list[WorkoutLog]:
        """All rows, newest first. Unbounded."""
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {", ".join(WORKOUT_LOG_COLUMNS)}
                FROM workout_logs
                ORDER BY created_at DESC
            """)

            return [self._build_log(row) for row in cursor.fetchall()]

        except Exception as e:
            logger.error("Failed to list workout logs", extra={"error": str(e)})
            raise RepositoryError(str(e)) from e

        finally:
            cursor.close()

    def list_ids(self) -> list[str]:
        cursor = self._conn.cursor()

        try:
            cursor.execute("SELECT id FROM workout_logs")
            return [str(row[0]) for row in cursor.fetchall()]

        except Exception as e:
            logger.error("Failed to fetch workout log ids", extra={"error": str(e)})
            raise RepositoryError(f"Fetch failed: {e}") from e

        finally:
            cursor.close()

    def delete_by_ids(self, ids: list[str]) -> int:
        """Delete exactly the given rows. Returns the number removed."""
        if not ids:
            return 0

        cursor = self._conn.cursor()

        try:
            placeholders = ", ".join(["%s"] * len(ids))
            cursor.execute(
                f"DELETE FROM workout_logs WHERE id IN ({placeholders})",
                tuple(ids),
            )
            deleted = cursor.rowcount
            self._conn.commit()

        except Exception as e:
            logger.error(
                "Failed to delete workout logs",
                extra={"count": len(ids), "error": str(e)}
            )
            raise RepositoryError(f"Delete failed: {e}") from e

        finally:
            cursor.close()

        return deleted if deleted is not None and deleted >= 0 else len(ids)

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    def _build_log(self, row) -> WorkoutLog:
        values = dict(zip(WORKOUT_LOG_COLUMNS, row))
        return WorkoutLog(
            id=UUID(str(values["id"])),
            coach_code=values["coach_code"],
            client_name=values["client_name"] or "",
            client_gender=values["client_gender"] or "",
            client_age=self._number(values["client_age"]),
            client_height_cm=self._number(values["client_height_cm"]),
            client_weight_kg=self._number(values["client_weight_kg"]),
            exercises_json=self._parse_variant_json(values["exercises_json"]),
            commission_amount=self._number(values["commission_amount"]) or 0.0,
            course_name=values["course_name"],
            created_at=values["created_at"],
        )

    @staticmethod
    def _number(value) -> Optional[float]:
        """NUMBER columns come back as Decimal from the connector."""
        if value is None:
            return None
        number = float(value)
        return int(number) if number.is_integer() else number

    def _parse_variant_json(self, variant_data) -> Any:
        """
        Parse Snowflake VARIANT data that might be a string or already parsed.

        snowflake-connector-python returns VARIANT as a JSON string; the mock
        connection hands back the parsed value.
        """
        if variant_data is None:
            return None

        if isinstance(variant_data, str):
            try:
                return json.loads(variant_data)
            except json.JSONDecodeError as e:
                logger.error(
                    "Failed to parse VARIANT JSON string",
                    extra={"variant_data": variant_data[:100], "error": str(e)}
                )
                return None

        return variant_data
