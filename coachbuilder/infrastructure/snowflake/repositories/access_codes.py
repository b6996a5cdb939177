"""
Snowflake repository for the access code directory.

The directory is administered out of band. The API only reads from it:
to authenticate a coach and to look up the commission rate at insert time.
upsert() exists for the seeding script.
"""

import logging
from typing import Optional

from ....core.accounts import AccessCode, Role
from ..base import RepositoryError, SnowflakeConnection

logger = logging.getLogger(__name__)

ACCESS_CODE_COLUMNS = ("code", "role", "coach_name", "commission_per_workout")


class CoachNotFoundError(LookupError):
    """Raised when a coach code has no directory row."""
    pass


class AccessCodeRepository:
    """
    Read access to the access_codes table.

    - lookup: Authenticate a code for a role
    - get_commission_rate: Rate to fix onto a new log row
    - list_coaches: Display names for the admin report
    - upsert: Out-of-band administration only
    """

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def lookup(self, code: str, role: Role = Role.COACH) -> Optional[AccessCode]:
        """Return the directory entry for code and role, or None."""
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {", ".join(ACCESS_CODE_COLUMNS)}
                FROM access_codes
                WHERE code = %s
                  AND role = %s
            """, (code, role.value))

            row = cursor.fetchone()
            return self._build_access_code(row) if row else None

        except Exception as e:
            logger.error(
                "Access code lookup failed",
                extra={"role": role.value, "error": str(e)}
            )
            raise RepositoryError(str(e)) from e

        finally:
            cursor.close()

    def get_commission_rate(self, code: str) -> Optional[float]:
        """
        Configured commission for a coach.

        Raises:
            CoachNotFoundError: the code is no longer in the directory
        """
        cursor = self._conn.cursor()

        try:
            cursor.execute("""
                SELECT commission_per_workout
                FROM access_codes
                WHERE code = %s
            """, (code,))

            row = cursor.fetchone()

        except Exception as e:
            logger.error(
                "Commission rate lookup failed",
                extra={"coach_code": code, "error": str(e)}
            )
            raise RepositoryError(str(e)) from e

        finally:
            cursor.close()

        if not row:
            raise CoachNotFoundError(f"Coach {code} not found")
        return float(row[0]) if row[0] is not None else None

    def list_coaches(self) -> list[AccessCode]:
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {", ".join(ACCESS_CODE_COLUMNS)}
                FROM access_codes
                WHERE role = %s
                ORDER BY code
            """, (Role.COACH.value,))

            return [self._build_access_code(row) for row in cursor.fetchall()]

        except Exception as e:
            logger.error("Listing coaches failed", extra={"error": str(e)})
            raise RepositoryError(str(e)) from e

        finally:
            cursor.close()

    def upsert(self, access_code: AccessCode) -> None:
        """Insert or update a directory entry."""
        cursor = self._conn.cursor()

        try:
            cursor.execute("""
                MERGE INTO access_codes AS target
                USING (
                    SELECT %s AS code, %s AS role, %s AS coach_name,
                           %s AS commission_per_workout
                ) AS source
                ON target.code = source.code
                WHEN MATCHED THEN UPDATE SET
                    role = source.role,
                    coach_name = source.coach_name,
                    commission_per_workout = source.commission_per_workout
                WHEN NOT MATCHED THEN INSERT (
                    code, role, coach_name, commission_per_workout
                ) VALUES (
                    source.code, source.role, source.coach_name,
                    source.commission_per_workout
                )
            """, (
                access_code.code,
                access_code.role.value,
                access_code.coach_name,
                access_code.commission_per_workout,
            ))

            self._conn.commit()

        except Exception as e:
            logger.error(
                "Failed to upsert access code",
                extra={"role": access_code.role.value, "error": str(e)}
            )
            raise RepositoryError(str(e)) from e

        finally:
            cursor.close()

    def _build_access_code(self, row) -> AccessCode:
        code, role, coach_name, commission = row
        return AccessCode(
            code=code,
            role=Role(role),
            coach_name=coach_name or "",
            commission_per_workout=float(commission) if commission is not None else None,
        )
