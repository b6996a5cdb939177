"""
Workout log endpoints.

Coaches append one row per generated plan. The admin reads every row and
can wipe the table. Rows are never updated.

Endpoints:
- POST /api/workout-logs: Record a plan (coach code)
- GET /api/workout-logs: All rows, newest first (admin code)
- DELETE /api/workout-logs: Delete every row (admin code)
"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel

from ...core.plans import (
    OwnershipError,
    WorkoutLog,
    WorkoutLogValidationError,
    parse_workout_log,
    resolve_commission,
)
from ...infrastructure.snowflake.base import RepositoryError
from ...infrastructure.snowflake.repositories import CoachNotFoundError
from ..dependencies import (
    AccessCodeRepositoryDep,
    AdminContext,
    CoachContext,
    SettingsDep,
    WorkoutLogRepositoryDep,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class WorkoutLogResponse(BaseModel):
    """A stored row, as returned to clients."""
    id: str
    coach_code: Optional[str] = None
    client_name: str
    client_gender: str
    client_age: Optional[float] = None
    client_height_cm: Optional[float] = None
    client_weight_kg: Optional[float] = None
    course_name: Optional[str] = None
    exercises_json: Any = None
    commission_amount: float
    created_at: datetime
    coach_name: Optional[str] = None

    @classmethod
    def from_log(cls, log: WorkoutLog, coach_name: Optional[str] = None) -> "WorkoutLogResponse":
        return cls(**log.to_dict(), coach_name=coach_name)


class DeleteAllResponse(BaseModel):
    deleted: bool
    count: int


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=WorkoutLogResponse,
    summary="Record a generated plan",
    responses={
        400: {"description": "Validation failed or coach no longer exists"},
        401: {"description": "Missing or invalid coach code"},
        403: {"description": "coach_code does not match the access code"},
        500: {"description": "Store error"},
    },
)
async def create_workout_log(
    coach: CoachContext,
    settings: SettingsDep,
    access_codes: AccessCodeRepositoryDep,
    workout_logs: WorkoutLogRepositoryDep,
    request: Request,
) -> WorkoutLogResponse:
    """
    Validate a submission and insert it with its commission fixed.

    The body is read only once the coach is authenticated, so a bad code
    is a 401 whatever was sent. The first failing field is reported; later
    fields are not checked.
    """
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body must be a JSON object",
        )

    try:
        new_log = parse_workout_log(
            payload,
            authenticated_code=coach.code,
            allow_commission_override=settings.commission_override_enabled,
        )
    except OwnershipError as e:
        logger.warning(
            "Workout log submitted under another coach's code",
            extra={"coach_code": coach.code}
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except WorkoutLogValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    try:
        rate = access_codes.get_commission_rate(new_log.coach_code)
    except CoachNotFoundError:
        # Removed from the directory between authentication and insert
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid coach code",
        )
    except RepositoryError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    commission = resolve_commission(
        rate,
        settings.default_commission_per_workout,
        new_log.commission_override,
    )

    try:
        log = workout_logs.create(new_log, commission)
    except RepositoryError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    logger.info(
        "Created workout log",
        extra={
            "log_id": str(log.id),
            "coach_code": log.coach_code,
            "exercise_count": new_log.exercise_count,
            "commission_amount": commission,
            "meal_plan": log.is_meal_plan,
        }
    )

    return WorkoutLogResponse.from_log(log, coach.coach_name or None)


@router.get(
    "",
    response_model=list[WorkoutLogResponse],
    summary="List every workout log",
    responses={
        401: {"description": "Invalid admin code"},
        500: {"description": "Store error"},
    },
)
async def list_workout_logs(
    admin: AdminContext,
    access_codes: AccessCodeRepositoryDep,
    workout_logs: WorkoutLogRepositoryDep,
) -> list[WorkoutLogResponse]:
    """
    All rows, newest first. No pagination.

    Each row carries the coach's current display name from the directory,
    or null once the code has been removed.
    """
    try:
        logs = workout_logs.list_all()
        names = {coach.code: coach.coach_name or None for coach in access_codes.list_coaches()}
    except RepositoryError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    logger.debug("Listed workout logs", extra={"count": len(logs)})

    return [WorkoutLogResponse.from_log(log, names.get(log.coach_code)) for log in logs]


@router.delete(
    "",
    response_model=DeleteAllResponse,
    summary="Delete every workout log",
    responses={
        401: {"description": "Invalid admin code"},
        500: {"description": "Store error"},
    },
)
async def delete_all_workout_logs(
    admin: AdminContext,
    workout_logs: WorkoutLogRepositoryDep,
) -> DeleteAllResponse:
    """
    Delete the rows that exist right now.

    Ids are read first and then deleted as an explicit list, so the
    operation never issues an unfiltered delete. A row inserted in between
    is left alone.
    """
    try:
        ids = workout_logs.list_ids()
        if not ids:
            return DeleteAllResponse(deleted=True, count=0)
        workout_logs.delete_by_ids(ids)
    except RepositoryError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    logger.info("Deleted workout logs", extra={"count": len(ids)})

    return DeleteAllResponse(deleted=True, count=len(ids))
