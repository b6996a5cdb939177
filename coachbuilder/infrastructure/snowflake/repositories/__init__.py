"""
Repository pattern implementations for Snowflake.

Repositories translate between domain models and database representations.
"""

from .access_codes import AccessCodeRepository, CoachNotFoundError
from .workout_logs import WorkoutLogNotFoundError, WorkoutLogRepository

__all__ = [
    "AccessCodeRepository",
    "CoachNotFoundError",
    "WorkoutLogNotFoundError",
    "WorkoutLogRepository",
]
