"""
Domain models for access control.

Access is a shared-secret scheme: one code per coach, one shared sentinel
for the admin role. Nothing is held server side between requests, so the
identity established for a request lives in an AccessContext that the
API layer builds from the request header and passes down explicitly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

ACCESS_CODE_HEADER = "x-access-code"


class Role(Enum):
    """Who is holding the access code."""
    COACH = "coach"
    ADMIN = "admin"


@dataclass(frozen=True)
class AccessCode:
    """
    A row of the access code directory.

    Created out of band by whoever administers the directory. The app only
    ever reads these, apart from the seeding script.
    """
    code: str
    role: Role = Role.COACH
    coach_name: str = ""
    commission_per_workout: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.code.strip():
            raise ValueError("Access code cannot be empty")


@dataclass(frozen=True)
class AccessContext:
    """The identity authenticated for a single request."""
    role: Role
    code: str
    coach_name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @classmethod
    def for_coach(cls, access_code: AccessCode) -> "AccessContext":
        return cls(role=Role.COACH, code=access_code.code, coach_name=access_code.coach_name)

    @classmethod
    def for_admin(cls, code: str) -> "AccessContext":
        return cls(role=Role.ADMIN, code=code)
