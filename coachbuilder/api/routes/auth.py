"""
Login endpoint.

Login is stateless: it resolves an access code to an identity and echoes
it back. The client keeps that identity in its local session store and
sends the code again on every request.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from ...core.accounts import Role
from ...infrastructure.snowflake.base import RepositoryError
from ..dependencies import AccessCodeRepositoryDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class LoginRequest(BaseModel):
    code: Optional[str] = None


class LoginResponse(BaseModel):
    role: str
    code: str
    coach_name: Optional[str] = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/login",
    response_model=LoginResponse,
    response_model_exclude_none=True,
    summary="Log in with an access code",
    responses={
        400: {"description": "Code is required"},
        401: {"description": "Invalid access code"},
        500: {"description": "Directory lookup failed"},
    },
)
async def login(
    request: LoginRequest,
    settings: SettingsDep,
    access_codes: AccessCodeRepositoryDep,
) -> LoginResponse:
    """
    Resolve an access code to a role.

    The admin sentinel is recognised without touching the directory.
    Any other code must be a coach code.
    """
    code = (request.code or "").strip()
    if not code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Code is required",
        )

    if code == settings.admin_access_code:
        logger.info("Admin login")
        return LoginResponse(role=Role.ADMIN.value, code=code)

    try:
        entry = access_codes.lookup(code, Role.COACH)
    except RepositoryError as e:
        logger.error("Login lookup failed", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Db Error: {e}",
        )

    if entry is None:
        logger.warning("Login with unknown code", extra={"code_prefix": code[:4]})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid access code",
        )

    logger.info("Coach login", extra={"coach_code": entry.code})

    return LoginResponse(
        role=entry.role.value,
        code=entry.code,
        coach_name=entry.coach_name,
    )
