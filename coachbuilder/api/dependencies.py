"""
FastAPI dependency injection.

Route handlers receive their repositories and the authenticated identity
from here. One connection is opened per request and shared by both
repositories; tests swap pieces out through app.dependency_overrides.

Authentication is a shared-secret header, x-access-code, checked on every
request. Coach codes are looked up in the directory; the admin code is a
single configured sentinel compared verbatim.
"""

import logging
from typing import Annotated, Generator, Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.accounts import ACCESS_CODE_HEADER, AccessContext, Role
from ..infrastructure.snowflake.base import RepositoryError, SnowflakeConfig, SnowflakeConnection
from ..infrastructure.snowflake.client import (
    MockSnowflakeConnection,
    SnowflakeConnectionError,
    open_snowflake_connection,
)
from ..infrastructure.snowflake.repositories import AccessCodeRepository, WorkoutLogRepository

logger = logging.getLogger(__name__)

access_code_header = APIKeyHeader(name=ACCESS_CODE_HEADER, auto_error=False)

# Global mock connection (shared across requests so data persists in mock mode)
_mock_snowflake_connection: Optional[MockSnowflakeConnection] = None


def get_mock_connection() -> MockSnowflakeConnection:
    global _mock_snowflake_connection

    if _mock_snowflake_connection is None:
        _mock_snowflake_connection = MockSnowflakeConnection()
        logger.info("Created shared mock Snowflake connection")
    return _mock_snowflake_connection


def reset_mock_connection() -> None:
    """Drop the shared mock connection (for test isolation)."""
    global _mock_snowflake_connection
    _mock_snowflake_connection = None


def snowflake_config_from_settings(settings: Settings) -> SnowflakeConfig:
    return SnowflakeConfig(
        account=settings.snowflake_account,
        user=settings.snowflake_user,
        password=settings.snowflake_password or None,
        private_key_path=settings.snowflake_private_key_path,
        private_key_base64=settings.snowflake_private_key_base64,
        database=settings.snowflake_database,
        schema=settings.snowflake_schema,
        warehouse=settings.snowflake_warehouse,
        role=settings.snowflake_role,
    )


# ---------------------------------------------------------------------------
# Connection
# ---------------------------------------------------------------------------

def get_connection(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[SnowflakeConnection, None, None]:
    """
    Provide one Snowflake connection per request.

    This is a generator function because the connection must be closed
    after the response is sent. FastAPI caches the dependency within a
    request, so both repositories share it.

    In mock mode every request shares one in-memory connection so rows
    survive between calls.
    """
    if settings.snowflake_mock_mode:
        logger.debug("Using shared mock Snowflake connection")
        yield get_mock_connection()
        return

    try:
        conn = open_snowflake_connection(snowflake_config_from_settings(settings))
    except SnowflakeConnectionError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Db Error: {e}",
        )

    try:
        yield conn
    finally:
        conn.close()
        logger.debug("Closed Snowflake connection")


def get_access_code_repository(
    conn: Annotated[SnowflakeConnection, Depends(get_connection)],
) -> AccessCodeRepository:
    return AccessCodeRepository(conn)


def get_workout_log_repository(
    conn: Annotated[SnowflakeConnection, Depends(get_connection)],
) -> WorkoutLogRepository:
    return WorkoutLogRepository(conn)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

def _header_code(raw: Optional[str]) -> str:
    return (raw or "").strip()


def verify_coach(
    access_codes: Annotated[AccessCodeRepository, Depends(get_access_code_repository)],
    access_code: Optional[str] = Security(access_code_header),
) -> AccessContext:
    """
    Authenticate a coach from the x-access-code header.

    Raises 401 if the header is missing or the code is not a coach code.
    """
    code = _header_code(access_code)
    if not code:
        logger.warning("Request missing access code")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing access code",
        )

    try:
        entry = access_codes.lookup(code, Role.COACH)
    except RepositoryError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    if entry is None:
        logger.warning(
            "Invalid coach code attempt",
            extra={"code_prefix": code[:4]}
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid coach code",
        )

    return AccessContext.for_coach(entry)


def verify_admin(
    settings: Annotated[Settings, Depends(get_settings)],
    access_code: Optional[str] = Security(access_code_header),
) -> AccessContext:
    """
    Authenticate the admin sentinel. No directory lookup.

    Raises 401 for anything other than the configured admin code.
    """
    code = _header_code(access_code)
    if not code or code != settings.admin_access_code:
        logger.warning("Invalid admin code attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin code",
        )

    return AccessContext.for_admin(code)


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
SettingsDep = Annotated[Settings, Depends(get_settings)]
CoachContext = Annotated[AccessContext, Depends(verify_coach)]
AdminContext = Annotated[AccessContext, Depends(verify_admin)]
AccessCodeRepositoryDep = Annotated[AccessCodeRepository, Depends(get_access_code_repository)]
WorkoutLogRepositoryDep = Annotated[WorkoutLogRepository, Depends(get_workout_log_repository)]
