"""
Health check endpoints.

We provide two endpoints:
- /api/health: Basic liveness check (is the process running?)
- /api/health/ready: Readiness check (can we serve traffic?)

Readiness returns 503 when configuration is incomplete or the store
cannot be reached, so a load balancer stops routing traffic here.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ... import __version__
from ...infrastructure.snowflake.client import SnowflakeConnectionError, open_snowflake_connection
from ..dependencies import SettingsDep, snowflake_config_from_settings

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = True
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    """One named readiness probe."""
    name: str
    status: str  # "ok" or "error"
    error: Optional[str] = None


class ReadinessResponse(BaseModel):
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns 200 if the service is running. Does not check dependencies.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """Liveness only; never touches the store."""
    return HealthResponse(
        status="ok",
        version=__version__,
        details={"mock_mode": {"snowflake": settings.snowflake_mock_mode}},
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Returns 200 if the service can handle traffic. Checks configuration and the store.",
    responses={
        503: {
            "description": "Service not ready",
            "model": ReadinessResponse,
        }
    },
)
def readiness_check(settings: SettingsDep, response: Response) -> ReadinessResponse:
    """Opens (and closes) a real store connection unless in mock mode."""
    checks: list[ReadinessCheck] = []

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        checks.append(ReadinessCheck(
            name="configuration",
            status="error",
            error=f"Missing required fields: {', '.join(missing_fields)}"
        ))
    else:
        checks.append(ReadinessCheck(name="configuration", status="ok"))

    if settings.snowflake_mock_mode:
        checks.append(ReadinessCheck(name="database", status="ok", error="mock mode"))
    elif missing_fields:
        checks.append(ReadinessCheck(name="database", status="error", error="not configured"))
    else:
        try:
            open_snowflake_connection(snowflake_config_from_settings(settings)).close()
            checks.append(ReadinessCheck(name="database", status="ok"))
        except SnowflakeConnectionError as e:
            logger.error("Database health check failed", extra={"error": str(e)})
            checks.append(ReadinessCheck(name="database", status="error", error=str(e)))

    all_ok = all(check.status == "ok" for check in checks)
    if not all_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "Readiness check failed",
            extra={
                "checks": [
                    {"name": c.name, "status": c.status, "error": c.error}
                    for c in checks
                ]
            }
        )

    return ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        version=__version__,
        checks=checks,
    )
