"""
Health check endpoints.

We provide two endpoints:
- /health: Basic liveness check (is the process running?)
- /health/ready: Readiness check (can we accept uploads?)

Local-only mode is reported but is not a failure: uploads still succeed.
"""

import logging
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ... import __version__
from ..dependencies import SettingsDep, StorageGatewayDep

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """
    Health check response.

    Standardized format makes it easy for monitoring tools to parse.
    """
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    """Individual readiness check result."""
    name: str
    status: str  # "ok", "degraded" or "error"
    error: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response with details."""
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns 200 if the service is running. Reports which storage tiers are in use.",
)
async def health_check(gateway: StorageGatewayDep) -> HealthResponse:
    """
    Liveness check - is the process alive?

    Does not touch the network: tier status was decided at startup.
    """
    state = gateway.state
    return HealthResponse(
        status="ok",
        version=__version__,
        details={
            "storage": {
                "local_root": str(state.local_root),
                "remote_enabled": state.remote_enabled,
            }
        },
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Returns 200 if uploads can be accepted, 503 otherwise.",
    responses={
        503: {
            "description": "Service not ready",
            "model": ReadinessResponse,
        }
    },
)
async def readiness_check(
    response: Response,
    settings: SettingsDep,
    gateway: StorageGatewayDep,
) -> ReadinessResponse:
    """
    Readiness check - can we accept uploads?

    The local upload directory must exist and be a directory. A disabled
    remote tier is reported as "degraded" but does not fail readiness.
    """
    checks: list[ReadinessCheck] = []
    all_ok = True
    state = gateway.state

    if state.local_root.is_dir():
        checks.append(ReadinessCheck(name="local_storage", status="ok"))
    else:
        checks.append(ReadinessCheck(
            name="local_storage",
            status="error",
            error=f"Upload directory missing: {state.local_root}",
        ))
        all_ok = False

    if state.remote_enabled:
        checks.append(ReadinessCheck(name="remote_storage", status="ok"))
    else:
        missing_fields = settings.validate_required_fields()
        checks.append(ReadinessCheck(
            name="remote_storage",
            status="degraded",
            error=(
                f"Local-only mode. Missing: {', '.join(missing_fields)}"
                if missing_fields
                else "Local-only mode"
            ),
        ))

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
