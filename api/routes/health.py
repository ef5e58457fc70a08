"""
Health check endpoints.

Provides endpoints for monitoring the landing server and the backend it
talks to.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from modules.auth.interfaces import IAuthService
from shared.config import get_settings
from shared.exceptions import RechargeError

from ..dependencies import get_auth_service

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    backend: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the landing server is running.
    """
    return HealthResponse(status="healthy", version=get_settings().app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(auth: IAuthService = Depends(get_auth_service)) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Probes the backend health endpoint once; no retries.
    """
    try:
        response = await auth.check_health()
        backend = "reachable" if response.success else "degraded"
    except RechargeError:
        backend = "unreachable"
    return ReadinessResponse(
        status="ready" if backend == "reachable" else "degraded",
        backend=backend,
    )
