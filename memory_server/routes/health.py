"""
Health check endpoints.

Provides liveness, readiness, and overall health status.
"""

import time

from fastapi import APIRouter, Request

from memory_server import __version__
from memory_server.config import get_server_settings
from memory_server.schemas.models import HealthResponse, HealthStatus, ReadyResponse


router = APIRouter(tags=["Health"])

# Track server start time
_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Overall health check endpoint.

    Reports the server identity, whether the message store is serving and
    how many messages it holds per role and agent.
    """
    store = request.app.state.store
    ready = store.initialized
    stats = store.stats() if ready else {}

    components = {
        "message_store": HealthStatus.HEALTHY if ready else HealthStatus.UNHEALTHY,
    }
    status = (
        HealthStatus.HEALTHY
        if all(s == HealthStatus.HEALTHY for s in components.values())
        else HealthStatus.UNHEALTHY
    )

    return HealthResponse(
        status=status,
        server=get_server_settings().server_name,
        version=__version__,
        uptime_seconds=time.time() - _start_time,
        message_count=stats.get("total", 0),
        roles=stats.get("roles", {}),
        agents=stats.get("agents", {}),
        components=components,
    )


@router.get("/health/live")
async def liveness_check() -> dict:
    """
    Liveness check endpoint.

    Returns 200 if the server process is alive.
    """
    return {"status": "alive"}


@router.get("/health/ready", response_model=ReadyResponse)
async def readiness_check(request: Request) -> ReadyResponse:
    """Readiness check: the store has loaded its records."""
    checks = {
        "message_store": request.app.state.store.initialized,
    }

    return ReadyResponse(
        ready=all(checks.values()),
        checks=checks,
    )
