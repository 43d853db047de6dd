"""
Health Check Routes

Liveness endpoint for the platform's health checks. It reports the poll
scheduler state but never fails because of it: a stopped scheduler is
reported as ``degraded`` with a 200.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from promql_trigger.application.api.dependencies import SchedulerDep

router = APIRouter(prefix="/health", tags=["Health"])


class HealthResponse(BaseModel):
    """
    Health check response model.

    Fields:
        status: "healthy" while the scheduler runs, "degraded" otherwise
        timestamp: ISO 8601 timestamp
        readers: Number of registered readers
        scheduler_running: Whether the poll loop is active
        rounds: Completed poll rounds
    """

    status: str
    timestamp: str
    readers: int = 0
    scheduler_running: bool = False
    rounds: int = 0


@router.get("", response_model=HealthResponse)
async def health_check(scheduler: SchedulerDep):
    """Quick health check endpoint."""
    running = scheduler is not None and scheduler.is_running
    return HealthResponse(
        status="healthy" if running else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        readers=len(scheduler.readers) if scheduler is not None else 0,
        scheduler_running=running,
        rounds=scheduler.rounds if scheduler is not None else 0,
    )
