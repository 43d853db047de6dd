"""
FastAPI Dependency Injection Module

Reusable dependencies giving route handlers access to the components the
application lifespan stores on ``app.state``:

- ``state_saver``: persists registered queries (``StateStore``)
- ``scheduler``: the running poll scheduler (may be absent)
- ``path_factory``: generates webhook paths for new registrations

Tests replace these by setting ``app.state`` attributes or through
``app.dependency_overrides``.
"""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request

from promql_trigger.application.services.registration import random_webhook_path
from promql_trigger.core.interfaces import StateStore
from promql_trigger.polling.scheduler import PollScheduler


def get_state_store(request: Request) -> StateStore:
    """Get the state saver initialized during startup."""
    return request.app.state.state_saver


def get_scheduler(request: Request) -> PollScheduler | None:
    """Get the poll scheduler, or ``None`` when polling is not running."""
    return getattr(request.app.state, "scheduler", None)


def get_path_factory(request: Request) -> Callable[[], str]:
    """Get the webhook path generator (random by default)."""
    return getattr(request.app.state, "path_factory", None) or random_webhook_path


StateStoreDep = Annotated[StateStore, Depends(get_state_store)]
SchedulerDep = Annotated[PollScheduler | None, Depends(get_scheduler)]
PathFactoryDep = Annotated[Callable[[], str], Depends(get_path_factory)]
