"""
Registration Routes

The function gateway POSTs the PromQL functions declared for this event
source to ``/``. The handler answers with one webhook route per query and,
once the response has been sent, persists the queries. Persisting restarts
the application, so it must never happen before the gateway has its answer.

Rejected registrations get a 400 with ``{"error": "<reason>"}``. Methods
other than POST get a 405.
"""

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from promql_trigger.application.api.dependencies import PathFactoryDep, StateStoreDep
from promql_trigger.application.api.models import ConvertRequest, ConvertResponse, ErrorResponse
from promql_trigger.application.services.registration import convert_registration
from promql_trigger.core.exceptions import RegistrationError, TriggerError
from promql_trigger.core.interfaces import StateStore
from promql_trigger.core.logging import get_logger
from promql_trigger.polling.models import RegisteredQuery

logger = get_logger(__name__)

router = APIRouter(tags=["Registration"])


def _describe_validation_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}" if location else first["msg"]


async def persist_queries(state_store: StateStore, queries: list[RegisteredQuery]) -> None:
    """Save registered queries; failures are logged, never raised."""
    try:
        await state_store.save_state(queries)
    except TriggerError as e:
        logger.error(
            "failed to save state",
            error=e.message,
            error_type=type(e).__name__,
            queries=len(queries),
        )


@router.post(
    "/",
    response_model=ConvertResponse,
    responses={400: {"model": ErrorResponse}},
)
async def register_functions(
    request: Request,
    background_tasks: BackgroundTasks,
    state_store: StateStoreDep,
    path_factory: PathFactoryDep,
):
    """
    Convert PromQL function declarations into webhook routes.

    Returns:
        ConvertResponse: One POST route per declared query
    """
    body = await request.body()
    try:
        convert_request = ConvertRequest.model_validate_json(body)
    except ValidationError as e:
        message = _describe_validation_error(e)
        logger.warning("Rejected registration", reason=message)
        return JSONResponse(status_code=400, content={"error": message})

    try:
        response, queries = convert_registration(convert_request, path_factory)
    except RegistrationError as e:
        logger.warning("Rejected registration", reason=e.message)
        return JSONResponse(status_code=400, content={"error": e.message})

    logger.info(
        "Registered PromQL functions",
        functions=len(convert_request.functions),
        queries=len(queries),
    )
    background_tasks.add_task(persist_queries, state_store, queries)
    return response
