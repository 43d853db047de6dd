"""
Registration Service

Converts a function registration request into webhook routes and the
matching registered queries.

Each ``promql`` event gets its own path of the form ``/<n>-prom-ql``, where
``n`` is a random non-negative 63-bit integer. Every event is answered with
its own HTTP function entry, in declaration order.

A registration replaces the whole set of registered queries; it is not
merged with earlier registrations.
"""

import random
from collections.abc import Callable

from promql_trigger.application.api.models import (
    ConvertRequest,
    ConvertResponse,
    HTTPEvent,
    HTTPFunction,
)
from promql_trigger.core.config.constants import PROMQL_EVENT_TYPE, WEBHOOK_PATH_SUFFIX
from promql_trigger.core.exceptions import RegistrationError
from promql_trigger.polling.models import RegisteredQuery


def random_webhook_path() -> str:
    return f"/{random.getrandbits(63)}{WEBHOOK_PATH_SUFFIX}"


def convert_registration(
    request: ConvertRequest,
    path_factory: Callable[[], str] = random_webhook_path,
) -> tuple[ConvertResponse, list[RegisteredQuery]]:
    """
    Build the gateway response and the queries to persist.

    Raises:
        RegistrationError: A function has no ``promql`` events, or an event
            has no non-empty string ``query``
    """
    response = ConvertResponse()
    queries: list[RegisteredQuery] = []

    for function in request.functions:
        events = function.events.get(PROMQL_EVENT_TYPE)
        if events is None:
            raise RegistrationError("promql type")

        for event in events:
            query_text = event.get("query")
            if not isinstance(query_text, str) or not query_text:
                raise RegistrationError("invalid/missing Query")

            context = event.get("context")
            query = RegisteredQuery(
                query=query_text,
                context=context if isinstance(context, str) else "",
                path=path_factory(),
            )
            queries.append(query)
            response.functions.append(
                HTTPFunction(
                    handler=function.handler,
                    events=[HTTPEvent(method="POST", path=query.path)],
                )
            )

    return response, queries
