"""
Source Identifier Extraction

Finds the application names a PromQL expression refers to through the
reserved ``source_id`` label.

The expression is parsed with ``promql_parser`` and the syntax tree is walked
depth-first, children left to right:

- binary expressions: left operand, then right operand
- aggregations: aggregated expression, then parameter
- function calls: arguments in order
- parentheses, unary, subquery and range selectors: the inner expression

Every vector selector met on the way contributes the values of its
``source_id`` matchers. Values are de-duplicated with the first occurrence
winning, so the order is stable for a given query text.
"""

from collections.abc import Iterator
from typing import Any

import promql_parser

from promql_trigger.core.config.constants import SOURCE_ID_LABEL
from promql_trigger.core.exceptions import PromQLParseError

# Attributes holding a single child expression, in visiting order
_CHILD_ATTRIBUTES = ("expr", "lhs", "rhs", "param", "vector_selector", "vs")


def _selector_matchers(node: Any) -> list[Any]:
    group = getattr(node, "matchers", None)
    if group is None:
        return []
    if isinstance(group, (list, tuple)):
        return list(group)

    matchers = list(getattr(group, "matchers", None) or [])
    for alternative in getattr(group, "or_matchers", None) or []:
        matchers.extend(alternative)
    return matchers


def _walk(node: Any) -> Iterator[Any]:
    """Yield every label matcher in the tree, depth-first."""
    yield from _selector_matchers(node)

    for attribute in _CHILD_ATTRIBUTES:
        child = getattr(node, attribute, None)
        if child is not None:
            yield from _walk(child)

    for argument in getattr(node, "args", None) or []:
        yield from _walk(argument)


def parse_query(query_text: str) -> Any:
    """
    Parse PromQL text into a ``promql_parser`` expression.

    Raises:
        PromQLParseError: If the text is not valid PromQL
    """
    try:
        return promql_parser.parse(query_text)
    except ValueError as e:
        raise PromQLParseError.from_exception(
            e,
            message=f"failed to parse PromQL query {query_text}: {e}",
            query=query_text,
        ) from e


def extract_source_ids(query_text: str, label: str = SOURCE_ID_LABEL) -> list[str]:
    """
    Return the distinct ``source_id`` values of a query, in order of appearance.

    Args:
        query_text: PromQL expression
        label: Label name to collect (defaults to ``source_id``)

    Raises:
        PromQLParseError: If the query does not parse; no partial list is returned

    Example:
        >>> extract_source_ids('metric{source_id="a"} + metric{source_id="b"}')
        ['a', 'b']
    """
    expression = parse_query(query_text)

    seen: dict[str, None] = {}
    for matcher in _walk(expression):
        if getattr(matcher, "name", None) == label:
            seen.setdefault(matcher.value, None)
    return list(seen)
