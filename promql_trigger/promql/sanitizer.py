"""
PromQL Sanitizer

Rewrites a PromQL expression so that application names used as ``source_id``
values become the GUIDs the metrics backend indexes data by.

Pipeline for one ``sanitize`` call:

1. Extract the distinct ``source_id`` values (parse errors abort).
2. Resolve every value to a GUID, in extraction order, under one overall
   timeout. The first failure aborts the call and names the identifier.
3. For each (name, guid) pair, in extraction order, replace every
   ``source_id = "name"`` or ``source_id='name'`` (any whitespace around
   ``=``) with ``source_id="guid"``. The value is matched in its escaped
   source form, so ``source_id="a\\"b"`` is found for the name ``a"b``.

Substitution is textual, so spacing and formatting elsewhere in the query are
preserved. Only the exact quoted value of the ``source_id`` label is touched:
``my_source_id="name"``, ``source_id!="name"`` and ``source_id=~"name"`` are
left alone.

Nothing is cached between calls; every call re-resolves its identifiers.
"""

import asyncio
import re

from promql_trigger.core.config.constants import DEFAULT_SANITIZE_TIMEOUT, SOURCE_ID_LABEL
from promql_trigger.core.exceptions import ResolutionError, TriggerError
from promql_trigger.core.interfaces import GuidResolver
from promql_trigger.core.logging import get_logger
from promql_trigger.promql.extractor import extract_source_ids

logger = get_logger(__name__)


def _quoted_forms(identifier: str) -> list[str]:
    """Source spellings of a parsed label value, one per quote character."""
    escaped = identifier.replace("\\", "\\\\")
    return [
        '"' + escaped.replace('"', '\\"') + '"',
        "'" + escaped.replace("'", "\\'") + "'",
    ]


def _label_pattern(identifier: str, label: str = SOURCE_ID_LABEL) -> re.Pattern[str]:
    values = "|".join(re.escape(form) for form in _quoted_forms(identifier))
    return re.compile(r"(?<![\w])" + re.escape(label) + r"\s*=\s*(?:" + values + r")")


def substitute_identifiers(
    query_text: str, resolved: dict[str, str], label: str = SOURCE_ID_LABEL
) -> str:
    """
    Apply ``name -> guid`` replacements to the query text.

    Replacements run one identifier at a time in the mapping's order.
    """
    for identifier, guid in resolved.items():
        replacement = f'{label}="{guid}"'
        query_text = _label_pattern(identifier, label).sub(lambda _: replacement, query_text)
    return query_text


class Sanitizer:
    """
    Resolves and substitutes application names in PromQL queries.

    Attributes:
        resolver: Looks up the GUID for an application name
        resolve_timeout: Overall bound in seconds for resolving all
            identifiers of one query
    """

    def __init__(
        self,
        resolver: GuidResolver,
        resolve_timeout: float = DEFAULT_SANITIZE_TIMEOUT,
        label: str = SOURCE_ID_LABEL,
    ):
        self.resolver = resolver
        self.resolve_timeout = resolve_timeout
        self.label = label

    async def sanitize(self, query_text: str) -> str:
        """
        Return the query with every ``source_id`` value replaced by its GUID.

        Raises:
            PromQLParseError: If the query is not valid PromQL
            ResolutionError: If any identifier fails to resolve, or
                resolution exceeds ``resolve_timeout``
        """
        identifiers = extract_source_ids(query_text, self.label)
        if not identifiers:
            return query_text

        resolved: dict[str, str] = {}
        try:
            await asyncio.wait_for(
                self._resolve_all(identifiers, resolved), timeout=self.resolve_timeout
            )
        except asyncio.TimeoutError as e:
            pending = identifiers[len(resolved)]
            raise ResolutionError(
                f"failed to fetch guid for {pending}: timed out after {self.resolve_timeout}s",
                details={"identifier": pending, "timeout": self.resolve_timeout},
            ) from e

        sanitized = substitute_identifiers(query_text, resolved, self.label)
        logger.debug(
            "Sanitized PromQL query",
            query=query_text,
            sanitized=sanitized,
            identifiers=len(identifiers),
        )
        return sanitized

    async def _resolve_all(self, identifiers: list[str], resolved: dict[str, str]) -> None:
        for identifier in identifiers:
            try:
                resolved[identifier] = await self.resolver.get_app_guid(identifier)
            except TriggerError as e:
                raise ResolutionError(
                    f"failed to fetch guid for {identifier}: {e.message}",
                    details={"identifier": identifier, **e.details},
                ) from e
            except Exception as e:
                raise ResolutionError.from_exception(
                    e,
                    message=f"failed to fetch guid for {identifier}: {e}",
                    identifier=identifier,
                ) from e
