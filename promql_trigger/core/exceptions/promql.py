"""
PromQL Exceptions

Errors raised while turning a registered query into the text that is sent to
the metrics backend: parsing the expression and resolving the application
names it references.

Author: System Architect
Date: 2026-03-02
"""

from promql_trigger.core.exceptions.base import TriggerError


class PromQLParseError(TriggerError):
    """
    Raised when a query is not syntactically valid PromQL.

    Extraction is all-or-nothing: no partial identifier list is ever
    returned alongside this error.

    Details usually include:
        - query: The offending query text
        - original_message: Parser diagnostic
    """

    kind = "parse"


class ResolutionError(TriggerError):
    """
    Raised when an application name cannot be resolved to its GUID.

    Covers resolver failures, unknown applications and the resolution
    timeout. The message always names the identifier that failed, and
    the whole sanitize call is aborted.

    Details usually include:
        - identifier: The application name being resolved
        - timeout: Resolution bound in seconds (timeouts only)
    """

    kind = "resolution"
