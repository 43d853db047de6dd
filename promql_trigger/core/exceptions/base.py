"""
Base Exception Class

This module contains ONLY the base exception class that all other exceptions inherit from.
All specialized exceptions are in their respective themed modules.

Every error carries a short ``kind`` tag. The reader reports the tag in its
tick outcome, so callers can tell a parse failure from a backend outage
without inspecting class names.

Author: System Architect
Date: 2026-03-02
"""

from typing import Any


class TriggerError(Exception):
    """
    Base exception for all PromQL trigger errors.

    All custom exceptions inherit from this class to enable:
    - Consistent error handling
    - Webhook path correlation
    - Structured error logging

    Attributes:
        message: Error message
        path: Webhook path of the reader that raised (if available)
        details: Additional error details (dict)

    Example:
        raise ResolutionError(
            "failed to fetch guid for my-app",
            details={"identifier": "my-app", "status_code": 404},
        )
    """

    kind: str = "internal"

    def __init__(
        self, message: str, path: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.path = path
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging/API responses.

        Returns:
            Dict with error_type, kind, message, path, and details
        """
        return {
            "error_type": self.__class__.__name__,
            "kind": self.kind,
            "message": self.message,
            "path": self.path,
            "details": self.details,
        }

    def with_context(self, **context) -> "TriggerError":
        """
        Add additional context to the error details.

        Args:
            **context: Key-value pairs to add to details

        Returns:
            Self (for method chaining)
        """
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        path_str = f", path='{self.path}'" if self.path else ""
        return f"{self.__class__.__name__}(message='{self.message}'{path_str}{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        message: str | None = None,
        path: str | None = None,
        **details
    ) -> "TriggerError":
        """
        Create an error of this class from another exception.

        Useful for wrapping httpx, JSON or parser exceptions with context.

        Args:
            exc: Original exception to wrap
            message: Custom message (defaults to original exception message)
            path: Webhook path for correlation
            **details: Additional context to include

        Returns:
            New instance with wrapped exception details

        Example:
            >>> try:
            ...     await http_client.get(url)
            ... except httpx.ConnectError as e:
            ...     raise TransportError.from_exception(e, url=url) from e
        """
        error_message = message or str(exc) or exc.__class__.__name__
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details
        }
        return cls(error_message, path=path, details=error_details)


# Configuration exception (kept here as it's fundamental)
class ConfigurationError(TriggerError):
    """Raised when configuration is invalid or missing. Fatal at startup."""

    kind = "configuration"
