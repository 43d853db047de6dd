"""
Unit Tests for Exception Hierarchy

Tests the error taxonomy, context handling and exception wrapping.
"""

import pytest

from promql_trigger.core.exceptions import (
    ConfigurationError,
    PromQLParseError,
    ProtocolError,
    RegistrationError,
    ResolutionError,
    ResultDecodeError,
    StatePersistenceError,
    TransportError,
    TriggerError,
)


@pytest.mark.unit
class TestTriggerError:
    """Test the base exception."""

    def test_message_and_defaults(self):
        """Test that a bare error has a message and empty context."""
        error = TriggerError("boom")

        assert str(error) == "boom"
        assert error.message == "boom"
        assert error.path is None
        assert error.details == {}
        assert error.kind == "internal"

    def test_details_are_copied(self):
        """Test that mutating the error does not touch the caller's dict."""
        details = {"a": 1}
        error = TriggerError("boom", details=details)
        error.with_context(b=2)

        assert details == {"a": 1}
        assert error.details == {"a": 1, "b": 2}

    def test_with_context_returns_self(self):
        """Test that with_context supports chaining."""
        error = TriggerError("boom")
        assert error.with_context(url="http://x") is error

    def test_to_dict(self):
        """Test the dictionary form used for logging and API responses."""
        error = ResolutionError("failed", path="/1-prom-ql", details={"identifier": "a"})

        assert error.to_dict() == {
            "error_type": "ResolutionError",
            "kind": "resolution",
            "message": "failed",
            "path": "/1-prom-ql",
            "details": {"identifier": "a"},
        }

    def test_repr_includes_context(self):
        """Test that repr shows path and details only when set."""
        assert repr(TriggerError("x")) == "TriggerError(message='x')"
        assert "path='/p'" in repr(TriggerError("x", path="/p"))
        assert "details={'k': 1}" in repr(TriggerError("x", details={"k": 1}))

    def test_from_exception_wraps_original(self):
        """Test that from_exception records the original error."""
        original = ConnectionError("refused")
        error = TransportError.from_exception(original, url="http://x")

        assert isinstance(error, TransportError)
        assert error.message == "refused"
        assert error.details["original_error"] == "ConnectionError"
        assert error.details["original_message"] == "refused"
        assert error.details["url"] == "http://x"

    def test_from_exception_custom_message(self):
        """Test that an explicit message wins over the original one."""
        error = PromQLParseError.from_exception(ValueError("bad"), message="failed to parse")
        assert error.message == "failed to parse"

    def test_from_exception_empty_message_uses_class_name(self):
        """Test the fallback when the original has no text."""
        error = TriggerError.from_exception(TimeoutError())
        assert error.message == "TimeoutError"


@pytest.mark.unit
class TestErrorTaxonomy:
    """Test the kind tags reported in tick outcomes."""

    @pytest.mark.parametrize(
        "error_class,kind",
        [
            (ConfigurationError, "configuration"),
            (PromQLParseError, "parse"),
            (ResolutionError, "resolution"),
            (TransportError, "transport"),
            (ProtocolError, "protocol"),
            (ResultDecodeError, "protocol"),
            (StatePersistenceError, "persistence"),
            (RegistrationError, "validation"),
        ],
    )
    def test_kind(self, error_class, kind):
        """Test that each error class carries its taxonomy tag."""
        assert error_class.kind == kind
        assert issubclass(error_class, TriggerError)

    def test_result_decode_error_is_protocol_error(self):
        """Test that decode failures are caught as protocol errors."""
        assert issubclass(ResultDecodeError, ProtocolError)

    def test_protocol_error_status_code(self):
        """Test the status_code shortcut into details."""
        assert ProtocolError("x", details={"status_code": 502}).status_code == 502
        assert ProtocolError("x").status_code is None
