"""Unit tests for CDP exception hierarchy.

Tests exception types, inheritance, attributes, and string representations.
"""

import pytest
from cdp_devtools.exceptions import (
    CDPError,
    CDPConnectionError,
    ConnectionFailedError,
    ConnectionClosedError,
    TransportError,
    CDPCommandError,
    CommandFailedError,
    InvalidCommandError,
    CDPTimeoutError,
    CDPTargetNotFoundError,
    InvalidFrameError,
    ListenerError,
)


@pytest.mark.unit
class TestCDPError:
    """Test base CDPError exception."""

    def test_base_exception_message(self):
        error = CDPError("Test error")
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.details == {}

    def test_base_exception_with_details(self):
        error = CDPError("Test error", details={"key": "value", "count": 42})
        assert "Test error" in str(error)
        assert "key=value" in str(error)
        assert "count=42" in str(error)


@pytest.mark.unit
class TestConnectionErrors:
    """Test connection-related exceptions."""

    @pytest.mark.parametrize(
        "error_cls", [ConnectionFailedError, TransportError, ConnectionClosedError]
    )
    def test_connection_error_inheritance(self, error_cls):
        error = error_cls("Connection problem")
        assert isinstance(error, CDPConnectionError)
        assert isinstance(error, CDPError)

    def test_connection_closed_carries_method(self):
        error = ConnectionClosedError("Connection closed", details={"method": "Page.navigate"})
        assert error.details["method"] == "Page.navigate"
        assert "method=Page.navigate" in str(error)


@pytest.mark.unit
class TestCommandErrors:
    """Test command-related exceptions."""

    def test_command_failed_attributes(self):
        error = CommandFailedError("No node with given id", method="DOM.getOuterHTML", error_code=-32000)
        assert isinstance(error, CDPCommandError)
        assert error.method == "DOM.getOuterHTML"
        assert error.error_code == -32000
        assert str(error) == "DOM.getOuterHTML: No node with given id (code -32000)"

    def test_command_failed_without_code(self):
        error = CommandFailedError("net::ERR_NAME_NOT_RESOLVED", method="Page.navigate")
        assert str(error) == "Page.navigate: net::ERR_NAME_NOT_RESOLVED"

    def test_invalid_command_error(self):
        error = InvalidCommandError("Missing required parameter(s)", method="Page.navigate")
        assert isinstance(error, CDPCommandError)
        assert error.method == "Page.navigate"


@pytest.mark.unit
class TestTimeoutError:
    def test_timeout_str(self):
        error = CDPTimeoutError("Command timed out", command_method="Page.navigate", timeout=5.0)
        assert str(error) == "'Page.navigate' timed out after 5.0s"
        assert error.timeout == 5.0

    def test_timeout_without_method(self):
        assert str(CDPTimeoutError("Command timed out")) == "Command timed out"


@pytest.mark.unit
class TestOtherErrors:
    def test_target_not_found_by_id(self):
        error = CDPTargetNotFoundError("Target not found", target_id="abc")
        assert str(error) == "Target not found: abc"

    def test_target_not_found_by_pattern(self):
        error = CDPTargetNotFoundError("No match", url_pattern="example")
        assert str(error) == "No target matching URL pattern: example"

    def test_invalid_frame_is_cdp_error(self):
        assert isinstance(InvalidFrameError("bad frame"), CDPError)

    def test_listener_error(self):
        error = ListenerError("Event handler error", event_name="Page.loadEventFired")
        assert error.event_name == "Page.loadEventFired"
        assert isinstance(error, CDPError)
