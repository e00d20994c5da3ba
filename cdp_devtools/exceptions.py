"""Exception hierarchy for CDP operations.

All CDP-related exceptions inherit from CDPError base class.
Provides structured error types for connection, transport, command, timeout
and listener failures.
"""

from typing import Optional


class CDPError(Exception):
    """Base exception for all CDP-related errors.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary with additional error context
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class CDPConnectionError(CDPError):
    """WebSocket connection failures.

    Raised when establishing or maintaining the CDP transport fails.
    """

    pass


class ConnectionFailedError(CDPConnectionError):
    """Initial connection failed.

    Raised when the WebSocket connection cannot be established.
    Common causes: wrong port, unknown session id, browser not running.
    """

    pass


class TransportError(CDPConnectionError):
    """Send or receive failure on the transport.

    Raised when a frame is sent while the transport is not open, or when the
    underlying socket write fails.
    """

    pass


class ConnectionClosedError(CDPConnectionError):
    """Connection closed before a command was resolved.

    Raised to every caller with an in-flight command at the moment of closure,
    and to callers issuing commands on a closed connection.
    """

    pass


class CDPCommandError(CDPError):
    """Command execution failures.

    Raised when CDP command returns an error response.
    """

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        error_code: Optional[int] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.method = method
        self.error_code = error_code


class CommandFailedError(CDPCommandError):
    """Command returned error response.

    Raised when the browser rejects an executed command.
    Example: DOM.querySelector with an unknown node id (code -32000).
    """

    def __str__(self):
        prefix = f"{self.method}: " if self.method else ""
        if self.error_code is not None:
            return f"{prefix}{self.message} (code {self.error_code})"
        return f"{prefix}{self.message}"


class InvalidCommandError(CDPCommandError):
    """Malformed command.

    Raised when command is invalid before sending to the browser.
    Example: missing required parameters, invalid method name.
    """

    pass


class CDPTimeoutError(CDPError):
    """Command or event wait timed out.

    Only raised when the caller asked for a deadline; the core enforces none by default.
    """

    def __init__(
        self,
        message: str,
        command_method: Optional[str] = None,
        timeout: Optional[float] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.command_method = command_method
        self.timeout = timeout

    def __str__(self):
        if self.command_method and self.timeout:
            return f"'{self.command_method}' timed out after {self.timeout}s"
        return self.message


class CDPTargetNotFoundError(CDPError):
    """Target discovery failures.

    Raised when requested browser target cannot be found.
    Example: no page target matching URL filter, invalid target ID.
    """

    def __init__(
        self,
        message: str,
        target_id: Optional[str] = None,
        url_pattern: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.target_id = target_id
        self.url_pattern = url_pattern

    def __str__(self):
        if self.target_id:
            return f"Target not found: {self.target_id}"
        if self.url_pattern:
            return f"No target matching URL pattern: {self.url_pattern}"
        return self.message


class InvalidFrameError(CDPError):
    """Frame could not be decoded into a CDP message.

    Logged and dropped by the dispatcher; never surfaces to callers.
    """

    pass


class ListenerError(CDPError):
    """An event listener raised.

    Never propagated past the dispatcher. Instances are logged and handed to the
    connection's ``on_listener_error`` hook when one is configured.
    """

    def __init__(
        self,
        message: str,
        event_name: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details)
        self.event_name = event_name
