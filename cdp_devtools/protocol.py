"""CDP wire format: envelope types plus frame encoding and decoding.

Every frame is a single JSON object. Commands carry ``id``/``method``/``params``,
responses carry ``id`` with ``result`` or ``error``, events carry ``method``/``params``.
"""

import json
from typing import Any, Dict, TypedDict, Union, TYPE_CHECKING

# NotRequired added in Python 3.11, use typing_extensions for 3.10 compatibility
if TYPE_CHECKING:
    from typing_extensions import NotRequired
else:
    try:
        from typing import NotRequired
    except ImportError:
        from typing_extensions import NotRequired

from .exceptions import InvalidCommandError, InvalidFrameError


class CommandEnvelope(TypedDict):
    """Outgoing command frame."""
    id: int
    method: str
    params: Dict[str, Any]


class ErrorPayload(TypedDict):
    """Error object of a rejected command."""
    code: int
    message: str
    data: NotRequired[str]


class ResponseEnvelope(TypedDict):
    """Reply to a command, matched by id."""
    id: int
    result: NotRequired[Dict[str, Any]]
    error: NotRequired[ErrorPayload]
    sessionId: NotRequired[str]


class EventEnvelope(TypedDict):
    """Unsolicited notification."""
    method: str
    params: NotRequired[Dict[str, Any]]
    sessionId: NotRequired[str]


Frame = Union[str, bytes]


def split_method(method: str) -> tuple:
    """Split "Domain.command" into ("Domain", "command").

    Raises:
        InvalidCommandError: If method is not of the form Domain.name
    """
    domain, sep, name = method.partition(".")
    if not sep or not domain or not name:
        raise InvalidCommandError(
            f"Invalid CDP method name: {method!r}",
            method=method,
            details={"expected": "Domain.method"},
        )
    return domain, name


def encode_command(command_id: int, method: str, params: Dict[str, Any] = None) -> str:
    """Serialize a command envelope to a text frame."""
    split_method(method)
    envelope: CommandEnvelope = {
        "id": command_id,
        "method": method,
        "params": params or {},
    }
    return json.dumps(envelope)


def decode_frame(frame: Frame) -> Dict[str, Any]:
    """Parse one frame into a message dict.

    Raises:
        InvalidFrameError: If the frame is not a JSON object
    """
    if isinstance(frame, bytes):
        try:
            frame = frame.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidFrameError(f"Frame is not valid UTF-8: {e}") from e

    try:
        message = json.loads(frame)
    except json.JSONDecodeError as e:
        raise InvalidFrameError(
            f"Malformed CDP message: {e}",
            details={"frame": frame[:200]},
        ) from e

    if not isinstance(message, dict):
        raise InvalidFrameError(
            "CDP message is not a JSON object",
            details={"frame": frame[:200]},
        )
    return message


def is_response(message: Dict[str, Any]) -> bool:
    return type(message.get("id")) is int


def is_event(message: Dict[str, Any]) -> bool:
    return "id" not in message and isinstance(message.get("method"), str)
