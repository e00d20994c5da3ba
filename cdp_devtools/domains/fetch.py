"""Fetch domain: pause, fail, fulfill or continue matching requests."""

import enum
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..connection import Subscription
from .base import ToggleableDomain, from_list
from .network import Request


class ErrorReason(str, enum.Enum):
    """Network.ErrorReason values accepted by Fetch.failRequest."""

    FAILED = "Failed"
    ABORTED = "Aborted"
    TIMED_OUT = "TimedOut"
    ACCESS_DENIED = "AccessDenied"
    CONNECTION_CLOSED = "ConnectionClosed"
    CONNECTION_RESET = "ConnectionReset"
    CONNECTION_REFUSED = "ConnectionRefused"
    CONNECTION_ABORTED = "ConnectionAborted"
    CONNECTION_FAILED = "ConnectionFailed"
    NAME_NOT_RESOLVED = "NameNotResolved"
    INTERNET_DISCONNECTED = "InternetDisconnected"
    ADDRESS_UNREACHABLE = "AddressUnreachable"
    BLOCKED_BY_CLIENT = "BlockedByClient"
    BLOCKED_BY_RESPONSE = "BlockedByResponse"


class RequestStage(str, enum.Enum):
    REQUEST = "Request"
    RESPONSE = "Response"


@dataclass
class RequestPattern:
    """Which requests Fetch pauses. ``*`` and ``?`` wildcards, ``\\`` escapes."""

    url_pattern: Optional[str] = None
    resource_type: Optional[str] = None
    request_stage: Optional[RequestStage] = None


@dataclass
class HeaderEntry:
    name: str
    value: str

    @classmethod
    def from_dict(cls, data: dict) -> "HeaderEntry":
        return cls(name=data["name"], value=data.get("value", ""))


@dataclass
class RequestPaused:
    request_id: str
    request: Request
    frame_id: str
    resource_type: str
    response_status_code: Optional[int] = None
    response_headers: Optional[List[HeaderEntry]] = None

    @property
    def is_response_stage(self) -> bool:
        return self.response_status_code is not None

    @classmethod
    def from_dict(cls, data: dict) -> "RequestPaused":
        headers = data.get("responseHeaders")
        return cls(
            request_id=data["requestId"],
            request=Request.from_dict(data.get("request") or {}),
            frame_id=data.get("frameId", ""),
            resource_type=data.get("resourceType", ""),
            response_status_code=data.get("responseStatusCode"),
            response_headers=from_list(HeaderEntry, headers) if headers is not None else None,
        )


class Fetch(ToggleableDomain):
    """Typed access to the Fetch domain.

    Every paused request must be resolved with fail_request, fulfill_request or
    continue_request, otherwise the page stalls.
    """

    name = "Fetch"

    async def enable(
        self,
        patterns: Optional[List[RequestPattern]] = None,
        handle_auth_requests: Optional[bool] = None,
    ) -> None:
        await self._call(
            "enable",
            {"patterns": patterns, "handle_auth_requests": handle_auth_requests},
        )

    async def fail_request(self, request_id: str, error_reason: ErrorReason) -> None:
        await self._call(
            "failRequest",
            {"request_id": request_id, "error_reason": error_reason},
            required=("request_id", "error_reason"),
        )

    async def fulfill_request(
        self,
        request_id: str,
        response_code: int,
        response_headers: Optional[List[HeaderEntry]] = None,
        body: Optional[str] = None,
        response_phrase: Optional[str] = None,
    ) -> None:
        """Answer a paused request. ``body`` must already be base64-encoded."""
        await self._call(
            "fulfillRequest",
            {
                "request_id": request_id,
                "response_code": response_code,
                "response_headers": response_headers,
                "body": body,
                "response_phrase": response_phrase,
            },
            required=("request_id", "response_code"),
        )

    async def continue_request(
        self,
        request_id: str,
        url: Optional[str] = None,
        method: Optional[str] = None,
        post_data: Optional[str] = None,
        headers: Optional[List[HeaderEntry]] = None,
    ) -> None:
        await self._call(
            "continueRequest",
            {
                "request_id": request_id,
                "url": url,
                "method": method,
                "post_data": post_data,
                "headers": headers,
            },
            required=("request_id",),
        )

    def on_request_paused(self, callback: Callable[[RequestPaused], object]) -> Subscription:
        return self._on("requestPaused", callback, RequestPaused)
