"""Network domain: request/response observation."""

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from ..connection import Subscription
from .base import ToggleableDomain


@dataclass
class Request:
    url: str
    method: str
    headers: Dict[str, str] = field(default_factory=dict)
    post_data: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Request":
        return cls(
            url=data.get("url", ""),
            method=data.get("method", ""),
            headers=data.get("headers") or {},
            post_data=data.get("postData"),
        )


@dataclass
class ResourceTiming:
    """Subset of Network.ResourceTiming; offsets are milliseconds from request_time."""

    request_time: float
    send_start: float
    send_end: float
    receive_headers_end: float

    @classmethod
    def from_dict(cls, data: dict) -> "ResourceTiming":
        return cls(
            request_time=data.get("requestTime", 0.0),
            send_start=data.get("sendStart", 0.0),
            send_end=data.get("sendEnd", 0.0),
            receive_headers_end=data.get("receiveHeadersEnd", 0.0),
        )


@dataclass
class Response:
    url: str
    status: int
    status_text: str
    mime_type: str
    headers: Dict[str, str] = field(default_factory=dict)
    timing: Optional[ResourceTiming] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Response":
        timing = data.get("timing")
        return cls(
            url=data.get("url", ""),
            status=data.get("status", 0),
            status_text=data.get("statusText", ""),
            mime_type=data.get("mimeType", ""),
            headers=data.get("headers") or {},
            timing=ResourceTiming.from_dict(timing) if timing else None,
        )


@dataclass
class RequestWillBeSent:
    request_id: str
    request: Request
    timestamp: float
    type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "RequestWillBeSent":
        return cls(
            request_id=data["requestId"],
            request=Request.from_dict(data.get("request") or {}),
            timestamp=data.get("timestamp", 0.0),
            type=data.get("type"),
        )


@dataclass
class ResponseReceived:
    request_id: str
    response: Response
    timestamp: float
    type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "ResponseReceived":
        return cls(
            request_id=data["requestId"],
            response=Response.from_dict(data.get("response") or {}),
            timestamp=data.get("timestamp", 0.0),
            type=data.get("type"),
        )


@dataclass
class LoadingFailed:
    request_id: str
    error_text: str
    timestamp: float
    canceled: bool = False
    blocked_reason: Optional[str] = None
    type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "LoadingFailed":
        return cls(
            request_id=data["requestId"],
            error_text=data.get("errorText", ""),
            timestamp=data.get("timestamp", 0.0),
            canceled=data.get("canceled", False),
            blocked_reason=data.get("blockedReason"),
            type=data.get("type"),
        )


@dataclass
class LoadingFinished:
    request_id: str
    timestamp: float
    encoded_data_length: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "LoadingFinished":
        return cls(
            request_id=data["requestId"],
            timestamp=data.get("timestamp", 0.0),
            encoded_data_length=data.get("encodedDataLength", 0.0),
        )


@dataclass
class ResponseBody:
    body: str
    base64_encoded: bool

    @classmethod
    def from_dict(cls, data: dict) -> "ResponseBody":
        return cls(body=data.get("body", ""), base64_encoded=data.get("base64Encoded", False))


class Network(ToggleableDomain):
    name = "Network"

    async def get_response_body(self, request_id: str) -> ResponseBody:
        result = await self._call(
            "getResponseBody", {"request_id": request_id}, required=("request_id",)
        )
        return ResponseBody.from_dict(result)

    def on_request_will_be_sent(
        self, callback: Callable[[RequestWillBeSent], object]
    ) -> Subscription:
        return self._on("requestWillBeSent", callback, RequestWillBeSent)

    def on_response_received(self, callback: Callable[[ResponseReceived], object]) -> Subscription:
        return self._on("responseReceived", callback, ResponseReceived)

    def on_loading_failed(self, callback: Callable[[LoadingFailed], object]) -> Subscription:
        return self._on("loadingFailed", callback, LoadingFailed)

    def on_loading_finished(self, callback: Callable[[LoadingFinished], object]) -> Subscription:
        return self._on("loadingFinished", callback, LoadingFinished)
