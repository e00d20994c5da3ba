"""
Network collector - joins request, response and failure events per request id.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, TextIO, TypedDict, TYPE_CHECKING

# NotRequired added in Python 3.11, use typing_extensions for 3.10 compatibility
if TYPE_CHECKING:
    from typing_extensions import NotRequired
else:
    try:
        from typing import NotRequired
    except ImportError:
        from typing_extensions import NotRequired

from ..connection import Subscription
from ..domains.network import (
    LoadingFailed,
    LoadingFinished,
    Network,
    Request,
    RequestWillBeSent,
    ResponseReceived,
)
from ..exceptions import CDPError
from .base import JsonlCollector

logger = logging.getLogger(__name__)


class NetworkEntry(TypedDict):
    """Structure of a network event entry."""
    requestId: str
    url: str
    method: str
    status: int
    statusText: str
    timestamp: float
    durationMs: NotRequired[float]  # receiveHeadersEnd; absent when timing is unknown
    mimeType: NotRequired[str]  # Optional: not present in failed requests
    type: NotRequired[str]
    body: NotRequired[str]  # Optional: only present if include_bodies=True
    base64Encoded: NotRequired[bool]  # Optional: only present with body
    errorText: NotRequired[str]  # Optional: only present in failed requests
    blockedReason: NotRequired[str]  # Optional: mixed-content, CORS, client blocks


class NetworkCollector(JsonlCollector):
    """
    Records one entry per finished or failed request.

    Usage:
        async with NetworkCollector(devtools.network) as collector:
            await devtools.page.navigate_and_wait(url)

    Attributes:
        network: Network domain facade
        include_bodies: Whether to fetch textual response bodies
        max_body_size: Largest body (in characters) kept in an entry
    """

    BINARY_MIME_PREFIXES = ("image/", "video/", "audio/", "font/")

    def __init__(
        self,
        network: Network,
        output_path: Optional[Path] = None,
        include_bodies: bool = False,
        max_body_size: int = 1048576,  # 1MB default limit
        stream: Optional[TextIO] = None,
    ):
        super().__init__(output_path, stream)
        self.network = network
        self.include_bodies = include_bodies
        self.max_body_size = max_body_size

        self._requests: Dict[str, Request] = {}

    def _subscribe(self) -> List[Subscription]:
        return [
            self.network.on_request_will_be_sent(self._on_request),
            self.network.on_response_received(self._on_response),
            self.network.on_loading_finished(self._on_loading_finished),
            self.network.on_loading_failed(self._on_loading_failed),
        ]

    async def _enable(self) -> None:
        await self.network.enable()

    def _on_request(self, event: RequestWillBeSent) -> None:
        self._requests[event.request_id] = event.request

    async def _on_response(self, event: ResponseReceived) -> None:
        request = self._requests.get(event.request_id)
        if request is None:
            # Requests issued before Network.enable
            return

        response = event.response
        entry: NetworkEntry = {
            "requestId": event.request_id,
            "url": response.url or request.url,
            "method": request.method,
            "status": response.status,
            "statusText": response.status_text,
            "mimeType": response.mime_type,
            "timestamp": event.timestamp,
        }
        if response.timing is not None:
            entry["durationMs"] = response.timing.receive_headers_end
        if event.type:
            entry["type"] = event.type

        if self.include_bodies and self._should_capture_body(response.mime_type):
            try:
                body = await self.network.get_response_body(event.request_id)
            except CDPError as e:
                # Body not available (redirect, evicted from cache, ...)
                logger.debug(f"No body for {entry['url']}: {e}")
            else:
                if body.body and len(body.body) <= self.max_body_size:
                    entry["body"] = body.body
                    entry["base64Encoded"] = body.base64_encoded

        self._emit(entry)

    def _on_loading_finished(self, event: LoadingFinished) -> None:
        self._requests.pop(event.request_id, None)

    def _on_loading_failed(self, event: LoadingFailed) -> None:
        request = self._requests.pop(event.request_id, None)
        if request is None:
            return

        entry: NetworkEntry = {
            "requestId": event.request_id,
            "url": request.url,
            "method": request.method,
            "status": 0,
            "statusText": "FAILED",
            "errorText": event.error_text,
            "timestamp": event.timestamp,
        }
        if event.blocked_reason:
            entry["blockedReason"] = event.blocked_reason
        if event.type:
            entry["type"] = event.type

        self._emit(entry)

    def _should_capture_body(self, mime_type: str) -> bool:
        return not mime_type.lower().startswith(self.BINARY_MIME_PREFIXES)
