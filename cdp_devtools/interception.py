"""
Request interception through the Fetch domain.

Blocks or mocks requests whose URL matches a glob pattern. Matching patterns are
registered with Fetch.enable so the browser only pauses requests we act on;
anything paused without a matching rule is continued unchanged.
"""

import base64
import fnmatch
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .connection import Subscription
from .domains.fetch import ErrorReason, Fetch, HeaderEntry, RequestPattern, RequestPaused

logger = logging.getLogger(__name__)


@dataclass
class MockResponse:
    """Canned response served by Fetch.fulfillRequest."""

    body: Union[str, bytes] = b""
    status: int = 200
    status_text: str = "OK"
    headers: Dict[str, str] = field(default_factory=dict)

    def encoded_body(self) -> str:
        body = self.body.encode("utf-8") if isinstance(self.body, str) else self.body
        return base64.b64encode(body).decode("ascii")

    def header_entries(self) -> List[HeaderEntry]:
        return [HeaderEntry(name, value) for name, value in self.headers.items()]


@dataclass
class InterceptRule:
    url_pattern: str
    error_reason: Optional[ErrorReason] = None
    mock: Optional[MockResponse] = None

    def matches(self, url: str) -> bool:
        return fnmatch.fnmatchcase(url, self.url_pattern)


class RequestInterceptor:
    """
    Fails or fulfills paused requests according to URL rules.

    Usage:
        interceptor = RequestInterceptor(devtools.fetch)
        interceptor.block("*chrome.png")
        interceptor.mock("*logo.png", MockResponse(body=png_bytes))
        async with interceptor:
            await devtools.page.navigate_and_wait(url)

    Rules are checked in the order they were added; the first match wins.
    """

    def __init__(self, fetch: Fetch):
        self.fetch = fetch
        self.rules: List[InterceptRule] = []
        self.handled = 0
        self._subscription: Optional[Subscription] = None

    @property
    def running(self) -> bool:
        return self._subscription is not None

    def block(self, url_pattern: str, error_reason: ErrorReason = ErrorReason.FAILED) -> None:
        self.rules.append(InterceptRule(url_pattern, error_reason=error_reason))

    def mock(self, url_pattern: str, response: MockResponse) -> None:
        self.rules.append(InterceptRule(url_pattern, mock=response))

    async def start(self) -> None:
        """Subscribe to Fetch.requestPaused, then enable Fetch for every rule pattern."""
        if self.running:
            return
        self._subscription = self.fetch.on_request_paused(self._on_request_paused)
        patterns = [RequestPattern(url_pattern=rule.url_pattern) for rule in self.rules]
        await self.fetch.enable(patterns=patterns or None)

    async def stop(self) -> None:
        if not self.running:
            return
        self._subscription.cancel()
        self._subscription = None
        if self.fetch.connection.is_connected:
            await self.fetch.disable()

    async def _on_request_paused(self, event: RequestPaused) -> None:
        url = event.request.url
        rule = next((r for r in self.rules if r.matches(url)), None)

        if rule is None:
            await self.fetch.continue_request(event.request_id)
            return

        self.handled += 1
        if rule.mock is not None:
            logger.debug(f"Mocking {url} with status {rule.mock.status}")
            await self.fetch.fulfill_request(
                event.request_id,
                rule.mock.status,
                response_headers=rule.mock.header_entries(),
                body=rule.mock.encoded_body(),
                response_phrase=rule.mock.status_text,
            )
        else:
            logger.debug(f"Failing {url} with {rule.error_reason.value}")
            await self.fetch.fail_request(event.request_id, rule.error_reason)

    async def __aenter__(self) -> "RequestInterceptor":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.stop()
        return False
