"""Unit tests for RequestInterceptor: blocking and mocking paused requests."""

import base64

import pytest

from cdp_devtools.connection import CDPConnection
from cdp_devtools.devtools import DevTools
from cdp_devtools.domains import ErrorReason
from cdp_devtools.interception import InterceptRule, MockResponse, RequestInterceptor

from stubs import WS_URL, StubTransport, reply_with, settle


def paused(request_id, url):
    return {
        "method": "Fetch.requestPaused",
        "params": {
            "requestId": request_id,
            "request": {"url": url, "method": "GET"},
            "frameId": "F1",
            "resourceType": "Image",
        },
    }


@pytest.mark.unit
class TestRules:
    def test_glob_matching(self):
        rule = InterceptRule("*chrome.png")
        assert rule.matches("https://example.com/img/chrome.png")
        assert not rule.matches("https://example.com/img/chrome.png?v=2")

    def test_mock_response_encoding(self):
        mock = MockResponse(body="hello", headers={"Content-Type": "text/plain"})
        assert base64.b64decode(mock.encoded_body()) == b"hello"
        assert [(h.name, h.value) for h in mock.header_entries()] == [("Content-Type", "text/plain")]


async def open_devtools():
    transport = StubTransport(responder=reply_with())
    devtools = DevTools(CDPConnection(WS_URL, transport=transport))
    await devtools.open()
    return devtools, transport


@pytest.mark.unit
@pytest.mark.asyncio
class TestRequestInterceptor:
    async def test_start_enables_fetch_with_patterns(self):
        devtools, transport = await open_devtools()
        interceptor = RequestInterceptor(devtools.fetch)
        interceptor.block("*.png")
        interceptor.mock("*logo.svg", MockResponse(body=b"<svg/>"))

        await interceptor.start()

        assert interceptor.running
        assert transport.last("Fetch.enable")["params"] == {
            "patterns": [{"urlPattern": "*.png"}, {"urlPattern": "*logo.svg"}]
        }
        assert devtools.connection.listeners("Fetch.requestPaused")

    async def test_block_fails_matching_request(self):
        devtools, transport = await open_devtools()
        interceptor = RequestInterceptor(devtools.fetch)
        interceptor.block("*chrome.png", ErrorReason.BLOCKED_BY_CLIENT)

        async with interceptor:
            transport.feed(paused("i-1", "https://example.com/chrome.png"))
            await settle()

        assert transport.last("Fetch.failRequest")["params"] == {
            "requestId": "i-1",
            "errorReason": "BlockedByClient",
        }
        assert interceptor.handled == 1
        assert transport.methods()[-1] == "Fetch.disable"
        assert not interceptor.running

    async def test_mock_fulfills_matching_request(self):
        devtools, transport = await open_devtools()
        interceptor = RequestInterceptor(devtools.fetch)
        interceptor.mock(
            "*logo.png",
            MockResponse(body=b"\x89PNG", status=201, status_text="Created", headers={"X-Mock": "1"}),
        )

        async with interceptor:
            transport.feed(paused("i-2", "https://example.com/logo.png"))
            await settle()

        assert transport.last("Fetch.fulfillRequest")["params"] == {
            "requestId": "i-2",
            "responseCode": 201,
            "responseHeaders": [{"name": "X-Mock", "value": "1"}],
            "body": base64.b64encode(b"\x89PNG").decode("ascii"),
            "responsePhrase": "Created",
        }

    async def test_unmatched_request_continues(self):
        devtools, transport = await open_devtools()
        interceptor = RequestInterceptor(devtools.fetch)
        interceptor.block("*.png")

        async with interceptor:
            transport.feed(paused("i-3", "https://example.com/app.js"))
            await settle()

        assert transport.last("Fetch.continueRequest")["params"] == {"requestId": "i-3"}
        assert interceptor.handled == 0

    async def test_first_matching_rule_wins(self):
        devtools, transport = await open_devtools()
        interceptor = RequestInterceptor(devtools.fetch)
        interceptor.mock("*.png", MockResponse(body=b""))
        interceptor.block("*.png")

        async with interceptor:
            transport.feed(paused("i-4", "https://example.com/a.png"))
            await settle()

        assert "Fetch.fulfillRequest" in transport.methods()
        assert "Fetch.failRequest" not in transport.methods()

    async def test_stop_after_disconnect_skips_disable(self):
        devtools, transport = await open_devtools()
        interceptor = RequestInterceptor(devtools.fetch)
        await interceptor.start()
        await devtools.close()

        await interceptor.stop()
        assert "Fetch.disable" not in transport.methods()
