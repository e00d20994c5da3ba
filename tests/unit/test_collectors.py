"""Unit tests for NetworkCollector and ConsoleCollector over a stub connection."""

import asyncio
import io
import json

import pytest

from cdp_devtools.collectors import ConsoleCollector, NetworkCollector
from cdp_devtools.connection import CDPConnection
from cdp_devtools.devtools import DevTools

from stubs import WS_URL, StubTransport, reply_with, settle


async def open_devtools(results=None):
    transport = StubTransport(responder=reply_with(results))
    devtools = DevTools(CDPConnection(WS_URL, transport=transport))
    await devtools.open()
    return devtools, transport


def lines(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def request_sent(request_id, url, timestamp=1.0):
    return {
        "method": "Network.requestWillBeSent",
        "params": {
            "requestId": request_id,
            "request": {"url": url, "method": "GET", "headers": {}},
            "timestamp": timestamp,
            "type": "Document",
        },
    }


def response_received(request_id, url, mime_type="text/html", timing=None):
    response = {"url": url, "status": 200, "statusText": "OK", "mimeType": mime_type, "headers": {}}
    if timing is not None:
        response["timing"] = timing
    return {
        "method": "Network.responseReceived",
        "params": {"requestId": request_id, "response": response, "timestamp": 2.0, "type": "Document"},
    }


@pytest.mark.unit
@pytest.mark.asyncio
class TestNetworkCollector:
    async def test_lifecycle(self):
        devtools, transport = await open_devtools()
        collector = NetworkCollector(devtools.network, stream=io.StringIO())

        await collector.start()
        assert collector.running
        assert transport.methods() == ["Network.enable"]
        assert len(devtools.connection.listeners("Network.responseReceived")) == 1

        await collector.stop()
        assert not collector.running
        assert devtools.connection.listeners("Network.responseReceived") == []

    async def test_response_entry(self):
        devtools, transport = await open_devtools()
        stream = io.StringIO()

        async with NetworkCollector(devtools.network, stream=stream) as collector:
            transport.feed(request_sent("r1", "https://example.com/"))
            transport.feed(response_received("r1", "https://example.com/", timing={"receiveHeadersEnd": 42.5}))
            await settle()

        assert lines(stream) == [{
            "requestId": "r1",
            "url": "https://example.com/",
            "method": "GET",
            "status": 200,
            "statusText": "OK",
            "mimeType": "text/html",
            "timestamp": 2.0,
            "durationMs": 42.5,
            "type": "Document",
        }]
        assert collector.count == 1

    async def test_response_without_request_is_skipped(self):
        devtools, transport = await open_devtools()
        stream = io.StringIO()

        async with NetworkCollector(devtools.network, stream=stream):
            transport.feed(response_received("unknown", "https://example.com/"))
            await settle()

        assert stream.getvalue() == ""

    async def test_include_bodies(self):
        devtools, transport = await open_devtools(
            {"Network.getResponseBody": {"body": "<html></html>", "base64Encoded": False}}
        )
        stream = io.StringIO()

        async with NetworkCollector(devtools.network, include_bodies=True, stream=stream):
            transport.feed(request_sent("r1", "https://example.com/"))
            transport.feed(response_received("r1", "https://example.com/"))
            transport.feed(request_sent("r2", "https://example.com/logo.png"))
            transport.feed(response_received("r2", "https://example.com/logo.png", mime_type="image/png"))
            await settle(20)

        entries = {entry["requestId"]: entry for entry in lines(stream)}
        assert entries["r1"]["body"] == "<html></html>"
        assert entries["r1"]["base64Encoded"] is False
        assert "body" not in entries["r2"]
        assert transport.methods().count("Network.getResponseBody") == 1

    async def test_loading_failed_entry(self):
        devtools, transport = await open_devtools()
        stream = io.StringIO()

        async with NetworkCollector(devtools.network, stream=stream):
            transport.feed(request_sent("r1", "https://example.com/chrome.png"))
            transport.feed({
                "method": "Network.loadingFailed",
                "params": {
                    "requestId": "r1",
                    "timestamp": 3.0,
                    "type": "Image",
                    "errorText": "net::ERR_FAILED",
                    "canceled": False,
                    "blockedReason": "inspector",
                },
            })

        entry = lines(stream)[0]
        assert entry["status"] == 0
        assert entry["statusText"] == "FAILED"
        assert entry["errorText"] == "net::ERR_FAILED"
        assert entry["blockedReason"] == "inspector"

    async def test_file_output_flushed_on_stop(self, tmp_path):
        devtools, transport = await open_devtools()
        output = tmp_path / "logs" / "network.jsonl"

        async with NetworkCollector(devtools.network, output_path=output):
            transport.feed(request_sent("r1", "https://example.com/"))
            transport.feed(response_received("r1", "https://example.com/"))
            await settle()

        records = [json.loads(line) for line in output.read_text().splitlines()]
        assert [r["requestId"] for r in records] == ["r1"]


@pytest.mark.unit
@pytest.mark.asyncio
class TestConsoleCollector:
    async def test_console_entries(self):
        devtools, transport = await open_devtools()
        stream = io.StringIO()

        async with ConsoleCollector(devtools.runtime, stream=stream):
            transport.feed({
                "method": "Runtime.consoleAPICalled",
                "params": {
                    "type": "log",
                    "args": [{"type": "string", "value": "hello"}, {"type": "object", "description": "Object"}],
                    "executionContextId": 1,
                    "timestamp": 10.0,
                },
            })

        assert transport.methods() == ["Runtime.enable"]
        assert lines(stream) == [{"type": "log", "text": "hello; Object", "timestamp": 10.0}]

    async def test_exception_entry(self):
        devtools, transport = await open_devtools()
        stream = io.StringIO()

        async with ConsoleCollector(devtools.runtime, stream=stream):
            transport.feed({
                "method": "Runtime.exceptionThrown",
                "params": {
                    "timestamp": 11.0,
                    "exceptionDetails": {
                        "exceptionId": 1,
                        "text": "Uncaught",
                        "lineNumber": 4,
                        "columnNumber": 2,
                        "url": "https://example.com/app.js",
                        "exception": {"type": "object", "description": "TypeError: x is undefined"},
                    },
                },
            })

        assert lines(stream) == [{
            "type": "exception",
            "text": "TypeError: x is undefined",
            "url": "https://example.com/app.js",
            "line": 4,
            "timestamp": 11.0,
        }]

    async def test_level_filter(self):
        devtools, transport = await open_devtools()
        stream = io.StringIO()

        async with ConsoleCollector(devtools.runtime, level_filter="warn", stream=stream):
            for level in ("debug", "log", "warning", "error"):
                transport.feed({
                    "method": "Runtime.consoleAPICalled",
                    "params": {"type": level, "args": [{"type": "string", "value": level}]},
                })

        assert [entry["type"] for entry in lines(stream)] == ["warning", "error"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_periodic_flush_task_cancelled_on_stop(tmp_path):
    devtools, _ = await open_devtools()
    collector = ConsoleCollector(devtools.runtime, output_path=tmp_path / "console.jsonl")

    await collector.start()
    flush_task = collector._flush_task
    assert isinstance(flush_task, asyncio.Task)

    await collector.stop()
    assert flush_task.cancelled()
    assert collector._flush_task is None
