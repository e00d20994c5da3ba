"""Unit tests for the cdp-devtools CLI: parsing, config precedence and handlers."""

import argparse
import base64
import json
import threading
from unittest.mock import MagicMock, patch

import pytest

from cdp_devtools.cli.main import build_config, create_main_parser, create_parent_parser, main
from cdp_devtools.cli.screenshot_cmd import parse_geolocation, parse_pair
from cdp_devtools.connection import CDPConnection
from cdp_devtools.exceptions import CDPTargetNotFoundError

from stubs import WS_URL, StubTransport, reply_with

LOADED = [{"method": "Page.loadEventFired", "params": {"timestamp": 1.0}}]


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch, tmp_path):
    """Keep tests away from ~/.cdprc, CDP_* variables and global logging state."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in ("CDP_CHROME_HOST", "CDP_CHROME_PORT", "CDP_TIMEOUT", "CDP_LOG_LEVEL", "CDP_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    with patch("cdp_devtools.cli.main.setup_logging"):
        yield


def parse(argv):
    return create_main_parser(create_parent_parser()).parse_args(argv)


def stub_connection(results=None, events=None):
    transport = StubTransport(responder=reply_with(results, events))
    return CDPConnection(WS_URL, transport=transport), transport


@pytest.mark.unit
class TestParser:
    def test_help_exits_cleanly(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0
        assert "screenshot" in capsys.readouterr().out

    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            main([])

    def test_target_options_are_exclusive(self):
        with pytest.raises(SystemExit):
            parse(["query", "--method", "Page.enable", "--ws-url", WS_URL, "--session-id", "abc"])

    def test_screenshot_repeatable_options(self):
        args = parse([
            "screenshot", "https://example.com",
            "--block", "*.png", "--block", "*.gif",
            "--mock", "*logo.svg=./logo.svg",
            "--set-html", "h1=<h1>x=y</h1>",
        ])
        assert args.block == ["*.png", "*.gif"]
        assert args.mock == [("*logo.svg", "./logo.svg")]
        assert args.set_html == [("h1", "<h1>x=y</h1>")]
        assert args.output == "screenshot.png"

    def test_parse_geolocation(self):
        assert parse_geolocation("52.52,13.40") == (52.52, 13.40, None)
        assert parse_geolocation("1,2,3") == (1.0, 2.0, 3.0)

    @pytest.mark.parametrize("value", ["52.52", "a,b", "1,2,3,4"])
    def test_parse_geolocation_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_geolocation(value)

    def test_parse_pair_invalid(self):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_pair("no-separator")


@pytest.mark.unit
class TestConfigPrecedence:
    def test_cli_overrides_env(self, monkeypatch):
        monkeypatch.setenv("CDP_CHROME_PORT", "9333")
        config = build_config(parse(["session", "list", "--chrome-port", "4444"]))
        assert config.chrome_port == 4444

    def test_env_used_when_flag_absent(self, monkeypatch):
        monkeypatch.setenv("CDP_CHROME_PORT", "9333")
        config = build_config(parse(["session", "list"]))
        assert config.chrome_port == 9333

    def test_quiet_forces_error_level(self):
        config = build_config(parse(["session", "list", "--quiet"]))
        assert config.log_level == "ERROR"


@pytest.mark.unit
class TestSessionCommand:
    def test_session_url(self, capsys):
        code = main(["session", "url", "abc123", "--chrome-host", "selenoid", "--chrome-port", "4444"])
        assert code == 0
        assert capsys.readouterr().out.strip() == "ws://selenoid:4444/devtools/abc123/page"

    def test_session_url_invalid(self, capsys):
        assert main(["session", "url", "a/b"]) == 1
        assert "Invalid WebDriver session id" in capsys.readouterr().err

    def test_session_list_json(self, capsys):
        response = MagicMock()
        response.read.return_value = json.dumps([
            {"id": "p1", "type": "page", "url": "https://example.com", "webSocketDebuggerUrl": "ws://x/p1"},
        ]).encode()
        response.__enter__.return_value = response

        with patch("cdp_devtools.session.urllib.request.urlopen", return_value=response):
            code = main(["session", "list", "--format", "json"])

        assert code == 0
        assert json.loads(capsys.readouterr().out)[0]["id"] == "p1"


@pytest.mark.unit
class TestQueryCommand:
    def test_query_prints_result(self, capsys):
        conn, transport = stub_connection({"Runtime.evaluate": {"result": {"type": "string", "value": "Hi"}}})
        with patch("cdp_devtools.cli.query_cmd.resolve_connection", return_value=conn):
            code = main([
                "query", "--method", "Runtime.evaluate",
                "--params", '{"expression": "document.title"}',
            ])

        assert code == 0
        assert transport.last("Runtime.evaluate")["params"] == {"expression": "document.title"}
        assert json.loads(capsys.readouterr().out) == {"result": {"type": "string", "value": "Hi"}}
        assert not conn.is_connected

    def test_target_discovery_runs_off_the_event_loop(self):
        conn, _ = stub_connection()
        threads = []

        def discover(args):
            threads.append(threading.current_thread())
            return conn

        with patch("cdp_devtools.cli.query_cmd.resolve_connection", side_effect=discover):
            code = main(["query", "--method", "Page.enable"])

        assert code == 0
        assert threads and threads[0] is not threading.main_thread()

    def test_query_invalid_params(self, capsys):
        assert main(["query", "--method", "Page.enable", "--params", "{bad"]) == 1
        assert "Invalid JSON params" in capsys.readouterr().err

    def test_target_not_found(self, capsys):
        with patch(
            "cdp_devtools.cli.query_cmd.resolve_connection",
            side_effect=CDPTargetNotFoundError("Target not found", target_id="missing"),
        ):
            code = main(["query", "--method", "Page.enable", "--target", "missing"])

        assert code == 1
        assert "Target not found: missing" in capsys.readouterr().err


@pytest.mark.unit
class TestScreenshotCommand:
    def test_screenshot_with_emulation_and_blocking(self, tmp_path):
        conn, transport = stub_connection(
            {
                "Page.navigate": {"frameId": "F1"},
                "Page.captureScreenshot": {"data": base64.b64encode(b"PNGDATA").decode()},
            },
            {"Page.navigate": LOADED},
        )
        output = tmp_path / "shots" / "page.png"

        with patch("cdp_devtools.cli.screenshot_cmd.resolve_connection", return_value=conn):
            code = main([
                "screenshot", "https://example.com",
                "--output", str(output),
                "--media", "print",
                "--geolocation", "52.52,13.40",
                "--hide-scrollbars",
                "--block", "*.png",
                "--quiet",
            ])

        assert code == 0
        assert output.read_bytes() == b"PNGDATA"
        assert transport.last("Emulation.setEmulatedMedia")["params"] == {"media": "print"}
        assert transport.last("Fetch.enable")["params"] == {"patterns": [{"urlPattern": "*.png"}]}
        assert transport.methods().index("Fetch.disable") < transport.methods().index("Page.captureScreenshot")
        assert transport.last("Page.captureScreenshot")["params"] == {"format": "png"}

    def test_screenshot_missing_selector(self, tmp_path, capsys):
        conn, _ = stub_connection(
            {
                "Page.navigate": {"frameId": "F1"},
                "DOM.getDocument": {"root": {"nodeId": 1, "nodeType": 9, "nodeName": "#document"}},
                "DOM.querySelector": {"nodeId": 0},
            },
            {"Page.navigate": LOADED},
        )
        with patch("cdp_devtools.cli.screenshot_cmd.resolve_connection", return_value=conn):
            code = main([
                "screenshot", "https://example.com",
                "--output", str(tmp_path / "x.png"),
                "--selector", "#missing",
            ])

        assert code == 1
        assert "No element matches selector: #missing" in capsys.readouterr().err
        assert not (tmp_path / "x.png").exists()


@pytest.mark.unit
class TestCoverageCommand:
    def test_used_rules_printed(self, capsys):
        conn, transport = stub_connection(
            {
                "Page.navigate": {"frameId": "F1"},
                "CSS.stopRuleUsageTracking": {
                    "ruleUsage": [
                        {"styleSheetId": "s1", "startOffset": 0, "endOffset": 14, "used": True},
                        {"styleSheetId": "s1", "startOffset": 15, "endOffset": 28, "used": False},
                    ]
                },
                "CSS.getStyleSheetText": {"text": "h1 {color:red} p {margin:0}"},
            },
            {"Page.navigate": LOADED},
        )
        with patch("cdp_devtools.cli.coverage_cmd.resolve_connection", return_value=conn):
            code = main(["coverage", "https://example.com"])

        assert code == 0
        assert capsys.readouterr().out.splitlines() == ["h1 {color:red}"]
        methods = transport.methods()
        assert methods.index("DOM.enable") < methods.index("CSS.enable")
        assert methods.count("CSS.getStyleSheetText") == 1
