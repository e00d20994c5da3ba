"""
Screenshot subcommand.

Navigates to a URL and captures the page, optionally after emulating media,
user agent, geolocation or hidden scrollbars, intercepting requests, editing
the document or highlighting an element.
"""

import argparse
import asyncio
import base64
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .common import add_target_arguments, get_config, resolve_connection, run_async
from ..devtools import DevTools
from ..domains.css import CSSStyleSheetHeader, SourceRange, StyleSheetAdded
from ..domains.overlay import HighlightConfig
from ..domains.page import CaptureScreenshotFormat, Viewport
from ..exceptions import CDPError
from ..interception import MockResponse, RequestInterceptor


def parse_geolocation(value: str) -> Tuple[float, float, Optional[float]]:
    """Parse LAT,LON[,ACCURACY] for --geolocation."""
    parts = value.split(",")
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError("expected LAT,LON or LAT,LON,ACCURACY")
    try:
        numbers = [float(part) for part in parts]
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number in {value!r}")
    accuracy = numbers[2] if len(numbers) == 3 else None
    return numbers[0], numbers[1], accuracy


def parse_pair(value: str) -> Tuple[str, str]:
    """Split KEY=VALUE at the first '=' for --mock and --set-html."""
    key, sep, rest = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {value!r}")
    return key, rest


def load_mock(path: str) -> MockResponse:
    body = Path(path).read_bytes()
    content_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
    return MockResponse(body=body, headers={"Content-Type": content_type})


async def find_node(devtools: DevTools, selector: str) -> int:
    """Return the node id of the first element matching selector."""
    document = await devtools.dom.get_document()
    node_id = await devtools.dom.query_selector(document.node_id, selector)
    if not node_id:
        raise CDPError(
            f"No element matches selector: {selector}",
            details={"selector": selector, "recovery": "Check the selector against the loaded page"},
        )
    return node_id


async def add_style_rule(devtools: DevTools, rule_text: str) -> None:
    """Insert rule_text at the top of the page's first stylesheet."""
    headers: List[CSSStyleSheetHeader] = []

    def _collect(event: StyleSheetAdded) -> None:
        headers.append(event.header)

    # CSS.enable reports existing stylesheets as styleSheetAdded events
    subscription = devtools.css.on_style_sheet_added(_collect)
    try:
        await devtools.dom.enable()
        await devtools.css.enable()
    finally:
        subscription.cancel()

    if not headers:
        raise CDPError(
            "Page has no stylesheet to add a rule to",
            details={"rule": rule_text},
        )
    await devtools.css.add_rule(headers[0].style_sheet_id, rule_text, SourceRange.at_start())


async def element_clip(devtools: DevTools, selector: str) -> Viewport:
    node_id = await find_node(devtools, selector)
    model = await devtools.dom.get_box_model(node_id=node_id)
    return Viewport(x=model.content[0], y=model.content[1], width=model.width, height=model.height)


async def screenshot_handler_async(args: argparse.Namespace) -> int:
    """
    Handle 'screenshot' command.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    config = get_config(args)

    async with await asyncio.to_thread(resolve_connection, args) as conn:
        devtools = DevTools(conn)
        emulation = devtools.emulation

        if args.media is not None:
            await emulation.set_emulated_media(media=args.media)
        if args.user_agent:
            await emulation.set_user_agent_override(
                args.user_agent,
                accept_language=args.accept_language,
                platform=args.platform,
            )
        if args.geolocation:
            latitude, longitude, accuracy = args.geolocation
            await emulation.set_geolocation_override(latitude, longitude, accuracy)
        if args.hide_scrollbars:
            await emulation.set_scrollbars_hidden(True)

        interceptor = RequestInterceptor(devtools.fetch)
        for pattern in args.block:
            interceptor.block(pattern)
        for pattern, path in args.mock:
            interceptor.mock(pattern, load_mock(path))

        if interceptor.rules:
            await interceptor.start()
        try:
            await devtools.page.navigate_and_wait(args.url, timeout=config.timeout)
        finally:
            await interceptor.stop()

        for rule_text in args.add_rule:
            await add_style_rule(devtools, rule_text)
        for selector, html in args.set_html:
            node_id = await find_node(devtools, selector)
            await devtools.dom.set_outer_html(node_id, html)
        if args.highlight:
            await devtools.dom.enable()
            await devtools.overlay.enable()
            node_id = await find_node(devtools, args.highlight)
            await devtools.overlay.highlight_node(HighlightConfig.default(), node_id=node_id)

        clip = await element_clip(devtools, args.selector) if args.selector else None
        data = await devtools.page.capture_screenshot(
            format=CaptureScreenshotFormat(args.image_format),
            quality=args.quality,
            clip=clip,
        )

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(base64.b64decode(data))

    if not args.quiet:
        if interceptor.handled:
            print(f"Intercepted {interceptor.handled} requests", file=sys.stderr)
        print(f"Screenshot saved to: {output}", file=sys.stderr)
    return 0


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    """Register 'screenshot' subcommand."""
    screenshot_parser = subparsers.add_parser(
        "screenshot",
        parents=[parent],
        help="Navigate to a URL and capture a screenshot",
        description="Capture a screenshot after optional emulation and request interception",
        epilog="""
Examples:
  # Plain screenshot
  cdp-devtools screenshot https://example.com --output page.png

  # Print media, hidden scrollbars, one element only
  cdp-devtools screenshot https://example.com --media print --hide-scrollbars --selector main

  # Block PNGs and serve a local file for the logo
  cdp-devtools screenshot https://example.com --block '*.png' --mock '*logo.svg=./logo.svg'

  # Emulate a mobile browser in Berlin
  cdp-devtools screenshot https://example.com --user-agent 'Mozilla/5.0 (iPhone)' --geolocation 52.52,13.40
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    screenshot_parser.add_argument("url", help="URL to navigate to")
    add_target_arguments(screenshot_parser)

    output_group = screenshot_parser.add_argument_group("output")
    output_group.add_argument(
        "--output",
        default="screenshot.png",
        help="Image file to write (default: screenshot.png)",
    )
    output_group.add_argument(
        "--image-format",
        choices=[fmt.value for fmt in CaptureScreenshotFormat],
        default=CaptureScreenshotFormat.PNG.value,
        help="Image format (default: png)",
    )
    output_group.add_argument(
        "--quality",
        type=int,
        help="Compression quality 0-100 (jpeg and webp only)",
    )
    output_group.add_argument(
        "--selector",
        help="Clip the screenshot to the first element matching this CSS selector",
    )

    emulation_group = screenshot_parser.add_argument_group("emulation")
    emulation_group.add_argument("--media", help="Emulated CSS media type, e.g. print")
    emulation_group.add_argument("--user-agent", help="User agent override")
    emulation_group.add_argument(
        "--accept-language", help="Accept-Language sent with --user-agent"
    )
    emulation_group.add_argument("--platform", help="navigator.platform sent with --user-agent")
    emulation_group.add_argument(
        "--geolocation",
        type=parse_geolocation,
        metavar="LAT,LON[,ACC]",
        help="Geolocation override",
    )
    emulation_group.add_argument(
        "--hide-scrollbars",
        action="store_true",
        help="Hide scrollbars before capturing",
    )

    intercept_group = screenshot_parser.add_argument_group("interception")
    intercept_group.add_argument(
        "--block",
        action="append",
        default=[],
        metavar="GLOB",
        help="Fail requests whose URL matches GLOB (repeatable)",
    )
    intercept_group.add_argument(
        "--mock",
        action="append",
        default=[],
        type=parse_pair,
        metavar="GLOB=FILE",
        help="Serve FILE for requests whose URL matches GLOB (repeatable)",
    )

    page_group = screenshot_parser.add_argument_group("page edits")
    page_group.add_argument(
        "--add-rule",
        action="append",
        default=[],
        metavar="CSS",
        help="Insert a CSS rule into the first stylesheet (repeatable)",
    )
    page_group.add_argument(
        "--set-html",
        action="append",
        default=[],
        type=parse_pair,
        metavar="SELECTOR=HTML",
        help="Replace the outer HTML of the first match (repeatable)",
    )
    page_group.add_argument(
        "--highlight",
        metavar="SELECTOR",
        help="Highlight the first element matching SELECTOR",
    )

    screenshot_parser.set_defaults(func=run_async(screenshot_handler_async))
