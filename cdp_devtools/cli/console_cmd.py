"""
Console subcommand for capturing console messages during a page load.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from .common import add_target_arguments, get_config, resolve_connection, run_async
from ..collectors.console import ConsoleCollector
from ..devtools import DevTools


async def console_handler_async(args: argparse.Namespace) -> int:
    """
    Handle 'console' command.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    async with await asyncio.to_thread(resolve_connection, args) as conn:
        devtools = DevTools(conn)
        collector = ConsoleCollector(
            devtools.runtime,
            output_path=Path(args.output) if args.output else None,
            level_filter=args.level,
        )

        async with collector:
            await devtools.page.navigate_and_wait(args.url, timeout=get_config(args).timeout)
            if args.duration > 0:
                if not args.quiet:
                    print(
                        f"Streaming console messages for {args.duration} seconds...",
                        file=sys.stderr,
                    )
                await asyncio.sleep(args.duration)

    if not args.quiet and collector.output_path:
        print(f"Console logs saved to: {collector.output_path}", file=sys.stderr)
    return 0


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    """Register 'console' subcommand."""
    console_parser = subparsers.add_parser(
        "console",
        parents=[parent],
        help="Capture console messages of a page load",
        description="Navigate to a URL and stream console messages and exceptions as JSONL",
        epilog="""
Examples:
  # Warnings and errors only
  cdp-devtools console https://example.com --level warn

  # Keep listening for a minute after load
  cdp-devtools console https://example.com --duration 60 --output console.jsonl
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    console_parser.add_argument("url", help="URL to navigate to")
    add_target_arguments(console_parser)

    console_parser.add_argument(
        "--duration",
        type=float,
        default=0.0,
        help="Seconds to keep listening after the load event (default: 0)",
    )
    console_parser.add_argument(
        "--level",
        choices=["debug", "log", "info", "warn", "error"],
        help="Minimum log level to capture",
    )
    console_parser.add_argument(
        "--output",
        help="Output file path for console logs (JSONL format); stdout if omitted",
    )

    console_parser.set_defaults(func=run_async(console_handler_async))
