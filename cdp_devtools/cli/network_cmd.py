"""
Network subcommand for recording network activity during a page load.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from .common import add_target_arguments, get_config, resolve_connection, run_async
from ..collectors.network import NetworkCollector
from ..devtools import DevTools


async def network_handler_async(args: argparse.Namespace) -> int:
    """
    Handle 'network' command.

    Starts recording, navigates to the URL, waits for the load event and keeps
    recording for --duration seconds.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    async with await asyncio.to_thread(resolve_connection, args) as conn:
        devtools = DevTools(conn)
        collector = NetworkCollector(
            devtools.network,
            output_path=Path(args.output) if args.output else None,
            include_bodies=args.include_bodies,
        )

        async with collector:
            await devtools.page.navigate_and_wait(args.url, timeout=get_config(args).timeout)
            if args.duration > 0:
                if not args.quiet:
                    print(
                        f"Recording network activity for {args.duration} seconds...",
                        file=sys.stderr,
                    )
                await asyncio.sleep(args.duration)

    if not args.quiet:
        print(f"Recorded {collector.count} requests", file=sys.stderr)
        if collector.output_path:
            print(f"Network logs saved to: {collector.output_path}", file=sys.stderr)
    return 0


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    """Register 'network' subcommand."""
    network_parser = subparsers.add_parser(
        "network",
        parents=[parent],
        help="Record network activity of a page load",
        description="Navigate to a URL and record requests, responses and failures as JSONL",
        epilog="""
Examples:
  # Print one JSON line per request
  cdp-devtools network https://example.com

  # Keep recording 30 seconds after load, with response bodies
  cdp-devtools network https://example.com --duration 30 --include-bodies

  # Save to file
  cdp-devtools network https://example.com --output network.jsonl
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    network_parser.add_argument("url", help="URL to navigate to")
    add_target_arguments(network_parser)

    network_parser.add_argument(
        "--duration",
        type=float,
        default=0.0,
        help="Seconds to keep recording after the load event (default: 0)",
    )
    network_parser.add_argument(
        "--include-bodies",
        action="store_true",
        help="Capture textual response bodies (increases memory usage)",
    )
    network_parser.add_argument(
        "--output",
        help="Output file path for network logs (JSONL format); stdout if omitted",
    )

    network_parser.set_defaults(func=run_async(network_handler_async))
