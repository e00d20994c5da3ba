"""
Query subcommand for executing arbitrary CDP commands.

Implements 'query' command for direct CDP method invocation with custom params.
"""

import argparse
import asyncio
import json
import sys

from .common import add_target_arguments, resolve_connection, run_async


async def query_handler_async(args: argparse.Namespace) -> int:
    """
    Handle 'query' command.

    Executes arbitrary CDP command with JSON params and prints the result.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    params = {}
    if args.params:
        try:
            params = json.loads(args.params)
        except json.JSONDecodeError as e:
            print(f"Error: Invalid JSON params: {e}", file=sys.stderr)
            return 1
        if not isinstance(params, dict):
            print("Error: --params must be a JSON object", file=sys.stderr)
            return 1

    async with await asyncio.to_thread(resolve_connection, args) as conn:
        result = await conn.execute_command(args.method, params)

    print(json.dumps(result, indent=2))
    return 0


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    """Register 'query' subcommand."""
    query_parser = subparsers.add_parser(
        "query",
        parents=[parent],
        help="Execute arbitrary CDP command",
        description="Execute any CDP method with custom parameters",
        epilog="""
Examples:
  # Simple command
  cdp-devtools query --method Runtime.evaluate --params '{"expression":"document.title","returnByValue":true}'

  # Command on target matching URL
  cdp-devtools query --match example.com --method Page.reload

  # Command through a WebDriver session
  cdp-devtools query --chrome-port 4444 --session-id <id> --method Page.navigate --params '{"url":"https://example.com"}'
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    add_target_arguments(query_parser)

    query_parser.add_argument(
        "--method",
        required=True,
        help="CDP method to execute (e.g., Runtime.evaluate, Page.navigate)",
    )
    query_parser.add_argument(
        "--params",
        help="JSON-encoded parameters for the CDP method",
    )

    query_parser.set_defaults(func=run_async(query_handler_async))
