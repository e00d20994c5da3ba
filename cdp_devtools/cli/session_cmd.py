"""
Session subcommand: target discovery and WebDriver session endpoints.
"""

import argparse
import json
import sys

from .common import create_session, get_config, report_error
from ..exceptions import CDPError


def session_list_handler(args: argparse.Namespace) -> int:
    """
    Handle 'session list': print targets from the /json endpoint.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    try:
        session = create_session(args)
        targets = session.list_targets(target_type=args.type, url_pattern=args.url)
    except CDPError as e:
        return report_error(args, e)

    if get_config(args).log_format == "json":
        print(json.dumps([target.to_dict() for target in targets], indent=2))
    else:
        for target in targets:
            print(f"{target.id}\t{target.type}\t{target.url}\t{target.title}")
    return 0


def session_url_handler(args: argparse.Namespace) -> int:
    """Handle 'session url ID': print the DevTools URL of a WebDriver session."""
    try:
        print(create_session(args).session_url(args.session_id))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    """Register 'session' subcommand."""
    session_parser = subparsers.add_parser(
        "session",
        help="List targets or resolve a WebDriver session's DevTools URL",
        description="Discover DevTools endpoints",
        epilog="""
Examples:
  # List only page targets
  cdp-devtools session list --type page

  # Find targets matching URL pattern
  cdp-devtools session list --url example.com

  # DevTools URL of a Selenoid session
  cdp-devtools session url 3f2a... --chrome-port 4444
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    actions = session_parser.add_subparsers(dest="action", required=True)

    list_parser = actions.add_parser("list", parents=[parent], help="List targets")
    list_parser.add_argument(
        "--type",
        choices=["page", "iframe", "worker", "service_worker", "browser"],
        help="Filter targets by type",
    )
    list_parser.add_argument(
        "--url",
        help="Filter targets by URL pattern (case-insensitive substring match)",
    )
    list_parser.set_defaults(func=session_list_handler)

    url_parser = actions.add_parser(
        "url", parents=[parent], help="Print the DevTools URL for a WebDriver session id"
    )
    url_parser.add_argument("session_id", help="WebDriver session id")
    url_parser.set_defaults(func=session_url_handler)
