"""
Helpers shared by subcommands: endpoint selection and error reporting.
"""

import argparse
import asyncio
import sys
from typing import Awaitable, Callable

from ..config import Configuration
from ..connection import CDPConnection
from ..exceptions import CDPError, CDPTargetNotFoundError
from ..session import CDPSession

AsyncHandler = Callable[[argparse.Namespace], Awaitable[int]]


def add_target_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the mutually exclusive endpoint selection options."""
    target_group = parser.add_mutually_exclusive_group()
    target_group.add_argument(
        "--ws-url",
        help="DevTools WebSocket URL to connect to directly",
    )
    target_group.add_argument(
        "--session-id",
        help="WebDriver session id; connects to ws://HOST:PORT/devtools/<id>/page",
    )
    target_group.add_argument("--target", help="Target ID from 'session list'")
    target_group.add_argument(
        "--match",
        help="Use the first page target whose URL contains this text",
    )


def get_config(args: argparse.Namespace) -> Configuration:
    config = getattr(args, "config", None)
    if config is None:
        config = Configuration()
    return config


def create_session(args: argparse.Namespace) -> CDPSession:
    config = get_config(args)
    return CDPSession(
        chrome_host=config.chrome_host,
        chrome_port=config.chrome_port,
        timeout=config.timeout,
        command_timeout=config.timeout,
        max_size=config.max_size,
    )


def resolve_connection(args: argparse.Namespace) -> CDPConnection:
    """
    Build (but do not open) the connection selected by the target options.

    Precedence: --ws-url, --session-id, --target, --match, first page target.

    Raises:
        CDPTargetNotFoundError: If the requested target does not exist
        CDPError: If target discovery fails
    """
    session = create_session(args)

    if getattr(args, "ws_url", None):
        return session.connect_to_url(args.ws_url)
    if getattr(args, "session_id", None):
        return session.connect_to_session(args.session_id)
    if getattr(args, "target", None):
        target = session.get_target_by_id(args.target)
        if not target:
            raise CDPTargetNotFoundError(
                f"Target not found: {args.target}",
                target_id=args.target,
            )
        return session.connect_to_target(target)
    if getattr(args, "match", None):
        targets = session.list_targets(target_type="page", url_pattern=args.match)
        if not targets:
            raise CDPTargetNotFoundError(
                f"No page target matching URL: {args.match}",
                url_pattern=args.match,
            )
        return session.connect_to_target(targets[0])
    return session.connect_to_first_page()


def report_error(args: argparse.Namespace, error: CDPError) -> int:
    """Print a CDPError (and its recovery hint) to stderr; re-raise in debug mode."""
    if get_config(args).log_level.upper() == "DEBUG":
        raise error
    print(f"Error: {error}", file=sys.stderr)
    if error.details.get("recovery"):
        print(f"Recovery hint: {error.details['recovery']}", file=sys.stderr)
    return 1


def run_async(handler: AsyncHandler) -> Callable[[argparse.Namespace], int]:
    """Wrap an async subcommand handler into the sync ``func`` argparse dispatches to."""

    def _run(args: argparse.Namespace) -> int:
        try:
            return asyncio.run(handler(args))
        except CDPError as e:
            return report_error(args, e)

    _run.__name__ = handler.__name__
    _run.__doc__ = handler.__doc__
    return _run
