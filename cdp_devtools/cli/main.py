"""
Main CLI entry point for cdp-devtools.

Usage:
    python -m cdp_devtools.cli.main <subcommand> [options]

Subcommands:
    session     - List page targets or print a WebDriver session's DevTools URL
    query       - Execute an arbitrary CDP command
    screenshot  - Navigate and capture a screenshot, with optional emulation
    network     - Navigate and record network requests
    console     - Navigate and record console messages
    coverage    - Navigate and print the CSS rules the page used
"""

import argparse
import sys
from typing import List, Optional

from ..config import Configuration
from ..logging_setup import setup_logging


def create_parent_parser() -> argparse.ArgumentParser:
    """
    Create parent parser with global options shared across all subcommands.

    Options default to None so that values from ~/.cdprc and CDP_* environment
    variables apply unless the flag is given.
    """
    parent = argparse.ArgumentParser(add_help=False)

    parent.add_argument(
        "--chrome-host",
        default=None,
        help="Host serving /json or the WebDriver hub (default: localhost)",
    )
    parent.add_argument(
        "--chrome-port",
        type=int,
        default=None,
        help="DevTools or hub port (default: 9222)",
    )
    parent.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Command timeout in seconds (default: 30.0)",
    )

    parent.add_argument(
        "--format",
        choices=["json", "text"],
        default=None,
        help="Log and output format (default: text)",
    )

    parent.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (default: info)",
    )

    verbosity_group = parent.add_mutually_exclusive_group()
    verbosity_group.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress non-essential output (only show results)",
    )
    verbosity_group.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose debug output",
    )

    return parent


def create_main_parser(parent: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Create main parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="cdp-devtools",
        description="Chrome DevTools Protocol (CDP) client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List page targets of a local Chrome
  cdp-devtools session list

  # Screenshot through a Selenoid hub session
  cdp-devtools screenshot https://example.com --chrome-port 4444 --session-id <id> --output page.png

  # Block images while taking a screenshot
  cdp-devtools screenshot https://example.com --block '*.png' --output blocked.png

  # Record network requests for 10 seconds after load
  cdp-devtools network https://example.com --duration 10

  # Execute arbitrary CDP command
  cdp-devtools query --method Runtime.evaluate --params '{"expression":"document.title"}'

For more information on subcommands, run: cdp-devtools <subcommand> --help
        """,
    )

    subparsers = parser.add_subparsers(
        dest="subcommand",
        title="subcommands",
        description="Available CDP operations",
        required=True,
    )

    from . import (
        session_cmd,
        query_cmd,
        screenshot_cmd,
        network_cmd,
        console_cmd,
        coverage_cmd,
    )

    session_cmd.register_subcommand(subparsers, parent)
    query_cmd.register_subcommand(subparsers, parent)
    screenshot_cmd.register_subcommand(subparsers, parent)
    network_cmd.register_subcommand(subparsers, parent)
    console_cmd.register_subcommand(subparsers, parent)
    coverage_cmd.register_subcommand(subparsers, parent)

    return parser


def build_config(args: argparse.Namespace) -> Configuration:
    """
    Load configuration with precedence: CLI > env > file > defaults.
    """
    config = Configuration()
    config.load_from_file("~/.cdprc")
    config.load_from_env()

    config.merge(
        chrome_host=getattr(args, "chrome_host", None),
        chrome_port=getattr(args, "chrome_port", None),
        timeout=getattr(args, "timeout", None),
        log_level=args.log_level.upper() if getattr(args, "log_level", None) else None,
        log_format=getattr(args, "format", None),
    )

    if getattr(args, "quiet", False):
        config.log_level = "ERROR"
    elif getattr(args, "verbose", False):
        config.log_level = "DEBUG"

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for CLI.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parent = create_parent_parser()
    parser = create_main_parser(parent)

    args = parser.parse_args(argv)

    config = build_config(args)
    setup_logging(
        format_type=config.log_format,
        level=str(config.log_level).upper(),
        quiet=getattr(args, "quiet", False),
        verbose=getattr(args, "verbose", False),
    )

    # Subcommands read connection settings from here
    args.config = config

    if hasattr(args, "func"):
        try:
            return args.func(args)
        except KeyboardInterrupt:
            print("\nInterrupted by user", file=sys.stderr)
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            if str(config.log_level).upper() == "DEBUG":
                raise
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
