"""
Coverage subcommand: report which CSS rules a page load used.
"""

import argparse
import asyncio
import json
from typing import Dict, List

from .common import add_target_arguments, get_config, resolve_connection, run_async
from ..devtools import DevTools
from ..domains.css import CSS, RuleUsage


async def collect_rule_usage(
    devtools: DevTools, url: str, duration: float = 0.0, timeout=None
) -> List[RuleUsage]:
    """Track CSS rule usage across a navigation to url."""
    # CSS.enable requires DOM to be enabled first
    await devtools.dom.enable()
    await devtools.css.enable()
    await devtools.css.start_rule_usage_tracking()
    await devtools.page.navigate_and_wait(url, timeout=timeout)
    if duration > 0:
        await asyncio.sleep(duration)
    return await devtools.css.stop_rule_usage_tracking()


async def rule_texts(css: CSS, usages: List[RuleUsage]) -> List[Dict[str, object]]:
    """Resolve each usage to its rule text, fetching every stylesheet once."""
    sheets: Dict[str, str] = {}
    rules = []
    for usage in usages:
        text = sheets.get(usage.style_sheet_id)
        if text is None:
            text = await css.get_style_sheet_text(usage.style_sheet_id)
            sheets[usage.style_sheet_id] = text
        rules.append({
            "styleSheetId": usage.style_sheet_id,
            "used": usage.used,
            "rule": usage.extract(text),
        })
    return rules


async def coverage_handler_async(args: argparse.Namespace) -> int:
    """
    Handle 'coverage' command.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    async with await asyncio.to_thread(resolve_connection, args) as conn:
        devtools = DevTools(conn)
        usages = await collect_rule_usage(
            devtools, args.url, args.duration, timeout=get_config(args).timeout
        )
        if not args.all:
            usages = [usage for usage in usages if usage.used]
        rules = await rule_texts(devtools.css, usages)

    if get_config(args).log_format == "json":
        print(json.dumps(rules, indent=2))
    else:
        for rule in rules:
            marker = "" if rule["used"] else "[unused] "
            print(f"{marker}{rule['rule']}")
    return 0


def register_subcommand(
    subparsers: argparse._SubParsersAction, parent: argparse.ArgumentParser
) -> None:
    """Register 'coverage' subcommand."""
    coverage_parser = subparsers.add_parser(
        "coverage",
        parents=[parent],
        help="Report CSS rules used by a page load",
        description="Track CSS rule usage while loading a URL and print the rules",
        epilog="""
Examples:
  # Used rules only
  cdp-devtools coverage https://example.com

  # Used and unused rules as JSON
  cdp-devtools coverage https://example.com --all --format json
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    coverage_parser.add_argument("url", help="URL to navigate to")
    add_target_arguments(coverage_parser)

    coverage_parser.add_argument(
        "--duration",
        type=float,
        default=0.0,
        help="Seconds to keep tracking after the load event (default: 0)",
    )
    coverage_parser.add_argument(
        "--all",
        action="store_true",
        help="Include unused rules",
    )

    coverage_parser.set_defaults(func=run_async(coverage_handler_async))
