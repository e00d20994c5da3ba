"""
Console collector - captures console API calls and uncaught exceptions.
"""

from pathlib import Path
from typing import List, Optional, TextIO

from ..connection import Subscription
from ..domains.runtime import ConsoleAPICalled, ExceptionThrown, Runtime
from .base import JsonlCollector


class ConsoleCollector(JsonlCollector):
    """
    Captures console messages (log, warn, error, debug, info) and thrown exceptions.

    Each console call becomes {"type", "text", "timestamp"} where text joins the
    call's arguments with "; ". Uncaught exceptions become type "exception".

    Usage:
        async with ConsoleCollector(devtools.runtime, level_filter="warn") as collector:
            await devtools.page.navigate_and_wait(url)

    Attributes:
        runtime: Runtime domain facade
        level_filter: Minimum log level to capture ("log", "info", "warn", "error")
    """

    # Log level hierarchy (ascending severity)
    LOG_LEVELS = {
        "verbose": 0,
        "debug": 0,
        "log": 1,
        "info": 2,
        "warn": 3,
        "warning": 3,  # Alias
        "error": 4,
        "assert": 4,
        "exception": 4,
    }

    def __init__(
        self,
        runtime: Runtime,
        output_path: Optional[Path] = None,
        level_filter: Optional[str] = None,
        stream: Optional[TextIO] = None,
    ):
        super().__init__(output_path, stream)
        self.runtime = runtime
        self.level_filter = level_filter

    def _subscribe(self) -> List[Subscription]:
        return [
            self.runtime.on_console_api_called(self._on_console_api_called),
            self.runtime.on_exception_thrown(self._on_exception_thrown),
        ]

    async def _enable(self) -> None:
        await self.runtime.enable()

    def _on_console_api_called(self, event: ConsoleAPICalled) -> None:
        if not self._should_capture(event.type):
            return
        self._emit({
            "type": event.type,
            "text": "; ".join(arg.display() for arg in event.args),
            "timestamp": event.timestamp,
        })

    def _on_exception_thrown(self, event: ExceptionThrown) -> None:
        details = event.exception_details
        text = details.exception.display() if details.exception else details.text
        self._emit({
            "type": "exception",
            "text": text,
            "url": details.url or "",
            "line": details.line_number,
            "timestamp": event.timestamp,
        })

    def _should_capture(self, level: str) -> bool:
        if not self.level_filter:
            return True

        filter_idx = self.LOG_LEVELS.get(self.level_filter.lower(), 0)
        level_idx = self.LOG_LEVELS.get(level.lower(), 1)
        return level_idx >= filter_idx
