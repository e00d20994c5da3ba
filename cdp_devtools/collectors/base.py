"""
Shared JSONL output for collectors.

Entries stream to a text stream (stdout by default) as they arrive, or are
buffered and appended to a file, flushed every 30 seconds and on stop.
"""

import asyncio
import json
import logging
import sys
from collections import deque
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional, TextIO

from ..connection import Subscription

logger = logging.getLogger(__name__)


class JsonlCollector:
    """
    Base class for collectors.

    Subclasses implement ``_subscribe`` (returning their subscriptions) and
    ``_enable``, and call ``_emit`` for every record.

    Attributes:
        output_path: Output file path for captured data (None = stream)
        stream: Text stream used when output_path is None
        count: Number of records emitted since construction
        _buffer: Bounded in-memory buffer (max 1000 entries, only used for file output)
    """

    FLUSH_INTERVAL = 30.0
    MAX_BUFFER = 1000

    def __init__(self, output_path: Optional[Path] = None, stream: Optional[TextIO] = None):
        self.output_path = Path(output_path) if output_path else None
        self.stream = stream
        self.count = 0

        self._buffer: Deque[Dict[str, Any]] = deque(maxlen=self.MAX_BUFFER)
        self._flush_task: Optional[asyncio.Task] = None
        self._subscriptions: List[Subscription] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """
        Subscribe to events, then enable the source domain.

        Raises:
            CDPError: If the enable command fails
        """
        if self._running:
            return
        self._subscriptions = self._subscribe()
        await self._enable()
        self._running = True

        if self.output_path:
            self._flush_task = asyncio.create_task(self._periodic_flush())

    async def stop(self) -> None:
        """Unsubscribe, cancel the flush task and write what is buffered."""
        self._running = False

        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []

        if self._flush_task:
            self._flush_task.cancel()
            try:
                await self._flush_task
            except asyncio.CancelledError:
                pass
            self._flush_task = None

        self._flush_to_disk()

    def _subscribe(self) -> List[Subscription]:
        raise NotImplementedError

    async def _enable(self) -> None:
        raise NotImplementedError

    def _emit(self, entry: Dict[str, Any]) -> None:
        self.count += 1
        if self.output_path is None:
            print(json.dumps(entry), file=self.stream or sys.stdout, flush=True)
        else:
            if len(self._buffer) == self._buffer.maxlen:
                logger.warning("Collector buffer full, dropping oldest entry")
            self._buffer.append(entry)

    async def _periodic_flush(self) -> None:
        while self._running:
            await asyncio.sleep(self.FLUSH_INTERVAL)
            self._flush_to_disk()

    def _flush_to_disk(self) -> None:
        if not self.output_path or not self._buffer:
            return

        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.output_path, "a") as f:
            for entry in self._buffer:
                f.write(json.dumps(entry) + "\n")

        self._buffer.clear()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
        return False
