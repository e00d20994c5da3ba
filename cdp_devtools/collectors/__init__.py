"""Event collectors that turn CDP events into JSONL records."""

from .console import ConsoleCollector
from .network import NetworkCollector

__all__ = ["ConsoleCollector", "NetworkCollector"]
