"""Python client for the Chrome DevTools Protocol.

This package provides:
- CDPConnection: command/response correlation and event dispatch over a Transport
- DevTools: typed domain facades (Page, Network, Fetch, Runtime, DOM, CSS, Emulation, Overlay)
- CDPSession: endpoint discovery via /json or a Selenoid-style WebDriver hub
- RequestInterceptor and collectors for network and console activity
- CLI: command-line interface for screenshots, network/console capture and raw queries
"""

from .connection import CDPConnection, Subscription
from .devtools import DevTools
from .exceptions import (
    CDPCommandError,
    CDPConnectionError,
    CDPError,
    CDPTargetNotFoundError,
    CDPTimeoutError,
    CommandFailedError,
    ConnectionClosedError,
    ConnectionFailedError,
    InvalidCommandError,
    InvalidFrameError,
    ListenerError,
    TransportError,
)
from .interception import MockResponse, RequestInterceptor
from .session import CDPSession, Target
from .transport import Transport, WebSocketTransport

__version__ = "0.1.0"
