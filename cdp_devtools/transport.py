"""Frame transports for CDP connections.

Provides the Transport interface consumed by CDPConnection and a WebSocket
implementation. A transport owns the socket and the background receive task;
it knows nothing about ids, commands or events.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional, TYPE_CHECKING

try:
    import websockets
    from websockets.exceptions import ConnectionClosed
except ImportError:
    raise ImportError(
        "websockets library not found. Install with: pip3 install websockets"
    )

from .exceptions import ConnectionFailedError, TransportError
from .protocol import Frame

if TYPE_CHECKING:
    from websockets.asyncio.client import ClientConnection

logger = logging.getLogger(__name__)

FrameCallback = Callable[[Frame], None]
CloseCallback = Callable[[Optional[BaseException]], None]


class Transport(ABC):
    """Duplex frame channel.

    Exactly one frame handler and one close handler may be registered. The close
    handler fires once per connection, whether the peer or the caller closed it.
    """

    def __init__(self) -> None:
        self._frame_callback: Optional[FrameCallback] = None
        self._close_callback: Optional[CloseCallback] = None

    def on_frame(self, callback: FrameCallback) -> None:
        """Register the frame-received handler (replaces any previous one)."""
        self._frame_callback = callback

    def on_close(self, callback: CloseCallback) -> None:
        """Register the connection-closed handler (replaces any previous one)."""
        self._close_callback = callback

    @property
    @abstractmethod
    def is_open(self) -> bool:
        ...

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    async def send(self, frame: str) -> None:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

    def _deliver(self, frame: Frame) -> None:
        if self._frame_callback is None:
            logger.debug("Frame received with no handler registered")
            return
        self._frame_callback(frame)

    def _notify_closed(self, error: Optional[BaseException] = None) -> None:
        if self._close_callback is not None:
            self._close_callback(error)


class WebSocketTransport(Transport):
    """Transport over a single WebSocket to a DevTools endpoint.

    Usage:
        transport = WebSocketTransport("ws://localhost:4444/devtools/<session>/page")
        transport.on_frame(handle_frame)
        await transport.connect()
        await transport.send('{"id": 1, "method": "Page.enable", "params": {}}')
        await transport.close()

    Attributes:
        ws_url: WebSocket debugger URL
        max_size: Maximum WebSocket message size in bytes (screenshots are large)
    """

    def __init__(self, ws_url: str, *, max_size: int = 2_097_152):
        super().__init__()
        self.ws_url = ws_url
        self.max_size = max_size

        self._ws: Optional["ClientConnection"] = None
        self._receive_task: Optional[asyncio.Task] = None
        self._open = False
        self._closed_notified = False

    @property
    def is_open(self) -> bool:
        """Check if WebSocket connection is active."""
        return self._open and self._ws is not None

    async def connect(self) -> None:
        """Open the WebSocket and start the receive loop.

        Raises:
            ConnectionFailedError: If WebSocket connection fails
        """
        try:
            logger.info(f"Connecting to {self.ws_url}")
            self._ws = await websockets.connect(self.ws_url, max_size=self.max_size)
        except Exception as e:
            raise ConnectionFailedError(
                f"Failed to connect to {self.ws_url}: {e}",
                details={"url": self.ws_url, "error": str(e)},
            ) from e

        self._open = True
        self._closed_notified = False
        self._receive_task = asyncio.create_task(self._receive_loop())

    async def send(self, frame: str) -> None:
        """Send one text frame.

        Raises:
            TransportError: If the connection is not open or the write fails
        """
        if not self.is_open:
            raise TransportError(
                "Cannot send frame: transport not open",
                details={"url": self.ws_url},
            )
        try:
            await self._ws.send(frame)
        except ConnectionClosed as e:
            self._mark_closed(e)
            raise TransportError(f"WebSocket closed while sending: {e}") from e

    async def close(self) -> None:
        """Close the WebSocket. Safe to call more than once."""
        self._open = False

        if self._receive_task and not self._receive_task.done():
            self._receive_task.cancel()
            try:
                await self._receive_task
            except asyncio.CancelledError:
                pass

        if self._ws is not None:
            try:
                await self._ws.close()
            except Exception as e:
                logger.warning(f"Error closing WebSocket: {e}")
            self._ws = None

        self._mark_closed(None)

    async def _receive_loop(self) -> None:
        """Read frames until the socket closes and hand each to the frame handler."""
        try:
            async for message in self._ws:
                try:
                    self._deliver(message)
                except Exception as e:
                    logger.error(f"Error processing frame: {e}", exc_info=True)
        except ConnectionClosed as e:
            logger.warning(f"WebSocket connection closed: {e}")
            self._mark_closed(e)
            return
        except Exception as e:
            logger.error(f"Receive loop error: {e}", exc_info=True)
            self._mark_closed(e)
            return

        # Iterator ended cleanly: the peer closed with a normal close code
        self._mark_closed(None)

    def _mark_closed(self, error: Optional[BaseException]) -> None:
        self._open = False
        if self._closed_notified:
            return
        self._closed_notified = True
        self._notify_closed(error)
