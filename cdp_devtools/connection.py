"""CDP connection: command/response correlation and event dispatch.

Provides CDPConnection, which sits on top of a Transport, assigns command ids,
resolves pending commands from response frames and fans event frames out to
subscribed listeners.
"""

import asyncio
import inspect
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union

from .exceptions import (
    CDPTimeoutError,
    CommandFailedError,
    ConnectionClosedError,
    InvalidFrameError,
    ListenerError,
    TransportError,
)
from .logging_setup import log_with_context
from .protocol import Frame, decode_frame, encode_command, is_event, is_response
from .transport import Transport, WebSocketTransport

logger = logging.getLogger(__name__)

EventCallback = Callable[[dict], Union[None, Awaitable[None]]]
ListenerErrorHook = Callable[[ListenerError], None]

_subscription_ids = itertools.count(1)


@dataclass
class PendingCall:
    """Bookkeeping for a command awaiting its response."""

    id: int
    method: str
    future: asyncio.Future


@dataclass(eq=False)
class Subscription:
    """Handle returned by CDPConnection.subscribe.

    Pass it to CDPConnection.unsubscribe (or call cancel) to stop delivery.
    """

    event_name: str
    callback: EventCallback
    connection: Optional["CDPConnection"] = field(default=None, repr=False)
    id: int = field(default_factory=lambda: next(_subscription_ids))

    def cancel(self) -> bool:
        if self.connection is None:
            return False
        return self.connection.unsubscribe(self)


class CDPConnection:
    """Manages one DevTools connection.

    Handles:
    - Connection lifecycle (connect, disconnect, context manager)
    - Command execution with id correlation
    - Event subscription and ordered dispatch with per-listener fault isolation
    - Failing every in-flight command when the transport closes

    Usage:
        async with CDPConnection(ws_url) as conn:
            result = await conn.execute_command("Page.navigate", {"url": "https://example.com"})
            sub = conn.subscribe("Page.loadEventFired", on_load)
            conn.unsubscribe(sub)

    Listeners that are plain functions run inline on the receive task, in
    registration order. Listeners returning an awaitable are scheduled as tasks
    in registration order, so they may issue commands of their own.

    All methods must be called from the event loop thread; other threads submit
    work with asyncio.run_coroutine_threadsafe.

    Attributes:
        ws_url: WebSocket debugger URL
        timeout: Default command timeout in seconds (None waits indefinitely)
        max_size: Maximum WebSocket message size in bytes (for large screenshots)
    """

    def __init__(
        self,
        ws_url: str,
        *,
        timeout: Optional[float] = None,
        max_size: int = 2_097_152,  # 2MB default buffer
        transport: Optional[Transport] = None,
        on_listener_error: Optional[ListenerErrorHook] = None,
    ):
        """Initialize CDP connection.

        Args:
            ws_url: WebSocket debugger URL (e.g., ws://localhost:4444/devtools/<session>/page)
            timeout: Default command timeout in seconds, None for no deadline
            max_size: Maximum WebSocket message size in bytes
            transport: Transport to use instead of a WebSocketTransport for ws_url
            on_listener_error: Called with a ListenerError whenever a listener raises
        """
        if not ws_url.startswith(("ws://", "wss://")):
            raise ValueError(f"Invalid WebSocket URL: {ws_url}")

        self.ws_url = ws_url
        self.timeout = timeout
        self.max_size = max_size
        self.on_listener_error = on_listener_error

        self._transport = transport or WebSocketTransport(ws_url, max_size=max_size)
        self._transport.on_frame(self._handle_frame)
        self._transport.on_close(self._handle_close)

        self._next_command_id: int = 1
        self._pending_commands: Dict[int, PendingCall] = {}
        self._event_handlers: Dict[str, List[Subscription]] = {}
        self._listener_tasks: Set[asyncio.Task] = set()
        self._event_waiters: Set[asyncio.Future] = set()
        self._enabled_domains: Set[str] = set()
        self._is_connected: bool = False

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def is_connected(self) -> bool:
        """Check if the connection is usable for commands."""
        return self._is_connected and self._transport.is_open

    @property
    def enabled_domains(self) -> Set[str]:
        """Domains enabled through this connection and not disabled since."""
        return set(self._enabled_domains)

    @property
    def pending_count(self) -> int:
        return len(self._pending_commands)

    async def connect(self) -> None:
        """Open the transport.

        Raises:
            ConnectionFailedError: If the transport cannot be established
        """
        await self._transport.connect()
        self._is_connected = True
        log_with_context(
            logger, logging.INFO, "CDP connection established", ws_url=self.ws_url
        )

    async def disconnect(self) -> None:
        """Close the transport and fail outstanding commands. Idempotent."""
        logger.info("Disconnecting CDP connection")
        self._is_connected = False
        await self._transport.close()

        # Transport normally reports closure through _handle_close; cover
        # transports that were never opened as well.
        self._fail_pending("Connection closed during command execution")

        for task in list(self._listener_tasks):
            task.cancel()
        self._listener_tasks.clear()

        logger.info("CDP connection closed")

    async def __aenter__(self) -> "CDPConnection":
        """Context manager entry: connect automatically."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit: disconnect automatically."""
        await self.disconnect()

    async def execute_command(
        self,
        method: str,
        params: Optional[dict] = None,
        *,
        timeout: Optional[float] = None,
    ) -> dict:
        """Execute CDP command and wait for response.

        Args:
            method: CDP method name (e.g., "Page.navigate", "DOM.getDocument")
            params: Method parameters (default: empty dict)
            timeout: Command timeout in seconds (default: self.timeout)

        Returns:
            Command result dict (contents of "result" field in response)

        Raises:
            ConnectionClosedError: If connection is not active or closes before the response
            TransportError: If the command frame cannot be sent
            CDPTimeoutError: If a timeout was given and expires
            CommandFailedError: If the browser returns an error response
            InvalidCommandError: If method is not of the form Domain.command
        """
        if not self.is_connected:
            raise ConnectionClosedError("Cannot execute command: connection not active")

        cmd_id = self._next_command_id
        message = encode_command(cmd_id, method, params)
        self._next_command_id += 1

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending_commands[cmd_id] = PendingCall(cmd_id, method, future)

        domain, _, command = method.partition(".")
        if command == "enable":
            self._enabled_domains.add(domain)
        elif command == "disable":
            self._enabled_domains.discard(domain)

        cmd_timeout = timeout if timeout is not None else self.timeout
        try:
            await self._transport.send(message)
            logger.debug(f"Sent command {cmd_id}: {method}")

            if cmd_timeout is None:
                return await future
            return await asyncio.wait_for(future, timeout=cmd_timeout)

        except asyncio.TimeoutError:
            raise CDPTimeoutError(
                "Command timed out",
                command_method=method,
                timeout=cmd_timeout,
            )
        except TransportError:
            # A close during send may already have failed the future
            if future.done() and not future.cancelled():
                future.exception()
            if not self._is_connected:
                raise ConnectionClosedError(
                    f"Connection closed while sending {method}"
                )
            raise
        finally:
            self._pending_commands.pop(cmd_id, None)

    def subscribe(self, event_name: str, callback: EventCallback) -> Subscription:
        """Register a callback for a CDP event.

        Args:
            event_name: CDP event name (e.g., "Network.requestWillBeSent")
            callback: Function or coroutine function taking the event params dict

        Returns:
            Subscription handle for unsubscribe

        Note:
            Remember to enable the corresponding CDP domain first.
        """
        subscription = Subscription(event_name, callback, self)
        self._event_handlers.setdefault(event_name, []).append(subscription)
        logger.debug(f"Subscribed to event: {event_name}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        """Remove a listener.

        Returns:
            True if the subscription was registered, False otherwise
        """
        handlers = self._event_handlers.get(subscription.event_name, [])
        if subscription not in handlers:
            logger.warning(f"Subscription not found for event: {subscription.event_name}")
            return False

        handlers.remove(subscription)
        if not handlers:
            del self._event_handlers[subscription.event_name]
        logger.debug(f"Unsubscribed from event: {subscription.event_name}")
        return True

    def listeners(self, event_name: str) -> List[Subscription]:
        return list(self._event_handlers.get(event_name, []))

    async def wait_for_event(
        self,
        event_name: str,
        predicate: Optional[Callable[[dict], bool]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> dict:
        """Wait for the next occurrence of an event.

        Subscribe before triggering the action that emits the event, e.g. by
        creating this coroutine as a task before sending Page.navigate.

        Raises:
            CDPTimeoutError: If timeout expires first
            ConnectionClosedError: If the connection closes first
        """
        future: asyncio.Future = asyncio.get_running_loop().create_future()

        def _on_event(params: dict) -> None:
            if future.done():
                return
            if predicate is None or predicate(params):
                future.set_result(params)

        subscription = self.subscribe(event_name, _on_event)
        self._event_waiters.add(future)
        try:
            if timeout is None:
                return await future
            return await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError:
            raise CDPTimeoutError(
                "Event wait timed out", command_method=event_name, timeout=timeout
            )
        finally:
            self._event_waiters.discard(future)
            self.unsubscribe(subscription)

    def _handle_frame(self, frame: Frame) -> None:
        """Route one incoming frame.

        Responses resolve the matching pending command; events are dispatched to
        listeners. Malformed frames and unknown ids are logged and dropped.
        """
        try:
            message = decode_frame(frame)
        except InvalidFrameError as e:
            logger.error(str(e))
            return

        if is_response(message):
            self._resolve(message)
        elif is_event(message):
            self._dispatch_event(message["method"], message.get("params") or {})
        else:
            logger.warning(f"Dropping unrecognized CDP message: {str(message)[:200]}")

    def _resolve(self, message: Dict[str, Any]) -> None:
        cmd_id = message["id"]
        pending = self._pending_commands.pop(cmd_id, None)
        if pending is None:
            logger.warning(f"Dropping response for unknown command id {cmd_id}")
            return
        if pending.future.done():
            # Caller already gave up (timeout or cancellation)
            return

        if "error" in message:
            error = message["error"] or {}
            pending.future.set_exception(
                CommandFailedError(
                    error.get("message", "Unknown CDP error"),
                    method=pending.method,
                    error_code=error.get("code"),
                    details={"data": error["data"]} if "data" in error else None,
                )
            )
        else:
            pending.future.set_result(message.get("result") or {})

    def _dispatch_event(self, event_name: str, params: dict) -> None:
        logger.debug(f"Received event: {event_name}")
        for subscription in self.listeners(event_name):
            try:
                result = subscription.callback(params)
            except Exception as e:
                self._report_listener_error(subscription, e)
                continue

            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._listener_tasks.add(task)
                task.add_done_callback(
                    lambda t, s=subscription: self._on_listener_task_done(s, t)
                )

    def _on_listener_task_done(self, subscription: Subscription, task: asyncio.Task) -> None:
        self._listener_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._report_listener_error(subscription, error)

    def _report_listener_error(self, subscription: Subscription, error: BaseException) -> None:
        listener_error = ListenerError(
            f"Event handler error for {subscription.event_name}: {error}",
            event_name=subscription.event_name,
            details={"subscription": subscription.id},
        )
        listener_error.__cause__ = error
        logger.error(listener_error.message, exc_info=error)

        if self.on_listener_error is not None:
            try:
                self.on_listener_error(listener_error)
            except Exception:
                logger.exception("on_listener_error hook raised")

    def _handle_close(self, error: Optional[BaseException]) -> None:
        self._is_connected = False
        reason = f"Connection closed: {error}" if error else "Connection closed"
        self._fail_pending(reason)

    def _fail_pending(self, reason: str) -> None:
        pending = list(self._pending_commands.values())
        self._pending_commands.clear()
        for call in pending:
            if not call.future.done():
                call.future.set_exception(
                    ConnectionClosedError(reason, details={"method": call.method})
                )

        for waiter in list(self._event_waiters):
            if not waiter.done():
                waiter.set_exception(ConnectionClosedError(reason))
