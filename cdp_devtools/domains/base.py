"""Shared plumbing for typed domain facades.

A Domain turns Python arguments into camelCase CDP params, runs the command on a
CDPConnection and hands back the raw result for the subclass to deserialize.
Event helpers wrap a caller's callback so it receives a typed event object.
"""

import dataclasses
import enum
from typing import Any, Callable, Dict, Iterable, Optional, Type, TypeVar

from ..connection import CDPConnection, Subscription
from ..exceptions import InvalidCommandError

T = TypeVar("T")


def camel_case(name: str) -> str:
    """Convert a snake_case attribute name to the protocol's camelCase."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_protocol(value: Any) -> Any:
    """Serialize dataclasses, enums and containers into JSON-ready values.

    Dataclass fields are renamed to camelCase and fields set to None are omitted.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            camel_case(f.name): to_protocol(getattr(value, f.name))
            for f in dataclasses.fields(value)
            if getattr(value, f.name) is not None
        }
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, dict):
        return {k: to_protocol(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [to_protocol(v) for v in value]
    return value


def from_list(cls: Type[T], items: Optional[Iterable[dict]]) -> list:
    return [cls.from_dict(item) for item in items or ()]


class Domain:
    """Base class for one CDP domain bound to a connection.

    Subclasses set ``name`` and expose one method per command and one
    ``on_<event>`` method per event.
    """

    name: str = ""

    def __init__(self, connection: CDPConnection):
        self.connection = connection

    def __repr__(self) -> str:
        return f"{type(self).__name__}(connection={self.connection.ws_url!r})"

    async def _call(
        self,
        command: str,
        params: Optional[Dict[str, Any]] = None,
        required: Iterable[str] = (),
    ) -> dict:
        """Run ``<name>.<command>``.

        Args:
            command: Command name within this domain
            params: snake_case keyword params; None values are dropped
            required: Param names that must be present and not None

        Raises:
            InvalidCommandError: If a required param is missing
        """
        method = f"{self.name}.{command}"
        params = params or {}

        missing = [key for key in required if params.get(key) is None]
        if missing:
            raise InvalidCommandError(
                f"Missing required parameter(s) for {method}: {', '.join(missing)}",
                method=method,
                details={"missing": missing},
            )

        payload = {camel_case(k): to_protocol(v) for k, v in params.items() if v is not None}
        return await self.connection.execute_command(method, payload)

    def _on(
        self,
        event: str,
        callback: Callable[[Any], Any],
        event_type: Optional[Type] = None,
    ) -> Subscription:
        """Subscribe to ``<name>.<event>``, converting params with event_type.from_dict."""

        def _deliver(params: dict) -> Any:
            if event_type is None:
                return callback(params)
            return callback(event_type.from_dict(params))

        return self.connection.subscribe(f"{self.name}.{event}", _deliver)


class ToggleableDomain(Domain):
    """Domain whose events only flow between ``enable`` and ``disable``."""

    async def enable(self) -> None:
        await self._call("enable")

    async def disable(self) -> None:
        await self._call("disable")
