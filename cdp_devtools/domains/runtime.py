"""Runtime domain: evaluation, console API calls and uncaught exceptions."""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from ..connection import Subscription
from .base import ToggleableDomain, from_list


@dataclass
class RemoteObject:
    type: str
    subtype: Optional[str] = None
    class_name: Optional[str] = None
    value: Any = None
    unserializable_value: Optional[str] = None
    description: Optional[str] = None
    object_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "RemoteObject":
        return cls(
            type=data.get("type", "undefined"),
            subtype=data.get("subtype"),
            class_name=data.get("className"),
            value=data.get("value"),
            unserializable_value=data.get("unserializableValue"),
            description=data.get("description"),
            object_id=data.get("objectId"),
        )

    def display(self) -> str:
        """Short text form, preferring the primitive value over the description."""
        if self.value is not None:
            return str(self.value)
        if self.unserializable_value is not None:
            return self.unserializable_value
        if self.description is not None:
            return self.description
        return self.type


@dataclass
class ExceptionDetails:
    exception_id: int
    text: str
    line_number: int
    column_number: int
    url: Optional[str] = None
    exception: Optional[RemoteObject] = None

    @classmethod
    def from_dict(cls, data: dict) -> "ExceptionDetails":
        exception = data.get("exception")
        return cls(
            exception_id=data.get("exceptionId", 0),
            text=data.get("text", ""),
            line_number=data.get("lineNumber", 0),
            column_number=data.get("columnNumber", 0),
            url=data.get("url"),
            exception=RemoteObject.from_dict(exception) if exception else None,
        )


@dataclass
class EvaluateResult:
    result: RemoteObject
    exception_details: Optional[ExceptionDetails] = None

    @classmethod
    def from_dict(cls, data: dict) -> "EvaluateResult":
        details = data.get("exceptionDetails")
        return cls(
            result=RemoteObject.from_dict(data.get("result") or {}),
            exception_details=ExceptionDetails.from_dict(details) if details else None,
        )


@dataclass
class ConsoleAPICalled:
    type: str
    args: List[RemoteObject] = field(default_factory=list)
    execution_context_id: int = 0
    timestamp: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "ConsoleAPICalled":
        return cls(
            type=data.get("type", "log"),
            args=from_list(RemoteObject, data.get("args")),
            execution_context_id=data.get("executionContextId", 0),
            timestamp=data.get("timestamp", 0.0),
        )


@dataclass
class ExceptionThrown:
    timestamp: float
    exception_details: ExceptionDetails

    @classmethod
    def from_dict(cls, data: dict) -> "ExceptionThrown":
        return cls(
            timestamp=data.get("timestamp", 0.0),
            exception_details=ExceptionDetails.from_dict(data.get("exceptionDetails") or {}),
        )


class Runtime(ToggleableDomain):
    name = "Runtime"

    async def evaluate(
        self,
        expression: str,
        return_by_value: Optional[bool] = None,
        await_promise: Optional[bool] = None,
    ) -> EvaluateResult:
        result = await self._call(
            "evaluate",
            {
                "expression": expression,
                "return_by_value": return_by_value,
                "await_promise": await_promise,
            },
            required=("expression",),
        )
        return EvaluateResult.from_dict(result)

    def on_console_api_called(self, callback: Callable[[ConsoleAPICalled], object]) -> Subscription:
        return self._on("consoleAPICalled", callback, ConsoleAPICalled)

    def on_exception_thrown(self, callback: Callable[[ExceptionThrown], object]) -> Subscription:
        return self._on("exceptionThrown", callback, ExceptionThrown)
