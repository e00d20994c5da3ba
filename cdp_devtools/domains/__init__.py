"""Typed facades for the CDP domains used by cdp-devtools."""

from .base import Domain, ToggleableDomain
from .css import CSS, CSSRule, CSSStyleSheetHeader, RuleUsage, SourceRange, StyleSheetAdded
from .dom import DOM, BoxModel, Node
from .emulation import Emulation, MediaFeature
from .fetch import ErrorReason, Fetch, HeaderEntry, RequestPattern, RequestPaused, RequestStage
from .network import (
    LoadingFailed,
    LoadingFinished,
    Network,
    Request,
    RequestWillBeSent,
    ResourceTiming,
    Response,
    ResponseBody,
    ResponseReceived,
)
from .overlay import RGBA, HighlightConfig, Overlay
from .page import (
    CaptureScreenshotFormat,
    DomContentEventFired,
    LoadEventFired,
    NavigateResult,
    Page,
    Viewport,
)
from .runtime import (
    ConsoleAPICalled,
    EvaluateResult,
    ExceptionDetails,
    ExceptionThrown,
    RemoteObject,
    Runtime,
)
