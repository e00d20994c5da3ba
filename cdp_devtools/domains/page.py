"""Page domain: navigation, reloads, screenshots and lifecycle events."""

import asyncio
import enum
from dataclasses import dataclass
from typing import Callable, Optional

from ..connection import Subscription
from ..exceptions import CDPTimeoutError, CommandFailedError
from .base import ToggleableDomain


class CaptureScreenshotFormat(str, enum.Enum):
    PNG = "png"
    JPEG = "jpeg"
    WEBP = "webp"


@dataclass
class Viewport:
    """Clip rectangle for Page.captureScreenshot, in CSS pixels."""

    x: float
    y: float
    width: float
    height: float
    scale: float = 1.0


@dataclass
class NavigateResult:
    frame_id: str
    loader_id: Optional[str] = None
    error_text: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "NavigateResult":
        return cls(
            frame_id=data["frameId"],
            loader_id=data.get("loaderId"),
            error_text=data.get("errorText"),
        )


@dataclass
class LoadEventFired:
    timestamp: float

    @classmethod
    def from_dict(cls, data: dict) -> "LoadEventFired":
        return cls(timestamp=data.get("timestamp", 0.0))


@dataclass
class DomContentEventFired:
    timestamp: float

    @classmethod
    def from_dict(cls, data: dict) -> "DomContentEventFired":
        return cls(timestamp=data.get("timestamp", 0.0))


class Page(ToggleableDomain):
    """Typed access to the Page domain.

    Usage:
        await devtools.page.enable()
        await devtools.page.navigate_and_wait("https://example.com")
        encoded = await devtools.page.capture_screenshot()
    """

    name = "Page"

    async def navigate(
        self,
        url: str,
        referrer: Optional[str] = None,
        transition_type: Optional[str] = None,
        frame_id: Optional[str] = None,
    ) -> NavigateResult:
        result = await self._call(
            "navigate",
            {
                "url": url,
                "referrer": referrer,
                "transition_type": transition_type,
                "frame_id": frame_id,
            },
            required=("url",),
        )
        return NavigateResult.from_dict(result)

    async def navigate_and_wait(
        self, url: str, timeout: Optional[float] = None
    ) -> NavigateResult:
        """Enable Page, navigate and wait for the load event.

        The load listener is registered before Page.navigate is sent so a fast
        load cannot be missed.

        Raises:
            CommandFailedError: If navigation reports an errorText
            CDPTimeoutError: If timeout expires before the load event
        """
        await self.enable()
        loaded = asyncio.ensure_future(
            self.connection.wait_for_event("Page.loadEventFired")
        )
        try:
            # Let the waiter register its listener before navigating
            await asyncio.sleep(0)
            result = await self.navigate(url)
            if result.error_text:
                raise CommandFailedError(
                    result.error_text, method="Page.navigate", details={"url": url}
                )
            if timeout is None:
                await loaded
            else:
                try:
                    await asyncio.wait_for(loaded, timeout=timeout)
                except asyncio.TimeoutError:
                    raise CDPTimeoutError(
                        "Page load timed out",
                        command_method="Page.loadEventFired",
                        timeout=timeout,
                        details={"url": url},
                    )
        finally:
            if not loaded.done():
                loaded.cancel()
            elif not loaded.cancelled():
                loaded.exception()
        return result

    async def reload(self, ignore_cache: Optional[bool] = None) -> None:
        await self._call("reload", {"ignore_cache": ignore_cache})

    async def capture_screenshot(
        self,
        format: Optional[CaptureScreenshotFormat] = None,
        quality: Optional[int] = None,
        clip: Optional[Viewport] = None,
        from_surface: Optional[bool] = None,
    ) -> str:
        """Capture the page, returning base64-encoded image data."""
        result = await self._call(
            "captureScreenshot",
            {
                "format": format,
                "quality": quality,
                "clip": clip,
                "from_surface": from_surface,
            },
        )
        return result["data"]

    def on_load_event_fired(self, callback: Callable[[LoadEventFired], object]) -> Subscription:
        return self._on("loadEventFired", callback, LoadEventFired)

    def on_dom_content_event_fired(
        self, callback: Callable[[DomContentEventFired], object]
    ) -> Subscription:
        return self._on("domContentEventFired", callback, DomContentEventFired)
