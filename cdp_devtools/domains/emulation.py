"""Emulation domain: media type, user agent, geolocation, scrollbars and metrics."""

from dataclasses import dataclass
from typing import List, Optional

from .base import Domain


@dataclass
class MediaFeature:
    name: str
    value: str


class Emulation(Domain):
    name = "Emulation"

    async def set_emulated_media(
        self,
        media: Optional[str] = None,
        features: Optional[List[MediaFeature]] = None,
    ) -> None:
        """Emulate a CSS media type such as "print"; an empty string resets it."""
        await self._call("setEmulatedMedia", {"media": media, "features": features})

    async def set_user_agent_override(
        self,
        user_agent: str,
        accept_language: Optional[str] = None,
        platform: Optional[str] = None,
    ) -> None:
        await self._call(
            "setUserAgentOverride",
            {"user_agent": user_agent, "accept_language": accept_language, "platform": platform},
            required=("user_agent",),
        )

    async def set_geolocation_override(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        accuracy: Optional[float] = None,
    ) -> None:
        """Override the position; with no arguments, emulate position unavailable."""
        await self._call(
            "setGeolocationOverride",
            {"latitude": latitude, "longitude": longitude, "accuracy": accuracy},
        )

    async def clear_geolocation_override(self) -> None:
        await self._call("clearGeolocationOverride")

    async def set_scrollbars_hidden(self, hidden: bool) -> None:
        await self._call("setScrollbarsHidden", {"hidden": hidden}, required=("hidden",))

    async def set_device_metrics_override(
        self,
        width: int,
        height: int,
        device_scale_factor: float,
        mobile: bool,
    ) -> None:
        await self._call(
            "setDeviceMetricsOverride",
            {
                "width": width,
                "height": height,
                "device_scale_factor": device_scale_factor,
                "mobile": mobile,
            },
            required=("width", "height", "device_scale_factor", "mobile"),
        )

    async def clear_device_metrics_override(self) -> None:
        await self._call("clearDeviceMetricsOverride")
