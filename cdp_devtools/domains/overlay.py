"""Overlay domain: node highlighting."""

from dataclasses import dataclass
from typing import Optional

from ..exceptions import InvalidCommandError
from .base import ToggleableDomain


@dataclass
class RGBA:
    r: int
    g: int
    b: int
    a: Optional[float] = None


@dataclass
class HighlightConfig:
    show_info: Optional[bool] = None
    show_styles: Optional[bool] = None
    show_rulers: Optional[bool] = None
    show_extension_lines: Optional[bool] = None
    content_color: Optional[RGBA] = None
    padding_color: Optional[RGBA] = None
    border_color: Optional[RGBA] = None
    margin_color: Optional[RGBA] = None
    event_target_color: Optional[RGBA] = None
    shape_color: Optional[RGBA] = None
    shape_margin_color: Optional[RGBA] = None
    css_grid_color: Optional[RGBA] = None

    @classmethod
    def default(cls) -> "HighlightConfig":
        """Colours used by the DevTools element inspector."""
        return cls(
            show_info=True,
            show_styles=False,
            show_rulers=True,
            show_extension_lines=True,
            content_color=RGBA(111, 168, 220, 0.66),
            padding_color=RGBA(147, 196, 125, 0.55),
            border_color=RGBA(255, 229, 153, 0.66),
            margin_color=RGBA(246, 178, 107, 0.66),
            event_target_color=RGBA(255, 196, 196, 0.66),
            shape_color=RGBA(96, 82, 117, 0.8),
            shape_margin_color=RGBA(96, 82, 127, 0.6),
            css_grid_color=RGBA(75, 0, 130, 0),
        )


class Overlay(ToggleableDomain):
    name = "Overlay"

    async def highlight_node(
        self,
        highlight_config: HighlightConfig,
        node_id: Optional[int] = None,
        backend_node_id: Optional[int] = None,
        object_id: Optional[str] = None,
        selector: Optional[str] = None,
    ) -> None:
        if node_id is None and backend_node_id is None and object_id is None:
            raise InvalidCommandError(
                "Overlay.highlightNode needs node_id, backend_node_id or object_id",
                method="Overlay.highlightNode",
            )
        await self._call(
            "highlightNode",
            {
                "highlight_config": highlight_config,
                "node_id": node_id,
                "backend_node_id": backend_node_id,
                "object_id": object_id,
                "selector": selector,
            },
            required=("highlight_config",),
        )

    async def hide_highlight(self) -> None:
        await self._call("hideHighlight")
