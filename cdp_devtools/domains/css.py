"""CSS domain: stylesheet text, rule insertion and rule usage tracking."""

from dataclasses import dataclass
from typing import Callable, List, Optional

from ..connection import Subscription
from .base import ToggleableDomain, from_list


@dataclass
class SourceRange:
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    @classmethod
    def from_dict(cls, data: dict) -> "SourceRange":
        return cls(
            start_line=data["startLine"],
            start_column=data["startColumn"],
            end_line=data["endLine"],
            end_column=data["endColumn"],
        )

    @classmethod
    def at_start(cls) -> "SourceRange":
        """Empty range at the top of a stylesheet, for CSS.addRule."""
        return cls(0, 0, 0, 0)


@dataclass
class RuleUsage:
    style_sheet_id: str
    start_offset: float
    end_offset: float
    used: bool

    @classmethod
    def from_dict(cls, data: dict) -> "RuleUsage":
        return cls(
            style_sheet_id=data["styleSheetId"],
            start_offset=data["startOffset"],
            end_offset=data["endOffset"],
            used=data.get("used", False),
        )

    def extract(self, style_sheet_text: str) -> str:
        """Slice this rule out of its stylesheet's text."""
        return style_sheet_text[int(self.start_offset):int(self.end_offset)]


@dataclass
class CSSStyleSheetHeader:
    style_sheet_id: str
    frame_id: str
    source_url: str
    origin: str
    title: str = ""
    is_inline: bool = False
    length: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "CSSStyleSheetHeader":
        return cls(
            style_sheet_id=data["styleSheetId"],
            frame_id=data.get("frameId", ""),
            source_url=data.get("sourceURL", ""),
            origin=data.get("origin", ""),
            title=data.get("title", ""),
            is_inline=data.get("isInline", False),
            length=data.get("length", 0.0),
        )


@dataclass
class CSSRule:
    selector_text: str
    origin: str
    style_sheet_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CSSRule":
        return cls(
            selector_text=(data.get("selectorList") or {}).get("text", ""),
            origin=data.get("origin", ""),
            style_sheet_id=data.get("styleSheetId"),
        )


@dataclass
class StyleSheetAdded:
    header: CSSStyleSheetHeader

    @classmethod
    def from_dict(cls, data: dict) -> "StyleSheetAdded":
        return cls(header=CSSStyleSheetHeader.from_dict(data["header"]))


class CSS(ToggleableDomain):
    """Typed access to the CSS domain. DOM must be enabled before CSS."""

    name = "CSS"

    async def start_rule_usage_tracking(self) -> None:
        await self._call("startRuleUsageTracking")

    async def stop_rule_usage_tracking(self) -> List[RuleUsage]:
        result = await self._call("stopRuleUsageTracking")
        return from_list(RuleUsage, result.get("ruleUsage"))

    async def get_style_sheet_text(self, style_sheet_id: str) -> str:
        result = await self._call(
            "getStyleSheetText",
            {"style_sheet_id": style_sheet_id},
            required=("style_sheet_id",),
        )
        return result["text"]

    async def add_rule(
        self, style_sheet_id: str, rule_text: str, location: SourceRange
    ) -> CSSRule:
        result = await self._call(
            "addRule",
            {"style_sheet_id": style_sheet_id, "rule_text": rule_text, "location": location},
            required=("style_sheet_id", "rule_text", "location"),
        )
        return CSSRule.from_dict(result["rule"])

    def on_style_sheet_added(self, callback: Callable[[StyleSheetAdded], object]) -> Subscription:
        return self._on("styleSheetAdded", callback, StyleSheetAdded)
