"""DOM domain: document tree, selectors, outer HTML and box models."""

from dataclasses import dataclass, field
from typing import List, Optional

from ..exceptions import InvalidCommandError
from .base import ToggleableDomain, from_list


@dataclass
class Node:
    node_id: int
    backend_node_id: int
    node_type: int
    node_name: str
    local_name: str = ""
    node_value: str = ""
    child_node_count: Optional[int] = None
    children: List["Node"] = field(default_factory=list)
    attributes: List[str] = field(default_factory=list)
    document_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Node":
        return cls(
            node_id=data["nodeId"],
            backend_node_id=data.get("backendNodeId", 0),
            node_type=data.get("nodeType", 0),
            node_name=data.get("nodeName", ""),
            local_name=data.get("localName", ""),
            node_value=data.get("nodeValue", ""),
            child_node_count=data.get("childNodeCount"),
            children=from_list(Node, data.get("children")),
            attributes=data.get("attributes") or [],
            document_url=data.get("documentURL"),
        )


@dataclass
class BoxModel:
    """Quads are flat [x1, y1, x2, y2, x3, y3, x4, y4] lists, clockwise from top-left."""

    content: List[float]
    padding: List[float]
    border: List[float]
    margin: List[float]
    width: int
    height: int

    @classmethod
    def from_dict(cls, data: dict) -> "BoxModel":
        return cls(
            content=data["content"],
            padding=data.get("padding", []),
            border=data.get("border", []),
            margin=data.get("margin", []),
            width=data["width"],
            height=data["height"],
        )


class DOM(ToggleableDomain):
    name = "DOM"

    async def get_document(
        self, depth: Optional[int] = None, pierce: Optional[bool] = None
    ) -> Node:
        result = await self._call("getDocument", {"depth": depth, "pierce": pierce})
        return Node.from_dict(result["root"])

    async def query_selector(self, node_id: int, selector: str) -> int:
        """Return the first matching node id; 0 when nothing matches."""
        result = await self._call(
            "querySelector",
            {"node_id": node_id, "selector": selector},
            required=("node_id", "selector"),
        )
        return result.get("nodeId", 0)

    async def query_selector_all(self, node_id: int, selector: str) -> List[int]:
        result = await self._call(
            "querySelectorAll",
            {"node_id": node_id, "selector": selector},
            required=("node_id", "selector"),
        )
        return result.get("nodeIds", [])

    async def get_outer_html(self, node_id: int) -> str:
        result = await self._call("getOuterHTML", {"node_id": node_id}, required=("node_id",))
        return result["outerHTML"]

    async def set_outer_html(self, node_id: int, outer_html: str) -> None:
        await self._call(
            "setOuterHTML",
            {"node_id": node_id, "outerHTML": outer_html},
            required=("node_id", "outerHTML"),
        )

    async def get_box_model(
        self,
        node_id: Optional[int] = None,
        backend_node_id: Optional[int] = None,
        object_id: Optional[str] = None,
    ) -> BoxModel:
        if node_id is None and backend_node_id is None and object_id is None:
            raise InvalidCommandError(
                "DOM.getBoxModel needs node_id, backend_node_id or object_id",
                method="DOM.getBoxModel",
            )
        result = await self._call(
            "getBoxModel",
            {"node_id": node_id, "backend_node_id": backend_node_id, "object_id": object_id},
        )
        return BoxModel.from_dict(result["model"])
