"""Snapshot types for the mindmap geometry engine."""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple


class Direction(Enum):
    """Cardinal side of a node."""
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


ALL_DIRECTIONS: Tuple[Direction, ...] = (
    Direction.RIGHT, Direction.LEFT, Direction.TOP, Direction.BOTTOM,
)


class LayoutMode(Enum):
    """Auto-layout strategies."""
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    RADIAL = "radial"


class SnapshotFormatError(ValueError):
    """Raised when a serialized snapshot cannot be decoded."""


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Size:
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class Box:
    """Axis-aligned rectangle in absolute canvas coordinates."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def origin(self) -> Point:
        return Point(self.x, self.y)

    def contains_point(self, point: Point) -> bool:
        """Check if a point is inside this box (edges included)."""
        return (self.x <= point.x <= self.right and
                self.y <= point.y <= self.bottom)

    def contains_box(self, other: "Box") -> bool:
        """Check if another box lies fully inside this one."""
        return (self.x <= other.x and other.right <= self.right and
                self.y <= other.y and other.bottom <= self.bottom)


@dataclass(frozen=True)
class Node:
    """A mindmap node.

    ``position`` is relative to the parent when ``parent_id`` is set and
    absolute otherwise. ``size`` is None until the node has been measured.
    """
    id: str
    parent_id: Optional[str] = None
    position: Point = field(default_factory=Point)
    size: Optional[Size] = None
    depth: int = 0
    label: str = ""

    def moved(self, position: Point, parent_id: Optional[str] = None,
              depth: Optional[int] = None) -> "Node":
        """Return a copy placed at ``position`` under ``parent_id``."""
        return replace(
            self,
            position=position,
            parent_id=parent_id,
            depth=self.depth if depth is None else depth,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "position": {"x": self.position.x, "y": self.position.y},
            "depth": self.depth,
        }
        if self.parent_id is not None:
            data["parentId"] = self.parent_id
        if self.size is not None:
            data["size"] = {"width": self.size.width, "height": self.size.height}
        if self.label:
            data["label"] = self.label
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        try:
            pos = data.get("position") or {}
            raw_size = data.get("size")
            size = None
            if raw_size is not None:
                size = Size(float(raw_size["width"]), float(raw_size["height"]))
            return cls(
                id=str(data["id"]),
                parent_id=data.get("parentId"),
                position=Point(float(pos.get("x", 0.0)), float(pos.get("y", 0.0))),
                size=size,
                depth=int(data.get("depth", 0)),
                label=str(data.get("label", "")),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise SnapshotFormatError(f"Invalid node entry {data!r}: {exc}") from exc


@dataclass(frozen=True)
class Edge:
    """A directed connection between two nodes.

    Stored sides are kept by the edge resolver; missing ones are derived.
    """
    id: str
    source: str
    target: str
    source_side: Optional[Direction] = None
    target_side: Optional[Direction] = None

    def with_sides(self, source_side: Direction, target_side: Direction) -> "Edge":
        if self.source_side == source_side and self.target_side == target_side:
            return self
        return replace(self, source_side=source_side, target_side=target_side)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
        }
        if self.source_side is not None:
            data["sourceSide"] = self.source_side.value
        if self.target_side is not None:
            data["targetSide"] = self.target_side.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Edge":
        # Imported here to keep the model free of geometry at import time
        from mindlayout.geometry import direction_from_side_token

        try:
            source_side = direction_from_side_token(
                data.get("sourceSide") or data.get("sourceHandle"))
            target_side = direction_from_side_token(
                data.get("targetSide") or data.get("targetHandle"))
            return cls(
                id=str(data["id"]),
                source=str(data["source"]),
                target=str(data["target"]),
                source_side=source_side,
                target_side=target_side,
            )
        except (AttributeError, KeyError, TypeError) as exc:
            raise SnapshotFormatError(f"Invalid edge entry {data!r}: {exc}") from exc


def dump_snapshot(nodes: List[Node], edges: List[Edge]) -> str:
    """Serialize a node/edge snapshot to JSON."""
    return json.dumps(
        {
            "nodes": [n.to_dict() for n in nodes],
            "edges": [e.to_dict() for e in edges],
        },
        indent=2,
    )


def load_snapshot(data: str) -> Tuple[List[Node], List[Edge]]:
    """Decode a JSON snapshot produced by :func:`dump_snapshot`."""
    try:
        raw = json.loads(data)
    except json.JSONDecodeError as exc:
        raise SnapshotFormatError(f"Snapshot is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise SnapshotFormatError("Snapshot must be a JSON object")

    nodes = [Node.from_dict(n) for n in raw.get("nodes") or []]
    edges = [Edge.from_dict(e) for e in raw.get("edges") or []]
    return nodes, edges
