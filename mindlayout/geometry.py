"""Coordinate and direction helpers shared by the engine components."""

import logging
import math
from typing import Optional, List, Dict, Iterable, Mapping, Protocol, Sequence

from mindlayout.model import Box, Direction, Node, Point

logger = logging.getLogger(__name__)

# Half-width of the cone used by directional navigation
ANGLE_THRESHOLD = 45.0

_OPPOSITES = {
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
    Direction.TOP: Direction.BOTTOM,
    Direction.BOTTOM: Direction.TOP,
}


def node_lookup(nodes: Iterable[Node]) -> Dict[str, Node]:
    return {n.id: n for n in nodes}


def _as_lookup(nodes) -> Mapping[str, Node]:
    if isinstance(nodes, Mapping):
        return nodes
    return node_lookup(nodes)


def absolute_position(node: Node, nodes) -> Point:
    """Resolve ``node``'s position in canvas space.

    Walks the parent chain adding each ancestor's relative position. A cycle
    in the chain is logged and the walk stops at the repeated ancestor.
    """
    lookup = _as_lookup(nodes)
    x, y = node.position.x, node.position.y
    current = node
    visited = {node.id}
    max_steps = max(len(lookup), 1)
    steps = 0

    while current.parent_id is not None:
        parent_id = current.parent_id
        if parent_id in visited or steps >= max_steps:
            logger.warning("Cyclic parent chain detected at node %s (via %s)",
                           node.id, parent_id)
            break
        parent = lookup.get(parent_id)
        if parent is None:
            break
        visited.add(parent_id)
        x += parent.position.x
        y += parent.position.y
        current = parent
        steps += 1

    return Point(x, y)


def absolute_position_map(nodes: Sequence[Node]) -> Dict[str, Point]:
    lookup = node_lookup(nodes)
    return {n.id: absolute_position(n, lookup) for n in nodes}


def ancestor_ids(node_id: str, nodes) -> List[str]:
    """Parent chain of ``node_id``, nearest first. Stops on cycles."""
    lookup = _as_lookup(nodes)
    chain: List[str] = []
    seen = {node_id}
    node = lookup.get(node_id)
    while node is not None and node.parent_id is not None:
        if node.parent_id in seen:
            logger.warning("Cyclic parent chain detected at node %s", node_id)
            break
        seen.add(node.parent_id)
        chain.append(node.parent_id)
        node = lookup.get(node.parent_id)
    return chain


def ancestor_depth(node_id: str, nodes) -> int:
    """Number of containment ancestors above ``node_id``."""
    return len(ancestor_ids(node_id, nodes))


def is_descendant(node_id: str, potential_ancestor_id: str, nodes) -> bool:
    """Check if node_id is a descendant of potential_ancestor_id."""
    return potential_ancestor_id in ancestor_ids(node_id, nodes)


def distance(p1: Point, p2: Point) -> float:
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def angle_between(p1: Point, p2: Point) -> float:
    """Bearing from p1 to p2 in degrees, normalized to [0, 360).

    Canvas coordinates grow downwards, so 90 degrees points to the bottom.
    """
    angle = math.degrees(math.atan2(p2.y - p1.y, p2.x - p1.x)) % 360.0
    # -1e-15 % 360 rounds up to 360.0
    return 0.0 if angle >= 360.0 else angle


def direction_from_angle(angle: float) -> Direction:
    """Bucket a bearing into a cardinal side; 45-degree diagonals go horizontal."""
    angle = angle % 360.0
    if angle <= 45.0 or angle >= 315.0:
        return Direction.RIGHT
    if 135.0 <= angle <= 225.0:
        return Direction.LEFT
    if angle < 135.0:
        return Direction.BOTTOM
    return Direction.TOP


def direction_between(p1: Point, p2: Point) -> Direction:
    """Side of p1 facing p2, by bucketing the bearing between them."""
    return direction_from_angle(angle_between(p1, p2))


def opposite_direction(direction: Direction) -> Direction:
    return _OPPOSITES[direction]


def direction_from_side_token(token) -> Optional[Direction]:
    """Interpret a stored side annotation.

    Accepts a Direction, a bare side name (``"left"``) or a handle identifier
    of the form ``"<node-id>-<side>-source"``.
    """
    if token is None:
        return None
    if isinstance(token, Direction):
        return token
    if not isinstance(token, str) or not token:
        return None

    try:
        return Direction(token)
    except ValueError:
        pass

    segments = token.split("-")
    if len(segments) < 2:
        return None
    try:
        return Direction(segments[-2])
    except ValueError:
        return None


def rects_overlap(a: Box, b: Box, padding: float = 0.0) -> bool:
    return not (
        a.right + padding <= b.x or
        b.right + padding <= a.x or
        a.bottom + padding <= b.y or
        b.bottom + padding <= a.y
    )


def _in_direction(angle: float, direction: Direction) -> bool:
    centers = {
        Direction.RIGHT: 0.0,
        Direction.BOTTOM: 90.0,
        Direction.LEFT: 180.0,
        Direction.TOP: 270.0,
    }
    delta = abs((angle - centers[direction] + 180.0) % 360.0 - 180.0)
    return delta <= ANGLE_THRESHOLD


def find_closest_node_in_direction(current: Node, nodes: Sequence[Node],
                                   direction: Direction) -> Optional[Node]:
    """Nearest node whose bearing from ``current`` is within the direction cone."""
    lookup = node_lookup(nodes)
    origin = absolute_position(current, lookup)
    closest: Optional[Node] = None
    min_distance = math.inf

    for node in nodes:
        if node.id == current.id:
            continue
        pos = absolute_position(node, lookup)
        if not _in_direction(angle_between(origin, pos), direction):
            continue
        dist = distance(origin, pos)
        if dist < min_distance:
            min_distance = dist
            closest = node

    return closest


class GeometryProvider(Protocol):
    """Source of rendered bounding boxes, in absolute canvas coordinates."""

    def bounding_box(self, node_id: str) -> Optional[Box]:
        ...


class SnapshotGeometry:
    """Bounding boxes derived from a snapshot's positions and stored sizes."""

    def __init__(self, nodes: Sequence[Node]):
        self._lookup = node_lookup(nodes)
        self._positions = {n.id: absolute_position(n, self._lookup) for n in nodes}

    def bounding_box(self, node_id: str) -> Optional[Box]:
        node = self._lookup.get(node_id)
        if node is None or node.size is None:
            return None
        pos = self._positions[node_id]
        return Box(pos.x, pos.y, node.size.width, node.size.height)
