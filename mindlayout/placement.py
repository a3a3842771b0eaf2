"""Collision-free placement of newly inserted nodes."""

import logging
from typing import Optional, List, Callable, Iterable, Sequence

from mindlayout.geometry import (
    SnapshotGeometry, absolute_position, node_lookup, opposite_direction,
    rects_overlap,
)
from mindlayout.model import ALL_DIRECTIONS, Box, Direction, Edge, Node, Point, Size
from mindlayout.settings import DEFAULT_HORIZONTAL_OFFSET, DEFAULT_MAX_PROBES

logger = logging.getLogger(__name__)

DEFAULT_PROBE_SIZE = Size(100.0, 40.0)

OverlapQuery = Callable[[Box], Sequence[str]]


class SnapshotIntersections:
    """Brute-force AABB intersection query over a snapshot.

    Nodes without a measured size never collide.
    """

    def __init__(self, nodes: Sequence[Node], exclude: Iterable[str] = (),
                 padding: float = 0.0):
        geometry = SnapshotGeometry(nodes)
        skip = set(exclude)
        self.padding = padding
        self._boxes = []
        for node in nodes:
            if node.id in skip:
                continue
            box = geometry.bounding_box(node.id)
            if box is not None:
                self._boxes.append((node.id, box))

    def __call__(self, candidate: Box) -> List[str]:
        return [node_id for node_id, box in self._boxes
                if rects_overlap(candidate, box, padding=self.padding)]


def probe_offsets(spacing: float, count: int) -> Iterable[float]:
    """Vertical probe offsets: 0, +s, -s, +2s, -2s, ..."""
    for tries in range(count):
        step = (tries + 1) // 2
        sign = 1 if tries % 2 == 1 else -1
        yield 0.0 if tries == 0 else sign * step * spacing


def find_free_position(nodes: Sequence[Node], base_position: Point,
                       spacing: float, parent_id: Optional[str],
                       would_overlap: OverlapQuery,
                       size: Size = DEFAULT_PROBE_SIZE,
                       max_probes: int = DEFAULT_MAX_PROBES) -> Point:
    """Nearest slot around ``base_position`` where a node of ``size`` fits.

    ``base_position`` is relative to ``parent_id`` when given, and the result
    is expressed in the same space. When every probe collides the last probe
    is returned.
    """
    logger.debug("Finding free position for base %s, spacing %s",
                 base_position, spacing)

    parent_origin = Point()
    if parent_id is not None:
        lookup = node_lookup(nodes)
        parent = lookup.get(parent_id)
        if parent is not None:
            parent_origin = absolute_position(parent, lookup)
            logger.debug("Converted base position to absolute %s",
                         base_position + parent_origin)

    base = base_position + parent_origin
    position = base
    found = False

    for offset in probe_offsets(spacing, max(max_probes, 1)):
        position = Point(base.x, base.y + offset)
        candidate = Box(position.x, position.y, size.width, size.height)
        if not would_overlap(candidate):
            found = True
            break
        logger.debug("Slot %s is taken", position)

    if not found:
        logger.warning("No collision-free slot within %d probes of %s; using %s",
                       max_probes, base, position)

    result = position - parent_origin
    logger.debug("Found free position %s", result)
    return result


def base_position_for_direction(direction: Direction,
                                offset: float = DEFAULT_HORIZONTAL_OFFSET) -> Point:
    """Default child anchor relative to its parent for a given side."""
    if direction == Direction.RIGHT:
        return Point(offset, 0.0)
    if direction == Direction.LEFT:
        return Point(-offset, 0.0)
    if direction == Direction.BOTTOM:
        return Point(0.0, offset)
    return Point(0.0, -offset)


def count_connections(parent_id: str, edges: Sequence[Edge]) -> dict:
    counts = {d: 0 for d in ALL_DIRECTIONS}
    for edge in edges:
        if edge.source == parent_id and edge.source_side is not None:
            counts[edge.source_side] += 1
    return counts


def determine_preferred_direction(parent: Node, edges: Sequence[Edge],
                                  root_id: str,
                                  last_direction: Optional[Direction] = None) -> Direction:
    """Pick the side a new child of ``parent`` should grow from.

    The root balances its sides, preferring horizontal growth. Other nodes
    keep growing towards ``last_direction`` unless its opposite side is
    less crowded.
    """
    connections = count_connections(parent.id, edges)

    if parent.id == root_id:
        fewest = min(connections.values())
        for direction in (Direction.LEFT, Direction.RIGHT, Direction.TOP, Direction.BOTTOM):
            if connections[direction] == fewest:
                return direction

    if last_direction is not None:
        opposite = opposite_direction(last_direction)
        if connections[last_direction] <= connections[opposite]:
            return last_direction
        return opposite

    return min(ALL_DIRECTIONS, key=lambda d: connections[d])
