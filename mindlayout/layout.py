"""Auto-layout of the tree reachable from the root node.

Three placement strategies share one traversal:

* horizontal - children stack beside their parent on the side their edge
  leaves from (left/right stacks, top/bottom rows);
* vertical - one row per depth, first-level branches split between south
  and north of the root;
* radial - every node owns an angular sector of the circle around the root
  and splits it among its children.

Nodes that cannot be reached from the root through containment or edges
are never moved.
"""

import logging
import math
from collections import deque
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Tuple, Sequence, Union

from mindlayout.edges import recalc_all
from mindlayout.geometry import (
    absolute_position_map, direction_between, direction_from_side_token,
)
from mindlayout.model import ALL_DIRECTIONS, Direction, Edge, LayoutMode, Node, Point
from mindlayout.settings import LayoutSettings

logger = logging.getLogger(__name__)


@dataclass
class LayoutGraph:
    """Traversal state derived from a snapshot for one layout pass."""
    root_id: str
    depths: Dict[str, int]
    tree_parent: Dict[str, Optional[str]]
    children: Dict[str, List[str]]
    edges_by_source: Dict[str, List[Edge]]
    absolute: Dict[str, Point]
    levels: Dict[int, List[str]] = field(default_factory=dict)
    _ordered: Dict[str, List[str]] = field(default_factory=dict, repr=False)

    def ordered_children(self, parent_id: str) -> List[str]:
        """Edge order first, then edge-less contained children by X."""
        if parent_id in self._ordered:
            return self._ordered[parent_id]

        seen = set()
        ordered: List[str] = []
        for edge in self.edges_by_source.get(parent_id, []):
            if edge.target in self.depths and edge.target not in seen:
                ordered.append(edge.target)
                seen.add(edge.target)

        fallback = [c for c in self.children.get(parent_id, []) if c in self.depths]
        fallback.sort(key=lambda c: self.absolute[c].x if c in self.absolute else 0.0)
        for child_id in fallback:
            if child_id not in seen:
                ordered.append(child_id)
                seen.add(child_id)

        self._ordered[parent_id] = ordered
        return ordered


@dataclass(frozen=True)
class Sector:
    """Angular range (radians) owned by a node in radial mode."""
    start: float
    end: float

    @property
    def angle(self) -> float:
        return (self.start + self.end) / 2

    def contains(self, angle: float) -> bool:
        return self.start < angle < self.end


def _register(children: Dict[str, List[str]], parent_id: str, child_id: str):
    siblings = children.setdefault(parent_id, [])
    if child_id not in siblings:
        siblings.append(child_id)


def build_layout_graph(nodes: Sequence[Node], edges: Sequence[Edge],
                       root_id: str) -> Optional[LayoutGraph]:
    """Collect reachability, depths and child order from ``root_id``.

    Returns None when the root is not part of the snapshot.
    """
    node_ids = {n.id for n in nodes}
    if root_id not in node_ids:
        return None

    children: Dict[str, List[str]] = {}
    for node in nodes:
        if node.parent_id is not None:
            _register(children, node.parent_id, node.id)
    for edge in edges:
        if edge.source in node_ids and edge.target in node_ids:
            _register(children, edge.source, edge.target)

    depths: Dict[str, int] = {root_id: 0}
    tree_parent: Dict[str, Optional[str]] = {root_id: None}
    queue = deque([root_id])
    visited = set()
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        for child_id in children.get(current, []):
            if child_id not in depths:
                depths[child_id] = depths[current] + 1
                tree_parent[child_id] = current
            if child_id not in visited:
                queue.append(child_id)

    edges_by_source: Dict[str, List[Edge]] = {}
    for edge in edges:
        if edge.source in depths and edge.target in depths:
            edges_by_source.setdefault(edge.source, []).append(edge)

    # Containment without an edge still drives the traversal
    for node in nodes:
        if node.parent_id is None:
            continue
        if node.parent_id not in depths or node.id not in depths:
            continue
        existing = edges_by_source.setdefault(node.parent_id, [])
        if any(e.target == node.id for e in existing):
            continue
        existing.append(Edge(
            id=f"virtual-{node.parent_id}-{node.id}",
            source=node.parent_id,
            target=node.id,
        ))

    graph = LayoutGraph(
        root_id=root_id,
        depths=depths,
        tree_parent=tree_parent,
        children=children,
        edges_by_source=edges_by_source,
        absolute=absolute_position_map(nodes),
    )
    graph.levels = _collect_levels(graph)
    return graph


def _collect_levels(graph: LayoutGraph) -> Dict[int, List[str]]:
    levels: Dict[int, List[str]] = {}
    queue = deque([graph.root_id])
    visited = set()
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        levels.setdefault(graph.depths[current], []).append(current)
        for child_id in graph.ordered_children(current):
            if child_id not in visited:
                queue.append(child_id)
    return levels


def compute_depths(nodes: Sequence[Node], edges: Sequence[Edge],
                   root_id: str) -> Dict[str, int]:
    """Graph distance from the root for every reachable node."""
    graph = build_layout_graph(nodes, edges, root_id)
    return dict(graph.depths) if graph else {}


def assign_sectors(graph: LayoutGraph) -> Dict[str, Sector]:
    """Split the circle around the root among the tree, top-down."""
    full_span = 2 * math.pi
    base_angle = -math.pi / 2
    first_level = graph.ordered_children(graph.root_id)
    if first_level:
        start = base_angle - (full_span / len(first_level)) / 2
    else:
        start = base_angle - math.pi

    sectors = {graph.root_id: Sector(start, start + full_span)}
    queue = deque([graph.root_id])
    while queue:
        parent_id = queue.popleft()
        parent = sectors[parent_id]
        children = [c for c in graph.ordered_children(parent_id) if c not in sectors]
        if not children:
            continue
        span = (parent.end - parent.start) / len(children)
        for index, child_id in enumerate(children):
            child_start = parent.start + index * span
            sectors[child_id] = Sector(child_start, child_start + span)
            queue.append(child_id)

    return sectors


class LayoutEngine:
    """Recompute positions of every node reachable from a root."""

    def __init__(self, settings: Optional[LayoutSettings] = None):
        self.settings = settings or LayoutSettings()

    def layout(self, nodes: Sequence[Node], edges: Sequence[Edge], root_id: str,
               mode: Union[LayoutMode, str, None] = None) -> List[Node]:
        graph = build_layout_graph(nodes, edges, root_id)
        if graph is None:
            logger.debug("Layout skipped: root %s not in snapshot", root_id)
            return list(nodes)

        if mode is None:
            mode = self.settings.layout_mode
        mode = LayoutMode(mode)
        logger.debug("Laying out %d reachable node(s) in %s mode",
                     len(graph.depths), mode.value)

        root_abs = graph.absolute[root_id]
        if mode == LayoutMode.VERTICAL:
            positions = self.vertical_positions(graph, root_abs)
        elif mode == LayoutMode.RADIAL:
            positions = self.radial_positions(graph, root_abs)
        else:
            positions = self.horizontal_positions(graph, root_abs)

        return self._to_relative(nodes, graph, positions)

    # ==================== Horizontal ====================

    def horizontal_positions(self, graph: LayoutGraph,
                             root_abs: Point) -> Dict[str, Point]:
        positions = {graph.root_id: root_abs}
        placed = {graph.root_id}
        self._place_children(graph, graph.root_id, root_abs, positions, placed)
        return positions

    def _side_groups(self, graph: LayoutGraph, node_id: str,
                     placed: set) -> Dict[Direction, List[str]]:
        groups: Dict[Direction, List[str]] = {d: [] for d in ALL_DIRECTIONS}
        for edge in graph.edges_by_source.get(node_id, []):
            child_id = edge.target
            if child_id not in graph.depths or child_id in placed:
                continue
            direction = direction_from_side_token(edge.source_side)
            if direction is None:
                direction = direction_between(graph.absolute[node_id],
                                              graph.absolute[child_id])
            groups[direction].append(child_id)
            placed.add(child_id)
        return groups

    def _place_children(self, graph: LayoutGraph, node_id: str, parent_abs: Point,
                        positions: Dict[str, Point], placed: set):
        settings = self.settings
        depth = graph.depths[node_id]
        spacing = settings.spacing_for_depth(depth + 1)

        for direction, children in self._side_groups(graph, node_id, placed).items():
            if not children:
                continue

            if direction in (Direction.LEFT, Direction.RIGHT):
                children.sort(key=lambda c: graph.absolute[c].y)
                start_y = parent_abs.y - spacing * (len(children) - 1) / 2
                offset_x = (settings.horizontal_offset if direction == Direction.RIGHT
                            else -settings.horizontal_offset)
                slots = [Point(parent_abs.x + offset_x, start_y + i * spacing)
                         for i in range(len(children))]
            else:
                children.sort(key=lambda c: graph.absolute[c].x)
                spacing_x = settings.horizontal_offset
                start_x = parent_abs.x - spacing_x * (len(children) - 1) / 2
                offset_y = max(spacing, settings.child_spacing)
                if direction == Direction.TOP:
                    offset_y = -offset_y
                slots = [Point(start_x + i * spacing_x, parent_abs.y + offset_y)
                         for i in range(len(children))]

            for child_id, slot in zip(children, slots):
                positions[child_id] = slot
                self._place_children(graph, child_id, slot, positions, placed)

    # ==================== Vertical ====================

    def orientations(self, graph: LayoutGraph) -> Dict[str, int]:
        """+1 (south) or -1 (north) per node; the root is 0."""
        orientation = {graph.root_id: 0}
        first_level = graph.levels.get(1, [])
        half = math.ceil(len(first_level) / 2)
        for index, node_id in enumerate(first_level):
            orientation[node_id] = 1 if index < half else -1

        for depth in sorted(d for d in graph.levels if d >= 2):
            for node_id in graph.levels[depth]:
                parent_sign = orientation.get(graph.tree_parent.get(node_id), 1)
                orientation[node_id] = 1 if parent_sign == 0 else parent_sign
        return orientation

    def vertical_positions(self, graph: LayoutGraph,
                           root_abs: Point) -> Dict[str, Point]:
        settings = self.settings
        orientation = self.orientations(graph)
        positions = {graph.root_id: root_abs}

        for depth in sorted(graph.levels):
            if depth == 0:
                continue
            rows: Dict[int, List[str]] = {}
            for node_id in graph.levels[depth]:
                sign = orientation.get(node_id, 1) or 1
                rows.setdefault(sign, []).append(node_id)

            for sign, row in rows.items():
                y = root_abs.y + sign * settings.depth_offset(depth)
                start_x = root_abs.x - settings.horizontal_offset * (len(row) - 1) / 2
                for index, node_id in enumerate(row):
                    positions[node_id] = Point(
                        start_x + index * settings.horizontal_offset, y)

        return positions

    # ==================== Radial ====================

    def radius_for_depth(self, depth: int) -> float:
        return max(self.settings.depth_offset(depth),
                   self.settings.horizontal_offset * depth)

    def radial_positions(self, graph: LayoutGraph,
                         root_abs: Point) -> Dict[str, Point]:
        sectors = assign_sectors(graph)
        positions = {graph.root_id: root_abs}

        for depth in sorted(graph.levels):
            if depth == 0:
                continue
            radius = self.radius_for_depth(depth)
            for node_id in graph.levels[depth]:
                sector = sectors.get(node_id)
                if sector is None:
                    continue
                positions[node_id] = Point(
                    root_abs.x + radius * math.cos(sector.angle),
                    root_abs.y + radius * math.sin(sector.angle),
                )

        return positions

    # ==================== Output ====================

    def _to_relative(self, nodes: Sequence[Node], graph: LayoutGraph,
                     positions: Dict[str, Point]) -> List[Node]:
        result = []
        moved = 0
        for node in nodes:
            new_abs = positions.get(node.id)
            if new_abs is None or node.id not in graph.depths:
                result.append(node)
                continue

            if node.parent_id is None:
                position = new_abs
            else:
                parent_abs = positions.get(node.parent_id,
                                           graph.absolute.get(node.parent_id, Point()))
                position = new_abs - parent_abs

            if position == node.position:
                result.append(node)
            else:
                result.append(node.moved(position, node.parent_id))
                moved += 1

        logger.debug("Layout moved %d node(s)", moved)
        return result


def auto_layout(nodes: Sequence[Node], edges: Sequence[Edge], root_id: str,
                mode: Union[LayoutMode, str, None] = None,
                settings: Optional[LayoutSettings] = None) -> List[Node]:
    """Lay out the tree under ``root_id``; see :class:`LayoutEngine`."""
    return LayoutEngine(settings).layout(nodes, edges, root_id, mode)


def apply_layout(nodes: Sequence[Node], edges: Sequence[Edge], root_id: str,
                 mode: Union[LayoutMode, str, None] = None,
                 settings: Optional[LayoutSettings] = None) -> Tuple[List[Node], List[Edge]]:
    """Lay out the tree and re-resolve edge sides for the new geometry."""
    new_nodes = auto_layout(nodes, edges, root_id, mode, settings)
    return new_nodes, recalc_all(new_nodes, edges)
