"""Drag-and-drop re-parenting by geometric containment."""

import logging
from typing import Optional, List, Dict, Sequence

from mindlayout.geometry import (
    GeometryProvider, SnapshotGeometry, absolute_position, ancestor_depth,
    ancestor_ids, is_descendant, node_lookup,
)
from mindlayout.model import Box, Node, Point

logger = logging.getLogger(__name__)


def find_container(nodes: Sequence[Node], dragged: Node, point: Point,
                   geometry: GeometryProvider) -> Optional[Node]:
    """Deepest node whose box contains ``point``.

    The dragged node and its descendants are never candidates. Ties keep the
    first candidate in input order.
    """
    lookup = node_lookup(nodes)
    best: Optional[Node] = None
    best_depth = -1

    for node in nodes:
        if node.id == dragged.id:
            continue
        chain = ancestor_ids(node.id, lookup)
        if dragged.id in chain:
            continue
        box = geometry.bounding_box(node.id)
        if box is None or not box.contains_point(point):
            continue
        if len(chain) > best_depth:
            best = node
            best_depth = len(chain)

    return best


def resolve_containment(nodes: Sequence[Node], dragged_id: str,
                        geometry: Optional[GeometryProvider] = None) -> List[Node]:
    """Re-parent a dropped node and anything it now encloses.

    ``nodes`` must already hold the dragged node at its dropped location; its
    absolute top-left corner is the drop point. Every node keeps its visual
    location, only the parent links and relative positions change. The result
    lists every parent before its descendants.
    """
    lookup = node_lookup(nodes)
    dragged = lookup.get(dragged_id)
    if dragged is None:
        logger.debug("Containment skipped: unknown node %s", dragged_id)
        return list(nodes)

    if geometry is None:
        geometry = SnapshotGeometry(nodes)

    absolute = {n.id: absolute_position(n, lookup) for n in nodes}
    drop_point = absolute[dragged_id]
    updated: Dict[str, Node] = dict(lookup)
    changed: List[str] = []

    container = find_container(nodes, dragged, drop_point, geometry)

    if container is not None and container.id != dragged.parent_id:
        logger.debug("Re-parenting %s into %s", dragged_id, container.id)
        updated[dragged_id] = dragged.moved(
            drop_point - absolute[container.id],
            container.id,
            container.depth + 1,
        )
        changed.append(dragged_id)
    elif container is None and dragged.parent_id is not None:
        logger.debug("Detaching %s from %s", dragged_id, dragged.parent_id)
        updated[dragged_id] = dragged.moved(drop_point, None)
        changed.append(dragged_id)

    dragged_box = geometry.bounding_box(dragged_id)
    if dragged_box is not None:
        dragged_box = Box(drop_point.x, drop_point.y,
                          dragged_box.width, dragged_box.height)
        changed.extend(_adopt_enclosed(nodes, updated, dragged_box,
                                       dragged_id, absolute, geometry))

    if changed:
        _refresh_depths(updated, changed)

    return sort_parents_first([updated[n.id] for n in nodes])


def _adopt_enclosed(nodes: Sequence[Node], updated: Dict[str, Node],
                    dragged_box: Box, dragged_id: str,
                    absolute: Dict[str, Point],
                    geometry: GeometryProvider) -> List[str]:
    """Move nodes fully inside ``dragged_box`` under the dragged node."""
    enclosed = []
    for node in nodes:
        if node.id == dragged_id:
            continue
        box = geometry.bounding_box(node.id)
        if box is not None and dragged_box.contains_box(box):
            enclosed.append(node)

    # Shallow first, so a group moves under the dragged node as a unit
    enclosed.sort(key=lambda n: ancestor_depth(n.id, updated))

    adopted = []
    drop_point = dragged_box.origin
    for node in enclosed:
        current = updated[node.id]
        if current.parent_id == dragged_id:
            continue
        if is_descendant(node.id, dragged_id, updated):
            continue
        if is_descendant(dragged_id, node.id, updated):
            continue
        updated[node.id] = current.moved(
            absolute[node.id] - drop_point,
            dragged_id,
            updated[dragged_id].depth + 1,
        )
        adopted.append(node.id)

    if adopted:
        logger.debug("Node %s adopted %d enclosed node(s)", dragged_id, len(adopted))
    return adopted


def _refresh_depths(updated: Dict[str, Node], roots: List[str]) -> None:
    """Re-derive depth below each re-parented node."""
    children: Dict[str, List[str]] = {}
    for node in updated.values():
        if node.parent_id is not None:
            children.setdefault(node.parent_id, []).append(node.id)

    visited = set()
    stack = list(roots)
    while stack:
        parent_id = stack.pop()
        if parent_id in visited:
            continue
        visited.add(parent_id)
        parent = updated[parent_id]
        for child_id in children.get(parent_id, []):
            child = updated[child_id]
            if child.depth != parent.depth + 1:
                updated[child_id] = child.moved(child.position, child.parent_id,
                                                parent.depth + 1)
            stack.append(child_id)


def sort_parents_first(nodes: Sequence[Node]) -> List[Node]:
    """Order nodes so every parent precedes all of its descendants.

    A parent found after one of its children is moved to just before that
    child; everything else keeps its relative order.
    """
    ordered = list(nodes)
    # Each move fixes one inversion; a cycle would otherwise move forever
    max_moves = len(ordered) * len(ordered) + 1
    moves = 0

    while True:
        index = {n.id: i for i, n in enumerate(ordered)}
        inversion = None
        for i, node in enumerate(ordered):
            parent_index = index.get(node.parent_id) if node.parent_id else None
            if parent_index is not None and parent_index > i:
                inversion = (i, parent_index)
                break
        if inversion is None:
            return ordered
        if moves >= max_moves:
            logger.warning("Parent ordering did not settle; parent links contain a cycle")
            return ordered
        child_index, parent_index = inversion
        parent = ordered.pop(parent_index)
        ordered.insert(child_index, parent)
        moves += 1
