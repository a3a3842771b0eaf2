"""Pick the cardinal sides each edge connects through."""

import logging
from typing import Optional, List, Dict, Tuple, Sequence

from mindlayout.geometry import absolute_position_map, direction_between, opposite_direction
from mindlayout.model import Direction, Edge, Node, Point

logger = logging.getLogger(__name__)


def resolve_edge_sides(edge: Edge,
                       positions: Dict[str, Point]) -> Optional[Tuple[Direction, Direction]]:
    """Return ``(source_side, target_side)`` for ``edge``.

    Stored sides always win. A missing side mirrors the stored one; with no
    stored side the source faces the target by bearing and the target side
    is its opposite. Returns None when sides must be computed and an
    endpoint is missing from ``positions``.
    """
    if edge.source_side is not None and edge.target_side is not None:
        return edge.source_side, edge.target_side
    if edge.source_side is not None:
        return edge.source_side, opposite_direction(edge.source_side)
    if edge.target_side is not None:
        return opposite_direction(edge.target_side), edge.target_side

    source = positions.get(edge.source)
    target = positions.get(edge.target)
    if source is None or target is None:
        return None

    side = direction_between(source, target)
    return side, opposite_direction(side)


def _apply(edges: Sequence[Edge], positions: Dict[str, Point],
           touched: Optional[str] = None) -> List[Edge]:
    result = []
    changed = 0
    for edge in edges:
        if touched is not None and touched not in (edge.source, edge.target):
            result.append(edge)
            continue
        sides = resolve_edge_sides(edge, positions)
        if sides is None:
            result.append(edge)
            continue
        updated = edge.with_sides(*sides)
        if updated is not edge:
            changed += 1
        result.append(updated)

    if changed:
        logger.debug("Redirected %d edge(s)", changed)
    return result


def recalc_all(nodes: Sequence[Node], edges: Sequence[Edge]) -> List[Edge]:
    """Resolve sides for every edge; stored sides are kept."""
    return _apply(edges, absolute_position_map(nodes))


def recalc_one(nodes: Sequence[Node], edges: Sequence[Edge],
               moved_node_id: str) -> List[Edge]:
    """Resolve sides only for the edges touching ``moved_node_id``."""
    return _apply(edges, absolute_position_map(nodes), touched=moved_node_id)
