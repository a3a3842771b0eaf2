"""Indented bullet outlines: parsing, import into a snapshot and export."""

import re
import uuid
from dataclasses import dataclass, field
from typing import Optional, List, Callable, Sequence, Tuple

from mindlayout.model import Direction, Edge, Node, Point
from mindlayout.settings import LayoutSettings

_BULLET = re.compile(r"^(\s*)([-*+])\s+(.*)$")


@dataclass
class OutlineItem:
    text: str
    children: List["OutlineItem"] = field(default_factory=list)


def parse_outline(outline: str) -> List[OutlineItem]:
    """Parse ``-``/``*``/``+`` bullets into a tree.

    Two spaces (or one tab) per level. A non-bullet line continues the text
    of the previous bullet; blank lines are ignored. Text without any bullet
    yields an empty list.
    """
    root_items: List[OutlineItem] = []
    stack: List[Tuple[int, OutlineItem]] = []

    for raw_line in outline.splitlines():
        line = raw_line.replace("\t", "  ").rstrip()
        if not line.strip() or line.strip() in ("-", "*", "+"):
            continue

        match = _BULLET.match(line)
        if not match:
            if stack:
                current = stack[-1][1]
                current.text = f"{current.text} {line.strip()}".strip()
            continue

        indent, _, content = match.groups()
        level = len(indent) // 2
        text = content.strip()
        if not text:
            continue

        item = OutlineItem(text)
        while stack and stack[-1][0] >= level:
            stack.pop()

        if stack:
            stack[-1][1].children.append(item)
        else:
            root_items.append(item)
        stack.append((level, item))

    return root_items


def _new_id() -> str:
    return str(uuid.uuid4())


def outline_to_snapshot(items: Sequence[OutlineItem], root_label: str = "Idea",
                        id_factory: Callable[[], str] = _new_id,
                        settings: Optional[LayoutSettings] = None,
                        root_position: Point = Point()) -> Tuple[List[Node], List[Edge]]:
    """Build nodes and edges for an imported outline.

    Every item becomes a child node (contained by, and connected from, its
    parent) growing to the right. Positions are rough anchors; run
    ``auto_layout`` afterwards for a tidy placement.
    """
    settings = settings or LayoutSettings()
    root = Node(id=id_factory(), position=root_position, depth=0, label=root_label)
    nodes: List[Node] = [root]
    edges: List[Edge] = []

    def add(parent: Node, children: Sequence[OutlineItem]):
        spacing = settings.spacing_for_depth(parent.depth + 1)
        start_y = -spacing * (len(children) - 1) / 2
        for index, item in enumerate(children):
            node = Node(
                id=id_factory(),
                parent_id=parent.id,
                position=Point(settings.horizontal_offset, start_y + index * spacing),
                depth=parent.depth + 1,
                label=item.text,
            )
            nodes.append(node)
            edges.append(Edge(
                id=f"e-{parent.id}-{node.id}",
                source=parent.id,
                target=node.id,
                source_side=Direction.RIGHT,
                target_side=Direction.LEFT,
            ))
            add(node, item.children)

    add(root, items)
    return nodes, edges


def snapshot_to_outline(nodes: Sequence[Node], edges: Sequence[Edge],
                        root_id: str) -> str:
    """Export the tree under ``root_id`` as an indented bullet outline.

    Children follow edge order, then containment for children without an
    edge. The root itself is not emitted.
    """
    by_id = {n.id: n for n in nodes}
    if root_id not in by_id:
        return ""

    children = {}
    for edge in edges:
        if edge.source in by_id and edge.target in by_id:
            children.setdefault(edge.source, []).append(edge.target)
    for node in nodes:
        if node.parent_id is not None:
            siblings = children.setdefault(node.parent_id, [])
            if node.id not in siblings:
                siblings.append(node.id)

    lines = []
    visited = {root_id}

    def add_node(node_id: str, depth: int):
        for child_id in children.get(node_id, []):
            if child_id in visited:
                continue
            visited.add(child_id)
            indent = "  " * depth
            lines.append(f"{indent}- {by_id[child_id].label or child_id}")
            add_node(child_id, depth + 1)

    add_node(root_id, 0)
    return "\n".join(lines)
