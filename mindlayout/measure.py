"""Estimate node boxes from their labels with cairo text extents.

Useful when a snapshot arrives before the editor has measured its nodes:
sizes follow the canvas rules (padding, minimum and maximum width, fixed
heights) so containment and overlap checks see realistic boxes.
"""

from dataclasses import replace
from typing import Optional, List, Dict, Sequence

import cairo

from mindlayout.geometry import absolute_position, node_lookup
from mindlayout.model import Box, Node, Size


class TextMeasuringGeometry:
    """GeometryProvider that measures unsized nodes from their label."""

    NODE_PADDING = 16
    NODE_MIN_WIDTH = 120
    NODE_MAX_WIDTH = 300
    ROOT_NODE_MIN_WIDTH = 160
    NODE_HEIGHT = 40
    ROOT_NODE_HEIGHT = 56
    FONT_FACE = "Sans"
    FONT_SIZE = 13
    ROOT_FONT_SIZE = 15

    def __init__(self, nodes: Sequence[Node], root_id: Optional[str] = None):
        self.root_id = root_id
        self._lookup = node_lookup(nodes)
        self._positions = {n.id: absolute_position(n, self._lookup) for n in nodes}
        self._sizes: Dict[str, Size] = {}
        # A 1x1 surface is enough for font metrics
        self._surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, 1, 1)
        self._cr = cairo.Context(self._surface)

    def text_width(self, text: str, is_root: bool = False) -> float:
        self._cr.select_font_face(
            self.FONT_FACE, cairo.FONT_SLANT_NORMAL,
            cairo.FONT_WEIGHT_BOLD if is_root else cairo.FONT_WEIGHT_NORMAL)
        self._cr.set_font_size(self.ROOT_FONT_SIZE if is_root else self.FONT_SIZE)
        return self._cr.text_extents(text).x_advance

    def measure(self, node: Node) -> Size:
        """Size of ``node``: its stored size, else one derived from its label."""
        if node.size is not None:
            return node.size
        if node.id in self._sizes:
            return self._sizes[node.id]

        is_root = node.id == self.root_id
        text_width = self.text_width(node.label, is_root) + self.NODE_PADDING * 2
        if is_root:
            width = max(self.ROOT_NODE_MIN_WIDTH, min(self.NODE_MAX_WIDTH, text_width))
            height = self.ROOT_NODE_HEIGHT
        else:
            width = max(self.NODE_MIN_WIDTH, min(self.NODE_MAX_WIDTH, text_width))
            height = self.NODE_HEIGHT

        size = Size(float(width), float(height))
        self._sizes[node.id] = size
        return size

    def bounding_box(self, node_id: str) -> Optional[Box]:
        node = self._lookup.get(node_id)
        if node is None:
            return None
        size = self.measure(node)
        pos = self._positions[node_id]
        return Box(pos.x, pos.y, size.width, size.height)


def measure_nodes(nodes: Sequence[Node], root_id: Optional[str] = None) -> List[Node]:
    """Return a snapshot where every unsized node carries a measured size."""
    geometry = TextMeasuringGeometry(nodes, root_id)
    return [n if n.size is not None else replace(n, size=geometry.measure(n))
            for n in nodes]
