"""Geometry engine for mindmap editors: containment, layout, placement."""

__version__ = "1.0.0"

from mindlayout.model import (  # noqa: E402
    Box, Direction, Edge, LayoutMode, Node, Point, Size, SnapshotFormatError,
)
from mindlayout.settings import LayoutSettings  # noqa: E402
from mindlayout.geometry import (  # noqa: E402
    absolute_position, angle_between, direction_from_side_token, opposite_direction,
)
from mindlayout.containment import resolve_containment, sort_parents_first  # noqa: E402
from mindlayout.placement import SnapshotIntersections, find_free_position  # noqa: E402
from mindlayout.edges import recalc_all, recalc_one  # noqa: E402
from mindlayout.layout import LayoutEngine, apply_layout, auto_layout  # noqa: E402
from mindlayout.outline import OutlineItem, parse_outline  # noqa: E402
