"""Pytest configuration and snapshot builders."""

import sys
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent.absolute()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from tests.builders import make_edge, make_node  # noqa: E402


@pytest.fixture
def star_map():
    """Root with two children growing right and left."""
    nodes = [
        make_node("root", 500, 300, width=160, height=56),
        make_node("a", 40, 10, parent_id="root", depth=1, width=120, height=40),
        make_node("b", -90, 25, parent_id="root", depth=1, width=120, height=40),
    ]
    edges = [
        make_edge("root", "a", "right", "left"),
        make_edge("root", "b", "left", "right"),
    ]
    return nodes, edges


@pytest.fixture
def deep_map():
    """Root, three first-level branches, grandchildren and one stray node."""
    nodes = [
        make_node("root", 0, 0, width=160, height=56),
        make_node("a", 200, -100, parent_id="root", depth=1),
        make_node("b", 200, 100, parent_id="root", depth=1),
        make_node("c", -200, 0, parent_id="root", depth=1),
        make_node("a1", 150, 0, parent_id="a", depth=2),
        make_node("a2", 150, 50, parent_id="a", depth=2),
        make_node("c1", -150, 0, parent_id="c", depth=2),
        make_node("stray", 900, 900),
    ]
    edges = [
        make_edge("root", "a", "right", "left"),
        make_edge("root", "b", "right", "left"),
        make_edge("root", "c", "left", "right"),
        make_edge("a", "a1", "right", "left"),
        make_edge("a", "a2", "right", "left"),
        make_edge("c", "c1", "left", "right"),
    ]
    return nodes, edges
