"""Tests for coordinate and direction helpers."""

import logging

import pytest

from mindlayout.geometry import (
    SnapshotGeometry, absolute_position, ancestor_ids, angle_between,
    direction_between, direction_from_angle, direction_from_side_token,
    find_closest_node_in_direction, is_descendant, opposite_direction,
    rects_overlap,
)
from mindlayout.model import Box, Direction, Point
from tests.builders import make_node


class TestAbsolutePosition:
    def test_unparented_node_is_absolute(self):
        node = make_node("n", 12, 34)
        assert absolute_position(node, [node]) == Point(12, 34)

    def test_sums_ancestor_chain(self):
        nodes = [
            make_node("root", 100, 100),
            make_node("child", 10, 20, parent_id="root", depth=1),
            make_node("grandchild", 5, 5, parent_id="child", depth=2),
        ]
        assert absolute_position(nodes[2], nodes) == Point(115, 125)

    def test_accepts_mapping(self):
        root = make_node("root", 1, 2)
        child = make_node("child", 3, 4, parent_id="root")
        assert absolute_position(child, {"root": root, "child": child}) == Point(4, 6)

    def test_missing_parent_stops_walk(self):
        orphan = make_node("orphan", 7, 8, parent_id="ghost", depth=1)
        assert absolute_position(orphan, [orphan]) == Point(7, 8)

    def test_cycle_terminates_with_warning(self, caplog):
        a = make_node("a", 1, 1, parent_id="b")
        b = make_node("b", 2, 2, parent_id="a")
        with caplog.at_level(logging.WARNING, logger="mindlayout.geometry"):
            result = absolute_position(a, [a, b])
        assert result == Point(3, 3)
        assert "Cyclic parent chain" in caplog.text


class TestAncestry:
    def test_ancestor_ids_nearest_first(self):
        nodes = [
            make_node("root"),
            make_node("mid", parent_id="root", depth=1),
            make_node("leaf", parent_id="mid", depth=2),
        ]
        assert ancestor_ids("leaf", nodes) == ["mid", "root"]

    def test_is_descendant(self):
        nodes = [
            make_node("root"),
            make_node("mid", parent_id="root", depth=1),
            make_node("leaf", parent_id="mid", depth=2),
        ]
        assert is_descendant("leaf", "root", nodes)
        assert not is_descendant("root", "leaf", nodes)
        assert not is_descendant("mid", "mid", nodes)


class TestDirections:
    @pytest.mark.parametrize("target, expected", [
        (Point(10, 0), 0.0),
        (Point(0, 10), 90.0),
        (Point(-10, 0), 180.0),
        (Point(0, -10), 270.0),
    ])
    def test_angle_between(self, target, expected):
        assert angle_between(Point(0, 0), target) == pytest.approx(expected)

    @pytest.mark.parametrize("angle, expected", [
        (0, Direction.RIGHT),
        (45, Direction.RIGHT),
        (46, Direction.BOTTOM),
        (135, Direction.LEFT),
        (225, Direction.LEFT),
        (226, Direction.TOP),
        (315, Direction.RIGHT),
    ])
    def test_direction_from_angle(self, angle, expected):
        assert direction_from_angle(angle) == expected

    def test_direction_between_prefers_larger_axis(self):
        origin = Point(0, 0)
        assert direction_between(origin, Point(50, 10)) == Direction.RIGHT
        assert direction_between(origin, Point(-50, 10)) == Direction.LEFT
        assert direction_between(origin, Point(10, 50)) == Direction.BOTTOM
        assert direction_between(origin, Point(10, -50)) == Direction.TOP

    def test_direction_between_tie_goes_horizontal(self):
        assert direction_between(Point(0, 0), Point(20, 20)) == Direction.RIGHT

    def test_opposites(self):
        assert opposite_direction(Direction.LEFT) == Direction.RIGHT
        assert opposite_direction(Direction.TOP) == Direction.BOTTOM


class TestSideTokens:
    def test_handle_identifier(self):
        assert direction_from_side_token("n1-left-source") == Direction.LEFT

    def test_node_id_containing_dashes(self):
        token = "3f2a-91bc-top-source"
        assert direction_from_side_token(token) == Direction.TOP

    def test_bare_side_name(self):
        assert direction_from_side_token("bottom") == Direction.BOTTOM

    def test_unrecognized_token(self):
        assert direction_from_side_token("garbage") is None
        assert direction_from_side_token("") is None
        assert direction_from_side_token(None) is None


class TestRectsOverlap:
    def test_overlapping(self):
        assert rects_overlap(Box(0, 0, 10, 10), Box(5, 5, 10, 10))

    def test_touching_edges_do_not_overlap(self):
        assert not rects_overlap(Box(0, 0, 10, 10), Box(10, 0, 10, 10))

    def test_padding_widens_the_check(self):
        assert rects_overlap(Box(0, 0, 10, 10), Box(12, 0, 10, 10), padding=5)


class TestNavigation:
    def test_closest_in_cone(self):
        current = make_node("c", 0, 0)
        near = make_node("near", 100, 10)
        far = make_node("far", 300, 0)
        below = make_node("below", 0, 80)
        nodes = [current, near, far, below]
        assert find_closest_node_in_direction(current, nodes, Direction.RIGHT) is near
        assert find_closest_node_in_direction(current, nodes, Direction.BOTTOM) is below
        assert find_closest_node_in_direction(current, nodes, Direction.LEFT) is None


class TestSnapshotGeometry:
    def test_box_uses_absolute_position(self):
        nodes = [
            make_node("root", 100, 50, width=200, height=100),
            make_node("child", 10, 10, parent_id="root", depth=1, width=50, height=20),
        ]
        geometry = SnapshotGeometry(nodes)
        assert geometry.bounding_box("child") == Box(110, 60, 50, 20)

    def test_unmeasured_node_has_no_box(self):
        geometry = SnapshotGeometry([make_node("n", 0, 0)])
        assert geometry.bounding_box("n") is None
        assert geometry.bounding_box("missing") is None
