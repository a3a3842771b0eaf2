"""Tests for horizontal, vertical and radial auto-layout."""

import math

import pytest

from mindlayout.geometry import absolute_position_map, node_lookup
from mindlayout.layout import (
    LayoutEngine, apply_layout, assign_sectors, auto_layout,
    build_layout_graph, compute_depths,
)
from mindlayout.model import Direction, LayoutMode, Point
from mindlayout.settings import LayoutSettings
from tests.builders import make_edge, make_node

ALL_MODES = [LayoutMode.HORIZONTAL, LayoutMode.VERTICAL, LayoutMode.RADIAL]


def _approx_point(point):
    return (pytest.approx(point.x, abs=1e-6), pytest.approx(point.y, abs=1e-6))


class TestHorizontalLayout:
    def test_children_follow_their_edge_side(self, star_map):
        nodes, edges = star_map
        result = node_lookup(auto_layout(nodes, edges, "root"))
        assert result["a"].position == Point(240, 0)
        assert result["b"].position == Point(-240, 0)
        assert result["root"].position == Point(500, 300)

    def test_stacks_and_recurses(self, deep_map):
        nodes, edges = deep_map
        result = auto_layout(nodes, edges, "root", LayoutMode.HORIZONTAL)
        absolute = absolute_position_map(result)
        assert absolute["a"] == Point(240, -80)
        assert absolute["b"] == Point(240, 80)
        assert absolute["c"] == Point(-240, 0)
        assert absolute["a1"] == Point(480, -130)
        assert absolute["a2"] == Point(480, -30)
        assert absolute["c1"] == Point(-480, 0)
        assert node_lookup(result)["a1"].position == Point(240, -50)

    def test_bottom_children_form_a_row(self):
        nodes = [
            make_node("root", 0, 0),
            make_node("x", 10, 300, parent_id="root", depth=1),
            make_node("y", -10, 300, parent_id="root", depth=1),
        ]
        edges = [
            make_edge("root", "x", "bottom", "top"),
            make_edge("root", "y", "bottom", "top"),
        ]
        result = node_lookup(auto_layout(nodes, edges, "root"))
        assert result["y"].position == Point(-120, 160)
        assert result["x"].position == Point(120, 160)

    def test_edge_only_child_is_placed_absolutely(self):
        nodes = [make_node("root", 0, 0), make_node("far", 1000, 1000)]
        edges = [make_edge("root", "far", "right", "left")]
        result = node_lookup(auto_layout(nodes, edges, "root"))
        assert result["far"].position == Point(240, 0)
        assert result["far"].parent_id is None

    def test_containment_without_edge_is_followed(self):
        nodes = [
            make_node("root", 0, 0),
            make_node("inner", 300, 5, parent_id="root", depth=1),
        ]
        result = node_lookup(auto_layout(nodes, [], "root"))
        assert result["inner"].position == Point(240, 0)

    def test_edge_cycle_terminates(self):
        nodes = [make_node("root", 0, 0), make_node("a", 100, 0)]
        edges = [
            make_edge("root", "a", "right", "left"),
            make_edge("a", "root", "left", "right"),
        ]
        result = node_lookup(auto_layout(nodes, edges, "root"))
        assert result["root"].position == Point(0, 0)
        assert result["a"].position == Point(240, 0)

    def test_custom_offsets(self, star_map):
        nodes, edges = star_map
        settings = LayoutSettings(horizontal_offset=300)
        result = node_lookup(auto_layout(nodes, edges, "root", settings=settings))
        assert result["a"].position == Point(300, 0)


class TestVerticalLayout:
    def test_first_level_split_and_rows(self, deep_map):
        nodes, edges = deep_map
        result = auto_layout(nodes, edges, "root", LayoutMode.VERTICAL)
        absolute = absolute_position_map(result)
        assert absolute["a"] == Point(-120, 160)
        assert absolute["b"] == Point(120, 160)
        assert absolute["c"] == Point(0, -160)
        assert absolute["a1"] == Point(-120, 260)
        assert absolute["a2"] == Point(120, 260)
        assert absolute["c1"] == Point(0, -260)

    def test_orientation_is_inherited(self, deep_map):
        nodes, edges = deep_map
        graph = build_layout_graph(nodes, edges, "root")
        orientation = LayoutEngine().orientations(graph)
        assert orientation["root"] == 0
        assert orientation["a"] == orientation["a1"] == 1
        assert orientation["c"] == orientation["c1"] == -1


class TestRadialLayout:
    def test_first_child_points_up(self, deep_map):
        nodes, edges = deep_map
        result = auto_layout(nodes, edges, "root", LayoutMode.RADIAL)
        absolute = absolute_position_map(result)
        assert (absolute["a"].x, absolute["a"].y) == _approx_point(Point(0, -240))

    def test_children_stay_inside_parent_sector(self, deep_map):
        nodes, edges = deep_map
        graph = build_layout_graph(nodes, edges, "root")
        sectors = assign_sectors(graph)
        for node_id, parent_id in graph.tree_parent.items():
            if parent_id is None:
                continue
            child, parent = sectors[node_id], sectors[parent_id]
            assert parent.start - 1e-9 <= child.start
            assert child.end <= parent.end + 1e-9
            assert parent.contains(child.angle)

    def test_radius_per_depth(self, deep_map):
        nodes, edges = deep_map
        engine = LayoutEngine()
        result = engine.layout(nodes, edges, "root", LayoutMode.RADIAL)
        absolute = absolute_position_map(result)
        depths = compute_depths(nodes, edges, "root")
        for node_id, depth in depths.items():
            if depth == 0:
                continue
            pos = absolute[node_id]
            assert math.hypot(pos.x, pos.y) == pytest.approx(engine.radius_for_depth(depth))


class TestReachability:
    @pytest.mark.parametrize("mode", ALL_MODES)
    def test_unreachable_nodes_never_move(self, deep_map, mode):
        nodes, edges = deep_map
        result = node_lookup(auto_layout(nodes, edges, "root", mode))
        assert result["stray"] is node_lookup(nodes)["stray"]

    @pytest.mark.parametrize("mode", ALL_MODES)
    def test_lone_root_is_preserved(self, mode):
        nodes = [make_node("root", 42, 24)]
        assert auto_layout(nodes, [], "root", mode) == nodes

    @pytest.mark.parametrize("mode", ALL_MODES)
    def test_unknown_root_is_a_no_op(self, deep_map, mode):
        nodes, edges = deep_map
        assert auto_layout(nodes, edges, "missing", mode) == nodes

    def test_depths_are_graph_distances(self, deep_map):
        nodes, edges = deep_map
        assert compute_depths(nodes, edges, "root") == {
            "root": 0, "a": 1, "b": 1, "c": 1, "a1": 2, "a2": 2, "c1": 2,
        }

    def test_first_seen_depth_wins(self):
        nodes = [make_node("root"), make_node("a"), make_node("b")]
        edges = [
            make_edge("root", "a"),
            make_edge("root", "b"),
            make_edge("a", "b"),
        ]
        assert compute_depths(nodes, edges, "root")["b"] == 1


class TestApplyLayout:
    def test_stored_sides_survive_layout(self, deep_map):
        nodes, edges = deep_map
        new_nodes, new_edges = apply_layout(nodes, edges, "root", LayoutMode.VERTICAL)
        assert new_edges == edges
        assert len(new_nodes) == len(nodes)

    def test_sideless_edges_follow_new_geometry(self, deep_map):
        nodes, edges = deep_map
        sideless = [make_edge(e.source, e.target) for e in edges]
        _, new_edges = apply_layout(nodes, sideless, "root", LayoutMode.VERTICAL)
        by_id = {e.id: e for e in new_edges}
        assert by_id["e-root-a"].source_side == Direction.BOTTOM
        assert by_id["e-root-c"].source_side == Direction.TOP

    def test_switching_modes_back_restores_horizontal_result(self, deep_map):
        nodes, edges = deep_map
        first_nodes, first_edges = apply_layout(nodes, edges, "root", LayoutMode.HORIZONTAL)
        vert_nodes, vert_edges = apply_layout(first_nodes, first_edges, "root",
                                              LayoutMode.VERTICAL)
        again_nodes, again_edges = apply_layout(vert_nodes, vert_edges, "root",
                                                LayoutMode.HORIZONTAL)
        assert absolute_position_map(again_nodes) == absolute_position_map(first_nodes)
        assert again_edges == first_edges
        assert node_lookup(again_nodes)["a"].position == Point(240, -80)

    def test_settings_mode_is_the_default(self, deep_map):
        nodes, edges = deep_map
        settings = LayoutSettings(mode="vertical")
        result = auto_layout(nodes, edges, "root", settings=settings)
        assert absolute_position_map(result)["c"] == Point(0, -160)
