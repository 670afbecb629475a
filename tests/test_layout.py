"""Tests for tree canvas layout."""

import pytest

from compliance_engine.core.visualization import (
    DEFAULT_LAYOUT_CONFIG,
    LayoutConfig,
    calculate_layout,
    generate_edge_path,
    get_path_from_trace,
)
from compliance_engine.rules import GroupNode, evaluate_tree

from conftest import make_condition, make_leaf


class TestCalculateLayout:
    """Tests for calculate_layout."""

    def test_single_leaf(self):
        layout = calculate_layout(make_leaf("only", "Done"))

        assert len(layout.nodes) == 1
        node = layout.nodes[0]
        assert (node.x, node.y) == (20, 20)
        assert (node.width, node.height) == (200, 80)
        assert node.is_leaf
        assert layout.edges == []
        assert layout.width == 240
        assert layout.height == 120

    def test_binary_tree_positions(self, disclosure_tree):
        layout = calculate_layout(disclosure_tree)

        standard = layout.get_node("standard")
        enhanced = layout.get_node("enhanced")
        root = layout.get_node("amount_check")

        # False subtree on the left
        assert standard.x == 20
        assert enhanced.x == 20 + 240
        assert standard.y == enhanced.y == 20 + 140
        # Parent centred over the subtree extent, trailing spacing included
        assert root.x == 20 + 240 - 100
        assert root.y == 20
        assert root.x == (standard.x + enhanced.x + 40) / 2

    def test_post_order(self, disclosure_tree):
        layout = calculate_layout(disclosure_tree)
        assert [n.id for n in layout.nodes] == ["standard", "enhanced", "amount_check"]

    def test_edges(self, disclosure_tree):
        layout = calculate_layout(disclosure_tree)
        edges = {edge.label: edge for edge in layout.edges}

        assert edges["true"].to_id == "enhanced"
        assert edges["false"].to_id == "standard"
        root = layout.get_node("amount_check")
        assert edges["true"].from_x == root.center_x
        assert edges["true"].from_y == root.bottom_y
        assert edges["true"].to_y == layout.get_node("enhanced").y

    def test_depth_determines_y(self, nested_tree):
        layout = calculate_layout(nested_tree)
        for node in layout.nodes:
            assert node.y == node.depth * 140 + 20

    def test_no_overlap(self, nested_tree):
        layout = calculate_layout(nested_tree)
        by_depth: dict[int, list] = {}
        for node in layout.nodes:
            by_depth.setdefault(node.depth, []).append(node)
        for nodes in by_depth.values():
            nodes.sort(key=lambda n: n.x)
            for left, right in zip(nodes, nodes[1:]):
                assert left.x + left.width <= right.x

    def test_canvas_bounds(self, nested_tree):
        layout = calculate_layout(nested_tree)
        assert layout.width == max(n.x + n.width for n in layout.nodes) + 20
        assert layout.height == max(n.y + n.height for n in layout.nodes) + 20

    def test_custom_config(self, disclosure_tree):
        config = LayoutConfig(node_width=100, node_height=50, horizontal_spacing=10, vertical_spacing=30, padding=0)
        layout = calculate_layout(disclosure_tree, config)
        assert layout.get_node("enhanced").x == 110
        assert layout.get_node("enhanced").y == 80

    def test_group_is_opaque(self):
        group = GroupNode(
            node_id="g",
            entry_node_id="c",
            children=[make_condition("c", "x", "eq", 1, true=make_leaf("t", "T"), false=make_leaf("f", "F"))],
        )
        layout = calculate_layout(group)
        assert [n.id for n in layout.nodes] == ["g"]
        assert not layout.nodes[0].is_leaf

    def test_independent_of_evaluation(self, nested_tree):
        assert calculate_layout(nested_tree).to_dict()["nodes"] == [
            {**n, "isOnPath": False}
            for n in calculate_layout(nested_tree, highlighted_ids={"root"}).to_dict()["nodes"]
        ]


class TestHighlighting:
    """Tests for path highlighting."""

    def test_highlighted_path(self, nested_tree):
        facts = {"issuer": {"jurisdiction": "EU"}, "offer": {"retail": True}}
        result = evaluate_tree(nested_tree, facts)
        layout = calculate_layout(nested_tree, highlighted_ids=result.path_node_ids())

        on_path = {n.id for n in layout.nodes if n.is_on_path}
        assert on_path == {"root", "retail", "eu_retail"}

        on_path_edges = {(e.from_id, e.to_id) for e in layout.edges if e.is_on_path}
        assert on_path_edges == {("root", "retail"), ("retail", "eu_retail")}

    def test_edge_needs_both_ends(self, disclosure_tree):
        layout = calculate_layout(disclosure_tree, highlighted_ids={"amount_check"})
        assert not any(e.is_on_path for e in layout.edges)

    def test_get_path_from_trace(self, nested_tree):
        result = evaluate_tree(nested_tree, {"issuer": {"jurisdiction": "US"}})
        assert get_path_from_trace(result.trace) == {"root"}
        assert get_path_from_trace(result.trace, result.leaf) == {"root", "non_eu"}


class TestEdgePath:
    """Tests for SVG edge paths."""

    def test_cubic_bezier(self, disclosure_tree):
        layout = calculate_layout(disclosure_tree)
        edge = next(e for e in layout.edges if e.label == "false")
        path = generate_edge_path(edge)

        mid_y = (edge.from_y + edge.to_y) / 2
        assert path == (
            f"M {edge.from_x} {edge.from_y} "
            f"C {edge.from_x} {mid_y}, {edge.to_x} {mid_y}, {edge.to_x} {edge.to_y}"
        )
        assert edge.path == path

    def test_to_dict_camel_case(self, disclosure_tree):
        data = calculate_layout(disclosure_tree).to_dict()
        edge = data["edges"][0]
        assert {"fromId", "toId", "fromX", "fromY", "toX", "toY", "isOnPath", "path"} <= edge.keys()
        assert data["nodes"][0]["isLeaf"] is True


class TestLayoutConfig:
    """Tests for layout configuration."""

    def test_defaults(self):
        assert DEFAULT_LAYOUT_CONFIG == LayoutConfig(200, 80, 40, 60, 20)

    def test_from_settings(self, monkeypatch):
        from compliance_engine.core.config import get_settings

        monkeypatch.setenv("LAYOUT_NODE_WIDTH", "150")
        get_settings.cache_clear()
        try:
            assert LayoutConfig.from_settings().node_width == 150
        finally:
            get_settings.cache_clear()

    def test_frozen(self):
        with pytest.raises(Exception):
            DEFAULT_LAYOUT_CONFIG.node_width = 10
