"""Tests for the tree adapter visualization module."""

import pytest

from compliance_engine.core.visualization.tree_adapter import (
    TreeAdapter,
    TreeEdge,
    TreeGraph,
    TreeNode,
    extract_trace_path,
    render_dot,
    render_mermaid,
    tree_to_graph,
)
from compliance_engine.rules import (
    ConflictAnchorNode,
    GroupNode,
    RouterBranch,
    RouterNode,
    evaluate_tree,
)

from conftest import make_condition, make_leaf


@pytest.fixture
def adapter() -> TreeAdapter:
    return TreeAdapter()


# =============================================================================
# TreeNode / TreeEdge Tests
# =============================================================================


class TestTreeNode:
    """Tests for TreeNode dataclass."""

    def test_leaf_color_by_status(self):
        node = TreeNode(id="l", node_type="leaf", label="Blocked", status="blocked")
        assert node.color == "#dc3545"

    def test_inner_color_by_type(self):
        node = TreeNode(id="c", node_type="condition", label="x equals 1")
        assert node.color == "#3b82f6"


class TestTreeEdge:
    """Tests for TreeEdge dataclass."""

    def test_branch_colors(self):
        assert TreeEdge("a", "b", "true", "Yes").color == "#28a745"
        assert TreeEdge("a", "b", "false", "No").color == "#dc3545"

    def test_dashed_for_structure(self):
        assert TreeEdge("a", "b", "member").style == "dashed"
        assert TreeEdge("a", "b", "route").style == "dashed"
        assert TreeEdge("a", "b", "true").style == "solid"


# =============================================================================
# TreeAdapter Tests
# =============================================================================


class TestTreeAdapter:
    """Tests for TreeAdapter.convert."""

    def test_simple_tree(self, adapter, disclosure_tree):
        graph = adapter.convert(disclosure_tree)

        assert graph.root_id == "amount_check"
        assert len(graph.nodes) == 3
        assert len(graph.edges) == 2

        root = graph.get_node("amount_check")
        assert root.label == "amount >= 8000000"
        assert root.depth == 0

    def test_children(self, adapter, disclosure_tree):
        graph = adapter.convert(disclosure_tree)
        children = graph.get_children("amount_check")

        assert [(edge.label, node.id) for edge, node in children] == [
            ("Yes", "enhanced"),
            ("No", "standard"),
        ]

    def test_leaf_fields(self, adapter, disclosure_tree):
        graph = adapter.convert(disclosure_tree)
        leaf = graph.get_node("enhanced")

        assert leaf.node_type == "leaf"
        assert leaf.status == "requires_action"
        assert leaf.obligations == ["Publish enhanced disclosure document"]
        assert leaf.depth == 1

    def test_label_preferred(self, adapter, rule_loader):
        graph = adapter.convert(rule_loader.get_rule("mica-stablecoin-auth").tree)
        assert graph.get_node("eu_scope").label == "Instrument in MiCA stablecoin scope"

    def test_group_members(self, adapter):
        group = GroupNode(
            node_id="g",
            label="Authorisation",
            entry_node_id="c",
            children=[make_condition("c", "x", "eq", 1, true=make_leaf("t", "T"), false=make_leaf("f", "F"))],
        )
        graph = adapter.convert(group)

        assert graph.get_node("g").label == "Authorisation"
        assert graph.get_node("c").depth == 1
        member = graph.edges[0]
        assert (member.source_id, member.target_id, member.kind) == ("g", "c", "member")

    def test_router_branches(self, adapter):
        router = RouterNode(
            node_id="r",
            branches=[
                RouterBranch(jurisdiction="EU", role="issuer_home", target_node_id="eu_tree"),
                RouterBranch(jurisdiction="UK", role="target", target_node_id="uk_tree"),
            ],
        )
        graph = adapter.convert(router)

        assert graph.get_node("r").label == "2 branches"
        assert [e.label for e in graph.edges] == ["EU (issuer_home)", "UK (target)"]
        assert all(e.kind == "route" for e in graph.edges)

    def test_conflict_anchor(self, adapter):
        anchor = ConflictAnchorNode(node_id="a", conflict_id="c-1", paired_anchor_id="b")
        graph = adapter.convert(anchor)
        assert graph.get_node("a").label == "Conflict c-1"
        assert graph.edges == []

    def test_tree_to_graph(self, disclosure_tree):
        assert isinstance(tree_to_graph(disclosure_tree), TreeGraph)


# =============================================================================
# Rendering Tests
# =============================================================================


class TestRendering:
    """Tests for DOT and Mermaid output."""

    def test_dot(self, disclosure_tree):
        dot = render_dot(tree_to_graph(disclosure_tree))

        assert dot.startswith("digraph DecisionTree {")
        assert '"amount_check" -> "enhanced"' in dot
        assert 'label="Yes"' in dot
        assert dot.rstrip().endswith("}")

    def test_dot_escapes_quotes(self):
        leaf = make_leaf("q", 'Treated as "qualifying"')
        dot = tree_to_graph(leaf).to_dot()
        assert 'Treated as \\"qualifying\\"' in dot

    def test_dot_highlight(self, nested_tree):
        result = evaluate_tree(nested_tree, {"issuer": {"jurisdiction": "US"}})
        nodes, edges = extract_trace_path(result)
        dot = render_dot(tree_to_graph(nested_tree), nodes, edges)

        assert "→ Out of scope" in dot
        assert "penwidth=3, style=bold" in dot

    def test_mermaid(self, nested_tree):
        mermaid = render_mermaid(tree_to_graph(nested_tree))

        assert mermaid.startswith("flowchart TD")
        assert 'non_eu(("Out of scope"))' in mermaid
        assert "root -->|No| non_eu" in mermaid
        assert "style eu_retail fill:#ffc107" in mermaid


class TestExtractTracePath:
    """Tests for extract_trace_path."""

    def test_path(self, nested_tree):
        facts = {"issuer": {"jurisdiction": "EU"}, "offer": {"retail": False}}
        nodes, edges = extract_trace_path(evaluate_tree(nested_tree, facts))

        assert nodes == {"root", "retail", "eu_wholesale"}
        assert edges == {("root", "retail"), ("retail", "eu_wholesale")}

    def test_leaf_only(self):
        nodes, edges = extract_trace_path(evaluate_tree(make_leaf("l", "L"), {}))
        assert nodes == {"l"}
        assert edges == set()
