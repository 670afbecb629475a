"""
Tree Adapter - Converts decision trees to visualization-ready format.

This module flattens a DecisionNode tree into a graph representation suitable
for rendering with Graphviz or Mermaid. Group members, condition branches and
router dispatch targets all become edges.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from compliance_engine.core.ontology.jurisdiction import ComplianceStatus
from compliance_engine.rules.conditions import format_condition
from compliance_engine.rules.schema import (
    ConditionNode,
    ConflictAnchorNode,
    DecisionNode,
    GroupNode,
    LeafNode,
    RouterNode,
)
from compliance_engine.rules.trace import EvaluationResult


STATUS_COLORS: dict[str, str] = {
    ComplianceStatus.COMPLIANT.value: "#28a745",          # green
    ComplianceStatus.REQUIRES_ACTION.value: "#ffc107",    # amber
    ComplianceStatus.BLOCKED.value: "#dc3545",            # red
    ComplianceStatus.NO_APPLICABLE_RULES.value: "#6c757d",  # gray
}

NODE_TYPE_COLORS: dict[str, str] = {
    "condition": "#3b82f6",
    "group": "#8b5cf6",
    "router": "#f59e0b",
    "conflict_anchor": "#ef4444",
}

EdgeKind = Literal["true", "false", "member", "route"]


# =============================================================================
# Data Classes for Graph Representation
# =============================================================================


@dataclass
class TreeNode:
    """A node in the visualization graph."""

    id: str
    node_type: str
    label: str
    depth: int = 0

    # Leaf-specific fields
    status: str | None = None
    obligations: list[str] = field(default_factory=list)

    @property
    def color(self) -> str:
        """Fill color: leaf status, or the node type for inner nodes."""
        if self.status:
            return STATUS_COLORS.get(self.status, "#6c757d")
        return NODE_TYPE_COLORS.get(self.node_type, "#e9ecef")


@dataclass
class TreeEdge:
    """An edge connecting two nodes."""

    source_id: str
    target_id: str
    kind: EdgeKind
    label: str = ""

    @property
    def color(self) -> str:
        """Edge color based on branch type."""
        return {"true": "#28a745", "false": "#dc3545"}.get(self.kind, "#6c757d")

    @property
    def style(self) -> str:
        """Edge line style."""
        return "dashed" if self.kind in ("member", "route") else "solid"


@dataclass
class TreeGraph:
    """Complete graph representation of a decision tree."""

    root_id: str
    nodes: list[TreeNode] = field(default_factory=list)
    edges: list[TreeEdge] = field(default_factory=list)

    def get_node(self, node_id: str) -> TreeNode | None:
        """Get a node by ID."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_children(self, node_id: str) -> list[tuple[TreeEdge, TreeNode]]:
        """Get child edges and nodes for a given node."""
        result = []
        for edge in self.edges:
            if edge.source_id == node_id:
                node = self.get_node(edge.target_id)
                if node:
                    result.append((edge, node))
        return result

    def to_dot(
        self,
        highlight_nodes: set[str] | None = None,
        highlight_edges: set[tuple[str, str]] | None = None,
    ) -> str:
        """Generate Graphviz DOT format string.

        Args:
            highlight_nodes: Set of node IDs to highlight (e.g., trace path)
            highlight_edges: Set of (source_id, target_id) tuples to highlight

        Returns:
            DOT format string for Graphviz rendering
        """
        highlight_nodes = highlight_nodes or set()
        highlight_edges = highlight_edges or set()

        lines = [
            "digraph DecisionTree {",
            '    rankdir=TB;',
            '    node [shape=box, style="rounded,filled", fontname="Arial"];',
            '    edge [fontname="Arial", fontsize=10];',
            "",
        ]

        for node in self.nodes:
            is_highlighted = node.id in highlight_nodes
            label = _escape(node.label)
            if is_highlighted:
                label = f"→ {label}"
            shape = "ellipse" if node.node_type == "leaf" else "box"
            penwidth = 4 if is_highlighted else 2
            border_color = "#000000" if is_highlighted else "#495057"

            lines.append(
                f'    "{node.id}" ['
                f'label="{label}", '
                f'shape={shape}, '
                f'fillcolor="{node.color}", '
                f'color="{border_color}", '
                f'penwidth={penwidth}'
                f'];'
            )

        lines.append("")

        for edge in self.edges:
            is_highlighted = (edge.source_id, edge.target_id) in highlight_edges
            color = "#000000" if is_highlighted else edge.color
            penwidth = 3 if is_highlighted else 1
            style = "bold" if is_highlighted else edge.style

            lines.append(
                f'    "{edge.source_id}" -> "{edge.target_id}" ['
                f'label="{_escape(edge.label)}", '
                f'color="{color}", '
                f'fontcolor="{color}", '
                f'penwidth={penwidth}, '
                f'style={style}'
                f'];'
            )

        lines.append("}")
        return "\n".join(lines)

    def to_mermaid(self) -> str:
        """Generate Mermaid flowchart format string."""
        lines = ["flowchart TD"]

        for node in self.nodes:
            label = node.label.replace('"', "'")
            if node.node_type == "leaf":
                lines.append(f'    {node.id}(("{label}"))')
            elif node.node_type == "router":
                lines.append(f'    {node.id}{{"{label}"}}')
            else:
                lines.append(f'    {node.id}["{label}"]')

        for edge in self.edges:
            if edge.label:
                lines.append(f"    {edge.source_id} -->|{edge.label}| {edge.target_id}")
            else:
                lines.append(f"    {edge.source_id} -.-> {edge.target_id}")

        lines.append("")
        for node in self.nodes:
            lines.append(f"    style {node.id} fill:{node.color}")

        return "\n".join(lines)


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


# =============================================================================
# Tree Adapter
# =============================================================================


class TreeAdapter:
    """Converts DecisionNode trees to visualization graphs."""

    def convert(self, tree: DecisionNode) -> TreeGraph:
        """Convert a decision tree to a TreeGraph."""
        graph = TreeGraph(root_id=tree.node_id)
        self._build(tree, graph, depth=0)
        return graph

    def _build(self, node: DecisionNode, graph: TreeGraph, depth: int) -> None:
        """Recursively build tree nodes and edges."""
        graph.nodes.append(self._to_tree_node(node, depth))

        if isinstance(node, ConditionNode):
            for kind, child in (("true", node.children.true), ("false", node.children.false)):
                graph.edges.append(TreeEdge(
                    source_id=node.node_id,
                    target_id=child.node_id,
                    kind=kind,
                    label="Yes" if kind == "true" else "No",
                ))
                self._build(child, graph, depth + 1)

        elif isinstance(node, GroupNode):
            for child in node.children:
                graph.edges.append(TreeEdge(
                    source_id=node.node_id,
                    target_id=child.node_id,
                    kind="member",
                ))
                self._build(child, graph, depth + 1)

        elif isinstance(node, RouterNode):
            for branch in node.branches:
                graph.edges.append(TreeEdge(
                    source_id=node.node_id,
                    target_id=branch.target_node_id,
                    kind="route",
                    label=f"{branch.jurisdiction} ({branch.role.value})",
                ))

    def _to_tree_node(self, node: DecisionNode, depth: int) -> TreeNode:
        if isinstance(node, ConditionNode):
            label = node.label or format_condition(node.condition)
            return TreeNode(id=node.node_id, node_type=node.type, label=label, depth=depth)

        if isinstance(node, LeafNode):
            return TreeNode(
                id=node.node_id,
                node_type=node.type,
                label=node.decision,
                depth=depth,
                status=node.status.value,
                obligations=list(node.obligations),
            )

        if isinstance(node, GroupNode):
            label = node.label or node.node_id
        elif isinstance(node, RouterNode):
            label = node.label or f"{len(node.branches)} branches"
        elif isinstance(node, ConflictAnchorNode):
            label = node.label or f"Conflict {node.conflict_id}"
        else:
            raise TypeError(f"Unknown node type: {type(node).__name__}")

        return TreeNode(id=node.node_id, node_type=node.type, label=label, depth=depth)


# =============================================================================
# Utility Functions
# =============================================================================


def tree_to_graph(tree: DecisionNode) -> TreeGraph:
    """Convenience function to convert a tree to a graph."""
    return TreeAdapter().convert(tree)


def render_dot(
    graph: TreeGraph,
    highlight_nodes: set[str] | None = None,
    highlight_edges: set[tuple[str, str]] | None = None,
) -> str:
    """Render a tree graph as Graphviz DOT format."""
    return graph.to_dot(highlight_nodes=highlight_nodes, highlight_edges=highlight_edges)


def render_mermaid(graph: TreeGraph) -> str:
    """Render a tree graph as Mermaid flowchart format."""
    return graph.to_mermaid()


def extract_trace_path(result: EvaluationResult) -> tuple[set[str], set[tuple[str, str]]]:
    """Extract highlighted nodes and edges from an evaluation.

    Returns:
        Tuple of (highlight_nodes set, highlight_edges set)
    """
    ordered = [step.node_id for step in result.trace] + [result.leaf.node_id]
    highlight_edges = {(a, b) for a, b in zip(ordered, ordered[1:])}
    return set(ordered), highlight_edges
