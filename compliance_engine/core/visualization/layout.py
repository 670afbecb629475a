"""
Tree Layout - positions decision tree nodes on a 2-D canvas.

Condition nodes are laid out as a binary tree: the false subtree first, the
true subtree to its right, the parent centred above both. Every other node
type is a single fixed-size box. Vertical position depends only on depth.
Layout is independent of evaluation; an optional highlight set (usually the
evaluation path) marks nodes and edges for emphasis.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Literal

from compliance_engine.rules.schema import ConditionNode, DecisionNode, LeafNode


# =============================================================================
# Data Classes for Layout Representation
# =============================================================================


@dataclass(frozen=True)
class LayoutConfig:
    """Layout configuration for tree rendering."""

    node_width: float = 200
    node_height: float = 80
    horizontal_spacing: float = 40
    vertical_spacing: float = 60
    padding: float = 20

    @classmethod
    def from_settings(cls) -> LayoutConfig:
        """Build a config from application settings."""
        from compliance_engine.core.config import get_settings

        settings = get_settings()
        return cls(
            node_width=settings.layout_node_width,
            node_height=settings.layout_node_height,
            horizontal_spacing=settings.layout_horizontal_spacing,
            vertical_spacing=settings.layout_vertical_spacing,
            padding=settings.layout_padding,
        )


DEFAULT_LAYOUT_CONFIG = LayoutConfig()


@dataclass
class LayoutNode:
    """A positioned node in the layout."""

    id: str
    x: float
    y: float
    width: float
    height: float
    node: DecisionNode
    depth: int
    is_leaf: bool
    is_on_path: bool = False

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def bottom_y(self) -> float:
        return self.y + self.height

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.node.type,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "depth": self.depth,
            "isLeaf": self.is_leaf,
            "isOnPath": self.is_on_path,
        }


@dataclass
class LayoutEdge:
    """An edge connecting a condition node to one of its children."""

    id: str
    from_id: str
    to_id: str
    from_x: float
    from_y: float
    to_x: float
    to_y: float
    label: Literal["true", "false"]
    is_on_path: bool = False

    @property
    def path(self) -> str:
        """SVG path data for this edge."""
        return generate_edge_path(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "fromId": self.from_id,
            "toId": self.to_id,
            "fromX": self.from_x,
            "fromY": self.from_y,
            "toX": self.to_x,
            "toY": self.to_y,
            "label": self.label,
            "isOnPath": self.is_on_path,
            "path": self.path,
        }


@dataclass
class TreeLayout:
    """Complete layout result."""

    nodes: list[LayoutNode] = field(default_factory=list)
    edges: list[LayoutEdge] = field(default_factory=list)
    width: float = 0
    height: float = 0

    def get_node(self, node_id: str) -> LayoutNode | None:
        """Get a layout node by ID."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "width": self.width,
            "height": self.height,
        }


# =============================================================================
# Layout Algorithm
# =============================================================================


def calculate_layout(
    tree: DecisionNode,
    config: LayoutConfig = DEFAULT_LAYOUT_CONFIG,
    highlighted_ids: Iterable[str] | None = None,
) -> TreeLayout:
    """Calculate a tree layout.

    Args:
        tree: Root of the decision tree
        config: Box sizes, spacing and canvas padding
        highlighted_ids: Node ids to mark as on-path (e.g. an evaluation path)

    Returns:
        TreeLayout with nodes in post-order (children before parents)
    """
    highlighted = set(highlighted_ids or ())
    layout = TreeLayout()

    def place(node: DecisionNode, depth: int, x: float) -> LayoutNode:
        placed = LayoutNode(
            id=node.node_id,
            x=x + config.padding,
            y=depth * (config.node_height + config.vertical_spacing) + config.padding,
            width=config.node_width,
            height=config.node_height,
            node=node,
            depth=depth,
            is_leaf=isinstance(node, LeafNode),
            is_on_path=node.node_id in highlighted,
        )
        layout.nodes.append(placed)
        return placed

    def connect(parent: LayoutNode, child: LayoutNode, label: Literal["true", "false"]) -> None:
        layout.edges.append(LayoutEdge(
            id=f"{parent.id}-{label}",
            from_id=parent.id,
            to_id=child.id,
            from_x=parent.center_x,
            from_y=parent.bottom_y,
            to_x=child.center_x,
            to_y=child.y,
            label=label,
            is_on_path=parent.is_on_path and child.is_on_path,
        ))

    def layout_node(node: DecisionNode, depth: int, left: float) -> tuple[LayoutNode, float]:
        """Lay out a subtree; returns its root and the horizontal extent used."""
        if not isinstance(node, ConditionNode):
            # Leaves and group/router/anchor boxes are opaque
            return place(node, depth, left), config.node_width + config.horizontal_spacing

        false_child, false_width = layout_node(node.children.false, depth + 1, left)
        true_child, true_width = layout_node(node.children.true, depth + 1, left + false_width)

        total_width = false_width + true_width
        x = left + total_width / 2 - config.node_width / 2
        parent = place(node, depth, x)

        connect(parent, false_child, "false")
        connect(parent, true_child, "true")

        return parent, total_width

    layout_node(tree, 0, 0)

    layout.width = max(n.x + n.width for n in layout.nodes) + config.padding
    layout.height = max(n.y + n.height for n in layout.nodes) + config.padding
    return layout


def generate_edge_path(edge: LayoutEdge) -> str:
    """Generate an SVG cubic Bezier path for a curved edge.

    Both control points sit at the vertical midpoint between the endpoints.
    """
    mid_y = (edge.from_y + edge.to_y) / 2
    return (
        f"M {edge.from_x} {edge.from_y} "
        f"C {edge.from_x} {mid_y}, {edge.to_x} {mid_y}, {edge.to_x} {edge.to_y}"
    )


def get_path_from_trace(trace: Iterable[Any], leaf: LeafNode | None = None) -> set[str]:
    """Get node ids on the evaluation path from a trace.

    Args:
        trace: TraceNodes (anything with a ``node_id``)
        leaf: Optional reached leaf, added to the path
    """
    path = {step.node_id for step in trace}
    if leaf is not None:
        path.add(leaf.node_id)
    return path
