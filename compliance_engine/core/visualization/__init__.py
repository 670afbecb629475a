"""Visualization module for decision trees: canvas layout and graph rendering."""

from .layout import (
    LayoutConfig,
    LayoutNode,
    LayoutEdge,
    TreeLayout,
    DEFAULT_LAYOUT_CONFIG,
    calculate_layout,
    generate_edge_path,
    get_path_from_trace,
)

from .tree_adapter import (
    TreeNode,
    TreeEdge,
    TreeGraph,
    TreeAdapter,
    tree_to_graph,
    render_dot,
    render_mermaid,
    extract_trace_path,
)

__all__ = [
    # Layout
    "LayoutConfig",
    "LayoutNode",
    "LayoutEdge",
    "TreeLayout",
    "DEFAULT_LAYOUT_CONFIG",
    "calculate_layout",
    "generate_edge_path",
    "get_path_from_trace",
    # Graph adapter
    "TreeNode",
    "TreeEdge",
    "TreeGraph",
    "TreeAdapter",
    "tree_to_graph",
    "render_dot",
    "render_mermaid",
    "extract_trace_path",
]
