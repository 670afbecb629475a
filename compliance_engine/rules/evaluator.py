"""Decision tree evaluator with trace generation.

Walks a condition/leaf tree to exactly one leaf, recording every evaluated
condition. Results may be memoized per caller-supplied key. Partial
evaluation explores both branches of any condition whose fact is missing.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from .cache import EvaluationCache, get_evaluation_cache
from .conditions import PRESENCE_OPERATORS, apply_operator, format_condition
from .facts import MISSING, get_in
from .schema import (
    ConditionNode,
    ConflictAnchorNode,
    DecisionNode,
    GroupNode,
    LeafNode,
    RouterNode,
)
from .trace import (
    EvaluationDiagnostic,
    EvaluationResult,
    NodeCounts,
    PartialEvaluationResult,
    TraceNode,
)

logger = logging.getLogger(__name__)


class TreeStructureError(ValueError):
    """Raised when evaluation reaches a node that is not boolean-evaluable."""

    def __init__(self, node: DecisionNode):
        self.node_id = node.node_id
        self.node_type = node.type
        super().__init__(
            f"Node '{node.node_id}' of type '{node.type}' cannot be evaluated; "
            "only condition and leaf nodes take part in evaluation"
        )


def _trace_node(node: ConditionNode, fact_value: Any, result: bool, depth: int) -> TraceNode:
    """Create a trace node from a condition evaluation.

    Values are copied so later changes to the facts or the tree never show up
    in a result that was already returned (or cached).
    """
    condition = node.condition
    present = fact_value is not MISSING
    return TraceNode(
        node_id=node.node_id,
        condition=format_condition(condition),
        fact_path=condition.fact,
        fact_value=copy.deepcopy(fact_value) if present else None,
        fact_present=present,
        expected_value=copy.deepcopy(condition.value),
        op=condition.op,
        result=result,
        depth=depth,
        source_ref=node.source_ref,
    )


class TreeEvaluator:
    """Evaluates decision trees against facts with full tracing."""

    def __init__(self, cache: EvaluationCache | None = None):
        self.cache = cache if cache is not None else get_evaluation_cache()

    def evaluate(
        self,
        tree: DecisionNode,
        facts: dict[str, Any],
        cache_key: str | None = None,
    ) -> EvaluationResult:
        """Evaluate a tree, producing the reached leaf and the full trace.

        Args:
            tree: Root of the decision tree
            facts: The facts to evaluate against
            cache_key: Optional identity (e.g. tree id) enabling memoization

        Returns:
            EvaluationResult with leaf, trace and diagnostics

        Raises:
            TreeStructureError: If a group, router or conflict anchor is reached
        """
        if cache_key is not None:
            cached = self.cache.get(cache_key, facts)
            if cached is not None:
                return cached

        result = self._evaluate(tree, facts)
        logger.debug(
            "Evaluated %s -> %s in %d step(s)",
            cache_key or tree.node_id, result.leaf.node_id, len(result.trace),
        )

        if cache_key is not None:
            self.cache.put(cache_key, facts, result)

        return result

    def _evaluate(self, tree: DecisionNode, facts: dict[str, Any]) -> EvaluationResult:
        trace: list[TraceNode] = []
        diagnostics: list[EvaluationDiagnostic] = []
        node = tree
        depth = 0

        while not isinstance(node, LeafNode):
            if not isinstance(node, ConditionNode):
                raise TreeStructureError(node)

            fact_value = get_in(facts, node.condition.fact)
            result = apply_operator(node.condition, fact_value, diagnostics, node.node_id)
            trace.append(_trace_node(node, fact_value, result, depth))

            node = node.children.true if result else node.children.false
            depth += 1

        return EvaluationResult(
            leaf=node,
            trace=tuple(trace),
            diagnostics=tuple(diagnostics),
        )

    def evaluate_partial(
        self,
        tree: DecisionNode,
        facts: dict[str, Any],
    ) -> PartialEvaluationResult:
        """Evaluate with possibly incomplete facts.

        A condition whose fact is missing (and whose operator is not a presence
        check) does not pick a branch: both are explored, and the fact path is
        recorded once in ``missing_facts``.

        Returns:
            Reachable leaves, missing fact paths, and the determinate trace prefix
        """
        leaves: list[LeafNode] = []
        missing: dict[str, None] = {}
        trace: list[TraceNode] = []
        diagnostics: list[EvaluationDiagnostic] = []
        branched = False

        # Depth-first, true branch before false; each frame carries the
        # missing facts met on its own path
        stack: list[tuple[DecisionNode, int, tuple[str, ...]]] = [(tree, 0, ())]
        while stack:
            node, depth, path_missing = stack.pop()

            if isinstance(node, LeafNode):
                leaves.append(node)
                missing.update(dict.fromkeys(path_missing))
                continue

            if not isinstance(node, ConditionNode):
                raise TreeStructureError(node)

            condition = node.condition
            fact_value = get_in(facts, condition.fact)

            if fact_value is MISSING and condition.op not in PRESENCE_OPERATORS:
                if condition.fact not in path_missing:
                    path_missing = path_missing + (condition.fact,)
                branched = True
                stack.append((node.children.false, depth + 1, path_missing))
                stack.append((node.children.true, depth + 1, path_missing))
                continue

            result = apply_operator(condition, fact_value, diagnostics, node.node_id)
            if not branched:
                trace.append(_trace_node(node, fact_value, result, depth))
            next_node = node.children.true if result else node.children.false
            stack.append((next_node, depth + 1, path_missing))

        return PartialEvaluationResult(
            reachable_leaves=tuple(leaves),
            missing_facts=tuple(missing),
            partial_trace=tuple(trace),
            diagnostics=tuple(diagnostics),
        )


# =============================================================================
# Module-level Conveniences
# =============================================================================


def evaluate_tree(
    tree: DecisionNode,
    facts: dict[str, Any],
    tree_id: str | None = None,
    cache: EvaluationCache | None = None,
) -> EvaluationResult:
    """Evaluate a tree; passing ``tree_id`` opts into caching."""
    return TreeEvaluator(cache).evaluate(tree, facts, cache_key=tree_id)


def evaluate_partial(tree: DecisionNode, facts: dict[str, Any]) -> PartialEvaluationResult:
    """Partial evaluation; see :meth:`TreeEvaluator.evaluate_partial`."""
    return TreeEvaluator().evaluate_partial(tree, facts)


# =============================================================================
# Read-only Traversals
# =============================================================================


def _children(node: DecisionNode) -> list[DecisionNode]:
    """Structural children of a node, true branch before false."""
    if isinstance(node, ConditionNode):
        return [node.children.true, node.children.false]
    if isinstance(node, GroupNode):
        return list(node.children)
    if isinstance(node, (LeafNode, RouterNode, ConflictAnchorNode)):
        return []
    raise TypeError(f"Unknown node type: {type(node).__name__}")


def walk_nodes(node: DecisionNode):
    """Pre-order walk over every node reachable by structure."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(_children(current)))


def collect_fact_paths(tree: DecisionNode) -> list[str]:
    """Collect all fact paths referenced in a decision tree.

    Useful for understanding what facts a rule requires.
    """
    paths: dict[str, None] = {}
    for node in walk_nodes(tree):
        if isinstance(node, ConditionNode):
            paths.setdefault(node.condition.fact)
    return list(paths)


def count_nodes(tree: DecisionNode) -> NodeCounts:
    """Count the nodes of each variant in a decision tree."""
    counts = {"conditions": 0, "leaves": 0, "groups": 0, "routers": 0, "anchors": 0}
    for node in walk_nodes(tree):
        if isinstance(node, ConditionNode):
            counts["conditions"] += 1
        elif isinstance(node, LeafNode):
            counts["leaves"] += 1
        elif isinstance(node, GroupNode):
            counts["groups"] += 1
        elif isinstance(node, RouterNode):
            counts["routers"] += 1
        elif isinstance(node, ConflictAnchorNode):
            counts["anchors"] += 1
    return NodeCounts(**counts)


def collect_node_ids(tree: DecisionNode) -> list[str]:
    """All node ids in pre-order."""
    return [node.node_id for node in walk_nodes(tree)]


def find_node(tree: DecisionNode, node_id: str) -> DecisionNode | None:
    """Find the first node with the given id."""
    for node in walk_nodes(tree):
        if node.node_id == node_id:
            return node
    return None


def search_nodes(tree: DecisionNode, query: str) -> list[str]:
    """Ids of nodes whose id, label, fact path or decision contains ``query``.

    Matching is case-insensitive.
    """
    needle = query.lower()
    matches: list[str] = []

    for node in walk_nodes(tree):
        haystack = [node.node_id, node.label or ""]
        if isinstance(node, ConditionNode):
            haystack.append(node.condition.fact)
        elif isinstance(node, LeafNode):
            haystack.append(node.decision)

        if any(needle in text.lower() for text in haystack) and node.node_id not in matches:
            matches.append(node.node_id)

    return matches
