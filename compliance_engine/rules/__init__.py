"""Rules domain - decision tree schema, evaluation, caching and loading."""

from .schema import (
    SourceRef,
    Condition,
    NodeScope,
    BranchChildren,
    ConditionNode,
    LeafNode,
    GroupNode,
    RouterBranch,
    RouterNode,
    ConflictAnchorNode,
    DecisionNode,
    RuleMetadata,
    RuleDefinition,
    parse_node,
)
from .facts import MISSING, get_in, is_absent
from .trace import (
    TraceNode,
    DiagnosticKind,
    EvaluationDiagnostic,
    EvaluationResult,
    PartialEvaluationResult,
    NodeCounts,
)
from .conditions import (
    ConditionOperator,
    KNOWN_OPERATORS,
    PRESENCE_OPERATORS,
    evaluate_condition,
    format_condition,
    strict_equals,
)
from .cache import (
    CacheStats,
    EvaluationCache,
    get_evaluation_cache,
    hash_facts,
    reset_evaluation_cache,
)
from .evaluator import (
    TreeEvaluator,
    TreeStructureError,
    evaluate_tree,
    evaluate_partial,
    collect_fact_paths,
    count_nodes,
    collect_node_ids,
    find_node,
    search_nodes,
    walk_nodes,
)
from .loader import RuleLoader, RuleLoadError

__all__ = [
    # Schema
    "SourceRef",
    "Condition",
    "NodeScope",
    "BranchChildren",
    "ConditionNode",
    "LeafNode",
    "GroupNode",
    "RouterBranch",
    "RouterNode",
    "ConflictAnchorNode",
    "DecisionNode",
    "RuleMetadata",
    "RuleDefinition",
    "parse_node",
    # Facts
    "MISSING",
    "get_in",
    "is_absent",
    # Trace
    "TraceNode",
    "DiagnosticKind",
    "EvaluationDiagnostic",
    "EvaluationResult",
    "PartialEvaluationResult",
    "NodeCounts",
    # Conditions
    "ConditionOperator",
    "KNOWN_OPERATORS",
    "PRESENCE_OPERATORS",
    "evaluate_condition",
    "format_condition",
    "strict_equals",
    # Cache
    "CacheStats",
    "EvaluationCache",
    "get_evaluation_cache",
    "hash_facts",
    "reset_evaluation_cache",
    # Evaluator
    "TreeEvaluator",
    "TreeStructureError",
    "evaluate_tree",
    "evaluate_partial",
    "collect_fact_paths",
    "count_nodes",
    "collect_node_ids",
    "find_node",
    "search_nodes",
    "walk_nodes",
    # Loader
    "RuleLoader",
    "RuleLoadError",
]
