"""Pydantic models for API requests and responses."""

from typing import Any

from pydantic import BaseModel, Field

from compliance_engine.core.ontology import ResolutionStrategy, RuleConflict
from compliance_engine.rules import (
    CacheStats,
    DecisionNode,
    EvaluationResult,
    NodeCounts,
    PartialEvaluationResult,
    RuleDefinition,
)


# =============================================================================
# Evaluation Models
# =============================================================================


class EvaluateRequest(BaseModel):
    """Request to evaluate a stored rule or an inline tree."""

    rule_id: str | None = Field(None, description="Evaluate a loaded rule by id")
    tree: DecisionNode | None = Field(None, description="Inline decision tree")
    facts: dict[str, Any] = Field(default_factory=dict)
    use_cache: bool = Field(True, description="Memoize by rule id (ignored for inline trees)")


class EvaluateResponse(BaseModel):
    """Reached leaf with its trace."""

    rule_id: str | None = None
    result: EvaluationResult


class PartialEvaluateResponse(BaseModel):
    """Reachable leaves and the facts still needed to decide between them."""

    rule_id: str | None = None
    result: PartialEvaluationResult
    determinate: bool


# =============================================================================
# Rule Models
# =============================================================================


class RuleInfo(BaseModel):
    """Summary of a loaded rule."""

    rule_id: str
    name: str
    version: str
    jurisdiction: str
    framework: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)


class RulesListResponse(BaseModel):
    """List of rules."""

    rules: list[RuleInfo]
    total: int


class RuleDetailResponse(BaseModel):
    """A rule with derived structure information."""

    rule: RuleDefinition
    fact_paths: list[str]
    node_counts: NodeCounts
    node_total: int


class RuleGraphResponse(BaseModel):
    """A rule's tree rendered as Graphviz DOT or Mermaid source."""

    rule_id: str
    format: str
    source: str


# =============================================================================
# Layout Models
# =============================================================================


class LayoutRequest(BaseModel):
    """Request to lay out a tree, optionally highlighting an evaluation path."""

    rule_id: str | None = None
    tree: DecisionNode | None = None
    facts: dict[str, Any] | None = Field(None, description="Evaluate and highlight the path")


class LayoutResponse(BaseModel):
    """Positioned nodes and edges (camelCase geometry keys)."""

    nodes: list[dict[str, Any]]
    edges: list[dict[str, Any]]
    width: float
    height: float
    highlighted: list[str] = Field(default_factory=list)


# =============================================================================
# Conflict Models
# =============================================================================


class RuleEvaluationInput(BaseModel):
    """One rule to evaluate as part of a cross-jurisdiction comparison."""

    rule_id: str
    facts: dict[str, Any] = Field(default_factory=dict)


class ConflictsRequest(BaseModel):
    """Request to evaluate several rules and compare their outcomes."""

    evaluations: list[RuleEvaluationInput] = Field(..., min_length=1)
    strategy: ResolutionStrategy = ResolutionStrategy.CUMULATIVE
    include_decisions: bool = False


class RuleOutcome(BaseModel):
    """Outcome of one rule in a conflict check."""

    rule_id: str
    jurisdiction: str
    leaf_id: str
    decision: str
    status: str
    obligations: list[str] = Field(default_factory=list)


class ConflictsResponse(BaseModel):
    """Detected conflicts plus the merged obligation set."""

    outcomes: list[RuleOutcome]
    conflicts: list[RuleConflict]
    merged_obligations: list[str]
    strategy: ResolutionStrategy


# =============================================================================
# Cache Models
# =============================================================================


class CacheStatsResponse(BaseModel):
    """Evaluation cache statistics."""

    enabled: bool
    stats: CacheStats
