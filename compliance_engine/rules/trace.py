"""
Evaluation traces and results.

Provides the audit record of how a decision was reached:
- The ordered trace of evaluated conditions from root to leaf
- Diagnostics for rule-authoring problems that evaluated fail-closed
- Partial results when some facts are still unknown
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .schema import LeafNode, SourceRef


_FROZEN = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TraceNode(BaseModel):
    """One evaluated condition in the trace."""

    model_config = _FROZEN

    node_id: str
    """Identifier of the condition node."""

    condition: str
    """Human-readable rendering of the condition."""

    fact_path: str
    """The fact path that was queried."""

    fact_value: Any = None
    """The value observed (None when the fact was missing)."""

    fact_present: bool = True
    """False when the fact path resolved to nothing."""

    expected_value: Any = None
    """The value the condition compares against."""

    op: str
    """The operator used in the check."""

    result: bool
    """Whether the condition held."""

    depth: int
    """Depth of the node in the tree (root is 0)."""

    source_ref: SourceRef | None = None
    """Reference to source legal text."""


class DiagnosticKind(str, Enum):
    """Authoring problems that evaluate to False instead of raising."""
    UNKNOWN_OPERATOR = "unknown_operator"
    INVALID_PATTERN = "invalid_pattern"
    TYPE_MISMATCH = "type_mismatch"
    INVALID_OPERAND = "invalid_operand"


class EvaluationDiagnostic(BaseModel):
    """A non-fatal problem observed while evaluating a condition."""

    model_config = _FROZEN

    kind: DiagnosticKind
    node_id: str | None = None
    fact_path: str
    op: str
    message: str


class EvaluationResult(BaseModel):
    """The leaf reached for a set of facts and the trace that led there."""

    model_config = _FROZEN

    leaf: LeafNode
    trace: tuple[TraceNode, ...] = ()
    diagnostics: tuple[EvaluationDiagnostic, ...] = ()

    def path_node_ids(self) -> set[str]:
        """Node ids on the evaluation path, leaf included."""
        ids = {step.node_id for step in self.trace}
        ids.add(self.leaf.node_id)
        return ids


class PartialEvaluationResult(BaseModel):
    """Outcome of evaluating with incomplete facts.

    ``reachable_leaves`` is every leaf still possible given the known facts;
    ``missing_facts`` lists the fact paths that would narrow it down.
    """

    model_config = _FROZEN

    reachable_leaves: tuple[LeafNode, ...] = ()
    missing_facts: tuple[str, ...] = ()
    partial_trace: tuple[TraceNode, ...] = ()
    diagnostics: tuple[EvaluationDiagnostic, ...] = ()

    @property
    def is_determinate(self) -> bool:
        """True when the known facts already select a single leaf."""
        return len(self.reachable_leaves) == 1 and not self.missing_facts


class NodeCounts(BaseModel):
    """Node totals per variant for a tree."""

    model_config = _FROZEN

    conditions: int = 0
    leaves: int = 0
    groups: int = 0
    routers: int = 0
    anchors: int = 0

    @property
    def total(self) -> int:
        return self.conditions + self.leaves + self.groups + self.routers + self.anchors
