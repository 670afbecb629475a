"""Pydantic models for the decision-tree rule format.

Rules are JSON/YAML documents using camelCase keys (``nodeId``, ``sourceRef``,
``entryNodeId``). Every model accepts both the camelCase alias and the
snake_case field name, and dumps camelCase with ``by_alias=True``.

A ``DecisionNode`` is a closed tagged union discriminated on ``type``:

- ``condition``: a predicate with ``children.true`` / ``children.false``
- ``leaf``: a terminal compliance decision
- ``group``: a collapsible sub-module wrapping child nodes
- ``router``: dispatch to jurisdiction x role branches (navigation only)
- ``conflict_anchor``: marker correlating the same conflict across two trees
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from compliance_engine.core.ontology.jurisdiction import (
    ComplianceStatus,
    JurisdictionRole,
)


class _CamelModel(BaseModel):
    """Base model accepting camelCase or snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Source Reference
# =============================================================================

class SourceRef(BaseModel):
    """Source reference linking a node to its legal text.

    Opaque to the engine; carried through to traces for citation display.
    """
    document_id: str = Field(..., description="Document identifier (e.g., 'mica_2023')")
    article: str | None = Field(None, description="Article number (e.g., '36(1)')")
    section: str | None = Field(None, description="Section identifier")
    paragraphs: list[str] = Field(default_factory=list, description="Paragraph references")
    pages: list[int] = Field(default_factory=list, description="Page numbers")
    url: str | None = Field(None, description="URL to source document")


# =============================================================================
# Conditions
# =============================================================================

class Condition(_CamelModel):
    """A single predicate over one fact.

    ``op`` is kept as a plain string so rules with an unknown operator still
    load; such conditions evaluate to False.
    """
    fact: str = Field(..., description="Dotted fact path (e.g., 'issuer.jurisdiction')")
    op: str = Field(..., description="Operator name (eq, gte, in, matches, nil?, ...)")
    value: Any = Field(None, description="Expected value")


class NodeScope(_CamelModel):
    """Jurisdictions and roles a node applies to."""
    jurisdictions: list[str] = Field(default_factory=list)
    roles: list[str] = Field(default_factory=list)


# =============================================================================
# Decision Nodes
# =============================================================================

class NodeBase(_CamelModel):
    """Fields shared by every node variant."""
    node_id: str = Field(..., description="Identifier, unique within one tree")
    label: str | None = None
    source_ref: SourceRef | None = None
    tags: list[str] = Field(default_factory=list)
    scope: NodeScope | None = None


class BranchChildren(_CamelModel):
    """The two subtrees of a condition node."""
    true: DecisionNode
    false: DecisionNode


class ConditionNode(NodeBase):
    """Binary branch on a condition."""
    type: Literal["condition"] = "condition"
    condition: Condition
    children: BranchChildren
    annotation: str | None = None


class LeafNode(NodeBase):
    """Terminal compliance decision."""
    type: Literal["leaf"] = "leaf"
    decision: str
    status: ComplianceStatus
    obligations: list[str] = Field(default_factory=list)
    annotation: str | None = None


class GroupNode(NodeBase):
    """Named sub-module rendered as one collapsible unit."""
    type: Literal["group"] = "group"
    children: list[DecisionNode] = Field(default_factory=list)
    entry_node_id: str
    exit_node_id: str | None = None


class RouterBranch(_CamelModel):
    """One jurisdiction x role branch of a router."""
    jurisdiction: str
    role: JurisdictionRole
    target_node_id: str


class RouterNode(NodeBase):
    """Parallel dispatch to jurisdiction-specific subtrees."""
    type: Literal["router"] = "router"
    branches: list[RouterBranch] = Field(default_factory=list)


class ConflictAnchorNode(NodeBase):
    """Marks one side of a conflict shared with another tree."""
    type: Literal["conflict_anchor"] = "conflict_anchor"
    conflict_id: str
    paired_anchor_id: str


DecisionNode = Annotated[
    Union[ConditionNode, LeafNode, GroupNode, RouterNode, ConflictAnchorNode],
    Field(discriminator="type"),
]

# Enable forward references
BranchChildren.model_rebuild()
ConditionNode.model_rebuild()
GroupNode.model_rebuild()


# =============================================================================
# Rule Definition
# =============================================================================

class RuleMetadata(_CamelModel):
    """Regulatory context of a rule; extra keys are preserved."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    jurisdiction: str
    framework: str
    effective_date: str | None = None
    expires_date: str | None = None
    tags: list[str] = Field(default_factory=list)


class RuleDefinition(_CamelModel):
    """A complete rule: metadata plus its decision tree."""
    id: str
    version: str = "1.0"
    name: str
    description: str | None = None
    metadata: RuleMetadata
    tree: DecisionNode


_node_adapter: TypeAdapter = TypeAdapter(DecisionNode)


def parse_node(data: Any) -> ConditionNode | LeafNode | GroupNode | RouterNode | ConflictAnchorNode:
    """Validate raw rule data (a dict) into a DecisionNode."""
    return _node_adapter.validate_python(data)
