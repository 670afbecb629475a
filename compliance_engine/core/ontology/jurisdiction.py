"""
Jurisdiction-level vocabulary shared by rules and the conflict detector.

Compliance statuses, jurisdiction roles, and the cross-jurisdiction conflict
model produced when evaluated rules are compared against each other.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ComplianceStatus(str, Enum):
    """Outcome category carried by every leaf of a decision tree."""
    COMPLIANT = "compliant"
    REQUIRES_ACTION = "requires_action"
    BLOCKED = "blocked"
    NO_APPLICABLE_RULES = "no_applicable_rules"


class JurisdictionRole(str, Enum):
    """Role of a jurisdiction in cross-border scenario."""
    ISSUER_HOME = "issuer_home"
    TARGET = "target"
    PASSPORTING = "passporting"


class ConflictType(str, Enum):
    """Types of cross-jurisdiction conflicts."""
    CLASSIFICATION = "classification_divergence"
    OBLIGATION = "obligation_conflict"
    TIMELINE = "timeline_conflict"
    DECISION = "decision_conflict"


class ConflictSeverity(str, Enum):
    """Severity of cross-jurisdiction conflicts."""
    BLOCKING = "blocking"
    WARNING = "warning"
    INFO = "info"


class ResolutionStrategy(str, Enum):
    """How a detected conflict is expected to be resolved."""
    CUMULATIVE = "cumulative"
    STRICTER = "stricter"
    HOME_JURISDICTION = "home_jurisdiction"
    SATISFY_BOTH = "satisfy_both"
    EARLIEST = "earliest"


class RuleConflict(BaseModel):
    """Cross-jurisdiction rule conflict.

    Derived from evaluated outcomes; never stored on the tree itself.
    """
    id: str
    type: ConflictType
    severity: ConflictSeverity
    jurisdictions: list[str] = Field(default_factory=list)
    description: str
    resolution_strategy: ResolutionStrategy
    resolution_note: str | None = None
