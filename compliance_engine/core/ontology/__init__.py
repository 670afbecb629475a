"""Core ontology types for compliance evaluation."""

from .jurisdiction import (
    ComplianceStatus,
    ConflictSeverity,
    ConflictType,
    JurisdictionRole,
    ResolutionStrategy,
    RuleConflict,
)

__all__ = [
    "ComplianceStatus",
    "ConflictSeverity",
    "ConflictType",
    "JurisdictionRole",
    "ResolutionStrategy",
    "RuleConflict",
]
