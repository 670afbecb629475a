"""Jurisdiction domain - cross-jurisdiction conflict detection."""

from .conflicts import (
    EvaluatedRule,
    ObligationConflictPattern,
    OBLIGATION_CONFLICT_PATTERNS,
    TIMELINE_THRESHOLD_DAYS,
    detect_conflicts,
    detect_classification_conflicts,
    detect_timeline_conflicts,
    detect_obligation_conflicts,
    detect_decision_conflicts,
    merge_obligations,
)

__all__ = [
    "EvaluatedRule",
    "ObligationConflictPattern",
    "OBLIGATION_CONFLICT_PATTERNS",
    "TIMELINE_THRESHOLD_DAYS",
    "detect_conflicts",
    "detect_classification_conflicts",
    "detect_timeline_conflicts",
    "detect_obligation_conflicts",
    "detect_decision_conflicts",
    "merge_obligations",
]
