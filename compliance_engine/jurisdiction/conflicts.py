"""
Conflict detection for cross-jurisdiction compliance.

Compares the evaluated outcome of each jurisdiction's rule against every other
jurisdiction and classifies the inconsistencies it finds.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import NamedTuple

from compliance_engine.core.ontology.jurisdiction import (
    ComplianceStatus,
    ConflictSeverity,
    ConflictType,
    ResolutionStrategy,
    RuleConflict,
)
from compliance_engine.rules.schema import RuleDefinition
from compliance_engine.rules.trace import EvaluationResult

logger = logging.getLogger(__name__)


class EvaluatedRule(NamedTuple):
    """A rule definition paired with its evaluation result."""

    definition: RuleDefinition
    result: EvaluationResult

    @property
    def jurisdiction(self) -> str:
        return self.definition.metadata.jurisdiction


@dataclass(frozen=True)
class ObligationConflictPattern:
    """Two obligation phrasings that cannot both be satisfied as written."""

    pattern_a: re.Pattern
    pattern_b: re.Pattern
    severity: ConflictSeverity
    description: str
    type: ConflictType = ConflictType.OBLIGATION

    def matches(self, text_a: str, text_b: str) -> bool:
        """True if the texts match opposite sides of the pair, either way round."""
        return bool(
            (self.pattern_a.search(text_a) and self.pattern_b.search(text_b))
            or (self.pattern_b.search(text_a) and self.pattern_a.search(text_b))
        )


# Known mutually exclusive obligation phrasings
OBLIGATION_CONFLICT_PATTERNS: tuple[ObligationConflictPattern, ...] = (
    ObligationConflictPattern(
        pattern_a=re.compile(r"retail\s+prohibition", re.IGNORECASE),
        pattern_b=re.compile(r"retail\s+allowed", re.IGNORECASE),
        severity=ConflictSeverity.BLOCKING,
        description="Retail investor eligibility conflict",
    ),
    ObligationConflictPattern(
        pattern_a=re.compile(r"must\s+register", re.IGNORECASE),
        pattern_b=re.compile(r"registration\s+exempt", re.IGNORECASE),
        severity=ConflictSeverity.WARNING,
        description="Registration requirement conflict",
    ),
    ObligationConflictPattern(
        pattern_a=re.compile(r"cooling[\s-]+off", re.IGNORECASE),
        pattern_b=re.compile(r"immediate\s+execution", re.IGNORECASE),
        severity=ConflictSeverity.WARNING,
        description="Cooling-off period conflicts with immediate execution",
    ),
    ObligationConflictPattern(
        pattern_a=re.compile(r"(publish|submit)\s+(a\s+)?(crypto-asset\s+)?white\s*paper", re.IGNORECASE),
        pattern_b=re.compile(r"no\s+disclosure", re.IGNORECASE),
        severity=ConflictSeverity.WARNING,
        description="Whitepaper requirement conflicts with minimal disclosure regime",
    ),
)

CLASSIFICATION_PATTERN = re.compile(r"\b(classified as|is an?|treated as)\b", re.IGNORECASE)
TIMELINE_PATTERN = re.compile(r"(\d+)\s*days?\b", re.IGNORECASE)

# Minimum difference in days before two timelines are reported
TIMELINE_THRESHOLD_DAYS = 15


def _ordered(evaluated_rules: Iterable[EvaluatedRule | tuple]) -> list[EvaluatedRule]:
    """Normalize pairs and order them by (jurisdiction, rule id).

    The ordering makes every detector independent of input order.
    """
    rules = [EvaluatedRule(*pair) for pair in evaluated_rules]
    return sorted(rules, key=lambda r: (r.jurisdiction, r.definition.id))


def _pairs(jurisdictions: Sequence[str]) -> Iterable[tuple[str, str]]:
    ordered = sorted(jurisdictions)
    for i, j1 in enumerate(ordered):
        for j2 in ordered[i + 1:]:
            yield j1, j2


# =============================================================================
# Sub-detectors
# =============================================================================


def detect_classification_conflicts(evaluated_rules: Sequence[EvaluatedRule]) -> list[RuleConflict]:
    """Detect classification divergence between jurisdictions.

    E.g., EU classifies as "e-money token" while UK treats it as a
    "qualifying stablecoin".
    """
    classifications: dict[str, str] = {}
    for rule in evaluated_rules:
        decision = rule.result.leaf.decision
        if CLASSIFICATION_PATTERN.search(decision):
            classifications[rule.jurisdiction] = decision

    conflicts = []
    for j1, j2 in _pairs(list(classifications)):
        c1 = classifications[j1]
        c2 = classifications[j2]
        if c1 != c2:
            conflicts.append(RuleConflict(
                id=f"classification-{j1}-{j2}",
                type=ConflictType.CLASSIFICATION,
                severity=ConflictSeverity.WARNING,
                jurisdictions=[j1, j2],
                description=f'Classification differs: {j1} says "{c1}" while {j2} says "{c2}"',
                resolution_strategy=ResolutionStrategy.SATISFY_BOTH,
                resolution_note="Apply the more restrictive classification",
            ))

    return conflicts


def detect_timeline_conflicts(evaluated_rules: Sequence[EvaluatedRule]) -> list[RuleConflict]:
    """Detect timeline conflicts between jurisdictions.

    E.g., EU requires 20 days notice while UK requires 60 days.
    """
    timelines: dict[str, int] = {}
    for rule in evaluated_rules:
        for obligation in rule.result.leaf.obligations:
            for match in TIMELINE_PATTERN.finditer(obligation):
                days = int(match.group(1))
                if days > timelines.get(rule.jurisdiction, -1):
                    timelines[rule.jurisdiction] = days

    conflicts = []
    for j1, j2 in _pairs(list(timelines)):
        t1 = timelines[j1]
        t2 = timelines[j2]
        if abs(t1 - t2) >= TIMELINE_THRESHOLD_DAYS:
            conflicts.append(RuleConflict(
                id=f"timeline-{j1}-{j2}",
                type=ConflictType.TIMELINE,
                severity=ConflictSeverity.WARNING,
                jurisdictions=[j1, j2],
                description=f"Timeline difference: {j1} requires {t1} days, {j2} requires {t2} days",
                resolution_strategy=ResolutionStrategy.EARLIEST,
                resolution_note="Use the earlier deadline to satisfy both",
            ))

    return conflicts


def detect_obligation_conflicts(
    evaluated_rules: Sequence[EvaluatedRule],
    patterns: Sequence[ObligationConflictPattern] = OBLIGATION_CONFLICT_PATTERNS,
) -> list[RuleConflict]:
    """Detect mutually exclusive obligations between jurisdictions."""
    obligations: dict[str, list[str]] = {}
    for rule in evaluated_rules:
        obligations.setdefault(rule.jurisdiction, []).extend(rule.result.leaf.obligations)

    conflicts = []
    for j1, j2 in _pairs(list(obligations)):
        text_1 = " ".join(obligations[j1])
        text_2 = " ".join(obligations[j2])

        for pattern in patterns:
            if not pattern.matches(text_1, text_2):
                continue
            blocking = pattern.severity == ConflictSeverity.BLOCKING
            conflicts.append(RuleConflict(
                id=f"obligation-{j1}-{j2}-{pattern.type.value}",
                type=pattern.type,
                severity=pattern.severity,
                jurisdictions=[j1, j2],
                description=f"{pattern.description} between {j1} and {j2}",
                resolution_strategy=(
                    ResolutionStrategy.SATISFY_BOTH if blocking else ResolutionStrategy.STRICTER
                ),
            ))

    return conflicts


def detect_decision_conflicts(evaluated_rules: Sequence[EvaluatedRule]) -> list[RuleConflict]:
    """Detect one jurisdiction permitting what another blocks."""
    statuses: dict[str, set[ComplianceStatus]] = {}
    for rule in evaluated_rules:
        statuses.setdefault(rule.jurisdiction, set()).add(rule.result.leaf.status)

    conflicts = []
    for j1, j2 in _pairs(list(statuses)):
        for permitter, blocker in ((j1, j2), (j2, j1)):
            if (
                ComplianceStatus.COMPLIANT in statuses[permitter]
                and ComplianceStatus.BLOCKED in statuses[blocker]
            ):
                conflicts.append(RuleConflict(
                    id=f"decision-{j1}-{j2}",
                    type=ConflictType.DECISION,
                    severity=ConflictSeverity.WARNING,
                    jurisdictions=[j1, j2],
                    description=f"{permitter} permits activity while {blocker} blocks it",
                    resolution_strategy=ResolutionStrategy.STRICTER,
                    resolution_note=f"Must satisfy {blocker} requirements to proceed",
                ))

    return conflicts


# =============================================================================
# Public API
# =============================================================================


def detect_conflicts(
    evaluated_rules: Iterable[EvaluatedRule | tuple[RuleDefinition, EvaluationResult]],
    include_decisions: bool = False,
) -> list[RuleConflict]:
    """
    Detect conflicts between evaluated rules.

    Checks for:
    - Classification divergence: Same instrument, different regulatory treatment
    - Timeline conflicts: Notice periods at least 15 days apart
    - Obligation conflicts: Mutually exclusive requirements
    - Decision conflicts (opt-in): Permitted in one jurisdiction, blocked in another

    Args:
        evaluated_rules: (definition, result) pairs, one per evaluated rule
        include_decisions: Also report compliant vs blocked outcomes

    Returns:
        Conflicts deduplicated by id, first occurrence kept
    """
    rules = _ordered(evaluated_rules)
    if len(rules) < 2:
        return []

    conflicts = [
        *detect_classification_conflicts(rules),
        *detect_timeline_conflicts(rules),
        *detect_obligation_conflicts(rules),
    ]
    if include_decisions:
        conflicts.extend(detect_decision_conflicts(rules))

    seen: set[str] = set()
    unique = []
    for conflict in conflicts:
        if conflict.id in seen:
            continue
        seen.add(conflict.id)
        unique.append(conflict)

    logger.debug(
        "Detected %d conflict(s) across %d evaluated rule(s)", len(unique), len(rules)
    )
    return unique


def merge_obligations(
    evaluated_rules: Iterable[EvaluatedRule | tuple[RuleDefinition, EvaluationResult]],
    strategy: ResolutionStrategy | str = ResolutionStrategy.CUMULATIVE,
) -> list[str]:
    """Merge obligations from multiple jurisdictions.

    ``stricter`` currently returns the same union as ``cumulative``; ranking
    obligations by strictness needs obligation semantics the rules do not carry.

    Raises:
        ValueError: For strategies other than cumulative or stricter
    """
    strategy = ResolutionStrategy(strategy)
    if strategy not in (ResolutionStrategy.CUMULATIVE, ResolutionStrategy.STRICTER):
        raise ValueError(f"Unsupported merge strategy: {strategy.value}")

    merged: dict[str, None] = {}
    for pair in evaluated_rules:
        rule = EvaluatedRule(*pair)
        for obligation in rule.result.leaf.obligations:
            merged.setdefault(obligation)
    return list(merged)
